from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from diarscribe.contracts.artifacts import TimedFragment, Transcript
from diarscribe.contracts.errors import ConversionError, PipelineError, RemoteError
from diarscribe.pipeline.transcribe_pipeline import PipelineConfig, run


class _FakeFfmpeg:
    def __init__(self, duration_s: float = 90.0, *, fail_convert: bool = False) -> None:
        self.duration_s = duration_s
        self.fail_convert = fail_convert
        self.audio_paths: list[Path] = []

    def probe_duration(self, input_audio: str | Path) -> float:
        return self.duration_s

    def extract_audio(self, input_path: str | Path, output_path: str | Path) -> None:
        if self.fail_convert:
            raise ConversionError("ffmpeg conversion failed (exit 1): moov atom not found")
        self.audio_paths.append(Path(output_path))
        Path(output_path).write_bytes(b"mp3")

    def extract_chunk(self, input_audio: str | Path, output_path: str | Path, offset_s: int, duration_s: float) -> None:
        Path(output_path).write_bytes(b"chunk")


class _FakeBackend:
    def __init__(self, results: list[Transcript | Exception]) -> None:
        self._results = list(results)
        self.calls = 0

    def transcribe(self, audio_path: Path) -> Transcript:
        self.calls += 1
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


_TRANSCRIPT = Transcript(
    text="Hi. Hello.",
    fragments=(
        TimedFragment(speaker="A", start=0.0, end=1.0, text="Hi."),
        TimedFragment(speaker="B", start=1.0, end=2.0, text="Hello."),
    ),
)


class TranscribePipelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.input_path = self.tmp_dir / "meeting.mp4"
        self.input_path.write_bytes(b"video")
        self.work_dir = self.tmp_dir / "work"
        self.work_dir.mkdir()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _config(self, ffmpeg: _FakeFfmpeg, backend: _FakeBackend) -> PipelineConfig:
        return PipelineConfig(
            backend=backend,
            ffmpeg=ffmpeg,
            max_single_call_s=1400,
            chunk_seconds=1200,
            work_dir=self.work_dir,
        )

    def test_run_writes_rendered_transcript_next_to_input(self) -> None:
        ffmpeg = _FakeFfmpeg()

        result = run(self.input_path, self._config(ffmpeg, _FakeBackend([_TRANSCRIPT])))

        expected_path = self.tmp_dir / "meeting.txt"
        self.assertEqual(result.output_path, expected_path)
        self.assertEqual(
            expected_path.read_text(encoding="utf-8"),
            "[00:00:00 - 00:00:01] A:\nHi.\n\n[00:00:01 - 00:00:02] B:\nHello.\n",
        )
        self.assertEqual(len(ffmpeg.audio_paths), 1)
        self.assertFalse(ffmpeg.audio_paths[0].exists())
        self.assertEqual(list(self.work_dir.iterdir()), [])

    def test_run_overwrites_existing_output(self) -> None:
        output_path = self.tmp_dir / "meeting.txt"
        output_path.write_text("stale", encoding="utf-8")

        run(self.input_path, self._config(_FakeFfmpeg(), _FakeBackend([Transcript(text="fresh")])))

        self.assertEqual(output_path.read_text(encoding="utf-8"), "fresh\n")

    def test_remote_failure_aborts_without_writing_output(self) -> None:
        error = RemoteError("API request failed with status 429: rate limited", status_code=429, body="rate limited")
        backend = _FakeBackend([_TRANSCRIPT, error])

        with self.assertRaises(PipelineError) as ctx:
            run(self.input_path, self._config(_FakeFfmpeg(duration_s=2000.0), backend))

        message = str(ctx.exception)
        self.assertIn("transcribe", message)
        self.assertIn("429", message)
        self.assertIn("rate limited", message)
        self.assertFalse((self.tmp_dir / "meeting.txt").exists())
        self.assertEqual(list(self.work_dir.iterdir()), [])

    def test_conversion_failure_is_reported_with_stderr(self) -> None:
        backend = _FakeBackend([])

        with self.assertRaises(PipelineError) as ctx:
            run(self.input_path, self._config(_FakeFfmpeg(fail_convert=True), backend))

        self.assertIn("convert", str(ctx.exception))
        self.assertIn("moov atom not found", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, ConversionError)
        self.assertEqual(backend.calls, 0)
        self.assertFalse((self.tmp_dir / "meeting.txt").exists())

    def test_missing_input_fails_validation(self) -> None:
        with self.assertRaises(PipelineError) as ctx:
            run(self.tmp_dir / "absent.mp4", self._config(_FakeFfmpeg(), _FakeBackend([])))

        self.assertIn("does not exist", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
