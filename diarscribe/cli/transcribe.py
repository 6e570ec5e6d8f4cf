from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from diarscribe.adapters.assemblyai_transcription import AssemblyAITranscriptionAdapter
from diarscribe.adapters.ffmpeg import SubprocessFfmpeg
from diarscribe.adapters.openai_transcription import OpenAITranscriptionAdapter, build_openai_client
from diarscribe.config import (
    BACKENDS,
    DEFAULT_BACKEND,
    DEFAULT_CHUNK_SECONDS,
    DEFAULT_ENV_FILE,
    DEFAULT_MAX_SINGLE_CALL_S,
    DEFAULT_MODEL,
    DEFAULT_POLL_INTERVAL_S,
    DEFAULT_POLL_TIMEOUT_S,
    DEFAULT_REQUEST_TIMEOUT_S,
    load_env_file,
    resolve_api_key,
)
from diarscribe.contracts.errors import ConfigError
from diarscribe.pipeline.transcribe_pipeline import PipelineConfig, PipelineResult, run as run_pipeline


type Argv = Sequence[str]

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid int value: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return parsed


def _nonnegative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid float value: {value}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return parsed


def _backoff_factor(value: str) -> float:
    parsed = _nonnegative_float(value)
    if parsed < 1.0:
        raise argparse.ArgumentTypeError("must be >= 1.0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="diarscribe",
        description="Transcribe a video or audio file into a speaker-labeled text file.",
    )
    parser.add_argument("input_path", nargs="?", type=Path, default=None, help="Video or audio file to transcribe.")
    parser.add_argument("--backend", choices=BACKENDS, default=DEFAULT_BACKEND, help="Transcription service.")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Diarization model (openai backend).")
    parser.add_argument(
        "--max-single-call-seconds",
        type=_positive_int,
        default=DEFAULT_MAX_SINGLE_CALL_S,
        help="Longest audio sent in one request; longer audio is split.",
    )
    parser.add_argument(
        "--chunk-seconds",
        type=_positive_int,
        default=DEFAULT_CHUNK_SECONDS,
        help="Chunk length used when audio is split.",
    )
    parser.add_argument("--env-file", type=Path, default=DEFAULT_ENV_FILE, help="Dotenv file holding API keys.")
    parser.add_argument("--output", type=Path, default=None, help="Output path (default: input with .txt).")
    parser.add_argument(
        "--poll-interval",
        type=_nonnegative_float,
        default=DEFAULT_POLL_INTERVAL_S,
        help="Seconds between job status polls (assemblyai backend).",
    )
    parser.add_argument(
        "--poll-backoff",
        type=_backoff_factor,
        default=1.0,
        help="Multiply the poll interval by this factor after each poll.",
    )
    parser.add_argument(
        "--poll-timeout",
        type=_nonnegative_float,
        default=DEFAULT_POLL_TIMEOUT_S,
        help="Give up on a job after this many seconds (0 waits forever).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def parse_args(argv: Argv | None = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


def build_pipeline_config(args: argparse.Namespace, *, backend: Any, ffmpeg: Any) -> PipelineConfig:
    return PipelineConfig(
        backend=backend,
        ffmpeg=ffmpeg,
        max_single_call_s=int(args.max_single_call_seconds),
        chunk_seconds=int(args.chunk_seconds),
        output_path=Path(args.output) if args.output is not None else None,
    )


def _build_backend(args: argparse.Namespace) -> Any:
    api_key = resolve_api_key(args.backend)
    if args.backend == "openai":
        client = build_openai_client(api_key, timeout_s=DEFAULT_REQUEST_TIMEOUT_S)
        return OpenAITranscriptionAdapter(client, model=args.model)
    if args.backend == "assemblyai":
        return AssemblyAITranscriptionAdapter(
            api_key,
            poll_interval_s=float(args.poll_interval),
            poll_backoff=float(args.poll_backoff),
            poll_timeout_s=float(args.poll_timeout) or None,
            request_timeout_s=DEFAULT_REQUEST_TIMEOUT_S,
        )
    raise ConfigError(f"unsupported backend: {args.backend}")


def _build_runtime_dependencies(args: argparse.Namespace) -> dict[str, Any]:
    load_env_file(args.env_file)
    return {
        "backend": _build_backend(args),
        "ffmpeg": SubprocessFfmpeg(),
    }


def run_from_args(args: argparse.Namespace) -> PipelineResult:
    deps = _build_runtime_dependencies(args)
    config = build_pipeline_config(args, **deps)
    return run_pipeline(Path(args.input_path), config)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)
    if not verbose:
        for noisy in ("httpx", "openai", "urllib3"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def _one_line(exc: BaseException) -> str:
    return " ".join(str(exc).split()) or type(exc).__name__


def main(argv: Argv | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.input_path is None:
        print(parser.format_usage().strip())
        return 1

    _configure_logging(bool(args.verbose))
    try:
        result = run_from_args(args)
    except Exception as exc:
        print(f"Error: {_one_line(exc)}")
        return 1

    print(f"Transcription saved to: {result.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
