from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, Protocol

import requests

from diarscribe.adapters.transcription import TranscriptionBackend
from diarscribe.contracts.artifacts import (
    JOB_STATUSES,
    TimedFragment,
    Transcript,
    TranscriptionJob,
    normalize_speaker,
)
from diarscribe.contracts.errors import (
    ParseError,
    PollError,
    PollTimeoutError,
    ProviderError,
    RemoteError,
    RemoteJobError,
    SubmitError,
    UploadError,
)
from diarscribe.utils.time import Clock, Deadline, now_monotonic_s

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.assemblyai.com/v2"


class HttpResponseLike(Protocol):
    status_code: int
    text: str

    def json(self) -> Any: ...


class HttpSessionLike(Protocol):
    def post(self, url: str, **kwargs: Any) -> HttpResponseLike: ...

    def get(self, url: str, **kwargs: Any) -> HttpResponseLike: ...


def _is_success(response: HttpResponseLike) -> bool:
    return 200 <= response.status_code < 300


def _json_object(response: HttpResponseLike, *, what: str) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise ParseError(
            f"{what} response is not JSON: {response.text[:200]!r}",
            status_code=response.status_code,
            body=response.text,
        ) from exc
    if not isinstance(payload, dict):
        raise ParseError(f"{what} response must be a JSON object", status_code=response.status_code, body=response.text)
    return payload


def _ms_to_s(value: Any, *, name: str, index: int) -> float:
    if value is None or isinstance(value, bool):
        raise ParseError(f"utterance {index} has no numeric '{name}'")
    try:
        return max(0.0, float(value) / 1000.0)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"utterance {index} has invalid '{name}': {value!r}") from exc


def parse_completed_payload(payload: dict[str, Any]) -> Transcript:
    """Build a Transcript from a completed job; utterance times arrive in milliseconds."""
    raw_utterances = payload.get("utterances")
    if raw_utterances is None:
        raw_utterances = []
    if not isinstance(raw_utterances, list):
        raise ParseError("completed job 'utterances' must be a list when provided")

    fragments: list[TimedFragment] = []
    for idx, raw in enumerate(raw_utterances):
        if not isinstance(raw, dict):
            raise ParseError(f"utterance {idx} must be a JSON object")
        start = _ms_to_s(raw.get("start"), name="start", index=idx)
        end = max(start, _ms_to_s(raw.get("end"), name="end", index=idx))
        fragments.append(
            TimedFragment(
                speaker=normalize_speaker(raw.get("speaker")),
                start=start,
                end=end,
                text=str(raw.get("text") or ""),
            )
        )

    text = str(payload.get("text") or "").strip()
    if not text and fragments:
        text = " ".join(frag.text.strip() for frag in fragments if frag.text.strip())
    return Transcript(text=text, fragments=tuple(fragments))


class AssemblyAITranscriptionAdapter(TranscriptionBackend):
    """Asynchronous backend: upload raw bytes, create a job, poll it to a terminal status."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: HttpSessionLike | None = None,
        speaker_labels: bool = True,
        poll_interval_s: float = 3.0,
        poll_backoff: float = 1.0,
        max_poll_interval_s: float = 30.0,
        poll_timeout_s: float | None = 7200.0,
        request_timeout_s: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Clock = now_monotonic_s,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        if poll_interval_s < 0:
            raise ValueError("poll_interval_s must be >= 0")
        if poll_backoff < 1.0:
            raise ValueError("poll_backoff must be >= 1.0")
        if poll_timeout_s is not None and poll_timeout_s <= 0:
            raise ValueError("poll_timeout_s must be > 0 or None")
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._session: HttpSessionLike = session if session is not None else requests.Session()
        self._speaker_labels = speaker_labels
        self._poll_interval_s = poll_interval_s
        self._poll_backoff = poll_backoff
        self._max_poll_interval_s = max(max_poll_interval_s, poll_interval_s)
        self._poll_timeout_s = poll_timeout_s
        self._request_timeout_s = request_timeout_s
        self._sleep = sleep
        self._clock = clock

    def transcribe(self, audio_path: Path) -> Transcript:
        upload_url = self.upload(audio_path)
        job_id = self.submit_job(upload_url)
        logger.info("Submitted transcription job %s", job_id)
        return self.wait_for_job(job_id)

    def upload(self, audio_path: Path) -> str:
        url = f"{self._base_url}/upload"
        try:
            with Path(audio_path).open("rb") as fh:
                response = self._session.post(
                    url,
                    headers={"authorization": self._api_key},
                    data=fh,
                    timeout=self._request_timeout_s,
                )
        except requests.RequestException as exc:
            raise UploadError(f"failed to upload {audio_path}: {exc}") from exc
        except OSError as exc:
            raise UploadError(f"failed to read audio file {audio_path}: {exc}") from exc

        if not _is_success(response):
            raise UploadError(
                f"upload failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        upload_url = _json_object(response, what="upload").get("upload_url")
        if not isinstance(upload_url, str) or not upload_url:
            raise ParseError("upload response missing 'upload_url'", status_code=response.status_code, body=response.text)
        return upload_url

    def submit_job(self, upload_url: str) -> str:
        url = f"{self._base_url}/transcript"
        try:
            response = self._session.post(
                url,
                headers=self._json_headers(),
                json={"audio_url": upload_url, "speaker_labels": self._speaker_labels},
                timeout=self._request_timeout_s,
            )
        except requests.RequestException as exc:
            raise SubmitError(f"failed to create transcription job: {exc}") from exc

        if not _is_success(response):
            raise SubmitError(
                f"job creation failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        job_id = _json_object(response, what="job creation").get("id")
        if not job_id:
            raise ParseError("job creation response missing 'id'", status_code=response.status_code, body=response.text)
        return str(job_id)

    def poll(self, job_id: str) -> TranscriptionJob:
        url = f"{self._base_url}/transcript/{job_id}"
        try:
            response = self._session.get(url, headers=self._json_headers(), timeout=self._request_timeout_s)
        except requests.RequestException as exc:
            raise RemoteError(f"failed to poll job {job_id}: {exc}") from exc

        if not _is_success(response):
            raise RemoteError(
                f"polling job {job_id} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        payload = _json_object(response, what="job status")
        status = payload.get("status")
        if not isinstance(status, str) or status not in JOB_STATUSES:
            raise PollError(f"job {job_id} returned unrecognized status {status!r}", body=response.text)

        if status == "completed":
            return TranscriptionJob(id=job_id, status="completed", result=parse_completed_payload(payload))
        if status == "error":
            message = str(payload.get("error") or "transcription job failed without a message")
            return TranscriptionJob(id=job_id, status="error", error_message=message)
        return TranscriptionJob(id=job_id, status=status)

    def wait_for_job(self, job_id: str) -> Transcript:
        deadline = Deadline.after(self._poll_timeout_s, clock=self._clock)
        interval = self._poll_interval_s
        last_status: str | None = None

        while True:
            job = self.poll(job_id)
            if job.status != last_status:
                logger.debug("Job %s status: %s", job_id, job.status)
                last_status = job.status

            if job.status == "completed":
                if job.result is None:
                    raise ProviderError(f"job {job_id} completed without a result")
                return job.result
            if job.status == "error":
                raise RemoteJobError(f"transcription job {job_id} failed: {job.error_message}")

            remaining = deadline.remaining_s()
            if remaining is not None and remaining <= 0:
                raise PollTimeoutError(
                    f"job {job_id} still '{job.status}' after {self._poll_timeout_s:g}s"
                )
            self._sleep(interval if remaining is None else min(interval, remaining))
            interval = min(interval * self._poll_backoff, self._max_poll_interval_s)

    def _json_headers(self) -> dict[str, str]:
        return {"authorization": self._api_key, "content-type": "application/json"}


__all__ = [
    "DEFAULT_BASE_URL",
    "AssemblyAITranscriptionAdapter",
    "HttpSessionLike",
    "parse_completed_payload",
]
