from __future__ import annotations

import os
import tempfile
from pathlib import Path


def transcript_output_path(input_path: Path, *, suffix: str = ".txt") -> Path:
    """Return the input path with its extension replaced, e.g. talk.mp4 -> talk.txt."""
    return Path(input_path).with_suffix(suffix)


def write_text_file(path: Path, text: str, *, encoding: str = "utf-8") -> None:
    _atomic_write_bytes(path, text.encode(encoding))


def _atomic_write_bytes(path: Path, payload: bytes) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as tmp_file:
            tmp_file.write(payload)
            tmp_file.flush()
            try:
                os.fsync(tmp_file.fileno())
            except OSError:
                # Best-effort durability; some filesystems do not support fsync.
                pass
        os.replace(tmp_path, path)
    finally:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass


__all__ = [
    "transcript_output_path",
    "write_text_file",
]
