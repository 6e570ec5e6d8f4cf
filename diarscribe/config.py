from __future__ import annotations

import os
from os import PathLike
from pathlib import Path
from typing import Literal, Mapping

from dotenv import load_dotenv

from diarscribe.contracts.errors import ConfigError

type StrPath = str | PathLike[str]
type Backend = Literal["openai", "assemblyai"]

DEFAULT_ENV_FILE = Path(".env")
DEFAULT_BACKEND: Backend = "openai"
DEFAULT_MODEL = "gpt-4o-transcribe-diarize"
DEFAULT_MAX_SINGLE_CALL_S = 1400
DEFAULT_CHUNK_SECONDS = 1200
DEFAULT_POLL_INTERVAL_S = 3.0
DEFAULT_POLL_TIMEOUT_S = 7200.0
DEFAULT_REQUEST_TIMEOUT_S = 300.0

API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "assemblyai": "ASSEMBLYAI_API_KEY",
}
BACKENDS: tuple[str, ...] = tuple(API_KEY_ENV_VARS)


def load_env_file(path: StrPath = DEFAULT_ENV_FILE) -> Path:
    """Load KEY=VALUE pairs from a dotenv file into os.environ; existing variables win."""
    env_path = Path(path)
    if not env_path.is_file():
        raise ConfigError(f"Error loading .env file: {env_path} not found")
    load_dotenv(env_path, override=False)
    return env_path


def resolve_api_key(backend: str, *, env: Mapping[str, str] | None = None) -> str:
    effective_env: Mapping[str, str] = os.environ if env is None else env
    try:
        var_name = API_KEY_ENV_VARS[backend]
    except KeyError as exc:
        raise ConfigError(f"unsupported backend: {backend}") from exc

    api_key = (effective_env.get(var_name) or "").strip()
    if not api_key:
        raise ConfigError(f"{var_name} is not set; add it to your .env file or environment")
    return api_key


__all__ = [
    "API_KEY_ENV_VARS",
    "BACKENDS",
    "DEFAULT_BACKEND",
    "DEFAULT_CHUNK_SECONDS",
    "DEFAULT_ENV_FILE",
    "DEFAULT_MAX_SINGLE_CALL_S",
    "DEFAULT_MODEL",
    "DEFAULT_POLL_INTERVAL_S",
    "DEFAULT_POLL_TIMEOUT_S",
    "DEFAULT_REQUEST_TIMEOUT_S",
    "load_env_file",
    "resolve_api_key",
]
