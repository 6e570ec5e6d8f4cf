from __future__ import annotations

import os
from pathlib import Path

import pytest

from diarscribe.config import load_env_file, resolve_api_key
from diarscribe.contracts.errors import ConfigError


def test_load_env_file_sets_missing_variables(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text('DIARSCRIBE_TEST_KEY="from-file"\n', encoding="utf-8")
    monkeypatch.setenv("DIARSCRIBE_TEST_KEY", "")
    monkeypatch.delenv("DIARSCRIBE_TEST_KEY")

    assert load_env_file(env_file) == env_file
    assert os.environ["DIARSCRIBE_TEST_KEY"] == "from-file"


def test_load_env_file_keeps_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DIARSCRIBE_TEST_KEY=from-file\n", encoding="utf-8")
    monkeypatch.setenv("DIARSCRIBE_TEST_KEY", "from-shell")

    load_env_file(env_file)

    assert os.environ["DIARSCRIBE_TEST_KEY"] == "from-shell"


def test_load_env_file_missing_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_env_file(tmp_path / "nope.env")


def test_resolve_api_key_per_backend() -> None:
    env = {"OPENAI_API_KEY": " sk-1 ", "ASSEMBLYAI_API_KEY": "aai-2"}

    assert resolve_api_key("openai", env=env) == "sk-1"
    assert resolve_api_key("assemblyai", env=env) == "aai-2"


def test_resolve_api_key_missing_names_variable() -> None:
    with pytest.raises(ConfigError, match="ASSEMBLYAI_API_KEY"):
        resolve_api_key("assemblyai", env={"OPENAI_API_KEY": "sk-1"})


def test_resolve_api_key_unknown_backend() -> None:
    with pytest.raises(ConfigError, match="unsupported backend"):
        resolve_api_key("whisper-local", env={})
