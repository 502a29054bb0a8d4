"""Tests for environment-driven settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tubescript.config import DEFAULT_USER_AGENT, Settings, load_env_file


def test_settings_defaults_from_empty_environment() -> None:
    settings = Settings.from_env({})

    assert settings == Settings()
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_settings_read_tubescript_variables() -> None:
    settings = Settings.from_env(
        {
            "TUBESCRIPT_LANGUAGES": "de, en ,,",
            "TUBESCRIPT_TIMEOUT": "2.5",
            "TUBESCRIPT_DELAY": "10",
            "TUBESCRIPT_RANDOM_DELAY": "Yes",
            "TUBESCRIPT_ACCEPT_LANGUAGE": "de-DE",
            "TUBESCRIPT_CLEANUP_MODEL": "claude-custom",
        }
    )

    assert settings.languages == ("de", "en")
    assert settings.timeout == 2.5
    assert settings.delay == 10.0
    assert settings.random_delay is True
    assert settings.accept_language == "de-DE"
    assert settings.cleanup_model == "claude-custom"


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_settings_reject_invalid_numbers(value: str) -> None:
    with pytest.raises(ValueError, match="TUBESCRIPT_DELAY"):
        Settings.from_env({"TUBESCRIPT_DELAY": value})


def test_load_env_file_does_not_override_existing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "export TUBESCRIPT_TEST_A='quoted value'\n"
        "TUBESCRIPT_TEST_B=plain # trailing\n"
        "TUBESCRIPT_TEST_C=from-file\n"
        "not a pair\n",
        encoding="utf-8",
    )
    for name in ("TUBESCRIPT_TEST_A", "TUBESCRIPT_TEST_B"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("TUBESCRIPT_TEST_C", "from-env")

    load_env_file(env_file)

    assert os.environ["TUBESCRIPT_TEST_A"] == "quoted value"
    assert os.environ["TUBESCRIPT_TEST_B"] == "plain"
    assert os.environ["TUBESCRIPT_TEST_C"] == "from-env"


def test_load_env_file_ignores_missing_file(tmp_path: Path) -> None:
    load_env_file(tmp_path / "missing.env")
