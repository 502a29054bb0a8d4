"""Runtime configuration sourced from the environment and an optional ``.env``."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_CLEANUP_MODEL = "claude-3-5-haiku-20241022"
_ENV_LOADED = False
_TRUTHY = {"1", "true", "yes", "on"}


def load_env_file(path: Path) -> None:
    """Load simple KEY=VALUE pairs from an ``.env`` file into ``os.environ``.

    Variables already present in the environment win over the file.
    """

    try:
        raw_lines = path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return

    for raw_line in raw_lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        elif line.startswith("export\t"):
            line = line[len("export\t") :].strip()
        if not line or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue

        if value and value[0] in {'"', "'"} and value[-1] == value[0]:
            value = value[1:-1]
        else:
            value = value.split(" #", 1)[0].rstrip()

        os.environ.setdefault(key, os.path.expandvars(value))


def ensure_env_loaded() -> None:
    """Load the project ``.env`` file once per interpreter session."""

    global _ENV_LOADED
    if _ENV_LOADED:
        return
    load_env_file(Path.cwd() / ".env")
    load_env_file(PROJECT_ROOT / ".env")
    _ENV_LOADED = True


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _languages(raw: str) -> tuple[str, ...]:
    return tuple(code.strip() for code in raw.split(",") if code.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Knobs shared by the session client, the pipeline and the CLI."""

    languages: tuple[str, ...] = ()
    timeout: float = 10.0
    delay: float = 0.0
    random_delay: bool = False
    accept_language: str = "en-US"
    user_agent: str = DEFAULT_USER_AGENT
    cleanup_model: str = DEFAULT_CLEANUP_MODEL

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``TUBESCRIPT_*`` variables.

        Raises:
            ValueError: If a numeric variable does not parse.
        """

        source = os.environ if env is None else env
        return cls(
            languages=_languages(source.get("TUBESCRIPT_LANGUAGES", "")),
            timeout=_float(source, "TUBESCRIPT_TIMEOUT", 10.0),
            delay=_float(source, "TUBESCRIPT_DELAY", 0.0),
            random_delay=source.get("TUBESCRIPT_RANDOM_DELAY", "").strip().lower()
            in _TRUTHY,
            accept_language=source.get("TUBESCRIPT_ACCEPT_LANGUAGE", "").strip()
            or "en-US",
            user_agent=source.get("TUBESCRIPT_USER_AGENT", "").strip()
            or DEFAULT_USER_AGENT,
            cleanup_model=source.get("TUBESCRIPT_CLEANUP_MODEL", "").strip()
            or DEFAULT_CLEANUP_MODEL,
        )


__all__ = [
    "DEFAULT_CLEANUP_MODEL",
    "DEFAULT_USER_AGENT",
    "Settings",
    "ensure_env_loaded",
    "load_env_file",
]
