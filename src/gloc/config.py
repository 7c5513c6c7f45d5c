"""Runtime configuration for the concurrent runner."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_WORKERS = 10


@dataclass(slots=True)
class DisplaySettings:
    """Terminal rendering settings."""

    max_summary_width: int = 100
    fallback_width: int = 50
    fallback_height: int = 1
    color: bool | None = None


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    workers: int = DEFAULT_WORKERS
    shell: str | None = None
    display: DisplaySettings = field(default_factory=DisplaySettings)

    @classmethod
    def from_env(cls, workers: int | None = None) -> Settings:
        """Load settings from environment, letting explicit CLI values win."""

        return cls(
            workers=workers if workers is not None else _env_int("GLOC_WORKERS", DEFAULT_WORKERS),
            shell=os.getenv("GLOC_SHELL") or None,
            display=DisplaySettings(
                max_summary_width=_env_int("GLOC_MAX_SUMMARY_WIDTH", 100),
                fallback_width=_env_int("GLOC_FALLBACK_WIDTH", 50),
                fallback_height=_env_int("GLOC_FALLBACK_HEIGHT", 1),
                color=_env_optional_bool("GLOC_COLOR"),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error for values the runner cannot work with."""

        if self.workers < 1:
            raise ValueError("GLOC_WORKERS must be >= 1.")
        if self.display.max_summary_width <= 0:
            raise ValueError("GLOC_MAX_SUMMARY_WIDTH must be > 0.")
        if self.display.fallback_width <= 0:
            raise ValueError("GLOC_FALLBACK_WIDTH must be > 0.")
        if self.display.fallback_height <= 0:
            raise ValueError("GLOC_FALLBACK_HEIGHT must be > 0.")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_optional_bool(name: str) -> bool | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
