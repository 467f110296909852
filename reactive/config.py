"""
Reactive configuration — all environment variables in one place.

Read from the environment when Settings() is constructed. Explicit
arguments to the kernel classes always win over these.
"""

from __future__ import annotations

import os
from collections.abc import Mapping


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Settings:
    """Kernel settings from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        env = os.environ if environ is None else environ

        # Host-document attributes
        self.TEMPLATE_ATTR: str = env.get("REACTIVE_TEMPLATE_ATTR", "data-template")
        self.ORIGINAL_ATTR: str = env.get("REACTIVE_ORIGINAL_ATTR", "data-original")
        self.BIND_ATTR: str = env.get("REACTIVE_BIND_ATTR", "data-bind")
        self.EVENT_ATTR: str = env.get("REACTIVE_EVENT_ATTR", "data-event")
        self.DEFAULT_EVENT: str = env.get("REACTIVE_DEFAULT_EVENT", "input")

        # Rendering
        self.ESCAPE_VALUES: bool = _env_bool(env.get("REACTIVE_ESCAPE_VALUES"), False)
        self.MAX_RENDER_PASSES: int = max(1, _env_int(env.get("REACTIVE_MAX_RENDER_PASSES"), 8))
        self.TRACK_DEPENDENCIES: bool = _env_bool(env.get("REACTIVE_TRACK_DEPENDENCIES"), False)

        # Logging (CLI)
        self.LOG_LEVEL: str = env.get("REACTIVE_LOG_LEVEL", "WARNING").upper()


# Singleton instance
settings = Settings()
