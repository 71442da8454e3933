"""Runtime configuration — env-driven, overridable from the command line.

Centralized config using pydantic-settings.  Reads from a .env file and
LOGONE_* environment variables; the CLI applies its flags on top with
``model_copy(update=...)``.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from logone.models.config import VerbosityMode

DEFAULT_UNIT_NAME_PATTERN = r"/nix/store/([a-zA-Z0-9_.+-]+)\.drv"

DEFAULT_FAILURE_KEYWORDS: tuple[str, ...] = (
    "error",
    "failed",
    "Error",
    "Failed",
    "FAILED",
    "cannot",
    "Could not",
)


class LogoneConfig(BaseSettings):
    """Settings for one logone session.

    Examples
    --------
    Override via environment::

        export LOGONE_LEVEL=errors
        export LOGONE_COLOR=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="LOGONE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Output
    level: VerbosityMode = VerbosityMode.CARGO
    color: bool = True
    refresh_per_second: float = 8.0

    # Diagnostics of logone itself
    debug: bool = False
    log_level: str = "WARNING"

    # Failure attribution
    unit_name_pattern: str = DEFAULT_UNIT_NAME_PATTERN
    error_level: int = 0  # producer levels at or below this count as errors
    failure_keywords: tuple[str, ...] = DEFAULT_FAILURE_KEYWORDS

    @property
    def effective_log_level(self) -> str:
        """``DEBUG`` when debug mode is on, otherwise ``log_level``."""
        return "DEBUG" if self.debug else self.log_level.upper()
