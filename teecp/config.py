"""Runtime settings — env-driven defaults for the CLI.

Reads ``TEECP_*`` environment variables or a ``.env`` file.  Command-line
options always take precedence over these values.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 6667


class TeecpSettings(BaseSettings):
    """Environment overrides for teecp.

    Examples
    --------
    Override via environment::

        export TEECP_PORT=7000
        export TEECP_LOG_LEVEL=INFO
        export TEECP_TARGET_HOST=hub.internal
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TEECP_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Network
    port: int = DEFAULT_PORT
    bind_host: str = ""  # hub: all interfaces
    target_host: str = "localhost"  # listener

    # How often the acceptor wakes up to check for cancellation
    accept_poll_seconds: float = 0.5


def load_settings() -> TeecpSettings:
    """Build a fresh settings object from the current environment."""
    return TeecpSettings()
