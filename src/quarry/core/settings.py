"""
Centralized settings for quarry.

Manifesto:
    Connection details, logging and pagination defaults are read once from
    ``QUARRY_*`` environment variables (or a ``.env`` file), validated by
    pydantic and cached, so the CLI, ``Database.from_settings()`` and the
    query builder agree on the same values.

Examples:
    >>> import os
    >>> os.environ["QUARRY_DRIVER"] = "sqlite"
    >>> os.environ["QUARRY_DBNAME"] = ":memory:"
    >>> get_settings(_force_reload=True).credentials().dsn()
    'sqlite::memory:'

Tags:
    quarry, configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from quarry.core.dialect import DRIVERS
from quarry.core.errors import ConfigError
from quarry.server.credentials import DbCredentials


class QuarrySettings(BaseSettings):
    """quarry configuration.

    All fields can be set via ``QUARRY_*`` environment variables (e.g.
    ``QUARRY_DRIVER=mysql``) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="QUARRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    driver: str = Field(default="sqlite", description="mysql, sqlite or pgsql")
    dbname: str = Field(default="")
    host: str = Field(default="localhost")
    port: int | None = Field(default=None)
    username: str | None = Field(default=None)
    password: str | None = Field(default=None)
    persistent: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", description="json or console")

    # ── Pagination ───────────────────────────────────────────────
    default_per_page: int = Field(default=100, ge=1)
    compact_nav_window: int = Field(default=5, ge=0)

    @field_validator("driver")
    @classmethod
    def _known_driver(cls, value: str) -> str:
        value = value.lower()
        if value not in DRIVERS:
            raise ValueError(f"Unsupported driver '{value}'. Supported: {list(DRIVERS)}")
        return value

    @property
    def json_logs(self) -> bool:
        return self.log_format.lower() == "json"

    def credentials(self) -> DbCredentials:
        """Build :class:`DbCredentials` from the database fields."""
        creds = DbCredentials(
            self.driver,
            self.dbname,
            host=self.host,
            port=self.port,
            persistent=self.persistent,
        )
        if self.username:
            creds.login(self.username, self.password)
        return creds


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, QuarrySettings] = {}


def get_settings(*, _force_reload: bool = False) -> QuarrySettings:
    """Load, validate and cache a :class:`QuarrySettings` instance.

    Raises:
        ConfigError: If a ``QUARRY_*`` value fails validation.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    try:
        settings = QuarrySettings()
    except ValidationError as e:
        problems = [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
        raise ConfigError(
            "Invalid quarry settings: " + "; ".join(problems), cause=e
        ).with_context(errors=problems) from e
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["QuarrySettings", "clear_settings_cache", "get_settings"]
