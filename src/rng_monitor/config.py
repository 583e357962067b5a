"""Configuration system for rng-monitor.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (RNG_*) -> .env file -> field defaults.

Cross-field and semantic checks that pydantic cannot express as plain
field types live in validate_config(), which the application factory
calls once at startup.
"""

from __future__ import annotations

from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rng_monitor.exceptions import ConfigValidationError

_STORE_BACKENDS: frozenset[str] = frozenset({"sqlite", "memory"})
_LOG_LEVELS: frozenset[str] = frozenset({"none", "summary", "full"})
_SECONDS_PER_DAY = 86_400


class MonitorConfig(BaseSettings):
    """Configuration for rng-monitor.

    Resolution order: init kwargs -> env vars (RNG_*) -> .env file -> defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="RNG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Storage ---

    store_backend: str = Field(
        default="sqlite",
        description="Record store backend: 'sqlite' or 'memory'",
    )
    database_path: str = Field(
        default="rng_monitor.db",
        description="SQLite database file (':memory:' for a private in-process database)",
    )
    store_timeout_s: float = Field(
        default=5.0,
        description="SQLite busy timeout in seconds for each store operation",
    )

    # --- Generation ---

    entropy_source_type: str = Field(
        default="system",
        description="Registered entropy source identifier",
    )
    tick_interval_s: int = Field(
        default=60,
        description="Seconds between scheduled generations, aligned to wall-clock boundaries",
    )
    run_on_start: bool = Field(
        default=True,
        description="Generate one sample immediately when the scheduler starts",
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Start the generation scheduler together with the API",
    )

    # --- Query ---

    chart_timezone: str = Field(
        default="UTC",
        description="IANA time zone used to group samples by calendar day",
    )

    # --- HTTP ---

    api_prefix: str = Field(
        default="/api",
        description="Path prefix for all API routes",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Bind host for the HTTP server",
    )
    port: int = Field(
        default=3000,
        description="Bind port for the HTTP server",
    )

    # --- Logging ---

    log_level: str = Field(
        default="summary",
        description="Per-generation logging verbosity: 'none', 'summary', 'full'",
    )


def resolve_timezone(name: str) -> tzinfo:
    """Return the ``ZoneInfo`` for an IANA zone name.

    Args:
        name: Zone identifier such as ``'UTC'`` or ``'Europe/Berlin'``.

    Returns:
        The resolved time zone.

    Raises:
        ConfigValidationError: If the zone is unknown.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigValidationError(f"Unknown time zone: {name!r}") from exc


def validate_config(config: MonitorConfig) -> None:
    """Check settings that field types alone cannot enforce.

    Args:
        config: The configuration to validate.

    Raises:
        ConfigValidationError: On the first invalid setting found.
    """
    if config.store_backend not in _STORE_BACKENDS:
        available = ", ".join(sorted(_STORE_BACKENDS))
        raise ConfigValidationError(
            f"Unknown store backend: {config.store_backend!r}. Available: {available}"
        )
    if config.log_level not in _LOG_LEVELS:
        available = ", ".join(sorted(_LOG_LEVELS))
        raise ConfigValidationError(
            f"Unknown log level: {config.log_level!r}. Available: {available}"
        )
    if config.tick_interval_s <= 0:
        raise ConfigValidationError(
            f"tick_interval_s must be positive, got {config.tick_interval_s}"
        )
    if _SECONDS_PER_DAY % config.tick_interval_s != 0:
        raise ConfigValidationError(
            f"tick_interval_s={config.tick_interval_s} does not divide a day evenly; "
            f"ticks could not stay aligned to wall-clock boundaries"
        )
    if config.store_timeout_s <= 0:
        raise ConfigValidationError(
            f"store_timeout_s must be positive, got {config.store_timeout_s}"
        )
    if config.api_prefix and (
        not config.api_prefix.startswith("/") or config.api_prefix.endswith("/")
    ):
        raise ConfigValidationError(
            f"api_prefix must be empty or start with '/' and not end with '/', "
            f"got {config.api_prefix!r}"
        )
    resolve_timezone(config.chart_timezone)
