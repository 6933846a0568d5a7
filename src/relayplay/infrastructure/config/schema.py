"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
StoreBackend = Literal["diskcache", "redis"]

_POSITIVE_SECONDS = (
    "http_timeout_seconds",
    "resolve_timeout_seconds",
    "metadata_timeout_seconds",
    "metadata_ttl_days",
    "attempt_timeout_seconds",
    "range_probe_timeout_seconds",
    "seek_grace_seconds",
    "seek_tolerance_seconds",
)


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


def _alias(flat: str, section: str, key: str) -> AliasChoices:
    return AliasChoices(flat, AliasPath(section, key))


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned
      (proxy/http/resolver/playback/logging/cache).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow
      strict precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="relayplay", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Proxy (YAML section: proxy.*)
    proxy_base_url: str = Field(
        default="",
        validation_alias=_alias("proxy_base_url", "proxy", "base_url"),
        description="Resolve + rewrite endpoint base. Empty disables the proxy.",
    )

    # HTTP client (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=_alias("http_timeout_seconds", "http", "timeout_seconds"),
        description="Default per-phase timeout of the shared HTTP client.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=_alias(
            "http_follow_redirects", "http", "follow_redirects"
        ),
    )
    http_user_agent: str = Field(
        default="relayplay/0.1.0",
        validation_alias=_alias("http_user_agent", "http", "user_agent"),
    )

    # Resolution (YAML section: resolver.*)
    resolve_timeout_seconds: float = Field(
        default=15.0,
        validation_alias=_alias(
            "resolve_timeout_seconds", "resolver", "resolve_timeout_seconds"
        ),
        description="Hard deadline for one resolve endpoint call.",
    )
    metadata_timeout_seconds: float = Field(
        default=5.0,
        validation_alias=_alias(
            "metadata_timeout_seconds", "resolver", "metadata_timeout_seconds"
        ),
        description="Hard deadline for one provider metadata fetch.",
    )
    metadata_ttl_days: float = Field(
        default=7.0,
        validation_alias=_alias(
            "metadata_ttl_days", "resolver", "metadata_ttl_days"
        ),
        description="How long cached provider metadata stays valid.",
    )
    metadata_host: str = Field(
        default="pixeldrain.com",
        validation_alias=_alias("metadata_host", "resolver", "metadata_host"),
    )

    # Playback (YAML section: playback.*)
    attempt_timeout_seconds: float = Field(
        default=20.0,
        validation_alias=_alias(
            "attempt_timeout_seconds", "playback", "attempt_timeout_seconds"
        ),
        description="Per-candidate readiness deadline in the fallback chain.",
    )
    range_probe_timeout_seconds: float = Field(
        default=5.0,
        validation_alias=_alias(
            "range_probe_timeout_seconds", "playback", "range_probe_timeout_seconds"
        ),
    )
    seek_grace_seconds: float = Field(
        default=0.9,
        validation_alias=_alias(
            "seek_grace_seconds", "playback", "seek_grace_seconds"
        ),
        description="Wait before checking that a speculative seek landed.",
    )
    seek_tolerance_seconds: float = Field(
        default=2.0,
        validation_alias=_alias(
            "seek_tolerance_seconds", "playback", "seek_tolerance_seconds"
        ),
        description="Max distance from the target for a seek to count as landed.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=_alias("log_level", "logging", "level"),
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=_alias("log_format", "logging", "format"),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Key-value store (YAML section: cache.*)
    cache_backend: StoreBackend = Field(
        default="diskcache",
        validation_alias=_alias("cache_backend", "cache", "backend"),
    )
    cache_dir: Path = Field(
        default=Path("./.cache/relayplay"),
        validation_alias=_alias("cache_dir", "cache", "dir"),
        description="Diskcache directory (created lazily by the store).",
    )
    cache_redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=_alias("cache_redis_url", "cache", "redis_url"),
    )
    cache_max_concurrent: int = Field(
        default=10,
        validation_alias=_alias("cache_max_concurrent", "cache", "max_concurrent"),
        description="Max parallel store operations (semaphore limit).",
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("proxy_base_url")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @field_validator(*_POSITIVE_SECONDS)
    @classmethod
    def _validate_positive(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("cache_max_concurrent")
    @classmethod
    def _validate_max_concurrent(cls, v: int) -> int:
        if v < 1:
            raise ValueError("cache_max_concurrent must be >= 1")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "proxy": {"base_url": self.proxy_base_url},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "resolver": {
                "resolve_timeout_seconds": self.resolve_timeout_seconds,
                "metadata_timeout_seconds": self.metadata_timeout_seconds,
                "metadata_ttl_days": self.metadata_ttl_days,
                "metadata_host": self.metadata_host,
            },
            "playback": {
                "attempt_timeout_seconds": self.attempt_timeout_seconds,
                "range_probe_timeout_seconds": self.range_probe_timeout_seconds,
                "seek_grace_seconds": self.seek_grace_seconds,
                "seek_tolerance_seconds": self.seek_tolerance_seconds,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": {
                "backend": self.cache_backend,
                "dir": str(self.cache_dir),
                "redis_url": self.cache_redis_url,
                "max_concurrent": self.cache_max_concurrent,
            },
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py reads RELAYPLAY_* variables through this class, keeps only the
    values that were set, and merges them above YAML/defaults.

    Supported env var examples (flat, explicit):
    - RELAYPLAY_PROXY_BASE_URL
    - RELAYPLAY_RESOLVE_TIMEOUT_SECONDS
    - RELAYPLAY_CACHE_BACKEND
    - RELAYPLAY_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="RELAYPLAY_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    proxy_base_url: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    resolve_timeout_seconds: Optional[float] = None
    metadata_timeout_seconds: Optional[float] = None
    metadata_ttl_days: Optional[float] = None
    metadata_host: Optional[str] = None

    attempt_timeout_seconds: Optional[float] = None
    range_probe_timeout_seconds: Optional[float] = None
    seek_grace_seconds: Optional[float] = None
    seek_tolerance_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[StoreBackend] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None
    cache_max_concurrent: Optional[int] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
