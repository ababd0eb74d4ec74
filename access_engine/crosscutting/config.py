"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the reference access-control behavior

Collaborators:
  - container.py: reads settings to build policies, factory, tokens and audit chain
  - crosscutting/logger.py: log level and format
  - infrastructure/services/retry.py: retry attempts/delays for the audit sink

Constraints:
  - No business logic — pure configuration
  - Time windows are wall-clock times interpreted in the access time's own tz

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
  - Complex fields (lists/dicts) are read from env as JSON
"""

from datetime import datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_WEEKDAY_NAMES: tuple[str, ...] = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")
_FLOOR_NAMES: frozenset[str] = frozenset({"LOW", "MEDIUM", "HIGH"})


def parse_time_range(value: str) -> tuple[time, time]:
    """Parse "HH:MM-HH:MM" into (start, end). Raises ValueError."""
    raw_start, sep, raw_end = (value or "").partition("-")
    if not sep:
        raise ValueError(f"time range must look like HH:MM-HH:MM, got {value!r}")
    start = time.fromisoformat(raw_start.strip())
    end = time.fromisoformat(raw_end.strip())
    if start > end:
        raise ValueError(f"time range start must not be after end: {value!r}")
    return start, end


def weekday_index(name: str) -> int:
    """MON..SUN -> 0..6 (datetime.weekday())."""
    return _WEEKDAY_NAMES.index(name.strip().upper()[:3])


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        site_timezone: IANA tz used for "now" and for naive HTTP timestamps
        token_secret: Secret mixed into access-token digests
        token_ttl_seconds: Access token lifetime (default: 300 = 5 minutes)
        secure_card_ids: Apply the keyed-digest suffix to card/facade ids
        facade_id_count: Facade identifiers derived per card (default: 1)
        facade_hash_algorithm: hashlib algorithm for facade derivation
        medium_start_time / medium_end_time: Medium policy window (08:00-18:00)
        high_start_time / high_end_time: High policy window (09:00-17:00)
        high_allowed_days: Weekdays allowed on HIGH floors (Mon-Fri)
        high_max_daily_accesses: Per-card daily quota on HIGH floors (5)
        quota_retention_days: Days of quota history kept before compaction
        floor_time_restrictions: Global per-floor windows {"HIGH": "09:00-17:00"}
        audit_log_path: Durable append-only audit file ("" disables it)
        audit_queue_size: Max records buffered for the durable writer
        retry_max_attempts: Attempts for durable audit writes
        retry_base_delay_seconds: Initial backoff for durable audit writes
        retry_max_delay_seconds: Max backoff for durable audit writes
    """

    # Environment
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Clock
    site_timezone: str = "UTC"

    # Tokens
    token_secret: str = "dev-token-secret"
    token_ttl_seconds: int = 300

    # Card identity
    secure_card_ids: bool = False
    facade_id_count: int = 1
    facade_hash_algorithm: str = "sha256"

    # Floor policies
    medium_start_time: time = time(8, 0)
    medium_end_time: time = time(18, 0)
    high_start_time: time = time(9, 0)
    high_end_time: time = time(17, 0)
    high_allowed_days: list[str] = ["MON", "TUE", "WED", "THU", "FRI"]
    high_max_daily_accesses: int = 5
    quota_retention_days: int = 2

    # Global restrictions (applied before the floor policy)
    floor_time_restrictions: dict[str, str] = {
        "MEDIUM": "09:00-17:00",
        "HIGH": "09:00-17:00",
    }

    # Audit
    audit_log_path: str = "access_control_audit.log"
    audit_queue_size: int = 10_000

    # Resilience (durable audit writes)
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 0.05
    retry_max_delay_seconds: float = 1.0

    @field_validator("token_ttl_seconds", "facade_id_count", "high_max_daily_accesses")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("quota_retention_days")
    @classmethod
    def retention_at_least_one_day(cls, v: int) -> int:
        if v < 1:
            raise ValueError("quota_retention_days must be >= 1")
        return v

    @field_validator("high_allowed_days")
    @classmethod
    def allowed_days_valid(cls, v: list[str]) -> list[str]:
        days: list[str] = []
        for item in v:
            name = (item or "").strip().upper()[:3]
            if name not in _WEEKDAY_NAMES:
                raise ValueError(f"unknown weekday: {item!r}")
            if name not in days:
                days.append(name)
        return days

    @field_validator("floor_time_restrictions")
    @classmethod
    def restrictions_valid(cls, v: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for floor_name, window in v.items():
            key = floor_name.strip().upper()
            if key not in _FLOOR_NAMES:
                raise ValueError(f"unknown floor in floor_time_restrictions: {floor_name!r}")
            parse_time_range(window)
            normalized[key] = window
        return normalized

    @field_validator("site_timezone")
    @classmethod
    def timezone_known(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {v!r}") from exc
        return v

    @field_validator("retry_max_attempts")
    @classmethod
    def retry_attempts_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("retry_max_attempts must be > 0")
        return v

    @model_validator(mode="after")
    def validate_windows(self):
        if self.medium_start_time > self.medium_end_time:
            raise ValueError("medium_start_time must not be after medium_end_time")
        if self.high_start_time > self.high_end_time:
            raise ValueError("high_start_time must not be after high_end_time")
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-token-secret", "changeme", "change-me", "secret"}
        secret = (self.token_secret or "").strip()
        if not secret or secret in insecure_secrets:
            raise ValueError(
                "TOKEN_SECRET must be set to a strong, non-default value in production"
            )
        if len(secret) < 32:
            raise ValueError("TOKEN_SECRET must be at least 32 characters in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def site_tz(self) -> ZoneInfo:
        return ZoneInfo(self.site_timezone)

    def now(self) -> datetime:
        """Current aware time in the site timezone (default engine clock)."""
        return datetime.now(self.site_tz())

    def high_allowed_weekdays(self) -> frozenset[int]:
        """Allowed HIGH-floor days as datetime.weekday() indexes."""
        return frozenset(weekday_index(name) for name in self.high_allowed_days)

    def parsed_time_restrictions(self) -> dict[str, tuple[time, time]]:
        """floor name -> (start, end)."""
        return {
            floor_name: parse_time_range(window)
            for floor_name, window in self.floor_time_restrictions.items()
        }

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
