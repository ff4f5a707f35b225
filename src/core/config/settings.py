# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the academy
enrollment backend. Settings are loaded from environment variables with
sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.enrollment.weekend_club_window_days
    28
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full async connection URL, used verbatim when set.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "academy"
    password: SecretStr = SecretStr("academy_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "academy"
    url_override: str | None = None
    pool_size: int = 10
    max_overflow: int = 20

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class EnrollmentSettings(BaseSettings):
    """Enrollment engine rules.

    Attributes:
        weekend_club_window_days: Days after a weekend club starts during
            which new program enrollments are still accepted.
        holiday_camp_window_days: Same limit for holiday camps.
        archive_retry_attempts: Extra attempts per student when an archive
            cascade fails to complete them.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENROLLMENT_",
        extra="ignore",
    )

    weekend_club_window_days: int = Field(default=28, ge=0)
    holiday_camp_window_days: int = Field(default=5, ge=0)
    archive_retry_attempts: int = Field(default=1, ge=0, le=5)


class WaitlistSettings(BaseSettings):
    """Waitlist priority weights.

    Attributes:
        returning_student_bonus: Points for students who completed a course before.
        sibling_bonus: Points for students with siblings enrolled.
        points_per_waiting_day: Points per full day spent on the waitlist.
        max_waiting_bonus: Cap on the waiting-time points.
    """

    model_config = SettingsConfigDict(
        env_prefix="WAITLIST_",
        extra="ignore",
    )

    returning_student_bonus: int = 100
    sibling_bonus: int = 50
    points_per_waiting_day: int = 10
    max_waiting_bonus: int = 100


class SMTPSettings(BaseSettings):
    """Outbound email configuration for assignment notifications.

    Attributes:
        host: SMTP server hostname.
        port: SMTP server port.
        username: SMTP authentication username.
        password: SMTP authentication password.
        use_tls: Use STARTTLS.
        from_email: Sender email address.
        from_name: Sender display name.
        timeout: Per-message send timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        extra="ignore",
    )

    host: str | None = None
    port: int = 587
    username: str | None = None
    password: SecretStr | None = None
    use_tls: bool = True
    from_email: str | None = None
    from_name: str = "Coding Academy"
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        """Check whether every value needed to send mail is present."""
        return all([self.host, self.username, self.password, self.from_email])


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        db: Database settings.
        enrollment: Enrollment engine rules.
        waitlist: Waitlist priority weights.
        smtp: Email settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    enrollment: EnrollmentSettings = Field(default_factory=EnrollmentSettings)
    waitlist: WaitlistSettings = Field(default_factory=WaitlistSettings)
    smtp: SMTPSettings = Field(default_factory=SMTPSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.db.url_override is None and self.db.password.get_secret_value() == "academy_password":
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD environment variable."
                )
            if self.debug:
                raise ValueError("DEBUG must be disabled in production.")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
