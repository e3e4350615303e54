"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PVDASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # API Configuration
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Monitoring backend base URL",
    )
    api_timeout: float = Field(default=10.0, description="API request timeout in seconds")

    # Endpoint paths
    clients_path: str = Field(default="/api/clients", description="Clients endpoint")
    installations_path: str = Field(
        default="/api/installations",
        description="Installations endpoint (detail is {path}/{id}/detail)",
    )
    power_data_path: str = Field(default="/api/power-data", description="Power series endpoint")
    energy_data_path: str = Field(default="/api/energy-data", description="Energy series endpoint")
    weather_data_path: str = Field(default="/api/weather-data", description="Weather series endpoint")
    issues_path: str = Field(default="/api/issues", description="Process issues endpoint")
    reports_path: str = Field(
        default="/api/reports",
        description="Reports endpoint (monthly is {path}/monthly, PDF is {path}/pdf)",
    )

    # Fallback Configuration
    fallback_enabled: bool = Field(
        default=True,
        description="Serve locally generated data when the backend is unavailable",
    )
    fallback_detail_weather: bool = Field(
        default=False,
        description="Fill weather history in fallback installation details",
    )
    fallback_seed: int | None = Field(
        default=None,
        description="Seed for the fallback random generator (random if not set)",
    )
    fallback_timezone: str = Field(
        default="Europe/Warsaw",
        description="IANA time zone of the sites; fallback series and the daylight window use it",
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (logs to console if not set)",
    )
    log_max_bytes: int = Field(
        default=10 * 1024 * 1024,  # 10 MB
        description="Maximum log file size before rotation",
    )
    log_backup_count: int = Field(
        default=5,
        description="Number of backup log files to keep",
    )

    @field_validator("fallback_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject names the zoneinfo database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    def endpoint_url(self, path: str) -> str:
        """Join the base URL with an endpoint path."""
        return f"{self.api_base_url.rstrip('/')}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
