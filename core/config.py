"""
Application settings and configuration management using Pydantic Settings.
"""
from typing import Dict, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_GROOMING_TIME_SLOTS = [
    "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Pet Hotel Reservations", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    api_v1_prefix: str = Field(default="/api/v1", description="API route prefix")

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./pet_hotel.db",
        description="Database connection URL"
    )
    db_echo: bool = Field(default=False, description="Log all SQL statements")

    # Mirror cache
    cache_dir: str = Field(default="data/cache", description="Directory of the local mirror cache")
    storage_poll_interval_seconds: float = Field(
        default=2.0, gt=0, description="Interval for detecting cache writes from other processes"
    )

    # Shop Configuration
    shop_name: str = Field(default="PuppyHotel", description="Shop name used in SMS messages")
    shop_phone: str = Field(default="02-1234-5678", description="Shop phone number")
    shop_utc_offset_minutes: int = Field(
        default=540, ge=-720, le=840, description="Fixed UTC offset used for 'today' (KST)"
    )

    # Twilio Configuration
    twilio_account_sid: str = Field(default="", description="Twilio Account SID")
    twilio_auth_token: str = Field(default="", description="Twilio Auth Token")
    twilio_phone_number: str = Field(default="", description="Twilio sender phone number")
    sms_default_country_code: str = Field(default="82", description="Country code for national numbers")

    # Admin API
    admin_api_token: str = Field(default="", description="Token required in X-Admin-Token (empty disables)")

    # Chatbot query service
    chatbot_accepts_reservations: bool = Field(
        default=False, description="Whether the chatbot may create reservations"
    )
    hotel_capacity: int = Field(default=10, ge=0, description="Advisory hotel rooms per day")
    grooming_capacity: int = Field(default=8, ge=0, description="Advisory grooming slots per day")
    daycare_capacity: int = Field(default=15, ge=0, description="Advisory daycare places per day")
    grooming_time_slots: List[str] = Field(
        default_factory=lambda: list(DEFAULT_GROOMING_TIME_SLOTS),
        description="Grooming time slots offered on open days"
    )
    grooming_closed_weekdays: List[str] = Field(
        default_factory=lambda: ["monday"],
        description="Weekdays the grooming salon is closed"
    )

    # CORS Settings
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Allowed CORS origins (comma-separated)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v_upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(f"app_env must be one of {allowed_envs}")
        return v_lower

    @field_validator("grooming_closed_weekdays")
    @classmethod
    def normalize_weekdays(cls, v: List[str]) -> List[str]:
        return [day.strip().lower() for day in v if day.strip()]

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_phone_number)

    @property
    def service_capacities(self) -> Dict[str, int]:
        return {
            "hotel": self.hotel_capacity,
            "grooming": self.grooming_capacity,
            "daycare": self.daycare_capacity,
        }


# Global settings instance
settings = Settings()
