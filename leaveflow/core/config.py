"""
LeaveFlow settings

Values come from the environment or a local ``.env`` file. Policy thresholds
here are copied into a frozen PolicyConfig once, when the app starts.
"""
from typing import List, Literal, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Process configuration for the API, scripts and migrations"""

    # Runtime
    DATABASE_URL: str = Field(default="sqlite:///./leaveflow.db", description="SQLAlchemy database URL")
    APP_ENV: Literal["local", "staging", "prod"] = Field(default="local")
    VERSION: Optional[str] = Field(default=None, description="Build identifier reported by /version")
    ALLOWED_ORIGINS: str = Field(default="*", description="Comma-separated CORS origins; '*' only outside prod")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_SQL: bool = Field(default=False, description="Log SQL statements emitted by SQLAlchemy")

    # Leave policy
    WEEKEND_DAYS: str = Field(
        default="5,6",
        description="Comma-separated weekday numbers treated as weekend (Monday=0 ... Sunday=6)"
    )
    MAX_SUGGESTIONS: int = Field(default=5, ge=0, description="Number of ranked suggestions returned by validation")
    MAX_ADVANCE_DAYS: int = Field(default=90, ge=0, description="How far ahead a leave may be requested")
    LOW_BALANCE_RESERVE_DAYS: float = Field(default=3, ge=0, description="Warn when remaining balance drops below this")
    REASON_MIN_LENGTH: int = Field(
        default=1,
        ge=1,
        description="Minimum characters for reject/return justification text"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {list(LOG_LEVELS)}")
        return level

    @field_validator("WEEKEND_DAYS")
    @classmethod
    def validate_weekend_days(cls, v: str) -> str:
        """Validate WEEKEND_DAYS holds weekday numbers 0-6"""
        for part in v.split(","):
            part = part.strip()
            if not part:
                continue
            if not part.isdigit() or int(part) > 6:
                raise ValueError("WEEKEND_DAYS must be comma-separated weekday numbers between 0 and 6")
        return v

    def validate_production(self) -> None:
        """
        Reject settings that are only acceptable on a developer machine

        Raises:
            ValueError: If APP_ENV is prod and CORS is open or the database is SQLite
        """
        if self.APP_ENV != "prod":
            return
        if not self.ALLOWED_ORIGINS or self.ALLOWED_ORIGINS.strip() == "*":
            raise ValueError("ALLOWED_ORIGINS must list explicit origins in prod")
        if self.DATABASE_URL.startswith("sqlite"):
            raise ValueError("DATABASE_URL must not point at SQLite in prod")

    def get_allowed_origins_list(self) -> List[str]:
        origins = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]
        return ["*"] if "*" in origins else [origin for origin in origins if origin]

    def get_weekend_days(self) -> Tuple[int, ...]:
        """Weekend weekday numbers as a sorted tuple"""
        return tuple(sorted({int(p) for p in self.WEEKEND_DAYS.split(",") if p.strip()}))


settings = Settings()

if settings.APP_ENV == "prod":
    settings.validate_production()
