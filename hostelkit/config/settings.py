"""
Environment configuration for the hostel occupancy and billing engine.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # Application configuration
    APP_NAME: str = Field(default="Hostelkit", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database configuration
    DATABASE_URL: str = "sqlite:///./hostelkit.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    ENABLE_STRUCTURED_LOGGING: bool = False

    # Accounts
    PASSWORD_BCRYPT_ROUNDS: int = 12
    GENERATED_PASSWORD_LENGTH: int = 10
    USERNAME_MAX_ATTEMPTS: int = 5

    # Billing
    BILLING_DUE_DAY: int = Field(default=15, ge=1, le=28)
    RENT_RECEIPT_PREFIX: str = "INV"
    RECEIPT_PREFIX: str = "RCP"
    RECEIPT_SEQUENCE_WIDTH: int = 5
    RECEIPT_SUFFIX_LENGTH: int = 6
    DEFAULT_SUBSCRIPTION_RATE: Decimal = Decimal("0")

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("colored", "standard", "json"):
            raise ValueError(f"Unsupported LOG_FORMAT: {v}")
        return v

    def get_database_url(self) -> str:
        """Get database URL"""
        return self.DATABASE_URL

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
