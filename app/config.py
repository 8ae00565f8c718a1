"""
Application configuration using Pydantic Settings
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Supabase
    SUPABASE_URL: str
    SUPABASE_SERVICE_KEY: str

    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Listings
    UNLOCK_FEE: float = 50
    MAX_IMAGES_PER_PROPERTY: int = 10
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 50

    @field_validator("SUPABASE_URL")
    @classmethod
    def check_supabase_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return value.rstrip("/")

    @field_validator("SUPABASE_SERVICE_KEY")
    @classmethod
    def check_service_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("SUPABASE_SERVICE_KEY must not be empty")
        return value

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def check_jwt_secret(cls, value: str) -> str:
        if len(value) < 16:
            raise ValueError("JWT_SECRET_KEY must be at least 16 characters")
        return value

    @field_validator("UNLOCK_FEE")
    @classmethod
    def check_unlock_fee(cls, value: float) -> float:
        if value < 0:
            raise ValueError("UNLOCK_FEE cannot be negative")
        return value

    @field_validator("MAX_IMAGES_PER_PROPERTY", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE")
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def expose_error_detail(self) -> bool:
        """Whether unexpected error text may be returned to clients"""
        return self.DEBUG or self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
