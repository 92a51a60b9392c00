"""
Utility Billing API Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "Utility Billing API"
    PROJECT_DESCRIPTION: str = "Bill generation, payment recording and reporting for metered utilities"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Data Backend ====================
    # "supabase" talks to PostgREST with the caller's token,
    # "sql" uses the SQLAlchemy models directly
    DATA_BACKEND: str = "supabase"
    DATABASE_URL: str = "sqlite:///utility_billing_local.db"

    # ==================== Supabase Configuration ====================
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # ==================== Billing ====================
    TAX_RATE: float = 0.05
    BILL_NUMBER_PREFIX: str = "BILL"
    TRANSACTION_NUMBER_PREFIX: str = "TXN"
    SIMULATE_PAYMENT_CAPTURE: bool = True

    # ==================== CORS ====================
    ALLOWED_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["authorization", "x-client-info", "apikey", "content-type"]
    CORS_ALLOW_METHODS: List[str] = ["POST", "GET", "OPTIONS", "PUT", "DELETE"]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def uses_supabase(self) -> bool:
        """Check if requests are served through the Supabase client"""
        return self.DATA_BACKEND.lower() == "supabase"

    @property
    def cors_headers(self) -> dict:
        """Headers returned on every preflight response"""
        return {
            "Access-Control-Allow-Origin": ", ".join(self.ALLOWED_ORIGINS),
            "Access-Control-Allow-Headers": ", ".join(self.CORS_ALLOW_HEADERS),
            "Access-Control-Allow-Methods": ", ".join(self.CORS_ALLOW_METHODS),
        }


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create default settings instance
settings = get_settings()
