# phenofarm/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./phenofarm.db"
    LOG_LEVEL: str = "INFO"

    FRONTEND_URL: str = "http://localhost:3000"
    # Public backend URL
    BACKEND_URL: str = "http://127.0.0.1:8000"

    # Tax rates differ per entry point: the dispensary catalog cart uses
    # CATALOG_TAX_RATE, checkout and grower manual entry use ORDER_TAX_RATE.
    CATALOG_TAX_RATE: float = 0.10
    ORDER_TAX_RATE: float = 0.06

    # Payment connect (Stripe REST API)
    STRIPE_API_URL: str = "https://api.stripe.com"
    STRIPE_SECRET_KEY: str = ""
    STRIPE_PLATFORM_FEE_PERCENT: float = 2.9
    STRIPE_PLATFORM_FEE_FLAT: int = 30
    STRIPE_APPLICATION_FEE_PERCENT: float = 1.0

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
