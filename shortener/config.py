from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"
    ENVIRONMENT: str = "development"

    JWT_SECRET_KEY: str = ""
    JWT_ISSUER: str = "url-shortener"
    JWT_AUDIENCE: str = "url-shortener-clients"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Fixed window limit for link creation, per client
    CREATE_RATE_LIMIT: int = 10
    CREATE_RATE_WINDOW: int = 60
    # Only enable behind a proxy that overwrites X-Forwarded-For
    TRUST_FORWARDED_FOR: bool = False

    ADMIN_NAME: str = "Admin"
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env")

@lru_cache
def get_settings() -> Settings:
    return Settings()
