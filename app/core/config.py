# Pydantic settings

from pydantic_settings import BaseSettings, SettingsConfigDict
import os


class Settings(BaseSettings):
    """Application settings"""

    # App
    app_name: str = "DataPulse Analytics API"
    version: str = "1.0.0"
    debug: bool = False
    api_prefix: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/datapulse.db"
    auto_create_tables: bool = True

    # Auth
    jwt_secret: str = "datapulse-dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    token_ttl: int = 24 * 60 * 60  # seconds
    bcrypt_rounds: int = 12

    # Redis (rate limiter falls back to memory when unset or unreachable)
    redis_url: str | None = None

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_period: int = 15 * 60  # seconds

    # HTTP
    cors_origin: str = "http://localhost:5173"
    static_dir: str = "./public"

    model_config = SettingsConfigDict(
        # Use .env.local if it exists (for local dev), otherwise .env (for Docker)
        env_file=".env.local" if os.path.exists(".env.local") else ".env",
        case_sensitive=False
    )


settings = Settings()
