"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with VERTEX_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="VERTEX_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
        "https://vertex-frontend.vercel.app",
    ]
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Storage ---
    # SQL backend is used unless both Supabase values are set.
    database_url: str = "sqlite+aiosqlite:///./vertex.db"
    supabase_url: str = ""
    supabase_key: str = ""
    store_timeout_seconds: float = 10.0

    # --- JWT ---
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_hours: int = 24
    jwt_issuer: str = "vertex-tips"

    # --- Accounts ---
    password_min_length: int = 6
    seed_admin: bool = True
    admin_email: str = "admin@vertex.com"
    admin_password: str = "admin123"

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
