# gate_register/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./gate_register.db"
    DB_ECHO: bool = False                # Set True to log all SQL queries (debug only)

    # ── Registry ──────────────────────────────────────────────────────────
    SEED_SAMPLE_DATA: bool = True        # Sample profiles on first start only
    ENFORCE_IDENTIFIER_FORMAT: bool = True
    DEFAULT_BLACKLIST_ACTOR: str = "admin"

    # ── Reporting ─────────────────────────────────────────────────────────
    RECENT_LOG_LIMIT: int = 5            # Logs shown per profile
    PEAK_BUCKET_COUNT: int = 5
    QUIET_BUCKET_LIMIT: int = 5

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
