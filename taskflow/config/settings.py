# taskflow/config/settings.py
# Application configuration loaded from the environment (and .env)

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings read from environment variables"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskflow.db")
    DB_CONNECT_RETRIES = int(os.getenv("DB_CONNECT_RETRIES", 10))
    DB_RETRY_DELAY_SECONDS = int(os.getenv("DB_RETRY_DELAY_SECONDS", 5))

    # Authentication
    SECRET_KEY = os.getenv("SECRET_KEY", "taskflow-secret-key-change-in-production")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", 7))

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8000"))
    RELOAD = _flag("RELOAD", "true")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if origin.strip()
    ]

    # Task lifecycle
    STRICT_STATUS_TRANSITIONS = _flag("STRICT_STATUS_TRANSITIONS")

    # First-run seed
    SEED_ADMIN_NAME = os.getenv("SEED_ADMIN_NAME", "Admin")
    SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@agency.com")
    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "Admin@1234")

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE_URL.startswith("sqlite")


settings = Settings()
