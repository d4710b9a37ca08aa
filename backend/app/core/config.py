"""
Settings for the School Admin backend

Everything is read from the environment (or ``.env``); SECRET_KEY,
JWT_SECRET_KEY and DATABASE_URL have no defaults.
"""
import json
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

ENVIRONMENTS = ("development", "test", "staging", "production")


def split_origins(raw: str) -> List[str]:
    """Accept either a JSON list or a comma separated string"""
    raw = raw.strip()
    if raw.startswith("["):
        try:
            return [str(origin) for origin in json.loads(raw)]
        except json.JSONDecodeError:
            pass
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings(BaseSettings):
    APP_NAME: str = "School Admin"
    API_VERSION: str = "v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # Database (sqlite:/// and postgresql:// are rewritten to their async drivers)
    DATABASE_URL: str
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Redis read-through cache for lookups and listings
    CACHE_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_DB: int = 1
    CACHE_TTL_LOOKUPS: int = 3600
    CACHE_TTL_LISTINGS: int = 300

    # Auth
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720
    BCRYPT_ROUNDS: int = 12
    BOOTSTRAP_ADMIN_EMAIL: str = ""
    BOOTSTRAP_ADMIN_PASSWORD: str = ""

    # HTTP
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"
    MAX_REQUEST_SIZE: int = 1024 * 1024
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    LOGIN_RATE_LIMIT: str = "5/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("ENVIRONMENT")
    @classmethod
    def known_environment(cls, v: str) -> str:
        v = v.lower()
        if v not in ENVIRONMENTS:
            raise ValueError(f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def bcrypt_rounds_in_range(cls, v: int) -> int:
        # bcrypt.gensalt accepts 4..31
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return split_origins(self.CORS_ORIGINS_STR)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()
