from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from a JSON list or a comma separated string"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # --- APP ---
    APP_NAME: str = "School Portal API"
    ENVIRONMENT: str = "development"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 7000

    # --- DATABASE ---
    DATABASE_URL: str = "sqlite:///./school.db"
    DB_ECHO: bool = False

    # --- AUTH ---
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120  # 2 hours
    BCRYPT_ROUNDS: int = 12

    # Seed admin (python seed.py)
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_ROLE: str = "admin"

    # --- UPLOADS ---
    UPLOAD_DIR: str = "uploads"

    # --- CORS ---
    CORS_ORIGINS: Any = ["*"]

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"

    # --- RESULTS ---
    # "competition" -> 1, 2, 2, 4 on ties; "ordinal" -> position in sorted list
    MERIT_RANKING: str = "competition"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def validate_cors_origins(cls, v):
        return parse_cors_origins(v)

    @field_validator("MERIT_RANKING")
    @classmethod
    def validate_merit_ranking(cls, v):
        v = v.lower()
        if v not in ("competition", "ordinal"):
            raise ValueError("MERIT_RANKING must be 'competition' or 'ordinal'")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
