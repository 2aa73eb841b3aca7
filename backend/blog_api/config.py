import json
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file="../.env", env_file_encoding="utf-8", extra="ignore")

    # FastAPI application
    ENVIRONMENT: str = "development"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 4004
    LOG_LEVEL: str = "INFO"

    # JSON document used as the database
    DB_FILE: str = "db.json"

    # Uploaded images
    UPLOAD_DIR: str = "public"
    PUBLIC_URL_PATH: str = "/public"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    # JWT auth
    JWT_SECRET_KEY: str = "your-secret-key-blog-api-2024"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 24
    BCRYPT_ROUNDS: int = 10

    # Defaults applied when clients omit optional fields
    DEFAULT_ARTICLE_AUTHOR: str = "Unknown"

    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _normalise_cors(cls, value):
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("[") and raw.endswith("]"):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        raise ValueError("CORS_ORIGINS must be a string or list of strings")


settings = Config()
