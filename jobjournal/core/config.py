# jobjournal/core/config.py
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    # comma separated list, "*" allows any origin
    ALLOWED_ORIGINS: str = "*"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017/job-seeker-journal-app"
    MONGODB_DB: str = "job-seeker-journal-app"
    USERS_COLLECTION: str = "users"

    # JWT - environment values are often strings, pydantic will coerce to int
    JWT_SECRET: str = "change-me"  # override in .env / secrets
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_MINUTES: int = 60 * 24 * 7  # 7 days

    # bcrypt cost factor (passlib accepts 4..31)
    BCRYPT_ROUNDS: int = 10

    # Registration field bounds
    USERNAME_MIN_LENGTH: int = 3
    USERNAME_MAX_LENGTH: int = 8
    PASSWORD_MIN_LENGTH: int = 3
    PASSWORD_MAX_LENGTH: int = 8

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def sized_fields(self) -> dict:
        return {
            "username": {"min": self.USERNAME_MIN_LENGTH, "max": self.USERNAME_MAX_LENGTH},
            "password": {"min": self.PASSWORD_MIN_LENGTH, "max": self.PASSWORD_MAX_LENGTH},
        }

# single shared settings instance
settings = Settings()
