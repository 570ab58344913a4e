from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import validator
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Runtime settings for the PingMe backend, read from the environment / .env."""

    PROJECT_NAME: str = "PingMe"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    # "api" returns JSON bodies, "page" returns redirects and plain text
    RESPONSE_MODE: str = "api"
    LOGIN_PATH: str = "/login"
    HOME_PATH: str = "/"
    PAYMENT_PAGE_PATH: str = "/payment"
    STICKER_PAGE_PATH: str = "/download-sticker"

    # Comma separated list of allowed origins
    CORS_ORIGINS: str = ""

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @validator("RESPONSE_MODE")
    def check_response_mode(cls, v: str) -> str:
        if v not in ("api", "page"):
            raise ValueError("RESPONSE_MODE must be 'api' or 'page'")
        return v

    # Database
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "pingme"

    # Sessions
    SESSION_SECRET: str = ""
    SESSION_COOKIE_NAME: str = "pingme.sid"
    SESSION_TTL_SECONDS: int = 14 * 24 * 60 * 60  # 2 weeks
    SESSION_BACKEND: str = "mongo"

    # Mail
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 465
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = ""
    MAIL_TIMEOUT: float = 10.0

    # Password reset
    RESET_URL_BASE: str = "http://localhost:3000/reset-password"
    RESET_TOKEN_TTL_MINUTES: int = 60

    # Files
    UPLOAD_DIR: str = "uploads"
    STICKER_PATH: str = "stickers/sticker.png"

    PAYMENT_DELAY_SECONDS: float = 2.0

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
