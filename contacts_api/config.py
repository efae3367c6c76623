"""
Configuration for the contacts API.

Values come from environment variables; a local ``.env`` file is loaded
first so development setups do not need to export anything.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    secret_key: str
    algorithm: str
    access_token_expire_hours: int
    session_cookie_name: str
    session_cookie_max_age: int
    database_url: str
    public_base_url: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str
    smtp_from: str
    public_dir: str
    tmp_dir: str
    avatar_size: int
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cors_origins: tuple
    log_level: str

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def avatars_dir(self) -> str:
        return os.path.join(self.public_dir, "avatars")

    @property
    def cloudinary_enabled(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        app_env=(os.getenv("APP_ENV") or "development").lower(),
        secret_key=os.getenv("SECRET_KEY", "secret_key"),
        algorithm=os.getenv("ALGORITHM", "HS256"),
        access_token_expire_hours=_int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "23"), 23),
        session_cookie_name=os.getenv("SESSION_COOKIE_NAME", "jwt_token"),
        session_cookie_max_age=_int(os.getenv("SESSION_COOKIE_MAX_AGE", "86400"), 86400),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./contacts.sqlite"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        public_dir=os.getenv("PUBLIC_DIR", "public"),
        tmp_dir=os.getenv("TMP_DIR", "tmp"),
        avatar_size=_int(os.getenv("AVATAR_SIZE", "250"), 250),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", ""),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY", ""),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET", ""),
        cors_origins=tuple(o.strip().rstrip("/") for o in origins.split(",") if o.strip()),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
