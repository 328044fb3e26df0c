# backend/clinic_api/config.py
import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ConfigError

JWT_ALGORITHM = "HS256"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    jwt_secret: str
    jwt_expire_hours: int = 1
    database_url: str = "sqlite:///db.sqlite"
    db_timeout: int = 5
    bcrypt_rounds: int = 10
    auth_required: bool = False
    app_env: str = "development"
    seed_default_staff: bool = False
    seed_staff_password: str = "senha123"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 3001
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.jwt_secret:
            raise ConfigError("JWT_SECRET is not set; refusing to start without a token signing key")

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"


def load_settings(jwt_secret: Optional[str] = None) -> Settings:
    """Read settings from the environment (call load_dotenv() first)."""
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    return Settings(
        jwt_secret=jwt_secret if jwt_secret is not None else os.getenv("JWT_SECRET", ""),
        jwt_expire_hours=_env_int("JWT_EXPIRE_HOURS", 1),
        database_url=os.getenv("DATABASE_URL", "sqlite:///db.sqlite"),
        db_timeout=_env_int("DB_TIMEOUT", 5),
        bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 10),
        auth_required=_env_bool("AUTH_REQUIRED"),
        app_env=os.getenv("APP_ENV", "development"),
        seed_default_staff=_env_bool("SEED_DEFAULT_STAFF"),
        seed_staff_password=os.getenv("SEED_STAFF_PASSWORD", "senha123"),
        cors_origins=origins or ["*"],
        port=_env_int("PORT", 3001),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
