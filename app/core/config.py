import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache


def _split_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass
class Settings:
    database_url: str = "sqlite:///./f1_analytics.db"
    secret_key: str = "cambia-esta-clave"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    openf1_base_url: str = "https://api.openf1.org/v1"
    # Segundos. Sin reintentos: si OpenF1 no responde a tiempo la petición falla.
    upstream_timeout: float = 10.0
    cors_origins: list[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            openf1_base_url=os.getenv("OPENF1_BASE_URL", defaults.openf1_base_url).rstrip("/"),
            upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT", defaults.upstream_timeout)),
            cors_origins=_split_origins(origins) if origins else defaults.cors_origins,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
