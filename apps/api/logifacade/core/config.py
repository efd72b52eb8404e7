"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SYSTEM_NAMES = ("GROUND", "AIR", "SEA")


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    jwt_secret: str
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS512"
    token_ttl_seconds: int = 86400

    ground_service_url: str = "http://localhost:8081/api/ground"
    air_service_url: str = "http://localhost:8082/api/air"
    sea_service_url: str = "http://localhost:8083/api/sea"
    backend_order: str = "GROUND,AIR,SEA"
    backend_timeout_seconds: float = 3.0
    request_timeout_seconds: float = 10.0

    seed_sample_shipments: bool = True
    seed_principals: bool = True
    password_hash_rounds: int = 12

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(env_prefix="LOGIFACADE_", extra="ignore")

    @field_validator("backend_order")
    @classmethod
    def _normalize_backend_order(cls, value: str) -> str:
        names = [part.strip().upper() for part in value.split(",") if part.strip()]
        if not names:
            raise ValueError("backend_order must name at least one system")
        unknown = [name for name in names if name not in _SYSTEM_NAMES]
        if unknown:
            raise ValueError(f"unknown backend systems: {', '.join(unknown)}")
        if len(set(names)) != len(names):
            raise ValueError("backend_order must not repeat a system")
        return ",".join(names)

    def backend_urls(self) -> dict[str, str]:
        return {
            "GROUND": self.ground_service_url,
            "AIR": self.air_service_url,
            "SEA": self.sea_service_url,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
