# app/core/config.py

from dotenv import load_dotenv
from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── 1) Load your .env into os.environ ─────────────────────────────────────────
env_path = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=env_path, override=True)

DEFAULT_PORT = 8080


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TS_", extra="ignore")

    # ─────────────────────── listener ────────────────────────
    host: str = "0.0.0.0"
    port: int = Field(DEFAULT_PORT, ge=0, le=65535)

    # ───────────────────── keepalive ─────────────────────────
    # seconds between pings; 0 turns keepalive off
    connection_lost_timeout: int = Field(100, ge=0)

    # ───────────────────────── Misc ───────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def ws_ping_interval(self) -> float | None:
        return float(self.connection_lost_timeout) or None


@lru_cache
def get_settings() -> Settings:
    """
    Build Settings from os.environ (``TS_*`` keys).
    """
    return Settings()
