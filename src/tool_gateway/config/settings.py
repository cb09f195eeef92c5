"""Application settings."""

from functools import lru_cache
import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "tool-gateway"
    app_env: str = "dev"
    log_level: str = "INFO"
    tool_timeout_s: float = Field(default=30.0, gt=0.0)
    max_batch_size: int = Field(default=10, ge=1)
    # Unset exposes every registered module.
    enabled_modules: list[str] | None = None

    model_config = SettingsConfigDict(
        env_prefix="TOOL_GATEWAY_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
