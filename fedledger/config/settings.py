from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    host: str = Field(
        default="localhost", description="Gateway bind address"
    )
    port: int = Field(
        default=8080, ge=1, le=65535, description="Gateway port"
    )
    ledger_path: Path | None = Field(
        default=None,
        description="JSON file backing the ledger; in-memory when unset",
    )
    log_level: LogLevel = Field(default="INFO", description="Log level")
    json_logs: bool = Field(
        default=False, description="Emit console logs as JSON"
    )
    log_dir: Path | None = Field(
        default=None, description="Directory for per-component log files"
    )
    max_request_size: int = Field(
        default=100 * 1024 * 1024,
        gt=0,
        description="Maximum accepted request body in bytes",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FEDLEDGER_",
        case_sensitive=False,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def normalize_log_level(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(
            values.get("log_level"), str
        ):
            values["log_level"] = values["log_level"].upper()
        return values


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def load_yaml_settings(path: Path) -> dict:
    import yaml

    with path.open("r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of settings")
    return data
