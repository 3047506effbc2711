from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "LogForge"
SUPPORTED_LANGUAGES = ("en", "zh-CN")


def normalize_language(value: str | None) -> str:
    """Map a locale-ish string onto a supported language; blank stays blank."""
    cleaned = str(value or "").strip()
    if not cleaned:
        return ""
    if cleaned.lower().startswith("zh"):
        return "zh-CN"
    return "en"


def get_app_dir() -> Path:
    base = os.getenv("APPDATA") or str(Path.home())
    return Path(base) / APP_NAME


def get_log_dir() -> Path:
    return get_app_dir() / "logs"


def ensure_dirs() -> None:
    get_app_dir().mkdir(parents=True, exist_ok=True)
    get_log_dir().mkdir(parents=True, exist_ok=True)


class ShellSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LOGFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = APP_NAME
    backend_url: str = "http://127.0.0.1:8765"
    api_prefix: str = "/api/v1"
    request_timeout_sec: float = 15.0
    request_retries: int = 2

    language: str = ""
    log_level: str = "INFO"

    env_poll_interval_sec: float = 1.0
    env_poll_max_attempts: int = 60
    env_ready_dismiss_sec: float = 3.0
    env_failure_dismiss_sec: float = 8.0

    job_poll_interval_sec: float = 1.0
    message_dismiss_sec: float = 3.0

    @field_validator(
        "request_timeout_sec",
        "env_poll_interval_sec",
        "env_ready_dismiss_sec",
        "env_failure_dismiss_sec",
        "job_poll_interval_sec",
        "message_dismiss_sec",
    )
    @classmethod
    def non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @field_validator("env_poll_max_attempts", "request_retries")
    @classmethod
    def at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("language", mode="before")
    @classmethod
    def check_language(cls, value: str | None) -> str:
        return normalize_language(value)

    @field_validator("api_prefix")
    @classmethod
    def normalize_prefix(cls, value: str) -> str:
        cleaned = "/" + value.strip().strip("/")
        return "" if cleaned == "/" else cleaned

    @property
    def base_api_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}{self.api_prefix}"


@lru_cache(maxsize=1)
def get_settings() -> ShellSettings:
    return ShellSettings()
