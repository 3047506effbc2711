from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JobStatus(StrEnum):
    idle = "idle"
    running = "running"
    fixing = "fixing"
    completed = "completed"
    failed = "failed"


TERMINAL_JOB_STATUSES = frozenset({JobStatus.completed, JobStatus.failed})


class EnvironmentStatus(BaseModel):
    ready: bool = False
    error: str | None = None

    @field_validator("error", mode="before")
    @classmethod
    def blank_error_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class JobTarget(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    status: str = "draft"
    sample_data: str = ""
    code: str = ""
    created_at: datetime | None = None

    @property
    def label(self) -> str:
        return self.name or f"{self.id[:8]}..."


class JobProgress(BaseModel):
    """Last-observed snapshot of a backend batch job.

    Wire names follow the backend (``progress``, ``current_file``, ``total_files``,
    ``processed``, ``failed``); attribute names describe what the shell uses.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: JobStatus = JobStatus.idle
    progress_fraction: float = Field(default=0.0, alias="progress")
    current_item: str | None = Field(default=None, alias="current_file")
    total_items: int = Field(default=0, alias="total_files")
    processed_items: int = Field(default=0, alias="processed")
    failed_items: int = Field(default=0, alias="failed")
    message: str | None = None

    @field_validator("progress_fraction", mode="before")
    @classmethod
    def clamp_fraction(cls, value: float | None) -> float:
        if value is None:
            return 0.0
        return max(0.0, min(1.0, float(value)))

    @field_validator("current_item", "message", mode="before")
    @classmethod
    def blank_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return str(value) or None

    @property
    def percent(self) -> int:
        return max(0, min(100, round(self.progress_fraction * 100)))

    @property
    def succeeded_items(self) -> int:
        return self.processed_items - self.failed_items

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_JOB_STATUSES


class AnalysisResult(BaseModel):
    code: str = ""
    valid: bool = False
    errors: list[str] = Field(default_factory=list)


class RemoteModelConfig(BaseModel):
    base_url: str = ""
    api_key: str = ""
    model_name: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.base_url.strip() and self.api_key.strip() and self.model_name.strip())


class BackendSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    llm: RemoteModelConfig = Field(default_factory=RemoteModelConfig)
    uv_path: str = "uv"
    default_input_dir: str = ""
    default_output_dir: str = ""
    sample_lines: int = 5
    language: str = ""

    @field_validator("sample_lines", mode="before")
    @classmethod
    def default_sample_lines(cls, value: int | str | None) -> int:
        try:
            lines = int(value or 0)
        except (TypeError, ValueError):
            lines = 0
        if lines < 1:
            return 5
        return min(lines, 1000)
