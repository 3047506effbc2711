from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class PageId(StrEnum):
    sample = "sample"
    batch = "batch"
    projects = "projects"
    settings = "settings"

    @classmethod
    def resolve(cls, token: str | None) -> PageId:
        cleaned = str(token or "").strip().lstrip("#")
        try:
            return cls(cleaned)
        except ValueError:
            return DEFAULT_PAGE


DEFAULT_PAGE = PageId.sample
NAV_ORDER = (PageId.sample, PageId.batch, PageId.projects, PageId.settings)


class ReadinessStatus(StrEnum):
    pending = "pending"
    ready = "ready"
    error = "error"
    timed_out = "timedOut"


TERMINAL_READINESS = frozenset({ReadinessStatus.ready, ReadinessStatus.error, ReadinessStatus.timed_out})


@dataclass
class NavigationState:
    current_page: PageId | None = None
    pending_params: dict[str, Any] | None = None
    configured: bool = False


@dataclass
class ReadinessPollState:
    max_attempts: int = 60
    attempt: int = 0
    status: ReadinessStatus = ReadinessStatus.pending
    error: str = ""

    @property
    def terminal(self) -> bool:
        return self.status in TERMINAL_READINESS


@dataclass
class ShellState:
    navigation: NavigationState = field(default_factory=NavigationState)
    readiness: ReadinessPollState | None = None

    wizard_status: str = "unchecked"
    last_event: str = ""
    last_updated: datetime | None = None

    def touch(self, event: str = "") -> None:
        if event:
            self.last_event = event
        self.last_updated = datetime.now()
