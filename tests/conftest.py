"""Shared fakes for the shell tests.

The fakes stand in for the window and the backend so controller logic can be
driven without Tk or a running server.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from logforge_shell.bridge import BridgeError  # noqa: E402
from logforge_shell.config import ShellSettings  # noqa: E402
from logforge_shell.dialogs import DialogChoice  # noqa: E402
from logforge_shell.i18n import Translator  # noqa: E402
from logforge_shell.models import (  # noqa: E402
    AnalysisResult,
    BackendSettings,
    EnvironmentStatus,
    JobProgress,
    JobTarget,
)


def _next(results: list[Any]) -> Any:
    """Pop the next scripted result; the last one repeats forever."""
    result = results.pop(0) if len(results) > 1 else results[0]
    if isinstance(result, Exception):
        raise result
    return result


class FakeBridge:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.configured: bool | Exception = True
        self.show_wizard: bool | Exception = False
        self.show_wizard_writes: list[bool] = []
        self.env_results: list[Any] = [EnvironmentStatus(ready=True)]
        self.progress_results: list[Any] = [JobProgress(status="completed", progress=1.0)]
        self.submit_error: Exception | None = None
        self.submitted: list[tuple[str, str, str, str | None]] = []
        self.targets: list[JobTarget] = [JobTarget(id="t1", name="router-logs")]
        self.deleted: list[str] = []
        self.settings = BackendSettings()
        self.saved_settings: list[BackendSettings] = []
        self.connection_error: Exception | None = None
        self.picked_directory = "/picked"
        self.opened: list[str] = []
        self.closed = False

    async def is_configured(self) -> bool:
        self.calls.append("is_configured")
        if isinstance(self.configured, Exception):
            raise self.configured
        return self.configured

    async def get_show_wizard(self) -> bool:
        self.calls.append("get_show_wizard")
        if isinstance(self.show_wizard, Exception):
            raise self.show_wizard
        return self.show_wizard

    async def set_show_wizard(self, show: bool) -> None:
        self.calls.append("set_show_wizard")
        self.show_wizard_writes.append(show)

    async def get_environment_ready(self) -> EnvironmentStatus:
        self.calls.append("get_environment_ready")
        return _next(self.env_results)

    async def list_job_targets(self) -> list[JobTarget]:
        self.calls.append("list_job_targets")
        return list(self.targets)

    async def get_job_target(self, target_id: str) -> JobTarget:
        self.calls.append("get_job_target")
        for target in self.targets:
            if target.id == target_id:
                return target
        raise BridgeError("status=404 detail=Project not found")

    async def delete_job_target(self, target_id: str) -> None:
        self.calls.append("delete_job_target")
        self.deleted.append(target_id)

    async def submit_job(
        self, target_id: str, input_dir: str, output_dir: str, output_name: str | None = None
    ) -> None:
        self.calls.append("submit_job")
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append((target_id, input_dir, output_dir, output_name))

    async def get_job_progress(self) -> JobProgress:
        self.calls.append("get_job_progress")
        return _next(self.progress_results)

    async def analyze_sample(self, project_name: str, sample_text: str) -> AnalysisResult:
        self.calls.append("analyze_sample")
        return AnalysisResult(code="def parse(line):\n    return line\n", valid=True)

    async def get_settings(self) -> BackendSettings:
        self.calls.append("get_settings")
        return self.settings

    async def save_settings(self, settings: BackendSettings) -> None:
        self.calls.append("save_settings")
        self.saved_settings.append(settings)

    async def test_remote_connection(self) -> None:
        self.calls.append("test_remote_connection")
        if self.connection_error is not None:
            raise self.connection_error

    async def select_directory(self, prompt_title: str) -> str:
        self.calls.append("select_directory")
        return self.picked_directory

    async def open_directory(self, path: str) -> None:
        self.calls.append("open_directory")
        self.opened.append(path)

    async def close(self) -> None:
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call == name)


class FakeView:
    """Records what the controller asked the window to do.

    ``dialog_choice`` / ``wizard_dont_show`` answer overlays immediately when
    set; otherwise the callbacks wait in ``open_dialogs`` / ``open_wizards``.
    """

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.renders = 0
        self.nav_enabled: bool | None = None
        self.active: Any = None
        self.banners: list[tuple[str, str]] = []
        self.dismissals: list[float] = []
        self.indicators: list[tuple[str, str]] = []
        self.dialogs: list[Any] = []
        self.open_dialogs: list[Any] = []
        self.dismissed_dialogs = 0
        self.dialog_choice: DialogChoice | None = DialogChoice.affirm
        self.wizards: list[Any] = []
        self.open_wizards: list[Any] = []
        self.wizard_dont_show: bool | None = False

    def clear_page(self) -> str:
        self.events.append(("clear",))
        return "container"

    def mark_active(self, page_id) -> None:
        self.active = page_id
        self.events.append(("active", page_id))

    def set_nav_enabled(self, configured: bool) -> None:
        self.nav_enabled = configured

    def show_banner(self, level: str, markup_text: str) -> None:
        self.banners.append((level, markup_text))

    def dismiss_banner_after(self, seconds: float) -> None:
        self.dismissals.append(seconds)

    def set_env_indicator(self, status: str, label: str) -> None:
        self.indicators.append((status, label))

    def present_dialog(self, dialog, on_choice) -> None:
        self.dialogs.append(dialog)
        if self.dialog_choice is None:
            self.open_dialogs.append(on_choice)
        else:
            on_choice(self.dialog_choice)

    def dismiss_dialog(self) -> None:
        self.dismissed_dialogs += 1

    def present_wizard(self, content, on_close) -> None:
        self.wizards.append(content)
        if self.wizard_dont_show is None:
            self.open_wizards.append(on_close)
        else:
            on_close(self.wizard_dont_show)


class FakeProgressView:
    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.submit_enabled = True
        self.percent = 0
        self.current_item = ""
        self.badge: tuple[str, str] | None = None
        self.log: list[str] = []
        self.summaries: list[Any] = []

    def reset_progress(self) -> None:
        self.events.append(("reset",))
        self.percent = 0
        self.log = []

    def set_submit_enabled(self, enabled: bool) -> None:
        self.events.append(("submit_enabled", enabled))
        self.submit_enabled = enabled

    def set_percent(self, percent: int) -> None:
        self.percent = percent

    def set_current_item(self, label: str) -> None:
        self.current_item = label

    def set_status_badge(self, label: str, style: str) -> None:
        self.badge = (label, style)

    def append_log(self, line: str) -> None:
        self.log.append(line)

    def show_summary(self, summary) -> None:
        self.summaries.append(summary)


@pytest.fixture
def logger() -> logging.Logger:
    test_logger = logging.getLogger("tests.logforge_shell")
    test_logger.setLevel(logging.DEBUG)
    return test_logger


@pytest.fixture
def translate() -> Translator:
    return Translator("en")


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def view() -> FakeView:
    return FakeView()


@pytest.fixture
def progress_view() -> FakeProgressView:
    return FakeProgressView()


@pytest.fixture
def fast_settings() -> ShellSettings:
    return ShellSettings(
        _env_file=None,
        env_poll_interval_sec=0,
        job_poll_interval_sec=0,
        language="en",
    )
