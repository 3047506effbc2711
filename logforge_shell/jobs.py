from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Callable, Protocol

from logforge_shell.bridge import BackendBridge
from logforge_shell.dialogs import DialogService
from logforge_shell.i18n import Translator
from logforge_shell.models import JobProgress, JobStatus


async def _sleep_or_stop(stop_event: asyncio.Event, seconds: float) -> None:
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return


BADGE_STYLES = {
    JobStatus.running: "info",
    JobStatus.completed: "success",
    JobStatus.failed: "error",
    JobStatus.fixing: "warning",
    JobStatus.idle: "info",
}


@dataclass(frozen=True)
class JobRequest:
    target_id: str
    input_dir: str
    output_dir: str
    output_name: str = ""


@dataclass(frozen=True)
class JobSummary:
    status: JobStatus
    total_items: int
    succeeded_items: int
    failed_items: int
    message: str | None
    output_dir: str

    @property
    def can_open_output(self) -> bool:
        return self.status is JobStatus.completed


class ProgressView(Protocol):
    def reset_progress(self) -> None: ...

    def set_submit_enabled(self, enabled: bool) -> None: ...

    def set_percent(self, percent: int) -> None: ...

    def set_current_item(self, label: str) -> None: ...

    def set_status_badge(self, label: str, style: str) -> None: ...

    def append_log(self, line: str) -> None: ...

    def show_summary(self, summary: JobSummary) -> None: ...


class PollingSession:
    """Fixed-interval progress polling bound to one job submission.

    Each poll carries a sequence number; a result is applied only while the
    session is active and only if it is newer than the last applied one.
    ``cancel`` is the one cleanup path for both terminal snapshots and
    navigation away. It never interrupts a query already in flight; that
    query's result is dropped when it arrives.
    """

    def __init__(
        self,
        bridge: BackendBridge,
        interval_sec: float,
        on_snapshot: Callable[[JobProgress], None],
        on_poll_error: Callable[[Exception], None],
        logger: logging.Logger,
    ) -> None:
        self._bridge = bridge
        self._interval_sec = interval_sec
        self._on_snapshot = on_snapshot
        self._on_poll_error = on_poll_error
        self._logger = logger

        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._cancelled = False
        self.issued = 0
        self.applied = 0
        self.discarded = 0

    @property
    def active(self) -> bool:
        return not self._cancelled

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return self._task

    def cancel(self) -> bool:
        if self._cancelled:
            return False
        self._cancelled = True
        self._stop_event.set()
        self._logger.debug("job_poll_session_closed", extra={"issued": self.issued, "applied": self.applied})
        return True

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            await _sleep_or_stop(self._stop_event, self._interval_sec)
            if self._stop_event.is_set():
                break
            await self.poll_once()

    async def poll_once(self) -> None:
        if self._cancelled:
            return
        self.issued += 1
        seq = self.issued
        try:
            progress = await self._bridge.get_job_progress()
        except Exception as exc:  # noqa: BLE001
            if self._cancelled:
                self.discarded += 1
                return
            self._logger.warning("job_poll_failed", extra={"seq": seq, "error": str(exc)})
            self._on_poll_error(exc)
            return

        if self._cancelled or seq <= self.applied:
            self.discarded += 1
            self._logger.debug("job_poll_result_discarded", extra={"seq": seq, "applied": self.applied})
            return
        self.applied = seq
        try:
            self._on_snapshot(progress)
        except Exception:  # noqa: BLE001
            self._logger.exception("job_snapshot_apply_failed", extra={"seq": seq})


class BatchJobController:
    """Drives one batch page's job from submission to a terminal state."""

    def __init__(
        self,
        bridge: BackendBridge,
        dialogs: DialogService,
        view: ProgressView,
        translate: Translator,
        logger: logging.Logger,
        interval_sec: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._bridge = bridge
        self._dialogs = dialogs
        self._view = view
        self._t = translate
        self._logger = logger
        self._interval_sec = interval_sec
        self._clock = clock

        self.session: PollingSession | None = None
        self.last_progress: JobProgress | None = None
        self.summary: JobSummary | None = None
        self.log_lines: list[str] = []
        self._last_message = ""
        self._request: JobRequest | None = None
        self._disposed = False

    @property
    def polling(self) -> bool:
        return self.session is not None and self.session.active

    async def validate(self, request: JobRequest) -> bool:
        if not request.target_id:
            await self._dialogs.alert(self._t("batch.select_project_alert"))
            return False
        if not request.input_dir:
            await self._dialogs.alert(self._t("batch.select_input_alert"))
            return False
        if not request.output_dir:
            await self._dialogs.alert(self._t("batch.select_output_alert"))
            return False
        return True

    async def submit(self, target_id: str, input_dir: str, output_dir: str, output_name: str = "") -> bool:
        request = JobRequest(
            target_id=(target_id or "").strip(),
            input_dir=(input_dir or "").strip(),
            output_dir=(output_dir or "").strip(),
            output_name=(output_name or "").strip(),
        )
        if not await self.validate(request):
            return False

        if self._disposed:
            return False
        self._close_session()
        self._request = request
        self.last_progress = None
        self.summary = None
        self.log_lines = []
        self._last_message = ""

        self._view.set_submit_enabled(False)
        self._view.reset_progress()

        try:
            await self._bridge.submit_job(
                request.target_id,
                request.input_dir,
                request.output_dir,
                request.output_name or None,
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("job_submit_failed", extra={"target_id": request.target_id, "error": str(exc)})
            self._append_log(f"{self._t('batch.start_failed')}: {exc}")
            self._view.set_submit_enabled(True)
            return False

        if self._disposed:
            self._logger.info("job_submitted_after_dispose", extra={"target_id": request.target_id})
            return False

        self._logger.info("job_submitted", extra={"target_id": request.target_id})
        self._append_log(self._t("batch.started"))
        self.session = PollingSession(
            self._bridge,
            self._interval_sec,
            on_snapshot=self.apply_snapshot,
            on_poll_error=self._on_poll_error,
            logger=self._logger,
        )
        self.session.start()
        return True

    def apply_snapshot(self, progress: JobProgress) -> None:
        self.last_progress = progress
        self._view.set_percent(progress.percent)
        if progress.current_item:
            self._view.set_current_item(f"{self._t('batch.current_file')}: {progress.current_item}")
        self._view.set_status_badge(self.status_label(progress.status), BADGE_STYLES.get(progress.status, "info"))

        if progress.message and progress.message != self._last_message:
            self._append_log(progress.message)
            self._last_message = progress.message

        if progress.is_terminal:
            self._finish(progress)

    def status_label(self, status: JobStatus | str) -> str:
        key = f"batch.status.{status}"
        label = self._t(key)
        return str(status) if label == key else label

    def _finish(self, progress: JobProgress) -> None:
        if self.session is not None:
            self.session.cancel()
        self._view.set_submit_enabled(True)
        self.summary = JobSummary(
            status=progress.status,
            total_items=progress.total_items,
            succeeded_items=progress.succeeded_items,
            failed_items=progress.failed_items,
            message=progress.message,
            output_dir=self._request.output_dir if self._request else "",
        )
        self._logger.info(
            "job_finished",
            extra={
                "status": progress.status.value,
                "total": progress.total_items,
                "failed": progress.failed_items,
            },
        )
        self._view.show_summary(self.summary)

    def _on_poll_error(self, exc: Exception) -> None:
        self._append_log(f"{self._t('batch.progress_failed')}: {exc}")

    def _append_log(self, message: str) -> None:
        line = f"[{self._clock().strftime('%H:%M:%S')}] {message}"
        self.log_lines.append(line)
        self._view.append_log(line)

    async def open_output(self) -> bool:
        if self.summary is None or not self.summary.can_open_output:
            return False
        try:
            await self._bridge.open_directory(self.summary.output_dir)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("open_output_failed", extra={"error": str(exc)})
            await self._dialogs.error(f"{self._t('batch.open_failed')}: {exc}")
            return False
        return True

    def dispose(self) -> None:
        """Page teardown. Safe to call any number of times."""
        self._disposed = True
        self._close_session()

    def _close_session(self) -> None:
        if self.session is not None:
            self.session.cancel()
