from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from logforge_shell import markup
from logforge_shell.bridge import BackendBridge
from logforge_shell.i18n import Translator
from logforge_shell.state import ReadinessPollState, ReadinessStatus


async def _sleep_or_stop(stop_event: asyncio.Event, seconds: float) -> None:
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return


class StatusSurface(Protocol):
    def show_banner(self, level: str, markup_text: str) -> None: ...

    def dismiss_banner_after(self, seconds: float) -> None: ...

    def set_env_indicator(self, status: str, label: str) -> None: ...


class ReadinessPoller:
    """Polls the backend execution environment until it settles.

    One attempt per interval, at most ``max_attempts`` attempts. ``ready`` and
    ``error`` end the loop early; running out of attempts ends it as
    ``timedOut``. A query that raises is not an outcome, the loop just moves
    on to the next attempt.
    """

    def __init__(
        self,
        bridge: BackendBridge,
        surface: StatusSurface,
        translate: Translator,
        logger: logging.Logger,
        max_attempts: int = 60,
        interval_sec: float = 1.0,
        ready_dismiss_sec: float = 3.0,
        failure_dismiss_sec: float = 8.0,
    ) -> None:
        self._bridge = bridge
        self._surface = surface
        self._t = translate
        self._logger = logger
        self._interval_sec = interval_sec
        self._ready_dismiss_sec = ready_dismiss_sec
        self._failure_dismiss_sec = failure_dismiss_sec

        self.state = ReadinessPollState(max_attempts=max_attempts)
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self) -> asyncio.Task:
        if self._task is not None:
            self._logger.info("env_poll_already_started", extra={"status": self.state.status.value})
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self.run())
        return self._task

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()

    async def run(self) -> ReadinessStatus:
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        stop_event = self._stop_event

        self._surface.set_env_indicator(ReadinessStatus.pending.value, self._t("env.initializing"))
        banner = f"{markup.span('spinner', '⏳')} {markup.escape(self._t('env.init_banner'))}"
        self._surface.show_banner("info", banner)

        while self.state.attempt < self.state.max_attempts:
            if stop_event.is_set():
                return self.state.status
            self.state.attempt += 1
            try:
                status = await self._bridge.get_environment_ready()
            except Exception as exc:  # noqa: BLE001
                self._logger.debug(
                    "env_poll_attempt_failed",
                    extra={"attempt": self.state.attempt, "error": str(exc)},
                )
            else:
                if status.ready:
                    return self._finish_ready()
                if status.error:
                    return self._finish_error(status.error)
            if self.state.attempt < self.state.max_attempts:
                await _sleep_or_stop(stop_event, self._interval_sec)

        if stop_event.is_set():
            return self.state.status
        return self._finish_timeout()

    def _finish_ready(self) -> ReadinessStatus:
        self.state.status = ReadinessStatus.ready
        self._surface.show_banner("success", markup.escape(self._t("env.init_success")))
        self._surface.set_env_indicator(ReadinessStatus.ready.value, self._t("env.ready"))
        self._surface.dismiss_banner_after(self._ready_dismiss_sec)
        self._logger.info("env_ready", extra={"attempt": self.state.attempt})
        return self.state.status

    def _finish_error(self, error: str) -> ReadinessStatus:
        self.state.status = ReadinessStatus.error
        self.state.error = error
        self._surface.show_banner(
            "error",
            f"{markup.escape(self._t('env.init_failed'))}: {markup.escape(error)}",
        )
        self._surface.set_env_indicator(ReadinessStatus.error.value, self._t("env.error"))
        self._surface.dismiss_banner_after(self._failure_dismiss_sec)
        self._logger.warning("env_init_failed", extra={"attempt": self.state.attempt, "error": error})
        return self.state.status

    def _finish_timeout(self) -> ReadinessStatus:
        self.state.status = ReadinessStatus.timed_out
        self._surface.show_banner("warning", markup.escape(self._t("env.init_timeout")))
        self._surface.set_env_indicator(ReadinessStatus.error.value, self._t("env.timeout"))
        self._surface.dismiss_banner_after(self._failure_dismiss_sec)
        self._logger.warning("env_init_timeout", extra={"attempts": self.state.attempt})
        return self.state.status
