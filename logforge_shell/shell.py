from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, Callable, Protocol

from logforge_shell.bridge import BackendBridge
from logforge_shell.config import ShellSettings
from logforge_shell.dialogs import DialogPresenter, DialogService
from logforge_shell.i18n import Translator
from logforge_shell.readiness import ReadinessPoller, StatusSurface
from logforge_shell.router import Location, PageHost, PageRegistry, Router
from logforge_shell.state import PageId, ShellState


WIZARD_STEPS = (
    ("wizard.step1_title", "wizard.step1_desc"),
    ("wizard.step2_title", "wizard.step2_desc"),
    ("wizard.step3_title", "wizard.step3_desc"),
    ("wizard.step4_title", "wizard.step4_desc"),
)


@dataclass(frozen=True)
class WizardContent:
    title: str
    subtitle: str
    steps: tuple[tuple[str, str], ...]
    dont_show_label: str
    start_label: str


class WizardPresenter(Protocol):
    def present_wizard(self, content: WizardContent, on_close: Callable[[bool], None]) -> None:
        """Show the wizard; call ``on_close(dont_show_again)`` once when it closes."""


class ShellView(PageHost, DialogPresenter, StatusSurface, WizardPresenter, Protocol):
    """Everything the controller needs from the window."""


class ShellController:
    """Owns the shell state and wires router, dialogs and pollers together."""

    def __init__(
        self,
        bridge: BackendBridge,
        view: ShellView,
        registry: PageRegistry,
        settings: ShellSettings,
        logger: logging.Logger,
        translate: Translator | None = None,
        location: Location | None = None,
    ) -> None:
        self.bridge = bridge
        self.view = view
        self.settings = settings
        self.logger = logger
        self.translate = translate or Translator(settings.language)
        self.state = ShellState()

        self.dialogs = DialogService(view, self.translate, logger)
        self.location = location or Location()
        self.router = Router(
            registry,
            view,
            self.location,
            logger,
            state=self.state.navigation,
            services=self,
        )
        self.readiness = ReadinessPoller(
            bridge,
            view,
            self.translate,
            logger,
            max_attempts=settings.env_poll_max_attempts,
            interval_sec=settings.env_poll_interval_sec,
            ready_dismiss_sec=settings.env_ready_dismiss_sec,
            failure_dismiss_sec=settings.env_failure_dismiss_sec,
        )
        self.state.readiness = self.readiness.state

        self._post_config_started = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def configured(self) -> bool:
        return self.router.configured

    async def start(self) -> None:
        configured = await self._query_configured()
        self.router.set_configured(configured)
        self.state.touch("bootstrap_configured" if configured else "bootstrap_unconfigured")
        self.logger.info("shell_bootstrap", extra={"configured": configured})

        if not configured:
            self.router.force_settings()
            return

        self.router.evaluate_route(self.location.token)
        if self._claim_post_config():
            await self._run_post_config()

    def on_configured(self) -> asyncio.Task | None:
        """Called once a connection test succeeds in settings."""
        self.router.set_configured(True)
        self.state.touch("configured")
        if not self._claim_post_config():
            return None
        return self.spawn(self._run_post_config())

    def _claim_post_config(self) -> bool:
        if self._post_config_started:
            return False
        self._post_config_started = True
        return True

    async def _run_post_config(self) -> None:
        self.readiness.start()
        await self.maybe_show_wizard()

    async def _query_configured(self) -> bool:
        try:
            return bool(await self.bridge.is_configured())
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("config_check_failed", extra={"error": str(exc)})
            return False

    async def maybe_show_wizard(self) -> bool:
        try:
            show = bool(await self.bridge.get_show_wizard())
        except Exception as exc:  # noqa: BLE001
            self.logger.info("wizard_check_failed", extra={"error": str(exc)})
            self.state.wizard_status = "skipped"
            return False
        if not show:
            self.state.wizard_status = "hidden"
            return False
        self.state.wizard_status = "shown"
        await self.show_wizard()
        return True

    async def show_wizard(self) -> bool:
        loop = asyncio.get_running_loop()
        closed: asyncio.Future[bool] = loop.create_future()

        def on_close(dont_show: bool) -> None:
            if not closed.done():
                closed.set_result(bool(dont_show))

        self.view.present_wizard(self.wizard_content(), on_close)
        dont_show = await closed
        self.state.wizard_status = "closed"
        if dont_show:
            await self.set_show_wizard(False)
        return dont_show

    async def set_show_wizard(self, show: bool) -> None:
        try:
            await self.bridge.set_show_wizard(show)
        except Exception as exc:  # noqa: BLE001
            self.logger.info("wizard_pref_save_failed", extra={"error": str(exc)})

    def wizard_content(self) -> WizardContent:
        t = self.translate
        return WizardContent(
            title=t("wizard.welcome"),
            subtitle=t("wizard.subtitle"),
            steps=tuple((t(title), t(desc)) for title, desc in WIZARD_STEPS),
            dont_show_label=t("wizard.dont_show"),
            start_label=t("wizard.start"),
        )

    def navigate(self, page: PageId | str, params: dict[str, Any] | None = None) -> None:
        if params is None:
            self.router.navigate(page)
        else:
            self.router.navigate(page, params)

    def spawn(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error("shell_task_failed", exc_info=exc)

    async def shutdown(self) -> None:
        self.router.shutdown()
        self.readiness.stop()
        for task in list(self._tasks):
            task.cancel()
        pending = [task for task in self._tasks]
        if self.readiness.task is not None:
            pending.append(self.readiness.task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self.bridge.close()
