"""Modal dialogs that hand the user's choice back as an awaitable result.

``await dialogs.show(kind, message)`` suspends only the calling coroutine;
other tasks (pollers, timers) keep running while the dialog is open. Requests
from concurrent callers are serialised so at most one dialog is on screen.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Callable, Protocol

from logforge_shell import markup
from logforge_shell.i18n import Translator


class DialogKind(StrEnum):
    warning = "warning"
    error = "error"
    info = "info"
    confirm = "confirm"


class DialogChoice(StrEnum):
    affirm = "affirm"
    negate = "negate"
    backdrop = "backdrop"


ICONS = {
    DialogKind.warning: "⚠️",
    DialogKind.error: "❌",
    DialogKind.info: "ℹ️",
    DialogKind.confirm: "❓",
}

TITLE_KEYS = {
    DialogKind.warning: "dialog.warning",
    DialogKind.error: "dialog.error",
    DialogKind.info: "dialog.info",
    DialogKind.confirm: "dialog.confirm",
}


@dataclass(frozen=True)
class DialogRequest:
    kind: DialogKind
    title: str
    message: str


@dataclass(frozen=True)
class DialogButton:
    label: str
    choice: DialogChoice
    primary: bool = False


@dataclass(frozen=True)
class RenderedDialog:
    kind: DialogKind
    icon: str
    title_markup: str
    message_markup: str
    buttons: tuple[DialogButton, ...] = field(default_factory=tuple)


class DialogPresenter(Protocol):
    def present_dialog(self, dialog: RenderedDialog, on_choice: Callable[[DialogChoice], None]) -> None:
        """Show ``dialog`` and call ``on_choice`` when the user acts on it."""

    def dismiss_dialog(self) -> None:
        """Remove the open dialog, if any, without calling its callback."""


def resolve_choice(kind: DialogKind, choice: DialogChoice) -> bool:
    if kind is DialogKind.confirm:
        return choice is DialogChoice.affirm
    return True


def render_dialog(request: DialogRequest, translate: Translator) -> RenderedDialog:
    if request.kind is DialogKind.confirm:
        buttons = (
            DialogButton(translate("common.cancel"), DialogChoice.negate),
            DialogButton(translate("common.confirm"), DialogChoice.affirm, primary=True),
        )
    else:
        buttons = (DialogButton(translate("common.ok"), DialogChoice.affirm, primary=True),)
    return RenderedDialog(
        kind=request.kind,
        icon=ICONS.get(request.kind, ICONS[DialogKind.info]),
        title_markup=f"<b>{markup.escape(request.title)}</b>",
        message_markup=markup.escape(request.message).replace("\n", "<br>"),
        buttons=buttons,
    )


class DialogService:
    def __init__(self, presenter: DialogPresenter, translate: Translator, logger: logging.Logger) -> None:
        self._presenter = presenter
        self._translate = translate
        self._logger = logger
        self._lock = asyncio.Lock()

    def build_request(self, kind: DialogKind | str, message: str, title: str | None = None) -> DialogRequest:
        kind = DialogKind(kind)
        resolved_title = title or self._translate(TITLE_KEYS.get(kind, "dialog.info"))
        return DialogRequest(kind=kind, title=resolved_title, message=str(message))

    async def show(self, kind: DialogKind | str, message: str, title: str | None = None) -> bool:
        request = self.build_request(kind, message, title)
        async with self._lock:
            return await self._present(request)

    async def _present(self, request: DialogRequest) -> bool:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[bool] = loop.create_future()

        def on_choice(choice: DialogChoice) -> None:
            if future.cancelled():
                self._logger.debug("dialog_choice_after_cancel", extra={"kind": str(request.kind)})
                return
            if future.done():
                self._logger.warning(
                    "dialog_resolved_twice",
                    extra={"kind": str(request.kind), "choice": str(choice)},
                )
                return
            future.set_result(resolve_choice(request.kind, DialogChoice(choice)))

        self._presenter.present_dialog(render_dialog(request, self._translate), on_choice)
        try:
            result = await future
        except asyncio.CancelledError:
            self._presenter.dismiss_dialog()
            raise
        self._logger.debug("dialog_resolved", extra={"kind": str(request.kind), "result": result})
        return result

    async def alert(self, message: str, title: str | None = None) -> bool:
        return await self.show(DialogKind.warning, message, title)

    async def error(self, message: str, title: str | None = None) -> bool:
        return await self.show(DialogKind.error, message, title)

    async def info(self, message: str, title: str | None = None) -> bool:
        return await self.show(DialogKind.info, message, title)

    async def confirm(self, message: str, title: str | None = None) -> bool:
        return await self.show(DialogKind.confirm, message, title)
