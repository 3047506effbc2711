from __future__ import annotations

import asyncio
import logging
import tkinter as tk
from tkinter import filedialog, ttk
from typing import Callable

from logforge_shell.bridge import HttpBackendBridge
from logforge_shell.config import ShellSettings, ensure_dirs, get_log_dir, get_settings, normalize_language
from logforge_shell.dialogs import DialogChoice, RenderedDialog
from logforge_shell.i18n import Translator
from logforge_shell.logger import setup_logging
from logforge_shell.router import PageRegistry
from logforge_shell.shell import ShellController, WizardContent
from logforge_shell.state import NAV_ORDER, PageId
from logforge_shell.ui.pages import register_pages
from logforge_shell.ui.widgets import FONT, FONT_BOLD, FONT_TITLE, PALETTE, TONE_COLORS, MarkupText


class ShellWindow(tk.Tk):
    PUMP_INTERVAL_SEC = 0.02

    def __init__(self, translate: Translator, logger: logging.Logger) -> None:
        super().__init__()
        self._t = translate
        self._logger = logger
        self._controller: ShellController | None = None
        self._closed = False

        self._nav_buttons: dict[PageId, tk.Label] = {}
        self._nav_enabled = False
        self._active_page: PageId | None = None
        self._banner: tk.Frame | None = None
        self._banner_text: MarkupText | None = None
        self._banner_after: str | None = None
        self._dialog_overlay: tk.Frame | None = None

        self.title(f"{translate('app.title')} - {translate('app.subtitle')}")
        self.configure(bg=PALETTE["bg"])
        self.geometry("1180x780")
        self.minsize(900, 600)
        self.protocol("WM_DELETE_WINDOW", self._request_close)

        self._init_style()
        self._build_ui()

    def _init_style(self) -> None:
        style = ttk.Style(self)
        if "clam" in style.theme_names():
            style.theme_use("clam")
        style.configure("TButton", font=FONT, padding=(10, 4))
        style.configure("Primary.TButton", font=FONT_BOLD, foreground="#FFFFFF", background=PALETTE["primary"])
        style.map("Primary.TButton", background=[("active", PALETTE["primary_dark"]), ("disabled", PALETTE["border"])])
        style.configure("TCheckbutton", background=PALETTE["card"], foreground=PALETTE["text"], font=FONT)
        style.configure("TCombobox", fieldbackground=PALETTE["input_bg"], foreground=PALETTE["text"])
        style.configure(
            "Progress.Horizontal.TProgressbar",
            troughcolor=PALETTE["input_bg"],
            background=PALETTE["primary"],
            thickness=10,
        )

    def _build_ui(self) -> None:
        self._sidebar = tk.Frame(self, bg=PALETTE["sidebar"], width=220)
        self._sidebar.pack(side="left", fill="y")
        self._sidebar.pack_propagate(False)

        tk.Label(
            self._sidebar, text=self._t("app.title"), bg=PALETTE["sidebar"], fg=PALETTE["title"], font=FONT_TITLE
        ).pack(anchor="w", padx=18, pady=(20, 0))
        tk.Label(
            self._sidebar, text=self._t("app.subtitle"), bg=PALETTE["sidebar"], fg=PALETTE["muted"], font=FONT
        ).pack(anchor="w", padx=18, pady=(0, 18))

        for page_id in NAV_ORDER:
            button = tk.Label(
                self._sidebar,
                text=self._t(f"nav.{page_id.value}"),
                bg=PALETTE["sidebar"],
                fg=PALETTE["muted"],
                font=FONT,
                anchor="w",
                padx=18,
                pady=8,
                cursor="hand2",
            )
            button.pack(fill="x")
            button.bind("<Button-1>", lambda _event, page=page_id: self._on_nav_click(page))
            self._nav_buttons[page_id] = button

        env_row = tk.Frame(self._sidebar, bg=PALETTE["sidebar"])
        env_row.pack(side="bottom", fill="x", padx=18, pady=16)
        self._env_dot = tk.Label(env_row, text="●", bg=PALETTE["sidebar"], fg=PALETTE["muted"], font=FONT)
        self._env_dot.pack(side="left")
        self._env_label = tk.Label(
            env_row, text=self._t("env.checking"), bg=PALETTE["sidebar"], fg=PALETTE["muted"], font=FONT
        )
        self._env_label.pack(side="left", padx=(6, 0))

        self._main = tk.Frame(self, bg=PALETTE["bg"])
        self._main.pack(side="left", fill="both", expand=True)

        self._banner_slot = tk.Frame(self._main, bg=PALETTE["bg"])
        self._banner_slot.pack(fill="x", padx=24, pady=(12, 0))

        self._page_container = tk.Frame(self._main, bg=PALETTE["bg"])
        self._page_container.pack(fill="both", expand=True, padx=24, pady=16)

        self.set_nav_enabled(False)

    def bind_controller(self, controller: ShellController) -> None:
        self._controller = controller

    def _on_nav_click(self, page_id: PageId) -> None:
        if self._controller is None:
            return
        self._controller.router.request(page_id)

    # -- PageHost ---------------------------------------------------------

    def clear_page(self) -> tk.Frame:
        for child in self._page_container.winfo_children():
            child.destroy()
        return self._page_container

    def mark_active(self, page_id: PageId) -> None:
        self._active_page = page_id
        self._refresh_nav()

    def set_nav_enabled(self, configured: bool) -> None:
        self._nav_enabled = configured
        self._refresh_nav()

    def _refresh_nav(self) -> None:
        for page_id, button in self._nav_buttons.items():
            enabled = self._nav_enabled or page_id is PageId.settings
            active = page_id is self._active_page
            button.configure(
                bg=PALETTE["nav_active"] if active else PALETTE["sidebar"],
                fg=PALETTE["title"] if active else (PALETTE["muted"] if enabled else PALETTE["border"]),
                cursor="hand2" if enabled else "arrow",
            )

    # -- StatusSurface ----------------------------------------------------

    def show_banner(self, level: str, markup_text: str) -> None:
        if self._banner is None:
            self._banner = tk.Frame(self._banner_slot, bg=PALETTE["card"], highlightthickness=1)
            self._banner.pack(fill="x")
            self._banner_text = MarkupText(self._banner, bg=PALETTE["card"])
            self._banner_text.pack(fill="x", padx=12, pady=8)
        if self._banner_after is not None:
            self.after_cancel(self._banner_after)
            self._banner_after = None
        self._banner.configure(highlightbackground=TONE_COLORS.get(level, PALETTE["border"]))
        assert self._banner_text is not None
        self._banner_text.set_markup(markup_text)

    def dismiss_banner_after(self, seconds: float) -> None:
        if self._banner_after is not None:
            self.after_cancel(self._banner_after)
        self._banner_after = self.after(int(seconds * 1000), self._hide_banner)

    def _hide_banner(self) -> None:
        self._banner_after = None
        if self._banner is not None:
            self._banner.destroy()
        self._banner = None
        self._banner_text = None

    def set_env_indicator(self, status: str, label: str) -> None:
        self._env_dot.configure(fg=TONE_COLORS.get(status, PALETTE["muted"]))
        self._env_label.configure(text=label)

    # -- DialogPresenter / WizardPresenter --------------------------------

    def _overlay(self) -> tk.Frame:
        overlay = tk.Frame(self, bg=PALETTE["overlay"])
        overlay.place(relx=0, rely=0, relwidth=1, relheight=1)
        overlay.lift()
        return overlay

    def present_dialog(self, dialog: RenderedDialog, on_choice: Callable[[DialogChoice], None]) -> None:
        overlay = self._overlay()
        self._dialog_overlay = overlay
        box = tk.Frame(overlay, bg=PALETTE["card"], highlightthickness=1, highlightbackground=PALETTE["border"])
        box.place(relx=0.5, rely=0.4, anchor="center")

        body = tk.Frame(box, bg=PALETTE["card"])
        body.pack(fill="x", padx=20, pady=(18, 8))
        tk.Label(body, text=dialog.icon, bg=PALETTE["card"], fg=PALETTE["text"], font=("Segoe UI", 20)).pack(
            side="left", anchor="n", padx=(0, 12)
        )
        content = tk.Frame(body, bg=PALETTE["card"])
        content.pack(side="left", fill="x")
        MarkupText(content, dialog.title_markup, width=44).pack(anchor="w")
        MarkupText(content, dialog.message_markup, width=44).pack(anchor="w", pady=(4, 0))

        footer = tk.Frame(box, bg=PALETTE["card"])
        footer.pack(fill="x", padx=20, pady=(4, 16))

        def close(choice: DialogChoice) -> None:
            if self._dialog_overlay is overlay:
                self._dialog_overlay = None
            if overlay.winfo_exists():
                overlay.destroy()
            on_choice(choice)

        primary: ttk.Button | None = None
        for button in reversed(dialog.buttons):
            widget = ttk.Button(
                footer,
                text=button.label,
                style="Primary.TButton" if button.primary else "TButton",
                command=lambda choice=button.choice: close(choice),
            )
            widget.pack(side="right", padx=(8, 0))
            if button.primary:
                primary = widget

        overlay.bind("<Button-1>", lambda event: close(DialogChoice.backdrop) if event.widget is overlay else None)
        overlay.bind("<Escape>", lambda _event: close(DialogChoice.backdrop))
        if primary is not None:
            primary.focus_set()
            primary.bind("<Return>", lambda _event: close(DialogChoice.affirm))
            primary.bind("<Escape>", lambda _event: close(DialogChoice.backdrop))

    def dismiss_dialog(self) -> None:
        overlay, self._dialog_overlay = self._dialog_overlay, None
        if overlay is not None and overlay.winfo_exists():
            overlay.destroy()

    def present_wizard(self, content: WizardContent, on_close: Callable[[bool], None]) -> None:
        overlay = self._overlay()
        box = tk.Frame(overlay, bg=PALETTE["card"], highlightthickness=1, highlightbackground=PALETTE["border"])
        box.place(relx=0.5, rely=0.45, anchor="center")

        tk.Label(box, text="🚀", bg=PALETTE["card"], fg=PALETTE["text"], font=("Segoe UI", 26)).pack(pady=(20, 0))
        tk.Label(box, text=content.title, bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_TITLE).pack()
        tk.Label(box, text=content.subtitle, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(pady=(0, 12))

        for index, (title, description) in enumerate(content.steps, start=1):
            row = tk.Frame(box, bg=PALETTE["card"])
            row.pack(fill="x", padx=28, pady=4)
            tk.Label(row, text=str(index), bg=PALETTE["primary"], fg="#FFFFFF", font=FONT_BOLD, width=2).pack(
                side="left", anchor="n"
            )
            text = tk.Frame(row, bg=PALETTE["card"])
            text.pack(side="left", padx=(10, 0))
            tk.Label(text, text=title, bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_BOLD).pack(anchor="w")
            tk.Label(
                text, text=description, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT, wraplength=420, justify="left"
            ).pack(anchor="w")

        footer = tk.Frame(box, bg=PALETTE["card"])
        footer.pack(fill="x", padx=28, pady=(12, 20))
        dont_show = tk.BooleanVar(value=False)
        ttk.Checkbutton(footer, text=content.dont_show_label, variable=dont_show).pack(side="left")

        def close() -> None:
            checked = bool(dont_show.get())
            if overlay.winfo_exists():
                overlay.destroy()
            on_close(checked)

        ttk.Button(footer, text=content.start_label, style="Primary.TButton", command=close).pack(side="right")
        overlay.bind("<Button-1>", lambda event: close() if event.widget is overlay else None)

    # -- host services ----------------------------------------------------

    def ask_directory(self, prompt_title: str) -> str:
        return filedialog.askdirectory(parent=self, title=prompt_title, mustexist=True) or ""

    # -- loop ---------------------------------------------------------------

    def _request_close(self) -> None:
        self._closed = True

    async def run_async(self, controller: ShellController) -> None:
        self.bind_controller(controller)
        controller.spawn(controller.start())
        try:
            while not self._closed:
                try:
                    self.update()
                except tk.TclError:
                    break
                await asyncio.sleep(self.PUMP_INTERVAL_SEC)
        finally:
            await controller.shutdown()
            try:
                self.destroy()
            except tk.TclError:
                pass


async def _resolve_language(bridge: HttpBackendBridge, settings: ShellSettings, logger: logging.Logger) -> str:
    if settings.language:
        return settings.language
    try:
        backend_settings = await bridge.get_settings()
    except Exception as exc:  # noqa: BLE001
        logger.info("language_lookup_failed", extra={"error": str(exc)})
        return ""
    return normalize_language(backend_settings.language)


async def _run(settings: ShellSettings, logger: logging.Logger) -> None:
    bridge = HttpBackendBridge(
        settings.base_api_url,
        settings.request_timeout_sec,
        logger,
        retries=settings.request_retries,
    )
    translate = Translator(await _resolve_language(bridge, settings, logger))

    window = ShellWindow(translate, logger)
    bridge.set_directory_picker(window.ask_directory)

    registry = PageRegistry()
    register_pages(registry)
    controller = ShellController(bridge, window, registry, settings, logger, translate=translate)
    await window.run_async(controller)


def run_ui() -> None:
    settings = get_settings()
    ensure_dirs()
    logger = setup_logging(get_log_dir(), settings.log_level)
    logger.info("shell_starting", extra={"backend_url": settings.base_api_url})
    asyncio.run(_run(settings, logger))
