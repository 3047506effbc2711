from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from logforge_shell import markup
from logforge_shell.config import SUPPORTED_LANGUAGES, normalize_language
from logforge_shell.models import BackendSettings, RemoteModelConfig
from logforge_shell.router import PageContext
from logforge_shell.ui.widgets import (
    FONT,
    PALETTE,
    TONE_COLORS,
    MarkupText,
    PageScope,
    card,
    directory_row,
    entry,
    field_label,
    page_header,
)


class SettingsForm:
    def __init__(self, container: tk.Frame, scope: PageScope) -> None:
        self.scope = scope
        self.loaded = BackendSettings()
        self._message_after: str | None = None
        t = scope.t

        page_header(container, t("settings.title"), t("settings.desc"))

        self.setup_banner: MarkupText | None = None
        if not scope.shell.configured:
            self.setup_banner = MarkupText(
                container,
                f'<span class="warning">{markup.escape(t("settings.setup_banner"))}</span>',
                bg=PALETTE["bg"],
                width=100,
            )
            self.setup_banner.pack(fill="x", pady=(0, 10))

        llm = card(container, t("settings.llm_config"))
        self.base_url_var = tk.StringVar()
        self.api_key_var = tk.StringVar()
        self.model_var = tk.StringVar()
        field_label(llm, t("settings.base_url"))
        entry(llm, self.base_url_var).pack(fill="x", padx=16, ipady=4)
        field_label(llm, t("settings.api_key"))
        entry(llm, self.api_key_var, show="•").pack(fill="x", padx=16, ipady=4)
        field_label(llm, t("settings.model"))
        entry(llm, self.model_var).pack(fill="x", padx=16, ipady=4)
        self.test_button = ttk.Button(llm, text=t("settings.test_connection"), command=self._on_test)
        self.test_button.pack(anchor="w", padx=16, pady=12)

        dirs = card(container, t("settings.default_dirs"))
        self.input_var = tk.StringVar()
        self.output_var = tk.StringVar()
        directory_row(
            dirs,
            t("settings.default_input_dir"),
            self.input_var,
            t("common.browse"),
            lambda: scope.spawn(self._pick(self.input_var, t("dir.select_default_input"))),
        )
        directory_row(
            dirs,
            t("settings.default_output_dir"),
            self.output_var,
            t("common.browse"),
            lambda: scope.spawn(self._pick(self.output_var, t("dir.select_default_output"))),
        )
        tk.Frame(dirs, bg=PALETTE["card"], height=8).pack()

        other = card(container, t("settings.other"))
        self.sample_lines_var = tk.StringVar(value="5")
        field_label(other, t("settings.sample_lines"))
        tk.Spinbox(
            other,
            from_=1,
            to=1000,
            textvariable=self.sample_lines_var,
            width=8,
            bg=PALETTE["input_bg"],
            fg=PALETTE["text"],
            buttonbackground=PALETTE["card"],
            relief="flat",
            font=FONT,
        ).pack(anchor="w", padx=16)
        self.show_wizard_var = tk.BooleanVar(value=True)
        ttk.Checkbutton(other, text=t("settings.show_wizard"), variable=self.show_wizard_var).pack(
            anchor="w", padx=16, pady=(10, 0)
        )
        field_label(other, t("settings.language"))
        self.language_var = tk.StringVar(value=scope.t.language)
        ttk.Combobox(other, textvariable=self.language_var, values=SUPPORTED_LANGUAGES, state="readonly", width=10).pack(
            anchor="w", padx=16, pady=(0, 12)
        )

        actions = tk.Frame(container, bg=PALETTE["bg"])
        actions.pack(fill="x")
        self.save_button = ttk.Button(
            actions, text=t("settings.save_settings"), style="Primary.TButton", command=self._on_save
        )
        self.save_button.pack(side="left")
        self.message_label = tk.Label(actions, text="", bg=PALETTE["bg"], fg=PALETTE["muted"], font=FONT)
        self.message_label.pack(side="left", padx=(12, 0))

    def apply(self, settings: BackendSettings, show_wizard: bool) -> None:
        self.loaded = settings
        self.base_url_var.set(settings.llm.base_url)
        self.api_key_var.set(settings.llm.api_key)
        self.model_var.set(settings.llm.model_name)
        self.input_var.set(settings.default_input_dir)
        self.output_var.set(settings.default_output_dir)
        self.sample_lines_var.set(str(settings.sample_lines))
        self.show_wizard_var.set(show_wizard)
        if settings.language:
            self.language_var.set(normalize_language(settings.language))

    def collect(self) -> BackendSettings:
        data = self.loaded.model_dump()
        data.update(
            llm=RemoteModelConfig(
                base_url=self.base_url_var.get().strip(),
                api_key=self.api_key_var.get().strip(),
                model_name=self.model_var.get().strip(),
            ).model_dump(),
            default_input_dir=self.input_var.get().strip(),
            default_output_dir=self.output_var.get().strip(),
            sample_lines=self.sample_lines_var.get(),
            language=self.language_var.get(),
        )
        return BackendSettings.model_validate(data)

    def show_message(self, text: str, tone: str = "muted") -> None:
        if not self.scope.alive:
            return
        self.message_label.configure(text=text, fg=TONE_COLORS.get(tone, PALETTE["muted"]))
        if self._message_after is not None:
            self.message_label.after_cancel(self._message_after)
        self._message_after = self.message_label.after(
            int(self.scope.shell.settings.message_dismiss_sec * 1000), self._clear_message
        )

    def _clear_message(self) -> None:
        self._message_after = None
        if self.scope.alive:
            self.message_label.configure(text="")

    async def load(self) -> None:
        shell = self.scope.shell
        try:
            settings = await shell.bridge.get_settings()
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("settings_load_failed", extra={"error": str(exc)})
            self.show_message(f"{self.scope.t('settings.load_failed')}: {exc}", "error")
            return
        try:
            show_wizard = await shell.bridge.get_show_wizard()
        except Exception as exc:  # noqa: BLE001
            shell.logger.info("wizard_check_failed", extra={"error": str(exc)})
            show_wizard = True
        if self.scope.alive:
            self.apply(settings, show_wizard)

    async def _pick(self, variable: tk.StringVar, prompt_title: str) -> None:
        try:
            path = await self.scope.shell.bridge.select_directory(prompt_title)
        except Exception as exc:  # noqa: BLE001
            self.scope.shell.logger.warning("select_directory_failed", extra={"error": str(exc)})
            return
        if path and self.scope.alive:
            variable.set(path)

    def _on_save(self) -> None:
        self.scope.spawn(self.save())

    def _on_test(self) -> None:
        self.scope.spawn(self.test_connection())

    async def save(self) -> bool:
        shell = self.scope.shell
        t = self.scope.t
        settings = self.collect()
        try:
            await shell.bridge.save_settings(settings)
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("settings_save_failed", extra={"error": str(exc)})
            self.show_message(f"{t('settings.save_failed')}: {exc}", "error")
            return False
        self.loaded = settings
        await shell.set_show_wizard(bool(self.show_wizard_var.get()))
        shell.logger.info("settings_saved")
        self.show_message(t("settings.saved"), "success")
        return True

    async def test_connection(self) -> bool:
        shell = self.scope.shell
        t = self.scope.t
        settings = self.collect()
        if not settings.llm.complete:
            await shell.dialogs.alert(t("settings.fill_llm_config"))
            return False

        self.test_button.state(["disabled"])
        self.show_message(t("settings.test_saving"), "info")
        try:
            await shell.bridge.save_settings(settings)
            self.loaded = settings
            await shell.bridge.test_remote_connection()
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("remote_connection_test_failed", extra={"error": str(exc)})
            if self.scope.alive:
                self.test_button.state(["!disabled"])
            self.show_message(f"{t('settings.test_failed')}: {exc}", "error")
            return False

        shell.logger.info("remote_connection_test_passed")
        if self.scope.alive:
            self.test_button.state(["!disabled"])
            if self.setup_banner is not None:
                self.setup_banner.destroy()
                self.setup_banner = None
        self.show_message(t("settings.test_success"), "success")
        shell.on_configured()
        return True


def render(container: tk.Frame, context: PageContext):
    scope = PageScope(container, context)
    form = SettingsForm(container, scope)
    scope.spawn(form.load())
    return scope.teardown
