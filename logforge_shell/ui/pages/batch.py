from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from logforge_shell.jobs import BatchJobController, JobSummary
from logforge_shell.models import JobStatus, JobTarget
from logforge_shell.router import PageContext
from logforge_shell.ui.widgets import (
    FONT,
    FONT_BOLD,
    FONT_MONO,
    PALETTE,
    PageScope,
    badge,
    card,
    directory_row,
    entry,
    field_label,
    page_header,
    set_badge,
)


class BatchPanel:
    """Batch page widgets; the progress half is driven by ``BatchJobController``."""

    def __init__(self, container: tk.Frame, scope: PageScope) -> None:
        self.scope = scope
        t = scope.t
        self.targets: list[JobTarget] = []

        page_header(container, t("batch.title"), t("batch.desc"))

        form = card(container)
        field_label(form, t("batch.select_project"))
        self.target_var = tk.StringVar(value=t("batch.select_project_placeholder"))
        self.target_box = ttk.Combobox(form, textvariable=self.target_var, state="readonly")
        self.target_box.pack(fill="x", padx=16)

        self.input_var = tk.StringVar()
        self.output_var = tk.StringVar()
        self.output_name_var = tk.StringVar()
        directory_row(form, t("batch.input_dir"), self.input_var, t("common.browse"), self._browse_input)
        directory_row(form, t("batch.output_dir"), self.output_var, t("common.browse"), self._browse_output)
        field_label(form, t("batch.output_name"))
        entry(form, self.output_name_var).pack(fill="x", padx=16, ipady=4)

        self.submit_button = ttk.Button(
            form, text=t("batch.start_processing"), style="Primary.TButton", command=self._on_submit
        )
        self.submit_button.pack(anchor="w", padx=16, pady=12)

        self.progress_card = card(container, t("batch.progress_title"))
        header = tk.Frame(self.progress_card, bg=PALETTE["card"])
        header.pack(fill="x", padx=16)
        self.status_badge = badge(header)
        self.status_badge.pack(side="left")
        self.percent_label = tk.Label(header, text="0%", bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_BOLD)
        self.percent_label.pack(side="right")
        self.progress_bar = ttk.Progressbar(
            self.progress_card, style="Progress.Horizontal.TProgressbar", maximum=100, mode="determinate"
        )
        self.progress_bar.pack(fill="x", padx=16, pady=6)
        self.current_label = tk.Label(
            self.progress_card, text="", bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT, anchor="w"
        )
        self.current_label.pack(fill="x", padx=16)
        tk.Label(
            self.progress_card, text=t("batch.log_title"), bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT
        ).pack(anchor="w", padx=16, pady=(8, 2))
        self.log_text = tk.Text(
            self.progress_card,
            height=10,
            bg=PALETTE["input_bg"],
            fg=PALETTE["text"],
            relief="flat",
            font=FONT_MONO,
            state="disabled",
        )
        self.log_text.pack(fill="both", expand=True, padx=16, pady=(0, 16))
        self.progress_card.pack_forget()

        self.result_card = card(container, t("batch.result_title"))
        self.result_card.pack_forget()

        self.controller = BatchJobController(
            scope.shell.bridge,
            scope.shell.dialogs,
            self,
            t,
            scope.shell.logger,
            interval_sec=scope.shell.settings.job_poll_interval_sec,
        )

    # -- ProgressView -----------------------------------------------------

    def reset_progress(self) -> None:
        if not self.scope.alive:
            return
        self.progress_card.pack(fill="both", expand=True)
        self.result_card.pack_forget()
        self.progress_bar.configure(value=0)
        self.percent_label.configure(text="0%")
        self.current_label.configure(text="")
        set_badge(self.status_badge, self.controller.status_label(JobStatus.running), "info")
        self.log_text.configure(state="normal")
        self.log_text.delete("1.0", tk.END)
        self.log_text.configure(state="disabled")

    def set_submit_enabled(self, enabled: bool) -> None:
        if self.scope.alive:
            self.submit_button.state(["!disabled"] if enabled else ["disabled"])

    def set_percent(self, percent: int) -> None:
        if self.scope.alive:
            self.progress_bar.configure(value=percent)
            self.percent_label.configure(text=f"{percent}%")

    def set_current_item(self, label: str) -> None:
        if self.scope.alive:
            self.current_label.configure(text=label)

    def set_status_badge(self, label: str, style: str) -> None:
        if self.scope.alive:
            set_badge(self.status_badge, label, style)

    def append_log(self, line: str) -> None:
        if not self.scope.alive:
            return
        self.log_text.configure(state="normal")
        self.log_text.insert(tk.END, line + "\n")
        self.log_text.see(tk.END)
        self.log_text.configure(state="disabled")

    def show_summary(self, summary: JobSummary) -> None:
        if not self.scope.alive:
            return
        t = self.scope.t
        for child in self.result_card.winfo_children():
            child.destroy()
        completed = summary.status is JobStatus.completed
        tk.Label(
            self.result_card,
            text=t("batch.completed") if completed else t("batch.processing_failed"),
            bg=PALETTE["card"],
            fg=PALETTE["status_ok"] if completed else PALETTE["status_error"],
            font=FONT_BOLD,
        ).pack(anchor="w", padx=16, pady=(12, 4))

        stats = tk.Frame(self.result_card, bg=PALETTE["card"])
        stats.pack(fill="x", padx=16)
        for label, value in (
            (t("batch.total_files"), summary.total_items),
            (t("batch.success"), summary.succeeded_items),
            (t("batch.failed"), summary.failed_items),
        ):
            cell = tk.Frame(stats, bg=PALETTE["card"])
            cell.pack(side="left", padx=(0, 24))
            tk.Label(cell, text=str(value), bg=PALETTE["card"], fg=PALETTE["title"], font=("Segoe UI", 16, "bold")).pack(
                anchor="w"
            )
            tk.Label(cell, text=label, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(anchor="w")

        if summary.message:
            tk.Label(
                self.result_card, text=summary.message, bg=PALETTE["card"], fg=PALETTE["text"], font=FONT, anchor="w"
            ).pack(fill="x", padx=16, pady=(8, 0))
        if summary.can_open_output:
            ttk.Button(
                self.result_card,
                text=t("batch.open_output"),
                command=lambda: self.scope.spawn(self.controller.open_output()),
            ).pack(anchor="w", padx=16, pady=(8, 0))
        tk.Frame(self.result_card, bg=PALETTE["card"], height=12).pack()
        self.result_card.pack(fill="x")

    # -- form -------------------------------------------------------------

    def set_targets(self, targets: list[JobTarget], selected_id: str | None = None) -> None:
        self.targets = targets
        labels = [target.label for target in targets]
        self.target_box.configure(values=labels)
        for target in targets:
            if selected_id and target.id == selected_id:
                self.target_var.set(target.label)
                break

    def selected_target_id(self) -> str:
        label = self.target_var.get()
        for target in self.targets:
            if target.label == label:
                return target.id
        return ""

    def _browse_input(self) -> None:
        self.scope.spawn(self._pick(self.input_var, self.scope.t("dir.select_input")))

    def _browse_output(self) -> None:
        self.scope.spawn(self._pick(self.output_var, self.scope.t("dir.select_output")))

    async def _pick(self, variable: tk.StringVar, prompt_title: str) -> None:
        try:
            path = await self.scope.shell.bridge.select_directory(prompt_title)
        except Exception as exc:  # noqa: BLE001
            self.scope.shell.logger.warning("select_directory_failed", extra={"error": str(exc)})
            return
        if path and self.scope.alive:
            variable.set(path)

    def _on_submit(self) -> None:
        self.scope.spawn(
            self.controller.submit(
                self.selected_target_id(),
                self.input_var.get(),
                self.output_var.get(),
                self.output_name_var.get(),
            )
        )

    async def load(self, selected_id: str | None) -> None:
        shell = self.scope.shell
        try:
            targets = await shell.bridge.list_job_targets()
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("job_targets_load_failed", extra={"error": str(exc)})
            targets = []
            if self.scope.alive:
                self.target_var.set(self.scope.t("batch.load_projects_failed"))
        if self.scope.alive:
            self.set_targets(targets, selected_id)

        try:
            backend_settings = await shell.bridge.get_settings()
        except Exception as exc:  # noqa: BLE001
            shell.logger.info("batch_defaults_unavailable", extra={"error": str(exc)})
            return
        if not self.scope.alive:
            return
        if backend_settings.default_input_dir and not self.input_var.get():
            self.input_var.set(backend_settings.default_input_dir)
        if backend_settings.default_output_dir and not self.output_var.get():
            self.output_var.set(backend_settings.default_output_dir)


def render(container: tk.Frame, context: PageContext):
    scope = PageScope(container, context)
    panel = BatchPanel(container, scope)
    scope.on_teardown(panel.controller.dispose)

    params = context.consume_params() or {}
    selected_id = str(params.get("target_id") or "") or None
    scope.spawn(panel.load(selected_id))
    return scope.teardown
