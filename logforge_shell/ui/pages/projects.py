from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from logforge_shell.models import JobTarget
from logforge_shell.router import PageContext
from logforge_shell.state import PageId
from logforge_shell.ui.widgets import FONT, FONT_BOLD, FONT_MONO, PALETTE, PageScope, badge, card, page_header

STATUS_TONES = {
    "draft": "muted",
    "validated": "success",
    "executed": "info",
    "failed": "error",
}


def _status_label(t, status: str) -> str:
    key = f"projects.status.{status}"
    label = t(key)
    return status if label == key else label


def _readonly_text(parent: tk.Misc, content: str, height: int) -> tk.Text:
    text = tk.Text(
        parent,
        height=height,
        bg=PALETTE["input_bg"],
        fg=PALETTE["text"],
        relief="flat",
        font=FONT_MONO,
        wrap="none",
    )
    text.insert(tk.END, content)
    text.configure(state="disabled")
    return text


def render(container: tk.Frame, context: PageContext):
    scope = PageScope(container, context)
    t = scope.t
    shell = scope.shell

    page_header(container, t("projects.title"), t("projects.desc"))
    body = tk.Frame(container, bg=PALETTE["bg"])
    body.pack(fill="both", expand=True)

    def clear_body() -> None:
        for child in body.winfo_children():
            child.destroy()

    def show_message(text: str, hint: str = "") -> None:
        clear_body()
        box = card(body)
        tk.Label(box, text=text, bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_BOLD).pack(padx=16, pady=(16, 4))
        if hint:
            tk.Label(box, text=hint, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(padx=16, pady=(0, 16))

    def show_list(targets: list[JobTarget]) -> None:
        if not targets:
            show_message(t("projects.empty"), t("projects.empty_hint"))
            return
        clear_body()
        table = card(body)
        header = tk.Frame(table, bg=PALETTE["card"])
        header.pack(fill="x", padx=16, pady=(12, 4))
        for column, width in ((t("projects.name"), 32), (t("projects.status"), 14), (t("projects.created_at"), 20)):
            tk.Label(
                header, text=column, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT, width=width, anchor="w"
            ).pack(side="left")

        for target in targets:
            row = tk.Frame(table, bg=PALETTE["card"])
            row.pack(fill="x", padx=16, pady=2)
            tk.Label(
                row, text=target.label, bg=PALETTE["card"], fg=PALETTE["text"], font=FONT, width=32, anchor="w"
            ).pack(side="left")
            status = badge(row, _status_label(t, target.status), STATUS_TONES.get(target.status, "info"))
            status.configure(width=14, anchor="w")
            status.pack(side="left")
            created = target.created_at.strftime("%Y-%m-%d %H:%M") if target.created_at else "-"
            tk.Label(row, text=created, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT, width=20, anchor="w").pack(
                side="left"
            )
            ttk.Button(
                row, text=t("projects.view"), command=lambda target_id=target.id: scope.spawn(open_detail(target_id))
            ).pack(side="right")
        tk.Frame(table, bg=PALETTE["card"], height=10).pack()

    def show_detail(target: JobTarget) -> None:
        clear_body()
        ttk.Button(body, text=t("projects.back"), command=lambda: scope.spawn(load_list())).pack(
            anchor="w", pady=(0, 8)
        )
        detail = card(body, t("projects.detail_title"))
        info = tk.Frame(detail, bg=PALETTE["card"])
        info.pack(fill="x", padx=16)
        tk.Label(info, text=target.label, bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_BOLD).pack(side="left")
        badge(info, _status_label(t, target.status), STATUS_TONES.get(target.status, "info")).pack(
            side="left", padx=(12, 0)
        )

        tk.Label(detail, text=t("projects.sample_data"), bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(
            anchor="w", padx=16, pady=(10, 2)
        )
        _readonly_text(detail, target.sample_data, 6).pack(fill="x", padx=16)
        tk.Label(detail, text=t("projects.code"), bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(
            anchor="w", padx=16, pady=(10, 2)
        )
        _readonly_text(detail, target.code, 14).pack(fill="both", expand=True, padx=16)

        actions = tk.Frame(detail, bg=PALETTE["card"])
        actions.pack(fill="x", padx=16, pady=12)
        ttk.Button(
            actions,
            text=t("projects.run_batch"),
            style="Primary.TButton",
            command=lambda: context.navigate(PageId.batch, {"target_id": target.id}),
        ).pack(side="left")
        ttk.Button(actions, text=t("projects.delete_project"), command=lambda: scope.spawn(delete(target))).pack(
            side="right"
        )

    async def load_list() -> None:
        try:
            targets = await shell.bridge.list_job_targets()
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("job_targets_load_failed", extra={"error": str(exc)})
            if scope.alive:
                show_message(t("projects.load_failed"), str(exc))
            return
        if scope.alive:
            show_list(targets)

    async def open_detail(target_id: str) -> None:
        try:
            target = await shell.bridge.get_job_target(target_id)
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("job_target_load_failed", extra={"target_id": target_id, "error": str(exc)})
            if scope.alive:
                await shell.dialogs.error(f"{t('projects.load_failed')}: {exc}")
            return
        if scope.alive:
            show_detail(target)

    async def delete(target: JobTarget) -> None:
        if not await shell.dialogs.confirm(t("projects.delete_confirm")):
            return
        try:
            await shell.bridge.delete_job_target(target.id)
        except Exception as exc:  # noqa: BLE001
            shell.logger.warning("job_target_delete_failed", extra={"target_id": target.id, "error": str(exc)})
            await shell.dialogs.error(f"{t('projects.delete_failed')}: {exc}")
            return
        shell.logger.info("job_target_deleted", extra={"target_id": target.id})
        if scope.alive:
            await load_list()

    show_message(t("common.loading"))
    scope.spawn(load_list())
    return scope.teardown
