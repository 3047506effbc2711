from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from logforge_shell.models import AnalysisResult
from logforge_shell.router import PageContext
from logforge_shell.ui.widgets import FONT, FONT_MONO, PALETTE, PageScope, badge, card, entry, field_label, page_header, set_badge


def render(container: tk.Frame, context: PageContext):
    scope = PageScope(container, context)
    t = scope.t

    page_header(container, t("sample.title"), t("sample.desc"))

    form = card(container)
    name_var = tk.StringVar()
    field_label(form, t("sample.project_name"))
    entry(form, name_var).pack(fill="x", padx=16, ipady=4)

    field_label(form, t("sample.input_label"))
    sample_text = tk.Text(
        form,
        height=8,
        bg=PALETTE["input_bg"],
        fg=PALETTE["text"],
        insertbackground=PALETTE["text"],
        relief="flat",
        font=FONT_MONO,
        wrap="none",
    )
    sample_text.pack(fill="x", padx=16)

    actions = tk.Frame(form, bg=PALETTE["card"])
    actions.pack(fill="x", padx=16, pady=12)
    analyze_button = ttk.Button(actions, text=t("sample.analyze"), style="Primary.TButton")
    analyze_button.pack(side="left")
    status_label = tk.Label(actions, text="", bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT)
    status_label.pack(side="left", padx=(12, 0))

    result_card = card(container, t("sample.result_title"))
    result_badge = badge(result_card)
    result_badge.pack(anchor="w", padx=16)
    errors_label = tk.Label(
        result_card, text="", bg=PALETTE["card"], fg=PALETTE["status_error"], font=FONT, justify="left", anchor="w"
    )
    errors_label.pack(fill="x", padx=16)
    code_text = tk.Text(
        result_card,
        height=14,
        bg=PALETTE["input_bg"],
        fg=PALETTE["text"],
        relief="flat",
        font=FONT_MONO,
        wrap="none",
        state="disabled",
    )
    code_text.pack(fill="both", expand=True, padx=16, pady=(6, 16))
    result_card.pack_forget()

    def show_result(result: AnalysisResult) -> None:
        if result.valid:
            set_badge(result_badge, f"✓ {t('sample.validated')}", "success")
        else:
            set_badge(result_badge, f"✗ {t('sample.not_validated')}", "error")
        errors_label.configure(text="\n".join(result.errors))
        code_text.configure(state="normal")
        code_text.delete("1.0", tk.END)
        code_text.insert(tk.END, result.code)
        code_text.configure(state="disabled")
        result_card.pack(fill="both", expand=True)

    async def analyze() -> None:
        name = name_var.get().strip()
        sample = sample_text.get("1.0", "end-1c").strip()
        if not name:
            await scope.shell.dialogs.alert(t("sample.enter_name"))
            return
        if not sample:
            await scope.shell.dialogs.alert(t("sample.enter_sample"))
            return

        analyze_button.state(["disabled"])
        status_label.configure(text=t("sample.analyzing"))
        try:
            result = await scope.shell.bridge.analyze_sample(name, sample)
        except Exception as exc:  # noqa: BLE001
            scope.shell.logger.warning("sample_analysis_failed", extra={"error": str(exc)})
            if scope.alive:
                status_label.configure(text="")
                analyze_button.state(["!disabled"])
                await scope.shell.dialogs.error(str(exc))
            return
        if not scope.alive:
            return
        status_label.configure(text="")
        analyze_button.state(["!disabled"])
        show_result(result)

    analyze_button.configure(command=lambda: scope.spawn(analyze()))
    return scope.teardown
