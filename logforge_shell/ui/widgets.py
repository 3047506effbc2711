from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Any, Awaitable, Callable

from logforge_shell import markup


PALETTE = {
    "bg": "#0F131C",
    "sidebar": "#0A0D14",
    "card": "#161C29",
    "border": "#2A3142",
    "title": "#F2F5FC",
    "text": "#D2DBEA",
    "muted": "#9AA6BF",
    "primary": "#3C7DEE",
    "primary_dark": "#2F63C0",
    "nav_active": "#1C2538",
    "overlay": "#05070B",
    "input_bg": "#0B101A",
    "status_ok": "#59D98C",
    "status_warn": "#F3A53A",
    "status_error": "#FF7E86",
    "status_info": "#66B0FF",
}

TONE_COLORS = {
    "success": PALETTE["status_ok"],
    "ready": PALETTE["status_ok"],
    "warning": PALETTE["status_warn"],
    "pending": PALETTE["status_warn"],
    "error": PALETTE["status_error"],
    "danger": PALETTE["status_error"],
    "info": PALETTE["status_info"],
    "muted": PALETTE["muted"],
}

FONT = ("Segoe UI", 11)
FONT_BOLD = ("Segoe UI", 11, "bold")
FONT_TITLE = ("Segoe UI", 18, "bold")
FONT_MONO = ("Consolas", 10)


class MarkupText(tk.Text):
    """Read-only text that renders the shell's markup into tags."""

    def __init__(self, parent: tk.Misc, markup_text: str = "", *, bg: str | None = None, **kwargs: Any) -> None:
        background = bg or PALETTE["card"]
        super().__init__(
            parent,
            bg=background,
            fg=PALETTE["text"],
            font=kwargs.pop("font", FONT),
            relief="flat",
            bd=0,
            highlightthickness=0,
            wrap="word",
            height=kwargs.pop("height", 1),
            width=kwargs.pop("width", 60),
            cursor="arrow",
            **kwargs,
        )
        self.tag_configure("bold", font=FONT_BOLD, foreground=PALETTE["title"])
        for tone, color in TONE_COLORS.items():
            self.tag_configure(tone, foreground=color)
        self.set_markup(markup_text)

    def set_markup(self, markup_text: str) -> None:
        self.configure(state="normal")
        self.delete("1.0", tk.END)
        for segment in markup.parse(markup_text):
            self.insert(tk.END, segment.text, segment.tags)
        lines = int(self.index("end-1c").split(".")[0])
        self.configure(height=max(1, lines), state="disabled")


def card(parent: tk.Misc, title: str = "") -> tk.Frame:
    frame = tk.Frame(parent, bg=PALETTE["card"], highlightthickness=1, highlightbackground=PALETTE["border"], bd=0)
    frame.pack(fill="x", pady=(0, 12))
    if title:
        tk.Label(frame, text=title, bg=PALETTE["card"], fg=PALETTE["title"], font=FONT_BOLD).pack(
            anchor="w", padx=16, pady=(12, 6)
        )
    return frame


def page_header(parent: tk.Misc, title: str, description: str = "") -> None:
    tk.Label(parent, text=title, bg=PALETTE["bg"], fg=PALETTE["title"], font=FONT_TITLE).pack(anchor="w")
    if description:
        tk.Label(parent, text=description, bg=PALETTE["bg"], fg=PALETTE["muted"], font=FONT).pack(
            anchor="w", pady=(2, 14)
        )


def field_label(parent: tk.Misc, text: str) -> None:
    tk.Label(parent, text=text, bg=PALETTE["card"], fg=PALETTE["muted"], font=FONT).pack(
        anchor="w", padx=16, pady=(6, 2)
    )


def entry(parent: tk.Misc, variable: tk.StringVar, show: str = "", readonly: bool = False) -> tk.Entry:
    widget = tk.Entry(
        parent,
        textvariable=variable,
        show=show,
        bg=PALETTE["input_bg"],
        fg=PALETTE["text"],
        readonlybackground=PALETTE["input_bg"],
        insertbackground=PALETTE["text"],
        relief="flat",
        font=FONT,
        state="readonly" if readonly else "normal",
    )
    return widget


def directory_row(
    parent: tk.Misc, label: str, variable: tk.StringVar, browse_label: str, on_browse: Callable[[], None]
) -> None:
    field_label(parent, label)
    row = tk.Frame(parent, bg=PALETTE["card"])
    row.pack(fill="x", padx=16, pady=(0, 6))
    entry(row, variable, readonly=True).pack(side="left", fill="x", expand=True, ipady=4)
    ttk.Button(row, text=browse_label, command=on_browse).pack(side="left", padx=(8, 0))


def badge(parent: tk.Misc, text: str = "", tone: str = "info") -> tk.Label:
    label = tk.Label(parent, text=text, bg=PALETTE["card"], fg=TONE_COLORS.get(tone, PALETTE["text"]), font=FONT_BOLD)
    return label


def set_badge(label: tk.Label, text: str, tone: str) -> None:
    label.configure(text=text, fg=TONE_COLORS.get(tone, PALETTE["text"]))


class PageScope:
    """Lifetime of one rendered page.

    Async work started through ``spawn`` checks ``alive`` before touching
    widgets, since the page may have been swapped out while it was waiting.
    """

    def __init__(self, container: tk.Misc, context: Any) -> None:
        self.container = container
        self.context = context
        self.shell = context.services
        self.t = self.shell.translate
        self.alive = True
        self._teardowns: list[Callable[[], None]] = []

    def spawn(self, coro: Awaitable[Any]):
        return self.shell.spawn(coro)

    def on_teardown(self, callback: Callable[[], None]) -> None:
        self._teardowns.append(callback)

    def teardown(self) -> None:
        if not self.alive:
            return
        self.alive = False
        for callback in self._teardowns:
            callback()
