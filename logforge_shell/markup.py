"""Tiny markup used for shell-authored rich text.

Dialogs, banners and result panels are composed as short markup strings
(``<b>``, ``<br>``, ``<span class="...">``) and rendered by the window into
tagged text. Any text that comes from the user or the backend must pass
through :func:`escape` before it is embedded, so it always renders literally.
"""

from __future__ import annotations

from dataclasses import dataclass
import html
from html.parser import HTMLParser


ALLOWED_TAGS = {"b", "span"}


def escape(text: object) -> str:
    return html.escape(str(text if text is not None else ""), quote=True)


def span(css_class: str, inner: str) -> str:
    return f'<span class="{escape(css_class)}">{inner}</span>'


@dataclass(frozen=True)
class Segment:
    text: str
    tags: tuple[str, ...] = ()


class _SegmentParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.segments: list[Segment] = []
        self._stack: list[str] = []

    def _active_tags(self) -> tuple[str, ...]:
        return tuple(tag for tag in self._stack if tag)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "br":
            self.segments.append(Segment("\n", self._active_tags()))
            return
        if tag not in ALLOWED_TAGS:
            self._stack.append("")
            return
        if tag == "b":
            self._stack.append("bold")
            return
        css_class = dict(attrs).get("class") or ""
        self._stack.append(css_class.strip())

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "br":
            self.segments.append(Segment("\n", self._active_tags()))

    def handle_endtag(self, tag: str) -> None:
        if tag == "br":
            return
        if self._stack:
            self._stack.pop()

    def handle_data(self, data: str) -> None:
        if data:
            self.segments.append(Segment(data, self._active_tags()))


def parse(markup: str) -> list[Segment]:
    parser = _SegmentParser()
    parser.feed(markup)
    parser.close()
    return parser.segments


def plain_text(markup: str) -> str:
    return "".join(segment.text for segment in parse(markup))
