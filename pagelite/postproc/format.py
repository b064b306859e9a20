"""Best-effort pretty-printing for rendered page markup."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import List, Optional

from ..errors import FormattingError

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

PRESERVE_ELEMENTS = frozenset({"pre", "textarea", "script", "style"})


@dataclass
class FormatResult:
    """Formatted markup, or the raw markup plus the reason formatting failed."""

    markup: str
    formatted: bool = True
    warning: Optional[str] = None


@dataclass
class _Frame:
    tag: str
    line_index: int
    children: List[str] = field(default_factory=list)


class _IndentingParser(HTMLParser):
    """Re-emits markup one node per line, indented by nesting depth."""

    def __init__(self, indent: str) -> None:
        super().__init__(convert_charrefs=False)
        self.indent = indent
        self.lines: List[str] = []
        self._stack: List[_Frame] = []
        self._text: List[str] = []
        self._preserve: Optional[_Frame] = None
        self._preserve_buffer: List[str] = []

    # -- events ---------------------------------------------------------
    def handle_starttag(self, tag, attrs):  # type: ignore[override]
        raw = self.get_starttag_text() or f"<{tag}>"
        if self._preserve is not None:
            self._preserve_buffer.append(raw)
            if tag == self._preserve.tag:
                raise FormattingError(f"Nested <{tag}> inside preserved element")
            return
        self._flush_text()
        self._emit(raw, "element")
        if tag in VOID_ELEMENTS:
            return
        frame = _Frame(tag=tag, line_index=len(self.lines) - 1)
        self._stack.append(frame)
        if tag in PRESERVE_ELEMENTS:
            self._preserve = frame
            self._preserve_buffer = []

    def handle_startendtag(self, tag, attrs):  # type: ignore[override]
        raw = self.get_starttag_text() or f"<{tag} />"
        if self._preserve is not None:
            self._preserve_buffer.append(raw)
            return
        self._flush_text()
        self._emit(raw, "element")

    def handle_endtag(self, tag):  # type: ignore[override]
        if self._preserve is not None:
            if tag != self._preserve.tag:
                self._preserve_buffer.append(f"</{tag}>")
                return
            frame = self._stack.pop()
            self._preserve = None
            content = "".join(self._preserve_buffer)
            self._preserve_buffer = []
            line = self.lines[frame.line_index]
            if frame.tag in {"script", "style"}:
                content = content.strip("\n")
            self.lines[frame.line_index] = f"{line}{content}</{tag}>"
            return

        if tag in VOID_ELEMENTS:
            return
        self._flush_text()
        if not self._stack:
            raise FormattingError(f"Unexpected closing tag </{tag}>")
        frame = self._stack[-1]
        if frame.tag != tag:
            raise FormattingError(f"Mismatched closing tag </{tag}>; expected </{frame.tag}>")
        self._stack.pop()
        if not frame.children:
            self.lines[frame.line_index] += f"</{tag}>"
            return
        if frame.children == ["text"] and len(self.lines) == frame.line_index + 2:
            text = self.lines.pop().strip()
            self.lines[frame.line_index] += f"{text}</{tag}>"
            return
        self._emit(f"</{tag}>", None, depth=len(self._stack))

    def handle_data(self, data):  # type: ignore[override]
        if self._preserve is not None:
            self._preserve_buffer.append(data)
            return
        self._text.append(data)

    def handle_entityref(self, name):  # type: ignore[override]
        self.handle_data(f"&{name};")

    def handle_charref(self, name):  # type: ignore[override]
        self.handle_data(f"&#{name};")

    def handle_comment(self, data):  # type: ignore[override]
        if self._preserve is not None:
            self._preserve_buffer.append(f"<!--{data}-->")
            return
        self._flush_text()
        self._emit(f"<!--{data}-->", "comment")

    def handle_decl(self, decl):  # type: ignore[override]
        self._flush_text()
        self._emit(f"<!{decl}>", None)

    def handle_pi(self, data):  # type: ignore[override]
        self._verbatim(f"<?{data}>")

    def unknown_decl(self, data):  # type: ignore[override]
        self._verbatim(f"<![{data}]]>")

    # -- helpers ----------------------------------------------------------
    def finish(self) -> str:
        self.close()
        self._flush_text()
        if self._stack:
            unclosed = ", ".join(f"<{frame.tag}>" for frame in self._stack)
            raise FormattingError(f"Unclosed elements at end of document: {unclosed}")
        return "\n".join(self.lines) + "\n"

    def _verbatim(self, raw: str) -> None:
        if self._preserve is not None:
            self._preserve_buffer.append(raw)
            return
        self._flush_text()
        self._emit(raw, "element")

    def _flush_text(self) -> None:
        if not self._text:
            return
        text = " ".join("".join(self._text).split())
        self._text = []
        if text:
            self._emit(text, "text")

    def _emit(self, line: str, kind: Optional[str], *, depth: Optional[int] = None) -> None:
        level = len(self._stack) if depth is None else depth
        if kind is not None and self._stack:
            self._stack[-1].children.append(kind)
        self.lines.append(f"{self.indent * level}{line}")


class MarkupFormatter:
    """Pretty-prints markup; returns the raw input with a warning on failure."""

    def __init__(self, indent: str = "  ") -> None:
        self.indent = indent

    def format(self, markup: str) -> FormatResult:
        try:
            formatted = self._format(markup)
        except FormattingError as exc:
            return FormatResult(markup=markup, formatted=False, warning=str(exc))
        return FormatResult(markup=formatted, formatted=True)

    def _format(self, markup: str) -> str:
        normalized = markup.replace("\r\n", "\n").replace("\r", "\n")
        parser = _IndentingParser(self.indent)
        parser.feed(normalized)
        return parser.finish()


__all__ = ["FormatResult", "MarkupFormatter"]
