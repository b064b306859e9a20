"""Per-page render state consumed by the Island helper."""

from __future__ import annotations

import posixpath
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, Optional

from ..errors import RenderError
from ..models import IslandReference

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..catalog import ComponentCatalog

HYDRATION_BUNDLE = "islandRender.js"


class IslandCounter:
    """Assigns island instance ids; one counter is owned by each build."""

    def __init__(self, start: int = 0) -> None:
        self._value = start

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value

    def reset(self) -> None:
        self._value = 0


@dataclass
class RenderContext:
    """State shared between the page renderer and islands on that page."""

    counter: IslandCounter
    page_output: str = "index.html"
    catalog: Optional["ComponentCatalog"] = None
    bundle_name: str = HYDRATION_BUNDLE
    islands: List[IslandReference] = field(default_factory=list)

    @property
    def script_src(self) -> str:
        """Path from the page to the hydration bundle in the output root."""
        page_dir = posixpath.dirname(self.page_output)
        if not page_dir:
            return f"./{self.bundle_name}"
        return posixpath.relpath(self.bundle_name, page_dir)


_current: ContextVar[Optional[RenderContext]] = ContextVar("pagelite_render_context", default=None)


@contextmanager
def render_context(context: RenderContext) -> Iterator[RenderContext]:
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def current_context() -> RenderContext:
    context = _current.get()
    if context is None:
        raise RenderError("Island() can only be used while a page is being rendered")
    return context


__all__ = [
    "HYDRATION_BUNDLE",
    "IslandCounter",
    "RenderContext",
    "current_context",
    "render_context",
]
