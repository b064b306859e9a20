"""Renders page components to static markup."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional

from ..errors import BuildError, RenderError
from ..logging import get_logger
from ..models import PageSource, RenderedPage
from ..postproc.format import MarkupFormatter
from .context import HYDRATION_BUNDLE, IslandCounter, RenderContext, render_context

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from ..catalog import ComponentCatalog

DOCTYPE = "<!DOCTYPE html>"


def _chunk_to_text(chunk: Any) -> str:
    if isinstance(chunk, str):
        return chunk
    if hasattr(chunk, "__html__"):
        return str(chunk.__html__())
    if isinstance(chunk, (bytes, bytearray)):
        return bytes(chunk).decode("utf-8")
    raise TypeError(f"expected markup chunk, got {type(chunk).__name__}")


def render(component: Callable[..., Any], props: Optional[Mapping[str, Any]] = None) -> str:
    """Render a component to a markup string.

    Components may return markup directly or yield it in chunks; chunks are
    buffered until the stream is exhausted. Any failure raises ``RenderError``.
    """
    name = getattr(component, "__name__", repr(component))
    try:
        result = component(**dict(props or {}))
        if result is None:
            raise RenderError(f"Component {name} returned no markup")
        if isinstance(result, (str, bytes, bytearray)) or hasattr(result, "__html__"):
            return _chunk_to_text(result)
        buffer = [_chunk_to_text(chunk) for chunk in _as_stream(result)]
    except BuildError:
        raise
    except Exception as exc:
        raise RenderError(f"Component {name} failed to render: {exc}") from exc
    return "".join(buffer)


def _as_stream(result: Any) -> Iterable[Any]:
    try:
        return iter(result)
    except TypeError as exc:
        raise TypeError(f"expected markup or an iterable of markup, got {type(result).__name__}") from exc


class PageRenderer:
    """Renders whole pages inside a render context and formats the result."""

    def __init__(
        self,
        formatter: MarkupFormatter | None = None,
        *,
        bundle_name: str = HYDRATION_BUNDLE,
    ) -> None:
        self.formatter = formatter or MarkupFormatter()
        self.bundle_name = bundle_name
        self.logger = get_logger("render")

    def render_page(
        self,
        page: PageSource,
        component: Callable[..., Any],
        *,
        output_root: Path,
        counter: IslandCounter,
        catalog: Optional["ComponentCatalog"] = None,
    ) -> RenderedPage:
        context = RenderContext(
            counter=counter,
            page_output=page.output_path,
            catalog=catalog,
            bundle_name=self.bundle_name,
        )
        try:
            with render_context(context):
                markup = render(component)
        except RenderError as exc:
            raise RenderError(f"Failed to render page {page.identifier}: {exc}", page=page.identifier) from exc

        if markup.lstrip().lower().startswith("<html"):
            markup = f"{DOCTYPE}{markup}"

        result = self.formatter.format(markup)
        if not result.formatted:
            self.logger.warning(
                "Failed to format %s, writing unformatted markup: %s",
                page.identifier,
                result.warning,
            )
        return RenderedPage(
            source=page,
            markup=result.markup,
            output_path=Path(output_root) / page.output_path,
            islands=list(context.islands),
            formatted=result.formatted,
        )


__all__ = ["DOCTYPE", "PageRenderer", "render"]
