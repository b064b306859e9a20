"""Page rendering and the Island helper."""

from .context import HYDRATION_BUNDLE, IslandCounter, RenderContext, current_context, render_context
from .island import Island, component_identifier
from .renderer import PageRenderer, render

__all__ = [
    "HYDRATION_BUNDLE",
    "Island",
    "IslandCounter",
    "PageRenderer",
    "RenderContext",
    "component_identifier",
    "current_context",
    "render",
    "render_context",
]
