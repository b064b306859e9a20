"""Client hydration bundle and CSS artifact generation."""

from .css import CSS_ARTIFACT, CssBuilder
from .hydration import BundleResult, HydrationBundler, SKIP_MESSAGE, SOURCEMAP_ARTIFACT
from .tools import ToolRunner

__all__ = [
    "BundleResult",
    "CSS_ARTIFACT",
    "CssBuilder",
    "HydrationBundler",
    "SKIP_MESSAGE",
    "SOURCEMAP_ARTIFACT",
    "ToolRunner",
]
