"""Static page builds with selectively hydrated islands."""

from .render.island import Island

__all__ = ["Island"]

__version__ = "0.1.0"
