"""Validation package for page and component modules."""

from .base import IslandError, ValidationError, ValidationResult
from .component import (
    DEFAULT_EXPORT,
    check_naming,
    resolve_export,
    validate_all,
    validate_component,
)

__all__ = [
    "DEFAULT_EXPORT",
    "IslandError",
    "ValidationError",
    "ValidationResult",
    "check_naming",
    "resolve_export",
    "validate_all",
    "validate_component",
]
