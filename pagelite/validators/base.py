"""Validation data structures shared by component and island checks."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import BuildError
from ..models import ValidationResult


class ValidationError(BuildError):
    """Raised when one or more components fail validation."""

    def __init__(self, message: str, results: Sequence[ValidationResult] = ()) -> None:
        super().__init__(message)
        self.results = list(results)

    @property
    def errors(self) -> List[str]:
        return [f"{result.file_path}: {error}" for result in self.results for error in result.errors]


class IslandError(ValidationError):
    """Raised when an island wraps a component without a usable identifier."""


__all__ = ["IslandError", "ValidationError", "ValidationResult"]
