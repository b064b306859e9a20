"""Export checks for page and component modules."""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..loader import COMPONENTS_PACKAGE, ModuleLoader
from ..logging import get_logger
from ..models import ValidationResult
from ..scanner import component_name
from .base import ValidationError

DEFAULT_EXPORT = "default"

_logger = get_logger("validators")


def resolve_export(module: ModuleType, name: str) -> Tuple[Optional[Any], bool]:
    """Return ``(value, used_default)`` for the named or default export."""
    named = getattr(module, name, None)
    if named is not None:
        return named, False
    default = getattr(module, DEFAULT_EXPORT, None)
    return default, default is not None


def is_anonymous(component: Callable[..., Any]) -> bool:
    if getattr(component, "island_name", None):
        return False
    name = getattr(component, "__name__", None)
    return not name or name == "<lambda>"


def validate_component(
    file_path: str,
    base_path: Path,
    loader: ModuleLoader,
    *,
    package: str = COMPONENTS_PACKAGE,
    default_is_convention: bool = False,
    require_name: bool = True,
) -> ValidationResult:
    """Validate that a module exposes an invocable component.

    Components are expected to export a callable named after the file; a
    ``default`` attribute is accepted with a warning. Pages pass
    ``default_is_convention=True`` because ``default`` is their normal export.
    """
    name = component_name(file_path)
    result = ValidationResult(component_name=name, file_path=file_path)
    full_path = Path(base_path) / file_path

    if not full_path.is_file():
        result.errors.append(f"File not found: {file_path}")
        return result

    try:
        module = loader.load(package, file_path)
    except SyntaxError as exc:
        result.errors.append(f"Syntax error in {file_path}: {exc}")
        return result
    except Exception as exc:
        result.errors.append(f"Failed to import {file_path}: {exc}")
        return result

    component, used_default = resolve_export(module, name)
    if component is None:
        result.errors.append(
            f"Component '{name}' not found. Expected named export '{name}' or "
            f"'{DEFAULT_EXPORT}' export."
        )
        return result

    if used_default and not default_is_convention:
        result.warnings.append(
            f"Component '{name}' uses the '{DEFAULT_EXPORT}' export. "
            "Consider a named export for consistency."
        )

    if not callable(component):
        result.errors.append(f"'{name}' is not callable. Components must be callables.")
    elif require_name and is_anonymous(component):
        result.errors.append(
            f"'{name}' is anonymous. Define it with `def` or set an `island_name` attribute."
        )
    return result


def validate_all(
    files: Sequence[str],
    base_path: Path,
    loader: ModuleLoader,
    **options: Any,
) -> List[ValidationResult]:
    """Validate every file and raise ``ValidationError`` if any is invalid."""
    _logger.info("Validating %d modules under %s...", len(files), base_path)
    results: List[ValidationResult] = []
    for file in files:
        result = validate_component(file, base_path, loader, **options)
        results.append(result)
        if result.errors:
            _logger.error("Component validation failed: %s", file)
            for error in result.errors:
                _logger.error("  - %s", error)
        for warning in result.warnings:
            _logger.warning("  - %s", warning)

    invalid = [result for result in results if not result.is_valid]
    if invalid:
        _logger.error("%d modules failed validation", len(invalid))
        raise ValidationError(
            "Component validation failed. Fix the errors above and try again.",
            invalid,
        )
    _logger.debug("All %d modules validated successfully", len(results))
    return results


def check_naming(files: Sequence[str]) -> Dict[str, List[str]]:
    """Return base names that collide across files, logging each collision."""
    by_name: Dict[str, List[str]] = defaultdict(list)
    for file in files:
        by_name[component_name(file)].append(file)

    duplicates = {name: paths for name, paths in by_name.items() if len(paths) > 1}
    for name in sorted(duplicates):
        _logger.warning(
            "Duplicate component name '%s' found in files: %s",
            name,
            ", ".join(duplicates[name]),
        )
        _logger.warning("This may cause import conflicts. Consider renaming one of them.")
    return duplicates


__all__ = [
    "DEFAULT_EXPORT",
    "check_naming",
    "is_anonymous",
    "resolve_export",
    "validate_all",
    "validate_component",
]
