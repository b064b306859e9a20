"""Component catalog: identifier to implementation mapping for one build."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .loader import COMPONENTS_PACKAGE, ModuleLoader
from .logging import get_logger
from .models import ComponentCatalogEntry, UsedComponentSet
from .scanner import (
    component_name,
    directory_exists,
    filter_component_files,
    find_client_module,
    scan,
)
from .validators import check_naming, resolve_export, validate_all


class ComponentCatalog:
    """Resolved components keyed by identifier.

    Colliding identifiers are kept and flagged; lookups return the entry whose
    relative path sorts first.
    """

    def __init__(self, entries: Iterable[ComponentCatalogEntry] = ()) -> None:
        self._entries: List[ComponentCatalogEntry] = sorted(
            entries, key=lambda entry: entry.relative_path
        )
        self._by_identifier: Dict[str, List[ComponentCatalogEntry]] = {}
        for entry in self._entries:
            self._by_identifier.setdefault(entry.identifier, []).append(entry)
        for group in self._by_identifier.values():
            if len(group) > 1:
                for entry in group:
                    entry.collision = True

    def __iter__(self) -> Iterator[ComponentCatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._by_identifier

    def get(self, identifier: str) -> Optional[ComponentCatalogEntry]:
        group = self._by_identifier.get(identifier)
        return group[0] if group else None

    def identifiers(self) -> List[str]:
        return sorted(self._by_identifier)

    @property
    def collisions(self) -> Dict[str, List[str]]:
        return {
            identifier: [entry.relative_path for entry in group]
            for identifier, group in sorted(self._by_identifier.items())
            if len(group) > 1
        }

    def identifier_for(self, component: Callable[..., Any]) -> Optional[str]:
        """Reverse lookup of a loaded implementation."""
        for entry in self._entries:
            if entry.implementation is not None and entry.implementation is component:
                return entry.identifier
        return None

    def resolve(
        self, used: UsedComponentSet
    ) -> Tuple[List[ComponentCatalogEntry], List[str]]:
        """Split used identifiers into catalog entries and unresolved names."""
        resolved: List[ComponentCatalogEntry] = []
        missing: List[str] = []
        for identifier in used.identifiers():
            entry = self.get(identifier)
            if entry is None:
                missing.append(identifier)
            else:
                resolved.append(entry)
        return resolved, missing


def build_catalog(
    components_dir: Path,
    loader: ModuleLoader,
    *,
    validate: bool = True,
) -> ComponentCatalog:
    """Scan, validate and load every component under ``components_dir``.

    A missing components root yields an empty catalog.
    """
    logger = get_logger("catalog")
    root = Path(components_dir)
    if not directory_exists(root):
        logger.warning("Components directory not found: %s", root)
        return ComponentCatalog()

    logger.info("Scanning components directory...")
    files = filter_component_files(scan(root))
    if not files:
        logger.warning("No components found in components directory")
        return ComponentCatalog()

    results = {}
    if validate:
        results = {result.file_path: result for result in validate_all(files, root, loader)}
    check_naming(files)

    entries: List[ComponentCatalogEntry] = []
    for file in files:
        identifier = component_name(file)
        module = loader.load(COMPONENTS_PACKAGE, file)
        implementation, _ = resolve_export(module, identifier)
        source_path = (root / file).resolve()
        entries.append(
            ComponentCatalogEntry(
                identifier=identifier,
                relative_path=file,
                source_path=source_path,
                client_path=find_client_module(source_path),
                implementation=implementation if callable(implementation) else None,
                validation=results.get(file),
            )
        )
    catalog = ComponentCatalog(entries)
    logger.debug("Catalog contains %d components: %s", len(catalog), ", ".join(catalog.identifiers()))
    return catalog


__all__ = ["ComponentCatalog", "build_catalog"]
