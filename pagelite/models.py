"""Core data models shared across pagelite components."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

PAGE_EXTENSION = ".html"


@dataclass(frozen=True)
class PageSource:
    """A page component file discovered under the pages root."""

    identifier: str
    source_path: Path
    output_path: str

    @property
    def module_path(self) -> str:
        """Dotted path of the page module relative to the pages root."""
        stem = self.identifier.rsplit(".", 1)[0]
        return stem.replace("/", ".")


@dataclass(frozen=True)
class IslandReference:
    """An island embedded in a page while it was rendered."""

    component: str
    instance_id: int
    props: Mapping[str, Any]

    @property
    def element_id(self) -> str:
        return f"island-{self.instance_id}"


@dataclass
class RenderedPage:
    """Markup produced for a page, held in memory until the flush step."""

    source: PageSource
    markup: str
    output_path: Path
    islands: List[IslandReference] = field(default_factory=list)
    formatted: bool = True


@dataclass
class ValidationResult:
    """Outcome of validating a single component or page module."""

    component_name: str
    file_path: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class ComponentCatalogEntry:
    """A component module resolved from the components root."""

    identifier: str
    relative_path: str
    source_path: Path
    client_path: Optional[Path] = None
    implementation: Optional[Callable[..., Any]] = None
    validation: Optional[ValidationResult] = None
    collision: bool = False

    @property
    def is_valid(self) -> bool:
        return self.validation is None or self.validation.is_valid


@dataclass
class UsedComponentSet:
    """Component identifiers referenced by islands, with page reference counts."""

    counts: Dict[str, int] = field(default_factory=dict)

    def add(self, identifier: str, count: int = 1) -> None:
        self.counts[identifier] = self.counts.get(identifier, 0) + count

    def identifiers(self) -> List[str]:
        """Identifiers in lexicographic order."""
        return sorted(self.counts)

    def sorted(self) -> List[Tuple[str, int]]:
        return [(name, self.counts[name]) for name in self.identifiers()]

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.counts

    def __iter__(self) -> Iterator[str]:
        return iter(self.identifiers())

    def __len__(self) -> int:
        return len(self.counts)


@dataclass
class OutputDirectoryState:
    """Snapshot of the output tree partitioned by ownership."""

    root: Path
    generated: List[str] = field(default_factory=list)
    mirrored: List[str] = field(default_factory=list)
    build_artifacts: List[str] = field(default_factory=list)
    unmanaged: List[str] = field(default_factory=list)

    def all_files(self) -> List[str]:
        return sorted(self.generated + self.mirrored + self.build_artifacts + self.unmanaged)
