"""File set scanning for the pages, components and assets roots."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List

from .errors import FileSystemError
from .models import PAGE_EXTENSION, PageSource

COMPONENT_EXTENSIONS = (".py",)

CLIENT_EXTENSIONS = (".tsx", ".jsx", ".ts", ".js")

EXCLUDED_PATTERNS = ("_test.", ".test.", ".spec.", "conftest", "__init__")

EXCLUDED_PREFIXES = ("test_",)

_EXCLUDED_DIRS = {
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    "node_modules",
}


def has_component_extension(filename: str) -> bool:
    return filename.endswith(COMPONENT_EXTENSIONS)


def should_exclude_file(filename: str) -> bool:
    name = filename.rsplit("/", 1)[-1]
    if name.startswith(EXCLUDED_PREFIXES):
        return True
    return any(pattern in name for pattern in EXCLUDED_PATTERNS)


def filter_component_files(files: Iterable[str]) -> List[str]:
    """Keep recognised component sources, dropping tests and declarations."""
    return [
        file
        for file in files
        if has_component_extension(file) and not should_exclude_file(file)
    ]


def component_name(filename: str) -> str:
    """Return the component identifier derived from a file's base name."""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return base.rsplit(".", 1)[0] if "." in base else base


def directory_exists(path: Path) -> bool:
    return Path(path).is_dir()


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) if needed."""
    target = Path(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FileSystemError(f"Failed to create directory {target}: {exc}", path=target) from exc
    return target


def _iter_files(root: Path, *, skip_dirs: bool = True) -> Iterator[Path]:
    def _raise(error: OSError) -> None:
        raise error

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        if skip_dirs:
            dirnames[:] = [
                name for name in dirnames if name not in _EXCLUDED_DIRS and not name.startswith(".")
            ]
        current_dir = Path(dirpath)
        for filename in filenames:
            yield current_dir / filename


def scan(root: Path, *, skip_dirs: bool = True) -> List[str]:
    """Return every file under ``root`` as a sorted relative POSIX path.

    Source scans skip dot-directories and tool caches; pass
    ``skip_dirs=False`` to walk the whole tree, as asset mirroring does.
    """
    root_path = Path(root).expanduser()
    if not root_path.is_dir():
        raise FileSystemError(f"Directory not found: {root_path}", path=root_path)
    try:
        files = [
            path.relative_to(root_path).as_posix()
            for path in _iter_files(root_path, skip_dirs=skip_dirs)
        ]
    except OSError as exc:
        raise FileSystemError(f"Failed to read directory {root_path}: {exc}", path=root_path) from exc
    return sorted(files)


def output_path_for(relative: str) -> str:
    """Rewrite a page source path to its markup output path."""
    stem = relative.rsplit(".", 1)[0] if "." in relative.rsplit("/", 1)[-1] else relative
    return f"{stem}{PAGE_EXTENSION}"


def scan_pages(pages_dir: Path) -> List[PageSource]:
    """Scan the pages root and return page sources in enumeration order."""
    root = Path(pages_dir).resolve()
    return [
        PageSource(
            identifier=relative,
            source_path=root / relative,
            output_path=output_path_for(relative),
        )
        for relative in filter_component_files(scan(root))
    ]


def find_client_module(source_path: Path) -> Path | None:
    """Return the client-side module that sits next to a component, if any."""
    for suffix in CLIENT_EXTENSIONS:
        candidate = source_path.with_suffix(suffix)
        if candidate.is_file():
            return candidate
    return None


__all__ = [
    "CLIENT_EXTENSIONS",
    "COMPONENT_EXTENSIONS",
    "EXCLUDED_PATTERNS",
    "component_name",
    "directory_exists",
    "ensure_directory",
    "filter_component_files",
    "find_client_module",
    "output_path_for",
    "scan",
    "scan_pages",
]
