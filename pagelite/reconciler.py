"""Reconciles the output directory with the current page and asset sources."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Collection, Iterable, List, Set

from .bundler.css import CSS_ARTIFACT
from .bundler.hydration import SOURCEMAP_ARTIFACT
from .errors import FileSystemError
from .logging import get_logger
from .models import PAGE_EXTENSION, OutputDirectoryState
from .render.context import HYDRATION_BUNDLE
from .scanner import COMPONENT_EXTENSIONS, directory_exists, ensure_directory, scan

BUILD_ARTIFACTS = frozenset({HYDRATION_BUNDLE, SOURCEMAP_ARTIFACT, CSS_ARTIFACT})

_logger = get_logger("reconciler")


def _list_files(root: Path) -> List[str]:
    if not directory_exists(root):
        return []
    return scan(root, skip_dirs=False)


def candidate_sources(relative_output: str, page_source_dir: Path) -> List[Path]:
    """Source files that could have produced a generated markup file."""
    stem = relative_output[: -len(PAGE_EXTENSION)]
    return [Path(page_source_dir) / f"{stem}{extension}" for extension in COMPONENT_EXTENSIONS]


def _is_generated_markup(relative: str) -> bool:
    return relative.endswith(PAGE_EXTENSION)


def _prune_empty_dirs(start: Path, stop: Path) -> None:
    current = start
    while current != stop and stop in current.parents:
        try:
            current.rmdir()
        except OSError:
            return
        current = current.parent


def cleanup_orphaned_generated(
    output_dir: Path,
    page_source_dir: Path,
    *,
    protected: Collection[str] = (),
) -> int:
    """Delete generated markup whose page source no longer exists.

    ``protected`` holds relative paths mirrored from the asset root; those are
    never treated as generated pages.
    """
    output_root = Path(output_dir).resolve()
    removed = 0
    for relative in _list_files(output_root):
        if not _is_generated_markup(relative) or relative in protected:
            continue
        if any(candidate.is_file() for candidate in candidate_sources(relative, page_source_dir)):
            continue
        target = output_root / relative
        try:
            target.unlink()
        except OSError as exc:
            raise FileSystemError(f"Failed to remove orphaned page {target}: {exc}", path=target) from exc
        _logger.info("Removed orphaned page %s", relative)
        _prune_empty_dirs(target.parent, output_root)
        removed += 1
    return removed


def copy_static_assets(
    asset_source_dir: Path,
    output_dir: Path,
    *,
    reserved: Iterable[str] = (),
) -> int:
    """Mirror every asset into the output root, overwriting unconditionally.

    ``reserved`` holds output paths this build wrote (pages and the artifacts
    that were actually produced); assets with those names are skipped.
    """
    asset_root = Path(asset_source_dir)
    if not directory_exists(asset_root):
        _logger.debug("No static asset directory at %s", asset_root)
        return 0

    output_root = Path(output_dir)
    skip: Set[str] = set(reserved)
    copied = 0
    for relative in _list_files(asset_root):
        if relative in skip:
            _logger.warning("Skipping asset %s: the path is owned by the build", relative)
            continue
        destination = output_root / relative
        ensure_directory(destination.parent)
        try:
            shutil.copy2(asset_root / relative, destination)
        except OSError as exc:
            raise FileSystemError(f"Failed to copy asset {relative}: {exc}", path=destination) from exc
        copied += 1
    if copied:
        _logger.info("Copied %d static assets", copied)
    return copied


def asset_paths(asset_source_dir: Path) -> Set[str]:
    return set(_list_files(Path(asset_source_dir)))


def snapshot(output_dir: Path, page_source_dir: Path, asset_source_dir: Path) -> OutputDirectoryState:
    """Classify every file in the output tree by which part of the build owns it."""
    output_root = Path(output_dir).resolve()
    mirrored = asset_paths(asset_source_dir)
    state = OutputDirectoryState(root=output_root)
    for relative in _list_files(output_root):
        if relative in BUILD_ARTIFACTS:
            state.build_artifacts.append(relative)
        elif relative in mirrored:
            state.mirrored.append(relative)
        elif _is_generated_markup(relative) and any(
            candidate.is_file() for candidate in candidate_sources(relative, page_source_dir)
        ):
            state.generated.append(relative)
        else:
            state.unmanaged.append(relative)
    return state


__all__ = [
    "BUILD_ARTIFACTS",
    "asset_paths",
    "candidate_sources",
    "cleanup_orphaned_generated",
    "copy_static_assets",
    "snapshot",
]
