"""Selective hydration bundle generation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..catalog import ComponentCatalog
from ..config import BuildOptions
from ..errors import ExternalToolError, FileSystemError, ResolutionWarning
from ..logging import Timer, get_logger
from ..models import ComponentCatalogEntry, UsedComponentSet
from ..render.context import HYDRATION_BUNDLE
from ..scanner import ensure_directory
from .tools import ToolRunner

SOURCEMAP_ARTIFACT = f"{HYDRATION_BUNDLE}.map"

ENTRY_FILENAME = "islandRender.entry.jsx"

SKIP_MESSAGE = "No interactive components found - skipping hydration"

_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class _ImportSpec:
    identifier: str
    import_path: str


@dataclass
class BundleResult:
    """Outcome of generating the hydration bundle."""

    output_path: Path
    bundled: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    static_only: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    empty: bool = False
    sourcemap_path: Optional[Path] = None
    resolution: Optional[ResolutionWarning] = None


class HydrationBundler:
    """Writes the client entry module for the used components and bundles it."""

    def __init__(
        self,
        catalog: ComponentCatalog,
        output_dir: Path,
        work_dir: Path,
        *,
        options: BuildOptions | None = None,
        runner: ToolRunner | None = None,
        command: Sequence[str] = ("npx", "esbuild"),
    ) -> None:
        self.catalog = catalog
        self.output_dir = Path(output_dir)
        self.work_dir = Path(work_dir)
        self.options = options or BuildOptions()
        self.runner = runner or ToolRunner()
        self.command = tuple(command)
        self.logger = get_logger("bundler")
        self._env = Environment(
            loader=FileSystemLoader(str(_TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    @property
    def output_path(self) -> Path:
        return self.output_dir / HYDRATION_BUNDLE

    @property
    def sourcemap_path(self) -> Path:
        return self.output_dir / SOURCEMAP_ARTIFACT

    def generate(self, used: Optional[Iterable[str]] = None) -> BundleResult:
        """Generate the hydration bundle.

        With ``used=None`` every catalog component is bundled. Otherwise only
        the referenced identifiers are; unknown identifiers are reported and
        skipped.
        """
        timer = Timer("Island renderer generation", self.logger)
        result = BundleResult(output_path=self.output_path)

        if used is None:
            entries = [entry for entry in map(self.catalog.get, self.catalog.identifiers()) if entry]
        else:
            used_set = used if isinstance(used, UsedComponentSet) else _as_used_set(used)
            self.logger.info("Filtering to %d used components...", len(used_set))
            entries, result.missing = self.catalog.resolve(used_set)
            if result.missing:
                message = f"Islands reference missing components: {', '.join(result.missing)}"
                self.logger.warning(message)
                result.warnings.append(message)
                result.resolution = ResolutionWarning(message, result.missing)

        bundled_entries: List[ComponentCatalogEntry] = []
        for entry in entries:
            if entry.client_path is None:
                message = (
                    f"Component '{entry.identifier}' has no client module next to "
                    f"{entry.relative_path}; its islands stay static"
                )
                self.logger.warning(message)
                result.warnings.append(message)
                result.static_only.append(entry.identifier)
                continue
            bundled_entries.append(entry)

        if not bundled_entries:
            self._write_empty()
            result.empty = True
            timer.end()
            return result

        ensure_directory(self.output_dir)
        entry_file = self._write_entry(bundled_entries)
        self._bundle(entry_file)
        result.bundled = [entry.identifier for entry in bundled_entries]
        if self.options.sourcemap:
            result.sourcemap_path = self.sourcemap_path

        if used is None:
            self.logger.info(
                "Generated island renderer with %d components (all)", len(result.bundled)
            )
        else:
            self.logger.info(
                "Generated island renderer with %d/%d components",
                len(result.bundled),
                len(self.catalog.identifiers()),
            )
        self.logger.debug("Bundled: %s", ", ".join(result.bundled))
        timer.end()
        return result

    def render_entry(self, entries: Sequence[ComponentCatalogEntry]) -> str:
        """Return the source of the client entry module."""
        specs = [
            _ImportSpec(
                identifier=entry.identifier,
                import_path=self._import_path(entry.client_path),  # type: ignore[arg-type]
            )
            for entry in entries
        ]
        return self._env.get_template("hydrate.js.j2").render(entries=specs)

    def render_empty(self) -> str:
        return self._env.get_template("empty.js.j2").render(message=SKIP_MESSAGE)

    def _write_empty(self) -> None:
        self.logger.info("Creating empty island renderer...")
        ensure_directory(self.output_dir)
        _write(self.output_path, self.render_empty())
        self._remove_stale_sourcemap()

    def _write_entry(self, entries: Sequence[ComponentCatalogEntry]) -> Path:
        ensure_directory(self.work_dir)
        entry_file = self.work_dir / ENTRY_FILENAME
        self.logger.info("Generating imports for %d components...", len(entries))
        _write(entry_file, self.render_entry(entries))
        return entry_file

    def _bundle(self, entry_file: Path) -> None:
        args = [
            *self.command,
            str(entry_file),
            "--bundle",
            "--format=esm",
            f"--outfile={self.output_path}",
            "--jsx=automatic",
        ]
        if self.options.minify:
            args.append("--minify")
        if self.options.sourcemap:
            args.append("--sourcemap")
        self.logger.info("Bundling island renderer with %s...", self.command[-1])
        self.runner.run(args, cwd=self.work_dir)
        if not self.output_path.is_file():
            raise ExternalToolError(
                f"{self.command[-1]} did not produce {self.output_path}",
                command=args,
            )
        entry_file.unlink(missing_ok=True)
        if not self.options.sourcemap:
            self._remove_stale_sourcemap()

    def _remove_stale_sourcemap(self) -> None:
        if self.sourcemap_path.is_file():
            self.sourcemap_path.unlink()
            self.logger.debug("Removed stale %s", SOURCEMAP_ARTIFACT)

    def _import_path(self, client_path: Path) -> str:
        relative = os.path.relpath(client_path, self.work_dir).replace(os.sep, "/")
        if not relative.startswith("."):
            relative = f"./{relative}"
        return relative


def _write(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(f"Failed to write {path}: {exc}", path=path) from exc


def _as_used_set(identifiers: Iterable[str]) -> UsedComponentSet:
    used = UsedComponentSet()
    for identifier in identifiers:
        used.add(identifier)
    return used


__all__ = [
    "BundleResult",
    "ENTRY_FILENAME",
    "HydrationBundler",
    "SKIP_MESSAGE",
    "SOURCEMAP_ARTIFACT",
]
