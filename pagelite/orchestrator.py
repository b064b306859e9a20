"""Two-pass build orchestration: render, discover, bundle, reconcile, flush."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Set

from .bundler import BundleResult, CssBuilder, HydrationBundler, ToolRunner
from .catalog import ComponentCatalog, build_catalog
from .config import BuildConfig, load_config
from .errors import BuildError, FileSystemError
from .loader import PAGES_PACKAGE, ModuleLoader
from .logging import Timer, get_logger
from .models import PageSource, RenderedPage, UsedComponentSet
from .postproc.islands import combine
from .reconciler import asset_paths, cleanup_orphaned_generated, copy_static_assets
from .render import IslandCounter, PageRenderer
from .scanner import component_name, directory_exists, ensure_directory, scan_pages
from .validators import resolve_export, validate_all


class BuildState(str, Enum):
    IDLE = "idle"
    SCANNING_PAGES = "scanning_pages"
    RENDERING_PAGES = "rendering_pages"
    DISCOVERING_ISLANDS = "discovering_islands"
    BUNDLING_HYDRATION = "bundling_hydration"
    RECONCILING_OUTPUT = "reconciling_output"
    FLUSHING_PAGES = "flushing_pages"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ProjectLayout:
    """Conventional directory layout of a pagelite project."""

    root: Path

    @property
    def src_dir(self) -> Path:
        return self.root / "src"

    @property
    def pages_dir(self) -> Path:
        return self.src_dir / "pages"

    @property
    def components_dir(self) -> Path:
        return self.src_dir / "components"

    @property
    def assets_dir(self) -> Path:
        return self.root / "public"

    @property
    def work_dir(self) -> Path:
        return self.root / ".pagelite"


@dataclass
class BuildReport:
    """Summary of a build run."""

    root: Path
    state: BuildState = BuildState.IDLE
    transitions: List[BuildState] = field(default_factory=list)
    output_dir: Optional[Path] = None
    pages: List[str] = field(default_factory=list)
    used: UsedComponentSet = field(default_factory=UsedComponentSet)
    bundle: Optional[BundleResult] = None
    css_path: Optional[Path] = None
    orphans_removed: int = 0
    assets_copied: int = 0
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    duration_ms: float = 0.0


class Orchestrator:
    """Sequences the build pipeline and owns directory-existence guarantees."""

    def __init__(
        self,
        renderer: PageRenderer | None = None,
        runner: ToolRunner | None = None,
        *,
        esbuild_command: Sequence[str] = ("npx", "esbuild"),
        css_command: Sequence[str] = ("npx", "tailwindcss"),
    ) -> None:
        self.renderer = renderer or PageRenderer()
        self.runner = runner or ToolRunner()
        self.esbuild_command = tuple(esbuild_command)
        self.css_command = tuple(css_command)
        self.logger = get_logger("orchestrator")
        self.last_report: Optional[BuildReport] = None

    def run_build(self, path: str | Path) -> BuildReport:
        """Build every page under ``src/pages`` into the output directory.

        The report is also kept on ``last_report`` so callers can inspect the
        failed state after an exception.
        """
        root = Path(path).expanduser().resolve()
        report = BuildReport(root=root)
        self.last_report = report
        timer = Timer("Site build", self.logger)
        try:
            self._run(root, report)
        except BuildError as exc:
            self._fail(report, exc)
            raise
        except Exception as exc:
            self._fail(report, exc)
            raise BuildError(f"Build failed: {exc}") from exc
        finally:
            report.duration_ms = timer.elapsed_ms()
        timer.end()
        return report

    def run_components_only(self, path: str | Path) -> BundleResult:
        """Bundle every catalog component without rendering any page."""
        root = Path(path).expanduser().resolve()
        config = load_config(root)
        layout = ProjectLayout(root)
        output_dir = ensure_directory(config.output_path)
        with ModuleLoader(layout.src_dir) as loader:
            catalog = build_catalog(layout.components_dir, loader)
        return self._bundler(catalog, config, layout, output_dir).generate(None)

    def _run(self, root: Path, report: BuildReport) -> None:
        self._transition(report, BuildState.SCANNING_PAGES)
        config = load_config(root)
        layout = ProjectLayout(root)
        output_dir = ensure_directory(config.output_path)
        report.output_dir = output_dir

        if not directory_exists(layout.pages_dir):
            self.logger.error("Pages directory not found: %s", layout.pages_dir)
            raise FileSystemError(
                "Cannot generate pages without a src/pages directory",
                path=layout.pages_dir,
            )

        with ModuleLoader(layout.src_dir) as loader:
            self.logger.info("Scanning pages directory...")
            pages = scan_pages(layout.pages_dir)
            catalog = build_catalog(layout.components_dir, loader)
            for identifier, files in catalog.collisions.items():
                report.warnings.append(
                    f"Duplicate component name '{identifier}' found in files: {', '.join(files)}"
                )
            validate_all(
                [page.identifier for page in pages],
                layout.pages_dir,
                loader,
                package=PAGES_PACKAGE,
                default_is_convention=True,
                require_name=False,
            )
            if not pages:
                self.logger.warning("No pages found in pages directory")

            self._transition(report, BuildState.RENDERING_PAGES)
            rendered = self._render_pages(pages, loader, catalog, output_dir, report)

        self._transition(report, BuildState.DISCOVERING_ISLANDS)
        report.used = combine(page.markup for page in rendered)
        for identifier, count in report.used.sorted():
            self.logger.info("Island %s referenced by %d page(s)", identifier, count)

        self._transition(report, BuildState.BUNDLING_HYDRATION)
        bundle = self._bundler(catalog, config, layout, output_dir).generate(report.used)
        report.bundle = bundle
        report.warnings.extend(bundle.warnings)
        report.css_path = CssBuilder(
            root,
            output_dir,
            runner=self.runner,
            minify=config.build_options.minify,
            command=self.css_command,
        ).build()

        self._transition(report, BuildState.RECONCILING_OUTPUT)
        report.orphans_removed = cleanup_orphaned_generated(
            output_dir,
            layout.pages_dir,
            protected=asset_paths(layout.assets_dir),
        )
        report.assets_copied = copy_static_assets(
            layout.assets_dir,
            output_dir,
            reserved=_reserved_outputs(pages, bundle, report.css_path),
        )

        self._transition(report, BuildState.FLUSHING_PAGES)
        for page in rendered:
            self._flush(page)
            report.pages.append(page.source.output_path)
        self.logger.info("Generated %d pages", len(report.pages))

        self._transition(report, BuildState.DONE)

    def _render_pages(
        self,
        pages: Sequence[PageSource],
        loader: ModuleLoader,
        catalog: ComponentCatalog,
        output_dir: Path,
        report: BuildReport,
    ) -> List[RenderedPage]:
        self.logger.info("Processing %d pages...", len(pages))
        counter = IslandCounter()
        rendered: List[RenderedPage] = []
        for page in pages:
            module = loader.load(PAGES_PACKAGE, page.identifier)
            component, _ = resolve_export(module, component_name(page.identifier))
            result = self.renderer.render_page(
                page,
                component,
                output_root=output_dir,
                counter=counter,
                catalog=catalog,
            )
            if not result.formatted:
                report.warnings.append(f"Page {page.identifier} was written without formatting")
            self.logger.debug("Rendered %s (%d islands)", page.identifier, len(result.islands))
            rendered.append(result)
        return rendered

    def _bundler(
        self,
        catalog: ComponentCatalog,
        config: BuildConfig,
        layout: ProjectLayout,
        output_dir: Path,
    ) -> HydrationBundler:
        return HydrationBundler(
            catalog,
            output_dir,
            layout.work_dir,
            options=config.build_options,
            runner=self.runner,
            command=self.esbuild_command,
        )

    def _flush(self, page: RenderedPage) -> None:
        ensure_directory(page.output_path.parent)
        try:
            page.output_path.write_text(page.markup, encoding="utf-8")
        except OSError as exc:
            raise FileSystemError(
                f"Failed to write {page.output_path}: {exc}", path=page.output_path
            ) from exc
        self.logger.debug("Generated %s", page.source.output_path)

    def _transition(self, report: BuildReport, state: BuildState) -> None:
        self.logger.debug("Build state: %s -> %s", report.state.value, state.value)
        report.state = state
        report.transitions.append(state)

    def _fail(self, report: BuildReport, exc: BaseException) -> None:
        failed_in = report.state
        report.error = str(exc)
        self._transition(report, BuildState.FAILED)
        self.logger.error("Build failed during %s: %s", failed_in.value, exc)


def _reserved_outputs(
    pages: Sequence[PageSource],
    bundle: BundleResult,
    css_path: Optional[Path],
) -> Set[str]:
    """Output paths written by this build that assets must not overwrite."""
    reserved = {page.output_path for page in pages}
    reserved.add(bundle.output_path.name)
    if bundle.sourcemap_path is not None:
        reserved.add(bundle.sourcemap_path.name)
    if css_path is not None:
        reserved.add(css_path.name)
    return reserved


__all__ = ["BuildReport", "BuildState", "Orchestrator", "ProjectLayout"]
