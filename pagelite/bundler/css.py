"""CSS artifact generation through the tailwindcss CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from ..logging import get_logger
from .tools import ToolRunner

CSS_ARTIFACT = "styles.css"

DEFAULT_CSS_INPUT = Path("src") / "styles" / "globals.css"


class CssBuilder:
    """Builds ``styles.css`` into the output root when an input stylesheet exists."""

    def __init__(
        self,
        project_root: Path,
        output_dir: Path,
        *,
        runner: ToolRunner | None = None,
        minify: bool = True,
        command: Sequence[str] = ("npx", "tailwindcss"),
        input_path: Path = DEFAULT_CSS_INPUT,
    ) -> None:
        self.project_root = Path(project_root)
        self.output_dir = Path(output_dir)
        self.runner = runner or ToolRunner()
        self.minify = minify
        self.command = tuple(command)
        self.input_path = input_path
        self.logger = get_logger("css")

    def build(self) -> Optional[Path]:
        source = self.project_root / self.input_path
        if not source.is_file():
            self.logger.debug("No stylesheet at %s; skipping CSS build", source)
            return None
        output = self.output_dir / CSS_ARTIFACT
        args = [*self.command, "-i", str(source), "-o", str(output)]
        if self.minify:
            args.append("--minify")
        self.logger.info("Building %s with %s...", CSS_ARTIFACT, self.command[-1])
        self.runner.run(args, cwd=self.project_root)
        return output


__all__ = ["CSS_ARTIFACT", "CssBuilder", "DEFAULT_CSS_INPUT"]
