"""Subprocess wrapper for the external bundler and CSS tool."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Sequence

from ..errors import ExternalToolError
from ..logging import get_logger


class ToolRunner:
    """Runs external build tools; the runner callable is injectable for tests."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("tools")

    def run(self, args: Sequence[str], *, cwd: Path) -> str:
        command = [str(arg) for arg in args]
        self.logger.debug("Running %s", " ".join(command))
        try:
            return self._runner(command, cwd=Path(cwd))
        except ExternalToolError:
            raise
        except FileNotFoundError as exc:
            raise ExternalToolError(
                f"Executable not found: {command[0]}",
                command=command,
            ) from exc
        except subprocess.CalledProcessError as exc:
            output = (exc.stderr or exc.stdout or "").strip()
            raise ExternalToolError(
                f"{command[0]} exited with status {exc.returncode}: {output}",
                command=command,
                output=output,
            ) from exc
        except OSError as exc:
            raise ExternalToolError(f"Failed to run {command[0]}: {exc}", command=command) from exc

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["ToolRunner"]
