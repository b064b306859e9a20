"""Error taxonomy shared by the build pipeline."""

from __future__ import annotations

from pathlib import Path


class BuildError(RuntimeError):
    """Base class for failures that abort a build."""


class ConfigurationError(BuildError):
    """Raised when the build configuration cannot be parsed.

    The config loader recovers from this locally by falling back to defaults.
    """


class RenderError(BuildError):
    """Raised when a page cannot be rendered to markup."""

    def __init__(self, message: str, *, page: str | None = None) -> None:
        super().__init__(message)
        self.page = page


class FormattingError(BuildError):
    """Raised by the markup formatter; callers fall back to raw markup."""


class ExternalToolError(BuildError):
    """Raised when the bundler or CSS tool cannot be run or exits non-zero."""

    def __init__(self, message: str, *, command: list[str] | None = None, output: str = "") -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.output = output


class FileSystemError(BuildError):
    """Raised when a directory cannot be read or a file cannot be written."""

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ResolutionWarning(UserWarning):
    """Islands reference component identifiers with no catalog entry."""

    def __init__(self, message: str, identifiers: list[str] | None = None) -> None:
        super().__init__(message)
        self.identifiers = list(identifiers or [])


__all__ = [
    "BuildError",
    "ConfigurationError",
    "ExternalToolError",
    "FileSystemError",
    "FormattingError",
    "RenderError",
    "ResolutionWarning",
]
