"""Import page and component modules by dotted name from the project's src/ root."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict, Sequence

from .logging import get_logger

PAGES_PACKAGE = "pages"
COMPONENTS_PACKAGE = "components"


class ModuleLoader:
    """Imports project modules for the duration of one build.

    ``src/`` is placed at the front of ``sys.path`` so that pages importing
    ``components.Counter`` receive the very module object the catalog loaded.
    Modules left over from a previous build in the same process are purged
    on entry and on exit.
    """

    def __init__(
        self,
        src_dir: Path,
        packages: Sequence[str] = (PAGES_PACKAGE, COMPONENTS_PACKAGE),
    ) -> None:
        self.src_dir = Path(src_dir).resolve()
        self.packages = tuple(packages)
        self.logger = get_logger("loader")
        self._cache: Dict[str, ModuleType] = {}
        self._active = False

    def __enter__(self) -> "ModuleLoader":
        self._purge()
        sys.path.insert(0, str(self.src_dir))
        importlib.invalidate_caches()
        self._active = True
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._active = False
        try:
            sys.path.remove(str(self.src_dir))
        except ValueError:  # pragma: no cover - removed by user code
            pass
        self._purge()
        self._cache.clear()

    def load(self, package: str, relative_path: str) -> ModuleType:
        """Import the module at ``<package>/<relative_path>``.

        Import-time exceptions propagate to the caller unchanged.
        """
        if not self._active:
            raise RuntimeError("ModuleLoader must be entered before loading modules")
        name = self.module_name(package, relative_path)
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        self.logger.debug("Importing %s", name)
        module = importlib.import_module(name)
        self._cache[name] = module
        return module

    @staticmethod
    def module_name(package: str, relative_path: str) -> str:
        stem = relative_path.replace("\\", "/")
        if stem.endswith(".py"):
            stem = stem[: -len(".py")]
        return ".".join([package, *stem.split("/")])

    def _purge(self) -> None:
        prefixes = tuple(f"{package}." for package in self.packages)
        for name in list(sys.modules):
            if name in self.packages or name.startswith(prefixes):
                del sys.modules[name]


__all__ = ["COMPONENTS_PACKAGE", "ModuleLoader", "PAGES_PACKAGE"]
