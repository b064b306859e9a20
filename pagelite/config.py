"""Configuration loading for pagelite builds (config.yml / config.json)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError
from .logging import get_logger

CONFIG_FILENAMES = ("config.yml", "config.yaml", "config.json")

DEFAULT_OUTPUT_DIR = "dist"

_logger = get_logger("config")


@dataclass
class BuildOptions:
    """Options forwarded to the external bundler."""

    minify: bool = True
    sourcemap: bool = False


@dataclass
class BuildConfig:
    """Represents the settings defined in the project config file."""

    root: Path
    output_dir: str = DEFAULT_OUTPUT_DIR
    build_options: BuildOptions = field(default_factory=BuildOptions)
    source: Optional[Path] = None

    @property
    def output_path(self) -> Path:
        """Absolute path of the output directory."""
        path = Path(self.output_dir).expanduser()
        if path.is_absolute():
            return path
        return (self.root / path).resolve()


def load_config(project_root: Path) -> BuildConfig:
    """Load the build configuration, falling back to defaults with a warning."""
    root = Path(project_root).expanduser().resolve()
    config_file = _find_config_file(root)
    if config_file is None:
        return BuildConfig(root=root)

    try:
        data = _read_config(config_file)
    except ConfigurationError as exc:
        _logger.warning("%s; using default configuration", exc)
        return BuildConfig(root=root, source=config_file)

    if not isinstance(data, dict):
        _logger.warning(
            "%s must contain a mapping at the root; using default configuration",
            config_file.name,
        )
        return BuildConfig(root=root, source=config_file)

    config = BuildConfig(root=root, source=config_file)

    output_dir = data.get("outputDir", data.get("output_dir"))
    if output_dir is not None:
        if isinstance(output_dir, str) and output_dir.strip():
            config.output_dir = output_dir.strip()
        else:
            _logger.warning(
                "Ignoring invalid outputDir %r in %s; using '%s'",
                output_dir,
                config_file.name,
                DEFAULT_OUTPUT_DIR,
            )

    options_data = data.get("buildOptions", data.get("build_options"))
    if options_data is not None and not isinstance(options_data, dict):
        _logger.warning("Ignoring buildOptions in %s: expected a mapping", config_file.name)
        options_data = None
    options = _as_dict(options_data)
    config.build_options = BuildOptions(
        minify=_option_bool(options, "minify", default=True, source=config_file),
        sourcemap=_option_bool(options, "sourcemap", default=False, source=config_file),
    )
    return config


def _find_config_file(root: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    if path.suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc

    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _option_bool(options: Dict[str, Any], key: str, *, default: bool, source: Path) -> bool:
    if key not in options or options[key] is None:
        return default
    value = _as_bool(options[key])
    if value is None:
        _logger.warning(
            "Ignoring invalid buildOptions.%s %r in %s; using %s",
            key,
            options[key],
            source.name,
            default,
        )
        return default
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["BuildConfig", "BuildOptions", "CONFIG_FILENAMES", "load_config"]
