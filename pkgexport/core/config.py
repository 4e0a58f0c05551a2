# ==============================================================================
# PACKAGE EXPORTER - CONFIGURATION MODULE
# ==============================================================================
# Two layers of settings:
#
#   Config         mutable, persisted as JSON, edited by hand or via --settings
#   ExportOptions  frozen snapshot for a single run; CLI flags override the
#                  Config values it is built from
#
# The settings file lives at Paths.get_config_path() unless a path is given.
#
# Usage:
#   from pkgexport.core.config import Config, ExportOptions
#   config = Config()
#   config.load()
#   options = ExportOptions.from_config(config, output_root="Exports")
# ==============================================================================

import os
import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any, List

from .log import get_logger
from .paths import Paths
from .router import ExportType, OutputFormat

logger = get_logger(__name__)


def _default_workers() -> int:
    return max(1, min(64, os.cpu_count() or 4))


# ==============================================================================
# DEFAULT CONFIGURATION VALUES
# ==============================================================================
# These are used when no config file exists or when values are missing.

DEFAULT_CONFIG = {
    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # Output folder used when -o is not given (empty = must be given)
    "default_output_path": "",

    # -------------------------------------------------------------------------
    # ARCHIVE
    # -------------------------------------------------------------------------
    # Provider used to mount the input root
    "provider": "directory",

    # Engine version identifier passed to the provider
    "game_version": "GAME_UE5_LATEST",

    # Platform passed to the texture decoder
    "texture_platform": "DesktopMobile",

    # -------------------------------------------------------------------------
    # EXPORT SETTINGS
    # -------------------------------------------------------------------------
    # Number of parallel export workers
    "extraction_threads": _default_workers(),

    # Overwrite existing files during export
    "overwrite_existing": False,

    # Export types handled by the auto format
    "enabled_types": ["texture", "sound", "mesh", "animation", "other"],

    # Drop repeated entries when several patterns match the same package
    "dedupe_matches": False,

    # -------------------------------------------------------------------------
    # ADVANCED
    # -------------------------------------------------------------------------
    # Enable verbose logging
    "debug_mode": False,
}


# ==============================================================================
# CONFIGURATION CLASS
# ==============================================================================

def _setting(key: str, cast=None, doc: str = ""):
    """Property reading ``data[key]`` (falling back to DEFAULT_CONFIG) and marking writes."""

    def getter(self):
        value = self.data.get(key, DEFAULT_CONFIG[key])
        return cast(value) if cast else value

    def setter(self, value):
        self.data[key] = cast(value) if cast else value
        self._modified = True

    return property(getter, setter, doc=doc)


class Config:
    """
    Settings file for Package Exporter.

    Every key of DEFAULT_CONFIG is readable and writable as an attribute.
    Nothing touches the disk until load() or save() is called.

    Example:
        >>> config = Config("settings.json")
        >>> config.load()
        >>> config.overwrite_existing = True
        >>> config.save()
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or Paths.get_config_path()
        self.data: Dict[str, Any] = self._defaults()
        self._modified = False

    @staticmethod
    def _defaults() -> Dict[str, Any]:
        data = dict(DEFAULT_CONFIG)
        data["enabled_types"] = list(DEFAULT_CONFIG["enabled_types"])
        return data

    # -------------------------------------------------------------------------
    # FILE I/O
    # -------------------------------------------------------------------------

    def load(self) -> bool:
        """
        Merge the settings file into the current values.

        Only known keys are taken over. A missing, unreadable or malformed
        file leaves the current values untouched.

        Returns:
            True when the file was read and merged
        """
        if not os.path.isfile(self.config_path):
            logger.debug("No settings file at %s", self.config_path)
            return False

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except json.JSONDecodeError as e:
            logger.error("Settings file %s is not valid JSON: %s", self.config_path, e)
            return False
        except OSError as e:
            logger.error("Cannot read settings file %s: %s", self.config_path, e)
            return False

        if not isinstance(loaded, dict):
            logger.error("Settings file %s must hold a JSON object", self.config_path)
            return False

        known = {key: value for key, value in loaded.items() if key in self.data}
        self.data.update(known)
        logger.debug("Read %d settings from %s", len(known), self.config_path)
        self._modified = False
        return True

    def save(self) -> bool:
        """Write all values to the settings file, creating its folder. Returns success."""
        folder = os.path.dirname(self.config_path)
        try:
            if folder:
                os.makedirs(folder, exist_ok=True)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=4, sort_keys=True)
        except OSError as e:
            logger.error("Cannot write settings file %s: %s", self.config_path, e)
            return False

        logger.debug("Wrote settings to %s", self.config_path)
        self._modified = False
        return True

    def reset_to_defaults(self):
        self.data = self._defaults()
        self._modified = True

    @property
    def is_modified(self) -> bool:
        """True when values changed since the last load() or save()."""
        return self._modified

    # -------------------------------------------------------------------------
    # SETTINGS
    # -------------------------------------------------------------------------

    default_output_path = _setting('default_output_path', str, "Output folder used when -o is missing.")
    provider = _setting('provider', str, "Provider ID used to mount the input root.")
    game_version = _setting('game_version', str, "Engine version identifier.")
    texture_platform = _setting('texture_platform', str)
    overwrite_existing = _setting('overwrite_existing', bool)
    dedupe_matches = _setting('dedupe_matches', bool)
    debug_mode = _setting('debug_mode', bool)

    @property
    def extraction_threads(self) -> int:
        """Worker pool size, clamped to 1..64 on write."""
        return self.data.get('extraction_threads', _default_workers())

    @extraction_threads.setter
    def extraction_threads(self, value: int):
        self.data['extraction_threads'] = max(1, min(64, int(value)))
        self._modified = True

    @property
    def enabled_types(self) -> List[str]:
        """Export type names the auto format may produce (a copy)."""
        return list(self.data.get('enabled_types', DEFAULT_CONFIG['enabled_types']))

    @enabled_types.setter
    def enabled_types(self, value: List[str]):
        # Raises ValueError on unknown names
        ExportType.from_names(value)
        self.data['enabled_types'] = list(value)
        self._modified = True

    # -------------------------------------------------------------------------
    # RAW ACCESS
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any):
        self[key] = value

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any):
        self.data[key] = value
        self._modified = True


# ==============================================================================
# EXPORT OPTIONS
# ==============================================================================

@dataclass(frozen=True)
class ExportOptions:
    """
    Immutable settings for one export run.

    Passed explicitly to the orchestrator and output gate; nothing about a
    run lives in module-level state.

    Attributes:
        output_root:     Root folder for exported files (None in list mode)
        output_format:   Requested output format
        enabled_types:   Export types handled by the auto format
        overwrite:       Replace files that already exist
        workers:         Size of the worker pool
        texture_platform: Platform passed to the texture decoder
        dedupe:          Drop repeated catalog entries from the match set
        verbose:         Verbose logging (disables the progress line)
    """
    output_root: Optional[Path] = None
    output_format: OutputFormat = OutputFormat.AUTO
    enabled_types: ExportType = ExportType.ALL
    overwrite: bool = False
    workers: int = field(default_factory=_default_workers)
    texture_platform: str = "DesktopMobile"
    dedupe: bool = False
    verbose: bool = False

    def __post_init__(self):
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.output_root is not None and not isinstance(self.output_root, Path):
            object.__setattr__(self, 'output_root', Path(self.output_root))
        if not isinstance(self.output_format, OutputFormat):
            object.__setattr__(self, 'output_format', OutputFormat(self.output_format))

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "ExportOptions":
        """
        Build options from persistent settings plus explicit overrides.

        Overrides whose value is None are ignored, so CLI arguments that
        were not given fall back to the settings file.

        Args:
            config: Loaded Config instance
            **overrides: Field values that take precedence over the config

        Returns:
            A new ExportOptions instance
        """
        output_root = config.default_output_path or None
        options = cls(
            output_root=Path(output_root) if output_root else None,
            enabled_types=ExportType.from_names(config.enabled_types),
            overwrite=config.overwrite_existing,
            workers=max(1, int(config.extraction_threads)),
            texture_platform=config.texture_platform,
            dedupe=config.dedupe_matches,
            verbose=config.debug_mode,
        )
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(options, **changes) if changes else options


# ==============================================================================
# SHARED INSTANCE
# ==============================================================================

_shared: Optional[Config] = None


def get_config() -> Config:
    """Process-wide Config read from the default settings path on first use."""
    global _shared
    if _shared is None:
        _shared = Config()
        _shared.load()
    return _shared
