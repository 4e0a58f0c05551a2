# ==============================================================================
# PACKAGE EXPORTER - PATH UTILITIES
# ==============================================================================
# Where the exporter keeps its own files.
#
#   settings:  <user data dir>/config.json   (overridden by --settings)
#   exports:   <default output dir>          (used by --paths only; -o or
#                                            default_output_path decide)
#
# The user data dir can be moved with the PKGEXPORT_HOME environment
# variable. Looking a path up never creates it; Config.save() does.
#
# Usage:
#   from pkgexport.core.paths import Paths
#   settings = Paths.get_config_path()
# ==============================================================================

import os
import sys

HOME_ENV = "PKGEXPORT_HOME"


def _platform_data_root() -> str:
    """Per-user configuration root of the current platform."""
    home = os.path.expanduser('~')
    if sys.platform == 'win32':
        return os.environ.get('APPDATA', home)
    if sys.platform == 'darwin':
        return os.path.join(home, 'Library', 'Application Support')
    return os.environ.get('XDG_CONFIG_HOME', os.path.join(home, '.config'))


class Paths:
    """
    Path lookups for Package Exporter.

    Settings live in:
    - Windows: %APPDATA%/PackageExporter/
    - Linux: $XDG_CONFIG_HOME/PackageExporter/ (~/.config by default)
    - macOS: ~/Library/Application Support/PackageExporter/
    """

    APP_NAME = "PackageExporter"

    @classmethod
    def is_frozen(cls) -> bool:
        """True when running from a bundled executable."""
        return bool(getattr(sys, 'frozen', False))

    @classmethod
    def get_app_dir(cls) -> str:
        """Folder holding the executable, or the project root when run from source."""
        if cls.is_frozen():
            return os.path.dirname(sys.executable)
        # pkgexport/core/paths.py -> project root
        return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

    @classmethod
    def get_user_data_dir(cls) -> str:
        """
        Per-user data directory.

        Returns:
            $PKGEXPORT_HOME when set, the platform location otherwise
        """
        override = os.environ.get(HOME_ENV)
        if override:
            return os.path.abspath(os.path.expanduser(override))
        return os.path.join(_platform_data_root(), cls.APP_NAME)

    @classmethod
    def get_config_path(cls) -> str:
        """Get the path to the settings file (config.json)."""
        return os.path.join(cls.get_user_data_dir(), 'config.json')

    @classmethod
    def get_default_output_dir(cls) -> str:
        """Suggested export folder: ./Exports below the working directory."""
        return os.path.join(os.getcwd(), 'Exports')
