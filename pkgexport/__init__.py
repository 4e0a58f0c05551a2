# ==============================================================================
# PACKAGE EXPORTER - SOURCE PACKAGE
# ==============================================================================
# Bulk exporter for packages stored in mounted game archives.
#
# Subpackages:
#   - core: Matching, routing, export pipelines, output, configuration
#   - providers: Archive providers (catalog, package loading, decoders)
#
# Entry points:
#   - main.py: Launcher
#   - pkgexport/cli.py: Command-line interface
# ==============================================================================

__version__ = "1.0.0"
__description__ = "Bulk exporter for mounted game asset archives"

# Convenience imports
from .core import Orchestrator, RunSummary, ExportOptions, ExportType, OutputFormat
from .providers import AssetProvider, ProviderRegistry, get_provider

__all__ = [
    '__version__',
    '__description__',

    # Core
    'Orchestrator',
    'RunSummary',
    'ExportOptions',
    'ExportType',
    'OutputFormat',

    # Providers
    'AssetProvider',
    'ProviderRegistry',
    'get_provider',
]
