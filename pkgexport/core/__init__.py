# ==============================================================================
# CORE MODULE INIT
# ==============================================================================
# Core engine modules for Package Exporter.
#
# This package contains the export machinery:
#   - Arguments: Candidate patterns and package list files
#   - Matcher: Exact and wildcard catalog matching
#   - Sniffer / Router: Export classification and routing
#   - Pipelines / Output: Conversion paths and the overwrite-aware writer
#   - Orchestrator: Parallel run over the match set
#   - Config: Application configuration management
#
# Usage:
#   from pkgexport.core import Orchestrator, ExportOptions
#   from pkgexport.core.config import get_config
# ==============================================================================

from .errors import ExporterError, ArgumentValidationError, FatalPackageError, UnsupportedExportError
from .router import ExportRouter, ExportType, OutputFormat, Route
from .config import Config, ExportOptions, get_config
from .paths import Paths
from .arguments import resolve_candidates, read_list_file
from .matcher import CatalogMatcher, match_pattern
from .sniffer import ExportKind, TypeSniffer
from .output import OutputGate
from .orchestrator import Orchestrator, RunSummary, RunState

__all__ = [
    # Errors
    'ExporterError',
    'ArgumentValidationError',
    'FatalPackageError',
    'UnsupportedExportError',

    # Selection
    'resolve_candidates',
    'read_list_file',
    'CatalogMatcher',
    'match_pattern',

    # Routing
    'ExportKind',
    'TypeSniffer',
    'ExportRouter',
    'ExportType',
    'OutputFormat',
    'Route',

    # Running
    'OutputGate',
    'Orchestrator',
    'RunSummary',
    'RunState',

    # Configuration
    'Config',
    'ExportOptions',
    'get_config',

    # Paths
    'Paths',
]
