# ==============================================================================
# EXPORTER ERRORS
# ==============================================================================
# Exception types raised across the export pipeline.
#
# Categories:
#   - ArgumentValidationError: bad command-line input, reported before any
#     archive is mounted
#   - FatalPackageError: a structured container failed to parse; the whole
#     run is cancelled
#   - UnsupportedExportError: a single export could not be converted; the
#     export is skipped and the run continues
# ==============================================================================


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ArgumentValidationError(ExporterError):
    """Raised when command-line arguments are invalid."""


class FatalPackageError(ExporterError):
    """
    Raised when a package with a container extension cannot be parsed.

    This almost always means the environment is wrong (game version,
    AES keys or type mappings) rather than the file itself.

    Attributes:
        path: Catalog path of the package that failed
    """

    def __init__(self, path: str, message: str = None):
        self.path = path
        super().__init__(
            message or f"Could not load standard asset {path}, check game version, mappings or keys."
        )


class UnsupportedExportError(ExporterError):
    """Raised by decoders for an export they cannot convert."""
