# ==============================================================================
# EXPORT ROUTER
# ==============================================================================
# Decides what happens to a package and to each of its exports.
#
#   requested format | package parsed          | package not parsed
#   -----------------+-------------------------+---------------------------
#   auto             | per-export pipelines,   | raw copy, or FATAL for
#                    | structured dump if none | container extensions
#   raw              | raw copy                | raw copy / FATAL
#   json             | structured dump         | skipped / FATAL
#
# Under auto, map packages (.umap) are always dumped as json.
# ==============================================================================

from enum import Enum, IntFlag
from typing import Dict, Iterable, Optional

from ..providers.base_provider import CatalogEntry
from .errors import FatalPackageError
from .log import get_logger
from .sniffer import ExportDescriptor, ExportKind

logger = get_logger(__name__)

# Extensions that must parse as structured containers. Bulk data files
# (.ubulk, .uptnl, ...) are deliberately not listed.
CONTAINER_EXTENSIONS = ('.uasset', '.umap')

MAP_EXTENSIONS = ('.umap',)


class ExportType(IntFlag):
    """Export types that can be switched on and off for the auto format."""
    NONE = 0
    TEXTURE = 1 << 0
    SOUND = 1 << 1
    MESH = 1 << 2
    ANIMATION = 1 << 3
    OTHER = 1 << 4
    ALL = TEXTURE | SOUND | MESH | ANIMATION | OTHER

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "ExportType":
        """
        Build a mask from type names.

        Args:
            names: Names such as "texture" or "sound" (case-insensitive)

        Raises:
            ValueError: For an unknown name
        """
        mask = cls.NONE
        for name in names:
            try:
                mask |= cls[name.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown export type: {name}") from None
        return mask


class OutputFormat(str, Enum):
    """Requested output format."""
    AUTO = "auto"
    RAW = "raw"
    JSON = "json"
    CSV = "csv"  # list mode only


class Route(Enum):
    """Where a package or export is sent."""
    TEXTURE = "texture"
    AUDIO = "audio"
    MESH = "mesh"
    DUMP = "dump"
    RAW = "raw"
    SKIP = "skip"


# Every export kind maps to the type flag that enables it and its pipeline.
KIND_ROUTES: Dict[ExportKind, tuple] = {
    ExportKind.TEXTURE: (ExportType.TEXTURE, Route.TEXTURE),
    ExportKind.SOUND: (ExportType.SOUND, Route.AUDIO),
    ExportKind.SOUND_MEDIA: (ExportType.SOUND, Route.AUDIO),
    ExportKind.ANIMATION_SEQUENCE: (ExportType.ANIMATION, Route.MESH),
    ExportKind.SKELETAL_MESH: (ExportType.MESH, Route.MESH),
    ExportKind.STATIC_MESH: (ExportType.MESH, Route.MESH),
    ExportKind.SKELETON: (ExportType.MESH, Route.MESH),
    ExportKind.OTHER: (ExportType.NONE, Route.SKIP),
}

_unrouted = set(ExportKind) - set(KIND_ROUTES)
if _unrouted:
    raise RuntimeError(f"Export kinds without a route: {sorted(k.name for k in _unrouted)}")


class ExportRouter:
    """
    Routing decisions for one run.

    Attributes:
        enabled_types: Mask of export types handled under auto
        output_format: Requested format
        container_extensions: Extensions whose parse failures are fatal
    """

    def __init__(self, enabled_types: ExportType = ExportType.ALL,
                 output_format: OutputFormat = OutputFormat.AUTO,
                 container_extensions: Iterable[str] = CONTAINER_EXTENSIONS):
        self.enabled_types = ExportType(enabled_types)
        self.output_format = OutputFormat(output_format)
        self.container_extensions = tuple(ext.lower() for ext in container_extensions)

    def target_format(self, entry: CatalogEntry) -> OutputFormat:
        """Effective format for a package; maps are always dumped under auto."""
        if self.output_format is OutputFormat.AUTO and entry.extension in MAP_EXTENSIONS:
            return OutputFormat.JSON
        return self.output_format

    def route_unparsed(self, entry: CatalogEntry, target: OutputFormat) -> Route:
        """
        Route a package the provider could not parse.

        Args:
            entry: Catalog entry of the package
            target: Effective format from target_format()

        Returns:
            Route.RAW when raw output is allowed, Route.SKIP otherwise

        Raises:
            FatalPackageError: If the extension is reserved for containers
        """
        if entry.extension in self.container_extensions:
            raise FatalPackageError(entry.path)

        if target in (OutputFormat.AUTO, OutputFormat.RAW):
            return Route.RAW

        logger.info("Incompatible format: %s (format: %s, ext: %s) for %s",
                    target.value, self.output_format.value, entry.extension, entry.name)
        return Route.SKIP

    def route_package(self, target: OutputFormat) -> Optional[Route]:
        """
        Route a parsed package as a whole.

        Returns:
            The route for the whole package, or None when every export has
            to be routed on its own (auto)
        """
        if target is OutputFormat.AUTO:
            return None
        if target is OutputFormat.RAW:
            return Route.RAW
        if target is OutputFormat.JSON:
            return Route.DUMP
        return Route.SKIP

    def route_export(self, descriptor: ExportDescriptor) -> Optional[Route]:
        """
        Pipeline for one export under auto.

        Returns:
            The pipeline route, or None if the type is disabled or unknown
        """
        flag, route = KIND_ROUTES[descriptor.kind]
        if route is Route.SKIP or not (self.enabled_types & flag):
            return None
        return route

    def fallback_route(self) -> Route:
        """Route for a package none of whose exports was claimed."""
        if self.enabled_types & ExportType.OTHER:
            return Route.DUMP
        return Route.SKIP
