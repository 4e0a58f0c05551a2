# ==============================================================================
# BASE PROVIDER MODULE
# ==============================================================================
# Abstract interfaces for the asset library that mounts a game archive,
# parses packages and decodes their exports. The exporter core only talks to
# these interfaces; container parsing, decryption and the actual decoders
# live behind them.
#
# To add support for a new archive library:
#   1. Subclass AssetProvider and implement all abstract methods
#   2. Subclass Package / ExportRef for its parsed packages
#   3. Optionally subclass Decoders for textures, audio and meshes
#   4. Register the provider with ProviderRegistry, or expose it through the
#      "pkgexport.providers" entry-point group
#
# Example:
#   class MyProvider(AssetProvider):
#       provider_id = "mylib"
#       ...
#
#   ProviderRegistry.register(MyProvider)
# ==============================================================================

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from importlib import metadata
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.errors import UnsupportedExportError
from ..core.log import get_logger

logger = get_logger(__name__)

PROVIDER_ENTRYPOINT_GROUP = "pkgexport.providers"


# ==============================================================================
# CATALOG ENTRY DATA CLASS
# ==============================================================================
@dataclass(frozen=True)
class CatalogEntry:
    """
    A file inside a mounted archive.

    Attributes:
        path (str):       Catalog key, forward slashes, unique in the catalog
        name (str):       File name (last path component)
        size (int):       Uncompressed size in bytes
        is_readable (bool): Whether the raw bytes can be read
    """
    path: str
    name: str = ""
    size: int = 0
    is_readable: bool = True

    def __post_init__(self):
        normalized = self.path.replace('\\', '/')
        if normalized != self.path:
            object.__setattr__(self, 'path', normalized)
        if not self.name:
            object.__setattr__(self, 'name', normalized.rsplit('/', 1)[-1])

    @property
    def extension(self) -> str:
        """Lowercase extension including the dot, or '' if there is none."""
        _, dot, ext = self.name.rpartition('.')
        return f".{ext.lower()}" if dot and ext else ""


@dataclass
class ProviderOptions:
    """
    Settings that only matter to the asset library.

    Attributes:
        game_version:     Engine version identifier (e.g. GAME_UE5_LATEST)
        aes_keys:         Hex AES keys to submit after mounting
        mappings_path:    Optional type mappings file
        texture_platform: Platform the textures were cooked for
    """
    game_version: str = "GAME_UE5_LATEST"
    aes_keys: List[str] = field(default_factory=list)
    mappings_path: Optional[str] = None
    texture_platform: str = "DesktopMobile"


# ==============================================================================
# PACKAGE INTERFACES
# ==============================================================================

class ExportRef(ABC):
    """
    A lazy reference to one export of a parsed package.

    ``name`` and ``class_chain`` must be cheap: they are read for every
    export while routing. ``load()`` materializes the full object and is
    only called for exports that are actually exported.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Export object name."""

    @property
    @abstractmethod
    def class_chain(self) -> Sequence[str]:
        """
        Class name of the export followed by its ancestors.

        Example: ("Texture2D", "Texture", "StreamableRenderAsset", "Object")
        """

    @abstractmethod
    def load(self) -> Any:
        """Fully load and return the export object."""


class Package(ABC):
    """A parsed structured container."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Package file name."""

    @property
    @abstractmethod
    def export_map_length(self) -> int:
        """Number of rows in the export table."""

    @abstractmethod
    def resolve_export(self, index: int) -> Optional[ExportRef]:
        """
        Resolve a 1-based export reference.

        Args:
            index: 1-based export table index

        Returns:
            The export reference, or None if the slot has no live object
        """

    @abstractmethod
    def get_exports(self) -> List[Any]:
        """Load and return every export object of the package."""


# ==============================================================================
# DECODERS
# ==============================================================================

class Decoders:
    """
    Conversion helpers supplied by the asset library.

    The defaults reject every export, so a provider that cannot decode
    anything still works for raw and structured exports.
    """

    def prepare(self):
        """One-time setup of shared decode helpers, called before exporting."""

    def decode_texture(self, obj: Any, platform: str) -> Sequence[Any]:
        """
        Decode a texture export.

        Args:
            obj: Loaded texture object
            platform: Texture platform name

        Returns:
            One Pillow image per frame (array textures have several);
            entries may be None for frames that failed to decode
        """
        raise UnsupportedExportError(f"texture decoding not supported for {obj!r}")

    def decode_audio(self, obj: Any) -> Tuple[Optional[str], Optional[bytes]]:
        """
        Decode a sound export.

        Returns:
            Tuple of (format tag such as "OGG", encoded bytes or None)
        """
        raise UnsupportedExportError(f"audio decoding not supported for {obj!r}")

    def mesh_output_path(self, obj: Any, destination_dir: str) -> Optional[str]:
        """
        File that export_mesh_or_animation() would write for an object.

        Returns:
            The prospective path, or None when it cannot be known up front
        """
        return None

    def export_mesh_or_animation(self, obj: Any, destination_dir: str,
                                 overwrite: bool = False) -> Tuple[bool, Optional[str]]:
        """
        Convert a mesh, skeleton or animation and write it below a folder.

        Args:
            obj: Loaded export
            destination_dir: Output root
            overwrite: Replace a file that already exists

        Returns:
            Tuple of (success, path of the written file). A successful call
            that kept an existing file returns None as the path.
        """
        raise UnsupportedExportError(f"mesh export not supported for {obj!r}")


# ==============================================================================
# PROVIDER BASE CLASS
# ==============================================================================

class AssetProvider(ABC):
    """
    Abstract base class for archive providers.

    The typical workflow is:
        1. Create provider instance
        2. mount() the input root
        3. Read files / try_load_package() for catalog entries
        4. close()

    Or use as a context manager:
        with DirectoryProvider() as provider:
            provider.mount("MyGame", ProviderOptions())
            entries = provider.files
    """

    # Unique short ID used by --provider
    provider_id: str = ""

    # Accepted version identifiers, None means any
    supported_versions: Optional[Iterable[str]] = None

    def __init__(self):
        self._decoders = Decoders()

    @property
    @abstractmethod
    def files(self) -> Mapping[str, CatalogEntry]:
        """Catalog of mounted files keyed by normalized path, in enumeration order."""

    @abstractmethod
    def mount(self, root: str, options: ProviderOptions):
        """
        Mount an input root and build the catalog.

        Args:
            root: Input game directory (or archive)
            options: Library settings (version, keys, mappings)
        """

    @abstractmethod
    def try_load_package(self, entry: CatalogEntry) -> Optional[Package]:
        """
        Parse a catalog entry as a structured container.

        Returns:
            The parsed package, or None if it cannot be parsed
        """

    @abstractmethod
    def read_raw(self, entry: CatalogEntry) -> bytes:
        """Read the raw bytes of a catalog entry."""

    def load_package(self, path: str) -> Package:
        """
        Parse the package stored at a catalog path.

        Raises:
            KeyError: If the path is not in the catalog
            ValueError: If the entry cannot be parsed
        """
        entry = self.files[path]
        package = self.try_load_package(entry)
        if package is None:
            raise ValueError(f"{path} is not a loadable package")
        return package

    @property
    def decoders(self) -> Decoders:
        """Decode helpers for texture, audio and mesh exports."""
        return self._decoders

    def validate_version(self, version: str) -> bool:
        """Check a version identifier against ``supported_versions``."""
        if self.supported_versions is None:
            return True
        return version in set(self.supported_versions)

    def close(self):
        """Release resources held by the provider."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


# ==============================================================================
# PROVIDER REGISTRY
# ==============================================================================
class ProviderRegistry:
    """
    Registry of available providers.

    Built-in providers register themselves at import time; third-party ones
    are discovered through the "pkgexport.providers" entry-point group the
    first time a lookup misses.

    Usage:
        ProviderRegistry.register(DirectoryProvider)
        provider = ProviderRegistry.create("directory")
    """

    _providers: Dict[str, type] = {}
    _plugins_loaded = False

    @classmethod
    def register(cls, provider_class: type) -> type:
        """
        Register a provider class.

        Args:
            provider_class: Class that inherits from AssetProvider

        Returns:
            The class itself, so this can be used as a decorator
        """
        provider_id = getattr(provider_class, 'provider_id', '')
        if not provider_id:
            raise ValueError(f"{provider_class.__name__} has no provider_id")
        cls._providers[provider_id] = provider_class
        logger.debug("Registered provider: %s (%s)", provider_class.__name__, provider_id)
        return provider_class

    @classmethod
    def _load_plugins(cls):
        cls._plugins_loaded = True
        for ep in metadata.entry_points(group=PROVIDER_ENTRYPOINT_GROUP):
            if ep.name in cls._providers:
                continue
            try:
                loaded = ep.load()
            except Exception as e:
                logger.warning("Failed to load provider plugin %s: %s", ep.name, e)
                continue
            if isinstance(loaded, type) and issubclass(loaded, AssetProvider):
                cls._providers.setdefault(ep.name, loaded)
            else:
                logger.warning("Entry point %s did not yield an AssetProvider", ep.name)

    @classmethod
    def get(cls, provider_id: str) -> Optional[type]:
        """Get a provider class by its ID, or None."""
        if provider_id not in cls._providers and not cls._plugins_loaded:
            cls._load_plugins()
        return cls._providers.get(provider_id)

    @classmethod
    def create(cls, provider_id: str) -> AssetProvider:
        """
        Instantiate a provider by ID.

        Raises:
            KeyError: If no provider with that ID exists
        """
        provider_class = cls.get(provider_id)
        if provider_class is None:
            raise KeyError(provider_id)
        return provider_class()

    @classmethod
    def list_ids(cls) -> List[str]:
        """IDs of all known providers, sorted."""
        if not cls._plugins_loaded:
            cls._load_plugins()
        return sorted(cls._providers)
