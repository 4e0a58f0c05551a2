# ==============================================================================
# PROVIDERS MODULE INIT
# ==============================================================================
# Interfaces to the asset library that mounts archives, parses packages and
# decodes exports, plus the built-in loose-file provider.
#
# Adding a new provider:
#   1. Subclass AssetProvider (and Package / ExportRef / Decoders)
#   2. Call ProviderRegistry.register(MyProvider), or declare it in the
#      "pkgexport.providers" entry-point group of your distribution
#
# Usage:
#   from pkgexport.providers import ProviderRegistry, ProviderOptions
#   provider = ProviderRegistry.create("directory")
#   provider.mount("MyGame", ProviderOptions())
# ==============================================================================

from .base_provider import (
    AssetProvider,
    CatalogEntry,
    Decoders,
    ExportRef,
    Package,
    ProviderOptions,
    ProviderRegistry,
)
from .directory_provider import DirectoryProvider

__all__ = [
    'AssetProvider',
    'CatalogEntry',
    'Decoders',
    'ExportRef',
    'Package',
    'ProviderOptions',
    'ProviderRegistry',
    'DirectoryProvider',
    'get_provider',
]


def get_provider(provider_id: str = "directory") -> AssetProvider:
    """
    Create an unmounted provider by ID.

    This is a convenience function that wraps ProviderRegistry.

    Args:
        provider_id: Registered provider ID

    Returns:
        A new provider instance

    Raises:
        KeyError: If no provider with that ID exists

    Example:
        >>> provider = get_provider("directory")
        >>> provider.mount("MyGame", ProviderOptions())
        >>> len(provider.files)
        42
    """
    return ProviderRegistry.create(provider_id)
