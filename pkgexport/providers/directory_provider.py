# ==============================================================================
# DIRECTORY PROVIDER
# ==============================================================================
# Mounts a folder of loose files as a catalog.
#
# This provider has no structured-container parser: try_load_package()
# never succeeds, so every file is treated as raw data. Container files
# (.uasset/.umap) found in a loose folder therefore stop the run, exactly as
# they would with a real library configured for the wrong game version.
#
# Usage:
#   provider = DirectoryProvider()
#   provider.mount("MyGame/Content", ProviderOptions())
#   data = provider.read_raw(provider.files["Maps/readme.txt"])
# ==============================================================================

import os
from typing import Dict, Mapping, Optional

from .base_provider import AssetProvider, CatalogEntry, Package, ProviderOptions, ProviderRegistry
from ..core.log import get_logger

logger = get_logger(__name__)


class DirectoryProvider(AssetProvider):
    """Loose-file provider; catalog paths are relative to the mounted root."""

    provider_id = "directory"

    def __init__(self):
        super().__init__()
        self.root: Optional[str] = None
        self._files: Dict[str, CatalogEntry] = {}

    @property
    def files(self) -> Mapping[str, CatalogEntry]:
        return self._files

    def mount(self, root: str, options: ProviderOptions):
        if not os.path.isdir(root):
            raise NotADirectoryError(f"Input directory does not exist: {root}")

        if options.aes_keys:
            logger.debug("Directory provider ignores %d AES key(s)", len(options.aes_keys))
        if options.mappings_path:
            logger.debug("Directory provider ignores mappings %s", options.mappings_path)

        self.root = os.path.abspath(root)
        found = []

        def on_walk_error(err: OSError):
            logger.warning("Error walking directory %s: %s", err.filename, err)

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=on_walk_error):
            dirnames.sort()
            for filename in filenames:
                full_path = os.path.join(dirpath, filename)
                rel_path = os.path.relpath(full_path, self.root).replace(os.sep, '/')
                try:
                    size = os.path.getsize(full_path)
                    readable = os.access(full_path, os.R_OK)
                except OSError as e:
                    logger.warning("Unable to stat %s: %s", full_path, e)
                    continue
                found.append(CatalogEntry(path=rel_path, name=filename, size=size,
                                          is_readable=readable))

        found.sort(key=lambda entry: entry.path)
        self._files = {entry.path: entry for entry in found}
        logger.debug("Mounted %d files from %s", len(self._files), self.root)

    def try_load_package(self, entry: CatalogEntry) -> Optional[Package]:
        return None

    def read_raw(self, entry: CatalogEntry) -> bytes:
        if self.root is None:
            raise RuntimeError("Provider is not mounted")
        with open(os.path.join(self.root, *entry.path.split('/')), 'rb') as f:
            return f.read()

    def close(self):
        self._files = {}
        self.root = None


ProviderRegistry.register(DirectoryProvider)
