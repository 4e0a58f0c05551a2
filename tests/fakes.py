from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pkgexport.core.errors import UnsupportedExportError
from pkgexport.providers import (
    AssetProvider,
    CatalogEntry,
    Decoders,
    ExportRef,
    Package,
    ProviderOptions,
)


class FakeExportRef(ExportRef):
    """Export whose loaded object is the ref itself; ``payload`` feeds the decoders."""

    def __init__(self, name: str, class_chain: Sequence[str], payload: Any = None,
                 properties: Optional[Dict[str, Any]] = None) -> None:
        self._name = name
        self._chain = tuple(class_chain)
        self.payload = payload
        self.properties = properties or {}
        self.loads = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def class_chain(self) -> Sequence[str]:
        return self._chain

    @property
    def class_name(self) -> str:
        return self._chain[0]

    def load(self) -> Any:
        self.loads += 1
        return self


class FakePackage(Package):
    def __init__(self, name: str, exports: List[Optional[FakeExportRef]]) -> None:
        self._name = name
        self._exports = exports
        self.requested: List[int] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def export_map_length(self) -> int:
        return len(self._exports)

    def resolve_export(self, index: int) -> Optional[ExportRef]:
        self.requested.append(index)
        return self._exports[index - 1]

    def get_exports(self) -> List[Any]:
        return [ref for ref in self._exports if ref is not None]


class FakeDecoders(Decoders):
    def __init__(self) -> None:
        self.prepared = 0
        self.texture_calls = 0
        self.mesh_calls: List[Tuple[str, str]] = []
        self.announce_mesh_paths = True

    def prepare(self) -> None:
        self.prepared += 1

    def decode_texture(self, obj: Any, platform: str) -> Sequence[Any]:
        self.texture_calls += 1
        if isinstance(obj.payload, Exception):
            raise obj.payload
        return obj.payload

    def decode_audio(self, obj: Any) -> Tuple[Optional[str], Optional[bytes]]:
        if obj.payload is None:
            raise UnsupportedExportError(f"no audio in {obj.name}")
        return obj.payload

    def mesh_output_path(self, obj: Any, destination_dir: str) -> Optional[str]:
        if not self.announce_mesh_paths:
            return None
        return os.path.join(destination_dir, f"{obj.name}.psk")

    def export_mesh_or_animation(self, obj: Any, destination_dir: str,
                                 overwrite: bool = False) -> Tuple[bool, Optional[str]]:
        self.mesh_calls.append((obj.name, destination_dir))
        path = os.path.join(destination_dir, f"{obj.name}.psk")
        if os.path.exists(path) and not overwrite:
            return True, None
        os.makedirs(destination_dir, exist_ok=True)
        with open(path, "wb") as f:
            f.write(b"mesh")
        return True, path


class FakeProvider(AssetProvider):
    """In-memory provider: path -> (raw bytes, parsed package or None)."""

    provider_id = "fake"

    def __init__(self, contents: Optional[Dict[str, Tuple[bytes, Optional[FakePackage]]]] = None) -> None:
        super().__init__()
        self._decoders = FakeDecoders()
        self.contents = dict(contents or {})
        self._files = {
            path: CatalogEntry(path=path, size=len(raw)) for path, (raw, _) in self.contents.items()
        }
        self.mounted: Optional[Tuple[str, ProviderOptions]] = None

    @property
    def files(self) -> Mapping[str, CatalogEntry]:
        return self._files

    def mount(self, root: str, options: ProviderOptions) -> None:
        self.mounted = (root, options)

    def try_load_package(self, entry: CatalogEntry) -> Optional[Package]:
        return self.contents[entry.path][1]

    def read_raw(self, entry: CatalogEntry) -> bytes:
        return self.contents[entry.path][0]
