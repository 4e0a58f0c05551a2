# ==============================================================================
# TYPE SNIFFER
# ==============================================================================
# Classifies the exports of a parsed package without loading them.
#
# Only the class chain of each export is inspected; pixel data, audio
# buffers and geometry stay unloaded until a pipeline actually asks for
# them through ExportRef.load().
#
# Export table references are 1-based, so table row i is resolved as i + 1.
# ==============================================================================

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List

from ..providers.base_provider import ExportRef, Package
from .log import get_logger

logger = get_logger(__name__)


class ExportKind(Enum):
    """Leaf export types the router knows how to dispatch."""
    TEXTURE = "texture"
    SOUND = "sound"
    SOUND_MEDIA = "sound_media"
    ANIMATION_SEQUENCE = "animation_sequence"
    SKELETAL_MESH = "skeletal_mesh"
    STATIC_MESH = "static_mesh"
    SKELETON = "skeleton"
    OTHER = "other"


# Engine class name -> kind. Subclasses are caught through the class chain,
# e.g. Texture2DArray -> ... -> Texture.
CLASS_KINDS: Dict[str, ExportKind] = {
    "Texture": ExportKind.TEXTURE,
    "SoundWave": ExportKind.SOUND,
    "AkMediaAssetData": ExportKind.SOUND_MEDIA,
    "AnimSequenceBase": ExportKind.ANIMATION_SEQUENCE,
    "SkeletalMesh": ExportKind.SKELETAL_MESH,
    "StaticMesh": ExportKind.STATIC_MESH,
    "Skeleton": ExportKind.SKELETON,
}


def classify(class_chain) -> ExportKind:
    """
    Map a class chain (most derived first) to an export kind.

    Engine class names are accepted with or without their U prefix.
    """
    for class_name in class_chain:
        kind = CLASS_KINDS.get(class_name)
        if kind is None and len(class_name) > 1 and class_name[0] == 'U' and class_name[1].isupper():
            kind = CLASS_KINDS.get(class_name[1:])
        if kind is not None:
            return kind
    return ExportKind.OTHER


@dataclass(frozen=True)
class ExportDescriptor:
    """
    A classified export.

    Attributes:
        index: 0-based export table row
        kind:  Detected leaf type
        ref:   Lazy reference into the asset library
    """
    index: int
    kind: ExportKind
    ref: ExportRef

    @property
    def name(self) -> str:
        return self.ref.name


class TypeSniffer:
    """Walks a package's export table and classifies every live export."""

    def scan(self, package: Package) -> Iterator[ExportDescriptor]:
        """
        Classify the exports of a package lazily.

        Args:
            package: Parsed package

        Yields:
            One descriptor per resolvable export, in table order
        """
        for index in range(package.export_map_length):
            ref = package.resolve_export(index + 1)
            if ref is None:
                continue
            kind = classify(ref.class_chain)
            if kind is not ExportKind.OTHER:
                logger.debug("%s found in %s", kind.value, package.name)
            yield ExportDescriptor(index=index, kind=kind, ref=ref)

    def sniff(self, package: Package) -> List[ExportDescriptor]:
        """Return all descriptors of a package as a list."""
        return list(self.scan(package))
