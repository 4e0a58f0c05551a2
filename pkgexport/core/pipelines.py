# ==============================================================================
# EXPORT PIPELINES
# ==============================================================================
# One class per conversion path. Each pipeline turns a routed export (or a
# whole package) into output files and hands them to the OutputGate.
#
#   TexturePipeline  - decoded frames -> .png / .hdr
#   AudioPipeline    - decoded audio  -> .<format>
#   MeshPipeline     - meshes, skeletons and animations, written by the
#                      asset library itself
#   StructuredDump   - every export of a package -> .json
#   RawPassthrough   - the file bytes, unchanged
# ==============================================================================

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from PIL import Image

from ..providers.base_provider import AssetProvider, CatalogEntry, Package
from .imaging import encode_image
from .log import get_logger
from .output import OutputGate, change_extension
from .router import OutputFormat, Route
from .serializer import JsonSerializer
from .sniffer import ExportDescriptor

logger = get_logger(__name__)

# Texture file extensions checked before decoding
TEXTURE_EXTENSIONS = ("png", "hdr")


def as_frames(value: Any) -> Sequence[Any]:
    """Normalize a decoder result to a list of frames."""
    if value is None:
        return []
    if isinstance(value, Image.Image):
        return [value]
    return list(value)


class JobOutcome(Enum):
    """Final state of one package."""
    PENDING = "pending"
    EXPORTED = "exported"
    SKIPPED = "skipped"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ExportJob:
    """
    One package on its way through the pipeline.

    Attributes:
        entry:         Catalog entry being exported
        folder:        Catalog path up to the last '/'
        output_format: Effective format for this package
        outcome:       What happened to it
        written:       Files written for it
    """
    entry: CatalogEntry
    folder: str
    output_format: OutputFormat
    outcome: JobOutcome = JobOutcome.PENDING
    written: int = 0


class TexturePipeline:
    """Decodes texture exports and writes one image per frame."""

    route = Route.TEXTURE

    def __init__(self, gate: OutputGate, provider: AssetProvider, platform: str):
        self.gate = gate
        self.provider = provider
        self.platform = platform

    def export(self, job: ExportJob, descriptor: ExportDescriptor) -> int:
        name = descriptor.name

        # Skip the decode entirely when a previous run already wrote it
        if not self.gate.options.overwrite:
            targets = [self.gate.destination(job.folder, f"{name}.{ext}") for ext in TEXTURE_EXTENSIONS]
            if not self.gate.can_write(targets):
                return 0

        frames = [frame for frame in as_frames(
            self.provider.decoders.decode_texture(descriptor.ref.load(), self.platform)
        ) if frame is not None]

        encoded = [encode_image(frame) for frame in frames]
        if not encoded:
            logger.warning("Texture %s decoded to nothing", name)
            return 0

        if len(encoded) == 1:
            data, ext = encoded[0]
            outputs = [(f"{name}.{ext}", data)]
        else:
            outputs = [(f"{name}_{i}.{ext}", data) for i, (data, ext) in enumerate(encoded)]

        for (filename, _), frame in zip(outputs, frames):
            logger.debug("%s (%dx%d)", filename, frame.width, frame.height)
        return self.gate.write_all(job.folder, outputs)


class AudioPipeline:
    """Decodes sound waves and media assets to their native format."""

    route = Route.AUDIO

    def __init__(self, gate: OutputGate, provider: AssetProvider):
        self.gate = gate
        self.provider = provider

    def export(self, job: ExportJob, descriptor: ExportDescriptor) -> int:
        media_format, data = self.provider.decoders.decode_audio(descriptor.ref.load())
        if not data or not media_format:
            logger.warning("No audio data in %s", descriptor.name)
            return 0
        filename = f"{descriptor.name}.{media_format.lower()}"
        return self.gate.write_all(job.folder, [(filename, data)])


class MeshPipeline:
    """Hands meshes, skeletons and animations to the library's exporter."""

    route = Route.MESH

    def __init__(self, gate: OutputGate, provider: AssetProvider):
        self.gate = gate
        self.provider = provider

    def export(self, job: ExportJob, descriptor: ExportDescriptor) -> int:
        if self.gate.token.cancelled:
            return 0
        obj = descriptor.ref.load()
        root = str(self.gate.root)
        overwrite = self.gate.options.overwrite

        if not overwrite:
            target = self.provider.decoders.mesh_output_path(obj, root)
            if target and not self.gate.can_write([Path(target)]):
                return 0

        ok, written_path = self.provider.decoders.export_mesh_or_animation(obj, root, overwrite)
        if not ok:
            logger.warning("Could not export %s", descriptor.name)
            return 0
        if written_path is None:
            logger.debug("Kept existing output of %s", descriptor.name)
            return 0
        self.gate.record(written_path)
        return 1


class StructuredDump:
    """Serializes every export of a package into one json file."""

    route = Route.DUMP

    def __init__(self, gate: OutputGate, serializer: Optional[JsonSerializer] = None):
        self.gate = gate
        self.serializer = serializer or JsonSerializer()

    def export(self, job: ExportJob, package: Package) -> int:
        filename = change_extension(job.entry.name, ".json")
        # Exports are only loaded once the destination check has passed
        return self.gate.write_all(job.folder, [
            (filename, lambda: self.serializer.serialize(package.get_exports())),
        ])


class RawPassthrough:
    """Copies the file bytes as they are stored in the archive."""

    route = Route.RAW

    def __init__(self, gate: OutputGate, provider: AssetProvider):
        self.gate = gate
        self.provider = provider

    def export(self, job: ExportJob) -> int:
        entry = job.entry
        if not entry.is_readable:
            logger.warning("%s cannot be read as raw data", entry.path)
            return 0
        return self.gate.write_all(job.folder, [
            (entry.name, lambda: self.provider.read_raw(entry)),
        ])
