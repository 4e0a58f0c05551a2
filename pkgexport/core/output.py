# ==============================================================================
# OUTPUT GATE
# ==============================================================================
# Every exported file goes through here.
#
# Destination = <output root>/<folder>/<file name>, where folder is the
# catalog path up to its last '/'. Unless overwrite is on, a job whose
# destinations include ANY existing file is skipped as a whole, so a
# multi-file export is never half rewritten or half skipped.
#
# Two workers writing the same destination at the same time is not guarded
# against (last writer wins); distinct packages map to distinct files.
# ==============================================================================

from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .concurrency import AtomicCounter, CancellationToken
from .config import ExportOptions
from .log import get_logger

logger = get_logger(__name__)

# Payload of one output: bytes, or a callable producing them once the
# existence check has passed.
Payload = Union[bytes, Callable[[], bytes]]


def derive_folder(path: str) -> str:
    """
    Folder part of a catalog path.

    Example:
        >>> derive_folder("Game/Content/Hero.uasset")
        'Game/Content'
    """
    folder, sep, _ = path.rpartition('/')
    return folder if sep else ""


def change_extension(name: str, extension: str) -> str:
    """
    Swap the extension of a file name.

    Args:
        name: File name, with or without an extension
        extension: New extension, with or without the leading dot
    """
    if extension and not extension.startswith('.'):
        extension = '.' + extension
    stem, dot, _ = name.rpartition('.')
    if not dot or not stem:
        stem = name
    return stem + extension


class OutputGate:
    """
    Overwrite-aware writer for one run.

    Attributes:
        options: Run options (output root, overwrite flag)
        counter: Shared count of written files
        token:   Shared cancellation signal; nothing is written once raised
    """

    def __init__(self, options: ExportOptions,
                 counter: Optional[AtomicCounter] = None,
                 token: Optional[CancellationToken] = None):
        if options.output_root is None:
            raise ValueError("Output directory is not specified.")
        self.options = options
        self.root = Path(options.output_root)
        self._resolved_root = self.root.resolve()
        self.counter = counter or AtomicCounter()
        self.token = token or CancellationToken()

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------

    def destination(self, folder: str, filename: str) -> Path:
        """
        Build the destination of one output file.

        Raises:
            ValueError: If the result would land outside the output root
        """
        parts = [part for part in folder.split('/') if part] if folder else []
        path = self.root.joinpath(*parts, filename)
        resolved = path.resolve()
        if resolved != self._resolved_root and self._resolved_root not in resolved.parents:
            raise ValueError(f"Refusing to write outside the output root: {folder}/{filename}")
        return path

    def existing(self, paths: Sequence[Path]) -> List[Path]:
        """Destinations that already exist."""
        return [path for path in paths if path.exists()]

    def can_write(self, paths: Sequence[Path], silent: bool = False) -> bool:
        """
        All-or-nothing overwrite check.

        Args:
            paths: Every destination of one job
            silent: Don't log the outcome

        Returns:
            True if the job may write all of its outputs
        """
        if self.options.overwrite:
            return True
        present = self.existing(paths)
        if present and not silent:
            for path in present:
                logger.warning("Already exists %s", path)
        return not present

    # -------------------------------------------------------------------------
    # WRITING
    # -------------------------------------------------------------------------

    def write_all(self, folder: str, outputs: Sequence[Tuple[str, Payload]]) -> int:
        """
        Write the outputs of one job, or none of them.

        Args:
            folder: Folder below the output root
            outputs: (file name, payload) pairs

        Returns:
            Number of files written
        """
        if not outputs:
            return 0
        if self.token.cancelled:
            logger.debug("Run cancelled, not writing %s", folder)
            return 0

        try:
            paths = [self.destination(folder, filename) for filename, _ in outputs]
        except ValueError as e:
            logger.warning("%s", e)
            return 0

        if not self.can_write(paths):
            return 0

        written = 0
        for path, (_, payload) in zip(paths, outputs):
            data = payload() if callable(payload) else payload
            if data is None:
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Writing %s", path)
            path.write_bytes(data)
            self.counter.increment()
            written += 1
        return written

    def write(self, folder: str, filename: str, payload: Payload) -> bool:
        """Write a single output file. Returns True if it was written."""
        return self.write_all(folder, [(filename, payload)]) == 1

    def record(self, path: str):
        """Count a file written by the asset library itself."""
        logger.info("Exported %s", path)
        self.counter.increment()
