# ==============================================================================
# EXPORT ORCHESTRATOR
# ==============================================================================
# Drives a whole run:
#
#   IDLE -> RESOLVING -> RUNNING -> DRAINING -> COMPLETED | CANCELLED
#
#   1. resolve()  - candidate patterns -> merged list of catalog entries
#   2. run()      - every entry is exported on a thread pool; each
#                   iteration goes sniffer -> router -> pipeline -> gate
#
# Per-export and per-package failures are logged and the loop goes on.
# A container that fails to parse cancels the run: packages that have not
# started are skipped, packages in flight finish, nothing is rolled back.
#
# Usage:
#   orchestrator = Orchestrator(provider, options)
#   matches = orchestrator.resolve(["Game/Content/*"])
#   summary = orchestrator.run(matches)
#   print(summary.format())
# ==============================================================================

import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, TextIO

from ..providers.base_provider import AssetProvider, CatalogEntry, Package
from .concurrency import AtomicCounter, CancellationToken
from .config import ExportOptions
from .errors import FatalPackageError
from .log import get_logger
from .matcher import CatalogMatcher, has_wildcard
from .output import OutputGate, derive_folder
from .pipelines import (
    AudioPipeline,
    ExportJob,
    JobOutcome,
    MeshPipeline,
    RawPassthrough,
    StructuredDump,
    TexturePipeline,
)
from .router import ExportRouter, Route
from .serializer import JsonSerializer
from .sniffer import TypeSniffer

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class RunState(Enum):
    """Lifecycle of an orchestrator."""
    IDLE = "idle"
    RESOLVING = "resolving"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class RunSummary:
    """
    Outcome of a run, reported once at the end.

    Attributes:
        candidates: Packages in the merged match set
        processed:  Packages whose iteration actually ran
        exported:   Files written
        elapsed:    Wall-clock duration of the export phase
        cancelled:  Whether a fatal error cancelled the run
        error:      Reason for the cancellation
    """
    candidates: int = 0
    processed: int = 0
    exported: int = 0
    elapsed: timedelta = timedelta(0)
    cancelled: bool = False
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return 1 if self.cancelled else 0

    def format(self) -> str:
        """One-line human readable summary."""
        line = (f"Processed {self.processed} of {self.candidates} packages in {self.elapsed} "
                f"({self.exported} files exported)")
        if self.cancelled:
            line += " - cancelled"
        return line


class Orchestrator:
    """
    Runs one export over a mounted provider.

    Attributes:
        provider: Mounted asset provider
        options:  Run options
        state:    Current RunState
        token:    Cancellation signal shared by all workers
    """

    def __init__(self, provider: AssetProvider, options: ExportOptions,
                 router: Optional[ExportRouter] = None,
                 sniffer: Optional[TypeSniffer] = None,
                 serializer: Optional[JsonSerializer] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        """
        Args:
            provider: Mounted provider whose catalog is exported
            options: Run options
            router: Routing rules (default: built from options)
            sniffer: Export classifier
            serializer: Serializer for structured dumps
            progress_callback: Optional callback(current, total, path), called
                               from worker threads when a package starts
        """
        self.provider = provider
        self.options = options
        self.router = router or ExportRouter(options.enabled_types, options.output_format)
        self.sniffer = sniffer or TypeSniffer()
        self.serializer = serializer or JsonSerializer()
        self.progress_callback = progress_callback

        self.state = RunState.IDLE
        self.token = CancellationToken()
        self.exported = AtomicCounter()
        self._started = AtomicCounter()
        self._processed = AtomicCounter()

        self.gate: Optional[OutputGate] = None
        self._pipelines: Dict[Route, object] = {}
        self._raw: Optional[RawPassthrough] = None
        self._dump: Optional[StructuredDump] = None

    # ==========================================================================
    # RESOLVING
    # ==========================================================================

    def resolve(self, candidates: Iterable[str]) -> List[CatalogEntry]:
        """
        Resolve candidate patterns into the merged match set.

        Matches of each pattern keep catalog order and are appended in
        pattern order. Repeats are kept unless options.dedupe is set.

        Args:
            candidates: Paths/patterns from resolve_candidates()

        Returns:
            Catalog entries to export
        """
        self.state = RunState.RESOLVING
        files = self.provider.files
        matcher = CatalogMatcher(files.keys())

        matches: List[CatalogEntry] = []
        for pattern in candidates:
            paths = matcher.match(pattern)
            if has_wildcard(pattern):
                logger.info("Added wildcard: %s (%d matches)", pattern, len(paths))
            elif not paths:
                logger.info("Not found: %s", pattern)
            matches.extend(files[path] for path in paths)

        if self.options.dedupe:
            seen = set()
            unique = []
            for entry in matches:
                if entry.path not in seen:
                    seen.add(entry.path)
                    unique.append(entry)
            matches = unique

        return matches

    def list_matches(self, matches: Iterable[CatalogEntry], stream: Optional[TextIO] = None,
                     with_size: bool = False) -> int:
        """
        Print matched paths, one per line.

        Args:
            matches: Entries from resolve()
            stream: Output stream (default: sys.stdout)
            with_size: Print "path,size" lines instead of bare paths

        Returns:
            Number of lines printed
        """
        stream = stream or sys.stdout
        count = 0
        for entry in matches:
            if with_size:
                stream.write(f"{entry.path},{entry.size}\n")
            else:
                stream.write(f"{entry.path}\n")
            count += 1
        stream.flush()
        return count

    # ==========================================================================
    # RUNNING
    # ==========================================================================

    def _build_pipelines(self):
        self.gate = OutputGate(self.options, self.exported, self.token)
        self._pipelines = {
            Route.TEXTURE: TexturePipeline(self.gate, self.provider, self.options.texture_platform),
            Route.AUDIO: AudioPipeline(self.gate, self.provider),
            Route.MESH: MeshPipeline(self.gate, self.provider),
        }
        self._raw = RawPassthrough(self.gate, self.provider)
        self._dump = StructuredDump(self.gate, self.serializer)

    def run(self, matches: List[CatalogEntry]) -> RunSummary:
        """
        Export every entry of the match set.

        Args:
            matches: Entries from resolve()

        Returns:
            The run summary
        """
        self._build_pipelines()

        # Shared decode helpers are set up once, before any worker starts
        self.provider.decoders.prepare()

        total = len(matches)
        start = time.perf_counter()
        self.state = RunState.RUNNING

        with ThreadPoolExecutor(max_workers=self.options.workers) as executor:
            futures = [executor.submit(self._run_one, entry, total) for entry in matches]
            for future in as_completed(futures):
                if not future.cancelled():
                    future.result()
                if self.token.cancelled and self.state is RunState.RUNNING:
                    self.state = RunState.DRAINING
                    for pending in futures:
                        pending.cancel()
            self.state = RunState.DRAINING

        elapsed = timedelta(seconds=time.perf_counter() - start)
        cancelled = self.token.cancelled
        self.state = RunState.CANCELLED if cancelled else RunState.COMPLETED

        summary = RunSummary(
            candidates=total,
            processed=self._processed.value,
            exported=self.exported.value,
            elapsed=elapsed,
            cancelled=cancelled,
            error=self.token.reason,
        )
        logger.info("%s", summary.format())
        return summary

    def _run_one(self, entry: CatalogEntry, total: int) -> Optional[ExportJob]:
        """One loop iteration. Never raises."""
        if self.token.cancelled:
            return None

        job = ExportJob(
            entry=entry,
            folder=derive_folder(entry.path),
            output_format=self.router.target_format(entry),
        )
        try:
            current = self._started.increment()
            if self.progress_callback:
                self.progress_callback(current, total, entry.path)
            self.process(job)
        except FatalPackageError as e:
            job.outcome = JobOutcome.FAILED
            if self.token.cancel(str(e)):
                logger.error("%s", e)
        except Exception:
            job.outcome = JobOutcome.FAILED
            logger.exception("Failed to export %s", entry.path)
        finally:
            self._processed.increment()
        return job

    def process(self, job: ExportJob) -> ExportJob:
        """
        Export one package.

        Raises:
            FatalPackageError: If a container package cannot be parsed
        """
        entry = job.entry
        package = self.provider.try_load_package(entry)

        if package is None:
            logger.info("Could not load asset (maybe raw data) %s", entry.name)
            route = self.router.route_unparsed(entry, job.output_format)
        else:
            route = self.router.route_package(job.output_format)

        if route is Route.RAW:
            job.written = self._raw.export(job)
        elif route is Route.DUMP:
            job.written = self._dump.export(job, package)
        elif route is Route.SKIP:
            job.outcome = JobOutcome.SKIPPED
            return job
        else:
            job.written = self._export_by_type(job, package)

        if self.token.cancelled and not job.written:
            job.outcome = JobOutcome.CANCELLED
        else:
            job.outcome = JobOutcome.EXPORTED if job.written else JobOutcome.SKIPPED
        return job

    def _export_by_type(self, job: ExportJob, package: Package) -> int:
        """Send each enabled export to its pipeline; dump the package if none matched."""
        claimed = False
        written = 0

        for descriptor in self.sniffer.scan(package):
            route = self.router.route_export(descriptor)
            if route is None:
                continue
            claimed = True
            try:
                written += self._pipelines[route].export(job, descriptor)
            except Exception as e:
                logger.warning("Failed to export %s from %s: %s", descriptor.name, job.entry.name, e)

        if not claimed and self.router.fallback_route() is Route.DUMP:
            written += self._dump.export(job, package)

        return written
