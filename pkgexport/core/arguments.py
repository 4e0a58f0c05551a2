# ==============================================================================
# ARGUMENT RESOLVER
# ==============================================================================
# Builds the ordered list of candidate patterns for a run.
#
# Package list files are plain text, one path or pattern per line:
#
#   # comment lines start with '#'
#   [section markers start with '[']
#   Game/Content/Textures/*
#   Game/Content/Audio/Music.uasset
#
# List-file lines come first (files in the order given), explicit
# arguments after them. Nothing is deduplicated.
# ==============================================================================

import os
from typing import Iterable, Iterator, List, Optional

from .log import get_logger

logger = get_logger(__name__)

# Pattern used when nothing was requested
MATCH_ALL = "*"

COMMENT_PREFIXES = ('#', '[')


def read_list_file(path: str) -> Iterator[str]:
    """
    Yield the patterns of one package list file.

    Blank lines, '#' comments and '[section]' markers are skipped, the
    remaining lines are stripped. Bytes that are not UTF-8 become
    U+FFFD instead of failing the run.

    Args:
        path: Path to the list file

    Yields:
        Patterns in file order
    """
    with open(path, 'r', encoding='utf-8-sig', errors='replace') as f:
        for line in f:
            trimmed = line.strip()
            if not trimmed or trimmed.startswith(COMMENT_PREFIXES):
                continue
            yield trimmed


def resolve_candidates(patterns: Optional[Iterable[str]] = None,
                       list_files: Optional[Iterable[str]] = None) -> List[str]:
    """
    Merge list-file entries and explicit patterns into one candidate list.

    Missing list files are skipped. If nothing remains, the result is the
    single match-all pattern.

    Args:
        patterns: Explicit paths/patterns from the command line
        list_files: Paths of package list files

    Returns:
        Ordered candidate patterns
    """
    candidates: List[str] = []

    for list_file in list_files or ():
        if not list_file or not os.path.isfile(list_file):
            logger.debug("Skipping missing list file %s", list_file)
            continue
        logger.info("Loading file list: %s", os.path.normpath(list_file))
        candidates.extend(read_list_file(list_file))

    for pattern in patterns or ():
        if pattern:
            candidates.append(pattern)

    if not candidates:
        candidates.append(MATCH_ALL)

    return candidates
