# ==============================================================================
# CATALOG MATCHER
# ==============================================================================
# Resolves a package path or wildcard pattern against the catalog keys.
#
# Rules:
#   - No wildcard: exact, case-sensitive key lookup. No match is an empty
#     result, not an error.
#   - Wildcards: '*' matches any run of characters including '/', '?'
#     matches exactly one character. Every other character is literal.
#     Matching is case-insensitive and keeps catalog order.
#
# Usage:
#   matcher = CatalogMatcher(provider.files)
#   paths = matcher.match("Game/Content/*/T_*.uasset")
# ==============================================================================

import re
from functools import lru_cache
from typing import Collection, Iterable, List, Pattern

WILDCARD_CHARS = ('*', '?')


def has_wildcard(pattern: str) -> bool:
    """Check whether a pattern contains a wildcard metacharacter."""
    return any(char in pattern for char in WILDCARD_CHARS)


@lru_cache(maxsize=256)
def wildcard_to_regex(pattern: str) -> Pattern:
    """
    Compile a '*'/'?' wildcard into an anchored, case-insensitive regex.

    Args:
        pattern: Wildcard pattern (e.g., "*/Textures*")

    Returns:
        Compiled regular expression
    """
    parts = []
    for char in pattern:
        if char == '*':
            parts.append('.*')
        elif char == '?':
            parts.append('.')
        else:
            parts.append(re.escape(char))
    return re.compile(''.join(parts), re.IGNORECASE | re.DOTALL)


class CatalogMatcher:
    """
    Pattern matcher bound to one catalog.

    The catalog must not change while the matcher is in use.

    Attributes:
        paths: Catalog keys in enumeration order
    """

    def __init__(self, paths: Iterable[str]):
        self.paths: List[str] = list(paths)
        self._members = set(self.paths)

    def match(self, pattern: str) -> List[str]:
        """
        Resolve one pattern or path.

        Args:
            pattern: Catalog path or wildcard pattern

        Returns:
            Matching catalog keys in catalog order
        """
        pattern = pattern.replace('\\', '/')

        if not has_wildcard(pattern):
            return [pattern] if pattern in self._members else []

        regex = wildcard_to_regex(pattern)
        return [path for path in self.paths if regex.fullmatch(path)]


def match_pattern(paths: Collection[str], pattern: str) -> List[str]:
    """
    Resolve one pattern against a catalog without keeping a matcher around.

    Args:
        paths: Catalog keys (any ordered collection, e.g. a dict's keys)
        pattern: Catalog path or wildcard pattern

    Returns:
        Matching catalog keys in catalog order
    """
    return CatalogMatcher(paths).match(pattern)
