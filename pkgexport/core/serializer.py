# ==============================================================================
# STRUCTURED SERIALIZER
# ==============================================================================
# Pretty-printed JSON dump of a package's exports, used for the json format
# and as the fallback when no pipeline claims a package.
#
# Each export becomes an object with a fixed key order:
#   {"Name": ..., "Class": ..., "Outer": ..., "Properties": {...}}
#
# Export objects are read duck-typed: name / class_name / outer /
# properties attributes, or the same keys on a mapping.
# ==============================================================================

import json
from typing import Any, Dict, Iterable, List


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _json_default(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    to_json = getattr(value, "to_json", None)
    if callable(to_json):
        return to_json()
    return str(value)


class JsonSerializer:
    """Serializes export objects into indented UTF-8 JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def describe(self, obj: Any) -> Dict[str, Any]:
        """Turn one export object into its ordered JSON record."""
        outer = _field(obj, "outer")
        if outer is not None and not isinstance(outer, (str, int, float, bool)):
            outer = _field(outer, "name", str(outer))
        return {
            "Name": _field(obj, "name"),
            "Class": _field(obj, "class_name"),
            "Outer": outer,
            "Properties": _field(obj, "properties", {}) or {},
        }

    def serialize(self, exports: Iterable[Any]) -> bytes:
        """
        Serialize exports.

        Args:
            exports: Loaded export objects of one package

        Returns:
            UTF-8 encoded JSON array
        """
        records: List[Dict[str, Any]] = [self.describe(obj) for obj in exports]
        text = json.dumps(records, indent=self.indent, ensure_ascii=False,
                          default=_json_default)
        return text.encode("utf-8")
