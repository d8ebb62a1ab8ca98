"""
Translation tree helpers: dotted path walks and the layered merge.

A translation tree maps path segments to subtrees or strings. The merged tree
for a language takes the static tree as base and lets the inline tree override
at every nesting level, not only at the leaves.
"""

from typing import Any, List, Mapping, Tuple

_MISSING = object()


def split_path(path: str) -> List[str]:
    """Split a dotted path into segments (``a.items.2.b`` -> ``['a', 'items', '2', 'b']``)."""
    return [segment for segment in path.split('.') if segment] if path else []


def _step(node: Any, segment: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(segment, _MISSING)
    if isinstance(node, list) and segment.isdigit():
        index = int(segment)
        return node[index] if index < len(node) else _MISSING
    return _MISSING


def walk_path(tree: Any, path: str) -> Tuple[bool, Any]:
    """Walk every segment of ``path`` through ``tree``.

    Numeric segments index into lists. Walking stops at the first missing
    segment, including when an intermediate value is already a string.

    Returns:
        (found, value): found is False when any segment failed to resolve.
    """
    segments = split_path(path)
    if not segments:
        return False, None
    node = tree
    for segment in segments:
        node = _step(node, segment)
        if node is _MISSING:
            return False, None
    return True, node


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict:
    """Merge ``override`` into a copy of ``base``.

    Mappings merge recursively at every level, empty ones included; any
    other value (strings, lists) in ``override`` replaces the base value.
    """
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping):
            existing = result.get(key)
            result[key] = deep_merge(existing if isinstance(existing, Mapping) else {}, value)
        else:
            result[key] = value
    return result
