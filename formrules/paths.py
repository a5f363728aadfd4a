"""Dot-notation path accessor.

Rules address values in the source object by dot-separated paths such as
``"address.post_code"`` or ``"subs.0.bread"``. Segments are resolved against:

- mappings, by key (a purely numeric segment also matches an ``int`` key)
- sequences (lists, tuples, ... but never strings), by index when the segment
  is purely numeric
- any other object, by attribute name

Missing segments resolve to a default instead of raising, so a rule pointing
at an absent value simply sees ``None``.

Examples:
    >>> source = {"address": {"post_code": 4890}, "subs": [{"bread": "rye"}]}
    >>> get_path(source, "address.post_code")
    4890
    >>> get_path(source, "subs.0.bread")
    'rye'
    >>> get_path(source, "subs.3.bread") is None
    True
    >>> join_path("subs.0", "", "bread")
    'subs.0.bread'
"""

from collections.abc import Mapping, MutableMapping, Sequence
from typing import Any, List

from formrules.errors import InvalidPathError

_MISSING = object()


def split_path(path: str) -> List[str]:
    """Split a dot-path into its non-empty segments.

    Raises:
        InvalidPathError: If path is not a string
    """
    if not isinstance(path, str):
        raise InvalidPathError(path)
    return [segment for segment in path.split(".") if segment]


def join_path(*parts: str) -> str:
    """Join path fragments, each possibly multi-segment, dropping empty segments."""
    segments: List[str] = []
    for part in parts:
        segments.extend(split_path(part))
    return ".".join(segments)


def is_sequence(value: Any) -> bool:
    """Return True for list-like values; strings and bytes are not sequences here."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _child(container: Any, segment: str) -> Any:
    if container is None:
        return _MISSING
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        if segment.isdigit() and int(segment) in container:
            return container[int(segment)]
        return _MISSING
    if is_sequence(container):
        if segment.isdigit() and int(segment) < len(container):
            return container[int(segment)]
        return _MISSING
    if isinstance(container, (str, bytes, bytearray)):
        return _MISSING
    return getattr(container, segment, _MISSING)


def get_path(obj: Any, path: str, default: Any = None) -> Any:
    """Read the value at ``path`` inside ``obj``.

    Args:
        obj: Root object (mapping, sequence or plain object)
        path: Dot-separated path
        default: Value returned when any segment is missing

    Returns:
        The value found, or ``default``

    Raises:
        InvalidPathError: If path is not a string
    """
    segments = split_path(path)
    if not segments:
        return default
    current = obj
    for segment in segments:
        current = _child(current, segment)
        if current is _MISSING:
            return default
    return current


def _assign(container: Any, segment: str, value: Any, path: str) -> None:
    if isinstance(container, MutableMapping):
        container[segment] = value
    elif isinstance(container, list):
        if not segment.isdigit():
            raise InvalidPathError(path, f"segment {segment!r} does not index a list")
        index = int(segment)
        if index >= len(container):
            container.extend([None] * (index + 1 - len(container)))
        container[index] = value
    else:
        try:
            setattr(container, segment, value)
        except (AttributeError, TypeError) as exc:
            raise InvalidPathError(
                path, f"cannot set {segment!r} on {type(container).__name__}"
            ) from exc


def set_path(obj: Any, path: str, value: Any) -> Any:
    """Write ``value`` at ``path`` inside ``obj``, creating containers as needed.

    Missing intermediate containers are created as ``dict`` objects, or as
    ``list`` objects when the following segment is purely numeric. Lists are
    padded with ``None`` up to the written index.

    Returns:
        The root object, for chaining

    Raises:
        InvalidPathError: If path is not a string, is empty, or crosses a
            value that cannot hold children

    Examples:
        >>> set_path({}, "subs.1.bread", "rye")
        {'subs': [None, {'bread': 'rye'}]}
    """
    segments = split_path(path)
    if not segments:
        raise InvalidPathError(path, "path has no segments")
    current = obj
    for segment, following in zip(segments, segments[1:]):
        child = _child(current, segment)
        if child is _MISSING or child is None:
            child = [] if following.isdigit() else {}
            _assign(current, segment, child, path)
        current = child
    _assign(current, segments[-1], value, path)
    return obj


__all__ = [
    "split_path",
    "join_path",
    "is_sequence",
    "get_path",
    "set_path",
]
