"""
Vector: eager storage, lazy transform application.

A Vector keeps its elements in raw segments and records ``map``/``filter``
as a list of pending functions per segment. Nothing is applied until
``take``/``to_list``, and ``take(n)`` stops as soon as ``n`` results are
accepted, so later segments are never touched.

Unlike Sequence, a Vector is a single mutable object: ``map``, ``filter``,
``concat``, ``append`` and ``prepend`` change it in place and return
``self``. Every reference to the same Vector sees those changes.
"""

import logging
from typing import Any, Callable, Iterable, List

logger = logging.getLogger(__name__)

# marks an element rejected by a filter; never equal to a user value
_REMOVED = object()


def _apply(transforms: List[Callable], value):
    for fn in transforms:
        value = fn(value)
        if value is _REMOVED:
            break
    return value


class Vector:
    def __init__(self, items: Iterable = ()):
        self.segments: List[List[Any]] = [items if isinstance(items, list) else list(items)]
        self.transforms: List[List[Callable]] = [[]]

    @classmethod
    def of(cls, *items) -> "Vector":
        return cls(list(items))

    # --------- deferred transforms (mutating) ----------
    def map(self, fn) -> "Vector":
        for pending in self.transforms:
            pending.append(fn)
        return self

    def filter(self, pred) -> "Vector":
        def keep(x):
            return x if pred(x) else _REMOVED
        for pending in self.transforms:
            pending.append(keep)
        return self

    # --------- structural extension (mutating) ----------
    def concat(self, items: Iterable) -> "Vector":
        """Add ``items`` as a new segment; transforms recorded so far do not apply to it"""
        self.segments.append(items if isinstance(items, list) else list(items))
        self.transforms.append([])
        return self

    def append(self, x) -> "Vector":
        self.segments.append([x])
        self.transforms.append([])
        return self

    def prepend(self, x) -> "Vector":
        self.segments.insert(0, [x])
        self.transforms.insert(0, [])
        return self

    # --------- materializing ----------
    def take(self, n: int) -> "Vector":
        """
        New Vector with the first ``n`` accepted results.

        Stops walking segments the moment ``n`` results exist.
        """
        result: List[Any] = []
        if n <= 0:
            return Vector(result)
        for index, (segment, pending) in enumerate(zip(self.segments, self.transforms)):
            for raw in segment:
                value = _apply(pending, raw)
                if value is _REMOVED:
                    continue
                result.append(value)
                if len(result) == n:
                    logger.debug("take(%d) stopped in segment %d of %d", n, index + 1, len(self.segments))
                    return Vector(result)
        return Vector(result)

    def get(self, index: int, default=None):
        """Element at ``index`` after transforms, or ``default`` if out of range"""
        if index < 0:
            return default
        if not any(self.transforms):
            for segment in self.segments:
                if index < len(segment):
                    return segment[index]
                index -= len(segment)
            return default
        taken = self.take(index + 1).segments[0]
        return taken[index] if index < len(taken) else default

    def to_list(self) -> List[Any]:
        result = []
        for segment, pending in zip(self.segments, self.transforms):
            for raw in segment:
                value = _apply(pending, raw)
                if value is not _REMOVED:
                    result.append(value)
        return result

    def __iter__(self):
        return iter(self.to_list())

    def __repr__(self):
        pending = sum(len(p) for p in self.transforms)
        return f"Vector(segments={len(self.segments)}, pending_transforms={pending})"
