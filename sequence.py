"""
Repeatable lazy sequences.

A Sequence wraps a factory: a zero-argument callable returning a brand-new
iterator every time it is invoked. Combinators return new Sequences whose
factories re-iterate the parent Sequence and apply one stage of logic, so a
pipeline can be consumed any number of times with the same result, and
nothing runs until a terminal consumer pulls.

User callbacks (mapping functions, predicates) run again on every
traversal. Sources built from single-pass iterators (generators, file
objects) are not repeatable; keeping the source re-iterable is the caller's
job.

Some operations need the whole input and never return on an infinite
Sequence: ``length``, ``count``, ``sum``, ``last``, ``take_last``,
``distinct`` (unbounded memory), ``group_by`` and the ``to_*``
materializers. Bound the input with ``take`` or ``take_while`` first.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Set

from predicates import is_hashable, is_iterable, is_iterator, is_pair_like

logger = logging.getLogger(__name__)

_MISSING = object()


class SequenceConstructionError(TypeError):
    """Raised when a Sequence is created from something that is not a factory."""
    pass


@dataclass(frozen=True)
class Reduced:
    """
    Final accumulator marker for ``reduce``/``fold``.

    A reducer that returns ``Reduced(value)`` stops the reduction; ``value``
    is returned without pulling any further elements.
    """
    result: Any


def _reduce(fn, acc, items: Iterator):
    if isinstance(acc, Reduced):
        return acc.result
    for x in items:
        acc = fn(acc, x)
        if isinstance(acc, Reduced):
            return acc.result
    return acc


def _as_pair(group) -> tuple:
    items = list(group)
    return items[0], items[1] if len(items) > 1 else None


class Sequence:
    """
    A lazy, re-consumable sequence of values.

    Sequence.range().map(lambda x: x * x).take(3) describes S[0, 1, 4];
    iterating it twice yields the same three values both times.
    """

    def __init__(self, factory: Callable[[], Iterable]):
        if not callable(factory):
            raise SequenceConstructionError("Cannot create Sequence from provided argument")
        self._factory = factory

    # --------- construction ----------
    @classmethod
    def of(cls, value) -> "Sequence":
        """
        Create a Sequence over an iterable, or a one-element Sequence for anything else.

        Strings are treated as single values. Mappings yield (key, value) pairs.
        The source is re-opened on every traversal, never copied, so later
        changes to it are visible.
        """
        if isinstance(value, Mapping):
            return cls(lambda: iter(value.items()))
        if is_iterable(value):
            return cls(lambda: iter(value))
        return cls(lambda: iter((value,)))

    @classmethod
    def of_items(cls, *items) -> "Sequence":
        """
        Create a Sequence from the arguments.

        A single argument behaves like ``of``, so of_items([1, 2]) is S[1, 2]
        rather than S[[1, 2]], while of_items([1], [2]) is S[[1], [2]].
        """
        if len(items) == 1:
            return cls.of(items[0])
        return cls.of(items)

    @classmethod
    def from_obj(cls, obj) -> "Sequence":
        """Create a Sequence of (key, value) pairs, snapshotted now"""
        entries = list(obj.items()) if isinstance(obj, Mapping) else list(vars(obj).items())
        return cls(lambda: iter(entries))

    @classmethod
    def range(cls, start=0, end=math.inf, step=1) -> "Sequence":
        """
        Arithmetic progression over [start, end).

        Sequence.range() is S[0, 1, 2, ...] and Sequence.range(0, 10, 2) is
        S[0, 2, 4, 6, 8]. A negative step counts down while the value is
        greater than ``end``.
        """
        def factory():
            n = start
            if step < 0:
                while n > end:
                    yield n
                    n += step
            else:
                while n < end:
                    yield n
                    n += step
        return cls(factory)

    @classmethod
    def repeat(cls, value, times=math.inf) -> "Sequence":
        """Repeat ``value`` a number of times (forever by default)"""
        def factory():
            i = 0
            while i < times:
                yield value
                i += 1
        return cls(factory)

    @classmethod
    def iterate(cls, fn, seed) -> "Sequence":
        """
        Infinite Sequence of fn(seed), fn(fn(seed)), ...

        The seed itself is not included: Sequence.iterate(lambda x: x + 1, 5)
        is S[6, 7, 8, ...].
        """
        def factory():
            value = seed
            while True:
                value = fn(value)
                yield value
        return cls(factory)

    # --------- transformations (lazy) ----------
    def map(self, fn) -> "Sequence":
        def factory():
            for x in self:
                yield fn(x)
        return Sequence(factory)

    def map_indexed(self, fn) -> "Sequence":
        """Apply fn(x, index) to each element"""
        def factory():
            for i, x in enumerate(self):
                yield fn(x, i)
        return Sequence(factory)

    def filter(self, pred) -> "Sequence":
        def factory():
            for x in self:
                if pred(x):
                    yield x
        return Sequence(factory)

    def remove(self, pred) -> "Sequence":
        """Opposite of filter: drop every element for which pred is true"""
        def factory():
            for x in self:
                if not pred(x):
                    yield x
        return Sequence(factory)

    def replace(self, replacements: Mapping) -> "Sequence":
        """Swap each element found as a key in ``replacements`` for its value"""
        def factory():
            for x in self:
                if is_hashable(x) and x in replacements:
                    yield replacements[x]
                else:
                    yield x
        return Sequence(factory)

    def compact(self, void_only=False) -> "Sequence":
        """Remove falsy elements, or only None when ``void_only`` is set"""
        if void_only:
            return self.filter(lambda x: x is not None)
        return self.filter(bool)

    def chunk(self, size: int, step: int = 1) -> "Sequence":
        """
        Group elements into Sequences of ``size``, the last one possibly shorter.

        Sequence.range().take(7).chunk(3) is S[S[0, 1, 2], S[3, 4, 5], S[6]].

        ``step`` only skips ahead: once a group is full, the next ``step - 1``
        elements are discarded before the following element opens a new
        group. Overlapping windows (step < size) cannot be expressed.
        """
        def factory():
            skip = step
            group = []
            for x in self:
                if len(group) < size:
                    group.append(x)
                elif skip > 1:
                    skip -= 1
                else:
                    yield Sequence.of(group)
                    group = [x]
                    skip = step
            if group:
                yield Sequence.of(group)
        return Sequence(factory)

    def flatten(self, flatten_strings=False) -> "Sequence":
        """
        Depth-first expansion of nested iterables.

        Sequence.of([1, [2, 3], [[4], [5, 6]]]).flatten() is S[1, 2, 3, 4, 5, 6].
        Strings stay whole unless ``flatten_strings`` is set, in which case
        they are split into characters. Mappings expand to their keys and
        values, as in ``of``.
        """
        def factory():
            for x in self:
                stack = [x]
                while stack:
                    current = stack.pop()
                    if isinstance(current, Mapping):
                        it = iter(current.items())
                    elif is_iterable(current, flatten_strings):
                        it = current if is_iterator(current) else iter(current)
                    else:
                        it = None
                    if it is not None:
                        value = next(it, _MISSING)
                        if value is not _MISSING:
                            stack.append(it)
                            stack.append(value)
                    else:
                        yield current
        return Sequence(factory)

    def mapcat(self, fn) -> "Sequence":
        """Map each element to an iterable and concatenate the results"""
        def factory():
            for x in self:
                yield from fn(x)
        return Sequence(factory)

    def distinct(self) -> "Sequence":
        """
        Drop elements already seen in this traversal.

        Memory grows with the number of distinct elements; on infinite
        input prefer ``dedupe``.
        """
        def factory():
            seen: Set[Any] = set()
            seen_unhashable: List[Any] = []
            for x in self:
                if is_hashable(x):
                    if x in seen:
                        continue
                    seen.add(x)
                else:
                    if x in seen_unhashable:
                        continue
                    seen_unhashable.append(x)
                yield x
        return Sequence(factory)

    def dedupe(self) -> "Sequence":
        """Drop consecutive duplicates: S[1, 1, 2, 2, 1] becomes S[1, 2, 1]"""
        def factory():
            prev = _MISSING
            for x in self:
                if prev is _MISSING or x != prev:
                    yield x
                    prev = x
        return Sequence(factory)

    # --------- shortening ----------
    def take(self, n) -> "Sequence":
        """First ``n`` elements; element ``n + 1`` is never pulled"""
        def factory():
            if n <= 0:
                return
            taken = 0
            for x in self:
                yield x
                taken += 1
                if taken >= n:
                    return
        return Sequence(factory)

    def take_while(self, pred) -> "Sequence":
        def factory():
            for x in self:
                if not pred(x):
                    return
                yield x
        return Sequence(factory)

    def take_last(self, n) -> "Sequence":
        """
        Last ``n`` elements.

        Makes two full passes over the parent (one to count, one to emit),
        so it never returns on an infinite Sequence.
        """
        def factory():
            length = 0
            for _ in self:
                length += 1
            start = length - n
            for i, x in enumerate(self):
                if i >= start:
                    yield x
        return Sequence(factory)

    def take_nth(self, n) -> "Sequence":
        """Every nth element, starting with the first: indices 0, n, 2n, ..."""
        def factory():
            countdown = 1
            for x in self:
                if countdown == 1:
                    countdown = n
                    yield x
                else:
                    countdown -= 1
        return Sequence(factory)

    def rest(self, start=1) -> "Sequence":
        """Everything from index ``start`` on"""
        def factory():
            for i, x in enumerate(self):
                if i >= start:
                    yield x
        return Sequence(factory)

    def drop(self, n) -> "Sequence":
        return self.rest(n)

    def drop_while(self, pred) -> "Sequence":
        """Skip leading elements while pred holds; re-scanned on every traversal"""
        def factory():
            it = iter(self)
            for x in it:
                if not pred(x):
                    yield x
                    break
            yield from it
        return Sequence(factory)

    def but_last(self) -> "Sequence":
        def factory():
            it = iter(self)
            prev = next(it, _MISSING)
            if prev is _MISSING:
                return
            for x in it:
                yield prev
                prev = x
        return Sequence(factory)

    def slice(self, start, end=math.inf) -> "Sequence":
        """Lazy counterpart of list[start:end] for non-negative bounds"""
        return self.drop(start).take(end - start)

    # --------- lengthening ----------
    def prepend(self, x) -> "Sequence":
        def factory():
            yield x
            yield from self
        return Sequence(factory)

    def append(self, x) -> "Sequence":
        def factory():
            yield from self
            yield x
        return Sequence(factory)

    def concat(self, *others: Iterable) -> "Sequence":
        """Sequence.of_items(1, 2).concat([3], [4, 5]) is S[1, 2, 3, 4, 5]"""
        def factory():
            yield from self
            for other in others:
                yield from other
        return Sequence(factory)

    def splice(self, start, delete_count=0, *items) -> "Sequence":
        """Remove ``delete_count`` elements at ``start`` and insert ``items`` there"""
        return self.take(start).concat(items, self.drop(start + delete_count))

    def cycle(self) -> "Sequence":
        """
        Repeat the Sequence forever, restarting a fresh traversal each time
        it runs out. Cycling an empty Sequence yields nothing.
        """
        def factory():
            lap = 1
            while True:
                produced = False
                for x in self:
                    produced = True
                    yield x
                if not produced:
                    return
                lap += 1
                logger.debug("cycle restarting, lap %d", lap)
        return Sequence(factory)

    def interleave(self, other: Iterable) -> "Sequence":
        """
        Alternate one element of this Sequence with one of ``other``.

        A pair is pulled from both sides before anything is emitted, and the
        traversal ends as soon as either side runs out:
        Sequence.of([0, 2, 4]).interleave([1, 3]) is S[0, 1, 2, 3].
        """
        def factory():
            mine = iter(self)
            theirs = iter(other)
            while True:
                a = next(mine, _MISSING)
                b = next(theirs, _MISSING)
                if a is _MISSING or b is _MISSING:
                    return
                yield a
                yield b
        return Sequence(factory)

    def interpose(self, separator) -> "Sequence":
        """Put ``separator`` between elements, never before the first or after the last"""
        def factory():
            it = iter(self)
            head = next(it, _MISSING)
            if head is _MISSING:
                return
            yield head
            for x in it:
                yield separator
                yield x
        return Sequence(factory)

    # --------- splitting ----------
    def split_at(self, n) -> "Sequence":
        """S[take(n), drop(n)]"""
        return Sequence.of_items(self.take(n), self.drop(n))

    def split_with(self, pred) -> "Sequence":
        """S[take_while(pred), drop_while(pred)]"""
        return Sequence.of_items(self.take_while(pred), self.drop_while(pred))

    def partition(self, pred) -> "Sequence":
        """S[elements passing pred, elements failing pred]; each side re-scans the parent"""
        return Sequence.of_items(self.filter(pred), self.remove(pred))

    def partition_by(self, fn) -> "Sequence":
        """
        Split into runs of consecutive elements with an equal ``fn`` result.

        Sequence.of_items(1, 1, 2, 2).cycle().partition_by(lambda x: x % 2)
        is S[S[1, 1], S[2, 2], S[1, 1], ...]. Each run is a take_while view
        over the remainder, not a copy; the remainder of the parent is found
        again by skipping the elements of earlier runs.
        """
        def factory():
            offset = 0
            while True:
                remaining = self.drop(offset)
                head = remaining.first(_MISSING)
                if head is _MISSING:
                    return
                key = fn(head)
                run = remaining.take_while(lambda x, key=key: fn(x) == key)
                yield run
                offset += run.length()
        return Sequence(factory)

    def group_by(self, fn) -> Dict[Any, "Sequence"]:
        """
        Eagerly group elements by fn(x) into a dict of Sequences.

        The whole Sequence is consumed, so it must be finite. Keys keep the
        order in which they were first seen.
        """
        groups: Dict[Any, List[Any]] = {}
        for x in self:
            groups.setdefault(fn(x), []).append(x)
        logger.debug("group_by produced %d groups", len(groups))
        return {key: Sequence.of(items) for key, items in groups.items()}

    # --------- consuming ----------
    def for_each(self, fn) -> None:
        """Call fn on every element for its side effects"""
        for x in self:
            fn(x)

    def reduce(self, fn, initial=_MISSING):
        """
        Combine elements left to right with fn(acc, x).

        Without ``initial`` the first element seeds the accumulator (see
        ``fold``). Any supplied initial value counts, including 0 and None.
        Returning ``Reduced(value)`` from ``fn`` stops early with ``value``.
        """
        if initial is _MISSING:
            return self.fold(fn)
        return _reduce(fn, initial, iter(self))

    def fold(self, fn):
        """Reduce using the first element as the initial value; None when empty"""
        it = iter(self)
        head = next(it, _MISSING)
        if head is _MISSING:
            return None
        return _reduce(fn, head, it)

    def sum(self, start=0):
        total = start
        for x in self:
            total += x
        return total

    def first(self, default=None):
        return next(iter(self), default)

    def second(self, default=None):
        return self.nth(1, default)

    def nth(self, n, default=None):
        """Element at index ``n``, or ``default`` when the Sequence is shorter"""
        for i, x in enumerate(self):
            if i == n:
                return x
        return default

    def last(self, default=None):
        result = default
        for x in self:
            result = x
        return result

    def is_empty(self) -> bool:
        return next(iter(self), _MISSING) is _MISSING

    def length(self) -> int:
        """Number of elements, counted in one full pass. Never returns on an infinite Sequence."""
        count = 0
        for _ in self:
            count += 1
        return count

    def count(self) -> int:
        return self.length()

    def every(self, pred=None) -> bool:
        """True if every element satisfies pred (or is truthy); stops at the first failure"""
        if pred is None:
            return all(self)
        return all(pred(x) for x in self)

    def any(self, pred=None) -> bool:
        if pred is None:
            return any(self)
        return any(pred(x) for x in self)

    def none(self, pred=None) -> bool:
        return not self.any(pred)

    def some(self, pred, default=None):
        """First element satisfying pred, or ``default``"""
        for x in self:
            if pred(x):
                return x
        return default

    # --------- materializing ----------
    def to_list(self) -> List[Any]:
        return list(self)

    def to_set(self) -> Set[Any]:
        return set(self)

    def to_string(self) -> str:
        """Concatenate str() of every element"""
        return "".join(str(x) for x in self)

    def to_dict(self) -> Dict[Any, Any]:
        """
        Build a dict from key/value pairs.

        Elements may be 2-element Sequences or 2-item lists/tuples. A
        Sequence of plain values is read as alternating keys and values:
        Sequence.of_items("a", 1, "b", 2).to_dict() is {"a": 1, "b": 2}.
        """
        return dict(self._pairs())

    def to_object(self) -> Dict[str, Any]:
        """Like to_dict, with every key converted to str"""
        return {str(key): value for key, value in self._pairs()}

    def _pairs(self) -> Iterable:
        head = self.first(_MISSING)
        if isinstance(head, Sequence) and head.length() == 2:
            return self.map(_as_pair)
        if is_pair_like(head):
            return self
        if head is _MISSING:
            return ()
        logger.debug("Reading scalar elements as alternating keys and values")
        return self.chunk(2).map(_as_pair)

    # --------- iterator protocol ----------
    def __iter__(self) -> Iterator:
        return iter(self._factory())

    def __repr__(self):
        stage = getattr(self._factory, "__qualname__", type(self._factory).__name__)
        return f"Sequence({stage})"
