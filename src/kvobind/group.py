"""Shared groups — the canonical value plus every slot sharing it.

The observer array is positional: a BoundSlot's self_index is its offset in
this array, and removed members leave a tombstone (None) behind so nobody
else has to be renumbered. Positions are only ever handed out by insert().

Entries refer to their entities weakly. An entry whose entity has been
garbage collected reads as a tombstone and is turned into one the first
time it is looked at. The group itself lives as long as some slot holds
its handle.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import weakref
from typing import Generic, TypeVar

from kvobind import _anchor
from kvobind.slot import FieldRef

T = TypeVar("T")


def same_value(a: object, b: object) -> bool:
    return a is b or a == b


class SharedGroup(Generic[T]):
    """A value shared by one or more bound fields."""

    __slots__ = ("_id", "_finalizer", "__weakref__")

    def __init__(self, value: T, first: FieldRef | None = None) -> None:
        self._id = _anchor.new_id()
        _anchor.values[self._id] = value
        _anchor.members[self._id] = []
        _anchor.live_counts[self._id] = 0
        self._finalizer = weakref.finalize(self, _anchor.drop, self._id)
        if first is not None:
            self.insert(first)

    @property
    def value(self) -> T:
        return _anchor.values[self._id]

    @value.setter
    def value(self, value: T) -> None:
        _anchor.values[self._id] = value

    @property
    def observers(self) -> tuple[FieldRef | None, ...]:
        """Snapshot of the observer array. None marks a tombstone."""
        return tuple(self.entry(index) for index in range(len(self)))

    @property
    def live_count(self) -> int:
        """Non-tombstone entries, including collected ones not yet looked at."""
        return _anchor.live_counts[self._id]

    @property
    def alive(self) -> bool:
        return self._id in _anchor.members

    @property
    def pruned(self) -> bool:
        """True once a member of this group was lost to garbage collection."""
        return self._id in _anchor.pruned

    def __len__(self) -> int:
        return len(_anchor.members[self._id])

    def entry(self, index: int) -> FieldRef | None:
        entries = _anchor.members[self._id]
        member = entries[index]
        if member is None:
            return None
        entity_ref, key = member
        entity = entity_ref()
        if entity is None:
            entries[index] = None
            _anchor.live_counts[self._id] -= 1
            _anchor.pruned.add(self._id)
            return None
        return FieldRef(entity, key)

    def live_members(self) -> list[FieldRef]:
        refs = (self.entry(index) for index in range(len(self)))
        return [ref for ref in refs if ref is not None]

    def insert(self, ref: FieldRef | None) -> int:
        """Append an entry (or a tombstone placeholder) and return its position."""
        entries = _anchor.members[self._id]
        if ref is None:
            entries.append(None)
        else:
            entries.append((weakref.ref(ref.entity), ref.key))
            _anchor.live_counts[self._id] += 1
        return len(entries) - 1

    def tombstone(self, index: int) -> FieldRef | None:
        """Remove the entry at index without shifting anyone else."""
        ref = self.entry(index)
        if ref is not None:
            _anchor.members[self._id][index] = None
            _anchor.live_counts[self._id] -= 1
        return ref

    def absorb(self, other: SharedGroup) -> int:
        """Concatenate other's array onto ours and release other.

        Returns the base offset at which other's entries now live.
        """
        entries = _anchor.members[self._id]
        base = len(entries)
        entries.extend(_anchor.members[other._id])
        _anchor.live_counts[self._id] += _anchor.live_counts[other._id]
        if other.pruned:
            _anchor.pruned.add(self._id)
        other.release()
        return base

    def release(self) -> None:
        """Drop this group from the arena. The handle is dead afterwards."""
        self._finalizer()

    def __repr__(self) -> str:
        if not self.alive:
            return f"SharedGroup(#{self._id}, released)"
        return (
            f"SharedGroup(#{self._id}, value={self.value!r}, "
            f"live={self.live_count}/{len(self)})"
        )
