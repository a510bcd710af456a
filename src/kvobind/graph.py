"""Binding graph engine — promote, merge, split and reindex.

Every bound field sits in two structures at once:

- the flat observer array of its SharedGroup, at position ``self_index``,
  which is what change notification walks;
- a forest laid over that array: ``child_indices`` lists the positions of
  the fields that were bound directly to this one. Merges and splits only
  ever walk the subtree they affect, never the whole array.

The field at position 0 is the root of its group. Only non-root fields are
bound outward and can be unbound; a root may itself be bound to another
target, which merges its whole group into the target's.
"""

from __future__ import annotations

import logging

from kvobind import dispatch
from kvobind.errors import (
    AlreadyBoundError,
    CyclicBindingError,
    InvariantError,
    NotBoundError,
    UndefinedFieldError,
)
from kvobind.group import SharedGroup, same_value
from kvobind.slot import BoundSlot, FieldRef, HostEntity

logger = logging.getLogger("kvobind.graph")

_DONE = object()


def require_field(entity: HostEntity, key: str) -> None:
    if not entity.has_field(key):
        raise UndefinedFieldError(key, entity)


def promote(entity: HostEntity, key: str) -> BoundSlot:
    """Turn a simple field into the root of a new group. No-op if already bound."""
    require_field(entity, key)
    slot = entity.read_slot(key)
    if isinstance(slot, BoundSlot):
        return slot

    group = SharedGroup(slot)
    bound = BoundSlot(group.insert(FieldRef(entity, key)), group)
    entity.write_slot(key, bound)
    logger.debug("Promoted %s.%s into %r", type(entity).__name__, key, group)
    return bound


def bind_to(
    observer: HostEntity,
    key: str,
    target: HostEntity,
    target_key: str | None = None,
    suppress_notify: bool = False,
) -> None:
    """Make observer.key share target.target_key's value.

    If observer.key is already the root of a group, that whole group is
    merged into the target's. Every attached field whose value changed gets
    its change hook called once the merge is complete; with suppress_notify
    the field being bound is left out.
    """
    target_key = target_key or key

    require_field(target, target_key)
    require_field(observer, key)
    observer_slot = observer.read_slot(key)
    target_slot = target.read_slot(target_key)
    if isinstance(observer_slot, BoundSlot):
        if not observer_slot.is_root:
            raise AlreadyBoundError(key)
        if isinstance(target_slot, BoundSlot) and target_slot.group is observer_slot.group:
            raise CyclicBindingError(key, target_key)
    elif observer is target and key == target_key:
        raise CyclicBindingError(key, target_key)

    target_slot = promote(target, target_key)
    group = target_slot.group
    base = len(group)
    target_slot.child_indices.append(base)

    if isinstance(observer_slot, BoundSlot):
        previous = observer_slot.group.value
        group.absorb(observer_slot.group)
        _shift_range(group, base)
        logger.debug("Merged %s.%s into %r at offset %d", type(observer).__name__, key, group, base)
    else:
        previous = observer_slot
        index = group.insert(FieldRef(observer, key))
        observer.write_slot(key, BoundSlot(index, group))

    # Repoint everything first; hooks only see the finished merge.
    changed = []
    for index in range(base, len(group)):
        ref = group.entry(index)
        if ref is None:
            continue
        ref.slot.group = group
        if same_value(group.value, previous):
            continue
        if index == base and suppress_notify:
            continue
        changed.append(ref)

    dispatch.notify_fields(group, changed)


def _shift_range(group: SharedGroup, base: int) -> None:
    """Add base to every position stored by the entries appended at base.

    The appended entries are exactly the merged root's subtree, so this
    costs the same as walking it, and it also reaches members whose parent
    was garbage collected.
    """
    for index in range(base, len(group)):
        ref = group.entry(index)
        if ref is None:
            continue
        slot = ref.slot
        slot.self_index += base
        slot.child_indices = [child + base for child in slot.child_indices]


def unbind(entity: HostEntity, key: str) -> None:
    """Detach entity.key from its target, taking its own binders with it.

    A field nobody bound through just reverts to a simple value. Otherwise
    the field becomes the root of a new group holding its whole subtree,
    and the remaining members of the old group keep their positions.
    """
    require_field(entity, key)
    slot = entity.read_slot(key)
    if not isinstance(slot, BoundSlot) or slot.is_root:
        raise NotBoundError(key)

    old_group = slot.group
    old_group.tombstone(slot.self_index)

    if not slot.child_indices:
        entity.write_slot(key, old_group.value)
        logger.debug("Unbound %s.%s from %r", type(entity).__name__, key, old_group)
    else:
        new_group = SharedGroup(old_group.value, FieldRef(entity, key))
        rebind_subtree(new_group, old_group, slot)
        slot.self_index = 0
        slot.group = new_group
        logger.debug(
            "Split %s.%s out of %r into %r", type(entity).__name__, key, old_group, new_group
        )
        _collapse_if_alone(new_group)

    _collapse_if_alone(old_group)


class _Frame:
    __slots__ = ("slot", "ref", "pending", "relocated")

    def __init__(self, slot: BoundSlot, ref: FieldRef | None) -> None:
        self.slot = slot
        self.ref = ref
        self.pending = iter(slot.child_indices)
        self.relocated: list[int] = []


def rebind_subtree(new_group: SharedGroup, old_group: SharedGroup, parent: BoundSlot) -> None:
    """Move every descendant of parent from old_group into new_group.

    Post-order: a field's descendants are appended before the field itself.
    Tombstoned children leave a placeholder in new_group and are dropped
    from their parent's child_indices. The caller positions parent itself.
    """
    stack = [_Frame(parent, None)]
    while stack:
        frame = stack[-1]
        index = next(frame.pending, _DONE)
        if index is not _DONE:
            ref = old_group.tombstone(index)
            if ref is None:
                new_group.insert(None)
            else:
                stack.append(_Frame(ref.slot, ref))
            continue

        stack.pop()
        frame.slot.child_indices = frame.relocated
        if frame.ref is not None:
            frame.slot.group = new_group
            frame.slot.self_index = new_group.insert(frame.ref)
            stack[-1].relocated.append(frame.slot.self_index)


def _collapse_if_alone(group: SharedGroup) -> None:
    """Discard a group whose root is its only live member."""
    if not group.alive or group.live_count != 1:
        return
    refs = group.live_members()
    if refs:
        (ref,) = refs
        ref.entity.write_slot(ref.key, group.value)
        logger.debug("Collapsed %r back into %s.%s", group, type(ref.entity).__name__, ref.key)
    group.release()


def check_group(group: SharedGroup) -> None:
    """Verify a group's positional bookkeeping. Raises InvariantError.

    Members of a group that lost one of its members to garbage collection
    may no longer be reachable from the root, so reachability is only
    checked for groups that never did.
    """
    observers = group.observers
    if not group.pruned and (not observers or observers[0] is None):
        raise InvariantError("", f"{group!r} has no root at position 0")

    claimed: dict[int, str] = {}
    live = 0
    for index, ref in enumerate(observers):
        if ref is None:
            continue
        live += 1
        slot = ref.slot
        if not isinstance(slot, BoundSlot):
            raise InvariantError(ref.key, f"{ref.key} at {index} is not bound")
        if slot.self_index != index:
            raise InvariantError(
                ref.key, f"{ref.key} sits at {index} but believes it is at {slot.self_index}"
            )
        if slot.group is not group:
            raise InvariantError(ref.key, f"{ref.key} at {index} points at {slot.group!r}")
        for child in slot.child_indices:
            if not 0 < child < len(observers) or child == index:
                raise InvariantError(ref.key, f"{ref.key} claims out-of-range child {child}")
            if child in claimed:
                raise InvariantError(
                    ref.key, f"child {child} claimed by both {claimed[child]} and {ref.key}"
                )
            claimed[child] = ref.key

    if live != group.live_count:
        raise InvariantError("", f"{group!r} counts {group.live_count} live members, found {live}")
    if group.pruned:
        return
    for index, ref in enumerate(observers[1:], start=1):
        if ref is not None and index not in claimed:
            raise InvariantError(ref.key, f"{ref.key} at {index} is unreachable from the root")
