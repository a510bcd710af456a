"""Accessor API — read, write, bind and unbind fields of any host entity.

These functions accept anything implementing the HostEntity protocol.
BindableObject and Store expose the same operations as methods.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from kvobind import dispatch, graph
from kvobind.group import same_value
from kvobind.slot import BoundSlot, HostEntity

bind_to = graph.bind_to
unbind = graph.unbind


def get(entity: HostEntity, key: str) -> object:
    """Current value of entity.key, shared or not."""
    graph.require_field(entity, key)
    slot = entity.read_slot(key)
    if isinstance(slot, BoundSlot):
        return slot.group.value
    return slot


def set(entity: HostEntity, key: str, value: object, force_callback: bool = False) -> None:
    """Write value to entity.key and notify whoever shares it.

    Writing an equal value is a no-op. On a bound field, force_callback
    notifies every member anyway.
    """
    graph.require_field(entity, key)
    slot = entity.read_slot(key)

    if isinstance(slot, BoundSlot):
        group = slot.group
        if same_value(group.value, value) and not force_callback:
            return
        group.value = value
        dispatch.notify_group(group)
        return

    if same_value(slot, value):
        return
    entity.write_slot(key, value)
    dispatch.notify_field(entity, key)


def set_values(entity: HostEntity, values: Mapping[str, object] | Iterable[tuple[str, object]]) -> None:
    """set() each pair in order. Pairs written before a failure stay written."""
    pairs = values.items() if isinstance(values, Mapping) else values
    for key, value in pairs:
        set(entity, key, value)


def is_bound(entity: HostEntity, key: str) -> bool:
    """True if entity.key shares its value through a group (as root or member)."""
    graph.require_field(entity, key)
    return isinstance(entity.read_slot(key), BoundSlot)


def unbind_all(entity: HostEntity) -> None:
    """Unbind every field of entity that is bound to a target.

    Fields that are only the root of a group are left alone.
    """
    for key in list(entity.field_names()):
        slot = entity.read_slot(key)
        if isinstance(slot, BoundSlot) and not slot.is_root:
            graph.unbind(entity, key)
