"""Change notification — call each member's change hook after a mutation.

Hooks run synchronously, in observer-array order, once per mutation. The
member list is captured before the first hook runs, so a hook that binds
new fields does not get them called for the same mutation. A member that a
previous hook moved out of the group is skipped.
"""

from __future__ import annotations

import logging
from typing import Iterable

from kvobind.group import SharedGroup
from kvobind.slot import BoundSlot, FieldRef, HostEntity

logger = logging.getLogger("kvobind.dispatch")


def notify_fields(group: SharedGroup, refs: Iterable[FieldRef]) -> None:
    """Call the change hook of each ref that still belongs to group."""
    for ref in list(refs):
        slot = ref.slot
        if not isinstance(slot, BoundSlot) or slot.group is not group:
            continue
        notify_field(ref.entity, ref.key)


def notify_group(group: SharedGroup) -> None:
    """Notify every live member of group."""
    refs = group.live_members()
    logger.debug("Notifying %d members of %r", len(refs), group)
    notify_fields(group, refs)


def notify_field(entity: HostEntity, key: str) -> None:
    hook = entity.changed_hook(key)
    if hook is not None:
        hook()
