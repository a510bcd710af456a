"""Data anchor — plain Python structures that hold every shared group.

Groups are addressed by integer id. SharedGroup instances are thin handles
holding that id. The arena never keeps a host entity or a handle alive:
member entries hold weak references to their entities, and a group's state
is dropped here when its last handle is collected.
"""

import itertools

# Shared group state
values: dict[int, object] = {}
members: dict[int, list] = {}  # group_id -> [(weakref to entity, key) | None]
live_counts: dict[int, int] = {}  # group_id -> number of non-tombstone entries
pruned: set[int] = set()  # groups that lost a member to garbage collection

# ID generation
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def drop(group_id: int) -> None:
    values.pop(group_id, None)
    members.pop(group_id, None)
    live_counts.pop(group_id, None)
    pruned.discard(group_id)


def group_count() -> int:
    """Number of groups currently held by the arena. Useful for testing."""
    return len(members)
