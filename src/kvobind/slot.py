"""Property slots — the per-entity, per-field storage cell.

A slot is either a plain value (Simple) or a BoundSlot pointing at a
SharedGroup. Host entities store whichever one they are handed; they never
look inside a BoundSlot themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Iterable, NamedTuple, Protocol

if TYPE_CHECKING:
    from kvobind.group import SharedGroup

Hook = Callable[[], None]


class HostEntity(Protocol):
    """Anything with named fields that the engine can bind.

    Groups refer to their members weakly, so entities must support weakref.
    """

    def has_field(self, key: str) -> bool: ...

    def field_names(self) -> Iterable[str]: ...

    def read_slot(self, key: str) -> object: ...

    def write_slot(self, key: str, slot: object) -> None: ...

    def changed_hook(self, key: str) -> Hook | None: ...


class FieldRef(NamedTuple):
    """One occupied entry of a group's observer array."""

    entity: HostEntity
    key: str

    @property
    def slot(self) -> object:
        return self.entity.read_slot(self.key)


class BoundSlot:
    """A field that shares its value through a SharedGroup."""

    __slots__ = ("self_index", "child_indices", "group")

    def __init__(self, self_index: int, group: SharedGroup) -> None:
        self.self_index = self_index
        self.child_indices: list[int] = []  # positions of fields bound directly to this one
        self.group = group

    @property
    def is_root(self) -> bool:
        return self.self_index == 0

    def __repr__(self) -> str:
        return (
            f"BoundSlot(index={self.self_index}, "
            f"children={self.child_indices}, group={self.group!r})"
        )
