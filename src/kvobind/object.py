"""BindableObject — a host entity whose fields can be bound to other objects'.

Fields are declared with constructor keywords. A field's change hook is the
method named ``<field>_changed`` (the suffix is configurable), called with no
arguments after the new value is in place.

Usage:
    class View(BindableObject):
        def __init__(self):
            super().__init__(zoom=1)

        def zoom_changed(self):
            print("zoom is now", self.get("zoom"))

    model = BindableObject(zoom=3)
    view = View()
    view.bind_to("zoom", model)   # prints "zoom is now 3"
    model.set("zoom", 4)          # prints "zoom is now 4"
"""

from __future__ import annotations

from typing import Iterable, Mapping

from kvobind import accessor
from kvobind.errors import UndefinedFieldError
from kvobind.slot import Hook

# ─── Hook naming ─────────────────────────────────────────────────────────────
_hook_suffix = "_changed"


def set_hook_suffix(suffix: str) -> None:
    """Change the suffix BindableObject appends to a field name to find its hook.

    Call once at startup, before any hooks are looked up:
        kvobind.set_hook_suffix("_updated")
    """
    global _hook_suffix
    if not suffix:
        raise ValueError("hook suffix must be a non-empty string")
    _hook_suffix = suffix


def get_hook_suffix() -> str:
    return _hook_suffix


class BindableObject:
    """An object with named fields that can share values with other objects."""

    def __init__(self, **fields: object) -> None:
        self._slots: dict[str, object] = dict(fields)

    def declare(self, key: str, default: object = None) -> None:
        """Add a field after construction. Existing fields are left untouched."""
        self._slots.setdefault(key, default)

    # --- Host entity protocol ---

    def has_field(self, key: str) -> bool:
        return key in self._slots

    def field_names(self) -> list[str]:
        return list(self._slots)

    def read_slot(self, key: str) -> object:
        try:
            return self._slots[key]
        except KeyError:
            raise UndefinedFieldError(key, self) from None

    def write_slot(self, key: str, slot: object) -> None:
        self._slots[key] = slot

    def changed_hook(self, key: str) -> Hook | None:
        hook = getattr(self, key + _hook_suffix, None)
        return hook if callable(hook) else None

    # --- Accessors ---

    def get(self, key: str) -> object:
        return accessor.get(self, key)

    def set(self, key: str, value: object, force_callback: bool = False) -> None:
        accessor.set(self, key, value, force_callback)

    def set_values(self, values: Mapping[str, object] | Iterable[tuple[str, object]]) -> None:
        accessor.set_values(self, values)

    def bind_to(
        self,
        key: str,
        target: object,
        target_key: str | None = None,
        suppress_notify: bool = False,
    ) -> None:
        accessor.bind_to(self, key, target, target_key, suppress_notify)

    def unbind(self, key: str) -> None:
        accessor.unbind(self, key)

    def unbind_all(self) -> None:
        accessor.unbind_all(self)

    def is_bound(self, key: str) -> bool:
        return accessor.is_bound(self, key)

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={self.get(key)!r}" for key in self._slots)
        return f"{type(self).__name__}({fields})"
