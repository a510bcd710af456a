"""Store — key-based host entity with explicitly registered change hooks.

A Store declares its fields from a schema. Instead of naming methods after
fields, callers register hooks with on_change(), which returns a disposer.
reconcile() supports schema evolution: add new keys and re-register hooks
without losing existing values or bindings.
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping

from kvobind import accessor
from kvobind.errors import UndefinedFieldError
from kvobind.slot import Hook

Disposer = Callable[[], None]


class Store:
    """Key-based bindable container with hook lifecycle."""

    def __init__(self, schema: dict[str, object], initial: dict | None = None) -> None:
        self._slots: dict[str, object] = {}
        self._hooks: dict[str, list[Hook]] = {}
        self._hook_disposers: list[Disposer] = []
        self._registering: list[Disposer] | None = None  # hooks added by a running setup_fn
        for key, default in schema.items():
            self._slots[key] = initial.get(key, default) if initial else default

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
        hooks = self._hooks.get(key)
        if not hooks:
            return None

        def _run_hooks() -> None:
            for hook in list(hooks):
                hook()

        return _run_hooks

    # --- Hooks ---

    def on_change(self, key: str, callback: Hook) -> Disposer:
        """Call callback() whenever key's value changes. Returns a function that removes it."""
        if key not in self._slots:
            raise UndefinedFieldError(key, self)
        hooks = self._hooks.setdefault(key, [])
        hooks.append(callback)

        def _remove() -> None:
            try:
                hooks.remove(callback)
            except ValueError:
                pass  # already removed

        if self._registering is not None:
            self._registering.append(_remove)
        return _remove

    # --- Accessors ---

    def get(self, key: str) -> object:
        return accessor.get(self, key)

    def set(self, key: str, value: object, force_callback: bool = False) -> None:
        accessor.set(self, key, value, force_callback)

    def update(self, values: Mapping[str, object] | Iterable[tuple[str, object]]) -> None:
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

    # --- Lifecycle ---

    def reconcile(self, schema: dict[str, object], setup_fn) -> None:
        """Schema evolution: add new keys, re-register hooks.

        Existing values and bindings are untouched. New keys get defaults.
        Old hooks are disposed, then setup_fn(store) registers new ones with
        on_change(). If setup_fn raises, the hooks it registered so far are
        removed again and the error propagates.
        """
        self._add_keys(schema)
        self._dispose_hooks()
        self._hook_disposers = self._register_hooks(setup_fn)

    def _add_keys(self, schema: dict[str, object]) -> list[str]:
        new_keys = [key for key in schema if key not in self._slots]
        for key in new_keys:
            self._slots[key] = schema[key]
        return new_keys

    def _register_hooks(self, setup_fn) -> list[Disposer]:
        """Run setup_fn, collecting every hook it registers on this store."""
        registered: list[Disposer] = []
        self._registering = registered
        try:
            returned = setup_fn(self) or []
        except Exception:
            for dispose in registered:
                dispose()
            raise
        finally:
            self._registering = None
        extra = [d for d in returned if not any(d is r for r in registered)]
        return registered + extra

    def _dispose_hooks(self):
        for dispose in self._hook_disposers:
            dispose()
        self._hook_disposers.clear()

    def dispose(self):
        """Drop registered hooks and detach every field bound to a target."""
        self._dispose_hooks()
        accessor.unbind_all(self)

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={self.get(key)!r}" for key in self._slots)
        return f"Store({fields})"
