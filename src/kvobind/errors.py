"""Errors raised by the binding engine.

All of them are raised as precondition checks before the graph is touched,
so a caller that catches one can assume nothing was mutated.
"""

from __future__ import annotations


class BindingError(Exception):
    """Base class for every error raised by kvobind."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class UndefinedFieldError(BindingError):
    """The entity has no field named ``key``."""

    def __init__(self, key: str, entity: object = None) -> None:
        where = f" on {type(entity).__name__}" if entity is not None else ""
        super().__init__(key, f'Undefined: property "{key}"{where}.')
        self.entity = entity


class AlreadyBoundError(BindingError):
    """The field is already bound to a target and must be unbound first."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f'"{key}" is already bound')


class NotBoundError(BindingError):
    """unbind() was called on a field that is not bound to a target."""

    def __init__(self, key: str) -> None:
        super().__init__(key, f'"{key}" is not a bound property.')


class CyclicBindingError(BindingError):
    """The target already shares a group with the field being bound."""

    def __init__(self, key: str, target_key: str) -> None:
        super().__init__(
            key, f'"{key}" already shares a value with target property "{target_key}"'
        )
        self.target_key = target_key


class InvariantError(BindingError):
    """check_group() found a group whose indices disagree with its members."""
