"""kvobind: key-value observer bindings between Python objects."""

from importlib.metadata import version as _version

__version__ = _version("kvobind")

from kvobind.errors import (
    BindingError,
    UndefinedFieldError,
    AlreadyBoundError,
    NotBoundError,
    CyclicBindingError,
    InvariantError,
)
from kvobind.slot import BoundSlot, FieldRef, HostEntity
from kvobind.group import SharedGroup
from kvobind.graph import check_group
from kvobind.accessor import set_values, bind_to, unbind, unbind_all, is_bound
from kvobind.accessor import get, set  # not in __all__: would shadow builtins
from kvobind.object import BindableObject, set_hook_suffix, get_hook_suffix
from kvobind.store import Store
# hot_reload NOT auto-imported: opt-in only

__all__ = [
    "BindingError",
    "UndefinedFieldError",
    "AlreadyBoundError",
    "NotBoundError",
    "CyclicBindingError",
    "InvariantError",
    "BoundSlot",
    "FieldRef",
    "HostEntity",
    "SharedGroup",
    "check_group",
    "set_values",
    "bind_to",
    "unbind",
    "unbind_all",
    "is_bound",
    "BindableObject",
    "set_hook_suffix",
    "get_hook_suffix",
    "Store",
]
