"""Uniform key-based access to parameter containers.

A value behaves as a ParameterSet if it exposes keys() and get(key).
Mappings already do; dataclass instances and namedtuples get explicit
adapters, and any other composite type needs an adapter registered with
register_adapter(). Adapters may also define default_allowed() and
default_prefix() to customize savename for their type.
"""

import dataclasses
import logging
from collections import namedtuple
from collections.abc import Mapping
from typing import Any, Callable, Dict, FrozenSet, Iterable, Tuple

from labwatson.exceptions import UnsupportedContainer
from labwatson.models import DEFAULT_ALLOWED_KINDS, ValueKind

logger = logging.getLogger(__name__)


class ParameterAdapter:
    """Base class for adapters giving a composite type the ParameterSet capability.

    Subclasses implement keys() and get(); the defaults of default_allowed()
    and default_prefix() match those used for plain dictionaries.
    """

    def __init__(self, obj: Any) -> None:
        self._obj = obj

    @property
    def wrapped(self) -> Any:
        """Return the adapted object."""
        return self._obj

    def keys(self) -> Iterable[str]:
        raise NotImplementedError

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def default_allowed(self) -> FrozenSet[ValueKind]:
        return DEFAULT_ALLOWED_KINDS

    def default_prefix(self) -> str:
        return ""


class DataclassParameters(ParameterAdapter):
    """Exposes the fields of a dataclass instance."""

    def keys(self) -> Tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(self._obj))

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self._obj, key, default)


class NamedTupleParameters(ParameterAdapter):
    """Exposes the fields of a namedtuple."""

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._obj._fields)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self._obj, key, default)


_ADAPTERS: Dict[type, Callable[[Any], Any]] = {}


def register_adapter(cls: type, factory: Callable[[Any], Any]) -> None:
    """Register an adapter factory for instances of cls (and its subclasses).

    Args:
        cls: The composite type to adapt
        factory: Callable taking an instance and returning an object with
            keys() and get(key)
    """
    _ADAPTERS[cls] = factory
    logger.debug(f"Registered parameter adapter for {cls.__name__}")


def unregister_adapter(cls: type) -> None:
    """Remove a previously registered adapter (no-op if absent)."""
    _ADAPTERS.pop(cls, None)


def is_namedtuple(obj: Any) -> bool:
    return isinstance(obj, tuple) and hasattr(type(obj), "_fields")


def as_parameters(c: Any) -> Any:
    """Return an object exposing keys() and get(key) for the container c.

    Raises:
        UnsupportedContainer: If c has no adapter and lacks the capability itself
    """
    for klass in type(c).__mro__:
        factory = _ADAPTERS.get(klass)
        if factory is not None:
            return factory(c)

    if isinstance(c, Mapping):
        return c
    if is_namedtuple(c):
        return NamedTupleParameters(c)
    if dataclasses.is_dataclass(c) and not isinstance(c, type):
        return DataclassParameters(c)
    if callable(getattr(c, "keys", None)) and callable(getattr(c, "get", None)):
        return c

    raise UnsupportedContainer(
        f"{type(c).__name__} does not expose keys()/get(); register an adapter for it"
    )


def all_access(c: Any) -> Tuple[Any, ...]:
    """Return all the keys c can be accessed with."""
    return tuple(as_parameters(c).keys())


def access(c: Any, *keys: Any) -> Any:
    """Access c with the given key; several keys are applied recursively.

    access(c, k1, k2) == access(access(c, k1), k2)

    Raises:
        KeyError: If a key is not accessible
    """
    if not keys:
        raise TypeError("access() needs at least one key")
    value = c
    for key in keys:
        source = as_parameters(value)
        if key not in source.keys():
            raise KeyError(key)
        value = source.get(key)
    return value


def default_allowed(c: Any) -> FrozenSet[ValueKind]:
    """Return the value kinds savename uses for c when none are requested."""
    hook = getattr(as_parameters(c), "default_allowed", None)
    if callable(hook):
        return frozenset(hook())
    return DEFAULT_ALLOWED_KINDS


def default_prefix(c: Any) -> str:
    """Return the prefix savename uses for c when none is given."""
    hook = getattr(as_parameters(c), "default_prefix", None)
    if callable(hook):
        return hook()
    return ""


def dict_of(**kwargs: Any) -> Dict[str, Any]:
    """Build a parameter dictionary from keyword arguments.

    Example:
        >>> dict_of(alpha=5, mode="test")
        {'alpha': 5, 'mode': 'test'}
    """
    return dict(kwargs)


def ntuple_to_dict(nt: Any) -> Dict[str, Any]:
    """Convert a namedtuple to a dictionary."""
    if not is_namedtuple(nt):
        raise UnsupportedContainer(f"Expected a namedtuple, got {type(nt).__name__}")
    return dict(nt._asdict())


def dict_to_ntuple(d: Mapping, typename: str = "Parameters") -> Any:
    """Convert a dictionary with identifier-like keys to a namedtuple.

    Raises:
        ValueError: If a key is not a valid field name
    """
    cls = namedtuple(typename, [str(k) for k in d.keys()])
    return cls(*d.values())
