"""
Bindery converters: the explicit registry of string-to-value functions.

Overview
- register(type, converter) / @converter(type): add a converter for an exact type.
- unregister(type): remove it again (e.g., to replace the default bool converter).
- lookup(type): the converter registered for exactly that type, or None.
- registry(): read-only view over the whole registry.
- SupportsFromString: capability a class implements to be built from one string
  through a `__fromstring__(text)` classmethod.

A converter takes exactly one string and returns the value, raising any
exception (typically ValueError) to reject the token. The coercion engine turns
those exceptions into BadValueError; a converter may also raise a bindery fault
itself, which is propagated unchanged.

Registry entries are matched on the exact type: a converter for `int` does not
apply to `bool` or to an IntEnum.
"""
import builtins
from types import MappingProxyType
from typing import Protocol, Self, runtime_checkable

_registry = {}


@runtime_checkable
class SupportsFromString(Protocol):
    """
    Capability: "constructible from a single string".

    Implement `__fromstring__` as a classmethod returning a new instance.
    Setting `__fromstring__ = None` on a subclass withdraws an inherited one;
    the coercion engine then reports the type as unsupported.
    """

    @classmethod
    def __fromstring__(cls, text: str, /) -> Self: ...


def register(type, converter, /):
    """
    Register `converter` for the exact class `type`.

    Raises
    - TypeError: `type` is not a class or `converter` is not callable.
    - ValueError: a converter is already registered for `type`.
    """
    if not isinstance(type, builtins.type):
        raise TypeError("register() first argument must be a class")
    if not callable(converter):
        raise TypeError("register() second argument must be callable")
    if type in _registry:
        raise ValueError(f"a converter for {type.__name__!r} is already registered")
    _registry[type] = converter
    return converter


def unregister(type, /):
    """
    Remove and return the converter registered for `type`.

    Raises
    - KeyError: nothing is registered for `type`.
    """
    try:
        return _registry.pop(type)
    except KeyError:
        raise KeyError(f"no converter is registered for {getattr(type, '__name__', type)!r}") from None


def converter(type, /):
    """
    Decorator form of register().

        @converter(Version)
        def parse_version(text):
            return Version(*map(int, text.split(".")))
    """
    def wrapper(callback, /):
        return register(type, callback)
    return wrapper


def lookup(type, /):
    """Return the converter registered for exactly `type`, or None."""
    return _registry.get(type)


def registry():
    """Read-only view over the registry ({type: converter})."""
    return MappingProxyType(_registry)


_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


@converter(bool)
def _boolean(text, /):
    # bool("false") is True, so bool needs a converter of its own.
    if (folded := text.strip().casefold()) in _TRUE:
        return True
    if folded in _FALSE:
        return False
    raise ValueError("expected one of: %s" % ", ".join(sorted(_TRUE | _FALSE)))


__all__ = (
    "SupportsFromString",
    "register",
    "unregister",
    "converter",
    "lookup",
    "registry",
)
