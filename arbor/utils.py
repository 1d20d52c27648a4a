"""
Helpers shared by the descriptors, the option table and the driver.

- Unset: "not given" marker for keyword defaults, where None is a real value
  (an option without long name, a command without callback...).
- coalesce(): turn Unset into a default, leaving None/0/"" alone.
- rename(): give generated functions a readable __name__ in tracebacks.
- mirror(): read-only property over a "_<name>" backing field.

    >>> coalesce(Unset, 79)
    79
    >>> coalesce(None, 79) is None
    True
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker; there is exactly one instance and it is falsy.
    """

    def __or__(self, other, /):
        # lets validators write isinstance(value, str | Unset)
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting __name__ and __qualname__ of the decorated function.
    """
    if not isinstance(name, str):
        raise TypeError("@rename() argument must be a string")

    def wrapper(function):
        if not callable(function):
            raise TypeError("@rename() must be applied to a callable")
        function.__name__ = function.__qualname__ = name
        return function

    return wrapper


def _freeze(object):
    """
    Shallow read-only view of a container; other objects are returned unchanged.
    """
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /, *, frozen=True):
    """
    Define a read-only property over the "_<name>" attribute of the instance.

    With frozen=True (the default) containers come back as tuple, mapping
    proxy or frozenset, so descriptors shared across parses cannot be mutated
    through their public attributes. frozen=False hands out the stored object
    itself, for state that belongs to the caller (a callback context).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    if frozen:
        @rename(name)
        def getter(self):
            return _freeze(getattr(self, "_" + name))
    else:
        @rename(name)
        def getter(self):
            return getattr(self, "_" + name)

    return property(getter)


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
