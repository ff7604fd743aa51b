"""
Small helpers shared by every pennant module.

- Unset: the "nothing was passed" sentinel used for optional parameters where None
  already means something (a flag default of None means "no default").
- coalesce(object, default): swap Unset for a default.
- rename(): stable names for generated callables.
- mirror(name): read-only property returning detached copies of self._<name>.
- name sanitizers: long names are case-insensitive (lower-cased), short names keep
  their case, external keys are spelled like environment variables.

    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> sanitize_long("  Port-Number ")
    'port-number'
    >>> sanitize_key(" key with white space ")
    'KEY_WITH_WHITE_SPACE'
"""
import builtins
import functools
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel for "no value given", distinct from None.

    Flags accept None as a real default marker, so optional parameters default to
    Unset instead. UnsetType() always returns the one Unset instance; it is falsy,
    prints as "Unset", survives copy/pickle as itself and cannot be subclassed.
    """

    def __or__(self, other, /):
        # str | Unset
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        # Unset | str
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

    def __reduce__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    object, or default when object is Unset. Other falsy values pass through.
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    Give a callable a stable __name__ and __qualname__.

    rename(callable, name) renames in place and returns the callable; rename(name)
    returns a decorator doing the same. Generated accessors (mirror(), the flag
    repr helpers) use it so tracebacks show meaningful names.
    """
    match parameters:
        case (target, str(name)):
            if not builtins.callable(target):
                raise TypeError("rename() first argument must be callable")
            try:
                target.__name__ = target.__qualname__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a renamable callable") from None
            return target
        case (str(name),):
            return _renamer(name)
        case (_, _) | (_,):
            raise TypeError("rename() name must be a string")
        case _:
            raise TypeError("rename() takes 1 or 2 arguments but %d were given" % len(parameters))


def _renamer(name, /):
    def decorator(target):
        return rename(target, name)

    return rename(decorator, "rename")


def _immortalize(object):
    """
    Detached copy of a backing value: sequences become lists, mappings dicts and
    sets sets, recursively. Strings and scalars come back unchanged.
    """
    match object:
        case str():
            return object
        case Sequence():
            return [_immortalize(item) for item in object]
        case Mapping():
            return {key: _immortalize(value) for key, value in object.items()}
        case Set():
            return {_immortalize(item) for item in object}
        case _:
            return coalesce(object)


def mirror(name, /):
    """
    Read-only property over self._<name> returning detached copies.

        choices = mirror("choices")   # reads self._choices
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def is_empty(text, /):
    """
    True when text is empty or holds only whitespace.
    """
    return not text.strip()


def sanitize_long(name, /):
    """
    Normalize a long flag name: trimmed and lower-cased (long names are case-insensitive).
    """
    if not isinstance(name, str):
        raise TypeError("long name must be a string")
    return name.strip().lower()


def sanitize_short(name, /):
    """
    Normalize a short flag name: trimmed, case preserved.

    Returns "" for Unset or blank input; the single-character rule is enforced by callers.
    """
    if name is Unset:
        return ""
    if not isinstance(name, str):
        raise TypeError("short name must be a string")
    return name.strip()


def sanitize_key(text, /):
    """
    Normalize an external key id (or prefix) the way environment variables are spelled.

    rules
    - surrounding whitespace is dropped.
    - inner whitespace runs and hyphens become "_".
    - the result is upper-cased.

    examples
    - " key with white space " -> "KEY_WITH_WHITE_SPACE"
    - "-key-with-hyphen-"      -> "_KEY_WITH_HYPHEN_"
    """
    if not isinstance(text, str):
        raise TypeError("key must be a string")
    return re.sub(r"\s+", "_", text.strip()).replace("-", "_").upper()


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "is_empty",
    "sanitize_long",
    "sanitize_short",
    "sanitize_key",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
