"""
External flag keys.

A key is how a flag is found in non-argument sources (environment variables and
custom sources). It has two parts, an optional prefix (usually set bucket-wide) and
an id. Both are spelled like environment variables: upper-case, with whitespace
runs and hyphens turned into "_".

    >>> key = Key("port-number")
    >>> key.prefix = "app"
    >>> str(key)
    'APP_PORT_NUMBER'

A key without an id renders as "" (even when a prefix is set) and is never looked up.
"""
from .utils import Unset, sanitize_key, is_empty


class Key:
    """
    A (prefix, id) pair rendered as PREFIX_ID.

    attributes
    - id: sanitized id, "" when unset.
    - prefix: sanitized prefix, "" when unset.
    - explicit: True when the id was given by the user rather than derived from the
      long name (derived ids never override explicit ones).
    """

    __slots__ = ("_id", "_prefix", "_explicit")

    def __init__(self, id=Unset, /, prefix=Unset):
        self._id = ""
        self._prefix = ""
        self._explicit = False
        if id is not Unset:
            self.id = id
        if prefix is not Unset:
            self.prefix = prefix

    @property
    def id(self):
        return self._id

    @id.setter
    def id(self, value):
        self._id = sanitize_key(value)
        self._explicit = bool(self._id)

    @property
    def prefix(self):
        return self._prefix

    @prefix.setter
    def prefix(self, value):
        self._prefix = sanitize_key(value)

    @property
    def explicit(self):
        return self._explicit

    def derive(self, name, /):
        """
        set the id from a flag's long name, unless an explicit id is already present.
        """
        if self._explicit:
            return
        self._id = sanitize_key(name)

    def __bool__(self):
        return not is_empty(self._id)

    def __str__(self):
        if not self:
            return ""
        if is_empty(self._prefix):
            return self._id
        return self._prefix + "_" + self._id

    def __eq__(self, other):
        if not isinstance(other, Key):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self):
        return hash(str(self))

    def __copy__(self):
        clone = Key()
        clone._id, clone._prefix, clone._explicit = self._id, self._prefix, self._explicit
        return clone

    def __repr__(self):
        return f"Key({str(self)!r})"


__all__ = ("Key",)
