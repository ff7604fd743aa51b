"""
Pennant value sources and the ordered source chain.

Contract
- A source is any object with read(key) -> (value, found). Repeated reads of the same
  key return the same answer for the duration of one resolution pass.

Built-ins
- ArgumentSource (see pennant.tokenizer): tokenized command line arguments.
- EnvironmentSource: environment variables (os.environ, or an injected mapping).
- MemorySource: an in-memory key → value store for custom/programmatic values.

SourceChain
- Ordered list of sources consulted by the resolver, first to last.
- Bucket default: arguments first, environment second, custom sources after.
- Can be extended by prepending, appending, or inserting at an arbitrary index.
"""
import os
from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from .utils import Unset, is_empty


@runtime_checkable
class Source(Protocol):
    """
    Structural type of a value provider.
    """

    def read(self, key: str, /) -> tuple[str, bool]: ...


class EnvironmentSource:
    """
    Environment variables as a value source.

    parameters
    - environ: Unset | Mapping[str, str]
      the mapping to read from; Unset reads the live os.environ on every call.
    """

    def __init__(self, environ=Unset, /):
        if not isinstance(environ, Mapping | Unset):
            raise TypeError("EnvironmentSource() argument must be a mapping")
        self._environ = environ

    def read(self, key, /):
        environ = os.environ if self._environ is Unset else self._environ
        if not key:
            return "", False
        try:
            return environ[key], True
        except KeyError:
            return "", False

    def __repr__(self):
        return f"{type(self).__name__}()"


class MemorySource:
    """
    In-memory key → value store.

    Blank keys are ignored by add(); an existing key is overwritten.
    """

    def __init__(self, items=(), /, **kwargs):
        self._cache = {}
        self.update(dict(items, **kwargs))

    def add(self, key, value, /):
        if not isinstance(key, str) or not isinstance(value, str):
            raise TypeError("MemorySource keys and values must be strings")
        if is_empty(key):
            return
        self._cache[key] = value

    def update(self, items, /):
        for key, value in dict(items).items():
            self.add(key, value)

    def read(self, key, /):
        try:
            return self._cache[key], True
        except KeyError:
            return "", False

    def __len__(self):
        return len(self._cache)

    def __repr__(self):
        return f"{type(self).__name__}({self._cache!r})"


class SourceChain(Sequence):
    """
    Ordered, extendable sequence of sources.

    Only objects honouring the Source contract are accepted (TypeError otherwise).
    """

    def __init__(self, sources=(), /):
        self._sources = []
        for source in sources:
            self.append(source)

    @staticmethod
    def _check(source):
        if not isinstance(source, Source):
            raise TypeError("source must implement read(key) -> (value, found)")
        return source

    def prepend(self, source, /):
        self._sources.insert(0, self._check(source))

    def append(self, source, /):
        self._sources.append(self._check(source))

    def insert(self, index, source, /):
        self._sources.insert(index, self._check(source))

    def __getitem__(self, index):
        return self._sources[index]

    def __len__(self):
        return len(self._sources)

    def __repr__(self):
        return f"{type(self).__name__}({self._sources!r})"


__all__ = (
    "Source",
    "EnvironmentSource",
    "MemorySource",
    "SourceChain",
)
