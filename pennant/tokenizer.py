r"""
Pennant argument tokenizer: turn a raw argv into a key → value lookup table.

What this module provides
- tokenize(arguments): one left-to-right pass producing a read-only table keyed by
  dash-prefixed identifiers ("--port", "-p") and a "help requested" signal.
- ArgumentSource: the tokenizer output exposed through the Source contract
  (read(key) -> (value, found)) plus the repeat counter used by counter flags.

Accepted forms
- long:    --name=value, --name value, --name (empty value)
- short:   -n=value, -n value, -n (empty value)
- chained: -abc → -a, -b, -c; -abc=value and -abc10.5 give the value to -c;
           -c10b20 → -c: "10", -b: "20" (a run of digits, '.' or '-' right after a
           letter is that letter's value)
- help:    -h or --help (with or without "=..."); --h is not help.

Rules worth knowing
- last occurrence wins in the table, while the repeat counter sees every occurrence.
- a key without an inline value stays pending: the next non-key token becomes its value.
- a value token with no pending key is dropped (positionals are not supported).
- tokens that carry no letter at all ("-", "--", "---", "-10", "--10", "-3.14") are
  dropped and leave any pending key untouched.
- the tokenizer never fails.

Quick example
    >>> table, help = tokenize(["--port", "8080", "-vvc10"])
    >>> dict(table)
    {'--port': '8080', '-v': '', '-c': '10'}
    >>> help
    False
"""
import re
from collections import Counter
from collections.abc import Iterable
from types import MappingProxyType

from .utils import mirror

HELP = ("-h", "--help")
"""Reserved identifiers that request help instead of a resolution pass."""

# one flag character followed by an optional run of value characters
_GROUP = re.compile(r"([^\d.\-])([\d.\-]*)")


def _expand(token, /):
    """
    split a key token (without any '=...' tail) into (identifier, inline) pairs.

    behavior
    - two or more leading dashes: a single long identifier ("--" + name), no inline value.
    - one leading dash: a short group; every flag character becomes its own identifier,
      and a run of digits/'.'/'-' right after it becomes its inline value.
    - no letter anywhere in the name: invalid, returns an empty list.

    returns
    - list[tuple[str, str | None]]: inline is None when the character had no attached run.
    """
    name = token.lstrip("-")
    if not any(char.isalpha() for char in name):
        return []
    if len(token) - len(name) > 1:
        return [("--" + name, None)]
    return [("-" + letter, run or None) for letter, run in _GROUP.findall(name)]


class ArgumentSource:
    """
    Tokenized command line arguments, readable as a value source.

    Attributes (read-only)
    - tokens: a copy of the original argument vector.
    - arguments: the final identifier → value table (last token wins).
    - help_requested: True when -h or --help made it into the table.

    Methods
    - read(key): (value, True) for a known identifier, ("", False) otherwise.
    - repeats(long, short): occurrences of --long and -short across every token.
    """

    tokens = mirror("tokens")
    help_requested = mirror("help_requested")

    def __init__(self, arguments=(), /):
        if isinstance(arguments, str) or not isinstance(arguments, Iterable):
            raise TypeError("ArgumentSource() argument must be an iterable of strings")
        self._tokens = tuple(arguments)
        for token in self._tokens:
            if not isinstance(token, str):
                raise TypeError("ArgumentSource() argument must be an iterable of strings")

        self._arguments = {}
        self._repeats = Counter()

        previous = None  # identifier still waiting for a value token
        for token in self._tokens:
            if not token.startswith("-"):
                # a bare value: it belongs to the pending key, if there is one
                if previous is not None:
                    self._arguments[previous] = token
                    previous = None
                continue

            head, equals, tail = token.partition("=")
            if not (pairs := _expand(head)):
                continue

            for identifier, inline in pairs:
                self._arguments[identifier] = inline or ""
                self._repeats[identifier] += 1

            if equals:
                # key=value also covers nested forms such as --key="--a=10 --b=20"
                self._arguments[pairs[-1][0]] = tail
                previous = None
            else:
                identifier, inline = pairs[-1]
                previous = identifier if inline is None else None

        self._help_requested = any(name in self._arguments for name in HELP)

    @property
    def arguments(self):
        return MappingProxyType(self._arguments)

    def read(self, key, /):
        """
        Source contract: look up a dash-prefixed identifier.
        """
        try:
            return self._arguments[key], True
        except KeyError:
            return "", False

    def repeats(self, long="", short="", /):
        """
        count how many times a flag identity occurred in the original tokens.

        every occurrence counts, including those inside chained groups and those
        whose table entry was later overwritten: ["-ssa", "-xys", "-s"] gives 4 for "s".
        """
        count = 0
        if long:
            count += self._repeats["--" + long]
        if short:
            count += self._repeats["-" + short]
        return count

    def __contains__(self, key):
        return key in self._arguments

    def __repr__(self):
        return f"{type(self).__name__}({list(self._tokens)!r})"


def tokenize(arguments, /):
    """
    tokenize an argument vector.

    returns
    - (table, help): a read-only mapping of identifiers to values and the help signal.
    """
    source = ArgumentSource(arguments)
    return source.arguments, source.help_requested


__all__ = (
    "ArgumentSource",
    "tokenize",
    "HELP",
)
