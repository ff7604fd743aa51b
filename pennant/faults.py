"""
Pennant faults: the errors and warnings a user of a flag-driven program can see.

What lives here
- FaultCode: numeric identifiers for every user-facing fault, stable across releases
  so hosts can document and search for them.
- FlagException / FlagWarning: faults carrying a one-sentence message plus read-only
  options (title, code, hint and context such as the flag and the offending value).
- trigger(fault, **options): merge runtime options into a fault and surface it.
- getdoc(code): the host's documentation for a code, if any.

Surfacing
- library mode (shell=False): errors are raised, warnings go through warnings.warn().
- shell mode (shell=True): both are printed with rich on the console (stderr unless a
  console option says otherwise); errors then exit with status 1.

Host hooks (read from __main__)
- __codes__: FaultCode → label, replaces the numeric code in rendered headers.
- __styles__: palette overrides for the rendered faults.
- __prog__: program name shown in rendered headers.
- __docs__: FaultCode → documentation string returned by getdoc().

Messages name the flag the way the user types it ("-p, --port") so the fix is
readable from the first line.
"""
import inspect
import os.path
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    identifiers of user-facing faults.

    - 1110x registration: a flag declaration the bucket refuses.
    - 1111x arguments: the command line names something nobody registered.
    - 1112x values: a source offered a value the flag cannot take, or none at all.
    - 121xx warnings.
    """
    INVALID_FLAG                = 11101

    UNKNOWN_FLAG                = 11111

    INVALID_VALUE               = 11121
    OUT_OF_RANGE                = 11122
    VALIDATION_FAILED           = 11123
    REQUIRED_FLAG               = 11124

    DEPRECATED_FLAG             = 12111

    def normalize(self):
        """
        label shown for this code: the host's __codes__ entry, else the number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    rich renderable shared by errors and warnings.

        [ prog — code | Title ]
        message
         → hint

    with fancy=True the message and hint sit in a Panel titled by the header line.
    """
    main = __import__("__main__")
    options = fault.options

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = options.get("colorful", True)

    def styled(fragment, style=""):
        match fragment:
            case Text():
                return fragment
            case _ if not fragment:
                return Text("")
            case _:
                return Text(str(fragment), styles[style] if colorful else "")

    prog = getattr(main, "__prog__", options.get("prog") or os.path.basename(sys.argv[0]) or "pennant")
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        styled(prog, "prog-name"),
        " — ",
        styled(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        styled(str(options.get("title", "")).title(), "title"),
        " ]"
    )
    message = styled(fault.message, "message")
    hint = Text.assemble(styled(" → ", "hint-arrow"), styled(options.get("hint"), "hint"))

    if options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")
    return Group(header, message, hint)


class _Fault:
    """
    message + options plumbing shared by FlagException and FlagWarning.

    subclasses set __palette__ (the default rich styles) and define __trigger__.
    """
    __palette__ = {}

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return "" if self.message is Unset else str(self.message)

    def __rich__(self):
        return _render(self, type(self).__palette__)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **(dict(self.options) | overrides))


class FlagException(_Fault, Exception):
    """
    base type of every user-facing pennant error.

    raised by flags (set), by the resolver (reported through Resolution.fault) and by
    buckets (registration); surfaced with trigger().
    """
    __palette__ = {
        "prog-name": "bold #ECECF4",
        "code": "bold #00D1FF",
        "title": "bold #FF5C8A",
        "message": "#CACAD4",
        "hint-arrow": "dim #8EE0A1",
        "hint": "italic #8EE0A1",
    }

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        self.options.get("console", console).print(self)
        sys.exit(1)


class InvalidFlagError(FlagException): ...
class UnknownFlagError(FlagException): ...
class InvalidValueError(FlagException): ...
class OutOfRangeError(FlagException): ...
class ValidationError(FlagException): ...
class RequiredFlagError(FlagException): ...


class FlagWarning(_Fault, Warning):
    """
    base type of every user-facing pennant warning; never stops a resolution pass.
    """
    __palette__ = {
        "prog-name": "bold #ECECF4",
        "code": "bold #FFAA33",
        "title": "bold #FFC7DD",
        "message": "#D8D8E0",
        "hint-arrow": "dim #B4EBB0",
        "hint": "italic #B4EBB0",
    }

    def __trigger__(self):
        if not self.options.get("shell", False):
            warnings.warn(self, stacklevel=len(inspect.stack()))
            return
        self.options.get("console", console).print(self)


class DeprecatedFlagWarning(FlagWarning): ...


def trigger(fault, /, **options):
    """
    merge options into fault (through its __replace__) and surface the result.

    recognized options: shell, fancy, colorful, console, prog, plus any rendering
    context (title, code, hint) a caller wants to override.
    """
    for method in ("__trigger__", "__replace__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    host documentation for code (from __main__.__docs__), or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FlagException",
    "InvalidFlagError",
    "UnknownFlagError",
    "InvalidValueError",
    "OutOfRangeError",
    "ValidationError",
    "RequiredFlagError",
    "FlagWarning",
    "DeprecatedFlagWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
