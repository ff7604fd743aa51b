r"""
Pennant flag specifications.

Overview
- Flags
  • Scalar[_T]: one typed value (bool, int family, float family, string, duration, time, ip, cidr).
  • Slice[_T]: a delimited list of typed items ("a, b,,c" → ["a", "b", "c"]).
  • Map[_T]: a JSON object of strings whose values are parsed by the flag's kind.
  • SliceMap[_T]: a JSON object of strings whose values are delimited lists.
  • Counter: a uint8 counter resolved from repeated occurrences (-vvv → 3).

- Contract (shared by every flag)
  • set(raw): trim, parse, validate, then commit the value and mark the flag as set.
    A rejected raw value leaves the flag exactly as it was.
  • reset(): apply the default (if any) and clear is_set. No-op without a default.
  • get(): the current value (a copy for containers).
  • __replace__(**overrides): copy-on-write builder; returns a fresh flag built from the
    original declaration plus the overrides (copy.replace() on Python 3.13+).

- Introspection & representation
  • FlagType metaclass exposes the names listed in __introspectable__ as read-only
    properties and provides stable __repr__/__rich_repr__ implementations.

Metadata (sanitized on construction)
- long: str, required; trimmed and lower-cased; must start with a letter.
- short: Unset | str; trimmed, case preserved; a single letter when given.
- usage: str; kept verbatim.
- key: Unset | str | Key; the external key looked up in environment/custom sources.
- default: any value; None never counts as a default.
- choices: Iterable; acceptable values, checked only when no validator is set.
  Duplicates are rejected; strings are parsed with the kind.
- ignore_case: bool; case-insensitive choices for string values.
- validator: Unset | Validator | Callable; raising from it rejects the value.
- deprecated/hidden/required: bool.

Validation order
1. parse failure            → InvalidValueError
2. validator raises         → ValidationError (the validator's message, verbatim)
3. value not among choices  → OutOfRangeError (acceptable values enumerated)

Quick example
    >>> port = Scalar("port", "p", "the port to listen on", kind=INT, default=8080)
    >>> port.set("9090")
    >>> port.value, port.is_set
    (9090, True)
    >>> strict = port.__replace__(choices=(80, 443))
    >>> strict.set("9090")
    Traceback (most recent call last):
    OutOfRangeError: 9090 is not an acceptable value for -p, --port. The expected values are 80,443.
"""
import copy
import functools
import json
import operator
import re
from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from .faults import *
from .keys import Key
from .kinds import *
from .utils import *


@runtime_checkable
class Validator(Protocol):
    """
    Structural type of a stateful validator.

    validate() receives the parsed value (or key and value for map flags) and raises
    to reject it; its return value is ignored.
    """

    def validate(self, *values) -> None: ...


class FlagType(type):
    """
    Metaclass that turns flag classes into introspectable specifications.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in construction errors ("slice-map 'long' must be a string").
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ()) if name not in namespace
            },
            **options
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - scalar(long='port', short='p', typename='int', ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers.
            """
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate the metadata shared by every flag.

    Responsibilities
    - long: required string, trimmed and lower-cased, starting with a letter and
      free of whitespace and '='.
    - short: Unset or a single letter (case preserved). Digits, '.' and '-' would be
      read as inline values by the tokenizer, so they are refused.
    - usage: string, kept as given.
    - key: Unset | str | Key, normalized to a private Key instance.
    - validator: Unset | Validator | Callable, normalized to None when Unset.
    - default: None means "no default".

    Raises
    - TypeError: on wrongly typed metadata.
    - ValueError: on empty or malformed names.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    if not isinstance(long := metadata["long"], str):
        raise TypeError(f"{cls.__typename__} 'long' must be a string")
    elif not (long := sanitize_long(long)):
        raise ValueError(f"{cls.__typename__} 'long' cannot be empty")
    elif not re.fullmatch(r"[^\W\d_][^\s=]*", long):
        raise ValueError(f"{cls.__typename__} 'long' must start with a letter and cannot contain whitespaces or '='")
    metadata["long"] = long

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif (short := sanitize_short(short)) and not re.fullmatch(r"[^\W\d_]", short):
        raise ValueError(f"{cls.__typename__} 'short' must be a single letter")
    metadata["short"] = short

    if not isinstance(metadata["usage"], str):
        raise TypeError(f"{cls.__typename__} 'usage' must be a string")

    match key := metadata["key"]:
        case Key():
            metadata["key"] = copy.copy(key)
        case str():
            metadata["key"] = Key(key)
        case _ if key is Unset:
            metadata["key"] = Key()
        case _:
            raise TypeError(f"{cls.__typename__} 'key' must be a string or a key")

    validator = metadata["validator"]
    if validator is not Unset and not isinstance(validator, Validator) and not callable(validator):
        raise TypeError(f"{cls.__typename__} 'validator' must be callable or provide a validate() method")
    metadata["validator"] = coalesce(validator)

    metadata["has_default"] = metadata["default"] is not None


def _coerce(cls, kind, value, /):
    """
    Internal: parse a textual default with the flag's kind; other values pass through.
    """
    if not isinstance(value, str) or kind is STRING:
        return value
    try:
        return kind.parse(value)
    except ValueError:
        raise ValueError(f"{cls.__typename__} 'default' must hold valid {kind.typename} values") from None


def _sequence(cls, kind, value, /):
    """
    Internal: a default list of items, each coerced with the flag's kind.
    """
    if isinstance(value, str) or not isinstance(value, Iterable):
        raise TypeError(f"{cls.__typename__} 'default' must be an iterable of values")
    return [_coerce(cls, kind, item) for item in value]


def _sanitize_choices(cls, metadata, /):
    """
    Internal: validate and normalize acceptable values.

    - choices must be iterable. Strings are parsed with the flag's kind so that
      ("80", 443) and (80, 443) describe the same range; unparsable choices are refused.
    - duplicates are rejected and the collection becomes a tuple.
    - ignore_case only applies to string values.
    """
    if not isinstance(choices := metadata["choices"], Iterable) or isinstance(choices, str):
        raise TypeError(f"{cls.__typename__} 'choices' must be iterable")

    kind = metadata["kind"]
    sanitized = []
    for choice in choices:
        if isinstance(choice, str) and kind is not STRING:
            try:
                choice = kind.parse(choice)
            except ValueError:
                raise ValueError(f"{cls.__typename__} 'choices' must be valid {kind.typename} values") from None
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    metadata["choices"] = tuple(sanitized)


class Flag(metaclass=FlagType):
    """
    Shared behaviour of every flag: identity, state and the set/reset protocol.

    Subclasses provide
    - typename: the label used in messages and help (defaults to the kind's).
    - _zero(): the value of a flag nothing has touched yet.
    - _convert(text): trimmed text → value, raising through _parse() on bad input.
    - _validate(value): run the validator (or the choices) over the parsed value.
    """

    __introspectable__ = (
        "long",
        "short",
        "usage",
        "typename",
        "key",
        "default",
        "has_default",
        "choices",
        "ignore_case",
        "validator",
        "deprecated",
        "hidden",
        "required",
        "value",
        "is_set",
    )

    kind = mirror("kind")

    @property
    def typename(self):
        return self._kind.typename

    @classmethod
    def _create(cls, arguments, metadata, /):
        """
        Build an instance from raw arguments (kept for __replace__) and sanitized metadata.
        """
        _sanitize_metadata(cls, metadata)
        _sanitize_choices(cls, metadata)

        self = super().__new__(cls)
        self._arguments = arguments

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        self._value = self._zero()
        self._is_set = False
        return self

    @property
    def names(self):
        """
        dash-prefixed identifiers the tokenizer produces for this flag ("--port", "-p").
        """
        if self._short:
            return "--" + self._long, "-" + self._short
        return "--" + self._long,

    @property
    def empty(self):
        """
        raw value standing for a bare occurrence ("--verbose" with no value).
        """
        return self._kind.presence

    @property
    def display(self):
        if self._short:
            return f"-{self._short}, --{self._long}"
        return f"--{self._long}"

    def _zero(self):
        return None

    def _convert(self, text, /):
        raise NotImplementedError

    def _validate(self, value, /):
        raise NotImplementedError

    def _parse(self, text, /):
        """
        parse one fragment with the flag's kind, turning ValueError into InvalidValueError.
        """
        try:
            return self._kind.parse(text)
        except ValueError:
            raise InvalidValueError(
                f"'{text}' is not a valid {self.typename} value for {self.display}",
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint=f"provide a valid {self.typename} value",
                flag=self._long,
                value=text,
            ) from None

    def _run_validator(self, *values):
        try:
            if isinstance(self._validator, Validator):
                self._validator.validate(*values)
            else:
                self._validator(*values)
        except FlagException:
            raise
        except Exception as error:
            raise ValidationError(
                str(error),
                title="validation failed",
                code=FaultCode.VALIDATION_FAILED,
                hint=f"check the value given to {self.display}",
                flag=self._long,
                value=values[-1],
            ) from error

    def _ensure_choice(self, value, /):
        if not self._choices:
            return
        if self._ignore_case and isinstance(value, str):
            if value.casefold() in (str(choice).casefold() for choice in self._choices):
                return
        elif value in self._choices:
            return

        acceptable = list(map(self._kind.format, self._choices))
        message = f"{self._kind.format(value)} is not an acceptable value for {self.display}."
        if len(acceptable) == 1:
            message += f" The expected value is {acceptable[0]}."
        elif acceptable:
            message += f" The expected values are {",".join(acceptable)}."
        raise OutOfRangeError(
            message,
            title="out of range",
            code=FaultCode.OUT_OF_RANGE,
            hint="choose one of the acceptable values",
            flag=self._long,
            value=value,
            acceptable=tuple(acceptable),
        )

    def _check(self, *values):
        """
        callback validation takes priority over the acceptable-value list.
        """
        if self._validator is not None:
            self._run_validator(*values)
        else:
            self._ensure_choice(values[-1])

    def set(self, raw, /):
        """
        parse raw text and commit it as the flag's value.

        raises
        - InvalidValueError, ValidationError or OutOfRangeError; the flag is left untouched.
        """
        if not isinstance(raw, str):
            raise TypeError(f"{type(self).__typename__}.set() argument must be a string")
        value = self._convert(raw.strip())
        self._validate(value)
        self._value = value
        self._is_set = True

    def reset(self):
        """
        apply the default value, if any; the flag does not count as set afterwards.
        """
        if not self._has_default:
            return
        self._value = copy.deepcopy(self._default)
        self._is_set = False

    def get(self):
        return self.value

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        arguments = self._arguments | overrides
        return type(self)(arguments.pop("long"), arguments.pop("short"), **arguments)


class Scalar[_T](Flag):
    """
    Single-valued flag over a Kind (see pennant.kinds).

    Highlights
    - Blank input stands for the kind's empty sentinel: 0, false, "", zero duration,
      0001-01-01T00:00:00Z, and None for ip/cidr.
    - Boolean flags resolve a bare occurrence (--debug) to true.
    """

    def __new__(
            cls,
            long,
            short=Unset,
            /,
            usage="",
            *,
            kind=STRING,
            default=None,
            key=Unset,
            choices=(),
            ignore_case=False,
            validator=Unset,
            deprecated=False,
            hidden=False,
            required=False
    ):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")

        arguments = {
            "long": long,
            "short": short,
            "usage": usage,
            "kind": kind,
            "default": default,
            "key": key,
            "choices": choices,
            "ignore_case": ignore_case,
            "validator": validator,
            "deprecated": deprecated,
            "hidden": hidden,
            "required": required,
        }
        return cls._create(arguments, arguments | {
            "default": _coerce(cls, kind, default) if default is not None else None,
            "ignore_case": bool(ignore_case),
            "deprecated": bool(deprecated),
            "hidden": bool(hidden),
            "required": bool(required),
        })

    def _zero(self):
        return self._kind.parse("")

    def _convert(self, text, /):
        return self._parse(text)

    def _validate(self, value, /):
        if value is not None:
            self._check(value)


class Slice[_T](Flag):
    """
    Delimited list flag: "1, 2,,3" → [1, 2, 3] for an int slice.

    Each part is trimmed, blank parts are skipped, and every remaining item is
    parsed and validated on its own. Blank input yields an empty list.
    """

    __introspectable__ = Flag.__introspectable__ + ("delimiter",)

    def __new__(
            cls,
            long,
            short=Unset,
            /,
            usage="",
            *,
            kind=STRING,
            delimiter=",",
            default=None,
            key=Unset,
            choices=(),
            ignore_case=False,
            validator=Unset,
            deprecated=False,
            hidden=False,
            required=False
    ):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")
        if not isinstance(delimiter, str):
            raise TypeError(f"{cls.__typename__} 'delimiter' must be a string")

        arguments = {
            "long": long,
            "short": short,
            "usage": usage,
            "kind": kind,
            "delimiter": delimiter,
            "default": default,
            "key": key,
            "choices": choices,
            "ignore_case": ignore_case,
            "validator": validator,
            "deprecated": deprecated,
            "hidden": hidden,
            "required": required,
        }
        return cls._create(arguments, arguments | {
            "delimiter": delimiter or ",",
            "default": _sequence(cls, kind, default) if default is not None else None,
            "ignore_case": bool(ignore_case),
            "deprecated": bool(deprecated),
            "hidden": bool(hidden),
            "required": bool(required),
        })

    @property
    def empty(self):
        return ""

    @property
    def typename(self):
        return "[]" + self._kind.typename

    def _zero(self):
        return []

    def _split(self, text, /):
        return [self._parse(part) for part in map(str.strip, text.split(self._delimiter)) if part]

    def _convert(self, text, /):
        return self._split(text)

    def _validate(self, value, /):
        for item in value:
            self._check(item)


class Map[_T](Flag):
    """
    JSON object flag: '{"region": "eu", "tier": "gold"}'.

    Keys stay strings, values are parsed by the flag's kind. Blank input yields {}.
    Validators receive (key, value) for every entry.
    """

    def __new__(
            cls,
            long,
            short=Unset,
            /,
            usage="",
            *,
            kind=STRING,
            default=None,
            key=Unset,
            choices=(),
            ignore_case=False,
            validator=Unset,
            deprecated=False,
            hidden=False,
            required=False
    ):
        if not isinstance(kind, Kind):
            raise TypeError(f"{cls.__typename__} 'kind' must be a kind")
        if not isinstance(default, Mapping | None):
            raise TypeError(f"{cls.__typename__} 'default' must be a mapping")

        arguments = {
            "long": long,
            "short": short,
            "usage": usage,
            "kind": kind,
            "default": default,
            "key": key,
            "choices": choices,
            "ignore_case": ignore_case,
            "validator": validator,
            "deprecated": deprecated,
            "hidden": hidden,
            "required": required,
        }
        return cls._create(arguments, arguments | {
            "default": {
                key: cls._entry(kind, value) for key, value in default.items()
            } if default is not None else None,
            "ignore_case": bool(ignore_case),
            "deprecated": bool(deprecated),
            "hidden": bool(hidden),
            "required": bool(required),
        })

    @classmethod
    def _entry(cls, kind, value, /):
        return _coerce(cls, kind, value)

    @property
    def empty(self):
        """
        a bare occurrence stands for an empty collection, whatever the kind.
        """
        return ""

    @property
    def typename(self):
        return "[string]" + self._kind.typename

    def _zero(self):
        return {}

    def _load(self, text, /):
        """
        decode a JSON object of strings; anything else is an invalid value for the flag.
        """
        try:
            document = json.loads(text or "{}")
        except json.JSONDecodeError:
            document = None
        if not isinstance(document, dict) or not all(isinstance(value, str) for value in document.values()):
            raise InvalidValueError(
                f"'{text}' is not a valid {self.typename} value for {self.display}",
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                hint='provide a JSON object of strings, e.g. {"key": "value"}',
                flag=self._long,
                value=text,
            )
        return document

    def _convert(self, text, /):
        return {key: self._parse(value) for key, value in self._load(text).items()}

    def _validate(self, value, /):
        for key, item in value.items():
            self._check(key, item)


class SliceMap[_T](Map[_T]):
    """
    JSON object flag whose values are delimited lists: '{"days": "Sat, Sun"}'.

    Validators receive (key, items) once per entry; choices are checked per item.
    """

    __introspectable__ = Flag.__introspectable__ + ("delimiter",)

    def __new__(
            cls,
            long,
            short=Unset,
            /,
            usage="",
            *,
            kind=STRING,
            delimiter=",",
            default=None,
            key=Unset,
            choices=(),
            ignore_case=False,
            validator=Unset,
            deprecated=False,
            hidden=False,
            required=False
    ):
        if not isinstance(delimiter, str):
            raise TypeError(f"{cls.__typename__} 'delimiter' must be a string")

        self = super().__new__(
            cls,
            long,
            short,
            usage,
            kind=kind,
            default=default,
            key=key,
            choices=choices,
            ignore_case=ignore_case,
            validator=validator,
            deprecated=deprecated,
            hidden=hidden,
            required=required,
        )
        self._arguments = self._arguments | {"delimiter": delimiter}
        self._delimiter = delimiter or ","
        return self

    @classmethod
    def _entry(cls, kind, value, /):
        return _sequence(cls, kind, value)

    @property
    def typename(self):
        return "[string][]" + self._kind.typename

    def _convert(self, text, /):
        return {
            key: [self._parse(part) for part in map(str.strip, value.split(self._delimiter)) if part]
            for key, value in self._load(text).items()
        }

    def _validate(self, value, /):
        for key, items in value.items():
            if self._validator is not None:
                self._run_validator(key, items)
                continue
            for item in items:
                self._ensure_choice(item)


class Counter(Scalar[int]):
    """
    Occurrence counter (verbosity idiom): -v → 1, -vvv → 3, --verbose=5 → 5.

    The resolver turns bare occurrences on the command line into repeats × once;
    explicit values are parsed as uint8.
    """

    __introspectable__ = Flag.__introspectable__ + ("once",)

    def __new__(
            cls,
            long,
            short=Unset,
            /,
            usage="",
            *,
            once=1,
            default=None,
            key=Unset,
            choices=(),
            validator=Unset,
            deprecated=False,
            hidden=False,
            required=False
    ):
        if not isinstance(once, int) or isinstance(once, bool):
            raise TypeError(f"{cls.__typename__} 'once' must be an integer")
        if once < 1:
            raise ValueError(f"{cls.__typename__} 'once' must be a positive integer")

        self = super().__new__(
            cls,
            long,
            short,
            usage,
            kind=UINT8,
            default=default,
            key=key,
            choices=choices,
            validator=validator,
            deprecated=deprecated,
            hidden=hidden,
            required=required,
        )
        self._arguments = {
            name: object for name, object in self._arguments.items() if name not in ("kind", "ignore_case")
        } | {"once": once}
        self._once = once
        return self

    @property
    def typename(self):
        return "counter"

    @property
    def empty(self):
        return str(self._once)

    def count(self, repeats, /):
        """
        raw value for a bare occurrence seen `repeats` times on the command line.
        """
        return str(repeats * self._once)


__all__ = (
    # Protocols
    "Validator",

    # Classes
    "Flag",
    "Scalar",
    "Slice",
    "Map",
    "SliceMap",
    "Counter",
)

del FlagType
