r"""
Pennant value kinds: per-primitive parse/format shims used by typed flags.

Overview
- Kind: a small immutable record bundling
  • typename: the label shown in messages and help ("int", "duration", "ip", ...).
  • parse(text): text → value, raising ValueError on malformed input.
  • empty: the raw text substituted for a blank input ("0", "false", ...).
  • presence: the raw text a source hit with no value stands for ("true" for bools).
  • format(value): value → display string (help defaults, acceptable values).

- Built-ins
  • BOOL                        "1", "t", "T", "TRUE", "true", "True" and their false twins.
  • INT, INT8 .. INT64          decimal integers, range-checked to the bit width.
  • UINT, UINT8 .. UINT64, BYTE unsigned decimal integers, range-checked.
  • FLOAT32, FLOAT64            decimal/scientific floats; FLOAT32 rounds to single precision.
  • STRING                      verbatim text (already trimmed by the flag).
  • DURATION                    "300ms", "-1.5h", "2h45m" → datetime.timedelta.
  • TIME                        RFC 3339 timestamps → aware datetime.datetime.
  • IP_ADDRESS                  IPv4/IPv6 literals → ipaddress.ip_address (blank → None).
  • CIDR                        "192.0.2.1/24" → ipaddress.ip_interface (blank → None).

Notes
- Python's timedelta and datetime stop at microseconds: finer fractions are truncated.
- A blank input never reaches parse(); flags substitute `empty` first.

Quick example
    >>> DURATION.parse("1h30m")
    datetime.timedelta(seconds=5400)
    >>> INT8.parse("200")
    Traceback (most recent call last):
    ValueError: 200 is out of range for int8
"""
import datetime
import ipaddress
import math
import re
import struct

from .utils import mirror

# accepted boolean spellings
_TRUTHS = ("1", "t", "T", "TRUE", "true", "True")
_FALSITIES = ("0", "f", "F", "FALSE", "false", "False")

_INTEGER = re.compile(r"[+-]?\d+")
_FLOAT = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?|[+-]?(inf|infinity|nan)", re.IGNORECASE)

_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # U+00B5
    "μs": 1_000,  # U+03BC
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}
_SEGMENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)
_ZERO_TIME = "0001-01-01T00:00:00Z"


class Kind:
    """
    Parse/format shim for one primitive type.
    """

    typename = mirror("typename")
    empty = mirror("empty")
    presence = mirror("presence")

    def __init__(self, typename, parse, /, *, empty="", presence="", format=str):
        if not isinstance(typename, str) or not typename:
            raise TypeError("kind typename must be a non-empty string")
        if not callable(parse) or not callable(format):
            raise TypeError("kind parse/format must be callable")
        self._typename = typename
        self._parse = parse
        self._format = format
        self._empty = empty
        self._presence = presence

    def parse(self, text, /):
        """
        convert a trimmed raw value; blank text stands for `empty`.
        """
        return self._parse(text.strip() or self._empty)

    def format(self, value, /):
        if value is None:
            return ""
        return self._format(value)

    def __repr__(self):
        return f"Kind({self._typename!r})"


def _boolean(text, /):
    if text in _TRUTHS:
        return True
    if text in _FALSITIES:
        return False
    raise ValueError(f"{text} is not a boolean")


def _integer(bits, signed, /):
    if signed:
        lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        lower, upper = 0, (1 << bits) - 1
    name = ("int" if signed else "uint") + str(bits)

    def parse(text, /):
        if not _INTEGER.fullmatch(text) or (not signed and text.startswith("-")):
            raise ValueError(f"{text} is not a valid {name}")
        value = int(text)
        if not lower <= value <= upper:
            raise ValueError(f"{text} is out of range for {name}")
        return value

    return parse


def _float(bits, /):
    def parse(text, /):
        if not _FLOAT.fullmatch(text):
            raise ValueError(f"{text} is not a valid float{bits}")
        value = float(text)
        if math.isinf(value) and "inf" not in text.lower():
            raise ValueError(f"{text} is out of range for float{bits}")
        if bits == 32 and math.isfinite(value):
            try:
                value, = struct.unpack("f", struct.pack("f", value))
            except OverflowError:
                raise ValueError(f"{text} is out of range for float32") from None
        return value

    return parse


def parse_duration(text, /):
    """
    parse a duration written as a signed sequence of decimal numbers with unit suffixes.

    accepted units: ns, us (or µs), ms, s, m, h. "0" alone is accepted without a unit.
    """
    sign, body = 1, text
    if body[:1] in ("+", "-"):
        sign, body = (-1 if body[0] == "-" else 1), body[1:]
    if body == "0":
        return datetime.timedelta(0)
    if not body:
        raise ValueError(f"{text} is not a valid duration")

    total, position = 0.0, 0
    while position < len(body):
        if not (match := _SEGMENT.match(body, position)):
            raise ValueError(f"{text} is not a valid duration")
        number, unit = match.groups()
        total += _NANOSECONDS[unit] * float(number)
        position = match.end()
    return datetime.timedelta(microseconds=sign * total / 1_000)


def format_duration(value, /):
    """
    render a timedelta the compact way durations are written on the command line ("1h30m0s").
    """
    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"
    sign, micros = ("-" if micros < 0 else ""), abs(micros)
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        return f"{sign}{micros / 1_000:g}ms"
    hours, micros = divmod(micros, 3_600_000_000)
    minutes, micros = divmod(micros, 60_000_000)
    seconds = f"{micros / 1_000_000:.6f}".rstrip("0").rstrip(".")
    text = f"{minutes}m{seconds}s" if hours or minutes else f"{seconds}s"
    return sign + (f"{hours}h" + text if hours else text)


def parse_time(text, /):
    """
    parse an RFC 3339 timestamp ("2006-01-02T15:04:05.999999999Z07:00").
    """
    if not (match := _TIMESTAMP.fullmatch(text)):
        raise ValueError(f"{text} is not a valid RFC 3339 time")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    if zone in ("Z", "z"):
        tzinfo = datetime.UTC
    else:
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        offset = datetime.timedelta(hours=hours, minutes=minutes)
        tzinfo = datetime.timezone(-offset if zone[0] == "-" else offset)
    return datetime.datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second),
        int((fraction or "0")[:6].ljust(6, "0")),
        tzinfo=tzinfo,
    )


def format_time(value, /):
    text = value.isoformat()
    return text.removesuffix("+00:00") + "Z" if text.endswith("+00:00") else text


def _ip_address(text, /):
    if not text:
        return None
    return ipaddress.ip_address(text)


def _cidr(text, /):
    if not text:
        return None
    if "/" not in text:
        raise ValueError(f"{text} is not a valid CIDR notation")
    return ipaddress.ip_interface(text)


BOOL = Kind("bool", _boolean, empty="false", presence="true", format=lambda value: str(value).lower())
INT = Kind("int", _integer(64, True), empty="0")
INT8 = Kind("int8", _integer(8, True), empty="0")
INT16 = Kind("int16", _integer(16, True), empty="0")
INT32 = Kind("int32", _integer(32, True), empty="0")
INT64 = Kind("int64", _integer(64, True), empty="0")
UINT = Kind("uint", _integer(64, False), empty="0")
UINT8 = Kind("uint8", _integer(8, False), empty="0")
UINT16 = Kind("uint16", _integer(16, False), empty="0")
UINT32 = Kind("uint32", _integer(32, False), empty="0")
UINT64 = Kind("uint64", _integer(64, False), empty="0")
BYTE = Kind("byte", _integer(8, False), empty="0")
FLOAT32 = Kind("float32", _float(32), empty="0.0", format=lambda value: f"{value:g}")
FLOAT64 = Kind("float64", _float(64), empty="0.0", format=lambda value: f"{value:g}")
STRING = Kind("string", str)
DURATION = Kind("duration", parse_duration, empty="0s", format=format_duration)
TIME = Kind("time", parse_time, empty=_ZERO_TIME, format=format_time)
IP_ADDRESS = Kind("ip", _ip_address)
CIDR = Kind("cidr", _cidr)


__all__ = (
    # Types
    "Kind",

    # Functions
    "parse_duration",
    "format_duration",
    "parse_time",
    "format_time",

    # Constants
    "BOOL",
    "INT",
    "INT8",
    "INT16",
    "INT32",
    "INT64",
    "UINT",
    "UINT8",
    "UINT16",
    "UINT32",
    "UINT64",
    "BYTE",
    "FLOAT32",
    "FLOAT64",
    "STRING",
    "DURATION",
    "TIME",
    "IP_ADDRESS",
    "CIDR",
)
