"""
Pennant usage table (printed when -h/--help is requested).

Layout
- one row per visible flag, in registration order:
  names ("-p, --port"), external key, type, usage (+ default and markers).
- hidden flags are left out.
- deprecated flags carry the deprecation mark ("[DEPRECATED]" unless configured)
  and required flags the required mark ("*" unless configured).

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- colorful=False drops the palette (deprecated names keep their strike).
- fancy=True frames the table in a Panel titled with the program name.
"""
import json
import os.path
import sys
from collections import defaultdict

from rich.box import SIMPLE
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .flags import Map, Slice, SliceMap


def _format_default(flag, /):
    """
    render a flag's default the way it would be typed on the command line.
    """
    if not flag.has_default:
        return ""
    default, kind = flag.default, flag.kind
    match flag:
        case SliceMap():
            return json.dumps({key: flag.delimiter.join(map(kind.format, items)) for key, items in default.items()})
        case Map():
            return json.dumps({key: kind.format(value) for key, value in default.items()})
        case Slice():
            return flag.delimiter.join(map(kind.format, default))
        case _:
            return kind.format(default)


def render(flags, /, *, prog=None, deprecation_mark="[DEPRECATED]", required_mark="*", colorful=True, fancy=False):
    """
    Build the usage renderable for the given flags.

    Palette keys
    - usage-label, program-name, flag-name, deprecated-name, key-name, type-name,
      usage-text, default-value, deprecation-mark, required-mark
    """
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",  # CYAN → signature info color
        "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
        "flag-name": "bold #22C55E",  # GREEN flag names
        "deprecated-name": "bold #F97316 strike",  # ORANGE strike for deprecated
        "key-name": "#36C5F0",  # SKY-BLUE external keys
        "type-name": "bold #FFD600",  # AMBER types
        "usage-text": "#9CA3AF",  # Muted gray
        "default-value": "italic #A3A3A3",
        "deprecation-mark": "bold #F97316",
        "required-mark": "bold #EF4444",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        if "deprecated" in style and not colorful:
            return "strike"
        return styles[style] if colorful else ""

    prog = prog or os.path.basename(sys.argv[0]) or "pennant"

    table = Table("flag", "key", "type", "usage", box=SIMPLE, show_header=False, pad_edge=False)
    for flag in flags:
        if flag.hidden:
            continue

        names = Text(flag.display, styler("deprecated-name" if flag.deprecated else "flag-name"))
        if flag.required:
            names.append(required_mark, styler("required-mark"))

        usage = Text(flag.usage, styler("usage-text"))
        if default := _format_default(flag):
            usage.append(f" (default: {default})", styler("default-value"))
        if flag.deprecated:
            usage.append(" ").append(deprecation_mark, styler("deprecation-mark"))

        table.add_row(
            names,
            Text(str(flag.key), styler("key-name")),
            Text(flag.typename, styler("type-name")),
            usage,
        )

    heading = Text.assemble(
        ("usage", styler("usage-label")),
        ": ",
        (prog, styler("program-name")),
        " [flags]",
    )

    if fancy:
        return Panel(table, title=heading, title_align="left")

    table.title = heading
    table.title_justify = "left"
    return table


def print_usage(flags, /, *, console=None, **options):
    """
    print the usage table to the given console (standard output by default).
    """
    (console or Console()).print(render(flags, **options))


__all__ = (
    "render",
    "print_usage",
)
