r"""
Pennant buckets: the explicit registry/context object of a program's flags.

Overview
- Bucket owns
  • the tokenized command line (an ArgumentSource built once, at construction);
  • the source chain: arguments first, environment second, custom sources after;
  • the flag registry, in registration order;
  • the presentation options shared by faults and the usage table.

- Registry rules (violations raise InvalidFlagError through trigger())
  • "h" and "help" are reserved (as long names, and "h" as a short name).
  • long names, short names and external keys are unique within a bucket.
  • key_prefix is applied to every flag key; auto_keys derives a key from the
    long name for every flag without an explicit one ("log-level" → "LOG_LEVEL").

- parse()
  • runs one resolution pass and returns its Resolution;
  • prints the usage table when -h/--help was given (exits with status 0 in shell mode);
  • surfaces warnings, then the fault (after the usage table) through trigger().

Options
- argv: Unset (sys.argv[1:]) | str (split with shlex.split) | Iterable[str].
- environment: True (os.environ) | False (no environment source) | Mapping[str, str].
- sources: extra sources appended to the chain.
- auto_keys, key_prefix: external key derivation (see above).
- deprecation_mark, required_mark: markers used in the usage table.
- shell: when True faults are printed and exit the process instead of being raised,
  and warnings are printed instead of going through the warnings module.
- fancy, colorful: rich rendering switches; console: the rich Console to print to.
- prog: program name shown in faults and usage (defaults to sys.argv[0]'s basename).

Quick example
    >>> bucket = Bucket(["-p", "9090", "-vv"], environment=False)
    >>> port = bucket.scalar("port", "p", "the port to listen on", kind=INT, default=8080)
    >>> verbosity = bucket.verbosity()
    >>> bucket.parse().fault is None
    True
    >>> port.value, verbosity.value
    (9090, 2)
"""
import copy
import shlex
import sys
from collections.abc import Iterable, Mapping

from rich.console import Console

from .faults import *
from .faults import console
from .flags import *
from .resolver import Resolver
from .sources import EnvironmentSource, SourceChain
from .tokenizer import ArgumentSource
from .usage import print_usage
from .utils import *

RESERVED = ("h", "help")
"""Names that belong to the help switch and can never be registered."""


class Bucket:
    """
    Registry and resolution context for a set of flags.

    Attributes (read-only)
    - flags: registered flags, in registration order.
    - sources: the source chain, in precedence order.
    - arguments: the tokenized command line.
    """

    arguments = mirror("arguments")

    def __init__(
            self,
            argv=Unset,
            /,
            *,
            environment=True,
            sources=(),
            auto_keys=False,
            key_prefix=Unset,
            deprecation_mark="[DEPRECATED]",
            required_mark="*",
            shell=False,
            fancy=False,
            colorful=True,
            console=Unset,
            prog=Unset
    ):
        if argv is Unset:
            tokens = sys.argv[1:]
        elif isinstance(argv, str):
            tokens = shlex.split(argv)
        elif isinstance(argv, Iterable):
            tokens = list(argv)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("Bucket() argument must be a string or an iterable of strings")
        else:
            raise TypeError("Bucket() argument must be a string or an iterable of strings")

        if not isinstance(key_prefix, str | Unset):
            raise TypeError("Bucket() 'key_prefix' must be a string")
        if not isinstance(deprecation_mark, str) or not isinstance(required_mark, str):
            raise TypeError("Bucket() markers must be strings")
        if not isinstance(console, Console | Unset):
            raise TypeError("Bucket() 'console' must be a rich console")
        if not isinstance(prog, str | Unset):
            raise TypeError("Bucket() 'prog' must be a string")

        self._arguments = ArgumentSource(tokens)
        self._chain = SourceChain([self._arguments])

        match environment:
            case True:
                self._chain.append(EnvironmentSource())
            case False:
                pass
            case Mapping():
                self._chain.append(EnvironmentSource(environment))
            case _:
                raise TypeError("Bucket() 'environment' must be a boolean or a mapping")

        for source in sources:
            self._chain.append(source)

        self._flags = []
        self._longs = {}
        self._shorts = {}
        self._keys = {}

        self._auto_keys = bool(auto_keys)
        self._key_prefix = coalesce(key_prefix, "")
        self._deprecation_mark = deprecation_mark
        self._required_mark = required_mark
        self._options = {
            "shell": bool(shell),
            "fancy": bool(fancy),
            "colorful": bool(colorful),
        }
        if console is not Unset:
            self._options["console"] = console
        if prog is not Unset:
            self._options["prog"] = prog

    @property
    def flags(self):
        return tuple(self._flags)

    @property
    def sources(self):
        return tuple(self._chain)

    def _reject(self, message, /, **context):
        trigger(InvalidFlagError(
            message,
            title="invalid flag",
            code=FaultCode.INVALID_FLAG,
            hint="pick another name; each long name, short name and key must be unique",
            **context,
        ), **self._options)

    def _keyed(self, key, long, /):
        """
        apply auto_keys and the key prefix to key (in place) and return it.
        """
        if self._auto_keys:
            key.derive(long)
        if key and self._key_prefix:
            key.prefix = self._key_prefix
        return key

    def add(self, flag, /):
        """
        register a flag and return it.

        behavior
        - applies the bucket's key prefix and, with auto_keys, derives missing keys.
        - rejects reserved names and duplicate long names, short names or keys.
        """
        if not isinstance(flag, Flag):
            raise TypeError("add() argument must be a flag")

        if flag.long in RESERVED:
            return self._reject(f"--{flag.long} is a reserved flag", flag=flag.long)
        if flag.short == "h":
            return self._reject(f"-{flag.short} is a reserved flag", flag=flag.long)
        if flag.long in self._longs:
            return self._reject(f"--{flag.long} flag already exists", flag=flag.long)
        if flag.short and flag.short in self._shorts:
            return self._reject(f"-{flag.short} flag already exists", flag=flag.long)

        if (key := self._keyed(copy.copy(flag.key), flag.long)) and str(key) in self._keys:
            return self._reject(f"{key} flag key already exists", flag=flag.long)
        self._keyed(flag.key, flag.long)

        self._flags.append(flag)
        self._longs[flag.long] = flag
        if flag.short:
            self._shorts[flag.short] = flag
        if key:
            self._keys[str(key)] = flag
        return flag

    def scalar(self, long, short=Unset, /, usage="", **options):
        """
        declare and register a Scalar flag (see Scalar for the options).
        """
        return self.add(Scalar(long, short, usage, **options))

    def slice(self, long, short=Unset, /, usage="", **options):
        """
        declare and register a Slice flag (see Slice for the options).
        """
        return self.add(Slice(long, short, usage, **options))

    def map(self, long, short=Unset, /, usage="", **options):
        """
        declare and register a Map flag (see Map for the options).
        """
        return self.add(Map(long, short, usage, **options))

    def slice_map(self, long, short=Unset, /, usage="", **options):
        """
        declare and register a SliceMap flag (see SliceMap for the options).
        """
        return self.add(SliceMap(long, short, usage, **options))

    def counter(self, long, short=Unset, /, usage="", **options):
        """
        declare and register a Counter flag (see Counter for the options).
        """
        return self.add(Counter(long, short, usage, **options))

    def verbosity(self, usage="the verbosity level (repeat for more: -vvv)", /, **options):
        """
        declare the conventional -v/--verbose counter.
        """
        return self.counter("verbose", "v", usage, **options)

    def prepend_source(self, source, /):
        self._chain.prepend(source)

    def append_source(self, source, /):
        self._chain.append(source)

    def insert_source(self, index, source, /):
        self._chain.insert(index, source)

    def usage(self, *, console=None):
        """
        print the usage table of the visible flags.
        """
        print_usage(
            self._flags,
            console=console or self._options.get("console"),
            prog=self._options.get("prog"),
            deprecation_mark=self._deprecation_mark,
            required_mark=self._required_mark,
            colorful=self._options["colorful"],
            fancy=self._options["fancy"],
        )

    def parse(self):
        """
        resolve every registered flag against the source chain.

        returns
        - Resolution(help, fault, warnings); in non-shell mode a fault is raised instead.
        """
        resolution = Resolver(self._flags, self._chain, self._arguments).resolve()

        if resolution.help:
            self.usage()
            if self._options["shell"]:
                sys.exit(0)
            return resolution

        for warning in resolution.warnings:
            trigger(warning, **self._options)

        if resolution.fault is not None:
            if self._options["shell"]:
                self.usage(console=self._options.get("console", console))
            trigger(resolution.fault, **self._options)

        return resolution

    def __getitem__(self, long):
        try:
            return self._longs[sanitize_long(long)]
        except KeyError:
            raise KeyError(long) from None

    def __contains__(self, long):
        return isinstance(long, str) and sanitize_long(long) in self._longs

    def __iter__(self):
        return iter(self._flags)

    def __len__(self):
        return len(self._flags)

    def __repr__(self):
        return f"{type(self).__name__}({[flag.long for flag in self._flags]!r})"


__all__ = (
    "Bucket",
    "RESERVED",
)
