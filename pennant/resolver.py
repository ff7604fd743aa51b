"""
Pennant resolver: one resolution pass over registered flags and the source chain.

Algorithm
1. help requested on the command line → Resolution(help=True); nothing is resolved.
2. unknown-flag check: every identifier in the argument table must belong to a
   registered flag (--long or -s) or be reserved (-h, --help). The first stray one,
   in table order, aborts the pass with UnknownFlagError.
3. for each flag in registration order, for each source in chain order, read --long,
   then -s, then the flag's external key. The first hit wins; later sources are not
   consulted for that flag.
4. a hit with an empty value stands for the flag's presence value ("true" for bools);
   a counter hit on the command line becomes repeats × once.
5. a rejected value aborts the pass with the flag's fault.
6. no hit at all: required flags fail with RequiredFlagError, others fall back to
   reset() (default if any, zero value otherwise).
7. deprecated flags set by a source produce a DeprecatedFlagWarning.

The pass never prints or exits; the returned Resolution carries the help signal,
the first fault and the collected warnings for the caller to surface.
"""
from typing import NamedTuple

from .faults import *
from .flags import Counter
from .sources import SourceChain
from .tokenizer import ArgumentSource, HELP
from .utils import is_empty


class Resolution(NamedTuple):
    """
    outcome of a resolution pass.

    - help: True when -h/--help was given (no flag was resolved).
    - fault: the first FlagException of the pass, or None.
    - warnings: FlagWarning instances collected along the way.
    """
    help: bool = False
    fault: FlagException | None = None
    warnings: tuple[FlagWarning, ...] = ()


class Resolver:
    """
    Binds registered flags to a source chain for a single resolution pass.

    parameters
    - flags: the registered flags, in registration order.
    - chain: SourceChain (or any iterable of sources), in precedence order.
    - arguments: the tokenized command line, used for the help signal, the unknown-flag
      check and the repeat counts of counter flags.
    """

    def __init__(self, flags, chain, arguments, /):
        if not isinstance(arguments, ArgumentSource):
            raise TypeError("Resolver() third argument must be an argument source")
        self._flags = tuple(flags)
        self._chain = chain if isinstance(chain, SourceChain) else SourceChain(chain)
        self._arguments = arguments

    def _check_unknown(self):
        known = set(HELP)
        for flag in self._flags:
            known.update(flag.names)

        for name in self._arguments.arguments:
            if name not in known:
                return UnknownFlagError(
                    f"{name} is an unknown flag",
                    title="unknown flag",
                    code=FaultCode.UNKNOWN_FLAG,
                    hint="run with --help to list the available flags",
                    flag=name,
                )
        return None

    def _lookup(self, flag, /):
        """
        first (source, value) offering a value for the flag, or (None, None).
        """
        identifiers = list(flag.names)
        if key := str(flag.key):
            identifiers.append(key)

        for source in self._chain:
            for identifier in identifiers:
                value, found = source.read(identifier)
                if found:
                    return source, value
        return None, None

    def _resolve(self, flag, /):
        """
        resolve one flag; returns True when a source set it.
        """
        source, value = self._lookup(flag)
        if source is None:
            if flag.required:
                raise RequiredFlagError(
                    f"{flag.display} flag is required",
                    title="required flag",
                    code=FaultCode.REQUIRED_FLAG,
                    hint=f"provide a value for {flag.display}",
                    flag=flag.long,
                )
            flag.reset()
            return False

        if is_empty(value):
            if isinstance(flag, Counter) and source is self._arguments:
                value = flag.count(self._arguments.repeats(flag.long, flag.short))
            else:
                value = flag.empty

        flag.set(value)
        return True

    def resolve(self):
        """
        run the pass and report its outcome; flags are mutated in place.
        """
        if self._arguments.help_requested:
            return Resolution(help=True)

        if (fault := self._check_unknown()) is not None:
            return Resolution(fault=fault)

        warnings = []
        for flag in self._flags:
            try:
                if self._resolve(flag) and flag.deprecated:
                    warnings.append(DeprecatedFlagWarning(
                        f"{flag.display} is deprecated",
                        title="deprecated flag",
                        code=FaultCode.DEPRECATED_FLAG,
                        hint=f"stop using {flag.display}; it may be removed in a future release",
                        flag=flag.long,
                    ))
            except FlagException as fault:
                return Resolution(fault=fault, warnings=tuple(warnings))

        return Resolution(warnings=tuple(warnings))


def resolve(flags, chain, arguments, /):
    """
    shorthand for Resolver(flags, chain, arguments).resolve().
    """
    return Resolver(flags, chain, arguments).resolve()


__all__ = (
    "Resolution",
    "Resolver",
    "resolve",
)
