"""
Flagparser parser: run the stage pipeline over one invocation's tokens.

What this module provides
- ParseHistory: append-only record of every pass the pipeline produced, plus the
  index <-> token maps of the latest one (the "user" lookup tables).
- FlagParser: binds a FlagCatalog, the raw tokens and a Clock, then parse()
  returns the canonical token list or raises a typed fault.
- parse(): one-shot convenience wrapper around FlagParser.

Core ideas
- Forgiving input: quoting is optional, the most common flag may be omitted,
  switches may appear anywhere, and dates may be relative ("-2m", "1y2m3d").
- Strict output: [flag, value]* followed by the standalone flags, so that a
  positional binder downstream can consume it pair by pair.
- Fresh state per call: nothing survives a parse besides its return value.

Quick start
    from flagparser import FlagDefinition, FlagType, parse, with_now_as

    flags = [
        FlagDefinition("-b", FlagType.STRING),
        FlagDefinition("-d", FlagType.DATETIME),
    ]
    parse(flags, ["this is a body", "-d", "1y", "1m", "2d"], clock=with_now_as("2022-03-14"))
    # ['-d', '2023-04-16', '-b', 'this is a body']
"""
import difflib
import shlex
from collections.abc import Iterable
from types import MappingProxyType

from . import stages
from .catalog import FlagCatalog, Limits, Origin
from .dates import Clock, system_clock
from .faults import ParserException, UnknownFlagError
from .logs import getLogger

logger = getLogger(__name__)


class ParseHistory:
    """
    every version of the token stream seen during one parse.

    the first pass is the raw user input. push() appends a new pass and rebuilds
    the lookup maps from scratch against it; earlier passes are kept untouched
    so they can still be inspected afterwards.
    """
    __slots__ = ("_passes", "_names", "_indexes")

    def __init__(self, tokens, /):
        self._passes = []
        self.push(tokens)

    def push(self, tokens, /):
        """record a new pass and return its number (0 is the raw input)."""
        tokens = tuple(tokens)
        self._passes.append(tokens)
        self._names = MappingProxyType(dict(enumerate(tokens)))
        # last occurrence wins for repeated tokens
        self._indexes = MappingProxyType({token: index for index, token in enumerate(tokens)})
        return len(self._passes) - 1

    @property
    def latest(self):
        return self._passes[-1]

    @property
    def passes(self):
        return tuple(self._passes)

    def name_at(self, index, /):
        return self._names.get(index)

    def index_of(self, token, /):
        return self._indexes.get(token)

    def __len__(self):
        return len(self._passes)


def _sanitize_tokens(tokens, /):
    """
    normalize user input into a list of strings.

    - str: split shell-style (shlex.split).
    - Iterable[str]: used as-is; spaces inside items are meaningful and kept.
    """
    if isinstance(tokens, str):
        return shlex.split(tokens)
    if not isinstance(tokens, Iterable):
        raise TypeError("tokens must be a string or an iterable of strings")
    tokens = list(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("tokens must be a string or an iterable of strings")
    return tokens


class FlagParser:
    """
    normalize one invocation's tokens against a canonical flag table.

    construction
    - flags: FlagCatalog, or an ordered iterable of FlagDefinition (the first one
      is the implicit flag) which is turned into a catalog with `limits`.
    - tokens: raw user tokens without the program name (iterable of str), or a
      single shell-like string.
    - clock: Clock giving the reference instant for relative dates; defaults to
      system_clock().
    - limits: Limits used when `flags` is not already a catalog.

    construction never fails because of user input: an unknown flag is only
    recorded here and raised by parse().
    """

    def __init__(self, flags, tokens, /, clock=None, *, limits=Limits()):
        if isinstance(flags, FlagCatalog):
            self.catalog = flags
        else:
            self.catalog = FlagCatalog(flags, limits)
        if clock is None:
            clock = system_clock()
        if not isinstance(clock, Clock):
            raise TypeError("clock must be a Clock (see with_now_as())")

        self.clock = clock
        self.history = ParseHistory(_sanitize_tokens(tokens))
        self._unknown = self.catalog.unknown(self.history.latest)

    @property
    def has_unknown_flags(self):
        return self._unknown is not None

    def name_at(self, origin, index, /):
        """token at `index` in the canonical table (SYSTEM) or the latest pass (USER)."""
        if origin is Origin.USER:
            return self.history.name_at(index)
        return self.catalog.name_at(index)

    def index_of(self, origin, name, /):
        """position of `name` in the canonical table (SYSTEM) or the latest pass (USER)."""
        if origin is Origin.USER:
            return self.history.index_of(name)
        return self.catalog.index_of(name)

    def locations(self):
        """positions of canonical flags in the latest pass."""
        return stages.locate(self.history.latest, self.catalog)

    def implicit_required(self):
        """
        whether overflow may be routed to the implicit flag.

        false as soon as the implicit flag shows up in the latest pass: routing
        there would duplicate (or overwrite) a value the user already gave.
        """
        return self.index_of(Origin.USER, self.catalog.implicit) is None

    def _push(self, stage, tokens, /):
        number = self.history.push(tokens)
        logger.debug("pass %d (%s): %r", number, stage, list(tokens))
        return list(self.history.latest)

    def _raise_unknown(self):
        token = self._unknown
        suggestions = difflib.get_close_matches(token, [definition.name for definition in self.catalog], 3)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "known flags: %s" % ", ".join(definition.name for definition in self.catalog)
        logger.debug("unknown flag %r in %r", token, list(self.history.passes[0]))
        raise UnknownFlagError(
            "unknown flag %r in user-provided args" % token,
            hint=hint,
            token=token,
            suggestions=tuple(suggestions),
        )

    def parse(self):
        """
        run the pipeline and return the canonical token list.

        returns
        - list[str]: [flag, value]* followed by standalone flags. a single raw
          token (or no token) is returned unchanged.

        raises
        - UnknownFlagError, MissingArgumentError, ExceedMaxLengthError,
          UnknownDateInputError, MalformedDateRangeError, DateRangeNotAllowedError
          for bad input; InitializationError for an unusable catalog.
        """
        self.catalog.check()
        if self.has_unknown_flags:
            self._raise_unknown()

        raw = self.history.passes[0]
        if len(raw) <= 1:
            return list(raw)

        self.history = ParseHistory(raw)

        try:
            return self._run()
        except ParserException as fault:
            logger.debug("failed after pass %d: %s", len(self.history) - 1, fault)
            raise

    def _run(self):
        raw = self.history.passes[0]
        catalog = self.catalog
        tokens = self._push("spaces", stages.join_spaces(list(raw), self.locations()))
        tokens = self._push("numerics", stages.split_numerics(tokens, self.locations(), catalog))

        tokens, standalones = stages.extract_standalones(tokens, self.locations(), catalog)
        if standalones:
            tokens = self._push("standalones", tokens)

        stages.require_arguments(tokens, self.locations())

        balanced = stages.balance(tokens, catalog)
        if balanced != tokens:
            tokens = self._push("balance", balanced)

        tokens = self._push("lengths", stages.enforce_lengths(
            tokens,
            self.locations(),
            catalog,
            implicit_required=self.implicit_required(),
        ))
        tokens = self._push("dates", stages.resolve_dates(tokens, self.locations(), catalog, self.clock))

        if standalones:
            tokens = self._push("reassemble", stages.reinsert_standalones(tokens, standalones))

        return tokens

    def __repr__(self):
        return "flag-parser(catalog=%r, tokens=%r)" % (self.catalog, list(self.history.passes[0]))


def parse(flags, tokens, /, clock=None, *, limits=Limits()):
    """
    one-shot helper: FlagParser(flags, tokens, clock, limits=limits).parse().
    """
    return FlagParser(flags, tokens, clock, limits=limits).parse()


__all__ = (
    "ParseHistory",
    "FlagParser",
    "parse",
)
