"""
Flagparser catalog: canonical flag definitions and their lookup maps.

Overview
- FlagType: the value kinds a flag may carry (string, integer, boolean, datetime).
- Origin: which token table a lookup targets, the canonical one (SYSTEM) or the
  latest pass of user input (USER).
- FlagDefinition: immutable record describing one flag (name, type, max length,
  standalone-ness, and whether a datetime flag accepts "start:end" ranges).
- Limits: the explicit configuration structure supplying default caps for
  definitions that leave max_length unset.
- FlagCatalog: built once from the caller's definitions; the first definition
  is the implicit flag, assumed for free text that no flag claims.

Quick example
    >>> catalog = FlagCatalog([
    ...     FlagDefinition("-b", FlagType.STRING),
    ...     FlagDefinition("-c", FlagType.INTEGER),
    ...     FlagDefinition("-a", FlagType.BOOLEAN, standalone=True),
    ... ])
    >>> catalog.implicit
    '-b'
    >>> catalog.info("-c").max_length
    4
"""
from enum import Enum, StrEnum
from types import MappingProxyType
from typing import NamedTuple

from .faults import InitializationError
from .utils import isflag


class FlagType(StrEnum):
    STRING = "string"
    INTEGER = "int"
    BOOLEAN = "bool"
    DATETIME = "dateTime"


class Origin(Enum):
    USER = "user"
    SYSTEM = "system"


class FlagDefinition(NamedTuple):
    """
    one canonical flag.

    fields
    - name: literal token used on the command line (e.g. "-b", "--append").
    - type: FlagType of the value that follows the flag.
    - max_length: character cap of the value; None means "take it from Limits".
      irrelevant for standalone flags.
    - standalone: the flag takes no following value.
    - ranged: datetime flags only; whether "start:end" ranges are accepted.
    """
    name: str
    type: FlagType = FlagType.STRING
    max_length: int | None = None
    standalone: bool = False
    ranged: bool = True


class Limits(NamedTuple):
    """
    default value caps, per flag type.

    replaces process-wide configuration: a catalog only ever sees the limits it
    was built with.
    """
    max_length: int = 2000
    max_int_digits: int = 4
    max_date_length: int = 20

    def default(self, type, /):
        match type:
            case FlagType.INTEGER:
                return self.max_int_digits
            case FlagType.DATETIME:
                return self.max_date_length
            case FlagType.BOOLEAN:
                return 0
            case _:
                return self.max_length


def _sanitize_limits(limits, /):
    if not isinstance(limits, Limits):
        raise TypeError("limits must be a Limits instance")
    for field, value in zip(limits._fields, limits):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("limit %r must be an integer" % field)
        if value < 0:
            raise ValueError("limit %r must be non-negative" % field)
    return limits


def _sanitize_definition(definition, limits, /):
    """
    validate one definition and materialize its max length from the limits.
    """
    if not isinstance(definition, FlagDefinition):
        raise TypeError("catalog entries must be FlagDefinition instances")
    if not isinstance(definition.name, str) or len(definition.name) < 2:
        raise ValueError("flag name must be a prefix character followed by at least one more character")
    if definition.name[0].isalnum():
        raise ValueError("flag name %r must start with a non-alphanumeric prefix" % definition.name)
    if definition.name[1].isdecimal():
        raise ValueError("flag name %r collides with negative numeric input" % definition.name)
    try:
        type = FlagType(definition.type)
    except ValueError:
        raise TypeError("flag %r has an unknown type %r" % (definition.name, definition.type)) from None

    length = definition.max_length
    if length is None:
        length = limits.default(type)
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError("max length of flag %r must be an integer" % definition.name)
    if length < 0:
        raise ValueError("max length of flag %r must be non-negative" % definition.name)

    return definition._replace(type=type, max_length=length, standalone=bool(definition.standalone))


class FlagCatalog:
    """
    canonical flag table with O(1) position and name lookups.

    construction
    - definitions: ordered iterable of FlagDefinition; the first one is the
      implicit flag. duplicate names are rejected.
    - limits: Limits used to fill in unset max lengths.

    errors
    - InitializationError when the definition list is empty, so catalog-dependent
      operations never run against unset maps.
    """
    __slots__ = ("_definitions", "_names", "_indexes", "_prefixes")

    def __init__(self, definitions, /, limits=Limits()):
        limits = _sanitize_limits(limits)
        definitions = tuple(_sanitize_definition(definition, limits) for definition in definitions)
        if not definitions:
            raise InitializationError(hint="supply at least one flag definition; the first one is the implicit flag")

        indexes = {}
        for index, definition in enumerate(definitions):
            if definition.name in indexes:
                raise ValueError("duplicate flag name %r" % definition.name)
            indexes[definition.name] = index

        self._definitions = definitions
        self._names = MappingProxyType(dict(enumerate(definition.name for definition in definitions)))
        self._indexes = MappingProxyType(indexes)
        self._prefixes = frozenset(definition.name[0] for definition in definitions)

    def check(self):
        """
        fail with InitializationError when the canonical maps are unset or empty.
        """
        if not getattr(self, "_names", None) or not getattr(self, "_indexes", None):
            raise InitializationError()

    @property
    def definitions(self):
        return self._definitions

    @property
    def implicit(self):
        """name of the implicit flag (first definition)."""
        return self._definitions[0].name

    @property
    def prefixes(self):
        """characters that open a flag token in this catalog."""
        return self._prefixes

    def name_at(self, index, /):
        """canonical name at a definition position, or None."""
        return self._names.get(index)

    def index_of(self, name, /):
        """definition position of a canonical name, or None."""
        return self._indexes.get(name)

    def info(self, name, /):
        """full definition of a canonical name, or None."""
        try:
            return self._definitions[self._indexes[name]]
        except KeyError:
            return None

    def unknown(self, tokens, /):
        """
        return the first token shaped like a flag that the catalog does not know.

        a token counts when it starts with one of the catalog's prefix characters,
        is longer than one character, and its second character is not a digit
        (so "-2m" and "-4" stay values). returns None when every token is fine.
        """
        for token in tokens:
            if token not in self._indexes and isflag(token, self._prefixes):
                return token
        return None

    def __contains__(self, name):
        return name in self._indexes

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self):
        return len(self._definitions)

    def __repr__(self):
        return "flag-catalog(%s)" % ", ".join(definition.name for definition in self._definitions)


__all__ = (
    "FlagType",
    "Origin",
    "FlagDefinition",
    "Limits",
    "FlagCatalog",
)
