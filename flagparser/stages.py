"""
Flagparser stages: the passes that turn loose user tokens into canonical pairs.

Every stage is a plain function over an ordered token list. None of them keeps
state between calls or patches flag positions incrementally: a stage that
changes the shape of the stream hands back a new list, and the caller locates
the flags again against it (see locate()).

Order used by FlagParser.parse()
1. join_spaces            merge free text into one value per flag, defer leading text
2. split_numerics         cut "7 some text" after an integer flag into "7" + "some text"
3. extract_standalones    lift valueless flags out of the stream
4. require_arguments      fail when a flag is left without a value
5. balance                insert the implicit flag before every orphan value
6. enforce_lengths        truncate values, route overflow to the implicit flag
7. resolve_dates          turn relative shorthand into YYYY-MM-DD
8. reinsert_standalones   append the lifted flags back, in their original order
"""
import re

from . import dates
from .catalog import FlagType
from .faults import MissingArgumentError, ExceedMaxLengthError, DateRangeNotAllowedError
from .logs import getLogger
from .utils import join

logger = getLogger(__name__)


def locate(tokens, catalog, /):
    """positions of canonical flags in a pass, in stream order."""
    return [index for index, token in enumerate(tokens) if token in catalog]


def join_spaces(tokens, locations, /):
    """
    merge the free text owned by each flag into a single value.

    - text strictly between two flags becomes the value of the first one; a flag
      followed directly by another flag stays alone (standalone-shaped).
    - text before the first flag is the implicit flag's argument: it is moved to
      the end of the pass, after every reconstructed pair.
    - with no flag at all, the whole input becomes one free-text token.
    """
    if not locations:
        return [join(tokens)]

    output, suffix = [], []
    if locations[0] != 0 and (leading := join(tokens[:locations[0]])):
        suffix.append(leading)

    for position, end in zip(locations, [*locations[1:], len(tokens)]):
        output.append(tokens[position])
        if value := join(tokens[position + 1:end]):
            output.append(value)

    return output + suffix


def split_numerics(tokens, locations, catalog, /):
    """
    keep only the leading digits as the value of integer flags.

    "-c", "7 body text" becomes "-c", "7" and "body text" is appended at the end
    of the pass, where later stages hand it to the implicit flag. values that do
    not start with a digit are left for the caller to judge.
    """
    output = list(tokens)
    for position in locations:
        if catalog.info(output[position]).type is not FlagType.INTEGER:
            continue
        if position + 1 >= len(output) or output[position + 1] in catalog:
            continue

        value = output[position + 1]
        if not (digits := re.match(r"[0-9]+", value)):
            continue
        if remainder := value[digits.end():].strip(" "):
            output[position + 1] = digits.group()
            output.append(remainder)
            logger.debug("split %r after %s into %r and %r", value, output[position], digits.group(), remainder)

    return output


def extract_standalones(tokens, locations, catalog, /):
    """
    drop standalone flags from the pass.

    returns
    - the reduced pass.
    - registry: {position in the given pass: flag name}, consumed later by
      reinsert_standalones(). an empty registry means nothing moved.
    """
    registry = {
        position: tokens[position]
        for position in locations
        if catalog.info(tokens[position]).standalone
    }
    output = [token for index, token in enumerate(tokens) if index not in registry]
    return output, registry


def require_arguments(tokens, locations, /):
    """
    fail with MissingArgumentError when a flag has no following value.

    expects standalone flags to be gone already. two checks apply: there must be
    at least as many values as flags, and no flag may be directly followed by
    another flag or close the stream.
    """
    flags = len(locations)
    if len(tokens) - flags < flags:
        raise MissingArgumentError(
            "%d flag(s) but only %d argument(s) after removing standalone flags" % (flags, len(tokens) - flags),
            hint="give every flag that is not a switch a value",
        )

    positions = set(locations)
    for position in locations:
        if position + 1 >= len(tokens) or position + 1 in positions:
            raise MissingArgumentError(
                "flag %r is missing its argument" % tokens[position],
                hint="add a value right after %s" % tokens[position],
                token=tokens[position],
                index=position,
            )


def balance(tokens, catalog, /):
    """
    insert the implicit flag until every value has an owning flag.

    with standalone flags removed the pass must read flag, value, flag, value...
    while values outnumber flags, the first even index that does not hold a
    value-taking flag receives the implicit flag and positions are located
    again. every insertion shrinks the gap by exactly one, and the loop is capped
    at the size of the pass so it always terminates.
    """
    output = list(tokens)
    for _ in range(len(tokens) + 1):
        flags = len(locate(output, catalog))
        if len(output) - flags <= flags:
            break
        for index in range(0, len(output), 2):
            definition = catalog.info(output[index])
            if definition is None or definition.standalone:
                output.insert(index, catalog.implicit)
                logger.debug("inserted implicit flag %s at %d", catalog.implicit, index)
                break
        else:
            break
    return output


def enforce_lengths(tokens, locations, catalog, /, *, implicit_required):
    """
    cut every value down to its flag's max length.

    what is cut off (trimmed) is collected in encounter order, joined with
    spaces and assigned to the implicit flag, appended at the end. when the
    implicit flag is already in use (implicit_required is false) or the joined
    overflow would itself be too long for it, ExceedMaxLengthError is raised.
    """
    output, overflow = [], []
    for position in locations:
        name = tokens[position]
        definition = catalog.info(name)
        output.append(name)
        if definition.standalone or position + 1 >= len(tokens):
            continue

        value = tokens[position + 1]
        if len(value) > definition.max_length:
            value, remainder = value[:definition.max_length], value[definition.max_length:].strip(" ")
            if remainder:
                overflow.append(remainder)
        output.append(value)

    if not overflow:
        return output

    remainder = join(overflow)
    implicit = catalog.info(catalog.implicit)
    if not implicit_required:
        raise ExceedMaxLengthError(
            "argument too long and %s is already in use: %r is left over" % (implicit.name, remainder),
            hint="quote long values or keep them under each flag's limit",
            token=remainder,
        )
    if len(remainder) > implicit.max_length:
        raise ExceedMaxLengthError(
            "left over text does not fit in %s (%d > %d characters)" % (implicit.name, len(remainder), implicit.max_length),
            hint="shorten the input",
            token=remainder,
        )
    logger.debug("routed overflow %r to %s", remainder, implicit.name)
    return output + [implicit.name, remainder]


def resolve_dates(tokens, locations, catalog, clock, /):
    """
    resolve the value of every datetime flag in place.

    literal dates pass through untouched, shorthand is applied to the clock and
    "start:end" ranges resolve side by side (when the flag allows ranges).
    """
    output = list(tokens)
    for position in locations:
        definition = catalog.info(output[position])
        if definition.type is not FlagType.DATETIME or position + 1 >= len(output):
            continue

        value = output[position + 1]
        if dates.isrange(value):
            if not definition.ranged:
                raise DateRangeNotAllowedError(
                    "flag %r does not accept date ranges (got %r)" % (definition.name, value),
                    hint="pass a single date to %s" % definition.name,
                    token=value,
                )
            output[position + 1] = dates.resolve_range(value, clock)
        else:
            output[position + 1] = dates.resolve(value, clock)

    return output


def reinsert_standalones(tokens, registry, /):
    """append standalone flags back, ordered by their position when lifted."""
    return [*tokens, *(registry[position] for position in sorted(registry))]


__all__ = (
    "locate",
    "join_spaces",
    "split_numerics",
    "extract_standalones",
    "require_arguments",
    "balance",
    "enforce_lengths",
    "resolve_dates",
    "reinsert_standalones",
)
