"""
Flagparser faults (typed parse errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every way a parse can fail.
  Codes are grouped by pipeline stage to keep copy consistent and make
  logs/searches predictable.
- ParserException: base type that carries message + options and knows how to
  render itself in a friendly, lowercased, and actionable way.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Terminal by construction
- A fault always ends the parse: there is no partial result and no recovery.
  The same input fails the same way every time, so callers surface the kind verbatim.

Integration
- FlagParser.parse() raises these exceptions.
- A CLI front-end catches them and calls trigger(fault, shell=True) to print
  them via rich and exit with status 1.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text


console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the parser (stable identifiers).

    grouping (by pipeline stage)
    - catalog (21xxx)
      • INITIALIZATION, UNKNOWN_FLAG
    - structure (22xxx)
      • MISSING_ARGUMENT, EXCEED_MAX_LENGTH
    - dates (23xxx)
      • UNKNOWN_DATE_INPUT, MALFORMED_DATE_RANGE, DATE_RANGE_NOT_ALLOWED

    normalize() allows host remapping to custom labels while keeping code-stability.
    """
    # --- catalog errors (21xxx) ---
    INITIALIZATION         = 21101
    UNKNOWN_FLAG           = 21102

    # --- structural errors (22xxx) ---
    MISSING_ARGUMENT       = 22101
    EXCEED_MAX_LENGTH      = 22102

    # --- date errors (23xxx) ---
    UNKNOWN_DATE_INPUT     = 23101
    MALFORMED_DATE_RANGE   = 23102
    DATE_RANGE_NOT_ALLOWED = 23103

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParserException(Exception):
    """
    base class of every typed parse fault.

    the message doubles as the user-facing text; `options` holds the rendering
    context (title, code, hint, offending token, ...) as a read-only mapping.
    """
    __code__ = None
    __title__ = "parse error"
    __message__ = "parse error"

    def __init__(self, message=None, /, **options):
        assert message is None or isinstance(message, str)
        if message is None:
            message = type(self).__message__
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType({
            "title": type(self).__title__,
            "code": type(self).__code__,
        } | options)

    @property
    def code(self):
        return self.options["code"]

    def __str__(self):
        return self.message

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        prog = text(getattr(main, "__prog__", self.options.get("prog", "flagparser")), styler("prog-name"))
        code = self.options["code"]

        header = Text.assemble(
            "[ ",
            prog,
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
            " | ",
            text(self.options["title"].title(), styler("error-title")),
            " ]"
        )
        message = text(self.message, styler("error-message"))
        renders = [message]
        if hint := self.options.get("hint"):
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class InitializationError(ParserException):
    __code__ = FaultCode.INITIALIZATION
    __title__ = "initialisation failed"
    __message__ = "flag mapper initialisation failed"


class UnknownFlagError(ParserException):
    __code__ = FaultCode.UNKNOWN_FLAG
    __title__ = "unknown flag"
    __message__ = "unknown flag in user-provided args"


class MissingArgumentError(ParserException):
    __code__ = FaultCode.MISSING_ARGUMENT
    __title__ = "missing argument"
    __message__ = "flag missing argument"


class ExceedMaxLengthError(ParserException):
    __code__ = FaultCode.EXCEED_MAX_LENGTH
    __title__ = "argument too long"
    __message__ = "maximum argument length exceeded"


class UnknownDateInputError(ParserException):
    __code__ = FaultCode.UNKNOWN_DATE_INPUT
    __title__ = "unknown date input"
    __message__ = "unknown elements in date argument"


class MalformedDateRangeError(ParserException):
    __code__ = FaultCode.MALFORMED_DATE_RANGE
    __title__ = "malformed date range"
    __message__ = "malformed date range"


class DateRangeNotAllowedError(ParserException):
    __code__ = FaultCode.DATE_RANGE_NOT_ALLOWED
    __title__ = "date range not allowed"
    __message__ = "date range not allowed for this flag"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see ParserException).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the rich console and the process exits
      with status 1; otherwise, the exception is raised.

    typical options
    - shell, fancy, colorful, prog, and any context the reporter may want to show.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ParserException",
    "InitializationError",
    "UnknownFlagError",
    "MissingArgumentError",
    "ExceedMaxLengthError",
    "UnknownDateInputError",
    "MalformedDateRangeError",
    "DateRangeNotAllowedError",
    "trigger",
    "getdoc",
)
