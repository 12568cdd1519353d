"""
Flagparser utilities (internal helpers, carefully exposed)

Overview
- join(tokens)
  • Collapse a run of raw tokens into one space-separated value, trimmed at both ends.

- isflag(token, prefixes)
  • Shape check for flag-looking tokens that still permits negative shorthand ("-2m").

Stability and contract
- Names not in __all__ are internal and may change without notice.
"""


def join(tokens, /):
    """
    collapse raw tokens into a single value.

    tokens are joined with one space and the result is trimmed of surrounding
    spaces, so an empty run (or a run of blank tokens) yields "".

    examples
    - join(["this", "is", "a", "body"]) -> "this is a body"
    - join([])                          -> ""
    """
    return " ".join(tokens).strip(" ")


def isflag(token, prefixes, /):
    """
    tell whether a token is shaped like a flag.

    a flag is a prefix character followed by at least one more character whose
    first one is not a decimal digit; "-2m" and "-4" are therefore values
    (negative numeric or date shorthand), never flags.
    """
    return len(token) > 1 and token[0] in prefixes and not token[1].isdecimal()


__all__ = (
    # Functions
    "join",
    "isflag",
)
