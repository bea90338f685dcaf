"""
Numeric literal normalization.

Two layers:

    print_number(raw): The ESTree spelling of a number: lowercase, no redundant
        exponent sign or zeros, no trailing fractional zeros, no trailing dot,
        and a leading `0` before a bare `.`.
    normalize_numeric_literal(raw, value, rendered): Corrects the ESTree
        spelling where it would change a Monkey C literal's type. `3.` must not
        become the integer `3`, and a 64-bit value must keep its `l` suffix.
"""

import math
import re

LITERAL_INTEGER_RE = re.compile(r"^-?(0x[0-9a-f]+|\d+)(l)?$", re.IGNORECASE)

_NUMBER_REWRITES = (
    # unnecessary plus and zeroes in scientific notation
    (re.compile(r"^([+-]?[\d.]+e)(?:\+|(-))?0*(\d)"), r"\1\2\3"),
    # unnecessary scientific notation (1x)
    (re.compile(r"^([+-]?[\d.]+)e[+-]?0+$"), r"\1"),
    # numbers always start with a digit
    (re.compile(r"^([+-])?\."), r"\g<1>0."),
    # extraneous trailing decimal zeroes
    (re.compile(r"(\.\d+?)0+(?=e|$)"), r"\1"),
    # trailing dot
    (re.compile(r"\.(?=e|$)"), ""),
)


def print_number(raw: str) -> str:
    result = raw.lower()
    for pattern, replacement in _NUMBER_REWRITES:
        # re.sub leaves unmatched optional groups empty
        result = pattern.sub(replacement, result, count=1)
    return result


def is_integer_shaped(raw: str) -> bool:
    return LITERAL_INTEGER_RE.match(raw) is not None


def normalize_numeric_literal(
    raw: str, value: int | float, rendered: str
) -> str:
    """
    Return the canonical spelling of a numeric literal.

    Args:
        raw: The literal exactly as written in the source.
        value: Its numeric value.
        rendered: What the generic printer would print for it.

    Examples:
        >>> normalize_numeric_literal("3.", 3.0, "3")
        '3f'
        >>> normalize_numeric_literal("100L", 100, "100l")
        '100l'
        >>> normalize_numeric_literal("4294967296", 4294967296, "4294967296")
        '4294967296l'
    """
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer() and not is_integer_shaped(raw):
            if is_integer_shaped(rendered):
                # an integer valued float or double came out as an integer
                return rendered + ("d" if raw[-1:] in ("d", "D") else "f")
        return rendered
    if raw[-1:] in ("l", "L"):
        return raw.lower()
    if abs(value) > 0xFFFFFFFF:
        return raw.lower() + "l"
    return rendered


__all__ = [
    "LITERAL_INTEGER_RE",
    "is_integer_shaped",
    "normalize_numeric_literal",
    "print_number",
]
