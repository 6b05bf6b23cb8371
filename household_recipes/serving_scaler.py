"""Scale free-text ingredient quantities to a new serving count.

Only the leading quantity of each line is rewritten; units and the rest of the
line are kept exactly as typed. Lines without a recognisable quantity
("Salt and pepper to taste") pass through untouched.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

# Fractions a cook would write by hand, in ascending order, as
# (render value, symbol, exact value). Rendering snaps to the rounded thirds
# 0.333/0.667; parsing a symbol yields the exact value.
NICE_FRACTIONS: tuple[tuple[float, str, float], ...] = (
    (0.0, "", 0.0),
    (0.125, "⅛", 1 / 8),
    (0.25, "¼", 1 / 4),
    (0.333, "⅓", 1 / 3),
    (0.375, "⅜", 3 / 8),
    (0.5, "½", 1 / 2),
    (0.625, "⅝", 5 / 8),
    (0.667, "⅔", 2 / 3),
    (0.75, "¾", 3 / 4),
    (0.875, "⅞", 7 / 8),
)

UNICODE_FRACTIONS: dict[str, float] = {
    symbol: exact for _, symbol, exact in NICE_FRACTIONS if symbol
}

# Fractional parts further than this from every nice fraction are shown as decimals
FRACTION_TOLERANCE = 0.1


@dataclass(frozen=True)
class QuantityToken:
    """Leading quantity of an ingredient line."""
    kind: str
    value: float
    end: int  # index just past the token; line[end:] is the untouched remainder


def decimal_to_fraction(value: float) -> str:
    """Render a quantity the way it would be written in a recipe.

    The fractional part snaps to the nearest eighth or third. When it is not
    within FRACTION_TOLERANCE of any of them the whole value is printed with
    one decimal place instead.

    Examples:
        1.5 → "1½"
        0.25 → "¼"
        2.0 → "2"
        2.99 → "3"
    """
    if value == 0:
        return "0"

    whole = math.floor(value)
    frac = value - whole

    closest_symbol = ""
    closest_diff = 1.0
    for fraction_value, symbol, _ in NICE_FRACTIONS:
        diff = abs(frac - fraction_value)
        if diff < closest_diff:
            closest_diff = diff
            closest_symbol = symbol

    if closest_diff > FRACTION_TOLERANCE:
        return _format_decimal(value)

    if whole == 0 and closest_symbol:
        return closest_symbol
    if closest_symbol:
        return f"{whole}{closest_symbol}"
    return str(whole)


def _format_decimal(value: float) -> str:
    text = f"{value:.1f}"
    if text.endswith(".0"):
        return text[:-2]
    return text


def _fraction_value(numerator: str, denominator: str) -> float | None:
    denom = float(denominator)
    if denom == 0:
        return None
    return float(numerator) / denom


def _unicode_fraction_value(match: re.Match) -> float:
    whole = float(match.group(1)) if match.group(1) else 0.0
    return whole + UNICODE_FRACTIONS[match.group(2)]


def _mixed_fraction_value(match: re.Match) -> float | None:
    fraction = _fraction_value(match.group(2), match.group(3))
    if fraction is None:
        return None
    return float(match.group(1)) + fraction


def _simple_fraction_value(match: re.Match) -> float | None:
    return _fraction_value(match.group(1), match.group(2))


def _number_value(match: re.Match) -> float:
    return float(match.group(0))


_FRACTION_CHARS = "".join(UNICODE_FRACTIONS)

# Tried in order, first match wins. Mixed fractions must come before simple
# ones, otherwise "1 1/2" reads as 1 with " 1/2" left in the remainder.
QUANTITY_PATTERNS: tuple[tuple[str, re.Pattern, Callable[[re.Match], float | None]], ...] = (
    ("unicode_fraction", re.compile(rf"([0-9]*)\s*([{_FRACTION_CHARS}])"), _unicode_fraction_value),
    ("mixed_fraction", re.compile(r"([0-9]+)\s+([0-9]+)/([0-9]+)"), _mixed_fraction_value),
    ("simple_fraction", re.compile(r"([0-9]+)/([0-9]+)"), _simple_fraction_value),
    ("number", re.compile(r"[0-9]+(?:\.[0-9]+)?|\.[0-9]+"), _number_value),
)


def parse_leading_quantity(line: str) -> QuantityToken | None:
    """Find the quantity at the very start of *line*.

    Returns None when the line does not start with a quantity, or when the
    quantity is degenerate (a zero denominator such as "1/0").
    """
    for kind, pattern, to_value in QUANTITY_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue
        value = to_value(match)
        if value is None:
            logger.debug("Ignoring degenerate quantity", extra={"token": match.group(0)})
            return None
        return QuantityToken(kind=kind, value=value, end=match.end())
    return None


def scale_ingredient_line(line: str, ratio: float) -> str:
    """Multiply the leading quantity of one ingredient line by *ratio*.

    "1 1/2 cups milk" scaled by 2 gives "3 cups milk". Everything after the
    quantity, including the space before the unit, is kept byte for byte.
    """
    if ratio == 1:
        return line

    token = parse_leading_quantity(line)
    if token is None:
        return line

    scaled = token.value * ratio
    if not math.isfinite(scaled):
        logger.debug("Scaled quantity is not finite, keeping line", extra={"line": line})
        return line

    return decimal_to_fraction(scaled) + line[token.end:]


def scale_ingredients(ingredients_text: str, original_servings: float, new_servings: float) -> str:
    """Rescale every line of a newline-separated ingredient block.

    Returns the text unchanged when the serving counts match or when
    original_servings is not positive. Blank lines are kept as they are;
    other lines are stripped before scaling, so their leading indentation
    is dropped. The line count never changes.
    """
    if original_servings == new_servings or original_servings <= 0:
        return ingredients_text

    ratio = new_servings / original_servings

    scaled_lines = []
    for line in ingredients_text.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            scaled_lines.append(line)
            continue
        scaled_lines.append(scale_ingredient_line(trimmed, ratio))

    logger.debug(
        "Scaled ingredient block",
        extra={"ratio": ratio, "line_count": len(scaled_lines)},
    )
    return "\n".join(scaled_lines)
