"""
Amount grammar - turns amount text into an exact factor and an opaque unit.

Patterns are tried in order, first match wins:
  - slash fraction       "1/2 cup", "1 1/2 cups"
  - vulgar fraction      "½ cup", "1 ½ cups"
  - decimal              "1.5 l", "1,5 l"
  - integer              "2 eggs"
  - anything else        "pinch" -> no factor, the whole text is the unit

Units are never interpreted, only trimmed.
"""

import logging
import re
from typing import Literal, Optional, Tuple

from .. import constants
from ..constants import U16_MAX, U32_MAX
from ..exceptions import RecipeParseError
from ..models.recipe import Amount, FloatFactor, FractionFactor, IntegerFactor
from .spans import Span

logger = logging.getLogger(__name__)

OverflowPolicy = Literal["error", "saturate"]

# ═══════════════════════════════════════════════════════════════════
# VULGAR FRACTIONS
# ═══════════════════════════════════════════════════════════════════

VULGAR_FRACTIONS = {
    "¼": (1, 4),
    "½": (1, 2),
    "¾": (3, 4),
    "↉": (0, 3),
    "⅐": (1, 7),
    "⅑": (1, 9),
    "⅒": (1, 10),
    "⅓": (1, 3),
    "⅔": (2, 3),
    "⅕": (1, 5),
    "⅖": (2, 5),
    "⅗": (3, 5),
    "⅘": (4, 5),
    "⅙": (1, 6),
    "⅚": (5, 6),
    "⅛": (1, 8),
    "⅜": (3, 8),
    "⅝": (5, 8),
    "⅞": (7, 8),
}


def decode_vulgar_fraction(symbol: str) -> Tuple[int, int]:
    """
    Return (numerator, denominator) of a unicode vulgar fraction.

    Raises:
        KeyError: for anything outside the table; only matched symbols get here.
    """
    return VULGAR_FRACTIONS[symbol]


# ═══════════════════════════════════════════════════════════════════
# PATTERNS
# ═══════════════════════════════════════════════════════════════════

SLASH_FRACTION = re.compile(
    r"^(?:(?P<whole>\d+)\s+)?(?P<numerator>\d+)\s*/\s*(?P<denominator>\d+)\s*(?P<unit>.+)?$",
    re.DOTALL,
)
VULGAR_FRACTION = re.compile(
    r"^(?:(?P<whole>\d+)\s*)?(?P<symbol>[¼-¾⅐-⅞↉])\s*(?P<unit>.+)?$",
    re.DOTALL,
)
DECIMAL = re.compile(r"^(?P<whole>\d*)[.,](?P<fraction>\d+)\s*(?P<unit>.+)?$", re.DOTALL)
INTEGER = re.compile(r"^(?P<value>\d+)\s*(?P<unit>.+)?$", re.DOTALL)


# ═══════════════════════════════════════════════════════════════════
# RANGE CHECKS
# ═══════════════════════════════════════════════════════════════════

def _fit(value: int, maximum: int, overflow: OverflowPolicy, span: Span) -> int:
    if value <= maximum:
        return value
    if overflow == "saturate":
        logger.warning(f"Amount {value} at {span} exceeds {maximum}, saturating")
        return maximum
    raise RecipeParseError("invalid_amount", span)


def _fraction(
    whole: Optional[str],
    numerator: int,
    denominator: int,
    overflow: OverflowPolicy,
    span: Span,
) -> FractionFactor:
    if denominator == 0:
        raise RecipeParseError("invalid_amount", span)
    denominator = _fit(denominator, U16_MAX, overflow, span)
    combined = int(whole) * denominator + numerator if whole else numerator
    return FractionFactor(
        numerator=_fit(combined, U16_MAX, overflow, span),
        denominator=denominator,
    )


# ═══════════════════════════════════════════════════════════════════
# MAIN PARSING FUNCTION
# ═══════════════════════════════════════════════════════════════════

def parse_amount(
    source: str,
    span: Optional[Span] = None,
    overflow: Optional[OverflowPolicy] = None,
) -> Amount:
    """
    Parse the amount text at ``span`` (default: all of ``source``).

    Never fails on unrecognized text: the trimmed text becomes the unit and
    the factor is None. Fails only on numbers out of range, per ``overflow``
    (defaults to the configured ``RECIPE_MARKDOWN_AMOUNT_OVERFLOW``).

    Raises:
        RecipeParseError: ``invalid_amount`` for a zero denominator or an
            overflowing number under the "error" policy.
    """
    span = span or Span(0, len(source))
    overflow = overflow or constants.AMOUNT_OVERFLOW
    text = span.slice(source).strip()

    match = SLASH_FRACTION.match(text)
    if match:
        factor = _fraction(
            match["whole"],
            int(match["numerator"]),
            int(match["denominator"]),
            overflow,
            span,
        )
        return Amount(factor=factor, unit=match["unit"])

    match = VULGAR_FRACTION.match(text)
    if match:
        numerator, denominator = decode_vulgar_fraction(match["symbol"])
        factor = _fraction(match["whole"], numerator, denominator, overflow, span)
        return Amount(factor=factor, unit=match["unit"])

    match = DECIMAL.match(text)
    if match:
        value = float(f"{match['whole'] or 0}.{match['fraction']}")
        return Amount(factor=FloatFactor(value=value), unit=match["unit"])

    match = INTEGER.match(text)
    if match:
        value = _fit(int(match["value"]), U32_MAX, overflow, span)
        return Amount(factor=IntegerFactor(value=value), unit=match["unit"])

    logger.debug(f"No number in amount {text!r}, keeping it as unit")
    return Amount(factor=None, unit=text or None)
