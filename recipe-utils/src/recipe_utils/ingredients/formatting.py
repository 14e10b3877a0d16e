"""Display formatting of ingredient quantities."""

from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

# --- Constants ---

# Unicode glyphs for the fractions we render in compact form
FRACTION_GLYPHS = {
    Fraction(1, 4): "¼",
    Fraction(1, 3): "⅓",
    Fraction(1, 2): "½",
    Fraction(2, 3): "⅔",
    Fraction(3, 4): "¾",
}

# Maximum distance between a remainder and the fraction it is shown as
FRACTION_TOLERANCE = 0.02

# Quantities with a whole part of at least this are always shown as decimals
FRACTION_LIMIT = 10

DECIMAL_PLACES = Decimal("0.01")

# --- Functions ---


def format_quantity(quantity: float) -> str:
    """Format a quantity for display.

    Small quantities close to a half, third or quarter are rendered with a
    unicode fraction, everything else as a decimal rounded to two places with
    trailing zeros removed. The output never depends on the locale.

    Args:
        quantity: The quantity to format.

    Returns:
        The display string.

    Examples:
        >>> format_quantity(400.0)
        '400'
        >>> format_quantity(1.5)
        '1½'
        >>> format_quantity(0.3333)
        '⅓'
        >>> format_quantity(12.125)
        '12.13'
    """
    if quantity <= 0:
        return "0"

    whole = int(quantity)
    if whole < FRACTION_LIMIT:
        compact = _format_compact(whole, quantity - whole)
        if compact is not None:
            return compact

    return _format_decimal(quantity)


def _format_compact(whole: int, remainder: float):
    """Render ``whole + remainder`` as a mixed fraction if one is close enough."""
    if whole > 0 and remainder <= FRACTION_TOLERANCE:
        return str(whole)
    if whole > 0 and 1 - remainder <= FRACTION_TOLERANCE:
        return str(whole + 1)

    approximation = Fraction(remainder).limit_denominator(4)
    glyph = FRACTION_GLYPHS.get(approximation)
    if glyph is None or abs(float(approximation) - remainder) > FRACTION_TOLERANCE:
        return None
    return f"{whole}{glyph}" if whole else glyph


def _format_decimal(quantity: float) -> str:
    """Round half up to two places and trim trailing zeros."""
    rounded = Decimal(repr(quantity)).quantize(DECIMAL_PLACES, rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
