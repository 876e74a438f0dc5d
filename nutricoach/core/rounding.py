"""
Display Rounding
=================
Rounds calculated values the way the patient screens display them.

Python's built-in round() sends exact ties to the even digit (24.25 -> 24.2),
while the screens round ties away from zero (24.25 -> 24.3). The float is
converted to its exact decimal value first, so only true binary ties are
affected.
"""

from decimal import ROUND_HALF_UP, Context, Decimal

# Enough digits for any finite float (max ~1.8e308) plus the decimal places
_CONTEXT = Context(prec=330)


def round_half_up(value: float, places: int) -> float:
    """
    Round a finite float to `places` decimal places, ties away from zero.

    Examples:
        round_half_up(24.25, 1)  -> 24.3
        round_half_up(0.125, 2)  -> 0.13
        round_half_up(-0.125, 2) -> -0.13
    """
    exponent = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP, context=_CONTEXT))
