"""Text form of real and complex literals.

>>> import math
>>> from symscope.core.formatting import format_real, format_complex
>>> format_real(math.pi)
'π'
>>> format_real(2.0)
'2'
>>> format_real(0.1)
'0.1'
>>> format_complex(3 - 1j)
'3-i'
>>> format_complex(2.5j)
'2.5i'
"""
from __future__ import annotations

import cmath
import math

__all__ = [
    "format_real",
    "format_complex",
]


_GOLDEN_RATIO = (1 + math.sqrt(5)) / 2

_NAMED_REALS = [
    (math.tau, "τ"),
    (math.pi, "π"),
    (math.e, "e"),
    (_GOLDEN_RATIO, "φ"),
]

# Integral floats below this print without a fractional part.
_EXACT_INTEGER_LIMIT = 2.0**53


def format_real(value: float) -> str:
    """Format a real number.

    Values exactly equal to τ, π, e or φ (or their negatives) print as the
    symbol, infinities as ``∞``, integral values as integers and anything else
    with full round trip precision.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    for constant, symbol in _NAMED_REALS:
        if value == constant:
            return symbol
        if value == -constant:
            return "-" + symbol
    if value.is_integer() and abs(value) < _EXACT_INTEGER_LIMIT:
        return str(int(value))
    return repr(value)


def format_complex(value: complex) -> str:
    """Format a complex number as ``a+bi``.

    A zero real part and a zero imaginary part are omitted and an imaginary
    part of one prints as a bare ``i``.
    """
    if cmath.isnan(value):
        return "NaN"

    real, imag = value.real, value.imag
    text = ""
    if real != 0:
        text = format_real(real)

    if imag != 0:
        if imag == 1:
            imag_text = "i"
        elif imag == -1:
            imag_text = "-i"
        else:
            imag_text = format_real(imag) + "i"
        if text and not imag_text.startswith("-"):
            text += "+"
        text += imag_text

    return text or "0"
