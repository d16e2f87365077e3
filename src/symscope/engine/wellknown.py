"""The well-known functions and constants.

These tokens name operations independently of any numeric representation.
The default scope binds each of them to ``Real``, ``Complex`` and ``Boolean``
implementations.
"""
from __future__ import annotations

from symscope.core.known import KnownConstant, KnownFunction

# Arithmetic
Negate = KnownFunction("neg")
Add = KnownFunction("add")
Subtract = KnownFunction("sub")
Multiply = KnownFunction("mul")
Divide = KnownFunction("div")
Reciprocal = KnownFunction("reciprocal")
Pow = KnownFunction("pow")
Exp = KnownFunction("exp")
Sqrt = KnownFunction("sqrt")
Ln = KnownFunction("ln")
Abs = KnownFunction("abs")
Sign = KnownFunction("sgn")
Ceiling = KnownFunction("ceil")
Floor = KnownFunction("floor")
Re = KnownFunction("re")
Im = KnownFunction("im")

# Trigonometric
Sine = KnownFunction("sin")
Cosine = KnownFunction("cos")
Tangent = KnownFunction("tan")
Arcsine = KnownFunction("asin")
Arccosine = KnownFunction("acos")
Arctangent = KnownFunction("atan")

# Hyperbolic
HyperbolicSine = KnownFunction("sinh")
HyperbolicCosine = KnownFunction("cosh")
HyperbolicTangent = KnownFunction("tanh")
HyperbolicArcsine = KnownFunction("asinh")
HyperbolicArccosine = KnownFunction("acosh")
HyperbolicArctangent = KnownFunction("atanh")

# Logic
Not = KnownFunction("not")
And = KnownFunction("and")
Or = KnownFunction("or")
Xor = KnownFunction("xor")

# Comparison
Equal = KnownFunction("eq")
NotEqual = KnownFunction("ne")
GreaterThan = KnownFunction("gt")
GreaterOrEqual = KnownFunction("ge")
LessThan = KnownFunction("lt")
LessOrEqual = KnownFunction("le")

# Constants
Zero = KnownConstant("0")
One = KnownConstant("1")
NegativeOne = KnownConstant("-1")
ImaginaryUnit = KnownConstant("i")
GoldenRatio = KnownConstant("φ")
E = KnownConstant("e")
Pi = KnownConstant("π")
Tau = KnownConstant("τ")
PositiveInfinity = KnownConstant("∞")
NegativeInfinity = KnownConstant("-∞")
Indeterminate = KnownConstant("NaN")

FUNCTIONS = (
    Negate,
    Add,
    Subtract,
    Multiply,
    Divide,
    Reciprocal,
    Pow,
    Exp,
    Sqrt,
    Ln,
    Abs,
    Sign,
    Ceiling,
    Floor,
    Re,
    Im,
    Sine,
    Cosine,
    Tangent,
    Arcsine,
    Arccosine,
    Arctangent,
    HyperbolicSine,
    HyperbolicCosine,
    HyperbolicTangent,
    HyperbolicArcsine,
    HyperbolicArccosine,
    HyperbolicArctangent,
    Not,
    And,
    Or,
    Xor,
    Equal,
    NotEqual,
    GreaterThan,
    GreaterOrEqual,
    LessThan,
    LessOrEqual,
)

CONSTANTS = (
    Zero,
    One,
    NegativeOne,
    ImaginaryUnit,
    GoldenRatio,
    E,
    Pi,
    Tau,
    PositiveInfinity,
    NegativeInfinity,
    Indeterminate,
)

COMPARISONS = (Equal, NotEqual, GreaterThan, GreaterOrEqual, LessThan, LessOrEqual)
