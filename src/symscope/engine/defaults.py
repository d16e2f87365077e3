"""The default scope.

Each supported representation has its own registration function so that the
table of implementations for ``Real``, ``Complex`` and ``Boolean`` can be read
(and extended) one representation at a time. Registration order matters: it
decides recognition (first match wins) and breaks ties in overload
resolution.

>>> from symscope.core.expr import Complex, variable
>>> from symscope.engine.defaults import default_scope
>>> scope = default_scope()
>>> x = variable('x')
>>> z = variable('z', Complex)
>>> scope.bind('sin', x)
math.sin(x)
>>> scope.bind('sin', z)
cmath.sin(z)
>>> scope.bind('add', z, x)
complex.add(z, x)
>>> scope.bind('sqrt', x)
cmath.sqrt(Complex(x))
>>> scope.bind_constant('pi')
math.pi
"""
from __future__ import annotations

import math
from typing import Callable

from symscope.core.expr import (
    ARITHMETIC_OPS,
    Boolean,
    Complex,
    Expr,
    FunctionRef,
    Real,
    binary,
    call,
    constant,
    logical_not,
    member,
    negate,
)
from symscope.engine import wellknown as wk
from symscope.engine.functions import CMATH, MATH, MEMBERS
from symscope.engine.scope import Scope, ScopeBuilder, ScopeOptions

__all__ = [
    "add_real",
    "add_complex",
    "add_boolean",
    "add_names",
    "build_default_scope",
    "default_scope",
]


_ARITHMETIC = dict(
    zip(ARITHMETIC_OPS, [wk.Add, wk.Subtract, wk.Multiply, wk.Divide, wk.Pow])
)

_COMPARISONS = {
    "Equal": wk.Equal,
    "NotEqual": wk.NotEqual,
    "GreaterThan": wk.GreaterThan,
    "GreaterOrEqual": wk.GreaterOrEqual,
    "LessThan": wk.LessThan,
    "LessOrEqual": wk.LessOrEqual,
}

_LOGICAL = {"And": wk.And, "Or": wk.Or, "Xor": wk.Xor}

_UNARY_FUNCTIONS = {
    wk.Exp: "exp",
    wk.Sqrt: "sqrt",
    wk.Ln: "log",
    wk.Sine: "sin",
    wk.Cosine: "cos",
    wk.Tangent: "tan",
    wk.Arcsine: "asin",
    wk.Arccosine: "acos",
    wk.Arctangent: "atan",
    wk.HyperbolicSine: "sinh",
    wk.HyperbolicCosine: "cosh",
    wk.HyperbolicTangent: "tanh",
    wk.HyperbolicArcsine: "asinh",
    wk.HyperbolicArccosine: "acosh",
    wk.HyperbolicArctangent: "atanh",
}


def _binary_template(op: str) -> Callable[[Expr, Expr], Expr]:
    return lambda a, b: binary(op, a, b)


def _call_template(ref: FunctionRef) -> Callable[..., Expr]:
    return lambda *args: call(ref, *args)


def add_real(builder: ScopeBuilder) -> ScopeBuilder:
    """Register the ``Real`` (64 bit float) implementations."""
    real2 = [Real, Real]

    builder.add_template(wk.Negate, [Real], negate)
    for op, function in _ARITHMETIC.items():
        builder.add_template(function, real2, _binary_template(op))
    builder.add_template(wk.Pow, real2, _call_template(MATH["pow"]))
    builder.add_template(
        wk.Reciprocal, [Real], lambda a: binary("Divide", constant(1.0), a)
    )
    for function, name in _UNARY_FUNCTIONS.items():
        builder.add_template(function, [Real], _call_template(MATH[name]))
    builder.add_template(wk.Abs, [Real], _call_template(MATH["fabs"]))
    builder.add_template(wk.Sign, [Real], _call_template(MATH["sign"]))
    builder.add_template(wk.Ceiling, [Real], _call_template(MATH["ceil"]))
    builder.add_template(wk.Floor, [Real], _call_template(MATH["floor"]))
    for op, function in _COMPARISONS.items():
        builder.add_template(function, real2, _binary_template(op))

    builder.add_constant(wk.Zero, constant(0.0))
    builder.add_constant(wk.One, constant(1.0))
    builder.add_constant(wk.NegativeOne, constant(-1.0))
    builder.add_constant(wk.Pi, member(None, MEMBERS["pi"]))
    builder.add_constant(wk.Pi, constant(math.pi))
    builder.add_constant(wk.E, member(None, MEMBERS["e"]))
    builder.add_constant(wk.E, constant(math.e))
    builder.add_constant(wk.Tau, member(None, MEMBERS["tau"]))
    builder.add_constant(wk.Tau, constant(math.tau))
    builder.add_constant(wk.GoldenRatio, constant((1 + math.sqrt(5)) / 2))
    builder.add_constant(wk.PositiveInfinity, constant(math.inf))
    builder.add_constant(wk.NegativeInfinity, constant(-math.inf))
    builder.add_constant(wk.Indeterminate, constant(math.nan))
    return builder


def add_complex(builder: ScopeBuilder) -> ScopeBuilder:
    """Register the ``Complex`` implementations.

    Besides the operators on two complex operands there are method style
    calls mixing one complex and one real operand. They need no widening so
    overload resolution picks them for mixed arguments.
    """
    complex2 = [Complex, Complex]

    builder.add_template(wk.Negate, [Complex], negate)
    for op, function in _ARITHMETIC.items():
        builder.add_template(function, complex2, _binary_template(op))
    for function, name in [
        (wk.Add, "add"),
        (wk.Subtract, "sub"),
        (wk.Multiply, "mul"),
        (wk.Divide, "div"),
    ]:
        mixed = CMATH[name + "_real"]
        reflected = CMATH["r" + name + "_real"]
        builder.add_template(function, [Complex, Real], _call_template(mixed))
        builder.add_template(function, [Real, Complex], _call_template(reflected))
    builder.add_template(wk.Pow, complex2, _call_template(CMATH["pow"]))
    builder.add_template(wk.Pow, [Complex, Real], _call_template(CMATH["pow_real"]))
    builder.add_template(wk.Reciprocal, [Complex], _call_template(CMATH["reciprocal"]))
    for function, name in _UNARY_FUNCTIONS.items():
        builder.add_template(function, [Complex], _call_template(CMATH[name]))
    builder.add_template(wk.Abs, [Complex], _call_template(CMATH["abs"]))
    builder.add_template(wk.Re, [Complex], lambda a: member(a, MEMBERS["real"]))
    builder.add_template(wk.Im, [Complex], lambda a: member(a, MEMBERS["imag"]))
    for op in ("Equal", "NotEqual"):
        builder.add_template(_COMPARISONS[op], complex2, _binary_template(op))

    builder.add_constant(wk.Zero, constant(0j))
    builder.add_constant(wk.One, constant(1 + 0j))
    builder.add_constant(wk.NegativeOne, constant(-1 + 0j))
    builder.add_constant(wk.ImaginaryUnit, member(None, MEMBERS["i"]))
    builder.add_constant(wk.ImaginaryUnit, constant(1j))
    builder.add_constant(wk.Indeterminate, constant(complex(math.nan, math.nan)))
    return builder


def add_boolean(builder: ScopeBuilder) -> ScopeBuilder:
    """Register the ``Boolean`` implementations."""
    boolean2 = [Boolean, Boolean]

    builder.add_template(wk.Not, [Boolean], logical_not)
    for op, function in _LOGICAL.items():
        builder.add_template(function, boolean2, _binary_template(op))
    for op in ("Equal", "NotEqual"):
        builder.add_template(_COMPARISONS[op], boolean2, _binary_template(op))
    return builder


_ALIASES = {
    "pi": wk.Pi,
    "tau": wk.Tau,
    "phi": wk.GoldenRatio,
    "inf": wk.PositiveInfinity,
    "infinity": wk.PositiveInfinity,
    "nan": wk.Indeterminate,
    "log": wk.Ln,
    "arcsin": wk.Arcsine,
    "arccos": wk.Arccosine,
    "arctan": wk.Arctangent,
    "arsinh": wk.HyperbolicArcsine,
    "arcosh": wk.HyperbolicArccosine,
    "artanh": wk.HyperbolicArctangent,
    "sign": wk.Sign,
    "ceiling": wk.Ceiling,
    "negate": wk.Negate,
    "reciprocal": wk.Reciprocal,
}

# Numeric display names are not names a caller would look up.
_UNNAMED = {wk.Zero, wk.One, wk.NegativeOne, wk.NegativeInfinity}


def add_names(builder: ScopeBuilder) -> ScopeBuilder:
    """Register the display names of the well-known tokens and aliases."""
    builder.add_known(*wk.FUNCTIONS)
    builder.add_known(*[c for c in wk.CONSTANTS if c not in _UNNAMED])
    for name, known in _ALIASES.items():
        builder.add_name(name, known)
    return builder


def build_default_scope(options: ScopeOptions | None = None) -> Scope:
    """Build a new scope with the default registrations."""
    builder = ScopeBuilder(options)
    add_real(builder)
    add_complex(builder)
    add_boolean(builder)
    add_names(builder)
    return builder.freeze()


_DEFAULT_SCOPE = build_default_scope()


def default_scope() -> Scope:
    """The process-wide default scope."""
    return _DEFAULT_SCOPE
