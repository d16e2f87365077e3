"""Conversions to and from SymPy expressions.

These are defined in their own module so that SymPy will not imported if it is
not needed. Both directions go through the :class:`Scope`: an expression is
recognized as well-known functions and constants before it is converted to
SymPy, and SymPy functions are bound to concrete implementations on the way
back.

>>> import sympy
>>> from symscope.core.expr import variable
>>> from symscope.engine.sympy_conversions import from_sympy, to_sympy
>>> x = variable('x')
>>> to_sympy(x**2 - 1)
x**2 - 1
>>> from_sympy(sympy.sin(sympy.Symbol('x')) / 2, [x])
(math.sin(x)/2)
"""
from __future__ import annotations

import math
from typing import Any, Callable, Optional, Sequence

import sympy

from symscope.core.exceptions import UnknownBindingError
from symscope.core.expr import (
    CONDITIONAL,
    CONSTANT,
    PARAMETER,
    UNARY,
    Expr,
    conditional,
    constant,
    unify,
)
from symscope.core.known import KnownConstant, KnownFunction
from symscope.engine import wellknown as wk
from symscope.engine.defaults import default_scope
from symscope.engine.scope import Scope

__all__ = [
    "to_sympy",
    "from_sympy",
]


_SYMPY_CONSTANTS: dict[KnownConstant, Any] = {
    wk.Zero: sympy.S.Zero,
    wk.One: sympy.S.One,
    wk.NegativeOne: sympy.S.NegativeOne,
    wk.ImaginaryUnit: sympy.I,
    wk.GoldenRatio: sympy.S.GoldenRatio,
    wk.E: sympy.E,
    wk.Pi: sympy.pi,
    wk.Tau: 2 * sympy.pi,
    wk.PositiveInfinity: sympy.oo,
    wk.NegativeInfinity: -sympy.oo,
    wk.Indeterminate: sympy.nan,
}

_SYMPY_FUNCTIONS: dict[KnownFunction, Callable[..., Any]] = {
    wk.Negate: lambda a: -a,
    wk.Add: sympy.Add,
    wk.Subtract: lambda a, b: a - b,
    wk.Multiply: sympy.Mul,
    wk.Divide: lambda a, b: a / b,
    wk.Reciprocal: lambda a: 1 / a,
    wk.Pow: sympy.Pow,
    wk.Exp: sympy.exp,
    wk.Sqrt: sympy.sqrt,
    wk.Ln: sympy.log,
    wk.Abs: sympy.Abs,
    wk.Sign: sympy.sign,
    wk.Ceiling: sympy.ceiling,
    wk.Floor: sympy.floor,
    wk.Re: sympy.re,
    wk.Im: sympy.im,
    wk.Sine: sympy.sin,
    wk.Cosine: sympy.cos,
    wk.Tangent: sympy.tan,
    wk.Arcsine: sympy.asin,
    wk.Arccosine: sympy.acos,
    wk.Arctangent: sympy.atan,
    wk.HyperbolicSine: sympy.sinh,
    wk.HyperbolicCosine: sympy.cosh,
    wk.HyperbolicTangent: sympy.tanh,
    wk.HyperbolicArcsine: sympy.asinh,
    wk.HyperbolicArccosine: sympy.acosh,
    wk.HyperbolicArctangent: sympy.atanh,
    wk.Not: sympy.Not,
    wk.And: sympy.And,
    wk.Or: sympy.Or,
    wk.Xor: sympy.Xor,
    wk.Equal: sympy.Eq,
    wk.NotEqual: sympy.Ne,
    wk.GreaterThan: sympy.Gt,
    wk.GreaterOrEqual: sympy.Ge,
    wk.LessThan: sympy.Lt,
    wk.LessOrEqual: sympy.Le,
}

# SymPy function classes (checked with isinstance) for from_sympy.
_FROM_SYMPY_FUNCTIONS: list[tuple[Any, KnownFunction]] = [
    (sympy.exp, wk.Exp),
    (sympy.log, wk.Ln),
    (sympy.Abs, wk.Abs),
    (sympy.sign, wk.Sign),
    (sympy.ceiling, wk.Ceiling),
    (sympy.floor, wk.Floor),
    (sympy.re, wk.Re),
    (sympy.im, wk.Im),
    (sympy.sin, wk.Sine),
    (sympy.cos, wk.Cosine),
    (sympy.tan, wk.Tangent),
    (sympy.asin, wk.Arcsine),
    (sympy.acos, wk.Arccosine),
    (sympy.atan, wk.Arctangent),
    (sympy.sinh, wk.HyperbolicSine),
    (sympy.cosh, wk.HyperbolicCosine),
    (sympy.tanh, wk.HyperbolicTangent),
    (sympy.asinh, wk.HyperbolicArcsine),
    (sympy.acosh, wk.HyperbolicArccosine),
    (sympy.atanh, wk.HyperbolicArctangent),
    (sympy.Not, wk.Not),
    (sympy.Eq, wk.Equal),
    (sympy.Ne, wk.NotEqual),
    (sympy.StrictGreaterThan, wk.GreaterThan),
    (sympy.GreaterThan, wk.GreaterOrEqual),
    (sympy.StrictLessThan, wk.LessThan),
    (sympy.LessThan, wk.LessOrEqual),
]

_FROM_SYMPY_NARY: list[tuple[Any, KnownFunction]] = [
    (sympy.And, wk.And),
    (sympy.Or, wk.Or),
    (sympy.Xor, wk.Xor),
]


def _number_to_sympy(value: float) -> Any:
    if value.is_integer() and abs(value) < 2**53:
        return sympy.Integer(int(value))
    return sympy.Float(value)


def _literal_to_sympy(value: Any) -> Any:
    if isinstance(value, bool):
        return sympy.true if value else sympy.false
    elif isinstance(value, complex):
        real = _number_to_sympy(value.real)
        imag = _number_to_sympy(value.imag)
        return real + imag * sympy.I
    elif math.isnan(value):
        return sympy.nan
    elif math.isinf(value):
        return sympy.oo if value > 0 else -sympy.oo
    return _number_to_sympy(value)


def to_sympy(expr: Expr, scope: Optional[Scope] = None) -> Any:
    """Convert ``expr`` to a SymPy expression."""
    if scope is None:
        scope = default_scope()
    return _to_sympy_cache(expr, scope, {})


def _to_sympy_cache(expr: Expr, scope: Scope, cache: dict[Expr, Any]) -> Any:
    ret = cache.get(expr)
    if ret is not None:
        return ret

    known_constant = scope.recognize_constant(expr)
    recognized = scope.recognize(expr) if known_constant is None else None

    if known_constant is not None and known_constant in _SYMPY_CONSTANTS:
        ret = _SYMPY_CONSTANTS[known_constant]
    elif recognized is not None and recognized[0] in _SYMPY_FUNCTIONS:
        function, args = recognized
        sympy_args = [_to_sympy_cache(arg, scope, cache) for arg in args]
        ret = _SYMPY_FUNCTIONS[function](*sympy_args)
    elif expr.kind == CONSTANT:
        ret = _literal_to_sympy(expr.value)
    elif expr.kind == PARAMETER:
        ret = sympy.Symbol(expr.name)
    elif expr.kind == UNARY and expr.op == "Convert":
        ret = _to_sympy_cache(expr.operand, scope, cache)
    elif expr.kind == CONDITIONAL:
        test, consequent, alternative = (
            _to_sympy_cache(arg, scope, cache) for arg in expr.args
        )
        ret = sympy.Piecewise((consequent, test), (alternative, True))
    else:
        raise NotImplementedError("Cannot convert " + str(expr))

    cache[expr] = ret
    return ret


def from_sympy(
    expr: Any, variables: Sequence[Expr] = (), scope: Optional[Scope] = None
) -> Expr:
    """Convert a SymPy expression to ``Expr``.

    SymPy symbols are matched by name with ``variables``.
    """
    if scope is None:
        scope = default_scope()
    names = {v.name: v for v in variables}
    return _FromSympy(scope, names).convert(sympy.sympify(expr))


class _FromSympy:
    """One conversion from SymPy with its cache of converted subexpressions."""

    def __init__(self, scope: Scope, names: dict[str, Expr]):
        self.scope = scope
        self.names = names
        self.cache: dict[Any, Expr] = {}

    def convert(self, expr: Any) -> Expr:
        ret = self.cache.get(expr)
        if ret is None:
            ret = self.cache[expr] = self._convert(expr)
        return ret

    def _bind(self, function: KnownFunction, *args: Expr) -> Expr:
        return self.scope.bind_function(function, args)

    def _convert(self, expr: Any) -> Expr:
        scope = self.scope

        if expr.is_Symbol:
            variable = self.names.get(expr.name)
            if variable is None:
                raise UnknownBindingError(f"No variable named {expr.name!r}", expr.name)
            return variable
        elif expr is sympy.true or expr is sympy.false:
            return constant(bool(expr))
        elif expr.is_Integer:
            return constant(float(int(expr)))
        elif expr.is_Rational:
            return self._bind(
                wk.Divide, constant(float(expr.p)), constant(float(expr.q))
            )
        elif expr.is_Float:
            return constant(float(expr))
        elif expr is sympy.nan:
            return scope.bind_constant(wk.Indeterminate)

        for known, value in _SYMPY_CONSTANTS.items():
            if expr == value and not expr.args:
                return scope.bind_constant(known)

        if expr.is_Add:
            return self._convert_add(expr)
        elif expr.is_Mul:
            return self._convert_mul(expr)
        elif expr.is_Pow:
            return self._convert_pow(expr)
        elif isinstance(expr, sympy.Piecewise):
            return self._convert_piecewise(expr)

        for cls, function in _FROM_SYMPY_FUNCTIONS:
            if isinstance(expr, cls) and len(expr.args) in (1, 2):
                return self._bind(function, *map(self.convert, expr.args))

        for cls, function in _FROM_SYMPY_NARY:
            if isinstance(expr, cls):
                args = [self.convert(arg) for arg in expr.args]
                result = args[0]
                for arg in args[1:]:
                    result = self._bind(function, result, arg)
                return result

        raise NotImplementedError("Cannot convert " + type(expr).__name__)

    def _convert_add(self, expr: Any) -> Expr:
        terms = list(expr.args)
        # Start with a positive term if there is one.
        terms.sort(key=lambda t: bool(t.could_extract_minus_sign()))
        result = self.convert(terms[0])
        for term in terms[1:]:
            if term.could_extract_minus_sign():
                result = self._bind(wk.Subtract, result, self.convert(-term))
            else:
                result = self._bind(wk.Add, result, self.convert(term))
        return result

    def _convert_mul(self, expr: Any) -> Expr:
        numerator, denominator = sympy.fraction(expr)
        if denominator != 1:
            return self._bind(
                wk.Divide, self.convert(numerator), self.convert(denominator)
            )

        coefficient, rest = expr.as_coeff_Mul()
        if coefficient == -1:
            return self._bind(wk.Negate, self.convert(rest))

        args = [self.convert(arg) for arg in expr.args]
        result = args[0]
        for arg in args[1:]:
            result = self._bind(wk.Multiply, result, arg)
        return result

    def _convert_pow(self, expr: Any) -> Expr:
        base, exponent = expr.args
        if exponent == sympy.S.Half:
            return self._bind(wk.Sqrt, self.convert(base))
        elif exponent.is_Number and exponent.is_negative:
            denominator = base if exponent == -1 else base**-exponent
            return self._bind(
                wk.Divide, self.scope.one(), self.convert(denominator)
            )
        return self._bind(wk.Pow, self.convert(base), self.convert(exponent))

    def _convert_piecewise(self, expr: Any) -> Expr:
        pieces = list(expr.args)
        last_value, last_test = pieces[-1]
        if last_test == sympy.true:
            result = self.convert(last_value)
            pieces = pieces[:-1]
        else:
            result = self.scope.nan(self.convert(last_value).type)
        for value, test in reversed(pieces):
            branch = self.convert(value)
            result = conditional(self.convert(test), *unify(branch, result))
        return result
