"""Symbolic differentiation.

The :class:`Differentiator` recognizes well-known functions through the
:class:`Scope` and applies the rules of calculus to them. Anything it cannot
differentiate exactly raises :class:`UnimplementedDerivativeError`.

>>> from symscope.core.expr import variable
>>> from symscope.engine.derivative import derivative
>>> from symscope.engine.defaults import default_scope
>>> x = variable('x')
>>> sin = lambda e: default_scope().bind('sin', e)
>>> derivative(sin(x), x)
math.cos(x)
>>> derivative(x**2, x)
(2*x)
>>> derivative(x**2, x, simplify=False)
(1*(2*(x^(2 - 1))))
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from symscope.core.exceptions import UnimplementedDerivativeError
from symscope.core.expr import (
    CONDITIONAL,
    CONSTANT,
    MEMBER,
    PARAMETER,
    UNARY,
    Expr,
    conditional,
    constant,
    unify,
    widen,
)
from symscope.core.known import KnownFunction
from symscope.engine import wellknown as wk
from symscope.engine.defaults import default_scope
from symscope.engine.scope import Scope
from symscope.engine.simplify import Simplifier

__all__ = [
    "DERIVATIVE_RULES",
    "Differentiator",
    "derivative",
]


_log = logging.getLogger(__name__)

DerivativeRule = Callable[[Scope, Expr, Expr, Expr], Expr]


def _square(scope: Scope, u: Expr) -> Expr:
    return scope.bind(wk.Pow, u, constant(2.0))


def _one_minus_square(scope: Scope, u: Expr) -> Expr:
    return scope.bind(wk.Subtract, scope.one(), _square(scope, u))


def _square_plus_one(scope: Scope, u: Expr) -> Expr:
    return scope.bind(wk.Add, _square(scope, u), scope.one())


# Each rule gets (scope, f(u), u, du) and returns the derivative of f(u).
DERIVATIVE_RULES: dict[KnownFunction, DerivativeRule] = {
    wk.Abs: lambda s, f, u, du: s.bind(wk.Multiply, du, s.bind(wk.Divide, f, u)),
    wk.Sine: lambda s, f, u, du: s.bind(wk.Multiply, du, s.bind(wk.Cosine, u)),
    wk.Cosine: lambda s, f, u, du: s.bind(
        wk.Multiply, du, s.bind(wk.Negate, s.bind(wk.Sine, u))
    ),
    wk.Tangent: lambda s, f, u, du: s.bind(
        wk.Divide, du, _square(s, s.bind(wk.Cosine, u))
    ),
    wk.Arcsine: lambda s, f, u, du: s.bind(
        wk.Divide, du, s.bind(wk.Sqrt, _one_minus_square(s, u))
    ),
    wk.Arccosine: lambda s, f, u, du: s.bind(
        wk.Divide, du, s.bind(wk.Negate, s.bind(wk.Sqrt, _one_minus_square(s, u)))
    ),
    wk.Arctangent: lambda s, f, u, du: s.bind(wk.Divide, du, _square_plus_one(s, u)),
    wk.HyperbolicSine: lambda s, f, u, du: s.bind(
        wk.Multiply, du, s.bind(wk.HyperbolicCosine, u)
    ),
    wk.HyperbolicCosine: lambda s, f, u, du: s.bind(
        wk.Multiply, du, s.bind(wk.HyperbolicSine, u)
    ),
    wk.HyperbolicTangent: lambda s, f, u, du: s.bind(
        wk.Divide, du, _square(s, s.bind(wk.HyperbolicCosine, u))
    ),
    wk.HyperbolicArcsine: lambda s, f, u, du: s.bind(
        wk.Divide, du, s.bind(wk.Sqrt, _square_plus_one(s, u))
    ),
    wk.HyperbolicArccosine: lambda s, f, u, du: s.bind(
        wk.Divide,
        du,
        s.bind(wk.Sqrt, s.bind(wk.Subtract, _square(s, u), s.one())),
    ),
    wk.HyperbolicArctangent: lambda s, f, u, du: s.bind(
        wk.Divide, du, _one_minus_square(s, u)
    ),
    wk.Sqrt: lambda s, f, u, du: s.bind(
        wk.Multiply,
        du,
        s.bind(wk.Multiply, constant(0.5), s.bind(wk.Divide, f, u)),
    ),
    wk.Exp: lambda s, f, u, du: s.bind(wk.Multiply, du, f),
    wk.Ln: lambda s, f, u, du: s.bind(wk.Divide, du, u),
    wk.Re: lambda s, f, u, du: s.bind(wk.Re, du),
    wk.Im: lambda s, f, u, du: s.bind(wk.Im, du),
}


class Differentiator:
    """Differentiate expressions with respect to one variable.

    Derivatives of repeated subexpressions are computed once per call to
    :meth:`derivative`.
    """

    scope: Scope
    variable: Expr

    def __init__(self, scope: Optional[Scope], variable: Expr):
        """Create a differentiator for ``variable`` using ``scope``."""
        if variable.kind != PARAMETER:
            raise TypeError(f"Cannot differentiate with respect to {variable}")
        self.scope = scope if scope is not None else default_scope()
        self.variable = variable
        self._cache: dict[Expr, Expr] = {}

    def derivative(self, expr: Expr) -> Expr:
        """The derivative of ``expr`` (not simplified)."""
        self._cache = {}
        return self.visit(expr)

    def visit(self, node: Expr) -> Expr:
        """Differentiate one node."""
        result = self._cache.get(node)
        if result is None:
            result = self._cache[node] = self._visit(node)
        return result

    def _visit(self, node: Expr) -> Expr:
        scope = self.scope

        known_constant = scope.recognize_constant(node)
        if known_constant is wk.Indeterminate:
            return node
        elif known_constant in (wk.PositiveInfinity, wk.NegativeInfinity):
            return scope.nan(node.type)
        elif known_constant is not None:
            return scope.zero(node.type)

        recognized = scope.recognize(node)
        if recognized is not None:
            function, args = recognized
            return self._known_function(function, node, args)

        kind = node.kind
        if kind == CONSTANT or kind == MEMBER:
            return scope.zero(node.type)
        elif kind == PARAMETER:
            if node is self.variable:
                return scope.one(node.type)
            return scope.zero(node.type)
        elif (
            kind == UNARY
            and node.op == "Convert"
            and node.operand.type.widens_to(node.target)
        ):
            return widen(self.visit(node.operand), node.target)
        elif kind == CONDITIONAL:
            consequent = self.visit(node.consequent)
            alternative = self.visit(node.alternative)
            return conditional(node.test, *unify(consequent, alternative))
        raise UnimplementedDerivativeError(
            f"Cannot differentiate the {kind} node {node}", node
        )

    def _known_function(
        self, function: KnownFunction, node: Expr, args: tuple[Expr, ...]
    ) -> Expr:
        scope = self.scope
        bind = scope.bind
        derivatives = [self.visit(arg) for arg in args]

        if function is wk.Negate:
            return bind(wk.Negate, derivatives[0])
        elif function is wk.Add or function is wk.Subtract:
            return bind(function, *derivatives)
        elif function is wk.Multiply:
            (a, b), (da, db) = args, derivatives
            return bind(wk.Add, bind(wk.Multiply, da, b), bind(wk.Multiply, a, db))
        elif function is wk.Divide:
            (a, b), (da, db) = args, derivatives
            numerator = bind(
                wk.Subtract, bind(wk.Multiply, da, b), bind(wk.Multiply, a, db)
            )
            return bind(wk.Divide, numerator, _square(scope, b))
        elif function is wk.Pow:
            (a, b), (da, _) = args, derivatives
            constant_exponent = scope.recognize_constant(b) is not None
            if constant_exponent or b.constant_value() is not None:
                power = bind(wk.Pow, a, bind(wk.Subtract, b, scope.one()))
                return bind(wk.Multiply, da, bind(wk.Multiply, b, power))
            # a^b = e^(ln(a)*b)
            exponent = bind(wk.Multiply, bind(wk.Ln, a), b)
            return bind(wk.Multiply, node, self.visit(exponent))

        rule = DERIVATIVE_RULES.get(function)
        if rule is None or len(args) != 1:
            raise UnimplementedDerivativeError(
                f"No derivative is known for {function}", node
            )
        _log.debug("chain rule for %s", function)
        return rule(scope, node, args[0], derivatives[0])


def derivative(
    expr: Expr,
    variable: Expr,
    *,
    scope: Optional[Scope] = None,
    simplify: bool = True,
) -> Expr:
    """Differentiate ``expr`` with respect to ``variable``.

    The result is simplified unless ``simplify=False``.
    """
    result = Differentiator(scope, variable).derivative(expr)
    if simplify:
        result = Simplifier(scope).simplify(result)
    return result
