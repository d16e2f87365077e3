"""Canonicalising simplification of expressions.

The :class:`Simplifier` asks the :class:`Scope` to recognize each node as a
well-known function or constant and then rewrites it independently of the
numeric representation. Nodes that are not recognized are rebuilt from their
simplified children.

>>> from symscope.core.expr import variable
>>> from symscope.engine.simplify import simplify
>>> x, y = variable('x'), variable('y')
>>> simplify(2*x + 3*x)
(5*x)
>>> simplify(x * 2 * y * 3)
((6*x)*y)
>>> simplify((x + 1)**2)
(((2*x) + (x^2)) + 1)

Division by an expression that might be zero keeps the domain as a guard:

>>> simplify(x / x)
(1 if (x != 0) else NaN)
"""
from __future__ import annotations

import cmath
import logging
import math
from typing import Any, Callable, Optional

from symscope.core.exceptions import UnsupportedNodeKindError
from symscope.core.expr import (
    BINARY,
    CALL,
    CONDITIONAL,
    CONSTANT,
    MEMBER,
    PARAMETER,
    UNARY,
    Complex,
    Expr,
    Real,
    ValueType,
    conditional,
    constant,
    convert,
    member,
    unify,
)
from symscope.core.known import KnownFunction
from symscope.core.match import match
from symscope.engine import wellknown as wk
from symscope.engine.defaults import default_scope
from symscope.engine.functions import eval_value
from symscope.engine.scope import Scope

__all__ = [
    "MAX_EXPANDED_POWER",
    "Simplifier",
    "simplify",
]


_log = logging.getLogger(__name__)

MAX_EXPANDED_POWER = 10
"""Largest integer power of a sum that is expanded by repeated squaring."""


def _is_literal(expr: Optional[Expr]) -> bool:
    return expr is not None and expr.constant_value() is not None


def _is_numeric_literal(expr: Expr, number: float) -> bool:
    value = expr.constant_value()
    return value is not None and not isinstance(value, bool) and value == number


def _is_nan(expr: Expr) -> bool:
    value = expr.constant_value()
    if isinstance(value, float):
        return math.isnan(value)
    elif isinstance(value, complex):
        return cmath.isnan(value)
    return False


def _widest(*exprs: Expr) -> ValueType:
    return Complex if any(e.type is Complex for e in exprs) else Real


class Simplifier:
    """Simplify expressions using the bindings of a :class:`Scope`.

    A simplifier memoises the nodes it has visited during one call to
    :meth:`simplify`, so one instance should not be shared between threads.
    """

    scope: Scope

    def __init__(self, scope: Optional[Scope] = None):
        """Create a simplifier for ``scope`` (the default scope if omitted)."""
        self.scope = scope if scope is not None else default_scope()
        self._cache: dict[Expr, Expr] = {}
        self._rules: dict[KnownFunction, Callable[..., Expr]] = {
            wk.Negate: self.simplify_negate,
            wk.Not: self.simplify_not,
            wk.Add: self.simplify_add,
            wk.Subtract: self.simplify_subtract,
            wk.Multiply: self.simplify_multiply,
            wk.Divide: self.simplify_divide,
            wk.Pow: self.simplify_power,
            wk.And: self.simplify_and,
            wk.Or: self.simplify_or,
            wk.Xor: self.simplify_xor,
            wk.Ln: self._simplify_ln,
            wk.Exp: self._simplify_exp,
            wk.Reciprocal: self._simplify_reciprocal,
        }
        for comparison in wk.COMPARISONS:
            self._rules[comparison] = self._comparison_rule(comparison)

    def simplify(self, expr: Expr) -> Expr:
        """Simplify ``expr`` keeping its type."""
        self._cache = {}
        result = self.visit(expr)
        if result.type is not expr.type and result.type.widens_to(expr.type):
            result = self.visit(convert(result, expr.type))
        return result

    # ------------------------------------------------------------------- #
    #     Dispatch                                                        #
    # ------------------------------------------------------------------- #

    def visit(self, node: Expr) -> Expr:
        """Simplify one node after simplifying its operands."""
        result = self._cache.get(node)
        if result is None:
            result = self._cache[node] = self._visit(node)
        return result

    def _visit(self, node: Expr) -> Expr:
        scope = self.scope

        known_constant = scope.recognize_constant(node)
        if known_constant is not None:
            return scope.bind_constant(known_constant, node.type)

        recognized = scope.recognize(node)
        if recognized is not None:
            function, args = recognized
            args = tuple(self.visit(arg) for arg in args)
            rule = self._rules.get(function)
            if rule is not None:
                return rule(*args)
            return scope.bind_function(function, args)

        kind = node.kind
        if kind == CONSTANT or kind == PARAMETER:
            return node
        elif kind == MEMBER:
            obj = node.object
            if obj is None:
                return node
            rebuilt = member(self._widened(obj, node.member.owner), node.member)
            return self._fold(rebuilt) if _is_literal(rebuilt.object) else rebuilt
        elif kind == CONDITIONAL:
            return self.simplify_conditional(
                self.visit(node.test),
                self.visit(node.consequent),
                self.visit(node.alternative),
            )
        elif kind == UNARY and node.op == "Convert":
            operand = self.visit(node.operand)
            if operand.type is node.target:
                return operand
            rebuilt = convert(operand, node.target)
            return self._fold(rebuilt) if _is_literal(operand) else rebuilt
        elif kind in (UNARY, BINARY, CALL):
            return self._rebuild(node)
        raise UnsupportedNodeKindError(f"Cannot simplify a {kind} node", node)

    def _widened(self, expr: Expr, typ: Optional[ValueType]) -> Expr:
        simplified = self.visit(expr)
        if typ is not None and simplified.type is not typ:
            simplified = convert(simplified, typ)
        return simplified

    def _rebuild(self, node: Expr) -> Expr:
        """Rebuild an unrecognized operation from its simplified operands."""
        children = [self._widened(arg, arg.type).rep for arg in node.args]
        return Expr(node.head(*children))

    def _fold(self, expr: Expr) -> Expr:
        """Replace a constant expression by its value if it can be computed."""
        try:
            value = eval_value(expr.rep)
        except (ArithmeticError, ValueError) as exc:
            _log.debug("not folding %s: %s", expr, exc)
            return expr
        if isinstance(value, complex) and expr.type is not Complex:
            _log.debug("not folding %s: the value %r is complex", expr, value)
            return expr
        return self.visit(constant(value, expr.type))

    def _bind(self, function: KnownFunction, *args: Expr) -> Expr:
        return self.scope.bind_function(function, args)

    def _match(self, expr: Optional[Expr], function: KnownFunction) -> Any:
        """The operands of ``expr`` if it is a ``function`` node, else ``None``."""
        recognized = self.scope.recognize(expr)
        if recognized is not None and recognized[0] is function:
            return recognized[1]
        return None

    def _match_constraint(self, expr: Expr) -> Optional[tuple[Expr, Expr]]:
        if expr.kind == CONDITIONAL and _is_nan(expr.alternative):
            return expr.test, expr.consequent
        return None

    def _hoist(self, function: KnownFunction, *args: Expr) -> Optional[Expr]:
        """Move a domain guard on any operand out over the whole operation."""
        for index, arg in enumerate(args):
            constraint = self._match_constraint(arg)
            if constraint is not None:
                test, value = constraint
                inner = args[:index] + (value,) + args[index + 1 :]
                guarded = self.scope.constraint(test, self._bind(function, *inner))
                return self.visit(guarded)
        return None

    # ------------------------------------------------------------------- #
    #     Ordering and like terms                                         #
    # ------------------------------------------------------------------- #

    @staticmethod
    def _should_swap(a: Expr, b: Expr, constants_first: bool = False) -> bool:
        """Whether ``a`` and ``b`` are out of the canonical order."""
        constant_a, constant_b = _is_literal(a), _is_literal(b)
        if constant_a == constant_b:
            return False
        return constant_b if constants_first else constant_a

    def _coefficient_and_factor(self, expr: Expr) -> tuple[Expr, Optional[Expr]]:
        product = self._match(expr, wk.Multiply)
        if product is not None:
            left, right = product
            if _is_literal(left):
                return right, left
            elif _is_literal(right):
                return left, right
        return expr, None

    def _extract_by_factor(
        self,
        factor: Expr,
        coefficient: Optional[Expr],
        remainder: Optional[Expr],
        negate: bool,
    ) -> tuple[bool, Optional[Expr], Optional[Expr]]:
        """Take the terms that are multiples of ``factor`` out of ``remainder``."""
        one = self.scope.one()

        terms = self._match(remainder, wk.Add)
        if terms is not None:
            left, right = terms
            changed_l, coefficient, left = self._extract_by_factor(
                factor, coefficient, left, negate
            )
            changed_r, coefficient, right = self._extract_by_factor(
                factor, coefficient, right, negate
            )
            if changed_l or changed_r:
                if left is None:
                    remainder = right
                elif right is None:
                    remainder = left
                else:
                    remainder = self._bind(wk.Add, left, right)
            return changed_l or changed_r, coefficient, remainder

        terms = self._match(remainder, wk.Subtract)
        if terms is not None:
            left, right = terms
            changed_l, coefficient, left = self._extract_by_factor(
                factor, coefficient, left, negate
            )
            changed_r, coefficient, right = self._extract_by_factor(
                factor, coefficient, right, not negate
            )
            if changed_l or changed_r:
                if left is None:
                    remainder = None if right is None else self._bind(wk.Negate, right)
                elif right is None:
                    remainder = left
                else:
                    remainder = self._bind(wk.Subtract, left, right)
            return changed_l or changed_r, coefficient, remainder

        if remainder is not None:
            other_factor, other_coefficient = self._coefficient_and_factor(remainder)
            if match(factor, other_factor).success:
                operation = wk.Subtract if negate else wk.Add
                coefficient = self._bind(
                    operation,
                    coefficient if coefficient is not None else one,
                    other_coefficient if other_coefficient is not None else one,
                )
                return True, coefficient, None

        return False, coefficient, remainder

    def _combine_like_terms(
        self, left: Expr, right: Expr, negate_right: bool = False
    ) -> Optional[Expr]:
        """Combine the terms of ``left + right`` (or ``left - right``) with a
        common factor."""
        factor, coefficient = self._coefficient_and_factor(left)
        changed, coefficient, remainder = self._extract_by_factor(
            factor, coefficient, right, negate_right
        )
        if not changed or coefficient is None:
            return None
        combined = self._bind(wk.Multiply, coefficient, factor)
        if remainder is None:
            return combined
        elif negate_right:
            return self._bind(wk.Subtract, combined, remainder)
        return self._bind(wk.Add, combined, remainder)

    def _base_and_power(self, expr: Expr) -> tuple[Expr, Optional[Expr]]:
        power = self._match(expr, wk.Pow)
        if power is not None:
            return power[0], power[1]
        return expr, None

    def _extract_by_base(
        self, base: Expr, exponent: Optional[Expr], remainder: Optional[Expr]
    ) -> tuple[bool, Optional[Expr], Optional[Expr]]:
        """Take the powers of ``base`` out of the product ``remainder``."""
        factors = self._match(remainder, wk.Multiply)
        if factors is not None:
            left, right = factors
            changed_l, exponent, left = self._extract_by_base(base, exponent, left)
            changed_r, exponent, right = self._extract_by_base(base, exponent, right)
            if changed_l or changed_r:
                if left is None:
                    remainder = right
                elif right is None:
                    remainder = left
                else:
                    remainder = self._bind(wk.Multiply, left, right)
            return changed_l or changed_r, exponent, remainder

        if remainder is not None:
            other_base, other_exponent = self._base_and_power(remainder)
            if match(base, other_base).success:
                one = self.scope.one()
                exponent = self._bind(
                    wk.Add,
                    exponent if exponent is not None else one,
                    other_exponent if other_exponent is not None else one,
                )
                return True, exponent, None

        return False, exponent, remainder

    def _combine_like_factors(self, left: Expr, right: Expr) -> Optional[Expr]:
        base, exponent = self._base_and_power(left)
        changed, exponent, remainder = self._extract_by_base(base, exponent, right)
        if not changed or exponent is None:
            return None
        combined = self._bind(wk.Pow, base, exponent)
        if remainder is None:
            return combined
        return self._bind(wk.Multiply, combined, remainder)

    # ------------------------------------------------------------------- #
    #     Rules                                                           #
    # ------------------------------------------------------------------- #

    def simplify_negate(self, operand: Expr) -> Expr:
        """Simplify ``-operand``."""
        hoisted = self._hoist(wk.Negate, operand)
        if hoisted is not None:
            return hoisted

        # --a -> a
        inner = self._match(operand, wk.Negate)
        if inner is not None:
            return inner[0]

        if _is_literal(operand):
            return self._fold(self._bind(wk.Negate, operand))

        # -(a + b) -> -a - b
        terms = self._match(operand, wk.Add)
        if terms is not None:
            return self.simplify_subtract(self.simplify_negate(terms[0]), terms[1])

        # -(a - b) -> b - a
        terms = self._match(operand, wk.Subtract)
        if terms is not None:
            return self.simplify_subtract(terms[1], terms[0])

        return self._bind(wk.Negate, operand)

    def simplify_not(self, operand: Expr) -> Expr:
        """Simplify ``not operand``."""
        inner = self._match(operand, wk.Not)
        if inner is not None:
            return inner[0]
        value = operand.constant_value()
        if isinstance(value, bool):
            return constant(not value)
        return self._bind(wk.Not, operand)

    def simplify_add(self, augend: Expr, addend: Expr) -> Expr:
        """Simplify ``augend + addend``."""
        hoisted = self._hoist(wk.Add, augend, addend)
        if hoisted is not None:
            return hoisted

        # 0 + a -> a
        if _is_numeric_literal(augend, 0):
            return addend

        # a + 0 -> a
        if _is_numeric_literal(addend, 0):
            return augend

        if _is_literal(addend):
            if _is_literal(augend):
                folded = self._fold(self._bind(wk.Add, augend, addend))
                if _is_literal(folded):
                    return folded
            else:
                # (a + 1) + 1 -> a + (1 + 1)
                terms = self._match(augend, wk.Add)
                if terms is not None and _is_literal(terms[1]):
                    return self.simplify_add(
                        terms[0], self.simplify_add(terms[1], addend)
                    )

        # a + (b + c) -> (a + b) + c
        terms = self._match(addend, wk.Add)
        if terms is not None:
            return self.simplify_add(self.simplify_add(augend, terms[0]), terms[1])

        # (a + 1) + b -> (a + b) + 1
        terms = self._match(augend, wk.Add)
        if terms is not None and self._should_swap(terms[1], addend):
            return self.simplify_add(self.simplify_add(terms[0], addend), terms[1])

        # a + (b - c) -> (a + b) - c
        terms = self._match(addend, wk.Subtract)
        if terms is not None:
            return self.simplify_subtract(
                self.simplify_add(augend, terms[0]), terms[1]
            )

        # a + -b -> a - b
        inner = self._match(addend, wk.Negate)
        if inner is not None:
            return self.simplify_subtract(augend, inner[0])

        # -a + b -> b - a
        inner = self._match(augend, wk.Negate)
        if inner is not None:
            return self.simplify_subtract(addend, inner[0])

        combined = self._combine_like_terms(addend, augend)
        if combined is None:
            combined = self._combine_like_terms(augend, addend)
        if combined is not None:
            return self.visit(combined)

        if self._should_swap(augend, addend):
            augend, addend = addend, augend
        return self._bind(wk.Add, augend, addend)

    def simplify_subtract(self, minuend: Expr, subtrahend: Expr) -> Expr:
        """Simplify ``minuend - subtrahend``."""
        hoisted = self._hoist(wk.Subtract, minuend, subtrahend)
        if hoisted is not None:
            return hoisted

        # 0 - a -> -a
        if _is_numeric_literal(minuend, 0):
            return self.simplify_negate(subtrahend)

        # a - 0 -> a
        if _is_numeric_literal(subtrahend, 0):
            return minuend

        if _is_literal(minuend) and _is_literal(subtrahend):
            folded = self._fold(self._bind(wk.Subtract, minuend, subtrahend))
            if _is_literal(folded):
                return folded

        # a - (b + c) -> (a - b) - c
        terms = self._match(subtrahend, wk.Add)
        if terms is not None:
            return self.simplify_subtract(
                self.simplify_subtract(minuend, terms[0]), terms[1]
            )

        # a - (b - c) -> (a - b) + c
        terms = self._match(subtrahend, wk.Subtract)
        if terms is not None:
            return self.simplify_add(
                self.simplify_subtract(minuend, terms[0]), terms[1]
            )

        # a - -b -> a + b
        inner = self._match(subtrahend, wk.Negate)
        if inner is not None:
            return self.simplify_add(minuend, inner[0])

        combined = self._combine_like_terms(minuend, subtrahend, negate_right=True)
        if combined is not None:
            return self.visit(combined)
        combined = self._combine_like_terms(subtrahend, minuend, negate_right=True)
        if combined is not None:
            return self.visit(self._bind(wk.Negate, combined))

        return self._bind(wk.Subtract, minuend, subtrahend)

    def simplify_multiply(self, multiplicand: Expr, multiplier: Expr) -> Expr:
        """Simplify ``multiplicand * multiplier``."""
        hoisted = self._hoist(wk.Multiply, multiplicand, multiplier)
        if hoisted is not None:
            return hoisted

        # 0 * a -> 0 and 1 * a -> a
        if _is_numeric_literal(multiplicand, 0):
            return multiplicand
        elif _is_numeric_literal(multiplicand, 1):
            return multiplier

        # a * 0 -> 0 and a * 1 -> a
        if _is_numeric_literal(multiplier, 0):
            return multiplier
        elif _is_numeric_literal(multiplier, 1):
            return multiplicand

        if _is_literal(multiplicand) and _is_literal(multiplier):
            folded = self._fold(self._bind(wk.Multiply, multiplicand, multiplier))
            if _is_literal(folded):
                return folded

        # -1 * a -> -a
        if _is_numeric_literal(multiplicand, -1):
            return self.simplify_negate(multiplier)
        elif _is_numeric_literal(multiplier, -1):
            return self.simplify_negate(multiplicand)

        # a * (b * c) -> (a * b) * c
        factors = self._match(multiplier, wk.Multiply)
        if factors is not None:
            return self.simplify_multiply(
                self.simplify_multiply(multiplicand, factors[0]), factors[1]
            )

        # (a * b) * 2 -> (a * 2) * b
        factors = self._match(multiplicand, wk.Multiply)
        if factors is not None and self._should_swap(factors[1], multiplier, True):
            return self.simplify_multiply(
                self.simplify_multiply(factors[0], multiplier), factors[1]
            )

        # (a / b) * c -> (a * c) / b
        quotient = self._match(multiplicand, wk.Divide)
        if quotient is not None:
            return self.simplify_divide(
                self.simplify_multiply(quotient[0], multiplier), quotient[1]
            )

        # a * (b / c) -> (a * b) / c
        quotient = self._match(multiplier, wk.Divide)
        if quotient is not None:
            return self.simplify_divide(
                self.simplify_multiply(multiplicand, quotient[0]), quotient[1]
            )

        # -a * b -> -(a * b)
        inner = self._match(multiplicand, wk.Negate)
        if inner is not None:
            return self.simplify_negate(self.simplify_multiply(inner[0], multiplier))

        # a * -b -> -(a * b)
        inner = self._match(multiplier, wk.Negate)
        if inner is not None:
            return self.simplify_negate(
                self.simplify_multiply(multiplicand, inner[0])
            )

        for function, simplify_terms in [
            (wk.Add, self.simplify_add),
            (wk.Subtract, self.simplify_subtract),
        ]:
            # a * (b + c) -> a * b + a * c
            terms = self._match(multiplier, function)
            if terms is not None:
                return simplify_terms(
                    self.simplify_multiply(multiplicand, terms[0]),
                    self.simplify_multiply(multiplicand, terms[1]),
                )
            # (a + b) * c -> a * c + b * c
            terms = self._match(multiplicand, function)
            if terms is not None:
                return simplify_terms(
                    self.simplify_multiply(terms[0], multiplier),
                    self.simplify_multiply(terms[1], multiplier),
                )

        combined = self._combine_like_factors(multiplicand, multiplier)
        if combined is None:
            combined = self._combine_like_factors(multiplier, multiplicand)
        if combined is not None:
            return self.visit(combined)

        # a * 2 -> 2 * a
        if self._should_swap(multiplicand, multiplier, True):
            multiplicand, multiplier = multiplier, multiplicand
        return self._bind(wk.Multiply, multiplicand, multiplier)

    def simplify_divide(self, dividend: Expr, divisor: Expr) -> Expr:
        """Simplify ``dividend / divisor``."""
        hoisted = self._hoist(wk.Divide, dividend, divisor)
        if hoisted is not None:
            return hoisted

        # a / 0 is kept as it is
        if _is_numeric_literal(divisor, 0):
            return self._bind(wk.Divide, dividend, divisor)

        # a / 1 -> a
        if _is_numeric_literal(divisor, 1):
            return dividend

        # 0 / a -> 0
        if _is_numeric_literal(dividend, 0):
            return dividend

        # -a / b -> -(a / b)
        inner = self._match(dividend, wk.Negate)
        if inner is not None:
            return self.simplify_negate(self.simplify_divide(inner[0], divisor))

        # a / -b -> -(a / b)
        inner = self._match(divisor, wk.Negate)
        if inner is not None:
            return self.simplify_negate(self.simplify_divide(dividend, inner[0]))

        if _is_literal(dividend) and _is_literal(divisor):
            folded = self._fold(self._bind(wk.Divide, dividend, divisor))
            if _is_literal(folded):
                return folded

        # (a / b) / c -> a / (b * c)
        quotient = self._match(dividend, wk.Divide)
        if quotient is not None:
            return self.simplify_divide(
                quotient[0], self.simplify_multiply(quotient[1], divisor)
            )

        # a / (b / c) -> (a * c) / b where c != 0
        quotient = self._match(divisor, wk.Divide)
        if quotient is not None:
            numerator, denominator = quotient
            test = self._bind(
                wk.NotEqual, denominator, self.scope.zero(denominator.type)
            )
            value = self._bind(
                wk.Divide, self._bind(wk.Multiply, dividend, denominator), numerator
            )
            return self.visit(self.scope.constraint(test, value))

        # a / sqrt(2) -> (a * sqrt(2)) / 2
        radicand = self._match(divisor, wk.Sqrt)
        if radicand is not None:
            value = radicand[0].constant_value()
            if isinstance(value, float) and value >= 0:
                return self.simplify_divide(
                    self.simplify_multiply(dividend, divisor), radicand[0]
                )

        # a^m / a^n -> a^(m - n) where a^n != 0
        base_l, exponent_l = self._base_and_power(dividend)
        base_r, exponent_r = self._base_and_power(divisor)
        if match(base_l, base_r).success:
            one = self.scope.one()
            exponent = self._bind(
                wk.Subtract,
                exponent_l if exponent_l is not None else one,
                exponent_r if exponent_r is not None else one,
            )
            test = self._bind(wk.NotEqual, divisor, self.scope.zero(divisor.type))
            value = self._bind(wk.Pow, base_l, exponent)
            return self.visit(self.scope.constraint(test, value))

        return self._bind(wk.Divide, dividend, divisor)

    def simplify_power(self, base: Expr, exponent: Expr) -> Expr:
        """Simplify ``base ^ exponent``."""
        hoisted = self._hoist(wk.Pow, base, exponent)
        if hoisted is not None:
            return hoisted

        # 1^a -> 1
        if _is_numeric_literal(base, 1):
            return base

        # a^1 -> a
        if _is_numeric_literal(exponent, 1):
            return base

        # a^0 -> 1
        if _is_numeric_literal(exponent, 0):
            return self.scope.one(_widest(base, exponent))

        power = exponent.constant_value()

        # 0^2 -> 0
        if _is_numeric_literal(base, 0) and isinstance(power, float) and power > 0:
            return base

        if _is_literal(base) and power is not None:
            folded = self._fold(self._bind(wk.Pow, base, exponent))
            if _is_literal(folded):
                return folded
        elif (
            isinstance(power, float)
            and power.is_integer()
            and 1 < power <= MAX_EXPANDED_POWER
            and (
                self._match(base, wk.Add) is not None
                or self._match(base, wk.Subtract) is not None
            )
        ):
            # (a + b)^3 -> (a + b)^2 * (a + b)
            right = int(power) // 2
            left = int(power) - right
            product = self._bind(
                wk.Multiply,
                self._bind(wk.Pow, base, constant(float(left))),
                self._bind(wk.Pow, base, constant(float(right))),
            )
            return self.visit(product)

        # (a^b)^c -> a^(b*c)
        inner = self._match(base, wk.Pow)
        if inner is not None:
            return self.simplify_power(
                inner[0], self.simplify_multiply(inner[1], exponent)
            )

        return self._bind(wk.Pow, base, exponent)

    def simplify_and(self, left: Expr, right: Expr) -> Expr:
        """Simplify ``left and right``."""
        lvalue, rvalue = left.constant_value(), right.constant_value()
        if lvalue is False:
            return left
        elif lvalue is True:
            return right
        elif rvalue is False:
            return right
        elif rvalue is True:
            return left
        elif match(left, right).success:
            return left
        return self._bind(wk.And, left, right)

    def simplify_or(self, left: Expr, right: Expr) -> Expr:
        """Simplify ``left or right``."""
        lvalue, rvalue = left.constant_value(), right.constant_value()
        if lvalue is False:
            return right
        elif lvalue is True:
            return left
        elif rvalue is False:
            return left
        elif rvalue is True:
            return right
        elif match(left, right).success:
            return left
        return self._bind(wk.Or, left, right)

    def simplify_xor(self, left: Expr, right: Expr) -> Expr:
        """Simplify ``left xor right``."""
        if _is_literal(left) and _is_literal(right):
            return self._fold(self._bind(wk.Xor, left, right))
        return self._bind(wk.Xor, left, right)

    def _comparison_rule(self, function: KnownFunction) -> Callable[..., Expr]:
        def simplify_comparison(left: Expr, right: Expr) -> Expr:
            compared = self._bind(function, left, right)
            if _is_literal(left) and _is_literal(right):
                return self._fold(compared)
            return compared

        return simplify_comparison

    def _simplify_ln(self, arg: Expr) -> Expr:
        # ln(e) -> 1, also for a widened e
        inner = arg
        while inner.kind == UNARY and inner.op == "Convert":
            inner = inner.operand
        if self.scope.is_constant(inner, wk.E):
            return self.scope.one(arg.type)
        return self._bind(wk.Ln, arg)

    def _simplify_exp(self, arg: Expr) -> Expr:
        # exp(x) -> e^x
        return self.simplify_power(self.scope.bind_constant(wk.E, arg.type), arg)

    def _simplify_reciprocal(self, arg: Expr) -> Expr:
        # reciprocal(x) -> 1/x
        return self.simplify_divide(self.scope.one(), arg)

    def simplify_conditional(
        self, test: Expr, consequent: Expr, alternative: Expr
    ) -> Expr:
        """Simplify ``consequent if test else alternative``."""
        value = test.constant_value()
        if value is True:
            return consequent
        elif value is False:
            return alternative

        # Nested guards merge their tests.
        if _is_nan(alternative):
            inner = self._match_constraint(consequent)
            if inner is not None:
                return self.simplify_conditional(
                    self.simplify_and(test, inner[0]), inner[1], alternative
                )

        return conditional(test, *unify(consequent, alternative))


def simplify(expr: Expr, scope: Optional[Scope] = None) -> Expr:
    """Simplify ``expr`` with the given (or the default) scope."""
    return Simplifier(scope).simplify(expr)
