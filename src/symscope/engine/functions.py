"""Concrete functions and members, and the ``eval_value`` evaluator.

The references here are what ``Call`` and ``MemberOf`` nodes point at. Each
carries the Python callable that computes it, which is what ``eval_value``
uses to fold constant subexpressions.

>>> from symscope.core.expr import call, constant
>>> from symscope.engine.functions import MATH, eval_value
>>> eval_value(call(MATH['sqrt'], constant(4.0)).rep)
2.0
"""
from __future__ import annotations

import cmath
import math
import operator
from typing import Any

from symscope.core.evaluate import Evaluator
from symscope.core.exceptions import NoEvaluationRuleError
from symscope.core.expr import (
    CONDITIONAL,
    CONVERT_HEADS,
    HEADS,
    BooleanValue,
    Complex,
    ComplexValue,
    FunctionAtom,
    FunctionRef,
    MemberAtom,
    MemberRef,
    Real,
    RealValue,
)

__all__ = [
    "MATH",
    "CMATH",
    "MEMBERS",
    "eval_value",
]


def _sign(x: float) -> float:
    return float((x > 0) - (x < 0))


def _power(base: Any, exponent: Any) -> Any:
    # A negative real base with a fractional exponent raises ValueError.
    if isinstance(base, float) and isinstance(exponent, float):
        return math.pow(base, exponent)
    return base**exponent


def _real(name: str, func: Any, nargs: int = 1) -> FunctionRef:
    return FunctionRef("math." + name, [Real] * nargs, Real, func)


def _complex(name: str, func: Any, nargs: int = 1) -> FunctionRef:
    return FunctionRef("cmath." + name, [Complex] * nargs, Complex, func)


MATH: dict[str, FunctionRef] = {
    "pow": _real("pow", math.pow, 2),
    "exp": _real("exp", math.exp),
    "sqrt": _real("sqrt", math.sqrt),
    "log": _real("log", math.log),
    "fabs": _real("fabs", math.fabs),
    "sign": FunctionRef("math.sign", [Real], Real, _sign),
    "ceil": _real("ceil", lambda x: float(math.ceil(x))),
    "floor": _real("floor", lambda x: float(math.floor(x))),
    "sin": _real("sin", math.sin),
    "cos": _real("cos", math.cos),
    "tan": _real("tan", math.tan),
    "asin": _real("asin", math.asin),
    "acos": _real("acos", math.acos),
    "atan": _real("atan", math.atan),
    "sinh": _real("sinh", math.sinh),
    "cosh": _real("cosh", math.cosh),
    "tanh": _real("tanh", math.tanh),
    "asinh": _real("asinh", math.asinh),
    "acosh": _real("acosh", math.acosh),
    "atanh": _real("atanh", math.atanh),
}

CMATH: dict[str, FunctionRef] = {
    "exp": _complex("exp", cmath.exp),
    "sqrt": _complex("sqrt", cmath.sqrt),
    "log": _complex("log", cmath.log),
    "sin": _complex("sin", cmath.sin),
    "cos": _complex("cos", cmath.cos),
    "tan": _complex("tan", cmath.tan),
    "asin": _complex("asin", cmath.asin),
    "acos": _complex("acos", cmath.acos),
    "atan": _complex("atan", cmath.atan),
    "sinh": _complex("sinh", cmath.sinh),
    "cosh": _complex("cosh", cmath.cosh),
    "tanh": _complex("tanh", cmath.tanh),
    "asinh": _complex("asinh", cmath.asinh),
    "acosh": _complex("acosh", cmath.acosh),
    "atanh": _complex("atanh", cmath.atanh),
    # Methods of complex numbers mixing in real operands.
    "abs": FunctionRef("complex.abs", [Complex], Real, abs),
    "reciprocal": FunctionRef(
        "complex.reciprocal", [Complex], Complex, lambda z: 1 / z
    ),
    "pow": FunctionRef("complex.pow", [Complex, Complex], Complex, _power),
    "pow_real": FunctionRef("complex.pow", [Complex, Real], Complex, _power),
    "add_real": FunctionRef("complex.add", [Complex, Real], Complex, operator.add),
    "radd_real": FunctionRef("complex.add", [Real, Complex], Complex, operator.add),
    "sub_real": FunctionRef("complex.sub", [Complex, Real], Complex, operator.sub),
    "rsub_real": FunctionRef("complex.sub", [Real, Complex], Complex, operator.sub),
    "mul_real": FunctionRef("complex.mul", [Complex, Real], Complex, operator.mul),
    "rmul_real": FunctionRef("complex.mul", [Real, Complex], Complex, operator.mul),
    "div_real": FunctionRef(
        "complex.div", [Complex, Real], Complex, operator.truediv
    ),
    "rdiv_real": FunctionRef(
        "complex.div", [Real, Complex], Complex, operator.truediv
    ),
}

MEMBERS: dict[str, MemberRef] = {
    "pi": MemberRef("math.pi", None, Real, lambda: math.pi),
    "e": MemberRef("math.e", None, Real, lambda: math.e),
    "tau": MemberRef("math.tau", None, Real, lambda: math.tau),
    "i": MemberRef("complex.i", None, Complex, lambda: 1j),
    "real": MemberRef("real", Complex, Real, lambda z: z.real),
    "imag": MemberRef("imag", Complex, Real, lambda z: z.imag),
}


# ------------------------------------------------------------------------- #
#                                                                           #
#     eval_value: evaluation of constant expressions                        #
#                                                                           #
# ------------------------------------------------------------------------- #

_BINARY_FUNCS = {
    "Add": operator.add,
    "Subtract": operator.sub,
    "Multiply": operator.mul,
    "Divide": operator.truediv,
    "Power": _power,
    "And": operator.and_,
    "Or": operator.or_,
    "Xor": operator.xor,
    "Equal": operator.eq,
    "NotEqual": operator.ne,
    "GreaterThan": operator.gt,
    "GreaterOrEqual": operator.ge,
    "LessThan": operator.lt,
    "LessOrEqual": operator.le,
}


def _eval_reference(head: Any, args: Any) -> Any:
    atom = head.value
    if atom.atom_type is FunctionAtom or atom.atom_type is MemberAtom:
        return atom.value.func(*args)
    raise NoEvaluationRuleError(f"No rule for head: {head!r}")


eval_value = Evaluator[Any]()
eval_value.add_atom(RealValue, float)
eval_value.add_atom(ComplexValue, complex)
eval_value.add_atom(BooleanValue, bool)
eval_value.add_op1(HEADS["Negate"], operator.neg)
eval_value.add_op1(HEADS["Not"], operator.not_)
eval_value.add_op1(CONVERT_HEADS[Real], lambda v: complex(v).real)
eval_value.add_op1(CONVERT_HEADS[Complex], complex)
for _op, _func in _BINARY_FUNCS.items():
    eval_value.add_op2(HEADS[_op], _func)
eval_value.add_opn(HEADS[CONDITIONAL], lambda a: a[1] if a[0] else a[2])
eval_value.add_op_generic(_eval_reference)
