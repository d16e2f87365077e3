"""Symbolic expressions bound to concrete numeric representations.

>>> from symscope import default_scope, derivative, simplify, variable
>>> x = variable('x')
>>> simplify(x + x)
(2*x)
>>> derivative(x**3, x)
(3*(x^2))
>>> default_scope().bind('cos', x)
math.cos(x)
"""
from __future__ import annotations

import logging

from symscope.core.exceptions import (
    BadRuleError,
    FrozenScopeError,
    NoMatchingOverloadError,
    SymScopeError,
    UnimplementedDerivativeError,
    UnknownBindingError,
    UnsupportedNodeKindError,
)
from symscope.core.expr import (
    Boolean,
    Complex,
    Expr,
    Real,
    constant,
    variable,
)
from symscope.core.known import KnownConstant, KnownFunction
from symscope.engine import (
    Scope,
    ScopeBuilder,
    ScopeOptions,
    default_scope,
    derivative,
    simplify,
)

__all__ = [
    "Expr",
    "Real",
    "Complex",
    "Boolean",
    "constant",
    "variable",
    "KnownConstant",
    "KnownFunction",
    "Scope",
    "ScopeBuilder",
    "ScopeOptions",
    "default_scope",
    "derivative",
    "simplify",
    "SymScopeError",
    "BadRuleError",
    "FrozenScopeError",
    "NoMatchingOverloadError",
    "UnimplementedDerivativeError",
    "UnknownBindingError",
    "UnsupportedNodeKindError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
