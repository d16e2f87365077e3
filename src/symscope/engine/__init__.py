"""The binding and rewriting engine.

SymPy conversions live in :mod:`symscope.engine.sympy_conversions` and are
not imported here.
"""
from __future__ import annotations

from symscope.engine import wellknown
from symscope.engine.defaults import build_default_scope, default_scope
from symscope.engine.derivative import Differentiator, derivative
from symscope.engine.scope import Scope, ScopeBuilder, ScopeOptions, Template
from symscope.engine.simplify import Simplifier, simplify

__all__ = [
    "wellknown",
    "Scope",
    "ScopeBuilder",
    "ScopeOptions",
    "Template",
    "build_default_scope",
    "default_scope",
    "Simplifier",
    "simplify",
    "Differentiator",
    "derivative",
]
