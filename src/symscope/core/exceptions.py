"""Module for all symscope exceptions."""
from __future__ import annotations

from typing import Any


class SymScopeError(Exception):
    """Superclass for all symscope exceptions."""

    pass


class NoEvaluationRuleError(SymScopeError):
    """Raised when an :class:`Evaluator` has no rule for an expression."""

    pass


class BadRuleError(SymScopeError):
    """Raised when a binding template or registration is invalid."""

    pass


class ExpressifyError(SymScopeError, TypeError):
    """Raised when an object cannot be converted to an expression."""

    pass


class ExprError(SymScopeError):
    """Superclass for errors about a particular expression, name or token.

    :ivar expr: The offending (sub)expression, name or token.
    """

    expr: Any

    def __init__(self, message: str, expr: Any = None):
        """Create the error with a message and the offending object."""
        super().__init__(message)
        self.expr = expr


class UnknownBindingError(ExprError, LookupError):
    """Raised when a name or known token has no counterpart in a Scope."""

    pass


class NoMatchingOverloadError(ExprError, TypeError):
    """Raised when no template of a function accepts the given arguments."""

    pass


class UnsupportedNodeKindError(ExprError, NotImplementedError):
    """Raised for node kinds outside the supported expression sublanguage."""

    pass


class UnimplementedDerivativeError(ExprError, NotImplementedError):
    """Raised when no differentiation rule applies to an expression."""

    pass


class FrozenScopeError(SymScopeError, AttributeError):
    """Raised on an attempt to modify a frozen Scope."""

    pass
