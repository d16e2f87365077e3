"""Representation independent identity tokens for operations and constants.

A :class:`KnownFunction` such as ``sin`` or a :class:`KnownConstant` such as
``pi`` does not say how the operation is computed or which numeric type it
uses. A :class:`symscope.engine.scope.Scope` maps tokens to concrete
expressions and back.

>>> from symscope.core.known import KnownFunction
>>> sin = KnownFunction('sin')
>>> sin
KnownFunction('sin')
>>> print(sin)
sin

Tokens compare by identity. Two tokens with the same display name are
different tokens:

>>> sin == KnownFunction('sin')
False
"""
from __future__ import annotations

__all__ = [
    "KnownObject",
    "KnownConstant",
    "KnownFunction",
]


class KnownObject:
    """Base class of identity tokens.

    :ivar name: The display name of the token.
    """

    __slots__ = ("name",)

    name: str

    def __init__(self, name: str):
        """Create a new token with a display name."""
        self.name = name

    def __repr__(self) -> str:
        """Explicit form e.g. ``KnownConstant('π')``."""
        return f"{type(self).__name__}({self.name!r})"

    def __str__(self) -> str:
        """The display name."""
        return self.name


class KnownConstant(KnownObject):
    """A well-known constant such as zero, pi or the imaginary unit."""

    __slots__ = ()


class KnownFunction(KnownObject):
    """A well-known operation such as add, power or sine."""

    __slots__ = ()
