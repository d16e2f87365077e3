"""Structural pattern matching of expressions.

A pattern is an ordinary :class:`Expr` in which some variables are designated
as placeholders. Matching walks the pattern and the subject together; every
node other than a placeholder must agree exactly with the subject.

>>> from symscope.core.expr import variable
>>> from symscope.core.match import match
>>> a = variable('a')
>>> x, y = variable('x'), variable('y')
>>> result = match(a * a, y * y, [a])
>>> result.success
True
>>> result.bound[0] is y
True
>>> match(a * a, x * y, [a]).success
False

There is no commutative matching:

>>> match(a + 1, 1 + x, [a]).success
False
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING as _TYPE_CHECKING

from symscope.core.exceptions import BadRuleError, UnsupportedNodeKindError
from symscope.core.expr import PARAMETER, SUPPORTED_KINDS, Expr, node_kind

if _TYPE_CHECKING:
    from typing import Optional, Sequence

    from symscope.core.tree import Tree


__all__ = [
    "MatchResult",
    "Pattern",
    "match",
]


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching a pattern against a subject.

    :ivar success: Whether the subject matched.
    :ivar bound: The expression bound to each placeholder (in order) or
        ``None`` for a placeholder that does not occur in the pattern.
    """

    success: bool
    bound: tuple[Optional[Expr], ...]

    @property
    def complete(self) -> bool:
        """Whether the match succeeded with every placeholder bound."""
        return self.success and all(b is not None for b in self.bound)


class Pattern:
    """A pattern compiled for repeated matching.

    :ivar body: The pattern expression (or ``None``).
    :ivar placeholders: The variables of ``body`` that match anything.
    """

    __slots__ = ("body", "placeholders", "_index")

    body: Optional[Expr]
    placeholders: tuple[Expr, ...]
    _index: dict[Tree, int]

    def __init__(self, body: Optional[Expr], placeholders: Sequence[Expr] = ()):
        """Compile ``body`` with the given placeholders."""
        placeholders = tuple(placeholders)
        index = {}
        for i, placeholder in enumerate(placeholders):
            if placeholder.kind != PARAMETER:
                raise BadRuleError(f"Placeholder is not a variable: {placeholder}")
            elif placeholder.rep in index:
                raise BadRuleError(f"Repeated placeholder: {placeholder}")
            index[placeholder.rep] = i
        self.body = body
        self.placeholders = placeholders
        self._index = index

    def __repr__(self) -> str:
        """Explicit form showing the body and placeholders."""
        return f"Pattern({self.body!r}, {list(self.placeholders)!r})"

    def match(self, subject: Optional[Expr]) -> MatchResult:
        """Match ``subject`` against this pattern."""
        index = self._index
        bound: list[Optional[Tree]] = [None] * len(self.placeholders)

        def result(success: bool) -> MatchResult:
            exprs = tuple(Expr(b) if b is not None else None for b in bound)
            return MatchResult(success, exprs)

        body = self.body
        if body is None or subject is None:
            return result(body is None and subject is None)

        # Pairs still to compare, popped left to right so that the first
        # occurrence of a placeholder is the one that binds it.
        stack = [(body.rep, subject.rep)]
        while stack:
            pattern, target = stack.pop()

            i = index.get(pattern)
            if i is not None:
                previous = bound[i]
                if previous is None:
                    bound[i] = target
                elif previous is not target:
                    return result(False)
                continue

            if node_kind(pattern) not in SUPPORTED_KINDS:
                raise UnsupportedNodeKindError(
                    f"Cannot match node kind {node_kind(pattern)}", Expr(pattern)
                )

            pchildren = pattern.children
            tchildren = target.children
            if not pchildren:
                if pattern is not target:
                    return result(False)
            elif len(pchildren) != len(tchildren) or pchildren[0] is not tchildren[0]:
                return result(False)
            else:
                stack.extend(zip(pchildren[:0:-1], tchildren[:0:-1]))

        return result(True)


def match(
    pattern: Optional[Expr],
    subject: Optional[Expr],
    placeholders: Sequence[Expr] = (),
) -> MatchResult:
    """Match ``subject`` against ``pattern`` with the given placeholders.

    With no placeholders this is a structural equality test that also
    rejects unsupported node kinds.
    """
    return Pattern(pattern, placeholders).match(subject)
