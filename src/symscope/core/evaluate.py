"""Forward evaluation of expression trees with per-head rules."""
from __future__ import annotations

from typing import TYPE_CHECKING as _TYPE_CHECKING
from typing import Callable, Generic, TypeVar, cast

from symscope.core.exceptions import NoEvaluationRuleError
from symscope.core.tree import Tree, forward_graph

if _TYPE_CHECKING:
    from typing import Any, Optional, Sequence

    from symscope.core.atom import AnyValue as _AnyValue
    from symscope.core.atom import AtomType


__all__ = ["Evaluator"]


_T = TypeVar("_T")
_S = TypeVar("_S")


if _TYPE_CHECKING:
    Op1 = Callable[[_T], _T]
    Op2 = Callable[[_T, _T], _T]
    OpN = Callable[[Sequence[_T]], _T]


def _generic_operation_error(head: Tree, argvals: Sequence[_T]) -> _T:
    """Error fallback rule for handling unknown heads."""
    msg = "No rule for head: " + repr(head)
    raise NoEvaluationRuleError(msg)


def _generic_atom_error(value: Tree) -> Any:
    """Error fallback rule for handling unknown atoms."""
    msg = "No rule for atom: " + repr(value)
    raise NoEvaluationRuleError(msg)


class Evaluator(Generic[_T]):
    """Objects that evaluate expression trees.

    Rules are registered per :class:`AtomType` for atoms and per head
    :class:`Tree` for compound nodes. Heads without a rule go to the generic
    operation rule, which raises :class:`NoEvaluationRuleError` unless
    replaced.

    Examples
    ========

    >>> import operator
    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr
    >>> from symscope.core.evaluate import Evaluator
    >>> RealValue = AtomType('Real', float)
    >>> Name = AtomType('Name', str)
    >>> Operator = AtomType('Operator', str)
    >>> add = Tr(Operator('Add'))
    >>> neg = Tr(Operator('Neg'))
    >>> x = Tr(Name('x'))
    >>> two = Tr(RealValue(2.0))

    >>> eval_value = Evaluator[float]()
    >>> eval_value.add_atom(RealValue, float)
    >>> eval_value.add_op2(add, operator.add)
    >>> eval_value.add_op1(neg, operator.neg)
    >>> eval_value(add(two, neg(two)))
    0.0

    Values for other atoms (e.g. variables) can be supplied explicitly:

    >>> eval_value(add(x, two), {x: 1.5})
    3.5
    >>> eval_value(add(x, two))
    Traceback (most recent call last):
        ...
    symscope.core.exceptions.NoEvaluationRuleError: No rule for atom: Tr(Name('x'))
    """

    atoms: dict[AtomType[_AnyValue], Callable[[_AnyValue], _T]]
    operations: dict[Tree, tuple[Callable[..., _T], bool]]
    generic_operation_func: Callable[[Tree, Sequence[_T]], _T]
    generic_atom_func: Callable[[Tree], _T]

    def __init__(self) -> None:
        """Create an empty evaluator."""
        self.atoms = {}
        self.operations = {}
        self.generic_operation_func = _generic_operation_error
        self.generic_atom_func = _generic_atom_error

    def add_atom(self, atom_type: AtomType[_S], func: Callable[[_S], _T]) -> None:
        """Add an evaluation rule for a particular AtomType."""
        atom_type_cast = cast("AtomType[_AnyValue]", atom_type)
        func_cast = cast("Callable[[_AnyValue], _T]", func)
        self.atoms[atom_type_cast] = func_cast

    def add_atom_generic(self, func: Callable[[Any], _T]) -> None:
        """Add a generic fallback rule for atoms."""
        self.generic_atom_func = func

    def add_op1(self, head: Tree, func: Op1[_T]) -> None:
        """Add an evaluation rule for a unary head."""
        self.operations[head] = (func, True)

    def add_op2(self, head: Tree, func: Op2[_T]) -> None:
        """Add an evaluation rule for a binary head."""
        self.operations[head] = (func, True)

    def add_opn(self, head: Tree, func: OpN[_T]) -> None:
        """Add an evaluation rule taking the argument values as one list."""
        self.operations[head] = (func, False)

    def add_op_generic(self, func: Callable[[Tree, Sequence[_T]], _T]) -> None:
        """Add a generic fallback rule for heads."""
        self.generic_operation_func = func

    def eval_atom(self, atom: Tree) -> _T:
        """Evaluate an atom."""
        atom_value = atom.value
        atom_func = self.atoms.get(atom_value.atom_type)
        if atom_func is None:
            return self.generic_atom_func(atom)
        return atom_func(atom_value.value)

    def eval_operation(self, head: Tree, argvals: Sequence[_T]) -> _T:
        """Evaluate one head applied to some values."""
        func_star = self.operations.get(head)

        if func_star is None:
            return self.generic_operation_func(head, argvals)

        op_func, star_args = func_star

        if star_args:
            result = op_func(*argvals)
        else:
            result = op_func(argvals)

        return result

    def evaluate(self, expr: Tree, values: dict[Tree, _T]) -> _T:
        """Evaluate the expression using forward evaluation."""
        graph = forward_graph(expr)
        stack = []

        for atom in graph.atoms:
            if atom in values:
                value = values[atom]
            else:
                value = self.eval_atom(atom)
            stack.append(value)

        for head, indices in graph.operations:
            argvals = [stack[i] for i in indices]
            stack.append(self.eval_operation(head, argvals))

        # stack holds the values of the topological sort of expr
        return stack[-1]

    def __call__(self, expr: Tree, values: Optional[dict[Tree, _T]] = None) -> _T:
        """Short-hand for evaluate."""
        if values is None:
            values = {}
        return self.evaluate(expr, values)
