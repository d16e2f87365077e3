"""symscope.core.tree module.

Hash-consed expression trees. Every :class:`Tree` is unique for its
structure, so two trees are structurally equal exactly when they are the same
object. The higher level :class:`symscope.core.expr.Expr` wraps a
:class:`Tree` and relies on this for cheap equality.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING as _TYPE_CHECKING
from weakref import WeakValueDictionary as _WeakDict

from symscope.core.atom import Atom

if _TYPE_CHECKING:
    from typing import Optional, Sequence

    from symscope.core.atom import AnyAtom


__all__ = [
    "Tree",
    "Tr",
    "ForwardGraph",
    "SubsFunc",
    "topological_sort",
    "topological_split",
    "forward_graph",
]


_all_trees: _WeakDict[AnyAtom | tuple[Tree, ...], Tree] = _WeakDict()


class Tree:
    """Immutable expression tree.

    A :class:`Tree` is either atomic, wrapping an :class:`Atom` in its
    ``value``, or compound with ``children`` whose first element is the head
    of the node (an operator or a function reference) and whose remaining
    elements are the operands.

    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr, Tree
    >>> Operator = AtomType('Operator', str)
    >>> Name = AtomType('Name', str)
    >>> add = Tr(Operator('Add'))
    >>> x = Tr(Name('x'))
    >>> y = Tr(Name('y'))
    >>> expr = add(x, y)
    >>> expr
    Tree(Tr(Operator('Add')), Tr(Name('x')), Tr(Name('y')))
    >>> print(expr)
    Add(x, y)
    >>> expr.children[0] is add
    True
    >>> add.children
    ()
    >>> add.value
    Operator('Add')

    Trees are interned so rebuilding an equal tree gives the same object:

    >>> add(x, y) is Tree(add, x, y)
    True
    >>> add(x, y) is add(y, x)
    False
    """

    __slots__ = (
        "__weakref__",
        "value",
        "children",
    )

    children: tuple[Tree, ...]
    """The head followed by the operands (empty if atomic)."""  # pragma: no cover

    value: AnyAtom
    """The wrapped :class:`Atom` of an atomic Tree."""  # pragma: no cover

    def __new__(cls, *children: Tree) -> Tree:
        """Return a previously created Tree or a new one."""
        previous = _all_trees.get(children, None)
        if previous is not None:
            return previous

        if not all(isinstance(child, Tree) for child in children):
            raise TypeError("All arguments should be Tree.")

        obj = object.__new__(cls)
        obj.children = children

        obj = _all_trees.setdefault(children, obj)

        return obj

    @classmethod
    def atom(cls, value: AnyAtom) -> Tree:
        """Create a Tree representing an atomic expression."""
        if not isinstance(value, Atom):
            raise TypeError("The value should be an Atom.")

        previous = _all_trees.get(value, None)
        if previous is not None:
            return previous

        obj = super().__new__(cls)
        obj.value = value
        obj.children = ()

        obj = _all_trees.setdefault(value, obj)

        return obj

    def __call__(*expressions: Tree) -> Tree:
        """Compound expressions are made by calling the head."""
        return Tree(*expressions)

    def __repr__(self) -> str:
        """Show the verbose representation."""
        if self.children:
            argstr = ", ".join(map(repr, self.children))
            return f"Tree({argstr})"
        else:
            return f"Tr({self.value!r})"

    def __str__(self) -> str:
        """Show the pretty form."""
        if self.children:
            head = self.children[0]
            args = self.children[1:]
            argstr = ", ".join(map(str, args))
            return f"{head}({argstr})"
        else:
            return str(self.value)


# Convenient shorthand for creating atoms
Tr = Tree.atom


def topological_sort(
    expression: Tree,
    *,
    heads: bool = False,
    exclude: Optional[set[Tree]] = None,
) -> list[Tree]:
    """List of subexpressions of a :class:`Tree` sorted topologically.

    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr, topological_sort
    >>> Operator = AtomType('Operator', str)
    >>> Name = AtomType('Name', str)
    >>> mul, neg = Tr(Operator('Mul')), Tr(Operator('Neg'))
    >>> x, y = Tr(Name('x')), Tr(Name('y'))
    >>> expr = mul(mul(x, y), neg(neg(x)))
    >>> for e in topological_sort(expr):
    ...     print(e)
    x
    y
    Mul(x, y)
    Neg(x)
    Neg(Neg(x))
    Mul(Mul(x, y), Neg(Neg(x)))

    No expression appears before any of its children and repeated
    subexpressions appear once. Heads are left out unless ``heads=True``:

    >>> topological_sort(neg(x), heads=True) == [neg, x, neg(x)]
    True

    Anything in ``exclude`` is treated as already visited and is neither
    listed nor walked into.

    See Also
    ========

    topological_split: Splits the sort into atoms, heads and nodes.
    """
    # An explicit stack rather than recursion so that deep trees do not hit
    # the recursion limit.
    def get_children(expr: Tree) -> list[Tree]:
        if heads:
            children = expr.children
        else:
            children = expr.children[1:]
        return list(children)[::-1]

    if exclude is not None:
        seen = set(exclude)
    else:
        seen = set()

    expressions = []
    stack = []

    if expression not in seen:
        stack = [(expression, get_children(expression))]

    while stack:
        top, children = stack[-1]
        while children:
            child = children.pop()
            if child not in seen:
                seen.add(child)
                stack.append((child, get_children(child)))
                break
        else:
            stack.pop()
            expressions.append(top)

    return expressions


def topological_split(
    expr: Tree,
    *,
    exclude: Optional[set[Tree]] = None,
) -> tuple[list[Tree], set[Tree], list[Tree]]:
    """Topological sort split into atoms, heads and compound expressions.

    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr, topological_split
    >>> Operator = AtomType('Operator', str)
    >>> Name = AtomType('Name', str)
    >>> add, neg = Tr(Operator('Add')), Tr(Operator('Neg'))
    >>> x, y = Tr(Name('x')), Tr(Name('y'))
    >>> atoms, heads, nodes = topological_split(add(neg(x), y))
    >>> atoms == [x, y]
    True
    >>> heads == {add, neg}
    True
    >>> nodes == [neg(x), add(neg(x), y)]
    True

    A compound node without operands (such as a static member read) is
    listed among the nodes.
    """
    subexpressions = topological_sort(expr, exclude=exclude)

    atoms: list[Tree] = []
    heads: set[Tree] = set()
    nodes: list[Tree] = []

    for subexpr in subexpressions:
        children = subexpr.children
        if not children:
            atoms.append(subexpr)
        else:
            heads.add(children[0])
            nodes.append(subexpr)

    return atoms, heads, nodes


def forward_graph(expr: Tree) -> ForwardGraph:
    """Build a :class:`ForwardGraph` from a :class:`Tree`.

    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr, forward_graph
    >>> Operator = AtomType('Operator', str)
    >>> Name = AtomType('Name', str)
    >>> add, neg = Tr(Operator('Add')), Tr(Operator('Neg'))
    >>> x, y = Tr(Name('x')), Tr(Name('y'))
    >>> graph = forward_graph(add(neg(x), y))
    >>> graph.atoms == [x, y]
    True
    >>> graph.operations == [(neg, [0]), (add, [2, 1])]
    True

    Running the operations in order over a stack initialised with the atoms
    rebuilds (or evaluates) the expression with each distinct subexpression
    visited once.
    """
    atoms, heads, nodes = topological_split(expr)

    num_atoms = len(atoms)

    operations: list[tuple[Tree, list[int]]] = []
    indices: dict[Tree, int] = dict(zip(atoms, range(num_atoms)))

    for index, subexpr in enumerate(nodes, num_atoms):
        head = subexpr.children[0]
        args = subexpr.children[1:]
        arg_indices = [indices[e] for e in args]
        operations.append((head, arg_indices))
        indices[subexpr] = index

    return ForwardGraph(atoms, heads, operations)


@dataclass
class ForwardGraph:
    """Representation of an expression as a forward graph."""

    atoms: list[Tree]
    heads: set[Tree]
    operations: list[tuple[Tree, list[int]]]


class SubsFunc:
    """Callable that substitutes fixed subexpressions of a Tree.

    This is how a binding template is instantiated: the template body is
    compiled once against its placeholders and then called with the actual
    arguments.

    >>> from symscope.core.atom import AtomType
    >>> from symscope.core.tree import Tr, SubsFunc
    >>> Operator = AtomType('Operator', str)
    >>> Name = AtomType('Name', str)
    >>> mul, neg = Tr(Operator('Mul')), Tr(Operator('Neg'))
    >>> a, b, x = Tr(Name('a')), Tr(Name('b')), Tr(Name('x'))
    >>> body = mul(neg(a), b)
    >>> func = SubsFunc(body, [a, b])
    >>> print(func(x, neg(x)))
    Mul(Neg(x), Neg(x))

    All replacements happen simultaneously so the arguments may themselves
    contain the placeholders:

    >>> print(func(b, a))
    Mul(Neg(b), a)
    """

    nargs: int
    atoms: list[Tree]
    operations: list[list[int]]

    def __new__(cls, expr: Tree, args: Sequence[Tree]) -> SubsFunc:
        """Compile the substitution of ``args`` into ``expr``."""
        # The args are excluded from the sort because they are replaced.
        subexpressions = topological_sort(expr, heads=True, exclude=set(args))

        atoms = []
        nodes = []

        has_args = set(args)
        node_children = set()

        for subexpr in subexpressions:
            children = subexpr.children
            if children:
                children_set = set(children)
                if children_set & has_args:
                    has_args.add(subexpr)
                    node_children.update(children_set)
                    nodes.append(subexpr)
                else:
                    # Independent of the args: constant for the substitution.
                    atoms.append(subexpr)
            else:
                atoms.append(subexpr)

        if atoms and not nodes:
            atoms = [expr]
        else:
            atoms = [a for a in atoms if a in node_children]

        num_args = len(args)
        num_args_atoms = num_args + len(atoms)

        indices: dict[Tree, int] = dict(zip(args, range(num_args)))
        indices.update(dict(zip(atoms, range(num_args, num_args_atoms))))

        operations = []
        for index, node in enumerate(nodes, num_args_atoms):
            indices[node] = index
            child_indices = [indices[c] for c in node.children]
            operations.append(child_indices)

        obj = super().__new__(cls)
        obj.nargs = num_args
        obj.atoms = atoms
        obj.operations = operations

        return obj

    def __call__(self, *args: Tree) -> Tree:
        """Substitute ``args`` for the placeholders."""
        return self.call(args)

    def call(self, args: Sequence[Tree]) -> Tree:
        """Substitute a sequence of arguments for the placeholders."""
        if len(args) != self.nargs:
            raise TypeError("Wrong number of arguments")

        stack = list(args) + self.atoms

        for indices in self.operations:
            children = [stack[i] for i in indices]
            stack.append(Tree(*children))

        return stack[-1]
