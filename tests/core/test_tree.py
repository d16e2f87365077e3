from symscope.core.atom import Atom, AtomType
from symscope.core.tree import (
    ForwardGraph,
    SubsFunc,
    Tr,
    Tree,
    forward_graph,
    topological_sort,
    topological_split,
)
from pytest import raises

Function = AtomType("Function", str)
Name = AtomType("Name", str)


def _funcs_names(
    funcs: list[str], names: list[str]
) -> tuple[list[Tree], list[Tree]]:
    return [Tr(Function(f)) for f in funcs], [Tr(Name(n)) for n in names]


def test_Tree_basic() -> None:
    """Test basic construction and equality of Tree."""
    RealValue = AtomType("Real", float)
    one_atom = RealValue(1.0)
    f_atom = Function("f")

    one_tree = Tr(one_atom)
    f_tree = Tr(f_atom)
    f_one = f_tree(one_tree)

    assert str(one_tree) == "1.0"
    assert str(f_tree) == "f"
    assert str(f_one) == "f(1.0)"

    assert repr(one_tree) == "Tr(Real(1.0))"
    assert repr(f_tree) == "Tr(Function('f'))"
    assert repr(f_one) == "Tree(Tr(Function('f')), Tr(Real(1.0)))"

    assert not isinstance(f_one, Atom)
    assert isinstance(f_tree, Tree)
    assert isinstance(f_one, Tree)

    assert f_one.children == (f_tree, one_tree)
    assert one_tree.children == ()
    assert one_tree.value is one_atom

    assert (one_tree == f_tree) is False
    assert (one_tree == one_atom) is False  # type: ignore[comparison-overlap]
    assert (one_tree != f_tree) is True

    raises(TypeError, lambda: Tree(1))  # type: ignore
    raises(TypeError, lambda: Tr(1))  # type: ignore


def test_Tree_interned() -> None:
    """Structurally equal trees are the same object."""
    [f], [x, y] = _funcs_names(["f"], ["x", "y"])
    assert Tr(Name("x")) is x
    assert f(x, y) is f(x, y)
    assert f(x, y) is Tree(f, x, y)
    assert f(x, y) is not f(y, x)


def test_topological_sort_split() -> None:
    """Simple tests for topological_sort and topological_split."""
    [f], [x, y] = _funcs_names(["f"], ["x", "y"])

    expr = f(f(x, y), f(f(x), f(x, y)))
    subexpressions = [
        f,
        x,
        y,
        f(x, y),
        f(x),
        f(f(x), f(x, y)),
        f(f(x, y), f(f(x), f(x, y))),
    ]
    # Passing heads=True will include f in the list.
    assert topological_sort(expr) == subexpressions[1:]
    assert topological_sort(expr, heads=False) == subexpressions[1:]
    assert topological_sort(expr, heads=True) == subexpressions

    # Excluding f(x, y) also excludes children like y that do not appear
    # elsewhere.
    expected_exclude = [
        x,
        f(x),
        f(f(x), f(x, y)),
        f(f(x, y), f(f(x), f(x, y))),
    ]
    assert topological_sort(expr, exclude={f(x, y)}) == expected_exclude

    expected_split = (
        [x, y],
        {f},
        [f(x, y), f(x), f(f(x), f(x, y)), f(f(x, y), f(f(x), f(x, y)))],
    )
    assert topological_split(expr) == expected_split


def test_topological_sort_deep() -> None:
    """Deep trees do not hit the recursion limit."""
    [f], [x] = _funcs_names(["f"], ["x"])
    expr = x
    for _ in range(5000):
        expr = f(expr)
    assert len(topological_sort(expr)) == 5001


def test_forward_graph() -> None:
    """Basic test for the forward_graph function."""
    [f, g], [x, y] = _funcs_names(["f", "g"], ["x", "y"])

    expr = f(y, f(x, g(y)))

    expected = ForwardGraph(
        [y, x],
        {g, f},
        [(g, [0]), (f, [1, 2]), (f, [0, 3])],
    )

    assert forward_graph(expr) == expected


def test_subsfunc() -> None:
    """Test basic functionality of SubsFunc."""
    [f, g], [x, y, z, t] = _funcs_names(["f", "g"], ["x", "y", "z", "t"])
    expr = f(f(x, y), g(y))
    subs = SubsFunc(expr, [x, y])
    assert subs(z, t) == f(f(z, t), g(t))
    assert subs.nargs == 2
    assert subs.atoms == [f, g]
    assert subs.operations == [[2, 0, 1], [3, 1], [2, 4, 5]]

    subs = SubsFunc(expr, [f(x, y)])
    assert subs(z) == f(z, g(y))
    assert subs.nargs == 1
    assert subs.atoms == [f, g(y)]
    assert subs.operations == [[1, 0, 2]]

    subs = SubsFunc(expr, [expr])
    assert subs(t) == t
    assert subs.nargs == 1
    assert subs.atoms == []
    assert subs.operations == []

    subs = SubsFunc(expr, [t])
    assert subs(z) == expr
    assert subs.nargs == 1
    assert subs.atoms == [expr]
    assert subs.operations == []

    raises(TypeError, lambda: subs(z, t))


def test_subsfunc_simultaneous() -> None:
    """Arguments may contain the placeholders themselves."""
    [f], [x, y] = _funcs_names(["f"], ["x", "y"])
    subs = SubsFunc(f(x, y), [x, y])
    assert subs(y, x) == f(y, x)
    assert subs.call([f(x), x]) == f(f(x), x)
