import math

from pytest import raises
from symscope.core.exceptions import UnknownBindingError
from symscope.core.expr import (
    Boolean,
    Complex,
    Expr,
    block,
    conditional,
    constant,
    convert,
    less_than,
    variable,
)
from symscope.engine.defaults import default_scope
from symscope.engine.functions import eval_value

from .utils import requires_sympy

x = variable("x")
y = variable("y")
z = variable("z", Complex)
b = variable("b", Boolean)
c = variable("c", Boolean)

scope = default_scope()


@requires_sympy
def test_to_sympy() -> None:
    """Conversion of expressions to SymPy."""
    import sympy
    from symscope.engine.sympy_conversions import to_sympy

    X, Y, Z = sympy.symbols("x, y, z")

    assert to_sympy(x**2 + 1) == X**2 + 1
    assert to_sympy(x - y) == X - Y
    assert to_sympy(x / y) == X / Y
    assert to_sympy(-x) == -X
    assert to_sympy(scope.bind("sin", x) * y) == sympy.sin(X) * Y
    assert to_sympy(scope.bind("sqrt", x)) == sympy.sqrt(X)
    assert to_sympy(scope.bind("exp", z)) == sympy.exp(Z)
    assert to_sympy(convert(x, Complex)) == X
    assert to_sympy(z + x) == Z + X
    assert (x + 1).to_sympy() == X + 1


@requires_sympy
def test_to_sympy_constants() -> None:
    """Literals and well-known constants."""
    import sympy
    from symscope.engine.sympy_conversions import to_sympy

    assert to_sympy(constant(3)) == sympy.Integer(3)
    assert to_sympy(constant(2.5)) == sympy.Float(2.5)
    assert to_sympy(constant(1j)) == sympy.I
    assert to_sympy(constant(2 + 3j)) == 2 + 3 * sympy.I
    assert to_sympy(constant(True)) is sympy.true
    assert to_sympy(constant(False)) is sympy.false
    assert to_sympy(constant(math.pi)) == sympy.pi
    assert to_sympy(scope.bind_constant("pi")) == sympy.pi
    assert to_sympy(scope.bind_constant("e")) == sympy.E
    assert to_sympy(constant(math.inf)) == sympy.oo
    assert to_sympy(constant(-math.inf)) == -sympy.oo
    assert to_sympy(constant(math.nan)) is sympy.nan


@requires_sympy
def test_to_sympy_logic() -> None:
    """Comparisons, logic and conditionals."""
    import sympy
    from symscope.engine.sympy_conversions import to_sympy

    X, Y, B, C = sympy.symbols("x, y, b, c")

    assert to_sympy(less_than(x, y)) == sympy.Lt(X, Y)
    assert to_sympy(b & c) == sympy.And(B, C)
    assert to_sympy(~b) == sympy.Not(B)
    expected = sympy.Piecewise((X, X < Y), (Y, True))
    assert to_sympy(conditional(less_than(x, y), x, y)) == expected


@requires_sympy
def test_to_sympy_unsupported() -> None:
    """Nodes outside the supported kinds cannot be converted."""
    from symscope.engine.sympy_conversions import to_sympy

    raises(NotImplementedError, lambda: to_sympy(block(x, y)))


@requires_sympy
def test_from_sympy() -> None:
    """Conversion of SymPy expressions."""
    import sympy
    from symscope.engine.sympy_conversions import from_sympy

    X, Y = sympy.symbols("x, y")

    assert from_sympy(X - Y, [x, y]) is x - y
    assert from_sympy(-X, [x]) is -x
    assert repr(from_sympy(sympy.Rational(1, 2))) == "(1/2)"
    assert from_sympy(sympy.Integer(3)) is constant(3)
    assert from_sympy(sympy.Float(2.5)) is constant(2.5)
    assert repr(from_sympy(X**-2, [x])) == "(1/(x^2))"
    assert repr(from_sympy(sympy.sqrt(X), [x])) == "cmath.sqrt(Complex(x))"
    assert from_sympy(sympy.sin(X), [x]) is scope.bind("sin", x)
    assert repr(from_sympy(sympy.sin(X) / 2, [x])) == "(math.sin(x)/2)"
    assert Expr.from_sympy(sympy.cos(X), [x]) is scope.bind("cos", x)


@requires_sympy
def test_from_sympy_constants() -> None:
    """SymPy constants are bound through the scope."""
    import sympy
    from symscope.engine.sympy_conversions import from_sympy

    assert from_sympy(sympy.pi) is scope.bind_constant("pi")
    assert from_sympy(sympy.E) is scope.bind_constant("e")
    assert from_sympy(sympy.oo).constant_value() == math.inf
    assert math.isnan(from_sympy(sympy.nan).constant_value())
    i = from_sympy(sympy.I)
    assert i.type is Complex
    assert eval_value(i.rep) == 1j
    assert from_sympy(sympy.true) is constant(True)


@requires_sympy
def test_from_sympy_logic() -> None:
    """Logical expressions and Piecewise."""
    import sympy
    from symscope.engine.sympy_conversions import from_sympy

    X, Y, B, C = sympy.symbols("x, y, b, c")

    assert from_sympy(sympy.And(B, C), [b, c]) is b & c
    assert from_sympy(sympy.Not(B), [b]) is ~b
    assert from_sympy(X < Y, [x, y]) is less_than(x, y)
    piecewise = sympy.Piecewise((X, X < Y), (Y, True))
    expected = conditional(less_than(x, y), x, y)
    assert from_sympy(piecewise, [x, y]) is expected


@requires_sympy
def test_from_sympy_errors() -> None:
    """Unknown symbols and unsupported functions raise."""
    import sympy
    from symscope.engine.sympy_conversions import from_sympy

    X, W = sympy.symbols("x, w")

    with raises(UnknownBindingError) as exc_info:
        from_sympy(X + W, [x])
    assert exc_info.value.expr == "w"
    raises(LookupError, lambda: from_sympy(W))
    raises(NotImplementedError, lambda: from_sympy(sympy.zeta(X), [x]))


@requires_sympy
def test_sympy_round_trip() -> None:
    """Converting to SymPy and back reaches a fixed point."""
    from symscope.engine.sympy_conversions import from_sympy, to_sympy

    sin = scope.bind("sin", x)
    exprs = [
        x**2 + 1,
        x - y,
        x / y,
        sin * y,
        scope.bind("exp", x),
        scope.bind("sqrt", x),
        conditional(less_than(x, y), x, y),
    ]
    for expr in exprs:
        expected = to_sympy(expr)
        assert to_sympy(from_sympy(expected, [x, y])) == expected


@requires_sympy
def test_simplify_sympy_fixed_point() -> None:
    """Simplifying after a trip through SymPy settles within a few passes."""
    from symscope.engine.simplify import simplify
    from symscope.engine.sympy_conversions import from_sympy, to_sympy

    for expr in [(x + 1) ** 2, x - y, x / y, x / x]:
        current = simplify(expr)
        for _ in range(3):
            following = simplify(from_sympy(to_sympy(current), [x, y]))
            if following is current:
                break
            current = following
        else:
            raise AssertionError(f"no fixed point for {expr}")
