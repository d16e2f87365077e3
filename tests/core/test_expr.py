import math

from symscope.core.exceptions import ExpressifyError, UnsupportedNodeKindError
from symscope.core.expr import (
    Boolean,
    Complex,
    Expr,
    FunctionRef,
    MemberRef,
    Real,
    binary,
    block,
    call,
    conditional,
    constant,
    convert,
    equal,
    expressify,
    greater_than,
    less_or_equal,
    logical_not,
    loop,
    member,
    negate,
    unify,
    variable,
    widen,
)
from symscope.core.tree import Tree
from pytest import raises

math_sin = FunctionRef("math.sin", [Real], Real, math.sin)
math_pi = MemberRef("math.pi", None, Real, lambda: math.pi)
real_part = MemberRef("real", Complex, Real, lambda z: z.real)


def test_Expr_interned() -> None:
    """Structurally equal expressions are the same object."""
    x = variable("x")
    assert (x + 1) is (x + 1)
    assert Expr((x + 1).rep) is (x + 1)
    assert (x + 1) == (x + 1)
    assert (x + 1) != (1 + x)
    assert isinstance((x + 1).rep, Tree)
    raises(TypeError, lambda: Expr(1))  # type: ignore


def test_variable_identity() -> None:
    """Variables with the same name are different."""
    x1 = variable("x")
    x2 = variable("x")
    assert x1 is not x2
    assert x1.name == x2.name == "x"
    assert str(x1) == "x"
    assert x1.type is Real
    assert variable("z", Complex).type is Complex


def test_constant() -> None:
    """Literals are normalised and typed."""
    assert constant(2).value == 2.0
    assert type(constant(2).value) is float
    assert constant(2).type is Real
    assert constant(2j).type is Complex
    assert constant(True).type is Boolean
    assert constant(2, Complex).value == 2 + 0j
    assert constant(-0.0) is constant(0.0)
    assert constant(math.nan) is constant(float("nan"))
    assert constant(complex(math.nan, 1)) is constant(complex(1, math.nan))
    assert constant(True) is not constant(1)

    raises(ExpressifyError, lambda: constant("x"))
    raises(ExpressifyError, lambda: constant(1j, Real))
    raises(ExpressifyError, lambda: constant(1, Boolean))
    raises(ExpressifyError, lambda: constant(True, Real))


def test_expressify() -> None:
    """Python numbers become constants, expressions pass through."""
    x = variable("x")
    assert expressify(x) is x
    assert expressify(3) is constant(3.0)
    raises(ExpressifyError, lambda: expressify("x"))
    raises(TypeError, lambda: x + "x")  # type: ignore


def test_kinds_and_accessors() -> None:
    """Each node kind exposes its parts."""
    x = variable("x")
    y = variable("y")
    z = variable("z", Complex)
    b = variable("b", Boolean)

    assert constant(1).kind == "Constant"
    assert x.kind == "Parameter"

    neg = -x
    assert neg.kind == "UnaryOp"
    assert neg.op == "Negate"
    assert neg.operand is x
    assert neg.args == (x,)

    product = x * y
    assert product.kind == "BinaryOp"
    assert product.op == "Multiply"
    assert product.left is x
    assert product.right is y
    assert product.type is Real

    conv = convert(x, Complex)
    assert conv.kind == "UnaryOp"
    assert conv.op == "Convert"
    assert conv.target is Complex
    assert conv.type is Complex

    sin_x = call(math_sin, x)
    assert sin_x.kind == "Call"
    assert sin_x.function is math_sin
    assert sin_x.args == (x,)

    pi = member(None, math_pi)
    assert pi.kind == "MemberOf"
    assert pi.member is math_pi
    assert pi.object is None
    assert pi.args == ()

    re_z = member(z, real_part)
    assert re_z.object is z
    assert re_z.type is Real

    cond = conditional(b, x, y)
    assert cond.kind == "Conditional"
    assert cond.test is b
    assert cond.consequent is x
    assert cond.alternative is y

    raises(AttributeError, lambda: x.value)
    raises(AttributeError, lambda: constant(1).name)
    raises(AttributeError, lambda: x.op)
    raises(AttributeError, lambda: x.left)
    raises(AttributeError, lambda: product.operand)
    raises(AttributeError, lambda: product.function)
    raises(AttributeError, lambda: sin_x.member)
    raises(AttributeError, lambda: x.object)
    raises(AttributeError, lambda: x.head)
    raises(AttributeError, lambda: sin_x.target)


def test_repr() -> None:
    """The text form is inert and fully parenthesised."""
    x = variable("x")
    y = variable("y")
    z = variable("z", Complex)
    b = variable("b", Boolean)

    assert repr(x + 1) == "(x + 1)"
    assert repr(x - y * 2) == "(x - (y*2))"
    assert repr(x / y) == "(x/y)"
    assert repr(x**2) == "(x^2)"
    assert repr(-x) == "-x"
    assert repr(~b) == "!b"
    assert repr(b & b) == "(b and b)"
    assert repr(b | ~b) == "(b or !b)"
    assert repr(b ^ b) == "(b xor b)"
    assert repr(x * z) == "(Complex(x)*z)"
    assert repr(call(math_sin, x)) == "math.sin(x)"
    assert repr(member(None, math_pi)) == "math.pi"
    assert repr(member(z, real_part)) == "z.real"
    assert repr(conditional(b, x, y)) == "(x if b else y)"
    assert repr(constant(math.pi)) == "π"
    assert repr(constant(math.nan)) == "NaN"
    assert repr(constant(True)) == "true"
    assert repr(constant(2 - 1j)) == "2-i"
    assert repr(equal(x, 1)) == "(x == 1)"
    assert repr(greater_than(x, y)) == "(x > y)"
    assert repr(less_or_equal(1, x)) == "(1 <= x)"
    assert str(x + 1) == repr(x + 1)


def test_widening() -> None:
    """Real operands widen to Complex with an explicit conversion."""
    x = variable("x")
    z = variable("z", Complex)

    assert widen(x, Real) is x
    assert widen(x, Complex) is convert(x, Complex)
    raises(TypeError, lambda: widen(z, Real))

    assert unify(x, z) == (convert(x, Complex), z)
    assert unify(z, x) == (z, convert(x, Complex))
    assert unify(x, x) == (x, x)
    raises(TypeError, lambda: unify(x, constant(True)))

    assert (z + 1).right is convert(constant(1), Complex)
    assert (2 * z).type is Complex
    assert equal(z, x).right is convert(x, Complex)


def test_constructors_type_checks() -> None:
    """Constructors reject operands of the wrong types."""
    x = variable("x")
    z = variable("z", Complex)
    b = variable("b", Boolean)

    raises(TypeError, lambda: binary("Add", x, z))
    raises(TypeError, lambda: binary("Add", b, b))
    raises(TypeError, lambda: binary("And", x, x))
    raises(TypeError, lambda: binary("LessThan", z, z))
    raises(ValueError, lambda: binary("Modulo", x, x))
    raises(TypeError, lambda: negate(b))
    raises(TypeError, lambda: logical_not(x))
    raises(TypeError, lambda: convert(b, Complex))
    raises(TypeError, lambda: convert(x, Boolean))
    raises(TypeError, lambda: call(math_sin, z))
    raises(TypeError, lambda: call(math_sin, x, x))
    raises(TypeError, lambda: member(x, math_pi))
    raises(TypeError, lambda: member(x, real_part))
    raises(TypeError, lambda: member(None, real_part))
    raises(TypeError, lambda: conditional(x, x, x))
    raises(TypeError, lambda: conditional(b, x, z))
    raises(TypeError, lambda: block())

    assert binary("Equal", z, z).type is Boolean
    assert binary("Xor", b, b).type is Boolean


def test_constant_value() -> None:
    """constant_value looks through conversions only."""
    x = variable("x")
    assert constant(2).constant_value() == 2.0
    assert convert(constant(2), Complex).constant_value() == 2.0
    assert constant(False).constant_value() is False
    assert x.constant_value() is None
    assert (-constant(2)).constant_value() is None
    assert member(None, math_pi).constant_value() is None


def test_block_and_loop() -> None:
    """Block and Loop nodes can be built but are not otherwise supported."""
    x = variable("x")
    blk = block(x, x + 1)
    assert blk.kind == "Block"
    assert blk.type is Real
    assert repr(blk) == "block(x; (x + 1))"
    lp = loop(x)
    assert lp.kind == "Loop"
    assert repr(lp) == "loop(x)"

    raises(UnsupportedNodeKindError, lambda: Expr(Tree(x.rep, x.rep)).type)


def test_xreplace() -> None:
    """Simultaneous replacement of subexpressions."""
    x = variable("x")
    y = variable("y")
    expr = x * y + x
    assert expr.xreplace({x: y}) is y * y + y
    assert expr.xreplace({x: y, y: x}) is y * x + y
    assert expr.xreplace({x * y: 2}) is 2 + x
    assert expr.xreplace({}) is expr
