import math

from symscope.core.atom import AtomType
from symscope.core.evaluate import Evaluator
from symscope.core.exceptions import NoEvaluationRuleError
from symscope.core.tree import Tr, Tree
from pytest import raises


def test_Evaluator() -> None:
    """Test defining and using a simple Evaluator."""
    RealValue = AtomType("Real", float)
    Function = AtomType("Function", str)
    Name = AtomType("Name", str)
    one = Tr(RealValue(1.0))
    two = Tr(RealValue(2.0))
    cos = Tr(Function("cos"))
    sin = Tr(Function("sin"))
    Pow = Tr(Function("Pow"))
    Add = Tr(Function("Add"))
    x = Tr(Name("x"))

    eval_f64 = Evaluator[float]()
    eval_f64.add_atom(RealValue, float)
    eval_f64.add_op1(cos, math.cos)
    eval_f64.add_op1(sin, math.sin)
    eval_f64.add_op2(Pow, pow)
    eval_f64.add_opn(Add, math.fsum)

    test_cases: list[tuple[Tree, dict[Tree, float], float]] = [
        (sin(cos(one)), {}, 0.5143952585235492),
        (sin(cos(x)), {x: 1.0}, 0.5143952585235492),
        (Add(Pow(sin(one), two), Pow(cos(one), two)), {}, 1.0),
    ]

    # Test __call__ for which vals is optional
    for expr, vals, expected in test_cases:
        assert eval_f64(expr, vals) == expected
        assert eval_f64.evaluate(expr, vals) == expected
        if vals == {}:
            assert eval_f64(expr) == expected


def test_Evaluator_generic_rules() -> None:
    """Unknown atoms and heads need generic rules."""
    Function = AtomType("Function", str)
    Name = AtomType("Name", str)
    f, g = Tr(Function("f")), Tr(Function("g"))
    x, y = Tr(Name("x")), Tr(Name("y"))

    f2g = Evaluator[Tree]()
    f2g.add_opn(f, lambda args: g(*args))
    expr = f(g(x, f(y)), y)

    # We need a rule for unknown atoms:
    raises(NoEvaluationRuleError, lambda: f2g(expr))
    f2g.add_atom_generic(lambda atom: atom)

    # We need a rule for unknown heads:
    raises(NoEvaluationRuleError, lambda: f2g(expr))
    f2g.add_op_generic(lambda head, args: head(*args))

    # Now it should work:
    assert f2g(expr) == g(g(x, g(y)), y)


def test_Evaluator_repeated_subexpressions() -> None:
    """Each distinct subexpression is evaluated once."""
    Function = AtomType("Function", str)
    Name = AtomType("Name", str)
    f, g = Tr(Function("f")), Tr(Function("g"))
    x = Tr(Name("x"))

    calls: list[int] = []

    def count(value: int) -> int:
        calls.append(value)
        return value + 1

    counter = Evaluator[int]()
    counter.add_op1(f, count)
    counter.add_op2(g, lambda a, b: a + b)
    expr = g(f(x), f(x))
    assert counter(expr, {x: 1}) == 4
    assert calls == [1]
