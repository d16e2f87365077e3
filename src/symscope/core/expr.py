"""The expression model.

An :class:`Expr` is an immutable node of an abstract syntax tree. It wraps a
hash-consed :class:`symscope.core.tree.Tree` so two expressions are
structurally equal exactly when they are the same object and ``==`` is cheap.

>>> from symscope.core.expr import Complex, variable
>>> x = variable('x')
>>> y = variable('y')
>>> x + 1
(x + 1)
>>> (x + 1) is (x + 1)
True
>>> x * y + x
((x*y) + x)
>>> (x * y).kind
'BinaryOp'

Expressions are inert: building ``x + x`` does not combine anything. Mixing a
``Real`` and a ``Complex`` operand inserts an explicit conversion:

>>> z = variable('z', Complex)
>>> x * z
(Complex(x)*z)
>>> (x * z).type
Complex

Variables are identified by reference rather than by name:

>>> variable('x') is x
False
"""
from __future__ import annotations

import cmath
import math
from functools import wraps
from typing import TYPE_CHECKING as _TYPE_CHECKING
from typing import Any, Callable, Optional, Sequence, Union
from weakref import WeakValueDictionary as _WeakDict

from symscope.core.atom import AtomType
from symscope.core.evaluate import Evaluator
from symscope.core.exceptions import ExpressifyError, UnsupportedNodeKindError
from symscope.core.formatting import format_complex, format_real
from symscope.core.tree import SubsFunc, Tr, Tree

if _TYPE_CHECKING:
    from symscope.engine.scope import Scope

    Expressifiable = Union["Expr", bool, int, float, complex]
    ExprBinOp = Callable[["Expr", "Expr"], "Expr"]
    ExpressifyBinOp = Callable[["Expr", Expressifiable], "Expr"]


__all__ = [
    "Expr",
    "ValueType",
    "Real",
    "Complex",
    "Boolean",
    "Parameter",
    "FunctionRef",
    "MemberRef",
    "expressify",
    "constant",
    "variable",
    "negate",
    "logical_not",
    "convert",
    "widen",
    "unify",
    "binary",
    "call",
    "member",
    "conditional",
    "block",
    "loop",
    "equal",
    "not_equal",
    "greater_than",
    "greater_or_equal",
    "less_than",
    "less_or_equal",
]


class ValueType:
    """A representation of values: ``Real``, ``Complex`` or ``Boolean``.

    :ivar name: The name of the representation.
    :ivar pytype: The Python type of literals of this representation.
    """

    __slots__ = ("name", "pytype", "rank")

    name: str
    pytype: type
    rank: Optional[int]

    def __init__(self, name: str, pytype: type, rank: Optional[int]):
        """Create a representation. Only numeric ones have a ``rank``."""
        self.name = name
        self.pytype = pytype
        self.rank = rank

    def __repr__(self) -> str:
        """The name e.g. ``Real``."""
        return self.name

    @property
    def numeric(self) -> bool:
        """Whether arithmetic is defined for this representation."""
        return self.rank is not None

    def widens_to(self, other: ValueType) -> bool:
        """Whether values convert implicitly (without loss) to ``other``.

        >>> from symscope.core.expr import Real, Complex, Boolean
        >>> Real.widens_to(Complex)
        True
        >>> Complex.widens_to(Real)
        False
        >>> Boolean.widens_to(Real)
        False
        """
        if self.rank is None or other.rank is None:
            return False
        return self.rank < other.rank


Real = ValueType("Real", float, 0)
Complex = ValueType("Complex", complex, 1)
Boolean = ValueType("Boolean", bool, None)


class Parameter:
    """The identity of a variable.

    Two :class:`Parameter` objects are different even if their names and
    types agree.
    """

    __slots__ = ("name", "type")

    name: str
    type: ValueType

    def __init__(self, name: str, typ: ValueType):
        """Create a new parameter identity."""
        self.name = name
        self.type = typ

    def __repr__(self) -> str:
        """Explicit form e.g. ``Parameter('x', Real)``."""
        return f"Parameter({self.name!r}, {self.type})"

    def __str__(self) -> str:
        """The name."""
        return self.name


class FunctionRef:
    """A concrete function implemented for particular parameter types.

    :ivar name: The display name e.g. ``"math.sin"``.
    :ivar param_types: The :class:`ValueType` of each parameter.
    :ivar result_type: The :class:`ValueType` of the result.
    :ivar func: The Python callable implementing the function.
    """

    __slots__ = ("name", "param_types", "result_type", "func")

    name: str
    param_types: tuple[ValueType, ...]
    result_type: ValueType
    func: Callable[..., Any]

    def __init__(
        self,
        name: str,
        param_types: Sequence[ValueType],
        result_type: ValueType,
        func: Callable[..., Any],
    ):
        """Create a new function reference."""
        self.name = name
        self.param_types = tuple(param_types)
        self.result_type = result_type
        self.func = func

    def __repr__(self) -> str:
        """Explicit form e.g. ``FunctionRef('math.sin')``."""
        return f"FunctionRef({self.name!r})"

    def __str__(self) -> str:
        """The name."""
        return self.name


class MemberRef:
    """A well-known property read from a value or a module.

    :ivar name: The display name e.g. ``"math.pi"`` or ``"real"``.
    :ivar owner: The type of the object read from or ``None`` if static.
    :ivar type: The :class:`ValueType` of the member.
    :ivar func: Callable computing the member (from the object if any).
    """

    __slots__ = ("name", "owner", "type", "func")

    name: str
    owner: Optional[ValueType]
    type: ValueType
    func: Callable[..., Any]

    def __init__(
        self,
        name: str,
        owner: Optional[ValueType],
        typ: ValueType,
        func: Callable[..., Any],
    ):
        """Create a new member reference."""
        self.name = name
        self.owner = owner
        self.type = typ
        self.func = func

    def __repr__(self) -> str:
        """Explicit form e.g. ``MemberRef('math.pi')``."""
        return f"MemberRef({self.name!r})"

    def __str__(self) -> str:
        """The name."""
        return self.name


#
# Atoms at the leaves and heads of the trees.
#
RealValue = AtomType("Real", float)
ComplexValue = AtomType("Complex", complex)
BooleanValue = AtomType("Boolean", bool)
ParameterAtom = AtomType("Parameter", Parameter)
Operator = AtomType("Operator", str)
ConvertTo = AtomType("Convert", ValueType)
FunctionAtom = AtomType("Function", FunctionRef)
MemberAtom = AtomType("Member", MemberRef)

_LITERAL_TYPES: dict[AtomType[Any], ValueType] = {
    RealValue: Real,
    ComplexValue: Complex,
    BooleanValue: Boolean,
}
_LITERAL_ATOMS: dict[ValueType, AtomType[Any]] = {
    Real: RealValue,
    Complex: ComplexValue,
    Boolean: BooleanValue,
}

#
# Node kinds.
#
CONSTANT = "Constant"
PARAMETER = "Parameter"
UNARY = "UnaryOp"
BINARY = "BinaryOp"
CALL = "Call"
MEMBER = "MemberOf"
CONDITIONAL = "Conditional"
BLOCK = "Block"
LOOP = "Loop"
UNKNOWN = "Unknown"

SUPPORTED_KINDS = frozenset(
    [CONSTANT, PARAMETER, UNARY, BINARY, CALL, MEMBER, CONDITIONAL]
)

UNARY_OPS = ("Negate", "Not")
ARITHMETIC_OPS = ("Add", "Subtract", "Multiply", "Divide", "Power")
LOGICAL_OPS = ("And", "Or", "Xor")
EQUALITY_OPS = ("Equal", "NotEqual")
ORDERING_OPS = ("GreaterThan", "GreaterOrEqual", "LessThan", "LessOrEqual")
BINARY_OPS = ARITHMETIC_OPS + LOGICAL_OPS + EQUALITY_OPS + ORDERING_OPS

HEADS: dict[str, Tree] = {
    name: Tr(Operator(name))
    for name in UNARY_OPS + BINARY_OPS + (CONDITIONAL, BLOCK, LOOP)
}
CONVERT_HEADS: dict[ValueType, Tree] = {
    typ: Tr(ConvertTo(typ)) for typ in (Real, Complex)
}

_HEAD_KINDS: dict[Tree, str] = {HEADS[name]: UNARY for name in UNARY_OPS}
_HEAD_KINDS.update({HEADS[name]: BINARY for name in BINARY_OPS})
_HEAD_KINDS.update({HEADS[name]: name for name in (CONDITIONAL, BLOCK, LOOP)})


def node_kind(rep: Tree) -> str:
    """The node kind of an expression tree (``UNKNOWN`` if not one)."""
    children = rep.children
    if not children:
        atom_type = rep.value.atom_type
        if atom_type is ParameterAtom:
            return PARAMETER
        elif atom_type in _LITERAL_TYPES:
            return CONSTANT
        return UNKNOWN

    head = children[0]
    kind = _HEAD_KINDS.get(head)
    if kind is not None:
        return kind
    elif head.children:
        return UNKNOWN

    atom_type = head.value.atom_type
    if atom_type is ConvertTo:
        return UNARY
    elif atom_type is FunctionAtom:
        return CALL
    elif atom_type is MemberAtom:
        return MEMBER
    return UNKNOWN


_NAN = float("nan")
_COMPLEX_NAN = complex(_NAN, _NAN)


def _normalise(value: Any, typ: ValueType) -> Any:
    """Coerce a literal value to the canonical Python value for ``typ``."""
    if typ is Boolean:
        if not isinstance(value, bool):
            raise ExpressifyError(f"Not a Boolean value: {value!r}")
        return value
    elif isinstance(value, bool) or not isinstance(value, (int, float, complex)):
        raise ExpressifyError(f"Not a numeric value: {value!r}")
    elif typ is Real:
        if isinstance(value, complex):
            raise ExpressifyError(f"Not a Real value: {value!r}")
        real = float(value)
        if math.isnan(real):
            return _NAN
        # Adding 0.0 turns -0.0 into 0.0.
        return real + 0.0
    else:
        comp = complex(value)
        if cmath.isnan(comp):
            return _COMPLEX_NAN
        return complex(comp.real + 0.0, comp.imag + 0.0)


def expressify(obj: Any) -> Expr:
    """Convert a Python number or bool to a constant :class:`Expr`.

    >>> from symscope.core.expr import expressify
    >>> expressify(2)
    2
    >>> expressify(2).type
    Real
    >>> expressify(1j).type
    Complex
    >>> one = expressify(1)
    >>> expressify(one) is one
    True
    """
    if isinstance(obj, Expr):
        return obj
    return constant(obj)


def expressify_other(method: ExprBinOp) -> ExpressifyBinOp:
    """Call ``expressify`` on operands in ``__add__`` etc."""

    @wraps(method)
    def expressify_method(self: Expr, other: Expressifiable) -> Expr:
        if not isinstance(other, Expr):
            try:
                other = expressify(other)
            except ExpressifyError:
                return NotImplemented
        return method(self, other)

    return expressify_method


class Expr:
    """Immutable expression node.

    An :class:`Expr` is made by the constructor functions of this module
    (:func:`constant`, :func:`variable`, :func:`binary`, :func:`call` and so
    on) or with Python operators. ``Expr(tree)`` wraps an existing
    :class:`Tree` and returns the unique :class:`Expr` for it.

    See Also
    --------
    kind
    type
    simplify
    diff
    """

    __slots__ = ("__weakref__", "rep", "_type")

    rep: Tree
    _type: Optional[ValueType]

    _all_expressions: _WeakDict[Tree, Expr] = _WeakDict()

    def __new__(cls, rep: Tree) -> Expr:
        """Return the unique :class:`Expr` wrapping ``rep``."""
        if not isinstance(rep, Tree):
            raise TypeError("First argument to Expr should be Tree")

        previous = cls._all_expressions.get(rep)
        if previous is not None:
            return previous

        obj = object.__new__(cls)
        obj.rep = rep
        obj._type = None

        return cls._all_expressions.setdefault(rep, obj)

    def __repr__(self) -> str:
        """Inert, fully parenthesised text form."""
        return eval_repr(self.rep)

    __str__ = __repr__

    @property
    def kind(self) -> str:
        """The node kind e.g. ``'Constant'`` or ``'BinaryOp'``."""
        return node_kind(self.rep)

    @property
    def type(self) -> ValueType:
        """The :class:`ValueType` of the value of this expression."""
        typ = self._type
        if typ is None:
            typ = self._type = _infer_type(self)
        return typ

    @property
    def args(self) -> tuple[Expr, ...]:
        """The operands (empty for constants and variables)."""
        return tuple(Expr(c) for c in self.rep.children[1:])

    @property
    def head(self) -> Tree:
        """The head :class:`Tree` of a compound node."""
        return self._compound().children[0]

    @property
    def op(self) -> str:
        """The operator name of a ``UnaryOp`` or ``BinaryOp``.

        ``Convert`` nodes have the operator ``'Convert'``.
        """
        kind = self.kind
        if kind not in (UNARY, BINARY):
            raise AttributeError(f"{kind} node has no operator")
        atom = self.head.value
        if atom.atom_type is ConvertTo:
            return "Convert"
        return atom.value

    @property
    def value(self) -> Any:
        """The Python value of a ``Constant``."""
        if self.kind != CONSTANT:
            raise AttributeError(f"{self.kind} node has no value")
        return self.rep.value.value

    @property
    def parameter(self) -> Parameter:
        """The :class:`Parameter` identity of a variable."""
        if self.kind != PARAMETER:
            raise AttributeError(f"{self.kind} node has no parameter")
        return self.rep.value.value

    @property
    def name(self) -> str:
        """The name of a variable."""
        return self.parameter.name

    @property
    def operand(self) -> Expr:
        """The operand of a ``UnaryOp``."""
        return self._arg(UNARY, 0)

    @property
    def target(self) -> ValueType:
        """The target type of a conversion."""
        atom = self.head.value
        if atom.atom_type is not ConvertTo:
            raise AttributeError("Not a conversion")
        return atom.value

    @property
    def left(self) -> Expr:
        """The left operand of a ``BinaryOp``."""
        return self._arg(BINARY, 0)

    @property
    def right(self) -> Expr:
        """The right operand of a ``BinaryOp``."""
        return self._arg(BINARY, 1)

    @property
    def function(self) -> FunctionRef:
        """The :class:`FunctionRef` of a ``Call``."""
        if self.kind != CALL:
            raise AttributeError(f"{self.kind} node has no function")
        return self.head.value.value

    @property
    def member(self) -> MemberRef:
        """The :class:`MemberRef` of a ``MemberOf`` node."""
        if self.kind != MEMBER:
            raise AttributeError(f"{self.kind} node has no member")
        return self.head.value.value

    @property
    def object(self) -> Optional[Expr]:
        """The object a member is read from (``None`` for static members)."""
        if self.kind != MEMBER:
            raise AttributeError(f"{self.kind} node has no object")
        children = self.rep.children
        return Expr(children[1]) if len(children) > 1 else None

    @property
    def test(self) -> Expr:
        """The test of a ``Conditional``."""
        return self._arg(CONDITIONAL, 0)

    @property
    def consequent(self) -> Expr:
        """The value of a ``Conditional`` when the test holds."""
        return self._arg(CONDITIONAL, 1)

    @property
    def alternative(self) -> Expr:
        """The value of a ``Conditional`` when the test fails."""
        return self._arg(CONDITIONAL, 2)

    def _compound(self) -> Tree:
        rep = self.rep
        if not rep.children:
            raise AttributeError(f"{self.kind} node has no head")
        return rep

    def _arg(self, kind: str, index: int) -> Expr:
        if self.kind != kind:
            raise AttributeError(f"Not a {kind} node: {self!r}")
        return Expr(self.rep.children[index + 1])

    def constant_value(self) -> Any:
        """The literal value looking through conversions, else ``None``.

        >>> from symscope.core.expr import Complex, constant, convert, variable
        >>> convert(constant(2.0), Complex).constant_value()
        2.0
        >>> variable('x').constant_value() is None
        True
        """
        rep = self.rep
        while rep.children:
            head = rep.children[0]
            if head.children or head.value.atom_type is not ConvertTo:
                return None
            rep = rep.children[1]
        atom = rep.value
        if atom.atom_type in _LITERAL_TYPES:
            return atom.value
        return None

    def xreplace(self, reps: dict[Any, Any]) -> Expr:
        """Replace subexpressions simultaneously.

        >>> from symscope.core.expr import variable
        >>> x, y = variable('x'), variable('y')
        >>> e = x * y + x
        >>> e.xreplace({x: y})
        ((y*y) + y)
        >>> e.xreplace({x * y: 2, x: y})
        (2 + y)

        Replacements are not type checked.
        """
        old = [expressify(k).rep for k in reps]
        new = [expressify(v).rep for v in reps.values()]
        return Expr(SubsFunc(self.rep, old).call(new))

    def simplify(self, scope: Optional[Scope] = None) -> Expr:
        """Simplify this expression.

        >>> from symscope.core.expr import variable
        >>> x = variable('x')
        >>> (x + x).simplify()
        (2*x)
        """
        from symscope.engine.simplify import simplify

        return simplify(self, scope)

    def diff(
        self, variable: Expr, ntimes: int = 1, scope: Optional[Scope] = None
    ) -> Expr:
        """Differentiate with respect to ``variable`` (``ntimes`` times).

        >>> from symscope.core.expr import variable
        >>> x = variable('x')
        >>> (x**3).diff(x)
        (3*(x^2))
        >>> (x**3).diff(x, 3)
        6
        """
        from symscope.engine.derivative import derivative

        deriv = self
        for _ in range(ntimes):
            deriv = derivative(deriv, variable, scope=scope)
        return deriv

    def to_sympy(self, scope: Optional[Scope] = None) -> Any:
        """Convert to a SymPy expression.

        >>> from symscope.core.expr import variable
        >>> x = variable('x')
        >>> (x**2 + 1).to_sympy()
        x**2 + 1
        """
        from symscope.engine.sympy_conversions import to_sympy

        return to_sympy(self, scope)

    @classmethod
    def from_sympy(
        cls, expr: Any, variables: Sequence[Expr] = (), scope: Optional[Scope] = None
    ) -> Expr:
        """Convert a SymPy expression.

        >>> from sympy import Symbol, cos
        >>> from symscope.core.expr import Expr, variable
        >>> x = variable('x')
        >>> Expr.from_sympy(cos(Symbol('x')), [x])
        math.cos(x)
        """
        from symscope.engine.sympy_conversions import from_sympy

        return from_sympy(expr, variables, scope)

    def __pos__(self) -> Expr:
        """+Expr -> Expr."""
        return self

    def __neg__(self) -> Expr:
        """-Expr -> Expr."""
        return negate(self)

    def __invert__(self) -> Expr:
        """~Expr -> logical negation of a Boolean Expr."""
        return logical_not(self)

    @expressify_other
    def __add__(self, other: Expr) -> Expr:
        """Expr + Expr -> Expr."""
        return binary("Add", *unify(self, other))

    @expressify_other
    def __radd__(self, other: Expr) -> Expr:
        """Expr + Expr -> Expr."""
        return binary("Add", *unify(other, self))

    @expressify_other
    def __sub__(self, other: Expr) -> Expr:
        """Expr - Expr -> Expr."""
        return binary("Subtract", *unify(self, other))

    @expressify_other
    def __rsub__(self, other: Expr) -> Expr:
        """Expr - Expr -> Expr."""
        return binary("Subtract", *unify(other, self))

    @expressify_other
    def __mul__(self, other: Expr) -> Expr:
        """Expr * Expr -> Expr."""
        return binary("Multiply", *unify(self, other))

    @expressify_other
    def __rmul__(self, other: Expr) -> Expr:
        """Expr * Expr -> Expr."""
        return binary("Multiply", *unify(other, self))

    @expressify_other
    def __truediv__(self, other: Expr) -> Expr:
        """Expr / Expr -> Expr."""
        return binary("Divide", *unify(self, other))

    @expressify_other
    def __rtruediv__(self, other: Expr) -> Expr:
        """Expr / Expr -> Expr."""
        return binary("Divide", *unify(other, self))

    @expressify_other
    def __pow__(self, other: Expr) -> Expr:
        """Expr ** Expr -> Expr."""
        return binary("Power", *unify(self, other))

    @expressify_other
    def __rpow__(self, other: Expr) -> Expr:
        """Expr ** Expr -> Expr."""
        return binary("Power", *unify(other, self))

    @expressify_other
    def __and__(self, other: Expr) -> Expr:
        """Expr & Expr -> logical and of Boolean expressions."""
        return binary("And", self, other)

    @expressify_other
    def __or__(self, other: Expr) -> Expr:
        """Expr | Expr -> logical or of Boolean expressions."""
        return binary("Or", self, other)

    @expressify_other
    def __xor__(self, other: Expr) -> Expr:
        """Expr ^ Expr -> exclusive or of Boolean expressions."""
        return binary("Xor", self, other)


def _infer_type(expr: Expr) -> ValueType:
    kind = expr.kind
    if kind == CONSTANT:
        return _LITERAL_TYPES[expr.rep.value.atom_type]
    elif kind == PARAMETER:
        return expr.parameter.type
    elif kind == UNARY:
        op = expr.op
        if op == "Convert":
            return expr.target
        elif op == "Not":
            return Boolean
        return expr.operand.type
    elif kind == BINARY:
        if expr.op in ARITHMETIC_OPS:
            return expr.left.type
        return Boolean
    elif kind == CALL:
        return expr.function.result_type
    elif kind == MEMBER:
        return expr.member.type
    elif kind == CONDITIONAL:
        return expr.consequent.type
    elif kind in (BLOCK, LOOP):
        return expr.args[-1].type
    raise UnsupportedNodeKindError(f"Not an expression: {expr.rep!r}", expr.rep)


# ------------------------------------------------------------------------- #
#                                                                           #
#     Constructors                                                          #
#                                                                           #
# ------------------------------------------------------------------------- #


def constant(value: Any, typ: Optional[ValueType] = None) -> Expr:
    """Make a literal constant.

    The type is taken from the Python type of ``value`` unless given:

    >>> from symscope.core.expr import Complex, constant
    >>> constant(2)
    2
    >>> constant(2).value
    2.0
    >>> constant(2, Complex).value
    (2+0j)
    >>> constant(True).type
    Boolean
    >>> constant(-0.0) is constant(0.0)
    True
    """
    if typ is None:
        if isinstance(value, bool):
            typ = Boolean
        elif isinstance(value, complex):
            typ = Complex
        elif isinstance(value, (int, float)):
            typ = Real
        else:
            raise ExpressifyError(f"Cannot make a constant from {value!r}")
    atom_type = _LITERAL_ATOMS[typ]
    return Expr(Tr(atom_type(_normalise(value, typ))))


def variable(name: str, typ: ValueType = Real) -> Expr:
    """Make a new variable (a fresh identity every call)."""
    return Expr(Tr(ParameterAtom(Parameter(name, typ))))


def _check_numeric(expr: Expr, what: str) -> None:
    if not expr.type.numeric:
        raise TypeError(f"{what} needs a numeric operand, got {expr.type}")


def negate(operand: Expr) -> Expr:
    """Arithmetic negation."""
    _check_numeric(operand, "Negate")
    return Expr(HEADS["Negate"](operand.rep))


def logical_not(operand: Expr) -> Expr:
    """Logical negation of a Boolean expression."""
    if operand.type is not Boolean:
        raise TypeError(f"Not needs a Boolean operand, got {operand.type}")
    return Expr(HEADS["Not"](operand.rep))


def convert(operand: Expr, typ: ValueType) -> Expr:
    """Explicit conversion between the numeric types."""
    _check_numeric(operand, "Convert")
    head = CONVERT_HEADS.get(typ)
    if head is None:
        raise TypeError(f"Cannot convert to {typ}")
    return Expr(head(operand.rep))


def widen(expr: Expr, typ: ValueType) -> Expr:
    """Return ``expr`` as ``typ`` inserting a widening conversion if needed.

    >>> from symscope.core.expr import Complex, widen, variable
    >>> x = variable('x')
    >>> widen(x, Complex)
    Complex(x)
    """
    if expr.type is typ:
        return expr
    elif expr.type.widens_to(typ):
        return convert(expr, typ)
    raise TypeError(f"Cannot implicitly convert {expr.type} to {typ}")


def unify(left: Expr, right: Expr) -> tuple[Expr, Expr]:
    """Widen the lower of two operands to the type of the other."""
    ltype, rtype = left.type, right.type
    if ltype is rtype:
        return left, right
    elif ltype.widens_to(rtype):
        return convert(left, rtype), right
    elif rtype.widens_to(ltype):
        return left, convert(right, ltype)
    raise TypeError(f"Incompatible operand types {ltype} and {rtype}")


def binary(op: str, left: Expr, right: Expr) -> Expr:
    """Make a ``BinaryOp`` node. Both operands must have the same type.

    >>> from symscope.core.expr import binary, constant, variable
    >>> x = variable('x')
    >>> binary('Multiply', constant(2), x)
    (2*x)
    """
    if op not in BINARY_OPS:
        raise ValueError(f"Unknown binary operator {op!r}")
    ltype, rtype = left.type, right.type
    if ltype is not rtype:
        raise TypeError(f"Operands of {op} have different types {ltype}, {rtype}")
    elif op in ARITHMETIC_OPS:
        _check_numeric(left, op)
    elif op in LOGICAL_OPS and ltype is not Boolean:
        raise TypeError(f"{op} needs Boolean operands, got {ltype}")
    elif op in ORDERING_OPS and ltype is not Real:
        raise TypeError(f"{op} needs Real operands, got {ltype}")
    return Expr(HEADS[op](left.rep, right.rep))


def call(function: FunctionRef, *args: Expr) -> Expr:
    """Make a ``Call`` node. The argument types must match exactly."""
    if len(args) != len(function.param_types):
        raise TypeError(
            f"{function.name} takes {len(function.param_types)} arguments"
            f" but {len(args)} were given"
        )
    for arg, typ in zip(args, function.param_types):
        if arg.type is not typ:
            raise TypeError(f"{function.name} expects {typ}, got {arg.type}")
    head = Tr(FunctionAtom(function))
    return Expr(head(*[arg.rep for arg in args]))


def member(obj: Optional[Expr], ref: MemberRef) -> Expr:
    """Make a ``MemberOf`` node (``obj`` is ``None`` for a static member)."""
    head = Tr(MemberAtom(ref))
    if ref.owner is None:
        if obj is not None:
            raise TypeError(f"{ref.name} is a static member")
        return Expr(head())
    elif obj is None or obj.type is not ref.owner:
        raise TypeError(f"{ref.name} needs an object of type {ref.owner}")
    return Expr(head(obj.rep))


def conditional(test: Expr, consequent: Expr, alternative: Expr) -> Expr:
    """Make a ``Conditional`` node."""
    if test.type is not Boolean:
        raise TypeError(f"Conditional test should be Boolean, got {test.type}")
    elif consequent.type is not alternative.type:
        raise TypeError("Conditional branches should have the same type")
    return Expr(HEADS[CONDITIONAL](test.rep, consequent.rep, alternative.rep))


def block(*exprs: Expr) -> Expr:
    """Make a ``Block`` node (outside the supported sublanguage)."""
    if not exprs:
        raise TypeError("A block needs at least one expression")
    return Expr(HEADS[BLOCK](*[e.rep for e in exprs]))


def loop(body: Expr) -> Expr:
    """Make a ``Loop`` node (outside the supported sublanguage)."""
    return Expr(HEADS[LOOP](body.rep))


def _comparison(op: str) -> Callable[[Any, Any], Expr]:
    def compare(left: Any, right: Any) -> Expr:
        return binary(op, *unify(expressify(left), expressify(right)))

    compare.__name__ = op
    compare.__doc__ = f"Make a {op} comparison widening the operands."
    return compare


equal = _comparison("Equal")
not_equal = _comparison("NotEqual")
greater_than = _comparison("GreaterThan")
greater_or_equal = _comparison("GreaterOrEqual")
less_than = _comparison("LessThan")
less_or_equal = _comparison("LessOrEqual")


# ------------------------------------------------------------------------- #
#                                                                           #
#     eval_repr: inert text form                                            #
#                                                                           #
# ------------------------------------------------------------------------- #

_BINARY_FORMATS = {
    "Add": "({} + {})",
    "Subtract": "({} - {})",
    "Multiply": "({}*{})",
    "Divide": "({}/{})",
    "Power": "({}^{})",
    "And": "({} and {})",
    "Or": "({} or {})",
    "Xor": "({} xor {})",
    "Equal": "({} == {})",
    "NotEqual": "({} != {})",
    "GreaterThan": "({} > {})",
    "GreaterOrEqual": "({} >= {})",
    "LessThan": "({} < {})",
    "LessOrEqual": "({} <= {})",
}


def _repr_generic(head: Tree, args: Sequence[str]) -> str:
    atom = head.value
    if atom.atom_type is ConvertTo:
        return f"{atom.value}({args[0]})"
    elif atom.atom_type is MemberAtom:
        return f"{args[0]}.{atom.value}" if args else str(atom.value)
    return f"{head}({', '.join(args)})"


eval_repr = Evaluator[str]()
eval_repr.add_atom(RealValue, format_real)
eval_repr.add_atom(ComplexValue, format_complex)
eval_repr.add_atom(BooleanValue, lambda value: "true" if value else "false")
eval_repr.add_atom(ParameterAtom, str)
eval_repr.add_op1(HEADS["Negate"], lambda a: f"-{a}")
eval_repr.add_op1(HEADS["Not"], lambda a: f"!{a}")
for _op, _fmt in _BINARY_FORMATS.items():
    eval_repr.add_op2(HEADS[_op], _fmt.format)
eval_repr.add_opn(HEADS[CONDITIONAL], lambda a: f"({a[1]} if {a[0]} else {a[2]})")
eval_repr.add_opn(HEADS[BLOCK], lambda a: f"block({'; '.join(a)})")
eval_repr.add_op1(HEADS[LOOP], lambda a: f"loop({a})")
eval_repr.add_op_generic(_repr_generic)
