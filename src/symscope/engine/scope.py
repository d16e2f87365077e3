"""The binding registry.

A :class:`Scope` connects three worlds: names (``"sin"``), representation
independent tokens (:class:`KnownFunction`, :class:`KnownConstant`) and the
concrete expressions implementing them for a particular numeric type.

A scope is assembled with a :class:`ScopeBuilder` and then frozen:

>>> import math
>>> from symscope.core.expr import Real, FunctionRef, call, variable
>>> from symscope.core.known import KnownFunction
>>> from symscope.engine.scope import ScopeBuilder
>>> sin = KnownFunction('sin')
>>> math_sin = FunctionRef('math.sin', [Real], Real, math.sin)
>>> builder = ScopeBuilder()
>>> scope = (
...     builder
...     .add_known(sin)
...     .add_template(sin, [Real], lambda a: call(math_sin, a))
...     .freeze()
... )
>>> x = variable('x')
>>> scope.bind('sin', x)
math.sin(x)
>>> scope.recognize(call(math_sin, x)) == (sin, (x,))
True

Once frozen neither the scope nor its builder can change:

>>> builder.add_known(KnownFunction('cos'))
Traceback (most recent call last):
    ...
symscope.core.exceptions.FrozenScopeError: This scope builder has been frozen
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING as _TYPE_CHECKING
from typing import Any, Callable, Optional, Sequence, TypeVar, Union, cast

from symscope.core.exceptions import (
    BadRuleError,
    FrozenScopeError,
    NoMatchingOverloadError,
    UnknownBindingError,
)
from symscope.core.expr import (
    CALL,
    CONSTANT,
    MEMBER,
    PARAMETER,
    SUPPORTED_KINDS,
    Complex,
    Expr,
    Real,
    ValueType,
    conditional,
    variable,
    widen,
)
from symscope.core.known import KnownConstant, KnownFunction, KnownObject
from symscope.core.match import Pattern
from symscope.core.tree import SubsFunc, topological_sort
from symscope.engine import wellknown as wk

if _TYPE_CHECKING:
    from symscope.core.tree import Tree

    Recognized = tuple[KnownFunction, tuple[Expr, ...]]


__all__ = [
    "Scope",
    "ScopeBuilder",
    "ScopeOptions",
    "Template",
]


_log = logging.getLogger(__name__)

_K = TypeVar("_K", bound=KnownObject)

_PLACEHOLDER_NAMES = "abcdefgh"


@dataclass(frozen=True)
class ScopeOptions:
    """Configuration of a :class:`Scope`.

    :ivar name_preference: Which alias :meth:`Scope.name_of` returns for a
        token with several names, ``"shortest"`` or ``"longest"``.
    """

    name_preference: str = "shortest"

    def __post_init__(self) -> None:
        """Check the option values."""
        if self.name_preference not in ("shortest", "longest"):
            raise ValueError(f"Bad name_preference: {self.name_preference!r}")


class Template:
    """One concrete implementation of a :class:`KnownFunction`.

    :ivar function: The implemented token.
    :ivar params: The placeholder variables.
    :ivar body: The expression over the placeholders.
    :ivar composite: Whether the body is a method style ``Call``.
    """

    __slots__ = ("function", "params", "body", "pattern", "composite", "_subs")

    function: KnownFunction
    params: tuple[Expr, ...]
    body: Expr
    pattern: Pattern
    composite: bool
    _subs: SubsFunc

    def __init__(self, function: KnownFunction, params: Sequence[Expr], body: Expr):
        """Check and compile a template."""
        params = tuple(params)
        pattern = Pattern(body, params)

        if body.kind == PARAMETER:
            raise BadRuleError(f"Template body of {function} is a bare variable")
        elif body.kind not in SUPPORTED_KINDS:
            raise BadRuleError(f"Template body of {function} is a {body.kind}")

        used = set(topological_sort(body.rep))
        for param in params:
            if param.rep not in used:
                raise BadRuleError(f"Template of {function} does not use {param}")

        self.function = function
        self.params = params
        self.body = body
        self.pattern = pattern
        self.composite = body.kind == CALL
        self._subs = SubsFunc(body.rep, [p.rep for p in params])

    def __repr__(self) -> str:
        """Show the signature and body."""
        types = ", ".join(map(repr, self.param_types))
        return f"<Template {self.function}({types}) -> {self.body.type}: {self.body}>"

    @property
    def arity(self) -> int:
        """The number of parameters."""
        return len(self.params)

    @property
    def param_types(self) -> tuple[ValueType, ...]:
        """The types of the parameters."""
        return tuple(p.type for p in self.params)

    def instantiate(self, args: Sequence[Expr]) -> Expr:
        """Substitute arguments of the exact parameter types into the body."""
        return Expr(self._subs.call([arg.rep for arg in args]))


class ScopeBuilder:
    """Fluent builder of a :class:`Scope`.

    Every ``add_*`` method returns the builder. After :meth:`freeze` they
    raise :class:`FrozenScopeError`.
    """

    options: ScopeOptions

    def __init__(self, options: Optional[ScopeOptions] = None):
        """Create an empty builder."""
        self.options = options if options is not None else ScopeOptions()
        self._names: dict[str, tuple[str, KnownObject]] = {}
        self._constants: list[tuple[KnownConstant, Expr]] = []
        self._templates: list[Template] = []
        self._arity: dict[KnownFunction, int] = {}
        self._scope: Optional[Scope] = None

    def _check_open(self) -> None:
        if self._scope is not None:
            raise FrozenScopeError("This scope builder has been frozen")

    def add_name(self, name: str, known: KnownObject) -> ScopeBuilder:
        """Register a (case-insensitive) name for a token."""
        self._check_open()
        if not name:
            raise BadRuleError("A name cannot be empty")
        key = name.casefold()
        previous = self._names.get(key)
        if previous is not None:
            if previous[1] is not known:
                raise BadRuleError(f"The name {name!r} is already bound")
            return self
        self._names[key] = (name, known)
        return self

    def add_known(self, *known: KnownObject) -> ScopeBuilder:
        """Register tokens under their display names."""
        for token in known:
            self.add_name(token.name, token)
        return self

    def add_constant(self, constant: KnownConstant, expr: Expr) -> ScopeBuilder:
        """Register a concrete expression representing a constant."""
        self._check_open()
        if expr.kind not in SUPPORTED_KINDS:
            raise BadRuleError(f"Cannot represent {constant} with a {expr.kind}")
        self._constants.append((constant, expr))
        return self

    def add_function(
        self, function: KnownFunction, params: Sequence[Expr], body: Expr
    ) -> ScopeBuilder:
        """Register a template with explicit placeholder variables."""
        self._check_open()
        template = Template(function, params, body)
        arity = self._arity.setdefault(function, template.arity)
        if arity != template.arity:
            raise BadRuleError(
                f"{function} has arity {arity}, got a template of arity"
                f" {template.arity}"
            )
        self._templates.append(template)
        return self

    def add_template(
        self,
        function: KnownFunction,
        types: Sequence[ValueType],
        build: Callable[..., Expr],
    ) -> ScopeBuilder:
        """Register a template built from placeholders of the given types.

        ``build`` is called with one fresh variable per type and returns the
        body.
        """
        params = [variable(n, t) for n, t in zip(_PLACEHOLDER_NAMES, types)]
        return self.add_function(function, params, build(*params))

    def add_scope(self, scope: Scope) -> ScopeBuilder:
        """Register everything from an existing scope (to extend it)."""
        self._check_open()
        for name, known in scope._names.values():
            self.add_name(name, known)
        for constant, exprs in scope._representations.items():
            for expr in exprs:
                self.add_constant(constant, expr)
        for template in scope._templates:
            self.add_function(template.function, template.params, template.body)
        return self

    def freeze(self) -> Scope:
        """Make the immutable :class:`Scope`. Calling again returns it again."""
        if self._scope is None:
            self._scope = Scope(
                self.options, self._names, self._constants, self._templates
            )
            _log.debug(
                "froze scope with %d names, %d constants and %d templates",
                len(self._names),
                len(self._constants),
                len(self._templates),
            )
        return self._scope


def _head_key(rep: Tree) -> Tree:
    """Templates are bucketed by the head of their body."""
    return rep.children[0] if rep.children else rep


def _representation_rank(expr: Expr) -> tuple[bool, bool]:
    """Members first, then calls, then literals."""
    kind = expr.kind
    return (kind == CONSTANT, kind == CALL)


def _provably_non_negative(expr: Expr) -> bool:
    value = expr.constant_value()
    if value is None and expr.kind == MEMBER and expr.object is None:
        value = expr.member.func()
    return isinstance(value, float) and value >= 0


class Scope:
    """Immutable binding registry.

    Build one with :class:`ScopeBuilder`. The default scope is returned by
    :func:`symscope.engine.default_scope`.
    """

    __slots__ = (
        "options",
        "_names",
        "_representations",
        "_constant_lookup",
        "_templates",
        "_by_function",
        "_by_head",
    )

    options: ScopeOptions
    _names: dict[str, tuple[str, KnownObject]]
    _representations: dict[KnownConstant, tuple[Expr, ...]]
    _constant_lookup: dict[Tree, KnownConstant]
    _templates: tuple[Template, ...]
    _by_function: dict[KnownFunction, tuple[Template, ...]]
    _by_head: dict[Tree, tuple[Template, ...]]

    def __init__(
        self,
        options: ScopeOptions,
        names: dict[str, tuple[str, KnownObject]],
        constants: Sequence[tuple[KnownConstant, Expr]],
        templates: Sequence[Template],
    ):
        """Create a frozen scope (use :class:`ScopeBuilder` instead)."""
        representations: dict[KnownConstant, list[Expr]] = {}
        constant_lookup: dict[Tree, KnownConstant] = {}
        for constant, expr in constants:
            representations.setdefault(constant, []).append(expr)
            constant_lookup.setdefault(expr.rep, constant)

        by_function: dict[KnownFunction, list[Template]] = {}
        by_head: dict[Tree, list[Template]] = {}
        for template in templates:
            by_function.setdefault(template.function, []).append(template)
            by_head.setdefault(_head_key(template.body.rep), []).append(template)

        init = object.__setattr__
        init(self, "options", options)
        init(self, "_names", dict(names))
        init(
            self,
            "_representations",
            {k: tuple(v) for k, v in representations.items()},
        )
        init(self, "_constant_lookup", constant_lookup)
        init(self, "_templates", tuple(templates))
        init(self, "_by_function", {k: tuple(v) for k, v in by_function.items()})
        init(self, "_by_head", {k: tuple(v) for k, v in by_head.items()})

    def __setattr__(self, name: str, value: Any) -> None:
        """A Scope cannot be modified."""
        raise FrozenScopeError(f"Cannot set {name!r} on a frozen Scope")

    def __delattr__(self, name: str) -> None:
        """A Scope cannot be modified."""
        raise FrozenScopeError(f"Cannot delete {name!r} from a frozen Scope")

    def __repr__(self) -> str:
        """Summary of the registrations."""
        return (
            f"<Scope: {len(self._names)} names,"
            f" {len(self._representations)} constants,"
            f" {len(self._by_function)} functions>"
        )

    # ------------------------------------------------------------------- #
    #     Names                                                           #
    # ------------------------------------------------------------------- #

    def bind_name(self, name: str) -> KnownObject:
        """Find the token registered for a name (case-insensitive)."""
        entry = self._names.get(name.casefold())
        if entry is None:
            raise UnknownBindingError(f"Could not find a binding for {name!r}", name)
        return entry[1]

    def name_of(self, known: KnownObject) -> str:
        """The canonical name of a token according to the scope options."""
        names = [name for name, k in self._names.values() if k is known]
        if not names:
            raise UnknownBindingError(f"No name is bound to {known!r}", known)
        if self.options.name_preference == "longest":
            return max(names, key=len)
        return min(names, key=len)

    def names(self) -> list[str]:
        """All registered names in registration order."""
        return [name for name, _ in self._names.values()]

    def _known(self, known: Union[str, _K], cls: type[_K]) -> _K:
        if isinstance(known, str):
            token = self.bind_name(known)
            if not isinstance(token, cls):
                raise UnknownBindingError(f"{known!r} is not a {cls.__name__}", known)
            return token
        return known

    # ------------------------------------------------------------------- #
    #     Constants                                                       #
    # ------------------------------------------------------------------- #

    @property
    def constants(self) -> tuple[KnownConstant, ...]:
        """The constants with at least one representation."""
        return tuple(self._representations)

    def representations(self, constant: KnownConstant) -> tuple[Expr, ...]:
        """All representations of a constant in registration order."""
        return self._representations.get(constant, ())

    def bind_constant(
        self,
        constant: Union[str, KnownConstant],
        typ: Optional[ValueType] = None,
    ) -> Expr:
        """The preferred representation of a constant.

        Member reads are preferred to calls and calls to literals. With
        ``typ`` only representations of that type are considered, widening a
        narrower one if there is no exact match.
        """
        token = self._known(constant, KnownConstant)
        candidates = self._representations.get(token, ())
        if typ is not None:
            exact = [e for e in candidates if e.type is typ]
            if not exact:
                exact = [widen(e, typ) for e in candidates if e.type.widens_to(typ)]
            candidates = tuple(exact)
        if not candidates:
            where = f" of type {typ}" if typ is not None else ""
            raise UnknownBindingError(f"No representation of {token}{where}", token)
        return min(candidates, key=_representation_rank)

    def recognize_constant(self, expr: Optional[Expr]) -> Optional[KnownConstant]:
        """The constant represented by ``expr`` if any."""
        if expr is None:
            return None
        return self._constant_lookup.get(expr.rep)

    # ------------------------------------------------------------------- #
    #     Functions                                                       #
    # ------------------------------------------------------------------- #

    @property
    def functions(self) -> tuple[KnownFunction, ...]:
        """The functions with at least one template."""
        return tuple(self._by_function)

    def templates(self, function: KnownFunction) -> tuple[Template, ...]:
        """The templates of a function in registration order."""
        return self._by_function.get(function, ())

    def bind_function(
        self, function: Union[str, KnownFunction], args: Sequence[Expr]
    ) -> Expr:
        """Instantiate the best template of a function for the arguments.

        A template accepts an argument of its parameter type or one that
        widens to it. The best template needs the fewest widenings, then
        prefers operator nodes to calls, then earlier registration.
        """
        token = self._known(function, KnownFunction)
        args = tuple(args)
        templates = self._by_function.get(token)
        if not templates:
            raise UnknownBindingError(f"No templates for {token}", token)

        if token is wk.Sqrt and len(args) == 1:
            (arg,) = args
            if arg.type.widens_to(Complex) and not _provably_non_negative(arg):
                args = (widen(arg, Complex),)

        best: Optional[tuple[tuple[int, bool, int], Template]] = None
        for order, template in enumerate(templates):
            if template.arity != len(args):
                continue
            conversions = 0
            for param_type, arg in zip(template.param_types, args):
                if arg.type is param_type:
                    continue
                elif arg.type.widens_to(param_type):
                    conversions += 1
                else:
                    break
            else:
                key = (conversions, template.composite, order)
                if best is None or key < best[0]:
                    best = (key, template)

        if best is None:
            types = ", ".join(repr(arg.type) for arg in args)
            raise NoMatchingOverloadError(
                f"No overload of {token} accepts ({types})", args
            )

        template = best[1]
        _log.debug("binding %s%r with %r", token, args, template)
        widened = [widen(a, t) for a, t in zip(args, template.param_types)]
        return template.instantiate(widened)

    def bind(self, function: Union[str, KnownFunction], *args: Expr) -> Expr:
        """Shorthand for :meth:`bind_function` with positional arguments."""
        return self.bind_function(function, args)

    def recognize(self, expr: Optional[Expr]) -> Optional[Recognized]:
        """The function and arguments of the first template matching ``expr``."""
        if expr is None:
            return None
        for template in self._by_head.get(_head_key(expr.rep), ()):
            result = template.pattern.match(expr)
            if result.complete:
                return template.function, cast("tuple[Expr, ...]", result.bound)
        return None

    # ------------------------------------------------------------------- #
    #     Common constructions                                            #
    # ------------------------------------------------------------------- #

    def zero(self, typ: ValueType = Real) -> Expr:
        """Zero in the given representation."""
        return self.bind_constant(wk.Zero, typ)

    def one(self, typ: ValueType = Real) -> Expr:
        """One in the given representation."""
        return self.bind_constant(wk.One, typ)

    def nan(self, typ: ValueType = Real) -> Expr:
        """The indeterminate value in the given representation."""
        return self.bind_constant(wk.Indeterminate, typ)

    def constraint(self, test: Expr, value: Expr) -> Expr:
        """``value`` where ``test`` holds and indeterminate elsewhere."""
        return conditional(test, value, self.nan(value.type))

    def is_constant(self, expr: Optional[Expr], constant: KnownConstant) -> bool:
        """Whether ``expr`` represents ``constant``."""
        return self.recognize_constant(expr) is constant
