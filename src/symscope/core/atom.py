"""symscope.core.atom module.

This module defines the :class:`AtomType` and :class:`Atom` types that sit at
the leaves of every expression tree: literal constants, variables and the
heads (operators, function references, member references) of compound nodes.
"""
from __future__ import annotations

from typing import TYPE_CHECKING as _TYPE_CHECKING
from typing import Any, cast
from typing import Generic as _Generic
from typing import Hashable as _Hashable
from typing import TypeVar as _TypeVar
from weakref import WeakValueDictionary as _WeakDict

__all__ = [
    "Atom",
    "AtomType",
]


AnyValue = _Hashable
_T = _TypeVar("_T", bound=AnyValue, covariant=True)

#
# Global store of Atoms keyed by (AtomType, value). An Atom is only ever
# created once for a given key so that atoms can be compared by identity.
#
_all_atoms: _WeakDict[Any, Any] = _WeakDict()


class AtomType(_Generic[_T]):
    """Identifier to distinguish different kinds of atoms.

    :ivar name: Name of this :class:`AtomType`.
    :ivar typ: The :attr:`Atom.value` type for the associated atoms.

    >>> from symscope.core.atom import AtomType
    >>> RealValue = AtomType('Real', float)
    >>> RealValue
    Real
    >>> RealValue.typ
    <class 'float'>
    >>> RealValue(2.5)
    Real(2.5)

    An :class:`AtomType` is not itself an expression. Calling it makes an
    :class:`Atom` whose ``value`` should be an instance of ``typ``.

    See Also
    --------
    Atom: The actual instances of atomic expressions.
    symscope.core.tree.Tree: Type that wraps an :class:`Atom`.
    """

    __slots__ = (
        "name",
        "typ",
    )

    name: str
    typ: type[_T]

    def __init__(self, name: str, typ: type[_T]):
        """Create a new kind of atom e.g. Real or Parameter.

        Args:
            name (str): The name of this kind of Atom e.g. ``"Real"``.
            typ (type): The type of the values for this kind of Atom.
        """
        self.name = name
        self.typ = typ

    def __repr__(self) -> str:
        """Name of the AtomType as a string."""
        return self.name

    def __call__(self, value: _T) -> Atom[_T]:  # type: ignore
        """Create an Atom of this type."""
        return Atom(self, value)


class Atom(_Generic[_T]):
    """Low level representation of atomic expressions.

    :ivar atom_type: The associated :class:`AtomType` for this :class:`Atom`.
    :ivar value: The value object associated with this :class:`Atom`.

    An :class:`Atom` has no children. It holds an internal ``value`` which is
    not a child in the sense of the ``children`` of compound nodes.

    >>> from symscope.core.atom import AtomType, Atom
    >>> Operator = AtomType('Operator', str)
    >>> add = Operator('Add')
    >>> add
    Operator('Add')
    >>> print(add)
    Add
    >>> add.atom_type
    Operator
    >>> type(add) is Atom
    True

    Atoms are interned so two atoms with equal type and value are the same
    object:

    >>> add is Operator('Add')
    True

    Values are compared with ``==`` when interning. Values whose ``==`` does
    not agree with identity (for example ``float('nan')``) must be normalised
    by the caller before an :class:`Atom` is made.

    See Also
    --------
    AtomType: The class of types of :class:`Atom`.
    symscope.core.tree.Tree: Type that wraps an :class:`Atom`.
    """

    __slots__ = (
        "__weakref__",
        "atom_type",
        "value",
    )

    atom_type: AtomType[_T]
    value: _T

    def __new__(cls, atom_type: AtomType[_T], value: _T) -> Atom[_T]:
        """Create a new Atom or return an existing Atom from the global store."""
        key = (atom_type, value)

        previous = _all_atoms.get(key, None)
        if previous is not None:
            return cast("Atom[_T]", previous)

        obj = object.__new__(cls)
        obj.atom_type = atom_type
        obj.value = value

        # setdefault so that a racing thread and this one agree on the object.
        obj = _all_atoms.setdefault(key, obj)

        return obj

    def __repr__(self) -> str:
        """Explicit representation as e.g. ``'Real(1.0)'``."""
        return f"{self.atom_type}({self.value!r})"

    def __str__(self) -> str:
        """Pretty representation as e.g. ``'1.0'``."""
        return str(self.value)


if _TYPE_CHECKING:
    AnyAtom = Atom[_Hashable]
