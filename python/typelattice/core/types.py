# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Type-expression model for the typelattice engine.

Type expressions form a closed set of immutable, structurally compared values:

- RawType: a nominal identity (class or interface) without arguments
- ParameterizedType: a raw type applied to one argument per declared parameter
- TypeVariable: a placeholder identified by its declaration site
- WildcardType: an existential bound, legal only as a type argument
- ArrayType: a covariant array of a component type
- PrimitiveType: an atomic leaf outside the reference hierarchy
- TopType: the universal supertype of every non-primitive type

Declared parameters and supertypes of raw types are not stored on the values
themselves; they come from the declaration registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Hashable, Mapping, Optional, Tuple, Union


class Type(ABC):
    """Abstract base class for all type expressions.

    Subclasses are frozen dataclasses, so equality and hashing are structural
    unless a subclass narrows them (TypeVariable compares by identity key).

    free_type_vars() and substitute() have default implementations for leaf
    types. Composite types override both.
    """

    __slots__ = ()

    def free_type_vars(self) -> FrozenSet["TypeVariable"]:
        """Return the type variables occurring in this expression."""
        return frozenset()

    def substitute(self, mapping: Mapping["TypeVariable", "Type"]) -> "Type":
        """Replace mapped type variables; returns self when nothing changes."""
        return self

    @property
    def is_primitive(self) -> bool:
        return False

    @abstractmethod
    def __eq__(self, other: object) -> bool:
        pass

    @abstractmethod
    def __hash__(self) -> int:
        pass


def _substitute_all(
    types: Tuple[Type, ...], mapping: Mapping["TypeVariable", Type]
) -> Tuple[Type, ...]:
    """Substitute into a tuple, returning the same tuple object if unchanged."""
    replaced = tuple(t.substitute(mapping) for t in types)
    if all(new is old for new, old in zip(replaced, types)):
        return types
    return replaced


def _free_vars_of(types: Tuple[Type, ...]) -> FrozenSet["TypeVariable"]:
    vars_set: FrozenSet[TypeVariable] = frozenset()
    for t in types:
        vars_set = vars_set | t.free_type_vars()
    return vars_set


# =============================================================================
# Leaves
# =============================================================================


@dataclass(frozen=True, slots=True)
class PrimitiveType(Type):
    """A primitive marker.

    Primitives never carry type arguments, are never type arguments
    themselves, have no supertypes and equal only themselves.

    Attributes:
        name: The primitive name (e.g., "int", "boolean")
    """

    name: str

    @property
    def is_primitive(self) -> bool:
        return True

    def __repr__(self) -> str:
        return self.name


BOOLEAN = PrimitiveType("boolean")
BYTE = PrimitiveType("byte")
CHAR = PrimitiveType("char")
SHORT = PrimitiveType("short")
INT = PrimitiveType("int")
LONG = PrimitiveType("long")
FLOAT = PrimitiveType("float")
DOUBLE = PrimitiveType("double")
VOID = PrimitiveType("void")

PRIMITIVES: Tuple[PrimitiveType, ...] = (
    BOOLEAN,
    BYTE,
    CHAR,
    SHORT,
    INT,
    LONG,
    FLOAT,
    DOUBLE,
    VOID,
)


@dataclass(frozen=True, slots=True)
class TopType(Type):
    """The top type: every non-primitive type is a subtype of it."""

    def __repr__(self) -> str:
        return "Object"


TOP = TopType()


@dataclass(frozen=True, slots=True)
class RawType(Type):
    """A nominal type identity.

    Attributes:
        name: Fully qualified name, unique per nominal type
        origin: Optional runtime class this raw type was reflected from.
            Not part of equality.
    """

    name: str
    origin: Optional[type] = field(default=None, compare=False, repr=False)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def __getitem__(self, args: Any) -> "ParameterizedType":
        if not isinstance(args, tuple):
            args = (args,)
        return ParameterizedType(self, args)

    def __repr__(self) -> str:
        return self.simple_name


@dataclass(frozen=True, slots=True)
class TypeVariable(Type):
    """A type variable.

    Two variables are the same variable only if they share a declaration
    site and a name. Variables declared by different generic declarations
    never unify, even when their names match.

    Attributes:
        site: Opaque hashable token of the declaring generic declaration
            (usually the RawType that declares it)
        name: Parameter name, unique within its site
        upper_bounds: Declared upper bounds. Empty means the bounds are
            looked up in the registry declaration of the site, and default
            to the top type when nothing is declared there.
    """

    site: Hashable
    name: str
    upper_bounds: Tuple[Type, ...] = field(default=(), compare=False)

    def free_type_vars(self) -> FrozenSet[TypeVariable]:
        return frozenset({self})

    def substitute(self, mapping: Mapping[TypeVariable, Type]) -> Type:
        return mapping.get(self, self)

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class MethodSite:
    """Declaration site token for variables declared by a generic method.

    Attributes:
        owner: The declaring raw type (or None for free functions)
        name: The method name
    """

    owner: Optional[RawType]
    name: str

    def __repr__(self) -> str:
        if self.owner is None:
            return f"{self.name}()"
        return f"{self.owner!r}.{self.name}()"


# =============================================================================
# Composite types
# =============================================================================


@dataclass(frozen=True, slots=True)
class WildcardType(Type):
    """An existential type argument: some T with lower <: T <: upper.

    Only legal as an element of ParameterizedType.args.

    Attributes:
        lower_bounds: Lower ("super") bounds
        upper_bounds: Upper ("extends") bounds; empty means the top type
    """

    lower_bounds: Tuple[Type, ...] = ()
    upper_bounds: Tuple[Type, ...] = ()

    @property
    def effective_upper_bounds(self) -> Tuple[Type, ...]:
        return self.upper_bounds or (TOP,)

    def free_type_vars(self) -> FrozenSet[TypeVariable]:
        return _free_vars_of(self.lower_bounds) | _free_vars_of(self.upper_bounds)

    def substitute(self, mapping: Mapping[TypeVariable, Type]) -> Type:
        lower = _substitute_all(self.lower_bounds, mapping)
        upper = _substitute_all(self.upper_bounds, mapping)
        if lower is self.lower_bounds and upper is self.upper_bounds:
            return self
        return WildcardType(lower, upper)

    def __repr__(self) -> str:
        return simple_name(self)


UNBOUNDED = WildcardType()


def wildcard() -> WildcardType:
    """The unbounded wildcard ``?``."""
    return UNBOUNDED


def wildcard_extends(*bounds: Type) -> WildcardType:
    """``? extends B1 & B2 ...``"""
    return WildcardType((), tuple(bounds))


def wildcard_super(*bounds: Type) -> WildcardType:
    """``? super B1 & B2 ...``"""
    return WildcardType(tuple(bounds), ())


@dataclass(frozen=True, slots=True)
class ArrayType(Type):
    """A covariant array type.

    Attributes:
        component: The element type (may be primitive)
    """

    component: Type

    def free_type_vars(self) -> FrozenSet[TypeVariable]:
        return self.component.free_type_vars()

    def substitute(self, mapping: Mapping[TypeVariable, Type]) -> Type:
        component = self.component.substitute(mapping)
        if component is self.component:
            return self
        return ArrayType(component)

    def __repr__(self) -> str:
        return f"{self.component!r}[]"


@dataclass(frozen=True, slots=True)
class ParameterizedType(Type):
    """A raw type applied to type arguments.

    Attributes:
        raw: The generic raw type
        args: One argument per declared parameter of raw
        owner: The enclosing declaration with its own arguments, present only
            for generic declarations nested in another generic declaration
    """

    raw: RawType
    args: Tuple[Type, ...]
    owner: Optional[Type] = None

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def free_type_vars(self) -> FrozenSet[TypeVariable]:
        vars_set = _free_vars_of(self.args)
        if self.owner is not None:
            vars_set = vars_set | self.owner.free_type_vars()
        return vars_set

    def substitute(self, mapping: Mapping[TypeVariable, Type]) -> Type:
        args = _substitute_all(self.args, mapping)
        owner = self.owner.substitute(mapping) if self.owner is not None else None
        if args is self.args and owner is self.owner:
            return self
        return ParameterizedType(self.raw, args, owner)

    def __repr__(self) -> str:
        return simple_name(self)


NominalType = Union[RawType, ParameterizedType]


# =============================================================================
# Helpers
# =============================================================================


def parameterize(
    raw: RawType, *args: Type, owner: Optional[Type] = None
) -> ParameterizedType:
    """Build ``raw<args...>`` with an optional owner."""
    return ParameterizedType(raw, tuple(args), owner)


def array_of(component: Type, rank: int = 1) -> ArrayType:
    """Wrap a component type in ``rank`` array dimensions."""
    if rank < 1:
        raise ValueError(f"array rank must be positive, got {rank}")
    result: Type = component
    for _ in range(rank):
        result = ArrayType(result)
    return result  # type: ignore[return-value]


def is_array(t: Type) -> bool:
    return isinstance(t, ArrayType)


def component_type(t: Type) -> Type:
    if not isinstance(t, ArrayType):
        raise ValueError(f"Not an array: {t!r}")
    return t.component


def is_reference(t: Type) -> bool:
    return not t.is_primitive


def is_nominal(t: Type) -> bool:
    return isinstance(t, (RawType, ParameterizedType))


def simple_name(t: Type) -> str:
    """Render a type using simple raw-type names.

    Examples: ``Box<? extends Animal>``, ``Dog[]``, ``Outer<A>.Inner<B>``.
    """
    return _format(t, qualified=False)


def type_name(t: Type) -> str:
    """Render a type using fully qualified raw-type names."""
    return _format(t, qualified=True)


def _format(t: Type, qualified: bool) -> str:
    if isinstance(t, RawType):
        return t.name if qualified else t.simple_name
    if isinstance(t, ParameterizedType):
        head = t.raw.name if qualified and t.owner is None else t.raw.simple_name
        if t.owner is not None:
            head = f"{_format(t.owner, qualified)}.{head}"
        if not t.args:
            return head
        return f"{head}<{','.join(_format(a, qualified) for a in t.args)}>"
    if isinstance(t, ArrayType):
        return f"{_format(t.component, qualified)}[]"
    if isinstance(t, WildcardType):
        if t.lower_bounds:
            return "? super " + "&".join(_format(b, qualified) for b in t.lower_bounds)
        upper = [b for b in t.upper_bounds if b != TOP]
        if upper:
            return "? extends " + "&".join(_format(b, qualified) for b in upper)
        return "?"
    if isinstance(t, TypeVariable):
        return t.name
    if isinstance(t, (PrimitiveType, TopType)):
        return repr(t)
    raise TypeError(f"Unknown type expression: {type(t).__name__}")
