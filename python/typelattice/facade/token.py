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
"""TypeToken: a convenience handle around one type expression.

Tokens wrap the navigation operations so that chains such as "the element
type of this collection", "an array of this" or "this type re-expressed at
an ancestor" read as method calls. Every helper is a transform against a
small pattern built from a variable private to this module.
"""

from __future__ import annotations

from typing import Any, Optional

from ..core.types import (
    ArrayType,
    MethodSite,
    ParameterizedType,
    RawType,
    Type,
    TypeVariable,
    simple_name,
    type_name,
)
from ..hierarchy.lattice import unresolved
from ..hierarchy.navigation import downgrade, shift, transform, upgrade
from ..registry.reflection import from_annotation
from ..solver.relation import RelationEngine, get_engine
from .instances import default_instance

_SITE = MethodSite(None, "TypeToken")
_X = TypeVariable(_SITE, "X")


class TypeToken:
    """A handle on a type expression bound to a relation engine.

    Example:
        >>> token = TypeToken.of(Dog)
        >>> token.array().simple_name
        'Dog[]'
        >>> TypeToken.array_component(token.array()) == token
        True
    """

    __slots__ = ("_type", "_engine")

    def __init__(self, type_expr: Type, engine: Optional[RelationEngine] = None):
        self._type = type_expr
        self._engine = engine

    @classmethod
    def of(cls, py_type: Any, engine: Optional[RelationEngine] = None) -> TypeToken:
        """Token for a Python class or typing annotation."""
        return cls(from_annotation(py_type), engine)

    @property
    def type(self) -> Type:
        return self._type

    @property
    def engine(self) -> RelationEngine:
        return self._engine if self._engine is not None else get_engine()

    @property
    def name(self) -> str:
        return type_name(self._type)

    @property
    def simple_name(self) -> str:
        return simple_name(self._type)

    def _token(self, type_expr: Type) -> TypeToken:
        return TypeToken(type_expr, self._engine)

    # =========================================================================
    # Navigation
    # =========================================================================

    def new_instance(self) -> Any:
        return default_instance(self._type)

    def is_subtype_of(self, other: TypeToken) -> bool:
        return self.engine.is_subtype(self._type, other.type)

    def transform(self, from_shape: Type, to_shape: Type) -> TypeToken:
        return self._token(transform(self._type, from_shape, to_shape, self.engine))

    def upgrade(self, shape: Type) -> TypeToken:
        return self._token(upgrade(self._type, shape, self.engine))

    def downgrade(self, ancestor: Type) -> TypeToken:
        return self._token(downgrade(self._type, ancestor, self.engine))

    def shift(self, target: RawType) -> TypeToken:
        return self._token(shift(self._type, target, self.engine))

    def infer(self, source: Type) -> TypeToken:
        """Bind this token's free variables against source."""
        return self._token(transform(source, self._type, self._type, self.engine))

    # =========================================================================
    # Projections
    # =========================================================================

    def array(self) -> TypeToken:
        """Token for an array of this type."""
        if self._type.is_primitive or isinstance(self._type, TypeVariable):
            return self._token(ArrayType(self._type))
        return self.transform(_X, ArrayType(_X))

    def wrap(self, raw: RawType) -> TypeToken:
        """Token for a one-parameter generic raw type applied to this type."""
        shape = unresolved(raw, self.engine.registry)
        if not isinstance(shape, ParameterizedType) or len(shape.args) != 1:
            raise ValueError(f"{raw!r} does not declare exactly one type parameter")
        return self.transform(_X, shape.substitute({shape.args[0]: _X}))

    @staticmethod
    def array_component(token: TypeToken) -> TypeToken:
        """Token for the component type of an array token."""
        array = token.type
        if isinstance(array, ArrayType) and array.component.is_primitive:
            return token._token(array.component)
        return token.transform(ArrayType(_X), _X)

    @staticmethod
    def element_of(token: TypeToken, container: RawType, index: int = 0) -> TypeToken:
        """Token for one type argument of token viewed as container.

        For a ``ListKind<String>`` token, ``element_of(token, CollectionKind)``
        is a ``String`` token.
        """
        shape = unresolved(container, token.engine.registry)
        if not isinstance(shape, ParameterizedType) or index >= len(shape.args):
            raise ValueError(f"{container!r} has no type parameter {index}")
        return token.transform(shape, shape.args[index])

    # =========================================================================
    # Value semantics
    # =========================================================================

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeToken):
            return NotImplemented
        return self._type == other._type

    def __hash__(self) -> int:
        return hash(self._type)

    def __repr__(self) -> str:
        return self.simple_name
