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
"""Declaration registry: declared parameters and direct supertypes per raw type.

The registry is the read-only data source the algebra consults whenever it
steps from a raw type to its declared supertypes. It is process-wide,
populated on first use and insert-if-absent: a declaration, once published,
never changes. Concurrent first lookups may each run the loader, but only one
result is published and every caller sees that one.

Supertype expressions are written in terms of the declaring raw type's own
parameters, e.g. for ``ListKind<E> implements CollectionKind<E>`` the
interface expression is ``CollectionKind<E>`` with ``E`` the variable
declared by ListKind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Optional, Sequence, Tuple, Union

from ..core.types import (
    TOP,
    ParameterizedType,
    RawType,
    Type,
    TypeVariable,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Declaration:
    """The declared shape of one raw type.

    Attributes:
        raw: The declared raw type
        parameters: Declared type parameters, in order
        superclass: Direct generic superclass expression, if any
        interfaces: Direct generic superinterface expressions, in order
        enclosing: Enclosing generic declaration for inner declarations whose
            owner carries type arguments
    """

    raw: RawType
    parameters: Tuple[TypeVariable, ...] = ()
    superclass: Optional[Type] = None
    interfaces: Tuple[Type, ...] = ()
    enclosing: Optional[RawType] = None

    @property
    def is_generic(self) -> bool:
        return bool(self.parameters)

    @property
    def supertypes(self) -> Tuple[Type, ...]:
        """Superclass first, then superinterfaces in declaration order."""
        if self.superclass is None:
            return self.interfaces
        return (self.superclass,) + self.interfaces


DeclarationLoader = Callable[[RawType], Optional[Declaration]]


def raw_of(expr: Type) -> Optional[RawType]:
    """Return the raw type of a nominal expression, else None."""
    if isinstance(expr, RawType):
        return expr
    if isinstance(expr, ParameterizedType):
        return expr.raw
    return None


class DeclarationRegistry:
    """Read-through cache of declarations keyed by raw type.

    Example:
        >>> registry = DeclarationRegistry()
        >>> box = registry.declare("demo.Box", parameters=("E",))
        >>> registry.declared_params(box)
        (E,)
    """

    def __init__(self, loader: Optional[DeclarationLoader] = None) -> None:
        """Initialize an empty registry.

        Args:
            loader: Called on a cache miss; returning None declares a leaf
        """
        self._loader = loader
        self._declarations: Dict[RawType, Declaration] = {}
        self._ancestors: Dict[RawType, FrozenSet[RawType]] = {}
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        """Get the number of published declarations."""
        return len(self._declarations)

    def __contains__(self, raw: object) -> bool:
        return raw in self._declarations

    def declare(
        self,
        raw: Union[RawType, str],
        parameters: Sequence[Union[TypeVariable, str]] = (),
        superclass: Optional[Type] = None,
        interfaces: Sequence[Type] = (),
        enclosing: Optional[RawType] = None,
    ) -> RawType:
        """Publish a declaration and return its raw type.

        Parameters given by name become variables declared at ``raw``.
        If a different declaration for ``raw`` already exists, including a leaf
        synthesised by an earlier lookup, it is kept and the new one is dropped
        with a debug message.
        """
        if isinstance(raw, str):
            raw = RawType(raw)
        params = tuple(
            TypeVariable(raw, p) if isinstance(p, str) else p for p in parameters
        )
        for param in params:
            if param.site != raw:
                raise ValueError(
                    f"Parameter {param!r} of {raw!r} is declared at {param.site!r}"
                )
        declaration = Declaration(raw, params, superclass, tuple(interfaces), enclosing)
        published = self.register(declaration)
        if published != declaration:
            logger.debug(f"{raw.name} is already declared, ignoring the new one")
        return raw

    def register(self, declaration: Declaration) -> Declaration:
        """Publish a declaration unless one exists; return the published one."""
        with self._lock:
            return self._declarations.setdefault(declaration.raw, declaration)

    def lookup(self, raw: RawType) -> Declaration:
        """Get the declaration of raw, loading it on first use."""
        declaration = self._declarations.get(raw)
        if declaration is not None:
            return declaration
        loaded = self._loader(raw) if self._loader is not None else None
        if loaded is None:
            logger.debug(f"No declaration for {raw.name}, treating it as a leaf")
            loaded = Declaration(raw)
        return self.register(loaded)

    # =========================================================================
    # Registry interface consumed by the algebra
    # =========================================================================

    def declared_params(self, raw: RawType) -> Tuple[TypeVariable, ...]:
        return self.lookup(raw).parameters

    def direct_superclass(self, raw: RawType) -> Optional[Type]:
        return self.lookup(raw).superclass

    def direct_superinterfaces(self, raw: RawType) -> Tuple[Type, ...]:
        return self.lookup(raw).interfaces

    def enclosing(self, raw: RawType) -> Optional[RawType]:
        return self.lookup(raw).enclosing

    def ancestors(self, raw: RawType) -> FrozenSet[RawType]:
        """Reflexive-transitive closure of raw's nominal supertypes."""
        cached = self._ancestors.get(raw)
        if cached is not None:
            return cached

        seen = {raw}
        stack = [raw]
        while stack:
            current = stack.pop()
            for supertype in self.lookup(current).supertypes:
                parent = raw_of(supertype)
                if parent is not None and parent not in seen:
                    seen.add(parent)
                    stack.append(parent)

        result = frozenset(seen)
        with self._lock:
            return self._ancestors.setdefault(raw, result)

    def is_ancestor(self, ancestor: RawType, raw: RawType) -> bool:
        """Check whether ancestor is raw itself or one of its supertypes."""
        return ancestor == raw or ancestor in self.ancestors(raw)

    def variable_bounds(self, var: TypeVariable) -> Tuple[Type, ...]:
        """Declared upper bounds of a variable, defaulting to the top type."""
        if var.upper_bounds:
            return var.upper_bounds
        if isinstance(var.site, RawType):
            for param in self.declared_params(var.site):
                if param == var and param.upper_bounds:
                    return param.upper_bounds
        return (TOP,)


# Global registry instance
_global_registry: Optional[DeclarationRegistry] = None
_global_lock = threading.Lock()


def get_global_registry() -> DeclarationRegistry:
    """Get or create the global registry, backed by the reflection loader."""
    global _global_registry
    with _global_lock:
        if _global_registry is None:
            from .reflection import load_declaration

            _global_registry = DeclarationRegistry(loader=load_declaration)
        return _global_registry


def set_global_registry(registry: DeclarationRegistry) -> None:
    """Set the global registry."""
    global _global_registry
    with _global_lock:
        _global_registry = registry
