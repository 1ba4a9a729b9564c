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
"""Nominal supertype lattice over the declaration registry.

Low-level graph operations shared by the relation engine and the navigation
layer: binding a parameterized type's arguments to its declared parameters,
enumerating direct supertypes, walking the nominal path from a type up to one
of its ancestors, and locating the most specific common ancestors of two raw
types.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Tuple

from ..core.errors import (
    MalformedRelationInput,
    NoNominalPath,
    RawTypeUsage,
    TooComplex,
)
from ..core.substitution import substitute
from ..core.types import (
    TOP,
    ArrayType,
    ParameterizedType,
    PrimitiveType,
    RawType,
    TopType,
    Type,
    TypeVariable,
    WildcardType,
)
from ..registry.declarations import DeclarationRegistry, raw_of


def raw_type(expr: Type) -> RawType:
    """Raw type of a nominal expression."""
    raw = raw_of(expr)
    if raw is None:
        raise ValueError(f"Not a nominal type: {expr!r}")
    return raw


def type_arguments(
    expr: Type, registry: DeclarationRegistry
) -> Dict[TypeVariable, Type]:
    """Bind the declared parameters of expr (and its owners) to its arguments.

    Raises:
        RawTypeUsage: If expr is a generic raw type without arguments
        MalformedRelationInput: If an argument count disagrees with the
            declaration
    """
    if isinstance(expr, RawType):
        params = registry.declared_params(expr)
        if params:
            raise RawTypeUsage(expr, params)
        return {}

    bindings: Dict[TypeVariable, Type] = {}
    current: Optional[Type] = expr
    while isinstance(current, ParameterizedType):
        params = registry.declared_params(current.raw)
        if len(params) != len(current.args):
            raise MalformedRelationInput(
                expr,
                f"{current.raw.simple_name} declares {len(params)} type "
                f"parameters, got {len(current.args)} arguments",
            )
        for param, arg in zip(params, current.args):
            bindings.setdefault(param, arg)
        current = current.owner
    return bindings


def unresolved(raw: RawType, registry: DeclarationRegistry) -> Type:
    """Shape of raw with its own declared parameters as arguments.

    Inner declarations of a generic enclosing declaration get an owner chain
    built the same way, so every parameter in scope is a free variable.
    """
    declaration = registry.lookup(raw)
    owner: Optional[Type] = None
    if declaration.enclosing is not None:
        owner = unresolved(declaration.enclosing, registry)
        if not isinstance(owner, ParameterizedType):
            owner = None
    if not declaration.parameters and owner is None:
        return raw
    return ParameterizedType(raw, declaration.parameters, owner)


def supertypes(expr: Type, registry: DeclarationRegistry) -> Tuple[Type, ...]:
    """Direct supertypes of expr, superclass first.

    Arrays lift the supertypes of their component; an array whose component
    has no supertypes has the array of the top type as its only supertype.
    Arrays of primitives and of the top type have the top type.
    """
    if isinstance(expr, (RawType, ParameterizedType)):
        declaration = registry.lookup(raw_type(expr))
        bindings = type_arguments(expr, registry)
        return tuple(substitute(s, bindings) for s in declaration.supertypes)

    if isinstance(expr, ArrayType):
        component = expr.component
        if isinstance(component, (PrimitiveType, TopType)):
            return (TOP,)
        lifted = supertypes(component, registry)
        if not lifted:
            return (ArrayType(TOP),)
        return tuple(ArrayType(s) for s in lifted)

    if isinstance(expr, TypeVariable):
        return registry.variable_bounds(expr)

    if isinstance(expr, WildcardType):
        return expr.effective_upper_bounds

    return ()


def next_on_path(
    expr: Type, ancestor: RawType, registry: DeclarationRegistry
) -> Optional[Type]:
    """One step from expr toward ancestor: the superclass edge if it leads
    there, else the first superinterface that does."""
    declaration = registry.lookup(raw_type(expr))
    for edge in declaration.supertypes:
        edge_raw = raw_of(edge)
        if edge_raw is not None and registry.is_ancestor(ancestor, edge_raw):
            return substitute(edge, type_arguments(expr, registry))
    return None


def downgrade_to(
    expr: Type,
    ancestor: RawType,
    registry: DeclarationRegistry,
    max_steps: int = 64,
) -> Type:
    """Re-express a nominal type at one of its ancestors.

    Raises:
        NoNominalPath: If ancestor is not reachable from expr
        TooComplex: If the walk exceeds max_steps edges
    """
    current = expr
    steps = 0
    while raw_type(current) != ancestor:
        step = next_on_path(current, ancestor, registry)
        if step is None:
            raise NoNominalPath(expr, ancestor)
        steps += 1
        if steps > max_steps:
            raise TooComplex("nominal path length", max_steps)
        current = step
    return current


def common_ancestors(
    source: RawType, target: RawType, registry: DeclarationRegistry
) -> Tuple[RawType, ...]:
    """Most specific common nominal ancestors of two raw types.

    Breadth-first from source; a node that is also an ancestor of target is
    recorded and not expanded. Candidates that are proper ancestors of other
    candidates are dropped. Order follows the search.
    """
    target_ancestors = registry.ancestors(target)
    found: List[RawType] = []
    seen = {source}
    queue = deque([source])
    while queue:
        current = queue.popleft()
        if current in target_ancestors:
            found.append(current)
            continue
        for edge in registry.lookup(current).supertypes:
            parent = raw_of(edge)
            if parent is not None and parent not in seen:
                seen.add(parent)
                queue.append(parent)

    return tuple(
        candidate
        for candidate in found
        if not any(
            other != candidate and registry.is_ancestor(candidate, other)
            for other in found
        )
    )
