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
"""Hierarchy navigation built on the relation engine.

- direct_supertypes: superclass then superinterfaces, with arguments applied
- downgrade: re-express a type at one of its ancestors
- upgrade: infer a descendant's arguments from one of its supertypes
- shift: move a type to a sibling through the most specific common ancestor
- transform: bind a pattern's variables against a type and rebuild another
  pattern with them

Every function takes an optional RelationEngine; the global engine (and so
the global registry) is used when none is given.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..core.errors import NoNominalPath, UnboundParameters, UnresolvableBounds
from ..core.substitution import substitute
from ..core.types import (
    TOP,
    ArrayType,
    ParameterizedType,
    RawType,
    TopType,
    Type,
    TypeVariable,
    WildcardType,
)
from ..registry.declarations import raw_of
from ..solver.relation import RelationEngine, get_engine
from ..solver.solution import SolutionMode
from .lattice import common_ancestors, downgrade_to, supertypes, unresolved

logger = logging.getLogger(__name__)


def _engine(engine: Optional[RelationEngine]) -> RelationEngine:
    return engine if engine is not None else get_engine()


def ordered_free_vars(expr: Type) -> List[TypeVariable]:
    """Free variables of expr in order of first occurrence."""
    ordered: List[TypeVariable] = []
    stack = [expr]
    while stack:
        current = stack.pop()
        if isinstance(current, TypeVariable):
            if current not in ordered:
                ordered.append(current)
        elif isinstance(current, ParameterizedType):
            children = list(current.args)
            if current.owner is not None:
                children.insert(0, current.owner)
            stack.extend(reversed(children))
        elif isinstance(current, ArrayType):
            stack.append(current.component)
        elif isinstance(current, WildcardType):
            stack.extend(reversed(current.lower_bounds + current.upper_bounds))
    return ordered


def direct_supertypes(
    expr: Type, engine: Optional[RelationEngine] = None
) -> Tuple[Type, ...]:
    """Direct supertypes of expr, superclass first."""
    engine = _engine(engine)
    with engine.track("direct_supertypes"):
        return supertypes(expr, engine.registry)


def downgrade(
    expr: Type, ancestor: Type, engine: Optional[RelationEngine] = None
) -> Type:
    """Re-express expr at ancestor.

    Args:
        expr: The type to re-express
        ancestor: A raw type, an array of one, the top type, or a generic mask
            such as ``CollectionKind<X>`` whose free variables are solved
            against expr

    Raises:
        NoNominalPath: If ancestor is not reachable from expr
        MalformedRelationInput: If expr is a generic raw type without
            arguments, or a wildcard
    """
    engine = _engine(engine)
    with engine.track("downgrade"):
        engine.validate(expr)
        return _downgrade(engine, expr, ancestor)


def _downgrade(engine: RelationEngine, expr: Type, ancestor: Type) -> Type:
    if expr == ancestor:
        return expr

    if isinstance(ancestor, TopType):
        if expr.is_primitive:
            raise NoNominalPath(expr, ancestor)
        return TOP

    if isinstance(ancestor, ArrayType):
        if not isinstance(expr, ArrayType):
            raise NoNominalPath(expr, ancestor)
        try:
            return ArrayType(_downgrade(engine, expr.component, ancestor.component))
        except NoNominalPath:
            raise NoNominalPath(expr, ancestor) from None

    if isinstance(ancestor, ParameterizedType):
        return _downgrade_to_mask(engine, expr, ancestor)

    if not isinstance(ancestor, RawType):
        raise NoNominalPath(expr, ancestor)

    if isinstance(expr, TypeVariable):
        for bound in engine.bounds_of(expr):
            try:
                return _downgrade(engine, bound, ancestor)
            except NoNominalPath:
                continue
        raise NoNominalPath(expr, ancestor)

    source_raw = raw_of(expr)
    if source_raw is None or not engine.registry.is_ancestor(ancestor, source_raw):
        raise NoNominalPath(expr, ancestor)
    return downgrade_to(expr, ancestor, engine.registry, engine.config.max_depth)


def _downgrade_to_mask(
    engine: RelationEngine, expr: Type, mask: ParameterizedType
) -> Type:
    view = _downgrade(engine, expr, mask.raw)
    solutions = engine.solve_super(mask, view)
    if solutions.is_empty:
        raise NoNominalPath(expr, mask)
    return substitute(mask, solutions.root())


def upgrade(
    expr: Type, descendant: Type, engine: Optional[RelationEngine] = None
) -> Type:
    """Infer the arguments of descendant from its supertype expr.

    Args:
        expr: A supertype of the wanted result, e.g. ``CollectionKind<String>``
        descendant: A raw type, whose declared parameters are inferred, or an
            explicit shape whose free variables are inferred

    Raises:
        NoNominalPath: If expr's raw type is not an ancestor of descendant
        UnboundParameters: If some parameter is left without a binding
        UnresolvableBounds: If a parameter's bounds conflict
        MalformedRelationInput: If expr is a generic raw type without
            arguments, or a wildcard
    """
    engine = _engine(engine)
    with engine.track("upgrade"):
        engine.validate(expr)
        return _upgrade(engine, expr, descendant)


def _upgrade(engine: RelationEngine, expr: Type, descendant: Type) -> Type:
    registry = engine.registry
    if isinstance(descendant, RawType):
        shape = unresolved(descendant, registry)
    else:
        shape = descendant
    required = ordered_free_vars(shape)

    if not isinstance(expr, TopType):
        source_raw, target_raw = raw_of(expr), raw_of(shape)
        if (
            source_raw is None
            or target_raw is None
            or not registry.is_ancestor(source_raw, target_raw)
        ):
            raise NoNominalPath(expr, descendant)

    solutions = engine.solve_extends(shape, expr)
    if solutions.is_empty:
        if not required:
            raise NoNominalPath(expr, descendant)
        raise UnboundParameters(required, descendant, expr)
    bindings = solutions.root()
    missing = [var for var in required if var not in bindings]
    if missing:
        raise UnboundParameters(missing, descendant, expr)
    return substitute(shape, bindings)


def shift(expr: Type, target: RawType, engine: Optional[RelationEngine] = None) -> Type:
    """Move expr to target, which may be an ancestor, a descendant or a
    sibling sharing a common ancestor.

    Siblings are reached by downgrading expr to each most specific common
    ancestor in turn and upgrading the result to target; the first candidate
    that binds every parameter of target wins.

    Raises:
        NoNominalPath: If expr and target share no nominal ancestor
        UnboundParameters: If no candidate binds every parameter of target
        RawTypeUsage: If expr is a generic raw type without arguments
    """
    engine = _engine(engine)
    with engine.track("shift"):
        engine.validate(expr)
        registry = engine.registry
        source_raw = raw_of(expr)
        if source_raw is None:
            raise NoNominalPath(expr, target)
        if registry.is_ancestor(target, source_raw):
            return _downgrade(engine, expr, target)
        if registry.is_ancestor(source_raw, target):
            return _upgrade(engine, expr, target)

        candidates = common_ancestors(source_raw, target, registry)
        if not candidates:
            raise NoNominalPath(expr, target)

        for candidate in candidates:
            try:
                via = _downgrade(engine, expr, candidate)
                return _upgrade(engine, via, target)
            except (NoNominalPath, UnboundParameters, UnresolvableBounds) as e:
                logger.debug(
                    f"Shift of {expr!r} to {target!r} via {candidate!r} failed: {e}"
                )

        required = ordered_free_vars(unresolved(target, registry))
        raise UnboundParameters(required, target, expr)


def transform(
    expr: Type,
    from_shape: Type,
    to_shape: Type,
    engine: Optional[RelationEngine] = None,
) -> Type:
    """Bind from_shape's free variables against expr and apply them to to_shape.

    Example:
        transform(ListKind<String>, CollectionKind<X>, Box<X>) gives
        Box<String>.

    Raises:
        NoNominalPath: If expr does not match from_shape
        UnboundParameters: If a variable of from_shape used by to_shape stays
            unbound
    """
    engine = _engine(engine)
    with engine.track("transform"):
        solutions = engine.solve_super(from_shape, expr)
        if solutions.is_empty:
            raise NoNominalPath(expr, from_shape)
        bindings = solutions.root()
        pattern_vars = from_shape.free_type_vars()
        missing = [
            var
            for var in ordered_free_vars(to_shape)
            if var in pattern_vars and var not in bindings
        ]
        if missing:
            raise UnboundParameters(missing, to_shape, expr)
        return substitute(to_shape, bindings)
