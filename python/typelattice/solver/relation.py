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
"""Relation engine: structural subtyping and containment with inference.

relate(left, right, mode) answers whether ``left <: right`` holds and, when a
mode names an inferred side, under which bounds for that side's type
variables. The answer is a SolutionSet in disjunctive normal form.

Cases, first match wins:
    1. either side primitive: identity iff both are the same primitive
    2. right is the top type: identity
    3. left is a variable: INFER_LEFT bounds it from above by right; under
       IDENTITY an equal variable is identity; otherwise its declared upper
       bounds are related to right, combined by OR
    4. right is a variable: INFER_RIGHT bounds it from below by left;
       IDENTITY requires equality; INFER_LEFT is a contradiction
    5. left is the top type: contradiction
    6. arrays: components relate under the same mode; array against
       non-array is a contradiction
    7. nominal: right's raw type must be an ancestor of left's; left is
       re-expressed at that ancestor and every argument position must hold
       by containment, combined by AND

Containment of a type argument ``inner`` in ``outer`` normalizes both to
wildcard form (a bare type T is ``? super T extends T``). Upper bounds of
outer must each be reached from some upper bound of inner under the same
mode; lower bounds of outer must each reach some lower bound of inner under
the inverted mode.

References:
    - Gosling et al., "The Java Language Specification", 4.5.1 (containment)
      and 18.2.3 (subtyping constraints)
    - Pierce, B.C. (2002). "Types and Programming Languages", Chapter 15
"""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from typing import ContextManager, Optional, Tuple

from ..core.config import EngineConfig, get_default_config
from ..core.errors import MalformedRelationInput, RawTypeUsage, TooComplex
from ..core.types import (
    ArrayType,
    ParameterizedType,
    PrimitiveType,
    RawType,
    TopType,
    Type,
    TypeVariable,
    WildcardType,
)
from ..hierarchy.lattice import downgrade_to, type_arguments, unresolved
from ..observability.collector import MetricsCollector, get_global_collector
from ..observability.metrics import QueryProbe
from ..registry.declarations import (
    DeclarationRegistry,
    get_global_registry,
    raw_of,
)
from .solution import SolutionMode, SolutionSet

logger = logging.getLogger(__name__)

IDENTITY = SolutionMode.IDENTITY
INFER_LEFT = SolutionMode.INFER_LEFT
INFER_RIGHT = SolutionMode.INFER_RIGHT


def as_wildcard(arg: Type) -> WildcardType:
    """Normalize a type argument to wildcard form."""
    if isinstance(arg, WildcardType):
        return arg
    return WildcardType((arg,), (arg,))


class RelationEngine:
    """Answers relation queries against one declaration registry.

    Example:
        >>> engine = RelationEngine(registry)
        >>> engine.is_subtype(dog, animal)
        True
        >>> engine.relate(list_of_e, collection_of_string, INFER_LEFT).root()
        {E: String}
    """

    def __init__(
        self,
        registry: Optional[DeclarationRegistry] = None,
        config: Optional[EngineConfig] = None,
        collector: Optional[MetricsCollector] = None,
    ) -> None:
        self.registry = registry if registry is not None else get_global_registry()
        self.config = config if config is not None else get_default_config()
        if collector is None and self.config.collect_metrics:
            collector = get_global_collector()
        self.collector = collector

    # =========================================================================
    # Public queries
    # =========================================================================

    def relate(
        self, left: Type, right: Type, mode: SolutionMode = IDENTITY
    ) -> SolutionSet:
        """Relate ``left <: right`` under mode.

        Raises:
            MalformedRelationInput: For a top-level wildcard, a primitive
                paired with a reference type, raw usage of a generic type or
                an argument count mismatch
            TooComplex: If a depth or disjunct limit is exceeded
        """
        with self.track("relate") as probe:
            self.validate_pair(left, right)
            result = self._relate(left, right, mode, 0)
            probe.disjuncts = len(result)
            return result

    def contains(
        self, inner: Type, outer: Type, mode: SolutionMode = IDENTITY
    ) -> SolutionSet:
        """Relate type argument inner as contained in type argument outer."""
        with self.track("contains") as probe:
            self.validate(inner, argument=True)
            self.validate(outer, argument=True)
            result = self._contained_by(inner, outer, mode, 0)
            probe.disjuncts = len(result)
            return result

    def is_subtype(self, subtype: Type, supertype: Type) -> bool:
        with self.track("is_subtype"):
            self.validate_pair(subtype, supertype)
            return self._relate(subtype, supertype, IDENTITY, 0).is_identity

    def is_supertype(self, supertype: Type, subtype: Type) -> bool:
        return self.is_subtype(subtype, supertype)

    def solve_extends(self, subtype: Type, supertype: Type) -> SolutionSet:
        """Bounds on subtype's variables making it a subtype of supertype."""
        return self.relate(subtype, supertype, INFER_LEFT)

    def solve_super(self, supertype: Type, subtype: Type) -> SolutionSet:
        """Bounds on supertype's variables making it a supertype of subtype."""
        return self.relate(subtype, supertype, INFER_RIGHT)

    def bounds_of(self, var: TypeVariable) -> Tuple[Type, ...]:
        return self.registry.variable_bounds(var)

    def track(self, operation: str) -> ContextManager[QueryProbe]:
        """Metrics context for one public query; a no-op without a collector."""
        if self.collector is None:
            return nullcontext(QueryProbe(operation))
        return self.collector.track(operation)

    # =========================================================================
    # Solution set factories bound to this engine's ordering and limits
    # =========================================================================

    def order(self, left: Type, right: Type) -> bool:
        """Subtype ordering used to keep accumulated bounds minimal."""
        return self._relate(left, right, IDENTITY, 0).is_identity

    def false(self) -> SolutionSet:
        return SolutionSet.false(self.order, self.config.max_disjuncts)

    def true(self) -> SolutionSet:
        return SolutionSet.true(self.order, self.config.max_disjuncts)

    def const(self, value: bool) -> SolutionSet:
        return SolutionSet.const(value, self.order, self.config.max_disjuncts)

    # =========================================================================
    # Input validation
    # =========================================================================

    def validate_pair(self, left: Type, right: Type) -> None:
        self.validate(left)
        self.validate(right)
        if left.is_primitive != right.is_primitive:
            raise MalformedRelationInput(
                (left, right), "primitive type related to a reference type"
            )

    def validate(self, expr: Type, argument: bool = False, depth: int = 0) -> None:
        """Reject expressions no relation query accepts.

        Args:
            expr: The expression to check
            argument: Whether expr sits in a type argument position, where
                wildcards are legal and primitives are not
        """
        if depth > self.config.max_depth:
            raise TooComplex("type expression depth", self.config.max_depth)

        if isinstance(expr, WildcardType):
            if not argument:
                raise MalformedRelationInput(expr, "wildcard outside a type argument")
            for bound in expr.lower_bounds + expr.upper_bounds:
                self.validate(bound, False, depth + 1)
            return

        if isinstance(expr, PrimitiveType):
            if argument:
                raise MalformedRelationInput(expr, "primitive type argument")
            return

        if isinstance(expr, ArrayType):
            self.validate(expr.component, False, depth + 1)
            return

        if isinstance(expr, RawType):
            params = self.registry.declared_params(expr)
            if params:
                raise RawTypeUsage(expr, params)
            self._validate_owner_chain(expr, None)
            return

        if isinstance(expr, ParameterizedType):
            type_arguments(expr, self.registry)
            self._validate_owner_chain(expr.raw, expr.owner)
            for arg in expr.args:
                self.validate(arg, True, depth + 1)
            if expr.owner is not None:
                self.validate(expr.owner, False, depth + 1)

    def _validate_owner_chain(self, raw: RawType, owner: Optional[Type]) -> None:
        """Inner declarations of a generic declaration need a parameterized
        owner."""
        enclosing = self.registry.enclosing(raw)
        if enclosing is None or owner is not None:
            return
        shape = unresolved(enclosing, self.registry)
        if isinstance(shape, ParameterizedType):
            raise RawTypeUsage(raw, shape.args)

    # =========================================================================
    # Relation
    # =========================================================================

    def _relate(
        self, left: Type, right: Type, mode: SolutionMode, depth: int
    ) -> SolutionSet:
        if depth > self.config.max_depth:
            raise TooComplex("relation depth", self.config.max_depth)

        if left.is_primitive or right.is_primitive:
            return self.const(left == right)

        if isinstance(right, TopType):
            return self.true()

        if isinstance(left, TypeVariable):
            if mode == INFER_LEFT:
                return SolutionSet.upper_bound(
                    left, right, self.order, self.config.max_disjuncts
                )
            if mode == IDENTITY and left == right:
                return self.true()
            result = self.false()
            for bound in self.bounds_of(left):
                result = result | self._relate(bound, right, mode, depth + 1)
                if result.is_identity:
                    break
            return result

        if isinstance(right, TypeVariable):
            if mode == INFER_RIGHT:
                return SolutionSet.lower_bound(
                    right, left, self.order, self.config.max_disjuncts
                )
            if mode == IDENTITY:
                return self.const(left == right)
            return self.false()

        if isinstance(left, TopType):
            return self.false()

        if isinstance(left, ArrayType) or isinstance(right, ArrayType):
            if isinstance(left, ArrayType) and isinstance(right, ArrayType):
                return self._relate(left.component, right.component, mode, depth + 1)
            return self.false()

        if isinstance(left, WildcardType) or isinstance(right, WildcardType):
            raise MalformedRelationInput(
                (left, right), "wildcard outside a type argument"
            )

        return self._relate_nominal(left, right, mode, depth)

    def _relate_nominal(
        self, left: Type, right: Type, mode: SolutionMode, depth: int
    ) -> SolutionSet:
        left_raw, right_raw = raw_of(left), raw_of(right)
        if left_raw is None or right_raw is None:
            return self.false()
        if not self.registry.is_ancestor(right_raw, left_raw):
            return self.false()

        view = downgrade_to(left, right_raw, self.registry, self.config.max_depth)
        left_args = type_arguments(view, self.registry)
        right_args = type_arguments(right, self.registry)

        result = self.true()
        for param, right_arg in right_args.items():
            # A raw view leaves the argument unknown.
            left_arg = left_args.get(param, WildcardType())
            result = result & self._contained_by(left_arg, right_arg, mode, depth + 1)
            if result.is_empty:
                break
        return result

    def _contained_by(
        self, inner: Type, outer: Type, mode: SolutionMode, depth: int
    ) -> SolutionSet:
        if depth > self.config.max_depth:
            raise TooComplex("relation depth", self.config.max_depth)

        inner_w, outer_w = as_wildcard(inner), as_wildcard(outer)

        result = self.true()
        for outer_upper in outer_w.effective_upper_bounds:
            reached = self.false()
            for inner_upper in inner_w.effective_upper_bounds:
                reached = reached | self._relate(
                    inner_upper, outer_upper, mode, depth + 1
                )
                if reached.is_identity:
                    break
            result = result & reached
            if result.is_empty:
                return result

        inverted = mode.invert()
        for outer_lower in outer_w.lower_bounds:
            reached = self.false()
            for inner_lower in inner_w.lower_bounds:
                reached = reached | self._relate(
                    outer_lower, inner_lower, inverted, depth + 1
                )
                if reached.is_identity:
                    break
            result = result & reached
            if result.is_empty:
                return result

        return result


# Global engine instance
_global_engine: Optional[RelationEngine] = None
_global_lock = threading.Lock()


def get_engine() -> RelationEngine:
    """Get or create the engine bound to the global registry."""
    global _global_engine
    with _global_lock:
        if _global_engine is None:
            _global_engine = RelationEngine()
        return _global_engine


def set_engine(engine: RelationEngine) -> None:
    """Set the global engine."""
    global _global_engine
    with _global_lock:
        _global_engine = engine


def relate(left: Type, right: Type, mode: SolutionMode = IDENTITY) -> SolutionSet:
    """Relate ``left <: right`` with the global engine."""
    return get_engine().relate(left, right, mode)


def is_subtype(subtype: Type, supertype: Type) -> bool:
    return get_engine().is_subtype(subtype, supertype)


def is_supertype(supertype: Type, subtype: Type) -> bool:
    return get_engine().is_supertype(supertype, subtype)
