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
"""Disjunctive solution sets for relation queries.

A relation query answers "under which bindings of the unknown type variables
does left relate to right". The answer is kept in disjunctive normal form:

- VariableSolution: the upper and lower bounds accumulated for one variable
- Solution: one conjunctive binding, a VariableSolution per variable
- SolutionSet: a disjunction of Solutions

Algebra:
    S ∧ T = { s ⊔ t | s ∈ S, t ∈ T }     (product, merged per variable)
    S ∨ T = S ∪ T
    false = {}                            (no disjunct: contradiction)
    true  = { {} }                        (one disjunct constraining nothing)

Bounds are kept minimal under a subtype ordering supplied by the engine:
adding an upper bound drops the existing upper bounds it is a subtype of and
is itself dropped when an existing upper bound is already a subtype of it;
lower bounds keep the widest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, FrozenSet, Iterator, Optional, Tuple

from ..core.errors import TooComplex, UnresolvableBounds
from ..core.types import TOP, Type, TypeVariable

# is_subtype(a, b) under the engine's identity relation
SubtypeOrder = Callable[[Type, Type], bool]

DEFAULT_MAX_DISJUNCTS = 4096


def equality_order(left: Type, right: Type) -> bool:
    """Fallback ordering that only relates equal types."""
    return left == right


class SolutionMode(Enum):
    """Which side of a relation may bind type variables.

    IDENTITY: variables are opaque and only equal themselves
    INFER_LEFT: variables on the left side are unknowns bounded from above
    INFER_RIGHT: variables on the right side are unknowns bounded from below
    """

    IDENTITY = auto()
    INFER_LEFT = auto()
    INFER_RIGHT = auto()

    def invert(self) -> SolutionMode:
        """Swap the inferred side; IDENTITY is unchanged."""
        if self == SolutionMode.INFER_LEFT:
            return SolutionMode.INFER_RIGHT
        if self == SolutionMode.INFER_RIGHT:
            return SolutionMode.INFER_LEFT
        return SolutionMode.IDENTITY


@dataclass(frozen=True, slots=True)
class VariableSolution:
    """Bounds accumulated for one variable.

    Attributes:
        upper_bounds: Types the variable must be a subtype of
        lower_bounds: Types that must be subtypes of the variable
    """

    upper_bounds: Tuple[Type, ...] = ()
    lower_bounds: Tuple[Type, ...] = ()

    def with_upper_bound(
        self, bound: Type, order: SubtypeOrder = equality_order
    ) -> VariableSolution:
        if any(order(existing, bound) for existing in self.upper_bounds):
            return self
        kept = tuple(u for u in self.upper_bounds if not order(bound, u))
        return VariableSolution(kept + (bound,), self.lower_bounds)

    def with_lower_bound(
        self, bound: Type, order: SubtypeOrder = equality_order
    ) -> VariableSolution:
        if any(order(bound, existing) for existing in self.lower_bounds):
            return self
        kept = tuple(lb for lb in self.lower_bounds if not order(lb, bound))
        return VariableSolution(self.upper_bounds, kept + (bound,))

    def merge(
        self, other: VariableSolution, order: SubtypeOrder = equality_order
    ) -> VariableSolution:
        merged = self
        for bound in other.upper_bounds:
            merged = merged.with_upper_bound(bound, order)
        for bound in other.lower_bounds:
            merged = merged.with_lower_bound(bound, order)
        return merged

    def resolve(self, variable: Optional[TypeVariable] = None) -> Type:
        """Pick the single type these bounds determine.

        A variable bounded from both sides resolves only when the bounds pin
        it exactly (one lower bound equal to one upper bound). Otherwise a
        single lower bound wins, then a single upper bound, and an
        unconstrained variable resolves to the top type.

        Raises:
            UnresolvableBounds: For any other combination
        """
        upper, lower = self.upper_bounds, self.lower_bounds
        if upper and lower:
            if len(upper) == 1 and len(lower) == 1 and upper[0] == lower[0]:
                return lower[0]
            raise UnresolvableBounds(variable, upper, lower)
        if len(lower) == 1:
            return lower[0]
        if lower:
            raise UnresolvableBounds(variable, upper, lower)
        if len(upper) == 1:
            return upper[0]
        if not upper:
            return TOP
        raise UnresolvableBounds(variable, upper, lower)

    def __repr__(self) -> str:
        parts = [f"<: {u!r}" for u in self.upper_bounds]
        parts += [f":> {lb!r}" for lb in self.lower_bounds]
        return "{" + ", ".join(parts) + "}"


@dataclass(frozen=True, slots=True)
class Solution:
    """One conjunctive binding: a VariableSolution per constrained variable.

    Attributes:
        bindings: (variable, bounds) pairs, at most one per variable
    """

    bindings: FrozenSet[Tuple[TypeVariable, VariableSolution]] = frozenset()

    @staticmethod
    def upper_bound(variable: TypeVariable, bound: Type) -> Solution:
        return Solution(frozenset({(variable, VariableSolution((bound,), ()))}))

    @staticmethod
    def lower_bound(variable: TypeVariable, bound: Type) -> Solution:
        return Solution(frozenset({(variable, VariableSolution((), (bound,)))}))

    def as_dict(self) -> Dict[TypeVariable, VariableSolution]:
        return dict(self.bindings)

    @property
    def variables(self) -> FrozenSet[TypeVariable]:
        return frozenset(var for var, _ in self.bindings)

    @property
    def is_empty(self) -> bool:
        """True when no variable is constrained."""
        return not self.bindings

    def get(self, variable: TypeVariable) -> Optional[VariableSolution]:
        return self.as_dict().get(variable)

    def merge(self, other: Solution, order: SubtypeOrder = equality_order) -> Solution:
        """Conjoin two bindings, merging the bounds of shared variables."""
        if other.is_empty:
            return self
        if self.is_empty:
            return other
        merged = self.as_dict()
        for var, bounds in other.bindings:
            existing = merged.get(var)
            merged[var] = bounds if existing is None else existing.merge(bounds, order)
        return Solution(frozenset(merged.items()))

    def root(self) -> Dict[TypeVariable, Type]:
        """Resolve every constrained variable to a single type."""
        return {var: bounds.resolve(var) for var, bounds in self.bindings}

    def __repr__(self) -> str:
        inner = ", ".join(f"{var!r} {bounds!r}" for var, bounds in self.bindings)
        return f"Solution({inner})"


EMPTY_SOLUTION = Solution()


@dataclass(frozen=True, slots=True)
class SolutionSet:
    """A disjunction of Solutions.

    Attributes:
        cases: The disjuncts, without duplicates
        order: Subtype ordering used to keep merged bounds minimal
        max_disjuncts: Size limit for products and unions
    """

    cases: Tuple[Solution, ...] = ()
    order: SubtypeOrder = field(default=equality_order, compare=False, repr=False)
    max_disjuncts: int = field(
        default=DEFAULT_MAX_DISJUNCTS, compare=False, repr=False
    )

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def false(
        cls,
        order: SubtypeOrder = equality_order,
        max_disjuncts: int = DEFAULT_MAX_DISJUNCTS,
    ) -> SolutionSet:
        return cls((), order, max_disjuncts)

    @classmethod
    def true(
        cls,
        order: SubtypeOrder = equality_order,
        max_disjuncts: int = DEFAULT_MAX_DISJUNCTS,
    ) -> SolutionSet:
        return cls((EMPTY_SOLUTION,), order, max_disjuncts)

    @classmethod
    def const(
        cls,
        value: bool,
        order: SubtypeOrder = equality_order,
        max_disjuncts: int = DEFAULT_MAX_DISJUNCTS,
    ) -> SolutionSet:
        if value:
            return cls.true(order, max_disjuncts)
        return cls.false(order, max_disjuncts)

    @classmethod
    def upper_bound(
        cls,
        variable: TypeVariable,
        bound: Type,
        order: SubtypeOrder = equality_order,
        max_disjuncts: int = DEFAULT_MAX_DISJUNCTS,
    ) -> SolutionSet:
        return cls((Solution.upper_bound(variable, bound),), order, max_disjuncts)

    @classmethod
    def lower_bound(
        cls,
        variable: TypeVariable,
        bound: Type,
        order: SubtypeOrder = equality_order,
        max_disjuncts: int = DEFAULT_MAX_DISJUNCTS,
    ) -> SolutionSet:
        return cls((Solution.lower_bound(variable, bound),), order, max_disjuncts)

    def _derive(self, cases: Tuple[Solution, ...]) -> SolutionSet:
        return SolutionSet(cases, self.order, self.max_disjuncts)

    # =========================================================================
    # Algebra
    # =========================================================================

    def conjoin(self, other: SolutionSet) -> SolutionSet:
        """Cartesian product of the disjuncts, merged per variable."""
        if self.is_empty or other.is_empty:
            return self._derive(())
        if len(self.cases) * len(other.cases) > self.max_disjuncts:
            raise TooComplex("solution disjuncts", self.max_disjuncts)
        cases = []
        for left in self.cases:
            for right in other.cases:
                merged = left.merge(right, self.order)
                if merged not in cases:
                    cases.append(merged)
        return self._derive(tuple(cases))

    def disjoin(self, other: SolutionSet) -> SolutionSet:
        """Union of the disjuncts."""
        cases = list(self.cases)
        for case in other.cases:
            if case not in cases:
                cases.append(case)
        if len(cases) > self.max_disjuncts:
            raise TooComplex("solution disjuncts", self.max_disjuncts)
        return self._derive(tuple(cases))

    def __and__(self, other: SolutionSet) -> SolutionSet:
        return self.conjoin(other)

    def __or__(self, other: SolutionSet) -> SolutionSet:
        return self.disjoin(other)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def is_identity(self) -> bool:
        """True when some disjunct holds without constraining any variable."""
        return any(case.is_empty for case in self.cases)

    @property
    def is_empty(self) -> bool:
        """True when no disjunct exists (the relation cannot hold)."""
        return not self.cases

    def root(self) -> Dict[TypeVariable, Type]:
        """Resolve the first disjunct.

        Raises:
            UnresolvableBounds: If there is no disjunct, or the first one does
                not determine a single type for some variable
        """
        if not self.cases:
            raise UnresolvableBounds(None, message="no disjunct satisfies the relation")
        return self.cases[0].root()

    def __iter__(self) -> Iterator[Solution]:
        return iter(self.cases)

    def __len__(self) -> int:
        return len(self.cases)

    def __bool__(self) -> bool:
        return bool(self.cases)

    def __repr__(self) -> str:
        if not self.cases:
            return "SolutionSet(false)"
        return "SolutionSet(" + " | ".join(repr(c) for c in self.cases) + ")"
