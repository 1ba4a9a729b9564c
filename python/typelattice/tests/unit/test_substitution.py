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
"""Unit tests for substitution."""

import pytest

from typelattice.core.substitution import EMPTY_SUBSTITUTION, Substitution, substitute
from typelattice.core.types import INT, ArrayType, RawType, TypeVariable

from ..hierarchy import X, Y

DOG = RawType("zoo.Dog")
BOX = RawType("zoo.Box")
BOX_E = TypeVariable(BOX, "E")


class TestSubstituteFunction:
    """Tests for the substitute() function."""

    def test_empty_mapping_returns_input(self):
        expr = BOX[X]
        assert substitute(expr, {}) is expr

    def test_replaces_and_leaves_unmapped(self):
        assert substitute(BOX[X], {Y: DOG}) == BOX[X]
        assert substitute(ArrayType(X), {X: DOG}) == ArrayType(DOG)

    def test_primitive_untouched(self):
        assert substitute(INT, {X: DOG}) is INT


class TestSubstitution:
    """Tests for the Substitution class."""

    def test_empty_substitution(self):
        """Empty substitution should have no mappings."""
        assert EMPTY_SUBSTITUTION.mapping == {}
        assert EMPTY_SUBSTITUTION.apply(BOX[X]) == BOX[X]

    def test_bind_pairs_positionally(self):
        subst = Substitution.bind((BOX_E,), (DOG,))
        assert subst.apply(BOX_E) == DOG
        assert BOX_E in subst
        assert len(subst) == 1

    def test_bind_rejects_arity_mismatch(self):
        with pytest.raises(ValueError, match="Expected 1 arguments"):
            Substitution.bind((BOX_E,), (DOG, DOG))

    def test_compose(self):
        """Composed substitution applies other first, then self."""
        first = Substitution({X: BOX[Y]})
        second = Substitution({Y: DOG})
        composed = second.compose(first)
        assert composed.apply(X) == BOX[DOG]
        assert composed.apply(Y) == DOG

    def test_extend_does_not_mutate(self):
        base = Substitution({X: DOG})
        extended = base.extend(Y, INT)
        assert Y not in base
        assert extended.apply(Y) == INT

    def test_apply_all(self):
        subst = Substitution({X: DOG})
        assert subst.apply_all((X, Y)) == (DOG, Y)

    def test_repr(self):
        assert repr(Substitution()) == "Substitution({})"
        assert repr(Substitution({X: DOG})) == "Substitution({X -> Dog})"
