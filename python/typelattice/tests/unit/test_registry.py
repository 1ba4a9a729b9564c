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
"""Unit tests for the declaration registry."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from typelattice.core.types import TOP, RawType, TypeVariable
from typelattice.registry.declarations import (
    Declaration,
    DeclarationRegistry,
    get_global_registry,
    raw_of,
    set_global_registry,
)

from ..hierarchy import X


class TestDeclare:
    """Tests for publishing declarations."""

    def test_declare_by_name(self):
        registry = DeclarationRegistry()
        raw = registry.declare("zoo.Cat")
        assert raw == RawType("zoo.Cat")
        assert raw in registry
        assert registry.count == 1

    def test_named_parameters(self):
        registry = DeclarationRegistry()
        raw = registry.declare("zoo.Cage", ("K", "V"))
        assert registry.declared_params(raw) == (
            TypeVariable(raw, "K"),
            TypeVariable(raw, "V"),
        )

    def test_foreign_parameter_rejected(self):
        registry = DeclarationRegistry()
        with pytest.raises(ValueError, match="declared at"):
            registry.declare("zoo.Cage", (X,))

    def test_first_declaration_wins(self, sample, registry):
        registry.declare(sample.dog, superclass=sample.number)
        assert registry.direct_superclass(sample.dog) == sample.animal

    def test_register_returns_published(self):
        registry = DeclarationRegistry()
        first = registry.register(Declaration(RawType("zoo.Cat")))
        second = registry.register(
            Declaration(RawType("zoo.Cat"), superclass=RawType("zoo.Animal"))
        )
        assert second is first

    def test_declaration_supertypes(self, sample, registry):
        declaration = registry.lookup(sample.integer)
        assert declaration.supertypes == (
            sample.number,
            sample.comparable[sample.integer],
        )
        assert not declaration.is_generic
        assert registry.lookup(sample.list_kind).supertypes == (
            sample.collection[sample.list_e],
        )
        assert registry.lookup(sample.list_kind).is_generic

    def test_interfaces_and_enclosing(self, sample, registry):
        assert registry.direct_superinterfaces(sample.string) == (
            sample.comparable[sample.string],
        )
        assert registry.enclosing(sample.inner) == sample.outer
        assert registry.enclosing(sample.outer) is None


class TestLookup:
    """Tests for read-through lookup."""

    def test_unknown_becomes_leaf(self, caplog):
        registry = DeclarationRegistry()
        with caplog.at_level(logging.DEBUG, logger="typelattice.registry"):
            declaration = registry.lookup(RawType("zoo.Ghost"))
        assert declaration == Declaration(RawType("zoo.Ghost"))
        assert "treating it as a leaf" in caplog.text
        assert RawType("zoo.Ghost") in registry

    def test_declare_after_lookup_keeps_leaf(self, caplog):
        registry = DeclarationRegistry()
        ghost = RawType("zoo.Ghost")
        registry.lookup(ghost)
        with caplog.at_level(logging.DEBUG, logger="typelattice.registry"):
            registry.declare(ghost, ("T",))
        assert "zoo.Ghost is already declared" in caplog.text
        assert registry.declared_params(ghost) == ()

    def test_identical_redeclaration_is_silent(self, caplog):
        registry = DeclarationRegistry()
        registry.declare("zoo.Cage", ("T",))
        with caplog.at_level(logging.DEBUG, logger="typelattice.registry"):
            registry.declare("zoo.Cage", ("T",))
        assert "already declared" not in caplog.text

    def test_loader_called_once(self):
        calls = []

        def loader(raw):
            calls.append(raw)
            return Declaration(raw, superclass=RawType("zoo.Animal"))

        registry = DeclarationRegistry(loader=loader)
        cat = RawType("zoo.Cat")
        assert registry.direct_superclass(cat) == RawType("zoo.Animal")
        assert registry.direct_superclass(cat) == RawType("zoo.Animal")
        assert calls.count(cat) == 1

    def test_concurrent_first_lookup_publishes_once(self):
        workers = 8
        barrier = threading.Barrier(workers, timeout=10)
        calls = []

        def loader(raw):
            calls.append(raw)
            barrier.wait()
            return Declaration(raw, superclass=RawType("zoo.Animal"))

        registry = DeclarationRegistry(loader=loader)
        cat = RawType("zoo.Cat")
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: registry.lookup(cat), range(workers)))

        assert len(calls) == workers
        assert all(result is results[0] for result in results)
        assert registry.lookup(cat) is results[0]


class TestAncestors:
    """Tests for the ancestor closure."""

    def test_closure(self, sample, registry):
        assert registry.ancestors(sample.puppy) == frozenset(
            {sample.puppy, sample.dog, sample.animal}
        )
        assert registry.ancestors(sample.array_list) == frozenset(
            {sample.array_list, sample.list_kind, sample.collection}
        )

    def test_cached(self, sample, registry):
        assert registry.ancestors(sample.puppy) is registry.ancestors(sample.puppy)

    def test_is_ancestor(self, sample, registry):
        assert registry.is_ancestor(sample.dog, sample.dog)
        assert registry.is_ancestor(sample.comparable, sample.integer)
        assert not registry.is_ancestor(sample.dog, sample.animal)


class TestVariableBounds:
    """Tests for variable bound lookup."""

    def test_unbounded_defaults_to_top(self, sample, registry):
        assert registry.variable_bounds(sample.box_e) == (TOP,)
        assert registry.variable_bounds(X) == (TOP,)

    def test_own_bounds(self, sample, registry):
        bounded = TypeVariable(X.site, "D", (sample.dog,))
        assert registry.variable_bounds(bounded) == (sample.dog,)

    def test_declared_bounds(self, sample, registry):
        bare = TypeVariable(sample.sorted_kind, "T")
        bounds = registry.variable_bounds(bare)
        assert bounds == (sample.comparable[bare],)


class TestHelpers:
    """Tests for module-level helpers."""

    def test_raw_of(self, sample):
        assert raw_of(sample.dog) is sample.dog
        assert raw_of(sample.box[sample.dog]) is sample.box
        assert raw_of(X) is None

    def test_global_registry(self):
        previous = get_global_registry()
        custom = DeclarationRegistry()
        set_global_registry(custom)
        try:
            assert get_global_registry() is custom
        finally:
            set_global_registry(previous)
