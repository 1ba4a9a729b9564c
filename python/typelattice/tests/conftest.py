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
"""Pytest configuration for typelattice tests."""

import pytest

from typelattice.observability.collector import MetricsCollector
from typelattice.registry.declarations import DeclarationRegistry
from typelattice.solver.relation import RelationEngine

from .hierarchy import SampleHierarchy, build_sample_hierarchy


@pytest.fixture
def sample() -> SampleHierarchy:
    """A fresh sample hierarchy with its own registry and engine."""
    return build_sample_hierarchy()


@pytest.fixture
def engine(sample: SampleHierarchy) -> RelationEngine:
    return sample.engine


@pytest.fixture
def registry(sample: SampleHierarchy) -> DeclarationRegistry:
    return sample.registry


@pytest.fixture
def collector() -> MetricsCollector:
    return MetricsCollector()
