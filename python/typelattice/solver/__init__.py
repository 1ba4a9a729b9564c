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
"""Constraint solver for relation queries.

Key Components:
- solution: SolutionMode, VariableSolution, Solution, SolutionSet
- relation: RelationEngine and the global engine
"""

from .relation import (
    RelationEngine,
    as_wildcard,
    get_engine,
    is_subtype,
    is_supertype,
    relate,
    set_engine,
)
from .solution import (
    EMPTY_SOLUTION,
    Solution,
    SolutionMode,
    SolutionSet,
    VariableSolution,
)

__all__ = [
    "RelationEngine",
    "as_wildcard",
    "get_engine",
    "is_subtype",
    "is_supertype",
    "relate",
    "set_engine",
    "EMPTY_SOLUTION",
    "Solution",
    "SolutionMode",
    "SolutionSet",
    "VariableSolution",
]
