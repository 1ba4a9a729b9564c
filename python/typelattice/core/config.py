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
"""Engine configuration.

Limits guard the recursive algorithms against runaway queries; exceeding one
raises TooComplex instead of overflowing the interpreter stack.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Configuration for a RelationEngine.

    Attributes:
        max_depth: Maximum structural recursion depth of a relation query,
            also used as the step limit of nominal path walks
        max_disjuncts: Maximum number of disjuncts a conjunction may produce
        collect_metrics: Attach the global metrics collector to engines that
            were built without an explicit collector
    """

    max_depth: int = 64
    max_disjuncts: int = 4096
    collect_metrics: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")
        if self.max_disjuncts < 1:
            raise ValueError(
                f"max_disjuncts must be positive, got {self.max_disjuncts}"
            )

    def with_overrides(self, **overrides: Any) -> EngineConfig:
        return replace(self, **overrides)


DEFAULT_CONFIG = EngineConfig()

_default_config: EngineConfig = DEFAULT_CONFIG
_config_lock = threading.Lock()


def get_default_config() -> EngineConfig:
    """Get the process-wide default configuration."""
    return _default_config


def set_default_config(config: EngineConfig) -> None:
    """Set the process-wide default configuration.

    Engines already built keep the configuration they were built with.
    """
    global _default_config
    with _config_lock:
        _default_config = config
