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
"""Nominal hierarchy: the supertype lattice and navigation over it.

Key Components:
- lattice: Argument binding, direct supertypes, nominal path walk, common
  ancestors
- navigation: downgrade, upgrade, shift, transform on top of the relation
  engine
"""

from .lattice import (
    common_ancestors,
    downgrade_to,
    next_on_path,
    raw_type,
    supertypes,
    type_arguments,
    unresolved,
)

# navigation depends on the solver, which depends on lattice; import it
# on first access so either package can be imported first.
_NAVIGATION = (
    "direct_supertypes",
    "downgrade",
    "ordered_free_vars",
    "shift",
    "transform",
    "upgrade",
)


def __getattr__(name: str):
    """Lazy import of navigation functions."""
    if name in _NAVIGATION:
        from . import navigation

        return getattr(navigation, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "common_ancestors",
    "downgrade_to",
    "next_on_path",
    "raw_type",
    "supertypes",
    "type_arguments",
    "unresolved",
    *_NAVIGATION,
]
