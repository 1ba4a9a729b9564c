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
"""Substitution of type variables.

A substitution maps type variables (by declaration-site identity) to type
expressions. Applying it rewrites every mapped variable, leaves unmapped
variables in place and rebuilds a node only when one of its parts changed,
so applying an empty or irrelevant substitution returns the input object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Sequence

from .types import Type, TypeVariable


def substitute(expr: Type, mapping: Mapping[TypeVariable, Type]) -> Type:
    """Replace the mapped type variables of expr.

    Args:
        expr: The type expression to rewrite
        mapping: Bindings from type variables to replacement expressions

    Returns:
        The rewritten expression, or expr itself when nothing was mapped
    """
    if not mapping:
        return expr
    return expr.substitute(mapping)


@dataclass
class Substitution:
    """A type substitution mapping type variables to types.

    Attributes:
        mapping: Dictionary from variables to their bound types
    """

    mapping: Dict[TypeVariable, Type] = field(default_factory=dict)

    @staticmethod
    def bind(
        parameters: Sequence[TypeVariable], arguments: Sequence[Type]
    ) -> Substitution:
        """Pair declared parameters with arguments positionally."""
        if len(parameters) != len(arguments):
            raise ValueError(
                f"Expected {len(parameters)} arguments for "
                f"{list(parameters)!r}, got {len(arguments)}"
            )
        return Substitution(dict(zip(parameters, arguments)))

    def apply(self, ty: Type) -> Type:
        """Apply this substitution to a type."""
        return substitute(ty, self.mapping)

    def apply_all(self, types: Iterable[Type]) -> tuple:
        return tuple(self.apply(t) for t in types)

    def compose(self, other: Substitution) -> Substitution:
        """Compose two substitutions (self after other).

        Applying the result equals applying ``other`` first, then ``self``.
        """
        new_mapping = {k: self.apply(v) for k, v in other.mapping.items()}
        for k, v in self.mapping.items():
            if k not in new_mapping:
                new_mapping[k] = v
        return Substitution(new_mapping)

    def extend(self, var: TypeVariable, ty: Type) -> Substitution:
        """Return a new substitution with one additional binding."""
        new_mapping = dict(self.mapping)
        new_mapping[var] = ty
        return Substitution(new_mapping)

    def __contains__(self, var: object) -> bool:
        return var in self.mapping

    def __len__(self) -> int:
        return len(self.mapping)

    def __repr__(self) -> str:
        if not self.mapping:
            return "Substitution({})"
        items = ", ".join(f"{k!r} -> {v!r}" for k, v in self.mapping.items())
        return f"Substitution({{{items}}})"


EMPTY_SUBSTITUTION = Substitution()
