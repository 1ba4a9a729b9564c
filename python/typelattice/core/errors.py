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
"""Error taxonomy for typelattice queries.

Every error is local to the query that raised it: nothing is written to the
declaration registry and no partial result is returned.
"""

from __future__ import annotations

from typing import Any, Sequence, Tuple


def _names(items: Sequence[Any]) -> str:
    return ", ".join(repr(item) for item in items)


class TypeAlgebraError(Exception):
    """Base class for all typelattice errors."""


class MalformedRelationInput(TypeAlgebraError, ValueError):
    """A relation query was given a type expression it cannot accept.

    Raised for a top-level wildcard, a primitive paired with a reference
    type, or a parameterized type whose argument count disagrees with its
    declaration.
    """

    def __init__(self, expression: Any, message: str):
        self.expression = expression
        self.message = message
        super().__init__(f"Malformed relation input {expression!r}: {message}")


class RawTypeUsage(MalformedRelationInput):
    """A generic raw type was used without type arguments."""

    def __init__(self, expression: Any, parameters: Sequence[Any]):
        self.parameters = tuple(parameters)
        super().__init__(
            expression,
            "raw usage of generic type, expected arguments for "
            f"{_names(self.parameters)}",
        )


class NoNominalPath(TypeAlgebraError):
    """The target raw type is not reachable from the source in the lattice."""

    def __init__(self, source: Any, target: Any):
        self.source = source
        self.target = target
        super().__init__(f"No nominal path from {source!r} to {target!r}")


class UnboundParameters(TypeAlgebraError):
    """Inference left declared parameters of the target without a binding."""

    def __init__(self, parameters: Sequence[Any], target: Any, source: Any):
        self.parameters = tuple(parameters)
        self.target = target
        self.source = source
        super().__init__(
            f"Cannot bind {_names(self.parameters)} of {target!r} from {source!r}"
        )


class UnresolvableBounds(TypeAlgebraError):
    """A variable's accumulated bounds do not determine a single type."""

    def __init__(
        self,
        variable: Any,
        upper_bounds: Tuple[Any, ...] = (),
        lower_bounds: Tuple[Any, ...] = (),
        message: str = "",
    ):
        self.variable = variable
        self.upper_bounds = tuple(upper_bounds)
        self.lower_bounds = tuple(lower_bounds)
        detail = message or (
            f"upper bounds [{_names(self.upper_bounds)}], "
            f"lower bounds [{_names(self.lower_bounds)}]"
        )
        subject = "bounds" if variable is None else repr(variable)
        super().__init__(f"Cannot resolve {subject}: {detail}")


class TooComplex(TypeAlgebraError):
    """A recursion depth or solution size limit was exceeded."""

    def __init__(self, what: str, limit: int):
        self.what = what
        self.limit = limit
        super().__init__(f"Query too complex: {what} exceeded limit {limit}")


class NotInstantiable(TypeAlgebraError, TypeError):
    """No default instance can be produced for a type expression."""

    def __init__(self, type_expr: Any, message: str):
        self.type_expr = type_expr
        self.message = message
        super().__init__(f"Cannot instantiate {type_expr!r}: {message}")
