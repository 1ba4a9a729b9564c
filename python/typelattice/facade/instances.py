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
"""Default instances of resolved types.

Primitives produce their zero value, arrays an empty list, the top type a
bare ``object()``. Nominal types call a registered InstanceFactory, else the
no-argument constructor of the Python class their raw type was reflected
from. Anything else (variables, wildcards, void, nominal types without a
runtime class) is not instantiable.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional, Protocol

from ..core.errors import NotInstantiable
from ..core.types import (
    BOOLEAN,
    BYTE,
    CHAR,
    DOUBLE,
    FLOAT,
    INT,
    LONG,
    SHORT,
    ArrayType,
    ParameterizedType,
    PrimitiveType,
    RawType,
    TopType,
    Type,
)

ZERO_VALUES: Dict[PrimitiveType, Any] = {
    BOOLEAN: False,
    BYTE: 0,
    CHAR: "\0",
    SHORT: 0,
    INT: 0,
    LONG: 0,
    FLOAT: 0.0,
    DOUBLE: 0.0,
}


class InstanceFactory(Protocol):
    """Produces an instance of a resolved nominal type."""

    def __call__(self, type_expr: Type) -> Any: ...


_factories: Dict[RawType, InstanceFactory] = {}
_factories_lock = threading.Lock()


def register_instance_factory(raw: RawType, factory: InstanceFactory) -> None:
    """Use factory for every type whose raw type is raw."""
    with _factories_lock:
        _factories[raw] = factory


def unregister_instance_factory(raw: RawType) -> Optional[InstanceFactory]:
    with _factories_lock:
        return _factories.pop(raw, None)


def default_instance(type_expr: Type) -> Any:
    """Produce a default instance of a resolved type.

    Raises:
        NotInstantiable: If the type has no default instance
    """
    if isinstance(type_expr, PrimitiveType):
        if type_expr not in ZERO_VALUES:
            raise NotInstantiable(type_expr, "primitive has no value")
        return ZERO_VALUES[type_expr]

    if isinstance(type_expr, ArrayType):
        return []

    if isinstance(type_expr, TopType):
        return object()

    if isinstance(type_expr, (RawType, ParameterizedType)):
        raw = type_expr if isinstance(type_expr, RawType) else type_expr.raw
        factory = _factories.get(raw)
        if factory is not None:
            return factory(type_expr)
        if raw.origin is None:
            raise NotInstantiable(type_expr, "no runtime class bound to raw type")
        try:
            return raw.origin()
        except TypeError as e:
            raise NotInstantiable(type_expr, f"constructor failed: {e}") from e

    raise NotInstantiable(type_expr, "type is not resolved")
