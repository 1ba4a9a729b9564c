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
"""Declaration loader reflecting Python generic classes.

Raw types made with raw_type_of(cls) carry their Python class. The first time
the registry sees such a raw type, load_declaration reads the class's
``__parameters__`` (each TypeVar's ``__bound__`` becomes its upper bound) and
``__orig_bases__`` (the first remaining base is the superclass, the rest are
superinterfaces). ``Generic``, ``Protocol`` and ``object`` are not part of
the nominal lattice and are skipped.

Works for both ``class Box(Generic[T])`` and ``class Box[T]:`` syntax; the
latter evaluates bounds lazily, so self-referencing bounds such as
``class Sorted[T: Comparable[T]]`` reflect without forward references.
"""

from __future__ import annotations

import logging
import typing
from typing import (
    Any,
    Dict,
    Generic,
    Mapping,
    Optional,
    Protocol,
    get_args,
    get_origin,
)

from ..core.types import TOP, ParameterizedType, RawType, Type, TypeVariable
from .declarations import Declaration

logger = logging.getLogger(__name__)

_SKIPPED_BASES = (Generic, Protocol, object)

TypeVarScope = Mapping[Any, TypeVariable]


def raw_type_of(cls: type) -> RawType:
    """Raw type of a Python class, named by module and qualified name."""
    return RawType(f"{cls.__module__}.{cls.__qualname__}", cls)


def from_annotation(annotation: Any, scope: Optional[TypeVarScope] = None) -> Type:
    """Convert a typing annotation into a type expression.

    Args:
        annotation: A class, a subscripted generic alias, a TypeVar,
            ``object`` or ``typing.Any``
        scope: Maps TypeVars to the variables of the declaration being
            reflected. TypeVars outside the scope become variables declared
            by the TypeVar object itself.

    Raises:
        TypeError: For annotations with no counterpart in the model
    """
    scope = scope or {}
    if annotation is object or annotation is typing.Any:
        return TOP

    if isinstance(annotation, typing.TypeVar):
        if annotation in scope:
            return scope[annotation]
        return TypeVariable(annotation, annotation.__name__)

    origin = get_origin(annotation)
    if isinstance(origin, type):
        args = tuple(from_annotation(arg, scope) for arg in get_args(annotation))
        return ParameterizedType(raw_type_of(origin), args)

    if isinstance(annotation, type):
        return raw_type_of(annotation)

    raise TypeError(f"Unsupported annotation: {annotation!r}")


def load_declaration(raw: RawType) -> Optional[Declaration]:
    """Reflect the declaration of a raw type bound to a Python class.

    Returns None for raw types without a Python class.
    """
    cls = raw.origin
    if cls is None:
        return None

    type_vars = [
        p
        for p in getattr(cls, "__parameters__", ())
        if isinstance(p, typing.TypeVar)
    ]
    scope: Dict[Any, TypeVariable] = {
        tv: TypeVariable(raw, tv.__name__) for tv in type_vars
    }
    parameters = tuple(_reflect_parameter(raw, tv, scope) for tv in type_vars)

    bases = []
    for base in cls.__dict__.get("__orig_bases__", cls.__bases__):
        base_cls = get_origin(base) or base
        if base_cls in _SKIPPED_BASES:
            continue
        bases.append(from_annotation(base, scope))

    logger.debug(
        f"Reflected {raw.name}: parameters={list(parameters)}, bases={bases}"
    )
    return Declaration(
        raw,
        parameters=parameters,
        superclass=bases[0] if bases else None,
        interfaces=tuple(bases[1:]),
    )


def _reflect_parameter(
    raw: RawType, type_var: Any, scope: TypeVarScope
) -> TypeVariable:
    bound = type_var.__bound__
    if bound is None:
        return scope[type_var]
    if isinstance(bound, (str, typing.ForwardRef)):
        raise TypeError(
            f"Forward reference bound {bound!r} of {type_var!r} on {raw.name} "
            f"cannot be reflected; use class {raw.simple_name}[...] syntax"
        )
    return TypeVariable(raw, type_var.__name__, (from_annotation(bound, scope),))
