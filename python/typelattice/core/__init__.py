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
"""Core of typelattice: the type-expression model and its ambient pieces.

Key Components:
- types: Type hierarchy, primitive singletons, TOP, formatting helpers
- substitution: Variable substitution
- errors: Error taxonomy shared by every query
- config: EngineConfig limits
"""

from .config import (
    DEFAULT_CONFIG,
    EngineConfig,
    get_default_config,
    set_default_config,
)
from .errors import (
    MalformedRelationInput,
    NoNominalPath,
    NotInstantiable,
    RawTypeUsage,
    TooComplex,
    TypeAlgebraError,
    UnboundParameters,
    UnresolvableBounds,
)
from .substitution import EMPTY_SUBSTITUTION, Substitution, substitute
from .types import (
    # Type hierarchy
    Type,
    PrimitiveType,
    TopType,
    RawType,
    TypeVariable,
    MethodSite,
    WildcardType,
    ArrayType,
    ParameterizedType,
    NominalType,
    # Singletons
    BOOLEAN,
    BYTE,
    CHAR,
    SHORT,
    INT,
    LONG,
    FLOAT,
    DOUBLE,
    VOID,
    PRIMITIVES,
    TOP,
    UNBOUNDED,
    # Factory and query helpers
    array_of,
    component_type,
    is_array,
    is_nominal,
    is_reference,
    parameterize,
    simple_name,
    type_name,
    wildcard,
    wildcard_extends,
    wildcard_super,
)

__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "get_default_config",
    "set_default_config",
    "MalformedRelationInput",
    "NoNominalPath",
    "NotInstantiable",
    "RawTypeUsage",
    "TooComplex",
    "TypeAlgebraError",
    "UnboundParameters",
    "UnresolvableBounds",
    "EMPTY_SUBSTITUTION",
    "Substitution",
    "substitute",
    "Type",
    "PrimitiveType",
    "TopType",
    "RawType",
    "TypeVariable",
    "MethodSite",
    "WildcardType",
    "ArrayType",
    "ParameterizedType",
    "NominalType",
    "BOOLEAN",
    "BYTE",
    "CHAR",
    "SHORT",
    "INT",
    "LONG",
    "FLOAT",
    "DOUBLE",
    "VOID",
    "PRIMITIVES",
    "TOP",
    "UNBOUNDED",
    "array_of",
    "component_type",
    "is_array",
    "is_nominal",
    "is_reference",
    "parameterize",
    "simple_name",
    "type_name",
    "wildcard",
    "wildcard_extends",
    "wildcard_super",
]
