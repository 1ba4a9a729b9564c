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
"""typelattice: a structural type-algebra engine.

Models a nominally subtyped type system with declaration-site generics,
bounded type variables and wildcards, and answers questions about it:
subtyping, substitution, supertype enumeration, and inference of unknown
generic parameters from one-sided subtyping constraints ("what must X be
for ListKind<X> to be a CollectionKind<String>").

Key Components:
    - core: Type expressions, substitution, errors, configuration
    - registry: Declared parameters and supertypes per raw type
    - solver: Relation engine and disjunctive solution sets
    - hierarchy: Supertype lattice, downgrade / upgrade / shift / transform
    - facade: TypeToken and default instances
    - observability: Query metrics and exporters

References:
    - Gosling et al., "The Java Language Specification", Chapters 4 and 18
    - Pierce, B.C. (2002). "Types and Programming Languages", Chapters 15-16
"""

# Use lazy imports so subpackages load on first access.
# Full imports are done on first access via __getattr__

_CORE = (
    "Type",
    "PrimitiveType",
    "TopType",
    "RawType",
    "TypeVariable",
    "MethodSite",
    "WildcardType",
    "ArrayType",
    "ParameterizedType",
    "BOOLEAN",
    "BYTE",
    "CHAR",
    "SHORT",
    "INT",
    "LONG",
    "FLOAT",
    "DOUBLE",
    "VOID",
    "TOP",
    "array_of",
    "parameterize",
    "simple_name",
    "type_name",
    "wildcard",
    "wildcard_extends",
    "wildcard_super",
    "Substitution",
    "substitute",
    "EngineConfig",
    "get_default_config",
    "set_default_config",
    "TypeAlgebraError",
    "MalformedRelationInput",
    "RawTypeUsage",
    "NoNominalPath",
    "UnboundParameters",
    "UnresolvableBounds",
    "TooComplex",
    "NotInstantiable",
)

_REGISTRY = (
    "Declaration",
    "DeclarationRegistry",
    "get_global_registry",
    "set_global_registry",
    "from_annotation",
    "raw_type_of",
)

_SOLVER = (
    "RelationEngine",
    "SolutionMode",
    "SolutionSet",
    "Solution",
    "VariableSolution",
    "get_engine",
    "set_engine",
    "relate",
    "is_subtype",
    "is_supertype",
)

_HIERARCHY = (
    "direct_supertypes",
    "downgrade",
    "upgrade",
    "shift",
    "transform",
    "common_ancestors",
    "unresolved",
)

_FACADE = ("TypeToken", "default_instance")

_OBSERVABILITY = ("MetricsCollector", "get_global_collector", "set_global_collector")


def __getattr__(name: str):
    """Lazy import of module attributes."""
    if name in _CORE:
        from . import core

        return getattr(core, name)

    if name in _REGISTRY:
        from . import registry

        return getattr(registry, name)

    if name in _SOLVER:
        from . import solver

        return getattr(solver, name)

    if name in _HIERARCHY:
        from . import hierarchy

        return getattr(hierarchy, name)

    if name in _FACADE:
        from . import facade

        return getattr(facade, name)

    if name in _OBSERVABILITY:
        from . import observability

        return getattr(observability, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    *_CORE,
    *_REGISTRY,
    *_SOLVER,
    *_HIERARCHY,
    *_FACADE,
    *_OBSERVABILITY,
]

__version__ = "0.1.0"
