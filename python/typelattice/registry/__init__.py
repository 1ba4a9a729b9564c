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
"""Declaration registry for typelattice.

Key Components:
- declarations: Declaration records, DeclarationRegistry, global registry
- reflection: Loader reflecting Python generic classes
"""

from .declarations import (
    Declaration,
    DeclarationLoader,
    DeclarationRegistry,
    get_global_registry,
    raw_of,
    set_global_registry,
)
from .reflection import from_annotation, load_declaration, raw_type_of

__all__ = [
    "Declaration",
    "DeclarationLoader",
    "DeclarationRegistry",
    "get_global_registry",
    "raw_of",
    "set_global_registry",
    "from_annotation",
    "load_declaration",
    "raw_type_of",
]
