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
"""Convenience facade over the algebra.

Key Components:
- instances: default_instance and instance factories
- token: TypeToken
"""

from .instances import (
    InstanceFactory,
    ZERO_VALUES,
    default_instance,
    register_instance_factory,
    unregister_instance_factory,
)
from .token import TypeToken

__all__ = [
    "InstanceFactory",
    "ZERO_VALUES",
    "default_instance",
    "register_instance_factory",
    "unregister_instance_factory",
    "TypeToken",
]
