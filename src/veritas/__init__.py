# Copyright 2025 VERITAS Contributors
#
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

"""
VERITAS

Evidence-first research assistant backed by a resilient multi-provider
LLM request pipeline.
"""

__version__ = "0.1.0"

from veritas.core.models import (
    ChatMessage,
    Depth,
    ErrorKind,
    OrchestrationResult,
    RequestOptions,
    Role,
)

__all__ = [
    "ChatMessage",
    "Depth",
    "ErrorKind",
    "OrchestrationResult",
    "RequestOptions",
    "Role",
    "__version__",
]
