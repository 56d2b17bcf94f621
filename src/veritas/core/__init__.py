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

"""Core data models and conversation helpers for VERITAS."""

from veritas.core.citations import Citation, deduplicate_citations, extract_citations
from veritas.core.conversation import ChatSession, apply_history_window
from veritas.core.models import (
    AttemptFailure,
    AttemptResult,
    AttemptSuccess,
    ChatMessage,
    Depth,
    ErrorKind,
    OrchestrationError,
    OrchestrationMeta,
    OrchestrationResult,
    ProviderReply,
    RequestOptions,
    Role,
    StructuredOutput,
)

__all__ = [
    "AttemptFailure",
    "AttemptResult",
    "AttemptSuccess",
    "ChatMessage",
    "ChatSession",
    "Citation",
    "Depth",
    "ErrorKind",
    "OrchestrationError",
    "OrchestrationMeta",
    "OrchestrationResult",
    "ProviderReply",
    "RequestOptions",
    "Role",
    "StructuredOutput",
    "apply_history_window",
    "deduplicate_citations",
    "extract_citations",
]
