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

"""Resilient request orchestration across model providers.

Key components:
- CircuitBreaker: Stops calling models that keep failing
- RetryController: Capped exponential backoff around one model
- StructuredOutputValidator: Schema check of replies
- RequestOrchestrator: Tries models in priority order with the above
"""

from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerMetrics,
    CircuitBreakerRegistry,
    CircuitState,
)
from .config import (
    DEFAULT_MODEL_CHAIN,
    CircuitBreakerConfig,
    ConfigurationError,
    OrchestratorConfig,
    RetryConfig,
)
from .orchestrator import ALL_PROVIDERS_FAILED, RequestOrchestrator
from .retry import RetryController, RetryOutcome
from .validation import StructuredOutputValidator

__all__ = [
    "ALL_PROVIDERS_FAILED",
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerMetrics",
    "CircuitBreakerRegistry",
    "CircuitState",
    "ConfigurationError",
    "DEFAULT_MODEL_CHAIN",
    "OrchestratorConfig",
    "RequestOrchestrator",
    "RetryConfig",
    "RetryController",
    "RetryOutcome",
    "StructuredOutputValidator",
]
