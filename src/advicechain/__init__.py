# Copyright 2026 Firefly Software Solutions Inc.
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
"""advicechain — run before, after and error advice around an operation."""

from advicechain.aop import (
    SENTINEL,
    AdviceChain,
    AdviceEntry,
    AdviceRegistry,
    AdviceSet,
    ChainControl,
    ChainExecutor,
    ChainState,
    ControlSurface,
    InvocationContext,
    bound_params,
    context_slot,
    weave,
    wrap_operation,
)
from advicechain.kernel.exceptions import (
    AdviceChainException,
    ChainStateException,
    InvalidChainException,
    WeavingException,
)

__version__ = "0.1.0"

__all__ = [
    "SENTINEL",
    "AdviceChain",
    "AdviceChainException",
    "AdviceEntry",
    "AdviceRegistry",
    "AdviceSet",
    "ChainControl",
    "ChainExecutor",
    "ChainState",
    "ChainStateException",
    "ControlSurface",
    "InvalidChainException",
    "InvocationContext",
    "WeavingException",
    "bound_params",
    "context_slot",
    "weave",
    "wrap_operation",
]
