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
"""Advice chain execution — wraps operations with before, after and error advice."""

from advicechain.aop.control import ChainControl, ControlSurface
from advicechain.aop.decorators import bound_params, context_slot, get_bound_params, get_context_slot
from advicechain.aop.executor import ChainExecutor, resolve_params
from advicechain.aop.registry import AdviceRegistry
from advicechain.aop.types import (
    SENTINEL,
    AdviceChain,
    AdviceEntry,
    AdviceSet,
    ChainMarker,
    ChainState,
    InvocationContext,
)
from advicechain.aop.weaver import is_woven, weave, wrap_operation

__all__ = [
    "SENTINEL",
    "AdviceChain",
    "AdviceEntry",
    "AdviceRegistry",
    "AdviceSet",
    "ChainControl",
    "ChainExecutor",
    "ChainMarker",
    "ChainState",
    "ControlSurface",
    "InvocationContext",
    "bound_params",
    "context_slot",
    "get_bound_params",
    "get_context_slot",
    "is_woven",
    "resolve_params",
    "weave",
    "wrap_operation",
]
