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
"""Engine configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from advicechain.core.config import config_properties


@config_properties(prefix="advicechain.engine")
@dataclass
class EngineProperties:
    """Configuration for the chain executor (advicechain.engine.*).

    ``strict`` turns late or repeated ``advance()``/``halt()`` calls into
    :class:`~advicechain.kernel.exceptions.ChainStateException` instead of
    logged no-ops. ``log_suspended`` controls the debug event emitted when a
    wrapper returns while its chain still awaits ``advance()``.
    """

    strict: bool = False
    log_suspended: bool = True
