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
"""Control surface handed to advices to drive or stop their chain."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ChainControl(Protocol):
    """The two operations an advice may use on its chain.

    ``advance()`` moves the chain to its next entry, immediately or from a
    later callback. ``halt()`` ends the chain and discards every entry that
    has not run yet.
    """

    def advance(self) -> None: ...
    def halt(self) -> None: ...


class ControlSurface:
    """Inert :class:`ChainControl` whose operations do nothing.

    Handy for calling an advice directly, outside any chain::

        audit_advice(ControlSurface(), context)
    """

    __slots__ = ()

    def advance(self) -> None:
        return None

    def halt(self) -> None:
        return None
