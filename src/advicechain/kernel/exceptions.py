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
"""Exception hierarchy for advicechain.

All engine exceptions inherit from AdviceChainException so callers can
catch engine misuse with a single handler. Exceptions raised by woven
operations and by advices are never wrapped in these types.

Categories:
- InvalidChainException: malformed advice chains
- ChainStateException: control operations issued in an illegal chain state
- WeavingException: operations that cannot be woven
"""

from __future__ import annotations


class AdviceChainException(Exception):
    """Base exception for all advicechain errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CHAIN_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class InvalidChainException(AdviceChainException):
    """The advice chain does not contain exactly one sentinel."""


class ChainStateException(AdviceChainException):
    """advance() or halt() was issued when the chain could not accept it."""


class WeavingException(AdviceChainException):
    """An operation could not be replaced by its advised wrapper."""
