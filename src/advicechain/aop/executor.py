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
"""ChainExecutor — drives one advice chain against one InvocationContext.

Advices are called as ``advice(executor, *params)`` and must call
``executor.advance()`` to let the chain move on. The call may happen before
the advice returns, or later from any callback (an event-loop timer, a
thread, a completion handler); the chain resumes from wherever it comes.
The operation itself runs as soon as the chain reaches the sentinel.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from advicechain.aop.decorators import get_bound_params, get_context_slot
from advicechain.aop.types import (
    SENTINEL,
    AdviceChain,
    AdviceEntry,
    ChainItem,
    ChainState,
    InvocationContext,
)
from advicechain.kernel.exceptions import ChainStateException

logger = logging.getLogger(__name__)

_SETTLED_STATES = frozenset({ChainState.DONE, ChainState.STOPPED, ChainState.FAULTED})


def resolve_params(entry: AdviceEntry, context: InvocationContext) -> list[Any]:
    """Build the parameters passed to *entry*'s advice after the control surface.

    Starts from the ``@bound_params`` template (or the static arguments when
    the advice has none), then inserts *context* at the ``@context_slot``
    position when the advice asks for it.
    """
    template = get_bound_params(entry.advice)
    if template is None:
        params = list(entry.static_args)
    else:
        params = [_pick(entry.static_args, index) for index in template]

    slot = get_context_slot(entry.advice)
    if slot is not None:
        params.insert(slot, context)
    return params


def _pick(static_args: tuple[Any, ...], index: int | None) -> Any:
    if index is None or not -len(static_args) <= index < len(static_args):
        return None
    return static_args[index]


class ChainExecutor:
    """Walks an :class:`AdviceChain`, starting as soon as it is constructed.

    Args:
        context: The call's shared :class:`InvocationContext`.
        chain: The chain to run, or any iterable accepted by
            :class:`AdviceChain`.
        error_advice: Entry run when the operation raises. Without one the
            operation's exception propagates out of the constructor.
        strict: Raise :class:`ChainStateException` for ``advance()``/``halt()``
            calls the chain cannot accept instead of logging and ignoring them.

    Exceptions raised by advices are not caught; they propagate to whoever
    triggered the step and leave the chain ``FAULTED``.
    """

    def __init__(
        self,
        context: InvocationContext,
        chain: AdviceChain | Iterable[ChainItem],
        error_advice: AdviceEntry | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self.context = context
        self._chain = chain if isinstance(chain, AdviceChain) else AdviceChain(chain)
        self._error_advice = error_advice
        self._strict = strict
        self._state = ChainState.IDLE
        self._position = -1
        self._awaiting = False
        self._depth = 0
        self._recovering = False
        self._error_handled = False
        self._step()

    # -- introspection ----------------------------------------------------

    @property
    def state(self) -> ChainState:
        return self._state

    @property
    def position(self) -> int:
        """Index of the chain entry reached so far (``-1`` before the first)."""
        return self._position

    @property
    def settled(self) -> bool:
        """Whether the chain reached DONE, STOPPED or FAULTED."""
        return self._state in _SETTLED_STATES

    @property
    def suspended(self) -> bool:
        """Whether an advice still owes an ``advance()`` and nothing drives the chain.

        A chain whose advice never calls ``advance()`` or ``halt()`` stays
        suspended for good; no timeout applies.
        """
        return self._awaiting and self._depth == 0 and not self.settled

    @property
    def error_handled(self) -> bool:
        """Whether the operation raised and the error-advice took care of it."""
        return self._error_handled

    # -- control surface --------------------------------------------------

    def advance(self) -> None:
        """Move on to the next entry of the chain.

        Everything up to the next advice that has not advanced yet, the
        operation included, runs before this call returns. Errors raised on
        the way surface here, so an advice can wrap ``advance()`` to observe
        them.
        """
        if self._recovering:
            return
        if self.settled:
            self._reject("advance", f"chain already settled as {self._state}")
            return
        if not self._awaiting:
            self._reject("advance", f"entry {self._position} already advanced")
            return
        self._awaiting = False
        self._step()

    def halt(self) -> None:
        """Stop the chain, discarding every entry that has not run."""
        if self._recovering:
            return
        if self.settled:
            self._reject("halt", f"chain already settled as {self._state}")
            return
        logger.debug(
            "Advice chain for %s halted at position %d during %s",
            self._describe(),
            self._position,
            self._state,
        )
        self._settle(ChainState.STOPPED)

    # -- internals --------------------------------------------------------

    def _step(self) -> None:
        # Runs entries until an advice takes control; a synchronous advance()
        # from that advice re-enters here before the advice resumes.
        self._depth += 1
        try:
            while not self.settled:
                self._position += 1
                if self._position >= len(self._chain):
                    self._settle(ChainState.DONE)
                    break

                entry = self._chain[self._position]
                if entry is SENTINEL:
                    self._state = ChainState.RUNNING_MAIN
                    self._run_operation()
                    continue

                if self._position < self._chain.sentinel_index:
                    self._state = ChainState.RUNNING_BEFORE
                else:
                    self._state = ChainState.RUNNING_AFTER
                self._awaiting = True
                self._call(entry)
                break
        except Exception:
            if not self.settled:
                self._settle(ChainState.FAULTED)
            raise
        finally:
            self._depth -= 1

    def _run_operation(self) -> None:
        try:
            self.context.result = self.context.invoke()
        except Exception as exc:
            self.context.exception = exc
            if self._error_advice is None:
                logger.debug("Operation %s raised %r with no error advice", self._describe(), exc)
                raise
            logger.debug("Operation %s raised %r, routing to error advice", self._describe(), exc)
            self._recovering = True
            try:
                self._call(self._error_advice)
            finally:
                self._recovering = False
            self._error_handled = True
            self._settle(ChainState.FAULTED)

    def _call(self, entry: AdviceEntry) -> None:
        entry.advice(self, *resolve_params(entry, self.context))

    def _settle(self, state: ChainState) -> None:
        self._state = state
        self._awaiting = False

    def _reject(self, operation: str, reason: str) -> None:
        if self._strict:
            raise ChainStateException(
                f"Cannot {operation}() advice chain for {self._describe()}: {reason}",
                code="CHAIN_STATE",
                context={"state": str(self._state), "position": self._position},
            )
        logger.warning("Ignoring %s() on advice chain for %s: %s", operation, self._describe(), reason)

    def _describe(self) -> str:
        target = self.context.target
        owner = getattr(target, "__qualname__", None) or type(target).__name__
        return f"{owner}.{self.context.property_key}"

    def __repr__(self) -> str:
        return f"ChainExecutor({self._describe()}, state={self._state}, position={self._position})"
