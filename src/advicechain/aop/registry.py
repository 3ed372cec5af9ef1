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
"""AdviceRegistry — per-operation advice configuration for weaving."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from advicechain.aop.types import AdviceEntry, AdviceSet

logger = logging.getLogger(__name__)


class AdviceRegistry:
    """Holds the :class:`AdviceSet` of each ``(owner, name)`` operation.

    Usage::

        registry = AdviceRegistry()
        registry.add_before(Person, "set_name", strip_whitespace)
        registry.add_after(Person, "set_name", audit, "person-updated")
        registry.set_error(Person, "set_name", fallback_name)

        weave(Person, registry)

    Before- and after-advice run in the order they were added.
    """

    def __init__(self) -> None:
        self._sets: dict[tuple[Any, str], AdviceSet] = {}

    def add_before(self, owner: Any, name: str, advice: Callable[..., Any], *static_args: Any) -> None:
        """Append a before-advice for ``owner.name``."""
        self._set_for(owner, name).before.append(AdviceEntry(advice, static_args))

    def add_after(self, owner: Any, name: str, advice: Callable[..., Any], *static_args: Any) -> None:
        """Append an after-advice for ``owner.name``."""
        self._set_for(owner, name).after.append(AdviceEntry(advice, static_args))

    def set_error(self, owner: Any, name: str, advice: Callable[..., Any], *static_args: Any) -> None:
        """Set the error-advice for ``owner.name``, replacing any previous one."""
        advice_set = self._set_for(owner, name)
        if advice_set.error is not None:
            logger.warning(
                "Replacing error advice %r for %s.%s",
                advice_set.error.advice,
                getattr(owner, "__qualname__", owner),
                name,
            )
        advice_set.error = AdviceEntry(advice, static_args)

    def get(self, owner: Any, name: str) -> AdviceSet:
        """Return a copy of the advice configured for ``owner.name``.

        An operation with no registered advice yields an empty set.
        """
        advice_set = self._sets.get((owner, name))
        if advice_set is None:
            return AdviceSet()
        return AdviceSet(
            before=list(advice_set.before),
            after=list(advice_set.after),
            error=advice_set.error,
        )

    def resolver(self, owner: Any, name: str) -> Callable[[], AdviceSet]:
        """Return a zero-argument callable that reads ``owner.name``'s advice on each call."""
        return lambda: self.get(owner, name)

    def operations(self) -> list[tuple[Any, str]]:
        """Return every registered ``(owner, name)`` pair, in registration order."""
        return list(self._sets)

    def _set_for(self, owner: Any, name: str) -> AdviceSet:
        return self._sets.setdefault((owner, name), AdviceSet())
