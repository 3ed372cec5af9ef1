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
"""AOP core types — InvocationContext, chain entries and the AdviceChain."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import Any

from advicechain.kernel.exceptions import InvalidChainException


class ChainState(StrEnum):
    """Lifecycle state of a :class:`~advicechain.aop.executor.ChainExecutor`."""

    IDLE = "IDLE"
    RUNNING_BEFORE = "RUNNING_BEFORE"
    RUNNING_MAIN = "RUNNING_MAIN"
    RUNNING_AFTER = "RUNNING_AFTER"
    DONE = "DONE"
    STOPPED = "STOPPED"
    FAULTED = "FAULTED"


class ChainMarker(Enum):
    """Marks the chain position where the operation itself runs."""

    OPERATION = "OPERATION"

    def __repr__(self) -> str:
        return "SENTINEL"


SENTINEL = ChainMarker.OPERATION


@dataclass
class InvocationContext:
    """Per-call data shared by every step of one advice chain.

    A single instance is created for each call of a woven operation and is
    handed by reference to every advice, so mutations are visible to all
    later steps.

    Attributes:
        scope: The instance (or owner type) the operation runs against.
        target: The type that owns the operation.
        property_key: Name of the operation.
        operation: The original, unwrapped callable.
        args: Positional arguments; advices may replace or remove items.
        kwargs: Keyword arguments.
        result: Value returned by the operation, or set by an advice.
        exception: Exception raised by the operation, if any.
        pass_scope: Whether *scope* is passed as the operation's first argument.
            ``False`` for static operations.
    """

    scope: Any
    target: Any
    property_key: str
    operation: Callable[..., Any]
    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)
    result: Any = None
    exception: Exception | None = None
    pass_scope: bool = True

    def __post_init__(self) -> None:
        self.args = list(self.args)

    def invoke(self) -> Any:
        """Call the operation with the current arguments."""
        if self.pass_scope:
            return self.operation(self.scope, *self.args, **self.kwargs)
        return self.operation(*self.args, **self.kwargs)


@dataclass(frozen=True)
class AdviceEntry:
    """An advice callable plus the static arguments it was registered with."""

    advice: Callable[..., Any]
    static_args: tuple[Any, ...] = ()


ChainItem = AdviceEntry | ChainMarker


class AdviceChain:
    """Ordered advice entries around exactly one :data:`SENTINEL`.

    Entries before the sentinel are before-advices, entries after it are
    after-advices.

    Raises:
        InvalidChainException: If *entries* does not contain exactly one
            sentinel.
    """

    __slots__ = ("_entries", "_sentinel_index")

    def __init__(self, entries: Iterable[ChainItem]) -> None:
        self._entries: tuple[ChainItem, ...] = tuple(entries)
        positions = [i for i, entry in enumerate(self._entries) if entry is SENTINEL]
        if len(positions) != 1:
            raise InvalidChainException(
                f"An advice chain needs exactly one sentinel, found {len(positions)}",
                code="CHAIN_SENTINEL",
                context={"sentinels": len(positions), "length": len(self._entries)},
            )
        self._sentinel_index = positions[0]

    @classmethod
    def build(
        cls,
        before: Iterable[AdviceEntry] = (),
        after: Iterable[AdviceEntry] = (),
    ) -> AdviceChain:
        """Assemble ``before + [SENTINEL] + after``."""
        return cls([*before, SENTINEL, *after])

    @property
    def sentinel_index(self) -> int:
        return self._sentinel_index

    @property
    def before(self) -> tuple[ChainItem, ...]:
        return self._entries[: self._sentinel_index]

    @property
    def after(self) -> tuple[ChainItem, ...]:
        return self._entries[self._sentinel_index + 1 :]

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> ChainItem:
        return self._entries[index]

    def __iter__(self) -> Iterator[ChainItem]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"AdviceChain({list(self._entries)!r})"


@dataclass
class AdviceSet:
    """Advice configuration for one operation.

    Attributes:
        before: Entries run before the operation, in registration order.
        after: Entries run after the operation, in registration order.
        error: Entry run instead of the after-advices when the operation raises.
    """

    before: list[AdviceEntry] = field(default_factory=list)
    after: list[AdviceEntry] = field(default_factory=list)
    error: AdviceEntry | None = None

    def to_chain(self) -> AdviceChain:
        return AdviceChain.build(self.before, self.after)
