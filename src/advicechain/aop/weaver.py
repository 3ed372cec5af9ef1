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
"""AOP weaver — replaces operations with wrappers that run their advice chain."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from typing import Any

from advicechain.aop.executor import ChainExecutor
from advicechain.aop.registry import AdviceRegistry
from advicechain.aop.types import AdviceSet, InvocationContext
from advicechain.config.properties.engine import EngineProperties
from advicechain.kernel.exceptions import WeavingException

logger = logging.getLogger(__name__)

_WOVEN_ATTR = "__advicechain_woven__"

_KINDS = ("instance", "class", "static")


def is_woven(fn: Any) -> bool:
    """Whether *fn* is a wrapper produced by :func:`wrap_operation`."""
    return getattr(fn, _WOVEN_ATTR, False) is True


def wrap_operation(
    owner: Any,
    name: str,
    operation: Callable[..., Any],
    advices: AdviceSet | Callable[[], AdviceSet],
    *,
    kind: str = "instance",
    strict: bool = False,
    log_suspended: bool = True,
) -> Callable[..., Any]:
    """Build the replacement callable for *operation*.

    Every call creates a fresh :class:`InvocationContext`, assembles
    ``before + [SENTINEL] + after`` from *advices* and runs it through a
    :class:`ChainExecutor`. The wrapper returns ``context.result`` as it
    stands once the executor constructor returns; after-advices still
    waiting on a deferred ``advance()`` cannot change what the caller got.

    Args:
        owner: The type that owns the operation.
        name: The operation name.
        operation: The original function (the ``__func__`` of a
            staticmethod/classmethod).
        advices: An :class:`AdviceSet`, or a callable returning one that is
            consulted on every call.
        kind: ``"instance"`` (scope is ``self``), ``"class"`` (scope is the
            class the call went through) or ``"static"`` (scope is *owner*
            and the operation gets no scope argument).
        strict: Passed to :class:`ChainExecutor`.
        log_suspended: Log a debug event when a call returns while its chain
            still waits for ``advance()``.

    The wrapper carries the original's name, docstring, ``__wrapped__`` and
    function attributes.
    """
    if kind not in _KINDS:
        raise WeavingException(
            f"Unknown operation kind '{kind}' for {name}. Available kinds: {', '.join(_KINDS)}",
            code="WEAVE_KIND",
        )

    resolve: Callable[[], AdviceSet] = (lambda: advices) if isinstance(advices, AdviceSet) else advices

    def _run(scope: Any, args: tuple, kwargs: dict[str, Any], pass_scope: bool) -> Any:
        advice_set = resolve()
        context = InvocationContext(
            scope=scope,
            target=owner,
            property_key=name,
            operation=operation,
            args=list(args),
            kwargs=dict(kwargs),
            pass_scope=pass_scope,
        )
        executor = ChainExecutor(context, advice_set.to_chain(), advice_set.error, strict=strict)
        if log_suspended and executor.suspended:
            logger.debug(
                "%r returned while its advice chain awaits advance() at position %d (%s)",
                executor,
                executor.position,
                executor.state,
            )
        return context.result

    if kind == "static":

        @functools.wraps(operation)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _run(owner, args, kwargs, False)

    else:

        @functools.wraps(operation)
        def wrapper(scope: Any, *args: Any, **kwargs: Any) -> Any:  # type: ignore[misc]
            return _run(scope, args, kwargs, True)

    setattr(wrapper, _WOVEN_ATTR, True)
    return wrapper


def weave(
    cls: type,
    registry: AdviceRegistry,
    properties: EngineProperties | None = None,
    *,
    strict: bool | None = None,
) -> list[str]:
    """Replace every operation of *cls* that has advice in *registry*.

    Plain methods, ``staticmethod`` and ``classmethod`` descriptors are
    supported. The wrappers look the advice up in *registry* on each call,
    so advice added after weaving still applies. Already-woven operations
    are left alone.

    *strict* overrides ``properties.strict`` when given; *properties*
    defaults to :class:`EngineProperties` defaults.

    Returns:
        Names of the operations woven by this call, in registration order.

    Raises:
        WeavingException: If a registered operation is not defined on *cls*
            or is not callable.
    """
    props = properties if properties is not None else EngineProperties()
    if strict is None:
        strict = props.strict
    woven: list[str] = []

    for owner, name in registry.operations():
        if owner is not cls:
            continue

        raw = cls.__dict__.get(name)
        if raw is None:
            raise WeavingException(
                f"{cls.__qualname__} does not define '{name}'",
                code="WEAVE_MISSING",
                context={"owner": cls.__qualname__, "operation": name},
            )

        if isinstance(raw, staticmethod):
            kind, fn = "static", raw.__func__
        elif isinstance(raw, classmethod):
            kind, fn = "class", raw.__func__
        elif callable(raw):
            kind, fn = "instance", raw
        else:
            raise WeavingException(
                f"{cls.__qualname__}.{name} is not callable",
                code="WEAVE_NOT_CALLABLE",
                context={"owner": cls.__qualname__, "operation": name},
            )

        if is_woven(fn):
            continue

        wrapper: Any = wrap_operation(
            cls,
            name,
            fn,
            registry.resolver(cls, name),
            kind=kind,
            strict=strict,
            log_suspended=props.log_suspended,
        )
        if kind == "static":
            wrapper = staticmethod(wrapper)
        elif kind == "class":
            wrapper = classmethod(wrapper)

        setattr(cls, name, wrapper)
        woven.append(name)
        logger.debug("Wove %s.%s (%s)", cls.__qualname__, name, kind)

    return woven
