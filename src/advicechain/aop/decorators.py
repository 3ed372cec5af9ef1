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
"""Advice annotations — @context_slot and @bound_params."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from advicechain.kernel.exceptions import InvalidChainException

F = TypeVar("F", bound=Callable[..., Any])

_CONTEXT_SLOT_ATTR = "__advice_context_slot__"
_BOUND_PARAMS_ATTR = "__advice_bound_params__"


def context_slot(index: int) -> Callable[[F], F]:
    """Ask for the InvocationContext at parameter position *index*.

    The advice is still called with the control surface first; *index*
    counts the parameters that follow it::

        @context_slot(0)
        def drop_last(control, ctx):
            ctx.args.pop()
            control.advance()
    """

    def decorator(fn: F) -> F:
        setattr(fn, _CONTEXT_SLOT_ATTR, index)
        return fn

    return decorator


def bound_params(*template: int | None) -> Callable[[F], F]:
    """Lay out the advice's parameters from the entry's static arguments.

    Each template item is an index into the static arguments registered with
    the advice, or ``None`` for a slot that receives ``None``::

        @bound_params(None, 0)
        def limit(control, unused, maximum): ...
    """
    for item in template:
        if item is not None and (isinstance(item, bool) or not isinstance(item, int)):
            raise InvalidChainException(
                f"@bound_params items must be static-argument indexes or None, got {item!r}",
                code="CHAIN_BOUND_PARAMS",
                context={"template": template},
            )

    def decorator(fn: F) -> F:
        setattr(fn, _BOUND_PARAMS_ATTR, tuple(template))
        return fn

    return decorator


def get_context_slot(fn: Any) -> int | None:
    """Return the ``@context_slot`` index of *fn*, or ``None``."""
    return getattr(fn, _CONTEXT_SLOT_ATTR, None)


def get_bound_params(fn: Any) -> tuple[int | None, ...] | None:
    """Return the ``@bound_params`` template of *fn*, or ``None``."""
    return getattr(fn, _BOUND_PARAMS_ATTR, None)
