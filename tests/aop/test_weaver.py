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
"""Tests for the AOP weaver — wrapper factory and class weaving."""

from __future__ import annotations

import logging

import pytest

from advicechain.aop.decorators import context_slot
from advicechain.aop.registry import AdviceRegistry
from advicechain.aop.types import AdviceEntry, AdviceSet
from advicechain.aop.weaver import is_woven, weave, wrap_operation
from advicechain.config.properties.engine import EngineProperties
from advicechain.kernel.exceptions import ChainStateException, WeavingException

# ---------------------------------------------------------------------------
# Helper classes and advices
# ---------------------------------------------------------------------------


class Person:
    """A person with a name."""

    species = "human"

    def __init__(self, name: str = "Jon") -> None:
        self.name = name
        self.calls = 0

    def set_name(self, name=None):
        """Set and return the name."""
        self.calls += 1
        self.name = name
        return name

    def greet(self, greeting: str, punctuation: str = "!") -> str:
        return f"{greeting} {self.name}{punctuation}"

    @staticmethod
    def shout(text: str) -> str:
        return text.upper()

    @classmethod
    def named(cls, name: str) -> Person:
        return cls(name)

    def explode(self):
        raise ValueError("boom")


def _fresh_person_class() -> type:
    return type("Person", (Person,), {
        "set_name": Person.__dict__["set_name"],
        "greet": Person.__dict__["greet"],
        "shout": Person.__dict__["shout"],
        "named": Person.__dict__["named"],
        "explode": Person.__dict__["explode"],
    })


@context_slot(0)
def pop_last_arg(control, ctx):
    ctx.args.pop()
    control.advance()


@context_slot(0)
def upper_result(control, ctx):
    ctx.result = ctx.result.upper()
    control.advance()


def deny(control):
    control.halt()


# ---------------------------------------------------------------------------
# wrap_operation
# ---------------------------------------------------------------------------


class TestWrapOperation:
    def test_empty_advice_set_passes_through(self) -> None:
        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet())
        person = Person()

        assert wrapper(person, "Peter") == "Peter"
        assert person.name == "Peter"
        assert person.calls == 1

    def test_before_advice_mutates_arguments(self) -> None:
        advices = AdviceSet(before=[AdviceEntry(pop_last_arg)])
        wrapper = wrap_operation(Person, "set_name", Person.set_name, advices)
        person = Person()

        assert wrapper(person, "Peter") is None
        assert person.name is None
        assert person.calls == 1

    def test_halt_skips_operation(self) -> None:
        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(before=[AdviceEntry(deny)]))
        person = Person()

        assert wrapper(person, "Peter") is None
        assert person.calls == 0
        assert person.name == "Jon"

    def test_after_advice_result_is_returned(self) -> None:
        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(after=[AdviceEntry(upper_result)]))
        assert wrapper(Person(), "Peter") == "PETER"

    def test_keyword_arguments_reach_operation(self) -> None:
        @context_slot(0)
        def question(control, ctx):
            ctx.kwargs["punctuation"] = "?"
            control.advance()

        wrapper = wrap_operation(Person, "greet", Person.greet, AdviceSet(before=[AdviceEntry(question)]))
        assert wrapper(Person("Ann"), "Hi", punctuation="!") == "Hi Ann?"

    def test_context_describes_the_call(self) -> None:
        seen = []

        @context_slot(0)
        def capture(control, ctx):
            seen.append(ctx)
            control.advance()

        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(before=[AdviceEntry(capture)]))
        person = Person()
        wrapper(person, "Peter")

        ctx = seen[0]
        assert ctx.scope is person
        assert ctx.target is Person
        assert ctx.property_key == "set_name"
        assert ctx.operation is Person.set_name
        assert ctx.args == ["Peter"]

    def test_each_call_gets_a_fresh_context(self) -> None:
        seen = []

        @context_slot(0)
        def capture(control, ctx):
            seen.append(ctx)
            control.advance()

        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(before=[AdviceEntry(capture)]))
        person = Person()
        wrapper(person, "a")
        wrapper(person, "b")

        assert seen[0] is not seen[1]
        assert seen[1].args == ["b"]

    def test_error_advice_result_is_returned(self) -> None:
        @context_slot(0)
        def recover(control, ctx):
            ctx.result = f"recovered from {ctx.exception}"

        wrapper = wrap_operation(Person, "explode", Person.explode, AdviceSet(error=AdviceEntry(recover)))
        assert wrapper(Person()) == "recovered from boom"

    def test_error_propagates_without_error_advice(self) -> None:
        wrapper = wrap_operation(Person, "explode", Person.explode, AdviceSet())

        with pytest.raises(ValueError, match="boom"):
            wrapper(Person())

    def test_deferred_after_advice_cannot_change_returned_value(self) -> None:
        pending = []

        @context_slot(0)
        def late(control, ctx):
            def resume():
                ctx.result = "changed"
                control.advance()

            pending.append(resume)

        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(after=[AdviceEntry(late)]))

        assert wrapper(Person(), "Peter") == "Peter"
        pending.pop()()

    def test_static_kind_runs_without_scope(self) -> None:
        seen = []

        @context_slot(0)
        def capture(control, ctx):
            seen.append(ctx)
            control.advance()

        wrapper = wrap_operation(
            Person,
            "shout",
            Person.__dict__["shout"].__func__,
            AdviceSet(before=[AdviceEntry(capture)]),
            kind="static",
        )

        assert wrapper("hey") == "HEY"
        assert seen[0].scope is Person
        assert seen[0].pass_scope is False

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(WeavingException) as exc_info:
            wrap_operation(Person, "set_name", Person.set_name, AdviceSet(), kind="bogus")
        assert exc_info.value.code == "WEAVE_KIND"

    def test_wrapper_keeps_metadata(self) -> None:
        def operation(self):
            """Docs."""

        operation.marker = "kept"
        wrapper = wrap_operation(Person, "operation", operation, AdviceSet())

        assert wrapper.__name__ == "operation"
        assert wrapper.__doc__ == "Docs."
        assert wrapper.__wrapped__ is operation
        assert wrapper.marker == "kept"
        assert is_woven(wrapper)
        assert not is_woven(operation)

    def test_advices_resolved_on_each_call(self) -> None:
        current = {"set": AdviceSet()}
        wrapper = wrap_operation(Person, "set_name", Person.set_name, lambda: current["set"])
        person = Person()

        assert wrapper(person, "Peter") == "Peter"
        current["set"] = AdviceSet(before=[AdviceEntry(deny)])
        assert wrapper(person, "Paul") is None
        assert person.name == "Peter"

    def test_suspended_chain_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def forgetful(control):
            pass

        wrapper = wrap_operation(Person, "set_name", Person.set_name, AdviceSet(before=[AdviceEntry(forgetful)]))

        with caplog.at_level(logging.DEBUG, logger="advicechain.aop.weaver"):
            assert wrapper(Person(), "Peter") is None

        assert "awaits advance()" in caplog.text

    def test_suspended_logging_can_be_disabled(self, caplog: pytest.LogCaptureFixture) -> None:
        def forgetful(control):
            pass

        wrapper = wrap_operation(
            Person,
            "set_name",
            Person.set_name,
            AdviceSet(before=[AdviceEntry(forgetful)]),
            log_suspended=False,
        )

        with caplog.at_level(logging.DEBUG, logger="advicechain.aop.weaver"):
            wrapper(Person(), "Peter")

        assert "awaits advance()" not in caplog.text


# ---------------------------------------------------------------------------
# weave
# ---------------------------------------------------------------------------


class TestWeave:
    def test_weaves_instance_method(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", pop_last_arg)

        woven = weave(cls, registry)
        person = cls()

        assert woven == ["set_name"]
        assert person.set_name("Peter") is None
        assert person.calls == 1
        assert person.name is None

    def test_unadvised_methods_untouched(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", pop_last_arg)
        weave(cls, registry)

        assert not is_woven(cls.__dict__["greet"])
        assert cls("Ann").greet("Hi") == "Hi Ann!"

    def test_weaves_staticmethod(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_after(cls, "shout", upper_result)
        registry.add_before(cls, "shout", pop_last_arg)

        weave(cls, registry)

        assert isinstance(cls.__dict__["shout"], staticmethod)
        assert cls.shout("a", "b") == "A"
        assert cls().shout("x", "y") == "X"

    def test_weaves_classmethod(self) -> None:
        cls = _fresh_person_class()
        seen = []

        @context_slot(0)
        def capture(control, ctx):
            seen.append(ctx.scope)
            control.advance()

        registry = AdviceRegistry()
        registry.add_before(cls, "named", capture)
        weave(cls, registry)

        person = cls.named("Zoe")

        assert isinstance(cls.__dict__["named"], classmethod)
        assert isinstance(person, cls)
        assert person.name == "Zoe"
        assert seen == [cls]

    def test_registry_changes_after_weaving_apply(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_after(cls, "set_name", upper_result)
        weave(cls, registry)

        person = cls()
        assert person.set_name("Peter") == "PETER"

        registry.add_before(cls, "set_name", deny)
        assert person.set_name("Paul") is None
        assert person.name == "Peter"

    def test_weaving_twice_is_idempotent(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_after(cls, "set_name", upper_result)

        assert weave(cls, registry) == ["set_name"]
        assert weave(cls, registry) == []
        assert cls().set_name("Peter") == "PETER"

    def test_other_owners_ignored(self) -> None:
        cls = _fresh_person_class()
        other = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_before(other, "set_name", deny)

        assert weave(cls, registry) == []
        assert cls().set_name("Peter") == "Peter"

    def test_missing_operation_rejected(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_before(cls, "does_not_exist", deny)

        with pytest.raises(WeavingException) as exc_info:
            weave(cls, registry)
        assert exc_info.value.context["operation"] == "does_not_exist"

    def test_non_callable_attribute_rejected(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        cls.limit = 3
        registry.add_before(cls, "limit", deny)

        with pytest.raises(WeavingException) as exc_info:
            weave(cls, registry)
        assert exc_info.value.code == "WEAVE_NOT_CALLABLE"

    def test_woven_method_keeps_docstring(self) -> None:
        cls = _fresh_person_class()
        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", pop_last_arg)
        weave(cls, registry)

        assert cls.set_name.__doc__ == "Set and return the name."
        assert cls.species == "human"

    def test_strict_properties_reach_executor(self) -> None:
        cls = _fresh_person_class()

        def double(control):
            control.advance()
            control.advance()

        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", double)
        weave(cls, registry, EngineProperties(strict=True))

        with pytest.raises(ChainStateException):
            cls().set_name("Peter")

    def test_strict_keyword_overrides_properties(self) -> None:
        cls = _fresh_person_class()

        def double(control):
            control.advance()
            control.advance()

        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", double)
        weave(cls, registry, EngineProperties(strict=False), strict=True)

        with pytest.raises(ChainStateException):
            cls().set_name("Peter")

    def test_strict_keyword_false_relaxes_strict_properties(self) -> None:
        cls = _fresh_person_class()

        def double(control):
            control.advance()
            control.advance()

        registry = AdviceRegistry()
        registry.add_before(cls, "set_name", double)
        weave(cls, registry, EngineProperties(strict=True), strict=False)

        assert cls().set_name("Peter") == "Peter"
