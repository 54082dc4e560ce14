"""Tests for AsyncRuleValidator: parallel and one-by-one validation."""

import asyncio

import pytest

from lambdakit.core.rules import RuleNotFound, RuleRegistry
from lambdakit.core.validation import AsyncRuleValidator, RuleFailure, ValidationResult, aggregate


BODY = {"name": "Ada", "age": 36}


@pytest.fixture
def validator(event_info) -> AsyncRuleValidator:
    return AsyncRuleValidator(BODY, event_info)


class TestValidate:
    @pytest.mark.asyncio
    async def test_combines_all_messages_in_rule_order(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate([lambda: "A", lambda: ["B", "C"], lambda: None])
        assert result.errors == ("A", "B", "C")
        assert result.has_errors()

    @pytest.mark.asyncio
    async def test_empty_list(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate([])
        assert not result.has_errors()
        assert result.get_errors() == {"errors": []}

    @pytest.mark.asyncio
    async def test_single_rule_is_treated_as_list(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate(lambda body: f"bad {body['name']}")
        assert result.errors == ("bad Ada",)

    @pytest.mark.asyncio
    async def test_order_follows_rules_not_completion(self, validator: AsyncRuleValidator) -> None:
        async def slow():
            await asyncio.sleep(0.05)
            return "slow"

        async def fast():
            return "fast"

        result = await validator.validate([slow, fast, lambda: "sync"])
        assert result.errors == ("slow", "fast", "sync")

    @pytest.mark.asyncio
    async def test_rules_run_concurrently(self, validator: AsyncRuleValidator) -> None:
        events = []

        def make_rule(name: str):
            async def rule():
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")
            return rule

        await validator.validate([make_rule("a"), make_rule("b")])
        assert events == ["a-start", "b-start", "a-end", "b-end"]

    @pytest.mark.asyncio
    async def test_mixed_rules_start_in_list_order(self, validator: AsyncRuleValidator) -> None:
        events = []

        async def first():
            events.append("first")
            await asyncio.sleep(0)

        def second():
            events.append("second")

        async def third():
            events.append("third")

        await validator.validate([first, second, third])
        assert events == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_async_and_sync_messages_are_equivalent(self, validator: AsyncRuleValidator) -> None:
        async def async_rule():
            return "err"

        assert await validator.validate([async_rule]) == await validator.validate([lambda: "err"])

    @pytest.mark.asyncio
    async def test_failing_rule_does_not_abort_siblings(self, validator: AsyncRuleValidator) -> None:
        calls = []

        def boom(body, event):
            raise ValueError("kaboom")

        async def rejects():
            await asyncio.sleep(0)
            raise RuntimeError("rejected")

        def sibling():
            calls.append("sibling")
            return "sibling error"

        result = await validator.validate([boom, rejects, sibling])
        assert calls == ["sibling"]
        assert result.errors == (
            "Failed to execute rule boom: kaboom",
            "Failed to execute rule rejects: rejected",
            "sibling error",
        )

    @pytest.mark.asyncio
    async def test_unresolvable_rule_does_not_stop_others(self, validator: AsyncRuleValidator) -> None:
        validator.with_rule_loader(RuleRegistry({"known": lambda: "known error"}))
        result = await validator.validate(["unknown", "known"])
        assert len(result.errors) == 2
        assert "unknown" in result.errors[0]
        assert result.errors[1] == "known error"
        assert isinstance(result.failures[0].cause, RuleNotFound)

    @pytest.mark.asyncio
    async def test_is_idempotent(self, validator: AsyncRuleValidator) -> None:
        rules = [lambda body: body["name"], lambda: ["x", "y"]]
        assert await validator.validate(rules) == await validator.validate(rules)


class TestValidateOneByOne:
    @pytest.mark.asyncio
    async def test_stops_at_first_failing_rule(self, validator: AsyncRuleValidator) -> None:
        calls = []

        def third():
            calls.append("third")
            return "Y"

        result = await validator.validate_one_by_one([lambda: None, lambda: "X", third])
        assert result.errors == ("X",)
        assert calls == []

    @pytest.mark.asyncio
    async def test_returns_all_messages_of_stopping_rule(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate_one_by_one([lambda: [], lambda: ["X1", "X2"], lambda: "Y"])
        assert result.errors == ("X1", "X2")

    @pytest.mark.asyncio
    async def test_empty_message_in_list_counts_as_error(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate_one_by_one([lambda: ["", "A"], lambda: "later"])
        assert result.errors == ("", "A")

    @pytest.mark.asyncio
    async def test_empty_when_all_rules_pass(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate_one_by_one([lambda: None, lambda: "", lambda: []])
        assert result == ValidationResult()
        assert not result.has_errors()

    @pytest.mark.asyncio
    async def test_empty_list(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate_one_by_one([])
        assert result.get_errors() == {"errors": []}

    @pytest.mark.asyncio
    async def test_rules_run_sequentially(self, validator: AsyncRuleValidator) -> None:
        events = []

        def make_rule(name: str):
            async def rule():
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")
            return rule

        await validator.validate_one_by_one([make_rule("a"), make_rule("b")])
        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_async_message_stops_like_sync_message(self, validator: AsyncRuleValidator) -> None:
        async def async_rule():
            return "err"

        result = await validator.validate_one_by_one([async_rule, lambda: "later"])
        assert result.errors == ("err",)

    @pytest.mark.asyncio
    async def test_unresolvable_rule_stops_sequence(self, validator: AsyncRuleValidator) -> None:
        calls = []
        registry = RuleRegistry()
        registry.add("after", lambda: calls.append("after"))
        validator.with_rule_loader(registry)

        result = await validator.validate_one_by_one(["missing", "after"])
        assert calls == []
        assert result.errors[0].startswith("Failed to execute rule missing:")

    @pytest.mark.asyncio
    async def test_crashing_rule_stops_sequence(self, validator: AsyncRuleValidator) -> None:
        def boom():
            raise KeyError("field")

        result = await validator.validate_one_by_one([boom, lambda: "never"])
        assert result.errors == ("Failed to execute rule boom: 'field'",)


class TestRuleArguments:
    @pytest.mark.asyncio
    async def test_rules_may_declare_fewer_parameters(self, validator: AsyncRuleValidator, event_info) -> None:
        seen = {}

        def none():
            seen["none"] = True

        def body_only(body):
            seen["body"] = body

        def both(body, event):
            seen["event"] = event

        def variadic(*args):
            seen["args"] = args

        result = await validator.validate([none, body_only, both, variadic])
        assert not result.has_errors()
        assert seen == {"none": True, "body": BODY, "event": event_info, "args": (BODY, event_info)}

    @pytest.mark.asyncio
    async def test_callable_object(self, validator: AsyncRuleValidator) -> None:
        class MinimumAge:
            def __call__(self, body):
                return None if body["age"] >= 40 else "too young"

        result = await validator.validate(MinimumAge())
        assert result.errors == ("too young",)

    @pytest.mark.asyncio
    async def test_non_string_outcome_is_coerced(self, validator: AsyncRuleValidator) -> None:
        result = await validator.validate([lambda: 42, lambda: [1, "two"]])
        assert result.errors == ("42", "1", "two")


class TestRuleLoaderOverride:
    @pytest.mark.asyncio
    async def test_custom_loader_function(self, validator: AsyncRuleValidator) -> None:
        def loader(rule):
            if isinstance(rule, str):
                return lambda: f"loaded {rule}"
            return rule

        result = await validator.with_rule_loader(loader).validate(["rf01", lambda: "direct"])
        assert result.errors == ("loaded rf01", "direct")

    @pytest.mark.asyncio
    async def test_loader_returning_non_callable(self, validator: AsyncRuleValidator) -> None:
        result = await validator.with_rule_loader(lambda rule: "not callable").validate("rf01")
        assert result.errors == ('Failed to execute rule rf01: Could not execute validation rule "rf01".',)

    @pytest.mark.asyncio
    async def test_module_loader_by_default(self, rules_package, event_info, monkeypatch) -> None:
        from lambdakit.core.config import Config

        monkeypatch.setattr(Config, "RULES_PACKAGE", rules_package)
        validator = AsyncRuleValidator({}, event_info)
        result = await validator.validate(["rf01", "rf02"])
        assert result.errors == ("name is required", "first", "second")


class TestValidationResult:
    def test_errors_as_string(self) -> None:
        result = ValidationResult(["first", "second"])
        assert result.get_errors_as_string() == "first\nsecond"
        assert result.get_errors() == {"errors": ["first", "second"]}

    def test_is_immutable_copy(self) -> None:
        messages = ["first"]
        result = ValidationResult(messages)
        messages.append("second")
        result.get_errors()["errors"].append("third")
        assert result.errors == ("first",)

    def test_failures_are_tagged(self) -> None:
        cause = ValueError("bad")
        failure = RuleFailure("rf09", cause)
        result = ValidationResult(["plain", failure])
        assert failure == "Failed to execute rule rf09: bad"
        assert result.failures == (failure,)
        assert result.failures[0].rule_id == "rf09"
        assert result.failures[0].cause is cause


class TestAggregate:
    def test_single_message(self) -> None:
        assert aggregate("only").errors == ("only",)

    def test_absent_outcome(self) -> None:
        assert aggregate(None) == ValidationResult()

    def test_flattens_one_level_preserving_order(self) -> None:
        assert aggregate(["a", ["b", "c"], None, "", "d"]).errors == ("a", "b", "c", "d")

    def test_keeps_every_element_of_a_list_outcome(self) -> None:
        assert aggregate([["", "b", 3]]).errors == ("", "b", "3")
