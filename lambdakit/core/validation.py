"""Asynchronous execution of request validation rules.

Rules follow one contract::

    def rule(body, event_info):
        return "error message"          # or ["one", "another"], or None

    async def rule(body, event_info):
        return "error message"

A rule may declare fewer parameters; the extra arguments are dropped. Rules
that raise, or whose awaitable raises, are reported as a :class:`RuleFailure`
message instead of aborting the batch.

:class:`AsyncRuleValidator` runs a list of rules either all at once
(:meth:`~AsyncRuleValidator.validate`) or one at a time stopping at the first
rule reporting errors (:meth:`~AsyncRuleValidator.validate_one_by_one`). Neither
mode applies a timeout: a rule that never settles stalls the call.
"""

import asyncio
import inspect
import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from .rules import Rule, RuleLoader, default_rule_loader, not_callable, rule_identifier


logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class RuleFailure(str):
    """Message produced when a rule could not be loaded or crashed.

    Behaves as a plain message string; ``rule_id`` and ``cause`` tell an
    infrastructure failure apart from an ordinary validation error.
    """

    def __new__(cls, rule_id: str, cause: BaseException):
        failure = super().__new__(cls, f"Failed to execute rule {rule_id}: {cause}")
        failure.rule_id = rule_id
        failure.cause = cause
        return failure


class ValidationResult:
    """Ordered, immutable list of error messages from one validation run."""

    __slots__ = ("_errors",)

    def __init__(self, errors: Iterable[str] = ()):
        self._errors: Tuple[str, ...] = tuple(errors)

    @property
    def errors(self) -> Tuple[str, ...]:
        return self._errors

    @property
    def failures(self) -> Tuple[RuleFailure, ...]:
        return tuple(error for error in self._errors if isinstance(error, RuleFailure))

    def has_errors(self) -> bool:
        return len(self._errors) > 0

    def get_errors(self) -> dict:
        return {"errors": list(self._errors)}

    def get_errors_as_string(self) -> str:
        return "\n".join(self._errors)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationResult):
            return NotImplemented
        return self._errors == other._errors

    def __hash__(self) -> int:
        return hash(self._errors)

    def __repr__(self) -> str:
        return f"ValidationResult(errors={list(self._errors)!r})"


def aggregate(outcomes: Any) -> ValidationResult:
    """Flatten one outcome, or a list of per-rule outcomes, into a ValidationResult."""
    errors: List[str] = []
    if isinstance(outcomes, (list, tuple)):
        for outcome in outcomes:
            _add_all(errors, outcome)
    else:
        _add_all(errors, outcomes)
    return ValidationResult(errors)


def _add_all(errors: List[str], outcome: Any) -> None:
    if isinstance(outcome, (list, tuple)):
        for message in outcome:
            errors.append(_as_message(message))
    elif outcome:
        errors.append(_as_message(outcome))


def _as_message(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _accepted_args(function: Any, args: Sequence[Any]) -> Sequence[Any]:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return args

    positional = 0
    for parameter in signature.parameters.values():
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return args
        if parameter.kind in _POSITIONAL:
            positional += 1
    return args[:positional]


def _failure(rule_id: str, error: Exception) -> RuleFailure:
    failure = RuleFailure(rule_id, error)
    logger.warning(str(failure))
    return failure


class RuleInvoker:
    """Runs a single rule against the request body and event info."""

    def __init__(self, rule_loader: RuleLoader = default_rule_loader):
        self.rule_loader = rule_loader

    def start(self, rule: Rule, body: Any, event_info: Any) -> Any:
        """Run the synchronous part of ``rule``.

        Returns the outcome directly when the rule is synchronous, otherwise an
        awaitable settling to the outcome (or to a RuleFailure).
        """
        rule_id = rule_identifier(rule)
        try:
            function = self.rule_loader(rule)
            if not callable(function):
                raise not_callable(rule)
            result = function(*_accepted_args(function, (body, event_info)))
        except Exception as e:
            return _failure(rule_id, e)

        if inspect.isawaitable(result):
            return self._settle(rule_id, result)
        return result

    async def invoke(self, rule: Rule, body: Any, event_info: Any) -> Any:
        outcome = self.start(rule, body, event_info)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome

    async def _settle(self, rule_id: str, pending) -> Any:
        try:
            return await pending
        except Exception as e:
            return _failure(rule_id, e)


class AsyncRuleValidator:
    """Validates a request body against a list of rules.

    Each rule is an identifier (resolved through the rule loader) or a
    callable. The loader can be replaced per instance with
    :meth:`with_rule_loader`.
    """

    def __init__(self, body: Any, event_info: Any, rule_loader: Optional[RuleLoader] = None):
        self._body = body
        self._event_info = event_info
        self._invoker = RuleInvoker(rule_loader or default_rule_loader)

    def with_rule_loader(self, rule_loader: RuleLoader) -> "AsyncRuleValidator":
        self._invoker = RuleInvoker(rule_loader)
        return self

    async def validate(self, rules: Union[Rule, Iterable[Rule]]) -> ValidationResult:
        """Run every rule concurrently and combine all their messages.

        All rules are started in order before any is awaited; messages are
        combined in rule order regardless of which rule finished first.
        """
        # gather schedules one task per rule in list order; sync rules finish in their first step
        slots = await asyncio.gather(
            *(self._invoker.invoke(rule, self._body, self._event_info) for rule in _as_list(rules))
        )

        result = aggregate(slots)
        logger.debug(f"Validated {len(slots)} rules: {len(result.errors)} errors")
        return result

    async def validate_one_by_one(self, rules: Union[Rule, Iterable[Rule]]) -> ValidationResult:
        """Run rules in order, stopping at the first one that reports errors.

        Only the stopping rule's messages are returned; later rules never run.
        """
        for rule in _as_list(rules):
            outcome = await self._invoker.invoke(rule, self._body, self._event_info)
            result = aggregate([outcome])
            if result.has_errors():
                logger.debug(f"Validation stopped at rule {rule_identifier(rule)}")
                return result

        return ValidationResult()


def _as_list(rules: Union[Rule, Iterable[Rule]]) -> List[Rule]:
    if isinstance(rules, str) or callable(rules):
        return [rules]
    return list(rules)
