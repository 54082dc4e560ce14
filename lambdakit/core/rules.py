"""Resolution of validation rules.

A rule is either a callable or an identifier. Identifiers are turned into
callables by a *rule loader*: any callable ``(rule) -> callable``. Two loaders
ship with the toolkit:

- :class:`ModuleRuleLoader` imports ``<package>.<identifier>`` and returns its
  ``validate`` function (the default, package taken from ``RULES_PACKAGE``).
- :class:`RuleRegistry` looks identifiers up in an explicit mapping built at
  startup.
"""

import importlib
import logging
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Protocol, Union

from .config import Config


logger = logging.getLogger(__name__)

RuleFunction = Callable[..., Any]
Rule = Union[str, RuleFunction]


class RuleLoadError(LookupError):
    def __init__(self, rule: Any, message: str):
        super().__init__(message)
        self.rule = rule


class RuleNotFound(RuleLoadError):
    pass


class RuleNotCallable(RuleLoadError):
    pass


class RuleLoader(Protocol):
    def __call__(self, rule: Rule) -> RuleFunction: ...


def rule_identifier(rule: Any) -> str:
    if isinstance(rule, str):
        return rule
    return getattr(rule, "__name__", None) or repr(rule)


def not_callable(rule: Any) -> RuleNotCallable:
    return RuleNotCallable(rule, f'Could not execute validation rule "{rule_identifier(rule)}".')


class ModuleRuleLoader:
    """Load ``rf01`` from the module ``<package>.rf01``.

    The module exposes the rule as ``validate``; a function named after the
    identifier is accepted as well.
    """

    def __init__(self, package: Optional[str] = None):
        self._package = package

    @property
    def package(self) -> str:
        return self._package or Config.RULES_PACKAGE

    def __call__(self, rule: Rule) -> RuleFunction:
        if callable(rule):
            return rule
        if not isinstance(rule, str) or not all(part.isidentifier() for part in rule.split(".")):
            raise not_callable(rule)

        module_name = f"{self.package}.{rule}"
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            # Only a missing rule module means "unknown rule"; a rule with a broken import propagates
            if e.name and (module_name == e.name or module_name.startswith(f"{e.name}.")):
                raise RuleNotFound(rule, f'Validation rule "{rule}" not found in package "{self.package}".') from e
            raise

        function = getattr(module, "validate", None) or getattr(module, rule.rsplit(".", 1)[-1], None)
        if not callable(function):
            raise not_callable(rule)
        return function


class RuleRegistry:
    """Explicit identifier -> rule mapping, usable as a rule loader."""

    def __init__(self, rules: Optional[Mapping[str, RuleFunction]] = None, fallback: Optional[RuleLoader] = None):
        self._rules: Dict[str, RuleFunction] = {}
        self._fallback = fallback
        for name, function in (rules or {}).items():
            self.add(name, function)

    def add(self, name: str, function: RuleFunction) -> None:
        if not callable(function):
            raise not_callable(name)
        if name in self._rules:
            logger.warning(f"Replacing registered validation rule {name}")
        self._rules[name] = function

    def register(self, name: Optional[str] = None):
        """Decorator registering a function under ``name`` (defaults to its ``__name__``)."""
        def decorator(function: RuleFunction) -> RuleFunction:
            self.add(name or function.__name__, function)
            return function
        return decorator

    def names(self) -> Iterator[str]:
        return iter(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __call__(self, rule: Rule) -> RuleFunction:
        if callable(rule):
            return rule
        if rule in self._rules:
            return self._rules[rule]
        if self._fallback is not None:
            return self._fallback(rule)
        raise RuleNotFound(rule, f'Validation rule "{rule}" is not registered.')


default_rule_loader = ModuleRuleLoader()
