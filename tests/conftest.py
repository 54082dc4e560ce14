"""Shared pytest fixtures for lambdakit tests."""

import pytest

from lambdakit.core.config import Config
from lambdakit.core.event import EventInfo


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests independent of the ENVIRONMENT/PLATFORM_* variables of the host."""
    monkeypatch.setattr(Config, "ENVIRONMENT", "")
    monkeypatch.setattr(Config, "PLATFORM_URL", "")
    monkeypatch.setattr(Config, "PLATFORM_TOKEN", "")
    monkeypatch.setattr(Config, "RULES_PACKAGE", "rules")


@pytest.fixture
def event_info() -> EventInfo:
    return EventInfo(
        environment="production",
        development=False,
        production=True,
        platform_url="https://platform.test/rest",
        platform_token="Bearer abc",
        original_event={},
    )


@pytest.fixture
def rules_package(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """A throwaway ``rules_pkg`` package importable by the module rule loader."""
    package = tmp_path / "rules_pkg"
    package.mkdir()
    (package / "__init__.py").write_text("")
    (package / "rf01.py").write_text(
        "def validate(body, event):\n"
        "    if not body.get('name'):\n"
        "        return 'name is required'\n"
    )
    (package / "rf02.py").write_text(
        "async def rf02(body):\n"
        "    return ['first', 'second']\n"
    )
    (package / "not_a_rule.py").write_text("validate = 'nope'\n")
    (package / "broken.py").write_text("import lambdakit_missing_dependency\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    return "rules_pkg"
