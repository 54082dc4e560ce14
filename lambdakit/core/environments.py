from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class Environment:
    base_platform_url: Optional[str] = None
    bearer_token: Optional[str] = None
    default_token: Optional[str] = None


ENVIRONMENTS: Mapping[str, Environment] = MappingProxyType({
    "production": Environment(
        base_platform_url="https://platform.senior.com.br/t/senior.com.br/bridge/1.0/rest",
    ),
    "homologx": Environment(
        base_platform_url="https://platform-homologx.senior.com.br/t/senior.com.br/bridge/1.0/rest",
    ),
    "leaf": Environment(
        base_platform_url="https://leaf.interno.senior.com.br:8243/t/senior.com.br/bridge/1.0/rest",
    ),
    "development": Environment(
        base_platform_url="https://demo4616619.mockable.io",
        bearer_token="Bearer 15c2a9eca2e0f3faac36de609c7d05ca",
    ),
})


def get_environment(name: str) -> Optional[Environment]:
    return ENVIRONMENTS.get(name)
