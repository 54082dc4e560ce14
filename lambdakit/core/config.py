import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .environments import ENVIRONMENTS


load_dotenv()


@dataclass(frozen=True)
class Config:
    """Toolkit configuration loaded from environment variables.

    Every field is optional: an empty ``ENVIRONMENT`` means the environment is
    taken from each incoming event, an empty ``PLATFORM_URL`` means the URL
    comes from the environment table.
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "")
    PLATFORM_URL: str = os.getenv("PLATFORM_URL", "")
    PLATFORM_TOKEN: str = os.getenv("PLATFORM_TOKEN", "")
    RULES_PACKAGE: str = os.getenv("RULES_PACKAGE", "rules")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    DEV_SERVER_HOST: str = os.getenv("DEV_SERVER_HOST", "0.0.0.0")
    DEV_SERVER_PORT: str = os.getenv("DEV_SERVER_PORT", "8080")
    HANDLER: str = os.getenv("LAMBDAKIT_HANDLER", "")

    @classmethod
    def port(cls) -> int:
        return int(cls.DEV_SERVER_PORT)

    @classmethod
    def validate(cls) -> None:
        if cls.ENVIRONMENT and cls.ENVIRONMENT not in ENVIRONMENTS:
            raise ValueError(
                f"ENVIRONMENT must be one of {', '.join(ENVIRONMENTS)}, got {cls.ENVIRONMENT!r}"
            )
        if not cls.DEV_SERVER_PORT.isdigit():
            raise ValueError("DEV_SERVER_PORT environment variable must be an integer")
