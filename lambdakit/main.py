import importlib
import logging

import uvicorn

from .app import create_app
from .core.config import Config


logger = logging.getLogger(__name__)


def load_handler(target: str):
    """Import a handler given as ``package.module:attribute``."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ValueError(f"Handler must be given as 'module:attribute', got {target!r}")
    return getattr(importlib.import_module(module_name), attribute)


def main() -> None:
    logging.basicConfig(
        level=Config.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ]
    )
    Config.validate()
    if not Config.HANDLER:
        raise ValueError("LAMBDAKIT_HANDLER environment variable is required")

    app = create_app(load_handler(Config.HANDLER))
    logger.info(f"Serving {Config.HANDLER} on {Config.DEV_SERVER_HOST}:{Config.port()}")
    uvicorn.run(app, host=Config.DEV_SERVER_HOST, port=Config.port())


if __name__ == "__main__":
    main()
