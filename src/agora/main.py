"""Application entry point for the Agora session backend."""

import copy

import structlog
import uvicorn
from uvicorn.config import LOGGING_CONFIG

from agora.app import App
from agora.config import Config
from agora.logging import setup_logging
from agora.web.server import create_fastapi_app

logger = structlog.get_logger(__name__)


def run_server(app: App, config: Config) -> None:
    """Serve the API with Uvicorn, using a compact access log format."""
    fastapi_app = create_fastapi_app(app, config)

    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    logger.info("server_starting", host=config.host, port=config.port, sweep_enabled=config.sweep_enabled)
    uvicorn.run(fastapi_app, host=config.host, port=config.port, log_config=log_config, access_log=True)


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
