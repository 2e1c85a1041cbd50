"""Application entry point for RecipeBox backend server."""

import sys

import structlog
from pydantic import ValidationError

from recipebox.app import App
from recipebox.config import Config
from recipebox.logging import setup_logging
from recipebox.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    try:
        config = Config()
    except ValidationError as e:
        setup_logging(debug=False)
        logger.error("invalid_configuration", error=str(e))
        sys.exit(1)
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
