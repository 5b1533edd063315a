"""Entry point for running the categorizer package as a module."""

from __future__ import annotations

import logging

from ai_categorizer import create_app, register_signal_handlers
from ai_categorizer.config import get_config

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=get_config().LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app()
    register_signal_handlers(app)

    logger.info("Application running on port %d", app.config["APP_PORT"])
    app.run(
        debug=app.config["DEBUG"],
        host=app.config["APP_HOST"],
        port=app.config["APP_PORT"],
        threaded=True,
        use_reloader=False,
    )


if __name__ == "__main__":
    main()
