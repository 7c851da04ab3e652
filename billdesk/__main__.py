import logging

import uvicorn

from billdesk.db import initialize_db
from billdesk.logging import configure_logging, reconfigure
from billdesk.settings import settings

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging()
    initialize_db()
    reconfigure()
    logger.info("Serving billdesk on %s:%s", settings.host, settings.port)
    uvicorn.run("web.app:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
