"""
Server entrypoint. Run from project root:

  python -m app.serve

Reads configuration once (env vars and .env); exits non-zero when it is
invalid (e.g. JWT_SECRET missing) or the database is unreachable.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import sys

import uvicorn
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.main import create_app

logger = logging.getLogger(__name__)


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration, refusing to start:\n%s", e)
        return 1

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    try:
        app = create_app(settings)
    except SQLAlchemyError as e:
        logger.error("Database unreachable, refusing to start: %s", e)
        return 1

    logger.info("Listening on %s:%s (env=%s, store=%s)", settings.HOST, settings.PORT, settings.APP_ENV, settings.STORE_BACKEND)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
