import logging

import uvicorn

from apicrawl.api.app import create_app
from apicrawl.container import Container
from apicrawl.db.engine import init_db

logger = logging.getLogger(__name__)


def main(container=None):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    container = container or Container()

    init_db(container.db_engine())
    app = create_app(container)

    host = container.config.APICRAWL_HOST()
    port = int(container.config.APICRAWL_PORT())
    logger.info("API listening on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
