"""
Basic usage example of WebwareClient.

This example demonstrates how to register with a WEBWARE server, fetch
articles through a typed resource, page through them with a cursor and
deregister again. Connection settings are read from the WWSVC_* environment
variables.
"""

import logging
import sys
from pathlib import Path

from pydantic import Field

# Add the project root to the path to import wwsvc
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from wwsvc import ClientConfig, WebwareClient, WebwareError, WebwareResource


class Article(WebwareResource):
    FUNCTION = "ARTIKEL"

    number: str = Field(alias="ART_1_25")
    name: str = Field(alias="ART_6_40")


def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        config = ClientConfig.from_env()
        with WebwareClient(config) as client, client.registered():
            # Plain call returning the decoded JSON object
            result = client.request("PUT", "ARTIKEL.GET", 1, {"FELDER": "ART_1_25"})
            logger.info("COMRESULT: %s", result["COMRESULT"])

            # Typed call, FELDER is derived from the field aliases
            for article in Article.get(client, {"ARTNR": "4711"}):
                logger.info("Article %s: %s", article.number, article.name)

            # Cursor paging, 100 records per page
            for page in client.cursored_resource(Article, page_size=100):
                logger.info("Received page with %d articles", len(page))

        logger.info("Basic usage example completed")
    except WebwareError:
        logger.exception("Error")
        sys.exit(1)


if __name__ == "__main__":
    main()
