"""
Async usage example of AsyncWebwareClient.

Runs several calls concurrently on one registered session. Each call signs
its own request before awaiting the network, so request ids stay unique.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add the project root to the path to import wwsvc
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from wwsvc import AsyncWebwareClient, ClientConfig, TicketExpiredError, WebwareError


async def fetch(client: AsyncWebwareClient, number: str) -> dict:
    return await client.request(
        "PUT", "ARTIKEL.GET", 1, {"FELDER": "ART_1_25,ART_6_40", "ARTNR": number}
    )


async def run(logger: logging.Logger) -> None:
    config = ClientConfig.from_env()
    async with AsyncWebwareClient(config) as client, client.registered():
        try:
            results = await asyncio.gather(*(fetch(client, n) for n in ("1", "2", "3")))
        except TicketExpiredError:
            logger.warning("Service pass expired, register again to continue")
            return
        for result in results:
            logger.info("COMRESULT: %s", result["COMRESULT"])


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        asyncio.run(run(logger))
    except WebwareError:
        logger.exception("Error")
        sys.exit(1)


if __name__ == "__main__":
    main()
