"""
Create the user schema/table, optionally wiping existing users first.
Run from the project root: python init_db.py [--reset]
"""
import argparse
import asyncio
import logging

from userstore.config import settings
from userstore.db import close_pool, ensure_schema, get_pool, reset_users

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
)
logger = logging.getLogger(__name__)


async def main(reset: bool) -> None:
    pool = await get_pool()
    try:
        await ensure_schema(pool, settings.db_schema)
        if reset:
            await reset_users(pool, settings.db_schema)
    finally:
        await close_pool()
    logger.info("Done.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--reset", action="store_true", help="delete every user row")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
