"""
Database initialization script

Run once to create the users/bikes indexes:
    python scripts/init_db.py

Rebuild indexes from scratch:
    python scripts/init_db.py --reset
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, get_database
from app.db.indexes import create_indexes, drop_all_indexes

setup_logging()
logger = get_logger("scripts.init_db")


async def main(reset: bool = False):
    await connect_to_mongo()
    try:
        if reset:
            await drop_all_indexes()
        await create_indexes()

        collections = await get_database().list_collection_names()
        logger.info(f"📦 Collections: {collections if collections else '(none yet)'}")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main(reset="--reset" in sys.argv[1:]))
