"""
app/db/indexes.py

Purpose: Database index management

- Unique email index so registration rejects duplicate accounts
- Lookup indexes for listing and ownership queries
"""

from pymongo import ASCENDING, DESCENDING
from app.db.mongo import get_users_collection, get_bikes_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()
        bikes = get_bikes_collection()

        logger.info("Creating database indexes...")

        # ==============================================
        # USERS COLLECTION INDEXES
        # ==============================================

        # Email is the login key
        await users.create_index([("email", ASCENDING)], unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        # Sorting users by rating on the ads board
        await users.create_index([("rating", DESCENDING)], name="rating_idx")
        logger.debug("Created index on users.rating")

        # ==============================================
        # BIKES COLLECTION INDEXES
        # ==============================================

        await bikes.create_index([("owner", ASCENDING)], name="bike_owner_idx")
        logger.debug("Created index on bikes.owner")

        logger.info("✅ All database indexes created successfully")

        user_indexes = await users.index_information()
        bike_indexes = await bikes.index_information()
        logger.info(f"Index summary: Users={len(user_indexes)}, Bikes={len(bike_indexes)}")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes():
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    try:
        logger.warning("Dropping all database indexes...")

        await get_users_collection().drop_indexes()
        await get_bikes_collection().drop_indexes()

        logger.info("✅ All indexes dropped successfully")

    except Exception as e:
        logger.error(f"Failed to drop indexes: {str(e)}", exc_info=True)
        raise
