"""
app/db/mongo.py

Purpose: MongoDB connection setup

- Initializes Motor client with connection pooling
- Collections: users (embedded reviews) and bikes
- Connection state, health checks and startup retry logic
- Translates driver errors into API errors
"""

from contextlib import contextmanager
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import monitoring
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError
from typing import Optional
import asyncio
from app.core.config import settings
from app.core.exceptions import BadRequestError, DatabaseUnavailableError
from app.core.logging import get_logger

logger = get_logger(__name__)


class TopologyStateListener(monitoring.TopologyListener):
    """
    Tracks whether the driver currently sees a writable server.

    pymongo calls this from its monitor threads on every topology change,
    so the flag follows the server going down and coming back.
    """

    def __init__(self):
        self.connected = False

    def opened(self, event):
        logger.debug(f"Topology opened: {event.topology_id}")

    def description_changed(self, event):
        connected = event.new_description.has_writable_server()
        if connected != self.connected:
            if connected:
                logger.info("MongoDB reachable")
            else:
                logger.error("MongoDB unreachable: no writable server in topology")
        self.connected = connected

    def closed(self, event):
        self.connected = False


# Global MongoDB client
_topology_state = TopologyStateListener()
_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


async def connect_to_mongo():
    """
    Establishes connection to MongoDB with retry logic.
    Called during application startup.
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    max_retries = 3
    retry_delay = 2

    for attempt in range(1, max_retries + 1):
        client = AsyncIOMotorClient(
            settings.MONGODB_URL,
            maxPoolSize=50,
            minPoolSize=5,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=10000,
            retryWrites=True,
            retryReads=True,
            event_listeners=[_topology_state],
        )
        try:
            logger.info(
                f"Attempting to connect to MongoDB (attempt {attempt}/{max_retries})"
            )

            # Verify connection
            await client.admin.command("ping")

            _topology_state.connected = True
            _client = client
            _database = client[settings.MONGODB_DB_NAME]
            logger.info(f"✅ Successfully connected to MongoDB: {settings.MONGODB_DB_NAME}")
            return

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            client.close()
            logger.error(
                f"Failed to connect to MongoDB (attempt {attempt}/{max_retries}): {e}"
            )

            if attempt < max_retries:
                logger.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.critical("Failed to connect to MongoDB after all retries")
                raise ConnectionError("Could not establish MongoDB connection") from e


async def close_mongo_connection():
    """
    Closes the MongoDB connection.
    Called during application shutdown.
    """
    global _client, _database

    if _client:
        logger.info("Closing MongoDB connection")
        _client.close()
        _topology_state.connected = False
        _client = None
        _database = None
        logger.info("MongoDB connection closed")


def is_connected() -> bool:
    """
    Returns True while a client exists and the driver sees a writable server.
    """
    return _client is not None and _database is not None and _topology_state.connected


async def check_database_health() -> bool:
    """
    Checks if the database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        if _client is None:
            logger.error("MongoDB client not initialized")
            return False

        await _client.admin.command("ping")
        return True

    except PyMongoError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return False


def get_database() -> AsyncIOMotorDatabase:
    """
    Returns the MongoDB database instance.

    Raises:
        DatabaseUnavailableError: If database is not initialized
    """
    if _database is None:
        raise DatabaseUnavailableError(
            "Database not initialized. Call connect_to_mongo() during startup."
        )
    return _database


def get_users_collection() -> AsyncIOMotorCollection:
    """
    Returns the users collection.

    Fields:
    - email: str (unique login key)
    - password: str (bcrypt digest)
    - name: str
    - location: str
    - rating: float (-1 until the first review)
    - reviews: list[str]
    - rentedTo: int
    - bikes: list[ObjectId] (owned bikes)
    - image_id / image_url: optional profile image
    """
    return get_database()["users"]


def get_bikes_collection() -> AsyncIOMotorCollection:
    """
    Returns the bikes collection. Only delete-by-id is used from here.
    """
    return get_database()["bikes"]


@contextmanager
def store_errors(operation: str):
    """
    Wraps store calls and translates driver failures.

    Connectivity failures (AutoReconnect, NetworkTimeout, server selection)
    become a 500; every other driver error becomes a 400.

    Usage:
        with store_errors("find users"):
            users = await collection.find().to_list(None)
    """
    try:
        yield
    except ConnectionFailure as e:
        logger.error(f"MongoDB unreachable during {operation}: {e}")
        raise DatabaseUnavailableError() from e
    except PyMongoError as e:
        logger.error(f"MongoDB error during {operation}: {e}")
        raise BadRequestError() from e
