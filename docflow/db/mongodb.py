"""MongoDB connection for the document activity trail."""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from docflow.config import settings

logger = logging.getLogger(__name__)

mongodb_client: AsyncIOMotorClient | None = None
mongodb_database: AsyncIOMotorDatabase | None = None


async def init_mongodb() -> None:
    """Initialize MongoDB connection."""
    global mongodb_client, mongodb_database

    mongodb_client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb_database = mongodb_client[settings.MONGODB_DATABASE]

    # Index creation failure must not block startup
    try:
        await _create_indexes()
    except Exception as e:
        logger.warning("Could not create MongoDB indexes (non-fatal): %s", e)


async def _create_indexes() -> None:
    """Create indexes used by the activity queries."""
    if mongodb_database is None:
        return

    activities = mongodb_database.document_activities
    await activities.create_index([("document_id", 1), ("timestamp", -1)])
    await activities.create_index([("actor_id", 1), ("timestamp", -1)])


async def close_mongodb() -> None:
    """Close MongoDB connection."""
    global mongodb_client, mongodb_database

    if mongodb_client:
        mongodb_client.close()
    mongodb_client = None
    mongodb_database = None


def get_mongodb() -> AsyncIOMotorDatabase:
    """Get MongoDB database instance."""
    if mongodb_database is None:
        raise RuntimeError("MongoDB is not initialized")
    return mongodb_database


def get_activities_collection():
    """Get the document activity collection."""
    return get_mongodb().document_activities
