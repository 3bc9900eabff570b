# jobjournal/db/mongo.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from jobjournal.core.config import settings

logger = logging.getLogger(__name__)

_mongo_client: Optional[AsyncIOMotorClient] = None

def get_mongo_client() -> AsyncIOMotorClient:
    """
    Returns a cached Motor client. The client connects lazily on first use.
    """
    global _mongo_client
    if _mongo_client is None:
        logger.info("Opening MongoDB client for database %s", settings.MONGODB_DB)
        _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _mongo_client

def get_db() -> AsyncIOMotorDatabase:
    client = get_mongo_client()
    return client[settings.MONGODB_DB]

def get_users_collection() -> AsyncIOMotorCollection:
    # FastAPI dependency; tests swap it through app.dependency_overrides
    return get_db()[settings.USERS_COLLECTION]

def close_mongo_client() -> None:
    global _mongo_client
    if _mongo_client is not None:
        logger.info("Closing MongoDB client")
        _mongo_client.close()
        _mongo_client = None
