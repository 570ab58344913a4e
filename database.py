import logging
from functools import lru_cache

from fastapi import Depends
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings, get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_client(uri: str) -> MongoClient:
    return MongoClient(uri)


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return get_client(settings.MONGO_URI)[settings.MONGO_DB_NAME]


def init_db(db: Database) -> None:
    """Create the indexes the application relies on.

    The unique index on ``users.email`` is what actually prevents two concurrent
    signups with the same email; the lookup in signup only gives a nicer error.
    """
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.vehicles.create_index([("userId", ASCENDING)])
    db.password_resets.create_index([("token", ASCENDING)], unique=True)
    db.password_resets.create_index("expires_at", expireAfterSeconds=0)
    db.sessions.create_index("expires_at", expireAfterSeconds=0)
    logger.info("Indexes ensured on database %s", db.name)
