import logging

from django.conf import settings
from pymongo import MongoClient

logger = logging.getLogger(__name__)

_db = None


def init_db(database=None):
    """
    Set up the process-wide database handle.

    Called once from AppConfig.ready(); tests pass in a ready-made database.
    MongoClient connects lazily, so this does not touch the network.
    """
    global _db
    if database is None:
        client = MongoClient(settings.MONGO_URI, serverSelectionTimeoutMS=5000)
        database = client[settings.MONGO_DB_NAME]
        logger.info("MongoDB client configured for %s, DB: %s", settings.MONGO_URI, settings.MONGO_DB_NAME)
    _db = database
    return _db


def get_db():
    if _db is None:
        return init_db()
    return _db
