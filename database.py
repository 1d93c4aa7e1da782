"""
MongoDB connection handling.

A single ``MongoClient`` is shared by the whole process. It is created on
first use and handed to route handlers through the ``get_db`` dependency,
so tests can swap in another database with ``app.dependency_overrides``.
"""

import logging
import threading
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

import config

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_lock = threading.Lock()


def get_client() -> MongoClient:
    global _client
    if _client is None:
        with _lock:
            if _client is None:
                _client = MongoClient(config.DATABASE_URL)
                logger.info("MongoDB client created for database %s", config.DATABASE_NAME)
    return _client


def get_db() -> Database:
    return get_client()[config.DATABASE_NAME]


def close_db() -> None:
    global _client
    with _lock:
        if _client is not None:
            _client.close()
            _client = None
            logger.info("MongoDB client closed")
