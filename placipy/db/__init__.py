"""
Database module - MongoDB connections.
"""
from placipy.db.mongodb import (
    get_mongo_client,
    get_mongo_db,
    get_collection,
    init_mongo_indexes,
    ping_mongo,
)

__all__ = [
    "get_mongo_client",
    "get_mongo_db",
    "get_collection",
    "init_mongo_indexes",
    "ping_mongo"
]
