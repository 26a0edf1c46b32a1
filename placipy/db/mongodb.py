"""
MongoDB Connection Utility

Each logical table lives in its own collection:
- assessments table: assessment records with embedded questions
- questions table: legacy per-question records (read/cleanup only)
- main table: departments, staff, students, reminder markers, counters

Every record carries a two-part composite key:
- PK: partition key (e.g. ASSESSMENT#ASSESS_001_CSE, CLIENT#ksrce.ac.in)
- SK: sort key (e.g. CLIENT#ksrce.ac.in, STAFF#<id>)
A unique (PK, SK) index enforces one record per key.
"""
import logging

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from placipy.core.config import Settings

logger = logging.getLogger(__name__)


def get_mongo_client(settings: Settings) -> MongoClient:
    """Create a MongoDB client (connection pooling handled internally by pymongo)."""
    return MongoClient(settings.mongodb_uri)


def get_mongo_db(client: MongoClient, settings: Settings) -> Database:
    """Get the application database."""
    return client[settings.mongodb_db]


def get_collection(db: Database, name: str) -> Collection:
    """Get a specific collection (one per logical table)."""
    return db[name]


def table_names(settings: Settings) -> list:
    return [settings.assessments_table, settings.questions_table, settings.main_table]


def ping_mongo(client: MongoClient) -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


def init_mongo_indexes(db: Database, settings: Settings) -> None:
    """
    Create the composite key index on every table.
    Call this once during app startup.
    """
    for name in table_names(settings):
        db[name].create_index([("PK", ASCENDING), ("SK", ASCENDING)], unique=True)

    logger.info("MongoDB indexes created successfully")
