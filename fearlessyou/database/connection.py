"""
MongoDB connection management for FearlessYou.
"""

from typing import Optional
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError
import structlog

from ..config import StoreConfig, get_store_config

logger = structlog.get_logger(__name__)


class DatabaseManager:
    """MongoDB connection manager."""

    def __init__(self, store_config: Optional[StoreConfig] = None):
        self.client: Optional[MongoClient] = None
        self.database: Optional[Database] = None
        self.store_config = store_config or get_store_config()

    def connect(self) -> bool:
        """Connect to the MongoDB database."""
        try:
            self.client = MongoClient(
                self.store_config.mongodb_url,
                serverSelectionTimeoutMS=self.store_config.connection_timeout * 1000
            )

            # Test the connection
            self.client.admin.command('ping')

            self.database = self.client[self.store_config.database_name]
            logger.info("Connected to MongoDB", database=self.store_config.database_name)
            return True

        except PyMongoError as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            self.disconnect()
            return False

    def disconnect(self):
        """Disconnect from the MongoDB database."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.database = None
            logger.info("Disconnected from MongoDB")

    def get_collection(self, collection_name: Optional[str] = None) -> Collection:
        """Get a collection, the configured progress collection by default."""
        if self.database is None:
            raise RuntimeError("Database not connected")
        return self.database[collection_name or self.store_config.collection]


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_database_manager(store_config: Optional[StoreConfig] = None) -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager

    if _db_manager is None:
        manager = DatabaseManager(store_config)
        if not manager.connect():
            raise RuntimeError("Failed to connect to database")
        _db_manager = manager

    return _db_manager


def close_database():
    """Close the database connection."""
    global _db_manager
    if _db_manager:
        _db_manager.disconnect()
        _db_manager = None
