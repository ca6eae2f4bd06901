"""Factory for creating storage instances."""

import logging
from typing import Optional

from bigtable_broker.storage.base import InstanceDetailsStore
from bigtable_broker.storage.sqlite_store import SQLiteInstanceDetailsStore
from bigtable_broker.exceptions import ConfigurationError
from bigtable_broker.config import config

logger = logging.getLogger(__name__)


class StorageFactory:
    """Factory for creating storage instances."""

    @staticmethod
    async def create_store() -> InstanceDetailsStore:
        """Create the instance record store based on configuration."""
        if config.database.type.lower() == 'sqlite':
            logger.info("Creating SQLite storage backend")
            store = SQLiteInstanceDetailsStore(config.database.sqlite_path)
            await store.initialize()
            return store

        raise ConfigurationError(
            f"Unsupported database type: {config.database.type}",
            config_key="DB_TYPE"
        )


# Global storage instance (initialized on first use)
_instance_store: Optional[InstanceDetailsStore] = None


async def get_instance_store() -> InstanceDetailsStore:
    """Get global instance record store."""
    global _instance_store
    if _instance_store is None:
        _instance_store = await StorageFactory.create_store()
    return _instance_store


async def close_stores():
    """Close all storage connections."""
    global _instance_store

    if _instance_store:
        await _instance_store.close()
        _instance_store = None

    logger.info("All storage connections closed")
