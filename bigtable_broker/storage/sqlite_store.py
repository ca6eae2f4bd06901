"""SQLite implementation of instance record storage."""

import sqlite3
import logging
from typing import Dict, Any, List, Optional
from datetime import datetime
from pathlib import Path

from bigtable_broker.storage.base import InstanceDetailsStore
from bigtable_broker.models.instance import ServiceInstanceDetails
from bigtable_broker.exceptions import InstanceAlreadyExistsError, StorageError
from bigtable_broker.config import config

logger = logging.getLogger(__name__)

FILTERABLE_COLUMNS = ('name', 'service_id', 'plan_id', 'organization_guid', 'space_guid')


class SQLiteInstanceDetailsStore(InstanceDetailsStore):
    """SQLite implementation of instance record storage."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize SQLite store."""
        self.db_path = db_path or config.database.sqlite_path
        self.connection: Optional[sqlite3.Connection] = None

    async def initialize(self) -> None:
        """Initialize the SQLite database."""
        try:
            if self.db_path != ':memory:':
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self.connection = sqlite3.connect(self.db_path, check_same_thread=False)
            self.connection.row_factory = sqlite3.Row

            await self._create_tables()

            logger.info(f"SQLite instance store initialized at {self.db_path}")

        except sqlite3.Error as e:
            logger.error(f"Failed to initialize SQLite store: {e}")
            raise StorageError(f"Failed to initialize SQLite store: {e}", operation="initialize", cause=e) from e

    async def _create_tables(self) -> None:
        cursor = self.connection.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS service_instance_details (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                location TEXT NOT NULL DEFAULT '',
                url TEXT NOT NULL DEFAULT '',
                other_details TEXT NOT NULL DEFAULT '',
                service_id TEXT NOT NULL DEFAULT '',
                plan_id TEXT NOT NULL DEFAULT '',
                space_guid TEXT NOT NULL DEFAULT '',
                organization_guid TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_instance_details_name ON service_instance_details (name)')

        self.connection.commit()
        logger.info("Database tables created successfully")

    async def save_instance_details(self, instance: ServiceInstanceDetails) -> None:
        """Persist a new service instance record."""
        try:
            cursor = self.connection.cursor()

            cursor.execute('''
                INSERT INTO service_instance_details (
                    id, name, location, url, other_details, service_id,
                    plan_id, space_guid, organization_guid, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (
                instance.id,
                instance.name,
                instance.location,
                instance.url,
                instance.other_details,
                instance.service_id,
                instance.plan_id,
                instance.space_guid,
                instance.organization_guid,
                instance.created_at.isoformat()
            ))

            self.connection.commit()
            logger.info(f"Saved service instance {instance.id}")

        except sqlite3.IntegrityError as e:
            self.connection.rollback()
            logger.error(f"Instance {instance.id} already exists: {e}")
            raise InstanceAlreadyExistsError(instance.id) from e
        except sqlite3.Error as e:
            self.connection.rollback()
            logger.error(f"Failed to save instance {instance.id}: {e}")
            raise StorageError(f"Failed to save instance {instance.id}: {e}", operation="save", cause=e) from e

    async def get_instance_details(self, instance_id: str) -> Optional[ServiceInstanceDetails]:
        """Retrieve a service instance record by broker instance id."""
        try:
            cursor = self.connection.cursor()
            cursor.execute('SELECT * FROM service_instance_details WHERE id = ?', (instance_id,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to get instance {instance_id}: {e}")
            raise StorageError(f"Failed to get instance {instance_id}: {e}", operation="get", cause=e) from e

        if not row:
            return None

        return self._row_to_instance(row)

    async def delete_instance_details(self, instance_id: str) -> bool:
        """Delete a service instance record."""
        try:
            cursor = self.connection.cursor()
            cursor.execute('DELETE FROM service_instance_details WHERE id = ?', (instance_id,))

            if cursor.rowcount == 0:
                logger.warning(f"No instance found with ID {instance_id}")
                return False

            self.connection.commit()
            logger.info(f"Deleted service instance {instance_id}")
            return True

        except sqlite3.Error as e:
            self.connection.rollback()
            logger.error(f"Failed to delete instance {instance_id}: {e}")
            raise StorageError(f"Failed to delete instance {instance_id}: {e}", operation="delete", cause=e) from e

    async def list_instance_details(self, filters: Optional[Dict[str, Any]] = None) -> List[ServiceInstanceDetails]:
        """List service instance records with optional filters."""
        query = 'SELECT * FROM service_instance_details'
        params = []

        if filters:
            conditions = []
            for key, value in filters.items():
                if key in FILTERABLE_COLUMNS:
                    conditions.append(f'{key} = ?')
                    params.append(value)

            if conditions:
                query += ' WHERE ' + ' AND '.join(conditions)

        query += ' ORDER BY created_at DESC'

        try:
            cursor = self.connection.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list instances: {e}")
            raise StorageError(f"Failed to list instances: {e}", operation="list", cause=e) from e

        return [self._row_to_instance(row) for row in rows]

    async def instance_exists(self, instance_id: str) -> bool:
        """Check if a record exists for the instance id."""
        try:
            cursor = self.connection.cursor()
            cursor.execute('SELECT 1 FROM service_instance_details WHERE id = ?', (instance_id,))
            return cursor.fetchone() is not None
        except sqlite3.Error as e:
            logger.error(f"Failed to check instance existence {instance_id}: {e}")
            raise StorageError(f"Failed to check instance {instance_id}: {e}", operation="exists", cause=e) from e

    async def close(self) -> None:
        """Close database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("SQLite connection closed")

    def _row_to_instance(self, row: sqlite3.Row) -> ServiceInstanceDetails:
        return ServiceInstanceDetails(
            id=row['id'],
            name=row['name'],
            location=row['location'],
            url=row['url'],
            other_details=row['other_details'],
            service_id=row['service_id'],
            plan_id=row['plan_id'],
            space_guid=row['space_guid'],
            organization_guid=row['organization_guid'],
            created_at=datetime.fromisoformat(row['created_at'])
        )
