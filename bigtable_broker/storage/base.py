"""Abstract base classes for instance record storage."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from bigtable_broker.models.instance import ServiceInstanceDetails


class InstanceDetailsStore(ABC):
    """Abstract interface for service instance record storage."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the storage backend."""
        pass

    @abstractmethod
    async def save_instance_details(self, instance: ServiceInstanceDetails) -> None:
        """Persist a new service instance record.

        Raises InstanceAlreadyExistsError if a record with the same id exists.
        """
        pass

    @abstractmethod
    async def get_instance_details(self, instance_id: str) -> Optional[ServiceInstanceDetails]:
        """Retrieve a service instance record by broker instance id."""
        pass

    @abstractmethod
    async def delete_instance_details(self, instance_id: str) -> bool:
        """Delete a service instance record."""
        pass

    @abstractmethod
    async def list_instance_details(self, filters: Optional[Dict[str, Any]] = None) -> List[ServiceInstanceDetails]:
        """List service instance records with optional filters."""
        pass

    @abstractmethod
    async def instance_exists(self, instance_id: str) -> bool:
        """Check if a record exists for the instance id."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close storage connections."""
        pass
