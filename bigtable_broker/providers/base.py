"""Abstract base class for instance-administration providers."""

from abc import ABC, abstractmethod

from bigtable_broker.services.parameters import InstanceConfiguration


class InstanceAdminProvider(ABC):
    """Creates and deletes managed instances on a cloud provider.

    Both calls are synchronous and single-attempt; failures surface as
    ProviderError.
    """

    @abstractmethod
    def create_instance(self, instance_config: InstanceConfiguration) -> None:
        """Create an instance from a resolved configuration."""
        pass

    @abstractmethod
    def delete_instance(self, name: str) -> None:
        """Delete the named instance."""
        pass
