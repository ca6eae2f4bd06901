"""Google Cloud Bigtable instance-administration provider."""

import logging
from typing import Callable, Optional

from google.api_core import exceptions as api_exceptions
from google.api_core.client_info import ClientInfo
from google.auth import exceptions as auth_exceptions
from google.cloud import bigtable
from google.cloud.bigtable import enums

from bigtable_broker.config import config
from bigtable_broker.exceptions import ConfigurationError, ProviderError
from bigtable_broker.providers.base import InstanceAdminProvider
from bigtable_broker.services.parameters import InstanceConfiguration, StorageType

logger = logging.getLogger(__name__)

STORAGE_TYPES = {
    StorageType.SSD: enums.StorageType.SSD,
    StorageType.HDD: enums.StorageType.HDD,
}

# Errors raised by the client library for API, transport and credential failures
CLIENT_ERRORS = (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


class BigtableInstanceAdminProvider(InstanceAdminProvider):
    """Creates and deletes Bigtable instances in the broker's project.

    A new admin client is opened for every call; no connection is shared
    between requests.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials=None,
        user_agent: Optional[str] = None,
        client_factory: Optional[Callable[[], bigtable.Client]] = None
    ):
        self.project_id = project_id or config.gcp.project_id
        if not self.project_id:
            raise ConfigurationError(
                "A Google Cloud project id is required",
                config_key="ROOT_SERVICE_ACCOUNT_PROJECT"
            )
        self.credentials = credentials
        self.user_agent = user_agent or config.gcp.user_agent
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> bigtable.Client:
        return bigtable.Client(
            project=self.project_id,
            credentials=self.credentials,
            admin=True,
            client_info=ClientInfo(user_agent=self.user_agent)
        )

    def _admin_client(self) -> bigtable.Client:
        try:
            return self._client_factory()
        except CLIENT_ERRORS as e:
            logger.error(f"Failed to create Bigtable admin client: {e}")
            raise ProviderError(
                f"Error creating bigtable client: {e}", operation="client", cause=e
            ) from e

    def create_instance(self, instance_config: InstanceConfiguration) -> None:
        """Create a production instance with a single cluster and wait for it."""
        client = self._admin_client()

        logger.info(
            f"Creating Bigtable instance {instance_config.name} "
            f"(cluster={instance_config.cluster_id}, zone={instance_config.zone}, "
            f"nodes={instance_config.num_nodes}, storage={instance_config.storage_type.value})"
        )

        instance = client.instance(
            instance_config.name,
            display_name=instance_config.display_name,
            instance_type=enums.Instance.Type.PRODUCTION
        )
        cluster = instance.cluster(
            instance_config.cluster_id,
            location_id=instance_config.zone,
            serve_nodes=instance_config.num_nodes,
            default_storage_type=STORAGE_TYPES[instance_config.storage_type]
        )

        try:
            operation = instance.create(clusters=[cluster])
            operation.result()
        except CLIENT_ERRORS as e:
            logger.error(f"Failed to create Bigtable instance {instance_config.name}: {e}")
            raise ProviderError(
                f"Error creating new instance: {e}",
                operation="create", instance_name=instance_config.name, cause=e
            ) from e

        logger.info(f"Created Bigtable instance {instance_config.name}")

    def delete_instance(self, name: str) -> None:
        """Delete the named Bigtable instance."""
        client = self._admin_client()

        logger.info(f"Deleting Bigtable instance {name}")
        try:
            client.instance(name).delete()
        except CLIENT_ERRORS as e:
            logger.error(f"Failed to delete Bigtable instance {name}: {e}")
            raise ProviderError(
                f"Error deleting instance: {e}",
                operation="delete", instance_name=name, cause=e
            ) from e

        logger.info(f"Deleted Bigtable instance {name}")
