"""Bigtable broker: provisioning and deprovisioning of Bigtable instances."""

import asyncio
import logging
from typing import Optional

from bigtable_broker.config import config
from bigtable_broker.exceptions import ProviderError
from bigtable_broker.logging_config import audit_logger
from bigtable_broker.models.instance import (
    DeprovisionDetails, PlanDetails, ProvisionDetails, ServiceInstanceDetails
)
from bigtable_broker.providers.base import InstanceAdminProvider
from bigtable_broker.services import name_generator
from bigtable_broker.services.instance_records import build_instance_details, lookup_instance_details
from bigtable_broker.services.parameters import resolve_instance_configuration
from bigtable_broker.storage.base import InstanceDetailsStore

logger = logging.getLogger(__name__)


class BigtableBroker:
    """Service broker plugin for Google Cloud Bigtable.

    The broker keeps no state of its own. Provision hands the new
    ServiceInstanceDetails back to the caller, who persists it; deprovision
    reads that record back through ``store`` to find the instance name.
    """

    def __init__(
        self,
        provider: InstanceAdminProvider,
        store: InstanceDetailsStore,
        generator: Optional[name_generator.BasicNameGenerator] = None,
        default_zone: Optional[str] = None
    ):
        self.provider = provider
        self.store = store
        self.generator = generator or name_generator.basic
        self.default_zone = default_zone or config.gcp.default_zone

    async def provision(
        self,
        instance_id: str,
        details: ProvisionDetails,
        plan: PlanDetails,
        user_id: Optional[str] = None
    ) -> ServiceInstanceDetails:
        """Create a Bigtable instance.

        The instance is named by the ``name`` parameter (generated when
        absent); ``cluster_id``, ``display_name`` and ``zone`` may be given
        as well. Node count and storage type come from the plan.
        """
        logger.info(f"Starting provisioning for instance {instance_id}")

        instance_config = resolve_instance_configuration(
            details.raw_parameters,
            plan.features,
            generator=self.generator,
            default_zone=self.default_zone
        )

        audit_logger.log_provisioning(
            instance_id,
            "provision_start",
            user_id,
            {"plan_id": plan.id, "name": instance_config.name, "zone": instance_config.zone}
        )

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.provider.create_instance, instance_config)
        except ProviderError as e:
            audit_logger.log_provisioning(instance_id, "provision_failed", user_id, e.to_dict())
            raise

        instance = build_instance_details(instance_id, instance_config, details)

        audit_logger.log_provisioning(instance_id, "provision_success", user_id, {"name": instance.name})
        logger.info(f"Successfully provisioned Bigtable instance {instance.name} for {instance_id}")

        return instance

    async def deprovision(
        self,
        instance_id: str,
        details: DeprovisionDetails,
        user_id: Optional[str] = None
    ) -> None:
        """Delete the Bigtable instance recorded for ``instance_id``.

        Raises InstanceNotFoundError without contacting the provider when
        no record exists. Removing the record is left to the caller.
        """
        logger.info(f"Starting deprovisioning for instance {instance_id}")

        instance = await lookup_instance_details(self.store, instance_id)

        audit_logger.log_provisioning(
            instance_id,
            "deprovision_start",
            user_id,
            {"plan_id": details.plan_id, "name": instance.name}
        )

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.provider.delete_instance, instance.name)
        except ProviderError as e:
            audit_logger.log_provisioning(instance_id, "deprovision_failed", user_id, e.to_dict())
            raise

        audit_logger.log_provisioning(instance_id, "deprovision_success", user_id, {"name": instance.name})
        logger.info(f"Successfully deprovisioned Bigtable instance {instance.name} for {instance_id}")
