"""Mapping between Bigtable instances and the generic instance record."""

import logging

from pydantic import ValidationError as PydanticValidationError

from bigtable_broker.exceptions import InstanceNotFoundError, ValidationError
from bigtable_broker.models.instance import (
    InstanceInformation, ProvisionDetails, ServiceInstanceDetails
)
from bigtable_broker.services.parameters import InstanceConfiguration
from bigtable_broker.storage.base import InstanceDetailsStore

logger = logging.getLogger(__name__)


def build_instance_details(
    instance_id: str,
    instance_config: InstanceConfiguration,
    details: ProvisionDetails
) -> ServiceInstanceDetails:
    """Build the record describing a freshly created Bigtable instance."""
    information = InstanceInformation(instance_id=instance_config.name)

    return ServiceInstanceDetails(
        id=instance_id,
        name=instance_config.name,
        url="",
        location="",
        other_details=information.model_dump_json(),
        service_id=details.service_id,
        plan_id=details.plan_id,
        organization_guid=details.organization_guid,
        space_guid=details.space_guid
    )


def parse_instance_information(details: ServiceInstanceDetails) -> InstanceInformation:
    """Decode the provider specific part of a stored record."""
    try:
        return InstanceInformation.model_validate_json(details.other_details)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Error unmarshalling other details: {e}",
            field="other_details", value=details.other_details, cause=e
        ) from e


async def lookup_instance_details(store: InstanceDetailsStore, instance_id: str) -> ServiceInstanceDetails:
    """Fetch the stored record for a broker instance id."""
    instance = await store.get_instance_details(instance_id)
    if instance is None:
        logger.warning(f"Instance {instance_id} not found")
        raise InstanceNotFoundError(instance_id)
    return instance
