"""Factory classes for catalog models and test data."""

import json
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from bigtable_broker.config import config
from bigtable_broker.exceptions import ConfigurationError
from bigtable_broker.models.instance import (
    BigtableDynamicPlan, PlanDetails, ProvisionDetails, ServiceInstanceDetails, InstanceInformation
)
from bigtable_broker.models.service_broker import (
    Service, ServicePlan, ServicePlanMetadata, ServiceMetadata, Catalog, ProvisionRequest
)


BIGTABLE_SERVICE_ID = "b8e19880-ac58-42ef-b033-f7cd9c94d1fe"
BIGTABLE_SERVICE_NAME = "google-bigtable"

DEFAULT_BIGTABLE_PLANS: Dict[str, Dict[str, str]] = {
    "three-node-production-hdd": {
        "guid": "65a49268-2c73-481e-80f3-9fde5bd5a654",
        "name": "three-node-production-hdd",
        "description": "BigTable HDD basic production plan: 3 nodes.",
        "num_nodes": "3",
        "storage_type": "HDD",
        "display_name": "3 Node HDD",
        "service": BIGTABLE_SERVICE_ID,
    },
    "three-node-production-ssd": {
        "guid": "38aa0e65-624b-4998-9c06-f9194b56d252",
        "name": "three-node-production-ssd",
        "description": "BigTable SSD basic production plan: 3 nodes.",
        "num_nodes": "3",
        "storage_type": "SSD",
        "display_name": "3 Node SSD",
        "service": BIGTABLE_SERVICE_ID,
    },
}


class ServiceBrokerFactory:
    """Factory for creating Service Broker API models."""

    @staticmethod
    def load_bigtable_plans(plans_json: Optional[str] = None) -> List[BigtableDynamicPlan]:
        """Load operator-defined plans, falling back to the built-in ones.

        ``plans_json`` is a JSON object keyed by plan name whose values
        carry the ``BigtableDynamicPlan`` fields.
        """
        if plans_json is None:
            plans_json = config.gcp.bigtable_plans

        if not plans_json:
            raw_plans: Dict[str, Any] = DEFAULT_BIGTABLE_PLANS
        else:
            try:
                raw_plans = json.loads(plans_json)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Error unmarshalling Bigtable plans: {e}",
                    config_key="GSB_SERVICE_GOOGLE_BIGTABLE_PLANS"
                ) from e
            if not isinstance(raw_plans, dict):
                raise ConfigurationError(
                    "Bigtable plans must be a JSON object keyed by plan name",
                    config_key="GSB_SERVICE_GOOGLE_BIGTABLE_PLANS"
                )

        plans = []
        for plan_name, plan_data in raw_plans.items():
            try:
                plan = BigtableDynamicPlan(**{"name": plan_name, **plan_data})
            except (TypeError, PydanticValidationError) as e:
                raise ConfigurationError(
                    f"Invalid Bigtable plan '{plan_name}': {e}",
                    config_key="GSB_SERVICE_GOOGLE_BIGTABLE_PLANS"
                ) from e
            plans.append(plan)
        return plans

    @staticmethod
    def create_plan_details(plan: BigtableDynamicPlan) -> PlanDetails:
        """Convert a dynamic plan into the plan record handed to the broker."""
        return PlanDetails(
            id=plan.guid,
            name=plan.name,
            description=plan.description,
            service_id=plan.service or BIGTABLE_SERVICE_ID,
            features=json.dumps(plan.features())
        )

    @staticmethod
    def create_bigtable_service(plans: Optional[List[BigtableDynamicPlan]] = None) -> Service:
        """Create Bigtable service definition."""
        if plans is None:
            plans = ServiceBrokerFactory.load_bigtable_plans()

        return Service(
            id=BIGTABLE_SERVICE_ID,
            name=BIGTABLE_SERVICE_NAME,
            description="A high performance NoSQL database service for large analytical and operational workloads.",
            bindable=False,
            plan_updateable=False,
            plans=[
                ServicePlan(
                    id=plan.guid,
                    name=plan.name,
                    description=plan.description,
                    free=False,
                    metadata=ServicePlanMetadata(displayName=plan.display_name)
                )
                for plan in plans
            ],
            tags=["gcp", "bigtable"],
            metadata=ServiceMetadata(
                displayName="Google Bigtable",
                longDescription="A high performance NoSQL database service for large analytical and operational workloads.",
                providerDisplayName="Google",
                documentationUrl="https://cloud.google.com/bigtable/",
                supportUrl="https://cloud.google.com/bigtable/docs/support/getting-support"
            )
        )

    @staticmethod
    def create_catalog(plans: Optional[List[BigtableDynamicPlan]] = None) -> Catalog:
        """Create service catalog."""
        return Catalog(
            services=[ServiceBrokerFactory.create_bigtable_service(plans)]
        )

    @staticmethod
    def find_plan(plan_id: str, plans: Optional[List[BigtableDynamicPlan]] = None) -> Optional[PlanDetails]:
        """Look up a plan by its GUID."""
        if plans is None:
            plans = ServiceBrokerFactory.load_bigtable_plans()

        for plan in plans:
            if plan.guid == plan_id:
                return ServiceBrokerFactory.create_plan_details(plan)
        return None

    @staticmethod
    def create_provision_request(
        plan_id: str = DEFAULT_BIGTABLE_PLANS["three-node-production-ssd"]["guid"],
        parameters: Optional[Dict[str, Any]] = None
    ) -> ProvisionRequest:
        """Create provision request."""
        return ProvisionRequest(
            service_id=BIGTABLE_SERVICE_ID,
            plan_id=plan_id,
            organization_guid=str(uuid.uuid4()),
            space_guid=str(uuid.uuid4()),
            parameters=parameters or {}
        )


class ServiceInstanceDetailsFactory:
    """Factory for creating ServiceInstanceDetails instances."""

    @staticmethod
    def create_default(instance_id: Optional[str] = None, name: str = "test-bigtable") -> ServiceInstanceDetails:
        """Create a stored record for a provisioned Bigtable instance."""
        return ServiceInstanceDetails(
            id=instance_id or str(uuid.uuid4()),
            name=name,
            other_details=InstanceInformation(instance_id=name).model_dump_json(),
            service_id=BIGTABLE_SERVICE_ID,
            plan_id=DEFAULT_BIGTABLE_PLANS["three-node-production-ssd"]["guid"],
            organization_guid=str(uuid.uuid4()),
            space_guid=str(uuid.uuid4())
        )

    @staticmethod
    def create_provision_details(raw_parameters: str = "", plan_id: Optional[str] = None) -> ProvisionDetails:
        """Create a provision payload for the broker."""
        return ProvisionDetails(
            service_id=BIGTABLE_SERVICE_ID,
            plan_id=plan_id or DEFAULT_BIGTABLE_PLANS["three-node-production-ssd"]["guid"],
            organization_guid=str(uuid.uuid4()),
            space_guid=str(uuid.uuid4()),
            raw_parameters=raw_parameters
        )

    @staticmethod
    def create_plan_details(num_nodes: Any = "3", storage_type: Any = "SSD") -> PlanDetails:
        """Create plan details with the given features."""
        return PlanDetails(
            id=str(uuid.uuid4()),
            name="test-plan",
            service_id=BIGTABLE_SERVICE_ID,
            features=json.dumps({"num_nodes": num_nodes, "storage_type": storage_type})
        )
