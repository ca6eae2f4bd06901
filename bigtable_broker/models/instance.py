"""Broker-side instance and plan models."""

from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime, timezone


class PlanDetails(BaseModel):
    """Service plan metadata handed to the broker."""
    id: str = Field(..., description="Plan GUID")
    name: str = Field(..., description="Plan name")
    description: str = Field(default="", description="Plan description")
    service_id: str = Field(..., description="Owning service GUID")
    features: str = Field(default="{}", description="JSON-encoded plan features")


class ProvisionDetails(BaseModel):
    """Provision request payload handed to the broker."""
    service_id: str
    plan_id: str
    organization_guid: str = ""
    space_guid: str = ""
    raw_parameters: str = Field(default="", description="User supplied JSON parameters")


class DeprovisionDetails(BaseModel):
    """Deprovision request payload handed to the broker."""
    service_id: str
    plan_id: str


class ServiceInstanceDetails(BaseModel):
    """Generic persisted record of a provisioned service instance."""
    id: str = Field(..., description="Broker instance id")
    name: str = Field(..., description="Provider instance name")
    url: str = ""
    location: str = ""
    other_details: str = Field(default="", description="Provider specific JSON details")
    service_id: str = ""
    plan_id: str = ""
    organization_guid: str = ""
    space_guid: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class InstanceInformation(BaseModel):
    """Identifying data serialized into ServiceInstanceDetails.other_details."""
    instance_id: str


class BigtableDynamicPlan(BaseModel):
    """Operator-defined Bigtable plan."""
    guid: str
    name: str
    description: str = ""
    num_nodes: str
    storage_type: str
    display_name: Optional[str] = None
    service: str = ""

    def features(self) -> Dict[str, str]:
        """Feature mapping stored on the catalog plan built from this definition."""
        return map_plan(self.model_dump())


def map_plan(details: Dict[str, str]) -> Dict[str, str]:
    """Project a plan definition onto the features the broker reads."""
    return {
        "num_nodes": details["num_nodes"],
        "storage_type": details["storage_type"],
    }
