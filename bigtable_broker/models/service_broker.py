"""Open Service Broker API data models."""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Any, Optional, List


class ServicePlanMetadata(BaseModel):
    """Service plan metadata."""
    displayName: Optional[str] = None
    bullets: Optional[List[str]] = None
    costs: Optional[List[Dict[str, Any]]] = None


class ServicePlan(BaseModel):
    """Service plan definition."""
    id: str = Field(..., description="Unique identifier for the service plan")
    name: str = Field(..., description="Human-readable name for the service plan")
    description: str = Field(..., description="Description of the service plan")
    free: bool = Field(default=False, description="Whether the plan is free")
    bindable: Optional[bool] = Field(default=None, description="Overrides the service bindable flag")
    metadata: Optional[ServicePlanMetadata] = None


class ServiceMetadata(BaseModel):
    """Service metadata."""
    displayName: Optional[str] = None
    imageUrl: Optional[str] = None
    longDescription: Optional[str] = None
    providerDisplayName: Optional[str] = None
    documentationUrl: Optional[str] = None
    supportUrl: Optional[str] = None


class Service(BaseModel):
    """Service definition for catalog."""
    id: str = Field(..., description="Unique identifier for the service")
    name: str = Field(..., description="Human-readable name for the service")
    description: str = Field(..., description="Description of the service")
    bindable: bool = Field(default=False, description="Whether the service supports binding")
    plan_updateable: bool = Field(default=False, description="Whether the service supports plan updates")
    plans: List[ServicePlan] = Field(..., description="List of service plans")
    tags: Optional[List[str]] = None
    metadata: Optional[ServiceMetadata] = None
    requires: Optional[List[str]] = None


class Catalog(BaseModel):
    """Service catalog response."""
    services: List[Service] = Field(..., description="List of available services")


class ProvisionRequest(BaseModel):
    """Service instance provisioning request."""
    service_id: str = Field(..., description="ID of the service being provisioned")
    plan_id: str = Field(..., description="ID of the plan being provisioned")
    context: Optional[Dict[str, Any]] = None
    organization_guid: str = Field(..., description="Organization GUID")
    space_guid: str = Field(..., description="Space GUID")
    parameters: Optional[Dict[str, Any]] = None

    @field_validator('parameters')
    @classmethod
    def validate_parameters(cls, v):
        """Normalize missing parameters to an empty mapping."""
        if v is None:
            return {}
        return v


class ProvisionResponse(BaseModel):
    """Service instance provisioning response."""
    dashboard_url: Optional[str] = None
    operation: Optional[str] = None


class DeprovisionResponse(BaseModel):
    """Service instance deprovisioning response."""
    operation: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response."""
    error: str = Field(..., description="Error code")
    description: str = Field(..., description="Error description")
