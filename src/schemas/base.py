"""Base Pydantic schemas for the JSON:API document format."""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, Field, PlainSerializer, field_validator

from src.utils.money import Money


# Exact decimal in Python, two-decimal string on the wire
MoneyAmount = Annotated[
    Decimal,
    BeforeValidator(lambda v: v.to_decimal() if isinstance(v, Money) else v),
    PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json"),
]


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    class Config:
        from_attributes = True
        populate_by_name = True
        str_strip_whitespace = True
        validate_assignment = True


class JSONAPIError(BaseSchema):
    """JSON:API error object."""

    id: Optional[str] = Field(None, description="Unique error identifier")
    status: Optional[str] = Field(None, description="HTTP status code")
    code: Optional[str] = Field(None, description="Application-specific error code")
    title: Optional[str] = Field(None, description="Short, human-readable summary")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    source: Optional[Dict[str, str]] = Field(
        None, description="References to the source of the error"
    )
    meta: Optional[Dict[str, Any]] = Field(
        None, description="Additional metadata about the error"
    )


class JSONAPIErrorResponse(BaseSchema):
    """JSON:API error response."""

    errors: List[JSONAPIError] = Field(description="Array of error objects")
    meta: Optional[Dict[str, Any]] = Field(
        None, description="Metadata about the error response"
    )


class JSONAPIResponse(BaseSchema):
    """Base JSON:API response for single resources."""

    data: Optional[Dict[str, Any]] = Field(None, description="Primary data")
    included: Optional[List[Dict[str, Any]]] = Field(
        None, description="Related resources"
    )
    meta: Optional[Dict[str, Any]] = Field(None, description="Metadata")
    links: Optional[Dict[str, str]] = Field(None, description="Links")


class JSONAPICollectionResponse(BaseSchema):
    """Base JSON:API response for resource collections."""

    data: List[Dict[str, Any]] = Field(description="Primary data array")
    included: Optional[List[Dict[str, Any]]] = Field(
        None, description="Related resources"
    )
    meta: Optional[Dict[str, Any]] = Field(None, description="Metadata")
    links: Optional[Dict[str, str]] = Field(None, description="Links")


class HealthCheckResponse(BaseSchema):
    """Health check response schema."""

    status: str = Field(description="Service status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(description="Health check timestamp")
    version: str = Field(description="Service version")
    environment: str = Field(description="Environment name")

    dependencies: Dict[str, Dict[str, Any]] = Field(
        description="Dependency health status"
    )

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        valid_statuses = {"healthy", "degraded", "unhealthy"}
        if v not in valid_statuses:
            raise ValueError(f"Status must be one of: {valid_statuses}")
        return v


def resource(type_: str, entity: Any, **extra: Any) -> Dict[str, Any]:
    """Build a JSON:API resource object from a model instance."""
    attributes = entity.to_dict()
    entity_id = attributes.pop("id")
    attributes.update(extra)
    return {"type": type_, "id": entity_id, "attributes": attributes}
