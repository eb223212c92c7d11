"""
Pydantic request/response schemas for the Watchlist Sync API

Field names on the wire are camelCase; the models accept either spelling.
"""

from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field, field_validator

from database.models import ListSource, EntityType


class SyncResponse(BaseModel):
    """Result of syncing a single list."""
    success: bool = Field(..., description="Whether the list was replaced")
    message: str = Field(..., description="Human-readable outcome")


class SyncAllResponse(SyncResponse):
    """Result of syncing every list."""
    details: List[str] = Field(
        default_factory=list,
        description="One line per list in the order OFAC, EU, UN, Interpol"
    )


class SearchRequest(BaseModel):
    """Entity search filters.

    All filters are optional; an empty request pages through every entity.
    """
    name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Case-insensitive substring of the primary name"
    )
    list_sources: Optional[List[ListSource]] = Field(default=None, alias="listSources")
    entity_types: Optional[List[EntityType]] = Field(default=None, alias="entityTypes")
    nationalities: Optional[List[str]] = Field(default=None)
    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(default=20, ge=1, le=100, alias="pageSize")

    model_config = {"populate_by_name": True}

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        """Blank names mean no name filter."""
        if v is None:
            return v
        v = v.strip()
        return v or None


class AddressModel(BaseModel):
    """Postal address of a sanctioned entity."""
    address1: Optional[str] = None
    address2: Optional[str] = None
    address3: Optional[str] = None
    city: Optional[str] = None
    state_or_province: Optional[str] = Field(default=None, alias="stateOrProvince")
    postal_code: Optional[str] = Field(default=None, alias="postalCode")
    country: Optional[str] = None

    model_config = {"populate_by_name": True}


class EntityResponse(BaseModel):
    """Sanctioned entity details."""
    id: int
    list_source: ListSource = Field(..., alias="listSource")
    entity_type: EntityType = Field(..., alias="entityType")
    name: str
    reference_number: str = Field(..., alias="referenceNumber")
    aliases: Optional[List[str]] = None
    addresses: Optional[List[AddressModel]] = None
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth")
    place_of_birth: Optional[str] = Field(default=None, alias="placeOfBirth")
    nationality: Optional[str] = None
    reason: Optional[str] = None
    additional_info: Optional[str] = Field(default=None, alias="additionalInfo")
    date_added: Optional[str] = Field(default=None, alias="dateAdded")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    """One page of search results."""
    results: List[EntityResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1, alias="pageSize")
    total_pages: int = Field(..., ge=0, alias="totalPages")

    model_config = {"populate_by_name": True}


class StatsResponse(BaseModel):
    """Store statistics."""
    counts_by_source: Dict[str, int] = Field(..., alias="countsBySource")
    counts_by_type: Dict[str, int] = Field(..., alias="countsByType")
    last_updated_at_by_source: Dict[str, Optional[str]] = Field(..., alias="lastUpdatedAtBySource")
    total_records: int = Field(..., ge=0, alias="totalRecords")

    model_config = {"populate_by_name": True}


class SyncHistoryEntryResponse(BaseModel):
    """One sync history entry."""
    id: int
    source: str
    status: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    records_affected: Optional[int] = Field(default=None, alias="recordsAffected")
    message: Optional[str] = None

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""
    status: str = Field(default="healthy", description="Service status")
    database: str = Field(..., description="Database connectivity: ok or unavailable")
    total_records: Optional[int] = Field(default=None, alias="totalRecords")
    uptime_seconds: Optional[int] = Field(default=None, alias="uptimeSeconds")

    model_config = {"populate_by_name": True}


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    field: Optional[str] = Field(default=None, description="Field that caused error")
    suggestion: Optional[str] = Field(default=None, description="How to fix the error")
    timestamp: str = Field(..., description="Error timestamp (ISO 8601)")


class ErrorResponse(BaseModel):
    """Standardized error response format."""
    error: ErrorDetail


def dump(model: BaseModel) -> Dict[str, Any]:
    """Serialize a response model with its camelCase aliases."""
    return model.model_dump(by_alias=True, mode="json")
