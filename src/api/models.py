"""Pydantic models for API requests and responses.

Request models keep required fields optional so that handlers can report a
missing field with the directory's own error messages (400) instead of the
framework's generic validation response.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from src.models.schemas import Article, City, Listing, State


# =============================================================================
# State Models
# =============================================================================


class StateCreate(BaseModel):
    """Request model for creating or renaming a state."""

    name: Optional[str] = Field(
        None,
        max_length=255,
        description="State name",
        json_schema_extra={"example": "New South Wales"},
    )


class StatesBulkCreate(BaseModel):
    """Request model for creating many states at once."""

    states: Optional[list[Any]] = Field(
        None,
        description="State names; blanks and duplicates after trimming are dropped",
        json_schema_extra={"example": ["Texas", " Texas ", "", "California"]},
    )


class StatesBulkResponse(BaseModel):
    """Response for a bulk state insert."""

    success: bool = Field(..., description="Whether the batch was inserted")
    created: int = Field(..., description="Number of rows created")
    states: list[State] = Field(default_factory=list, description="Created states")


# =============================================================================
# City Models
# =============================================================================


class CityCreate(BaseModel):
    """Request model for creating or updating a city."""

    name: Optional[str] = Field(None, max_length=255, description="City name")
    state_id: Optional[str] = Field(None, description="Owning state ID")


class CitiesBulkCreate(BaseModel):
    """Request model for creating many cities in one state."""

    cities: Optional[list[Any]] = Field(None, description="City names")
    state_id: Optional[str] = Field(None, description="Owning state ID")


class CitiesBulkResponse(BaseModel):
    """Response for a bulk city insert."""

    success: bool
    created: int
    state: Optional[State] = None
    cities: list[City] = Field(default_factory=list)


# =============================================================================
# Listing Models
# =============================================================================


class ListingCreate(BaseModel):
    """Request model for creating a listing."""

    business: Optional[str] = Field(None, max_length=255, description="Business name")
    category: Optional[str] = Field(None, max_length=255, description="Listing category")
    review_rating: Optional[float] = Field(None, ge=0.0, le=5.0, description="Rating (0-5)")
    number_of_reviews: Optional[int] = Field(None, ge=0, description="Review count")
    address: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    city_id: Optional[str] = Field(None, description="Owning city ID")
    featured: Optional[bool] = Field(None, description="Show in the featured slot")


class ListingUpdate(ListingCreate):
    """Request model for updating a listing. Only provided fields change."""


class ListingsImport(BaseModel):
    """Request model for importing listings into one city."""

    city_id: Optional[str] = Field(None, description="City the listings belong to")
    listings: Optional[list[dict[str, Any]]] = Field(
        None,
        description="Rows keyed by column name or by the spreadsheet export headers",
        json_schema_extra={
            "example": [{"Business": "Bark Inn", "Phone": "(512) 555-0100", "Featured": "yes"}]
        },
    )


class ListingsImportResponse(BaseModel):
    """Response for a listing import."""

    success: bool = True
    imported: int = Field(..., description="Listings created")
    skipped: int = Field(0, description="Rows without a business name or any contact")
    total: int = Field(..., description="Rows received")
    message: str
    listings: list[Listing] = Field(default_factory=list)


# =============================================================================
# Article Models
# =============================================================================


class ArticleCreate(BaseModel):
    """Request model for creating an article."""

    title: Optional[str] = Field(None, max_length=500, description="Article title")
    content: Optional[str] = Field(None, description="Article body")
    slug: Optional[str] = Field(
        None,
        description="URL slug; derived from the title when omitted",
    )
    featured_image: Optional[str] = None
    published: Optional[bool] = None
    city_id: Optional[str] = Field(None, description="City the article belongs to")


class ArticleUpdate(ArticleCreate):
    """Request model for updating an article. Only provided fields change."""


# =============================================================================
# Public Lookup Models
# =============================================================================


class CityPage(BaseModel):
    """A city resolved from its slug, with its listings."""

    city: City
    state: Optional[State] = None
    slug: str
    listings: list[Listing] = Field(default_factory=list)
    featured_count: int = 0


class StatePage(BaseModel):
    """A state resolved from its slug, with its cities."""

    state: State
    slug: str
    cities: list[City] = Field(default_factory=list)


# =============================================================================
# Admin Maintenance Models
# =============================================================================


class BulkDeleteResponse(BaseModel):
    """Response for a delete-by-slug-prefix sweep."""

    success: bool = True
    deleted: int = Field(..., description="Rows matched before the delete")
    message: str


class ArticleDeleteResponse(BulkDeleteResponse):
    """Delete-by-slug-prefix sweep that also lists what it removed."""

    articles: list[dict[str, Any]] = Field(
        default_factory=list, description="Slug and title of each deleted article"
    )


class ArticleUrlItem(BaseModel):
    url: str
    slug: str
    title: Optional[str] = None
    created_at: Optional[datetime] = None


class ArticleUrlsResponse(BaseModel):
    """Canonical URLs of articles in a slug class."""

    success: bool = True
    count: int
    urls: list[ArticleUrlItem] = Field(default_factory=list)
    message: str


class SlugPrefixCountResponse(BaseModel):
    """Preview of a slug class before a bulk operation."""

    entity: str
    prefix: str
    count: int
    sample: list[dict[str, Any]] = Field(default_factory=list)


class OrphanReportResponse(BaseModel):
    """Result of an orphan scan."""

    entity: str
    column: str
    parent: str
    column_present: bool
    checked: int
    orphan_count: int
    repaired: int
    orphans: list[dict[str, Any]] = Field(default_factory=list)


class DuplicateGroupItem(BaseModel):
    """A kept listing and the newer copies of it."""

    original: dict[str, Any]
    duplicates: list[dict[str, Any]] = Field(default_factory=list)


class DuplicateListingsResponse(BaseModel):
    """Result of a duplicate listing scan or removal."""

    success: bool = True
    checked: int = Field(..., description="Listings in scope")
    duplicate_groups: int
    duplicates: int = Field(..., description="Listings that copy an older one")
    removed: int = 0
    groups: list[DuplicateGroupItem] = Field(default_factory=list)
    message: str


class ColumnProbeResponse(BaseModel):
    entity: str
    column: str
    present: bool


class MessageResponse(BaseModel):
    message: str


# =============================================================================
# Health Check Models
# =============================================================================


class HealthStatus(BaseModel):
    """Individual service health status."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Service status"
    )
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    message: Optional[str] = Field(None, description="Additional status message")


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Overall system status"
    )
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(..., description="Check timestamp")
    services: dict[str, HealthStatus] = Field(
        default_factory=dict,
        description="Individual service statuses",
    )
    uptime_seconds: Optional[float] = Field(None, description="Server uptime in seconds")


# =============================================================================
# Error Models
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Stable, human-readable error message")
    details: Optional[Any] = Field(
        None, description="Underlying diagnostic, only for operator requests"
    )


class ValidationErrorDetail(BaseModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
