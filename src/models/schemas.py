"""Pydantic models for DirectoryHub core entities."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Base Models
# =============================================================================


class BaseEntity(BaseModel):
    """Base model for rows read from the store.

    Identifiers are store-assigned and treated as opaque strings. Unknown
    columns (embedded relations, niche-specific listing fields) are kept.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True, extra="allow")

    id: str = Field(..., description="Store-assigned identifier")
    created_at: Optional[datetime] = Field(None, description="Record creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "BaseEntity":
        """Create model instance from database row."""
        return cls.model_validate(row)


# =============================================================================
# Directory Hierarchy
# =============================================================================


class State(BaseEntity):
    """Top level of the directory. Owns cities."""

    name: str = Field(..., description="Display name, used as the human lookup key")


class City(BaseEntity):
    """City within a state. Owns listings."""

    name: str = Field(..., description="Display name")
    state_id: Optional[str] = Field(None, description="Owning state")


class Listing(BaseEntity):
    """Business listed in a city."""

    business: str = Field(..., description="Business name")
    category: Optional[str] = Field(None, description="Listing category")
    review_rating: Optional[float] = Field(None, description="Average rating, expected 0-5")
    number_of_reviews: Optional[int] = Field(None, description="Review count")
    address: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    city_id: Optional[str] = Field(None, description="Owning city")
    featured: Optional[bool] = Field(
        None, description="True, False, or null when never set"
    )

    @property
    def is_featured(self) -> bool:
        # Null means "never set", which is not the same as an explicit False.
        return self.featured is True


# =============================================================================
# Editorial
# =============================================================================


class Article(BaseEntity):
    """Editorial article addressed by its slug."""

    title: str = Field(..., description="Article title")
    content: Optional[str] = Field(None, description="Article body")
    slug: str = Field(..., description="Globally unique URL slug")
    featured_image: Optional[str] = None
    published: Optional[bool] = Field(False, description="Visible on the public site")
    city_id: Optional[str] = Field(None, description="City the article is scoped to")
