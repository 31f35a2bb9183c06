"""
Data Models.

Entity Hierarchy:
- State: top-level region, owns cities
- City: owns listings, optionally referenced by articles
- Listing: a business in a city
- Article: editorial content addressed by slug

Example:
    from src.models import Listing

    listing = Listing.from_db_row(row)
    if listing.is_featured:
        ...
"""

from src.models.schemas import Article, BaseEntity, City, Listing, State

__all__ = [
    "BaseEntity",
    "State",
    "City",
    "Listing",
    "Article",
]
