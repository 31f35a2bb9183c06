"""
Administrative maintenance.

- integrity: read-only scans (slug-prefix preview, orphans, column probes)
  with an explicit repair mode
- bulk: batch deletes and inserts used by the admin tools
"""

from src.maintenance.bulk import (
    ArticleUrl,
    BulkDeleteResult,
    BulkInsertResult,
    BulkMaintenance,
    clean_names,
)
from src.maintenance.integrity import (
    IntegrityChecker,
    OrphanReport,
    SlugPrefixCount,
)

__all__ = [
    "ArticleUrl",
    "BulkDeleteResult",
    "BulkInsertResult",
    "BulkMaintenance",
    "clean_names",
    "IntegrityChecker",
    "OrphanReport",
    "SlugPrefixCount",
]
