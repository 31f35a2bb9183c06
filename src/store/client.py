"""Entity store backed by the Supabase query builder.

The store does not hide the query builder: callers compose queries with
`store.table(...)` exactly as they would against the Supabase client and hand
the finished query to `execute`, which is the single place where exceptions
become `Ok | Err` values.

Usage:
    store = EntityStore(create_client(url, key))

    result = store.execute(
        store.table("articles").select("id", count="exact").like("slug", "about-%")
    )
    if not result.ok:
        ...
"""

from typing import Any, Callable

import httpx
import structlog
from postgrest.exceptions import APIError
from supabase import Client
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.store.result import Err, ErrorKind, Ok, StoreResult

logger = structlog.get_logger(__name__)

# Postgres / PostgREST codes for missing columns, tables and relationships.
SCHEMA_ERROR_CODES = {"42703", "42P01", "PGRST200", "PGRST204"}


def classify_api_error(error: APIError) -> Err:
    """Map a PostgREST error onto an `Err` with the store's message verbatim."""
    code = error.code or ""
    detail = error.message or str(error)

    if code in SCHEMA_ERROR_CODES or "does not exist" in detail:
        kind = ErrorKind.SCHEMA
    elif code.startswith("23"):
        kind = ErrorKind.CONSTRAINT
    else:
        kind = ErrorKind.QUERY

    return Err(kind=kind, detail=detail, code=code or None)


@retry(
    retry=retry_if_exception_type(httpx.TransportError),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    stop=stop_after_attempt(3),
    reraise=True,
    before_sleep=lambda retry_state: logger.warning(
        "store_read_retry",
        attempt=retry_state.attempt_number,
        wait=retry_state.next_action.sleep,
    ),
)
def _execute_read(query: Any) -> Any:
    return query.execute()


class EntityStore:
    """Thin wrapper around a Supabase client returning explicit results."""

    def __init__(self, client: Client, page_size: int = 1000):
        self._client = client
        self.page_size = page_size

    def table(self, name: str) -> Any:
        """Start a query against a table."""
        return self._client.table(str(name))

    def execute(self, query: Any, *, retry: bool = False) -> StoreResult:
        """
        Run a composed query.

        Args:
            query: Query builder returned by `table(...)` and its filters.
            retry: Retry transient connection failures. Only safe for reads.

        Returns:
            `Ok` with rows and count, or `Err` describing the failure.
        """
        try:
            response = _execute_read(query) if retry else query.execute()
        except APIError as e:
            err = classify_api_error(e)
            logger.warning(
                "store_query_failed",
                kind=err.kind.value,
                code=err.code,
                detail=err.detail,
            )
            return err
        except httpx.HTTPError as e:
            logger.error("store_unreachable", error=str(e), error_type=type(e).__name__)
            return Err(kind=ErrorKind.CONNECTION, detail=str(e) or type(e).__name__)

        data = response.data
        if data is None:
            rows = []
        elif isinstance(data, dict):
            rows = [data]
        else:
            rows = list(data)

        return Ok(data=rows, count=getattr(response, "count", None))

    def fetch_all(self, build_query: Callable[[], Any]) -> StoreResult:
        """
        Read every row of a query page by page.

        `build_query` must return a fresh, deterministically ordered query on
        each call. The result is a best-effort snapshot: rows written between
        pages may be missed or seen twice.
        """
        rows: list[dict[str, Any]] = []
        start = 0

        while True:
            result = self.execute(
                build_query().range(start, start + self.page_size - 1),
                retry=True,
            )
            if not result.ok:
                return result

            rows.extend(result.data)
            if len(result.data) < self.page_size:
                break
            start += self.page_size

        return Ok(data=rows, count=len(rows))
