"""Remote funnel tables: four concurrent JSON fetches."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

import httpx

from ..cleaning.fields import RawRecord, get_value
from ..exceptions import SourceFetchError

logger = logging.getLogger(__name__)

# Remote sources, in sheet order (positions 1-4)
API_SOURCES: Tuple[str, ...] = ("leads", "test_drives", "complete_journey", "billed")


class FetchCache:
    """In-memory payload cache scoped to a single ingestion call."""

    def __init__(self):
        self._store: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)


def extract_table(payload: Any) -> List[RawRecord]:
    """Rows of ``resultSets.table1``; any other shape is an empty table."""
    if not isinstance(payload, dict):
        return []
    result_sets = get_value(payload, ("resultSets", "ResultSets"))
    if not isinstance(result_sets, dict):
        return []
    table = get_value(result_sets, ("table1", "Table1"))
    if not isinstance(table, list):
        return []
    return [row for row in table if isinstance(row, dict)]


class ApiMerger:
    """Fetches the Leads, Test Drives, Complete Journey and Billed tables concurrently.

    No retry and no timeout: any failure aborts the whole call and the
    caller retries wholesale.
    """

    def __init__(
        self,
        endpoints: Dict[str, str],
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        missing = [s for s in API_SOURCES if not endpoints.get(s)]
        if missing:
            raise ValueError(f"Missing endpoints for: {missing}")
        self.endpoints = dict(endpoints)
        self._client = client
        self.timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def fetch_table(self, client: httpx.AsyncClient, source: str, cache: FetchCache) -> List[RawRecord]:
        """Fetch one source, reusing the cached payload when present."""
        if source in cache:
            payload = cache.get(source)
        else:
            url = self.endpoints[source]
            logger.info(f"[api] Fetching {source}")
            try:
                resp = await client.get(url)
                resp.raise_for_status()
                payload = resp.json()
            except httpx.HTTPStatusError as e:
                raise SourceFetchError(source, url, f"HTTP {e.response.status_code}") from e
            except httpx.HTTPError as e:
                raise SourceFetchError(source, url, str(e) or type(e).__name__) from e
            except ValueError as e:
                raise SourceFetchError(source, url, f"invalid JSON: {e}") from e
            cache.set(source, payload)

        rows = extract_table(payload)
        logger.info(f"[api] {source}: {len(rows)} rows")
        return rows

    async def fetch_tables(self, cache: Optional[FetchCache] = None) -> List[List[RawRecord]]:
        """
        Fetch the four remote tables.

        Args:
            cache: Cache for this call; a fresh one is used when omitted

        Returns:
            Four tables in sheet order (Leads, Test Drives, Complete Journey, Billed)

        Raises:
            SourceFetchError: if any fetch fails, once all fetches have settled
        """
        if cache is None:
            cache = FetchCache()
        async with self._session() as client:
            results = await asyncio.gather(
                *(self.fetch_table(client, source, cache) for source in API_SOURCES),
                return_exceptions=True,
            )
        for source, result in zip(API_SOURCES, results):
            if isinstance(result, BaseException):
                logger.error(f"[api] Fetch of {source} failed: {result}")
                raise result
        return list(results)
