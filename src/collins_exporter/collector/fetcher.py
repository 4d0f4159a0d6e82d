"""
Paginated retrieval of every asset matching the exporter's query.

Pages are requested in order starting at 0 until Collins says there
is no next page. Records keep the order Collins returned them in.
"""

from __future__ import annotations

import logging
from typing import List

from collins_exporter.collector.base import InventoryBackend
from collins_exporter.collector.errors import CollinsError, MidPaginationFailure
from collins_exporter.metrics import AssetRecord

log = logging.getLogger(__name__)

DEFAULT_QUERY = "TYPE = SERVER_NODE AND NOT STATUS = incomplete"
DEFAULT_PAGE_SIZE = 1000


class InventoryFetcher:

    def __init__(
        self,
        backend: InventoryBackend,
        query: str = DEFAULT_QUERY,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._backend = backend
        self.query = query
        self.page_size = page_size

    @property
    def backend(self) -> InventoryBackend:
        return self._backend

    def fetch_all(self) -> List[AssetRecord]:
        """Return all assets across all pages.

        A failure on the first page propagates as-is (BackendUnavailable).
        A failure on a later page raises MidPaginationFailure carrying the
        records collected up to that point.
        """
        page = 0
        records, pagination = self._backend.find(self.query, page, self.page_size)
        log.debug("Found %d assets, %d total", len(records), pagination.total_results)

        all_records: List[AssetRecord] = list(records)

        while pagination.has_more:
            page += 1
            try:
                records, pagination = self._backend.find(self.query, page, self.page_size)
            except CollinsError as e:
                log.error("Asset find failed on page %d after %d assets: %s", page, len(all_records), e)
                raise MidPaginationFailure(
                    f"page {page} failed after {len(all_records)} assets: {e}",
                    records=all_records,
                    page=page,
                ) from e
            log.debug("Found %d more assets", len(records))
            all_records.extend(records)

        return all_records

    def close(self):
        self._backend.close()
