"""
Client for a live Collins server. Calls /api/assets with the given
query and page options and maps the JSON envelope into AssetRecords.

Every failure of a page call -- refused connection, timeout, bad
credentials, garbage body -- surfaces as BackendUnavailable so the
fetcher only has one thing to catch.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import httpx

from collins_exporter.collector.base import InventoryBackend
from collins_exporter.collector.errors import BackendUnavailable
from collins_exporter.collector.payload_parser import PayloadError, parse_find_response
from collins_exporter.config import CollinsConfig
from collins_exporter.metrics import AssetRecord, Pagination

log = logging.getLogger(__name__)

ASSETS_PATH = "/api/assets"


class CollinsClient(InventoryBackend):

    def __init__(self, config: CollinsConfig, transport: Optional[httpx.BaseTransport] = None):
        self._base_url = config.host.rstrip("/")
        self._client = httpx.Client(
            base_url=self._base_url,
            auth=(config.username, config.password) if config.username else None,
            timeout=config.timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def find(self, query: str, page: int, page_size: int) -> Tuple[List[AssetRecord], Pagination]:
        params = {
            "query": query,
            "page": page,
            "size": page_size,
            "details": "true",
        }
        try:
            response = self._client.get(ASSETS_PATH, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendUnavailable(
                f"Collins answered HTTP {e.response.status_code} for page {page}", page=page
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"Collins request for page {page} failed: {e}", page=page) from e
        except ValueError as e:
            # response.json() on a non-JSON body
            raise BackendUnavailable(f"Collins page {page} is not valid JSON", page=page) from e

        try:
            records, pagination = parse_find_response(payload, page=page)
        except PayloadError as e:
            raise BackendUnavailable(f"Unexpected Collins response for page {page}: {e}", page=page) from e

        log.debug("Page %d: %d assets, %d total", page, len(records), pagination.total_results)
        return records, pagination

    def name(self) -> str:
        return f"Collins ({self._base_url})"

    def close(self):
        self._client.close()
