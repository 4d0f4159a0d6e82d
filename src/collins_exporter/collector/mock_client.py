"""
Backend that reads from the in-process mock inventory.
Used for local development without a Collins instance.
"""

from typing import List, Tuple

from collins_exporter.collector.base import InventoryBackend
from collins_exporter.collector.payload_parser import parse_find_response
from collins_exporter.metrics import AssetRecord, Pagination
from collins_exporter.mock.generator import MockInventory


class MockCollinsClient(InventoryBackend):
    """Wraps the mock generator as a standard backend. Ignores the query."""

    def __init__(self, asset_count: int = 250, seed: int = 42):
        self._inventory = MockInventory(asset_count=asset_count, seed=seed)

    def find(self, query: str, page: int, page_size: int) -> Tuple[List[AssetRecord], Pagination]:
        return parse_find_response(self._inventory.page(page, page_size), page=page)

    def name(self) -> str:
        return f"Mock Collins ({len(self._inventory.assets)} assets)"
