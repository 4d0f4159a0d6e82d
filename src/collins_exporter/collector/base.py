"""
Base backend interface.

A backend is anything that can answer a paginated asset query.
This keeps the fetcher and coordinator decoupled from where
the data actually comes from (real Collins, mock, fake server).
"""

from abc import ABC, abstractmethod
from typing import List, Tuple

from collins_exporter.metrics import AssetRecord, Pagination


class InventoryBackend(ABC):
    """Interface for all asset inventory sources."""

    @abstractmethod
    def find(self, query: str, page: int, page_size: int) -> Tuple[List[AssetRecord], Pagination]:
        """Fetch one page of assets matching `query`.

        Raises BackendUnavailable when the page can't be retrieved.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass
