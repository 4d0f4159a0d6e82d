"""Errors raised while talking to Collins."""

from __future__ import annotations

from typing import List, Optional

from collins_exporter.metrics import AssetRecord


class CollinsError(Exception):
    """Base for everything that makes a scrape of Collins fail."""


class BackendUnavailable(CollinsError):
    """A page call failed: connection, timeout, auth or a garbled response."""

    def __init__(self, message: str, page: Optional[int] = None):
        super().__init__(message)
        self.page = page


class MidPaginationFailure(CollinsError):
    """A page call failed after earlier pages were already collected.

    The records gathered so far are kept on the exception so the caller
    can decide what to do with them.
    """

    def __init__(self, message: str, records: List[AssetRecord], page: int):
        super().__init__(message)
        self.records = records
        self.page = page


class ScrapeCrashed(Exception):
    """A scrape died on something other than a Collins error.

    Each waiting caller gets its own instance; the original error is
    the __cause__.
    """
