"""Tests for paginated asset retrieval."""

import pytest

from collins_exporter.collector.base import InventoryBackend
from collins_exporter.collector.errors import BackendUnavailable, MidPaginationFailure
from collins_exporter.collector.fetcher import DEFAULT_QUERY, InventoryFetcher
from collins_exporter.metrics import AssetRecord, Pagination


class PagedBackend(InventoryBackend):
    """Serves pre-built pages; pages listed in `fail_pages` raise."""

    def __init__(self, page_sizes, fail_pages=()):
        self.pages = []
        n = 0
        for size in page_sizes:
            self.pages.append([AssetRecord(tag=f"T{n + i:04d}", status="Allocated") for i in range(size)])
            n += size
        self.fail_pages = set(fail_pages)
        self.calls = []
        self.closed = False

    def find(self, query, page, page_size):
        self.calls.append((query, page, page_size))
        if page in self.fail_pages:
            raise BackendUnavailable(f"page {page} exploded", page=page)
        last = len(self.pages) - 1
        return list(self.pages[page]), Pagination(
            current_page=page,
            next_page=page + 1 if page < last else page,
            total_results=sum(len(p) for p in self.pages),
        )

    def name(self):
        return "paged"

    def close(self):
        self.closed = True


def test_accumulates_three_pages_in_order():
    backend = PagedBackend([3, 5, 2])
    records = InventoryFetcher(backend, page_size=5).fetch_all()

    assert len(records) == 10
    assert [r.tag for r in records] == [f"T{i:04d}" for i in range(10)]
    assert [call[1] for call in backend.calls] == [0, 1, 2]


def test_uses_fixed_query_and_page_size():
    backend = PagedBackend([1, 1])
    InventoryFetcher(backend, query="TYPE = SERVER_NODE", page_size=7).fetch_all()

    assert backend.calls == [("TYPE = SERVER_NODE", 0, 7), ("TYPE = SERVER_NODE", 1, 7)]


def test_default_query():
    backend = PagedBackend([1])
    InventoryFetcher(backend).fetch_all()
    assert backend.calls == [(DEFAULT_QUERY, 0, 1000)]


def test_single_page_is_one_call():
    backend = PagedBackend([4])
    records = InventoryFetcher(backend).fetch_all()

    assert len(records) == 4
    assert len(backend.calls) == 1


def test_empty_inventory():
    backend = PagedBackend([0])
    assert InventoryFetcher(backend).fetch_all() == []


def test_first_page_failure_propagates():
    backend = PagedBackend([3, 3], fail_pages={0})
    with pytest.raises(BackendUnavailable):
        InventoryFetcher(backend).fetch_all()
    assert len(backend.calls) == 1


def test_mid_pagination_failure_keeps_progress():
    backend = PagedBackend([3, 5, 2], fail_pages={1})

    with pytest.raises(MidPaginationFailure) as excinfo:
        InventoryFetcher(backend).fetch_all()

    err = excinfo.value
    assert err.page == 1
    assert [r.tag for r in err.records] == ["T0000", "T0001", "T0002"]
    assert isinstance(err.__cause__, BackendUnavailable)
    # stops at the failed page, doesn't try page 2
    assert [call[1] for call in backend.calls] == [0, 1]


def test_failure_on_last_page():
    backend = PagedBackend([3, 5, 2], fail_pages={2})

    with pytest.raises(MidPaginationFailure) as excinfo:
        InventoryFetcher(backend).fetch_all()

    assert len(excinfo.value.records) == 8
    assert excinfo.value.page == 2


def test_rejects_non_positive_page_size():
    with pytest.raises(ValueError):
        InventoryFetcher(PagedBackend([1]), page_size=0)


def test_close_closes_backend():
    backend = PagedBackend([1])
    InventoryFetcher(backend).close()
    assert backend.closed is True
