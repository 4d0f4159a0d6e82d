"""Basic sanity checks for the mock Collins inventory."""

from collins_exporter.collector.mock_client import MockCollinsClient
from collins_exporter.collector.fetcher import InventoryFetcher
from collins_exporter.metrics import AssetStatus
from collins_exporter.mock.generator import MockInventory


def test_assets_have_valid_shape():
    inventory = MockInventory(asset_count=50, seed=42)
    known = {s.value for s in AssetStatus}

    for asset in inventory.assets:
        assert asset["ASSET"]["TAG"].startswith("M")
        assert asset["ASSET"]["STATUS"] in known
        assert isinstance(asset["ASSET"]["STATE"]["ID"], int)


def test_tags_are_unique():
    inventory = MockInventory(asset_count=200)
    tags = [a["ASSET"]["TAG"] for a in inventory.assets]
    assert len(set(tags)) == 200


def test_deterministic_with_same_seed():
    a = MockInventory(asset_count=20, seed=99)
    b = MockInventory(asset_count=20, seed=99)
    assert a.assets == b.assets


def test_pages_cover_everything_once():
    inventory = MockInventory(asset_count=23)

    first = inventory.page(0, 10)["data"]
    last = inventory.page(2, 10)["data"]

    assert first["Pagination"]["NextPage"] == 1
    assert first["Pagination"]["TotalResults"] == 23
    assert len(last["Data"]) == 3
    assert last["Pagination"]["NextPage"] == last["Pagination"]["CurrentPage"]


def test_mock_client_through_fetcher():
    backend = MockCollinsClient(asset_count=37, seed=1)
    records = InventoryFetcher(backend, page_size=10).fetch_all()

    assert len(records) == 37
    assert "37 assets" in backend.name()
