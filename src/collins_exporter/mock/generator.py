"""
Mock Collins inventory.

Produces a fake but plausible fleet so we can develop and test without
a Collins instance. Payloads use the same JSON shape as the real
/api/assets endpoint, so they go through the real parser.
"""

import math
import random
from typing import List

from collins_exporter.metrics import AssetStatus

NODECLASSES = ["web-server", "db-primary", "db-replica", "cache", "batch-worker", "lb"]

# Rough shape of a fleet that's mostly in production
STATUS_WEIGHTS = {
    AssetStatus.INCOMPLETE: 1,
    AssetStatus.NEW: 2,
    AssetStatus.UNALLOCATED: 8,
    AssetStatus.PROVISIONING: 2,
    AssetStatus.PROVISIONED: 2,
    AssetStatus.ALLOCATED: 70,
    AssetStatus.CANCELLED: 3,
    AssetStatus.DECOMMISSIONED: 5,
    AssetStatus.MAINTENANCE: 7,
}


class MockInventory:

    def __init__(self, asset_count: int = 250, seed: int = 42):
        self._rng = random.Random(seed)
        self.assets = [self._make_asset(i) for i in range(asset_count)]

    def _make_asset(self, index: int) -> dict:
        statuses = list(STATUS_WEIGHTS)
        status = self._rng.choices(statuses, weights=[STATUS_WEIGHTS[s] for s in statuses])[0]

        rack = index // 40
        slot = index % 40

        # A few hosts never got an IPMI card or an address assigned
        has_ipmi = self._rng.random() > 0.05
        has_address = status not in (AssetStatus.NEW, AssetStatus.INCOMPLETE) and self._rng.random() > 0.1

        return {
            "ASSET": {
                "ID": index + 1,
                "TAG": f"M{index:07d}",
                "TYPE": "SERVER_NODE",
                "STATUS": status.value,
                "STATE": {"ID": self._rng.randint(0, 12), "NAME": "RUNNING"},
            },
            "CLASSIFICATION": {"TAG": self._rng.choice(NODECLASSES)},
            "IPMI": {"ADDRESS": f"10.255.{rack}.{slot + 10}"} if has_ipmi else None,
            "ADDRESSES": [{"ADDRESS": f"10.0.{rack}.{slot + 10}"}] if has_address else [],
        }

    def page(self, page: int, size: int) -> dict:
        """Return one page as a Collins /api/assets response body."""
        total = len(self.assets)
        last_page = max(0, math.ceil(total / size) - 1)
        chunk: List[dict] = self.assets[page * size:(page + 1) * size]

        return {
            "status": "success:ok",
            "data": {
                "Pagination": {
                    "PreviousPage": max(0, page - 1),
                    "CurrentPage": page,
                    "NextPage": page + 1 if page < last_page else page,
                    "TotalResults": total,
                },
                "Data": chunk,
            },
        }
