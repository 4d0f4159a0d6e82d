"""
Core metric definitions for the Collins exporter.

Asset records as they come back from Collins, the observations derived
from them, and the result of one scrape cycle. Metric names and label
sets are part of the exporter's public interface -- dashboards and alerts
depend on them, so treat any change here as breaking.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping, Tuple

NAMESPACE = "collins"


class AssetStatus(enum.Enum):
    """Lifecycle statuses Collins can assign to an asset, in export order."""

    INCOMPLETE = "Incomplete"          # powered on, burn-in likely still running
    NEW = "New"                        # burn-in done, waiting for physical intake
    UNALLOCATED = "Unallocated"        # intake done, ready for use
    PROVISIONING = "Provisioning"
    PROVISIONED = "Provisioned"        # awaiting automated verification
    ALLOCATED = "Allocated"            # production
    CANCELLED = "Cancelled"            # no longer needed, awaiting decommission
    DECOMMISSIONED = "Decommissioned"
    MAINTENANCE = "Maintenance"


@dataclass(frozen=True)
class AssetRecord:
    """One asset as returned by an asset find call."""

    tag: str
    status: str
    state: int = 0
    nodeclass: str = ""
    ipmi_address: str = ""
    addresses: Tuple[str, ...] = ()

    @property
    def primary_address(self) -> str:
        return self.addresses[0] if self.addresses else ""


@dataclass(frozen=True)
class Pagination:
    current_page: int
    next_page: int
    previous_page: int = 0
    total_results: int = 0

    @property
    def has_more(self) -> bool:
        # Collins keeps NextPage == CurrentPage on the last page
        return self.next_page > self.current_page


@dataclass(frozen=True)
class MetricDesc:
    name: str
    help_text: str
    label_names: Tuple[str, ...] = ()
    kind: str = "gauge"  # "gauge" or "counter"


def _fq_name(*parts: str) -> str:
    return "_".join(p for p in (NAMESPACE,) + parts if p)


ASSET_STATUS = MetricDesc(
    name=_fq_name("asset", "status"),
    help_text="'1' if the asset with the given tag has the given Collins status, '0' otherwise.",
    label_names=("tag", "status"),
)
ASSET_STATE = MetricDesc(
    name=_fq_name("asset", "state"),
    help_text="The numerical Collins state ID for the asset with the given tag.",
    label_names=("tag",),
)
ASSET_DETAILS = MetricDesc(
    name=_fq_name("asset", "details"),
    help_text="Constant metric with value '1' providing details for the asset with the given tag as labels.",
    label_names=("tag", "nodeclass", "ipmi_address", "primary_address"),
)
UP = MetricDesc(
    name=_fq_name("up"),
    help_text="'1' if the last scrape of Collins was successful, '0' otherwise.",
)
SCRAPE_DURATION = MetricDesc(
    name=_fq_name("scrape_duration_seconds"),
    help_text="The duration it took to scrape Collins.",
)
SCRAPES_TOTAL = MetricDesc(
    name=_fq_name("scrapes_total"),
    help_text="Total number of Collins scrapes.",
    kind="counter",
)
SCRAPE_FAILURES = MetricDesc(
    name=_fq_name("scrape_failures_total"),
    help_text="Total number of failures scraping Collins.",
    kind="counter",
)

ASSET_METRICS = (ASSET_STATUS, ASSET_STATE, ASSET_DETAILS)
PROCESS_METRICS = (UP, SCRAPE_DURATION, SCRAPES_TOTAL, SCRAPE_FAILURES)
ALL_METRICS = ASSET_METRICS + PROCESS_METRICS


@dataclass(frozen=True)
class Observation:
    """A single metric point: identity, labels, value."""

    desc: MetricDesc
    labels: Mapping[str, str] = field(default_factory=dict)
    value: float = 0.0

    def __post_init__(self):
        # read-only copy of the caller's labels
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def __hash__(self):
        return hash((self.desc, tuple(sorted(self.labels.items())), self.value))

    @property
    def name(self) -> str:
        return self.desc.name


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of one coordinator cycle against Collins.

    A failed cycle carries no observations at all, never a partial set.
    The counters are the cumulative values as of the end of this cycle.
    """

    observations: Tuple[Observation, ...] = ()
    success: bool = False
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    asset_count: int = 0
    scrapes_total: int = 0
    scrape_failures_total: int = 0

    def summary(self) -> dict:
        """Return a plain dict for display or logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "assets": self.asset_count,
            "observations": len(self.observations),
            "duration_s": round(self.duration_seconds, 3),
            "scrapes_total": self.scrapes_total,
            "scrape_failures_total": self.scrape_failures_total,
        }
