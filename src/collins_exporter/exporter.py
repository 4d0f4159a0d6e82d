"""
Collector facade registered with prometheus_client.

Each scrape of /metrics calls collect() once. The coordinator decides
whether that means a fresh Collins fetch or waiting on one already in
flight; this class only adds the process health series and hands the
result to prometheus_client for encoding.
"""

from __future__ import annotations

from typing import Dict, Iterator, List

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from collins_exporter.engine.coordinator import ScrapeCoordinator
from collins_exporter.metrics import (
    ALL_METRICS,
    SCRAPE_DURATION,
    SCRAPE_FAILURES,
    SCRAPES_TOTAL,
    UP,
    MetricDesc,
    Observation,
    ScrapeResult,
)


def process_observations(result: ScrapeResult) -> List[Observation]:
    return [
        Observation(desc=UP, value=1.0 if result.success else 0.0),
        Observation(desc=SCRAPE_DURATION, value=result.duration_seconds),
        Observation(desc=SCRAPES_TOTAL, value=float(result.scrapes_total)),
        Observation(desc=SCRAPE_FAILURES, value=float(result.scrape_failures_total)),
    ]


def _family(desc: MetricDesc) -> Metric:
    if desc.kind == "counter":
        return CounterMetricFamily(desc.name, desc.help_text, labels=list(desc.label_names))
    return GaugeMetricFamily(desc.name, desc.help_text, labels=list(desc.label_names))


def to_metric_families(observations: List[Observation]) -> List[Metric]:
    """Group observations into one family per metric, in first-seen order."""
    families: Dict[str, Metric] = {}
    for obs in observations:
        family = families.get(obs.name)
        if family is None:
            family = families[obs.name] = _family(obs.desc)
        family.add_metric([obs.labels[name] for name in obs.desc.label_names], obs.value)
    return list(families.values())


class CollinsCollector(Collector):

    def __init__(self, coordinator: ScrapeCoordinator):
        self._coordinator = coordinator

    def observations(self) -> List[Observation]:
        """Asset observations from the current scrape plus the process series."""
        result = self._coordinator.request()
        return list(result.observations) + process_observations(result)

    def collect(self) -> Iterator[Metric]:
        yield from to_metric_families(self.observations())

    def describe(self) -> Iterator[Metric]:
        # Without describe(), registering would call collect() and hit Collins
        for desc in ALL_METRICS:
            yield _family(desc)
