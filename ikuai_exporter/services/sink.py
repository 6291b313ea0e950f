from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from threading import Lock

from prometheus_client import CollectorRegistry
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, HistogramMetricFamily, Metric
from prometheus_client.registry import Collector
from prometheus_client.utils import floatToGoString

from ikuai_exporter.core.metrics import MetricKind, MetricSpec, MetricTable, Observation
from ikuai_exporter.services.assembler import MetricAssembler, down_observations

logger = logging.getLogger(__name__)


def new_family(spec: MetricSpec) -> Metric:
    labels = list(spec.labels)
    if spec.kind is MetricKind.COUNTER:
        return CounterMetricFamily(spec.name, spec.documentation, labels=labels)
    if spec.kind is MetricKind.HISTOGRAM:
        return HistogramMetricFamily(spec.name, spec.documentation, labels=labels)
    return GaugeMetricFamily(spec.name, spec.documentation, labels=labels)


def _histogram_buckets(obs: Observation) -> list[tuple[str, float]]:
    buckets = [(floatToGoString(bound), float(count)) for bound, count in sorted((obs.buckets or {}).items())]
    buckets.append(("+Inf", float(obs.count)))
    return buckets


def _add_sample(family: Metric, obs: Observation) -> None:
    labels = list(obs.labels)
    if isinstance(family, HistogramMetricFamily):
        family.add_metric(labels, _histogram_buckets(obs), obs.value)
    else:
        family.add_metric(labels, obs.value)


def build_families(table: MetricTable, observations: Iterable[Observation]) -> list[Metric]:
    grouped: dict[str, list[Observation]] = {}
    for obs in observations:
        grouped.setdefault(obs.metric.name, []).append(obs)

    families: list[Metric] = []
    for spec in table:
        items: Sequence[Observation] = grouped.get(spec.name, ())
        if not items:
            continue
        family = new_family(spec)
        for obs in items:
            _add_sample(family, obs)
        families.append(family)
    return families


class IKuaiCollector(Collector):
    """Prometheus collector running one router cycle per scrape."""

    def __init__(self, assembler: MetricAssembler) -> None:
        self._assembler = assembler
        self._lock = Lock()

    def describe(self) -> Iterator[Metric]:
        for spec in self._assembler.table:
            yield new_family(spec)

    def collect(self) -> Iterator[Metric]:
        # scrapes may arrive on several worker threads; cycles never overlap
        with self._lock:
            result = self._assembler.collect()
        table = self._assembler.table
        observations = result.observations if result.ok else down_observations(table)
        try:
            families = build_families(table, observations)
        except Exception:
            logger.exception("Failed to convert observations to metric families")
            families = build_families(table, down_observations(table))
        yield from families


def build_registry(assembler: MetricAssembler) -> CollectorRegistry:
    registry = CollectorRegistry(auto_describe=False)
    registry.register(IKuaiCollector(assembler))
    return registry
