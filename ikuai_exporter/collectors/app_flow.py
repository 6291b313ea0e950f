from __future__ import annotations

from collections.abc import Mapping, Sequence

from ikuai_exporter.core.config import APP_FLOW_EXCLUDED_CATEGORY
from ikuai_exporter.core.metrics import MetricTable, Observation, observe_histogram


def bucket_counts(value: float, buckets: Sequence[float]) -> dict[float, int]:
    return {bound: (1 if value <= bound else 0) for bound in buckets}


def app_flow_observations(table: MetricTable, sample: Mapping[str, float]) -> list[Observation]:
    observations: list[Observation] = []
    for category, value in sample.items():
        if category == APP_FLOW_EXCLUDED_CATEGORY:
            continue
        observations.append(
            observe_histogram(
                table.app_flow,
                float(value),
                bucket_counts(float(value), table.app_flow_buckets),
                category,
            )
        )
    return observations
