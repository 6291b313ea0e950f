from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, fields
from enum import Enum

from ikuai_exporter.core.config import (
    APP_FLOW_BUCKET_COUNT,
    APP_FLOW_BUCKET_START_BYTES,
    APP_FLOW_BUCKET_WIDTH_BYTES,
    METRIC_NAMESPACE,
)


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"


@dataclass(frozen=True, slots=True)
class MetricSpec:
    name: str
    kind: MetricKind
    documentation: str
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MetricTable:
    """Every metric the exporter can emit, in exposition order."""

    version: MetricSpec
    cpu_usage: MetricSpec
    cpu_temperature: MetricSpec
    memory_size: MetricSpec
    memory_usage: MetricSpec
    memory_cached: MetricSpec
    memory_buffers: MetricSpec
    device_info: MetricSpec
    device_count: MetricSpec
    iface_info: MetricSpec
    up: MetricSpec
    uptime: MetricSpec
    send_bytes: MetricSpec
    recv_bytes: MetricSpec
    send_speed: MetricSpec
    recv_speed: MetricSpec
    conn_count: MetricSpec
    dhcp_addrpool_available: MetricSpec
    app_flow: MetricSpec
    app_flow_buckets: tuple[float, ...]

    def __iter__(self) -> Iterator[MetricSpec]:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, MetricSpec):
                yield value


def linear_buckets(start: float, width: float, count: int) -> tuple[float, ...]:
    if count < 1:
        raise ValueError("bucket count must be at least 1")
    return tuple(float(start + width * i) for i in range(count))


def build_metric_table(namespace: str = METRIC_NAMESPACE) -> MetricTable:
    def spec(name: str, kind: MetricKind, documentation: str, *labels: str) -> MetricSpec:
        return MetricSpec(f"{namespace}_{name}", kind, documentation, tuple(labels))

    gauge = MetricKind.GAUGE
    counter = MetricKind.COUNTER

    return MetricTable(
        version=spec("version", gauge, "iKuai firmware version", "version", "arch", "verstring"),
        cpu_usage=spec("cpu_usage_ratio", gauge, "CPU usage per core in percent", "id"),
        cpu_temperature=spec("cpu_temperature", gauge, "CPU temperature"),
        memory_size=spec("memory_size_bytes", gauge, "Total memory in bytes"),
        memory_usage=spec("memory_usage_bytes", gauge, "Used memory (total - available) in bytes"),
        memory_cached=spec("memory_cached_bytes", gauge, "Cached memory in bytes"),
        memory_buffers=spec("memory_buffers_bytes", gauge, "Buffer memory in bytes"),
        device_info=spec(
            "device_info", gauge, "LAN device information", "id", "mac", "hostname", "ip_addr", "comment"
        ),
        device_count=spec("device_count", gauge, "Number of LAN devices"),
        iface_info=spec(
            "iface_info",
            gauge,
            "Interface information",
            "id",
            "interface",
            "comment",
            "internet",
            "parent_interface",
            "ip_addr",
        ),
        up=spec("up", gauge, "Online status of the host or an interface", "id"),
        uptime=spec("uptime", counter, "Seconds the host or interface has been online", "id"),
        send_bytes=spec("network_send_bytes", counter, "Bytes sent", "id"),
        recv_bytes=spec("network_recv_bytes", counter, "Bytes received", "id"),
        send_speed=spec("network_send_kbytes_per_second", gauge, "Upload speed", "id"),
        recv_speed=spec("network_recv_kbytes_per_second", gauge, "Download speed", "id"),
        conn_count=spec("network_conn_count", gauge, "Active connections", "id"),
        dhcp_addrpool_available=spec("dhcp_addrpool_num", gauge, "Available DHCP pool addresses"),
        app_flow=spec(
            "app_flow_histogram",
            MetricKind.HISTOGRAM,
            "Histogram of app flow distribution in the last 30 minutes",
            "category",
        ),
        app_flow_buckets=linear_buckets(
            APP_FLOW_BUCKET_START_BYTES, APP_FLOW_BUCKET_WIDTH_BYTES, APP_FLOW_BUCKET_COUNT
        ),
    )


@dataclass(frozen=True, slots=True)
class Observation:
    metric: MetricSpec
    value: float
    labels: tuple[str, ...] = ()
    # histogram only: bucket bound -> cumulative count
    buckets: dict[float, int] | None = None
    count: int = 1


def observe(metric: MetricSpec, value: float, *labels: str) -> Observation:
    if metric.kind is MetricKind.HISTOGRAM:
        raise ValueError(f"{metric.name} is a histogram, use observe_histogram")
    if len(labels) != len(metric.labels):
        raise ValueError(
            f"{metric.name} expects {len(metric.labels)} label values, got {len(labels)}"
        )
    return Observation(metric=metric, value=float(value), labels=tuple(str(v) for v in labels))


def observe_histogram(
    metric: MetricSpec, total: float, buckets: dict[float, int], *labels: str, count: int = 1
) -> Observation:
    if metric.kind is not MetricKind.HISTOGRAM:
        raise ValueError(f"{metric.name} is not a histogram")
    if len(labels) != len(metric.labels):
        raise ValueError(
            f"{metric.name} expects {len(metric.labels)} label values, got {len(labels)}"
        )
    return Observation(
        metric=metric,
        value=float(total),
        labels=tuple(str(v) for v in labels),
        buckets=dict(buckets),
        count=int(count),
    )
