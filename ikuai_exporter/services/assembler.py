from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from ikuai_exporter.client.ikuai import RouterClientError
from ikuai_exporter.client.models import (
    Envelope,
    MonitorInterfaceResponse,
    MonitorLanResponse,
    SysStatResponse,
)
from ikuai_exporter.collectors.devices import device_observations, merge_devices
from ikuai_exporter.collectors.interfaces import correlate_interfaces, interface_observations
from ikuai_exporter.collectors.system import host_observations, system_observations
from ikuai_exporter.collectors.validation import describe_failure, response_failed
from ikuai_exporter.core.config import HOST_ID
from ikuai_exporter.core.metrics import MetricTable, Observation, build_metric_table, observe

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Envelope)


class RouterQueries(Protocol):
    def show_sys_stat(self) -> SysStatResponse: ...

    def show_monitor_lan(self) -> MonitorLanResponse: ...

    def show_monitor_interface(self) -> MonitorInterfaceResponse: ...


@dataclass(frozen=True, slots=True)
class CycleResult:
    observations: list[Observation] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def down_observations(table: MetricTable) -> list[Observation]:
    return [observe(table.up, 0, HOST_ID)]


class MetricAssembler:
    """Runs one collection cycle against the router and flattens it into observations."""

    def __init__(
        self,
        client: RouterQueries,
        table: MetricTable | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._table = table if table is not None else build_metric_table()
        self._clock = clock

    @property
    def table(self) -> MetricTable:
        return self._table

    def _query(self, name: str, func: Callable[[], R]) -> R | None:
        try:
            response = func()
        except RouterClientError as exc:
            logger.warning("iKuai %s: %s", name, describe_failure(None, exc))
            return None
        if response_failed(response, None):
            logger.warning("iKuai %s: %s", name, describe_failure(response, None))
            return None
        return response

    def collect(self, now: int | None = None) -> CycleResult:
        try:
            return self._collect(int(self._clock()) if now is None else now)
        except Exception as exc:
            logger.exception("Collection cycle failed")
            return CycleResult(error=f"{type(exc).__name__}: {exc}")

    def _collect(self, now: int) -> CycleResult:
        table = self._table

        stat = self._query("ShowSysStat", self._client.show_sys_stat)
        if stat is None or stat.data is None:
            return CycleResult(error="system statistics unavailable")
        data = stat.data
        observations = system_observations(table, data)

        lan = self._query("ShowMonitorLan", self._client.show_monitor_lan)
        if lan is not None and lan.data is not None:
            devices = merge_devices(lan.data.data)
            observations.extend(device_observations(table, devices))
            device_count = len(devices)
        else:
            device_count = data.sysstat.online_user.count
        observations.append(observe(table.device_count, device_count))

        iface = self._query("ShowMonitorInterface", self._client.show_monitor_interface)
        if iface is not None and iface.data is not None:
            states = correlate_interfaces(iface.data.iface_stream, iface.data.iface_check, now)
            observations.extend(interface_observations(table, states))

        observations.extend(host_observations(table, data.sysstat))
        logger.debug("Collected %d observations", len(observations))
        return CycleResult(observations=observations)
