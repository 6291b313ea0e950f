from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ikuai_exporter.client.models import IfaceCheck, IfaceStream, try_int
from ikuai_exporter.core.config import IFACE_ID_PREFIX
from ikuai_exporter.core.metrics import MetricTable, Observation, observe

logger = logging.getLogger(__name__)

CHECK_SUCCESS: str = "success"


@dataclass(frozen=True, slots=True)
class InterfaceState:
    id: str
    interface: str
    comment: str
    ip_addr: str
    internet: str
    parent_interface: str
    up: int
    uptime_seconds: int
    total_up: int
    total_down: int
    upload: int
    download: int
    connect_num: int


def _match_checks(checks: Sequence[IfaceCheck], name: str) -> list[IfaceCheck]:
    return [check for check in checks if check.interface == name]


def correlate_interfaces(
    streams: Sequence[IfaceStream], checks: Sequence[IfaceCheck], now: int
) -> list[InterfaceState]:
    states: list[InterfaceState] = []
    seen: set[str] = set()
    for stream in streams:
        if stream.interface in seen:
            logger.debug("Skipping repeated traffic record for interface %s", stream.interface)
            continue
        seen.add(stream.interface)

        internet = ""
        parent_iface = ""
        up = 1
        uptime = 0

        # descriptive fields follow the last record; one failed check keeps the interface down
        for check in _match_checks(checks, stream.interface):
            internet = check.internet
            parent_iface = check.parent_interface
            if check.result != CHECK_SUCCESS:
                up = 0
                uptime = 0
            elif up:
                updated = try_int(check.updatetime)
                uptime = 0 if updated is None else now - updated

        states.append(
            InterfaceState(
                id=f"{IFACE_ID_PREFIX}/{stream.interface}",
                interface=stream.interface,
                comment=stream.comment,
                ip_addr=stream.ip_addr,
                internet=internet,
                parent_interface=parent_iface,
                up=up,
                uptime_seconds=uptime,
                total_up=stream.total_up,
                total_down=stream.total_down,
                upload=stream.upload,
                download=stream.download,
                connect_num=stream.connect_num,
            )
        )
    return states


def interface_observations(table: MetricTable, states: Sequence[InterfaceState]) -> list[Observation]:
    observations: list[Observation] = []
    for state in states:
        observations.extend(
            [
                observe(
                    table.iface_info,
                    1,
                    state.id,
                    state.interface,
                    state.comment,
                    state.internet,
                    state.parent_interface,
                    state.ip_addr,
                ),
                observe(table.up, state.up, state.id),
                observe(table.uptime, state.uptime_seconds, state.id),
                observe(table.send_bytes, state.total_up, state.id),
                observe(table.recv_bytes, state.total_down, state.id),
                observe(table.send_speed, state.upload, state.id),
                observe(table.recv_speed, state.download, state.id),
                observe(table.conn_count, state.connect_num, state.id),
            ]
        )
    return observations
