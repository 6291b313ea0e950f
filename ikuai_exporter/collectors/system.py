from __future__ import annotations

from ikuai_exporter.client.models import SysStat, SysStatData
from ikuai_exporter.collectors.app_flow import app_flow_observations
from ikuai_exporter.core.config import CPU_CORE_ID_PREFIX, HOST_ID
from ikuai_exporter.core.metrics import MetricTable, Observation, observe


def parse_cpu_percent(raw: str) -> float:
    text = (raw or "").strip()
    if text.endswith("%"):
        text = text[:-1]
    try:
        return float(text)
    except ValueError:
        return 0.0


def system_observations(table: MetricTable, data: SysStatData) -> list[Observation]:
    stat = data.sysstat
    verinfo = stat.verinfo
    observations = [observe(table.version, 1, verinfo.version, verinfo.arch, verinfo.verstring)]

    if stat.cputemp:
        observations.append(observe(table.cpu_temperature, stat.cputemp[0]))

    for idx, raw in enumerate(stat.cpu):
        observations.append(
            observe(table.cpu_usage, parse_cpu_percent(raw), f"{CPU_CORE_ID_PREFIX}/{idx}")
        )

    memory = stat.memory
    observations.extend(
        [
            observe(table.memory_size, memory.total),
            observe(table.memory_usage, memory.total - memory.available),
            observe(table.memory_cached, memory.cached),
            observe(table.memory_buffers, memory.buffers),
            observe(table.dhcp_addrpool_available, data.dhcp_addrpool_num.available_num),
        ]
    )

    observations.extend(app_flow_observations(table, data.app_flow.latest()))
    return observations


def host_observations(table: MetricTable, stat: SysStat) -> list[Observation]:
    stream = stat.stream
    return [
        observe(table.uptime, stat.uptime, HOST_ID),
        observe(table.send_bytes, stream.total_up, HOST_ID),
        observe(table.recv_bytes, stream.total_down, HOST_ID),
        observe(table.send_speed, stream.upload, HOST_ID),
        observe(table.recv_speed, stream.download, HOST_ID),
        observe(table.conn_count, stream.connect_num, HOST_ID),
        observe(table.up, 1, HOST_ID),
    ]
