from __future__ import annotations

from collections.abc import Iterable, Mapping

from ikuai_exporter.client.models import LanDevice
from ikuai_exporter.core.config import DEVICE_ID_PREFIX
from ikuai_exporter.core.metrics import MetricTable, Observation, observe


def device_id(mac: str) -> str:
    return f"{DEVICE_ID_PREFIX}/{mac}"


def merge_devices(devices: Iterable[LanDevice]) -> dict[str, LanDevice]:
    """Fold records sharing a MAC into one device.

    Counters are summed. Hostname, IP and comment stay as first seen.
    """
    merged: dict[str, LanDevice] = {}
    for device in devices:
        key = device_id(device.mac)
        existing = merged.get(key)
        if existing is None:
            merged[key] = device.model_copy()
            continue
        existing.total_up += device.total_up
        existing.total_down += device.total_down
        existing.upload += device.upload
        existing.download += device.download
        existing.connect_num += device.connect_num
    return merged


def device_observations(table: MetricTable, devices: Mapping[str, LanDevice]) -> list[Observation]:
    observations: list[Observation] = []
    for dev_id, device in devices.items():
        observations.extend(
            [
                observe(
                    table.device_info,
                    1,
                    dev_id,
                    device.mac,
                    device.hostname,
                    device.ip_addr,
                    device.comment,
                ),
                observe(table.send_bytes, device.total_up, dev_id),
                observe(table.recv_bytes, device.total_down, dev_id),
                observe(table.send_speed, device.upload, dev_id),
                observe(table.recv_speed, device.download, dev_id),
                observe(table.conn_count, device.connect_num, dev_id),
            ]
        )
    return observations
