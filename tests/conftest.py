from __future__ import annotations

from typing import Any

import pytest

from ikuai_exporter.client.ikuai import RouterClientError
from ikuai_exporter.client.models import MonitorInterfaceResponse, MonitorLanResponse, SysStatResponse
from ikuai_exporter.core.metrics import build_metric_table


def sysstat_payload(**overrides: Any) -> dict[str, Any]:
    sysstat = {
        "verinfo": {"version": "3.7.4", "arch": "x86", "verstring": "3.7.4 x64 Build202306071010"},
        "cpu": ["12.5%", "3%"],
        "cputemp": [48],
        "memory": {"total": 1000, "available": 400, "free": 300, "cached": 50, "buffers": 20},
        "online_user": {"count": 7},
        "stream": {"connect_num": 120, "upload": 30, "download": 40, "total_up": 5000, "total_down": 9000},
        "uptime": 86400,
    }
    sysstat.update(overrides)
    return {
        "Result": 30000,
        "ErrMsg": "Success",
        "Data": {
            "sysstat": sysstat,
            "dhcp_addrpool_num": {"available_num": 200},
            "app_flow": {"app_flow": [{"Total": 30 * 1024 * 1024, "Video": 3 * 1024 * 1024, "Web": 512}]},
        },
    }


def lan_payload(devices: list[dict[str, Any]]) -> dict[str, Any]:
    return {"Result": 30000, "ErrMsg": "Success", "Data": {"data": devices, "total": len(devices)}}


def device(mac: str, **overrides: Any) -> dict[str, Any]:
    record = {
        "mac": mac,
        "hostname": f"host-{mac[-2:]}",
        "ip_addr": "192.168.1.10",
        "comment": "",
        "total_up": 100,
        "total_down": 200,
        "upload": 1,
        "download": 2,
        "connect_num": 3,
    }
    record.update(overrides)
    return record


def iface_payload(streams: list[dict[str, Any]], checks: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "Result": 30000,
        "ErrMsg": "Success",
        "Data": {"iface_stream": streams, "iface_check": checks},
    }


def failure_payload(message: str = "no login authentication") -> dict[str, Any]:
    return {"Result": 10014, "ErrMsg": message}


class FakeRouter:
    """Router client double; a value of ``RouterClientError`` is raised instead of returned."""

    def __init__(
        self,
        sysstat: dict[str, Any] | Exception | None = None,
        lan: dict[str, Any] | Exception | None = None,
        iface: dict[str, Any] | Exception | None = None,
    ) -> None:
        self.sysstat = sysstat if sysstat is not None else sysstat_payload()
        self.lan = lan if lan is not None else lan_payload([])
        self.iface = iface if iface is not None else iface_payload([], [])
        self.calls: list[str] = []

    def _answer(self, name: str, value: dict[str, Any] | Exception, model: Any) -> Any:
        self.calls.append(name)
        if isinstance(value, Exception):
            raise value
        return model.model_validate(value)

    def show_sys_stat(self) -> SysStatResponse:
        return self._answer("sysstat", self.sysstat, SysStatResponse)

    def show_monitor_lan(self) -> MonitorLanResponse:
        return self._answer("lan", self.lan, MonitorLanResponse)

    def show_monitor_interface(self) -> MonitorInterfaceResponse:
        return self._answer("iface", self.iface, MonitorInterfaceResponse)


@pytest.fixture
def table():
    return build_metric_table()


@pytest.fixture
def transport_error():
    return RouterClientError("connection refused")
