from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _wire_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


# The appliance is inconsistent about quoting numbers; keep these as text.
WireStr = Annotated[str, BeforeValidator(_wire_str)]


def try_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        try:
            return int(raw)
        except (ValueError, OverflowError):
            return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def parse_int(raw: Any) -> int:
    value = try_int(raw)
    return 0 if value is None else value


def parse_float(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        return float(str(raw).strip())
    except ValueError:
        return 0.0


# Malformed counters read as 0 instead of failing the whole response.
WireInt = Annotated[int, BeforeValidator(parse_int)]
WireFloat = Annotated[float, BeforeValidator(parse_float)]


class Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: WireInt = Field(default=0, alias="Result")
    err_msg: str = Field(default="", alias="ErrMsg")


class VerInfo(BaseModel):
    version: WireStr = ""
    arch: WireStr = ""
    verstring: WireStr = ""


class MemoryStat(BaseModel):
    total: WireInt
    available: WireInt
    free: WireInt = 0
    cached: WireInt = 0
    buffers: WireInt = 0


class OnlineUser(BaseModel):
    count: WireInt = 0


class StreamStat(BaseModel):
    connect_num: WireInt = 0
    upload: WireInt = 0
    download: WireInt = 0
    total_up: WireInt = 0
    total_down: WireInt = 0


class SysStat(BaseModel):
    verinfo: VerInfo
    cpu: list[WireStr] = Field(default_factory=list)
    cputemp: list[WireFloat] = Field(default_factory=list)
    memory: MemoryStat
    online_user: OnlineUser = Field(default_factory=OnlineUser)
    stream: StreamStat = Field(default_factory=StreamStat)
    uptime: WireInt = 0


class DhcpAddrpoolNum(BaseModel):
    available_num: WireInt = 0


class AppFlow(BaseModel):
    app_flow: list[dict[str, WireFloat]] = Field(default_factory=list)

    def latest(self) -> dict[str, float]:
        return self.app_flow[0] if self.app_flow else {}


class SysStatData(BaseModel):
    sysstat: SysStat
    dhcp_addrpool_num: DhcpAddrpoolNum = Field(default_factory=DhcpAddrpoolNum)
    app_flow: AppFlow = Field(default_factory=AppFlow)


class SysStatResponse(Envelope):
    data: SysStatData | None = Field(default=None, alias="Data")


class LanDevice(BaseModel):
    mac: WireStr
    hostname: WireStr = ""
    ip_addr: WireStr = ""
    comment: WireStr = ""
    total_up: WireInt = 0
    total_down: WireInt = 0
    upload: WireInt = 0
    download: WireInt = 0
    connect_num: WireInt = 0


class MonitorLanData(BaseModel):
    data: list[LanDevice] = Field(default_factory=list)
    total: WireInt = 0


class MonitorLanResponse(Envelope):
    data: MonitorLanData | None = Field(default=None, alias="Data")


class IfaceStream(BaseModel):
    interface: WireStr
    comment: WireStr = ""
    ip_addr: WireStr = ""
    total_up: WireInt = 0
    total_down: WireInt = 0
    upload: WireInt = 0
    download: WireInt = 0
    connect_num: WireInt = 0


class IfaceCheck(BaseModel):
    interface: WireStr
    internet: WireStr = ""
    parent_interface: WireStr = ""
    result: WireStr = ""
    updatetime: WireStr = ""


class MonitorInterfaceData(BaseModel):
    iface_stream: list[IfaceStream] = Field(default_factory=list)
    iface_check: list[IfaceCheck] = Field(default_factory=list)


class MonitorInterfaceResponse(Envelope):
    data: MonitorInterfaceData | None = Field(default=None, alias="Data")
