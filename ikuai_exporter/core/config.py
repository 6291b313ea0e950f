from __future__ import annotations

import os
from dataclasses import dataclass

APP_NAME: str = "iKuai Exporter"

DEFAULT_IKUAI_URL: str = "http://10.0.1.253"
DEFAULT_IKUAI_USERNAME: str = "test"
DEFAULT_IKUAI_PASSWORD: str = "test123"
DEFAULT_LISTEN: str = ":9090"
DEFAULT_TIMEOUT_SECONDS: float = 10.0

METRIC_NAMESPACE: str = "ikuai"
METRICS_PATH: str = "/metrics"

HOST_ID: str = "host"
DEVICE_ID_PREFIX: str = "device"
IFACE_ID_PREFIX: str = "iface"
CPU_CORE_ID_PREFIX: str = "core"

APP_FLOW_EXCLUDED_CATEGORY: str = "Total"
APP_FLOW_BUCKET_START_BYTES: int = 1 * 1024 * 1024
APP_FLOW_BUCKET_WIDTH_BYTES: int = 5 * 1024 * 1024
APP_FLOW_BUCKET_COUNT: int = 10

LAN_MONITOR_LIMIT: int = 1000


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True, slots=True)
class ExporterConfig:
    ikuai_url: str = DEFAULT_IKUAI_URL
    username: str = DEFAULT_IKUAI_USERNAME
    password: str = DEFAULT_IKUAI_PASSWORD
    debug: bool = False
    insecure_skip_verify: bool = True
    listen: str = DEFAULT_LISTEN
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def listen_address(self) -> tuple[str, int]:
        """Split ``host:port`` (``:9090`` binds all interfaces)."""
        host, sep, port = self.listen.rpartition(":")
        if not sep:
            raise ValueError(f"listen address must be host:port, got {self.listen!r}")
        try:
            port_num = int(port)
        except ValueError:
            raise ValueError(f"invalid listen port in {self.listen!r}") from None
        if port_num < 0 or port_num > 65535:
            raise ValueError("listen port must be in range 0..65535")
        return host.strip("[]") or "0.0.0.0", port_num

    def to_dict(self) -> dict[str, object]:
        return {
            "ikuai_url": self.ikuai_url,
            "username": self.username,
            "debug": self.debug,
            "insecure_skip_verify": self.insecure_skip_verify,
            "listen": self.listen,
            "timeout_seconds": float(self.timeout_seconds),
        }
