from __future__ import annotations

import base64
import hashlib
import logging
from typing import Any, TypeVar

import requests
import urllib3
from pydantic import ValidationError

from ikuai_exporter.client.models import (
    Envelope,
    MonitorInterfaceResponse,
    MonitorLanResponse,
    SysStatResponse,
)
from ikuai_exporter.core.config import DEFAULT_TIMEOUT_SECONDS, LAN_MONITOR_LIMIT

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE: str = "Success"
LOGIN_PATH: str = "/Action/login"
CALL_PATH: str = "/Action/call"
PASS_SALT: str = "salt_11"

E = TypeVar("E", bound=Envelope)


class RouterClientError(Exception):
    """The appliance could not be reached or answered with an unreadable payload."""


def _encode_credentials(username: str, password: str) -> dict[str, str]:
    return {
        "username": username,
        "passwd": hashlib.md5(password.encode("utf-8")).hexdigest(),
        "pass": base64.b64encode(f"{PASS_SALT}{password}".encode("utf-8")).decode("ascii"),
        "remember_password": "",
    }


class IKuaiClient:
    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        verify_tls: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        debug: bool = False,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._debug = debug
        self._session = session or requests.Session()
        self._session.verify = verify_tls
        self._logged_in = False
        if not verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def logged_in(self) -> bool:
        return self._logged_in

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        if self._debug:
            logger.debug("POST %s %s", url, payload.get("func_name", path))
        try:
            resp = self._session.post(url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise RouterClientError(f"request to {url} failed: {exc}") from exc
        except ValueError as exc:
            raise RouterClientError(f"invalid JSON from {url}") from exc
        if self._debug:
            logger.debug("Response %s: %s", url, body)
        if not isinstance(body, dict):
            raise RouterClientError(f"unexpected payload from {url}: {type(body).__name__}")
        return body

    def login(self) -> None:
        body = self._post(LOGIN_PATH, _encode_credentials(self._username, self._password))
        try:
            envelope = Envelope.model_validate(body)
        except ValidationError as exc:
            raise RouterClientError("invalid login response") from exc
        if envelope.err_msg != SUCCESS_MESSAGE:
            self._logged_in = False
            raise RouterClientError(
                f"login as {self._username!r} rejected: {envelope.result} {envelope.err_msg}"
            )
        self._logged_in = True
        logger.info("Logged in to iKuai at %s", self._base_url)

    def logout(self) -> None:
        self._session.cookies.clear()
        self._logged_in = False

    def _call(self, func_name: str, param: dict[str, Any], model: type[E]) -> E:
        if not self._logged_in:
            self.login()
        body = self._post(CALL_PATH, {"func_name": func_name, "action": "show", "param": param})
        try:
            envelope = model.model_validate(body)
        except ValidationError as exc:
            self.logout()
            raise RouterClientError(f"invalid {func_name} response: {exc}") from exc
        if envelope.err_msg != SUCCESS_MESSAGE:
            # an expired session is the usual cause; log in again next time
            self.logout()
        return envelope

    def show_sys_stat(self) -> SysStatResponse:
        return self._call(
            "homepage",
            {"TYPE": "sysstat,dhcp_addrpool_num,app_flow"},
            SysStatResponse,
        )

    def show_monitor_lan(self) -> MonitorLanResponse:
        return self._call(
            "monitor_lanip",
            {
                "TYPE": "data,total",
                "ORDER_BY": "ip_addr_int",
                "orderType": "IP",
                "ORDER": "",
                "limit": f"0,{LAN_MONITOR_LIMIT}",
            },
            MonitorLanResponse,
        )

    def show_monitor_interface(self) -> MonitorInterfaceResponse:
        return self._call(
            "monitor_iface",
            {"TYPE": "iface_check,iface_stream"},
            MonitorInterfaceResponse,
        )

    def close(self) -> None:
        self._session.close()
