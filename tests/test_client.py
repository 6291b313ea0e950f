from __future__ import annotations

import base64
import hashlib
from unittest.mock import MagicMock

import pytest
import requests
from conftest import device, failure_payload, iface_payload, lan_payload, sysstat_payload

from ikuai_exporter.client.ikuai import IKuaiClient, RouterClientError

LOGIN_OK = {"Result": 10000, "ErrMsg": "Success"}


def _response(body=None, status=200, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = body
    return resp


def _client(*responses, **kwargs):
    session = MagicMock()
    session.post.side_effect = list(responses)
    client = IKuaiClient("http://router.lan/", "admin", "secret", session=session, **kwargs)
    return client, session


def test_login_sends_encoded_credentials():
    client, session = _client(_response(LOGIN_OK))

    client.login()

    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs["json"]
    assert url == "http://router.lan/Action/login"
    assert payload["username"] == "admin"
    assert payload["passwd"] == hashlib.md5(b"secret").hexdigest()
    assert base64.b64decode(payload["pass"]) == b"salt_11secret"
    assert client.logged_in


def test_rejected_login_raises():
    client, _ = _client(_response({"Result": 10001, "ErrMsg": "wrong password"}))

    with pytest.raises(RouterClientError, match="wrong password"):
        client.login()
    assert not client.logged_in


def test_show_sys_stat_logs_in_lazily():
    client, session = _client(_response(LOGIN_OK), _response(sysstat_payload()))

    response = client.show_sys_stat()

    assert response.err_msg == "Success"
    assert response.data.sysstat.memory.total == 1000
    call_payload = session.post.call_args_list[1].kwargs["json"]
    assert session.post.call_args_list[1].args[0] == "http://router.lan/Action/call"
    assert call_payload["func_name"] == "homepage"
    assert call_payload["action"] == "show"
    assert "sysstat" in call_payload["param"]["TYPE"]


def test_session_is_reused_between_calls():
    client, session = _client(
        _response(LOGIN_OK),
        _response(lan_payload([device("aa:00")])),
        _response(iface_payload([], [])),
    )

    assert len(client.show_monitor_lan().data.data) == 1
    assert client.show_monitor_interface().data.iface_stream == []
    assert session.post.call_count == 3


def test_failed_status_drops_session():
    client, session = _client(
        _response(LOGIN_OK),
        _response(failure_payload()),
        _response(LOGIN_OK),
        _response(sysstat_payload()),
    )

    first = client.show_sys_stat()
    assert first.err_msg != "Success"
    assert not client.logged_in

    second = client.show_sys_stat()
    assert second.err_msg == "Success"
    assert session.post.call_count == 4


def test_transport_error_is_wrapped():
    client, _ = _client(_response(LOGIN_OK), requests.ConnectionError("refused"))

    with pytest.raises(RouterClientError, match="refused"):
        client.show_monitor_lan()


def test_http_error_is_wrapped():
    client, _ = _client(_response(LOGIN_OK), _response(status=502))

    with pytest.raises(RouterClientError):
        client.show_monitor_interface()


def test_invalid_json_is_wrapped():
    client, _ = _client(_response(LOGIN_OK), _response(json_error=True))

    with pytest.raises(RouterClientError, match="invalid JSON"):
        client.show_sys_stat()


def test_missing_required_field_is_a_parse_failure():
    payload = sysstat_payload()
    del payload["Data"]["sysstat"]["memory"]
    client, _ = _client(_response(LOGIN_OK), _response(payload))

    with pytest.raises(RouterClientError, match="invalid homepage response"):
        client.show_sys_stat()
    assert not client.logged_in


def test_unknown_fields_are_ignored():
    payload = sysstat_payload(hostname="gw", link_status=1)
    payload["Data"]["ac_status"] = {"ap_count": 3}
    client, _ = _client(_response(LOGIN_OK), _response(payload))

    assert client.show_sys_stat().data.sysstat.uptime == 86400


def test_malformed_numbers_do_not_reject_the_response():
    payload = sysstat_payload(stream={"connect_num": "abc", "upload": None}, cputemp=["n/a"])
    payload["Data"]["dhcp_addrpool_num"]["available_num"] = "12"
    client, _ = _client(_response(LOGIN_OK), _response(payload))

    data = client.show_sys_stat().data

    assert data.sysstat.stream.connect_num == 0
    assert data.sysstat.stream.upload == 0
    assert data.sysstat.cputemp == [0.0]
    assert data.dhcp_addrpool_num.available_num == 12
    assert client.logged_in


def test_malformed_device_counter_keeps_the_device_list():
    client, _ = _client(
        _response(LOGIN_OK), _response(lan_payload([device("aa:00", connect_num="abc"), device("bb:00")]))
    )

    devices = client.show_monitor_lan().data.data

    assert [d.mac for d in devices] == ["aa:00", "bb:00"]
    assert devices[0].connect_num == 0


def test_insecure_mode_disables_verification():
    client, session = _client(verify_tls=False)
    assert session.verify is False
    assert client.base_url == "http://router.lan"
