"""Unit tests for semisto.integrations.catalog_gateway.

The gateway gets a mocked requests.Session, so no network is touched.
Every failure mode must come back as GatewayResult(ok=False), never raise.
"""

from unittest.mock import MagicMock

import requests

from semisto.integrations.catalog_gateway import CatalogGateway, GatewayResult

BASE = "http://catalog.test/api/v1"


def _response(status=200, payload=None, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = "boom"
    if json_error:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = payload
    return resp


def _gateway(resp=None, exc=None):
    session = MagicMock()
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value = resp
    return CatalogGateway(session=session), session


class TestFetch:
    def test_success_returns_parsed_json(self):
        gw, session = _gateway(_response(payload=[{"id": "lab-wb"}]))
        result = gw.fetch("/website/labs", base_url=BASE, timeout=3)

        assert isinstance(result, GatewayResult)
        assert result.ok is True
        assert result.status_code == 200
        assert result.data == [{"id": "lab-wb"}]
        assert result.error is None

    def test_builds_url_and_sends_accept_header(self):
        gw, session = _gateway(_response(payload=[]))
        gw.fetch("/website/courses", base_url=BASE + "/", timeout=3)

        args, kwargs = session.get.call_args
        assert args[0] == "http://catalog.test/api/v1/website/courses"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert kwargs["timeout"] == 3

    def test_single_request_per_call(self):
        gw, session = _gateway(_response(status=503))
        gw.fetch("/website/labs", base_url=BASE)
        assert session.get.call_count == 1

    def test_non_2xx_is_not_ok(self):
        gw, _ = _gateway(_response(status=500))
        result = gw.fetch("/website/labs", base_url=BASE)
        assert result.ok is False
        assert result.status_code == 500
        assert result.data is None

    def test_malformed_json_is_not_ok(self):
        gw, _ = _gateway(_response(json_error=True))
        result = gw.fetch("/website/labs", base_url=BASE)
        assert result.ok is False
        assert result.error

    def test_timeout_is_not_ok(self):
        gw, _ = _gateway(exc=requests.Timeout("slow"))
        result = gw.fetch("/website/labs", base_url=BASE, timeout=2)
        assert result.ok is False
        assert result.status_code is None
        assert "timed out" in result.error

    def test_connection_error_is_not_ok(self):
        gw, _ = _gateway(exc=requests.ConnectionError("refused"))
        result = gw.fetch("/website/labs", base_url=BASE)
        assert result.ok is False
        assert result.status_code is None
