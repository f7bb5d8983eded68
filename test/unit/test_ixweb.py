# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the IxNetwork REST session."""
import json
import logging

import httpx
import pytest

from ondatra_ate.errors import IxNetworkError
from ondatra_ate.ixweb import Session

BASE = "/api/v1/sessions/1/ixnetwork"
RM = BASE + "/resourceManager"


class Router(object):
    """Serves canned JSON responses by method and path, recording requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        resp = self.routes.get((request.method, request.url.path))
        if resp is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(resp):
            resp = resp(request)
        if isinstance(resp, httpx.Response):
            return resp
        return httpx.Response(200, json=resp)

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]


def _session(router, **opts):
    args = {
        "insecure": True,
        "rest_port": 80,
        "poll_interval": 0,
        "transport": httpx.MockTransport(router),
    }
    args.update(opts)
    return Session("ixweb", "admin", "admin", optional_args=args)


def test_open_authenticates():
    router = Router(
        {
            ("POST", "/api/v1/auth/session"): {"apiKey": "k1"},
            ("GET", "/api/v1/sessions/1"): {"id": 1, "state": "ACTIVE"},
        }
    )
    session = _session(router)
    assert session.open()
    auth, get = router.requests
    assert json.loads(auth.content) == {"username": "admin", "password": "admin"}
    assert get.headers["X-Api-Key"] == "k1"


def test_open_with_api_key(caplog):
    router = Router({("GET", "/api/v1/sessions/2"): {"id": 2, "state": "STOPPED"}})
    session = _session(router, api_key="k2", session_id=2)
    assert session.base_path == "/api/v1/sessions/2/ixnetwork"
    with caplog.at_level(logging.WARNING):
        session.open()
    assert len(router.requests) == 1
    assert router.requests[0].headers["X-Api-Key"] == "k2"
    assert "state STOPPED" in caplog.text


def test_auth_without_key():
    router = Router({("POST", "/api/v1/auth/session"): {}})
    with pytest.raises(IxNetworkError):
        _session(router).open()


def test_http_error():
    router = Router(
        {("GET", BASE + "/vport"): httpx.Response(500, json={"errors": [{"detail": "boom"}]})}
    )
    with pytest.raises(IxNetworkError, match="HTTP/500: boom"):
        _session(router).get(BASE + "/vport")


def test_connection_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    session = _session(refuse)
    with pytest.raises(IxNetworkError, match="connection refused"):
        session.get(BASE)


def test_empty_response():
    router = Router({("POST", BASE + "/operations/newconfig"): httpx.Response(204)})
    assert _session(router).post(BASE + "/operations/newconfig") is None


def test_settings_warnings(caplog):
    with caplog.at_level(logging.WARNING):
        session = Session("ixweb", "admin", "admin", optional_args={"rest_port": 80})
    assert "Secure REST uses port 443" in caplog.text
    assert "tls_ca" in caplog.text
    assert session.rest_session.base_url.scheme == "http"

    session = Session("ixweb", "admin", "admin", optional_args={"insecure": True})
    assert session.rest_session.base_url.scheme == "https"

    caplog.clear()
    with caplog.at_level(logging.WARNING):
        session = Session("ixweb", "admin", "admin", optional_args={"rest_port": 8080, "insecure": True})
    assert "Non-default REST port" in caplog.text
    assert session.rest_session.base_url.scheme == "http"
    session.close()


def test_export_polls_operation():
    polls = []

    def status(request):
        polls.append(request)
        if len(polls) < 2:
            return {"state": "IN_PROGRESS", "url": RM + "/operations/exportconfig/1"}
        return {"state": "SUCCESS", "result": '{"xpath": "/"}'}

    router = Router(
        {
            ("POST", RM + "/operations/exportconfig"): {
                "state": "IN_PROGRESS",
                "url": RM + "/operations/exportconfig/1",
            },
            ("GET", RM + "/operations/exportconfig/1"): status,
        }
    )
    assert _session(router).config().export() == '{"xpath": "/"}'
    assert len(polls) == 2
    body = json.loads(router.calls("POST", RM + "/operations/exportconfig")[0].content)
    assert body["arg1"] == RM
    assert body["arg4"] == "json"


def test_export_requires_string():
    router = Router(
        {("POST", RM + "/operations/exportconfig"): {"state": "SUCCESS", "result": {"xpath": "/"}}}
    )
    with pytest.raises(IxNetworkError):
        _session(router).config().export()


def test_import_config():
    router = Router({("POST", RM + "/operations/importconfig"): {"state": "SUCCESS"}})
    _session(router).config().import_config('{"xpath": "/"}', True)
    body = json.loads(router.requests[0].content)
    assert body == {"arg1": RM, "arg2": '{"xpath": "/"}', "arg3": True}


def test_import_error():
    router = Router(
        {("POST", RM + "/operations/importconfig"): {"state": "ERROR", "message": "bad config"}}
    )
    with pytest.raises(IxNetworkError, match="bad config"):
        _session(router).config().import_config("{}", False)


def _links(href):
    return {"links": [{"rel": "self", "method": "GET", "href": href}]}


def test_query_ids():
    router = Router(
        {
            ("GET", BASE + "/topology"): [
                dict(id=2, **_links(BASE + "/topology/2")),
                dict(id=1, **_links(BASE + "/topology/1")),
            ],
            ("GET", BASE + "/topology/1/deviceGroup"): [{"id": 1}],
            ("GET", BASE + "/topology/1/deviceGroup/1/ethernet"): [{"id": 3}],
            ("GET", BASE + "/topology/1/deviceGroup/1/ethernet/3"): {
                "id": 3,
                "mac": BASE + "/multivalue/5",
            },
        }
    )
    ids = _session(router).config().query_ids(
        "/topology[1]",
        "/topology[2]",
        "/topology[1]/deviceGroup[1]/ethernet[1]",
        "/multivalue[@source = '/topology[1]/deviceGroup[1]/ethernet[1] mac']/singleValue",
    )
    assert ids == {
        "/topology[1]": BASE + "/topology/1",
        "/topology[2]": BASE + "/topology/2",
        "/topology[1]/deviceGroup[1]/ethernet[1]": BASE + "/topology/1/deviceGroup/1/ethernet/3",
        "/multivalue[@source = '/topology[1]/deviceGroup[1]/ethernet[1] mac']/singleValue": BASE
        + "/multivalue/5/singleValue",
    }
    assert len(router.calls("GET", BASE + "/topology")) == 1
    assert len(router.calls("GET", BASE + "/topology/1/deviceGroup")) == 1


def test_query_ids_missing_node():
    router = Router({("GET", BASE + "/topology"): [{"id": 1}]})
    with pytest.raises(IxNetworkError, match="not found"):
        _session(router).config().query_ids("/topology[2]")
