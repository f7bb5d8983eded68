# -*- coding: utf-8 -*-
# Copyright 2021 Nokia. All rights reserved.
#
# The contents of this file are licensed under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with the
# License. You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
# SPDX-License-Identifier: Apache-2.0

"""REST session against an IxNetwork web API server."""
import enum
import logging
import re
import ssl
import time
from typing import Optional

import httpx

from ondatra_ate.errors import IxNetworkError

_MULTIVALUE_RE = re.compile(r"^/multivalue\[@source = '(?P<owner>.+) (?P<attr>\w+)'\](?P<rest>.*)$")
_XPATH_ELEM_RE = re.compile(r"^(?P<name>\w+)(\[(?P<index>\d+)\])?$")


class Session(object):
    """
    Represents one IxNetwork session on a web API server and abstracts the
    REST calls used to talk to it.
    """

    class OperationState(str, enum.Enum):
        """
        States reported by asynchronous IxNetwork operations.
        """

        IN_PROGRESS = "IN_PROGRESS"
        SUCCESS = "SUCCESS"
        ERROR = "ERROR"

    def __init__(
        self,
        hostname: str,
        username: str,
        password: str,
        timeout: Optional[int] = 60,
        optional_args: Optional[dict] = None,
    ):
        """Constructor."""
        self.hostname = hostname
        self.username = username
        self.password = password
        self.timeout = timeout

        if optional_args is None:
            optional_args = {}

        # Optional Arguments
        self.rest_port = optional_args.get("rest_port", 443)
        self.session_id = optional_args.get("session_id", 1)
        self.insecure = optional_args.get("insecure", False)
        self.tls_ca = optional_args.get("tls_ca", "")
        self.api_key = optional_args.get("api_key", "")
        self.poll_interval = optional_args.get("poll_interval", 1.0)
        transport = optional_args.get("transport")

        self.rest_session = self._new_rest_client(transport)

        # Warn about incompatible/oddball settings
        if self.rest_port == 80:
            if not self.insecure:
                logging.warning(
                    "Secure REST uses port 443, not 80. "
                    + "Set 'insecure=True' flag to indicate this is ok"
                )
        elif self.rest_port not in (443, 11009):
            logging.warning(
                f"Non-default REST port configured ({self.rest_port}), typically only 443(default), 11009 or 80 are used"
            )

        if not self.insecure and not self.tls_ca:
            logging.warning(
                "Incompatible settings: insecure=False "
                + "requires certificate parameter 'tls_ca' to be set "
                + "when using self-signed certificates"
            )

    @property
    def base_path(self) -> str:
        return f"/api/v1/sessions/{self.session_id}/ixnetwork"

    def open(self):
        """Authenticates if needed and checks that the session exists."""
        if not self.api_key:
            data = self._request(
                "POST",
                "/api/v1/auth/session",
                {"username": self.username, "password": self.password},
            ) or {}
            self.api_key = data.get("apiKey", "")
            if not self.api_key:
                raise IxNetworkError("authentication response carries no API key")
            self.rest_session.headers["X-Api-Key"] = self.api_key

        data = self._request("GET", f"/api/v1/sessions/{self.session_id}") or {}
        state = data.get("state")
        if state and state.upper() not in ("ACTIVE", "INITIAL"):
            logging.warning(f"IxNetwork session {self.session_id} is in state {state}")
        return True

    def close(self):
        """Cleanup the HTTP Client"""
        self.rest_session.close()

    def config(self):
        return Config(self)

    def get(self, path: str):
        return self._request("GET", path)

    def post(self, path: str, body: Optional[dict] = None):
        return self._request("POST", path, body)

    def _request(self, method: str, path: str, body: Optional[dict] = None):
        """
        Make a REST request, raise an IxNetworkError if the HTTP request returns
        anything other than 2xx. Returns the decoded JSON body, or None if the
        response is empty.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            result = self.rest_session.request(
                method, path, headers=headers, json=body, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            raise IxNetworkError(f"{method} {path} failed: {e}") from e

        if not result.is_success:
            raise IxNetworkError(
                f"{method} {path} raised HTTP/{result.status_code}: {_error_message(result)}"
            )
        if not result.content:
            return None
        try:
            return result.json()
        except ValueError as e:
            raise IxNetworkError(f"{method} {path} returned invalid JSON") from e

    def _operation(self, path: str, args: dict):
        """
        Runs an IxNetwork operation and waits for it to complete. Returns the
        operation result.
        """
        data = self.post(path, args) or {}
        while data.get("state") == Session.OperationState.IN_PROGRESS:
            url = data.get("url")
            if not url:
                raise IxNetworkError(f"operation {path} is in progress but has no status url")
            logging.debug(f"Operation {path} in progress, polling {url}")
            time.sleep(self.poll_interval)
            data = self.get(url) or {}

        if data.get("state") == Session.OperationState.ERROR:
            raise IxNetworkError(f"operation {path} failed: {data.get('message') or data.get('result')}")
        return data.get("result")

    def _new_rest_client(self, transport=None):
        """
        Create a REST Client, preconfigured with TLS if required.
        """
        proto = (
            "https"
            if (self.rest_port == 443 or (self.rest_port != 80 and not self.insecure))
            else "http"
        )
        verify = not self.insecure
        if verify and self.tls_ca:
            verify = ssl.create_default_context(cafile=self.tls_ca)
        opts = {
            "base_url": f"{proto}://{self.hostname}:{self.rest_port}",
            "verify": verify,
        }
        if self.api_key:
            opts["headers"] = {"X-Api-Key": self.api_key}
        if transport is not None:
            opts["transport"] = transport
        return httpx.Client(**opts)


def _error_message(result):
    try:
        data = result.json()
    except ValueError:
        return result.text
    if isinstance(data, dict):
        errors = data.get("errors")
        if errors:
            return "; ".join(str(e.get("detail", e)) if isinstance(e, dict) else str(e) for e in errors)
        return data.get("error") or data.get("message") or str(data)
    return str(data)


class Config(object):
    """Config operations of an IxNetwork session."""

    def __init__(self, session: Session):
        self.session = session

    def _resource_manager(self):
        return f"{self.session.base_path}/resourceManager"

    def export(self) -> str:
        """Exports the full config of the session as a JSON string."""
        result = self.session._operation(
            f"{self._resource_manager()}/operations/exportconfig",
            {
                "arg1": self._resource_manager(),
                "arg2": ["/descendant-or-self::*"],
                "arg3": True,
                "arg4": "json",
            },
        )
        if not isinstance(result, str):
            raise IxNetworkError(f"exportconfig returned {type(result).__name__}, not a string")
        return result

    def import_config(self, json_str: str, overwrite: bool):
        """
        Imports a JSON config into the session. With overwrite the existing
        config is replaced, otherwise it is updated.
        """
        self.session._operation(
            f"{self._resource_manager()}/operations/importconfig",
            {"arg1": self._resource_manager(), "arg2": json_str, "arg3": overwrite},
        )

    def query_ids(self, *xpaths) -> dict:
        """
        Returns a dict mapping each of the given XPaths to the REST href of the
        node at that XPath.
        """
        listings = {}
        objects = {}
        ids = {}
        for xp in xpaths:
            ids[xp] = self._resolve(xp, listings, objects)
        return ids

    def _get_object(self, href, objects):
        if href not in objects:
            objects[href] = self.session.get(href)
        return objects[href]

    def _list_children(self, href, listings):
        if href not in listings:
            children = self.session.get(href) or []
            if isinstance(children, dict):
                children = [children]
            listings[href] = sorted(children, key=lambda c: c.get("id", 0))
        return listings[href]

    def _resolve(self, xpath, listings, objects):
        m = _MULTIVALUE_RE.match(xpath)
        if m:
            owner = self._resolve(m.group("owner"), listings, objects)
            href = self._get_object(owner, objects).get(m.group("attr"))
            if not isinstance(href, str):
                raise IxNetworkError(f"attribute {m.group('attr')!r} of {owner} is not a multivalue")
            return self._resolve_elems(href, m.group("rest"), xpath, listings)
        return self._resolve_elems(self.session.base_path, xpath, xpath, listings)

    def _resolve_elems(self, href, path, xpath, listings):
        for elem in (e for e in path.split("/") if e):
            m = _XPATH_ELEM_RE.match(elem)
            if not m:
                raise IxNetworkError(f"unsupported xpath element {elem!r} in {xpath!r}")
            if m.group("index") is None:
                href = f"{href}/{m.group('name')}"
                continue
            children = self._list_children(f"{href}/{m.group('name')}", listings)
            i = int(m.group("index"))
            if not 0 < i <= len(children):
                raise IxNetworkError(f"no node at {xpath!r}: {elem} not found")
            href = _self_href(children[i - 1], f"{href}/{m.group('name')}")
        return href


def _self_href(obj, collection):
    for link in obj.get("links", []):
        if link.get("rel") == "self":
            return link["href"]
    if "id" in obj:
        return f"{collection}/{obj['id']}"
    raise IxNetworkError(f"node in {collection} has neither a self link nor an id")
