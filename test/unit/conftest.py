# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Test fixtures."""
import json
import os

import pytest

from napalm_ondatra import driver, genutil

TESTDATA = os.path.join(os.path.dirname(__file__), "testdata")


def load_datapoints(filename):
    with open(os.path.join(TESTDATA, filename)) as f:
        entries = json.load(f)
    return [
        genutil.DataPoint(
            genutil.encode_xpath(e["path"]),
            e["value"],
            genutil.timestamp_to_datetime(e.get("timestamp", 0)),
        )
        for e in entries
    ]


class FakeSubscription(object):
    def __init__(self, batches):
        self._batches = batches
        self.cancelled = False

    def __iter__(self):
        for batch in self._batches:
            if self.cancelled:
                return
            if isinstance(batch, Exception):
                raise batch
            yield batch

    def cancel(self):
        self.cancelled = True


class FakeGNMIClient(object):
    """Serves canned datapoints to ONCE and STREAM subscriptions."""

    def __init__(self, datapoints=None, stream=None):
        self.datapoints = datapoints or []
        # (datapoints, sync) tuples, or exceptions to raise mid-stream
        self.stream = stream or []
        self.once_queries = []
        self.stream_queries = []
        self.subscriptions = []

    def _matching(self, paths, datapoints):
        return [dp for dp in datapoints if any(genutil.match_path(p, dp.path) for p in paths)]

    def subscribe_once(self, paths):
        self.once_queries.append(paths)
        return self._matching(paths, self.datapoints)

    def subscribe_stream(self, paths, duration):
        self.stream_queries.append((paths, duration))
        batches = []
        for batch in self.stream:
            if isinstance(batch, Exception):
                batches.append(batch)
            else:
                datapoints, sync = batch
                batches.append((self._matching(paths, datapoints), sync))
        subscription = FakeSubscription(batches)
        self.subscriptions.append(subscription)
        return subscription

    def open(self):
        pass

    def close(self):
        pass

    def is_alive(self):
        return True


class PatchedOndatraDriver(driver.OndatraDriver):
    """Driver whose gNMI client serves the platform and LLDP test data."""

    def __init__(self, hostname, username, password, timeout=60, optional_args=None):
        super().__init__(hostname, username, password, timeout, optional_args)

        self.patched_attrs = ["device"]
        self.device = FakeGNMIClient(load_datapoints("telemetry.json"))


@pytest.fixture
def telemetry_datapoints():
    return load_datapoints("telemetry.json")


@pytest.fixture
def fake_client(telemetry_datapoints):
    return FakeGNMIClient(telemetry_datapoints)


@pytest.fixture
def patched_driver():
    d = PatchedOndatraDriver("dut", "admin", "admin", optional_args={"insecure": True})
    d.open()
    yield d
    d.close()


@pytest.fixture
def dp():
    """Builds a datapoint from an XPath string."""

    def make(path, value, timestamp=None):
        ts = genutil.timestamp_to_datetime(timestamp) if timestamp else None
        return genutil.DataPoint(genutil.encode_xpath(path), value, ts)

    return make


@pytest.fixture
def make_client():
    return FakeGNMIClient


class FakeIxConfig(object):
    def __init__(self, session):
        self._session = session

    def export(self):
        return self._session.exported

    def import_config(self, json_str, overwrite):
        self._session.imports.append((json.loads(json_str), overwrite))

    def query_ids(self, *xpaths):
        self._session.queries.append(xpaths)
        start = sum(len(q) for q in self._session.queries[:-1])
        return {
            xp: "/api/v1/sessions/1/ixnetwork/id/{}".format(start + i)
            for i, xp in enumerate(xpaths)
        }


class FakeIxSession(object):
    """Records imports and ID queries instead of talking to IxNetwork."""

    def __init__(self, exported="{}"):
        self.exported = exported
        self.imports = []
        self.queries = []

    def config(self):
        return FakeIxConfig(self)


@pytest.fixture
def ix_session():
    return FakeIxSession()
