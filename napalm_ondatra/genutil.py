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

"""
Shared runtime used by the telemetry accessors.

Every accessor follows the same pattern: subscribe to a path (ONCE or STREAM),
unmarshal the received datapoints into a typed struct, and wrap the extracted
value in a QualifiedValue together with the metadata of the update.
"""
import datetime
import json
import logging
import re
import threading

from napalm.base.exceptions import ConnectionException

from napalm_ondatra.exceptions import ValueNotPresentError


class DataPoint(object):
    """A single value received from the device, addressed by its full path."""

    def __init__(self, path, value, timestamp=None, recv_timestamp=None, sync=False):
        self.path = path
        self.value = value
        self.timestamp = timestamp
        self.recv_timestamp = recv_timestamp
        self.sync = sync

    def __repr__(self):
        return "DataPoint(path={!r}, value={!r}, timestamp={})".format(
            path_to_str(self.path), self.value, self.timestamp
        )


class Metadata(object):
    """Subscription metadata attached to every qualified value."""

    def __init__(self, path, timestamp=None, recv_timestamp=None):
        self.path = path
        self.timestamp = timestamp
        self.recv_timestamp = recv_timestamp

    def key(self, elem_name, key_name):
        """Returns the value of a list key in the metadata path, or None."""
        for elem in self.path:
            if elem["name"] == elem_name:
                return elem.get("key", {}).get(key_name)
        return None

    def __str__(self):
        return path_to_str(self.path)

    def __repr__(self):
        return "Metadata(path={!r}, timestamp={})".format(str(self), self.timestamp)


class QualifiedValue(object):
    """
    A decoded value together with the metadata of the update it came from.

    A QualifiedValue that is not present carries metadata only: it tells apart
    "nothing was received" from "an explicit zero value was received".
    """

    def __init__(self, metadata=None):
        self.metadata = metadata
        self._value = None
        self._present = False

    def is_present(self):
        return self._present

    def set_val(self, value):
        self._value = value
        self._present = True
        return self

    def val(self):
        if not self._present:
            raise ValueNotPresentError(
                "no value present at {}".format(self.metadata or "<unknown path>")
            )
        return self._value

    def value_or(self, default):
        return self._value if self._present else default

    def __eq__(self, other):
        if not isinstance(other, QualifiedValue):
            return NotImplemented
        return self._present == other._present and self._value == other._value

    def __repr__(self):
        if not self._present:
            return "QualifiedValue(path={!r}, <not present>)".format(str(self.metadata))
        return "QualifiedValue(path={!r}, value={!r})".format(
            str(self.metadata), self._value
        )


def encode_xpath(path):
    """
    Encodes XPATH to a list of path elements
    Parameters:
        xpath (str): path string using XPATH syntax
    Returns:
        (list): path elements using the gnmi_pb2.PathElem structure, eg.
            [{"name": "components"}, {"name": "component", "key": {"name": "fan0"}}]
    """
    elems = []
    xpath = path.strip("\t\n\r /")
    if xpath:
        path_elements = re.split(r"""/(?=(?:[^\[\]]|\[[^\[\]]+\])*$)""", xpath)
        for e in path_elements:
            entry = {"name": e.split("[", 1)[0]}
            e_keys = re.findall(r"\[(.*?)\]", e)
            d_keys = dict(x.split("=", 1) for x in e_keys)
            if d_keys:
                entry["key"] = d_keys
            elems.append(entry)
    return elems


def path_to_str(elems):
    if not elems:
        return "/"
    parts = []
    for elem in elems:
        keys = "".join(
            "[{}={}]".format(k, v) for k, v in sorted(elem.get("key", {}).items())
        )
        parts.append(elem["name"] + keys)
    return "/" + "/".join(parts)


def proto_path_elems(path):
    """Converts a gnmi_pb2.Path message to a list of path elements."""
    elems = []
    for e in path.elem:
        entry = {"name": e.name}
        if e.key:
            entry["key"] = dict(e.key)
        elems.append(entry)
    return elems


def is_wildcard(elems):
    return any("*" in elem.get("key", {}).values() or elem["name"] == "*" for elem in elems)


def match_path(pattern, elems):
    """Reports whether elems starts with pattern, honoring '*' keys in pattern."""
    if len(elems) < len(pattern):
        return False
    for want, got in zip(pattern, elems):
        if want["name"] != "*" and want["name"] != got["name"]:
            return False
        got_keys = got.get("key", {})
        for k, v in want.get("key", {}).items():
            if v != "*" and got_keys.get(k) != v:
                return False
    return True


def decode_val(val):
    """
    Decodes a gnmi_pb2.TypedValue into a python value
    Parameters:
        val (gnmi_pb2.TypedValue): value received from the device
    Returns:
        (ANY): extracted data
    """
    kind = val.WhichOneof("value")
    if kind == "json_ietf_val":
        return json.loads(val.json_ietf_val)
    elif kind == "json_val":
        return json.loads(val.json_val)
    elif kind == "decimal_val":
        return val.decimal_val.digits / (10 ** val.decimal_val.precision)
    elif kind == "leaflist_val":
        return [decode_val(e) for e in val.leaflist_val.element]
    elif kind in (
        "string_val",
        "int_val",
        "uint_val",
        "bool_val",
        "bytes_val",
        "float_val",
        "double_val",
        "ascii_val",
    ):
        return getattr(val, kind)
    raise ConnectionException(
        "gNMI plugin does not support encoding for value: %s" % kind
    )


def timestamp_to_datetime(ts):
    if not ts:
        return None
    return datetime.datetime.fromtimestamp(ts / 1e9, tz=datetime.timezone.utc)


def notification_datapoints(notification, recv_timestamp=None):
    """Expands the updates and deletes of a gnmi_pb2.Notification into datapoints."""
    prefix = proto_path_elems(notification.prefix) if notification.HasField("prefix") else []
    timestamp = timestamp_to_datetime(notification.timestamp)
    datapoints = []
    for upd in notification.update:
        datapoints.append(
            DataPoint(
                prefix + proto_path_elems(upd.path),
                decode_val(upd.val),
                timestamp,
                recv_timestamp,
            )
        )
    for delete in notification.delete:
        datapoints.append(
            DataPoint(prefix + proto_path_elems(delete), None, timestamp, recv_timestamp)
        )
    return datapoints


def bundle_datapoints(datapoints, prefix_len):
    """
    Groups datapoints by the string form of their first prefix_len elements.
    Returns the groups and their prefixes in sorted order.
    """
    groups = {}
    for dp in datapoints:
        if dp.sync:
            continue
        if len(dp.path) < prefix_len:
            logging.warning(
                f"Datapoint at {path_to_str(dp.path)} is shorter than the query prefix ({prefix_len}), ignoring"
            )
            continue
        prefix = path_to_str(dp.path[:prefix_len])
        groups.setdefault(prefix, []).append(dp)
    return groups, sorted(groups)


def unmarshal(datapoints, struct, struct_path, query_path):
    """
    Unmarshals datapoints into struct, which is rooted at struct_path.

    Returns the metadata of the newest datapoint applied and whether any value
    was set. The metadata path is cut to the length of query_path, or is
    query_path itself when nothing was applied. Deletes clear the
    corresponding field but do not count as values.
    """
    ok = False
    newest = None
    for dp in datapoints:
        if dp.sync:
            continue
        if not match_path(struct_path, dp.path):
            logging.debug(f"Skipping {path_to_str(dp.path)}: not under {path_to_str(struct_path)}")
            continue
        if not struct.set_path(dp.path[len(struct_path):], dp.value):
            logging.debug(f"Skipping {path_to_str(dp.path)}: not in schema of {type(struct).__name__}")
            continue
        if dp.value is not None:
            ok = True
        if newest is None or (dp.timestamp and (newest.timestamp is None or dp.timestamp >= newest.timestamp)):
            newest = dp

    if newest is None:
        return Metadata(list(query_path)), ok
    return Metadata(newest.path[:len(query_path)], newest.timestamp, newest.recv_timestamp), ok


def get(client, path):
    """Fetches the datapoints at path with a ONCE subscription."""
    return client.subscribe_once([path])


class Watcher(object):
    """
    Observes a STREAM subscription in the background.

    The first batch holds every update up to the initial sync response; after
    that each notification is a batch of its own. Every batch is grouped by
    query prefix, converted into a QualifiedValue and evaluated with the
    predicate. The subscription completes once the predicate holds or the
    subscription duration elapses.
    """

    def __init__(self, subscription, converter, predicate, prefix_len):
        self.last_val = None
        self._subscription = subscription
        self._converter = converter
        self._predicate = predicate
        self._prefix_len = prefix_len
        self._success = False
        self._error = None
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._thread.start()
        return self

    def _evaluate(self, datapoints):
        groups, prefixes = bundle_datapoints(datapoints, self._prefix_len)
        for prefix in prefixes:
            self.last_val = self._converter(groups[prefix])
            if self._predicate(self.last_val):
                return True
        return False

    def _run(self):
        pending = []
        synced = False
        try:
            for datapoints, sync in self._subscription:
                pending.extend(datapoints)
                if not synced and not sync:
                    continue
                synced = True
                batch, pending = pending, []
                if batch and self._evaluate(batch):
                    self._success = True
                    self._subscription.cancel()
                    return
            if pending and self._evaluate(pending):
                self._success = True
        except Exception as e:
            logging.error("Error occurred in telemetry subscription : {}".format(e))
            self._error = e
            self._subscription.cancel()

    def await_(self):
        """Blocks until the subscription completes; returns (last_val, success)."""
        self._thread.join()
        if self._error is not None:
            raise self._error
        return self.last_val, self._success


class Collection(object):
    """Values gathered by a watcher over a fixed duration."""

    def __init__(self, watcher, data):
        self.watcher = watcher
        self.data = data

    def await_(self):
        self.watcher.await_()
        return self.data


def watch(client, paths, duration, converter, predicate, prefix_len):
    subscription = client.subscribe_stream(paths, duration)
    return Watcher(subscription, converter, predicate, prefix_len).start()
