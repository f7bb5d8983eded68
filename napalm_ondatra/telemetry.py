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
Telemetry path structs for the device under test.

Paths are built by navigating from a DevicePath, eg.

    dut = DevicePath(client)
    dut.component("linecard0").temperature().instant().get()
    dut.lldp().interface_any().counters().frame_discard().lookup()

Every node, container or leaf, can be queried with a ONCE subscription
(lookup/get) or observed with a STREAM subscription (watch/await_/collect).
A path with a wildcard key ("*") matches every list entry: lookup and get then
return one result per entry, sorted by path.
"""
import copy
import logging

from napalm_ondatra import genutil
from napalm_ondatra.exceptions import AwaitTimeoutError, TelemetryError, ValueNotPresentError
from napalm_ondatra.schema import (
    Component,
    ComponentSubcomponent,
    ComponentTemperature,
    ComponentTransceiver,
    ChannelInputPower,
    Device,
    Lldp,
    LldpCounters,
    LldpInterface,
    LldpInterfaceCounters,
    TransceiverChannel,
)


def _elem(elem_name, **keys):
    if keys:
        return {"name": elem_name, "key": {k: str(v) for k, v in keys.items()}}
    return {"name": elem_name}


class PathStruct(object):
    """A node of the telemetry path tree."""

    def __init__(self, parent, elems):
        self._parent = parent
        self._client = parent._client
        self.elems = parent.elems + elems

    def is_wildcard(self):
        return genutil.is_wildcard(self.elems)

    def __str__(self):
        return genutil.path_to_str(self.elems)

    def __repr__(self):
        return "{}({!r})".format(type(self).__name__, str(self))

    def _struct_type(self):
        """Returns the struct class and path that datapoints are unmarshalled into."""
        raise NotImplementedError

    def _convert(self, md, struct):
        raise NotImplementedError

    def _default(self):
        return None

    def _unmarshal(self, datapoints, struct):
        _, struct_path = self._struct_type()
        return genutil.unmarshal(datapoints, struct, struct_path, self.elems)

    def lookup(self):
        """
        Fetches the value at this path with a ONCE subscription.

        For a concrete path, returns a QualifiedValue, or None if there is no
        value present. For a wildcard path, returns a list with one
        QualifiedValue per matching entry; the list is empty if nothing matched.
        """
        struct_cls, _ = self._struct_type()
        datapoints = genutil.get(self._client, self.elems)
        if not self.is_wildcard():
            struct = struct_cls()
            md, ok = self._unmarshal(datapoints, struct)
            if ok:
                return self._convert(md, struct)
            default = self._default()
            if default is not None:
                return genutil.QualifiedValue(md).set_val(default)
            return None

        groups, prefixes = genutil.bundle_datapoints(datapoints, len(self.elems))
        data = []
        for prefix in prefixes:
            struct = struct_cls()
            md, ok = self._unmarshal(groups[prefix], struct)
            if not ok:
                continue
            data.append(self._convert(md, struct))
        return data

    def get(self):
        """
        Fetches the value at this path with a ONCE subscription, raising
        ValueNotPresentError if no value is present.
        To avoid the exception, use the lookup method instead.
        """
        if self.is_wildcard():
            return [qv.val() for qv in self.lookup()]
        qv = self.lookup()
        if qv is None:
            raise ValueNotPresentError("no value present at {}".format(self))
        return qv.val()

    def watch(self, timeout, predicate):
        """
        Starts an asynchronous observation of the values at this path with a
        STREAM subscription, evaluating each observed value with predicate.
        The subscription completes when either the predicate is true or timeout
        seconds elapse. Calling await_ on the returned Watcher waits for the
        subscription to complete and returns the last observed value and
        whether it satisfied the predicate.
        """
        struct_cls, _ = self._struct_type()
        structs = {}
        prefix_len = len(self.elems)

        def converter(datapoints):
            prefix = genutil.path_to_str(datapoints[0].path[:prefix_len])
            struct = structs.setdefault(prefix, struct_cls())
            md, _ = self._unmarshal(datapoints, struct)
            return self._convert(md, struct)

        return genutil.watch(self._client, [self.elems], timeout, converter, predicate, prefix_len)

    def await_(self, timeout, val):
        """
        Observes values at this path with a STREAM subscription, blocking until
        a value equal to val is received. Raises AwaitTimeoutError if the value
        is not received within timeout seconds.
        """
        if self.is_wildcard():
            raise TelemetryError("await_ requires a concrete path, got {}".format(self))
        got, success = self.watch(
            timeout, lambda data: data.is_present() and data.val() == val
        ).await_()
        if not success:
            raise AwaitTimeoutError(
                "await_() at {} failed: want {!r}, last got {!r}".format(self, val, got)
            )
        return got

    def collect(self, duration):
        """
        Starts an asynchronous collection of the values at this path with a
        STREAM subscription. Calling await_ on the returned Collection waits for
        duration seconds to elapse and returns the collected values.
        """
        data = []

        def append(qv):
            data.append(copy.deepcopy(qv))
            return False

        return genutil.Collection(self.watch(duration, append), data)

    def batch(self, b):
        """Adds this path to the batch object."""
        b.add_paths(self)


class ContainerPath(PathStruct):
    """A path to a container or list entry; its value is a schema struct."""

    _struct = None

    def _struct_type(self):
        return self._struct, self.elems

    def _convert(self, md, struct):
        return genutil.QualifiedValue(md).set_val(struct)

    def _leaf(self, rel, attr):
        return LeafPath(self, rel, attr)


class LeafPath(PathStruct):
    """A path to a leaf, unmarshalled through the struct of its parent container."""

    def __init__(self, parent, rel, attr):
        super().__init__(parent, [_elem(name) for name in rel.split("/")])
        self._attr = attr

    def _struct_type(self):
        return self._parent._struct, self._parent.elems

    def _field(self):
        for field in self._parent._struct._fields.values():
            if field.attr == self._attr:
                return field
        raise TelemetryError("{} has no leaf {}".format(self._parent._struct.__name__, self._attr))

    def _convert(self, md, struct):
        qv = genutil.QualifiedValue(md)
        val = getattr(struct, self._attr)
        if val is not None:
            qv.set_val(val)
        return qv

    def _default(self):
        return self._field().default


class LldpCountersPath(ContainerPath):
    _struct = LldpCounters

    def tlv_unknown(self):
        return self._leaf("tlv-unknown", "tlv_unknown")

    def tlv_discard(self):
        return self._leaf("tlv-discard", "tlv_discard")

    def frame_in(self):
        return self._leaf("frame-in", "frame_in")

    def frame_out(self):
        return self._leaf("frame-out", "frame_out")

    def frame_error_in(self):
        return self._leaf("frame-error-in", "frame_error_in")

    def frame_discard(self):
        return self._leaf("frame-discard", "frame_discard")

    def last_clear(self):
        return self._leaf("last-clear", "last_clear")


class LldpInterfaceCountersPath(ContainerPath):
    _struct = LldpInterfaceCounters

    def frame_discard(self):
        return self._leaf("frame-discard", "frame_discard")

    def frame_in(self):
        return self._leaf("frame-in", "frame_in")

    def frame_out(self):
        return self._leaf("frame-out", "frame_out")

    def frame_error_in(self):
        return self._leaf("frame-error-in", "frame_error_in")

    def tlv_unknown(self):
        return self._leaf("tlv-unknown", "tlv_unknown")

    def tlv_discard(self):
        return self._leaf("tlv-discard", "tlv_discard")


class LldpInterfacePath(ContainerPath):
    _struct = LldpInterface

    def name(self):
        return self._leaf("state/name", "name")

    def enabled(self):
        return self._leaf("state/enabled", "enabled")

    def counters(self):
        return LldpInterfaceCountersPath(self, [_elem("state"), _elem("counters")])


class LldpPath(ContainerPath):
    _struct = Lldp

    def enabled(self):
        return self._leaf("state/enabled", "enabled")

    def hello_timer(self):
        return self._leaf("state/hello-timer", "hello_timer")

    def chassis_id(self):
        return self._leaf("state/chassis-id", "chassis_id")

    def system_name(self):
        return self._leaf("state/system-name", "system_name")

    def counters(self):
        return LldpCountersPath(self, [_elem("state"), _elem("counters")])

    def interface(self, name):
        return LldpInterfacePath(self, [_elem("interfaces"), _elem("interface", name=name)])

    def interface_any(self):
        return self.interface("*")


class ComponentTemperaturePath(ContainerPath):
    _struct = ComponentTemperature

    def alarm_severity(self):
        return self._leaf("alarm-severity", "alarm_severity")

    def alarm_status(self):
        return self._leaf("alarm-status", "alarm_status")

    def alarm_threshold(self):
        return self._leaf("alarm-threshold", "alarm_threshold")

    def avg(self):
        return self._leaf("avg", "avg")

    def instant(self):
        return self._leaf("instant", "instant")

    def interval(self):
        return self._leaf("interval", "interval")

    def max(self):
        return self._leaf("max", "max")

    def max_time(self):
        return self._leaf("max-time", "max_time")

    def min(self):
        return self._leaf("min", "min")

    def min_time(self):
        return self._leaf("min-time", "min_time")


class ComponentSubcomponentPath(ContainerPath):
    _struct = ComponentSubcomponent

    def name(self):
        return self._leaf("state/name", "name")


class ChannelInputPowerPath(ContainerPath):
    _struct = ChannelInputPower

    def avg(self):
        return self._leaf("avg", "avg")

    def instant(self):
        return self._leaf("instant", "instant")

    def interval(self):
        return self._leaf("interval", "interval")

    def max(self):
        return self._leaf("max", "max")

    def max_time(self):
        return self._leaf("max-time", "max_time")

    def min(self):
        return self._leaf("min", "min")

    def min_time(self):
        return self._leaf("min-time", "min_time")


class TransceiverChannelPath(ContainerPath):
    _struct = TransceiverChannel

    def index(self):
        return self._leaf("state/index", "index")

    def description(self):
        return self._leaf("state/description", "description")

    def associated_optical_channel(self):
        return self._leaf("state/associated-optical-channel", "associated_optical_channel")

    def input_power(self):
        return ChannelInputPowerPath(self, [_elem("state"), _elem("input-power")])


class ComponentTransceiverPath(ContainerPath):
    _struct = ComponentTransceiver

    def channel(self, index):
        return TransceiverChannelPath(
            self, [_elem("physical-channels"), _elem("channel", index=index)]
        )

    def channel_any(self):
        return self.channel("*")


class ComponentPath(ContainerPath):
    _struct = Component

    def name(self):
        return self._leaf("state/name", "name")

    def type(self):
        return self._leaf("state/type", "type")

    def description(self):
        return self._leaf("state/description", "description")

    def temperature(self):
        return ComponentTemperaturePath(self, [_elem("state"), _elem("temperature")])

    def subcomponent(self, name):
        return ComponentSubcomponentPath(
            self, [_elem("subcomponents"), _elem("subcomponent", name=name)]
        )

    def subcomponent_any(self):
        return self.subcomponent("*")

    def transceiver(self):
        return ComponentTransceiverPath(self, [_elem("transceiver")])


class DevicePath(ContainerPath):
    """Root of the telemetry path tree for one device."""

    _struct = Device

    def __init__(self, client):
        self._parent = None
        self._client = client
        self.elems = []

    def lldp(self):
        return LldpPath(self, [_elem("lldp")])

    def component(self, name):
        return ComponentPath(self, [_elem("components"), _elem("component", name=name)])

    def component_any(self):
        return self.component("*")

    def new_batch(self):
        return Batch(self)


class Batch(object):
    """
    A set of paths queried together.

    Values are unmarshalled into a single Device struct, so a batch returns a
    consistent snapshot of every path it holds.
    """

    def __init__(self, root):
        self._root = root
        self._paths = []

    def add_paths(self, *paths):
        for p in paths:
            if p._client is not self._root._client:
                raise TelemetryError("cannot add {} to a batch for a different device".format(p))
            if not p.elems:
                raise TelemetryError("cannot add the device root to a batch")
            self._paths.append(p)
        return self

    def _query_paths(self):
        if not self._paths:
            raise TelemetryError("batch has no paths")
        return [p.elems for p in self._paths]

    def lookup(self):
        """Fetches every path of the batch with one ONCE subscription."""
        datapoints = self._root._client.subscribe_once(self._query_paths())
        device = Device()
        md, ok = genutil.unmarshal(datapoints, device, [], [])
        qv = genutil.QualifiedValue(md)
        if ok:
            qv.set_val(device)
        else:
            logging.debug("Batch lookup of {} paths returned no values".format(len(self._paths)))
        return qv

    def get(self):
        return self.lookup().val()

    def watch(self, timeout, predicate):
        device = Device()

        def converter(datapoints):
            md, _ = genutil.unmarshal(datapoints, device, [], [])
            return genutil.QualifiedValue(md).set_val(device)

        return genutil.watch(self._root._client, self._query_paths(), timeout, converter, predicate, 0)
