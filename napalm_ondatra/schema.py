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
Typed structs for the supported subset of the OpenConfig schema.

Each struct maps schema paths, relative to the struct itself, onto its
attributes. Values arrive either one leaf at a time or as JSON_IETF subtrees;
both go through the same field map.
"""
import enum


def _strip_module(name):
    # "openconfig-platform:state" -> "state"
    return name.split(":", 1)[-1]


def to_uint(value):
    value = int(value)
    if value < 0:
        raise ValueError("expected an unsigned integer, got %d" % value)
    return value


def to_float(value):
    return float(value)


def to_bool(value):
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def to_enum(enum_cls):
    def coerce(value):
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls[_strip_module(str(value))]
        except KeyError as e:
            raise ValueError("unrecognized {} value {!r}".format(enum_cls.__name__, value)) from e

    return coerce


class AlarmSeverity(str, enum.Enum):
    """openconfig-alarm-types:OPENCONFIG_ALARM_SEVERITY"""

    UNKNOWN = "UNKNOWN"
    MINOR = "MINOR"
    WARNING = "WARNING"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"


class Leaf(object):
    def __init__(self, attr, coerce=str, default=None):
        self.attr = attr
        self.coerce = coerce
        self.default = default

    def empty(self):
        return None

    def set(self, struct, elems, rest, value):
        if rest:
            return False
        setattr(struct, self.attr, None if value is None else self.coerce(value))
        return True

    def set_json(self, struct, value):
        return self.set(struct, [], [], value)


class Child(object):
    def __init__(self, attr, cls):
        self.attr = attr
        self.cls = cls

    def empty(self):
        return None

    def set(self, struct, elems, rest, value):
        if not rest and value is None:
            setattr(struct, self.attr, None)
            return True
        child = getattr(struct, self.attr)
        if child is None:
            child = self.cls()
            setattr(struct, self.attr, child)
        if not rest:
            return isinstance(value, dict) and child.set_json(value)
        return child.set_path(rest, value)

    def set_json(self, struct, value):
        return self.set(struct, [], [], value)


class KeyedList(object):
    def __init__(self, attr, cls, key, coerce=str):
        self.attr = attr
        self.cls = cls
        self.key = key
        self.coerce = coerce

    def empty(self):
        return {}

    def _entry(self, struct, key):
        entries = getattr(struct, self.attr)
        key = self.coerce(key)
        if key not in entries:
            entry = self.cls()
            setattr(entry, self.cls._key_attr, key)
            entries[key] = entry
        return entries[key]

    def set(self, struct, elems, rest, value):
        key = elems[-1].get("key", {}).get(self.key)
        if key is None or key == "*":
            return False
        if not rest and value is None:
            getattr(struct, self.attr).pop(self.coerce(key), None)
            return True
        entry = self._entry(struct, key)
        if not rest:
            return isinstance(value, dict) and entry.set_json(value)
        return entry.set_path(rest, value)

    def set_json(self, struct, value):
        if not isinstance(value, list):
            return False
        ok = False
        for item in value:
            keys = {_strip_module(k): v for k, v in item.items()}
            if self.key not in keys:
                continue
            ok = self._entry(struct, keys[self.key]).set_json(item) or ok
        return ok


class Struct(object):
    """Base class of all schema structs."""

    _fields = {}
    _key_attr = None

    def __init__(self, **kwargs):
        for field in self._fields.values():
            if not hasattr(self, field.attr):
                setattr(self, field.attr, field.empty())
        for k, v in kwargs.items():
            if not any(f.attr == k for f in self._fields.values()):
                raise TypeError("{} has no field {!r}".format(type(self).__name__, k))
            setattr(self, k, v)

    def set_path(self, elems, value):
        """Sets the value at elems, relative to this struct. Returns False if unknown."""
        if not elems:
            return isinstance(value, dict) and self.set_json(value)
        names = tuple(_strip_module(e["name"]) for e in elems)
        for n in range(len(names), 0, -1):
            field = self._fields.get(names[:n])
            if field is not None:
                return field.set(self, elems[:n], elems[n:], value)
        return False

    def set_json(self, obj, prefix=()):
        ok = False
        for k, v in obj.items():
            names = prefix + (_strip_module(k),)
            field = self._fields.get(names)
            if field is not None:
                ok = field.set_json(self, v) or ok
            elif isinstance(v, dict) and any(p[: len(names)] == names for p in self._fields):
                ok = self.set_json(v, names) or ok
        return ok

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        fields = ", ".join(
            "{}={!r}".format(k, v) for k, v in vars(self).items() if v not in (None, {})
        )
        return "{}({})".format(type(self).__name__, fields)


class LldpCounters(Struct):
    _fields = {
        ("tlv-unknown",): Leaf("tlv_unknown", to_uint),
        ("tlv-discard",): Leaf("tlv_discard", to_uint),
        ("frame-in",): Leaf("frame_in", to_uint),
        ("frame-out",): Leaf("frame_out", to_uint),
        ("frame-error-in",): Leaf("frame_error_in", to_uint),
        ("frame-discard",): Leaf("frame_discard", to_uint),
        ("last-clear",): Leaf("last_clear", to_uint),
    }


class LldpInterfaceCounters(Struct):
    _fields = {
        ("frame-discard",): Leaf("frame_discard", to_uint),
        ("frame-in",): Leaf("frame_in", to_uint),
        ("frame-out",): Leaf("frame_out", to_uint),
        ("frame-error-in",): Leaf("frame_error_in", to_uint),
        ("tlv-unknown",): Leaf("tlv_unknown", to_uint),
        ("tlv-discard",): Leaf("tlv_discard", to_uint),
    }


class LldpInterface(Struct):
    _key_attr = "name"
    _fields = {
        ("name",): Leaf("name"),
        ("state", "name"): Leaf("name"),
        ("state", "enabled"): Leaf("enabled", to_bool, default=True),
        ("state", "counters"): Child("counters", LldpInterfaceCounters),
    }


class Lldp(Struct):
    _fields = {
        ("state", "enabled"): Leaf("enabled", to_bool, default=True),
        ("state", "hello-timer"): Leaf("hello_timer", to_uint),
        ("state", "chassis-id"): Leaf("chassis_id"),
        ("state", "system-name"): Leaf("system_name"),
        ("state", "counters"): Child("counters", LldpCounters),
        ("interfaces", "interface"): KeyedList("interfaces", LldpInterface, "name"),
    }


class ComponentSubcomponent(Struct):
    _key_attr = "name"
    _fields = {
        ("name",): Leaf("name"),
        ("state", "name"): Leaf("name"),
    }


class ComponentTemperature(Struct):
    _fields = {
        ("alarm-severity",): Leaf("alarm_severity", to_enum(AlarmSeverity)),
        ("alarm-status",): Leaf("alarm_status", to_bool),
        ("alarm-threshold",): Leaf("alarm_threshold", to_uint),
        ("avg",): Leaf("avg", to_float),
        ("instant",): Leaf("instant", to_float),
        ("interval",): Leaf("interval", to_uint),
        ("max",): Leaf("max", to_float),
        ("max-time",): Leaf("max_time", to_uint),
        ("min",): Leaf("min", to_float),
        ("min-time",): Leaf("min_time", to_uint),
    }


class ChannelInputPower(Struct):
    _fields = {
        ("avg",): Leaf("avg", to_float),
        ("instant",): Leaf("instant", to_float),
        ("interval",): Leaf("interval", to_uint),
        ("max",): Leaf("max", to_float),
        ("max-time",): Leaf("max_time", to_uint),
        ("min",): Leaf("min", to_float),
        ("min-time",): Leaf("min_time", to_uint),
    }


class TransceiverChannel(Struct):
    _key_attr = "index"
    _fields = {
        ("index",): Leaf("index", to_uint),
        ("state", "index"): Leaf("index", to_uint),
        ("state", "description"): Leaf("description"),
        ("state", "associated-optical-channel"): Leaf("associated_optical_channel"),
        ("state", "input-power"): Child("input_power", ChannelInputPower),
    }


class ComponentTransceiver(Struct):
    _fields = {
        ("physical-channels", "channel"): KeyedList("channels", TransceiverChannel, "index", to_uint),
    }


class Component(Struct):
    _key_attr = "name"
    _fields = {
        ("name",): Leaf("name"),
        ("state", "name"): Leaf("name"),
        ("state", "type"): Leaf("type", _strip_module),
        ("state", "description"): Leaf("description"),
        ("state", "temperature"): Child("temperature", ComponentTemperature),
        ("subcomponents", "subcomponent"): KeyedList("subcomponents", ComponentSubcomponent, "name"),
        ("transceiver",): Child("transceiver", ComponentTransceiver),
    }


class Device(Struct):
    _fields = {
        ("lldp",): Child("lldp", Lldp),
        ("components", "component"): KeyedList("components", Component, "name"),
    }
