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
Base types for IxNetwork JSON config nodes.

A config node declares its JSON fields; every node carries the XPath that
IxNetwork uses to address it in exported and imported configs. Keys that a node
does not declare are kept as-is so that configs round-trip unchanged.
"""
import copy

from ondatra_ate.errors import IxConfigError

VALUE = "value"
NUMBER = "number"
MULTIVALUE = "multivalue"
NODE = "node"
NODES = "nodes"
REFS = "refs"


class XPath(object):
    """An IxNetwork XPath, eg. /topology[1]/deviceGroup[2]."""

    def __init__(self, xpath):
        self._xpath = str(xpath)

    def __str__(self):
        return self._xpath

    def __repr__(self):
        return "XPath({!r})".format(self._xpath)

    def __eq__(self, other):
        if isinstance(other, XPath):
            return self._xpath == other._xpath
        return NotImplemented

    def __hash__(self):
        return hash(self._xpath)


class Field(object):
    def __init__(self, attr, key, kind=VALUE, cls=None):
        self.attr = attr
        self.key = key
        self.kind = kind
        self.cls = cls

    def encode(self, value):
        if self.kind in (NODE, MULTIVALUE):
            return value.to_dict()
        if self.kind == NODES:
            return [n.to_dict() for n in value]
        if self.kind == REFS:
            return [_ref_xpath(r) for r in value]
        return copy.deepcopy(value)

    def decode(self, value):
        if value is None:
            return None
        if self.kind == MULTIVALUE:
            return (self.cls or Multivalue).from_dict(value)
        if self.kind == NODE:
            return self.cls.from_dict(value)
        if self.kind == NODES:
            return [self.cls.from_dict(v) for v in value]
        if self.kind == REFS:
            return [XPath(v) for v in value]
        return copy.deepcopy(value)


def _ref_xpath(ref):
    if isinstance(ref, IxiaCfgNode):
        if ref.xpath() is None:
            raise IxConfigError(
                "referenced node of type {} has no xpath".format(type(ref).__name__)
            )
        return str(ref.xpath())
    return str(ref)


class IxiaCfgNode(object):
    """Base class of every IxNetwork config node."""

    _fields = ()

    def __init__(self, **kwargs):
        self._xpath = None
        self._extra = {}
        for f in self._fields:
            setattr(self, f.attr, None)
        attrs = {f.attr for f in self._fields}
        for k, v in kwargs.items():
            if k not in attrs:
                raise TypeError("{} has no field {!r}".format(type(self).__name__, k))
            setattr(self, k, v)

    def xpath(self):
        """Returns the XPath of the node, or None if it has not been set."""
        return self._xpath

    def to_dict(self):
        data = copy.deepcopy(self._extra)
        if self._xpath is not None:
            data["xpath"] = str(self._xpath)
        for f in self._fields:
            value = getattr(self, f.attr)
            if value is None:
                continue
            data[f.key] = f.encode(value)
        return data

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise IxConfigError(
                "cannot unmarshal {} from {}".format(cls.__name__, type(data).__name__)
            )
        node = cls()
        fields = {f.key: f for f in cls._fields}
        for k, v in data.items():
            if k == "xpath":
                node._xpath = XPath(v)
                continue
            f = fields.get(k)
            if f is None:
                node._extra[k] = copy.deepcopy(v)
            else:
                setattr(node, f.attr, f.decode(v))
        return node

    def _child_nodes(self):
        for f in self._fields:
            value = getattr(self, f.attr)
            if value is None:
                continue
            if f.kind in (NODE, MULTIVALUE):
                yield f, [value]
            elif f.kind == NODES:
                yield f, value

    def walk(self):
        """Yields this node and every node below it, depth first."""
        yield self
        for _, children in self._child_nodes():
            for child in children:
                yield from child.walk()

    def _update_xpaths(self, xpath):
        self._xpath = XPath(xpath)
        base = "" if xpath == "/" else xpath
        for f, children in self._child_nodes():
            if f.kind == NODES:
                for i, child in enumerate(children, 1):
                    child._update_xpaths("{}/{}[{}]".format(base, f.key, i))
            elif f.kind == MULTIVALUE:
                children[0]._update_xpaths(
                    "/multivalue[@source = '{} {}']".format(xpath, f.key)
                )
            else:
                children[0]._update_xpaths("{}/{}".format(base, f.key))

    def _clear_xpaths(self):
        for node in self.walk():
            node._xpath = None

    def copy(self):
        """Returns a deep copy of the node without any XPaths set."""
        c = copy.deepcopy(self)
        c._clear_xpaths()
        return c

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return "{}(xpath={!r})".format(type(self).__name__, str(self._xpath) if self._xpath else None)


class SingleValue(IxiaCfgNode):
    _fields = (Field("value", "value"),)


class Counter(IxiaCfgNode):
    _fields = (
        Field("start", "start"),
        Field("step", "step"),
        Field("direction", "direction"),
    )


class ValueList(IxiaCfgNode):
    _fields = (Field("values", "values"),)


class Multivalue(IxiaCfgNode):
    """A value pattern; IxNetwork addresses it by the owning node and attribute."""

    _fields = (
        Field("single_value", "singleValue", NODE, SingleValue),
        Field("counter", "counter", NODE, Counter),
        Field("value_list", "valueList", NODE, ValueList),
    )


def multivalue_str(s):
    return Multivalue(single_value=SingleValue(value=str(s)))


def multivalue_uint32(i):
    return multivalue_str(_uint32(i))


def multivalue_bool(b):
    return multivalue_str("true" if b else "false")


def multivalue_true():
    return multivalue_bool(True)


def multivalue_false():
    return multivalue_bool(False)


def multivalue_str_inc_counter(start, step):
    """Returns a multivalue that counts up from start in increments of step."""
    return Multivalue(counter=Counter(start=start, step=step, direction="increment"))


def number_int(i):
    return int(i)


def number_uint32(i):
    return _uint32(i)


def _uint32(i):
    i = int(i)
    if not 0 <= i <= 0xFFFFFFFF:
        raise ValueError("{} is out of range for uint32".format(i))
    return i
