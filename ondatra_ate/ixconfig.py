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
Ixia JSON config client.

The client pushes and pulls the full IxNetwork config of a session as a tree of
config nodes, and keeps track of the REST IDs of the nodes it pushed.
See https://openixia.github.io/ixnetwork_openapi/ for the config object model.
"""
import json
import logging

from ondatra_ate.cfgnode import (  # noqa: F401
    IxiaCfgNode,
    Multivalue,
    XPath,
    multivalue_bool,
    multivalue_false,
    multivalue_str,
    multivalue_str_inc_counter,
    multivalue_true,
    multivalue_uint32,
    number_int,
    number_uint32,
)
from ondatra_ate.errors import IxConfigError
from ondatra_ate.ixnetwork import Ixnetwork
from ondatra_ate.jsondiff import jsondiff


def loads(json_str):
    """Unmarshals a JSON config string into an Ixnetwork node."""
    try:
        data = json.loads(json_str)
    except ValueError as e:
        raise IxConfigError("failed to unmarshal Ixia config from {!r}".format(json_str)) from e
    return Ixnetwork.from_dict(data)


def dumps(node):
    return json.dumps(node.to_dict())


class Client(object):
    """API for an IxNetwork session using the JSON config representation."""

    def __init__(self, session):
        self._session = session
        self._last_imported = None
        self._xpath_to_id = {}

    @property
    def session(self):
        """The IxNetwork session used by the config client."""
        return self._session

    def node_id(self, node):
        """
        Returns the REST ID of a node. Raises IxConfigError if the node is not
        part of an imported config or its ID has not been updated.
        """
        xp = node.xpath()
        if xp is None:
            raise IxConfigError("node of type {} not yet imported".format(type(node).__name__))
        node_id = self._xpath_to_id.get(str(xp))
        if node_id is None:
            raise IxConfigError("node at {!r} has no updated ID".format(str(xp)))
        return node_id

    def export_config(self):
        """Exports the current full config of the session."""
        return loads(self._session.config().export())

    def import_config(self, cfg, node, overwrite):
        """
        Imports node, a part of the root config cfg, into the session.

        With overwrite the session config is replaced with the contents of
        node. Otherwise every value at and below node is updated; nodes missing
        from a list are not removed. All XPaths in cfg are updated first.
        """
        self._xpath_to_id = {}
        cfg.update_all_xpaths()
        try:
            json_cfg = dumps(node)
        except (TypeError, ValueError) as e:
            raise IxConfigError("could not marshal Ixnetwork config to JSON") from e
        self._session.config().import_config(json_cfg, overwrite)
        self._last_imported = cfg.copy()

    def last_imported_config(self):
        """
        Returns a copy of the last pushed config, or None. Every call returns a
        new copy without XPaths set.
        """
        if self._last_imported is None:
            return None
        return self._last_imported.copy()

    def update_ids(self, cfg, *nodes):
        """
        Records the REST IDs of nodes in cfg. IDs that are already known are not
        queried again.
        """
        cfg.update_all_xpaths()
        missing = []
        for n in nodes:
            if n.xpath() is None:
                raise IxConfigError("node of type {} is not part of the config".format(type(n).__name__))
            xp = str(n.xpath())
            if xp not in self._xpath_to_id and xp not in missing:
                missing.append(xp)
        if not missing:
            return
        logging.debug("Querying IDs for {} nodes".format(len(missing)))
        self._xpath_to_id.update(self._session.config().query_ids(*missing))

    def diff_last_imported(self, cfg):
        """
        Returns the differences between cfg and the last pushed config, as
        "+++", "---" and "chg" entries. Every difference is reported if
        nothing has been pushed yet.
        """
        new = cfg.copy()
        new.update_all_xpaths()
        old = {}
        if self._last_imported is not None:
            last = self._last_imported.copy()
            last.update_all_xpaths()
            old = last.to_dict()
        return jsondiff().cmp_dict(new.to_dict(), old)
