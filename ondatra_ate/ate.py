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
IxNetwork ATE: translates interface configs into an IxNetwork config and
pushes it through the config client.
"""
import logging

from ondatra_ate import ixnetwork as ix
from ondatra_ate.cfgnode import multivalue_bool, multivalue_str, multivalue_uint32, number_int
from ondatra_ate.errors import UserError
from ondatra_ate.networks import add_networks, parse_cidr, parse_ip


class Interface(object):
    """IxNetwork nodes built for one interface config."""

    def __init__(self, vport, topology, device_group):
        self.vport = vport
        self.topology = topology
        self.device_group = device_group
        self.ethernet = None
        self.ipv4 = None
        self.ipv6 = None
        self.ipv4_loopback = None
        self.ipv6_loopback = None
        self.net_to_network_group = {}
        self.net_to_route_tables = {}


class IxATE(object):
    def __init__(self, client):
        self.client = client
        self.cfg = ix.Ixnetwork(vport=[], topology=[])
        self.intfs = {}

    def add_interface(self, ifc):
        """Adds the IxNetwork topology for an interface config."""
        if ifc.name in self.intfs:
            raise UserError("duplicate interface name {!r}".format(ifc.name))

        vport = ix.Vport(name=ifc.name, location=ifc.port or None)
        dg = ix.TopologyDeviceGroup(name="{} Device Group".format(ifc.name), multiplier=number_int(1))
        topo = ix.Topology(name="{} Topology".format(ifc.name), vports=[vport], device_group=[dg])
        intf = Interface(vport, topo, dg)

        eth = ix.TopologyEthernet(name="{} Ethernet".format(ifc.name))
        if ifc.mac_address:
            eth.mac = multivalue_str(ifc.mac_address)
        if ifc.mtu:
            eth.mtu = multivalue_uint32(ifc.mtu)
        dg.ethernet = [eth]
        intf.ethernet = eth

        if ifc.ipv4 is not None:
            address, prefix = parse_cidr(ifc.ipv4.address_cidr, 4)
            intf.ipv4 = ix.TopologyIpv4(
                name="{} IPv4".format(ifc.name),
                address=multivalue_str(address),
                prefix=multivalue_uint32(prefix),
            )
            if ifc.ipv4.default_gateway:
                intf.ipv4.gateway_ip = multivalue_str(ifc.ipv4.default_gateway)
            eth.ipv4 = [intf.ipv4]
        if ifc.ipv6 is not None:
            address, prefix = parse_cidr(ifc.ipv6.address_cidr, 6)
            intf.ipv6 = ix.TopologyIpv6(
                name="{} IPv6".format(ifc.name),
                address=multivalue_str(address),
                prefix=multivalue_uint32(prefix),
            )
            if ifc.ipv6.default_gateway:
                intf.ipv6.gateway_ip = multivalue_str(ifc.ipv6.default_gateway)
            eth.ipv6 = [intf.ipv6]
        if ifc.ipv4_loopback_cidr:
            address, prefix = parse_cidr(ifc.ipv4_loopback_cidr, 4)
            intf.ipv4_loopback = ix.TopologyIpv4Loopback(
                name="{} IPv4 Loopback".format(ifc.name),
                address=multivalue_str(address),
                prefix=multivalue_uint32(prefix),
            )
            dg.ipv4_loopback = [intf.ipv4_loopback]
        if ifc.ipv6_loopback_cidr:
            address, prefix = parse_cidr(ifc.ipv6_loopback_cidr, 6)
            intf.ipv6_loopback = ix.TopologyIpv6Loopback(
                name="{} IPv6 Loopback".format(ifc.name),
                address=multivalue_str(address),
                prefix=multivalue_uint32(prefix),
            )
            dg.ipv6_loopback = [intf.ipv6_loopback]

        for peer in ifc.bgp_peers:
            self._add_bgp_peer(intf, peer)

        add_networks(intf, ifc)

        self.cfg.vport.append(vport)
        self.cfg.topology.append(topo)
        self.intfs[ifc.name] = intf
        logging.debug("Added interface {!r} to the IxNetwork config".format(ifc.name))

    def _add_bgp_peer(self, intf, peer):
        ip, is_v6 = parse_ip(peer.peer_address)
        if ip is None:
            raise UserError("BGP peer address {!r} is not an IP address".format(peer.peer_address))
        fields = dict(
            name=peer.name or "BGP Peer {}".format(peer.peer_address),
            active=multivalue_bool(peer.active),
            dut_ip=multivalue_str(peer.peer_address),
            type=multivalue_str(peer.type.value),
            local_as2_bytes=multivalue_uint32(peer.local_asn),
        )
        if peer.hold_timer_sec:
            fields["hold_timer"] = multivalue_uint32(peer.hold_timer_sec)
        if peer.keepalive_timer_sec:
            fields["keepalive_timer"] = multivalue_uint32(peer.keepalive_timer_sec)

        if is_v6:
            node = intf.ipv6_loopback if peer.on_loopback else intf.ipv6
            if node is None:
                raise UserError(
                    "no IPv6 {} configured for BGP peer {}".format(
                        "loopback" if peer.on_loopback else "address", peer.peer_address
                    )
                )
            node.bgp_ipv6_peer = (node.bgp_ipv6_peer or []) + [ix.TopologyBgpIpv6Peer(**fields)]
        else:
            node = intf.ipv4_loopback if peer.on_loopback else intf.ipv4
            if node is None:
                raise UserError(
                    "no IPv4 {} configured for BGP peer {}".format(
                        "loopback" if peer.on_loopback else "address", peer.peer_address
                    )
                )
            node.bgp_ipv4_peer = (node.bgp_ipv4_peer or []) + [ix.TopologyBgpIpv4Peer(**fields)]

    def push_topology(self, overwrite=True):
        """Imports the config of every added interface into the session."""
        self.client.import_config(self.cfg, self.cfg, overwrite)

    def update_network_group_ids(self):
        """Records the REST IDs of all network groups."""
        groups = [
            ng for intf in self.intfs.values() for ng in intf.net_to_network_group.values()
        ]
        if groups:
            self.client.update_ids(self.cfg, *groups)

    def network_group_id(self, intf, net):
        """Returns the REST ID of the network group of net on interface intf."""
        i = self.intfs.get(intf)
        if i is None:
            raise UserError("no interface named {!r}".format(intf))
        ng = i.net_to_network_group.get(net)
        if ng is None:
            raise UserError("no network {!r} on interface {!r}".format(net, intf))
        return self.client.node_id(ng)

