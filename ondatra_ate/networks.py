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

"""Builds IxNetwork network groups from the networks of an interface."""
import ipaddress
import logging

from ondatra_ate import ixnetwork as ix
from ondatra_ate.cfgnode import (
    multivalue_bool,
    multivalue_false,
    multivalue_str,
    multivalue_str_inc_counter,
    multivalue_true,
    multivalue_uint32,
    number_int,
    number_uint32,
)
from ondatra_ate.errors import UserError
from ondatra_ate.topology import (
    AsnSetMode,
    AsPathSegmentType,
    BgpOrigin,
    CoBits,
    RouteOrigin,
    RouteTableFormat,
)

ORIGIN_TO_STR = {
    BgpOrigin.ORIGIN_IGP: "igp",
    BgpOrigin.ORIGIN_EGP: "egp",
    BgpOrigin.ORIGIN_INCOMPLETE: "incomplete",
}

CO_BITS_TO_STR = {
    CoBits.CO_BITS_00: "00",
    CoBits.CO_BITS_01: "01",
    CoBits.CO_BITS_10: "10",
    CoBits.CO_BITS_11: "11",
}

AS_PATH_SEG_TYPE_TO_STR = {
    AsPathSegmentType.TYPE_AS_SET: "asset",
    AsPathSegmentType.TYPE_AS_SEQ: "asseq",
    AsPathSegmentType.TYPE_AS_SEQ_CONFEDERATION: "asseqconfederation",
    AsPathSegmentType.TYPE_AS_SET_CONFEDERATION: "assetconfederation",
}

ASN_SET_MODE_TO_STR = {
    AsnSetMode.ASN_SET_MODE_DO_NOT_INCLUDE_LOCAL_AS: "dontincludelocalas",
    AsnSetMode.ASN_SET_MODE_AS_SEQ: "includelocalasasasseq",
    AsnSetMode.ASN_SET_MODE_AS_SET: "includelocalasasasset",
    AsnSetMode.ASN_SET_MODE_AS_SEQ_CONFEDERATION: "includelocalasasasseqconfederation",
    AsnSetMode.ASN_SET_MODE_AS_SET_CONFEDERATION: "includelocalasasassetconfederation",
    AsnSetMode.ASN_SET_MODE_PREPEND_TO_FIRST_SEGMENT: "prependlocalastofirstsegment",
}


class RouteTables(object):
    """Route table files to import into the BGP route properties of a network."""

    def __init__(self, format, ipv4="", ipv6=""):
        self.format = format
        self.ipv4 = ipv4
        self.ipv6 = ipv6

    def __eq__(self, other):
        if not isinstance(other, RouteTables):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return "RouteTables(format={!r}, ipv4={!r}, ipv6={!r})".format(
            self.format, self.ipv4, self.ipv6
        )


def parse_ip(s):
    """Returns (address, is_v6), or (None, False) if s is not an IP address."""
    try:
        ip = ipaddress.ip_address(s)
    except ValueError:
        return None, False
    return ip, ip.version == 6


def add_networks(intf, ifc):
    """
    Adds a network group to the device group of intf for every network of the
    interface config ifc.
    """
    intf.net_to_network_group = {}
    intf.net_to_route_tables = {}
    dg = intf.device_group

    has_isis_cfg = any(n.isis is not None for n in ifc.networks)
    has_bgp_cfg = any(n.bgp_attributes is not None for n in ifc.networks)
    has_bgp_v4_peer = any(
        node is not None and node.bgp_ipv4_peer for node in (intf.ipv4, intf.ipv4_loopback)
    )
    has_bgp_v6_peer = any(
        node is not None and node.bgp_ipv6_peer for node in (intf.ipv6, intf.ipv6_loopback)
    )

    for net in ifc.networks:
        ng = ix.TopologyNetworkGroup(name=net.name)
        if net.eth is not None:
            ng.mac_pools = [
                ix.TopologyMacPools(
                    mac=multivalue_str(net.eth.mac_address),
                    number_of_addresses_asy=multivalue_uint32(net.eth.count),
                    enable_vlans=multivalue_bool(net.eth.vlan_id != 0),
                    vlan=[ix.TopologyVlan(vlan_id=multivalue_uint32(net.eth.vlan_id))],
                )
            ]

        if net.imported_bgp_routes is not None:
            v4_pools, v6_pools = imported_bgp_route_pools(
                intf.net_to_route_tables, net, has_bgp_v4_peer, has_bgp_v6_peer
            )
        else:
            v4_pools = ipv4_pools(net, has_isis_cfg, has_bgp_cfg)
            v6_pools = ipv6_pools(net, has_isis_cfg, has_bgp_cfg)
        ng.ipv4_prefix_pools = v4_pools
        ng.ipv6_prefix_pools = v6_pools

        intf.net_to_network_group[net.name] = ng
        if dg.network_group is None:
            dg.network_group = []
        dg.network_group.append(ng)
        logging.debug("Added network group {!r} to interface {!r}".format(net.name, ifc.name))


def route_origin_str(origin):
    if origin == RouteOrigin.ROUTE_ORIGIN_UNSPECIFIED:
        raise UserError("route origin not specified")
    if origin == RouteOrigin.INTERNAL:
        return "internal"
    if origin == RouteOrigin.EXTERNAL:
        return "external"
    raise ValueError("unrecognized route origin {}".format(origin))


def isis_route_prop(ipr):
    return ix.TopologyIsisL3RouteProperty(
        metric=multivalue_uint32(ipr.metric),
        algorithm=multivalue_uint32(ipr.algorithm),
        route_origin=multivalue_str(route_origin_str(ipr.route_origin)),
        configure_sid_index_label=multivalue_bool(ipr.enable_sid_index_label),
        sid_index_label=multivalue_uint32(ipr.sid_index_label),
        r_flag=multivalue_bool(ipr.flag_readvertise),
        n_flag=multivalue_bool(ipr.flag_node_sid),
        p_flag=multivalue_bool(ipr.flag_no_php),
        e_flag=multivalue_bool(ipr.flag_explicit_null),
        v_flag=multivalue_bool(ipr.flag_value),
        l_flag=multivalue_bool(ipr.flag_local),
    )


def bgp_comms(communities):
    """Returns the community list nodes for communities, which may be None."""
    comms = []
    if communities is None:
        return comms
    well_known = (
        (communities.no_export, "noexport"),
        (communities.no_advertise, "noadvertised"),
        (communities.no_export_subconfed, "noexport_subconfed"),
        (communities.llgr_stale, "llgr_stale"),
        (communities.no_llgr, "no_llgr"),
    )
    for enabled, typ in well_known:
        if enabled:
            comms.append(ix.TopologyBgpCommunitiesList(type=multivalue_str(typ)))
    for comm in communities.private_communities:
        parts = comm.split(":", 1)
        if len(parts) != 2:
            raise UserError("invalid format for BGP community {!r}".format(comm))
        comms.append(
            ix.TopologyBgpCommunitiesList(
                as_number=multivalue_str(parts[0]),
                last_two_octets=multivalue_str(parts[1]),
                type=multivalue_str("manual"),
            )
        )
    return comms


def bgp_ext_comms(ext_comms):
    result = []
    for comm in ext_comms:
        if comm.color is None:
            raise ValueError("unrecognized extended community type {!r}".format(comm))
        co_bits = CO_BITS_TO_STR.get(comm.color.co_bits)
        if co_bits is None:
            raise UserError(
                "invalid extended community color bits value {}".format(comm.color.co_bits)
            )
        result.append(
            ix.TopologyBgpExtendedCommunitiesList(
                type=multivalue_str("opaque"),
                sub_type=multivalue_str("color"),
                color_co_bits=multivalue_str(co_bits),
                color_reserved_bits=multivalue_uint32(comm.color.reserved_bits),
                color_value=multivalue_uint32(comm.color.value),
            )
        )
    return result


def bgp_as_path_segments(segments):
    result = []
    for seg in segments:
        seg_type = AS_PATH_SEG_TYPE_TO_STR.get(seg.type)
        if seg_type is None:
            raise UserError("invalid AS path segment type {}".format(seg.type))
        result.append(
            ix.TopologyBgpAsPathSegmentList(
                enable_as_path_segment=multivalue_true(),
                segment_type=multivalue_str(seg_type),
                bgp_as_number_list=[
                    ix.TopologyBgpAsNumberList(
                        enable_as_number=multivalue_true(),
                        as_number=multivalue_uint32(asn),
                    )
                    for asn in seg.asns
                ],
            )
        )
    return result


def originator_id(orig_id):
    """Returns the (start, step) of an originator ID range; both must be IPv4."""
    ip, is_v6 = parse_ip(orig_id.start)
    if ip is None or is_v6:
        raise UserError(
            "originator ID start IP {!r} is not a valid IPv4 address".format(orig_id.start)
        )
    ip, is_v6 = parse_ip(orig_id.step)
    if ip is None or is_v6:
        raise UserError("originator ID step {!r} is not a valid IPv4 address".format(orig_id.step))
    return orig_id.start, orig_id.step


def _bgp_route_prop(brp, bgp):
    # Attributes shared by the IPv4 and IPv6 BGP route properties.
    brp.active = multivalue_bool(bgp.active)
    brp.enable_next_hop = multivalue_true()
    brp.enable_origin = multivalue_true()
    brp.enable_local_preference = multivalue_true()
    brp.local_preference = multivalue_uint32(bgp.local_preference)
    brp.no_of_large_communities = number_uint32(0)

    origin = ORIGIN_TO_STR.get(bgp.origin)
    if origin is None:
        raise UserError("invalid BGP route origin {}".format(bgp.origin))
    brp.origin = multivalue_str(origin)

    comms = bgp_comms(bgp.communities)
    brp.enable_community = multivalue_bool(len(comms) != 0)
    brp.no_of_communities = number_int(len(comms))
    brp.bgp_communities_list = comms

    ext_comms = bgp_ext_comms(bgp.extended_communities)
    brp.enable_extended_community = multivalue_bool(len(ext_comms) != 0)
    brp.no_of_external_communities = number_int(len(ext_comms))
    brp.bgp_extended_communities_list = ext_comms

    asn_set_mode = ASN_SET_MODE_TO_STR.get(bgp.asn_set_mode)
    if asn_set_mode is None:
        raise UserError("invalid BGP ASN set mode {}".format(bgp.asn_set_mode))
    brp.as_set_mode = multivalue_str(asn_set_mode)

    segs = bgp_as_path_segments(bgp.as_path_segments)
    brp.enable_as_path_segments = multivalue_bool(len(segs) != 0)
    brp.no_of_as_path_segments_per_route_range = number_int(len(segs))
    brp.bgp_as_path_segment_list = segs

    if bgp.originator_id is not None:
        brp.enable_originator_id = multivalue_true()
        start, step = originator_id(bgp.originator_id)
        brp.originator_id = multivalue_str_inc_counter(start, step)

    if bgp.cluster_ids:
        brp.enable_cluster = multivalue_true()
        brp.no_of_clusters = number_int(len(bgp.cluster_ids))
        brp.bgp_cluster_id_list = []
        for ci in bgp.cluster_ids:
            ip, is_v6 = parse_ip(ci)
            if ip is None or is_v6:
                raise UserError("cluster ID {!r} is not a valid IPv4 address".format(ci))
            brp.bgp_cluster_id_list.append(ix.TopologyBgpClusterIdList(cluster_id=multivalue_str(ci)))
    return brp


def bgp_v4_route_prop(bgp):
    brp = ix.TopologyBgpIpRouteProperty()
    if bgp.next_hop_address:
        brp.next_hop_type = multivalue_str("manual")
        brp.ipv4_next_hop = multivalue_str(bgp.next_hop_address)
    else:
        brp.next_hop_type = multivalue_str("sameaslocalip")
    return _bgp_route_prop(brp, bgp)


def bgp_v6_route_prop(bgp):
    brp = ix.TopologyBgpV6IpRouteProperty()
    nh = bgp.next_hop_address
    if nh:
        brp.next_hop_type = multivalue_str("manual")
        # IxNetwork takes an IPv4 next hop of an IPv6 route in ipv6NextHop as well.
        brp.ipv6_next_hop = multivalue_str(nh)
        _, is_v6 = parse_ip(nh)
        brp.advertise_nexthop_as_v4 = multivalue_bool(not is_v6)
        brp.next_hop_ip_type = multivalue_str("ipv6" if is_v6 else "ipv4")
    else:
        brp.next_hop_type = multivalue_str("sameaslocalip")
    return _bgp_route_prop(brp, bgp)


def parse_cidr(cidr, version):
    """Returns (address, prefix length) of cidr, which must be of the given IP version."""
    try:
        if "/" not in cidr:
            raise ValueError("missing prefix length")
        iface = ipaddress.ip_interface(cidr)
    except ValueError as e:
        raise UserError("could not parse {!r} as an IP address: {}".format(cidr, e)) from e
    if iface.version != version:
        raise UserError("{!r} is not an IPv{} address".format(cidr, version))
    return str(iface.ip), iface.network.prefixlen


def _pool_cidr(net, ip_range, version):
    if not ip_range.address_cidr:
        raise UserError(
            "need address defined for IP V{} network group {!r}".format(version, net.name)
        )
    return parse_cidr(ip_range.address_cidr, version)


def _isis_route_props(net, has_isis_cfg):
    if net.isis is not None:
        return [isis_route_prop(net.isis)]
    if has_isis_cfg:
        # Present on every network of the interface, or IxNetwork creates an active one.
        return [
            ix.TopologyIsisL3RouteProperty(
                name="{} IS-IS Inactive".format(net.name), active=multivalue_false()
            )
        ]
    return None


def ipv4_pools(net, has_isis_cfg, has_bgp_cfg):
    if net.ipv4 is None:
        return None
    address, mask = _pool_cidr(net, net.ipv4, 4)

    brps = None
    if net.bgp_attributes is not None:
        brps = [bgp_v4_route_prop(net.bgp_attributes)]
    elif has_bgp_cfg:
        brps = [
            ix.TopologyBgpIpRouteProperty(
                name="{} BGP Inactive".format(net.name), active=multivalue_false()
            )
        ]

    return [
        ix.TopologyIpv4PrefixPools(
            network_address=multivalue_str(address),
            prefix_length=multivalue_uint32(mask),
            number_of_addresses_asy=multivalue_uint32(net.ipv4.count),
            isis_l3_route_property=_isis_route_props(net, has_isis_cfg),
            bgp_ip_route_property=brps,
        )
    ]


def ipv6_pools(net, has_isis_cfg, has_bgp_cfg):
    if net.ipv6 is None:
        return None
    address, mask = _pool_cidr(net, net.ipv6, 6)

    brps = None
    if net.bgp_attributes is not None:
        brps = [bgp_v6_route_prop(net.bgp_attributes)]
    elif has_bgp_cfg:
        brps = [
            ix.TopologyBgpV6IpRouteProperty(
                name="{} BGP V6 Inactive".format(net.name), active=multivalue_false()
            )
        ]

    return [
        ix.TopologyIpv6PrefixPools(
            network_address=multivalue_str(address),
            prefix_length=multivalue_uint32(mask),
            number_of_addresses_asy=multivalue_uint32(net.ipv6.count),
            isis_l3_route_property=_isis_route_props(net, has_isis_cfg),
            bgp_v6_ip_route_property=brps,
        )
    ]


def imported_bgp_route_pools(net_to_route_tables, net, has_bgp_v4_peer, has_bgp_v6_peer):
    """
    Returns the (IPv4, IPv6) prefix pools that receive the routes imported for
    net, and records its route tables in net_to_route_tables.
    """
    imported = net.imported_bgp_routes
    if any(a is not None for a in (net.isis, net.bgp_attributes, net.ipv4, net.ipv6)):
        raise UserError(
            "cannot import routes for network group {!r} with any other routes/attributes configured".format(
                net.name
            )
        )
    if not has_bgp_v4_peer and not has_bgp_v6_peer:
        raise UserError(
            "cannot import routes for network group {!r} without associated BGP peer".format(
                net.name
            )
        )

    if imported.route_table_format == RouteTableFormat.ROUTE_TABLE_FORMAT_UNSPECIFIED:
        raise UserError("route table format not specified")
    if imported.route_table_format not in (
        RouteTableFormat.ROUTE_TABLE_FORMAT_CISCO,
        RouteTableFormat.ROUTE_TABLE_FORMAT_JUNIPER,
    ):
        raise ValueError(
            "unrecognized route table format {}".format(imported.route_table_format)
        )
    rts = RouteTables(
        RouteTableFormat(imported.route_table_format),
        ipv4=imported.ipv4_routes_path,
        ipv6=imported.ipv6_routes_path,
    )
    net_to_route_tables[net.name] = rts

    v4_pools = None
    v6_pools = None
    if rts.ipv4:
        pool = ix.TopologyIpv4PrefixPools()
        if has_bgp_v4_peer:
            pool.bgp_ip_route_property = [
                ix.TopologyBgpIpRouteProperty(
                    name="Imported IPv4 BGP Routes", active=multivalue_true()
                )
            ]
        if has_bgp_v6_peer:
            pool.bgp_v6_ip_route_property = [
                ix.TopologyBgpV6IpRouteProperty(
                    name="Imported IPv4 BGP V6 Routes", active=multivalue_true()
                )
            ]
        v4_pools = [pool]
    if rts.ipv6:
        pool = ix.TopologyIpv6PrefixPools()
        if has_bgp_v4_peer:
            pool.bgp_ip_route_property = [
                ix.TopologyBgpIpRouteProperty(
                    name="Imported IPv6 BGP Routes", active=multivalue_true()
                )
            ]
        if has_bgp_v6_peer:
            pool.bgp_v6_ip_route_property = [
                ix.TopologyBgpV6IpRouteProperty(
                    name="Imported IPv6 BGP V6 Routes", active=multivalue_true()
                )
            ]
        v6_pools = [pool]
    return v4_pools, v6_pools
