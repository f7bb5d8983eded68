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
IxNetwork config nodes for topologies, protocols and network groups.

See https://openixia.github.io/ixnetwork_openapi/ for the meaning of each
attribute; JSON keys follow the IxNetwork ResourceManager export format.
"""
from ondatra_ate.cfgnode import MULTIVALUE, NODES, NUMBER, REFS, Field, IxiaCfgNode


class TopologyBgpAsNumberList(IxiaCfgNode):
    _fields = (
        Field("enable_as_number", "enableASNumber", MULTIVALUE),
        Field("as_number", "asNumber", MULTIVALUE),
    )


class TopologyBgpAsPathSegmentList(IxiaCfgNode):
    _fields = (
        Field("enable_as_path_segment", "enableASPathSegment", MULTIVALUE),
        Field("segment_type", "segmentType", MULTIVALUE),
        Field("number_of_as_number_in_segment", "numberOfAsNumberInSegment", NUMBER),
        Field("bgp_as_number_list", "bgpAsNumberList", NODES, TopologyBgpAsNumberList),
    )


class TopologyBgpCommunitiesList(IxiaCfgNode):
    _fields = (
        Field("type", "type", MULTIVALUE),
        Field("as_number", "asNumber", MULTIVALUE),
        Field("last_two_octets", "lastTwoOctets", MULTIVALUE),
    )


class TopologyBgpExtendedCommunitiesList(IxiaCfgNode):
    _fields = (
        Field("type", "type", MULTIVALUE),
        Field("sub_type", "subType", MULTIVALUE),
        Field("color_co_bits", "colorCOBits", MULTIVALUE),
        Field("color_reserved_bits", "colorReservedBits", MULTIVALUE),
        Field("color_value", "colorValue", MULTIVALUE),
    )


class TopologyBgpClusterIdList(IxiaCfgNode):
    _fields = (Field("cluster_id", "clusterId", MULTIVALUE),)


_BGP_ROUTE_PROPERTY_FIELDS = (
    Field("name", "name"),
    Field("active", "active", MULTIVALUE),
    Field("enable_next_hop", "enableNextHop", MULTIVALUE),
    Field("next_hop_type", "nextHopType", MULTIVALUE),
    Field("enable_origin", "enableOrigin", MULTIVALUE),
    Field("origin", "origin", MULTIVALUE),
    Field("enable_local_preference", "enableLocalPreference", MULTIVALUE),
    Field("local_preference", "localPreference", MULTIVALUE),
    Field("as_set_mode", "asSetMode", MULTIVALUE),
    Field("enable_community", "enableCommunity", MULTIVALUE),
    Field("no_of_communities", "noOfCommunities", NUMBER),
    Field("bgp_communities_list", "bgpCommunitiesList", NODES, TopologyBgpCommunitiesList),
    Field("enable_extended_community", "enableExtendedCommunity", MULTIVALUE),
    Field("no_of_external_communities", "noOfExternalCommunities", NUMBER),
    Field(
        "bgp_extended_communities_list",
        "bgpExtendedCommunitiesList",
        NODES,
        TopologyBgpExtendedCommunitiesList,
    ),
    Field("no_of_large_communities", "noOfLargeCommunities", NUMBER),
    Field("enable_as_path_segments", "enableAsPathSegments", MULTIVALUE),
    Field(
        "no_of_as_path_segments_per_route_range",
        "noOfASPathSegmentsPerRouteRange",
        NUMBER,
    ),
    Field("bgp_as_path_segment_list", "bgpAsPathSegmentList", NODES, TopologyBgpAsPathSegmentList),
    Field("enable_originator_id", "enableOriginatorId", MULTIVALUE),
    Field("originator_id", "originatorId", MULTIVALUE),
    Field("enable_cluster", "enableCluster", MULTIVALUE),
    Field("no_of_clusters", "noOfClusters", NUMBER),
    Field("bgp_cluster_id_list", "bgpClusterIdList", NODES, TopologyBgpClusterIdList),
)


class TopologyBgpIpRouteProperty(IxiaCfgNode):
    _fields = _BGP_ROUTE_PROPERTY_FIELDS + (
        Field("ipv4_next_hop", "ipv4NextHop", MULTIVALUE),
    )


class TopologyBgpV6IpRouteProperty(IxiaCfgNode):
    _fields = _BGP_ROUTE_PROPERTY_FIELDS + (
        Field("ipv6_next_hop", "ipv6NextHop", MULTIVALUE),
        Field("advertise_nexthop_as_v4", "advertiseNexthopAsV4", MULTIVALUE),
        Field("next_hop_ip_type", "nextHopIPType", MULTIVALUE),
    )


class TopologyIsisL3RouteProperty(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("active", "active", MULTIVALUE),
        Field("metric", "metric", MULTIVALUE),
        Field("algorithm", "algorithm", MULTIVALUE),
        Field("route_origin", "routeOrigin", MULTIVALUE),
        Field("configure_sid_index_label", "configureSIDIndexLabel", MULTIVALUE),
        Field("sid_index_label", "sIDIndexLabel", MULTIVALUE),
        Field("r_flag", "rFlag", MULTIVALUE),
        Field("n_flag", "nFlag", MULTIVALUE),
        Field("p_flag", "pFlag", MULTIVALUE),
        Field("e_flag", "eFlag", MULTIVALUE),
        Field("v_flag", "vFlag", MULTIVALUE),
        Field("l_flag", "lFlag", MULTIVALUE),
    )


_PREFIX_POOL_FIELDS = (
    Field("name", "name"),
    Field("network_address", "networkAddress", MULTIVALUE),
    Field("prefix_length", "prefixLength", MULTIVALUE),
    Field("number_of_addresses_asy", "numberOfAddressesAsy", MULTIVALUE),
    Field("isis_l3_route_property", "isisL3RouteProperty", NODES, TopologyIsisL3RouteProperty),
    Field("bgp_ip_route_property", "bgpIPRouteProperty", NODES, TopologyBgpIpRouteProperty),
    Field("bgp_v6_ip_route_property", "bgpV6IPRouteProperty", NODES, TopologyBgpV6IpRouteProperty),
)


class TopologyIpv4PrefixPools(IxiaCfgNode):
    _fields = _PREFIX_POOL_FIELDS


class TopologyIpv6PrefixPools(IxiaCfgNode):
    _fields = _PREFIX_POOL_FIELDS


class TopologyVlan(IxiaCfgNode):
    _fields = (
        Field("vlan_id", "vlanId", MULTIVALUE),
        Field("priority", "priority", MULTIVALUE),
    )


class TopologyMacPools(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("mac", "mac", MULTIVALUE),
        Field("number_of_addresses_asy", "numberOfAddressesAsy", MULTIVALUE),
        Field("enable_vlans", "enableVlans", MULTIVALUE),
        Field("vlan", "vlan", NODES, TopologyVlan),
    )


class TopologyNetworkGroup(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("multiplier", "multiplier", NUMBER),
        Field("enabled", "enabled", MULTIVALUE),
        Field("mac_pools", "macPools", NODES, TopologyMacPools),
        Field("ipv4_prefix_pools", "ipv4PrefixPools", NODES, TopologyIpv4PrefixPools),
        Field("ipv6_prefix_pools", "ipv6PrefixPools", NODES, TopologyIpv6PrefixPools),
    )


_BGP_PEER_FIELDS = (
    Field("name", "name"),
    Field("active", "active", MULTIVALUE),
    Field("dut_ip", "dutIp", MULTIVALUE),
    Field("type", "type", MULTIVALUE),
    Field("local_as2_bytes", "localAs2Bytes", MULTIVALUE),
    Field("hold_timer", "holdTimer", MULTIVALUE),
    Field("keepalive_timer", "keepaliveTimer", MULTIVALUE),
)


class TopologyBgpIpv4Peer(IxiaCfgNode):
    _fields = _BGP_PEER_FIELDS


class TopologyBgpIpv6Peer(IxiaCfgNode):
    _fields = _BGP_PEER_FIELDS


class TopologyIpv4(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("address", "address", MULTIVALUE),
        Field("gateway_ip", "gatewayIp", MULTIVALUE),
        Field("prefix", "prefix", MULTIVALUE),
        Field("bgp_ipv4_peer", "bgpIpv4Peer", NODES, TopologyBgpIpv4Peer),
    )


class TopologyIpv6(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("address", "address", MULTIVALUE),
        Field("gateway_ip", "gatewayIp", MULTIVALUE),
        Field("prefix", "prefix", MULTIVALUE),
        Field("bgp_ipv6_peer", "bgpIpv6Peer", NODES, TopologyBgpIpv6Peer),
    )


class TopologyIpv4Loopback(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("address", "address", MULTIVALUE),
        Field("prefix", "prefix", MULTIVALUE),
        Field("bgp_ipv4_peer", "bgpIpv4Peer", NODES, TopologyBgpIpv4Peer),
    )


class TopologyIpv6Loopback(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("address", "address", MULTIVALUE),
        Field("prefix", "prefix", MULTIVALUE),
        Field("bgp_ipv6_peer", "bgpIpv6Peer", NODES, TopologyBgpIpv6Peer),
    )


class TopologyEthernet(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("mac", "mac", MULTIVALUE),
        Field("mtu", "mtu", MULTIVALUE),
        Field("enable_vlans", "enableVlans", MULTIVALUE),
        Field("vlan", "vlan", NODES, TopologyVlan),
        Field("ipv4", "ipv4", NODES, TopologyIpv4),
        Field("ipv6", "ipv6", NODES, TopologyIpv6),
    )


class TopologyDeviceGroup(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("multiplier", "multiplier", NUMBER),
        Field("enabled", "enabled", MULTIVALUE),
        Field("ethernet", "ethernet", NODES, TopologyEthernet),
        Field("ipv4_loopback", "ipv4Loopback", NODES, TopologyIpv4Loopback),
        Field("ipv6_loopback", "ipv6Loopback", NODES, TopologyIpv6Loopback),
        Field("network_group", "networkGroup", NODES, TopologyNetworkGroup),
    )


class Topology(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("vports", "vports", REFS),
        Field("device_group", "deviceGroup", NODES, TopologyDeviceGroup),
    )


class Vport(IxiaCfgNode):
    _fields = (
        Field("name", "name"),
        Field("location", "location"),
        Field("type", "type"),
    )


class Ixnetwork(IxiaCfgNode):
    """Root of an IxNetwork config."""

    _fields = (
        Field("vport", "vport", NODES, Vport),
        Field("topology", "topology", NODES, Topology),
    )

    def update_all_xpaths(self):
        """
        Sets the XPath of every node in the config from its position in the
        tree. XPaths that are already correct are left unchanged.
        """
        self._update_xpaths("/")
