# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Tests for building and pushing the IxNetwork topology."""
import pytest

from ondatra_ate import IxATE
from ondatra_ate.ixconfig import Client
from ondatra_ate.errors import IxConfigError, UserError
from ondatra_ate.topology import (
    BgpAttributes,
    BgpPeer,
    BgpSessionType,
    InterfaceConfig,
    IpRange,
    Ipv4Config,
    Ipv6Config,
    Network,
)


@pytest.fixture
def ate(ix_session):
    return IxATE(Client(ix_session))


def _port1(**kwargs):
    return InterfaceConfig(
        name="port1",
        port="192.0.2.100;1;1",
        mac_address="02:00:00:00:00:01",
        mtu=9000,
        ipv4=Ipv4Config(address_cidr="192.0.2.1/30", default_gateway="192.0.2.2"),
        **kwargs
    )


def test_add_interface(ate):
    ate.add_interface(_port1())
    intf = ate.intfs["port1"]

    assert intf.vport.location == "192.0.2.100;1;1"
    assert intf.topology.name == "port1 Topology"
    assert intf.topology.vports == [intf.vport]
    assert intf.device_group.name == "port1 Device Group"
    assert intf.device_group.multiplier == 1
    assert intf.ethernet.name == "port1 Ethernet"
    assert intf.ethernet.mtu.single_value.value == "9000"
    assert intf.ipv4.name == "port1 IPv4"
    assert intf.ipv4.address.single_value.value == "192.0.2.1"
    assert intf.ipv4.prefix.single_value.value == "30"
    assert intf.ipv4.gateway_ip.single_value.value == "192.0.2.2"
    assert intf.ipv6 is None
    assert ate.cfg.vport[0] is intf.vport
    assert ate.cfg.topology[0] is intf.topology


def test_duplicate_interface(ate):
    ate.add_interface(_port1())
    with pytest.raises(UserError):
        ate.add_interface(_port1())


@pytest.mark.parametrize(
    "ifc",
    [
        InterfaceConfig(name="p", ipv4=Ipv4Config(address_cidr="192.0.2.1")),
        InterfaceConfig(name="p", ipv4=Ipv4Config(address_cidr="2001:db8::1/64")),
        InterfaceConfig(name="p", ipv6=Ipv6Config(address_cidr="2001:db8::zz/64")),
        InterfaceConfig(name="p", ipv4_loopback_cidr="10.0.0.1"),
    ],
    ids=["no prefix length", "wrong family", "invalid address", "loopback without prefix"],
)
def test_invalid_addresses(ate, ifc):
    with pytest.raises(UserError):
        ate.add_interface(ifc)
    assert ate.intfs == {}


def test_bgp_peers(ate):
    ate.add_interface(
        InterfaceConfig(
            name="port1",
            ipv4=Ipv4Config(address_cidr="192.0.2.1/30"),
            ipv6=Ipv6Config(address_cidr="2001:db8::1/126"),
            ipv4_loopback_cidr="10.0.0.1/32",
            bgp_peers=[
                BgpPeer(peer_address="192.0.2.2", local_asn=65001, hold_timer_sec=90),
                BgpPeer(
                    name="ibgp",
                    peer_address="10.0.0.2",
                    local_asn=65001,
                    type=BgpSessionType.INTERNAL,
                    on_loopback=True,
                ),
                BgpPeer(peer_address="2001:db8::2", local_asn=65001, active=False),
            ],
        )
    )
    intf = ate.intfs["port1"]

    peer = intf.ipv4.bgp_ipv4_peer[0]
    assert peer.name == "BGP Peer 192.0.2.2"
    assert peer.dut_ip.single_value.value == "192.0.2.2"
    assert peer.type.single_value.value == "external"
    assert peer.local_as2_bytes.single_value.value == "65001"
    assert peer.hold_timer.single_value.value == "90"
    assert peer.keepalive_timer is None

    lo_peer = intf.ipv4_loopback.bgp_ipv4_peer[0]
    assert lo_peer.name == "ibgp"
    assert lo_peer.type.single_value.value == "internal"
    assert intf.ipv4_loopback.name == "port1 IPv4 Loopback"

    v6_peer = intf.ipv6.bgp_ipv6_peer[0]
    assert v6_peer.active.single_value.value == "false"


@pytest.mark.parametrize(
    "peer",
    [
        BgpPeer(peer_address="192.0.2.2", on_loopback=True),
        BgpPeer(peer_address="2001:db8::2"),
        BgpPeer(peer_address="peer"),
    ],
    ids=["no loopback", "no ipv6 address", "not an address"],
)
def test_bgp_peer_without_address(ate, peer):
    with pytest.raises(UserError):
        ate.add_interface(_port1(bgp_peers=[peer]))


def test_push_topology(ate, ix_session):
    ate.add_interface(_port1())
    ate.add_interface(InterfaceConfig(name="port2", ipv6=Ipv6Config(address_cidr="2001:db8::1/64")))
    ate.push_topology()

    pushed, overwrite = ix_session.imports[0]
    assert overwrite
    assert [v["name"] for v in pushed["vport"]] == ["port1", "port2"]
    assert pushed["topology"][1]["vports"] == ["/vport[2]"]
    assert pushed["topology"][1]["xpath"] == "/topology[2]"
    eth = pushed["topology"][0]["deviceGroup"][0]["ethernet"][0]
    assert eth["mac"]["singleValue"]["value"] == "02:00:00:00:00:01"
    assert eth["ipv4"][0]["xpath"] == "/topology[1]/deviceGroup[1]/ethernet[1]/ipv4[1]"


def test_network_group_ids(ate, ix_session):
    ate.add_interface(
        _port1(
            networks=[
                Network(
                    name="net1",
                    ipv4=IpRange(address_cidr="198.51.100.0/24", count=1),
                    bgp_attributes=BgpAttributes(active=True),
                ),
                Network(name="net2", ipv4=IpRange(address_cidr="203.0.113.0/24", count=1)),
            ]
        )
    )
    ate.push_topology()

    with pytest.raises(IxConfigError):
        ate.network_group_id("port1", "net1")
    ate.update_network_group_ids()
    assert ix_session.queries == [
        (
            "/topology[1]/deviceGroup[1]/networkGroup[1]",
            "/topology[1]/deviceGroup[1]/networkGroup[2]",
        )
    ]
    assert ate.network_group_id("port1", "net1") == "/api/v1/sessions/1/ixnetwork/id/0"
    assert ate.network_group_id("port1", "net2") == "/api/v1/sessions/1/ixnetwork/id/1"

    with pytest.raises(UserError):
        ate.network_group_id("port9", "net1")
    with pytest.raises(UserError):
        ate.network_group_id("port1", "net9")
