# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0
from ondatra_ate import Client, IxATE, Session
from ondatra_ate.topology import (
    BgpAttributes,
    BgpCommunities,
    BgpPeer,
    InterfaceConfig,
    IpRange,
    Ipv4Config,
    Network,
)

optional_args = {
    "rest_port": 443,
    "session_id": 1,
    "tls_ca": "/root/certs/ixweb.crt",
    # "insecure": True,
    # "api_key": "...",
}
session = Session("ixweb", "admin", "admin", 60, optional_args)
session.open()

ate = IxATE(Client(session))
ate.add_interface(
    InterfaceConfig(
        name="port1",
        port="192.0.2.100;1;1",
        mac_address="02:00:00:00:00:01",
        ipv4=Ipv4Config(address_cidr="192.0.2.1/30", default_gateway="192.0.2.2"),
        bgp_peers=[BgpPeer(peer_address="192.0.2.2", local_asn=65001)],
        networks=[
            Network(
                name="port1 routes",
                ipv4=IpRange(address_cidr="198.51.100.0/24", count=100),
                bgp_attributes=BgpAttributes(
                    active=True,
                    local_preference=100,
                    communities=BgpCommunities(private_communities=["65001:100"]),
                ),
            )
        ],
    )
)
ate.push_topology()
ate.update_network_group_ids()
print(ate.network_group_id("port1", "port1 routes"))
#print(ate.client.diff_last_imported(ate.cfg))
#print(ate.client.export_config().to_dict())

session.close()
