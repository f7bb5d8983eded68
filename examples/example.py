# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0
"""
This is a simple example of how to use napalm-ondatra.
Point it at any device that serves OpenConfig platform and LLDP state over gNMI,
then uncomment the calls that you want to run and run this script:

python examples/example.py
"""

from napalm import get_network_driver

# using rich to pretty print the output
# feel free to remove it if you don't want to install it
from rich import print_json

driver = get_network_driver("ondatra")
optional_args = {
    # "gnmi_port": 57400,
    # "tls_ca": "/root/certs/RootCA.crt",
    "insecure": True
}
with driver("dut", "admin", "admin", optional_args=optional_args) as device:
    # print(device.is_alive())
    # print_json(data=device.get_optics())
    print_json(data=device.get_environment())

    lldp = device.telemetry.lldp()
    # print(lldp.system_name().get())
    # print(lldp.interface("ethernet-1/1").counters().frame_in().lookup())
    # Wait up to 30 seconds for LLDP to be enabled.
    print(lldp.enabled().await_(30, True))
    # print([qv.val() for qv in lldp.counters().frame_in().collect(10).await_()])
