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
Napalm driver backed by OpenConfig gNMI telemetry.

Read https://napalm.readthedocs.io for more information.
"""
import logging

from napalm.base import NetworkDriver

from napalm_ondatra.gnmi import GNMIClient
from napalm_ondatra.schema import AlarmSeverity
from napalm_ondatra.telemetry import DevicePath


class OndatraDriver(NetworkDriver):
    """
    Napalm driver for OpenConfig telemetry over gNMI.

    The supported LLDP schema carries counters and timers only, so
    get_lldp_neighbors is left to the NetworkDriver default.
    """

    def __init__(self, hostname, username, password, timeout=60, optional_args=None):
        """Constructor."""
        self.hostname = hostname
        self.username = username
        self.password = password
        self.timeout = timeout

        self.device = GNMIClient(
            hostname, username, password, timeout=timeout, optional_args=optional_args
        )

    def open(self):
        self.device.open()

    def close(self):
        self.device.close()

    @property
    def telemetry(self):
        return DevicePath(self.device)

    def is_alive(self):
        return {"is_alive": self.device.is_alive()}

    def get_environment(self):
        """
            Returns a dictionary where:

                fans is a dictionary of dictionaries where the key is the location and the values:
                    status (True/False) - True if it's ok, false if it's broken
                temperature is a dict of dictionaries where the key is the location and the values:
                    temperature (float) - Temperature in celsius the sensor is reporting.
                    is_alert (True/False) - True if the temperature is above the alert threshold
                    is_critical (True/False) - True if the temp is above the critical threshold
                power is a dictionary of dictionaries where the key is the PSU id and the values:
                    status (True/False) - True if it's ok, false if it's broken
                    capacity (float) - Capacity in W that the power supply can support
                    output (float) - Watts drawn by the system
                cpu is a dictionary of dictionaries where the key is the ID and the values
                    %usage
                memory is a dictionary with:
                    available_ram (int) - Total amount of RAM installed in the device
                    used_ram (int) - RAM in use in the device

            Only temperatures are exported by the supported schema; the other
            sections are left empty.
        """
        environment_data = {
            "fans": {},
            "power": {},
            "temperature": {},
            "memory": {"available_ram": -1, "used_ram": -1},
            "cpu": {},
        }
        try:
            temperatures = self.telemetry.component_any().temperature().lookup()
        except Exception as e:
            logging.error("Error occurred in get_environment : {}".format(e))
            raise

        for qv in temperatures:
            name = qv.metadata.key("component", "name")
            temperature = qv.val()
            environment_data["temperature"][name] = {
                "temperature": temperature.instant if temperature.instant is not None else -1.0,
                "is_alert": bool(temperature.alarm_status),
                "is_critical": temperature.alarm_severity == AlarmSeverity.CRITICAL,
            }
        return environment_data

    def get_optics(self):
        """
        :return: Fetches the input power on the transceiver channels installed on the device (in dBm),
        and returns a view that conforms with the openconfig model openconfig-platform-transceiver.yang
        """
        try:
            powers = (
                self.telemetry.component_any().transceiver().channel_any().input_power().lookup()
            )
        except Exception as e:
            logging.error("Error occurred in get_optics : {}".format(e))
            raise

        unsupported = {"instant": -1.0, "avg": -1.0, "min": -1.0, "max": -1.0}
        optics = {}
        for qv in powers:
            name = qv.metadata.key("component", "name")
            index = qv.metadata.key("channel", "index")
            power = qv.val()
            channels = optics.setdefault(name, {"physical_channels": {"channel": []}})
            channels["physical_channels"]["channel"].append(
                {
                    "index": int(index),
                    "state": {
                        "input_power": {
                            "instant": _or_unset(power.instant),
                            "avg": _or_unset(power.avg),
                            "min": _or_unset(power.min),
                            "max": _or_unset(power.max),
                        },
                        "output_power": dict(unsupported),
                        "laser_bias_current": dict(unsupported),
                    },
                }
            )
        for channels in optics.values():
            channels["physical_channels"]["channel"].sort(key=lambda c: c["index"])
        return optics


def _or_unset(value):
    return -1.0 if value is None else value
