# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the napalm driver getters."""
import pytest
from napalm import get_network_driver

from napalm_ondatra.driver import OndatraDriver


def test_driver_is_registered():
    assert get_network_driver("ondatra") is OndatraDriver


def test_is_alive(patched_driver):
    assert patched_driver.is_alive() == {"is_alive": True}


def test_get_environment(patched_driver):
    env = patched_driver.get_environment()
    assert env["temperature"] == {
        "CPU0": {"temperature": 45.5, "is_alert": False, "is_critical": False},
        "PSU1": {"temperature": 61.0, "is_alert": True, "is_critical": True},
    }
    assert env["fans"] == {}
    assert env["power"] == {}
    assert env["cpu"] == {}
    assert env["memory"] == {"available_ram": -1, "used_ram": -1}


def test_get_optics(patched_driver):
    optics = patched_driver.get_optics()
    channels = optics["Ethernet1"]["physical_channels"]["channel"]
    assert [c["index"] for c in channels] == [0, 1]
    assert channels[0]["state"]["input_power"] == {
        "instant": -1.1,
        "avg": -1.2,
        "min": -1.5,
        "max": -0.9,
    }
    assert channels[1]["state"]["input_power"]["instant"] == -2.5
    assert channels[1]["state"]["output_power"] == {
        "instant": -1.0,
        "avg": -1.0,
        "min": -1.0,
        "max": -1.0,
    }


def test_get_lldp_neighbors(patched_driver):
    with pytest.raises(NotImplementedError):
        patched_driver.get_lldp_neighbors()


def test_getter_errors_are_raised(patched_driver):
    class Broken(object):
        def subscribe_once(self, paths):
            raise RuntimeError("device unreachable")

        def close(self):
            pass

    patched_driver.device = Broken()
    with pytest.raises(RuntimeError):
        patched_driver.get_environment()


def test_telemetry_root(patched_driver):
    assert patched_driver.telemetry.lldp().system_name().get() == "dut"
