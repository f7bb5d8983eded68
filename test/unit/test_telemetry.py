# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Tests for the telemetry path structs."""
import pytest
from napalm.base.exceptions import CommandErrorException

from napalm_ondatra.exceptions import AwaitTimeoutError, TelemetryError, ValueNotPresentError
from napalm_ondatra.schema import AlarmSeverity, Component, Lldp
from napalm_ondatra.telemetry import DevicePath


@pytest.fixture
def dut(fake_client):
    return DevicePath(fake_client)


def test_path_strings(dut):
    assert str(dut) == "/"
    assert str(dut.lldp().hello_timer()) == "/lldp/state/hello-timer"
    assert (
        str(dut.component("Ethernet1").transceiver().channel(1).input_power().instant())
        == "/components/component[name=Ethernet1]/transceiver/physical-channels/channel[index=1]/state/input-power/instant"
    )
    assert dut.component_any().temperature().is_wildcard()
    assert not dut.component("CPU0").temperature().is_wildcard()


def test_leaf_get(dut):
    assert dut.lldp().hello_timer().get() == 30
    assert dut.lldp().system_name().get() == "dut"
    assert dut.lldp().counters().frame_in().get() == 1200


def test_leaf_lookup_carries_metadata(dut):
    qv = dut.component("CPU0").temperature().instant().lookup()
    assert qv.is_present()
    assert qv.val() == 45.5
    assert str(qv.metadata) == "/components/component[name=CPU0]/state/temperature/instant"
    assert qv.metadata.timestamp.year == 2020


def test_leaf_lookup_missing(dut):
    assert dut.lldp().chassis_id().lookup() is None
    with pytest.raises(ValueNotPresentError):
        dut.lldp().chassis_id().get()


def test_leaf_default_value(dut):
    # No update for eth1/state/enabled; the schema default applies.
    qv = dut.lldp().interface("eth1").enabled().lookup()
    assert qv.is_present()
    assert qv.val() is True
    assert str(qv.metadata) == "/lldp/interfaces/interface[name=eth1]/state/enabled"
    assert qv.metadata.timestamp is None
    # An explicit false is not replaced by the default.
    assert dut.lldp().interface("eth2").enabled().get() is False


def test_enum_leaf(dut):
    assert dut.component("CPU0").temperature().alarm_severity().get() == AlarmSeverity.MINOR
    assert dut.component("CPU0").type().get() == "CPU"


def test_wildcard_leaf_lookup(dut):
    qvs = dut.lldp().interface_any().counters().frame_in().lookup()
    assert [qv.val() for qv in qvs] == [100, 7]
    assert [qv.metadata.key("interface", "name") for qv in qvs] == ["eth1", "eth2"]


def test_wildcard_get(dut):
    assert dut.lldp().interface_any().counters().frame_in().get() == [100, 7]


def test_wildcard_lookup_no_match(dut):
    assert dut.component_any().subcomponent_any().name().lookup() == []


def test_container_lookup_from_json(dut):
    power = dut.component("Ethernet1").transceiver().channel(1).input_power().get()
    assert power.instant == -2.5
    assert power.avg == -2.4
    assert power.min == -3.0
    assert power.max == -2.0


def test_container_lookup_from_leaves(dut):
    temperature = dut.component("CPU0").temperature().get()
    assert temperature.instant == 45.5
    assert temperature.alarm_status is False
    assert temperature.alarm_severity == AlarmSeverity.MINOR
    assert temperature.avg is None


def test_wildcard_container_lookup(dut):
    qvs = dut.component_any().temperature().lookup()
    assert [qv.metadata.key("component", "name") for qv in qvs] == ["CPU0", "PSU1"]
    psu = qvs[1].val()
    assert psu.instant == 61.0
    assert psu.alarm_threshold == 60
    assert psu.alarm_severity == AlarmSeverity.CRITICAL


def test_keyed_list_container(dut):
    lldp = dut.lldp().get()
    assert isinstance(lldp, Lldp)
    assert sorted(lldp.interfaces) == ["eth1", "eth2"]
    assert lldp.interfaces["eth1"].name == "eth1"
    assert lldp.interfaces["eth2"].counters.frame_in == 7


def test_batch(dut):
    b = dut.new_batch()
    dut.lldp().batch(b)
    dut.component("CPU0").temperature().batch(b)
    device = b.get()
    assert device.lldp.hello_timer == 30
    assert isinstance(device.components["CPU0"], Component)
    assert device.components["CPU0"].temperature.instant == 45.5
    assert "PSU1" not in device.components


def test_batch_rejects_other_device(dut, make_client):
    other = DevicePath(make_client())
    b = dut.new_batch()
    with pytest.raises(TelemetryError):
        b.add_paths(other.lldp())
    with pytest.raises(TelemetryError):
        b.add_paths(dut)
    with pytest.raises(TelemetryError):
        b.lookup()


def test_await(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/lldp/state/hello-timer", "30")], False),
            ([], True),
            ([dp("/lldp/state/hello-timer", "60")], False),
            ([dp("/lldp/state/hello-timer", "90")], False),
        ]
    )
    dut = DevicePath(client)
    qv = dut.lldp().hello_timer().await_(5, 60)
    assert qv.val() == 60
    assert client.subscriptions[0].cancelled
    assert client.stream_queries[0][1] == 5


def test_await_timeout(make_client, dp):
    client = make_client(stream=[([dp("/lldp/state/hello-timer", "30")], False), ([], True)])
    dut = DevicePath(client)
    with pytest.raises(AwaitTimeoutError):
        dut.lldp().hello_timer().await_(1, 60)


def test_await_wildcard(dut):
    with pytest.raises(TelemetryError):
        dut.lldp().interface_any().enabled().await_(1, True)


def test_watch_container(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/components/component[name=CPU0]/state/temperature/instant", 45.5)], False),
            ([], True),
            ([dp("/components/component[name=CPU0]/state/temperature/instant", 55.0)], False),
        ]
    )
    dut = DevicePath(client)
    w = dut.component("CPU0").temperature().watch(5, lambda qv: qv.val().instant > 50)
    last, success = w.await_()
    assert success
    assert last.val().instant == 55.0


def test_watch_wildcard(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/lldp/interfaces/interface[name=eth1]/state/counters/frame-in", "1")], False),
            ([], True),
            ([dp("/lldp/interfaces/interface[name=eth2]/state/counters/frame-in", "5")], False),
        ]
    )
    dut = DevicePath(client)
    w = dut.lldp().interface_any().counters().frame_in().watch(
        5, lambda qv: qv.metadata.key("interface", "name") == "eth2"
    )
    last, success = w.await_()
    assert success
    assert last.val() == 5


def test_collect(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/lldp/state/hello-timer", "30")], False),
            ([], True),
            ([dp("/lldp/state/hello-timer", "60")], False),
        ]
    )
    dut = DevicePath(client)
    values = dut.lldp().hello_timer().collect(5).await_()
    assert [qv.val() for qv in values] == [30, 60]


def test_watch_error_is_raised(make_client, dp):
    client = make_client(
        stream=[([dp("/lldp/state/hello-timer", "30")], False), CommandErrorException("boom")]
    )
    dut = DevicePath(client)
    with pytest.raises(CommandErrorException):
        dut.lldp().hello_timer().await_(5, 60)
    assert client.subscriptions[0].cancelled


def test_conversion_error_cancels_watch(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/lldp/state/hello-timer", "-1")], False),
            ([], True),
            ([dp("/lldp/state/hello-timer", "5")], False),
        ]
    )
    dut = DevicePath(client)
    with pytest.raises(ValueError):
        dut.lldp().hello_timer().await_(5, 5)
    assert client.subscriptions[0].cancelled


def test_batch_watch(make_client, dp):
    client = make_client(
        stream=[
            ([dp("/lldp/state/hello-timer", "30")], False),
            ([], True),
            ([dp("/components/component[name=CPU0]/state/temperature/instant", 70.0)], False),
        ]
    )
    dut = DevicePath(client)
    b = dut.new_batch().add_paths(dut.lldp(), dut.component("CPU0"))

    def ready(qv):
        device = qv.val()
        cpu = device.components.get("CPU0")
        return device.lldp is not None and cpu is not None and cpu.temperature is not None

    last, success = b.watch(5, ready).await_()
    assert success
    assert last.val().lldp.hello_timer == 30
    assert last.val().components["CPU0"].temperature.instant == 70.0
