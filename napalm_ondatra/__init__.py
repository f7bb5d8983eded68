# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""napalm-ondatra package."""
from napalm_ondatra.driver import OndatraDriver
from napalm_ondatra.gnmi import GNMIClient
from napalm_ondatra.telemetry import DevicePath

__all__ = ("OndatraDriver", "GNMIClient", "DevicePath")
