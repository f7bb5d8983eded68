# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the telemetry accessors."""


class TelemetryError(Exception):
    """Base class for telemetry accessor failures."""


class ValueNotPresentError(TelemetryError):
    """Raised when a required telemetry value was not received."""


class AwaitTimeoutError(TelemetryError):
    """Raised when an awaited value is not observed before the timeout."""
