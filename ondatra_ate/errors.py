# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""Exceptions raised by the ATE config layer."""


class UserError(Exception):
    """An error caused by invalid test input rather than by the ATE."""


class IxNetworkError(Exception):
    """The IxNetwork REST API rejected a request or an operation failed."""


class IxConfigError(Exception):
    """The config client could not marshal, unmarshal or resolve a node."""
