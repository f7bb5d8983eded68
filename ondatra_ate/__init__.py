# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

"""IxNetwork ATE config client and topology builder."""
from ondatra_ate.ate import IxATE
from ondatra_ate.ixconfig import Client
from ondatra_ate.ixweb import Session

__all__ = ("IxATE", "Client", "Session")
