# Copyright 2020 Nokia
# Licensed under the Apache License 2.0.
# SPDX-License-Identifier: Apache-2.0

from setuptools import setup, find_packages
with open("requirements.txt", "r") as file:
    reqs = [req for req in file.read().splitlines() if (len(req) > 0 and not req.startswith("#"))]
with open("requirements-dev.txt", "r") as file:
    test_reqs = [req for req in file.read().splitlines() if (len(req) > 0 and not req.startswith("#"))]

setup(
    name="napalm-ondatra",
    version="0.1.0",
    packages=find_packages(include=["napalm_ondatra", "napalm_ondatra.*", "ondatra_ate", "ondatra_ate.*"]),
    description="NAPALM driver for OpenConfig gNMI telemetry, with an IxNetwork ATE config client",
    classifiers=[
        'Topic :: Utilities',
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Natural Language :: English",
        'Operating System :: POSIX :: Linux',
        'Operating System :: MacOS',
    ],
    python_requires=">=3.10",
    include_package_data=True,
    install_requires=reqs,
    extras_require={"test": test_reqs},
)
