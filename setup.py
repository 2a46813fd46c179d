#!/usr/bin/env python
# coding=utf-8
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""setup.py for hitmap-report"""
from setuptools import find_packages, setup

setup(
    name="hitmap-report",
    version="0.1.0",
    description="Aggregate per-line hit counts and write LCOV/annotated reports",
    license="MPL-2.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"hitmap_report": ["schemas/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "jsonschema>=4.18",
        "pyyaml",
        "referencing",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "format-coverage = hitmap_report.cli:main",
        ],
    },
)
