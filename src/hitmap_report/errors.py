# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Exceptions raised while building and formatting hit maps"""


class HitmapReportError(Exception):
    """Base class for all hitmap-report errors"""


class MalformedSample(HitmapReportError):
    """Coverage sample violates the collection protocol (negative line or count,
    unparseable hits list). Never skipped: aggregated counts would be wrong."""


class UnresolvableIdentifier(HitmapReportError):
    """Script identifier has no matching package root"""

    def __init__(self, script_id: str, reason: str = "no package root") -> None:
        super().__init__(f"Cannot resolve '{script_id}': {reason}")
        self.script_id = script_id


class SourceUnavailable(HitmapReportError):
    """Source file for a resolved script could not be read"""

    def __init__(self, path: str, reason: str = "") -> None:
        msg = f"Cannot read source '{path}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.path = path


class FilterMisconfiguration(HitmapReportError):
    """Base path cannot be used to relativize a report path"""


class ConfigurationError(HitmapReportError):
    """Error in report configuration or package table"""
