# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Line coverage hit maps and report formatters"""

from .errors import (
    ConfigurationError,
    FilterMisconfiguration,
    HitmapReportError,
    MalformedSample,
    SourceUnavailable,
    UnresolvableIdentifier,
)
from .filter import ReportFilter
from .formatter import (
    Formatter,
    LcovFormatter,
    PrettyPrintFormatter,
    Report,
    SkippedFile,
)
from .hitmap import (
    CoverageSample,
    HitMap,
    create_hitmap,
    merge_hitmaps,
    merge_into,
    parse_coverage,
    samples_from_json,
)
from .loader import FileLoader, Loader
from .resolver import FileRef, Resolver, SchemeRef, parse_script_id

__all__ = (
    "ConfigurationError",
    "CoverageSample",
    "FileLoader",
    "FileRef",
    "FilterMisconfiguration",
    "Formatter",
    "HitMap",
    "HitmapReportError",
    "LcovFormatter",
    "Loader",
    "MalformedSample",
    "PrettyPrintFormatter",
    "Report",
    "ReportFilter",
    "Resolver",
    "SchemeRef",
    "SkippedFile",
    "SourceUnavailable",
    "UnresolvableIdentifier",
    "create_hitmap",
    "merge_hitmaps",
    "merge_into",
    "parse_coverage",
    "parse_script_id",
    "samples_from_json",
)
