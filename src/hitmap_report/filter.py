# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Selection of report files and the paths written for them"""

from __future__ import annotations

import os
from logging import getLogger
from typing import Iterable, Optional, Tuple

from .errors import FilterMisconfiguration
from .util import PathArg

LOG = getLogger(__name__)


def _absolute_prefix(prefix: str) -> str:
    # keep the trailing separator: 'lib/' must not match '/repo/library.dart'
    trailing = prefix.endswith(("/", os.sep))
    result = os.path.abspath(prefix)
    if trailing and not result.endswith(os.sep):
        result += os.sep
    return result


class ReportFilter:
    """Decide which resolved files are reported, and under which name.

    Attributes:
        report_on: Absolute path prefixes. Empty means report everything.
        base_path: Absolute directory that reported paths are relative to,
                   or None to report absolute paths.
    """

    def __init__(
        self,
        report_on: Optional[Iterable[str]] = None,
        base_path: Optional[PathArg] = None,
    ) -> None:
        self.report_on: Tuple[str, ...] = tuple(
            _absolute_prefix(str(prefix)) for prefix in (report_on or ())
        )
        if base_path:
            self.base_path: Optional[str] = os.path.abspath(base_path)
        else:
            self.base_path = None if base_path is None else str(base_path)

    def accepts(self, path: str) -> bool:
        """Check whether `path` (absolute) falls under one of the prefixes."""
        if not self.report_on:
            return True
        path = os.path.normpath(path)
        return any(path.startswith(prefix) for prefix in self.report_on)

    def relative_path(self, path: str) -> str:
        """Compute `path` relative to `base_path`.

        Raises:
            FilterMisconfiguration: if no relative path exists, eg. when the
                                    base path is empty or on another drive.
        """
        if self.base_path is None:
            raise FilterMisconfiguration(f"No base path to make '{path}' relative to")
        if not self.base_path:
            raise FilterMisconfiguration(f"Cannot make '{path}' relative to ''")
        try:
            return os.path.relpath(path, self.base_path)
        except ValueError as exc:
            raise FilterMisconfiguration(
                f"Cannot make '{path}' relative to '{self.base_path}': {exc}"
            ) from exc

    def display_path(self, path: str) -> str:
        """Path to write in a report for the absolute `path`."""
        if self.base_path is None:
            return path
        try:
            return self.relative_path(path)
        except FilterMisconfiguration as exc:
            LOG.warning("%s, using absolute path", exc)
            return path
