# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Coverage report formatters"""

from __future__ import annotations

import concurrent.futures as cf
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import SourceUnavailable, UnresolvableIdentifier
from .filter import ReportFilter
from .hitmap import HitMap
from .loader import Loader
from .resolver import Resolver
from .util import PathArg

LOG = getLogger(__name__)

# width of the count column in pretty-print output, widened for large counts
PRETTY_PRINT_WIDTH = 7


@dataclass(frozen=True)
class SkippedFile:
    """A script left out of a report.

    Attributes:
        script_id: Script identifier from the hit map.
        reason: `unresolved` or `unreadable`.
        detail: Human readable explanation.
    """

    script_id: str
    reason: str
    detail: str = ""


@dataclass
class Report:
    """Result of formatting a hit map.

    Attributes:
        text: Rendered report.
        skipped: Scripts that could not be reported.
    """

    text: str
    skipped: List[SkippedFile] = field(default_factory=list)


@dataclass(frozen=True)
class _ResolvedFile:
    script_id: str
    path: str
    display_path: str
    hits: Dict[int, int]


class Formatter(ABC):
    """Base class for report formatters.

    Attributes:
        resolver: Resolver used to map script identifiers to paths.
        filter: Selects reported files and computes their reported paths.
    """

    def __init__(
        self,
        resolver: Resolver,
        report_on: Optional[Iterable[str]] = None,
        base_path: Optional[PathArg] = None,
    ) -> None:
        """
        Arguments:
            resolver: Resolver for this report run.
            report_on: Path prefixes to report on (default: everything).
            base_path: Write paths relative to this directory.
        """
        self.resolver = resolver
        self.filter = ReportFilter(report_on, base_path)

    def _resolved_files(
        self, hitmap: HitMap, skipped: List[SkippedFile]
    ) -> Iterator[_ResolvedFile]:
        for script_id in sorted(hitmap):
            try:
                path = self.resolver.resolve(script_id)
            except UnresolvableIdentifier as exc:
                LOG.warning("Skipping %s", exc)
                skipped.append(SkippedFile(script_id, "unresolved", str(exc)))
                continue
            if not self.filter.accepts(path):
                LOG.debug("not reporting on %s", path)
                continue
            yield _ResolvedFile(
                script_id, path, self.filter.display_path(path), hitmap[script_id]
            )

    @abstractmethod
    def render(self, hitmap: HitMap) -> Report:
        """Format `hitmap`, keeping track of files that had to be skipped."""

    def format(self, hitmap: HitMap) -> str:
        """Format `hitmap` as report text."""
        return self.render(hitmap).text


class LcovFormatter(Formatter):
    """Write hit maps as LCOV tracefiles (line data only)"""

    def render(self, hitmap: HitMap) -> Report:
        skipped: List[SkippedFile] = []
        out = []
        for resolved in self._resolved_files(hitmap, skipped):
            hits = resolved.hits
            out.append(f"SF:{resolved.display_path}\n")
            for line in sorted(hits):
                out.append(f"DA:{line},{hits[line]}\n")
            out.append(f"LF:{len(hits)}\n")
            out.append(f"LH:{sum(1 for count in hits.values() if count > 0)}\n")
            out.append("end_of_record\n")
        return Report("".join(out), skipped)


class PrettyPrintFormatter(Formatter):
    """Write each reported file's source annotated with per-line hit counts.

    Lines recorded with a count are prefixed with it (`0` for lines that were
    never run), other lines get a blank column of the same width.
    """

    def __init__(
        self,
        resolver: Resolver,
        loader: Loader,
        report_on: Optional[Iterable[str]] = None,
        base_path: Optional[PathArg] = None,
        workers: int = 1,
    ) -> None:
        """
        Arguments:
            resolver: Resolver for this report run.
            loader: Source loader.
            report_on: Path prefixes to report on (default: everything).
            base_path: Write paths relative to this directory.
            workers: Number of sources to load in parallel.
        """
        super().__init__(resolver, report_on=report_on, base_path=base_path)
        self.loader = loader
        self.workers = max(1, workers)

    def _load(
        self, resolved: _ResolvedFile
    ) -> Tuple[_ResolvedFile, Optional[List[str]], Optional[SourceUnavailable]]:
        try:
            return resolved, self.loader.load(resolved.path), None
        except SourceUnavailable as exc:
            return resolved, None, exc

    @staticmethod
    def annotate(hits: Dict[int, int], lines: List[str]) -> Iterator[str]:
        """Prefix each source line with its hit count column."""
        width = max([PRETTY_PRINT_WIDTH] + [len(str(count)) for count in hits.values()])
        blank = " " * width
        for lineno, source in enumerate(lines, start=1):
            count = hits.get(lineno)
            prefix = blank if count is None else str(count).rjust(width)
            yield f"{prefix}|{source}\n"

    def render(self, hitmap: HitMap) -> Report:
        skipped: List[SkippedFile] = []
        files = list(self._resolved_files(hitmap, skipped))
        if self.workers > 1 and len(files) > 1:
            with cf.ThreadPoolExecutor(max_workers=self.workers) as pool:
                loaded = list(pool.map(self._load, files))
        else:
            loaded = [self._load(resolved) for resolved in files]

        out = []
        for resolved, lines, error in loaded:
            if lines is None:
                LOG.warning("Skipping %s", error)
                skipped.append(
                    SkippedFile(resolved.script_id, "unreadable", str(error))
                )
                continue
            out.append(f"{resolved.display_path}\n")
            out.extend(self.annotate(resolved.hits, lines))
        return Report("".join(out), skipped)
