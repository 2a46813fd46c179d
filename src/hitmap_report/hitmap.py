# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Hit map construction and merging.

A hit map is a plain `dict` keyed by script identifier, holding a `dict` of
line number to hit count. A line recorded with count 0 is executable but was
never run; a line missing from the map is not executable at all.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from jsonschema import ValidationError

from .errors import MalformedSample
from .util import PathArg, validate_schema_by_name

LOG = getLogger(__name__)

HitMap = Dict[str, Dict[int, int]]


@dataclass
class CoverageSample:
    """Hits reported for one script by one collection pass.

    Attributes:
        script_id: Opaque script identifier (path or `scheme:tail` URI).
        hits: (line, count) observations. Lines are 1-based and may repeat.
    """

    script_id: str
    hits: Iterable[Tuple[int, int]] = field(default_factory=list)


def _check_hits(script_id: str, hits: List[Tuple[int, int]]) -> None:
    for line, count in hits:
        if line < 0 or count < 0:
            raise MalformedSample(
                f"{script_id}: negative hit entry (line={line}, count={count})"
            )


def create_hitmap(samples: Iterable[CoverageSample]) -> HitMap:
    """Build a hit map from raw coverage samples.

    Counts for a (script, line) pair seen more than once are summed.

    Arguments:
        samples: Coverage samples, in collection order.

    Returns:
        New hit map.

    Raises:
        MalformedSample: if any sample has a negative line or count.
    """
    # hits may be a one-shot iterable, read each once
    checked = [(sample.script_id, list(sample.hits)) for sample in samples]
    for script_id, hits in checked:
        _check_hits(script_id, hits)

    result: HitMap = {}
    for script_id, hits in checked:
        lines = result.setdefault(script_id, {})
        for line, count in hits:
            lines[line] = lines.get(line, 0) + count
    return result


def merge_into(target: HitMap, other: HitMap) -> HitMap:
    """Merge `other` into `target` in place, summing shared lines.

    `other` is checked before `target` is modified, so a failed merge leaves
    `target` unchanged.

    Returns:
        `target`
    """
    for script_id, lines in other.items():
        for line, count in lines.items():
            if line < 0 or count < 0:
                raise MalformedSample(
                    f"{script_id}: negative hit entry (line={line}, count={count})"
                )
    for script_id, lines in other.items():
        merged = target.setdefault(script_id, {})
        for line, count in lines.items():
            merged[line] = merged.get(line, 0) + count
    return target


def merge_hitmaps(first: HitMap, second: HitMap) -> HitMap:
    """Merge two hit maps into a new one. Neither input is modified."""
    result: HitMap = {script_id: dict(lines) for script_id, lines in first.items()}
    return merge_into(result, second)


def _pairs(script_id: str, flat: List[int]) -> Iterator[Tuple[int, int]]:
    if len(flat) % 2:
        raise MalformedSample(f"{script_id}: odd number of values in hits list")
    return zip(flat[::2], flat[1::2])


def samples_from_json(data: Any) -> List[CoverageSample]:
    """Convert a VM coverage dump into coverage samples.

    The dump is either `{"type": "CodeCoverage", "coverage": [...]}` or the
    bare `coverage` list. Each entry holds a `source` script identifier and a
    flat `hits` list alternating line and count. Entries without a `source`
    are ignored.

    Raises:
        MalformedSample: if the dump does not match the `Coverage` schema.
    """
    try:
        validate_schema_by_name(instance=data, name="Coverage")
    except ValidationError as exc:
        raise MalformedSample(f"Invalid coverage data: {exc.message}") from exc

    entries = data["coverage"] if isinstance(data, dict) else data
    samples = []
    for entry in entries:
        source = entry.get("source")
        if source is None:
            LOG.debug("ignoring coverage entry without source")
            continue
        samples.append(CoverageSample(source, list(_pairs(source, entry["hits"]))))
    return samples


def find_coverage_files(path: PathArg) -> List[Path]:
    """List coverage dumps at `path`.

    A file is returned as-is; a directory is searched recursively for `*.json`.
    """
    path = Path(path)
    if path.is_dir():
        return sorted(found for found in path.rglob("*.json") if found.is_file())
    return [path]


def parse_coverage(paths: Iterable[PathArg]) -> HitMap:
    """Load coverage dumps from disk and merge them into a single hit map.

    Arguments:
        paths: JSON coverage dumps, one per collection pass.

    Returns:
        Merged hit map.
    """
    result: HitMap = {}
    for path in paths:
        LOG.debug("loading coverage from %s", path)
        with open(path, encoding="utf-8") as fd:
            try:
                data = json.load(fd)
            except ValueError as exc:
                raise MalformedSample(f"{path}: invalid JSON: {exc}") from exc
        merge_into(result, create_hitmap(samples_from_json(data)))
    LOG.info("Loaded coverage for %d scripts", len(result))
    return result
