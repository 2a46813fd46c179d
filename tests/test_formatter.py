# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Tests for LCOV and pretty-print formatters"""

import os
import re
from copy import deepcopy
from logging import WARNING

import pytest

from hitmap_report.errors import SourceUnavailable
from hitmap_report.formatter import (
    LcovFormatter,
    PrettyPrintFormatter,
    SkippedFile,
)
from hitmap_report.loader import FileLoader, Loader
from hitmap_report.resolver import Resolver


class FakeLoader(Loader):
    """Serve sources from memory"""

    def __init__(self, sources):
        self.sources = sources
        self.loaded = []

    def load(self, path):
        self.loaded.append(path)
        if path not in self.sources:
            raise SourceUnavailable(path, "not found")
        return self.sources[path]


@pytest.fixture
def resolver(project):
    return Resolver.from_packages_file(project / ".packages")


def test_lcov_format(project, project_hitmap, resolver):
    """test LCOV records for every resolvable script"""
    util = project / "lib" / "src" / "util.dart"
    app = project / "test" / "test_app.dart"
    report = LcovFormatter(resolver).render(project_hitmap)
    assert report.text == (
        f"SF:{app}\n"
        "DA:1,1\n"
        "DA:2,1\n"
        "LF:2\n"
        "LH:2\n"
        "end_of_record\n"
        f"SF:{util}\n"
        "DA:1,1\n"
        "DA:2,3\n"
        "DA:5,1\n"
        "DA:6,0\n"
        "LF:4\n"
        "LH:3\n"
        "end_of_record\n"
    )
    assert [(skip.script_id, skip.reason) for skip in report.skipped] == [
        ("dart:core/list.dart", "unresolved")
    ]
    assert resolver.failed == {"dart:core/list.dart"}


def test_lcov_single_file(tmp_path):
    """test the exact record written for a single file"""
    path = str(tmp_path / "fileA.dart")
    result = LcovFormatter(Resolver()).format({path: {11: 0, 10: 2}})
    assert result.splitlines() == [
        f"SF:{path}",
        "DA:10,2",
        "DA:11,0",
        "LF:2",
        "LH:1",
        "end_of_record",
    ]


def test_lcov_empty(resolver):
    """test that an empty hit map gives an empty report"""
    assert LcovFormatter(resolver).format({}) == ""


@pytest.mark.parametrize(
    "report_on, has_lib, has_test",
    [
        (None, True, True),
        (["lib/", "test/"], True, True),
        (["lib/"], True, False),
        (["test/"], False, True),
        (["bin/"], False, False),
    ],
)
def test_lcov_report_on(
    project, project_hitmap, resolver, report_on, has_lib, has_test
):
    """test that reportOn restricts the files in the report"""
    result = LcovFormatter(resolver, report_on=report_on).format(project_hitmap)
    assert (f"SF:{project / 'lib' / 'src' / 'util.dart'}\n" in result) == has_lib
    assert (f"SF:{project / 'test' / 'test_app.dart'}\n" in result) == has_test


def test_lcov_base_path(project, project_hitmap, resolver):
    """test that paths are written relative to basePath"""
    result = LcovFormatter(resolver, base_path=project / "lib").format(project_hitmap)
    assert str(project / "lib" / "src" / "util.dart") not in result
    assert f"SF:{os.path.join('src', 'util.dart')}\n" in result
    assert f"SF:{os.path.join('..', 'test', 'test_app.dart')}\n" in result


def test_formatters_leave_hitmap_alone(project, project_hitmap, resolver):
    """test that formatting doesn't modify the hit map"""
    before = deepcopy(project_hitmap)
    LcovFormatter(resolver).format(project_hitmap)
    PrettyPrintFormatter(resolver, FileLoader()).format(project_hitmap)
    assert project_hitmap == before


def test_pretty_print_format(project, project_hitmap, resolver):
    """test annotated sources for every resolvable script"""
    util = project / "lib" / "src" / "util.dart"
    app = project / "test" / "test_app.dart"
    report = PrettyPrintFormatter(resolver, FileLoader()).render(project_hitmap)
    assert report.text == (
        f"{app}\n"
        "      1|void main() {\n"
        "      1|  print(add(1, 2));\n"
        "       |}\n"
        f"{util}\n"
        "      1|int add(int a, int b) {\n"
        "      3|  return a + b;\n"
        "       |}\n"
        "       |\n"
        "      1|int sub(int a, int b) {\n"
        "      0|  return a - b;\n"
        "       |}\n"
    )
    assert "      0|  return a - b;" in report.text
    match = re.search(r"\s+(\d+)\|  return a \+ b;", report.text)
    assert match is not None
    assert int(match.group(1)) >= 1
    assert report.skipped == [
        SkippedFile(
            "dart:core/list.dart",
            "unresolved",
            "Cannot resolve 'dart:core/list.dart': unknown scheme 'dart'",
        )
    ]


def test_pretty_print_two_lines(tmp_path):
    """test counted and unrecorded lines keep the source verbatim"""
    path = str(tmp_path / "two.dart")
    loader = FakeLoader({path: ["  a = 1;\t", "\tb = 2;  "]})
    result = PrettyPrintFormatter(Resolver(), loader).format({path: {1: 3}})
    assert result == f"{path}\n      3|  a = 1;\t\n       |\tb = 2;  \n"


def test_pretty_print_wide_counts(tmp_path):
    """test that the count column grows to fit the largest count"""
    path = str(tmp_path / "hot.dart")
    loader = FakeLoader({path: ["loop();", "done();", "// end"]})
    result = PrettyPrintFormatter(Resolver(), loader).format(
        {path: {1: 123456789, 2: 0}}
    )
    assert result.splitlines() == [
        path,
        "123456789|loop();",
        "        0|done();",
        "         |// end",
    ]


def test_pretty_print_unreadable(tmp_path, caplog):
    """test that unreadable sources are skipped without failing the report"""
    missing = str(tmp_path / "missing.dart")
    present = str(tmp_path / "present.dart")
    loader = FakeLoader({present: ["x();"]})
    with caplog.at_level(WARNING):
        report = PrettyPrintFormatter(Resolver(), loader).render(
            {missing: {1: 1}, present: {1: 2}}
        )
    assert report.text == f"{present}\n      2|x();\n"
    assert [(skip.script_id, skip.reason) for skip in report.skipped] == [
        (missing, "unreadable")
    ]
    assert "Skipping" in caplog.text


def test_pretty_print_report_on(project, project_hitmap, resolver):
    """test that pretty-print honours reportOn without loading excluded files"""
    loader = FakeLoader(
        {str(project / "lib" / "src" / "util.dart"): ["a", "b", "c", "d", "e", "f"]}
    )
    result = PrettyPrintFormatter(resolver, loader, report_on=["lib/"]).format(
        project_hitmap
    )
    assert str(project / "lib" / "src" / "util.dart") in result
    assert str(project / "test" / "test_app.dart") not in result
    assert loader.loaded == [str(project / "lib" / "src" / "util.dart")]


def test_pretty_print_workers(project, project_hitmap, resolver):
    """test that parallel loading keeps the output order"""
    serial = PrettyPrintFormatter(resolver, FileLoader()).format(project_hitmap)
    parallel = PrettyPrintFormatter(resolver, FileLoader(), workers=4).format(
        project_hitmap
    )
    assert parallel == serial


def test_file_loader(tmp_path):
    """test that sources are split on line breaks only"""
    path = tmp_path / "src.dart"
    path.write_bytes(b"  first\r\nsecond\x0cstill second\n\nlast")
    assert FileLoader().load(str(path)) == [
        "  first",
        "second\x0cstill second",
        "",
        "last",
    ]
    path.write_text("")
    assert FileLoader().load(str(path)) == []


def test_file_loader_missing(tmp_path):
    """test that unreadable sources raise SourceUnavailable"""
    with pytest.raises(SourceUnavailable):
        FileLoader().load(str(tmp_path / "missing.dart"))
    (tmp_path / "binary.dart").write_bytes(b"\xff\xfe\x00")
    with pytest.raises(SourceUnavailable):
        FileLoader().load(str(tmp_path / "binary.dart"))
