# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Fixtures for hitmap-report tests"""

from pathlib import Path

import pytest

FIXTURES = (Path(__file__).parent / "fixtures").resolve()

UTIL_SOURCE = """\
int add(int a, int b) {
  return a + b;
}

int sub(int a, int b) {
  return a - b;
}
"""

APP_SOURCE = """\
void main() {
  print(add(1, 2));
}
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Small source tree with a .packages file, used as the working directory"""
    root = tmp_path.resolve()
    (root / "lib" / "src").mkdir(parents=True)
    (root / "lib" / "src" / "util.dart").write_text(UTIL_SOURCE)
    (root / "test").mkdir()
    (root / "test" / "test_app.dart").write_text(APP_SOURCE)
    (root / ".packages").write_text("# generated\ncoverage:lib/\n")
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def project_hitmap(project):
    """Hit map covering one package script, one file script and one SDK script"""
    return {
        "package:coverage/src/util.dart": {1: 1, 2: 3, 5: 1, 6: 0},
        (project / "test" / "test_app.dart").as_uri(): {1: 1, 2: 1},
        "dart:core/list.dart": {10: 4},
    }
