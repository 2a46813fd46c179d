# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Script identifier to source path resolution"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import Dict, Mapping, Optional, Set, Union
from urllib.parse import unquote, urlparse

from jsonschema import ValidationError

from .errors import ConfigurationError, UnresolvableIdentifier
from .util import PathArg, load_yaml, validate_schema_by_name

LOG = getLogger(__name__)

PACKAGE_SCHEME = "package"
SDK_SCHEME = "dart"
# at least two characters, so Windows drive letters are not taken for schemes
SCHEME_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]+):(?P<tail>.*)$", re.S)


@dataclass(frozen=True)
class FileRef:
    """Identifier that already names a file on disk"""

    path: str


@dataclass(frozen=True)
class SchemeRef:
    """Identifier of the form `scheme:tail`

    Attributes:
        scheme: URI scheme (`package`, `dart`, ...)
        key: Package table entry to look up.
        tail: Path relative to the root found under `key`.
    """

    scheme: str
    key: str
    tail: str


ScriptRef = Union[FileRef, SchemeRef]


def _uri_to_path(uri: str) -> str:
    parsed = urlparse(uri)
    path = unquote(parsed.path)
    if os.name == "nt" and re.match(r"^/[A-Za-z]:", path):
        path = path[1:]
    return path


def parse_script_id(script_id: str) -> ScriptRef:
    """Classify a script identifier.

    Arguments:
        script_id: Path, `file:` URI or `scheme:tail` identifier.

    Returns:
        `FileRef` for paths and `file:` URIs, `SchemeRef` otherwise.
    """
    if os.path.isabs(script_id):
        return FileRef(script_id)
    match = SCHEME_RE.match(script_id)
    if match is None:
        return FileRef(script_id)
    scheme = match.group("scheme").lower()
    tail = match.group("tail")
    if scheme == "file":
        return FileRef(_uri_to_path(script_id))
    if scheme == PACKAGE_SCHEME:
        key, _, rest = tail.lstrip("/").partition("/")
        return SchemeRef(scheme, key, rest)
    return SchemeRef(scheme, scheme, tail.lstrip("/"))


def _normalize_root(root: PathArg, relative_to: Optional[Path] = None) -> str:
    root = str(root)
    if root.startswith("file:"):
        root = _uri_to_path(root)
    if relative_to is not None and not os.path.isabs(root):
        root = str(relative_to / root)
    return os.path.abspath(root)


class Resolver:
    """Resolve script identifiers to absolute source paths.

    One instance is built per report run and handed to the formatters.

    Attributes:
        packages: Package name (or scheme token) to absolute root directory.
        failed: Identifiers that could not be resolved so far.
    """

    def __init__(
        self,
        packages: Optional[Mapping[str, PathArg]] = None,
        sdk_root: Optional[PathArg] = None,
    ) -> None:
        """
        Arguments:
            packages: Package name (or scheme token) to root directory.
            sdk_root: SDK checkout, used to serve `dart:` identifiers from
                      `<sdk_root>/lib`.
        """
        table: Dict[str, str] = {
            name: _normalize_root(root) for name, root in (packages or {}).items()
        }
        if sdk_root is not None:
            table.setdefault(SDK_SCHEME, _normalize_root(Path(sdk_root) / "lib"))
        self.packages: Mapping[str, str] = table
        self.failed: Set[str] = set()

    @classmethod
    def from_packages_file(
        cls, packages_path: PathArg, sdk_root: Optional[PathArg] = None
    ) -> Resolver:
        """Load the package table from a `.packages` file.

        Each non-comment line is `name:uri`. Relative URIs are resolved
        against the directory holding the file.
        """
        packages_path = Path(packages_path)
        base = packages_path.absolute().parent
        packages = {}
        try:
            text = packages_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(
                f"Cannot read packages file '{packages_path}': {exc}"
            ) from exc
        for lineno, line in enumerate(text.splitlines(), start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            name, sep, location = line.partition(":")
            if not sep or not name or not location:
                raise ConfigurationError(
                    f"{packages_path}:{lineno}: expected 'name:uri', got {line!r}"
                )
            packages[name] = _normalize_root(location, base)
        LOG.debug("loaded %d packages from %s", len(packages), packages_path)
        return cls(packages, sdk_root=sdk_root)

    @classmethod
    def from_yaml(
        cls, table_path: PathArg, sdk_root: Optional[PathArg] = None
    ) -> Resolver:
        """Load the package table from a YAML mapping of name to root.

        Relative roots are resolved against the directory holding the file.
        """
        table_path = Path(table_path)
        raw = load_yaml(table_path)
        try:
            validate_schema_by_name(instance=raw, name="PackageTable")
        except ValidationError as exc:
            raise ConfigurationError(f"{table_path}: {exc.message}") from exc
        base = table_path.absolute().parent
        packages = {name: _normalize_root(root, base) for name, root in raw.items()}
        return cls(packages, sdk_root=sdk_root)

    def resolve(self, script_id: str) -> str:
        """Resolve `script_id` to a normalized absolute path.

        Raises:
            UnresolvableIdentifier: if the identifier's package or scheme is
                                    not in the package table.
        """
        ref = parse_script_id(script_id)
        if isinstance(ref, FileRef):
            return os.path.abspath(ref.path)
        root = self.packages.get(ref.key)
        if root is None:
            self.failed.add(script_id)
            if ref.scheme == PACKAGE_SCHEME:
                raise UnresolvableIdentifier(script_id, f"unknown package '{ref.key}'")
            raise UnresolvableIdentifier(script_id, f"unknown scheme '{ref.scheme}'")
        return os.path.normpath(os.path.join(root, *ref.tail.split("/")))
