# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Report run configuration"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jsonschema import ValidationError

from .errors import ConfigurationError
from .formatter import Formatter, LcovFormatter, PrettyPrintFormatter
from .loader import FileLoader, Loader
from .resolver import Resolver
from .util import load_yaml, validate_schema_by_name

LOG = getLogger(__name__)


@dataclass
class ReportConfig:
    # Path prefixes to report on, empty for everything
    report_on: List[str] = field(default_factory=list)
    # Report paths relative to this directory
    base_path: Optional[str] = None
    # `.packages` file for the resolver
    packages: Optional[str] = None
    # YAML package table file, or an inline mapping of name to root
    package_table: Optional[Union[str, Dict[str, str]]] = None
    # SDK checkout serving `dart:` identifiers
    sdk_root: Optional[str] = None
    # `lcov` or `pretty-print`
    output_format: str = "lcov"
    # Parallel source loads for pretty-print
    workers: int = 1

    @classmethod
    def from_file(cls, path: Path) -> ReportConfig:
        """Load a YAML report configuration.

        Relative paths in the file are taken relative to the file itself.
        """
        raw = load_yaml(path) or {}
        try:
            validate_schema_by_name(instance=raw, name="ReportConfig")
        except ValidationError as exc:
            raise ConfigurationError(f"{path}: {exc.message}") from exc
        base = path.absolute().parent
        # os.path.join keeps the trailing separator of prefixes like "lib/"
        raw["report_on"] = [
            os.path.join(str(base), prefix) for prefix in raw.get("report_on", [])
        ]
        for key in ("base_path", "packages", "sdk_root"):
            if raw.get(key):
                raw[key] = str(base / raw[key])
        table = raw.get("package_table")
        if isinstance(table, str):
            raw["package_table"] = str(base / table)
        elif isinstance(table, dict):
            raw["package_table"] = {
                name: str(base / root) for name, root in table.items()
            }
        LOG.debug("loaded report configuration from %s", path)
        return cls(**raw)

    def overlay(self, **overrides: Any) -> ReportConfig:
        """Copy of this configuration with non-None `overrides` applied."""
        known = {fld.name for fld in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration fields: {sorted(unknown)!r}"
            )
        values = {name: getattr(self, name) for name in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)

    def build_resolver(self) -> Resolver:
        """Create the resolver for one report run."""
        if self.packages and self.package_table:
            raise ConfigurationError("packages and package_table are exclusive")
        if self.packages:
            return Resolver.from_packages_file(self.packages, sdk_root=self.sdk_root)
        if isinstance(self.package_table, str):
            return Resolver.from_yaml(self.package_table, sdk_root=self.sdk_root)
        return Resolver(self.package_table, sdk_root=self.sdk_root)

    def build_formatter(
        self, resolver: Resolver, loader: Optional[Loader] = None
    ) -> Formatter:
        """Create the formatter selected by `output_format`."""
        if self.output_format == "lcov":
            return LcovFormatter(
                resolver, report_on=self.report_on, base_path=self.base_path
            )
        if self.output_format == "pretty-print":
            return PrettyPrintFormatter(
                resolver,
                loader if loader is not None else FileLoader(),
                report_on=self.report_on,
                base_path=self.base_path,
                workers=self.workers,
            )
        raise ConfigurationError(f"Unknown output format: {self.output_format!r}")
