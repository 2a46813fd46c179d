# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Schema validation and YAML loading helpers"""

from pathlib import Path
from typing import Any, Union

import yaml
from jsonschema import validate
from referencing import Registry, Resource

from .errors import ConfigurationError

PathArg = Union[str, Path]


def _load_schema_cache() -> Registry:
    resources = []
    for path in (Path(__file__).parent / "schemas").glob("*.yaml"):
        schema = Resource.from_contents(yaml.safe_load(path.read_text()))
        uri = schema.id()
        assert uri is not None
        resources.append((uri, schema))
    return Registry().with_resources(resources)


SCHEMA_CACHE = _load_schema_cache()


def _schema_by_name(name: str):
    for uri in SCHEMA_CACHE:
        schema = SCHEMA_CACHE[uri]
        if schema.contents["title"] == name:
            return schema.contents
    raise RuntimeError(f"Unknown schema name: {name}")  # pragma: no cover


def validate_schema_by_name(instance: Any, name: str) -> None:
    """Validate `instance` against one of the bundled schemas.

    Arguments:
        instance: Loaded JSON/YAML document.
        name: `title` of the schema to validate against.

    Raises:
        jsonschema.ValidationError: if `instance` does not match.
    """
    schema = _schema_by_name(name)
    validate(instance=instance, schema=schema, registry=SCHEMA_CACHE)


def load_yaml(path: PathArg) -> Any:
    """Load a YAML (or JSON) document from disk.

    Raises:
        ConfigurationError: if the file cannot be read or parsed.
    """
    try:
        return yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot load '{path}': {exc}") from exc
