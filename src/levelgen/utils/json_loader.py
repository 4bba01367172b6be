from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from jsonschema import Draft202012Validator, exceptions as js_exceptions, validators

logger = logging.getLogger(__name__)


# ---------------------------
# Exceptions
# ---------------------------

class JsonLoaderError(Exception):
    """Base error for JSON loading issues."""


class JsonFileNotFoundError(JsonLoaderError):
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"JSON file not found: {self.path}")


class JsonParseError(JsonLoaderError):
    def __init__(self, path: Union[str, Path], message: str, lineno: Optional[int] = None, colno: Optional[int] = None):
        self.path = Path(path)
        self.message = message
        self.lineno = lineno
        self.colno = colno
        location = f" (line {lineno}, column {colno})" if lineno is not None and colno is not None else ""
        super().__init__(f"Failed to parse JSON at {self.path}{location}: {message}")


class JsonSchemaError(JsonLoaderError):
    def __init__(self, path: Union[str, Path], errors: Sequence[js_exceptions.ValidationError]):
        self.path = Path(path)
        self.errors = list(errors)
        super().__init__(_format_schema_errors(self.path, self.errors))


# ---------------------------
# Utilities
# ---------------------------

def _extend_with_default(validator_class):
    """Extend a jsonschema validator so missing properties receive their schema 'default'."""

    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if isinstance(instance, dict):
            for prop, subschema in properties.items():
                if "default" in subschema and prop not in instance:
                    instance[prop] = deepcopy(subschema["default"])
        yield from validate_properties(validator, properties, instance, schema)

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultingValidator = _extend_with_default(Draft202012Validator)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise JsonFileNotFoundError(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise JsonParseError(path, e.msg, e.lineno, e.colno) from e


def _format_schema_errors(path: Path, errors: Sequence[js_exceptions.ValidationError]) -> str:
    """Create a readable, multi-line error message from jsonschema errors."""
    lines = [f"Schema validation failed for {path}:"]
    for err in errors:
        where = ".".join(str(p) for p in err.absolute_path) or "root"
        lines.append(f" - At {where}: {err.message}")
    return "\n".join(lines)


def validate(path: Union[str, Path], data: Any, schema: Mapping[str, Any]) -> None:
    """Validate ``data`` in place, applying schema defaults; raise JsonSchemaError on failure."""
    validator = DefaultingValidator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        raise JsonSchemaError(path, errors)


# ---------------------------
# Public API
# ---------------------------

def load_json_file(
    path: Union[str, Path],
    *,
    schema: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Load a JSON file and, when a schema is given, validate it and apply its defaults.

    Raises JsonLoaderError subclasses on failure.
    """
    p = Path(path)
    data = _read_json(p)
    if schema:
        validate(p, data, schema)
    logger.debug("Loaded JSON from %s", p)
    return data


def load_json_directory(
    dir_path: Union[str, Path],
    *,
    pattern: str = "*.json",
    schema: Optional[Mapping[str, Any]] = None,
) -> Dict[Path, Any]:
    """Load and validate every JSON file matching ``pattern`` in a directory.

    Files are read in sorted order so the result is stable across platforms.
    """
    d = Path(dir_path)
    if not d.exists() or not d.is_dir():
        raise JsonFileNotFoundError(d)

    results: Dict[Path, Any] = {}
    for fp in sorted(d.glob(pattern)):
        results[fp] = load_json_file(fp, schema=schema)
    logger.debug("Loaded %d JSON file(s) from %s", len(results), d)
    return results


def loads_validated(text: str, *, source: str, schema: Mapping[str, Any]) -> Any:
    """Parse JSON text (e.g. a packaged resource) and validate it like a file."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise JsonParseError(source, e.msg, e.lineno, e.colno) from e
    validate(source, data, schema)
    return data


__all__: List[str] = [
    "load_json_file",
    "load_json_directory",
    "loads_validated",
    "validate",
    "JsonLoaderError",
    "JsonFileNotFoundError",
    "JsonParseError",
    "JsonSchemaError",
]
