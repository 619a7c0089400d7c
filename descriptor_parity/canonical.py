"""Parse the canonical JSON module descriptor into a ModuleDescriptor."""

import json
import logging
from pathlib import Path
from typing import Any

from .errors import MalformedDescriptorError
from .models import ModuleDescriptor

log = logging.getLogger(__name__)

_FILES_KEY = "@files"


def parse_descriptor(path: Path) -> ModuleDescriptor:
    """Read a canonical descriptor file.

    Raises MalformedDescriptorError for anything that is not a valid
    descriptor. I/O errors propagate unchanged.
    """
    path = Path(path)
    data = _load_json_object(path)
    return descriptor_from_dict(data, base_dir=path.parent, source=str(path))


def descriptor_from_dict(data: dict[str, Any], base_dir: Path | None = None, source: str = "<dict>") -> ModuleDescriptor:
    """Build a ModuleDescriptor from an already-decoded canonical document."""
    fields: dict[str, Any] = {}

    if "module" in data:
        fields["group"], fields["name"], fields["version"] = _split_coordinates(data["module"], source)
    for key in ("group", "name", "version"):
        if key in data:
            fields[key] = data[key]
    missing = [key for key in ("group", "name", "version") if key not in fields]
    if missing:
        raise MalformedDescriptorError(f"{source}: missing module identity ({', '.join(missing)})")

    if data.get("packaging") is not None:
        fields["packaging"] = data["packaging"]
    if data.get("description") is not None:
        fields["description"] = data["description"]
    if data.get("parent") is not None:
        group, name, version = _split_coordinates(data["parent"], source)
        fields["parent"] = {"group": group, "name": name, "version": version}

    fields["properties"] = _properties(data.get("properties") or {}, base_dir, source)
    fields["dependencies"] = _dependencies(data.get("dependencies") or [], source)

    descriptor = ModuleDescriptor(**fields)
    log.debug("Parsed %s from %s (%d dependencies)", descriptor.coordinates, source, len(descriptor.dependencies))
    return descriptor


def _load_json_object(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise MalformedDescriptorError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedDescriptorError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


def _split_coordinates(value: Any, source: str, allow_classifier: bool = False) -> list[str]:
    """Split "group:name:version[:classifier]" into its parts."""
    if not isinstance(value, str):
        raise MalformedDescriptorError(f"{source}: coordinates must be a string, got {value!r}")
    parts = value.split(":")
    if len(parts) != 3 and not (allow_classifier and len(parts) == 4):
        raise MalformedDescriptorError(f"{source}: malformed coordinates {value!r}")
    return parts


def _properties(raw: Any, base_dir: Path | None, source: str) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise MalformedDescriptorError(f"{source}: 'properties' must be an object")

    refs = raw.get(_FILES_KEY, [])
    if not isinstance(refs, list) or not all(isinstance(ref, str) for ref in refs):
        raise MalformedDescriptorError(f"{source}: '{_FILES_KEY}' must be a list of file names")

    merged: dict[str, str] = {}
    for ref in refs:
        props_path = (base_dir or Path(".")) / ref
        log.debug("Loading properties from %s", props_path)
        for key, value in _load_json_object(props_path).items():
            if isinstance(value, str):
                merged[key] = value

    for key, value in raw.items():
        if key == _FILES_KEY:
            continue
        if not isinstance(value, str):
            raise MalformedDescriptorError(f"{source}: property {key!r} must be a string")
        merged[key] = value
    return merged


def _dependencies(raw: Any, source: str) -> list[dict[str, Any]]:
    # Map form: {"compile": [...], "test": [...]}; list form: [{..., "scope": "test"}]
    if isinstance(raw, dict):
        return [
            _dependency(entry, scope, source)
            for scope, entries in raw.items()
            for entry in _as_list(entries, scope, source)
        ]
    if isinstance(raw, list):
        return [_dependency(entry, None, source) for entry in raw]
    raise MalformedDescriptorError(f"{source}: 'dependencies' must be an object or a list")


def _as_list(entries: Any, scope: str, source: str) -> list[Any]:
    if not isinstance(entries, list):
        raise MalformedDescriptorError(f"{source}: dependencies for scope {scope!r} must be a list")
    return entries


def _dependency(entry: Any, scope: str | None, source: str) -> dict[str, Any]:
    if isinstance(entry, str):
        entry = {"module": entry}
    if not isinstance(entry, dict):
        raise MalformedDescriptorError(f"{source}: dependency must be a string or an object, got {entry!r}")

    dep: dict[str, Any] = {}
    if "module" in entry:
        parts = _split_coordinates(entry["module"], source, allow_classifier=True)
        dep.update(zip(("group", "name", "version", "classifier"), parts))
    for key in ("group", "name", "version", "classifier", "optional"):
        if key in entry:
            dep[key] = entry[key]

    dep_scope = scope if scope is not None else entry.get("scope")
    if dep_scope is not None:
        dep["scope"] = dep_scope
    return dep
