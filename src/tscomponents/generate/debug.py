"""JSON rendering of resolved generation state for debugging."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

from tscomponents.parse.models import (
    ArrayRange,
    ClassRange,
    GenericTypeReferenceRange,
    HashRange,
    IndexedRange,
    InterfaceRange,
    IntersectionRange,
    KeyofRange,
    LiteralRange,
    LoadedEntity,
    NestedRange,
    OverrideRange,
    ParameterData,
    Range,
    RawRange,
    RestRange,
    TupleRange,
    TypeofRange,
    UndefinedRange,
    UnionRange,
    WildcardRange,
)

from .generator import PackageGenerationResult

__all__ = [
    "DEBUG_STATE_FILENAME",
    "dump_debug_state",
    "entity_reference",
    "render_debug_state",
    "serialize_range",
    "write_debug_state",
]

DEBUG_STATE_FILENAME = "tscomponents-debug-state.json"


def entity_reference(entity: LoadedEntity | None) -> dict[str, Any] | None:
    if entity is None:
        return None
    return {
        "packageName": entity.package_name,
        "fileName": entity.file_name,
        "localName": entity.local_name,
        "qualifiedPath": list(entity.qualified_path),
    }


def serialize_parameter(parameter: ParameterData) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": parameter.kind.value,
        "range": serialize_range(parameter.range),
    }
    if parameter.kind.value == "index":
        data["domain"] = parameter.domain
    else:
        data["name"] = parameter.name
        data["unique"] = parameter.unique
        data["required"] = parameter.required
    if parameter.default is not None:
        data["default"] = parameter.default
    if parameter.comment is not None:
        data["comment"] = parameter.comment
    return data


def serialize_range(range_: Range | None) -> dict[str, Any] | None:
    """Render a range as a tagged dictionary.

    Example:
        >>> serialize_range(RawRange(value="string"))
        {'type': 'raw', 'value': 'string'}
    """

    if range_ is None:
        return None
    if isinstance(range_, (RawRange, LiteralRange, OverrideRange)):
        tag = {RawRange: "raw", LiteralRange: "literal", OverrideRange: "override"}
        return {"type": tag[type(range_)], "value": range_.value}
    if isinstance(range_, WildcardRange):
        return {"type": "wildcard"}
    if isinstance(range_, UndefinedRange):
        return {"type": "undefined"}
    if isinstance(range_, ClassRange):
        data: dict[str, Any] = {
            "type": "class",
            "value": entity_reference(range_.entity),
        }
        if range_.generic_type_parameter_instances is not None:
            data["genericTypeParameterInstances"] = [
                serialize_range(item)
                for item in range_.generic_type_parameter_instances
            ]
        return data
    if isinstance(range_, NestedRange):
        return {
            "type": "nested",
            "value": [serialize_parameter(field) for field in range_.fields],
        }
    if isinstance(range_, GenericTypeReferenceRange):
        return {
            "type": "genericTypeReference",
            "value": range_.name,
            "origin": entity_reference(range_.origin),
        }
    if isinstance(range_, (UnionRange, IntersectionRange, TupleRange)):
        tag = {
            UnionRange: "union",
            IntersectionRange: "intersection",
            TupleRange: "tuple",
        }
        return {
            "type": tag[type(range_)],
            "elements": [serialize_range(item) for item in range_.elements],
        }
    if isinstance(range_, (ArrayRange, RestRange)):
        return {
            "type": "array" if isinstance(range_, ArrayRange) else "rest",
            "value": serialize_range(range_.element),
        }
    if isinstance(range_, KeyofRange):
        return {"type": "keyof", "value": serialize_range(range_.value)}
    if isinstance(range_, IndexedRange):
        return {
            "type": "indexed",
            "object": serialize_range(range_.object),
            "index": serialize_range(range_.index),
        }
    if isinstance(range_, InterfaceRange):
        return {
            "type": "interface",
            "value": range_.name,
            "qualifiedPath": list(range_.qualified_path),
            "genericTypeParameterInstantiations": [
                serialize_range(item) for item in range_.instantiations
            ],
            "origin": entity_reference(range_.origin),
        }
    if isinstance(range_, HashRange):
        return {"type": "hash", "origin": entity_reference(range_.origin)}
    if isinstance(range_, TypeofRange):
        return {
            "type": "typeof",
            "value": range_.name,
            "qualifiedPath": list(range_.qualified_path),
        }
    raise TypeError(f"Unknown range {range_!r}")


def _render_entity(entity: LoadedEntity) -> dict[str, Any]:
    data = {"type": entity.kind.value, **entity_reference(entity)}
    if entity.comment is not None:
        data["comment"] = entity.comment
    if entity.super_class is not None:
        data["superClass"] = entity_reference(entity.super_class.value)
    if entity.implements_interfaces:
        data["implementsInterfaces"] = [
            entity_reference(edge.value) for edge in entity.implements_interfaces
        ]
    if entity.super_interfaces:
        data["superInterfaces"] = [
            entity_reference(edge.value) for edge in entity.super_interfaces
        ]
    return data


def render_debug_state(results: Sequence[PackageGenerationResult]) -> dict[str, Any]:
    """Render generation results as a JSON-compatible document."""

    packages: dict[str, Any] = {}
    for result in results:
        packages[result.package.name] = {
            "version": result.package.version,
            "typesPath": result.package.types_path,
            "classes": {
                name: _render_entity(entity) for name, entity in result.index.items()
            },
            "constructors": {
                name: {
                    "holder": entity_reference(data.holder),
                    "parameters": [
                        serialize_parameter(parameter) for parameter in data.parameters
                    ],
                }
                for name, data in result.constructors.items()
            },
            "generics": {
                name: [
                    {
                        "name": generic.name,
                        "range": serialize_range(generic.range),
                        "default": serialize_range(generic.default),
                    }
                    for generic in generics
                ]
                for name, generics in result.generics.items()
            },
            "members": {
                name: [
                    {"name": member.name, "range": serialize_range(member.range)}
                    for member in members
                ]
                for name, members in result.members.items()
            },
            "extensions": {
                name: [
                    {
                        "value": entity_reference(extension.entity),
                        "genericTypeInstantiations": [
                            serialize_range(item)
                            for item in extension.generic_type_instantiations
                        ],
                    }
                    for extension in extensions
                ]
                for name, extensions in result.extensions.items()
            },
            "externalPackages": list(result.external_packages),
        }
    return {"packages": packages}


def dump_debug_state(results: Sequence[PackageGenerationResult]) -> str:
    return (
        json.dumps(
            render_debug_state(results),
            indent=2,
            ensure_ascii=False,
        )
        + "\n"
    )


def write_debug_state(
    results: Sequence[PackageGenerationResult],
    directory: Path,
) -> Path:
    """Atomically write the debug state file into ``directory``."""

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / DEBUG_STATE_FILENAME
    serialized = dump_debug_state(results)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=directory,
        prefix=".debug-state-",
        suffix=".json.tmp",
        delete=False,
    ) as handle:
        handle.write(serialized)
        temp_path = Path(handle.name)
    try:
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
    return path
