"""Find the packages whose components a generated package depends on."""

from __future__ import annotations

from typing import Iterable, Mapping

from tscomponents.parse.models import (
    ArrayRange,
    ClassRange,
    ConstructorData,
    IndexedRange,
    IntersectionRange,
    KeyofRange,
    LoadedEntity,
    NestedRange,
    Range,
    RestRange,
    TupleRange,
    UnionRange,
)

__all__ = ["find_external_packages"]


def find_external_packages(
    index: Mapping[str, LoadedEntity],
    constructors: Mapping[str, ConstructorData],
    *,
    current_package: str,
    batch_packages: Iterable[str] = (),
    extra_ranges: Iterable[Range | None] = (),
) -> list[str]:
    """Return the sorted names of packages referenced outside this batch.

    Inheritance chains of indexed entities and every class reachable from a
    resolved constructor range (or ``extra_ranges``) are visited. Generic
    reference origins are never followed.
    """

    excluded = {current_package, *batch_packages}
    found: set[str] = set()
    seen: set[int] = set()

    def visit_entity(entity: LoadedEntity) -> None:
        if id(entity) in seen:
            return
        seen.add(id(entity))
        if entity.package_name not in excluded:
            found.add(entity.package_name)
        edges = []
        if entity.super_class is not None:
            edges.append(entity.super_class)
        edges.extend(entity.implements_interfaces or ())
        edges.extend(entity.super_interfaces or ())
        for edge in edges:
            visit_entity(edge.value)

    def visit_range(range_: Range | None) -> None:
        if range_ is None:
            return
        if isinstance(range_, ClassRange):
            visit_entity(range_.entity)
            for instance in range_.generic_type_parameter_instances or ():
                visit_range(instance)
        elif isinstance(range_, NestedRange):
            for field in range_.fields:
                visit_range(field.range)
        elif isinstance(range_, (UnionRange, IntersectionRange, TupleRange)):
            for element in range_.elements:
                visit_range(element)
        elif isinstance(range_, (ArrayRange, RestRange)):
            visit_range(range_.element)
        elif isinstance(range_, IndexedRange):
            visit_range(range_.object)
            visit_range(range_.index)
        elif isinstance(range_, KeyofRange):
            visit_range(range_.value)

    for entity in index.values():
        visit_entity(entity)
    for constructor in constructors.values():
        for parameter in constructor.parameters:
            visit_range(parameter.range)
    for range_ in extra_ranges:
        visit_range(range_)
    return sorted(found)
