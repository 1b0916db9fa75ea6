"""Superclass and implemented-interface edges with their type arguments."""

from __future__ import annotations

from typing import Mapping

from .models import EntityKind, ExtensionData, GenericallyTyped, LoadedEntity
from .parameters import ParameterLoader

__all__ = ["ExtensionLoader"]


class ExtensionLoader:
    """Load the unresolved extension edges of indexed classes."""

    def __init__(self, *, parameter_loader: ParameterLoader) -> None:
        self._parameters = parameter_loader

    def get_extensions(
        self,
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[ExtensionData]]:
        return {
            name: self.load_class_extensions(entity)
            for name, entity in index.items()
            if entity.kind is EntityKind.CLASS
        }

    def load_class_extensions(self, entity: LoadedEntity) -> list[ExtensionData]:
        edges: list[GenericallyTyped] = []
        if entity.super_class is not None:
            edges.append(entity.super_class)
        edges.extend(entity.implements_interfaces or ())
        return [self._edge(entity, edge) for edge in edges]

    def _edge(self, owner: LoadedEntity, edge: GenericallyTyped) -> ExtensionData:
        return ExtensionData(
            entity=edge.value,
            generic_type_instantiations=tuple(
                self._parameters.load_range(
                    owner,
                    argument,
                    f"type argument of {edge.value.local_name}",
                )
                for argument in edge.type_arguments
            ),
        )
