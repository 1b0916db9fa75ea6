"""Declared generic type parameters of classes and interfaces."""

from __future__ import annotations

from typing import Mapping

from .models import EntityKind, GenericTypeParameterData, LoadedEntity
from .parameters import ParameterLoader

__all__ = ["GenericsLoader"]


class GenericsLoader:
    def __init__(self, *, parameter_loader: ParameterLoader) -> None:
        self._parameters = parameter_loader

    def get_generics(
        self,
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[GenericTypeParameterData]]:
        return {
            name: self._parameters.load_class_generics(entity)
            for name, entity in index.items()
            if entity.kind in (EntityKind.CLASS, EntityKind.INTERFACE)
        }
