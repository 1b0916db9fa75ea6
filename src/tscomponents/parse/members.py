"""Named members of classes and interfaces, as seen by ``keyof``."""

from __future__ import annotations

from typing import Mapping

from . import nodes as ast
from .models import EntityKind, LoadedEntity, MemberData
from .parameters import ParameterLoader

__all__ = ["MemberLoader"]

_MEMBER_TYPES = (
    ast.ClassProperty,
    ast.ClassMethod,
    ast.PropertySignature,
    ast.MethodSignature,
)


class MemberLoader:
    """Collect member names with their optional unresolved ranges."""

    def __init__(self, *, parameter_loader: ParameterLoader) -> None:
        self._parameters = parameter_loader

    def get_members(
        self,
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, list[MemberData]]:
        return {
            name: self.collect_class_fields(entity)
            for name, entity in index.items()
            if entity.kind in (EntityKind.CLASS, EntityKind.INTERFACE)
        }

    def collect_class_fields(self, entity: LoadedEntity) -> list[MemberData]:
        """Return named properties and methods declared directly on ``entity``.

        Properties carry the range of their type annotation. Methods carry
        no range.
        """

        declaration = entity.declaration
        assert isinstance(
            declaration, (ast.ClassDeclaration, ast.InterfaceDeclaration)
        )
        members = []
        for member in declaration.members:
            if not isinstance(member, _MEMBER_TYPES) or member.name is None:
                continue
            type_node = (
                member.type
                if isinstance(member, (ast.ClassProperty, ast.PropertySignature))
                else None
            )
            members.append(
                MemberData(
                    name=member.name,
                    range=(
                        self._parameters.load_range(
                            entity, type_node, f"field {member.name}"
                        )
                        if type_node is not None
                        else None
                    ),
                )
            )
        return members
