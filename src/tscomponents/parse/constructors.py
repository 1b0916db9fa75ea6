"""Constructor discovery along superclass chains."""

from __future__ import annotations

from typing import Mapping

from . import nodes as ast
from .models import ConstructorData, EntityKind, LoadedEntity
from .parameters import ParameterLoader

__all__ = ["ConstructorLoader"]


class ConstructorLoader:
    """Load the unresolved constructor parameters of indexed classes."""

    def __init__(self, *, parameter_loader: ParameterLoader) -> None:
        self._parameters = parameter_loader

    def get_constructors(
        self,
        index: Mapping[str, LoadedEntity],
    ) -> dict[str, ConstructorData]:
        """Return constructor data for every entry of ``index``.

        Interfaces and classes without a constructor anywhere in their
        superclass chain get an empty parameter list.
        """

        constructors: dict[str, ConstructorData] = {}
        for name, entity in index.items():
            chain = (
                self.get_constructor_chain(entity)
                if entity.kind is EntityKind.CLASS
                else []
            )
            if chain:
                constructors[name] = ConstructorData(
                    holder=chain[0][0],
                    parameters=self._parameters.load_constructor_fields(chain),
                )
            else:
                constructors[name] = ConstructorData(holder=entity)
        return constructors

    def get_constructor_chain(
        self,
        entity: LoadedEntity,
    ) -> list[tuple[LoadedEntity, ast.Constructor]]:
        """List explicit constructors from ``entity`` up its superclass chain."""

        chain = []
        for holder in (entity, *entity.ancestors()):
            constructor = self.get_constructor_in_class(holder.declaration)
            if constructor is not None:
                chain.append((holder, constructor))
        return chain

    def get_constructor(
        self,
        entity: LoadedEntity,
    ) -> tuple[LoadedEntity, ast.Constructor] | None:
        chain = self.get_constructor_chain(entity)
        return chain[0] if chain else None

    @staticmethod
    def get_constructor_in_class(declaration: ast.Declaration) -> ast.Constructor | None:
        if not isinstance(declaration, ast.ClassDeclaration):
            return None
        return next(
            (
                member
                for member in declaration.members
                if isinstance(member, ast.Constructor)
            ),
            None,
        )
