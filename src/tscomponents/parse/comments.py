"""JSDoc annotation extraction for classes, fields and constructors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping

from . import nodes as ast
from .errors import InvalidAnnotationError
from .models import LoadedEntity, OverrideRange

__all__ = ["CommentData", "CommentLoader", "parse_comment"]

_LINE_PREFIX = re.compile(r"^\s*\*? ?")
_TAG = re.compile(r"^@(\w+)\s*(.*)$", re.DOTALL)


@dataclass(frozen=True, slots=True)
class CommentData:
    """Annotations carried by a single doc comment."""

    description: str | None = None
    range: OverrideRange | None = None
    default: str | None = None
    ignored: bool = False
    params: Mapping[str, str] = field(default_factory=dict)


def _comment_lines(comment: str) -> list[str] | None:
    text = comment.strip()
    if not text.startswith("/**") or not text.endswith("*/") or len(text) < 5:
        return None
    body = text[3:-2]
    return [_LINE_PREFIX.sub("", line, count=1).rstrip() for line in body.split("\n")]


def _split_type(text: str) -> tuple[str, str]:
    """Split a leading ``{Type}`` off ``text``, honoring nested braces."""

    stripped = text.lstrip()
    if not stripped.startswith("{"):
        return "", text.strip()
    depth = 0
    for index, char in enumerate(stripped):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return stripped[1:index].strip(), stripped[index + 1 :].strip()
    return "", text.strip()


def parse_comment(comment: str, owner: str = "<unknown>") -> CommentData:
    """Parse a ``/** ... */`` block into :class:`CommentData`.

    Comments that are not doc blocks yield empty data.

    Raises:
        InvalidAnnotationError: If ``@range`` or ``@default`` lacks a
            ``{value}``.
    """

    lines = _comment_lines(comment)
    if lines is None:
        return CommentData()

    description: list[str] = []
    tags: list[list[str]] = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("@"):
            tags.append([stripped])
        elif tags:
            if stripped:
                tags[-1].append(stripped)
        elif stripped:
            description.append(stripped)

    range_: OverrideRange | None = None
    default: str | None = None
    ignored = False
    params: dict[str, str] = {}
    for parts in tags:
        match = _TAG.match(" ".join(parts))
        if match is None:
            continue
        tag, rest = match.group(1).lower(), match.group(2)
        if tag == "range":
            value, _ = _split_type(rest)
            if not value:
                raise InvalidAnnotationError(
                    f"Missing @range value {{something}} on a field in class {owner}"
                )
            range_ = OverrideRange(value=value)
        elif tag == "default":
            value, _ = _split_type(rest)
            if not value:
                raise InvalidAnnotationError(
                    f"Missing @default value {{something}} on a field in class {owner}"
                )
            default = value
        elif tag == "ignored":
            ignored = True
        elif tag == "param":
            _, remainder = _split_type(rest)
            name, _, text = remainder.partition(" ")
            if not name:
                continue
            text = text.strip()
            params[name] = text[2:] if text.startswith("- ") else text

    return CommentData(
        description=" ".join(description) or None,
        range=range_,
        default=default,
        ignored=ignored,
        params=params,
    )


class CommentLoader:
    """Locate and parse the doc comment directly above a declaration."""

    def get_comment_raw(self, module: ast.Module, line: int) -> str | None:
        for comment in module.comments:
            if comment.end_line == line - 1:
                return comment.text
        return None

    def get_comment_data_from_class_or_interface(
        self,
        entity: LoadedEntity,
    ) -> CommentData:
        comment = self.get_comment_raw(entity.module, entity.declaration.line)
        if comment is None:
            return CommentData()
        return parse_comment(comment, self._owner(entity))

    def get_comment_data_from_field(
        self,
        entity: LoadedEntity,
        member: ast.Member | ast.Parameter,
    ) -> CommentData:
        comment = self.get_comment_raw(entity.module, member.line)
        if comment is None:
            return CommentData()
        return parse_comment(comment, self._owner(entity))

    def get_comment_data_from_constructor(
        self,
        entity: LoadedEntity,
        constructor: ast.Constructor,
    ) -> dict[str, CommentData]:
        """Return the ``@param`` annotations of ``constructor`` by name.

        Each parameter description is parsed on its own so that inline
        ``@range``/``@default``/``@ignored`` tags apply to that parameter.
        """

        comment = self.get_comment_raw(entity.module, constructor.line)
        if comment is None:
            return {}
        return self.constructor_comment_data(comment, entity)

    def constructor_comment_data(
        self,
        comment: str,
        entity: LoadedEntity,
    ) -> dict[str, CommentData]:
        owner = self._owner(entity)
        data = parse_comment(comment, owner)
        return {
            name: parse_comment(
                "/**" + description.replace("@", "\n * @") + "*/",
                owner,
            )
            for name, description in data.params.items()
        }

    @staticmethod
    def _owner(entity: LoadedEntity) -> str:
        return f"{entity.local_name} at {entity.file_name}"
