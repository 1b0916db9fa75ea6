"""Tree-sitter backed parsing of declaration files into :mod:`.nodes`."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterator

from tree_sitter import Language, Node, Parser

from . import nodes as ast
from .errors import TypeScriptSyntaxError

__all__ = [
    "DEFAULT_SYNTAX_CACHE_SIZE",
    "SyntaxCache",
    "parse_typescript",
]

DEFAULT_SYNTAX_CACHE_SIZE = 2048

_CLASS_NODES = {"class_declaration", "abstract_class_declaration", "class"}
_NAMESPACE_NODES = {"internal_module", "module"}
_PARAMETER_NODES = {"required_parameter", "optional_parameter"}
_METHOD_NODES = {
    "method_signature",
    "method_definition",
    "abstract_method_signature",
}


@lru_cache(maxsize=1)
def _typescript_language() -> Language:
    import tree_sitter_typescript as tsts

    return Language(tsts.language_typescript())


def parse_typescript(text: str, file_path: str) -> ast.Module:
    """Parse declaration source ``text`` into a :class:`~.nodes.Module`.

    Raises:
        TypeScriptSyntaxError: If the source contains syntax errors.
    """

    parser = Parser(_typescript_language())
    tree = parser.parse(text.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        _raise_syntax_error(root, file_path)
    return _Converter().module(root, with_comments=True)


def _raise_syntax_error(root: Node, file_path: str) -> None:
    culprit = _first_error(root) or root
    if culprit.is_missing:
        message = f"'{culprit.type}' expected."
    else:
        message = f"Unexpected token {_text(culprit)[:40]!r}."
    line, column = _position(culprit)
    raise TypeScriptSyntaxError(file_path, line, column, message)


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _text(node: Node) -> str:
    raw = node.text
    if raw is None:  # pragma: no cover - only for trees without source
        return ""
    return raw.decode("utf-8")


def _position(node: Node) -> tuple[int, int]:
    point = node.start_point
    return point[0] + 1, point[1]


def _loc(node: Node) -> dict[str, int]:
    line, column = _position(node)
    return {"line": line, "column": column}


def _has_token(node: Node, token: str) -> bool:
    return any(child.type == token for child in node.children)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"`":
        return text[1:-1]
    return text


def _parse_number(text: str) -> int | float:
    cleaned = text.replace("_", "")
    try:
        return int(cleaned, 0)
    except ValueError:
        return float(cleaned)


def _iter_comments(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            yield node
            continue
        stack.extend(reversed(node.children))


@dataclass(slots=True)
class _Converter:
    """Convert tree-sitter nodes to the frozen syntax model."""

    def module(self, node: Node, *, with_comments: bool = False) -> ast.Module:
        statements: list[ast.Statement] = []
        for child in node.named_children:
            statements.extend(self.statement(child))
        comments: tuple[ast.Comment, ...] = ()
        if with_comments:
            comments = tuple(
                ast.Comment(
                    text=_text(comment),
                    start_line=comment.start_point[0] + 1,
                    end_line=comment.end_point[0] + 1,
                )
                for comment in _iter_comments(node)
            )
        return ast.Module(statements=tuple(statements), comments=comments)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------
    def statement(self, node: Node) -> list[ast.Statement]:
        kind = node.type
        if kind == "export_statement":
            return self.export(node)
        if kind == "import_statement":
            imported = self.import_(node)
            return [imported] if imported is not None else []
        if kind == "expression_statement":
            return [
                declaration
                for child in node.named_children
                if child.type in _NAMESPACE_NODES
                for declaration in self.declaration(child)
            ]
        return list(self.declaration(node))

    def declaration(self, node: Node) -> list[ast.Declaration]:
        kind = node.type
        if kind == "ambient_declaration":
            return [
                declaration
                for child in node.named_children
                for declaration in self.declaration(child)
            ]
        if kind in _CLASS_NODES:
            return [self.class_(node)]
        if kind == "interface_declaration":
            return [self.interface(node)]
        if kind == "type_alias_declaration":
            return [self.type_alias(node)]
        if kind == "enum_declaration":
            return [self.enum(node)]
        if kind in _NAMESPACE_NODES:
            namespace = self.namespace(node)
            return [namespace] if namespace is not None else []
        return []

    def export(self, node: Node) -> list[ast.Statement]:
        if _has_token(node, "default"):
            return []
        source_node = node.child_by_field_name("source")
        source = _unquote(_text(source_node)) if source_node else None

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            return [
                ast.ExportDeclaration(declaration=converted, **_loc(node))
                for converted in self.declaration(declaration)
            ]

        if _has_token(node, "="):
            return [self.export_assignment(node)]

        for child in node.named_children:
            if child.type == "export_clause":
                specifiers = []
                for specifier in child.named_children:
                    if specifier.type != "export_specifier":
                        continue
                    local = _unquote(_text(specifier.child_by_field_name("name")))
                    alias = specifier.child_by_field_name("alias")
                    exported = _unquote(_text(alias)) if alias else local
                    specifiers.append(
                        ast.ExportSpecifier(local=local, exported=exported)
                    )
                return [
                    ast.ExportNamed(
                        specifiers=tuple(specifiers),
                        source=source,
                        **_loc(node),
                    )
                ]
            if child.type == "namespace_export" and source is not None:
                names = [
                    grandchild
                    for grandchild in child.named_children
                    if grandchild.type in {"identifier", "string"}
                ]
                alias = _unquote(_text(names[0])) if names else None
                return [ast.ExportAll(source=source, alias=alias, **_loc(node))]

        if source is not None and _has_token(node, "*"):
            return [ast.ExportAll(source=source, **_loc(node))]
        return []

    def export_assignment(self, node: Node) -> ast.ExportAssignment:
        for child in node.named_children:
            if child.type == "identifier":
                return ast.ExportAssignment(name=_text(child), **_loc(node))
            if child.type in _CLASS_NODES:
                return ast.ExportAssignment(
                    declaration=self.class_(child),
                    **_loc(node),
                )
        return ast.ExportAssignment(**_loc(node))

    def import_(self, node: Node) -> ast.ImportDeclaration | None:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return None
        source = _unquote(_text(source_node))
        specifiers: list[ast.ImportSpecifier] = []
        namespace: str | None = None
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for child in clause.named_children:
                if child.type == "namespace_import":
                    identifiers = [
                        grandchild
                        for grandchild in child.named_children
                        if grandchild.type == "identifier"
                    ]
                    if identifiers:
                        namespace = _text(identifiers[0])
                elif child.type == "named_imports":
                    for specifier in child.named_children:
                        if specifier.type != "import_specifier":
                            continue
                        imported = _unquote(
                            _text(specifier.child_by_field_name("name"))
                        )
                        alias = specifier.child_by_field_name("alias")
                        specifiers.append(
                            ast.ImportSpecifier(
                                imported=imported,
                                local=_text(alias) if alias else imported,
                            )
                        )
        return ast.ImportDeclaration(
            source=source,
            specifiers=tuple(specifiers),
            namespace=namespace,
            **_loc(node),
        )

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------
    def class_(self, node: Node) -> ast.ClassDeclaration:
        name_node = node.child_by_field_name("name")
        extends: ast.HeritageReference | None = None
        implements: list[ast.HeritageReference] = []
        for child in node.named_children:
            if child.type != "class_heritage":
                continue
            for clause in child.named_children:
                if clause.type == "extends_clause":
                    extends = self.extends_value(clause)
                elif clause.type == "implements_clause":
                    implements.extend(
                        self.heritage_type(entry)
                        for entry in clause.named_children
                        if entry.type != "comment"
                    )
        body = node.child_by_field_name("body")
        members = self.class_members(body) if body is not None else ()
        return ast.ClassDeclaration(
            name=_text(name_node) if name_node else None,
            type_parameters=self.type_parameters(node),
            extends=extends,
            implements=tuple(implements),
            members=members,
            abstract=node.type == "abstract_class_declaration",
            **_loc(node),
        )

    def extends_value(self, clause: Node) -> ast.HeritageReference | None:
        value = clause.child_by_field_name("value")
        if value is None:
            return None
        arguments = clause.child_by_field_name("type_arguments")
        type_arguments = self.type_arguments(arguments)
        text = _text(value)
        if value.type == "identifier":
            return ast.HeritageReference(
                name=text,
                type_arguments=type_arguments,
                **_loc(value),
            )
        if value.type == "member_expression":
            *qualifier, name = [part.strip() for part in text.split(".")]
            return ast.HeritageReference(
                name=name,
                qualifier=tuple(qualifier),
                type_arguments=type_arguments,
                kind="member",
                **_loc(value),
            )
        return ast.HeritageReference(
            name=text,
            type_arguments=type_arguments,
            kind="other",
            **_loc(value),
        )

    def heritage_type(self, node: Node) -> ast.HeritageReference:
        converted = self.type(node)
        if isinstance(converted, ast.TypeReference):
            return ast.HeritageReference(
                name=converted.name,
                qualifier=converted.qualifier,
                type_arguments=converted.type_arguments,
                kind="member" if converted.qualifier else "identifier",
                **_loc(node),
            )
        return ast.HeritageReference(name=_text(node), kind="other", **_loc(node))

    def interface(self, node: Node) -> ast.InterfaceDeclaration:
        extends: list[ast.HeritageReference] = []
        for child in node.named_children:
            if child.type in {"extends_type_clause", "extends_clause"}:
                extends.extend(
                    self.heritage_type(entry)
                    for entry in child.named_children
                    if entry.type != "comment"
                )
        body = node.child_by_field_name("body")
        return ast.InterfaceDeclaration(
            name=_text(node.child_by_field_name("name")),
            type_parameters=self.type_parameters(node),
            extends=tuple(extends),
            members=self.type_members(body) if body is not None else (),
            **_loc(node),
        )

    def type_alias(self, node: Node) -> ast.TypeAliasDeclaration:
        return ast.TypeAliasDeclaration(
            name=_text(node.child_by_field_name("name")),
            type=self.type(node.child_by_field_name("value")),
            type_parameters=self.type_parameters(node),
            **_loc(node),
        )

    def enum(self, node: Node) -> ast.EnumDeclaration:
        members: list[ast.EnumMember] = []
        body = node.child_by_field_name("body")
        for child in body.named_children if body is not None else ():
            if child.type == "enum_assignment":
                name = _unquote(_text(child.child_by_field_name("name")))
                value = child.child_by_field_name("value")
                members.append(
                    ast.EnumMember(
                        name=name,
                        initializer=self.enum_initializer(value),
                        **_loc(child),
                    )
                )
            elif child.type in {"property_identifier", "string", "identifier"}:
                members.append(
                    ast.EnumMember(name=_unquote(_text(child)), **_loc(child))
                )
        return ast.EnumDeclaration(
            name=_text(node.child_by_field_name("name")),
            members=tuple(members),
            **_loc(node),
        )

    def enum_initializer(self, node: Node | None) -> ast.LiteralType | None:
        if node is None:
            return None
        value = self.literal_value(node)
        if value is None:
            return None
        return ast.LiteralType(value=value, **_loc(node))

    def literal_value(self, node: Node) -> str | int | float | bool | None:
        kind = node.type
        if kind == "string":
            return _unquote(_text(node))
        if kind == "number":
            return _parse_number(_text(node))
        if kind in {"true", "false"}:
            return kind == "true"
        if kind == "unary_expression":
            operand = node.child_by_field_name("argument")
            if operand is not None and operand.type == "number":
                number = _parse_number(_text(operand))
                return -number if _has_token(node, "-") else number
        return None

    def namespace(self, node: Node) -> ast.NamespaceDeclaration | None:
        name_node = node.child_by_field_name("name")
        if name_node is None or name_node.type == "string":
            return None
        body_node = node.child_by_field_name("body")
        body = self.module(body_node) if body_node is not None else ast.Module()
        parts = [part.strip() for part in _text(name_node).split(".")]
        loc = _loc(node)
        namespace = ast.NamespaceDeclaration(name=parts[-1], body=body, **loc)
        for part in reversed(parts[:-1]):
            inner = ast.ExportDeclaration(declaration=namespace, **loc)
            namespace = ast.NamespaceDeclaration(
                name=part,
                body=ast.Module(statements=(inner,)),
                **loc,
            )
        return namespace

    def type_parameters(self, node: Node) -> tuple[ast.TypeParameter, ...]:
        parameters = node.child_by_field_name("type_parameters")
        if parameters is None:
            return ()
        converted = []
        for parameter in parameters.named_children:
            if parameter.type != "type_parameter":
                continue
            constraint = parameter.child_by_field_name("constraint")
            default = parameter.child_by_field_name("value")
            converted.append(
                ast.TypeParameter(
                    name=_text(parameter.child_by_field_name("name")),
                    constraint=self.wrapped_type(constraint),
                    default=self.wrapped_type(default),
                )
            )
        return tuple(converted)

    def type_arguments(self, node: Node | None) -> tuple[ast.TypeNode, ...]:
        if node is None:
            return ()
        return tuple(
            self.type(child)
            for child in node.named_children
            if child.type != "comment"
        )

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------
    def class_members(self, body: Node) -> tuple[ast.Member, ...]:
        members: list[ast.Member] = []
        for child in body.named_children:
            kind = child.type
            if kind in _METHOD_NODES:
                name = self.property_name(child.child_by_field_name("name"))
                parameters = self.parameters(child)
                if name == "constructor":
                    members.append(
                        ast.Constructor(parameters=parameters, **_loc(child))
                    )
                    continue
                members.append(
                    ast.ClassMethod(
                        name=name,
                        parameters=parameters,
                        return_type=self.wrapped_type(
                            child.child_by_field_name("return_type")
                        ),
                        static=_has_token(child, "static"),
                        abstract=kind == "abstract_method_signature",
                        **_loc(child),
                    )
                )
            elif kind == "public_field_definition":
                members.append(
                    ast.ClassProperty(
                        name=self.property_name(child.child_by_field_name("name")),
                        type=self.wrapped_type(child.child_by_field_name("type")),
                        optional=_has_token(child, "?"),
                        static=_has_token(child, "static"),
                        abstract=_has_token(child, "abstract"),
                        **_loc(child),
                    )
                )
            elif kind == "index_signature":
                members.append(self.index_signature(child))
        return tuple(members)

    def type_members(self, body: Node) -> tuple[ast.Member, ...]:
        members: list[ast.Member] = []
        for child in body.named_children:
            kind = child.type
            if kind == "property_signature":
                members.append(
                    ast.PropertySignature(
                        name=self.property_name(child.child_by_field_name("name")),
                        type=self.wrapped_type(child.child_by_field_name("type")),
                        optional=_has_token(child, "?"),
                        readonly=_has_token(child, "readonly"),
                        **_loc(child),
                    )
                )
            elif kind == "method_signature":
                members.append(
                    ast.MethodSignature(
                        name=self.property_name(child.child_by_field_name("name")),
                        parameters=self.parameters(child),
                        return_type=self.wrapped_type(
                            child.child_by_field_name("return_type")
                        ),
                        optional=_has_token(child, "?"),
                        **_loc(child),
                    )
                )
            elif kind == "call_signature":
                members.append(
                    ast.CallSignature(
                        parameters=self.parameters(child),
                        return_type=self.wrapped_type(
                            child.child_by_field_name("return_type")
                        ),
                        **_loc(child),
                    )
                )
            elif kind == "construct_signature":
                members.append(
                    ast.ConstructSignature(
                        parameters=self.parameters(child),
                        return_type=self.wrapped_type(
                            child.child_by_field_name("type")
                        ),
                        **_loc(child),
                    )
                )
            elif kind == "index_signature":
                members.append(self.index_signature(child))
        return tuple(members)

    def index_signature(self, node: Node) -> ast.IndexSignature:
        name = node.child_by_field_name("name")
        return ast.IndexSignature(
            key_name=_text(name) if name is not None else None,
            key_type=self.wrapped_type(node.child_by_field_name("index_type")),
            type=self.wrapped_type(node.child_by_field_name("type")),
            **_loc(node),
        )

    def property_name(self, node: Node | None) -> str | None:
        if node is None or node.type == "computed_property_name":
            return None
        if node.type == "string":
            return _unquote(_text(node))
        return _text(node)

    def parameters(self, node: Node) -> tuple[ast.Parameter, ...]:
        formal = node.child_by_field_name("parameters")
        if formal is None:
            return ()
        return tuple(
            self.parameter(child)
            for child in formal.named_children
            if child.type in _PARAMETER_NODES
        )

    def parameter(self, node: Node) -> ast.Parameter:
        pattern = node.child_by_field_name("pattern")
        accessibility = next(
            (
                _text(child)
                for child in node.named_children
                if child.type == "accessibility_modifier"
            ),
            None,
        )
        name: str | None = None
        rest = False
        pattern_kind = pattern.type if pattern is not None else "unknown"
        if pattern is not None and pattern.type in {"identifier", "this"}:
            name = _text(pattern)
            pattern_kind = "identifier"
        elif pattern is not None and pattern.type == "rest_pattern":
            rest = True
            identifiers = [
                child
                for child in pattern.named_children
                if child.type == "identifier"
            ]
            if identifiers:
                name = _text(identifiers[0])
                pattern_kind = "identifier"
        return ast.Parameter(
            name=name,
            type=self.wrapped_type(node.child_by_field_name("type")),
            optional=node.type == "optional_parameter",
            rest=rest,
            accessibility=accessibility,
            pattern=pattern_kind,
            **_loc(node),
        )

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------
    def wrapped_type(self, node: Node | None) -> ast.TypeNode | None:
        """Convert a type found behind ``: T``, ``extends T`` or ``= T``."""

        if node is None:
            return None
        if node.type in {
            "type_annotation",
            "omitting_type_annotation",
            "adding_type_annotation",
            "opting_type_annotation",
            "constraint",
            "default_type",
        }:
            inner = [child for child in node.named_children if child.type != "comment"]
            return self.type(inner[0]) if inner else None
        return self.type(node)

    def type(self, node: Node) -> ast.TypeNode:
        kind = node.type
        loc = _loc(node)
        handler = getattr(self, f"_type_{kind}", None)
        if handler is not None:
            return handler(node, loc)
        return ast.UnsupportedType(kind=kind, text=_text(node), **loc)

    def _only_child(self, node: Node) -> Node:
        return [child for child in node.named_children if child.type != "comment"][0]

    def _type_predefined_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.KeywordType(name=_text(node), **loc)

    def _type_type_identifier(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.TypeReference(name=_text(node), **loc)

    def _type_identifier(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.TypeReference(name=_text(node), **loc)

    def _type_nested_type_identifier(
        self, node: Node, loc: dict[str, int]
    ) -> ast.TypeNode:
        *qualifier, name = [part.strip() for part in _text(node).split(".")]
        return ast.TypeReference(name=name, qualifier=tuple(qualifier), **loc)

    def _type_generic_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        name = self.type(node.child_by_field_name("name"))
        arguments = self.type_arguments(node.child_by_field_name("type_arguments"))
        if not isinstance(name, ast.TypeReference):
            return ast.UnsupportedType(kind="generic_type", text=_text(node), **loc)
        return ast.TypeReference(
            name=name.name,
            qualifier=name.qualifier,
            type_arguments=arguments,
            **loc,
        )

    def _type_array_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.ArrayType(element=self.type(self._only_child(node)), **loc)

    def _type_readonly_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return self.type(self._only_child(node))

    def _type_parenthesized_type(
        self, node: Node, loc: dict[str, int]
    ) -> ast.TypeNode:
        return self.type(self._only_child(node))

    def _type_tuple_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        elements = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type in _PARAMETER_NODES:
                label = child.child_by_field_name("name")
                if label is None:
                    label = child.child_by_field_name("pattern")
                element = self.wrapped_type(
                    child.child_by_field_name("type")
                ) or ast.KeywordType(name="any", **_loc(child))
                if label is not None and label.type == "rest_pattern":
                    element = ast.RestType(element=element, **_loc(child))
                elif child.type == "optional_parameter":
                    element = ast.OptionalType(element=element, **_loc(child))
                elements.append(element)
            else:
                elements.append(self.type(child))
        return ast.TupleType(elements=tuple(elements), **loc)

    def _type_optional_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.OptionalType(element=self.type(self._only_child(node)), **loc)

    def _type_rest_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.RestType(element=self.type(self._only_child(node)), **loc)

    def _flatten(self, node: Node) -> tuple[ast.TypeNode, ...]:
        flattened: list[ast.TypeNode] = []
        for child in node.named_children:
            if child.type == "comment":
                continue
            if child.type == node.type:
                flattened.extend(self._flatten(child))
            else:
                flattened.append(self.type(child))
        return tuple(flattened)

    def _type_union_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.UnionType(types=self._flatten(node), **loc)

    def _type_intersection_type(
        self, node: Node, loc: dict[str, int]
    ) -> ast.TypeNode:
        return ast.IntersectionType(types=self._flatten(node), **loc)

    def _type_literal_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        child = self._only_child(node)
        if child.type in {"null", "undefined"}:
            return ast.KeywordType(name=child.type, **loc)
        value = self.literal_value(child)
        if value is None:
            return ast.UnsupportedType(kind="literal_type", text=_text(node), **loc)
        return ast.LiteralType(value=value, **loc)

    def _type_object_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        for child in node.named_children:
            if child.type == "index_signature" and any(
                grandchild.type == "mapped_type_clause"
                for grandchild in child.named_children
            ):
                return ast.UnsupportedType(kind="mapped_type", text=_text(node), **loc)
        return ast.TypeLiteral(members=self.type_members(node), **loc)

    def _type_function_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        return ast.FunctionType(
            parameters=self.parameters(node),
            return_type=self.wrapped_type(node.child_by_field_name("return_type")),
            **loc,
        )

    def _type_constructor_type(
        self, node: Node, loc: dict[str, int]
    ) -> ast.TypeNode:
        return ast.FunctionType(
            parameters=self.parameters(node),
            return_type=self.wrapped_type(node.child_by_field_name("type")),
            constructor=True,
            **loc,
        )

    def _type_index_type_query(
        self, node: Node, loc: dict[str, int]
    ) -> ast.TypeNode:
        return ast.TypeOperator(
            operator="keyof",
            type=self.type(self._only_child(node)),
            **loc,
        )

    def _type_type_query(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        target = _text(self._only_child(node))
        if any(token in target for token in "([<"):
            return ast.UnsupportedType(kind="type_query", text=_text(node), **loc)
        *qualifier, name = [part.strip() for part in target.split(".")]
        return ast.TypeQuery(name=name, qualifier=tuple(qualifier), **loc)

    def _type_lookup_type(self, node: Node, loc: dict[str, int]) -> ast.TypeNode:
        children = [child for child in node.named_children if child.type != "comment"]
        return ast.IndexedAccessType(
            object_type=self.type(children[0]),
            index_type=self.type(children[1]),
            **loc,
        )


@dataclass(slots=True)
class SyntaxCache:
    """Bounded LRU of parsed modules keyed by extensionless file path.

    The cache is process-scoped: file contents are assumed immutable for the
    lifetime of the process, so parsed modules may be shared across runs.
    """

    maxsize: int = DEFAULT_SYNTAX_CACHE_SIZE
    _entries: OrderedDict[str, ast.Module] = field(default_factory=OrderedDict)

    def get(self, file_path: str) -> ast.Module | None:
        module = self._entries.get(file_path)
        if module is not None:
            self._entries.move_to_end(file_path)
        return module

    def put(self, file_path: str, module: ast.Module) -> None:
        self._entries[file_path] = module
        self._entries.move_to_end(file_path)
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def resize(self, maxsize: int) -> None:
        if maxsize < 1:
            raise ValueError("Syntax cache size must be at least 1")
        self.maxsize = maxsize
        while len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, file_path: Any) -> bool:
        return file_path in self._entries

    @classmethod
    def shared(cls) -> "SyntaxCache":
        """Return the process-wide cache instance."""

        return _SHARED_CACHE


_SHARED_CACHE = SyntaxCache()
