"""Tests for :mod:`tscomponents.parse.syntax`."""

from __future__ import annotations

import pytest

from tscomponents.parse import nodes as ast
from tscomponents.parse.errors import TypeScriptSyntaxError
from tscomponents.parse.syntax import SyntaxCache, parse_typescript


def _parse(text: str) -> ast.Module:
    return parse_typescript(text, "/pkg/lib/index.d.ts")


def _exported(module: ast.Module, index: int = 0):
    statement = module.statements[index]
    assert isinstance(statement, ast.ExportDeclaration)
    return statement.declaration


def test_class_declaration_with_heritage_and_constructor() -> None:
    module = _parse(
        "export declare class A<T extends string = 'x'> extends B<T> "
        "implements C, D<number> {\n"
        "    constructor(a: string, b?: number[], ...rest: boolean[]);\n"
        "    field: string;\n"
        "    method(): void;\n"
        "}\n"
    )

    declaration = _exported(module)
    assert isinstance(declaration, ast.ClassDeclaration)
    assert declaration.name == "A"
    assert declaration.line == 1

    (generic,) = declaration.type_parameters
    assert generic.name == "T"
    assert isinstance(generic.constraint, ast.KeywordType)
    assert generic.constraint.name == "string"
    assert isinstance(generic.default, ast.LiteralType)
    assert generic.default.value == "x"

    assert declaration.extends is not None
    assert declaration.extends.name == "B"
    assert declaration.extends.kind == "identifier"
    assert isinstance(declaration.extends.type_arguments[0], ast.TypeReference)
    assert [item.name for item in declaration.implements] == ["C", "D"]
    assert isinstance(declaration.implements[1].type_arguments[0], ast.KeywordType)

    constructor, field, method = declaration.members
    assert isinstance(constructor, ast.Constructor)
    a, b, rest = constructor.parameters
    assert (a.name, a.optional, a.rest) == ("a", False, False)
    assert (b.name, b.optional) == ("b", True)
    assert isinstance(b.type, ast.ArrayType)
    assert (rest.name, rest.rest) == ("rest", True)
    assert isinstance(field, ast.ClassProperty)
    assert field.name == "field"
    assert isinstance(method, ast.ClassMethod)
    assert method.name == "method"


def test_namespaced_superclass_is_marked_as_member() -> None:
    module = _parse("export declare class A extends ns.B {}\n")

    declaration = _exported(module)
    assert declaration.extends.kind == "member"
    assert declaration.extends.qualifier == ("ns",)
    assert declaration.extends.name == "B"


def test_interface_members() -> None:
    module = _parse(
        "export interface I extends J, K<string> {\n"
        "    a?: string;\n"
        "    readonly b: number;\n"
        "    m(x: string): void;\n"
        "    [key: string]: any;\n"
        "    (x: number): string;\n"
        "    new (x: number): I;\n"
        "}\n"
    )

    declaration = _exported(module)
    assert isinstance(declaration, ast.InterfaceDeclaration)
    assert [item.name for item in declaration.extends] == ["J", "K"]
    a, b, m, index, call, construct = declaration.members
    assert isinstance(a, ast.PropertySignature) and a.optional
    assert isinstance(b, ast.PropertySignature) and b.readonly
    assert isinstance(m, ast.MethodSignature) and m.name == "m"
    assert isinstance(index, ast.IndexSignature)
    assert index.key_name == "key"
    assert index.key_type.name == "string"
    assert index.type.name == "any"
    assert isinstance(call, ast.CallSignature)
    assert isinstance(construct, ast.ConstructSignature)


def test_type_nodes() -> None:
    module = _parse(
        "type U = 'a' | 1 | -2 | true | null | undefined;\n"
        "type I = A & B;\n"
        "type T = [string, number?, ...boolean[]];\n"
        "type R = readonly string[];\n"
        "type K = keyof A;\n"
        "type Q = typeof ns.value;\n"
        "type X = A['key'];\n"
        "type F = (a: string) => void;\n"
        "type G = Array<ns.Inner<string>>;\n"
        "type O = { a: string };\n"
    )
    aliases = {statement.name: statement.type for statement in module.statements}

    union = aliases["U"]
    assert isinstance(union, ast.UnionType)
    literals = [item.value for item in union.types[:4]]
    assert literals == ["a", 1, -2, True]
    assert [item.name for item in union.types[4:]] == ["null", "undefined"]

    assert isinstance(aliases["I"], ast.IntersectionType)

    tuple_ = aliases["T"]
    assert isinstance(tuple_, ast.TupleType)
    assert isinstance(tuple_.elements[0], ast.KeywordType)
    assert isinstance(tuple_.elements[1], ast.OptionalType)
    assert isinstance(tuple_.elements[2], ast.RestType)
    assert isinstance(tuple_.elements[2].element, ast.ArrayType)

    assert isinstance(aliases["R"], ast.ArrayType)

    keyof = aliases["K"]
    assert isinstance(keyof, ast.TypeOperator) and keyof.operator == "keyof"

    query = aliases["Q"]
    assert isinstance(query, ast.TypeQuery)
    assert (query.qualifier, query.name) == (("ns",), "value")

    indexed = aliases["X"]
    assert isinstance(indexed, ast.IndexedAccessType)
    assert indexed.index_type.value == "key"

    assert isinstance(aliases["F"], ast.FunctionType)

    array = aliases["G"]
    assert isinstance(array, ast.TypeReference) and array.name == "Array"
    (inner,) = array.type_arguments
    assert inner.qualifier == ("ns",)
    assert inner.qualified_name == "ns.Inner"

    assert isinstance(aliases["O"], ast.TypeLiteral)


def test_unsupported_type_constructs_are_kept_as_nodes() -> None:
    module = _parse("type C<T> = T extends string ? 'a' : 'b';\n")

    (alias,) = module.statements
    assert isinstance(alias.type, ast.UnsupportedType)
    assert alias.type.kind == "conditional_type"
    assert "extends string" in alias.type.text


def test_enum_members() -> None:
    module = _parse(
        "export enum E {\n"
        "    A = 'a',\n"
        "    B = 2,\n"
        "    C,\n"
        "}\n"
    )

    declaration = _exported(module)
    assert isinstance(declaration, ast.EnumDeclaration)
    a, b, c = declaration.members
    assert a.initializer.value == "a"
    assert b.initializer.value == 2
    assert c.name == "C" and c.initializer is None


def test_dotted_namespace_is_nested() -> None:
    module = _parse("declare namespace A.B {\n    class C {}\n}\n")

    (outer,) = module.statements
    assert isinstance(outer, ast.NamespaceDeclaration)
    assert outer.name == "A"
    (inner_export,) = outer.body.statements
    inner = inner_export.declaration
    assert isinstance(inner, ast.NamespaceDeclaration)
    assert inner.name == "B"
    assert inner.body.statements[0].name == "C"


def test_import_and_export_statements() -> None:
    module = _parse(
        "import { A as B, C } from './a';\n"
        "import * as N from './n';\n"
        "export { X as Y } from './x';\n"
        "export * from './all';\n"
        "export * as M from './m';\n"
        "export { Z };\n"
        "export = Foo;\n"
    )

    imports, namespace, named, export_all, export_named_all, unknown, assign = (
        module.statements
    )
    assert imports.source == "./a"
    assert [(s.imported, s.local) for s in imports.specifiers] == [
        ("A", "B"),
        ("C", "C"),
    ]
    assert namespace.namespace == "N"
    assert named.source == "./x"
    assert named.specifiers == (ast.ExportSpecifier(local="X", exported="Y"),)
    assert isinstance(export_all, ast.ExportAll) and export_all.alias is None
    assert export_named_all.alias == "M"
    assert unknown.source is None
    assert isinstance(assign, ast.ExportAssignment) and assign.name == "Foo"


def test_comments_are_recorded_with_lines() -> None:
    module = _parse(
        "/**\n"
        " * A class.\n"
        " */\n"
        "export class A {}\n"
    )

    (comment,) = module.comments
    assert comment.start_line == 1
    assert comment.end_line == 3
    assert "A class." in comment.text
    assert _exported(module).line == 4


def test_syntax_error_reports_file_and_position() -> None:
    with pytest.raises(TypeScriptSyntaxError) as excinfo:
        _parse("export class A {\n")

    error = excinfo.value
    assert error.file_path == "/pkg/lib/index.d.ts"
    assert error.line >= 1
    assert "Could not parse file /pkg/lib/index.d.ts" in str(error)


def test_syntax_cache_evicts_least_recently_used() -> None:
    cache = SyntaxCache(maxsize=2)
    first, second, third = ast.Module(), ast.Module(), ast.Module()

    cache.put("a", first)
    cache.put("b", second)
    assert cache.get("a") is first
    cache.put("c", third)

    assert "b" not in cache
    assert "a" in cache and "c" in cache
    assert len(cache) == 2

    cache.resize(1)
    assert len(cache) == 1 and "c" in cache
    with pytest.raises(ValueError):
        cache.resize(0)

    cache.clear()
    assert len(cache) == 0
