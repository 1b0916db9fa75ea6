"""Tests for :mod:`tscomponents.parse.loader`."""

from __future__ import annotations

import pytest

from tscomponents.parse import nodes as ast
from tscomponents.parse.errors import (
    DeclarationNotFoundError,
    NamespacedSuperclassError,
    UnsupportedEnumMemberError,
    UnsupportedHeritageError,
)
from tscomponents.parse.loader import target_string
from tscomponents.parse.models import EntityKind


async def test_loads_exported_and_declared_classes(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "/** The exported class. */\n"
                "export declare class A {}\n"
                "declare class B {}\n"
            ),
        }
    )

    a = await class_loader.load_class_declaration(reference("A"))
    b = await class_loader.load_class_declaration(reference("B"))

    assert a.kind is EntityKind.CLASS
    assert (a.package_name, a.file_name, a.local_name) == ("pkg", "/pkg/lib/index", "A")
    assert a.qualified_path == ()
    assert a.comment == "The exported class."
    assert b.local_name == "B"
    assert b.comment is None


async def test_interfaces_and_others_require_opt_in(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "export interface I {}\n"
                "export type T = string;\n"
                "export enum E { A = 'a' }\n"
            ),
        }
    )

    with pytest.raises(DeclarationNotFoundError) as excinfo:
        await class_loader.load_class_declaration(reference("I"))
    assert str(excinfo.value) == "Could not load class I from /pkg/lib/index"

    interface = await class_loader.load_class_declaration(reference("I"), True)
    assert interface.kind is EntityKind.INTERFACE

    with pytest.raises(DeclarationNotFoundError) as excinfo:
        await class_loader.load_class_declaration(reference("T"), True)
    assert "class or interface T" in str(excinfo.value)

    alias = await class_loader.load_class_declaration(reference("T"), True, True)
    enum = await class_loader.load_class_declaration(reference("E"), True, True)
    assert alias.kind is EntityKind.TYPE
    assert enum.kind is EntityKind.ENUM


async def test_follows_imports_and_named_reexports(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "import { A as Local } from './a';\n"
                "export { B as Renamed } from './sub/b';\n"
            ),
            "/pkg/lib/a": "export declare class A {}\n",
            "/pkg/lib/sub/b": "export declare class B {}\n",
        }
    )

    local = await class_loader.load_class_declaration(reference("Local"))
    renamed = await class_loader.load_class_declaration(reference("Renamed"))

    assert (local.file_name, local.local_name) == ("/pkg/lib/a", "A")
    assert local.file_name_referenced == "/pkg/lib/index"
    assert (renamed.file_name, renamed.local_name) == ("/pkg/lib/sub/b", "B")


async def test_follows_wildcard_reexports_in_order(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": "export * from './a';\nexport * from './b';\n",
            "/pkg/lib/a": "export declare class OnlyA {}\n",
            "/pkg/lib/b": "export declare class OnlyB {}\nexport declare class OnlyA {}\n",
        }
    )

    only_a = await class_loader.load_class_declaration(reference("OnlyA"))
    only_b = await class_loader.load_class_declaration(reference("OnlyB"))

    assert only_a.file_name == "/pkg/lib/a"
    assert only_b.file_name == "/pkg/lib/b"


async def test_follows_namespace_imports_and_exports(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "import * as N from './n';\n"
                "export * as M from './m';\n"
            ),
            "/pkg/lib/n": "export declare class InN {}\n",
            "/pkg/lib/m": "export declare class InM {}\n",
        }
    )

    in_n = await class_loader.load_class_declaration(reference("InN", qualified_path=("N",)))
    in_m = await class_loader.load_class_declaration(reference("InM", qualified_path=("M",)))

    assert in_n.file_name == "/pkg/lib/n"
    assert in_n.qualified_path == ()
    assert in_m.file_name == "/pkg/lib/m"


async def test_resolves_names_inside_namespaces(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "export declare namespace Outer {\n"
                "    namespace Inner {\n"
                "        class Deep {}\n"
                "    }\n"
                "    class Shallow {}\n"
                "}\n"
            ),
        }
    )

    shallow = await class_loader.load_class_declaration(
        reference("Shallow", qualified_path=("Outer",))
    )
    deep = await class_loader.load_class_declaration(
        reference("Deep", qualified_path=("Outer", "Inner"))
    )

    assert shallow.qualified_path == ("Outer",)
    assert shallow.qualified_name == "Outer.Shallow"
    assert deep.qualified_path == ("Outer", "Inner")


async def test_enum_member_access_yields_literal_alias(
    write_files, class_loader, reference
) -> None:
    write_files({"/pkg/lib/index": "export enum E { A = 'a', B }\n"})

    member = await class_loader.load_class_declaration(
        reference("A", qualified_path=("E",)), True, True
    )

    assert member.kind is EntityKind.TYPE
    assert member.qualified_path == ("E",)
    assert isinstance(member.declaration, ast.TypeAliasDeclaration)
    assert member.declaration.type.value == "a"

    with pytest.raises(UnsupportedEnumMemberError):
        await class_loader.load_class_declaration(
            reference("B", qualified_path=("E",)), True, True
        )


async def test_export_assignment_of_namespace(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "declare namespace N {\n"
                "    class A {}\n"
                "}\n"
                "export = N;\n"
            ),
        }
    )

    entity = await class_loader.load_class_declaration(reference("A"))

    assert entity.qualified_path == ("N",)


async def test_reexport_cycles_terminate_as_not_found(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/a": "export * from './b';\n",
            "/pkg/lib/b": "export * from './a';\n",
        }
    )

    with pytest.raises(DeclarationNotFoundError):
        await class_loader.load_class_declaration(reference("X", file_name="/pkg/lib/a"))


async def test_missing_or_invalid_files_are_reported_as_not_found(
    write_files, class_loader, reference
) -> None:
    write_files({"/pkg/lib/broken": "export class A {\n"})

    with pytest.raises(DeclarationNotFoundError) as missing:
        await class_loader.load_class_declaration(
            reference("A", file_name="/pkg/lib/missing")
        )
    assert "Could not load class A from /pkg/lib/missing" in str(missing.value)
    assert "/pkg/lib/missing.d.ts" in str(missing.value)

    with pytest.raises(DeclarationNotFoundError) as broken:
        await class_loader.load_class_declaration(
            reference("A", file_name="/pkg/lib/broken")
        )
    assert "Could not parse file /pkg/lib/broken.d.ts" in str(broken.value)


async def test_every_route_yields_the_same_entity(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "export { A } from './a';\n"
                "import { A as Alias } from './a';\n"
            ),
            "/pkg/lib/a": "export declare class A {}\n",
        }
    )

    via_export = await class_loader.load_class_declaration(reference("A"))
    via_import = await class_loader.load_class_declaration(reference("Alias"))
    direct = await class_loader.load_class_declaration(
        reference("A", file_name="/pkg/lib/a")
    )

    assert via_export is via_import is direct
    assert class_loader.entities == [direct]


async def test_load_in_scope_prefers_enclosing_namespace(
    write_files, class_loader, reference
) -> None:
    write_files(
        {
            "/pkg/lib/index": (
                "export declare namespace NS {\n"
                "    class Base {}\n"
                "    class Sub extends Base {}\n"
                "}\n"
                "export declare class Base {}\n"
                "export declare class Top {}\n"
            ),
        }
    )
    sub = await class_loader.load_class_declaration(
        reference("Sub", qualified_path=("NS",))
    )

    scoped = await class_loader.load_in_scope(sub, "Base")
    top = await class_loader.load_in_scope(sub, "Top")

    assert scoped.qualified_path == ("NS",)
    assert top.qualified_path == ()


def test_super_class_name_forms(class_loader) -> None:
    plain = ast.ClassDeclaration(
        name="A", extends=ast.HeritageReference(name="B")
    )
    namespaced = ast.ClassDeclaration(
        name="A",
        extends=ast.HeritageReference(name="B", qualifier=("ns",), kind="member"),
    )
    other = ast.ClassDeclaration(
        name="A",
        extends=ast.HeritageReference(name="mixin(B)", kind="other"),
    )

    assert class_loader.get_super_class_name(plain, "lib/A") == "B"
    assert class_loader.get_super_class_name(ast.ClassDeclaration(name="A"), "x") is None
    with pytest.raises(NamespacedSuperclassError):
        class_loader.get_super_class_name(namespaced, "lib/A")
    with pytest.raises(UnsupportedHeritageError):
        class_loader.get_super_class_name(other, "lib/A")


def test_class_interface_names_reject_non_identifiers(class_loader) -> None:
    declaration = ast.ClassDeclaration(
        name="A",
        implements=(
            ast.HeritageReference(name="I"),
            ast.HeritageReference(name="J", qualifier=("ns",), kind="member"),
        ),
    )

    with pytest.raises(UnsupportedHeritageError):
        class_loader.get_class_interface_names(declaration, "lib/A")


def test_super_interface_names_skip_non_identifiers(class_loader) -> None:
    declaration = ast.InterfaceDeclaration(
        name="I",
        extends=(
            ast.HeritageReference(name="J"),
            ast.HeritageReference(name="K", qualifier=("ns",), kind="member"),
        ),
    )

    names = class_loader.get_super_interface_names(declaration, "lib/I")

    assert [name.name for name in names] == ["J"]


@pytest.mark.parametrize(
    ("interfaces", "others", "expected"),
    [
        (False, False, "class"),
        (True, False, "class or interface"),
        (False, True, "class or other"),
        (True, True, "class, interface or other"),
    ],
)
def test_target_string(interfaces: bool, others: bool, expected: str) -> None:
    assert target_string(interfaces, others) == expected
