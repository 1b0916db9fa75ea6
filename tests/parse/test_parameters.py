"""Tests for :mod:`tscomponents.parse.parameters`."""

from __future__ import annotations

import pytest

from tscomponents.parse import nodes as ast
from tscomponents.parse.errors import (
    IllegalNestedArrayError,
    MissingTypeAnnotationError,
    UnsupportedTypeError,
)
from tscomponents.parse.models import (
    GenericTypeParameterData,
    GenericTypeReferenceRange,
    HashRange,
    IndexedRange,
    InterfaceRange,
    KeyofRange,
    LiteralRange,
    OverrideRange,
    ParameterKind,
    RawRange,
    RestRange,
    TupleRange,
    TypeofRange,
    UndefinedRange,
    UnionRange,
    WildcardRange,
)
from tscomponents.parse.parameters import ParameterLoader


@pytest.fixture
def load_entity(write_files, class_loader, reference):
    async def _load(text: str, name: str):
        write_files({"/pkg/lib/index": text})
        return await class_loader.load_class_declaration(reference(name), True, True)

    return _load


async def test_interface_fields_shapes(load_entity, parameter_loader) -> None:
    entity = await load_entity(
        "export interface I {\n"
        "    a: string;\n"
        "    b?: number[];\n"
        "    c: Array<Foo>;\n"
        "    d: { [k: string]: number };\n"
        "    e: Record<string, boolean>;\n"
        "    /** @range {json} */\n"
        "    f: any;\n"
        "    /** @ignored */\n"
        "    g: string;\n"
        "    /** Index docs. */\n"
        "    [key: string]: number;\n"
        "}\n",
        "I",
    )

    fields = {
        field.name: field for field in parameter_loader.load_interface_fields(entity)
    }

    assert list(fields) == ["a", "b", "c", "d", "e", "f", "string"]

    a = fields["a"]
    assert a.range == RawRange(value="string")
    assert (a.unique, a.required) == (True, True)

    b = fields["b"]
    assert b.range == RawRange(value="number")
    assert (b.unique, b.required) == (False, False)

    c = fields["c"]
    assert isinstance(c.range, InterfaceRange)
    assert c.range.name == "Foo"
    assert c.range.origin is entity
    assert c.unique is False

    for name in ("d", "e"):
        assert isinstance(fields[name].range, HashRange)
        assert (fields[name].unique, fields[name].required) == (False, False)

    assert fields["f"].range == OverrideRange(value="json")
    assert fields["f"].unique is True

    index = fields["string"]
    assert index.kind is ParameterKind.INDEX
    assert index.domain == "string"
    assert index.range == RawRange(value="number")
    assert index.comment == "Index docs."


async def test_record_alias_expands_to_index_signature(
    load_entity, parameter_loader
) -> None:
    entity = await load_entity(
        "export interface I {\n    e: Record<number, string>;\n}\n", "I"
    )

    (field,) = parameter_loader.load_interface_fields(entity)
    (index,) = parameter_loader.load_hash_fields(entity, field.range.node)

    assert index.kind is ParameterKind.INDEX
    assert index.domain == "number"
    assert index.range == RawRange(value="string")


async def test_type_node_classification(load_entity, parameter_loader) -> None:
    entity = await load_entity(
        "export interface I<T> {\n"
        "    raw: String;\n"
        "    generic: T;\n"
        "    union: 'a' | 1 | undefined;\n"
        "    tuple: [string, number?, ...boolean[]];\n"
        "    keys: keyof Foo;\n"
        "    query: typeof ns.value;\n"
        "    indexed: Foo['key'];\n"
        "    callback: (a: string) => void;\n"
        "    nothing: void;\n"
        "    anything: unknown;\n"
        "    qualified: ns.Inner<string>;\n"
        "}\n",
        "I",
    )

    fields = {
        field.name: field.range
        for field in parameter_loader.load_interface_fields(entity)
    }

    assert fields["raw"] == RawRange(value="string")
    assert fields["generic"] == GenericTypeReferenceRange(name="T", origin=entity)
    assert fields["union"] == UnionRange(
        elements=(LiteralRange(value="a"), LiteralRange(value=1), UndefinedRange())
    )
    assert fields["tuple"] == TupleRange(
        elements=(
            RawRange(value="string"),
            UnionRange(elements=(RawRange(value="number"), UndefinedRange())),
            RestRange(element=RawRange(value="boolean")),
        )
    )
    assert isinstance(fields["keys"], KeyofRange)
    assert fields["query"] == TypeofRange(
        name="value", qualified_path=("ns",), origin=entity
    )
    indexed = fields["indexed"]
    assert isinstance(indexed, IndexedRange)
    assert indexed.index == LiteralRange(value="key")
    assert fields["callback"] == WildcardRange()
    assert fields["nothing"] == UndefinedRange()
    assert fields["anything"] == WildcardRange()
    qualified = fields["qualified"]
    assert (qualified.name, qualified.qualified_path) == ("Inner", ("ns",))
    assert qualified.instantiations == (RawRange(value="string"),)


async def test_nested_arrays_are_rejected(load_entity, parameter_loader) -> None:
    entity = await load_entity(
        "export interface I {\n    grid: string[][];\n}\n", "I"
    )

    with pytest.raises(IllegalNestedArrayError) as excinfo:
        parameter_loader.load_interface_fields(entity)

    assert "field grid" in str(excinfo.value)


async def test_lenient_mode_downgrades_to_wildcard(
    load_entity, comment_loader, logger, log_capture
) -> None:
    entity = await load_entity(
        "export interface I {\n"
        "    grid: Array<string[]>;\n"
        "    cond: string extends T ? 'a' : 'b';\n"
        "    method(): void;\n"
        "    bare;\n"
        "    ok: string;\n"
        "}\n",
        "I",
    )
    loader = ParameterLoader(
        comment_loader=comment_loader,
        hard_error_unsupported=False,
        logger=logger,
    )

    fields = loader.load_interface_fields(entity)

    assert [(field.name, field.range) for field in fields] == [
        ("grid", WildcardRange()),
        ("cond", WildcardRange()),
        ("bare", WildcardRange()),
        ("ok", RawRange(value="string")),
    ]
    events = [entry["event"] for entry in log_capture.entries]
    assert events.count("unsupported-shape") == 4
    assert all(
        entry["reference"] == "I"
        for entry in log_capture.entries
        if entry["event"] == "unsupported-shape"
    )


async def test_strict_mode_raises_for_unsupported_members(
    load_entity, class_loader, parameter_loader, reference
) -> None:
    entity = await load_entity(
        "export interface I {\n    method(): void;\n}\n"
        "export interface J {\n    bare;\n}\n",
        "I",
    )
    with pytest.raises(UnsupportedTypeError):
        parameter_loader.load_interface_fields(entity)

    bare = await class_loader.load_class_declaration(reference("J"), True)
    with pytest.raises(MissingTypeAnnotationError):
        parameter_loader.load_interface_fields(bare)


async def test_constructor_fields_merge_comments_along_chain(
    load_entity, class_loader, parameter_loader, reference
) -> None:
    sub = await load_entity(
        "export declare class Base {\n"
        "    /**\n"
        "     * @param x - The x @range {number}\n"
        "     * @param y - Base y\n"
        "     */\n"
        "    constructor(x: any, y: string);\n"
        "}\n"
        "export declare class Sub extends Base {\n"
        "    /**\n"
        "     * @param y - Sub y @default {hello}\n"
        "     * @param w - Hidden @ignored\n"
        "     */\n"
        "    constructor(x: any, y: string, z?: boolean, w?: string, ...rest: number[]);\n"
        "}\n",
        "Sub",
    )
    base = await class_loader.load_class_declaration(reference("Base"))
    (sub_constructor,) = sub.declaration.members
    (base_constructor,) = base.declaration.members

    fields = parameter_loader.load_constructor_fields(
        [(sub, sub_constructor), (base, base_constructor)]
    )

    x, y, z, rest = fields
    assert x.range == OverrideRange(value="number")
    assert x.comment == "The x"
    assert y.comment == "Sub y"
    assert y.default == "hello"
    assert (z.name, z.required, z.comment) == ("z", False, None)
    assert rest.name == "rest"
    assert rest.unique is False
    assert rest.range == RawRange(value="number")


async def test_class_generics(load_entity, parameter_loader) -> None:
    entity = await load_entity(
        "export interface G<V, T extends string = 'a', U = number> {}\n", "G"
    )

    generics = parameter_loader.load_class_generics(entity)

    assert generics == [
        GenericTypeParameterData(name="V"),
        GenericTypeParameterData(
            name="T",
            range=RawRange(value="string"),
            default=LiteralRange(value="a"),
        ),
        GenericTypeParameterData(name="U", default=RawRange(value="number")),
    ]


async def test_index_key_must_be_raw(load_entity, parameter_loader) -> None:
    entity = await load_entity(
        "export interface I {\n    [key: Foo]: string;\n}\n", "I"
    )

    with pytest.raises(UnsupportedTypeError) as excinfo:
        parameter_loader.load_interface_fields(entity)

    assert "index signature keys" in str(excinfo.value)


async def test_custom_overrides_replace_defaults(load_entity) -> None:
    class Always:
        def handle(self, type_node: ast.TypeReference, owner):
            return RawRange(value="string")

    loader = ParameterLoader(overrides=[Always()])
    owner = await load_entity("export interface O {}\n", "O")

    result = loader.load_range(
        owner, ast.TypeReference(name="Anything"), "field x"
    )

    assert result == RawRange(value="string")
