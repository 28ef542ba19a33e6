import pytest

from bidoc import DefinitionNotFoundError, ReferenceType
from bidoc.parser import parse_all_references, parse_definitions
from bidoc.parser.fragments import init_fragments, text_position
from bidoc.parser.references import (
    parse_explicit_or_escaped_references,
    parse_implicit_references,
)
from bidoc.slug import slugify


def _fragments(text, path=""):
    return parse_definitions(
        init_fragments(text, text_position(text)), path, slugify
    ).fragments


def _resolve(registry, text, path=""):
    return parse_all_references(_fragments(text, path), path, registry)


def test_explicit_reference_by_id_uses_the_definition_name(make_registry):
    registry = make_registry(("", "[[BiMark|bimark|bi-mark:bm]]"))
    res = parse_explicit_or_escaped_references(_fragments("see [[#bm]]"), "", registry)
    (ref,) = res.refs
    assert ref.type is ReferenceType.EXPLICIT
    assert ref.name == "BiMark"
    assert ref.definition is registry.lookup_by_id("bm")
    assert ref.index is None
    assert ref.fragment.locked
    assert ref.fragment.content == "[[#bm]]"
    assert ref.fragment.position.start.column == 5


def test_explicit_reference_by_name_keeps_the_alias(make_registry):
    registry = make_registry(("", "[[BiMark|bimark|bi-mark:bm]]"))
    res = _resolve(registry, "[[@bi-mark]]")
    (ref,) = res.refs
    assert ref.name == "bi-mark"
    assert ref.definition.id == "bm"


def test_escaped_reference(make_registry):
    registry = make_registry(("", "[[BiMark]]"))
    res = _resolve(registry, "say [[!BiMark]] literally", "doc.md")
    assert res.refs == []
    (marker,) = res.escaped
    assert marker.type is ReferenceType.ESCAPED
    assert marker.payload == "BiMark"
    assert marker.path == "doc.md"
    assert marker.fragment.locked


def test_dangling_id_raises_with_location(make_registry):
    registry = make_registry(("", "[[BiMark]]"))
    with pytest.raises(DefinitionNotFoundError) as exc:
        _resolve(registry, "line one\n[[#missing]]", "doc.md")
    err = exc.value
    assert err.lookup == "id"
    assert err.def_id == "missing"
    assert err.def_name is None
    assert err.def_path == "doc.md"
    assert (err.position.start.line, err.position.start.column) == (2, 1)
    assert "Definition not found: id=missing from doc.md" in str(err)


def test_dangling_name_raises(make_registry):
    registry = make_registry()
    with pytest.raises(DefinitionNotFoundError) as exc:
        _resolve(registry, "[[@Nothing Here]]")
    assert exc.value.lookup == "name"
    assert exc.value.def_name == "Nothing Here"


def test_implicit_pass_finds_every_occurrence(make_registry):
    registry = make_registry(("", "[[BiMark]]"))
    definition = registry.lookup_by_name("BiMark")
    text = "BiMark and BiMark\nBiMark"
    res = parse_implicit_references(
        init_fragments(text, text_position(text)), "BiMark", definition, ""
    )
    assert [r.type for r in res.refs] == [ReferenceType.IMPLICIT] * 3
    starts = [
        (r.fragment.position.start.line, r.fragment.position.start.column)
        for r in res.refs
    ]
    assert starts == [(1, 1), (1, 12), (2, 1)]


def test_definition_markers_are_not_references(make_registry):
    registry = make_registry(("", "[[BiMark]]"))
    res = _resolve(registry, "[[BiMark]] BiMark")
    (ref,) = res.refs
    assert ref.fragment.position.start.column == 12


def test_explicit_markers_are_not_rescanned_implicitly(make_registry):
    registry = make_registry(("", "[[bm]]"))
    res = _resolve(registry, "[[#bm]] [[!bm]]")
    assert [r.type for r in res.refs] == [ReferenceType.EXPLICIT]
    assert len(res.escaped) == 1


@pytest.mark.parametrize(
    "declarations",
    ["[[GAN]] [[LayoutGAN]]", "[[LayoutGAN]] [[GAN]]"],
)
def test_longest_name_wins(make_registry, declarations):
    registry = make_registry(("", declarations))
    res = _resolve(registry, "LayoutGAN beats GAN")
    names = sorted(
        (r.fragment.position.start.column, r.definition.name) for r in res.refs
    )
    assert names == [(1, "LayoutGAN"), (17, "GAN")]


def test_overlapping_names_prefer_the_longer(make_registry):
    registry = make_registry(("", "[[cd]] [[abc]]"))
    res = _resolve(registry, "abcd")
    (ref,) = res.refs
    assert ref.definition.name == "abc"
    # the leftover "d" stays plain text
    assert res.fragments[-1].content == "d"
    assert not res.fragments[-1].locked


def test_aliases_resolve_to_their_definition(make_registry):
    registry = make_registry(("", "[[BiMark|bimark]]"))
    res = _resolve(registry, "bimark")
    (ref,) = res.refs
    assert ref.name == "bimark"
    assert ref.definition.name == "BiMark"
