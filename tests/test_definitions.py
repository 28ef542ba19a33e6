from bidoc.parser import parse_definitions
from bidoc.parser.definitions import split_alias
from bidoc.parser.fragments import init_fragments, text_position
from bidoc.slug import slugify


def _parse(text, path=""):
    return parse_definitions(init_fragments(text, text_position(text)), path, slugify)


def test_simple_definition():
    res = _parse("# [[BiMark]]")
    (d,) = res.defs
    assert d.name == "BiMark"
    assert d.id == "bimark"
    assert d.alias == []
    assert d.refs == []
    assert d.path == ""
    assert d.fragment.locked
    # the raw marker is kept until rendering
    assert d.fragment.content == "[[BiMark]]"
    start, end = d.fragment.position.start, d.fragment.position.end
    assert (start.line, start.column, start.offset) == (1, 3, 2)
    assert (end.line, end.column, end.offset) == (1, 12, 11)


def test_alias_and_explicit_id():
    (d,) = _parse("# [[BiMark|bimark|bi-mark:bm]]", "file.md").defs
    assert d.name == "BiMark"
    assert d.alias == ["bimark", "bi-mark"]
    assert d.id == "bm"
    assert d.path == "file.md"
    assert d.fragment.position.end.column == 30


def test_explicit_id_without_alias():
    (d,) = _parse("[[Name:explicit-id]]").defs
    assert d.name == "Name"
    assert d.alias == []
    assert d.id == "explicit-id"


def test_names_may_contain_spaces_and_unicode():
    res = _parse("[[bidirectional link]] and [[中文]]")
    assert [(d.name, d.id) for d in res.defs] == [
        ("bidirectional link", "bidirectional-link"),
        ("中文", "中文"),
    ]
    assert res.defs[1].fragment.position.start.column == 28


def test_multiline_positions():
    text = "# [[BiMark]]\n\nAuto create [[bidirectional links]] between files."
    first, second = _parse(text).defs

    def span(d):
        p = d.fragment.position
        return (p.start.line, p.start.column), (p.end.line, p.end.column)

    assert span(first) == ((1, 3), (1, 12))
    assert span(second) == ((3, 13), (3, 35))
    p = second.fragment.position
    assert text[p.start.offset : p.end.offset + 1] == "[[bidirectional links]]"


def test_reference_markers_are_not_definitions():
    res = _parse("[[#bm]] [[@BiMark]] [[!BiMark]]")
    assert res.defs == []
    assert all(not f.locked for f in res.fragments)


def test_markers_cannot_span_lines_or_nest():
    assert _parse("[[Bi\nMark]]").defs == []
    assert _parse("[[a[[b]]").defs[0].name == "b"
    assert _parse("[[a/b]]").defs == []


def test_parsing_does_not_register_anything():
    res = _parse("[[A]] [[A]]")
    # duplicates are the registry's concern, a dry scan returns both
    assert [d.name for d in res.defs] == ["A", "A"]


def test_split_alias_keeps_order_and_drops_repeats():
    assert split_alias("|b|a|b|Name", "Name") == ["b", "a"]
    assert split_alias("", "Name") == []
