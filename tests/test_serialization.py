from io import BytesIO

import pytest

from domesque import (
    ParserOptions,
    ResultType,
    SerializationError,
    SerializerOptions,
    element,
    parse,
)

from tests.conftest import FOO_NAMESPACE
from tests.utils import assert_equivalence


def test_declaration():
    node = element("a")
    assert node.to_bytes() == b"<?xml version='1.0' encoding='UTF-8'?>\n<a/>"
    assert node.to_bytes(omit_declaration=True) == b"<a/>"
    assert node.to_text() == "<?xml version='1.0' encoding='UTF-8'?>\n<a/>"


def test_indentation():
    node = element("a", element("b", element("c")))
    assert node.to_text(omit_declaration=True, indent=True).splitlines() == [
        "<a>",
        "  <b>",
        "    <c/>",
        "  </b>",
        "</a>",
    ]
    # the tree itself isn't altered
    assert node.underlying.text is None
    assert node.canonical_text() == "<a><b><c/></b></a>"


def test_indentation_option():
    node = element("a", element("b"))
    text = node.to_text(
        omit_declaration=True, indent=True, options=SerializerOptions("\t")
    )
    assert text.splitlines() == ["<a>", "\t<b/>", "</a>"]


def test_str():
    node = element("a", element("b"))
    assert str(node) == node.to_text(omit_declaration=True, indent=True)
    assert not str(node).startswith("<?xml")


def test_non_ascii_characters():
    node = element("a").set_text("Grüße €")
    assert node.to_bytes(omit_declaration=True) == "<a>Grüße €</a>".encode("utf-8")
    assert node.to_text(omit_declaration=True) == "<a>Grüße €</a>"


def test_subtree_declares_only_used_namespaces(sample_document):
    request = sample_document.find("body").find("request")
    text = request.to_text(omit_declaration=True)
    assert text.startswith("<request>")
    assert FOO_NAMESPACE not in text

    body = sample_document.find("body")
    text = body.to_text(omit_declaration=True)
    assert text.startswith(f'<foo:body xmlns:foo="{FOO_NAMESPACE}">')


def test_subtree_excludes_tail():
    root = parse("<root><a>text</a>tail</root>")
    assert root.find("a").to_text(omit_declaration=True) == "<a>text</a>"


def test_equality():
    assert_equivalence(
        element("a", element("b").set_text("c")),
        parse("<a><b>c</b></a>"),
        parse("<?xml version='1.0' encoding='UTF-8'?>\n<a><b>c</b></a>"),
        parse("<a>\n  <b>c</b>\n</a>", ParserOptions(remove_blank_text=True)),
        parse(b"<a><b>c</b></a>"),
    )
    assert element("a") != element("b")
    assert element("a") != element("a").set_attribute("b", "c")
    assert element("a") != "<a/>"
    assert parse("<a> <b/></a>") != parse("<a><b/></a>")


def test_equal_nodes_in_sets():
    nodes = {element("a"), parse("<a/>"), element("b")}
    assert len(nodes) == 2


def test_round_trip(sample_document):
    for omit_declaration in (False, True):
        text = sample_document.to_text(omit_declaration)
        assert parse(text) == sample_document
        assert parse(text.encode("utf-8")) == sample_document


def test_round_trip_with_indentation(sample_document):
    text = sample_document.to_text(indent=True)
    assert parse(text) != sample_document
    assert parse(text, ParserOptions(remove_blank_text=True)) == sample_document


def test_round_trip_with_whitespace():
    node = element("a").set_text(" ").append(element("b"), element("c").set_text(" "))
    assert node.canonical_text() == "<a> <b/><c> </c></a>"
    assert parse(node.to_text()) == node
    assert parse(node.to_bytes()) == node


def test_round_trip_keeps_cdata(sample_document):
    reparsed = parse(sample_document.to_bytes(indent=True))
    data = reparsed.xpath("//data", ResultType.NODE)
    assert "<![CDATA[random string <b>with tags</b>]]>" in data.to_text()


def test_write():
    buffer = BytesIO()
    assert element("a").write(buffer, omit_declaration=True) is buffer
    assert buffer.getvalue() == b"<a/>"


def test_write_to_closed_buffer():
    buffer = BytesIO()
    buffer.close()
    with pytest.raises(SerializationError):
        element("a").write(buffer)


def test_save(tmp_path):
    path = tmp_path / "a.xml"
    element("a").save(path)
    assert path.read_bytes() == b"<?xml version='1.0' encoding='UTF-8'?>\n<a/>"

    element("b").save(str(path), omit_declaration=True)
    assert path.read_bytes() == b"<b/>"


def test_save_to_missing_directory(tmp_path):
    with pytest.raises(SerializationError):
        element("a").save(tmp_path / "missing" / "a.xml")
