"""
Tests for the TriX writer.

Output is checked by parsing it back with the standard library, so the
assertions do not depend on the engine that produced it.
"""

import xml.etree.ElementTree as ET

import pytest

from rdf_trix.config import WriterOptions, XMLBackend
from rdf_trix.errors import WriteError
from rdf_trix.terms import (
    IRI,
    BlankNode,
    Document,
    Graph,
    Literal,
    QuotedTriple,
    RDF_XML_LITERAL,
    Statement,
    TRIX_NS,
    XML_NS,
    XSD_NS,
)
from rdf_trix.writer import BlankNodeLabels, TriXWriter, serialize_trix, write


EX = "http://example.org/"
T = f"{{{TRIX_NS}}}"


def st(s, p, o, g=None):
    def term(value):
        return IRI(EX + value) if isinstance(value, str) else value
    return Statement(term(s), term(p), term(o), term(g) if g is not None else None)


def parse(data) -> ET.Element:
    return ET.fromstring(data)


def graph_names(root: ET.Element):
    names = []
    for graph in root.findall(f"{T}graph"):
        first = graph[0] if len(graph) else None
        if first is not None and first.tag in (f"{T}uri", f"{T}id"):
            names.append(first.text)
        else:
            names.append(None)
    return names


@pytest.fixture(params=[XMLBackend.ETREE, XMLBackend.LXML], ids=lambda b: b.value)
def backend(request):
    return request.param


class TestGraphGrouping:
    """Test graph element boundaries."""

    def test_non_contiguous_graphs_not_merged(self, backend):
        """g1, g2, g1 gives three <graph> elements."""
        statements = [st("a", "b", "c", "g1"), st("d", "e", "f", "g2"), st("x", "y", "z", "g1")]

        root = parse(serialize_trix(statements, backend=backend))

        assert graph_names(root) == [EX + "g1", EX + "g2", EX + "g1"]

    def test_contiguous_statements_share_graph(self, backend):
        statements = [st("a", "b", "c", "g1"), st("d", "e", "f", "g1")]

        root = parse(serialize_trix(statements, backend=backend))

        graphs = root.findall(f"{T}graph")
        assert len(graphs) == 1
        assert len(graphs[0].findall(f"{T}triple")) == 2

    def test_default_graph_has_no_name(self, backend):
        root = parse(serialize_trix([st("a", "b", "c"), st("d", "e", "f")], backend=backend))
        graphs = root.findall(f"{T}graph")
        assert len(graphs) == 1
        assert graph_names(root) == [None]

    def test_default_then_named(self, backend):
        root = parse(serialize_trix([st("a", "b", "c"), st("d", "e", "f", "g")], backend=backend))
        assert graph_names(root) == [None, EX + "g"]

    def test_blank_node_graph_name(self, backend):
        g = BlankNode("g")
        root = parse(serialize_trix([st("a", "b", "c", g), st("d", "e", "f", g)], backend=backend))
        graph, = root.findall(f"{T}graph")
        assert graph[0].tag == f"{T}id"
        assert graph[0].text == "b0"

    def test_empty(self, backend):
        root = parse(serialize_trix([], backend=backend))
        assert root.tag == f"{T}TriX"
        assert len(root) == 0


class TestScopedGraphs:
    """Test explicit graph scopes."""

    def test_scope_forces_boundary(self, backend):
        writer = TriXWriter(backend=backend)
        g = IRI(EX + "g")
        with writer.scoped_graph(g):
            writer.write_statement(st("a", "b", "c", "g"))
        with writer.scoped_graph(g):
            writer.write_statement(st("d", "e", "f", "g"))

        assert graph_names(parse(writer.to_bytes())) == [EX + "g", EX + "g"]

    def test_scope_adopts_unnamed_statements(self, backend):
        writer = TriXWriter(backend=backend)
        with writer.scoped_graph(IRI(EX + "g")):
            writer.write_triple(IRI(EX + "a"), IRI(EX + "b"), IRI(EX + "c"))

        root = parse(writer.to_bytes())
        assert graph_names(root) == [EX + "g"]
        assert len(root.find(f"{T}graph").findall(f"{T}triple")) == 1

    def test_scope_rejects_other_graph(self, backend):
        writer = TriXWriter(backend=backend)
        with writer.scoped_graph(IRI(EX + "g")):
            assert writer.write_statement(st("a", "b", "c", "other")) is False
        assert isinstance(writer.errors[0], WriteError)

    def test_no_nesting(self, backend):
        writer = TriXWriter(backend=backend)
        with writer.scoped_graph(IRI(EX + "g")):
            with pytest.raises(WriteError):
                with writer.scoped_graph(IRI(EX + "h")):
                    pass

    def test_statement_after_scope_opens_new_graph(self, backend):
        writer = TriXWriter(backend=backend)
        with writer.scoped_graph(IRI(EX + "g")):
            writer.write_statement(st("a", "b", "c", "g"))
        writer.write_statement(st("d", "e", "f", "g"))

        assert graph_names(parse(writer.to_bytes())) == [EX + "g", EX + "g"]

    def test_write_document(self, backend):
        g = IRI(EX + "g")
        document = Document(graphs=[
            Graph(name=g, statements=[st("a", "b", "c", "g")]),
            Graph(name=g, statements=[st("d", "e", "f", "g")]),
            Graph(statements=[st("x", "y", "z")]),
        ])

        root = parse(serialize_trix(document, backend=backend))

        assert graph_names(root) == [EX + "g", EX + "g", None]


class TestTerms:
    """Test term elements."""

    def _triple(self, statement, backend, **options):
        root = parse(serialize_trix([statement], backend=backend, **options))
        return list(root.find(f"{T}graph").find(f"{T}triple"))

    def test_uri(self, backend):
        s, p, o = self._triple(st("a", "b", "c"), backend)
        assert (s.tag, s.text) == (f"{T}uri", EX + "a")

    def test_relative_to_base(self, backend):
        """IRIs under the base are written relative; xml:base is set on the root."""
        data = serialize_trix([st("a", "b", "c")], backend=backend, base_uri=EX)
        root = parse(data)
        s = root.find(f"{T}graph").find(f"{T}triple")[0]
        assert s.text == "a"
        assert root.get(f"{{{XML_NS}}}base") == EX

    def test_outside_base_stays_absolute(self, backend):
        statement = Statement(IRI("http://other.org/a"), IRI(EX + "b"), IRI(EX + "c"))
        s, _, _ = self._triple(statement, backend, base_uri=EX)
        assert s.text == "http://other.org/a"

    def test_language_literal(self, backend):
        _, _, o = self._triple(st("a", "b", Literal("chat", language="fr")), backend)
        assert o.tag == f"{T}plainLiteral"
        assert o.get(f"{{{XML_NS}}}lang") == "fr"
        assert o.text == "chat"

    def test_typed_literal(self, backend):
        _, _, o = self._triple(st("a", "b", Literal("32", datatype=IRI(XSD_NS + "integer"))), backend)
        assert o.tag == f"{T}typedLiteral"
        assert o.get("datatype") == XSD_NS + "integer"
        assert o.text == "32"

    def test_simple_literal(self, backend):
        _, _, o = self._triple(st("a", "b", Literal("a < b & c")), backend)
        assert o.tag == f"{T}plainLiteral"
        assert o.attrib == {}
        assert o.text == "a < b & c"

    def test_xml_literal_embedded_as_markup(self, backend):
        literal = Literal("some <em>markup</em>", datatype=IRI(RDF_XML_LITERAL))
        _, _, o = self._triple(st("a", "b", literal), backend)
        assert o.text == "some "
        assert o[0].tag == "em"
        assert o[0].text == "markup"

    def test_xml_literal_keeps_no_namespace(self, backend):
        """Unprefixed literal markup is not pulled into the TriX namespace."""
        literal = Literal("<em>x</em> and <i>y</i>", datatype=IRI(RDF_XML_LITERAL))
        _, _, o = self._triple(st("a", "b", literal), backend)
        assert [child.tag for child in o] == ["em", "i"]
        assert o[0].tail == " and "

    def test_typed_literal_default_engine(self):
        """The datatype attribute does not stop the TriX default namespace."""
        statement = st("a", "b", Literal("2024-01-31", datatype=IRI(XSD_NS + "date")))
        data = serialize_trix([statement])
        assert f'xmlns="{TRIX_NS}"' in data
        assert f'<typedLiteral datatype="{XSD_NS}date">2024-01-31</typedLiteral>' in data

    def test_blank_node_labels(self, backend):
        x, y = BlankNode("x"), BlankNode("y")
        root = parse(serialize_trix([st(x, "p", y), st(y, "p", x)], backend=backend))
        labels = [t[0].text for t in root.iter(f"{T}triple")] + [t[2].text for t in root.iter(f"{T}triple")]
        assert labels == ["b0", "b1", "b1", "b0"]

    def test_quoted_triple(self, backend):
        inner = st(BlankNode("x"), "p", "o")
        x = inner.subject
        statement = Statement(QuotedTriple(inner), IRI(EX + "says"), QuotedTriple(st(x, "q", QuotedTriple(inner))))

        root = parse(serialize_trix([statement], backend=backend))
        outer = root.find(f"{T}graph").find(f"{T}triple")

        assert outer[0].tag == f"{T}triple"
        assert outer[2][2].tag == f"{T}triple"
        # shared blank node keeps one label at every depth
        assert outer[0][0].text == outer[2][0].text == outer[2][2][0].text == "b0"


class TestErrors:
    """Test write failures."""

    CONFLICTING = Literal("x", datatype=IRI(XSD_NS + "string"), language="en")

    def test_conflicting_literal_skipped(self, backend):
        writer = TriXWriter(backend=backend)
        assert writer.write_statement(st("a", "b", self.CONFLICTING)) is False
        assert writer.write_statement(st("c", "d", "e")) is True

        error, = writer.errors
        assert error.object == self.CONFLICTING
        assert error.subject == IRI(EX + "a")
        assert len(parse(writer.to_bytes()).findall(f"{T}graph/{T}triple")) == 1

    def test_strict(self, backend):
        writer = TriXWriter(backend=backend, strict=True)
        with pytest.raises(WriteError) as info:
            writer.write_statement(st("a", "b", self.CONFLICTING))
        assert info.value.predicate == IRI(EX + "b")

    def test_failed_statement_opens_no_graph(self, backend):
        writer = TriXWriter(backend=backend)
        writer.write_statement(st("a", "b", self.CONFLICTING, "g"))
        assert parse(writer.to_bytes()).findall(f"{T}graph") == []

    def test_literal_subject(self, backend):
        writer = TriXWriter(backend=backend, strict=True)
        with pytest.raises(WriteError):
            writer.write_statement(Statement(Literal("s"), IRI(EX + "p"), IRI(EX + "o")))

    def test_literal_graph_name(self, backend):
        writer = TriXWriter(backend=backend, strict=True)
        with pytest.raises(WriteError):
            writer.write_statement(Statement(IRI(EX + "s"), IRI(EX + "p"), IRI(EX + "o"), Literal("g")))

    def test_nested_error_reports_top_statement(self, backend):
        bad_inner = Statement(IRI(EX + "s"), BlankNode("p"), IRI(EX + "o"))
        top = Statement(QuotedTriple(bad_inner), IRI(EX + "p"), IRI(EX + "o"))
        writer = TriXWriter(backend=backend, strict=True)
        with pytest.raises(WriteError) as info:
            writer.write_statement(top)
        assert info.value.statement is top

    def test_bad_xml_literal(self, backend):
        writer = TriXWriter(backend=backend)
        literal = Literal("<unclosed>", datatype=IRI(RDF_XML_LITERAL))
        assert writer.write_statement(st("a", "b", literal)) is False

    def test_write_after_finish(self, backend):
        writer = TriXWriter(backend=backend)
        writer.finish()
        with pytest.raises(WriteError):
            writer.write_statement(st("a", "b", "c"))


class TestOutput:
    """Test serialization options."""

    def test_declaration_and_encoding(self, backend):
        data = TriXWriter(backend=backend, encoding="iso-8859-1").to_bytes()
        assert data.startswith(b"<?xml")
        assert b"iso-8859-1" in data.splitlines()[0].lower()

    def test_non_ascii(self, backend):
        text = serialize_trix([st("a", "b", Literal("café"))], backend=backend)
        literal = parse(text.encode("utf-8")).find(f"{T}graph/{T}triple/{T}plainLiteral")
        assert literal.text == "café"

    def test_indent(self, backend):
        data = serialize_trix([st("a", "b", "c")], backend=backend)
        assert "\n  <graph>" in data
        assert "\n    <triple>" in data

    def test_compact(self, backend):
        data = serialize_trix([st("a", "b", "c")], backend=backend, indent=None)
        assert "\n  <graph>" not in data

    def test_default_namespace(self, backend):
        data = serialize_trix([st("a", "b", "c")], backend=backend)
        assert f'xmlns="{TRIX_NS}"' in data
        assert "ns0:" not in data

    def test_comment(self, backend):
        writer = TriXWriter(backend=backend)
        writer.write_comment("top")
        writer.write_statement(st("a", "b", "c"))
        writer.write_comment("in -- graph")
        data = writer.to_string()
        assert "<!--top-->" in data
        assert "<!--in - - graph-->" in data

    def test_write_returns_root(self, backend):
        root = write([st("a", "b", "c")], WriterOptions(backend=backend))
        assert root.tag == f"{T}TriX"

    def test_library(self, backend):
        assert TriXWriter(backend=backend).library == backend.value


class TestBlankNodeLabels:
    def test_sequence(self):
        labels = BlankNodeLabels()
        a, b = BlankNode("a"), BlankNode("b")
        assert [labels.label_for(n) for n in (a, b, a)] == ["b0", "b1", "b0"]
        assert len(labels) == 2

    def test_rollback(self):
        labels = BlankNodeLabels()
        a, b, c = BlankNode("a"), BlankNode("b"), BlankNode("c")
        labels.label_for(a)
        mark = labels.mark()
        labels.label_for(b)
        labels.rollback(mark)
        assert labels.label_for(c) == "b1"
        assert labels.label_for(b) == "b2"
        assert labels.label_for(a) == "b0"

    @pytest.mark.parametrize("backend", [XMLBackend.ETREE, XMLBackend.LXML], ids=lambda b: b.value)
    def test_failed_statement_uses_no_label(self, backend):
        """Labels taken by a skipped statement are handed out again."""
        bad = Statement(BlankNode("x"), IRI(EX + "p"), Literal("v", datatype=IRI(XSD_NS + "string"), language="en"))
        y = BlankNode("y")
        writer = TriXWriter(backend=backend)

        assert writer.write_statement(bad) is False
        assert writer.write_statement(Statement(y, IRI(EX + "p"), y, BlankNode("g"))) is True

        root = parse(writer.to_bytes())
        graph = root.find(f"{T}graph")
        assert graph[0].text == "b0"
        assert graph.find(f"{T}triple")[0].text == "b1"
