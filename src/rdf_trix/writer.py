"""
TriX Serializer.

Consumes statements in order and builds a TriX element tree. Adjacent
statements with the same graph name share one <graph> element; the writer
never reorders its input, so a graph name that comes back after another
graph opens a new <graph> element.

    writer = TriXWriter(base_uri="http://example.org/")
    for statement in statements:
        writer.write_statement(statement)
    text = writer.to_string()
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union
import logging

from rdf_trix.backends import ElementAdapter, get_adapter
from rdf_trix.config import WriterOptions
from rdf_trix.errors import MalformedDocumentError, WriteError
from rdf_trix.iri import relativize_iri
from rdf_trix.terms import (
    IRI,
    BlankNode,
    Document,
    Graph,
    GraphName,
    Literal,
    QuotedTriple,
    RDF_LANG_STRING,
    RDF_XML_LITERAL,
    Statement,
    Term,
    term_kind_name,
)

logger = logging.getLogger(__name__)


class BlankNodeLabels:
    """Assigns b0, b1, ... to blank node identities for one write operation."""

    def __init__(self, prefix: str = "b"):
        self.prefix = prefix
        self._labels: Dict[str, str] = {}

    def label_for(self, node: BlankNode) -> str:
        label = self._labels.get(node.identity)
        if label is None:
            label = self._labels[node.identity] = f"{self.prefix}{len(self._labels)}"
        return label

    def mark(self) -> int:
        return len(self._labels)

    def rollback(self, mark: int) -> None:
        """Forget labels assigned since `mark`, so the next one reuses its number."""
        for identity in list(self._labels)[mark:]:
            del self._labels[identity]

    def __len__(self) -> int:
        return len(self._labels)


class TermFormatter:
    """Converts one Term into one TriX element."""

    def __init__(self, adapter: ElementAdapter, base_uri: Optional[str] = None,
                 labels: Optional[BlankNodeLabels] = None):
        self.adapter = adapter
        self.base_uri = base_uri
        self.labels = labels if labels is not None else BlankNodeLabels()

    def format_term(self, term: Term) -> Any:
        if isinstance(term, IRI):
            return self.format_uri(term)
        if isinstance(term, BlankNode):
            return self.format_bnode(term)
        if isinstance(term, Literal):
            return self.format_literal(term)
        if isinstance(term, QuotedTriple):
            return self.format_triple(term.statement)
        raise WriteError(f"Cannot write {term_kind_name(term)} as a TriX term")

    def format_uri(self, iri: IRI) -> Any:
        return self.adapter.make_element("uri", relativize_iri(self.base_uri, iri.value))

    def format_bnode(self, node: BlankNode) -> Any:
        return self.adapter.make_element("id", self.labels.label_for(node))

    def format_literal(self, literal: Literal) -> Any:
        datatype = literal.datatype.value if literal.datatype is not None else None
        if literal.language:
            if datatype is not None and datatype != RDF_LANG_STRING:
                raise WriteError(
                    f"Literal has both datatype <{datatype}> and language {literal.language!r}"
                )
            return self.adapter.make_element(
                "plainLiteral", literal.lexical, {"xml:lang": literal.language}
            )
        if datatype == RDF_XML_LITERAL:
            element = self.adapter.make_element("typedLiteral", attrs={"datatype": datatype})
            try:
                self.adapter.append_markup(element, literal.lexical)
            except MalformedDocumentError as e:
                raise WriteError(str(e)) from e
            return element
        if datatype is not None:
            return self.adapter.make_element("typedLiteral", literal.lexical, {"datatype": datatype})
        return self.adapter.make_element("plainLiteral", literal.lexical)

    def format_triple(self, statement: Statement) -> Any:
        """A <triple> element; quoted triples nest to any depth."""
        if isinstance(statement.subject, Literal):
            raise WriteError("Subject must not be a literal")
        if not isinstance(statement.predicate, IRI):
            raise WriteError(f"Predicate must be an IRI, not {term_kind_name(statement.predicate)}")
        children = [self.format_term(term) for term in statement.triple]
        element = self.adapter.make_element("triple")
        for child in children:
            self.adapter.append_child(element, child)
        return element


def _is_graph_name(term: Any) -> bool:
    return term is None or isinstance(term, (IRI, BlankNode))


class TriXWriter:
    """
    Writer for TriX documents.

    Holds the state of one document emission: the open <graph> element, its
    name, and the blank node label table.
    """

    def __init__(self, options: Optional[WriterOptions] = None, **overrides: Any):
        options = options or WriterOptions()
        if overrides:
            options = options.replace(**overrides)
        self.options = options
        self.adapter = get_adapter(options.backend)
        self.labels = BlankNodeLabels()
        self.formatter = TermFormatter(self.adapter, options.base_uri, self.labels)
        self.errors: List[WriteError] = []
        self.count = 0

        attrs = {"xml:base": options.base_uri} if options.base_uri else None
        self.root = self.adapter.make_element("TriX", attrs=attrs, root=True)
        self._graph: Optional[Any] = None
        self._graph_name: Optional[GraphName] = None
        self._scoped = False
        self._finished = False

    @property
    def library(self) -> str:
        """Name of the underlying XML library."""
        return self.adapter.name

    # -------------------------------------------------------------------------
    # Graph state
    # -------------------------------------------------------------------------

    def _open_graph(self, name: Optional[GraphName], name_element: Optional[Any] = None) -> None:
        self._graph = self.adapter.make_element("graph")
        if name is not None:
            if name_element is None:
                name_element = self.formatter.format_term(name)
            self.adapter.append_child(self._graph, name_element)
        self.adapter.append_child(self.root, self._graph)
        self._graph_name = name

    def _close_graph(self) -> None:
        self._graph = None
        self._graph_name = None

    def _check_open(self) -> None:
        if self._finished:
            raise WriteError("TriX writer is already finished")

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def write_statement(self, statement: Statement) -> bool:
        """
        Append one statement.

        Returns:
            True if written, False if skipped because it could not be formatted

        Raises:
            WriteError: in strict mode, for a statement that cannot be written
        """
        self._check_open()
        graph_name = statement.graph_name
        mark = self.labels.mark()
        try:
            if not _is_graph_name(graph_name):
                raise WriteError(f"Graph name must be an IRI or blank node, not {term_kind_name(graph_name)}")
            if self._scoped:
                if graph_name is not None and graph_name != self._graph_name:
                    raise WriteError(f"Statement graph {graph_name} does not match scoped graph {self._graph_name}")
                new_graph, name_element = False, None
            else:
                new_graph = self._graph is None or graph_name != self._graph_name
                name_element = None
                if new_graph and graph_name is not None:
                    name_element = self.formatter.format_term(graph_name)
            triple_element = self.formatter.format_triple(statement)
        except WriteError as e:
            self.labels.rollback(mark)
            error = WriteError(str(e), statement)
            if self.options.strict:
                raise error from e
            self.errors.append(error)
            logger.warning(f"Skipping statement that cannot be written as TriX: {error}")
            return False

        if new_graph:
            self._close_graph()
            self._open_graph(graph_name, name_element)
        self.adapter.append_child(self._graph, triple_element)
        self.count += 1
        return True

    def write_triple(self, subject: Term, predicate: Term, obj: Term) -> bool:
        """Append a triple to the default graph."""
        return self.write_statement(Statement(subject, predicate, obj))

    def write_statements(self, statements: Iterable[Statement]) -> int:
        """Append statements in order; returns how many were written."""
        written = 0
        for statement in statements:
            if self.write_statement(statement):
                written += 1
        return written

    @contextmanager
    def scoped_graph(self, name: Optional[GraphName] = None) -> Iterator["TriXWriter"]:
        """
        Write a block of statements into their own <graph> element.

        A new <graph> is opened even if the previous one had the same name,
        and closed when the block ends.
        """
        self._check_open()
        if self._scoped:
            raise WriteError("Scoped graphs cannot be nested")
        if not _is_graph_name(name):
            raise WriteError(f"Graph name must be an IRI or blank node, not {term_kind_name(name)}")
        self._close_graph()
        self._open_graph(name)
        self._scoped = True
        try:
            yield self
        finally:
            self._scoped = False
            self._close_graph()

    def write_graph(self, graph: Graph) -> int:
        """Write a Graph as exactly one <graph> element."""
        with self.scoped_graph(graph.name):
            return self.write_statements(graph.statements)

    def write_document(self, document: Document) -> int:
        """Write each Graph of a Document as its own <graph> element."""
        return sum(self.write_graph(graph) for graph in document.graphs)

    def write_comment(self, text: str) -> None:
        """Append an XML comment to the open graph, or to the root."""
        self._check_open()
        # "--" is not allowed inside XML comments
        comment = self.adapter.make_comment(str(text).replace("--", "- -"))
        parent = self._graph if self._graph is not None else self.root
        self.adapter.append_child(parent, comment)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def finish(self) -> Any:
        """Close any open graph and return the root element."""
        if not self._finished:
            self._close_graph()
            self._finished = True
            logger.debug(f"Wrote {self.count} TriX statements ({len(self.errors)} skipped)")
        return self.root

    def _is_xml_literal(self, element: Any) -> bool:
        return (
            self.adapter.tag_name(element) == "typedLiteral"
            and self.adapter.attribute(element, "datatype") == RDF_XML_LITERAL
        )

    def to_bytes(self) -> bytes:
        """Serialize the document in the configured encoding."""
        root = self.finish()
        return self.adapter.serialize(
            root,
            encoding=self.options.encoding,
            indent=self.options.indent,
            opaque=self._is_xml_literal,
        )

    def to_string(self) -> str:
        return self.to_bytes().decode(self.options.encoding)


def _write_all(writer: TriXWriter, statements: Union[Document, Iterable[Statement]]) -> None:
    if isinstance(statements, Document):
        writer.write_document(statements)
    else:
        writer.write_statements(statements)


def write(statements: Union[Document, Iterable[Statement]],
          options: Optional[WriterOptions] = None, **overrides: Any) -> Any:
    """
    Build a TriX element tree.

    Args:
        statements: Statements in output order, or a Document
        options: Writer options; keyword overrides are applied on top

    Returns:
        Root <TriX> element of the selected XML engine
    """
    writer = TriXWriter(options, **overrides)
    _write_all(writer, statements)
    return writer.finish()


def serialize_trix(statements: Union[Document, Iterable[Statement]],
                   options: Optional[WriterOptions] = None, **overrides: Any) -> str:
    """
    Serialize statements to TriX.

    Args:
        statements: Statements in output order, or a Document
        options: Writer options; keyword overrides are applied on top

    Returns:
        TriX XML string
    """
    writer = TriXWriter(options, **overrides)
    _write_all(writer, statements)
    return writer.to_string()
