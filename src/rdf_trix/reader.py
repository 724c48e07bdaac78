"""
TriX Parser.

Turns a TriX element tree into a lazy stream of statements:

    <TriX xmlns="http://www.w3.org/2004/03/trix/trix-1/">
        <graph>
            <uri>http://example.org/graph1</uri>      <- optional graph name
            <triple>
                <uri>http://example.org/Bob</uri>     <- subject
                <uri>http://example.org/wife</uri>    <- predicate
                <uri>http://example.org/Mary</uri>    <- object
            </triple>
        </graph>
    </TriX>

With RDF-star enabled a <triple> may itself appear in subject or object
position and is read as a quoted triple.

Reference: https://www.w3.org/2004/03/trix/
"""

from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
import logging

from rdf_trix.backends import ElementAdapter, get_adapter
from rdf_trix.config import ReaderOptions
from rdf_trix.errors import (
    MalformedDocumentError,
    StructuralError,
    TriXError,
    UnrecognizedTermError,
    UnsupportedFeatureError,
    ValidationError,
)
from rdf_trix.iri import iri_problem, resolve_iri
from rdf_trix.literals import canonicalize_literal, normalize_language, validate_literal
from rdf_trix.terms import (
    IRI,
    BlankNode,
    Document,
    Graph,
    GraphName,
    Literal,
    QuotedTriple,
    RDF_XML_LITERAL,
    Statement,
    Term,
    term_kind_name,
)

logger = logging.getLogger(__name__)


TERM_TAGS = ("id", "uri", "typedLiteral", "plainLiteral", "triple")
GRAPH_NAME_TAGS = ("id", "uri")


class TermParser:
    """
    Converts one term element into one Term.

    Holds the blank node table of a single read operation: the same label
    always maps to the same BlankNode identity within that operation.
    """

    def __init__(
        self,
        adapter: ElementAdapter,
        options: ReaderOptions,
        base_uri: Optional[str] = None,
        triple_reader: Optional[Callable[[Any, int], Statement]] = None,
    ):
        self.adapter = adapter
        self.options = options
        self.base_uri = base_uri
        self.triple_reader = triple_reader
        self.bnodes: Dict[str, BlankNode] = {}

    def parse_element(self, tag: str, element: Any, content: Optional[str], depth: int = 0) -> Term:
        """
        Parse a term element.

        Args:
            tag: Local element name
            element: The element itself
            content: Its text content (unused for <triple>)
            depth: Quoted triple nesting level of the enclosing triple

        Raises:
            UnrecognizedTermError: unknown element name
            UnsupportedFeatureError: <triple> without RDF-star
            ValidationError: malformed term under validate mode
        """
        if tag == "id":
            return self.parse_bnode(content or "")
        if tag == "uri":
            return self.parse_uri(content or "")
        if tag == "typedLiteral":
            return self._literal_policy(self.parse_typed_literal(element, content or ""))
        if tag == "plainLiteral":
            return self._literal_policy(self.parse_plain_literal(element, content or ""))
        if tag == "triple":
            return self.parse_quoted_triple(element, depth)
        raise UnrecognizedTermError(tag)

    def parse_bnode(self, content: str) -> BlankNode:
        label = content.strip()
        if self.options.validate and not label:
            raise ValidationError("Blank node identifier is empty")
        node = self.bnodes.get(label)
        if node is None:
            node = self.bnodes[label] = BlankNode(label)
        return node

    def parse_uri(self, content: str) -> IRI:
        value = resolve_iri(self.base_uri, content.strip())
        if self.options.validate:
            problem = iri_problem(value)
            if problem:
                raise ValidationError(f"{problem}: {value!r}")
        return IRI(value)

    def parse_typed_literal(self, element: Any, content: str) -> Literal:
        datatype = self.adapter.attribute(element, "datatype")
        if datatype is None:
            raise StructuralError("<typedLiteral> without datatype attribute")
        datatype = datatype.strip()
        if self.options.validate:
            problem = iri_problem(datatype)
            if problem:
                raise ValidationError(f"Datatype {problem}: {datatype!r}")
        if datatype == RDF_XML_LITERAL:
            lexical = self.adapter.inner_markup(element, self.options.canonicalize_xml)
            return Literal(lexical, datatype=IRI(datatype))
        return Literal(content, datatype=IRI(datatype))

    def parse_plain_literal(self, element: Any, content: str) -> Literal:
        language = self.adapter.attribute(element, "xml:lang")
        if language is None:
            language = self.adapter.attribute(element, "lang")
        if language:
            return Literal(content, language=normalize_language(language))
        return Literal(content)

    def parse_quoted_triple(self, element: Any, depth: int) -> QuotedTriple:
        if not self.options.rdfstar:
            raise UnsupportedFeatureError("Quoted triple found but RDF-star is not enabled")
        max_depth = self.options.max_depth
        if max_depth is not None and depth + 1 > max_depth:
            raise StructuralError(f"Quoted triples nested deeper than {max_depth}")
        return QuotedTriple(self.triple_reader(element, depth + 1))

    def _literal_policy(self, literal: Literal) -> Literal:
        if self.options.validate:
            validate_literal(literal)
        if self.options.canonicalize:
            literal = canonicalize_literal(literal)
        return literal


class StatementExtractor:
    """
    Walks <graph> elements in document order and yields statements.

    One extractor is one read operation: it owns the blank node table.
    """

    def __init__(self, adapter: ElementAdapter, options: ReaderOptions, base_uri: Optional[str] = None):
        self.adapter = adapter
        self.options = options
        self.terms = TermParser(adapter, options, base_uri, triple_reader=self.read_quoted)
        self.errors: List[TriXError] = []
        self.skipped = 0

    def read_document(self, root: Any) -> Iterator[Statement]:
        """Yield every statement of every graph, in document order."""
        for _, statements in self.graphs(root):
            yield from statements

    def graphs(self, root: Any) -> Iterator[Tuple[Optional[GraphName], Iterator[Statement]]]:
        """Yield (graph name, lazy statements) per <graph> element."""
        for graph_element in self.adapter.children(root):
            if self.adapter.tag_name(graph_element) != "graph":
                continue
            children = self.adapter.children(graph_element)
            try:
                graph_name = self.graph_name(children)
            except UnsupportedFeatureError:
                raise
            except TriXError as e:
                if self.options.strict:
                    raise
                self._skip(e, "graph")
                continue
            if graph_name is not None:
                children = children[1:]
            yield graph_name, self._statements(children, graph_name)

    def graph_name(self, children: List[Any]) -> Optional[GraphName]:
        """Name given by a leading <uri>/<id> child, None for the default graph."""
        if not children:
            return None
        first = children[0]
        tag = self.adapter.tag_name(first)
        if tag not in GRAPH_NAME_TAGS:
            return None
        return self.terms.parse_element(tag, first, self.adapter.text_content(first))

    def _statements(self, children: List[Any], graph_name: Optional[GraphName]) -> Iterator[Statement]:
        for child in children:
            if self.adapter.tag_name(child) != "triple":
                logger.debug(f"Ignoring <{self.adapter.tag_name(child)}> inside <graph>")
                continue
            try:
                statement = self.read_triple(child, graph_name)
            except UnsupportedFeatureError:
                raise
            except TriXError as e:
                if self.options.strict:
                    raise
                self._skip(e, "triple")
                continue
            yield statement

    def read_triple(self, element: Any, graph_name: Optional[GraphName] = None, depth: int = 0) -> Statement:
        """
        Read one <triple> element.

        The first three child elements are subject, predicate and object;
        further children are ignored.
        """
        children = self.adapter.children(element)
        if len(children) < 3:
            raise StructuralError(f"<triple> needs 3 term elements, found {len(children)}")

        subject, predicate, obj = (self._term(child, depth) for child in children[:3])

        if not isinstance(predicate, IRI):
            raise StructuralError(f"Predicate must be a URI, found {term_kind_name(predicate)}")
        if isinstance(subject, Literal):
            raise StructuralError("Subject must not be a literal")

        return Statement(subject, predicate, obj, graph_name)

    def read_quoted(self, element: Any, depth: int) -> Statement:
        return self.read_triple(element, None, depth)

    def _term(self, element: Any, depth: int) -> Term:
        tag = self.adapter.tag_name(element)
        content = None if tag == "triple" else self.adapter.text_content(element)
        return self.terms.parse_element(tag, element, content, depth)

    def _skip(self, error: TriXError, what: str) -> None:
        self.skipped += 1
        self.errors.append(error)
        logger.warning(f"Skipping malformed {what}: {error}")


class TriXReader:
    """
    Reader for TriX documents.

    The XML is parsed up front; statements are produced lazily. Every call
    to statements() is a separate read operation with its own blank node
    identities.

        reader = TriXReader(text, rdfstar=True)
        for statement in reader:
            store.add(statement)
    """

    def __init__(self, source: Any, options: Optional[ReaderOptions] = None, **overrides: Any):
        options = options or ReaderOptions()
        if overrides:
            options = options.replace(**overrides)
        self.options = options
        self.adapter = get_adapter(options.backend)
        self.root = self._load(source)
        if self.adapter.tag_name(self.root) != "TriX":
            raise MalformedDocumentError(
                f"Expected <TriX> root element, found <{self.adapter.tag_name(self.root)}>"
            )
        self.base_uri = self._base_uri()
        self.errors: List[TriXError] = []

    @property
    def library(self) -> str:
        """Name of the underlying XML library."""
        return self.adapter.name

    def _load(self, source: Any) -> Any:
        if hasattr(source, "getroot"):
            return source.getroot()
        if self.adapter.is_element(source):
            return source
        return self.adapter.parse(source)

    def _base_uri(self) -> Optional[str]:
        xml_base = self.adapter.attribute(self.root, "xml:base")
        if xml_base:
            return resolve_iri(self.options.base_uri, xml_base.strip())
        return self.options.base_uri

    def _extractor(self) -> StatementExtractor:
        return StatementExtractor(self.adapter, self.options, self.base_uri)

    def statements(self) -> Iterator[Statement]:
        """Lazily yield statements in document order."""
        extractor = self._extractor()
        count = 0
        try:
            for statement in extractor.read_document(self.root):
                count += 1
                yield statement
        finally:
            self.errors.extend(extractor.errors)
        logger.debug(f"Read {count} TriX statements ({extractor.skipped} skipped)")

    def __iter__(self) -> Iterator[Statement]:
        return self.statements()

    def triples(self) -> Iterator[Tuple[Term, Term, Term]]:
        """Yield (subject, predicate, object), dropping graph names."""
        for statement in self.statements():
            yield statement.triple

    def document(self) -> Document:
        """Read everything into a Document, one Graph per <graph> element."""
        extractor = self._extractor()
        try:
            graphs = [
                Graph(name=name, statements=list(statements))
                for name, statements in extractor.graphs(self.root)
            ]
        finally:
            self.errors.extend(extractor.errors)
        logger.debug(f"Read {len(graphs)} TriX graphs")
        return Document(base_uri=self.base_uri, graphs=graphs)


def read(source: Any, options: Optional[ReaderOptions] = None, **overrides: Any) -> Iterator[Statement]:
    """
    Read statements from a TriX document.

    Args:
        source: TriX as str/bytes, Path, stream, or a parsed element tree
        options: Reader options; keyword overrides are applied on top

    Returns:
        Lazy, single-pass iterator of statements
    """
    return TriXReader(source, options, **overrides).statements()


def parse_trix(source: Any, options: Optional[ReaderOptions] = None, **overrides: Any) -> Document:
    """
    Parse TriX content into a Document.

    Args:
        source: TriX content
        options: Reader options; keyword overrides are applied on top

    Returns:
        Document with graphs in document order
    """
    return TriXReader(source, options, **overrides).document()
