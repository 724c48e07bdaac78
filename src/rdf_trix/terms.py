"""
RDF Term Model for TriX.

Terms are immutable value objects:

    IRI            <http://example.org/a>
    BlankNode      _:b0         (identity is the coreference key, label is cosmetic)
    Literal        "chat"@fr, "32"^^<http://www.w3.org/2001/XMLSchema#integer>
    QuotedTriple   << s p o >>  (RDF-star)

A Statement is a triple plus an optional graph name. A Document groups
statements into Graphs in the order they appeared in the TriX file.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple, Union
import uuid


# =============================================================================
# Vocabulary
# =============================================================================

TRIX_NS = "http://www.w3.org/2004/03/trix/trix-1/"
XML_NS = "http://www.w3.org/XML/1998/namespace"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
XSD_NS = "http://www.w3.org/2001/XMLSchema#"

RDF_XML_LITERAL = f"{RDF_NS}XMLLiteral"
RDF_LANG_STRING = f"{RDF_NS}langString"
XSD_STRING = f"{XSD_NS}string"

# Format metadata
CONTENT_TYPE = "application/trix"
FILE_EXTENSIONS = (".trix", ".xml")
DEFAULT_ENCODING = "utf-8"


class TermKind(IntEnum):
    """RDF term kind enumeration."""
    IRI = 0
    LITERAL = 1
    BNODE = 2
    QUOTED_TRIPLE = 3


# =============================================================================
# Terms
# =============================================================================

@dataclass(frozen=True, slots=True)
class IRI:
    """An IRI reference."""
    value: str

    @property
    def kind(self) -> TermKind:
        return TermKind.IRI

    def __str__(self) -> str:
        return f"<{self.value}>"


def _new_identity() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class BlankNode:
    """
    A blank node.

    Two blank nodes are the same node when their identities match; the label
    is only what the document called it. Creating a BlankNode without an
    identity allocates a fresh one.
    """
    label: str = field(default="", compare=False)
    identity: str = field(default_factory=_new_identity)

    @property
    def kind(self) -> TermKind:
        return TermKind.BNODE

    def __str__(self) -> str:
        return f"_:{self.label or self.identity}"


def _escape_lexical(value: str) -> str:
    return (value
        .replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r"))


@dataclass(frozen=True, slots=True)
class Literal:
    """
    An RDF literal.

    Attributes:
        lexical: Lexical form (for XML literals, canonical XML markup)
        datatype: Datatype IRI, None for simple and language-tagged literals
        language: Language tag, lower-cased
    """
    lexical: str
    datatype: Optional[IRI] = None
    language: Optional[str] = None

    @property
    def kind(self) -> TermKind:
        return TermKind.LITERAL

    @property
    def is_xml_literal(self) -> bool:
        return self.datatype is not None and self.datatype.value == RDF_XML_LITERAL

    def __str__(self) -> str:
        text = f'"{_escape_lexical(self.lexical)}"'
        if self.language:
            return f"{text}@{self.language}"
        if self.datatype is not None:
            return f"{text}^^{self.datatype}"
        return text


@dataclass(frozen=True, slots=True)
class QuotedTriple:
    """A statement used as a term (RDF-star)."""
    statement: "Statement"

    @property
    def kind(self) -> TermKind:
        return TermKind.QUOTED_TRIPLE

    def __str__(self) -> str:
        s, p, o = self.statement.triple
        return f"<< {s} {p} {o} >>"


Term = Union[IRI, BlankNode, Literal, QuotedTriple]
Subject = Union[IRI, BlankNode, QuotedTriple]
Object = Union[IRI, BlankNode, Literal, QuotedTriple]
GraphName = Union[IRI, BlankNode]


@dataclass(frozen=True, slots=True)
class Statement:
    """A triple with an optional graph name (None is the default graph)."""
    subject: Subject
    predicate: IRI
    object: Object
    graph_name: Optional[GraphName] = None

    @property
    def triple(self) -> Tuple[Term, Term, Term]:
        return (self.subject, self.predicate, self.object)

    def with_graph(self, graph_name: Optional[GraphName]) -> "Statement":
        return Statement(self.subject, self.predicate, self.object, graph_name)

    def __str__(self) -> str:
        s, p, o = self.triple
        if self.graph_name is None:
            return f"{s} {p} {o} ."
        return f"{s} {p} {o} {self.graph_name} ."


# =============================================================================
# Documents
# =============================================================================

@dataclass
class Graph:
    """One <graph> element: an optional name and its statements in order."""
    name: Optional[GraphName] = None
    statements: List[Statement] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.statements)


@dataclass
class Document:
    """A TriX document: base URI plus graphs in document order."""
    base_uri: Optional[str] = None
    graphs: List[Graph] = field(default_factory=list)

    def statements(self) -> Iterator[Statement]:
        """Iterate all statements in document order."""
        for graph in self.graphs:
            yield from graph.statements

    def __len__(self) -> int:
        return sum(len(g) for g in self.graphs)

    def to_columnar(self) -> Tuple[List[str], List[str], List[str], List[Optional[str]]]:
        """Extract columnar data for fast insertion."""
        statements = list(self.statements())
        return (
            [str(s.subject) for s in statements],
            [str(s.predicate) for s in statements],
            [str(s.object) for s in statements],
            [str(s.graph_name) if s.graph_name is not None else None for s in statements],
        )


def term_kind_name(term: object) -> str:
    """Human readable kind of a term, for diagnostics."""
    kind = getattr(term, "kind", None)
    if isinstance(kind, TermKind):
        return kind.name
    return type(term).__name__
