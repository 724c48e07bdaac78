"""
rdf-trix: TriX reader and writer with RDF-star support.

    from rdf_trix import read, serialize_trix

    for statement in read(text, rdfstar=True):
        print(statement)

    xml = serialize_trix(statements, base_uri="http://example.org/")

Reference: https://www.w3.org/2004/03/trix/
"""

from rdf_trix.backends import ElementAdapter, ETreeAdapter, LXMLAdapter, get_adapter
from rdf_trix.config import ReaderOptions, WriterOptions, XMLBackend
from rdf_trix.errors import (
    MalformedDocumentError,
    StructuralError,
    TriXError,
    UnrecognizedTermError,
    UnsupportedFeatureError,
    ValidationError,
    WriteError,
)
from rdf_trix.reader import StatementExtractor, TermParser, TriXReader, parse_trix, read
from rdf_trix.terms import (
    CONTENT_TYPE,
    FILE_EXTENSIONS,
    IRI,
    RDF_XML_LITERAL,
    TRIX_NS,
    BlankNode,
    Document,
    Graph,
    Literal,
    QuotedTriple,
    Statement,
    TermKind,
)
from rdf_trix.writer import BlankNodeLabels, TermFormatter, TriXWriter, serialize_trix, write

__version__ = "0.1.0"

__all__ = [
    # Terms
    "IRI",
    "BlankNode",
    "Literal",
    "QuotedTriple",
    "Statement",
    "Graph",
    "Document",
    "TermKind",
    "TRIX_NS",
    "RDF_XML_LITERAL",
    "CONTENT_TYPE",
    "FILE_EXTENSIONS",
    # Options
    "ReaderOptions",
    "WriterOptions",
    "XMLBackend",
    # XML engines
    "ElementAdapter",
    "ETreeAdapter",
    "LXMLAdapter",
    "get_adapter",
    # Reading
    "TermParser",
    "StatementExtractor",
    "TriXReader",
    "read",
    "parse_trix",
    # Writing
    "BlankNodeLabels",
    "TermFormatter",
    "TriXWriter",
    "write",
    "serialize_trix",
    # Errors
    "TriXError",
    "UnrecognizedTermError",
    "StructuralError",
    "UnsupportedFeatureError",
    "ValidationError",
    "MalformedDocumentError",
    "WriteError",
]
