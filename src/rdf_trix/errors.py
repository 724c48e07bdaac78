"""
TriX codec errors.

Read side errors describe one element; write side errors carry the statement
that could not be emitted.
"""

from typing import Any, Optional


class TriXError(ValueError):
    """Base class for all TriX codec errors."""


class UnrecognizedTermError(TriXError):
    """An element in a term position is not id/uri/typedLiteral/plainLiteral/triple."""

    def __init__(self, tag: str):
        super().__init__(f"Unrecognized TriX term element: <{tag}>")
        self.tag = tag


class StructuralError(TriXError):
    """Wrong number of triple children, non-IRI predicate, nesting too deep."""


class UnsupportedFeatureError(TriXError):
    """A quoted triple was found but RDF-star is not enabled."""


class ValidationError(TriXError):
    """Malformed IRI, language tag or literal under validate mode."""


class MalformedDocumentError(TriXError):
    """The XML engine could not parse the input, or it is not a TriX document."""


class WriteError(TriXError):
    """A statement could not be formatted as TriX."""

    def __init__(self, message: str, statement: Optional[Any] = None):
        if statement is not None:
            message = f"{message}: {statement.subject!r} {statement.predicate!r} {statement.object!r}"
        super().__init__(message)
        self.statement = statement

    @property
    def subject(self):
        return self.statement.subject if self.statement is not None else None

    @property
    def predicate(self):
        return self.statement.predicate if self.statement is not None else None

    @property
    def object(self):
        return self.statement.object if self.statement is not None else None
