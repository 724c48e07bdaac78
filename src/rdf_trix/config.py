"""
Reader and writer configuration for the TriX codec.

Options are plain dataclasses that round-trip through dicts and JSON files.
The XML engine is selected here, once, and injected into the reader/writer.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace as dc_replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class XMLBackend(Enum):
    """XML engines with an element adapter."""
    ETREE = "etree"   # xml.etree.ElementTree
    LXML = "lxml"     # lxml.etree


DEFAULT_BACKEND = XMLBackend.ETREE


def _backend_from(value: Any) -> XMLBackend:
    if isinstance(value, XMLBackend):
        return value
    try:
        return XMLBackend(value)
    except ValueError:
        logger.warning(f"Unknown XML backend {value!r}, using {DEFAULT_BACKEND.value}")
        return DEFAULT_BACKEND


class _OptionsMixin:
    """Shared helpers for option dataclasses."""

    def replace(self, **overrides: Any):
        """Return a copy with the given fields changed."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        if "backend" in overrides:
            overrides["backend"] = _backend_from(overrides["backend"])
        return dc_replace(self, **overrides)

    def save(self, path: Path) -> None:
        """Save options as JSON."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path):
        """Load options from a JSON file, defaults if it does not exist."""
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls.from_dict(data)
        return cls()


@dataclass
class ReaderOptions(_OptionsMixin):
    """
    Options for one read operation.

    Attributes:
        base_uri: Base for resolving relative <uri> content
        validate: Reject malformed IRIs, language tags and literals
        canonicalize: Rewrite well-typed literals to canonical lexical form
        rdfstar: Accept nested <triple> elements as quoted triples
        strict: Abort on the first bad triple instead of skipping it
        max_depth: Limit on quoted triple nesting (None = unlimited)
        backend: XML engine
        canonicalize_xml: Replacement for the engine's XML canonicalization
    """
    base_uri: Optional[str] = None
    validate: bool = False
    canonicalize: bool = False
    rdfstar: bool = False
    strict: bool = False
    max_depth: Optional[int] = None
    backend: XMLBackend = DEFAULT_BACKEND
    canonicalize_xml: Optional[Callable[[str], str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_uri": self.base_uri,
            "validate": self.validate,
            "canonicalize": self.canonicalize,
            "rdfstar": self.rdfstar,
            "strict": self.strict,
            "max_depth": self.max_depth,
            "backend": self.backend.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReaderOptions":
        return cls(
            base_uri=data.get("base_uri"),
            validate=data.get("validate", False),
            canonicalize=data.get("canonicalize", False),
            rdfstar=data.get("rdfstar", False),
            strict=data.get("strict", False),
            max_depth=data.get("max_depth"),
            backend=_backend_from(data.get("backend", DEFAULT_BACKEND.value)),
        )


@dataclass
class WriterOptions(_OptionsMixin):
    """
    Options for one write operation.

    Attributes:
        base_uri: Emitted as xml:base; IRIs under it are written relative
        encoding: Output encoding declared in the XML prolog
        indent: Indentation unit, None or "" for compact output
        strict: Abort on the first statement that cannot be written
        backend: XML engine
    """
    base_uri: Optional[str] = None
    encoding: str = "utf-8"
    indent: Optional[str] = "  "
    strict: bool = False
    backend: XMLBackend = DEFAULT_BACKEND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_uri": self.base_uri,
            "encoding": self.encoding,
            "indent": self.indent,
            "strict": self.strict,
            "backend": self.backend.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WriterOptions":
        return cls(
            base_uri=data.get("base_uri"),
            encoding=data.get("encoding", "utf-8"),
            indent=data.get("indent", "  "),
            strict=data.get("strict", False),
            backend=_backend_from(data.get("backend", DEFAULT_BACKEND.value)),
        )
