"""
Element adapter interface.

The reader and writer only touch XML through an ElementAdapter, so the term
mapping exists once regardless of which engine built the tree. Both engines
we support speak the ElementTree node API (.tag/.text/.tail/.attrib, child
iteration), so most of the read side lives here; subclasses provide parsing,
construction, serialization and C14N.
"""

from abc import ABC, abstractmethod
from io import IOBase
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
from xml.sax.saxutils import escape

from rdf_trix.terms import TRIX_NS, XML_NS


Source = Union[str, bytes, Path, IOBase]


def local_name(tag: str) -> str:
    """Strip a Clark-notation namespace: '{ns}graph' -> 'graph'."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[1]
    return tag


def qualify_attribute(name: str) -> str:
    """Map 'xml:lang' style names onto Clark notation."""
    if name.startswith("xml:"):
        return f"{{{XML_NS}}}{name[4:]}"
    return name


def escape_c14n_text(text: str) -> str:
    """Escape character data the way canonical XML does."""
    return escape(text).replace("\r", "&#xD;")


class ElementAdapter(ABC):
    """
    Capability interface over a materialized XML tree.

    Elements are the engine's own node objects; the adapter is stateless, so
    one instance can serve any number of reads and writes.
    """

    #: Name of the underlying XML library
    name: str = ""

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    @abstractmethod
    def parse(self, source: Source) -> Any:
        """Parse a document and return its root element."""

    @abstractmethod
    def is_element(self, node: Any) -> bool:
        """True for element nodes of this engine (not comments/PIs)."""

    @abstractmethod
    def canonicalize_xml(self, fragment: str) -> str:
        """Canonical XML of a serialized element."""

    @abstractmethod
    def serialize_fragment(self, element: Any) -> str:
        """Serialize one element with its descendants, without its tail."""

    def tag_name(self, element: Any) -> str:
        return local_name(element.tag)

    def attribute(self, element: Any, name: str) -> Optional[str]:
        return element.get(qualify_attribute(name))

    def text_content(self, element: Any) -> str:
        return "".join(element.itertext())

    def children(self, element: Any) -> List[Any]:
        return [child for child in element if self.is_element(child)]

    def inner_markup(self, element: Any, canonicalize: Optional[Callable[[str], str]] = None) -> str:
        """
        Canonical markup of an element's content (text and child elements).

        Used for rdf:XMLLiteral values, where the literal is the markup itself.
        """
        canonicalize = canonicalize or self.canonicalize_xml
        parts = [escape_c14n_text(element.text or "")]
        for child in element:
            if self.is_element(child):
                parts.append(canonicalize(self.serialize_fragment(child)))
            parts.append(escape_c14n_text(child.tail or ""))
        return "".join(parts)

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    @abstractmethod
    def make_element(
        self,
        tag: str,
        text: Optional[str] = None,
        attrs: Optional[Dict[str, str]] = None,
        root: bool = False,
    ) -> Any:
        """
        Create a TriX element.

        Args:
            tag: Local name, placed in the TriX namespace
            text: Character content
            attrs: Attributes, 'xml:' prefixed names allowed
            root: Declare the TriX namespace as default namespace here
        """

    @abstractmethod
    def make_comment(self, text: str) -> Any:
        """Create a comment node."""

    @abstractmethod
    def parse_markup(self, markup: str) -> Any:
        """Parse literal markup into a wrapper element; unprefixed markup stays in no namespace."""

    @abstractmethod
    def to_bytes(self, root: Any, encoding: str) -> bytes:
        """Serialize a finished tree with an XML declaration."""

    def append_child(self, parent: Any, child: Any) -> None:
        parent.append(child)

    def append_markup(self, parent: Any, markup: str) -> None:
        """Embed XML markup as the content of `parent`."""
        wrapper = self.parse_markup(markup)
        parent.text = (parent.text or "") + (wrapper.text or "")
        for child in list(wrapper):
            parent.append(child)

    def serialize(
        self,
        root: Any,
        encoding: str = "utf-8",
        indent: Optional[str] = None,
        opaque: Optional[Callable[[Any], bool]] = None,
    ) -> bytes:
        """
        Serialize a document tree.

        Args:
            root: Root element
            encoding: Output encoding
            indent: Indentation unit, None for compact output
            opaque: Predicate for elements whose content must not be re-indented
        """
        if indent:
            self.indent(root, indent, opaque)
        return self.to_bytes(root, encoding)

    def indent(self, root: Any, space: str, opaque: Optional[Callable[[Any], bool]] = None) -> None:
        """Pretty-print in place, leaving mixed content and opaque elements alone."""
        def _indent(element: Any, level: int) -> None:
            children = list(element)
            if not children or (opaque is not None and opaque(element)):
                return
            if element.text and element.text.strip():
                return
            if any(child.tail and child.tail.strip() for child in children):
                return
            child_indent = "\n" + space * (level + 1)
            element.text = child_indent
            for child in children:
                if self.is_element(child):
                    _indent(child, level + 1)
                if not child.tail or not child.tail.strip():
                    child.tail = child_indent
            children[-1].tail = "\n" + space * level

        _indent(root, 0)
        root.tail = None

    # -------------------------------------------------------------------------

    @staticmethod
    def read_source(source: Source) -> Union[str, bytes]:
        """Read text or bytes from a path, stream or literal document."""
        if isinstance(source, Path):
            return source.read_bytes()
        if hasattr(source, "read"):
            return source.read()
        return source

    @staticmethod
    def trix_tag(tag: str) -> str:
        return f"{{{TRIX_NS}}}{tag}"
