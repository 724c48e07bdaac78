"""
lxml element adapter.

Entities are never resolved and the network is never touched. Every TriX
element is created with the TriX default namespace; redundant declarations
are folded away before serialization. libxml2 cannot undeclare a default
namespace, so a document holding no-namespace literal markup is written
with the TriX namespace bound to the "trix" prefix instead.
"""

from typing import Any, Dict, Optional
import copy

import lxml.etree as etree

from rdf_trix.backends.base import ElementAdapter, Source, qualify_attribute
from rdf_trix.errors import MalformedDocumentError
from rdf_trix.terms import TRIX_NS


TRIX_PREFIX = "trix"


def _make_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=False,
        encoding=encoding,
    )


def _has_unqualified(root: etree._Element) -> bool:
    return any(
        isinstance(node.tag, str) and not node.tag.startswith("{")
        for node in root.iter()
    )


def _prefixed_copy(element: etree._Element, parent: Optional[etree._Element] = None) -> etree._Element:
    """Copy of a tree with the TriX namespace on a prefix rather than the default."""
    if element.tag.startswith("{"):
        nsmap = {prefix: uri for prefix, uri in element.nsmap.items() if uri != TRIX_NS}
    else:
        nsmap = {prefix: uri for prefix, uri in element.nsmap.items() if prefix is not None and uri != TRIX_NS}
    if parent is None:
        nsmap[TRIX_PREFIX] = TRIX_NS
        clone = etree.Element(element.tag, dict(element.attrib), nsmap=nsmap)
    else:
        clone = etree.SubElement(parent, element.tag, dict(element.attrib), nsmap=nsmap)
    clone.text, clone.tail = element.text, element.tail
    for child in element:
        if isinstance(child.tag, str):
            _prefixed_copy(child, clone)
        else:
            clone.append(copy.copy(child))
    return clone


class LXMLAdapter(ElementAdapter):
    """Adapter for lxml.etree."""

    name = "lxml"

    def parse(self, source: Source) -> etree._Element:
        data = self.read_source(source)
        if isinstance(data, str):
            # lxml refuses str input that carries an encoding declaration
            data, parser = data.encode("utf-8"), _make_parser("utf-8")
        else:
            parser = _make_parser()
        try:
            return etree.fromstring(data, parser)
        except etree.XMLSyntaxError as e:
            raise MalformedDocumentError(f"Invalid TriX XML: {e}") from e

    def is_element(self, node: Any) -> bool:
        return isinstance(node, etree._Element) and isinstance(node.tag, str)

    def canonicalize_xml(self, fragment: str) -> str:
        element = etree.fromstring(fragment.encode("utf-8"), _make_parser("utf-8"))
        return etree.tostring(element, method="c14n", exclusive=True).decode("utf-8")

    def serialize_fragment(self, element: etree._Element) -> str:
        if _has_unqualified(element):
            # tostring() copies ancestor declarations, including the TriX default
            element = _prefixed_copy(element)
        return etree.tostring(element, encoding="unicode", with_tail=False)

    def make_element(
        self,
        tag: str,
        text: Optional[str] = None,
        attrs: Optional[Dict[str, str]] = None,
        root: bool = False,
    ) -> etree._Element:
        element = etree.Element(self.trix_tag(tag), nsmap={None: TRIX_NS})
        for key, value in (attrs or {}).items():
            element.set(qualify_attribute(key), value)
        if text is not None:
            element.text = text
        return element

    def make_comment(self, text: str) -> etree._Element:
        return etree.Comment(text)

    def parse_markup(self, markup: str) -> etree._Element:
        wrapped = f"<wrapper>{markup}</wrapper>"
        try:
            return etree.fromstring(wrapped.encode("utf-8"), _make_parser("utf-8"))
        except etree.XMLSyntaxError as e:
            raise MalformedDocumentError(f"Invalid XML literal markup: {e}") from e

    def to_bytes(self, root: etree._Element, encoding: str) -> bytes:
        if _has_unqualified(root):
            root = _prefixed_copy(root)
        etree.cleanup_namespaces(root)
        return etree.tostring(root, encoding=encoding, xml_declaration=True)
