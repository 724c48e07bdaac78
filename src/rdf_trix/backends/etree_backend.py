"""
xml.etree.ElementTree element adapter.

The standard library engine: C14N 2.0 through ET.canonicalize(). TriX is
written with the TriX namespace as default namespace; the declaration is
placed as a plain xmlns attribute because ET's default_namespace option
rejects the unqualified datatype attribute and no-namespace literal markup.
"""

from typing import Any, Dict, Optional
import copy
import xml.etree.ElementTree as ET

from rdf_trix.backends.base import ElementAdapter, Source, local_name, qualify_attribute
from rdf_trix.errors import MalformedDocumentError
from rdf_trix.terms import TRIX_NS


def _namespace(tag: Any) -> Optional[str]:
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def _with_default_namespace(element: ET.Element, namespace: Optional[str]) -> ET.Element:
    """
    Copy of `element` ready for ET.tostring() with `namespace` as default.

    Elements in `namespace` or in no namespace get local tags, with an xmlns
    attribute wherever the default namespace in scope changes. Elements in
    other namespaces keep their qualified tags and get prefixes from ET.
    """
    def _copy(node: ET.Element, scope: str) -> ET.Element:
        if not isinstance(node.tag, str):
            return copy.copy(node)
        node_namespace = _namespace(node.tag)
        attrib = dict(node.attrib)
        tag = node.tag
        if node_namespace is None or node_namespace == namespace:
            tag = local_name(node.tag)
            wanted = node_namespace or ""
            if wanted != scope:
                attrib = {"xmlns": wanted, **attrib}
                scope = wanted
        clone = ET.Element(tag, attrib)
        clone.text, clone.tail = node.text, node.tail
        for child in node:
            clone.append(_copy(child, scope))
        return clone

    return _copy(element, "")


class ETreeAdapter(ElementAdapter):
    """Adapter for xml.etree.ElementTree."""

    name = "etree"

    def parse(self, source: Source) -> ET.Element:
        data = self.read_source(source)
        try:
            return ET.fromstring(data)
        except ET.ParseError as e:
            raise MalformedDocumentError(f"Invalid TriX XML: {e}") from e

    def is_element(self, node: Any) -> bool:
        return isinstance(node, ET.Element) and isinstance(node.tag, str)

    def canonicalize_xml(self, fragment: str) -> str:
        return ET.canonicalize(xml_data=fragment)

    def serialize_fragment(self, element: ET.Element) -> str:
        detached = _with_default_namespace(element, _namespace(element.tag))
        detached.tail = None
        return ET.tostring(detached, encoding="unicode")

    def make_element(
        self,
        tag: str,
        text: Optional[str] = None,
        attrs: Optional[Dict[str, str]] = None,
        root: bool = False,
    ) -> ET.Element:
        element = ET.Element(
            self.trix_tag(tag),
            {qualify_attribute(k): v for k, v in (attrs or {}).items()},
        )
        if text is not None:
            element.text = text
        return element

    def make_comment(self, text: str) -> ET.Element:
        return ET.Comment(text)

    def parse_markup(self, markup: str) -> ET.Element:
        try:
            return ET.fromstring(f"<wrapper>{markup}</wrapper>")
        except ET.ParseError as e:
            raise MalformedDocumentError(f"Invalid XML literal markup: {e}") from e

    def to_bytes(self, root: ET.Element, encoding: str) -> bytes:
        return ET.tostring(
            _with_default_namespace(root, TRIX_NS), encoding=encoding, xml_declaration=True
        )
