"""
XML engine adapters.

    adapter = get_adapter(XMLBackend.LXML)
    root = adapter.parse(b"<TriX xmlns='http://www.w3.org/2004/03/trix/trix-1/'/>")
"""

from typing import Union

from rdf_trix.backends.base import ElementAdapter, local_name
from rdf_trix.backends.etree_backend import ETreeAdapter
from rdf_trix.backends.lxml_backend import LXMLAdapter
from rdf_trix.config import XMLBackend


ADAPTERS = {
    XMLBackend.ETREE: ETreeAdapter,
    XMLBackend.LXML: LXMLAdapter,
}


def get_adapter(backend: Union[XMLBackend, str, ElementAdapter] = XMLBackend.ETREE) -> ElementAdapter:
    """Return the element adapter for an XML engine."""
    if isinstance(backend, ElementAdapter):
        return backend
    return ADAPTERS[XMLBackend(backend)]()


__all__ = [
    "ElementAdapter",
    "ETreeAdapter",
    "LXMLAdapter",
    "XMLBackend",
    "get_adapter",
    "local_name",
]
