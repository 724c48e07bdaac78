"""
Literal policy: language tags, lexical validation and canonical forms.

Datatype knowledge comes from rdflib: a literal is well-typed when rdflib can
map its lexical form to a value, and its canonical form is rdflib's lexical
form for that value. Datatypes rdflib does not know are accepted as is.
"""

from typing import Optional
import logging
import re
import warnings

from rdflib import Literal as RDFLibLiteral, URIRef

from rdf_trix.errors import ValidationError
from rdf_trix.terms import IRI, Literal, RDF_XML_LITERAL, XSD_STRING

logger = logging.getLogger(__name__)


LANGUAGE_TAG_PATTERN = re.compile(r"^[a-zA-Z]{1,8}(-[a-zA-Z0-9]{1,8})*$")


def normalize_language(tag: str) -> str:
    """Language tags compare case-insensitively; keep them lower-cased."""
    return tag.strip().lower()


def _rdflib_literal(lexical: str, datatype: str, normalize: bool) -> RDFLibLiteral:
    # rdflib warns when it cannot convert a lexical form; ill_typed reports the same thing
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        return RDFLibLiteral(lexical, datatype=URIRef(datatype), normalize=normalize)


def is_well_typed(literal: Literal) -> Optional[bool]:
    """
    Check a literal's lexical form against its datatype.

    Returns:
        True/False for datatypes rdflib knows, None when it cannot tell
    """
    if literal.datatype is None:
        return True
    datatype = literal.datatype.value
    if datatype in (RDF_XML_LITERAL, XSD_STRING):
        return True
    ill_typed = _rdflib_literal(literal.lexical, datatype, normalize=False).ill_typed
    if ill_typed is None:
        return None
    return not ill_typed


def validate_literal(literal: Literal) -> None:
    """Raise ValidationError for a malformed language tag or lexical form."""
    if literal.language is not None and not LANGUAGE_TAG_PATTERN.match(literal.language):
        raise ValidationError(f"Invalid language tag: {literal.language!r}")
    if is_well_typed(literal) is False:
        raise ValidationError(
            f"Invalid lexical form {literal.lexical!r} for datatype <{literal.datatype.value}>"
        )


def canonicalize_literal(literal: Literal) -> Literal:
    """
    Rewrite a well-typed literal to its canonical lexical form.

    Ill-typed literals and unknown datatypes are returned unchanged.
    """
    if literal.datatype is None or is_well_typed(literal) is not True:
        return literal
    datatype = literal.datatype.value
    if datatype in (RDF_XML_LITERAL, XSD_STRING):
        return literal
    canonical = str(_rdflib_literal(literal.lexical, datatype, normalize=True))
    if canonical == literal.lexical:
        return literal
    logger.debug(f"Canonicalized {literal.lexical!r} to {canonical!r} for <{datatype}>")
    return Literal(canonical, datatype=IRI(datatype))
