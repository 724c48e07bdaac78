"""
IRI helpers: validation, RFC 3986 resolution and relativization.

resolve_iri() follows RFC 3986 section 5.2 without the urljoin quirks
(urljoin collapses empty path segments and ignores unknown schemes).
relativize_iri() only produces references that resolve back to the exact
input against the same base.
"""

from typing import Optional
from urllib.parse import urlsplit, urlunsplit
import re


SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
FORBIDDEN_IRI_CHARS = set('<>"{}|^`\\')


def iri_problem(value: str) -> Optional[str]:
    """Return why `value` is not a valid absolute IRI, or None if it is."""
    if not value:
        return "IRI is empty"
    for ch in value:
        if ord(ch) <= 0x20:
            return "IRI contains whitespace or control characters"
        if ch in FORBIDDEN_IRI_CHARS:
            return f"IRI contains forbidden character {ch!r}"
    scheme, sep, _ = value.partition(":")
    if not sep or not SCHEME_PATTERN.match(scheme):
        return "IRI is not absolute"
    return None


def is_absolute_iri(value: str) -> bool:
    scheme, sep, _ = value.partition(":")
    return bool(sep) and bool(SCHEME_PATTERN.match(scheme))


def remove_dot_segments(path: str) -> str:
    """RFC 3986 section 5.2.4."""
    output = []
    remaining = path
    while remaining:
        if remaining.startswith("../"):
            remaining = remaining[3:]
        elif remaining.startswith("./"):
            remaining = remaining[2:]
        elif remaining.startswith("/./"):
            remaining = remaining[2:]
        elif remaining == "/.":
            remaining = "/"
        elif remaining.startswith("/../"):
            remaining = remaining[3:]
            if output:
                output.pop()
        elif remaining == "/..":
            remaining = "/"
            if output:
                output.pop()
        elif remaining in (".", ".."):
            remaining = ""
        else:
            start = 1 if remaining.startswith("/") else 0
            end = remaining.find("/", start)
            if end < 0:
                end = len(remaining)
            output.append(remaining[:end])
            remaining = remaining[end:]
    return "".join(output)


def _merge_paths(base_path: str, base_has_authority: bool, ref_path: str) -> str:
    if base_has_authority and not base_path:
        return "/" + ref_path
    slash = base_path.rfind("/")
    return base_path[:slash + 1] + ref_path


def _has_query(reference: str) -> bool:
    return "?" in reference.partition("#")[0]


def resolve_iri(base: Optional[str], reference: str) -> str:
    """
    Resolve `reference` against `base`.

    Absolute references pass through unchanged; without a base the reference
    is returned as is.
    """
    if not base or is_absolute_iri(reference):
        return reference

    ref = urlsplit(reference)
    b = urlsplit(base)
    has_query = _has_query(reference)
    has_fragment = "#" in reference

    if reference.startswith("//"):
        netloc, path, query = ref.netloc, remove_dot_segments(ref.path), ref.query
    elif not ref.path:
        netloc, path = b.netloc, b.path
        if has_query:
            query = ref.query
        else:
            query = b.query
            has_query = _has_query(base)
    elif ref.path.startswith("/"):
        netloc, path, query = b.netloc, remove_dot_segments(ref.path), ref.query
    else:
        merged = _merge_paths(b.path, bool(b.netloc), ref.path)
        netloc, path, query = b.netloc, remove_dot_segments(merged), ref.query

    resolved = urlunsplit((b.scheme, netloc, path, query, ref.fragment))

    # urlunsplit drops empty "?" and "#" markers
    if has_query and not query:
        head, sep, tail = resolved.partition("#")
        resolved = f"{head}?{sep}{tail}"
    if has_fragment and not ref.fragment:
        resolved += "#"
    return resolved


def _relative_path(base_path: str, path: str) -> str:
    """Path from the directory of `base_path` to `path`, using '../' as needed."""
    base_dirs = base_path.split("/")[:-1]
    target = path.split("/")
    common = 0
    while (common < len(base_dirs) and common < len(target) - 1
           and base_dirs[common] == target[common]):
        common += 1
    up = "../" * (len(base_dirs) - common)
    rest = "/".join(target[common:])
    if not up and (not rest or ":" in rest.split("/", 1)[0]):
        rest = "./" + rest
    return up + rest


def relativize_iri(base: Optional[str], iri: str) -> str:
    """
    Express `iri` relative to `base`.

    Only IRIs sharing the base's scheme and authority are shortened: to a
    fragment reference for the base document itself, otherwise to a path
    relative to the base's directory ('x/y', '../z'). Network-path
    references ('//host/...') are never produced. The result always resolves
    back to `iri` against `base`; when no such short form exists the
    absolute IRI is returned.
    """
    if not base or not is_absolute_iri(iri):
        return iri

    base_no_fragment = base.partition("#")[0]
    candidates = []
    if iri.startswith(base_no_fragment + "#"):
        candidates.append(iri[len(base_no_fragment):])

    b, t = urlsplit(base), urlsplit(iri)
    if b.netloc and (t.scheme, t.netloc) == (b.scheme, b.netloc) and t.path.startswith("/"):
        head = urlunsplit((t.scheme, t.netloc, t.path, "", ""))
        if iri.startswith(head):
            candidates.append(_relative_path(b.path or "/", t.path) + iri[len(head):])

    for candidate in candidates:
        if resolve_iri(base, candidate) == iri:
            return candidate
    return iri
