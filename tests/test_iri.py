"""
Tests for IRI validation, resolution and relativization.
"""

import pytest

from rdf_trix.iri import iri_problem, is_absolute_iri, relativize_iri, resolve_iri


RFC_BASE = "http://a/b/c/d;p?q"


class TestValidation:
    """Test absolute IRI checks."""

    def test_valid(self):
        assert iri_problem("http://example.org/a#b") is None
        assert iri_problem("urn:isbn:0451450523") is None

    @pytest.mark.parametrize("value", [
        "",
        "relative/path",
        "http://example.org/a b",
        "http://example.org/<a>",
        "http://example.org/a\\b",
        "1http://example.org/",
    ])
    def test_invalid(self, value):
        assert iri_problem(value) is not None

    def test_is_absolute(self):
        assert is_absolute_iri("mailto:me@example.org")
        assert not is_absolute_iri("a/b:c")


class TestResolve:
    """Test RFC 3986 reference resolution (section 5.4.1 examples)."""

    @pytest.mark.parametrize("reference,expected", [
        ("g", "http://a/b/c/g"),
        ("./g", "http://a/b/c/g"),
        ("g/", "http://a/b/c/g/"),
        ("/g", "http://a/g"),
        ("//g", "http://g"),
        ("?y", "http://a/b/c/d;p?y"),
        ("g?y", "http://a/b/c/g?y"),
        ("#s", "http://a/b/c/d;p?q#s"),
        ("g;x?y#s", "http://a/b/c/g;x?y#s"),
        ("", "http://a/b/c/d;p?q"),
        (".", "http://a/b/c/"),
        ("..", "http://a/b/"),
        ("../g", "http://a/b/g"),
        ("../../g", "http://a/g"),
    ])
    def test_normal_examples(self, reference, expected):
        assert resolve_iri(RFC_BASE, reference) == expected

    def test_absolute_passes_through(self):
        assert resolve_iri(RFC_BASE, "urn:x:y") == "urn:x:y"

    def test_no_base(self):
        assert resolve_iri(None, "a") == "a"


class TestRelativize:
    """Test relative references written against a base."""

    def test_under_base_directory(self):
        assert relativize_iri("http://example.org/", "http://example.org/a") == "a"

    def test_nested_path(self):
        assert relativize_iri("http://example.org/dir/doc", "http://example.org/dir/x/y") == "x/y"

    def test_fragment(self):
        assert relativize_iri("http://example.org/dir/doc", "http://example.org/dir/doc#frag") == "#frag"

    def test_parent_directory(self):
        assert relativize_iri("http://example.org/dir/doc", "http://example.org/elsewhere") == "../elsewhere"
        assert relativize_iri("http://example.org/a/b/c", "http://example.org/a/x?q=1") == "../x?q=1"

    def test_other_scheme_stays_absolute(self):
        assert relativize_iri("http://example.org/", "https://example.org/a") == "https://example.org/a"

    def test_other_host_stays_absolute(self):
        assert relativize_iri("http://example.org/", "http://other.org/a") == "http://other.org/a"

    def test_no_base(self):
        assert relativize_iri(None, "http://example.org/a") == "http://example.org/a"

    def test_colon_in_first_segment(self):
        """A relative reference must not look like it has a scheme."""
        relative = relativize_iri("http://example.org/", "http://example.org/a:b")
        assert relative == "./a:b"
        assert resolve_iri("http://example.org/", relative) == "http://example.org/a:b"

    @pytest.mark.parametrize("base,iri", [
        ("http://example.org/", "http://example.org/a"),
        ("http://example.org/", "http://example.org/"),
        ("http://example.org/dir/doc", "http://example.org/dir/"),
        ("http://example.org/dir/doc?x=1", "http://example.org/dir/doc?x=1#f"),
        ("http://example.org/dir/doc", "http://example.org/other/a"),
        ("http://example.org", "http://example.org/a"),
        ("http://example.org/a/b/c", "http://example.org/x/y#z"),
        ("http://example.org/dir/", "http://example.org/dir/a:b"),
    ])
    def test_inverse_of_resolve(self, base, iri):
        assert resolve_iri(base, relativize_iri(base, iri)) == iri
