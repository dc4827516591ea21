"""Tests for URL and attribute sanitisation."""

import pytest

from dsl.sanitize import (
    attribute_name,
    is_approved_domain,
    is_valid_attribute_name,
    sanitize_data_key,
    validate_image_src,
    validate_link_href,
    validate_url,
)


@pytest.mark.parametrize(
    "href",
    ["javascript:alert(1)", "JaVaScRiPt:alert(1)", "vbscript:msgbox", "file:///etc/passwd", "ftp://example.com"],
)
def test_dangerous_links_fall_back(href):
    """Script-capable and non-http schemes become '#'."""
    assert validate_link_href(href) == "#"


@pytest.mark.parametrize("href", ["https://example.com/a?b=1", "/relative/path", "#anchor", "page.html"])
def test_safe_links_pass(href):
    """Http(s) and relative destinations are kept."""
    assert validate_link_href(href) == href


def test_empty_link():
    """Missing destinations become '#'."""
    assert validate_link_href(None) == "#"
    assert validate_link_href("   ") == "#"


def test_relative_rejected_when_disallowed():
    """Relative URLs can be refused."""
    assert validate_url("/x", allow_relative=False, fallback="nope") == "nope"


def test_image_requires_approved_domain():
    """External images must come from an approved host."""
    assert validate_image_src("https://picsum.photos/200") == "https://picsum.photos/200"
    assert validate_image_src("https://evil.example/x.png") == "/images/placeholder.png"
    assert validate_image_src("/local.png") == "/local.png"


def test_image_domain_override():
    """Callers may pass their own allow-list."""
    assert validate_image_src("https://cdn.mine.io/a.png", ["mine.io"]) == "https://cdn.mine.io/a.png"


def test_approved_domain_matching():
    """Subdomains match; lookalike suffixes do not."""
    assert is_approved_domain("img.example.com", ["example.com"])
    assert not is_approved_domain("badexample.com", ["example.com"])
    assert not is_approved_domain(None, ["example.com"])


def test_data_keys():
    """Data keys are normalized to kebab case with one data- prefix."""
    assert sanitize_data_key("userId") == "data-user-id"
    assert sanitize_data_key("data-action") == "data-action"
    assert sanitize_data_key("item_count") == "data-item-count"
    assert sanitize_data_key("!!!") == "data-value"


def test_attribute_names():
    """Event handlers and malformed names are rejected."""
    assert is_valid_attribute_name("aria-label")
    assert is_valid_attribute_name("data-x")
    assert not is_valid_attribute_name("onclick")
    assert not is_valid_attribute_name("OnLoad")
    assert not is_valid_attribute_name('x"y')
    assert not is_valid_attribute_name("a b")


def test_keyword_attribute_names():
    """Python keywords map to attribute names."""
    assert attribute_name("class_") == "class"
    assert attribute_name("for_") == "for"
    assert attribute_name("aria_label") == "aria-label"
