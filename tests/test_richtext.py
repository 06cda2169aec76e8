"""Unit tests for the rich text renderer and table of contents."""

from __future__ import annotations

import pytest

from conftest import doc, heading, paragraph, text
from core.richtext import (
    FORMAT_BOLD,
    FORMAT_CODE,
    FORMAT_ITALIC,
    HeadingIds,
    document_text,
    extract_headings,
    has_headings,
    render_rich_text,
    root_node,
    slugify_heading,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Mental Model", "mental-model"),
        ("  CSR / SSR & ISR!  ", "csr-ssr-isr"),
        ("Déjà vu", "d-j-vu"),
        ("!!!", "heading"),
        ("", "heading"),
    ],
)
def test_slugify_heading(value: str, expected: str) -> None:
    """Slugs lowercase text and collapse invalid runs into single dashes."""

    assert slugify_heading(value) == expected


def test_heading_ids_suffix_duplicates() -> None:
    """Repeated heading text receives -2, -3 suffixes within one pass."""

    ids = HeadingIds()
    assert [ids.allocate("Overview") for _ in range(3)] == ["overview", "overview-2", "overview-3"]


def test_heading_ids_skip_suffixes_taken_by_literal_text() -> None:
    """A heading whose text already ends in a suffix never reuses an allocated ID."""

    ids = HeadingIds()
    assert [ids.allocate(value) for value in ("A", "A", "A-2")] == ["a", "a-2", "a-2-2"]


def test_root_node_accepts_supported_shapes() -> None:
    """All three document shapes resolve to a root; other values do not."""

    children = [paragraph(text("x"))]
    assert root_node({"root": {"children": children}}) is not None
    assert root_node({"type": "root", "children": children}) is not None
    assert root_node({"children": children}) is not None
    assert root_node(None) is None
    assert root_node("text") is None
    assert root_node({"root": {"children": "nope"}}) is None


def test_render_empty_documents_render_nothing() -> None:
    """Missing or empty documents produce an empty string."""

    assert render_rich_text(None) == ""
    assert render_rich_text({"root": {"children": []}}) == ""


def test_render_wraps_top_level_blocks() -> None:
    """Each top-level child is wrapped in a div inside the rich-text container."""

    html = render_rich_text(doc(paragraph(text("One")), paragraph(text("Two"))))

    assert html.startswith('<div class="rich-text">')
    assert html.count("<div><p>") == 2


def test_render_headings_get_unique_ids() -> None:
    """Headings render with slug IDs, de-duplicated in document order."""

    html = render_rich_text(doc(heading("h2", "Trade-offs"), heading("h3", "Trade-offs"), heading("h9", "Odd")))

    assert '<h2 id="trade-offs">' in html
    assert '<h3 id="trade-offs-2">' in html
    assert '<h1 id="odd">' in html


def test_render_text_format_bits_nest_in_order() -> None:
    """Bold, italic and code wrappers nest in that order."""

    html = render_rich_text(doc(paragraph(text("x", FORMAT_BOLD | FORMAT_ITALIC | FORMAT_CODE))))

    assert "<span><code><em><strong>x</strong></em></code></span>" in html


def test_render_escapes_text() -> None:
    """Text is HTML-escaped."""

    html = render_rich_text(doc(paragraph(text("<script>alert(1)</script>"))))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_render_lists() -> None:
    """Numbered lists render as ol, others as ul, with li wrappers."""

    item = {"type": "listitem", "children": [text("a")]}
    html = render_rich_text(
        doc(
            {"type": "list", "listType": "number", "children": [item]},
            {"type": "list", "listType": "bullet", "children": [item]},
        )
    )

    assert '<ol class="list-ol"><li><span>a</span></li></ol>' in html
    assert '<ul class="list-ul"><li><span>a</span></li></ul>' in html


def test_render_links_open_in_new_tab_and_drop_unsafe_schemes() -> None:
    """Safe links get target/rel attributes; javascript: links render as text."""

    html = render_rich_text(
        doc(
            paragraph({"type": "link", "url": "https://web.dev/", "children": [text("web.dev")]}),
            paragraph({"type": "link", "url": "javascript:alert(1)", "children": [text("bad")]}),
        )
    )

    assert '<a href="https://web.dev/" target="_blank" rel="noopener noreferrer">' in html
    assert "javascript:" not in html
    assert "<span>bad</span>" in html


def test_render_quote_code_linebreak_and_unknown() -> None:
    """Quotes, code blocks, line breaks and unknown containers render as expected."""

    html = render_rich_text(
        doc(
            {"type": "quote", "children": [text("q")]},
            {"type": "code", "children": [text("a < b"), {"type": "linebreak"}, text("c")]},
            paragraph(text("x"), {"type": "linebreak"}, text("y")),
            {"type": "mystery", "children": [text("kept")]},
            {"type": "mystery"},
        )
    )

    assert "<blockquote><span>q</span></blockquote>" in html
    assert "<pre><code>a &lt; bc</code></pre>" in html
    assert "<span>x</span><br><span>y</span>" in html
    assert "<div><span>kept</span></div>" in html
    assert html.endswith("<div></div></div>")


def test_extract_headings_matches_rendered_ids() -> None:
    """TOC entries use the same IDs as the rendered anchors and skip h1/h4."""

    document = doc(
        heading("h1", "Overview"),
        heading("h2", "Overview"),
        heading("h3", "Details"),
        heading("h4", "Deep"),
        heading("h2", ""),
    )

    toc = extract_headings(document)
    html = render_rich_text(document)

    assert [(h.id, h.text, h.level) for h in toc] == [("overview-2", "Overview", 2), ("details", "Details", 3)]
    for entry in toc:
        assert f'id="{entry.id}"' in html


def test_has_headings_and_document_text() -> None:
    """Audit helpers report top-level headings and flatten text."""

    document = doc(heading("h2", "Title"), paragraph(text("Body "), text("more")))

    assert has_headings(document) is True
    assert has_headings(doc(paragraph(text("no")))) is False
    assert document_text(document) == "Title\nBody more"
