"""Render serialized rich text documents to HTML.

CMS rich text is stored as a serialized editor tree: nested nodes with a
`type`, optional `children`, and type-specific attributes (`tag` for headings,
`listType` for lists, `url` for links, `text` + `format` bits for text runs).

Rendering is a recursive dispatch on node type. Headings receive anchor IDs
derived from their text; IDs are unique within one render pass so the table of
contents can link to them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from django.utils.html import escape, format_html, format_html_join
from django.utils.safestring import SafeString, mark_safe

FORMAT_BOLD = 1
FORMAT_ITALIC = 2
FORMAT_CODE = 4

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
TOC_LEVELS = (2, 3)

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_SAFE_URL_SCHEMES = ("http://", "https://", "mailto:", "/", "#")


@dataclass(frozen=True, slots=True)
class Heading:
    """A heading entry for a table of contents.

    Attributes:
        id: Anchor id (matches the rendered heading's `id` attribute).
        text: Plain heading text.
        level: Heading level (2 or 3).
    """

    id: str
    text: str
    level: int


def slugify_heading(text: str) -> str:
    """Return the base anchor slug for heading text.

    Lowercases the text, collapses every run of characters outside `[a-z0-9]`
    into a single `-`, and trims leading/trailing dashes. Empty results fall
    back to `heading`.
    """

    return _SLUG_INVALID.sub("-", text.lower()).strip("-") or "heading"


@dataclass(slots=True)
class HeadingIds:
    """Allocates unique heading IDs for a single render pass."""

    used: set[str] = field(default_factory=set)

    def allocate(self, text: str) -> str:
        """Return a unique ID for `text`, suffixing `-2`, `-3`, ... on collision."""

        base = slugify_heading(text)
        candidate = base
        counter = 2
        while candidate in self.used:
            candidate = f"{base}-{counter}"
            counter += 1
        self.used.add(candidate)
        return candidate


def root_node(document: object) -> Mapping[str, Any] | None:
    """Locate the root node of a serialized document.

    Accepts `{"root": {"children": [...]}}`, a node with `type == "root"`, or
    any mapping with a top-level `children` list.

    Returns:
        The root node mapping, or None when the document has no usable root.
    """

    if not isinstance(document, Mapping):
        return None
    if "root" in document and document["root"]:
        root = document["root"]
        if isinstance(root, Mapping) and isinstance(root.get("children"), list):
            return root
        return None
    if isinstance(document.get("children"), list):
        if document.get("type") == "root":
            return document
        return {"type": "root", "children": document["children"]}
    return None


def _children(node: Mapping[str, Any]) -> list[Any]:
    children = node.get("children")
    return children if isinstance(children, list) else []


def node_text(node: object) -> str:
    """Return the concatenated text of a node and its descendants."""

    if not isinstance(node, Mapping):
        return ""
    if node.get("type") == "text":
        return str(node.get("text") or "")
    return "".join(node_text(child) for child in _children(node))


def document_text(document: object) -> str:
    """Return all text in a document, one top-level block per line."""

    root = root_node(document)
    if root is None:
        return ""
    return "\n".join(node_text(child) for child in _children(root))


def _heading_level(node: Mapping[str, Any]) -> int:
    tag = str(node.get("tag") or "h1").lower()
    if tag in HEADING_TAGS:
        return int(tag[1])
    return 1


def _safe_href(url: object) -> str | None:
    """Return `url` when it uses an allowed scheme, otherwise None."""

    if not isinstance(url, str):
        return None
    value = url.strip()
    if value.lower().startswith(_SAFE_URL_SCHEMES):
        return value
    return None


class RichTextRenderer:
    """Render one document to HTML.

    A renderer instance corresponds to one render pass: heading IDs are unique
    within the instance. Create a new renderer (or call `render_rich_text`) per
    document.
    """

    def __init__(self) -> None:
        self.heading_ids = HeadingIds()

    def render(self, document: object) -> SafeString:
        """Render a full document; empty or malformed documents render ""."""

        root = root_node(document)
        if root is None or not _children(root):
            return mark_safe("")
        return format_html(
            "<div class=\"rich-text\">{}</div>",
            format_html_join("", "<div>{}</div>", ((self.render_node(child),) for child in _children(root))),
        )

    def render_children(self, node: Mapping[str, Any]) -> SafeString:
        """Render all children of `node` in sequence."""

        return mark_safe("".join(self.render_node(child) for child in _children(node)))

    def render_node(self, node: object) -> SafeString:
        """Dispatch a single node to its rendering rule."""

        if not isinstance(node, Mapping):
            return mark_safe("")

        node_type = node.get("type")
        if node_type == "heading":
            return self._heading(node)
        if node_type == "paragraph":
            return format_html("<p>{}</p>", self.render_children(node))
        if node_type == "list":
            tag = "ol" if node.get("listType") == "number" else "ul"
            items = format_html_join("", "<li>{}</li>", ((self.render_node(child),) for child in _children(node)))
            return format_html("<{} class=\"list-{}\">{}</{}>", tag, tag, items, tag)
        if node_type == "listitem":
            return self.render_children(node)
        if node_type == "text":
            return self._text(node)
        if node_type == "link":
            href = _safe_href(node.get("url"))
            if href is None:
                return self.render_children(node)
            return format_html(
                "<a href=\"{}\" target=\"_blank\" rel=\"noopener noreferrer\">{}</a>",
                href,
                self.render_children(node),
            )
        if node_type in ("quote", "blockquote"):
            return format_html("<blockquote>{}</blockquote>", self.render_children(node))
        if node_type == "code":
            return format_html("<pre><code>{}</code></pre>", node_text(node))
        if node_type == "linebreak":
            return mark_safe("<br>")
        if "children" in node:
            return self.render_children(node)
        return mark_safe("")

    def _heading(self, node: Mapping[str, Any]) -> SafeString:
        level = _heading_level(node)
        heading_id = self.heading_ids.allocate(node_text(node))
        return format_html(
            "<h{} id=\"{}\">{}</h{}>",
            level,
            heading_id,
            self.render_children(node),
            level,
        )

    def _text(self, node: Mapping[str, Any]) -> SafeString:
        text: SafeString = escape(str(node.get("text") or ""))
        fmt = node.get("format")
        bits = fmt if isinstance(fmt, int) and not isinstance(fmt, bool) else 0
        if bits & FORMAT_BOLD:
            text = format_html("<strong>{}</strong>", text)
        if bits & FORMAT_ITALIC:
            text = format_html("<em>{}</em>", text)
        if bits & FORMAT_CODE:
            text = format_html("<code>{}</code>", text)
        return format_html("<span>{}</span>", text)


def render_rich_text(document: object) -> SafeString:
    """Render a document in a fresh render pass."""

    return RichTextRenderer().render(document)


def _walk(nodes: Iterable[Any]) -> Iterable[Mapping[str, Any]]:
    for node in nodes:
        if not isinstance(node, Mapping):
            continue
        yield node
        if node.get("type") != "code":
            yield from _walk(_children(node))


def extract_headings(document: object, *, levels: tuple[int, ...] = TOC_LEVELS) -> list[Heading]:
    """Extract table-of-contents headings from a document.

    IDs are allocated for every heading in document order, exactly as
    `RichTextRenderer` does, so each returned ID matches the rendered anchor.
    Only headings at `levels` (h2/h3 by default) with non-empty text are
    returned.
    """

    root = root_node(document)
    if root is None:
        return []

    ids = HeadingIds()
    headings: list[Heading] = []
    for node in _walk(_children(root)):
        if node.get("type") != "heading":
            continue
        text = node_text(node)
        heading_id = ids.allocate(text)
        level = _heading_level(node)
        if level in levels and text:
            headings.append(Heading(id=heading_id, text=text, level=level))
    return headings


def has_headings(document: object) -> bool:
    """Return True when the document's top level contains at least one heading."""

    root = root_node(document)
    if root is None:
        return False
    return any(isinstance(child, Mapping) and child.get("type") == "heading" for child in _children(root))
