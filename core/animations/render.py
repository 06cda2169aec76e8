"""Server-side rendering for animated examples and theory animation blocks.

Each diagram is rendered as static HTML/SVG for a single "frame" (the current
timeline/flow step or the selected diff toggle). Steppers and toggles are plain
links that change a query parameter, so the diagrams work without JavaScript
and are cached by the offline service worker like any other page.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

from django.conf import settings
from django.template.loader import render_to_string
from django.utils.safestring import SafeString, mark_safe

from .schema import (
    Diff2DSpec,
    DiffBlock,
    Flow2DSpec,
    FlowBlock,
    TheoryAnimationBlock,
    Three3DBlock,
    Timeline2DSpec,
    TimelineBlock,
)
from .validator import parse_example_controls, parse_theory_animations, validate_spec

logger = logging.getLogger(__name__)

FLOW_BLOCK_COLUMNS = 4
FLOW_BLOCK_SPACING = 150
FLOW_BLOCK_MARGIN = 100
FLOW_NODE_RADIUS = 30


class ExampleLike(Protocol):
    """The fields of `curriculum.AnimatedExample` used by the renderer."""

    example_id: str
    kind: str
    title: str
    description: str
    what_to_notice: Any
    controls: Any
    spec: Any


@dataclass(frozen=True, slots=True)
class StepLink:
    """A stepper/toggle control rendered as a link."""

    index: int
    label: str
    active: bool
    query: str


@dataclass(frozen=True, slots=True)
class FlowNodeView:
    """A positioned node ready for SVG output."""

    id: str
    label: str
    x: float
    y: float
    active: bool
    css_class: str = ""


@dataclass(frozen=True, slots=True)
class FlowEdgeView:
    """A positioned edge ready for SVG output."""

    x1: float
    y1: float
    x2: float
    y2: float
    active: bool
    label: str | None = None

    @property
    def label_x(self) -> float:
        return (self.x1 + self.x2) / 2

    @property
    def label_y(self) -> float:
        return (self.y1 + self.y2) / 2


def clamp_index(value: object, *, count: int, default: int = 0) -> int:
    """Parse a step/toggle index from a query value and clamp it into range.

    Args:
        value: Raw query parameter value (string, int or None).
        count: Number of available steps; values are clamped to `[0, count-1]`.
        default: Index used when the value is missing or not an integer.

    Returns:
        A valid index, or 0 when `count` is 0.
    """

    if count <= 0:
        return 0
    try:
        index = int(str(value)) if value not in (None, "") else default
    except ValueError:
        index = default
    return max(0, min(index, count - 1))


def _step_links(param: str, labels: list[str], current: int, query: Mapping[str, str]) -> list[StepLink]:
    """Build stepper links that preserve the other query parameters."""

    links: list[StepLink] = []
    for idx, label in enumerate(labels):
        params = {key: value for key, value in query.items() if key != param}
        params[param] = str(idx)
        encoded = urlencode(sorted(params.items()))
        links.append(StepLink(index=idx, label=label, active=idx == current, query=f"?{encoded}"))
    return links


def _diagnostic(*, label: str, error: str, severity: str) -> SafeString:
    """Render a validation diagnostic in development; nothing in production."""

    if not settings.DEBUG:
        return mark_safe("")
    return mark_safe(
        render_to_string(
            "core/animations/diagnostic.html",
            {"label": label, "error": error, "severity": severity},
        )
    )


def _timeline_context(spec: Timeline2DSpec, current: int) -> dict[str, Any]:
    step = spec.steps[current]
    highlighted = {(h.lane, h.node_id) for h in step.highlights}
    highlighted_lanes = {lane for lane, _ in highlighted}
    rows = []
    for lane in spec.lanes:
        cells = []
        for idx, candidate in enumerate(spec.steps):
            nodes = [h.node_id for h in candidate.highlights if h.lane == lane]
            cells.append({"nodes": nodes, "active": idx == current and lane in highlighted_lanes, "past": idx < current})
        rows.append({"lane": lane, "cells": cells, "active": lane in highlighted_lanes})
    return {"rows": rows, "steps": spec.steps, "step": step, "token_path": step.token_path}


def _flow_spec_context(spec: Flow2DSpec, current: int) -> dict[str, Any]:
    step = spec.steps[current] if spec.steps else None
    active_nodes = set(step.active_nodes) if step else set()
    active_edges = set(step.active_edges) if step else set()
    positions = {node.id: node for node in spec.nodes}
    nodes = [
        FlowNodeView(
            id=node.id,
            label=node.label,
            x=node.x,
            y=node.y,
            active=node.id in active_nodes,
            css_class=f"group-{node.group}" if node.group else "",
        )
        for node in spec.nodes
    ]
    edges = [
        FlowEdgeView(
            x1=positions[edge.source].x,
            y1=positions[edge.source].y,
            x2=positions[edge.target].x,
            y2=positions[edge.target].y,
            active=edge.id in active_edges,
        )
        for edge in spec.edges
        if edge.source in positions and edge.target in positions
    ]
    max_x = max([node.x for node in spec.nodes] + [100])
    max_y = max([node.y for node in spec.nodes] + [100])
    return {
        "nodes": nodes,
        "edges": edges,
        "view_box": f"0 0 {max_x + 100:g} {max_y + 100:g}",
        "step": step,
        "radius": FLOW_NODE_RADIUS,
    }


def flow_block_layout(block: FlowBlock) -> dict[str, Any]:
    """Lay out a flow block on a fixed grid and return SVG view data.

    Nodes are placed left-to-right in rows of `FLOW_BLOCK_COLUMNS`, in
    declaration order.
    """

    positions: dict[str, tuple[float, float]] = {}
    for index, node in enumerate(block.nodes):
        x = FLOW_BLOCK_MARGIN + (index % FLOW_BLOCK_COLUMNS) * FLOW_BLOCK_SPACING
        y = FLOW_BLOCK_MARGIN + (index // FLOW_BLOCK_COLUMNS) * FLOW_BLOCK_SPACING
        positions[node.id] = (x, y)

    nodes = [
        FlowNodeView(
            id=node.id,
            label=node.label,
            x=positions[node.id][0],
            y=positions[node.id][1],
            active=node.id == block.active_node_id,
            css_class=f"type-{node.type}" if node.type else "",
        )
        for node in block.nodes
    ]
    edges = [
        FlowEdgeView(
            x1=positions[edge.source][0],
            y1=positions[edge.source][1],
            x2=positions[edge.target][0],
            y2=positions[edge.target][1],
            active=block.active_node_id in (edge.source, edge.target),
            label=edge.label,
        )
        for edge in block.edges
        if edge.source in positions and edge.target in positions
    ]
    rows = (len(block.nodes) + FLOW_BLOCK_COLUMNS - 1) // FLOW_BLOCK_COLUMNS
    height = max(400, FLOW_BLOCK_MARGIN * 2 + (rows - 1) * FLOW_BLOCK_SPACING)
    return {"nodes": nodes, "edges": edges, "view_box": f"0 0 800 {height}", "radius": FLOW_NODE_RADIUS}


def render_example(example: ExampleLike, *, query: Mapping[str, str] | None = None) -> SafeString:
    """Render one animated example at the frame selected by `query`.

    Args:
        example: AnimatedExample row (or any object with the same fields).
        query: Request query parameters; `ex-<example_id>` selects the step or
            toggle.

    Returns:
        Rendered HTML, a development diagnostic, or an empty string when the
        spec is invalid in production.
    """

    query = query or {}
    result = validate_spec(example.kind, example.spec)
    if not result.success:
        logger.warning("Invalid animated example spec example_id=%s: %s", example.example_id, result.error)
        return _diagnostic(label=f"Invalid spec for {example.example_id}", error=result.error or "", severity="error")

    controls = parse_example_controls(example.controls)
    param = f"ex-{example.example_id}"
    spec = result.data
    what_to_notice = [item for item in (example.what_to_notice or []) if isinstance(item, str)]
    context: dict[str, Any] = {
        "anchor": param,
        "title": example.title,
        "description": example.description,
        "what_to_notice": what_to_notice,
        "mode": controls.mode,
    }

    if isinstance(spec, Timeline2DSpec):
        current = clamp_index(query.get(param), count=len(spec.steps), default=controls.initial_step)
        context.update(_timeline_context(spec, current))
        context["links"] = _step_links(param, [s.label for s in spec.steps], current, query)
        template = "core/animations/timeline2d.html"
    elif isinstance(spec, Flow2DSpec):
        current = clamp_index(query.get(param), count=len(spec.steps), default=controls.initial_step)
        context.update(_flow_spec_context(spec, current))
        context["links"] = _step_links(param, [s.label for s in spec.steps], current, query)
        template = "core/animations/flow2d.html"
    else:
        assert isinstance(spec, Diff2DSpec)
        current = clamp_index(query.get(param), count=len(spec.toggles), default=controls.initial_step)
        labels = [
            controls.toggle_labels[idx] if idx < len(controls.toggle_labels) else toggle.label
            for idx, toggle in enumerate(spec.toggles)
        ]
        context.update({"spec": spec, "toggle": spec.toggles[current]})
        context["links"] = _step_links(param, labels, current, query)
        template = "core/animations/diff2d.html"

    return mark_safe(render_to_string(template, context))


def _block_context(block: TheoryAnimationBlock, *, anchor: str, query: Mapping[str, str]) -> tuple[str, dict[str, Any]]:
    context: dict[str, Any] = {"anchor": anchor, "block": block}
    if isinstance(block, TimelineBlock):
        current = clamp_index(query.get(anchor), count=len(block.steps), default=block.current_step)
        context["current"] = block.steps[current]
        context["current_index"] = current
        context["links"] = _step_links(anchor, [s.label for s in block.steps], current, query)
        return "core/animations/block_timeline2d.html", context
    if isinstance(block, FlowBlock):
        context.update(flow_block_layout(block))
        return "core/animations/block_flow2d.html", context
    if isinstance(block, DiffBlock):
        marks = {(h.side, h.item_index): h.type for h in block.highlights}
        context["before_items"] = [
            {"text": text, "change": marks.get(("before", idx))} for idx, text in enumerate(block.before.items)
        ]
        context["after_items"] = [
            {"text": text, "change": marks.get(("after", idx))} for idx, text in enumerate(block.after.items)
        ]
        return "core/animations/block_diff2d.html", context
    assert isinstance(block, Three3DBlock)
    return "core/animations/block_three3d.html", context


def render_theory_animations(blocks: object, *, query: Mapping[str, str] | None = None) -> SafeString:
    """Render a topic's theory animation block list.

    Args:
        blocks: Raw JSON list stored on `Topic.theory_animations`.
        query: Request query parameters; `blk-<id or index>` selects timeline steps.

    Returns:
        Rendered HTML for all blocks, a development diagnostic when the list is
        invalid, or an empty string.
    """

    query = query or {}
    result = parse_theory_animations(blocks if blocks is not None else [])
    if not result.success:
        logger.warning("Invalid theory animation blocks: %s", result.error)
        return _diagnostic(label="Invalid animation blocks", error=result.error or "", severity="warning")
    if not result.data:
        return mark_safe("")

    parts: list[str] = []
    for index, block in enumerate(result.data):
        anchor = f"blk-{block.id or index}"
        template, context = _block_context(block, anchor=anchor, query=query)
        parts.append(render_to_string(template, context))
    return mark_safe("".join(parts))
