"""Strict decoding of animation JSON into schema dataclasses.

Animation JSON is user-editable content, so decoding collects every problem
instead of stopping at the first one. Each issue is reported as
`path: message` (path segments joined by "."), and all issues are joined by
"; " into a single error string suitable for admin field errors and the
development-only diagnostic panel.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .schema import (
    BLOCK_KINDS,
    EXAMPLE_KINDS,
    AnimatedExampleSpec,
    CameraPreset,
    Diff2DHighlight,
    Diff2DSpec,
    Diff2DToggle,
    DiffBlock,
    DiffBlockHighlight,
    DiffBlockSide,
    ExampleControls,
    Flow2DEdge,
    Flow2DNode,
    Flow2DSpec,
    Flow2DStep,
    FlowBlock,
    FlowBlockEdge,
    FlowBlockNode,
    TheoryAnimationBlock,
    Three3DBlock,
    Timeline2DHighlight,
    Timeline2DSpec,
    Timeline2DStep,
    Timeline2DTokenPath,
    TimelineBlock,
    TimelineBlockStep,
)

T = TypeVar("T")
Path = tuple[str | int, ...]

_MISSING = object()


@dataclass(frozen=True, slots=True)
class SpecValidation:
    """Outcome of decoding an animation document.

    Attributes:
        success: True when the document decoded without issues.
        data: Decoded value when `success` is True, otherwise None.
        error: Joined `path: message` issues when `success` is False.
    """

    success: bool
    data: Any = None
    error: str | None = None


class _Issues:
    """Accumulates `path: message` validation issues."""

    def __init__(self) -> None:
        self.items: list[str] = []

    def add(self, path: Path, message: str) -> None:
        """Record an issue at `path`."""

        self.items.append(f"{'.'.join(str(part) for part in path)}: {message}")

    def __bool__(self) -> bool:
        return bool(self.items)

    def joined(self) -> str:
        """Return all issues joined for display."""

        return "; ".join(self.items)


def _type_name(value: object) -> str:
    """Return a JSON-flavoured type name for error messages."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class _Reader:
    """Typed accessors over a JSON object that report into `_Issues`."""

    def __init__(self, issues: _Issues) -> None:
        self.issues = issues

    def obj(self, value: object, path: Path) -> dict[str, Any] | None:
        if isinstance(value, dict):
            return value
        self.issues.add(path, f"Expected object, received {_type_name(value)}")
        return None

    def string(self, data: dict[str, Any], key: str, path: Path, *, optional: bool = False, min_length: int = 0) -> str:
        value = data.get(key, _MISSING)
        if value is _MISSING or (optional and value is None):
            if not optional:
                self.issues.add((*path, key), "Required")
            return ""
        if not isinstance(value, str):
            self.issues.add((*path, key), f"Expected string, received {_type_name(value)}")
            return ""
        if len(value) < min_length:
            self.issues.add((*path, key), f"String must contain at least {min_length} character(s)")
        return value

    def optional_string(self, data: dict[str, Any], key: str, path: Path) -> str | None:
        if data.get(key) is None:
            return None
        return self.string(data, key, path) or None

    def number(self, data: dict[str, Any], key: str, path: Path, *, integer: bool = False, minimum: float | None = None) -> float:
        value = data.get(key, _MISSING)
        if value is _MISSING:
            self.issues.add((*path, key), "Required")
            return 0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.issues.add((*path, key), f"Expected number, received {_type_name(value)}")
            return 0
        if integer and not float(value).is_integer():
            self.issues.add((*path, key), "Expected integer, received float")
            return 0
        if minimum is not None and value < minimum:
            self.issues.add((*path, key), f"Number must be greater than or equal to {minimum:g}")
        return int(value) if integer else float(value)

    def choice(self, data: dict[str, Any], key: str, path: Path, options: tuple[str, ...], *, optional: bool = False) -> str | None:
        value = data.get(key, _MISSING)
        if value is _MISSING or value is None:
            if not optional:
                self.issues.add((*path, key), "Required")
            return None
        if value not in options:
            expected = " | ".join(repr(option) for option in options)
            self.issues.add((*path, key), f"Invalid enum value. Expected {expected}, received {value!r}")
            return None
        return str(value)

    def items(
        self,
        data: dict[str, Any],
        key: str,
        path: Path,
        decode: Callable[[object, Path], T | None],
        *,
        optional: bool = False,
        min_items: int | None = None,
        max_items: int | None = None,
    ) -> tuple[T, ...]:
        value = data.get(key, _MISSING)
        if value is _MISSING or (optional and value is None):
            if not optional:
                self.issues.add((*path, key), "Required")
            return ()
        if not isinstance(value, list):
            self.issues.add((*path, key), f"Expected array, received {_type_name(value)}")
            return ()
        if min_items is not None and len(value) < min_items:
            self.issues.add((*path, key), f"Array must contain at least {min_items} element(s)")
        if max_items is not None and len(value) > max_items:
            self.issues.add((*path, key), f"Array must contain at most {max_items} element(s)")
        decoded: list[T] = []
        for idx, item in enumerate(value):
            result = decode(item, (*path, key, idx))
            if result is not None:
                decoded.append(result)
        return tuple(decoded)

    def strings(self, data: dict[str, Any], key: str, path: Path, **kwargs: Any) -> tuple[str, ...]:
        def _one(item: object, item_path: Path) -> str | None:
            if isinstance(item, str):
                return item
            self.issues.add(item_path, f"Expected string, received {_type_name(item)}")
            return None

        return self.items(data, key, path, _one, **kwargs)


# Animated example specs.


def _decode_timeline_spec(raw: object, reader: _Reader, path: Path) -> Timeline2DSpec | None:
    data = reader.obj(raw, path)
    if data is None:
        return None

    def highlight(item: object, item_path: Path) -> Timeline2DHighlight | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Timeline2DHighlight(lane=reader.string(row, "lane", item_path), node_id=reader.string(row, "nodeId", item_path))

    def step(item: object, item_path: Path) -> Timeline2DStep | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        token_path = None
        if row.get("tokenPath") is not None:
            token_raw = reader.obj(row["tokenPath"], (*item_path, "tokenPath"))
            if token_raw is not None:
                token_path = Timeline2DTokenPath(
                    source=reader.string(token_raw, "from", (*item_path, "tokenPath")),
                    target=reader.string(token_raw, "to", (*item_path, "tokenPath")),
                    lane=reader.string(token_raw, "lane", (*item_path, "tokenPath")),
                )
        return Timeline2DStep(
            label=reader.string(row, "label", item_path),
            explanation=reader.string(row, "explanation", item_path),
            highlights=reader.items(row, "highlights", item_path, highlight, optional=True),
            token_path=token_path,
        )

    spec = Timeline2DSpec(
        lanes=reader.strings(data, "lanes", path),
        steps=reader.items(data, "steps", path, step, min_items=2),
    )
    lanes = set(spec.lanes)
    for idx, parsed_step in enumerate(spec.steps):
        for h_idx, parsed in enumerate(parsed_step.highlights):
            if parsed.lane not in lanes:
                reader.issues.add((*path, "steps", idx, "highlights", h_idx, "lane"), f"Unknown lane {parsed.lane!r}")
        if parsed_step.token_path is not None and parsed_step.token_path.lane not in lanes:
            reader.issues.add((*path, "steps", idx, "tokenPath", "lane"), f"Unknown lane {parsed_step.token_path.lane!r}")
    return spec


def _decode_flow_spec(raw: object, reader: _Reader, path: Path) -> Flow2DSpec | None:
    data = reader.obj(raw, path)
    if data is None:
        return None

    def node(item: object, item_path: Path) -> Flow2DNode | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Flow2DNode(
            id=reader.string(row, "id", item_path),
            label=reader.string(row, "label", item_path),
            x=reader.number(row, "x", item_path),
            y=reader.number(row, "y", item_path),
            group=reader.optional_string(row, "group", item_path),
        )

    def edge(item: object, item_path: Path) -> Flow2DEdge | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Flow2DEdge(
            id=reader.string(row, "id", item_path),
            source=reader.string(row, "from", item_path),
            target=reader.string(row, "to", item_path),
        )

    def step(item: object, item_path: Path) -> Flow2DStep | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Flow2DStep(
            label=reader.string(row, "label", item_path),
            explanation=reader.string(row, "explanation", item_path),
            active_nodes=reader.strings(row, "activeNodes", item_path, optional=True),
            active_edges=reader.strings(row, "activeEdges", item_path, optional=True),
        )

    spec = Flow2DSpec(
        nodes=reader.items(data, "nodes", path, node, min_items=2),
        edges=reader.items(data, "edges", path, edge),
        steps=reader.items(data, "steps", path, step, optional=True),
    )
    node_ids = {n.id for n in spec.nodes}
    edge_ids = {e.id for e in spec.edges}
    for idx, parsed_edge in enumerate(spec.edges):
        for attr, key in (("source", "from"), ("target", "to")):
            ref = getattr(parsed_edge, attr)
            if ref not in node_ids:
                reader.issues.add((*path, "edges", idx, key), f"Unknown node {ref!r}")
    for idx, parsed_step in enumerate(spec.steps):
        for ref in parsed_step.active_nodes:
            if ref not in node_ids:
                reader.issues.add((*path, "steps", idx, "activeNodes"), f"Unknown node {ref!r}")
        for ref in parsed_step.active_edges:
            if ref not in edge_ids:
                reader.issues.add((*path, "steps", idx, "activeEdges"), f"Unknown edge {ref!r}")
    return spec


def _decode_diff_spec(raw: object, reader: _Reader, path: Path) -> Diff2DSpec | None:
    data = reader.obj(raw, path)
    if data is None:
        return None

    def region(item: object, item_path: Path) -> Diff2DHighlight | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Diff2DHighlight(
            x=reader.number(row, "x", item_path),
            y=reader.number(row, "y", item_path),
            width=reader.number(row, "width", item_path),
            height=reader.number(row, "height", item_path),
        )

    def toggle(item: object, item_path: Path) -> Diff2DToggle | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return Diff2DToggle(
            label=reader.string(row, "label", item_path),
            explanation=reader.string(row, "explanation", item_path),
            left_highlights=reader.items(row, "leftHighlights", item_path, region, optional=True),
            right_highlights=reader.items(row, "rightHighlights", item_path, region, optional=True),
        )

    return Diff2DSpec(
        left_title=reader.string(data, "leftTitle", path),
        right_title=reader.string(data, "rightTitle", path),
        toggles=reader.items(data, "toggles", path, toggle, min_items=1),
    )


_SPEC_DECODERS: dict[str, Callable[[object, _Reader, Path], AnimatedExampleSpec | None]] = {
    "timeline2d": _decode_timeline_spec,
    "flow2d": _decode_flow_spec,
    "diff2d": _decode_diff_spec,
}


def validate_spec(kind: str, spec: object) -> SpecValidation:
    """Validate an animated example spec for the given kind.

    Args:
        kind: One of `timeline2d`, `flow2d`, `diff2d`.
        spec: Raw JSON value from the CMS.

    Returns:
        SpecValidation with decoded data on success, or the joined issues.
    """

    decoder = _SPEC_DECODERS.get(kind)
    if decoder is None:
        return SpecValidation(success=False, error=f"Unknown kind: {kind}")

    issues = _Issues()
    data = decoder(spec, _Reader(issues), ())
    if issues or data is None:
        return SpecValidation(success=False, error=issues.joined() or "Invalid spec")
    return SpecValidation(success=True, data=data)


def parse_example_controls(raw: object) -> ExampleControls:
    """Best-effort decoding of example controls; invalid values use defaults."""

    if not isinstance(raw, dict):
        return ExampleControls()
    mode = raw.get("mode") if raw.get("mode") in ("stepper", "toggle", "play") else "stepper"
    initial = raw.get("initialStep")
    initial_step = int(initial) if isinstance(initial, (int, float)) and not isinstance(initial, bool) and initial >= 0 else 0
    labels: list[str] = []
    for item in raw.get("toggleLabels") or ():
        if isinstance(item, str):
            labels.append(item)
        elif isinstance(item, dict) and isinstance(item.get("label"), str):
            labels.append(item["label"])
    return ExampleControls(mode=mode, initial_step=initial_step, toggle_labels=tuple(labels))


# Theory animation blocks.


def _decode_block(raw: object, reader: _Reader, path: Path) -> TheoryAnimationBlock | None:
    data = reader.obj(raw, path)
    if data is None:
        return None

    kind = data.get("kind")
    if kind not in BLOCK_KINDS:
        expected = " | ".join(repr(option) for option in BLOCK_KINDS)
        reader.issues.add((*path, "kind"), f"Invalid discriminator value. Expected {expected}")
        return None

    common: dict[str, Any] = {
        "id": reader.optional_string(data, "id", path),
        "title": reader.string(data, "title", path, min_length=1),
        "description": reader.optional_string(data, "description", path),
        "what_to_notice": reader.strings(data, "whatToNotice", path, min_items=1, max_items=6),
        "linked_practice_anchor": reader.optional_string(data, "linkedPracticeAnchor", path),
    }
    default_state = data.get("defaultState")
    state = reader.obj(default_state, (*path, "defaultState")) if default_state is not None else {}
    state = state or {}

    if kind == "timeline2d":

        def step(item: object, item_path: Path) -> TimelineBlockStep | None:
            row = reader.obj(item, item_path)
            if row is None:
                return None
            return TimelineBlockStep(
                id=reader.string(row, "id", item_path),
                label=reader.string(row, "label", item_path),
                description=reader.optional_string(row, "description", item_path),
                lane=reader.choice(row, "lane", item_path, ("default", "server", "client", "edge"), optional=True),  # type: ignore[arg-type]
            )

        current = 0
        if "currentStep" in state:
            current = int(reader.number(state, "currentStep", (*path, "defaultState"), integer=True, minimum=0))
        return TimelineBlock(
            steps=reader.items(data, "steps", path, step, min_items=2, max_items=10),
            current_step=current,
            **common,
        )

    if kind == "flow2d":

        def node(item: object, item_path: Path) -> FlowBlockNode | None:
            row = reader.obj(item, item_path)
            if row is None:
                return None
            return FlowBlockNode(
                id=reader.string(row, "id", item_path),
                label=reader.string(row, "label", item_path),
                type=reader.choice(row, "type", item_path, ("default", "source", "sink", "process"), optional=True),  # type: ignore[arg-type]
            )

        def edge(item: object, item_path: Path) -> FlowBlockEdge | None:
            row = reader.obj(item, item_path)
            if row is None:
                return None
            return FlowBlockEdge(
                source=reader.string(row, "from", item_path),
                target=reader.string(row, "to", item_path),
                label=reader.optional_string(row, "label", item_path),
            )

        nodes = reader.items(data, "nodes", path, node, min_items=2, max_items=15)
        edges = reader.items(data, "edges", path, edge)
        node_ids = {n.id for n in nodes}
        for idx, parsed_edge in enumerate(edges):
            if parsed_edge.source not in node_ids:
                reader.issues.add((*path, "edges", idx, "from"), f"Unknown node {parsed_edge.source!r}")
            if parsed_edge.target not in node_ids:
                reader.issues.add((*path, "edges", idx, "to"), f"Unknown node {parsed_edge.target!r}")
        active = reader.optional_string(state, "activeNodeId", (*path, "defaultState"))
        if active is not None and active not in node_ids:
            reader.issues.add((*path, "defaultState", "activeNodeId"), f"Unknown node {active!r}")
        return FlowBlock(nodes=nodes, edges=edges, active_node_id=active, **common)

    if kind == "diff2d":

        def side(key: str) -> DiffBlockSide:
            if key not in data:
                reader.issues.add((*path, key), "Required")
                return DiffBlockSide(title="", items=())
            side_raw = reader.obj(data[key], (*path, key))
            if side_raw is None:
                return DiffBlockSide(title="", items=())
            return DiffBlockSide(
                title=reader.string(side_raw, "title", (*path, key)),
                items=reader.strings(side_raw, "items", (*path, key)),
            )

        before = side("before")
        after = side("after")

        def highlight(item: object, item_path: Path) -> DiffBlockHighlight | None:
            row = reader.obj(item, item_path)
            if row is None:
                return None
            side_name = reader.choice(row, "side", item_path, ("before", "after"))
            item_index = int(reader.number(row, "itemIndex", item_path, integer=True))
            change = reader.choice(row, "type", item_path, ("added", "removed", "changed"))
            if side_name is None or change is None:
                return None
            items = before.items if side_name == "before" else after.items
            if not 0 <= item_index < len(items):
                reader.issues.add((*item_path, "itemIndex"), f"Index {item_index} is out of range for {side_name!r}")
            return DiffBlockHighlight(side=side_name, item_index=item_index, type=change)  # type: ignore[arg-type]

        return DiffBlock(
            before=before,
            after=after,
            highlights=reader.items(data, "highlights", path, highlight, optional=True),
            **common,
        )

    def vector(row: dict[str, Any], key: str, item_path: Path) -> tuple[float, float, float]:
        value = row.get(key)
        if (
            not isinstance(value, list)
            or len(value) != 3
            or any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in value)
        ):
            reader.issues.add((*item_path, key), "Expected a tuple of 3 numbers")
            return (0.0, 0.0, 0.0)
        return (float(value[0]), float(value[1]), float(value[2]))

    def preset(item: object, item_path: Path) -> CameraPreset | None:
        row = reader.obj(item, item_path)
        if row is None:
            return None
        return CameraPreset(
            name=reader.string(row, "name", item_path),
            position=vector(row, "position", item_path),
            target=vector(row, "target", item_path),
        )

    return Three3DBlock(
        scene_component=reader.string(data, "sceneComponent", path),
        camera_presets=reader.items(data, "cameraPresets", path, preset, optional=True),
        default_state=dict(state),
        **common,
    )


def parse_theory_animations(data: object) -> SpecValidation:
    """Validate a list of theory animation blocks.

    Args:
        data: Raw JSON value (expected to be a list of block objects).

    Returns:
        SpecValidation whose data is the tuple of decoded blocks.
    """

    issues = _Issues()
    reader = _Reader(issues)
    if not isinstance(data, list):
        issues.add((), f"Expected array, received {_type_name(data)}")
        return SpecValidation(success=False, error=issues.joined())

    blocks: list[TheoryAnimationBlock] = []
    for idx, raw in enumerate(data):
        block = _decode_block(raw, reader, (idx,))
        if block is not None:
            blocks.append(block)
    if issues:
        return SpecValidation(success=False, error=issues.joined())
    return SpecValidation(success=True, data=tuple(blocks))


__all__ = [
    "EXAMPLE_KINDS",
    "SpecValidation",
    "parse_example_controls",
    "parse_theory_animations",
    "validate_spec",
]
