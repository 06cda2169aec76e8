"""Schema types for animated examples and theory animation blocks.

Animations are authored as JSON in the admin (or in YAML fixtures) and decoded
into these frozen dataclasses by `core.animations.validator`. Rendering code
only ever sees decoded instances, never raw JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

ExampleKind = Literal["timeline2d", "flow2d", "diff2d"]
BlockKind = Literal["timeline2d", "flow2d", "diff2d", "three3d"]
ControlMode = Literal["stepper", "toggle", "play"]

EXAMPLE_KINDS: tuple[ExampleKind, ...] = ("timeline2d", "flow2d", "diff2d")
BLOCK_KINDS: tuple[BlockKind, ...] = ("timeline2d", "flow2d", "diff2d", "three3d")

TimelineLane = Literal["default", "server", "client", "edge"]
FlowNodeType = Literal["default", "source", "sink", "process"]
DiffSide = Literal["before", "after"]
DiffChange = Literal["added", "removed", "changed"]


# Animated example specs (one JSON document per AnimatedExample row).


@dataclass(frozen=True, slots=True)
class Timeline2DHighlight:
    """A node highlighted on a lane during one timeline step."""

    lane: str
    node_id: str


@dataclass(frozen=True, slots=True)
class Timeline2DTokenPath:
    """A token moving between two points on a lane."""

    source: str
    target: str
    lane: str


@dataclass(frozen=True, slots=True)
class Timeline2DStep:
    """One step of a timeline example."""

    label: str
    explanation: str
    highlights: tuple[Timeline2DHighlight, ...] = ()
    token_path: Timeline2DTokenPath | None = None


@dataclass(frozen=True, slots=True)
class Timeline2DSpec:
    """Lanes (rows) and ordered steps (columns) of a timeline diagram."""

    lanes: tuple[str, ...]
    steps: tuple[Timeline2DStep, ...]


@dataclass(frozen=True, slots=True)
class Flow2DNode:
    """A positioned node in a flow graph.

    Args:
        id: Identifier referenced by edges and steps.
        label: Display label.
        x: Horizontal position in diagram units.
        y: Vertical position in diagram units.
        group: Optional group name used for styling.
    """

    id: str
    label: str
    x: float
    y: float
    group: str | None = None


@dataclass(frozen=True, slots=True)
class Flow2DEdge:
    """A directed edge between two flow nodes."""

    id: str
    source: str
    target: str


@dataclass(frozen=True, slots=True)
class Flow2DStep:
    """A step that activates a subset of nodes and edges."""

    label: str
    explanation: str
    active_nodes: tuple[str, ...] = ()
    active_edges: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Flow2DSpec:
    """Nodes, edges and optional steps of a flow diagram."""

    nodes: tuple[Flow2DNode, ...]
    edges: tuple[Flow2DEdge, ...]
    steps: tuple[Flow2DStep, ...] = ()


@dataclass(frozen=True, slots=True)
class Diff2DHighlight:
    """A rectangular highlight region on one side of a diff."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class Diff2DToggle:
    """A named toggle that swaps the highlighted regions and explanation."""

    label: str
    explanation: str
    left_highlights: tuple[Diff2DHighlight, ...] = ()
    right_highlights: tuple[Diff2DHighlight, ...] = ()


@dataclass(frozen=True, slots=True)
class Diff2DSpec:
    """Before/after panels with toggleable highlight sets."""

    left_title: str
    right_title: str
    toggles: tuple[Diff2DToggle, ...]


AnimatedExampleSpec = Union[Timeline2DSpec, Flow2DSpec, Diff2DSpec]


@dataclass(frozen=True, slots=True)
class ExampleControls:
    """Interaction hints for an animated example."""

    mode: ControlMode = "stepper"
    initial_step: int = 0
    toggle_labels: tuple[str, ...] = ()


# Theory animation blocks (a JSON list stored on Topic.theory_animations).


@dataclass(frozen=True, slots=True)
class TimelineBlockStep:
    """One step in a timeline block."""

    id: str
    label: str
    description: str | None = None
    lane: TimelineLane | None = None


@dataclass(frozen=True, slots=True)
class FlowBlockNode:
    """A node in a flow block; blocks are laid out automatically."""

    id: str
    label: str
    type: FlowNodeType | None = None


@dataclass(frozen=True, slots=True)
class FlowBlockEdge:
    """A directed edge in a flow block."""

    source: str
    target: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class DiffBlockSide:
    """One side (before or after) of a diff block."""

    title: str
    items: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DiffBlockHighlight:
    """Marks an item on one side as added, removed or changed."""

    side: DiffSide
    item_index: int
    type: DiffChange


@dataclass(frozen=True, slots=True)
class CameraPreset:
    """A named camera position for a 3D scene."""

    name: str
    position: tuple[float, float, float]
    target: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class TimelineBlock:
    """A stepped timeline explanation."""

    title: str
    what_to_notice: tuple[str, ...]
    steps: tuple[TimelineBlockStep, ...]
    id: str | None = None
    description: str | None = None
    linked_practice_anchor: str | None = None
    current_step: int = 0
    kind: Literal["timeline2d"] = "timeline2d"


@dataclass(frozen=True, slots=True)
class FlowBlock:
    """A node/edge flow explanation."""

    title: str
    what_to_notice: tuple[str, ...]
    nodes: tuple[FlowBlockNode, ...]
    edges: tuple[FlowBlockEdge, ...]
    id: str | None = None
    description: str | None = None
    linked_practice_anchor: str | None = None
    active_node_id: str | None = None
    kind: Literal["flow2d"] = "flow2d"


@dataclass(frozen=True, slots=True)
class DiffBlock:
    """A before/after comparison."""

    title: str
    what_to_notice: tuple[str, ...]
    before: DiffBlockSide
    after: DiffBlockSide
    highlights: tuple[DiffBlockHighlight, ...] = ()
    id: str | None = None
    description: str | None = None
    linked_practice_anchor: str | None = None
    kind: Literal["diff2d"] = "diff2d"


@dataclass(frozen=True, slots=True)
class Three3DBlock:
    """A 3D scene reference; the site renders a static 2D fallback."""

    title: str
    what_to_notice: tuple[str, ...]
    scene_component: str
    camera_presets: tuple[CameraPreset, ...] = ()
    default_state: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    description: str | None = None
    linked_practice_anchor: str | None = None
    kind: Literal["three3d"] = "three3d"


TheoryAnimationBlock = Union[TimelineBlock, FlowBlock, DiffBlock, Three3DBlock]
