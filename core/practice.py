"""Practice tab helpers: demo configuration, guided steps and tasks.

Each topic's practice tab combines an interactive demo (configured by JSON and
discriminated by `demoType`), an ordered list of guided steps, and short
answer tasks. This module validates those JSON fields and builds the view
state for the practice tab.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final
from urllib.parse import urlencode

from core.animations.validator import SpecValidation

DEMO_TYPES: Final[tuple[str, ...]] = (
    "requirementsToArchitecture",
    "renderingStrategyLab",
    "stateAtScaleLab",
    "performanceBudgetLab",
    "uiArchitectureLab",
    "releaseDeliveryLab",
    "testingStrategyLab",
    "observabilityLab",
    "securityPrivacyLab",
    "realtimeSystemsLab",
    "largeScaleUXLab",
    "capstoneBuilder",
)

DEMO_TITLES: Final[dict[str, str]] = {
    "requirementsToArchitecture": "Requirements to Architecture",
    "renderingStrategyLab": "Rendering Strategy Lab",
    "stateAtScaleLab": "State at Scale Lab",
    "performanceBudgetLab": "Performance Budget Lab",
    "uiArchitectureLab": "UI Architecture Lab",
    "releaseDeliveryLab": "Release & Delivery Lab",
    "testingStrategyLab": "Testing Strategy Lab",
    "observabilityLab": "Observability Lab",
    "securityPrivacyLab": "Security & Privacy Lab",
    "realtimeSystemsLab": "Realtime Systems Lab",
    "largeScaleUXLab": "Large-Scale UX Lab",
    "capstoneBuilder": "Capstone Builder",
}

_RENDERING_STRATEGIES = ("CSR", "SSR", "SSG", "ISR", "STREAMING")
_STATE_NETWORKS = ("ONLINE", "FLAKY", "OFFLINE")
_STATE_CACHE_MODES = ("FRESH_ONLY", "STALE_WHILE_REVALIDATE")
_STATE_CONFLICT_MODES = ("NONE", "LAST_WRITE_WINS", "MANUAL_MERGE")

DEMO_PARAM_PREFIX: Final = "demo-"
NOT_DETERMINED: Final = "Not determined"
NOT_DETERMINED_REASON: Final = "Adjust constraints to see decisions"

_RENDERING_CONTROLS = (
    ("strategy", "Strategy", _RENDERING_STRATEGIES),
    ("network", "Network", ("FAST", "SLOW")),
    ("device", "Device", ("DESKTOP", "MOBILE")),
    ("dataFetch", "Data fetching", ("SERVER", "CLIENT", "MIXED")),
    ("cacheMode", "Cache", ("NONE", "BROWSER", "CDN", "APP")),
)
_STATE_CONTROLS = (
    ("network", "Network", _STATE_NETWORKS),
    ("cacheMode", "Cache mode", _STATE_CACHE_MODES),
    ("optimistic", "Optimistic updates", ("true", "false")),
    ("conflictMode", "Conflict mode", _STATE_CONFLICT_MODES),
)
_CHOICE_LABELS = {"true": "On", "false": "Off"}


@dataclass(frozen=True, slots=True)
class DemoConfig:
    """A validated demo configuration.

    Attributes:
        demo_type: Discriminator selecting the demo widget.
        title: Display title for the widget.
        payload: The full raw configuration passed through to the widget.
    """

    demo_type: str
    title: str
    payload: dict[str, Any]


@dataclass(frozen=True, slots=True)
class DemoOption:
    """One choice of a demo control, rendered as a link to `query`."""

    value: str
    label: str
    selected: bool
    query: str


@dataclass(frozen=True, slots=True)
class DemoControl:
    """A demo setting (constraint or lab knob) with its current value."""

    id: str
    label: str
    value: str
    options: tuple[DemoOption, ...]


@dataclass(frozen=True, slots=True)
class DemoNode:
    """An architecture node and the decision the active rules made for it."""

    id: str
    label: str
    decision: str
    reasoning: str
    highlighted: bool


@dataclass(frozen=True, slots=True)
class DemoDecision:
    """A rule whose constraint value is currently selected."""

    constraint: str
    value: str
    decision: str
    explanation: str
    nodes: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DemoPhase:
    """A timeline phase; `share` is its percentage of the total duration."""

    name: str
    duration: float
    share: int


@dataclass(frozen=True, slots=True)
class DemoSnapshot:
    label: str
    client_value: str
    server_value: str
    status: str


@dataclass(frozen=True, slots=True)
class DemoState:
    """Server-rendered state of a demo for the selected settings.

    Attributes:
        controls: Settings the learner can change.
        nodes: Architecture nodes (requirements demo only).
        decisions: Rules applied for the current constraint values.
        rule_index: Index of the lab rule matching the settings, if any.
        phases: Timeline phases of the matched lab rule.
        total_ms: Sum of the phase durations.
        notes: Notes attached to the matched rule.
        cache_events: Cache events attached to the matched rule.
        html_preview: HTML the server sends (rendering lab).
        dom_preview: Resulting DOM outline (rendering lab).
        snapshots: Client/server state snapshots (state lab).
        facts: Fixed settings shown as label/value pairs.
    """

    controls: tuple[DemoControl, ...]
    nodes: tuple[DemoNode, ...] = ()
    decisions: tuple[DemoDecision, ...] = ()
    rule_index: int | None = None
    phases: tuple[DemoPhase, ...] = ()
    total_ms: float = 0
    notes: tuple[str, ...] = ()
    cache_events: tuple[str, ...] = ()
    html_preview: str = ""
    dom_preview: str = ""
    snapshots: tuple[DemoSnapshot, ...] = ()
    facts: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class PracticeStep:
    """A guided step; `focus_target` names the demo element to spotlight."""

    title: str
    body: str
    focus_target: str | None = None


@dataclass(frozen=True, slots=True)
class PracticeTask:
    """A short-answer task with its expected answer and explanation."""

    prompt: str
    expected_answer: str
    explanation: str


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of checking a submitted task answer."""

    index: int
    answer: str
    correct: bool
    expected_answer: str
    explanation: str


def _require_keys(config: dict[str, Any], keys: tuple[str, ...], errors: list[str], *, prefix: str = "") -> None:
    for key in keys:
        if key not in config:
            errors.append(f"{prefix}{key}: Required")


def _require_list(config: dict[str, Any], key: str, errors: list[str]) -> list[Any]:
    value = config.get(key)
    if not isinstance(value, list):
        errors.append(f"{key}: Expected array")
        return []
    return value


def _validate_requirements_to_architecture(config: dict[str, Any], errors: list[str]) -> None:
    for idx, control in enumerate(_require_list(config, "constraints", errors)):
        if not isinstance(control, dict):
            errors.append(f"constraints.{idx}: Expected object")
            continue
        _require_keys(control, ("id", "label", "type", "defaultValue"), errors, prefix=f"constraints.{idx}.")
        if control.get("type") not in (None, "select", "toggle"):
            errors.append(f"constraints.{idx}.type: Invalid enum value")
    for idx, node in enumerate(_require_list(config, "nodes", errors)):
        if not isinstance(node, dict):
            errors.append(f"nodes.{idx}: Expected object")
            continue
        _require_keys(node, ("id", "label"), errors, prefix=f"nodes.{idx}.")
    for idx, rule in enumerate(_require_list(config, "rules", errors)):
        if not isinstance(rule, dict):
            errors.append(f"rules.{idx}: Expected object")
            continue
        _require_keys(
            rule,
            ("constraintId", "constraintValue", "affectedNodes", "decision", "explanation"),
            errors,
            prefix=f"rules.{idx}.",
        )


def _validate_rendering_strategy_lab(config: dict[str, Any], errors: list[str]) -> None:
    defaults = config.get("defaults")
    if not isinstance(defaults, dict):
        errors.append("defaults: Expected object")
    else:
        _require_keys(
            defaults,
            ("strategy", "network", "device", "dataFetch", "cacheMode", "revalidateSeconds"),
            errors,
            prefix="defaults.",
        )
        if "strategy" in defaults and defaults["strategy"] not in _RENDERING_STRATEGIES:
            errors.append("defaults.strategy: Invalid enum value")
        seconds = defaults.get("revalidateSeconds")
        if seconds is not None and (
            isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or not 0 <= seconds <= 3600
        ):
            errors.append("defaults.revalidateSeconds: Expected number between 0 and 3600")
    _require_list(config, "timelinePhases", errors)
    for idx, rule in enumerate(_require_list(config, "rules", errors)):
        if not isinstance(rule, dict):
            errors.append(f"rules.{idx}: Expected object")
            continue
        _require_keys(
            rule,
            ("phaseDurations", "notes", "htmlPreview", "domPreview", "cacheEvents"),
            errors,
            prefix=f"rules.{idx}.",
        )


def _validate_state_at_scale_lab(config: dict[str, Any], errors: list[str]) -> None:
    defaults = config.get("defaults")
    if not isinstance(defaults, dict):
        errors.append("defaults: Expected object")
    else:
        _require_keys(
            defaults,
            ("network", "serverLatencyMs", "failureRate", "cacheMode", "optimistic", "conflictMode"),
            errors,
            prefix="defaults.",
        )
        for key, options in (
            ("network", _STATE_NETWORKS),
            ("cacheMode", _STATE_CACHE_MODES),
            ("conflictMode", _STATE_CONFLICT_MODES),
        ):
            if key in defaults and defaults[key] not in options:
                errors.append(f"defaults.{key}: Invalid enum value")
        latency = defaults.get("serverLatencyMs")
        if isinstance(latency, (int, float)) and not 200 <= latency <= 2000:
            errors.append("defaults.serverLatencyMs: Expected number between 200 and 2000")
        rate = defaults.get("failureRate")
        if isinstance(rate, (int, float)) and not 0 <= rate <= 1:
            errors.append("defaults.failureRate: Expected number between 0 and 1")
    for key, required in (("entity", ("id", "value", "version")), ("serverState", ("value", "version"))):
        value = config.get(key)
        if not isinstance(value, dict):
            errors.append(f"{key}: Expected object")
        else:
            _require_keys(value, required, errors, prefix=f"{key}.")
    _require_list(config, "timelinePhases", errors)
    for idx, rule in enumerate(_require_list(config, "rules", errors)):
        if not isinstance(rule, dict):
            errors.append(f"rules.{idx}: Expected object")
            continue
        _require_keys(rule, ("phaseDurations", "notes", "cacheEvents", "stateSnapshots"), errors, prefix=f"rules.{idx}.")


_STRUCTURAL_VALIDATORS = {
    "requirementsToArchitecture": _validate_requirements_to_architecture,
    "renderingStrategyLab": _validate_rendering_strategy_lab,
    "stateAtScaleLab": _validate_state_at_scale_lab,
}


def parse_demo_config(config: object) -> SpecValidation:
    """Validate a practice demo configuration.

    Args:
        config: Raw JSON stored on `Topic.practice_demo`.

    Returns:
        SpecValidation whose data is a `DemoConfig` on success.
    """

    if not isinstance(config, dict):
        return SpecValidation(success=False, error="Expected object")
    demo_type = config.get("demoType")
    if demo_type not in DEMO_TYPES:
        return SpecValidation(success=False, error=f"demoType: Invalid discriminator value {demo_type!r}")

    errors: list[str] = []
    validator = _STRUCTURAL_VALIDATORS.get(demo_type)
    if validator is not None:
        validator(config, errors)
    if errors:
        return SpecValidation(success=False, error="; ".join(errors))
    return SpecValidation(
        success=True,
        data=DemoConfig(demo_type=demo_type, title=DEMO_TITLES[demo_type], payload=dict(config)),
    )


def demo_value(value: object) -> str:
    """Return the query-string form of a config value (booleans as true/false)."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def demo_query(query: Mapping[str, str], updates: Mapping[str, str]) -> str:
    """Build a practice-tab query string that keeps the other parameters."""

    params = {**query, **updates, "tab": "practice"}
    return f"?{urlencode(sorted(params.items()))}"


def _strings(raw: object) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(str(item) for item in raw)


def _control(key: str, label: str, choices: list[tuple[str, str]], default: str, query: Mapping[str, str]) -> DemoControl:
    """Resolve a control's value from `demo-<key>`, falling back to `default`."""

    param = f"{DEMO_PARAM_PREFIX}{key}"
    if default not in [value for value, _ in choices]:
        choices = [(default, default), *choices]
    raw = query.get(param)
    value = raw if raw in [choice for choice, _ in choices] else default
    return DemoControl(
        id=key,
        label=label,
        value=value,
        options=tuple(
            DemoOption(value=choice, label=text, selected=choice == value, query=demo_query(query, {param: choice}))
            for choice, text in choices
        ),
    )


def _constraint_choices(constraint: dict[str, Any]) -> list[tuple[str, str]]:
    if constraint.get("type") == "toggle":
        return [("true", _CHOICE_LABELS["true"]), ("false", _CHOICE_LABELS["false"])]
    choices: list[tuple[str, str]] = []
    for option in constraint.get("options") or []:
        if isinstance(option, dict):
            if "value" in option:
                choices.append((demo_value(option["value"]), str(option.get("label", option["value"]))))
        else:
            choices.append((demo_value(option), demo_value(option)))
    return choices


def _requirements_state(config: dict[str, Any], query: Mapping[str, str]) -> DemoState:
    controls = [
        _control(
            str(constraint["id"]),
            str(constraint["label"]),
            _constraint_choices(constraint),
            demo_value(constraint["defaultValue"]),
            query,
        )
        for constraint in config["constraints"]
    ]
    values = {control.id: control.value for control in controls}
    labels = {control.id: control.label for control in controls}

    applied: dict[str, tuple[str, str]] = {}
    decisions: list[DemoDecision] = []
    for rule in config["rules"]:
        key = str(rule["constraintId"])
        if key not in values or values[key] != demo_value(rule["constraintValue"]):
            continue
        affected = _strings(rule["affectedNodes"])
        decision, explanation = str(rule["decision"]), str(rule["explanation"])
        # Later rules overwrite earlier ones for the same node.
        for node_id in affected:
            applied[node_id] = (decision, explanation)
        decisions.append(
            DemoDecision(constraint=labels[key], value=values[key], decision=decision, explanation=explanation, nodes=affected)
        )

    nodes = []
    for node in config["nodes"]:
        node_id = str(node["id"])
        decision, reasoning = applied.get(node_id, (NOT_DETERMINED, NOT_DETERMINED_REASON))
        nodes.append(
            DemoNode(id=node_id, label=str(node["label"]), decision=decision, reasoning=reasoning, highlighted=node_id in applied)
        )
    return DemoState(controls=tuple(controls), nodes=tuple(nodes), decisions=tuple(decisions))


def _lab_controls(
    config: dict[str, Any], specs: tuple[tuple[str, str, tuple[str, ...]], ...], query: Mapping[str, str]
) -> list[DemoControl]:
    defaults = config["defaults"]
    return [
        _control(key, label, [(choice, _CHOICE_LABELS.get(choice, choice)) for choice in choices], demo_value(defaults.get(key)), query)
        for key, label, choices in specs
    ]


def _match_rule(rules: list[Any], settings: dict[str, str], keys: tuple[str, ...]) -> tuple[int | None, dict[str, Any]]:
    """Return the first rule whose present keys equal `settings`, else rule 0."""

    for idx, rule in enumerate(rules):
        if isinstance(rule, dict) and all(
            rule.get(key) in (None, "") or demo_value(rule[key]) == settings[key] for key in keys
        ):
            return idx, rule
    if rules and isinstance(rules[0], dict):
        return 0, rules[0]
    return None, {}


def _phases(config: dict[str, Any], rule: dict[str, Any]) -> tuple[tuple[DemoPhase, ...], float]:
    durations = rule.get("phaseDurations")
    if not isinstance(durations, dict):
        durations = {}
    pairs = []
    for name in _strings(config.get("timelinePhases")):
        value = durations.get(name, 0)
        pairs.append((name, value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0))
    total = sum(duration for _, duration in pairs)
    phases = tuple(
        DemoPhase(name=name, duration=duration, share=round(duration * 100 / total) if total else 0)
        for name, duration in pairs
    )
    return phases, total


def _rendering_state(config: dict[str, Any], query: Mapping[str, str]) -> DemoState:
    controls = _lab_controls(config, _RENDERING_CONTROLS, query)
    settings = {control.id: control.value for control in controls}
    rule_index, rule = _match_rule(config["rules"], settings, tuple(settings))
    phases, total = _phases(config, rule)
    return DemoState(
        controls=tuple(controls),
        rule_index=rule_index,
        phases=phases,
        total_ms=total,
        notes=_strings(rule.get("notes")),
        cache_events=_strings(rule.get("cacheEvents")),
        html_preview=str(rule.get("htmlPreview", "")),
        dom_preview=str(rule.get("domPreview", "")),
        facts=(("Revalidate after (s)", demo_value(config["defaults"].get("revalidateSeconds"))),),
    )


def _state_lab_state(config: dict[str, Any], query: Mapping[str, str]) -> DemoState:
    controls = _lab_controls(config, _STATE_CONTROLS, query)
    settings = {control.id: control.value for control in controls}
    keys: tuple[str, ...] = ("network", "optimistic", "cacheMode")
    # Conflict handling only differs while the client is offline.
    if settings["network"] == "OFFLINE":
        keys += ("conflictMode",)
    rule_index, rule = _match_rule(config["rules"], settings, keys)
    phases, total = _phases(config, rule)

    snapshots = tuple(
        DemoSnapshot(
            label=demo_value(row.get("label")),
            client_value=demo_value(row.get("clientValue")),
            server_value=demo_value(row.get("serverValue")),
            status=demo_value(row.get("status")),
        )
        for row in rule.get("stateSnapshots") or []
        if isinstance(row, dict)
    )
    defaults, entity, server = config["defaults"], config["entity"], config["serverState"]
    return DemoState(
        controls=tuple(controls),
        rule_index=rule_index,
        phases=phases,
        total_ms=total,
        notes=_strings(rule.get("notes")),
        cache_events=_strings(rule.get("cacheEvents")),
        snapshots=snapshots,
        facts=(
            ("Server latency (ms)", demo_value(defaults.get("serverLatencyMs"))),
            ("Failure rate", demo_value(defaults.get("failureRate"))),
            ("Client value", f"{demo_value(entity.get('value'))} (v{demo_value(entity.get('version'))})"),
            ("Server value", f"{demo_value(server.get('value'))} (v{demo_value(server.get('version'))})"),
        ),
    )


_STATE_BUILDERS = {
    "requirementsToArchitecture": _requirements_state,
    "renderingStrategyLab": _rendering_state,
    "stateAtScaleLab": _state_lab_state,
}


def demo_state(demo: DemoConfig, query: Mapping[str, str]) -> DemoState | None:
    """Evaluate a validated demo for the settings chosen in the query string.

    Settings arrive as `demo-<key>` parameters; missing or unknown values fall
    back to the configured defaults.

    Args:
        demo: Config returned by `parse_demo_config`.
        query: Current GET parameters.

    Returns:
        The demo state, or None for demo types without a server-side view.
    """

    builder = _STATE_BUILDERS.get(demo.demo_type)
    if builder is None:
        return None
    return builder(demo.payload, query)


def validate_practice_steps(raw: object) -> list[str]:
    """Return error messages for the `practice_steps` JSON list."""

    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        return ["must be a list of {title, body, focusTarget?} objects"]
    errors: list[str] = []
    for idx, row in enumerate(raw):
        if not isinstance(row, dict):
            errors.append(f"{idx}: expected an object")
            continue
        for key in ("title", "body"):
            if not isinstance(row.get(key), str):
                errors.append(f"{idx}.{key}: required")
        if row.get("focusTarget") is not None and not isinstance(row.get("focusTarget"), str):
            errors.append(f"{idx}.focusTarget: expected a string")
    return errors


def validate_practice_tasks(raw: object) -> list[str]:
    """Return error messages for the `practice_tasks` JSON list."""

    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        return ["must be a list of {prompt, expectedAnswer, explanation} objects"]
    errors: list[str] = []
    for idx, row in enumerate(raw):
        if not isinstance(row, dict):
            errors.append(f"{idx}: expected an object")
            continue
        for key in ("prompt", "expectedAnswer", "explanation"):
            if not isinstance(row.get(key), str):
                errors.append(f"{idx}.{key}: required")
    return errors


def practice_steps(raw: object) -> list[PracticeStep]:
    """Decode valid practice steps, skipping malformed rows."""

    if not isinstance(raw, list):
        return []
    steps: list[PracticeStep] = []
    for row in raw:
        if isinstance(row, dict) and isinstance(row.get("title"), str) and isinstance(row.get("body"), str):
            focus = row.get("focusTarget")
            steps.append(PracticeStep(title=row["title"], body=row["body"], focus_target=focus if isinstance(focus, str) else None))
    return steps


def practice_tasks(raw: object) -> list[PracticeTask]:
    """Decode valid practice tasks, skipping malformed rows."""

    if not isinstance(raw, list):
        return []
    tasks: list[PracticeTask] = []
    for row in raw:
        if not isinstance(row, dict):
            continue
        values = [row.get(key) for key in ("prompt", "expectedAnswer", "explanation")]
        if all(isinstance(value, str) for value in values):
            tasks.append(PracticeTask(prompt=values[0], expected_answer=values[1], explanation=values[2]))
    return tasks


def normalize_answer(text: str) -> str:
    """Normalize an answer for comparison (case, whitespace, trailing punctuation)."""

    return " ".join(text.strip().casefold().split()).rstrip(".!")


def check_task_answer(tasks: list[PracticeTask], *, index: int, answer: str) -> TaskResult | None:
    """Check a submitted answer against the task at `index`.

    Returns:
        TaskResult revealing the expected answer, or None when `index` is out
        of range.
    """

    if not 0 <= index < len(tasks):
        return None
    task = tasks[index]
    return TaskResult(
        index=index,
        answer=answer,
        correct=bool(answer.strip()) and normalize_answer(answer) == normalize_answer(task.expected_answer),
        expected_answer=task.expected_answer,
        explanation=task.explanation,
    )
