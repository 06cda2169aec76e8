"""Unit tests for practice demo configs, steps and task answers."""

from __future__ import annotations

import pytest

from core.practice import (
    DEMO_TYPES,
    NOT_DETERMINED,
    PracticeTask,
    check_task_answer,
    demo_state,
    normalize_answer,
    parse_demo_config,
    practice_steps,
    practice_tasks,
    validate_practice_steps,
    validate_practice_tasks,
)

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("demo_type", DEMO_TYPES[3:])
def test_unstructured_demo_types_only_need_a_discriminator(demo_type: str) -> None:
    """Demo types without structural rules accept any extra keys."""

    result = parse_demo_config({"demoType": demo_type, "anything": [1, 2]})

    assert result.success is True
    assert result.data.demo_type == demo_type
    assert result.data.title


def test_demo_config_rejects_non_objects_and_unknown_types() -> None:
    """Configs must be objects with a known demoType."""

    assert parse_demo_config([]).error == "Expected object"
    assert parse_demo_config({"demoType": "quiz"}).error == "demoType: Invalid discriminator value 'quiz'"


def test_requirements_demo_requires_structure() -> None:
    """Requirements-to-architecture demos list constraints, nodes and rules."""

    result = parse_demo_config({"demoType": "requirementsToArchitecture", "constraints": [{"id": "c"}], "nodes": []})

    assert result.success is False
    assert "constraints.0.label: Required" in result.error
    assert "rules: Expected array" in result.error


def test_rendering_lab_validates_defaults() -> None:
    """Rendering lab defaults are checked for enum and range values."""

    config = {
        "demoType": "renderingStrategyLab",
        "defaults": {
            "strategy": "PHP",
            "network": "fast",
            "device": "desktop",
            "dataFetch": "server",
            "cacheMode": "none",
            "revalidateSeconds": 9000,
        },
        "timelinePhases": [],
        "rules": [],
    }

    result = parse_demo_config(config)

    assert result.error == (
        "defaults.strategy: Invalid enum value; defaults.revalidateSeconds: Expected number between 0 and 3600"
    )


def test_state_lab_accepts_valid_config() -> None:
    """A complete state-at-scale config validates."""

    config = {
        "demoType": "stateAtScaleLab",
        "defaults": {
            "network": "FLAKY",
            "serverLatencyMs": 500,
            "failureRate": 0.2,
            "cacheMode": "FRESH_ONLY",
            "optimistic": False,
            "conflictMode": "MANUAL_MERGE",
        },
        "entity": {"id": "e", "value": "v", "version": 1},
        "serverState": {"value": "v", "version": 1},
        "timelinePhases": [],
        "rules": [],
    }

    assert parse_demo_config(config).success is True


def test_step_and_task_validation_messages() -> None:
    """Malformed step and task rows are reported by index."""

    assert validate_practice_steps(None) == []
    assert validate_practice_steps("x") == ["must be a list of {title, body, focusTarget?} objects"]
    assert validate_practice_steps([{"title": "t"}, 3]) == ["0.body: required", "1: expected an object"]
    assert validate_practice_tasks([{"prompt": "p", "expectedAnswer": "a"}]) == ["0.explanation: required"]


def test_decoders_skip_malformed_rows() -> None:
    """Decoders keep only well-formed rows."""

    steps = practice_steps([{"title": "A", "body": "B", "focusTarget": 3}, {"title": "broken"}])
    tasks = practice_tasks([{"prompt": "P", "expectedAnswer": "E", "explanation": "X"}, "nope"])

    assert len(steps) == 1 and steps[0].focus_target is None
    assert tasks == [PracticeTask(prompt="P", expected_answer="E", explanation="X")]


@pytest.mark.parametrize(
    ("answer", "correct"),
    [("service worker", True), ("  Service   Worker. ", True), ("a CDN", False), ("   ", False)],
)
def test_check_task_answer_normalizes(answer: str, correct: bool) -> None:
    """Answers are compared case-insensitively, ignoring extra spaces and final punctuation."""

    tasks = [PracticeTask(prompt="Which?", expected_answer="Service worker", explanation="Because.")]

    result = check_task_answer(tasks, index=0, answer=answer)

    assert result is not None
    assert result.correct is correct
    assert result.expected_answer == "Service worker"
    assert result.explanation == "Because."


def test_check_task_answer_out_of_range() -> None:
    """Unknown task indexes return None."""

    assert check_task_answer([], index=0, answer="x") is None


def test_normalize_answer() -> None:
    """Normalization casefolds and collapses whitespace."""

    assert normalize_answer("  Roll   BACK! ") == "roll back"


REQUIREMENTS_DEMO = {
    "demoType": "requirementsToArchitecture",
    "constraints": [
        {"id": "users", "label": "Concurrent users", "type": "select", "defaultValue": "1k", "options": ["1k", "100k"]},
        {"id": "offline", "label": "Offline support", "type": "toggle", "defaultValue": False},
    ],
    "nodes": [{"id": "cdn", "label": "CDN"}, {"id": "sw", "label": "Service worker"}],
    "rules": [
        {
            "constraintId": "offline",
            "constraintValue": True,
            "affectedNodes": ["sw"],
            "decision": "Add a service worker",
            "explanation": "Offline needs a local cache.",
        },
        {
            "constraintId": "users",
            "constraintValue": "100k",
            "affectedNodes": ["cdn"],
            "decision": "Serve assets from a CDN",
            "explanation": "Edge caches absorb traffic.",
        },
    ],
}

RENDERING_DEMO = {
    "demoType": "renderingStrategyLab",
    "defaults": {
        "strategy": "SSR",
        "network": "FAST",
        "device": "DESKTOP",
        "dataFetch": "SERVER",
        "cacheMode": "NONE",
        "revalidateSeconds": 60,
    },
    "timelinePhases": ["request", "render", "hydrate"],
    "rules": [
        {
            "strategy": "SSR",
            "phaseDurations": {"request": 50, "render": 150},
            "notes": ["Fallback"],
            "htmlPreview": "<main></main>",
            "domPreview": "main",
            "cacheEvents": [],
        },
        {
            "strategy": "CSR",
            "network": "SLOW",
            "phaseDurations": {"request": 300, "render": 0, "hydrate": 900},
            "notes": ["Blank page until the bundle loads."],
            "htmlPreview": '<div id="root"></div>',
            "domPreview": "div#root > app",
            "cacheEvents": ["bundle: MISS"],
        },
    ],
}

STATE_DEMO = {
    "demoType": "stateAtScaleLab",
    "defaults": {
        "network": "ONLINE",
        "serverLatencyMs": 400,
        "failureRate": 0.1,
        "cacheMode": "FRESH_ONLY",
        "optimistic": True,
        "conflictMode": "LAST_WRITE_WINS",
    },
    "entity": {"id": "todo-1", "value": "Draft", "version": 1},
    "serverState": {"value": "Draft", "version": 1},
    "timelinePhases": ["edit", "send", "ack"],
    "rules": [
        {
            "network": "ONLINE",
            "optimistic": True,
            "phaseDurations": {"edit": 10},
            "notes": ["Default"],
            "cacheEvents": [],
            "stateSnapshots": [],
        },
        {
            "network": "OFFLINE",
            "conflictMode": "MANUAL_MERGE",
            "phaseDurations": {"edit": 10, "send": 0},
            "notes": ["Queued until reconnect; the user merges conflicts."],
            "cacheEvents": ["write queued"],
            "stateSnapshots": [{"label": "Reconnect", "clientValue": "Edited", "serverValue": "Changed", "status": "conflict"}],
        },
        {
            "optimistic": False,
            "phaseDurations": {"send": 400, "ack": 20},
            "notes": ["The UI waits for the server."],
            "cacheEvents": [],
            "stateSnapshots": [],
        },
    ],
}


def _state(config: dict, **query: str):
    return demo_state(parse_demo_config(config).data, {f"demo-{key}": value for key, value in query.items()})


def test_requirements_demo_defaults_leave_nodes_undetermined() -> None:
    """With default constraints no rule matches and every node is undetermined."""

    state = _state(REQUIREMENTS_DEMO)

    assert [control.value for control in state.controls] == ["1k", "false"]
    assert state.decisions == ()
    assert all(node.decision == NOT_DETERMINED and not node.highlighted for node in state.nodes)


def test_requirements_demo_applies_matching_rules() -> None:
    """Selected constraint values highlight the affected nodes with the rule's decision."""

    state = _state(REQUIREMENTS_DEMO, offline="true")
    nodes = {node.id: node for node in state.nodes}

    assert nodes["sw"].highlighted is True
    assert nodes["sw"].decision == "Add a service worker"
    assert nodes["sw"].reasoning == "Offline needs a local cache."
    assert nodes["cdn"].highlighted is False
    assert [(row.constraint, row.value, row.nodes) for row in state.decisions] == [("Offline support", "true", ("sw",))]


def test_demo_controls_ignore_unknown_values_and_keep_other_params() -> None:
    """Unknown choices fall back to the default; option links keep the rest of the query."""

    config = parse_demo_config(REQUIREMENTS_DEMO).data
    state = demo_state(config, {"demo-users": "1m", "step": "1"})
    users = state.controls[0]

    assert users.value == "1k"
    assert [(option.value, option.selected) for option in users.options] == [("1k", True), ("100k", False)]
    assert users.options[1].query == "?demo-users=100k&step=1&tab=practice"


def test_rendering_lab_matches_first_rule_for_settings() -> None:
    """The first rule whose keys all equal the settings drives the timeline."""

    state = _state(RENDERING_DEMO, strategy="CSR", network="SLOW")

    assert state.rule_index == 1
    assert [(phase.name, phase.duration, phase.share) for phase in state.phases] == [
        ("request", 300, 25),
        ("render", 0, 0),
        ("hydrate", 900, 75),
    ]
    assert state.total_ms == 1200
    assert state.html_preview == '<div id="root"></div>'
    assert state.cache_events == ("bundle: MISS",)


def test_rendering_lab_falls_back_to_first_rule() -> None:
    """Without a full match the first rule is shown and missing phases take zero."""

    state = _state(RENDERING_DEMO, strategy="CSR")

    assert state.rule_index == 0
    assert [phase.duration for phase in state.phases] == [50, 150, 0]
    assert state.notes == ("Fallback",)
    assert ("Revalidate after (s)", "60") in state.facts


def test_state_lab_conflict_mode_only_applies_offline() -> None:
    """Conflict mode narrows the rule match only while the network is offline."""

    offline = _state(STATE_DEMO, network="OFFLINE", conflictMode="MANUAL_MERGE")
    offline_other_mode = _state(STATE_DEMO, network="OFFLINE", conflictMode="NONE")

    assert offline.rule_index == 1
    assert offline.snapshots[0].status == "conflict"
    assert offline.cache_events == ("write queued",)
    assert offline_other_mode.rule_index == 0


def test_state_lab_matches_boolean_optimistic_setting() -> None:
    """Optimistic rules compare against the on/off setting."""

    state = _state(STATE_DEMO, optimistic="false")

    assert state.rule_index == 2
    assert state.notes == ("The UI waits for the server.",)
    assert ("Client value", "Draft (v1)") in state.facts


def test_unstructured_demo_types_have_no_server_state() -> None:
    assert demo_state(parse_demo_config({"demoType": "capstoneBuilder"}).data, {}) is None
