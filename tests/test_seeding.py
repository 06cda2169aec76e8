"""Unit tests for the fixture rich text shorthand."""

from __future__ import annotations

import pytest

from curriculum.seeding import SeedError, SeedSummary, build_document

pytestmark = pytest.mark.unit


def test_build_document_expands_block_shorthand() -> None:
    document = build_document(
        [
            {"h2": "Overview"},
            "Plain paragraph",
            {"ol": ["first", "second"]},
            {"code": "const x = 1;"},
        ]
    )

    children = document["root"]["children"]
    assert [child["type"] for child in children] == ["heading", "paragraph", "list", "code"]
    assert children[0]["tag"] == "h2"
    assert children[2]["listType"] == "number"
    assert [item["children"][0]["text"] for item in children[2]["children"]] == ["first", "second"]


def test_build_document_passes_serialized_documents_through() -> None:
    serialized = {"root": {"type": "root", "children": []}}

    assert build_document(serialized) == serialized


@pytest.mark.parametrize("value", [None, "", []])
def test_build_document_empty_values(value: object) -> None:
    assert build_document(value) is None


@pytest.mark.parametrize("block", [{"h7": "Nope"}, {"p": "a", "h2": "b"}, {"ul": "not a list"}, 3])
def test_build_document_rejects_unknown_blocks(block: object) -> None:
    with pytest.raises(SeedError):
        build_document([block])


def test_seed_summary_counts_outcomes() -> None:
    summary = SeedSummary()
    summary.record("topics", "created")
    summary.record("topics", "created")
    summary.record("pages", "unchanged")

    assert summary.as_dict() == {"created": {"topics": 2}, "updated": {}, "unchanged": {"pages": 1}}
