"""Integration tests for the public site pages and the topics API."""

from __future__ import annotations

import json

import pytest
from django.db import DatabaseError
from django.urls import reverse

from conftest import doc, heading, paragraph, text
from curriculum.models import AnimatedExample, Page, Resource

pytestmark = [pytest.mark.integration, pytest.mark.django_db]


def _raise_database_error():
    raise DatabaseError("database unavailable")


def test_home_lists_first_six_topics_with_view_all_link(client, make_topic) -> None:
    """The landing page shows six topics and links to the full list when there are more."""

    for order in range(1, 9):
        make_topic(order)

    response = client.get("/")
    content = response.content.decode("utf-8")

    assert response.status_code == 200
    assert [topic.order for topic in response.context["topics"]] == [1, 2, 3, 4, 5, 6]
    assert "View all 8 topics" in content
    assert "Topic 7" not in content


def test_home_without_overflow_has_no_view_all_link(client, make_topic) -> None:
    make_topic(1)

    content = client.get("/").content.decode("utf-8")

    assert "Topic 1" in content
    assert "View all" not in content


def test_home_empty_state(client) -> None:
    content = client.get("/").content.decode("utf-8")

    assert "No topics have been published yet." in content


def test_home_shows_banner_when_topics_fail_to_load(client, monkeypatch) -> None:
    """Database failures degrade to an error banner, not a server error."""

    monkeypatch.setattr("core.views.list_topics", _raise_database_error)

    response = client.get("/")

    assert response.status_code == 200
    assert "Failed to load topics. Please try again later." in response.content.decode("utf-8")


def test_topics_index_lists_every_topic_in_order(client, make_topic) -> None:
    make_topic(2)
    make_topic(1)

    response = client.get(reverse("core:topics"))

    assert [topic.slug for topic in response.context["topics"]] == ["topic-1", "topic-2"]


def test_topic_detail_theory_tab(client, make_topic) -> None:
    """Theory renders rich text with a table of contents, references and pager links."""

    make_topic(1)
    make_topic(2)
    make_topic(3)

    response = client.get("/topics/topic-2/")
    content = response.content.decode("utf-8")

    assert response.status_code == 200
    assert response.context["tab"] == "theory"
    assert '<h2 id="overview">Overview</h2>' in content
    assert '<li class="toc-level-2"><a href="#overview">Overview</a></li>' in content
    assert 'href="https://developer.mozilla.org/" target="_blank" rel="noopener noreferrer"' in content
    assert 'href="/topics/topic-1/" rel="prev"' in content
    assert 'href="/topics/topic-3/" rel="next"' in content


def test_topic_detail_without_references_or_theory(client, make_topic) -> None:
    make_topic(1, references=[], theory=None)

    content = client.get("/topics/topic-1/").content.decode("utf-8")

    assert "References not added yet." in content
    assert "Theory content has not been added yet." in content
    assert 'rel="prev"' not in content
    assert 'rel="next"' not in content


def test_topic_detail_renders_animated_examples(client, make_topic) -> None:
    topic = make_topic(1)
    AnimatedExample.objects.create(
        example_id="cache-diff",
        topic=topic,
        title="Cache diff",
        kind=AnimatedExample.Kind.DIFF_2D,
        spec={
            "leftTitle": "Stale entry",
            "rightTitle": "Fresh entry",
            "toggles": [{"label": "Revalidate", "explanation": "The entry is refreshed."}],
        },
    )

    response = client.get("/topics/topic-1/")

    assert len(response.context["examples"]) == 1
    assert "Cache diff" in response.content.decode("utf-8")


def test_topic_detail_unknown_slug_is_404(client) -> None:
    response = client.get("/topics/missing/")

    assert response.status_code == 404
    assert "Page not found" in response.content.decode("utf-8")


def test_practice_tab_with_steps(client, make_topic) -> None:
    """`?step` selects the guided step and is clamped to the available range."""

    make_topic(
        1,
        practice_steps=[
            {"title": "Pick a strategy", "body": "Choose SSR."},
            {"title": "Measure", "body": "Look at TTFB.", "focusTarget": "timeline"},
        ],
    )

    response = client.get("/topics/topic-1/?tab=practice&step=9")
    content = response.content.decode("utf-8")

    assert response.context["tab"] == "practice"
    assert response.context["step_index"] == 1
    assert "<h3>Measure</h3>" in content
    assert 'data-focus-target="timeline"' in content
    assert 'data-demo-type="performanceBudgetLab"' in content


def test_practice_tab_reports_invalid_demo(client, make_topic) -> None:
    make_topic(1, practice_demo={"demoType": "notADemo"})

    content = client.get("/topics/topic-1/?tab=practice").content.decode("utf-8")

    assert "Demo unavailable: Invalid configuration" in content


def test_requirements_demo_renders_decisions_for_selected_constraints(client, make_topic) -> None:
    """Constraint links switch values and the matching rule marks its nodes."""

    make_topic(
        1,
        practice_demo={
            "demoType": "requirementsToArchitecture",
            "constraints": [{"id": "offline", "label": "Offline support", "type": "toggle", "defaultValue": False}],
            "nodes": [{"id": "cdn", "label": "CDN"}, {"id": "sw", "label": "Service worker"}],
            "rules": [
                {
                    "constraintId": "offline",
                    "constraintValue": True,
                    "affectedNodes": ["sw"],
                    "decision": "Add a service worker with a precache",
                    "explanation": "Offline support requires cached assets.",
                }
            ],
        },
    )

    default = client.get("/topics/topic-1/?tab=practice").content.decode("utf-8")
    response = client.get("/topics/topic-1/?tab=practice&demo-offline=true")
    content = response.content.decode("utf-8")

    assert "No decisions yet." in default
    assert 'class="demo-node highlighted"' not in default
    assert 'href="?demo-offline=true&amp;tab=practice"' in default
    assert 'class="demo-node highlighted" data-node="sw"' in content
    assert 'class="demo-node" data-node="cdn"' in content
    assert "Add a service worker with a precache" in content
    assert "Offline support requires cached assets." in content
    assert [node.decision for node in response.context["demo_state"].nodes] == [
        "Not determined",
        "Add a service worker with a precache",
    ]


def test_rendering_lab_renders_matched_rule_timeline(client, make_topic) -> None:
    """The selected settings pick a rule whose phases, previews and notes are shown."""

    make_topic(
        1,
        practice_demo={
            "demoType": "renderingStrategyLab",
            "defaults": {
                "strategy": "SSR",
                "network": "FAST",
                "device": "DESKTOP",
                "dataFetch": "SERVER",
                "cacheMode": "NONE",
                "revalidateSeconds": 0,
            },
            "timelinePhases": ["request", "hydrate"],
            "rules": [
                {
                    "strategy": "SSR",
                    "phaseDurations": {"request": 50, "hydrate": 200},
                    "notes": ["HTML arrives rendered."],
                    "htmlPreview": "<main>Products</main>",
                    "domPreview": "main",
                    "cacheEvents": [],
                },
                {
                    "strategy": "CSR",
                    "phaseDurations": {"request": 40, "hydrate": 900},
                    "notes": ["Blank shell until the bundle runs."],
                    "htmlPreview": '<div id="root"></div>',
                    "domPreview": "div#root",
                    "cacheEvents": ["bundle: MISS"],
                },
            ],
        },
        practice_steps=[{"title": "Watch hydration", "body": "Compare.", "focusTarget": "timeline"}],
    )

    content = client.get("/topics/topic-1/?tab=practice&demo-strategy=CSR").content.decode("utf-8")

    assert 'class="demo-timeline spotlight"' in content
    assert 'data-rule="1"' in content
    assert "hydrate <span class=\"muted\">900 ms</span>" in content
    assert "&lt;div id=&quot;root&quot;&gt;&lt;/div&gt;" in content
    assert "Blank shell until the bundle runs." in content
    assert "bundle: MISS" in content
    assert 'href="?demo-strategy=CSR&amp;step=0&amp;tab=practice"' in content


def test_state_lab_renders_snapshots_for_offline_conflicts(client, make_topic) -> None:
    make_topic(
        1,
        practice_demo={
            "demoType": "stateAtScaleLab",
            "defaults": {
                "network": "ONLINE",
                "serverLatencyMs": 400,
                "failureRate": 0.1,
                "cacheMode": "STALE_WHILE_REVALIDATE",
                "optimistic": True,
                "conflictMode": "LAST_WRITE_WINS",
            },
            "entity": {"id": "todo-1", "value": "Draft", "version": 1},
            "serverState": {"value": "Draft", "version": 2},
            "timelinePhases": ["edit", "sync"],
            "rules": [
                {"network": "ONLINE", "phaseDurations": {"edit": 10}, "notes": [], "cacheEvents": [], "stateSnapshots": []},
                {
                    "network": "OFFLINE",
                    "conflictMode": "MANUAL_MERGE",
                    "phaseDurations": {"edit": 10, "sync": 500},
                    "notes": ["Edits wait for a manual merge."],
                    "cacheEvents": [],
                    "stateSnapshots": [
                        {"label": "Reconnect", "clientValue": "Edited", "serverValue": "Renamed", "status": "conflict"}
                    ],
                },
            ],
        },
    )

    content = client.get(
        "/topics/topic-1/?tab=practice&demo-network=OFFLINE&demo-conflictMode=MANUAL_MERGE"
    ).content.decode("utf-8")

    assert "Edits wait for a manual merge." in content
    assert "<th scope=\"row\">Reconnect</th><td>Edited</td><td>Renamed</td><td>conflict</td>" in content
    assert "Draft (v2)" in content


def test_practice_task_answer_is_checked(client, make_topic) -> None:
    """Posting an answer reveals whether it matched plus the expected answer."""

    make_topic(
        1,
        practice_tasks=[
            {"prompt": "Which strategy renders per request?", "expectedAnswer": "SSR", "explanation": "Server side."}
        ],
    )
    url = "/topics/topic-1/?tab=practice"

    correct = client.post(url, {"task": "0", "answer": "  ssr. "}).content.decode("utf-8")
    wrong = client.post(url, {"task": "0", "answer": "CSR"}).content.decode("utf-8")

    assert "Correct!" in correct
    assert "Not quite." in wrong
    assert "Expected answer:</strong> SSR" in wrong
    assert "Server side." in wrong


def test_practice_task_rejects_unknown_task_index(client, make_topic) -> None:
    make_topic(1, practice_tasks=[{"prompt": "Q", "expectedAnswer": "A", "explanation": "E"}])

    response = client.post("/topics/topic-1/?tab=practice", {"task": "3", "answer": "A"})

    assert response.context["task_result"] is None
    assert "Unknown task." in response.content.decode("utf-8")


def test_resources_index_and_detail(client) -> None:
    Resource.objects.create(
        title="Web Vitals",
        resource_number=2,
        summary="Core metrics",
        body=doc(paragraph(text("Measure LCP."))),
        references=[{"label": "web.dev", "url": "https://web.dev/vitals/"}],
    )
    Resource.objects.create(title="Caching", resource_number=1)

    index = client.get("/resources/")
    detail = client.get("/resources/2/").content.decode("utf-8")

    assert [r.resource_number for r in index.context["resources"]] == [1, 2]
    assert "<p>Measure LCP.</p>" in detail
    assert "https://web.dev/vitals/" in detail
    assert client.get("/resources/99/").status_code == 404


def test_published_pages_are_served_by_slug_path(client) -> None:
    """Published pages resolve at their (nested) path; drafts do not."""

    Page.objects.create(
        title="About",
        slug="about",
        status=Page.Status.PUBLISHED,
        content=doc(heading("h2", "Who we are")),
    )
    Page.objects.create(title="Team", slug="about/team", status=Page.Status.PUBLISHED)
    Page.objects.create(title="Secret", slug="secret", status=Page.Status.DRAFT)

    about = client.get("/about/").content.decode("utf-8")

    assert "<h1>About</h1>" in about
    assert '<h2 id="who-we-are">Who we are</h2>' in about
    assert client.get("/about/team/").status_code == 200
    assert client.get("/secret/").status_code == 404
    assert client.get("/nowhere/").status_code == 404


def test_topics_api_returns_topic_list(client, make_topic) -> None:
    make_topic(2, difficulty="advanced")
    make_topic(1)

    response = client.get("/api/topics/")
    payload = json.loads(response.content)

    assert response.status_code == 200
    assert [row["slug"] for row in payload] == ["topic-1", "topic-2"]
    assert set(payload[0]) == {"id", "title", "slug", "order", "summary", "difficulty", "updatedAt"}
    assert payload[0]["difficulty"] is None
    assert payload[1]["difficulty"] == "advanced"


def test_topics_api_database_error_returns_500(client, monkeypatch) -> None:
    monkeypatch.setattr("core.views.list_topics", _raise_database_error)

    response = client.get("/api/topics/")

    assert response.status_code == 500
    assert json.loads(response.content) == {"error": "Failed to fetch modules"}


def test_sitemap_lists_static_views_and_topics(client, make_topic) -> None:
    make_topic(1)

    response = client.get("/sitemap.xml")
    content = response.content.decode("utf-8")

    assert response.status_code == 200
    assert "<loc>http://testserver/</loc>" in content
    assert "<loc>http://testserver/topics/</loc>" in content
    assert "<loc>http://testserver/topics/topic-1/</loc>" in content
    assert "<priority>1.0</priority>" in content
    assert "<changefreq>monthly</changefreq>" in content
    assert "<lastmod>" in content


def test_navigation_marks_active_section(client) -> None:
    response = client.get("/resources/")
    links = {link["label"]: link["active"] for link in response.context["nav_links"]}

    assert links == {"Home": False, "Topics": False, "Resources": True}
