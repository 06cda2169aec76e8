"""Views for the public curriculum site."""

from __future__ import annotations

import logging
from typing import Any

from django.db import DatabaseError
from django.http import Http404, HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import render
from django.urls import reverse

from core.animations.render import clamp_index, render_example, render_theory_animations
from core.forms import TaskAnswerForm
from core.practice import check_task_answer, demo_query, demo_state, parse_demo_config, practice_steps, practice_tasks
from core.richtext import extract_headings, render_rich_text
from curriculum.models import Topic
from curriculum.queries import (
    adjacent_topics,
    get_page_by_slug,
    get_resource_by_number,
    get_topic_by_slug,
    list_resources,
    list_topics,
)

logger = logging.getLogger(__name__)

HOME_TOPIC_LIMIT = 6
TAB_THEORY = "theory"
TAB_PRACTICE = "practice"


def home(request: HttpRequest) -> HttpResponse:
    """Render the landing page with the first few topics."""

    topics: list[Topic] = []
    load_error = False
    try:
        topics = list_topics()
    except DatabaseError:
        logger.exception("Failed to load topics for the home page")
        load_error = True

    return render(
        request,
        "core/home.html",
        {
            "topics": topics[:HOME_TOPIC_LIMIT],
            "total_topics": len(topics),
            "show_all_link": len(topics) > HOME_TOPIC_LIMIT,
            "load_error": load_error,
        },
    )


def topics_index(request: HttpRequest) -> HttpResponse:
    """Render the full ordered topic list."""

    topics: list[Topic] = []
    load_error = False
    try:
        topics = list_topics()
    except DatabaseError:
        logger.exception("Failed to load topics for the topic index")
        load_error = True
    return render(request, "core/topics_index.html", {"topics": topics, "load_error": load_error})


def _practice_context(request: HttpRequest, topic: Topic, query: dict[str, str]) -> dict[str, Any]:
    """Build the practice tab state: demo, guided step and task feedback."""

    demo = parse_demo_config(topic.practice_demo) if topic.practice_demo else None
    if demo is not None and not demo.success:
        logger.warning("Invalid practice demo for topic=%s: %s", topic.slug, demo.error)
    config = demo.data if demo is not None and demo.success else None

    steps = practice_steps(topic.practice_steps)
    step_index = clamp_index(query.get("step"), count=len(steps))
    tasks = practice_tasks(topic.practice_tasks)

    result = None
    form = TaskAnswerForm()
    if request.method == "POST":
        form = TaskAnswerForm(request.POST)
        if form.is_valid():
            result = check_task_answer(
                tasks,
                index=form.cleaned_data["task"],
                answer=form.cleaned_data["answer"],
            )
            if result is None:
                form.add_error("task", "Unknown task.")

    return {
        "demo": config,
        "demo_state": demo_state(config, query) if config is not None else None,
        "demo_invalid": demo is not None and not demo.success,
        "steps": steps,
        "step_index": step_index,
        "current_step": steps[step_index] if steps else None,
        "step_links": [
            {"index": idx, "label": step.title, "active": idx == step_index, "query": demo_query(query, {"step": str(idx)})}
            for idx, step in enumerate(steps)
        ],
        "tasks": tasks,
        "task_form": form,
        "task_result": result,
    }


def topic_detail(request: HttpRequest, slug: str) -> HttpResponse:
    """Render a topic page with its Theory and Practice tabs.

    Args:
        request: Current request; `?tab=practice` selects the practice tab,
            `?step=N` the guided practice step and `?demo-<key>=<value>` the
            demo settings. POSTs submit a task answer.
        slug: Topic slug.

    Returns:
        Rendered topic page.

    Raises:
        Http404: When no topic has `slug`.
    """

    topic = get_topic_by_slug(slug)
    if topic is None:
        raise Http404("Topic not found")

    tab = TAB_PRACTICE if request.method == "POST" or request.GET.get("tab") == TAB_PRACTICE else TAB_THEORY
    query = request.GET.dict()
    prev_topic, next_topic = adjacent_topics(slug)

    context: dict[str, Any] = {
        "topic": topic,
        "tab": tab,
        "prev_topic": prev_topic,
        "next_topic": next_topic,
        "references": [row for row in (topic.references or []) if isinstance(row, dict)],
        "theory_url": reverse("core:topic_detail", kwargs={"slug": slug}),
        "practice_url": reverse("core:topic_detail", kwargs={"slug": slug}) + f"?tab={TAB_PRACTICE}",
    }

    if tab == TAB_THEORY:
        examples = list(topic.animated_examples.all())
        context.update(
            {
                "theory_html": render_rich_text(topic.theory),
                "toc": extract_headings(topic.theory),
                "animations_html": render_theory_animations(topic.theory_animations, query=query),
                "examples": [
                    {"example": example, "html": render_example(example, query=query)} for example in examples
                ],
            }
        )
    else:
        context.update(_practice_context(request, topic, query))

    return render(request, "core/topic_detail.html", context)


def resources_index(request: HttpRequest) -> HttpResponse:
    """Render the numbered resource list."""

    return render(request, "core/resources_index.html", {"resources": list_resources()})


def resource_detail(request: HttpRequest, number: int) -> HttpResponse:
    """Render one resource by number, or 404."""

    resource = get_resource_by_number(number)
    if resource is None:
        raise Http404("Resource not found")
    return render(
        request,
        "core/resource_detail.html",
        {
            "resource": resource,
            "body_html": render_rich_text(resource.body),
            "references": [row for row in (resource.references or []) if isinstance(row, dict)],
        },
    )


def topics_api(request: HttpRequest) -> JsonResponse:
    """Return all topics as a JSON list."""

    try:
        topics = list_topics()
    except DatabaseError:
        logger.exception("Failed to fetch modules")
        return JsonResponse({"error": "Failed to fetch modules"}, status=500)

    payload = [
        {
            "id": topic.pk,
            "title": topic.title,
            "slug": topic.slug,
            "order": topic.order,
            "summary": topic.summary,
            "difficulty": topic.difficulty or None,
            "updatedAt": topic.updated_at.isoformat(),
        }
        for topic in topics
    ]
    return JsonResponse(payload, safe=False)


def page(request: HttpRequest, path: str) -> HttpResponse:
    """Render a published CMS page addressed by its slug path, or 404."""

    found = get_page_by_slug(path)
    if found is None:
        raise Http404("Page not found")
    return render(
        request,
        "core/page.html",
        {"page": found, "content_html": render_rich_text(found.content)},
    )
