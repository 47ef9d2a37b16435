"""Unit tests for the conversation controller driving the turn graph."""

from __future__ import annotations

import pytest

from scholar_nav.agent.controller import ConversationController
from scholar_nav.agent.prompts.research_architect import (
    APOLOGY,
    GREETING,
    RESEARCH_ARCHITECT_SYSTEM_PROMPT,
    SEARCH_TRANSITION,
)
from scholar_nav.models.schemas import ConversationStatus, TriggerReason
from scholar_nav.services.graph_service import GraphService
from scholar_nav.utils.exceptions import SearchError


@pytest.fixture
def graph_service(citation_source):
    return GraphService(citation_source)


@pytest.fixture
def scripted_controller(mock_paper_search, graph_service):
    return ConversationController(None, mock_paper_search, graph_service)


def _contents(outcome):
    return [m.content for m in outcome.messages]


def test_starts_with_greeting(scripted_controller):
    assert [m.content for m in scripted_controller.transcript] == [GREETING]
    assert scripted_controller.status == ConversationStatus.COLLECTING
    assert scripted_controller.graph is None


@pytest.mark.asyncio
async def test_scripted_dialogue_triggers_on_third_turn(scripted_controller, mock_paper_search):
    first = await scripted_controller.send_message("computer vision")
    assert first.status == ConversationStatus.COLLECTING
    assert first.triggered is False
    assert "computer vision is a fascinating field" in first.messages[0].content

    second = await scripted_controller.send_message("current research")
    assert second.triggered is False
    assert "Within computer vision" in second.messages[0].content

    third = await scripted_controller.send_message("3D vision")

    assert third.triggered is True
    assert third.trigger_reason == TriggerReason.LENGTH
    assert third.status == ConversationStatus.COMPLETE
    assert _contents(third)[-1] == SEARCH_TRANSITION
    assert third.search_params.query == "3D vision"
    assert third.search_params.year_start == 2020
    mock_paper_search.search.assert_awaited_once_with("3D vision", 2020, None)
    assert set(third.graph.nodes) == {"p1", "p2", "p3"}
    assert set(scripted_controller.graph.nodes) == set(third.graph.nodes)
    assert scripted_controller.triggered is True
    # greeting + 3 user turns + 3 replies + transition
    assert len(scripted_controller.transcript) == 8


@pytest.mark.asyncio
async def test_year_is_unbounded_without_current_intent(
    mock_orchestrator, mock_paper_search, graph_service
):
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    await controller.send_message("robotics")
    await controller.send_message("foundational work")
    outcome = await controller.send_message("manipulation")

    assert outcome.trigger_reason == TriggerReason.LENGTH
    assert outcome.search_params.year_start is None
    mock_paper_search.search.assert_awaited_once_with("manipulation", None, None)


@pytest.mark.asyncio
async def test_scripted_dialogue_always_bounds_the_year(scripted_controller, mock_paper_search):
    await scripted_controller.send_message("robotics")
    await scripted_controller.send_message("foundational work")
    outcome = await scripted_controller.send_message("manipulation")

    assert outcome.search_params.year_start == 2020
    mock_paper_search.search.assert_awaited_once_with("manipulation", 2020, None)


@pytest.mark.asyncio
async def test_provider_reply_is_used(mock_orchestrator, mock_paper_search, graph_service):
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("computer vision")

    assert _contents(outcome) == ["Which subdomain interests you most?"]
    assert outcome.status == ConversationStatus.CLARIFYING
    sent = mock_orchestrator.call_all.call_args.args[0]
    assert sent[0].role == "system"
    assert sent[0].content == RESEARCH_ARCHITECT_SYSTEM_PROMPT
    assert [m.content for m in sent[1:]] == [GREETING, "computer vision"]


@pytest.mark.asyncio
async def test_length_fires_when_providers_never_offer_to_search(
    mock_orchestrator, mock_paper_search, graph_service
):
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    await controller.send_message("computer vision")
    second = await controller.send_message("object detection")
    third = await controller.send_message("real-time")

    assert second.triggered is False
    assert third.trigger_reason == TriggerReason.LENGTH
    assert third.status == ConversationStatus.COMPLETE


@pytest.mark.asyncio
async def test_keyword_in_provider_reply_triggers_early(
    mock_orchestrator, mock_paper_search, graph_service, result_factory
):
    mock_orchestrator.call_all.return_value = [
        result_factory("groq", "Let me find relevant papers for you")
    ]
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("diffusion models for video")

    assert outcome.trigger_reason == TriggerReason.KEYWORD
    assert outcome.search_params.query == "diffusion models for video"
    assert _contents(outcome) == ["Let me find relevant papers for you", SEARCH_TRANSITION]


@pytest.mark.asyncio
async def test_phrase_in_provider_reply_triggers(
    mock_orchestrator, mock_paper_search, graph_service, result_factory
):
    mock_orchestrator.call_all.return_value = [
        result_factory("groq", "Let me pull together some papers on that.")
    ]
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("graph neural networks")

    assert outcome.trigger_reason == TriggerReason.PHRASE


@pytest.mark.asyncio
async def test_research_counts_as_search_keyword(
    mock_orchestrator, mock_paper_search, graph_service, result_factory
):
    mock_orchestrator.call_all.return_value = [
        result_factory("groq", "Is this for current research or a survey?")
    ]
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("computer vision")

    assert outcome.trigger_reason == TriggerReason.KEYWORD
    mock_paper_search.search.assert_awaited_once_with("computer vision", None, None)


@pytest.mark.asyncio
async def test_search_fires_at_most_once(scripted_controller, mock_paper_search):
    for text in ("computer vision", "current", "3D vision"):
        await scripted_controller.send_message(text)

    later = await scripted_controller.send_message("anything else?")

    assert later.triggered is False
    assert later.graph is None
    assert later.status == ConversationStatus.COMPLETE
    assert len(later.messages) == 1
    mock_paper_search.search.assert_awaited_once()


@pytest.mark.asyncio
async def test_total_failure_falls_back_to_script(
    mock_orchestrator, mock_paper_search, graph_service, result_factory
):
    mock_orchestrator.call_all.return_value = [
        result_factory("groq", success=False),
        result_factory("mistral", success=False),
    ]
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("computer vision")

    assert "computer vision is a fascinating field" in outcome.messages[0].content
    assert outcome.status == ConversationStatus.CLARIFYING


@pytest.mark.asyncio
async def test_unexpected_error_yields_apology(mock_orchestrator, mock_paper_search, graph_service):
    mock_orchestrator.call_all.side_effect = RuntimeError("event loop hiccup")
    controller = ConversationController(mock_orchestrator, mock_paper_search, graph_service)

    outcome = await controller.send_message("computer vision")

    assert _contents(outcome) == [APOLOGY]
    assert outcome.status == ConversationStatus.CLARIFYING
    assert [m.role for m in controller.transcript] == ["assistant", "user", "assistant"]
    assert controller.transcript[-1].content == APOLOGY


@pytest.mark.asyncio
async def test_search_failure_completes_with_empty_graph(scripted_controller, mock_paper_search):
    mock_paper_search.search.side_effect = SearchError("Semantic Scholar unavailable")

    for text in ("computer vision", "current"):
        await scripted_controller.send_message(text)
    outcome = await scripted_controller.send_message("3D vision")

    assert outcome.triggered is True
    assert _contents(outcome)[-2:] == [SEARCH_TRANSITION, APOLOGY]
    assert outcome.status == ConversationStatus.COMPLETE
    assert outcome.graph is not None
    assert outcome.graph.nodes == {}
    assert outcome.graph.edges == []
