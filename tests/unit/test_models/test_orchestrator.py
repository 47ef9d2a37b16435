"""Unit tests for the multi-provider fan-out."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from scholar_nav.models.orchestrator import InferenceOrchestrator, call_all
from scholar_nav.models.providers import create_client
from scholar_nav.models.schemas import ConversationMessage
from scholar_nav.utils.exceptions import ProviderError

MESSAGES = [ConversationMessage(role="user", content="graph neural networks")]


class FakeClient:
    def __init__(self, name, reply=None, error=None, delay=0.0, wait_for=None, signal=None):
        self.name = name
        self.reply = reply
        self.error = error
        self.delay = delay
        self.wait_for = wait_for
        self.signal = signal
        self.calls = 0

    async def send(self, messages):
        self.calls += 1
        if self.signal is not None:
            self.signal.set()
        if self.wait_for is not None:
            await self.wait_for.wait()
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


def _orchestrator(configs, clients):
    by_name = {c.name: c for c in clients}

    def fake_create(config, http_client=None, timeout=60.0):
        if config.name in by_name:
            return by_name[config.name]
        return create_client(config, http_client=http_client, timeout=timeout)

    with patch("scholar_nav.models.orchestrator.create_client", side_effect=fake_create):
        return InferenceOrchestrator(configs)


@pytest.mark.asyncio
async def test_empty_provider_list_returns_empty():
    assert await InferenceOrchestrator([]).call_all(MESSAGES) == []
    assert await call_all(MESSAGES, []) == []


@pytest.mark.asyncio
async def test_results_keep_input_order_when_first_fails_slowly(provider_factory):
    p1, p2 = provider_factory("groq"), provider_factory("mistral")
    orchestrator = _orchestrator(
        [p1, p2],
        [
            FakeClient("groq", error=ProviderError("groq", "server", status_code=500), delay=0.05),
            FakeClient("mistral", reply="Which subdomain?"),
        ],
    )

    results = await orchestrator.call_all(MESSAGES)

    assert [r.provider for r in results] == ["groq", "mistral"]
    assert results[0].success is False
    assert "500" in results[0].error
    assert results[1].success is True
    assert results[1].content == "Which subdomain?"


@pytest.mark.asyncio
async def test_providers_are_called_concurrently(provider_factory):
    # groq waits for mistral to start; a sequential fan-out would deadlock.
    mistral_started = asyncio.Event()
    clients = [
        FakeClient("groq", reply="first", wait_for=mistral_started),
        FakeClient("mistral", reply="second", signal=mistral_started),
    ]
    orchestrator = _orchestrator([provider_factory("groq"), provider_factory("mistral")], clients)

    results = await asyncio.wait_for(orchestrator.call_all(MESSAGES), timeout=2)

    assert [r.content for r in results] == ["first", "second"]


@pytest.mark.asyncio
async def test_failure_is_not_retried(provider_factory):
    failing = FakeClient("groq", error=ProviderError("groq", "timeout"))
    orchestrator = _orchestrator([provider_factory("groq")], [failing])

    results = await orchestrator.call_all(MESSAGES)

    assert failing.calls == 1
    assert results[0].success is False


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained(provider_factory):
    orchestrator = _orchestrator(
        [provider_factory("groq"), provider_factory("cohere")],
        [FakeClient("groq", error=KeyError("choices")), FakeClient("cohere", reply="ok")],
    )

    results = await orchestrator.call_all(MESSAGES)

    assert results[0].success is False
    assert results[1].content == "ok"


@pytest.mark.asyncio
async def test_unsupported_provider_yields_failed_slot(provider_factory):
    orchestrator = _orchestrator(
        [provider_factory("carrier-pigeon"), provider_factory("groq")],
        [FakeClient("groq", reply="hello")],
    )

    results = await orchestrator.call_all(MESSAGES)

    assert results[0].provider == "carrier-pigeon"
    assert results[0].success is False
    assert "Unknown provider" in results[0].error
    assert results[1].success is True


@pytest.mark.asyncio
async def test_latency_is_measured_per_call(provider_factory):
    orchestrator = _orchestrator(
        [provider_factory("groq")],
        [FakeClient("groq", reply="slow", delay=0.02)],
    )

    results = await orchestrator.call_all(MESSAGES)

    assert results[0].latency_ms >= 15
