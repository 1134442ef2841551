"""Tests for the end-to-end respond flow and presentation outcomes."""

import asyncio
import logging

import pytest

from cogs.respond.core import ChatScope, OutputMode
from cogs.respond.models import CompletionResponse, OutcomeKind
from cogs.respond.services import ContextCollector, OpenRouterClient, RespondService, is_scope_allowed
from cogs.respond.services import respond_service

from conftest import completion_body, make_message

SERVICE_LOGGER = respond_service.__name__


class FakeClient:
    """Completion client double that records calls."""

    def __init__(self, body=None, error=None):
        self.body = body or completion_body()
        self.error = error
        self.calls = []

    async def complete(self, api_key, request):
        self.calls.append((api_key, request))
        if self.error:
            raise self.error
        return CompletionResponse.from_dict(self.body)


def _collector(channel_id=1, count=5):
    cache = [make_message(channel_id, f"message {i}") for i in range(count)]
    return ContextCollector(lambda: cache)


def _untouchable_collector():
    def cache():
        raise AssertionError("message cache must not be read")
    return ContextCollector(cache)


@pytest.mark.parametrize("is_guild, scope, allowed", [
    (True, ChatScope.DMS, False),
    (False, ChatScope.DMS, True),
    (True, ChatScope.CHANNELS, True),
    (False, ChatScope.CHANNELS, False),
    (True, ChatScope.BOTH, True),
    (False, ChatScope.BOTH, True),
])
def test_scope_gate(is_guild, scope, allowed):
    assert is_scope_allowed(is_guild, scope) is allowed


async def test_dms_scope_in_guild_channel_makes_no_call(settings):
    client = FakeClient()
    service = RespondService(_untouchable_collector(), client)

    outcome = await service.respond(1, is_guild_channel=True, settings=settings.replace(chat_scope=ChatScope.DMS))

    assert outcome.kind is OutcomeKind.NOTICE
    assert outcome.content == respond_service.SCOPE_NOTICE
    assert client.calls == []


async def test_missing_api_key_makes_no_call(settings):
    client = FakeClient()
    service = RespondService(_untouchable_collector(), client)

    outcome = await service.respond(1, False, settings.replace(api_key=""))

    assert outcome.content == respond_service.MISSING_KEY_NOTICE
    assert client.calls == []


async def test_empty_context_makes_no_call(settings):
    client = FakeClient()
    service = RespondService(_collector(channel_id=2), client)

    outcome = await service.respond(1, False, settings)

    assert outcome.content == respond_service.EMPTY_CONTEXT_NOTICE
    assert client.calls == []


async def test_generate_sends_system_message_and_context(settings):
    client = FakeClient()
    service = RespondService(_collector(count=5), client)

    result = await service.generate(1, settings.replace(context_length=20))

    api_key, request = client.calls[0]
    assert api_key == settings.api_key
    assert request.model == settings.model
    assert request.messages[0].role == "system"
    assert request.messages[0].content == settings.system_instructions
    assert [m.content for m in request.messages[1:]] == [f"message {i}" for i in range(5)]
    assert result.text == "Sounds good, see you there!"


async def test_ephemeral_outcome_without_debug(settings):
    service = RespondService(_collector(), FakeClient())

    outcome = await service.respond(1, True, settings.replace(show_debug_info=False, show_token_count=False))

    assert outcome.kind is OutcomeKind.EPHEMERAL
    assert outcome.content == "Sounds good, see you there!"
    assert outcome.status_notice is None


async def test_ephemeral_outcome_appends_debug_info(settings):
    service = RespondService(_collector(), FakeClient())

    outcome = await service.respond(1, True, settings.replace(show_debug_info=True))

    text, debug = outcome.content.split("\n\n", 1)
    assert text == "Sounds good, see you there!"
    assert debug.startswith("**Debug Info:**")
    assert "$0.000020" in debug


async def test_token_count_status_notice(settings):
    service = RespondService(_collector(), FakeClient())

    outcome = await service.respond(1, True, settings.replace(show_token_count=True))

    assert outcome.status_notice == "Generated response (150 tokens)"


async def test_no_token_notice_without_usage(settings):
    body = completion_body()
    del body["usage"]
    service = RespondService(_collector(), FakeClient(body=body))

    outcome = await service.respond(1, True, settings.replace(show_token_count=True))

    assert outcome.kind is OutcomeKind.EPHEMERAL
    assert outcome.status_notice is None


async def test_typebar_outcome_carries_plain_text(settings):
    service = RespondService(_collector(), FakeClient())

    outcome = await service.respond(
        1, False, settings.replace(output_mode=OutputMode.TYPEBAR, show_debug_info=True)
    )

    assert outcome.kind is OutcomeKind.TYPEBAR
    assert outcome.content == "Sounds good, see you there!"


async def test_empty_choices_gives_failure_notice(settings):
    service = RespondService(_collector(), FakeClient(body=completion_body(choices=[])))

    outcome = await service.respond(1, False, settings)

    assert outcome.content == respond_service.EMPTY_CHOICES_NOTICE
    assert outcome.result is None


@pytest.mark.parametrize("output_mode", [OutputMode.EPHEMERAL, OutputMode.TYPEBAR])
async def test_blank_content_gives_failure_notice(settings, output_mode):
    service = RespondService(_collector(), FakeClient(body=completion_body(text="")))

    outcome = await service.respond(1, False, settings.replace(output_mode=output_mode))

    assert outcome.kind is OutcomeKind.NOTICE
    assert outcome.content == respond_service.EMPTY_CHOICES_NOTICE


async def test_null_content_is_contained_and_logged_only_when_enabled(settings, caplog):
    body = completion_body(choices=[
        {"message": {"role": "assistant", "content": None}, "finish_reason": "length", "index": 0},
    ])
    service = RespondService(_collector(), FakeClient(body=body))
    caplog.set_level(logging.ERROR, logger=SERVICE_LOGGER)

    quiet = await service.respond(1, False, settings.replace(log_errors=False))
    assert quiet.content == respond_service.ERROR_NOTICE
    assert not [r for r in caplog.records if r.name == SERVICE_LOGGER]

    loud = await service.respond(1, False, settings.replace(log_errors=True))
    assert loud.kind is OutcomeKind.NOTICE
    assert "NoneType" in caplog.text



async def test_http_401_logs_status_and_body_when_enabled(upstream, settings, caplog):
    upstream.status = 401
    upstream.body = '{"error": {"message": "No auth credentials found", "code": 401}}'
    service = RespondService(_collector(), OpenRouterClient(api_url=upstream.url))
    caplog.set_level(logging.ERROR, logger=SERVICE_LOGGER)

    outcome = await service.respond(1, False, settings.replace(log_errors=True))

    assert outcome.kind is OutcomeKind.NOTICE
    assert outcome.content == respond_service.ERROR_NOTICE
    assert outcome.result is None
    assert "401" in caplog.text
    assert "No auth credentials found" in caplog.text


async def test_http_401_not_logged_when_disabled(upstream, settings, caplog):
    upstream.status = 401
    upstream.body = "unauthorized"
    service = RespondService(_collector(), OpenRouterClient(api_url=upstream.url))
    caplog.set_level(logging.ERROR, logger=SERVICE_LOGGER)

    outcome = await service.respond(1, False, settings.replace(log_errors=False))

    assert outcome.content == respond_service.ERROR_NOTICE
    assert not [r for r in caplog.records if r.name == SERVICE_LOGGER]


async def test_unexpected_error_is_contained(settings):
    service = RespondService(_collector(), FakeClient(error=RuntimeError("connection reset")))

    outcome = await service.respond(1, False, settings)

    assert outcome.kind is OutcomeKind.NOTICE
    assert outcome.content == respond_service.ERROR_NOTICE


async def test_end_to_end_against_local_server(upstream, settings):
    service = RespondService(_collector(count=3), OpenRouterClient(api_url=upstream.url))

    outcome = await service.respond(1, True, settings.replace(system_instructions=""))

    assert outcome.kind is OutcomeKind.EPHEMERAL
    sent = upstream.requests[0]["json"]
    assert [m["role"] for m in sent["messages"]] == ["user", "user", "user"]


class BlockingClient(FakeClient):
    """Holds every request until released."""

    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def complete(self, api_key, request):
        self.started.set()
        await self.release.wait()
        return await super().complete(api_key, request)


async def test_single_flight_rejects_second_request_for_same_channel(settings):
    client = BlockingClient()
    service = RespondService(_collector(), client)
    guarded = settings.replace(single_flight_per_channel=True)

    first = asyncio.create_task(service.respond(1, False, guarded))
    await client.started.wait()

    second = await service.respond(1, False, guarded)
    client.release.set()
    first_outcome = await first

    assert second.content == respond_service.IN_FLIGHT_NOTICE
    assert first_outcome.kind is OutcomeKind.EPHEMERAL
    assert len(client.calls) == 1


async def test_invocations_are_independent_by_default(settings):
    client = BlockingClient()
    service = RespondService(_collector(), client)

    first = asyncio.create_task(service.respond(1, False, settings))
    second = asyncio.create_task(service.respond(1, False, settings))
    await client.started.wait()
    client.release.set()

    outcomes = await asyncio.gather(first, second)

    assert all(o.kind is OutcomeKind.EPHEMERAL for o in outcomes)
    assert len(client.calls) == 2
