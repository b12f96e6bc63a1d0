import asyncio
from types import SimpleNamespace

import pytest

from harmony_chat.agents.completion_gateway import CompletionGateway, classify_provider_error
from harmony_chat.core.errors import CompletionFailed, FailureKind, NoValidInput
from harmony_chat.core.models import COMPLETION_APOLOGY, SUBMISSION_APOLOGY, InstructionOverride, Message

from conftest import FakeLLMClient, ProviderError


def user(content: str, id: str = "1") -> Message:
    return Message(id=id, role="user", content=content)


def assistant(content: str, id: str = "2") -> Message:
    return Message(id=id, role="assistant", content=content)


@pytest.fixture
def client():
    return FakeLLMClient(answer="An answer")


@pytest.fixture
def gateway(client, logger):
    return CompletionGateway(client, logger, timeout=1.0)


@pytest.mark.asyncio
async def test_complete_returns_answer_without_system_message(gateway, client):
    answer = await gateway.complete([user("  Hello  ")])

    assert answer == "An answer"
    assert client.requests == [[{"role": "user", "content": "Hello"}]]


@pytest.mark.asyncio
async def test_enabled_override_leads_as_system_message(gateway, client):
    await gateway.complete([user("Hello")], InstructionOverride(value="Be brief."))

    assert client.requests[0][0] == {"role": "system", "content": "Be brief."}
    assert client.requests[0][1] == {"role": "user", "content": "Hello"}


@pytest.mark.asyncio
async def test_disabled_override_is_not_sent(gateway, client):
    await gateway.complete([user("Hello")], InstructionOverride(value="Be brief.", enabled=False))

    assert [m["role"] for m in client.requests[0]] == ["user"]


@pytest.mark.asyncio
async def test_blank_and_apology_messages_are_filtered(gateway, client):
    history = [
        user("Hi", "1"),
        assistant(COMPLETION_APOLOGY, "2"),
        assistant("   ", "3"),
        assistant(SUBMISSION_APOLOGY, "4"),
        user("Still there?", "5"),
    ]

    await gateway.complete(history)

    assert [m["content"] for m in client.requests[0]] == ["Hi", "Still there?"]


@pytest.mark.asyncio
async def test_no_valid_input_fails_fast(gateway, client):
    with pytest.raises(NoValidInput) as excinfo:
        await gateway.complete([assistant(COMPLETION_APOLOGY), user("  ")])

    assert excinfo.value.kind is FailureKind.NO_VALID_INPUT
    assert isinstance(excinfo.value, CompletionFailed)
    assert client.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status, kind", [
    (429, FailureKind.RATE_LIMITED),
    (401, FailureKind.AUTH_FAILED),
    (400, FailureKind.BAD_REQUEST),
    (503, FailureKind.PROVIDER_UNAVAILABLE),
])
async def test_provider_errors_are_classified(gateway, client, status, kind):
    client.error = ProviderError(status)

    with pytest.raises(CompletionFailed) as excinfo:
        await gateway.complete([user("Hello")])

    assert excinfo.value.kind is kind
    assert isinstance(excinfo.value.__cause__, ProviderError)


def test_classification_falls_back_to_message_text():
    assert classify_provider_error(Exception("You hit the rate limit")) is FailureKind.RATE_LIMITED
    assert classify_provider_error(Exception("Authentication error: bad key")) is FailureKind.AUTH_FAILED
    assert classify_provider_error(Exception("The model `gpt-x` does not exist")) is FailureKind.BAD_REQUEST
    assert classify_provider_error(ConnectionError("reset by peer")) is FailureKind.PROVIDER_UNAVAILABLE
    assert classify_provider_error(Exception("something odd")) is FailureKind.UNKNOWN


@pytest.mark.asyncio
async def test_hung_provider_times_out_as_unavailable(client, logger):
    client.gate = asyncio.Event()
    gateway = CompletionGateway(client, logger, timeout=0.05)

    with pytest.raises(CompletionFailed) as excinfo:
        await gateway.complete([user("Hello")])

    assert excinfo.value.kind is FailureKind.PROVIDER_UNAVAILABLE


@pytest.mark.asyncio
async def test_empty_answer_is_a_failure(gateway, client):
    client.answer = ""

    with pytest.raises(CompletionFailed) as excinfo:
        await gateway.complete([user("Hello")])

    assert excinfo.value.kind is FailureKind.UNKNOWN


@pytest.mark.asyncio
async def test_attribute_style_responses_are_normalised(logger):
    class ObjectClient:
        async def get_response(self, messages):
            message = SimpleNamespace(content="From an object")
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    gateway = CompletionGateway(ObjectClient(), logger)

    assert await gateway.complete([user("Hello")]) == "From an object"
