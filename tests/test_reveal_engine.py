import asyncio

import pytest

from harmony_chat.core.models import Message
from harmony_chat.delivery.reveal_engine import PacedRevealEngine


def make_message(content: str) -> Message:
    return Message(id="42", role="assistant", content=content, revealing=True)


def test_slices_are_deterministic_prefixes():
    assert list(PacedRevealEngine.slices("abc")) == ["a", "ab", "abc"]
    assert list(PacedRevealEngine.slices("abcde", 2)) == ["ab", "abcd", "abcde"]
    assert list(PacedRevealEngine.slices("")) == []
    assert list(PacedRevealEngine.slices("héllo wörld", 3)) == list(PacedRevealEngine.slices("héllo wörld", 3))


def test_chunk_size_must_be_positive(logger):
    with pytest.raises(ValueError):
        PacedRevealEngine(logger, chunk_size=0)


@pytest.mark.asyncio
async def test_reveal_emits_every_prefix_and_completes_once(logger):
    engine = PacedRevealEngine(logger, cadence_ms=0)
    progress, completed = [], []
    message = make_message("Hello, world")

    handle = engine.reveal(message, progress.append, completed.append)
    await handle.wait()

    assert progress == list(PacedRevealEngine.slices("Hello, world"))
    assert progress[-1] == "Hello, world"
    assert progress.count("Hello, world") == 1
    assert completed == [message]
    assert handle.completed
    assert not handle.cancel()


@pytest.mark.asyncio
async def test_reveal_awaits_async_callbacks(logger):
    engine = PacedRevealEngine(logger, cadence_ms=0, chunk_size=4)
    progress, completed = [], []

    async def on_progress(prefix):
        await asyncio.sleep(0)
        progress.append(prefix)

    async def on_complete(message):
        await asyncio.sleep(0)
        completed.append(message.id)

    handle = engine.reveal(make_message("paced reveal"), on_progress, on_complete)
    await handle.wait()

    assert progress == ["pace", "paced re", "paced reveal"]
    assert completed == ["42"]


@pytest.mark.asyncio
async def test_empty_text_completes_without_progress(logger):
    engine = PacedRevealEngine(logger, cadence_ms=0)
    progress, completed = [], []

    await engine.reveal(make_message(""), progress.append, completed.append).wait()

    assert progress == []
    assert len(completed) == 1


@pytest.mark.asyncio
async def test_cancelled_reveal_never_completes(logger):
    engine = PacedRevealEngine(logger, cadence_ms=10)
    progress, completed = [], []

    handle = engine.reveal(make_message("a long enough text"), progress.append, completed.append)
    await asyncio.sleep(0.025)
    assert handle.cancel()
    await handle.wait()
    await asyncio.sleep(0.03)

    assert handle.cancelled
    assert not handle.completed
    assert completed == []
    assert 0 < len(progress) < len("a long enough text")
    assert not handle.cancel()


@pytest.mark.asyncio
async def test_per_call_cadence_overrides_default(logger):
    engine = PacedRevealEngine(logger, cadence_ms=10_000)
    completed = []

    handle = engine.reveal(make_message("fast"), lambda prefix: None, completed.append, cadence_ms=0)
    await asyncio.wait_for(handle.wait(), timeout=1)

    assert len(completed) == 1


@pytest.mark.asyncio
async def test_completion_handler_errors_propagate_to_waiter(logger):
    engine = PacedRevealEngine(logger, cadence_ms=0)

    def on_complete(message):
        raise RuntimeError("persist failed")

    handle = engine.reveal(make_message("x"), lambda prefix: None, on_complete)

    with pytest.raises(RuntimeError, match="persist failed"):
        await handle.wait()
