import pytest

from harmony_chat.core.config import ChatConfig
from harmony_chat.core.errors import FailureKind
from harmony_chat.core.models import (
    COMPLETION_APOLOGY,
    SUBMISSION_APOLOGY,
    Conversation,
    InstructionOverride,
    Message,
    derive_title,
    is_apology,
)
from harmony_chat.core.prompts import PromptLibrary
from harmony_chat.core.session import PipelineSession, StagedMessage


@pytest.mark.parametrize("text, title", [
    ("My transmission is broken", "My transmission is..."),
    ("Hi", "Hi"),
    ("  three   little words ", "three little words"),
    ("one two three four", "one two three..."),
])
def test_derive_title(text, title):
    assert derive_title(text) == title


def test_transient_flags_are_never_serialised():
    message = Message(id="1", role="assistant", content="x", revealing=True, is_initial_instruction=True)

    assert message.model_dump() == {"id": "1", "role": "assistant", "content": "x"}
    assert not message.finalized().revealing
    assert message.finalized().is_initial_instruction


def test_apology_texts_share_the_filtered_prefix():
    assert is_apology(COMPLETION_APOLOGY)
    assert is_apology(SUBMISSION_APOLOGY)
    assert not is_apology("Sorry to hear that.")


def test_instruction_override_activity():
    assert InstructionOverride(value="Be brief.").active == "Be brief."
    assert InstructionOverride(value="Be brief.", enabled=False).active is None
    assert InstructionOverride(value="  ").active is None


def test_conversation_helpers():
    conversation = Conversation(id="local-1", title="t")
    assert conversation.is_local
    assert not conversation.has_user_message()
    conversation.messages.append(Message(id="1", role="user", content="hey"))
    assert conversation.has_user_message()


def test_message_ids_are_unique_and_increasing():
    session = PipelineSession()
    ids = [int(session.next_message_id()) for _ in range(50)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 50


def test_session_gate():
    session = PipelineSession()
    assert session.input_locked
    assert session.accepts_input

    session.current_conversation_id = "c1"
    assert not session.accepts_input

    session.input_locked = False
    assert session.accepts_input

    session.staged = StagedMessage(message=Message(id="1", role="assistant", content="x"), conversation_id="c1")
    assert not session.accepts_input


def test_visible_messages_include_staged_message_of_current_conversation():
    session = PipelineSession()
    session.conversations["c1"] = Conversation(id="c1", title="t", messages=[
        Message(id="1", role="user", content="hey")
    ])
    session.current_conversation_id = "c1"
    staged = Message(id="2", role="assistant", content="hello", revealing=True)
    session.staged = StagedMessage(message=staged, conversation_id="c1")

    assert [m.id for m in session.visible_messages()] == ["1", "2"]

    session.staged.conversation_id = "c2"
    assert [m.id for m in session.visible_messages()] == ["1"]


def test_failure_kinds_have_descriptions():
    assert FailureKind.RATE_LIMITED.description.startswith("Rate limit exceeded")
    assert all(kind.description for kind in FailureKind)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("LITELLM_MODEL", "openrouter/some-model")
    monkeypatch.setenv("HARMONY_CHAT_REVEAL_CADENCE_MS", "12.5")
    monkeypatch.setenv("HARMONY_CHAT_LANGUAGE", "ar")
    monkeypatch.setenv("HARMONY_CHAT_STREAM", "true")

    config = ChatConfig.from_env()

    assert config.model == "openrouter/some-model"
    assert config.reveal_cadence_ms == 12.5
    assert config.language == "ar"
    assert config.stream is True
    assert config.call_to_action_delay == 0.5


def test_config_prefers_own_model_variable(monkeypatch):
    monkeypatch.setenv("LITELLM_MODEL", "fallback-model")
    monkeypatch.setenv("HARMONY_CHAT_MODEL", "chosen-model")

    assert ChatConfig.from_env().model == "chosen-model"


def test_prompt_library_renders_templates():
    prompts = PromptLibrary("en", "https://example.org")

    assert prompts.problem_title() == "New Problem"
    assert prompts.problem_instruction().startswith("Welcome.")
    assert "Always answer in English." in prompts.problem_prompt()
    assert 'href="https://example.org"' in prompts.call_to_action()
