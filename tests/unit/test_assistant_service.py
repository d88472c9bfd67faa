import json

import pytest

from models.api_models import ProjectContext, StructuredReply
from models.chat_models import AssistantContext, AssistantStage, ConversationTurn, StructuredContent, TextContent, TurnRole
from services.assistant_service import AssistantService
from services.errors import InvalidRequestError, MalformedReplyError, ModelUnavailableError
from tests.fixtures.responses import (
    BOOKSHELF_REPLY,
    BOOKSHELF_REPLY_TEXT,
    FENCED_REPLY,
    SAMPLE_CONTEXT,
    SHELF_REPLY_IN_PROSE,
)


def user(text):
    return ConversationTurn(role=TurnRole.USER, content=TextContent(text))


def model(content):
    if isinstance(content, str):
        return ConversationTurn(role=TurnRole.MODEL, content=TextContent(content))
    return ConversationTurn(role=TurnRole.MODEL, content=StructuredContent(content))


# History sanitization

def test_sanitize_history_keeps_text_only_history_unchanged():
    """Given a history whose turns are all text, when sanitized, then it is returned unchanged."""
    history = [user("How do I start?"), model("Measure first."), user("Then what?")]
    assert AssistantService.sanitize_history(history) == history


def test_sanitize_history_serializes_structured_model_turns():
    """Given a model turn stored as an object, when sanitized, then its content becomes JSON text."""
    history = [user("Plan a bookshelf"), model(BOOKSHELF_REPLY)]

    sanitized = AssistantService.sanitize_history(history)

    assert sanitized[0] == history[0]
    assert sanitized[1].role == TurnRole.MODEL
    assert isinstance(sanitized[1].content, TextContent)
    assert json.loads(sanitized[1].text) == BOOKSHELF_REPLY


def test_sanitize_history_preserves_count_and_order_for_mixed_history():
    """Given a mixed history in any order, when sanitized, then every turn is text and order is preserved."""
    structured_user = ConversationTurn(role=TurnRole.USER, content=StructuredContent({"note": "d"}))
    history = [model({"summary": "a"}), model("b"), user("c"), structured_user, model(["e"])]

    sanitized = AssistantService.sanitize_history(history)

    assert len(sanitized) == len(history)
    assert [turn.role for turn in sanitized] == [turn.role for turn in history]
    assert all(isinstance(turn.content, TextContent) for turn in sanitized)
    assert [turn.text for turn in sanitized] == ['{"summary": "a"}', "b", "c", '{"note": "d"}', '["e"]']


def test_sanitize_history_accepts_empty_history():
    """Given no history, when sanitized, then an empty list is returned."""
    assert AssistantService.sanitize_history([]) == []


def test_sanitize_history_is_idempotent():
    """Given a sanitized history, when sanitized again, then nothing changes."""
    once = AssistantService.sanitize_history([user("x"), model(BOOKSHELF_REPLY)])
    assert AssistantService.sanitize_history(once) == once


@pytest.mark.parametrize("raw_history", [
    [{"content": "no role"}],
    [{"role": "system", "content": "not allowed"}],
    ["just a string"],
    "not a list",
])
def test_parse_history_rejects_unrepairable_entries(raw_history):
    """Given malformed history entries, when parsed, then InvalidRequestError is raised."""
    with pytest.raises(InvalidRequestError):
        AssistantService.parse_history(raw_history)


# Instruction building

def test_build_instruction_embeds_serialized_todo_list():
    """Given a context with todos, when the instruction is built, then it contains the serialized list."""
    context = {"todos": [{"id": 1, "text": "buy wood", "completed": False}], "materials": []}

    instruction = AssistantService.build_instruction(context)

    assert json.dumps(context["todos"]) in instruction
    assert '"completed": false' in instruction


def test_build_instruction_keeps_non_ascii_text_verbatim():
    """Given accented todo and material names, when the instruction is built, then they are not escaped."""
    context = {
        "todos": [{"id": 1, "text": "Buy café tiles", "completed": False}],
        "materials": [{"id": 2, "name": "Époxy grout", "quantity": "1 tub", "cost": 18}],
    }

    instruction = AssistantService.build_instruction(context)

    assert '"text": "Buy café tiles"' in instruction
    assert '"name": "Époxy grout"' in instruction
    assert "\\u00e9" not in instruction


def test_build_instruction_embeds_materials():
    """Given a context with materials, when the instruction is built, then the materials list is embedded."""
    instruction = AssistantService.build_instruction(SAMPLE_CONTEXT)
    assert json.dumps(SAMPLE_CONTEXT["materials"]) in instruction


@pytest.mark.parametrize("context", [{}, None, {"todos": None}, ProjectContext()])
def test_build_instruction_tolerates_missing_fields(context):
    """Given a context with missing fields, when the instruction is built, then empty lists are embedded."""
    instruction = AssistantService.build_instruction(context)
    assert instruction.count("[]") == 2


def test_build_instruction_states_output_contract():
    """Given any context, when the instruction is built, then it names the role, the fields and the research questions."""
    instruction = AssistantService.build_instruction({})

    assert "project-planning assistant" in instruction
    for field in ('"summary"', '"materials"', '"steps"', '"questions"'):
        assert field in instruction
    assert "3 to 4 internal research queries" in instruction
    assert "NOT clarifying questions" in instruction


def test_build_instruction_accepts_plain_string_todos():
    """Given checklist items sent as bare strings, when the instruction is built, then they are embedded as todos."""
    instruction = AssistantService.build_instruction({"todos": ["Design the shelf"]})
    assert '{"id": null, "text": "Design the shelf", "completed": false}' in instruction


def test_build_instruction_rejects_malformed_context():
    """Given todos that are not a list, when the instruction is built, then InvalidRequestError is raised."""
    with pytest.raises(InvalidRequestError):
        AssistantService.build_instruction({"todos": "buy wood"})


# Reply extraction

def test_extract_reply_from_surrounding_prose():
    """Given a JSON object wrapped in prose, when extracted, then the four fields are recovered."""
    reply = AssistantService.extract_reply(SHELF_REPLY_IN_PROSE)

    assert reply == StructuredReply(
        summary="Build a shelf",
        materials=["wood"],
        steps=["cut", "assemble"],
        questions=["q1", "q2", "q3"],
    )


def test_extract_reply_ignores_code_fences_and_extra_fields():
    """Given a fenced reply with an unknown field, when extracted, then the fence and extra field are dropped."""
    reply = AssistantService.extract_reply(FENCED_REPLY)

    assert reply.summary == "Seal the deck"
    assert reply.steps == ["clean", "sand", "stain"]
    assert "confidence" not in reply.model_dump()


@pytest.mark.parametrize("raw_text", [
    "I think you should use wood.",
    '{"summary": "x"',
    '"summary": "x"}',
    "} backwards {",
    "",
    None,
])
def test_extract_reply_without_object_span_fails(raw_text):
    """Given text without a usable brace span, when extracted, then MalformedReplyError is raised."""
    with pytest.raises(MalformedReplyError):
        AssistantService.extract_reply(raw_text)


@pytest.mark.parametrize("raw_text", [
    "{summary: 'single quotes'}",
    '{"summary": "x",}',
    '{"summary": "a"} and {"summary": "b"}',
])
def test_extract_reply_with_unparseable_span_fails(raw_text):
    """Given a brace span that is not valid JSON, when extracted, then MalformedReplyError is raised."""
    with pytest.raises(MalformedReplyError):
        AssistantService.extract_reply(raw_text)


def test_extract_reply_defaults_missing_fields():
    """Given an object with only a summary, when extracted, then the lists default to empty."""
    reply = AssistantService.extract_reply('{"summary":"ok"}')
    assert reply.model_dump() == {"summary": "ok", "materials": [], "steps": [], "questions": []}


def test_extract_reply_allows_empty_summary():
    """Given an object without a summary, when extracted, then summary defaults to an empty string."""
    reply = AssistantService.extract_reply('{"steps": ["sand"], "summary": null}')
    assert reply.summary == ""
    assert reply.steps == ["sand"]


@pytest.mark.parametrize("raw_text", [
    '{"summary": "x", "steps": "cut then sand"}',
    '{"summary": "x", "materials": [1, 2]}',
    '{"summary": {"text": "x"}}',
])
def test_extract_reply_with_wrong_field_types_fails(raw_text):
    """Given fields of the wrong type, when extracted, then MalformedReplyError is raised."""
    with pytest.raises(MalformedReplyError):
        AssistantService.extract_reply(raw_text)


# Orchestration

@pytest.mark.anyio
async def test_ask_returns_structured_reply_end_to_end(assistant, stub_model_client):
    """Given a stubbed model reply, when ask is called, then the exact StructuredReply is returned."""
    stub_model_client.responses.append(BOOKSHELF_REPLY_TEXT)

    reply = await assistant.ask([], "How do I build a bookshelf?", {"todos": [], "materials": []})

    assert reply.model_dump() == BOOKSHELF_REPLY
    assert stub_model_client.call_count == 1
    call = stub_model_client.call_history[0]
    assert call["message"] == "How do I build a bookshelf?"
    assert call["history"] == []
    assert "[]" in call["system_instruction"]


@pytest.mark.anyio
async def test_ask_replays_sanitized_history(assistant, stub_model_client):
    """Given raw history with a structured model turn, when ask is called, then the client sees text turns."""
    stub_model_client.responses.append(BOOKSHELF_REPLY_TEXT)
    history = [
        {"role": "user", "content": "Plan a bookshelf"},
        {"role": "model", "content": BOOKSHELF_REPLY},
        {"role": "assistant", "content": "plain text reply"},
    ]

    await assistant.ask(history, "What wood?", SAMPLE_CONTEXT)

    sent = stub_model_client.call_history[0]["history"]
    assert [turn.role for turn in sent] == [TurnRole.USER, TurnRole.MODEL, TurnRole.MODEL]
    assert json.loads(sent[1].text) == BOOKSHELF_REPLY
    assert sent[2].text == "plain text reply"


@pytest.mark.anyio
@pytest.mark.parametrize("prompt", ["", "   ", None])
async def test_ask_with_empty_prompt_skips_model(assistant, stub_model_client, prompt):
    """Given an empty prompt, when ask is called, then InvalidRequestError is raised without calling the model."""
    with pytest.raises(InvalidRequestError) as exc_info:
        await assistant.ask([], prompt, {})

    assert exc_info.value.stage == AssistantStage.RECEIVED.value
    assert stub_model_client.call_count == 0


@pytest.mark.anyio
async def test_ask_with_malformed_history_skips_model(assistant, stub_model_client):
    """Given a history entry without a role, when ask is called, then InvalidRequestError is raised before the model call."""
    with pytest.raises(InvalidRequestError):
        await assistant.ask([{"content": "orphan"}], "Hello", {})
    assert stub_model_client.call_count == 0


@pytest.mark.anyio
async def test_ask_wraps_client_failures(assistant, stub_model_client):
    """Given a failing model client, when ask is called, then ModelUnavailableError is raised with the cause chained."""
    provider_error = ConnectionError("quota exceeded for key abc123")
    stub_model_client.responses.append(provider_error)

    with pytest.raises(ModelUnavailableError) as exc_info:
        await assistant.ask([], "Hello", {})

    assert exc_info.value.__cause__ is provider_error
    assert "abc123" not in exc_info.value.message
    assert exc_info.value.stage == AssistantStage.PROMPT_BUILT.value
    assert stub_model_client.call_count == 1


@pytest.mark.anyio
async def test_ask_reports_malformed_reply(assistant, stub_model_client):
    """Given a model reply without JSON, when ask is called, then MalformedReplyError is raised after one call."""
    stub_model_client.responses.append("I think you should use wood.")

    with pytest.raises(MalformedReplyError) as exc_info:
        await assistant.ask([], "Hello", {})

    assert exc_info.value.stage == AssistantStage.MODEL_INVOKED.value
    assert stub_model_client.call_count == 1


@pytest.mark.anyio
async def test_process_records_stage_transitions(assistant, stub_model_client):
    """Given a successful request, when processed, then the context walks every stage to EXTRACTED."""
    stub_model_client.responses.append(BOOKSHELF_REPLY_TEXT)
    context = AssistantContext(prompt="Build a bookshelf")

    await assistant.process(context, [], SAMPLE_CONTEXT)

    assert context.transitions == [
        AssistantStage.SANITIZED,
        AssistantStage.PROMPT_BUILT,
        AssistantStage.MODEL_INVOKED,
        AssistantStage.EXTRACTED,
    ]
    assert context.raw_reply == BOOKSHELF_REPLY_TEXT
    assert context.project.todos[0].text == "buy wood"


@pytest.mark.anyio
async def test_process_ends_in_failed_stage(assistant, stub_model_client):
    """Given a malformed model reply, when processed, then the context ends in FAILED."""
    stub_model_client.responses.append("no json here")
    context = AssistantContext(prompt="Build a bookshelf")

    with pytest.raises(MalformedReplyError):
        await assistant.process(context)

    assert context.stage == AssistantStage.FAILED
    assert AssistantStage.EXTRACTED not in context.transitions
