from agentmem.memory.render import render_context, render_context_file, render_persona_block
from agentmem.memory.types import MemoryState, PersonaFacet


def _state() -> MemoryState:
    state = MemoryState.empty("moderator", base_prompt="Be kind")
    state.normative_block = "Prefer brevity"
    state.persona.version = 2
    state.persona.roles = [PersonaFacet("moderator", 0.9), PersonaFacet("judge", 0.5)]
    state.persona.antigoals = [PersonaFacet("spam", 0.4)]
    state.lane_summaries.assistant = "A1"
    state.lane_summaries.user = "U1"
    return state


def test_render_context_layers_in_fixed_order() -> None:
    expected = (
        "[BASE IDENTITY]\nBe kind"
        "\n\n---\n\n"
        "[NORMATIVE POLICY]\nPrefer brevity"
        "\n\n---\n\n"
        "[DYNAMIC PERSONA v2]\nRoles: moderator; judge\nAvoid: spam"
        "\n\n---\n\n"
        "[ASSISTANT HISTORY SUMMARY]\nA1"
        "\n\n---\n\n"
        "[USER HISTORY SUMMARY]\nU1"
    )
    assert render_context(_state()) == expected


def test_render_context_is_deterministic_and_pure() -> None:
    state = _state()
    snapshot = state.to_dict()

    first = render_context(state)
    second = render_context(state)

    assert first == second
    assert state.to_dict() == snapshot


def test_empty_state_renders_empty_string() -> None:
    assert render_context(MemoryState.empty("nobody")) == ""


def test_persona_block_hidden_until_first_update() -> None:
    state = MemoryState.empty("a")
    state.persona.roles = [PersonaFacet("ghost", 0.9)]
    assert render_persona_block(state.persona) == ""

    state.persona.version = 1
    assert render_persona_block(state.persona) == "[DYNAMIC PERSONA v1]\nRoles: ghost"


def test_system_summary_sits_between_assistant_and_user() -> None:
    state = MemoryState.empty("a")
    state.lane_summaries.user = "U"
    state.lane_summaries.system = "S"
    state.lane_summaries.assistant = "A"

    rendered = render_context(state)

    assert rendered.index("[ASSISTANT") < rendered.index("[SYSTEM") < rendered.index("[USER")


def test_context_file_shows_weights_and_placeholders() -> None:
    state = _state()
    state.normative_block = ""

    text = render_context_file(state)

    assert text.startswith("# Agent: moderator\n")
    assert "(not yet established)" in text
    assert "## Persona v2" in text
    assert "- moderator (90%)" in text
    assert "### Style\n(none)" in text
    assert "### System Lane\n(empty)" in text
    assert f"Last updated: {state.updated_at}" in text
