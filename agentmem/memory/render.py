"""Context rendering for prompt injection and for human inspection."""

from __future__ import annotations

from agentmem.memory.summarization import SUMMARY_SEPARATOR
from agentmem.memory.types import MemoryState, PersonaFacet, PersonaModel

_PERSONA_TITLES = (
    ("roles", "Roles"),
    ("style", "Style"),
    ("heuristics", "Heuristics"),
    ("goals", "Goals"),
    ("antigoals", "Avoid"),
)

_LANE_HEADERS = (
    ("assistant", "[ASSISTANT HISTORY SUMMARY]"),
    ("system", "[SYSTEM HISTORY SUMMARY]"),
    ("user", "[USER HISTORY SUMMARY]"),
)


def render_persona_block(persona: PersonaModel) -> str:
    """Persona header plus one line per non-empty category; ``""`` before the first update."""
    if persona.version == 0:
        return ""
    lines = [f"[DYNAMIC PERSONA v{persona.version}]"]
    for name, title in _PERSONA_TITLES:
        facets = persona.category(name)
        if facets:
            lines.append(f"{title}: {'; '.join(f.text for f in facets)}")
    return "\n".join(lines)


def render_context(state: MemoryState) -> str:
    """Compose the layered system-prompt context. Pure; same state, same string."""
    parts: list[str] = []
    if state.base_prompt:
        parts.append(f"[BASE IDENTITY]\n{state.base_prompt}")
    if state.normative_block:
        parts.append(f"[NORMATIVE POLICY]\n{state.normative_block}")

    persona_block = render_persona_block(state.persona)
    if persona_block:
        parts.append(persona_block)

    for lane, header in _LANE_HEADERS:
        summary = state.lane_summaries.get(lane)
        if summary:
            parts.append(f"{header}\n{summary}")

    return SUMMARY_SEPARATOR.join(parts)


def _format_facets(facets: list[PersonaFacet]) -> str:
    if not facets:
        return "(none)"
    return "\n".join(f"- {f.text} ({f.weight * 100:.0f}%)" for f in facets)


def render_context_file(state: MemoryState) -> str:
    """Markdown snapshot written beside ``memory.json`` for operators to read."""
    persona = state.persona
    summaries = state.lane_summaries
    return f"""# Agent: {state.agent_id}

## Base Identity
{state.base_prompt}

## Normative Policy (evolving)
{state.normative_block or "(not yet established)"}

## Persona v{persona.version}

### Roles
{_format_facets(persona.roles)}

### Style
{_format_facets(persona.style)}

### Heuristics
{_format_facets(persona.heuristics)}

### Goals
{_format_facets(persona.goals)}

### Anti-goals
{_format_facets(persona.antigoals)}

## Lane Summaries

### Assistant Lane
{summaries.assistant or "(empty)"}

### System Lane
{summaries.system or "(empty)"}

### User Lane
{summaries.user or "(empty)"}

---
Last updated: {state.updated_at}
"""
