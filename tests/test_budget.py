from agentmem.config.schema import MemoryConfig
from agentmem.memory.budget import (
    MESSAGE_OVERHEAD_CHARS,
    estimate_tokens,
    needs_summarization,
    partition_messages,
)
from agentmem.memory.types import MemoryState, Message


def _msg(role: str, content: str, ts: int) -> Message:
    return Message(role=role, content=content, timestamp=ts)


def test_partition_keeps_order_and_every_role() -> None:
    messages = [
        _msg("user", "u1", 1),
        _msg("tool", "t1", 2),
        _msg("assistant", "a1", 3),
        _msg("user", "u2", 4),
    ]

    lanes = partition_messages(messages)

    assert set(lanes) == {"assistant", "user", "system", "tool"}
    assert [m.content for m in lanes["user"]] == ["u1", "u2"]
    assert [m.content for m in lanes["assistant"]] == ["a1"]
    assert [m.content for m in lanes["tool"]] == ["t1"]
    assert lanes["system"] == []


def test_estimate_counts_prompt_blocks_summaries_and_message_overhead() -> None:
    state = MemoryState.empty("a", base_prompt="b" * 10)
    state.normative_block = "n" * 6
    state.lane_summaries.assistant = "x" * 4
    state.lane_summaries.user = "y" * 4
    state.recent_messages.append(_msg("user", "hello", 1))

    total = 10 + 6 + 4 + 4 + 5 + MESSAGE_OVERHEAD_CHARS
    assert estimate_tokens(state, 4) == -(-total // 4)


def test_every_message_costs_at_least_the_overhead() -> None:
    state = MemoryState.empty("a")
    before = estimate_tokens(state, 1)
    state.recent_messages.append(_msg("tool", "", 1))
    assert estimate_tokens(state, 1) - before == MESSAGE_OVERHEAD_CHARS


def test_needs_summarization_boundary() -> None:
    config = MemoryConfig()
    # 8192 * 0.70 = 5734.4 tokens
    state = MemoryState.empty("a", base_prompt="x" * (5734 * 4))
    assert estimate_tokens(state, config.avg_chars_per_token) == 5734
    assert needs_summarization(state, config) is False

    state.base_prompt += "x"
    assert estimate_tokens(state, config.avg_chars_per_token) == 5735
    assert needs_summarization(state, config) is True


def test_low_ratio_does_not_change_trigger() -> None:
    state = MemoryState.empty("a", base_prompt="x" * 400)
    loose = MemoryConfig(context_tokens=100, low_ratio=0.01)
    strict = MemoryConfig(context_tokens=100, low_ratio=0.99)
    assert needs_summarization(state, loose) == needs_summarization(state, strict) is True
