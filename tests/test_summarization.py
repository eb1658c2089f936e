from collections import Counter

import pytest

from agentmem.config.schema import MemoryConfig
from agentmem.memory.manager import MemoryManager
from agentmem.memory.summarization import SUMMARY_SEPARATOR


def _manager(keep: int = 4) -> MemoryManager:
    return MemoryManager("test-agent", MemoryConfig(keep_recent_per_lane=keep))


def _role_counts(manager: MemoryManager) -> Counter:
    return Counter(m.role for m in manager.state.recent_messages)


def test_lane_slice_returns_only_messages_older_than_the_tail() -> None:
    manager = _manager()
    for _ in range(5):
        manager.add_message("user", "hi")
    for _ in range(5):
        manager.add_message("assistant", "ok")

    assert manager.get_lane_for_summarization("user") == "- USER: hi"
    assert manager.get_lane_for_summarization("assistant") == "- ASSISTANT: ok"


def test_lane_slice_is_chronological_and_blank_line_separated() -> None:
    manager = _manager(keep=1)
    for i in range(3):
        manager.add_message("system", f"s{i}")

    assert manager.get_lane_for_summarization("system") == "- SYSTEM: s0\n\n- SYSTEM: s1"


def test_lane_slice_empty_when_lane_fits_in_tail() -> None:
    manager = _manager()
    for _ in range(4):
        manager.add_message("user", "hi")
    for _ in range(9):
        manager.add_message("tool", "result")

    assert manager.get_lane_for_summarization("user") == ""
    assert manager.get_lane_for_summarization("system") == ""


def test_unknown_lane_is_rejected() -> None:
    manager = _manager()
    with pytest.raises(ValueError):
        manager.get_lane_for_summarization("tool")
    with pytest.raises(ValueError):
        manager.apply_lane_summary("narrator", "x")


def test_summaries_accumulate_newest_first() -> None:
    manager = _manager()
    manager.apply_lane_summary("user", "first")
    manager.apply_lane_summary("user", "second")

    assert manager.state.lane_summaries.user == f"second{SUMMARY_SEPARATOR}first"
    assert manager.state.lane_summaries.assistant == ""
    assert manager.state.lane_summaries.last_summarized_at > 0


def test_apply_truncates_every_role_to_its_tail() -> None:
    manager = _manager(keep=2)
    for i in range(5):
        manager.add_message("user", f"u{i}")
        manager.add_message("assistant", f"a{i}")
        manager.add_message("tool", f"t{i}")
    manager.add_message("system", "s0")

    manager.apply_lane_summary("user", "users talked")

    counts = _role_counts(manager)
    assert all(n <= 2 for n in counts.values())
    assert counts == {"user": 2, "assistant": 2, "tool": 2, "system": 1}
    contents = [m.content for m in manager.state.recent_messages]
    assert contents == ["u3", "a3", "t3", "u4", "a4", "t4", "s0"]
    timestamps = [m.timestamp for m in manager.state.recent_messages]
    assert timestamps == sorted(timestamps)


def test_apply_on_lane_without_older_messages_still_compacts_other_lanes() -> None:
    manager = _manager(keep=1)
    manager.add_message("system", "only")
    for i in range(3):
        manager.add_message("assistant", f"a{i}")

    assert manager.get_lane_for_summarization("system") == ""
    manager.apply_lane_summary("system", "nothing new")

    assert [m.content for m in manager.state.recent_messages] == ["only", "a2"]
    assert manager.state.lane_summaries.system == "nothing new"


def test_apply_with_zero_keep_empties_buffer() -> None:
    manager = _manager(keep=0)
    manager.add_message("user", "hi")
    manager.add_message("tool", "out")

    manager.apply_lane_summary("user", "gone")

    assert manager.state.recent_messages == []
