from pathlib import Path

from agentmem.utils.helpers import atomic_write_text, safe_filename


def test_atomic_write_text_creates_and_overwrites_file(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "memory.json"
    atomic_write_text(path, "v1\n", encoding="utf-8")
    assert path.read_text(encoding="utf-8") == "v1\n"

    atomic_write_text(path, "v2\n", encoding="utf-8")
    assert path.read_text(encoding="utf-8") == "v2\n"
    assert [p.name for p in path.parent.iterdir()] == ["memory.json"]


def test_safe_filename_strips_path_separators() -> None:
    assert safe_filename("team/lead") == "team_lead"
    assert safe_filename("..") == "_"
    assert safe_filename("moderator") == "moderator"
