import json
from pathlib import Path

from typer.testing import CliRunner

from agentmem.cli.commands import app
from agentmem.config.schema import Config, StorageConfig


def _patch_config(monkeypatch, root: Path) -> None:
    import agentmem.cli.commands as commands_module

    monkeypatch.setattr(
        commands_module,
        "load_config",
        lambda: Config(storage=StorageConfig(root=str(root))),
        raising=False,
    )


def test_call_with_save_then_status(tmp_path: Path, monkeypatch) -> None:
    _patch_config(monkeypatch, tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "call",
            "memory_add_message",
            "--args",
            json.dumps({"agent_id": "moderator", "role": "user", "content": "hello"}),
            "--save",
        ],
    )
    assert result.exit_code == 0
    assert '"success": true' in result.output
    assert (tmp_path / "moderator" / "memory.json").exists()

    result = runner.invoke(app, ["status", "moderator"])
    assert result.exit_code == 0
    assert '"recent_messages": 1' in result.output


def test_call_without_save_leaves_disk_untouched(tmp_path: Path, monkeypatch) -> None:
    _patch_config(monkeypatch, tmp_path)

    result = CliRunner().invoke(
        app,
        ["call", "memory_set_normative", "--args", '{"agent_id": "a", "normative": "Be brief"}'],
    )

    assert result.exit_code == 0
    assert not (tmp_path / "a" / "memory.json").exists()


def test_call_reports_tool_errors(tmp_path: Path, monkeypatch) -> None:
    _patch_config(monkeypatch, tmp_path)

    result = CliRunner().invoke(app, ["call", "memory_get_lane", "--args", '{"agent_id": "a", "lane": "tool"}'])

    assert result.exit_code == 1
    assert "Invalid parameters" in result.output


def test_call_rejects_bad_json(tmp_path: Path, monkeypatch) -> None:
    _patch_config(monkeypatch, tmp_path)

    result = CliRunner().invoke(app, ["call", "memory_status", "--args", "{oops"])

    assert result.exit_code == 2


def test_context_prints_rendered_memory(tmp_path: Path, monkeypatch) -> None:
    agent_dir = tmp_path / "God"
    agent_dir.mkdir()
    (agent_dir / "memory.json").write_text(
        json.dumps({"agentId": "God", "basePrompt": "Let there be light", "normativeBlock": "Rest on day seven"}),
        encoding="utf-8",
    )
    _patch_config(monkeypatch, tmp_path)

    result = CliRunner().invoke(app, ["context", "God"])

    assert result.exit_code == 0
    assert "[BASE IDENTITY]\nLet there be light\n\n---\n\n[NORMATIVE POLICY]\nRest on day seven" in result.output


def test_tools_lists_every_tool(tmp_path: Path, monkeypatch) -> None:
    _patch_config(monkeypatch, tmp_path)

    result = CliRunner().invoke(app, ["tools"])

    assert result.exit_code == 0
    assert "memory_apply_persona: Apply a persona update" in result.output
    assert "memory_status:" in result.output
