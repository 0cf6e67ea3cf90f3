from __future__ import annotations

from assessment_engine.settings import load_settings
from assessment_engine.workspace import cli as workspace_cli


def test_init_creates_workspace_and_reports(workspace_home, capsys):
    code = workspace_cli.main([])
    captured = capsys.readouterr()

    assert code == 0
    assert f"Workspace ready at {workspace_home.resolve()}" in captured.out
    assert "Subdirectories:" in captured.out
    for name in ("config", "logs", "pool", "history"):
        assert (workspace_home / name).is_dir()
        assert name in captured.out


def test_init_writes_config_once(tmp_path, capsys):
    root = tmp_path / "custom"

    code = workspace_cli.main(["--path", str(root), "--write-config"])
    config = root / "config" / "assessment.toml"
    assert code == 0
    assert config.exists()
    assert "Config written to" in capsys.readouterr().out

    code = workspace_cli.main(["--path", str(root), "--write-config"])
    assert code == 1
    assert "already exists" in capsys.readouterr().err

    code = workspace_cli.main(
        ["--path", str(root), "--write-config", "--force", "--quiet"]
    )
    assert code == 0
    assert capsys.readouterr().out == ""

    settings = load_settings(workspace_path=root)
    assert settings.source == config.resolve()


def test_init_reports_workspace_errors(tmp_path, capsys):
    target = tmp_path / "occupied"
    target.write_text("file", encoding="utf-8")

    code = workspace_cli.main(["--path", str(target)])

    assert code == 1
    assert "Error:" in capsys.readouterr().err
