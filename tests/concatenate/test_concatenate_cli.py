from __future__ import annotations

import json

import pytest

from mdx_prompt.concatenate import cli
from mdx_prompt.concatenate import config as cfg
from mdx_prompt.concatenate.assembler import BANNER


@pytest.fixture
def project(workspace, monkeypatch):
    monkeypatch.chdir(workspace.root)
    monkeypatch.setenv("MDX_PROMPT_LOG_DIR", str(workspace.root / "logs"))
    return workspace


def test_cli_builds_prompt_document(project, capsys):
    project.create(
        {
            "src": {
                "background": {
                    "a.mdx": (
                        "import { Meta } from '@storybook/blocks';\n"
                        "\n"
                        '<Meta title="Background/A" />\n'
                        "\n"
                        "# A\n"
                    ),
                    "b.mdx": "# B\n",
                },
                "anti-patterns": {"z.mdx": "# Z\n"},
            }
        }
    )

    code = cli.main([])

    assert code == 0
    output = project.root / "docs" / "ai-prompt.md"
    assert output.read_text(encoding="utf-8") == (
        f"{BANNER}\n\n"
        "# Background\n\n"
        "# A\n\n\n"
        "# B\n\n\n"
        "# Anti-patterns\n\n"
        "# Z\n\n\n"
    )
    out = capsys.readouterr().out
    assert "mdx-prompt summary:" in out
    assert "background:    2" in out
    assert "anti-patterns: 1" in out
    assert "fallbacks:     0" in out
    assert str(output.resolve()) in out


def test_cli_flags_override_locations(project, capsys):
    project.create({"docs-src": {"bg": {"one.md": "One\n"}}})

    code = cli.main(
        [
            "--background-dir",
            "docs-src/bg",
            "--anti-patterns-dir",
            "docs-src/anti",
            "--extension",
            "md",
            "--output",
            "out/prompt.md",
        ]
    )

    assert code == 0
    document = (project.root / "out" / "prompt.md").read_text(
        encoding="utf-8"
    )
    assert document == f"{BANNER}\n\n# Background\n\nOne\n\n\n"


def test_cli_writes_json_log(project):
    project.create({"src": {"background": {"a.mdx": "A\n"}}})

    assert cli.main(["--log-level", "debug"]) == 0

    log_path = project.root / "logs" / "mdx_prompt.log"
    records = [
        json.loads(line)
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    messages = [record["message"] for record in records]
    assert "Starting concatenation run" in messages
    assert "Converted fragment" in messages
    assert "Completed concatenation run" in messages

    converted = next(
        record
        for record in records
        if record["message"] == "Converted fragment"
    )
    assert converted["category"] == "background"
    assert converted["fragment"] == "a.mdx"
    assert converted["mode"] == "structural"


def test_cli_reports_nothing_to_write(project, capsys):
    code = cli.main([])

    assert code == 0
    assert not (project.root / "docs" / "ai-prompt.md").exists()
    assert "No fragments found; nothing written." in capsys.readouterr().out


def test_cli_reports_write_failure(project, capsys):
    project.create(
        {"src": {"background": {"a.mdx": "A\n"}}, "blocker": "not a dir"}
    )

    code = cli.main(["--output", "blocker/prompt.md"])

    assert code == 1
    captured = capsys.readouterr()
    assert "Error concatenating documentation:" in captured.err


def test_cli_config_error_exits_with_usage(project, capsys):
    (project.root / cfg.CONFIG_FILENAME).write_text(
        "[unknown]\nkey = 1\n", encoding="utf-8"
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main([])

    assert excinfo.value.code == 2
    assert "unknown" in capsys.readouterr().err


def test_cli_missing_config_file(project, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--config", "missing.toml"])

    assert excinfo.value.code == 2
    assert "not found" in capsys.readouterr().err


def test_cli_config_init_writes_template(project, capsys):
    code = cli.main(["config", "init"])

    target = project.root / cfg.CONFIG_FILENAME
    assert code == 0
    assert target.read_text(encoding="utf-8") == cfg.read_template()
    assert "Wrote mdx-prompt config" in capsys.readouterr().out


def test_cli_config_init_respects_force(project, capsys):
    target = project.root / "conf" / "custom.toml"
    target.parent.mkdir()
    target.write_text("# mine\n", encoding="utf-8")

    assert cli.main(["config", "init", "--path", str(target)]) == 1
    assert "already exists" in capsys.readouterr().err
    assert target.read_text(encoding="utf-8") == "# mine\n"

    code = cli.main(["config", "init", "--path", str(target), "--force"])

    assert code == 0
    assert target.read_text(encoding="utf-8") == cfg.read_template()


def test_cli_config_requires_subcommand(project):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["config"])

    assert excinfo.value.code == 2
