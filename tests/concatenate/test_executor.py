from __future__ import annotations

from pathlib import Path

import pytest

from mdx_prompt.concatenate import executor
from mdx_prompt.concatenate.assembler import BANNER, Category
from mdx_prompt.concatenate.config import ConcatenateConfig


def _config(root: Path, **overrides) -> ConcatenateConfig:
    values = {
        "root": root,
        "background_dir": root / "src" / "background",
        "anti_patterns_dir": root / "src" / "anti-patterns",
        "output_path": root / "docs" / "ai-prompt.md",
        "extension": "mdx",
        "tooling_namespace": "@storybook",
        "log_level": "INFO",
        "log_dir": root / "logs",
    }
    values.update(overrides)
    return ConcatenateConfig(**values)


def test_run_concatenation_writes_document(workspace, quiet_logger):
    root = workspace.create(
        {
            "src": {
                "background": {"b.mdx": "# B\n", "a.mdx": "# A\n"},
                "anti-patterns": {"z.mdx": "# Z\n"},
            }
        }
    )
    config = _config(root)

    summary = executor.run_concatenation(config, logger=quiet_logger)

    assert summary.written is True
    assert summary.output_path == config.output_path
    assert summary.counts == {
        Category.BACKGROUND: 2,
        Category.ANTI_PATTERNS: 1,
    }
    assert summary.total_count == 3
    assert summary.fallback_count == 0
    assert summary.missing == ()
    assert config.output_path.read_text(encoding="utf-8") == (
        f"{BANNER}\n\n"
        "# Background\n\n"
        "# A\n\n\n"
        "# B\n\n\n"
        "# Anti-patterns\n\n"
        "# Z\n\n\n"
    )


def test_run_concatenation_is_repeatable(workspace, quiet_logger):
    root = workspace.create(
        {"src": {"background": {"a.mdx": "# A\n\nText\n"}}}
    )
    config = _config(root)

    executor.run_concatenation(config, logger=quiet_logger)
    first = config.output_path.read_bytes()
    executor.run_concatenation(config, logger=quiet_logger)

    assert config.output_path.read_bytes() == first


def test_load_fragments_orders_by_plain_name(workspace):
    root = workspace.create(
        {
            "bg": {
                "2-second.mdx": "two",
                "10-tenth.mdx": "ten",
                "B.mdx": "upper",
                "a.mdx": "lower",
            }
        }
    )

    fragments = executor.load_fragments(
        root / "bg", Category.BACKGROUND, "mdx"
    )

    assert [item.identifier for item in fragments] == [
        "10-tenth.mdx",
        "2-second.mdx",
        "B.mdx",
        "a.mdx",
    ]
    assert all(item.category is Category.BACKGROUND for item in fragments)


def test_load_fragments_skips_other_files_and_subdirectories(workspace):
    root = workspace.create(
        {
            "bg": {
                "keep.mdx": "keep",
                "notes.md": "skip",
                "nested": {"deep.mdx": "skip"},
            }
        }
    )

    fragments = executor.load_fragments(
        root / "bg", Category.BACKGROUND, ".mdx"
    )

    assert [item.identifier for item in fragments] == ["keep.mdx"]


def test_run_concatenation_skips_missing_directory(workspace, quiet_logger):
    root = workspace.create({"src": {"anti-patterns": {"x.mdx": "X\n"}}})
    config = _config(root)

    summary = executor.run_concatenation(config, logger=quiet_logger)

    assert summary.missing == (Category.BACKGROUND,)
    assert summary.counts[Category.BACKGROUND] == 0
    assert config.output_path.read_text(encoding="utf-8") == (
        f"{BANNER}\n\n# Anti-patterns\n\nX\n\n\n"
    )


def test_run_concatenation_writes_nothing_without_fragments(
    workspace, quiet_logger
):
    root = workspace.create(
        {"src": {"background": None, "anti-patterns": None}}
    )
    config = _config(root)

    summary = executor.run_concatenation(config, logger=quiet_logger)

    assert summary.written is False
    assert summary.total_count == 0
    assert not config.output_path.exists()


def test_run_concatenation_records_fallbacks(workspace, quiet_logger):
    root = workspace.create(
        {
            "src": {
                "background": {
                    "broken.mdx": "<Canvas>\n\nStill here\n",
                    "fine.mdx": "Fine\n",
                }
            }
        }
    )
    config = _config(root)

    summary = executor.run_concatenation(config, logger=quiet_logger)

    assert summary.fallbacks == ("background/broken.mdx",)
    document = config.output_path.read_text(encoding="utf-8")
    assert "<Canvas>\n\nStill here\n" in document
    assert "Fine\n" in document


def test_run_concatenation_uses_tooling_namespace(workspace, quiet_logger):
    root = workspace.create(
        {
            "src": {
                "background": {
                    "a.mdx": "<Open>\nimport { D } from '@acme/x';\nBody\n",
                }
            }
        }
    )
    config = _config(root, tooling_namespace="@acme")

    executor.run_concatenation(config, logger=quiet_logger)

    document = config.output_path.read_text(encoding="utf-8")
    assert "@acme" not in document
    assert "Body" in document


def test_run_concatenation_reports_write_failure(workspace, quiet_logger):
    root = workspace.create(
        {"src": {"background": {"a.mdx": "A\n"}}, "blocker": "file"}
    )
    config = _config(root, output_path=root / "blocker" / "out.md")

    with pytest.raises(executor.OutputWriteError):
        executor.run_concatenation(config, logger=quiet_logger)


def test_run_concatenation_reports_read_failure(
    workspace, quiet_logger, monkeypatch
):
    root = workspace.create({"src": {"background": {"a.mdx": "A\n"}}})
    config = _config(root)

    def broken_read(path):
        raise PermissionError(f"denied: {path}")

    monkeypatch.setattr(executor, "read_text_file", broken_read)

    with pytest.raises(executor.FragmentReadError):
        executor.run_concatenation(config, logger=quiet_logger)
    assert not config.output_path.exists()
