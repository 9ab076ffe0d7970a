from __future__ import annotations

import pytest

from mdx_prompt.core import config as core_config

DEFAULTS = {
    "paths": {"root": None, "output": "a.md"},
    "execution": {"extension": "mdx", "strict": False},
}


def test_load_toml_reads_tables(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text('[paths]\nroot = "."\n', encoding="utf-8")

    assert core_config.load_toml(path) == {"paths": {"root": "."}}


def test_load_toml_missing_file(tmp_path):
    with pytest.raises(core_config.TomlConfigError, match="not found"):
        core_config.load_toml(tmp_path / "absent.toml")


def test_load_toml_invalid_document(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("key = \n", encoding="utf-8")

    with pytest.raises(core_config.TomlConfigError, match="Invalid TOML"):
        core_config.load_toml(path)


def test_apply_overrides_returns_merged_copy():
    merged = core_config.apply_overrides(
        DEFAULTS, {"paths": {"root": "..", "output": "b.md"}}
    )

    assert merged == {
        "paths": {"root": "..", "output": "b.md"},
        "execution": {"extension": "mdx", "strict": False},
    }
    assert DEFAULTS["paths"] == {"root": None, "output": "a.md"}


def test_apply_overrides_reports_dotted_unknown_key():
    with pytest.raises(core_config.TomlConfigError, match="'paths.extra'"):
        core_config.apply_overrides(DEFAULTS, {"paths": {"extra": 1}})


def test_apply_overrides_requires_tables_for_sections():
    with pytest.raises(core_config.TomlConfigError, match="must be a table"):
        core_config.apply_overrides(DEFAULTS, {"paths": "oops"})


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        (
            {"execution": {"extension": 5}},
            "extension' must be a string, found int",
        ),
        ({"paths": {"root": ["a"]}}, "root' must be a string, found list"),
        ({"execution": {"strict": "yes"}}, "strict' must be a boolean"),
    ],
)
def test_apply_overrides_checks_value_types(overrides, message):
    with pytest.raises(core_config.TomlConfigError, match=message):
        core_config.apply_overrides(DEFAULTS, overrides)


def test_write_config_file_respects_overwrite(tmp_path):
    target = tmp_path / "nested" / "config.toml"

    written = core_config.write_config_file(target, "a = 1\n")
    assert written == target
    assert target.read_text(encoding="utf-8") == "a = 1\n"

    with pytest.raises(core_config.TomlConfigError, match="already exists"):
        core_config.write_config_file(target, "a = 2\n")
    assert target.read_text(encoding="utf-8") == "a = 1\n"

    core_config.write_config_file(target, "a = 2\n", overwrite=True)
    assert target.read_text(encoding="utf-8") == "a = 2\n"
