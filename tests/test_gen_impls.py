"""Tests for scripts/getset_codegen/gen_impls.py and config.py.

Acceptance criteria covered:
- Generated region replaced, hand-written code above and below preserved.
- MarkerError on missing / malformed markers; --init appends markers.
- Unified diff printed to stdout when content changes.
- Nothing written when generation fails.
- CLI exit codes, --check drift detection, env var / flag precedence.
"""

from __future__ import annotations

import pathlib
import shutil

import pytest

from getset_codegen.config import GeneratorConfig
from getset_codegen.errors import InvalidAttributeError
from getset_codegen.gen_impls import (
    GENERATED_BEGIN,
    GENERATED_END,
    MarkerError,
    config_from_args,
    generate_impls,
    main,
    parse_args,
    render_types,
)
from getset_codegen.loader import load_types

# ─── Helpers ──────────────────────────────────────────────────────────────────

_HEAD = "pub struct Foo<T> {\n    private: T,\n}\n\n"
_TAIL = "\nfn main() {}\n"

_SIMPLE_YAML = """\
types:
  - name: Point
    fields:
      - {name: x, type: i32, getset: "get_copy, set"}
"""


def _target(tmp_path: pathlib.Path, content: str) -> pathlib.Path:
    p = tmp_path / "foo.rs"
    p.write_text(content, encoding="utf-8")
    return p


def _with_markers(inner: str = "// stale\n") -> str:
    return f"{_HEAD}{GENERATED_BEGIN}\n{inner}{GENERATED_END}\n{_TAIL}"


def _simple_input(tmp_path: pathlib.Path, text: str = _SIMPLE_YAML) -> pathlib.Path:
    p = tmp_path / "types.yaml"
    p.write_text(text, encoding="utf-8")
    return p


# ─── Rendering ────────────────────────────────────────────────────────────────


class TestRenderTypes:
    def test_no_target_returns_rendered(self, foo_yaml, foo_expected: str) -> None:
        assert generate_impls(foo_yaml) == foo_expected

    def test_types_separated_by_blank_line(self, tmp_path: pathlib.Path) -> None:
        src = _simple_input(tmp_path, _SIMPLE_YAML + "  - name: Unit\n")
        text = render_types(load_types(src))
        assert text.endswith("}\n\nimpl Unit {\n}\n")


# ─── Splicing ─────────────────────────────────────────────────────────────────


class TestSplice:
    def test_region_replaced_and_rest_preserved(self, tmp_path, foo_yaml, foo_expected) -> None:
        target = _target(tmp_path, _with_markers())
        result = generate_impls(foo_yaml, target, diff=False, write=False)
        assert result == f"{_HEAD}{GENERATED_BEGIN}\n{foo_expected}{GENERATED_END}\n{_TAIL}"
        assert "// stale" not in result

    def test_write_false_leaves_file(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _with_markers())
        generate_impls(foo_yaml, target, diff=False, write=False)
        assert target.read_text(encoding="utf-8") == _with_markers()

    def test_write_updates_file(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _with_markers())
        result = generate_impls(foo_yaml, target, diff=False)
        assert target.read_text(encoding="utf-8") == result

    def test_second_run_is_noop(self, tmp_path, foo_yaml, capsys) -> None:
        target = _target(tmp_path, _with_markers())
        first = generate_impls(foo_yaml, target, diff=False)
        second = generate_impls(foo_yaml, target, diff=True)
        assert first == second
        assert capsys.readouterr().out == ""

    def test_indented_markers_accepted(self, tmp_path, foo_yaml) -> None:
        content = f"mod inner {{\n    {GENERATED_BEGIN}\n    {GENERATED_END}\n}}\n"
        target = _target(tmp_path, content)
        result = generate_impls(foo_yaml, target, diff=False, write=False)
        assert result.startswith(f"mod inner {{\n    {GENERATED_BEGIN}\nimpl<T> Foo<T>\n")
        assert result.endswith(f"}}\n    {GENERATED_END}\n}}\n")


class TestMarkers:
    def test_missing_markers(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _HEAD)
        with pytest.raises(MarkerError, match="Missing markers"):
            generate_impls(foo_yaml, target, diff=False, write=False)

    def test_missing_end(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, f"{GENERATED_BEGIN}\n")
        with pytest.raises(MarkerError, match="is missing"):
            generate_impls(foo_yaml, target, diff=False, write=False)

    def test_missing_begin(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, f"{GENERATED_END}\n")
        with pytest.raises(MarkerError, match="is missing"):
            generate_impls(foo_yaml, target, diff=False, write=False)

    def test_reversed(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, f"{GENERATED_END}\n{GENERATED_BEGIN}\n")
        with pytest.raises(MarkerError, match="appears before"):
            generate_impls(foo_yaml, target, diff=False, write=False)

    def test_duplicate_begin(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, f"{GENERATED_BEGIN}\n{GENERATED_BEGIN}\n{GENERATED_END}\n")
        with pytest.raises(MarkerError, match="duplicate BEGIN"):
            generate_impls(foo_yaml, target, diff=False, write=False)

    def test_marker_error_is_value_error(self) -> None:
        assert issubclass(MarkerError, ValueError)

    def test_init_appends_markers(self, tmp_path, foo_yaml, foo_expected) -> None:
        target = _target(tmp_path, _HEAD)
        result = generate_impls(foo_yaml, target, diff=False, init=True)
        assert result == (
            _HEAD.rstrip("\n") + f"\n\n{GENERATED_BEGIN}\n{foo_expected}{GENERATED_END}\n"
        )
        assert target.read_text(encoding="utf-8") == result

    def test_init_on_empty_file(self, tmp_path, foo_yaml, foo_expected) -> None:
        target = _target(tmp_path, "")
        result = generate_impls(foo_yaml, target, diff=False, init=True)
        assert result == f"{GENERATED_BEGIN}\n{foo_expected}{GENERATED_END}\n"


class TestDiffAndFailure:
    def test_diff_printed(self, tmp_path, foo_yaml, capsys) -> None:
        target = _target(tmp_path, _with_markers())
        generate_impls(foo_yaml, target, write=False)
        out = capsys.readouterr().out
        assert out.startswith(f"--- {target}\n+++ {target} (generated)\n")
        assert "-// stale" in out
        assert "+impl<T> Foo<T>" in out

    def test_failed_generation_writes_nothing(self, tmp_path) -> None:
        src = _simple_input(tmp_path, _SIMPLE_YAML.replace("get_copy, set", "get_copy, bogus"))
        target = _target(tmp_path, _with_markers())
        with pytest.raises(InvalidAttributeError):
            generate_impls(src, target, diff=False)
        assert target.read_text(encoding="utf-8") == _with_markers()


# ─── CLI ──────────────────────────────────────────────────────────────────────


class TestCli:
    def test_stdout(self, foo_yaml, foo_expected, capsys) -> None:
        assert main([str(foo_yaml)]) == 0
        assert capsys.readouterr().out == foo_expected

    def test_output_file(self, tmp_path, foo_yaml, foo_expected) -> None:
        target = _target(tmp_path, _with_markers())
        assert main([str(foo_yaml), "-o", str(target), "--no-diff"]) == 0
        assert foo_expected in target.read_text(encoding="utf-8")

    def test_check_reports_drift_without_writing(self, tmp_path, foo_yaml, capsys) -> None:
        target = _target(tmp_path, _with_markers())
        assert main([str(foo_yaml), "-o", str(target), "--check"]) == 1
        assert target.read_text(encoding="utf-8") == _with_markers()
        assert "out of date" in capsys.readouterr().err

    def test_check_passes_when_current(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _with_markers())
        assert main([str(foo_yaml), "-o", str(target), "--no-diff"]) == 0
        assert main([str(foo_yaml), "-o", str(target), "--check", "--no-diff"]) == 0

    def test_check_needs_output(self, foo_yaml, capsys) -> None:
        assert main([str(foo_yaml), "--check"]) == 2
        assert "--check needs --output" in capsys.readouterr().err

    def test_generation_error_exit_1(self, tmp_path, capsys) -> None:
        src = _simple_input(tmp_path, _SIMPLE_YAML.replace("get_copy, set", "skip(all)"))
        assert main([str(src)]) == 1
        assert "ERROR:" in capsys.readouterr().err

    def test_marker_error_exit_1(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _HEAD)
        assert main([str(foo_yaml), "-o", str(target)]) == 1

    def test_missing_input_exit_2(self, tmp_path) -> None:
        assert main([str(tmp_path / "absent.yaml")]) == 2

    def test_missing_output_exit_2(self, tmp_path, foo_yaml) -> None:
        assert main([str(foo_yaml), "-o", str(tmp_path / "absent.rs")]) == 2

    def test_init_flag(self, tmp_path, foo_yaml) -> None:
        target = _target(tmp_path, _HEAD)
        assert main([str(foo_yaml), "-o", str(target), "--init", "--no-diff"]) == 0
        assert GENERATED_BEGIN in target.read_text(encoding="utf-8")

    def test_no_inline_flag(self, foo_yaml, capsys) -> None:
        assert main([str(foo_yaml), "--no-inline"]) == 0
        assert "#[inline(always)]" not in capsys.readouterr().out

    def test_distinct_super_flag(self, foo_yaml, capsys) -> None:
        assert main([str(foo_yaml), "--distinct-super"]) == 0
        assert "pub(super) fn public_mut(&mut self)" in capsys.readouterr().out

    def test_bad_env_value_exit_2(self, foo_yaml, monkeypatch) -> None:
        monkeypatch.setenv("GETSET_INLINE", "maybe")
        assert main([str(foo_yaml)]) == 2

    def test_malformed_definition_exit_2(self, tmp_path, capsys) -> None:
        src = _simple_input(tmp_path, "types:\n  - fields: []\n")
        assert main([str(src)]) == 2
        assert "Missing required key 'name'" in capsys.readouterr().err

    def test_invalid_yaml_exit_2(self, tmp_path) -> None:
        src = _simple_input(tmp_path, "types: [unclosed")
        assert main([str(src)]) == 2

    def test_unreadable_attribute_text_exit_2(self, tmp_path) -> None:
        src = _simple_input(tmp_path, _SIMPLE_YAML.replace("get_copy, set", "get_copy("))
        assert main([str(src)]) == 2

    def test_load_error_leaves_target_untouched(self, tmp_path) -> None:
        src = _simple_input(tmp_path, "types:\n  - fields: []\n")
        target = _target(tmp_path, _with_markers())
        assert main([str(src), "-o", str(target)]) == 2
        assert target.read_text(encoding="utf-8") == _with_markers()

    def test_unannotated_fields_need_flag(self, tmp_path, capsys) -> None:
        yaml_text = (
            "types:\n"
            "  - name: S\n"
            "    getset: get_copy\n"
            "    fields:\n"
            "      - {name: a, type: u8}\n"
            "      - {name: b, type: u8, getset: set}\n"
        )
        src = _simple_input(tmp_path, yaml_text)
        assert main([str(src)]) == 0
        out = capsys.readouterr().out
        assert "fn a(" not in out
        assert "fn b(&self) -> u8" in out
        assert main([str(src), "--inherit-unannotated"]) == 0
        assert "fn a(&self) -> u8" in capsys.readouterr().out

    def test_copy_of_example_round_trips(self, tmp_path, foo_yaml) -> None:
        src = tmp_path / "copy.yaml"
        shutil.copy(foo_yaml, src)
        target = _target(tmp_path, _with_markers(""))
        assert main([str(src), "-o", str(target), "--no-diff"]) == 0
        assert main([str(src), "-o", str(target), "--check"]) == 0


# ─── Configuration ────────────────────────────────────────────────────────────


class TestConfig:
    def test_defaults(self) -> None:
        config = GeneratorConfig.from_env({})
        assert config == GeneratorConfig()
        assert config.inline is True
        assert config.distinct_super_visibility is False
        assert config.inherit_unannotated is False

    def test_env_values(self) -> None:
        config = GeneratorConfig.from_env(
            {
                "GETSET_INLINE": "0",
                "GETSET_DISTINCT_SUPER": "true",
                "GETSET_INHERIT_UNANNOTATED": "yes",
            }
        )
        assert config == GeneratorConfig(
            inline=False, distinct_super_visibility=True, inherit_unannotated=True
        )

    def test_invalid_env_value(self) -> None:
        with pytest.raises(ValueError, match="GETSET_INLINE"):
            GeneratorConfig.from_env({"GETSET_INLINE": "maybe"})

    def test_flags_unset_by_default(self) -> None:
        args = parse_args(["in.yaml"])
        assert args.inline is None
        assert args.distinct_super is None
        assert args.inherit_unannotated is None
        assert args.diff is True

    def test_env_used_without_flag(self, monkeypatch) -> None:
        monkeypatch.setenv("GETSET_DISTINCT_SUPER", "1")
        assert config_from_args(parse_args(["in.yaml"])).distinct_super_visibility is True

    def test_flag_wins_over_env(self, monkeypatch) -> None:
        monkeypatch.setenv("GETSET_INLINE", "1")
        monkeypatch.setenv("GETSET_INHERIT_UNANNOTATED", "1")
        config = config_from_args(parse_args(["in.yaml", "--no-inline", "--require-annotation"]))
        assert config.inline is False
        assert config.inherit_unannotated is False

    def test_inherit_flag_wins_over_env(self, monkeypatch) -> None:
        monkeypatch.setenv("GETSET_INHERIT_UNANNOTATED", "0")
        config = config_from_args(parse_args(["in.yaml", "--inherit-unannotated"]))
        assert config.inherit_unannotated is True

    def test_inherit_flags_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["in.yaml", "--inherit-unannotated", "--require-annotation"])
