from __future__ import annotations

import pytest

from mdlstyle.directives import (
    DirectiveSyntaxError,
    parse_directive,
    parse_value,
    split_arguments,
    strip_comment,
)


@pytest.mark.parametrize("line", ["", "   ", "# comment", "  # indented comment", "#!/usr/bin/ruby"])
def test_blank_and_comment_lines_yield_nothing(line: str) -> None:
    assert parse_directive(line) is None


def test_all_directive() -> None:
    directive = parse_directive("all", line_number=3)
    assert directive is not None
    assert directive.kind == "all"
    assert directive.rule_id is None
    assert directive.options is None
    assert directive.line == 3


def test_exclude_rule_accepts_both_quote_styles() -> None:
    single = parse_directive("exclude_rule 'MD033'")
    double = parse_directive('exclude_rule "MD033"')
    assert single is not None and double is not None
    assert single.kind == double.kind == "exclude_rule"
    assert single.rule_id == double.rule_id == "MD033"


def test_rule_with_symbol_key_options() -> None:
    directive = parse_directive("rule 'MD013', :line_length => 99999, :ignore_code_blocks => true")
    assert directive is not None
    assert directive.kind == "rule"
    assert directive.rule_id == "MD013"
    assert dict(directive.options or {}) == {"line_length": 99999, "ignore_code_blocks": True}


def test_rule_with_label_options_and_symbol_value() -> None:
    directive = parse_directive("rule 'MD003', style: :atx")
    assert directive is not None
    assert dict(directive.options or {}) == {"style": "atx"}


def test_rule_without_options_has_empty_mapping() -> None:
    directive = parse_directive("rule 'MD013'")
    assert directive is not None
    assert directive.options is not None
    assert dict(directive.options) == {}


def test_rule_id_is_kept_verbatim() -> None:
    directive = parse_directive("exclude_rule ' line-length '")
    assert directive is not None
    assert directive.rule_id == "line-length"


def test_trailing_comment_is_ignored() -> None:
    directive = parse_directive("exclude_rule 'MD009'  # allow trailing spaces")
    assert directive is not None
    assert directive.rule_id == "MD009"


def test_hash_inside_string_is_not_a_comment() -> None:
    directive = parse_directive("rule 'MD026', :punctuation => '.,;:#'")
    assert directive is not None
    assert dict(directive.options or {}) == {"punctuation": ".,;:#"}


@pytest.mark.parametrize(
    ("line", "fragment"),
    [
        ("enable_everything", "unrecognized directive"),
        ("all 'MD001'", "takes no arguments"),
        ("exclude_rule", "requires a rule id"),
        ("exclude_rule ''", "non-empty rule id"),
        ("exclude_rule MD033", "quoted string"),
        ("exclude_rule 'MD033', 'MD024'", "exactly one rule id"),
        ("rule", "requires a rule id"),
        ("rule 'MD013' :line_length => 80", "expected `,`"),
        ("rule 'MD013', line_length", "malformed option"),
        ("rule 'MD013', :line_length => nil", "malformed option value"),
        ("rule 'MD013', :line_length =>", "missing option value"),
        ("rule 'MD013', :line_length => 80,", "empty option"),
        ("rule 'MD013', :style => 'atx", "unterminated string"),
        ("rule('MD013')", "unrecognized directive"),
        ("=> 1", "expected a directive keyword"),
    ],
)
def test_malformed_lines_raise(line: str, fragment: str) -> None:
    with pytest.raises(DirectiveSyntaxError) as excinfo:
        parse_directive(line)
    assert fragment in str(excinfo.value)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("99999", 99999),
        ("-1", -1),
        ("1_000", 1000),
        ("1.5", 1.5),
        ("1e3", 1000.0),
        ("true", True),
        ("false", False),
        ("'it\\'s'", "it's"),
        ('"tab\\there"', "tab\there"),
        (":consistent", "consistent"),
    ],
)
def test_parse_value_scalars(raw: str, expected: object) -> None:
    value = parse_value(raw)
    assert value == expected
    assert type(value) is type(expected)


@pytest.mark.parametrize("raw", ["nil", "[1, 2]", "atx", "'a' 'b'", ""])
def test_parse_value_rejects_non_scalars(raw: str) -> None:
    with pytest.raises(DirectiveSyntaxError):
        parse_value(raw)


def test_split_arguments_ignores_commas_in_strings() -> None:
    assert split_arguments(" :a => 'x,y', :b => 2") == [" :a => 'x,y'", " :b => 2"]


def test_strip_comment_respects_escaped_quotes() -> None:
    assert strip_comment("rule 'it\\'s # not', :a => 1 # real") == "rule 'it\\'s # not', :a => 1 "
