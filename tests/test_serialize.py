from __future__ import annotations

import json

import pytest

from mdlstyle import __version__
from mdlstyle.config import load
from mdlstyle.directives import LINE_BREAKS
from mdlstyle.serialize import dump_style, format_value, render_json
from mdlstyle.types import ResolvedRuleSet


def test_dump_style_is_canonical(style_text: str) -> None:
    assert dump_style(load(style_text)) == (
        "all\n"
        "rule 'MD013', :line_length => 99999, :ignore_code_blocks => true\n"
        "exclude_rule 'MD024'\n"
        "exclude_rule 'MD033'\n"
        "exclude_rule 'MD055'\n"
        "exclude_rule 'MD057'\n"
    )


def test_dump_style_round_trips_through_load() -> None:
    source = (
        "rule 'MD003', :style => :atx\n"
        "rule 'MD013', :line_length => 1_000, :ratio => 0.5\n"
        "rule \"it's\", :note => \"tab\\there\", :quote => 'a\\'b'\n"
        "rule 'MD026'\n"
        "exclude_rule 'MD026'\n"
    )
    ruleset = load(source)
    assert load(dump_style(ruleset)) == ruleset


def test_dump_style_of_empty_ruleset_is_empty() -> None:
    assert dump_style(load("")) == ""


@pytest.mark.parametrize(
    ("value", "rendered"),
    [(True, "true"), (False, "false"), (42, "42"), (1.5, "1.5"), ("it's", "'it\\'s'")],
)
def test_format_value(value: object, rendered: str) -> None:
    assert format_value(value) == rendered  # type: ignore[arg-type]


def test_format_value_rejects_non_finite_float() -> None:
    with pytest.raises(ValueError):
        format_value(float("inf"))


def test_render_json_payload(style_text: str) -> None:
    data = json.loads(render_json(load(style_text)))
    assert data["tool"] == {"name": "mdlstyle", "version": __version__}
    assert data["default_enabled"] is True
    assert data["disabled"] == ["MD024", "MD033", "MD055", "MD057"]
    assert data["overrides"] == {"MD013": {"line_length": 99999, "ignore_code_blocks": True}}


@pytest.mark.parametrize("char", sorted(LINE_BREAKS | {"\t", "\\", '"', "'", "#", ","}))
def test_dump_style_round_trips_special_characters(char: str) -> None:
    ruleset = ResolvedRuleSet(
        overrides={
            "MD026": {"punctuation": f"a{char}b", "suffix": f"{char}end{char}"},
            f"custom{char}rule": {},
        },
    )
    rendered = dump_style(ruleset)
    assert len(rendered.splitlines()) == 2
    assert load(rendered) == ruleset


def test_dump_style_escapes_line_breaks_as_unicode() -> None:
    rendered = dump_style(ResolvedRuleSet(overrides={"MD026": {"punctuation": "a\u2028b\rc"}}))
    assert rendered == "rule 'MD026', :punctuation => \"a\\u2028b\\rc\"\n"
