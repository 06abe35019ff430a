from __future__ import annotations

import json
import math
from collections.abc import Mapping

from mdlstyle import __version__
from mdlstyle.directives import LINE_BREAKS
from mdlstyle.types import OptionValue, ResolvedRuleSet

_NAMED_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def dump_style(ruleset: ResolvedRuleSet) -> str:
    """
    Render a rule set back to style-file directives.

    Output order is canonical (`all`, then `rule` lines, then `exclude_rule`
    lines, each sorted by id), so loading the result gives an equal rule set.
    """

    lines: list[str] = []
    if ruleset.default_enabled:
        lines.append("all")
    for rule_id in sorted(ruleset.overrides):
        lines.append(_render_rule(rule_id, ruleset.overrides[rule_id]))
    for rule_id in sorted(ruleset.disabled):
        lines.append(f"exclude_rule {_quote(rule_id)}")
    return "\n".join(lines) + "\n" if lines else ""


def _render_rule(rule_id: str, options: Mapping[str, OptionValue]) -> str:
    parts = [f"rule {_quote(rule_id)}"]
    for key, value in options.items():
        parts.append(f":{key} => {format_value(value)}")
    return ", ".join(parts)


def format_value(value: OptionValue) -> str:
    # bool first: bool is a subclass of int.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Option value cannot be rendered: {value!r}")
        return repr(value)
    return _quote(value)


def _quote(value: str) -> str:
    # Style files are split with str.splitlines(), so every character it treats
    # as a line boundary must be escaped inside double quotes.
    if any(char in LINE_BREAKS or char == "\t" for char in value):
        return '"' + "".join(_escape_double_quoted(char) for char in value) + '"'
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _escape_double_quoted(char: str) -> str:
    if char in _NAMED_ESCAPES:
        return _NAMED_ESCAPES[char]
    if char in LINE_BREAKS:
        return f"\\u{ord(char):04x}"
    return char


def ruleset_to_dict(ruleset: ResolvedRuleSet) -> dict[str, object]:
    return {
        "default_enabled": ruleset.default_enabled,
        "disabled": sorted(ruleset.disabled),
        "overrides": {rule_id: dict(ruleset.overrides[rule_id]) for rule_id in sorted(ruleset.overrides)},
    }


def render_json(ruleset: ResolvedRuleSet) -> str:
    payload = {
        "tool": {"name": "mdlstyle", "version": __version__},
        **ruleset_to_dict(ruleset),
    }
    return json.dumps(payload, indent=2, sort_keys=False)
