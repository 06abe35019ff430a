from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

_RULE_ID_RE = re.compile(r"^MD[0-9]{3}$")
_RULE_CODE_RE = re.compile(r"^[A-Za-z]+[0-9]+$")


def normalize_rule_id(value: str) -> str:
    # Rule codes (MD033, my001) are case-insensitive and canonicalized to upper
    # case; aliases such as `line-length` are kept verbatim.
    stripped = value.strip()
    return stripped.upper() if _RULE_CODE_RE.match(stripped) else stripped


@dataclass(frozen=True, slots=True)
class RuleMeta:
    rule_id: str
    title: str


# Rule ids shipped by the reference Markdown linter. Retired ids (MD008,
# MD015-MD017, MD042-MD045, MD048-MD054) are not listed.
_BUILTIN_TITLES: dict[str, str] = {
    "MD001": "Header levels should only increment by one level at a time",
    "MD002": "First header should be a top level header",
    "MD003": "Header style",
    "MD004": "Unordered list style",
    "MD005": "Inconsistent indentation for list items at the same level",
    "MD006": "Consider starting bulleted lists at the beginning of the line",
    "MD007": "Unordered list indentation",
    "MD009": "Trailing spaces",
    "MD010": "Hard tabs",
    "MD011": "Reversed link syntax",
    "MD012": "Multiple consecutive blank lines",
    "MD013": "Line length",
    "MD014": "Dollar signs used before commands without showing output",
    "MD018": "No space after hash on atx style header",
    "MD019": "Multiple spaces after hash on atx style header",
    "MD020": "No space inside hashes on closed atx style header",
    "MD021": "Multiple spaces inside hashes on closed atx style header",
    "MD022": "Headers should be surrounded by blank lines",
    "MD023": "Headers must start at the beginning of the line",
    "MD024": "Multiple headers with the same content",
    "MD025": "Multiple top level headers in the same document",
    "MD026": "Trailing punctuation in header",
    "MD027": "Multiple spaces after blockquote symbol",
    "MD028": "Blank line inside blockquote",
    "MD029": "Ordered list item prefix",
    "MD030": "Spaces after list markers",
    "MD031": "Fenced code blocks should be surrounded by blank lines",
    "MD032": "Lists should be surrounded by blank lines",
    "MD033": "Inline HTML",
    "MD034": "Bare URL used",
    "MD035": "Horizontal rule style",
    "MD036": "Emphasis used instead of a header",
    "MD037": "Spaces inside emphasis markers",
    "MD038": "Spaces inside code span elements",
    "MD039": "Spaces inside link text",
    "MD040": "Fenced code blocks should have a language specified",
    "MD041": "First line in file should be a top level header",
    "MD046": "Code block style",
    "MD047": "File should end with a single newline character",
    "MD055": "Table row doesn't begin/end with pipes",
    "MD056": "Table has inconsistent number of columns",
    "MD057": "Table has missing or invalid header separation (second row)",
}


@lru_cache(maxsize=1)
def builtin_rules() -> tuple[RuleMeta, ...]:
    rules: list[RuleMeta] = []
    for rule_id, title in _BUILTIN_TITLES.items():
        if not _RULE_ID_RE.match(rule_id):  # pragma: no cover
            raise RuntimeError(f"Rule id must match {_RULE_ID_RE.pattern}: {rule_id!r}")
        rules.append(RuleMeta(rule_id=rule_id, title=title))
    return tuple(sorted(rules, key=lambda r: r.rule_id))


def all_rules(extra_rule_ids: Iterable[str] = ()) -> tuple[RuleMeta, ...]:
    """
    Built-in rules plus project-declared extra ids (custom evaluator rules).

    Extras that duplicate a built-in id are ignored.
    """

    by_id = {r.rule_id: r for r in builtin_rules()}
    for raw in extra_rule_ids:
        rule_id = normalize_rule_id(raw)
        if rule_id and rule_id not in by_id:
            by_id[rule_id] = RuleMeta(rule_id=rule_id, title="(custom rule)")
    return tuple(by_id[k] for k in sorted(by_id))


def rule_ids(extra_rule_ids: Iterable[str] = ()) -> set[str]:
    return {r.rule_id for r in all_rules(extra_rule_ids)}


@lru_cache(maxsize=1)
def _rule_by_id_map() -> Mapping[str, RuleMeta]:
    return MappingProxyType({r.rule_id: r for r in builtin_rules()})


def rule_by_id(rule_id: str) -> RuleMeta | None:
    return _rule_by_id_map().get(normalize_rule_id(rule_id))
