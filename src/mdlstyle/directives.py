from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType

from mdlstyle.catalog import normalize_rule_id
from mdlstyle.types import OptionValue, RuleDirective


class DirectiveSyntaxError(ValueError):
    """Raised for a single malformed directive line (no line number attached)."""


@dataclass(frozen=True, slots=True)
class _Keyword:
    name: str
    rest: str


_KEYWORD_RE = re.compile(r"^(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?P<rest>.*)$")
_QUOTED_RE = re.compile(r"""^\s*(?P<quoted>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*")(?P<rest>.*)$""")
_OPTION_RE = re.compile(
    r"""
    ^\s*
    (?:
        :(?P<symbol_key>[A-Za-z_][A-Za-z0-9_]*)\s*=>
      | (?P<label_key>[A-Za-z_][A-Za-z0-9_]*):(?!:)
    )
    \s*(?P<value>.*?)\s*$
    """,
    re.VERBOSE,
)
_INT_RE = re.compile(r"^[-+]?\d(?:_?\d)*$")
_FLOAT_RE = re.compile(r"^[-+]?\d(?:_?\d)*(?:\.\d(?:_?\d)*)?(?:[eE][-+]?\d+)?$")
_SYMBOL_RE = re.compile(r"^:(?P<name>[A-Za-z_][A-Za-z0-9_]*[?!]?)$")

_DOUBLE_QUOTE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}
_UNICODE_ESCAPE_RE = re.compile(r"u([0-9A-Fa-f]{4})")

# Characters str.splitlines() treats as line boundaries.
LINE_BREAKS = frozenset("\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029")


def is_blank_or_comment(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def strip_comment(line: str) -> str:
    """
    Drop a trailing `# comment` that is not inside a quoted string.
    """

    quote: str | None = None
    escaped = False
    for idx, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if quote is not None:
            if char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in {"'", '"'}:
            quote = char
        elif char == "#":
            return line[:idx]
    return line


def parse_directive(line: str, *, line_number: int | None = None) -> RuleDirective | None:
    """
    Parse one style-file line.

    Returns None for blank and comment lines. Raises `DirectiveSyntaxError`
    when the line is not one of `all`, `exclude_rule '<id>'` or
    `rule '<id>'[, <options>]`.
    """

    if is_blank_or_comment(line):
        return None

    keyword = _split_keyword(strip_comment(line).strip())
    if keyword.name == "all":
        if keyword.rest.strip():
            raise DirectiveSyntaxError("`all` takes no arguments")
        return RuleDirective(kind="all", line=line_number)

    if keyword.name == "exclude_rule":
        rule_id, rest = _take_rule_id(keyword.rest, directive="exclude_rule")
        if rest.strip():
            raise DirectiveSyntaxError("`exclude_rule` takes exactly one rule id")
        return RuleDirective(kind="exclude_rule", rule_id=rule_id, line=line_number)

    if keyword.name == "rule":
        rule_id, rest = _take_rule_id(keyword.rest, directive="rule")
        options = _parse_options(rest)
        return RuleDirective(kind="rule", rule_id=rule_id, options=MappingProxyType(options), line=line_number)

    raise DirectiveSyntaxError(f"unrecognized directive {keyword.name!r}")


def _split_keyword(text: str) -> _Keyword:
    match = _KEYWORD_RE.match(text)
    if match is None:
        raise DirectiveSyntaxError("expected a directive keyword")
    rest = match.group("rest")
    if rest and not rest[0].isspace():
        # e.g. `rule('MD013')` or `all!`
        raise DirectiveSyntaxError(f"unrecognized directive {text.split()[0]!r}")
    return _Keyword(name=match.group("name"), rest=rest)


def _take_rule_id(text: str, *, directive: str) -> tuple[str, str]:
    if not text.strip():
        raise DirectiveSyntaxError(f"`{directive}` requires a rule id")
    match = _QUOTED_RE.match(text)
    if match is None:
        raise DirectiveSyntaxError(f"`{directive}` rule id must be a quoted string")
    rule_id = normalize_rule_id(unquote(match.group("quoted")))
    if not rule_id:
        raise DirectiveSyntaxError(f"`{directive}` requires a non-empty rule id")
    return rule_id, match.group("rest")


def _parse_options(text: str) -> dict[str, OptionValue]:
    options: dict[str, OptionValue] = {}
    stripped = text.strip()
    if not stripped:
        return options
    if not stripped.startswith(","):
        raise DirectiveSyntaxError("expected `,` between the rule id and its options")

    for raw in split_arguments(stripped[1:]):
        match = _OPTION_RE.match(raw)
        if match is None:
            raise DirectiveSyntaxError(f"malformed option {raw.strip()!r}; expected `:key => value`")
        key = match.group("symbol_key") or match.group("label_key")
        options[key] = parse_value(match.group("value"))
    return options


def split_arguments(text: str) -> list[str]:
    """
    Split a comma-separated argument list, ignoring commas inside quotes.
    """

    parts: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escaped = False
    for char in text:
        if escaped:
            escaped = False
            current.append(char)
            continue
        if quote is not None:
            if char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            current.append(char)
            continue
        if char in {"'", '"'}:
            quote = char
        elif char == ",":
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    if quote is not None:
        raise DirectiveSyntaxError("unterminated string")
    parts.append("".join(current))

    if any(not part.strip() for part in parts):
        raise DirectiveSyntaxError("empty option in argument list")
    return parts


def parse_value(raw: str) -> OptionValue:
    value = raw.strip()
    if not value:
        raise DirectiveSyntaxError("missing option value")
    if value == "true":
        return True
    if value == "false":
        return False
    if _INT_RE.match(value):
        return int(value.replace("_", ""))
    if _FLOAT_RE.match(value):
        return float(value.replace("_", ""))
    if value[0] in {"'", '"'}:
        quoted = _QUOTED_RE.match(value)
        if quoted is None or quoted.group("rest").strip():
            raise DirectiveSyntaxError(f"malformed string value {value!r}")
        return unquote(quoted.group("quoted"))
    symbol = _SYMBOL_RE.match(value)
    if symbol is not None:
        return symbol.group("name")
    raise DirectiveSyntaxError(f"malformed option value {value!r}")


def unquote(quoted: str) -> str:
    quote = quoted[0]
    body = quoted[1:-1]
    out: list[str] = []
    idx = 0
    while idx < len(body):
        char = body[idx]
        if char == "\\" and idx + 1 < len(body):
            nxt = body[idx + 1]
            if quote == "'":
                # Single-quoted strings only escape `\\` and `\'`.
                out.append(nxt if nxt in {"\\", "'"} else char + nxt)
            else:
                codepoint = _UNICODE_ESCAPE_RE.match(body, idx + 1)
                if codepoint is not None:
                    out.append(chr(int(codepoint.group(1), 16)))
                    idx = codepoint.end()
                    continue
                out.append(_DOUBLE_QUOTE_ESCAPES.get(nxt, nxt))
            idx += 2
            continue
        out.append(char)
        idx += 1
    return "".join(out)
