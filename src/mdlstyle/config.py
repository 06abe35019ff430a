from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from mdlstyle.directives import DirectiveSyntaxError, parse_directive
from mdlstyle.types import OptionValue, ResolvedRuleSet, RuleDirective, RuleId

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a style file or the `[tool.mdlstyle]` table is invalid."""


class ConfigParseError(ConfigError):
    """Raised when a style-file line is not a valid directive."""

    def __init__(self, *, line_number: int, line: str, reason: str, path: Path | None = None) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        self.path = path
        location = f"{path}:{line_number}" if path is not None else f"line {line_number}"
        super().__init__(f"{location}: {reason}: {line.rstrip()!r}")


DEFAULT_STYLE_FILENAMES: tuple[str, ...] = ("markdownlint.rb", ".markdownlint.rb")
DEFAULT_STRICT = False


@dataclass(frozen=True, slots=True)
class ProjectSettings:
    style: str | None = None
    strict: bool = DEFAULT_STRICT
    extra_rules: tuple[str, ...] = ()


def parse(source: str, *, path: Path | None = None) -> list[RuleDirective]:
    directives: list[RuleDirective] = []
    for line_number, line in enumerate(source.splitlines(), start=1):
        try:
            directive = parse_directive(line, line_number=line_number)
        except DirectiveSyntaxError as exc:
            raise ConfigParseError(line_number=line_number, line=line, reason=str(exc), path=path) from exc
        if directive is not None:
            directives.append(directive)
    return directives


def resolve(directives: Iterable[RuleDirective]) -> ResolvedRuleSet:
    """
    Apply directives in order and freeze the result.

    Options for a repeated `rule` id are merged key by key, later values
    winning. Exclusion is monotonic: configuring a rule after it was excluded
    does not enable it again.
    """

    default_enabled = False
    disabled: set[RuleId] = set()
    overrides: dict[RuleId, dict[str, OptionValue]] = {}

    for directive in directives:
        if directive.kind == "all":
            default_enabled = True
        elif directive.kind == "exclude_rule" and directive.rule_id is not None:
            disabled.add(directive.rule_id)
        elif directive.rule_id is not None:
            if directive.rule_id in disabled:
                logger.debug(
                    "line %s: rule %s configured after exclude_rule; it stays excluded",
                    directive.line,
                    directive.rule_id,
                )
            overrides.setdefault(directive.rule_id, {}).update(directive.options or {})

    return ResolvedRuleSet(
        default_enabled=default_enabled,
        disabled=frozenset(disabled),
        overrides=MappingProxyType({rule_id: MappingProxyType(opts) for rule_id, opts in overrides.items()}),
    )


def load(source: str, *, path: Path | None = None) -> ResolvedRuleSet:
    """
    Parse style-file text into a `ResolvedRuleSet`.

    Raises `ConfigParseError` on the first malformed line; nothing is returned
    for a partially valid source.
    """

    return resolve(parse(source, path=path))


def load_file(path: Path | str) -> ResolvedRuleSet:
    style_path = Path(path)
    try:
        text = style_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read style file {style_path}: {exc}") from exc

    ruleset = load(text, path=style_path)
    logger.debug(
        "loaded %s: all=%s, %d excluded, %d configured",
        style_path,
        ruleset.default_enabled,
        len(ruleset.disabled),
        len(ruleset.overrides),
    )
    return ruleset


def load_settings(project_dir: Path | str = ".") -> ProjectSettings:
    """
    Load `[tool.mdlstyle]` from `pyproject.toml` within `project_dir`.

    If no file / no table exists, returns defaults.
    """

    pyproject_path = Path(project_dir) / "pyproject.toml"
    if not pyproject_path.exists():
        return ProjectSettings()

    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {exc}") from exc

    tool_table = data.get("tool", {})
    if not isinstance(tool_table, dict):
        return ProjectSettings()

    table = tool_table.get("mdlstyle", {})
    if not isinstance(table, dict) or not table:
        return ProjectSettings()

    return _parse_settings_table(table)


def _parse_settings_table(table: dict[str, Any]) -> ProjectSettings:
    style = table.get("style")
    if style is not None:
        if not isinstance(style, str):
            raise ConfigError("`tool.mdlstyle.style` must be a string path.")
        style = style.strip() or None

    strict = table.get("strict", DEFAULT_STRICT)
    if not isinstance(strict, bool):
        raise ConfigError("`tool.mdlstyle.strict` must be a boolean.")

    extra_raw = table.get("extra-rules", table.get("extra_rules", []))
    if not isinstance(extra_raw, list) or any(not isinstance(v, str) for v in extra_raw):
        raise ConfigError("`tool.mdlstyle.extra-rules` must be a list of strings.")
    extra_rules = tuple(v.strip() for v in extra_raw if v.strip())

    return ProjectSettings(style=style, strict=strict, extra_rules=extra_rules)


def find_style_file(project_dir: Path | str = ".", settings: ProjectSettings | None = None) -> Path | None:
    """
    Locate the style file for a project.

    An explicit `tool.mdlstyle.style` is returned even when it does not exist,
    so the caller reports the missing file instead of silently falling back.
    """

    root = Path(project_dir)
    settings = settings if settings is not None else load_settings(root)
    if settings.style is not None:
        configured = Path(settings.style)
        return configured if configured.is_absolute() else root / configured

    for name in DEFAULT_STYLE_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None
