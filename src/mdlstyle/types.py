from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

DirectiveKind = Literal["all", "exclude_rule", "rule"]
OptionValue = str | int | float | bool
RuleId = str


@dataclass(frozen=True, slots=True)
class RuleDirective:
    kind: DirectiveKind
    rule_id: RuleId | None = None
    options: Mapping[str, OptionValue] | None = None
    line: int | None = None  # 1-based


@dataclass(frozen=True, slots=True)
class ResolvedRuleSet:
    """
    Final outcome of applying every directive of a style file in order.

    `disabled` and the keys of `overrides` may overlap; exclusion wins when the
    rule set is evaluated. Comparable but not hashable: `overrides` is a
    read-only mapping proxy.
    """

    default_enabled: bool = False
    disabled: frozenset[RuleId] = frozenset()
    overrides: Mapping[RuleId, Mapping[str, OptionValue]] = field(default_factory=lambda: MappingProxyType({}))

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True, slots=True)
class Violation:
    rule_id: RuleId
    message: str
    line: int | None = None  # 1-based
    path: str | None = None
