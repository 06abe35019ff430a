from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Protocol

from mdlstyle.catalog import normalize_rule_id
from mdlstyle.types import OptionValue, ResolvedRuleSet, RuleId, Violation

logger = logging.getLogger(__name__)


class Evaluator(Protocol):
    """Anything that can check a Markdown document against a rule set."""

    def evaluate(self, document: str, ruleset: ResolvedRuleSet) -> list[Violation]: ...


def referenced_rule_ids(ruleset: ResolvedRuleSet) -> set[RuleId]:
    return set(ruleset.disabled) | set(ruleset.overrides)


def validate_rule_ids(ruleset: ResolvedRuleSet, known_ids: Iterable[RuleId]) -> tuple[RuleId, ...]:
    """
    Return referenced rule ids the evaluator does not know, sorted.

    Unknown ids are reported as warnings only; the rule set stays usable.
    """

    known = {normalize_rule_id(rule_id) for rule_id in known_ids}
    unknown = tuple(sorted(referenced_rule_ids(ruleset) - known))
    for rule_id in unknown:
        logger.warning("unknown rule id %r in style configuration", rule_id)
    return unknown


def enabled_rule_ids(ruleset: ResolvedRuleSet, available_ids: Iterable[RuleId]) -> set[RuleId]:
    """
    Resolve which rules an evaluator should run.

    - `all` enables every available rule.
    - Without `all`, only rules named by a `rule` directive are enabled.
    - `exclude_rule` always wins.
    """

    available = {normalize_rule_id(rule_id) for rule_id in available_ids}
    if ruleset.default_enabled:
        enabled = set(available)
    else:
        enabled = set(ruleset.overrides) & available
    enabled.difference_update(ruleset.disabled)
    return enabled


def is_rule_enabled(ruleset: ResolvedRuleSet, rule_id: RuleId) -> bool:
    rule_id = normalize_rule_id(rule_id)
    if rule_id in ruleset.disabled:
        return False
    return ruleset.default_enabled or rule_id in ruleset.overrides


def rule_options(ruleset: ResolvedRuleSet, rule_id: RuleId) -> Mapping[str, OptionValue] | None:
    """Options for an enabled rule (empty when unconfigured), None when it is disabled."""

    if not is_rule_enabled(ruleset, rule_id):
        return None
    return ruleset.overrides.get(normalize_rule_id(rule_id), {})


def run_evaluator(evaluator: Evaluator, document: str, ruleset: ResolvedRuleSet) -> list[Violation]:
    violations = evaluator.evaluate(document, ruleset)
    kept = [v for v in violations if is_rule_enabled(ruleset, v.rule_id)]
    dropped = len(violations) - len(kept)
    if dropped:
        logger.debug("dropped %d violation(s) for rules not enabled by the style", dropped)
    return kept
