"""In-memory ordered rule collection and its lifecycle transitions."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from dataclasses import replace
from typing import Callable, Iterable, Optional

from rule_screening.errors import RuleIndexError, RuleNotFoundError, ValidationError
from rule_screening.rules.models import EvaluationResult, LifecycleState, Outcome, Rule

logger = logging.getLogger(__name__)


def new_rule_id() -> str:
    return uuid.uuid4().hex


class RuleStore:
    """Owns the rule sequence.

    Every public mutation replaces at most one entry of the sequence and does
    not suspend, so interleaved evaluation coroutines only ever observe whole
    updates. Evaluations of the same rule are tracked with tickets: only the
    most recent ``set_evaluating`` call may resolve the rule.
    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        id_factory: Callable[[], str] = new_rule_id,
    ) -> None:
        self._id_factory = id_factory
        self._rules: list[Rule] = []
        self._tickets: dict[str, int] = {}
        self._ticket_counter = 0
        if rules is not None:
            self.restore(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def rules(self) -> list[Rule]:
        return list(self._rules)

    def get(self, rule_id: str) -> Rule | None:
        index = self.index_of(rule_id)
        if index is None:
            return None
        return self._rules[index]

    def require(self, rule_id: str) -> Rule:
        rule = self.get(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def index_of(self, rule_id: str) -> int | None:
        for index, rule in enumerate(self._rules):
            if rule.id == rule_id:
                return index
        return None

    def resolve(self, reference: str) -> Rule:
        """Find a rule by id, unique id prefix, or 1-based position."""
        ref = reference.strip()
        exact = self.get(ref)
        if exact is not None:
            return exact
        if ref.isdigit():
            position = int(ref)
            if 1 <= position <= len(self._rules):
                return self._rules[position - 1]
            raise RuleNotFoundError(reference)
        matches = [rule for rule in self._rules if ref and rule.id.startswith(ref)]
        if len(matches) != 1:
            raise RuleNotFoundError(reference)
        return matches[0]

    def add(self, title: str, definition: str = "") -> str:
        normalized_title = title.strip()
        if not normalized_title:
            raise ValidationError("title", "Rule title cannot be empty")

        rule_id = self._id_factory()
        while self.get(rule_id) is not None:
            rule_id = self._id_factory()

        self._rules = [
            *self._rules,
            Rule(id=rule_id, title=normalized_title, definition=definition),
        ]
        logger.debug("Added rule %s (%s)", rule_id, normalized_title)
        return rule_id

    def remove(self, rule_id: str) -> bool:
        kept = [rule for rule in self._rules if rule.id != rule_id]
        if len(kept) == len(self._rules):
            return False
        self._rules = kept
        self._tickets.pop(rule_id, None)
        logger.debug("Removed rule %s", rule_id)
        return True

    def reorder(self, from_index: int, to_index: int) -> None:
        size = len(self._rules)
        for index in (from_index, to_index):
            if index < 0 or index >= size:
                raise RuleIndexError(index, size)
        if from_index == to_index:
            return

        items = list(self._rules)
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        self._rules = items

    def set_evaluating(self, rule_id: str) -> int:
        index = self.index_of(rule_id)
        if index is None:
            raise RuleNotFoundError(rule_id)

        self._ticket_counter += 1
        ticket = self._ticket_counter
        self._tickets[rule_id] = ticket
        self._replace(index, state=LifecycleState.EVALUATING)
        return ticket

    def apply_result(
        self,
        rule_id: str,
        outcome: Outcome,
        justification: str,
        ticket: Optional[int] = None,
    ) -> Rule | None:
        index = self.index_of(rule_id)
        if index is None:
            logger.debug("Dropping result for removed rule %s", rule_id)
            return None

        latest = self._tickets.get(rule_id)
        if ticket is not None and ticket != latest:
            logger.debug(
                "Dropping stale result for rule %s (ticket %s, latest %s)",
                rule_id,
                ticket,
                latest,
            )
            return None

        self._tickets.pop(rule_id, None)
        state = LifecycleState.RESOLVED if outcome.is_conclusive else LifecycleState.ERRORED
        return self._replace(
            index,
            state=state,
            result=EvaluationResult(outcome=outcome, justification=justification),
        )

    def clear_results(self) -> None:
        self._tickets = {}
        self._rules = [
            replace(rule, state=LifecycleState.IDLE, result=None) for rule in self._rules
        ]

    def snapshot(self) -> list[Rule]:
        return list(self._rules)

    def restore(self, rules: Iterable[Rule]) -> None:
        restored: list[Rule] = []
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                logger.warning("Skipping duplicate rule id %s on restore", rule.id)
                continue
            seen.add(rule.id)
            restored.append(_settle(rule))
        self._rules = restored
        self._tickets = {}

    def summary(self) -> dict[str, int]:
        counts: Counter[str] = Counter()
        for rule in self._rules:
            if rule.state == LifecycleState.EVALUATING:
                counts["evaluating"] += 1
            elif rule.result is None:
                counts["pending"] += 1
            else:
                counts[rule.result.outcome.value] += 1
        counts["rules"] = len(self._rules)
        return dict(counts)

    def _replace(self, index: int, **changes) -> Rule:
        updated = replace(self._rules[index], **changes)
        items = list(self._rules)
        items[index] = updated
        self._rules = items
        return updated


def _settle(rule: Rule) -> Rule:
    # Interrupted evaluations reload as idle; their earlier result is stale.
    if rule.state == LifecycleState.EVALUATING:
        return replace(rule, state=LifecycleState.IDLE, result=None)
    if rule.state == LifecycleState.IDLE and rule.result is not None:
        return replace(rule, result=None)
    if rule.state in (LifecycleState.RESOLVED, LifecycleState.ERRORED) and rule.result is None:
        return replace(rule, state=LifecycleState.IDLE)
    return rule
