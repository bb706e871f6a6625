"""Map free-text model answers onto an outcome."""

from __future__ import annotations

from typing import Final

from rule_screening.rules.models import EvaluationResult, Outcome

# Checked in this order, not by position in the text: an answer mentioning
# both FAIL and PASS classifies as PASS.
OUTCOME_PRIORITY: Final[tuple[Outcome, ...]] = (
    Outcome.PASS,
    Outcome.FAIL,
    Outcome.NOT_APPLICABLE,
)


def detect_outcome(raw_text: str) -> Outcome:
    for outcome in OUTCOME_PRIORITY:
        if outcome.value in raw_text:
            return outcome
    return Outcome.UNKNOWN


def classify(raw_text: str) -> EvaluationResult:
    return EvaluationResult(outcome=detect_outcome(raw_text), justification=raw_text)
