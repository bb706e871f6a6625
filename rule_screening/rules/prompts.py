"""Compose model requests from a rule and the subject matter."""

from __future__ import annotations

from rule_screening.constants import OUTCOME_INSTRUCTION
from rule_screening.errors import ValidationError
from rule_screening.rules.models import EvaluationRequest, Rule


def build_user_prompt(rule: Rule, subject_matter: str) -> str:
    return (
        f"Rule: {rule.title}\n"
        f"Rule Definition: {rule.definition}\n\n"
        f"Subject Matter to Evaluate:\n{subject_matter}\n\n"
        f"{OUTCOME_INSTRUCTION}"
    )


def build_request(rule: Rule, subject_matter: str, system_prompt: str) -> EvaluationRequest:
    if not subject_matter.strip():
        raise ValidationError("subject_matter", "Please enter subject matter to evaluate.")
    if not system_prompt.strip():
        raise ValidationError("system_prompt", "System prompt cannot be empty")
    return EvaluationRequest(system=system_prompt, user=build_user_prompt(rule, subject_matter))
