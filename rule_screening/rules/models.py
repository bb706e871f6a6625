"""Rule data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class LifecycleState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    RESOLVED = "resolved"
    ERRORED = "errored"


class Outcome(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    NOT_APPLICABLE = "NA"
    UNKNOWN = "UNKNOWN"

    @property
    def is_conclusive(self) -> bool:
        return self != Outcome.UNKNOWN


@dataclass(frozen=True)
class EvaluationResult:
    outcome: Outcome
    justification: str

    def as_dict(self) -> dict[str, str]:
        return {"outcome": self.outcome.value, "justification": self.justification}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "EvaluationResult":
        return cls(
            outcome=Outcome(payload["outcome"]),
            justification=str(payload.get("justification", "")),
        )


@dataclass(frozen=True)
class EvaluationRequest:
    system: str
    user: str


@dataclass(frozen=True)
class Rule:
    id: str
    title: str
    definition: str = ""
    state: LifecycleState = LifecycleState.IDLE
    result: Optional[EvaluationResult] = None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self.result.outcome if self.result is not None else None

    @property
    def is_evaluating(self) -> bool:
        return self.state == LifecycleState.EVALUATING

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "definition": self.definition,
            "state": self.state.value,
            "result": self.result.as_dict() if self.result is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Rule":
        raw_result = payload.get("result")
        return cls(
            id=str(payload["id"]),
            title=str(payload["title"]),
            definition=str(payload.get("definition", "")),
            state=LifecycleState(payload.get("state", LifecycleState.IDLE.value)),
            result=EvaluationResult.from_dict(raw_result) if raw_result else None,
        )
