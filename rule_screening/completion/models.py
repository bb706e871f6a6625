"""Completion transport data models."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Optional

from rule_screening.constants import (
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOP_P,
)


@dataclass(frozen=True)
class CompletionOptions:
    endpoint: str = DEFAULT_ENDPOINT
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    top_p: float = DEFAULT_TOP_P
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def field_names(cls) -> list[str]:
        return [item.name for item in fields(cls)]

    def merged(self, overrides: dict[str, Any]) -> "CompletionOptions":
        """Apply stored overrides field by field, ignoring unknown or mistyped values."""
        changes: dict[str, Any] = {}
        for item in fields(self):
            if item.name not in overrides:
                continue
            current = getattr(self, item.name)
            try:
                changes[item.name] = type(current)(overrides[item.name])
            except (TypeError, ValueError):
                continue
        return replace(self, **changes)


@dataclass(frozen=True)
class CompletionResponse:
    status_code: int
    reason: str = ""
    body: Optional[Any] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def describe_status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()
