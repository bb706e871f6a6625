"""Drive rule evaluations against the completion endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from rule_screening.completion.client import ICompletionClient, extract_completion_text
from rule_screening.constants import ERROR_PREFIX
from rule_screening.errors import (
    ConfigurationError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from rule_screening.repositories.screening import ScreeningRepository, ScreeningSettings
from rule_screening.rules.classifier import classify
from rule_screening.rules.models import EvaluationRequest, Outcome, Rule
from rule_screening.rules.prompts import build_request
from rule_screening.rules.store import RuleStore

logger = logging.getLogger(__name__)


def error_justification(message: str) -> str:
    return f"{ERROR_PREFIX} {message}"


class EvaluationOrchestrator:
    """Runs one independent evaluation per rule.

    Results are written back through ``RuleStore.apply_result`` and persisted
    right after, in completion order.
    """

    def __init__(
        self,
        store: RuleStore,
        repository: ScreeningRepository,
        client: ICompletionClient,
        subject_matter: str = "",
    ) -> None:
        self._store = store
        self._repository = repository
        self._client = client
        self.subject_matter = subject_matter

    @property
    def store(self) -> RuleStore:
        return self._store

    def check_preconditions(self, settings: ScreeningSettings) -> None:
        if not settings.has_credential:
            raise ConfigurationError(
                "api_key", "Please set your API key in settings first."
            )
        if not self.subject_matter.strip():
            raise ValidationError(
                "subject_matter", "Please enter subject matter to evaluate."
            )
        if not settings.system_prompt.strip():
            raise ValidationError("system_prompt", "System prompt cannot be empty")

    async def evaluate(self, rule_id: str) -> Rule:
        settings = self._repository.load_settings()
        self.check_preconditions(settings)
        return await self._evaluate(rule_id, settings)

    async def evaluate_many(self, rule_ids: Optional[Iterable[str]] = None) -> list[Rule]:
        settings = self._repository.load_settings()
        self.check_preconditions(settings)

        if rule_ids is None:
            ids = [rule.id for rule in self._store.rules()]
        else:
            ids = list(dict.fromkeys(rule_ids))
        for rule_id in ids:
            self._store.require(rule_id)

        # Let every evaluation settle before surfacing a failure from any of them.
        outcomes = await asyncio.gather(
            *(self._evaluate(rule_id, settings) for rule_id in ids),
            return_exceptions=True,
        )
        failures = [item for item in outcomes if isinstance(item, BaseException)]
        if failures:
            for failure in failures[1:]:
                logger.error("Evaluation failed: %s", failure)
            raise failures[0]
        return [rule for rule in self._store.rules() if rule.id in ids]

    async def _evaluate(self, rule_id: str, settings: ScreeningSettings) -> Rule:
        rule = self._store.require(rule_id)
        request = build_request(rule, self.subject_matter, settings.system_prompt)

        logger.info("Evaluating rule: %s", rule.title)
        logger.debug("System prompt: %s", request.system)
        logger.debug("User prompt: %s", request.user)

        ticket = self._store.set_evaluating(rule_id)
        try:
            outcome, justification = await self._request_outcome(request)
        except asyncio.CancelledError:
            self._apply(rule_id, Outcome.UNKNOWN, error_justification("evaluation cancelled"), ticket)
            raise

        updated = self._apply(rule_id, outcome, justification, ticket)
        if updated is None:
            # Removed while in flight, or superseded by a newer evaluation.
            return self._store.get(rule_id) or rule
        return updated

    async def _request_outcome(self, request: EvaluationRequest) -> tuple[Outcome, str]:
        try:
            response = await self._client.complete(request.system, request.user)
            if not response.ok:
                logger.error("API request failed: %s", response.describe_status())
                return Outcome.UNKNOWN, error_justification(response.describe_status())
            if response.body is None:
                raise ProtocolError("Response body is not valid JSON")
            content = extract_completion_text(response.body)
        except (TransportError, ProtocolError) as exc:
            logger.error("Error evaluating rule: %s", exc)
            return Outcome.UNKNOWN, error_justification(str(exc))
        except Exception as exc:
            logger.exception("Unexpected error evaluating rule")
            return Outcome.UNKNOWN, error_justification(str(exc) or exc.__class__.__name__)

        logger.debug("Result content: %s", content)
        result = classify(content)
        return result.outcome, result.justification

    def _apply(
        self, rule_id: str, outcome: Outcome, justification: str, ticket: int
    ) -> Rule | None:
        updated = self._store.apply_result(rule_id, outcome, justification, ticket=ticket)
        self._repository.save_rules(self._store.snapshot())
        return updated
