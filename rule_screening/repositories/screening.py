import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from rule_screening.completion.models import CompletionOptions
from rule_screening.constants import (
    API_KEY_ENV_VAR,
    API_KEY_KEY,
    APP_NAME,
    COMPLETION_OPTIONS_KEY,
    DEFAULT_SYSTEM_PROMPT,
    HOME_ENV_VAR,
    RULES_KEY,
    STORAGE_FILENAME,
    SYSTEM_PROMPT_KEY,
)
from rule_screening.errors import (
    InvalidStoredDataError,
    InvalidStoreSchemaError,
    ValidationError,
)
from rule_screening.repositories.base import IKeyValueStore
from rule_screening.repositories.schema import RulesSchemaRepository, format_schema_error
from rule_screening.repositories.storage import JsonFileStore
from rule_screening.rules.models import Rule

logger = logging.getLogger(__name__)


def default_root() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / APP_NAME


@dataclass(frozen=True)
class ScreeningSettings:
    system_prompt: str
    api_key: Optional[str]
    options: CompletionOptions

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


class ScreeningRepository:
    """Typed access to persisted rules and configuration."""

    def __init__(self, store: Optional[IKeyValueStore] = None, root: Optional[Path] = None) -> None:
        self._root = root or default_root()
        self._store = store or JsonFileStore(self._root / STORAGE_FILENAME)
        self._validator = RulesSchemaRepository().validator()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def store(self) -> IKeyValueStore:
        return self._store

    def load_rules(self) -> list[Rule]:
        raw = self._store.get(RULES_KEY)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise InvalidStoredDataError(self._store.location, RULES_KEY, str(exc)) from exc

        error = next(iter(self._validator.iter_errors(payload)), None)
        if error is not None:
            raise InvalidStoreSchemaError(
                self._store.location, RULES_KEY, format_schema_error(error)
            )
        return [Rule.from_dict(item) for item in payload]

    def save_rules(self, rules: list[Rule]) -> None:
        self._store.set(RULES_KEY, json.dumps([rule.as_dict() for rule in rules]))

    def load_system_prompt(self) -> str:
        return self._store.get(SYSTEM_PROMPT_KEY) or DEFAULT_SYSTEM_PROMPT

    def save_system_prompt(self, prompt: str) -> None:
        if not prompt.strip():
            raise ValidationError("system_prompt", "System prompt cannot be empty")
        self._store.set(SYSTEM_PROMPT_KEY, prompt)

    def reset_system_prompt(self) -> bool:
        return self._store.delete(SYSTEM_PROMPT_KEY)

    def load_api_key(self) -> Optional[str]:
        stored = self._store.get(API_KEY_KEY)
        if stored:
            return stored
        return os.environ.get(API_KEY_ENV_VAR) or None

    def save_api_key(self, api_key: str) -> None:
        normalized = api_key.strip()
        if not normalized:
            raise ValidationError("api_key", "API key cannot be empty")
        self._store.set(API_KEY_KEY, normalized)

    def clear_api_key(self) -> bool:
        return self._store.delete(API_KEY_KEY)

    def load_completion_options(self) -> CompletionOptions:
        defaults = CompletionOptions()
        raw = self._store.get(COMPLETION_OPTIONS_KEY)
        if not raw:
            return defaults
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring unreadable %s in %s", COMPLETION_OPTIONS_KEY, self._store.location)
            return defaults
        if not isinstance(payload, dict):
            return defaults
        return defaults.merged(payload)

    def save_completion_option(self, name: str, value: Any) -> CompletionOptions:
        if name not in CompletionOptions.field_names():
            raise ValidationError(name, f"Unknown completion option: {name}")
        current = self.load_completion_options()
        try:
            converted = type(getattr(current, name))(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(name, f"Invalid value for {name}: {value}") from exc
        updated = current.merged({name: converted})
        self._store.set(COMPLETION_OPTIONS_KEY, json.dumps(updated.as_dict()))
        return updated

    def load_settings(self) -> ScreeningSettings:
        return ScreeningSettings(
            system_prompt=self.load_system_prompt(),
            api_key=self.load_api_key(),
            options=self.load_completion_options(),
        )
