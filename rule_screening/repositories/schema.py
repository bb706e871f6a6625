import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from rule_screening.repositories.base import ISchemaRepository

_SCHEMA_CACHE: dict[str, dict[str, Any]] = {}


class JsonSchemaRepository(ISchemaRepository):
    def __init__(self, local_schema_path: Path) -> None:
        self.local_schema_path = local_schema_path

    def load_schema(self) -> dict[str, Any]:
        key = str(self.local_schema_path.resolve())
        cached = _SCHEMA_CACHE.get(key)
        if cached is not None:
            return cached
        schema = json.loads(self.local_schema_path.read_text(encoding="utf-8"))
        _SCHEMA_CACHE[key] = schema
        return schema

    def validator(self) -> Draft202012Validator:
        return Draft202012Validator(self.load_schema())


class RulesSchemaRepository(JsonSchemaRepository):
    def __init__(self) -> None:
        super().__init__(
            local_schema_path=Path(__file__).resolve().parent / "rules.schema.json"
        )


def format_schema_error(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)
