from rule_screening.repositories.base import IKeyValueStore, ISchemaRepository
from rule_screening.repositories.screening import ScreeningRepository, ScreeningSettings
from rule_screening.repositories.storage import JsonFileStore

__all__ = [
    "IKeyValueStore",
    "ISchemaRepository",
    "JsonFileStore",
    "ScreeningRepository",
    "ScreeningSettings",
]
