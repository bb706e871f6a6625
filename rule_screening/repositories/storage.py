import logging
from pathlib import Path
from typing import Optional

from rule_screening.errors import InvalidStoredDataError
from rule_screening.repositories.base import IKeyValueStore
from rule_screening.utils import read_json_safe, write_json

logger = logging.getLogger(__name__)


class JsonFileStore(IKeyValueStore):
    """Key-value blobs kept together in a single JSON object file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def location(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = value
        write_json(self._path, payload)
        logger.debug("Stored key %s in %s", key, self._path)

    def delete(self, key: str) -> bool:
        payload = self._load()
        if key not in payload:
            return False
        del payload[key]
        write_json(self._path, payload)
        return True

    def _load(self) -> dict[str, object]:
        payload, error = read_json_safe(self._path)
        if error is not None:
            raise InvalidStoredDataError(self._path, "*", error)
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise InvalidStoredDataError(self._path, "*", "must be a JSON object")
        return payload
