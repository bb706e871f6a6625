from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional


class IKeyValueStore(ABC):
    @property
    @abstractmethod
    def location(self) -> Path:
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> bool:
        raise NotImplementedError


class ISchemaRepository(ABC):
    @abstractmethod
    def load_schema(self) -> dict[str, Any]:
        raise NotImplementedError
