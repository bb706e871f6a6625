from pathlib import Path


class ScreeningAppError(Exception):
    """Base user-facing application error."""


class ValidationError(ScreeningAppError):
    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


class ConfigurationError(ScreeningAppError):
    def __init__(self, setting: str, message: str) -> None:
        self.setting = setting
        self.message = message
        super().__init__(message)


class RuleNotFoundError(ScreeningAppError):
    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Rule not found: {reference}")


class RuleIndexError(ScreeningAppError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(f"Rule index {index} out of range for {size} rule(s)")


class TransportError(ScreeningAppError):
    """The completion endpoint could not be reached."""


class ProtocolError(ScreeningAppError):
    """The completion endpoint answered with content we cannot read."""


class StoredDataError(ScreeningAppError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class InvalidStoredDataError(StoredDataError):
    def __init__(self, path: Path, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON for '{key}' ({detail})")


class InvalidStoreSchemaError(StoredDataError):
    def __init__(self, path: Path, key: str, detail: str) -> None:
        self.key = key
        self.detail = detail
        super().__init__(path=path, message=f"Invalid schema for '{key}' ({detail})")
