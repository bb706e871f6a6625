import logging
import re

from rich.console import Console
from rich.logging import RichHandler


class SensitiveDataFilter(logging.Filter):
    """Mask credentials in log messages and arguments."""

    SENSITIVE_PATTERNS = [
        (re.compile(r"Bearer\s+([^\s\"']+)", re.IGNORECASE), "Bearer ***"),
        (re.compile(r"api[_-]?key[\"']?\s*[:=]\s*[\"']?([^\"'\s&]+)", re.IGNORECASE), "api_key=***"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)
        if isinstance(record.args, tuple) and record.args:
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True

    def _mask(self, text: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.addFilter(SensitiveDataFilter())

    root = logging.getLogger("rule_screening")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # httpx logs every request at INFO, including the endpoint URL.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
