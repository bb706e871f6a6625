from rule_screening.completion.client import (
    HttpCompletionClient,
    ICompletionClient,
    extract_completion_text,
)
from rule_screening.completion.models import CompletionOptions, CompletionResponse

__all__ = [
    "CompletionOptions",
    "CompletionResponse",
    "HttpCompletionClient",
    "ICompletionClient",
    "extract_completion_text",
]
