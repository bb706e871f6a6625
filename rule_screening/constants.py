from typing import Final


APP_NAME: Final[str] = "rule-screening"
HOME_ENV_VAR: Final[str] = "RULE_SCREENING_HOME"
API_KEY_ENV_VAR: Final[str] = "RULE_SCREENING_API_KEY"
STORAGE_FILENAME: Final[str] = "storage.json"

RULES_KEY: Final[str] = "screeningRules"
SYSTEM_PROMPT_KEY: Final[str] = "systemPrompt"
API_KEY_KEY: Final[str] = "apiKey"
COMPLETION_OPTIONS_KEY: Final[str] = "completionOptions"

DEFAULT_SYSTEM_PROMPT: Final[str] = (
    "You are an expert in financial regulation and mortgage applications. "
    "Given the following data representing a mortgage application and the "
    "provided rule, determine if the application complies with, fails, or does "
    "not apply to the rule. Provide a single sentence justification and a "
    "PASS/FAIL/NA outcome."
)

OUTCOME_INSTRUCTION: Final[str] = (
    "Determine if the subject matter complies with, fails, or does not apply "
    "to the rule. Provide a single sentence justification and end with PASS, "
    "FAIL, or NA as the outcome."
)

DEFAULT_ENDPOINT: Final[str] = "https://models.inference.ai.azure.com/chat/completions"
DEFAULT_MODEL: Final[str] = "gpt-4o"
DEFAULT_TEMPERATURE: Final[float] = 1.0
DEFAULT_MAX_TOKENS: Final[int] = 4000
DEFAULT_TOP_P: Final[float] = 1.0
DEFAULT_TIMEOUT_SECONDS: Final[float] = 60.0

ERROR_PREFIX: Final[str] = "Error:"
RULE_FILE_SUFFIX: Final[str] = ".md"
