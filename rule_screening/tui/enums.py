from enum import Enum

from rule_screening.rules.models import LifecycleState, Outcome


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"
    WHITE = "white"


OUTCOME_STYLE = {
    Outcome.PASS: UIStyle.GREEN.value,
    Outcome.FAIL: UIStyle.RED.value,
    Outcome.NOT_APPLICABLE: UIStyle.YELLOW.value,
    Outcome.UNKNOWN: UIStyle.DIM.value,
}


STATE_STYLE = {
    LifecycleState.IDLE: UIStyle.DIM.value,
    LifecycleState.EVALUATING: UIStyle.CYAN.value,
    LifecycleState.RESOLVED: UIStyle.GREEN.value,
    LifecycleState.ERRORED: UIStyle.RED.value,
}
