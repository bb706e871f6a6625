from typing import Optional

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from rule_screening.rules.models import Rule
from rule_screening.tui.enums import OUTCOME_STYLE, UIStyle


class UISection:
    @staticmethod
    def wrap(title: str, body, style: str = UIStyle.BLUE.value, subtitle: Optional[str] = None) -> Panel:
        return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))

    @staticmethod
    def note(title: str, body: str, style: str) -> Panel:
        return Panel(body, title=title, border_style=style, padding=(0, 1))

    @staticmethod
    def rule_detail(rule: Rule, position: int) -> Panel:
        definition = rule.definition or "(no definition)"
        blocks = [
            Text(f"id: {rule.id}", style=UIStyle.DIM.value),
            Text(f"state: {rule.state.value}", style=UIStyle.DIM.value),
            Text(""),
            Text(definition),
        ]
        style = UIStyle.BLUE.value
        if rule.result is not None:
            style = OUTCOME_STYLE[rule.result.outcome]
            blocks.append(Text(""))
            blocks.append(Text(rule.result.outcome.value, style=f"bold {style}"))
            blocks.append(Text(rule.result.justification))
        return Panel(
            Group(*blocks),
            title=f"{position}. {escape(rule.title)}",
            border_style=style,
            padding=(0, 1),
        )
