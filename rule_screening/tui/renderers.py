from rich.console import Console
from rich.markup import escape

from rule_screening.repositories.screening import ScreeningSettings
from rule_screening.rules.models import Rule
from rule_screening.tui.enums import UIStyle
from rule_screening.tui.sections import UISection
from rule_screening.tui.tables import ResultsTable, RulesTable, SettingsTable
from rule_screening.utils import compact_home_path


class ScreeningConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_rules(self, rules: list[Rule], summary: dict[str, int]) -> None:
        if not rules:
            self.console.print(
                UISection.note(
                    "rules",
                    "No rules added yet. Add one with: rule-screening rules add <title>",
                    style=UIStyle.YELLOW.value,
                )
            )
            return

        self.console.print(
            UISection.wrap(
                "rules overview",
                RulesTable.summary_block(summary, mode="list"),
                style=UIStyle.BLUE.value,
            )
        )
        self.console.print(
            UISection.wrap("rules", RulesTable.rules_table(rules), style=UIStyle.CYAN.value)
        )

    def render_rule(self, rule: Rule, position: int) -> None:
        self.console.print(UISection.rule_detail(rule, position))

    def render_rule_saved(self, rule: Rule, removed: bool = False) -> None:
        verb = "Removed" if removed else "Added"
        border_style = UIStyle.YELLOW.value if removed else UIStyle.GREEN.value
        self.console.print(
            UISection.note(
                "rule",
                f"{verb} rule: [bold]{escape(rule.title)}[/bold]\nid: {rule.id}",
                style=border_style,
            )
        )

    def render_rule_moved(self, rule: Rule, position: int) -> None:
        self.console.print(
            UISection.note(
                "rule",
                f"Moved [bold]{escape(rule.title)}[/bold] to position {position}",
                style=UIStyle.GREEN.value,
            )
        )

    def render_rules_imported(self, rules: list[Rule]) -> None:
        lines = "\n".join(f"- {escape(rule.title)}" for rule in rules) or "Nothing imported."
        self.console.print(
            UISection.note(f"imported {len(rules)}", lines, style=UIStyle.GREEN.value)
        )

    def render_rules_exported(self, paths: list[str]) -> None:
        lines = "\n".join(f"- {compact_home_path(path)}" for path in paths) or "Nothing exported."
        self.console.print(
            UISection.note(f"exported {len(paths)}", lines, style=UIStyle.GREEN.value)
        )

    def render_evaluation(self, rules: list[Rule], summary: dict[str, int]) -> None:
        self.console.print(
            UISection.wrap(
                "evaluation overview",
                RulesTable.summary_block(summary, mode="evaluate"),
                style=UIStyle.BLUE.value,
            )
        )
        self.console.print(
            UISection.wrap(
                "results",
                ResultsTable.results_table(rules),
                style=UIStyle.MAGENTA.value,
            )
        )

    def render_settings(self, settings: ScreeningSettings, location: str) -> None:
        self.console.print(
            UISection.wrap(
                "settings",
                SettingsTable.settings_table(settings, compact_home_path(location)),
                style=UIStyle.BLUE.value,
            )
        )

    def render_saved(self, title: str, message: str) -> None:
        self.console.print(UISection.note(title, message, style=UIStyle.GREEN.value))
