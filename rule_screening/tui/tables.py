from rich.markup import escape
from rich.table import Column, Table

from rule_screening.repositories.screening import ScreeningSettings
from rule_screening.rules.models import Rule
from rule_screening.tui.enums import OUTCOME_STYLE, STATE_STYLE, UIStyle
from rule_screening.utils import mask_secret

SHORT_ID_LENGTH = 8


def _styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"


class RulesTable:
    @staticmethod
    def summary_block(summary: dict[str, int], mode: str) -> Table:
        chips = [
            f"{key}={value}"
            for key, value in sorted(summary.items())
            if key != "rules" and value > 0
        ]
        if not chips:
            chips = ["none"]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Mode", mode)
        table.add_row("Rules", str(summary.get("rules", 0)))
        table.add_row("Outcomes", "  ".join(chips))
        return table

    @staticmethod
    def rules_table(rules: list[Rule]) -> Table:
        table = Table(
            Column(header="#", width=4, justify="right"),
            Column(header="Id", width=SHORT_ID_LENGTH + 1),
            Column(header="Title", overflow="ellipsis", max_width=40),
            Column(header="State", width=11),
            Column(header="Outcome", width=8),
            Column(header="Definition", overflow="ellipsis"),
            expand=True,
            header_style="bold",
        )
        for position, rule in enumerate(rules, start=1):
            outcome = ""
            if rule.result is not None:
                outcome = _styled(rule.result.outcome.value, OUTCOME_STYLE[rule.result.outcome])
            table.add_row(
                str(position),
                rule.id[:SHORT_ID_LENGTH],
                escape(rule.title),
                _styled(rule.state.value, STATE_STYLE[rule.state]),
                outcome,
                escape(rule.definition),
            )
        return table


class ResultsTable:
    @staticmethod
    def results_table(rules: list[Rule]) -> Table:
        table = Table(
            Column(header="Rule", overflow="fold", max_width=32),
            Column(header="Outcome", width=8),
            Column(header="Justification", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for rule in rules:
            if rule.result is None:
                table.add_row(escape(rule.title), _styled("-", UIStyle.DIM.value), "")
                continue
            style = OUTCOME_STYLE[rule.result.outcome]
            table.add_row(
                escape(rule.title),
                _styled(rule.result.outcome.value, style),
                escape(rule.result.justification),
            )
        return table


class SettingsTable:
    @staticmethod
    def settings_table(settings: ScreeningSettings, location: str) -> Table:
        table = Table(show_header=False, box=None, expand=True)
        table.add_column(style="bold", width=14)
        table.add_column(overflow="fold")
        table.add_row("storage", location)
        table.add_row("api key", mask_secret(settings.api_key))
        for name, value in settings.options.as_dict().items():
            table.add_row(name, str(value))
        table.add_row("system prompt", escape(settings.system_prompt))
        return table
