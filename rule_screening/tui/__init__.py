from rule_screening.tui.renderers import ScreeningConsoleUI

__all__ = ["ScreeningConsoleUI"]
