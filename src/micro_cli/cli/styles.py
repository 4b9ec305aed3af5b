"""Centralized color and style management for micro CLI.

Design Philosophy:
- Semantic color names (error, warning, header) rather than direct colors
- Rich console markup helpers for inline styling
- Questionary style integration for interactive prompts
"""

import sys
from dataclasses import dataclass

from questionary import Style as QuestionaryStyle
from rich.console import Console
from rich.theme import Theme

# ============================================================================
# THEME CONFIGURATION
# ============================================================================


@dataclass
class ColorTheme:
    """Color theme for the CLI.

    Fixed standard colors (error, warning) follow UI conventions; the
    remaining colors define the tool's look.
    """

    error: str = "#ff0000"
    warning: str = "#ffaa00"

    primary: str = "#5b7bd5"
    accent: str = "#87afd7"

    text_secondary: str = "#888888"
    text_dim: str = "#666666"


DEFAULT_THEME = ColorTheme()


def _build_rich_theme(theme: ColorTheme) -> Theme:
    """Build a Rich Theme from a ColorTheme."""
    return Theme(
        {
            "error": f"bold {theme.error}",
            "warning": f"bold {theme.warning}",
            "dim": theme.text_dim,
            "header": f"bold {theme.primary}",
        }
    )


def _build_questionary_style(theme: ColorTheme) -> QuestionaryStyle:
    """Build a Questionary style from a ColorTheme."""
    return QuestionaryStyle(
        [
            ("qmark", f"fg:{theme.accent} bold"),
            ("question", "bold"),
            ("answer", f"fg:{theme.primary} bold"),
            ("pointer", f"fg:{theme.primary} bold"),
            ("highlighted", f"fg:{theme.primary} bold"),
            ("selected", f"fg:{theme.accent}"),
            ("instruction", f"fg:{theme.text_dim} italic"),
            ("text", f"fg:{theme.text_secondary}"),
        ]
    )


micro_theme = _build_rich_theme(DEFAULT_THEME)
custom_style = _build_questionary_style(DEFAULT_THEME)

# On Windows, force UTF-8 capable output for ✓, ✗, ⚠️
if sys.platform == "win32":
    console = Console(theme=micro_theme, force_terminal=True, legacy_windows=False)
else:
    console = Console(theme=micro_theme)


# ============================================================================
# STYLE HELPERS
# ============================================================================


class Styles:
    """Style names defined in the Rich theme."""

    DIM = "dim"


class Messages:
    """Pre-formatted message helpers for common patterns."""

    @staticmethod
    def error(text: str) -> str:
        return f"[error]✗ {text}[/error]"

    @staticmethod
    def warning(text: str) -> str:
        return f"[warning]⚠️  {text}[/warning]"

    @staticmethod
    def header(text: str) -> str:
        return f"[header]{text}[/header]"


__all__ = [
    "ColorTheme",
    "DEFAULT_THEME",
    "console",
    "custom_style",
    "Styles",
    "Messages",
]
