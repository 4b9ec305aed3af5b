"""
Component Logger Framework

Provides colored logging for micro CLI components with:
- Unified API for all components (descriptor, discovery, selection, runtime, dispatcher)
- Rich terminal output with component-specific colors
- Graceful fallbacks when configuration is unavailable

Usage:
    logger = get_logger("dispatcher")
    logger.info("Dispatching 2 services")
    logger.debug("Command: docker run --rm ...")
    logger.success("Operation completed")
    logger.warning("Something to note")

    # Custom loggers with explicit parameters
    logger = get_logger(name="custom_component", color="blue")
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from micro_cli.utils.config import get_config_value

DEFAULT_COLORS = {
    "descriptor": "cyan",
    "discovery": "blue",
    "selection": "magenta",
    "runtime": "green",
    "dispatcher": "yellow",
}


class ComponentLogger:
    """
    Rich-formatted logger for micro CLI components with color coding and message hierarchy.

    Message Types:
    - info: Normal operational messages
    - debug: Detailed tracing information
    - warning: Warning messages
    - success: Success messages
    """

    def __init__(self, base_logger: logging.Logger, component_name: str, color: str = "white"):
        """
        Initialize component logger.

        Args:
            base_logger: Underlying Python logger
            component_name: Name of the component (e.g., 'discovery', 'dispatcher')
            color: Rich color name for this component
        """
        self.base_logger = base_logger
        self.component_name = component_name
        self.color = color

    def _format_message(self, message: str, style: str, emoji: str = "") -> str:
        """Format message with Rich markup and emoji prefix."""
        prefix = f"{emoji}{self.component_name.title()}: "
        if style:
            return f"[{style}]{prefix}{message}[/{style}]"
        return f"{prefix}{message}"

    def info(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, self.color))

    def debug(self, message: str) -> None:
        style = f"dim {self.color}" if self.color != "white" else "dim white"
        self.base_logger.debug(self._format_message(message, style, "🔍 "))

    def warning(self, message: str) -> None:
        self.base_logger.warning(self._format_message(message, "bold yellow", "⚠️  "))

    def success(self, message: str) -> None:
        self.base_logger.info(self._format_message(message, "bold green", "✅ "))


# One shared ComponentLogger per component, recolored when a project config is applied
_component_loggers: dict[str, ComponentLogger] = {}


def _configured_level(config_path: str | Path | None = None) -> int:
    try:
        configured = get_config_value("logging.level", "INFO", config_path)
    except Exception:
        configured = "INFO"
    level = logging.getLevelName(str(configured).upper())
    return level if isinstance(level, int) else logging.INFO


def _component_color(component_name: str, config_path: str | Path | None = None) -> str:
    try:
        color = get_config_value(f"logging.logging_colors.{component_name}", None, config_path)
    except Exception:
        # Logging must keep working with a broken micro.yml
        color = None
    return color or DEFAULT_COLORS.get(component_name, "white")


def _setup_rich_logging(level: int | None = None) -> None:
    """Configure Rich logging for the root logger (called once)."""
    root_logger = logging.getLogger()

    # Prevent duplicate handler registration
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            if level is not None:
                root_logger.setLevel(level)
            return

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    try:
        # Security-conscious defaults: hide locals to prevent sensitive data exposure
        rich_tracebacks = get_config_value("logging.rich_tracebacks", True)
        show_traceback_locals = get_config_value("logging.show_traceback_locals", False)
        show_full_paths = get_config_value("logging.show_full_paths", False)
    except Exception:
        rich_tracebacks = True
        show_traceback_locals = False
        show_full_paths = False

    root_logger.setLevel(level if level is not None else _configured_level())

    # Log to stderr so streamed subprocess output on stdout stays clean
    console = Console(stderr=True)

    handler = RichHandler(
        console=console,
        rich_tracebacks=rich_tracebacks,
        markup=True,  # Enable [bold], [green], etc. in log messages
        show_path=show_full_paths,
        show_time=True,
        show_level=True,
        tracebacks_show_locals=show_traceback_locals,
    )

    root_logger.addHandler(handler)


def configure_logging(level: int | None = None, config_path: str | Path | None = None) -> None:
    """Install the Rich handler and apply a level and component colors.

    Args:
        level: Forced level (e.g. DEBUG for --verbose); wins over the config
        config_path: Project micro.yml whose ``logging`` section replaces the
            one read when the modules were imported
    """
    _setup_rich_logging(level)

    if config_path is None:
        return

    if level is None:
        logging.getLogger().setLevel(_configured_level(config_path))
    for component_name, component_logger in _component_loggers.items():
        component_logger.color = _component_color(component_name, config_path)


def get_logger(
    component_name: str | None = None,
    *,
    name: str | None = None,
    color: str | None = None,
) -> ComponentLogger:
    """
    Get a component logger.

    Args:
        component_name: Component name (e.g., 'discovery', 'dispatcher')
        name: Direct logger name (keyword-only), bypasses color lookup
        color: Direct color specification (keyword-only)

    Returns:
        ComponentLogger instance

    Examples:
        logger = get_logger("dispatcher")
        logger.info("Starting")

        logger = get_logger(name="test_logger", color="blue")
    """
    _setup_rich_logging()

    if name is not None:
        return ComponentLogger(logging.getLogger(name), name, color or "white")

    if component_name is None:
        raise ValueError(
            "Component name is required. Usage: get_logger('component_name') or "
            "get_logger(name='custom_name', color='blue')"
        )

    component_logger = _component_loggers.get(component_name)
    if component_logger is None:
        component_logger = ComponentLogger(
            logging.getLogger(f"micro_cli.{component_name}"), component_name
        )
        _component_loggers[component_name] = component_logger
    component_logger.color = _component_color(component_name)
    return component_logger
