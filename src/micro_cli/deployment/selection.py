"""Resolve which eligible services an invocation targets.

Policy, in order: ``--all`` returns everything; a known service name returns
that service; an unknown name warns and falls back to an interactive choice,
as does no name at all. The chooser is injected so the policy runs without a
terminal.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from micro_cli.deployment.discovery import EligibleService
from micro_cli.deployment.errors import InvalidSelectionError
from micro_cli.utils.logger import get_logger

logger = get_logger("selection")

Chooser = Callable[[list[str]], str | None]


class SelectionMode(Enum):
    SINGLE = "single"
    ALL = "all"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class SelectionRequest:
    """Operator targeting intent. ``service`` is set only for SINGLE."""

    mode: SelectionMode
    service: str | None = None

    def __post_init__(self):
        if self.mode is SelectionMode.SINGLE and not self.service:
            raise ValueError("SINGLE selection requires a service name")
        if self.mode is not SelectionMode.SINGLE and self.service is not None:
            raise ValueError(f"{self.mode.name} selection does not take a service name")

    @classmethod
    def from_cli(cls, service: str | None, all_services: bool) -> "SelectionRequest":
        """Build a request from the CLI arguments; ``--all`` wins over a name."""
        if all_services:
            return cls(SelectionMode.ALL)
        if service:
            return cls(SelectionMode.SINGLE, service)
        return cls(SelectionMode.INTERACTIVE)


def select_services(
    request: SelectionRequest,
    eligible: dict[str, EligibleService],
    choose: Chooser,
) -> dict[str, EligibleService]:
    """Apply the selection policy.

    Args:
        request: What the operator asked for
        eligible: Discovered services, in discovery order
        choose: Called with the eligible names when a choice is needed; returns
            the picked name or None when the prompt was cancelled

    Returns:
        The full eligible mapping for ALL, otherwise a single-entry mapping

    Raises:
        InvalidSelectionError: If no eligible service can be resolved
    """
    if request.mode is SelectionMode.ALL:
        return eligible

    requested = request.service
    if requested is not None and requested not in eligible:
        logger.warning(f"Service with name '{requested}' is not configured in docker-compose.yml yet.")
        requested = None

    if requested is None:
        if not eligible:
            raise InvalidSelectionError("No eligible services to choose from.")
        requested = choose(list(eligible))
        if requested is None:
            raise InvalidSelectionError("No service selected.")

    if requested not in eligible:
        raise InvalidSelectionError(service=requested)

    return {requested: eligible[requested]}
