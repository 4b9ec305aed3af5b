"""Service discovery and composer dispatch for micro CLI.

This module finds the PHP services of a compose deployment and runs
composer for them inside short-lived containers.
"""

from .composer_manager import ComposerSettings, run_composer
from .discovery import EligibleService, ServiceEntry, discover_services
from .dispatcher import CommandVerb, DispatchJob, ProcessDispatcher
from .errors import (
    DescriptorError,
    DispatchFailure,
    ExitOutcome,
    InvalidSelectionError,
    MicroCliError,
    RuntimeNotFoundError,
)
from .runtime_helper import RuntimeResolver
from .selection import SelectionMode, SelectionRequest, select_services

__all__ = [
    "run_composer",
    "ComposerSettings",
    "CommandVerb",
    "DispatchJob",
    "ProcessDispatcher",
    "EligibleService",
    "ServiceEntry",
    "discover_services",
    "RuntimeResolver",
    "SelectionMode",
    "SelectionRequest",
    "select_services",
    "ExitOutcome",
    "MicroCliError",
    "DescriptorError",
    "DispatchFailure",
    "InvalidSelectionError",
    "RuntimeNotFoundError",
]
