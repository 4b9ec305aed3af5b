"""Command-line interface for micro CLI.

Commands:
    - micro:composer:install: Install composer dependencies for services
    - micro:composer:update: Update composer dependencies for services
    - micro:composer:require: Add composer packages to services

Architecture:
    Uses Click for command-line parsing with a group-based structure.
    Commands are lazy-loaded for fast startup time.
"""

from .main import cli, main

__all__ = ["cli", "main"]
