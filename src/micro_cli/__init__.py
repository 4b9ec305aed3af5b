"""Micro CLI.

Runs composer (install, update, require) for the PHP services of a
docker-compose deployment, each inside a short-lived container.
"""

# Version information
__version__ = "0.3.0"

__all__ = ["__version__"]
