"""Configuration and logging utilities for micro CLI."""
