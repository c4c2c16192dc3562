"""Command line interface."""

from .statsctl import cli

__all__ = ["cli"]
