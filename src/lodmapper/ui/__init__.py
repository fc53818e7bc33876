"""Command line interface."""

from __future__ import annotations

from .cli import main, run

__all__ = [
    "main",
    "run",
]
