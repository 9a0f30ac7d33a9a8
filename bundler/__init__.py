"""Rollup-driven library bundler."""
from __future__ import annotations

from .cli import main

__all__ = ["main"]
