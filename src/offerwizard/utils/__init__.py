"""Shared utilities."""

from __future__ import annotations

from offerwizard.utils.debounce import DebouncedAction, Debouncer

__all__ = ["Debouncer", "DebouncedAction"]
