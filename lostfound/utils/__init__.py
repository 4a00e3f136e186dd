"""Utility helpers for reusable functionality."""

from .clock import Clock, elapsed_ms, ensure_utc, now_utc, system_clock

__all__ = [
    "Clock",
    "elapsed_ms",
    "ensure_utc",
    "now_utc",
    "system_clock",
]
