"""Telemetry scaffolds.

This package emits deterministic load events for auditing config changes.
"""

from .logger import LoadLogger

__all__ = ["LoadLogger"]
