"""
Errors
======

Exception types raised by the core. Rule violations (wrong fruit, wrong order,
too many, extra slice) are ordinary game outcomes and live in rules.py as data.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when game_config.yaml is missing required data or is inconsistent."""


class InvariantViolation(AssertionError):
    """
    Raised when a caller drives the core into a state valid input never reaches.

    Examples: reporting a slice while no attempt is active, or acknowledging
    a win that never happened. These indicate an integration bug.
    """
