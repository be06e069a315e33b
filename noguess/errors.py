"""Failure kinds reported by the engine."""

from enum import Enum


class Reason(Enum):
    """Why a public operation did not succeed."""

    INVALID_PARAMETERS = "invalid_parameters"
    INCONSISTENT = "inconsistent"
    BUDGET_EXCEEDED = "budget_exceeded"
    CANCELLED = "cancelled"


class InconsistentViewError(RuntimeError):
    """The revealed clues and flags admit no mine placement."""


class EnumerationBudgetExceeded(RuntimeError):
    """Raised inside the enumerator when a component exceeds its search budget."""
