"""CLI helpers exposed for other modules."""

from .ui import Choice, StepTracker, select_with_arrows, multi_select_with_arrows

__all__ = ["Choice", "StepTracker", "select_with_arrows", "multi_select_with_arrows"]
