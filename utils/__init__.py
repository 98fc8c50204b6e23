# utils/__init__.py
"""General utility functions for the FutureLetter orchestrator."""

from .logging import setup_logging
from .milestone_scheduling import add_months, assign_due_dates, months_after

__all__ = ["setup_logging", "add_months", "assign_due_dates", "months_after"]
