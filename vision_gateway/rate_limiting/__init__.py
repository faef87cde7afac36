"""
Rate Limiting Module

Call quota accounting for the billed remote analysis service.
"""

from .quota_tracker import QuotaState, QuotaTracker, period_start_for

__all__ = ["QuotaState", "QuotaTracker", "period_start_for"]
