"""
Resilience Module

- RetryExecutor / RetryPolicy / CallResult: bounded retry with exponential
  backoff and transient/permanent classification
- ConnectivityProbe: one-shot startup health check built on the executor
"""

from .connectivity_probe import PROBE_POLICY, ConnectivityProbe
from .retry_executor import CallResult, RetryExecutor, RetryPolicy

__all__ = [
    "CallResult",
    "RetryExecutor",
    "RetryPolicy",
    "ConnectivityProbe",
    "PROBE_POLICY",
]
