"""
Exception Module

Structured exception hierarchy for the vision gateway.
Exceptions are organized by theme:

- **base.py**: VisionGatewayError base class + ConfigurationError
- **request.py**: Remote analysis request errors (transient / permanent)
- **connectivity.py**: Startup connectivity probe failure
- **capture.py**: Capture source failures
- **lifecycle.py**: Use-after-close

Quota exhaustion is deliberately absent: it is a gateway state
(``CycleOutcome.QUOTA_BLOCKED``), not an exception.

Usage:
------
```python
from vision_gateway.core.exceptions import TransientRequestError, classify_error
```
"""

from vision_gateway.core.exceptions.base import ConfigurationError, VisionGatewayError
from vision_gateway.core.exceptions.capture import CaptureError
from vision_gateway.core.exceptions.classification import classify_error
from vision_gateway.core.exceptions.connectivity import ConnectivityError
from vision_gateway.core.exceptions.lifecycle import DisposedError
from vision_gateway.core.exceptions.request import (
    PermanentRequestError,
    RequestError,
    TransientRequestError,
)

__all__ = [
    # Base
    "VisionGatewayError",
    "ConfigurationError",
    # Request
    "RequestError",
    "TransientRequestError",
    "PermanentRequestError",
    "classify_error",
    # Connectivity
    "ConnectivityError",
    # Capture
    "CaptureError",
    # Lifecycle
    "DisposedError",
]
