"""
Configuration Module

Centralized, type-safe configuration management for the vision gateway.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants, enums, and default numbers

Usage:
------
```python
from vision_gateway.core.config import get_settings
from vision_gateway.core.config.constants import Stage, CycleOutcome

settings = get_settings()
limit = settings.quota.QUOTA_LIMIT
```

Environment Variables:
---------------------
Configuration is loaded from environment variables or a `.env` file:

```bash
AZURE_VISION_API_KEY=...
AZURE_VISION_ENDPOINT=https://<resource>.cognitiveservices.azure.com
QUOTA_LIMIT=5000
QUOTA_PERIOD=none
CACHE_TTL_SECONDS=86400
RETRY_MAX_ATTEMPTS=3
RETRY_BASE_DELAY=1.0
LOG_LEVEL=INFO
LOG_FORMAT=console
```
"""

from .settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
