from .azure_provider import AzureVisionProvider
from .base_provider import BaseVisionProvider, ProviderConfig
from .fake_provider import FakeVisionProvider

__all__ = ["AzureVisionProvider", "BaseVisionProvider", "FakeVisionProvider", "ProviderConfig"]
