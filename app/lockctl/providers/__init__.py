"""Handle providers for lockctl."""

from lockctl.providers.base import (
    HandleProvider,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from lockctl.providers.smb import SmbShareProvider

__all__ = [
    "HandleProvider",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "SmbShareProvider",
]
