"""
Enumerations for search providers.
"""

from enum import Enum
from typing import Tuple


class ProviderName(str, Enum):
    """Known search backend identities."""
    GOOGLE = "google"
    BRAVE = "brave"
    XAI = "xai"


KNOWN_PROVIDERS: Tuple[str, ...] = tuple(p.value for p in ProviderName)

DEFAULT_PROVIDER_ORDER: Tuple[str, ...] = (
    ProviderName.GOOGLE.value,
    ProviderName.BRAVE.value,
    ProviderName.XAI.value,
)
