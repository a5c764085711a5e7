from providers.errors import ProviderError, ProviderConfigError, ProviderCallFailure
from providers.models import ProviderInfo, ProviderStatus
from providers.registry import ProviderRegistry, PROVIDER_CLASSES

__all__ = [
    "ProviderError",
    "ProviderConfigError",
    "ProviderCallFailure",
    "ProviderInfo",
    "ProviderStatus",
    "ProviderRegistry",
    "PROVIDER_CLASSES",
]
