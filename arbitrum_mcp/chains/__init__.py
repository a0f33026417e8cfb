"""Chain catalog and identifier resolution."""

from .models import ChainRecord, EthBridge, NativeCurrency, NativeToken, TokenBridge
from .registry import (
    CANONICAL_CHAINS,
    CatalogUnavailableError,
    ChainRegistry,
    RegistrySnapshot,
    default_registry,
)
from .resolver import (
    ChainResolver,
    MissingEndpointError,
    ResolutionKind,
    ResolvedEndpoint,
    default_resolver,
)

__all__ = [
    "ChainRecord",
    "EthBridge",
    "NativeCurrency",
    "NativeToken",
    "TokenBridge",
    "CANONICAL_CHAINS",
    "CatalogUnavailableError",
    "ChainRegistry",
    "RegistrySnapshot",
    "default_registry",
    "ChainResolver",
    "MissingEndpointError",
    "ResolutionKind",
    "ResolvedEndpoint",
    "default_resolver",
]
