"""
Provider registry for upstream vehicle-data sources.

Each provider is registered once at import time. The lookup service uses
get_all_providers() to fan out a lookup.
"""
from typing import Dict, List
from vrmlookup.providers.base import BaseProvider

_registry: Dict[str, BaseProvider] = {}


def register_provider(provider: BaseProvider) -> None:
    """Register a provider instance by its source_name."""
    _registry[provider.source_name] = provider


def get_all_providers() -> List[BaseProvider]:
    """Return all registered provider instances."""
    return list(_registry.values())


def get_provider(name: str) -> BaseProvider | None:
    """Return a specific provider by name."""
    return _registry.get(name)


def _register_all() -> None:
    from vrmlookup.providers.dvla import DVLAProvider
    from vrmlookup.providers.dvsa import DVSAProvider
    from vrmlookup.providers.vdg import VDGProvider

    register_provider(DVLAProvider())
    register_provider(DVSAProvider())
    register_provider(VDGProvider())


_register_all()
