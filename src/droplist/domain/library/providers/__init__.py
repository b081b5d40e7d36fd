"""
Remote library provider registry.

Provides access to all available provider modules.
"""

from typing import Any, List

from . import drive

PROVIDERS: dict[str, Any] = {"drive": drive}


def get_provider(name: str) -> Any:
    """Get provider module by name.

    Raises:
        ValueError: If provider not found
    """
    if name not in PROVIDERS:
        raise ValueError(
            f"Unknown provider: '{name}'. Available providers: {', '.join(list_providers())}"
        )
    return PROVIDERS[name]


def list_providers() -> List[str]:
    return list(PROVIDERS.keys())


__all__ = ["PROVIDERS", "get_provider", "list_providers", "drive"]
