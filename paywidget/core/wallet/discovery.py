"""Injected wallet discovery on the host environment."""

import logging
from typing import Any, Dict, List, Optional

from paywidget.config import settings


logger = logging.getLogger(__name__)


def _candidates(host: Any) -> List[Any]:
    """Every injected provider object exposed by ``host``."""
    ethereum = getattr(host, "ethereum", None)
    if ethereum is None:
        return []
    # Several extensions installed side by side share one aggregator
    providers = getattr(ethereum, "providers", None)
    if providers:
        return list(providers)
    return [ethereum]


def discover_providers(
    host: Any,
    vetted: Optional[Dict[str, str]] = None,
) -> Dict[str, bool]:
    """
    Map each vetted wallet kind to whether the host exposes it.

    Args:
        host: Object carrying an ``ethereum`` attribute, optionally with a
            ``providers`` list of sub-providers
        vetted: Capability flag -> display name. Defaults to
            ``settings.vetted_wallet_extensions``.

    Returns:
        Display name -> availability for every vetted wallet kind
    """
    vetted = vetted if vetted is not None else settings.vetted_wallet_extensions
    candidates = _candidates(host)

    found = {
        name: any(getattr(provider, flag, False) is True for provider in candidates)
        for flag, name in vetted.items()
    }
    logger.debug(f"Discovered injected providers: {found}")
    return found


def locate_provider(host: Any, flag: Optional[str]) -> Optional[Any]:
    """Return the injected provider advertising ``flag``, if any."""
    if not flag:
        return None
    for provider in _candidates(host):
        if getattr(provider, flag, False) is True:
            return provider
    return None
