"""
Convenience functions around a process-wide default resolver.
"""
from typing import Optional

from .fallback import EnvironmentProxyFallback
from .resolver import FallbackStrategy, ProxyResolver
from .system import SystemProxyCallable
from .types import NetworkConfig

# Global default resolver, environment fallback only until configured
_default_resolver = ProxyResolver()


def get_default_resolver() -> ProxyResolver:
    return _default_resolver


def configure_default_resolver(
    proxy_url: Optional[str] = None,
    resolve_system_proxy: Optional[SystemProxyCallable] = None,
    network_config: Optional[NetworkConfig] = None,
    fallback: Optional[FallbackStrategy] = None,
) -> ProxyResolver:
    """Replace the default resolver's tiers and return it."""
    global _default_resolver
    _default_resolver = ProxyResolver(
        proxy_url=proxy_url,
        resolve_system_proxy=resolve_system_proxy,
        fallback=fallback or EnvironmentProxyFallback(network_config=network_config),
    )
    return _default_resolver


async def get_proxy_url(url: str) -> Optional[str]:
    """Resolve the proxy for ``url`` using the default resolver."""
    return await _default_resolver.get_proxy_url(url)
