"""
Effective proxy resolution for a target URL.

Tiers, first hit wins:
1. Static override (``proxy_url`` or the live ``override_provider``)
2. System proxy collaborator (``"PROXY host:port"`` / ``"DIRECT"``)
3. Fallback strategy (app config + environment by default)
"""
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from .errors import ProxyResolutionUnavailable, ProxySpecError
from .fallback import EnvironmentProxyFallback
from .parsing import build_proxy_url, normalize_proxy_url, parse_proxy_spec
from .system import SystemProxyCallable, SystemProxyLookup
from .types import ProxyEndpoint

logger = logging.getLogger(__name__)

FallbackStrategy = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]


class ProxyResolver:
    """Resolve the proxy to use for a URL. Never raises from get_proxy_url."""

    def __init__(
        self,
        proxy_url: Optional[str] = None,
        resolve_system_proxy: Optional[SystemProxyCallable] = None,
        fallback: Optional[FallbackStrategy] = None,
        override_provider: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.proxy_url = proxy_url or None
        self.system = SystemProxyLookup(resolve_system_proxy)
        self.fallback: FallbackStrategy = fallback or EnvironmentProxyFallback()
        self.override_provider = override_provider

    def configure(self, proxy_url: Optional[str] = None) -> None:
        """Set or clear the static override proxy URL."""
        self.proxy_url = proxy_url or None
        logger.debug(f"Static proxy override set to {self.proxy_url}")

    def _override(self, url: str) -> Optional[str]:
        value = self.proxy_url
        if not value and self.override_provider is not None:
            try:
                value = self.override_provider()
            except Exception as e:
                logger.warning(f"Could not read proxy override setting: {e}")
                return None
        if not isinstance(value, str) or not value:
            return None
        return normalize_proxy_url(value, url)

    async def resolve_system_proxy(self, url: str) -> Optional[str]:
        """Raw answer from the system proxy collaborator, or None."""
        return await self.system.lookup(url)

    async def get_system_proxy_url(self, url: str) -> Optional[str]:
        """Tier 2 only. Returns None for DIRECT, no answer, or failure."""
        try:
            answer = await self.resolve_system_proxy(url)
        except ProxyResolutionUnavailable as e:
            logger.warning(f"Could not resolve system proxy. {e}")
            return None
        if not answer:
            return None
        try:
            spec = parse_proxy_spec(answer)
        except (ProxySpecError, ValueError) as e:
            logger.warning(f"Ignoring system proxy answer '{answer}': {e}")
            return None
        if not isinstance(spec, ProxyEndpoint):
            logger.debug(f"System proxy says DIRECT for {url}")
            return None
        return build_proxy_url(url, spec)

    async def get_fallback_proxy_url(self, url: str) -> Optional[str]:
        """Tier 3 only. Usable independently of the other tiers."""
        try:
            value = self.fallback(url)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.warning(f"Fallback proxy resolution failed for {url}: {e}")
            return None
        if not isinstance(value, str):
            return None
        return normalize_proxy_url(value, url)

    async def get_proxy_url(self, url: str) -> Optional[str]:
        override = self._override(url)
        if override:
            logger.debug(f"Using proxy override for {url}")
            return override

        proxy_url = await self.get_system_proxy_url(url)
        if proxy_url:
            logger.debug(f"Using system proxy {proxy_url} for {url}")
            return proxy_url

        return await self.get_fallback_proxy_url(url)
