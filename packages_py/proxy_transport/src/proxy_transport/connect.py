"""
One-shot wiring of proxy support into a host process.
"""
import logging
import weakref
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from proxy_resolver import EnvironmentProxyFallback, ProxyResolver
from proxy_resolver.resolver import FallbackStrategy
from proxy_resolver.system import SystemProxyCallable

from .config import HTTP_SECTION, PROXY_KEY
from .errors import ProxyTransportError
from .factory import TransportVariantFactory
from .interceptor import install_interceptor
from .models import VariantTable
from .providers import ConfigurationProvider
from .registry import CapabilityRegistry, default_registry
from .state import ProxyConfigState

logger = logging.getLogger(__name__)


@dataclass
class ProxyConnection:
    """What ``connect_proxy_resolver`` wired up."""
    resolver: ProxyResolver
    state: ProxyConfigState
    variants: Optional[VariantTable]
    installed: bool
    unsubscribe: List[Callable[[], None]] = field(default_factory=list)

    async def get_proxy_url(self, url: str) -> Optional[str]:
        return await self.resolver.get_proxy_url(url)

    def dispose(self) -> None:
        """Stop following configuration changes."""
        for stop in self.unsubscribe:
            stop()
        self.unsubscribe = []


_connections: "weakref.WeakKeyDictionary[CapabilityRegistry, ProxyConnection]" = weakref.WeakKeyDictionary()


def _override_reader(config_provider: ConfigurationProvider) -> Callable[[], Optional[str]]:
    return lambda: config_provider.get_config(HTTP_SECTION, PROXY_KEY)


def connect_proxy_resolver(
    config_provider: ConfigurationProvider,
    registry: Optional[CapabilityRegistry] = None,
    resolve_system_proxy: Optional[SystemProxyCallable] = None,
    fallback: Optional[FallbackStrategy] = None,
) -> ProxyConnection:
    """Follow ``config_provider`` and route ``registry`` through the proxy layer.

    Called once at startup. Later calls for the same registry return the
    first connection unchanged. Never raises: on failure the returned
    connection has ``installed=False`` and connections stay direct.
    """
    registry = registry if registry is not None else default_registry
    existing = _connections.get(registry)
    if existing is not None:
        logger.debug("Proxy resolver already connected for this registry")
        return existing

    state = ProxyConfigState()
    unsubscribe: List[Callable[[], None]] = []
    try:
        unsubscribe = state.attach(config_provider)
    except Exception as e:
        logger.warning(f"Could not follow proxy configuration, using defaults. {e}")

    resolver = ProxyResolver(
        resolve_system_proxy=resolve_system_proxy,
        fallback=fallback or EnvironmentProxyFallback(),
        override_provider=_override_reader(config_provider),
    )

    variants: Optional[VariantTable] = None
    installed = False
    try:
        variants = TransportVariantFactory(resolver, state, registry).build()
    except ProxyTransportError as e:
        logger.error(f"Could not build proxy transports, connections will not be proxied. {e}")
    else:
        installed = install_interceptor(registry, variants)

    connection = ProxyConnection(
        resolver=resolver,
        state=state,
        variants=variants,
        installed=installed,
        unsubscribe=unsubscribe,
    )
    try:
        _connections[registry] = connection
    except TypeError:
        logger.debug(f"{type(registry).__name__} cannot be tracked, repeated connects will rebuild")
    return connection
