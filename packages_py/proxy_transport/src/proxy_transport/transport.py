"""
Proxy-aware httpx transport.

Every request asks the policy getter for the mode, resolves a proxy when the
mode calls for it, and hands the request to a pooled underlying transport
for that proxy. Lookups are not cached, pooled transports are.
"""
import logging
from typing import Any, Callable, Dict, Hashable

import httpx
from proxy_resolver import ProxyResolver

from .config import is_ssl_verify_disabled_by_env
from .models import CapabilityBundle, ProxyPolicyMode

logger = logging.getLogger(__name__)

ProxyArg = Any  # str, httpx.URL, httpx.Proxy or None


def _proxy_key(proxy: ProxyArg) -> Hashable:
    if proxy is None:
        return None
    if isinstance(proxy, httpx.Proxy):
        return (str(proxy.url), tuple(sorted(proxy.headers.items())))
    return str(proxy)


class ProxyAwareTransport(httpx.AsyncBaseTransport):
    """Route each request through the proxy its policy selects.

    ``proxy`` is the caller's own choice: used as is in ``off`` mode,
    preferred over resolution in ``on`` mode, ignored in ``override`` mode.
    ``verify`` is the caller's own choice; when None the TLS capability
    builds the context so certificate trust follows the live setting.
    """

    def __init__(
        self,
        resolver: ProxyResolver,
        policy: Callable[[], ProxyPolicyMode],
        cert_trust: Callable[[], bool],
        tls: CapabilityBundle,
        create_transport: Callable[..., httpx.AsyncBaseTransport],
        proxy: ProxyArg = None,
        verify: Any = None,
        **transport_kwargs: Any,
    ):
        self._resolver = resolver
        self._policy = policy
        self._cert_trust = cert_trust
        self._tls = tls
        self._create_transport = create_transport
        self._proxy = proxy
        self._verify = verify
        self._transport_kwargs = transport_kwargs
        self._pool: Dict[Hashable, httpx.AsyncBaseTransport] = {}

    @property
    def pool_size(self) -> int:
        return len(self._pool)

    async def select_proxy(self, url: str) -> ProxyArg:
        mode = self._policy()
        if mode is ProxyPolicyMode.OFF:
            return self._proxy
        if mode is ProxyPolicyMode.ON and self._proxy is not None:
            return self._proxy
        logger.debug(f"Resolving proxy for {url} in '{mode.value}' mode")
        return await self._resolver.get_proxy_url(url)

    def _verify_for(self) -> Any:
        if self._verify is not None:
            return self._verify
        if is_ssl_verify_disabled_by_env():
            return False
        return self._tls.create_default_context()

    def transport_for(self, proxy: ProxyArg) -> httpx.AsyncBaseTransport:
        cert_trust = bool(self._cert_trust()) if self._verify is None else None
        verify_disabled = is_ssl_verify_disabled_by_env() if self._verify is None else None
        key = (_proxy_key(proxy), cert_trust, verify_disabled)
        transport = self._pool.get(key)
        if transport is None:
            logger.debug(f"Creating transport proxy={_proxy_key(proxy)} cert_trust={cert_trust}")
            transport = self._create_transport(
                proxy=proxy,
                verify=self._verify_for(),
                **self._transport_kwargs,
            )
            self._pool[key] = transport
        return transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        proxy = await self.select_proxy(str(request.url))
        return await self.transport_for(proxy).handle_async_request(request)

    async def aclose(self) -> None:
        pool, self._pool = self._pool, {}
        for transport in pool.values():
            await transport.aclose()
