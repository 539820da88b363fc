"""
Backend request service.

Sends requests through whatever http/https capability the registry hands
out, so once the interceptor is installed every request follows the live
proxy policy.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, Field
from proxy_resolver import ProxyResolver, target_scheme

from .primitives import HTTP, HTTPS
from .registry import CapabilityRegistry, default_registry

logger = logging.getLogger(__name__)


class RequestOptions(BaseModel):
    """A single outgoing request."""
    url: str
    method: str = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    data: Optional[Union[str, bytes]] = None
    timeout: Optional[float] = None
    follow_redirects: bool = True


@dataclass
class RequestContext:
    """Fully read response."""
    url: str
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def as_text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")

    def as_json(self) -> Any:
        return json.loads(self.as_text())


class RequestService:
    """Request entry point for the surrounding application."""

    def __init__(
        self,
        resolver: Optional[ProxyResolver] = None,
        registry: Optional[CapabilityRegistry] = None,
    ):
        self.resolver = resolver or ProxyResolver()
        self.registry = registry if registry is not None else default_registry
        self.strict_ssl = True
        self.proxy_authorization: Optional[str] = None

    def configure(
        self,
        proxy_url: Optional[str] = None,
        strict_ssl: bool = True,
        proxy_authorization: Optional[str] = None,
    ) -> None:
        self.resolver.configure(proxy_url)
        self.strict_ssl = strict_ssl
        self.proxy_authorization = proxy_authorization or None

    async def get_proxy_url(self, url: str) -> Optional[str]:
        return await self.resolver.get_proxy_url(url)

    def _proxy_for(self, proxy_url: Optional[str]) -> Any:
        if proxy_url and self.proxy_authorization:
            return httpx.Proxy(proxy_url, headers={"Proxy-Authorization": self.proxy_authorization})
        return proxy_url

    async def request(self, options: RequestOptions) -> RequestContext:
        capability = self.registry.acquire(HTTPS if target_scheme(options.url) == "https" else HTTP)
        proxy_url = await self.get_proxy_url(options.url)

        client_kwargs: Dict[str, Any] = {"follow_redirects": options.follow_redirects}
        proxy = self._proxy_for(proxy_url)
        if proxy is not None:
            client_kwargs["proxy"] = proxy
        if not self.strict_ssl:
            client_kwargs["verify"] = False
        if options.timeout is not None:
            client_kwargs["timeout"] = options.timeout

        logger.debug(f"{options.method} {options.url} proxy={proxy_url}")
        async with capability.create_client(**client_kwargs) as client:
            response = await client.request(
                options.method,
                options.url,
                headers=options.headers,
                content=options.data,
            )

        return RequestContext(
            url=str(response.url),
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )
