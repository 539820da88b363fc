"""
Raw transport primitives, before any proxy support is layered on.
"""
import ssl
from typing import Any, Callable, Dict

import httpx

from .models import CapabilityBundle

HTTP = "http"
HTTPS = "https"
TLS = "tls"


def make_request(create_client: Callable[..., httpx.AsyncClient]):
    """One-shot request helper bound to a client factory."""

    async def request(
        method: str,
        url: str,
        *,
        proxy: Any = None,
        verify: Any = None,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
        **kwargs: Any,
    ) -> httpx.Response:
        client_kwargs: Dict[str, Any] = {}
        if proxy is not None:
            client_kwargs["proxy"] = proxy
        if verify is not None:
            client_kwargs["verify"] = verify
        async with create_client(**client_kwargs) as client:
            return await client.request(method, url, timeout=timeout, **kwargs)

    return request


def http_primitive(scheme: str = HTTP) -> CapabilityBundle:
    return CapabilityBundle(
        scheme=scheme,
        default_port=443 if scheme == HTTPS else 80,
        create_transport=httpx.AsyncHTTPTransport,
        create_client=httpx.AsyncClient,
        request=make_request(httpx.AsyncClient),
    )


def tls_primitive() -> CapabilityBundle:
    return CapabilityBundle(
        create_default_context=ssl.create_default_context,
        Purpose=ssl.Purpose,
    )


def default_primitives() -> Dict[str, CapabilityBundle]:
    return {
        HTTP: http_primitive(HTTP),
        HTTPS: http_primitive(HTTPS),
        TLS: tls_primitive(),
    }
