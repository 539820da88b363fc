"""
Tests for RequestService.
"""
import httpx
import pytest
import respx
from proxy_resolver import ProxyResolver
from proxy_transport import (
    CapabilityRegistry,
    RequestContext,
    RequestOptions,
    RequestService,
    connect_proxy_resolver,
)


@pytest.fixture
def service(registry, resolver, provider, system_proxy):
    connect_proxy_resolver(provider, registry=registry, resolve_system_proxy=system_proxy, fallback=lambda url: None)
    return RequestService(resolver, registry)


class TestRequestService:

    @pytest.mark.asyncio
    async def test_request_through_resolved_proxy(self, service, system_proxy):
        context = await service.request(RequestOptions(url="http://example.com/data"))
        assert context.ok
        assert context.as_json()["proxy"] == "http://10.0.0.5:3128"
        # resolved once by the service, the transport honours the caller proxy in 'on' mode
        assert len(system_proxy.calls) == 1

    @pytest.mark.asyncio
    async def test_configured_proxy_url(self, service, system_proxy):
        service.configure(proxy_url="http://static:3128")
        assert await service.get_proxy_url("https://example.com") == "http://static:3128"
        context = await service.request(RequestOptions(url="https://example.com/"))
        assert context.as_json()["proxy"] == "http://static:3128"
        assert system_proxy.calls == []

    @pytest.mark.asyncio
    async def test_proxy_authorization(self, service, transports):
        service.configure(proxy_authorization="Basic dXNlcjpwYXNz")
        await service.request(RequestOptions(url="http://example.com/"))
        proxy = transports.created[-1]["proxy"]
        assert isinstance(proxy, httpx.Proxy)
        assert proxy.headers["Proxy-Authorization"] == "Basic dXNlcjpwYXNz"

    @pytest.mark.asyncio
    async def test_strict_ssl_off(self, service, transports):
        service.configure(strict_ssl=False)
        await service.request(RequestOptions(url="https://example.com/"))
        assert transports.created[-1]["verify"] is False

    @pytest.mark.asyncio
    async def test_direct_request(self, monkeypatch):
        for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
            monkeypatch.delenv(name, raising=False)
        service = RequestService(ProxyResolver(fallback=lambda url: None), CapabilityRegistry.with_defaults())
        with respx.mock(base_url="https://api.example.com") as mock:
            route = mock.post("/items").respond(201, json={"id": 7})
            context = await service.request(RequestOptions(
                url="https://api.example.com/items",
                method="POST",
                headers={"x-test": "1"},
                data='{"name": "a"}',
            ))
        assert context.status == 201
        assert context.as_json() == {"id": 7}
        assert route.calls.last.request.headers["x-test"] == "1"
        assert route.calls.last.request.content == b'{"name": "a"}'


class TestRequestContext:
    def test_helpers(self):
        context = RequestContext(url="http://x", status=404, body=b"not found")
        assert not context.ok
        assert context.as_text() == "not found"
