"""
Shared fixtures: a registry whose raw transports are httpx.MockTransport.
"""
import httpx
import pytest
from proxy_resolver import ProxyResolver
from proxy_transport import HTTP, HTTPS, CapabilityRegistry, InMemoryConfigurationProvider, default_primitives


def describe_proxy(proxy):
    if proxy is None:
        return None
    if isinstance(proxy, httpx.Proxy):
        return str(proxy.url)
    return str(proxy)


class RecordingTransportFactory:
    """Stands in for httpx.AsyncHTTPTransport and remembers how it was built."""

    def __init__(self):
        self.created = []

    def __call__(self, proxy=None, verify=True, **kwargs):
        self.created.append({"proxy": proxy, "verify": verify, **kwargs})
        via = describe_proxy(proxy)

        def handler(request):
            return httpx.Response(200, json={"url": str(request.url), "proxy": via})

        return httpx.MockTransport(handler)


class FakeSystemProxy:
    """System proxy collaborator returning a canned answer."""

    def __init__(self, answer="PROXY 10.0.0.5:3128"):
        self.answer = answer
        self.calls = []

    async def __call__(self, url):
        self.calls.append(url)
        return self.answer


@pytest.fixture
def transports():
    return RecordingTransportFactory()


@pytest.fixture
def registry(transports):
    primitives = default_primitives()
    primitives[HTTP].create_transport = transports
    primitives[HTTPS].create_transport = transports
    return CapabilityRegistry(primitives)


@pytest.fixture
def system_proxy():
    return FakeSystemProxy()


@pytest.fixture
def resolver(system_proxy):
    return ProxyResolver(resolve_system_proxy=system_proxy, fallback=lambda url: None)


@pytest.fixture
def provider():
    return InMemoryConfigurationProvider({"http": {"proxySupport": "on", "systemCertificates": False}})
