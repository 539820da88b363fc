"""
Tests for TransportVariantFactory and the proxy-aware transport.
"""
import ssl

import httpx
import pytest
from proxy_transport import (
    HTTP,
    HTTPS,
    CapabilityBundle,
    ProxyAwareTransport,
    ProxyConfigState,
    ProxyPolicyMode,
    build_variants,
)
from proxy_transport.tls import create_tls_patch


@pytest.fixture
def state():
    return ProxyConfigState()


@pytest.fixture
def table(resolver, state, registry):
    return build_variants(resolver, state, registry)


async def fetch(bundle, url="http://example.com/", **client_kwargs):
    async with bundle.create_client(**client_kwargs) as client:
        response = await client.get(url)
    return response.json()


class TestBuildVariants:
    def test_one_variant_per_mode(self, table):
        assert set(table.by_mode) == set(ProxyPolicyMode)
        assert table.live_selecting is table.variant(ProxyPolicyMode.SYSTEM_DEFAULT)
        assert table.variant("on").mode is ProxyPolicyMode.ON

    def test_default_variant_is_bound_live(self, table, registry):
        assert table.live_selecting.http is registry.primitive(HTTP)
        assert table.live_selecting.https is registry.primitive(HTTPS)

    def test_other_variants_are_copies(self, table, registry):
        for mode in (ProxyPolicyMode.OFF, ProxyPolicyMode.ON, ProxyPolicyMode.OVERRIDE, ProxyPolicyMode.FOLLOW_REQUEST_CONFIG):
            assert table.variant(mode).http is not registry.primitive(HTTP)
            assert table.variant(mode).https.scheme == "https"

    def test_tls_is_bound_live(self, table, registry):
        assert table.tls is registry.primitive("tls")


class TestLiveSelection:

    @pytest.mark.asyncio
    async def test_off_skips_lookup(self, table, system_proxy):
        body = await fetch(table.live_selecting.http)
        assert body["proxy"] is None
        assert system_proxy.calls == []

    @pytest.mark.asyncio
    async def test_mode_changes_apply_to_new_connections(self, table, state, system_proxy, provider):
        provider.update("http", proxySupport="off")
        state.attach(provider)

        async with table.live_selecting.http.create_client() as client:
            first = (await client.get("http://example.com/")).json()
            assert system_proxy.calls == []

            provider.update("http", proxySupport="on")
            second = (await client.get("http://example.com/")).json()
            assert len(system_proxy.calls) == 1

            provider.update("http", proxySupport="off")
            third = (await client.get("http://example.com/")).json()
            assert len(system_proxy.calls) == 1

        assert first["proxy"] is None
        assert second["proxy"] == "http://10.0.0.5:3128"
        assert third["proxy"] is None

    @pytest.mark.asyncio
    async def test_follow_request_config_reads_state(self, table, state, provider):
        state.attach(provider)
        body = await fetch(table.variant(ProxyPolicyMode.FOLLOW_REQUEST_CONFIG).http)
        assert body["proxy"] == "http://10.0.0.5:3128"


class TestPinnedVariants:

    @pytest.mark.asyncio
    async def test_pinned_modes_ignore_live_changes(self, table, state, provider, system_proxy):
        state.attach(provider)
        provider.update("http", proxySupport="off")
        assert (await fetch(table.variant(ProxyPolicyMode.ON).http))["proxy"] == "http://10.0.0.5:3128"
        assert (await fetch(table.variant(ProxyPolicyMode.OVERRIDE).http))["proxy"] == "http://10.0.0.5:3128"

        provider.update("http", proxySupport="on")
        calls = len(system_proxy.calls)
        assert (await fetch(table.variant(ProxyPolicyMode.OFF).http))["proxy"] is None
        assert len(system_proxy.calls) == calls

    @pytest.mark.asyncio
    async def test_on_prefers_caller_proxy(self, table, system_proxy):
        body = await fetch(table.variant(ProxyPolicyMode.ON).http, proxy="http://mine:1")
        assert body["proxy"] == "http://mine:1"
        assert system_proxy.calls == []

    @pytest.mark.asyncio
    async def test_override_ignores_caller_proxy(self, table, system_proxy):
        body = await fetch(table.variant(ProxyPolicyMode.OVERRIDE).http, proxy="http://mine:1")
        assert body["proxy"] == "http://10.0.0.5:3128"
        assert len(system_proxy.calls) == 1

    @pytest.mark.asyncio
    async def test_off_keeps_caller_proxy(self, table, system_proxy):
        body = await fetch(table.variant(ProxyPolicyMode.OFF).http, proxy="http://mine:1")
        assert body["proxy"] == "http://mine:1"
        assert system_proxy.calls == []

    @pytest.mark.asyncio
    async def test_https_target_gets_https_proxy(self, table):
        body = await fetch(table.variant(ProxyPolicyMode.ON).https, url="https://example.com/")
        assert body["proxy"] == "https://10.0.0.5:3128"


class TestProxyAwareTransport:

    @pytest.mark.asyncio
    async def test_lookup_per_request_transport_per_proxy(self, table, transports, system_proxy):
        transport = table.variant(ProxyPolicyMode.ON).http.create_transport()
        for _ in range(3):
            await transport.handle_async_request(httpx.Request("GET", "http://example.com/"))
        assert len(system_proxy.calls) == 3
        assert transport.pool_size == 1
        assert len(transports.created) == 1

        await transport.aclose()
        assert transport.pool_size == 0

    @pytest.mark.asyncio
    async def test_cert_trust_selects_tls_context(self, table, state, provider, transports):
        state.attach(provider)
        client_bundle = table.variant(ProxyPolicyMode.OFF).https
        async with client_bundle.create_client() as client:
            await client.get("https://example.com/")
            provider.update("http", systemCertificates=True)
            await client.get("https://example.com/")
            await client.get("https://example.com/")
        assert len(transports.created) == 2
        assert all(isinstance(created["verify"], ssl.SSLContext) for created in transports.created)

    @pytest.mark.asyncio
    async def test_caller_verify_is_honoured(self, table, transports):
        await fetch(table.variant(ProxyPolicyMode.OFF).http, verify=False)
        assert transports.created[-1]["verify"] is False

    @pytest.mark.asyncio
    async def test_verify_disabled_by_env(self, table, transports, monkeypatch):
        monkeypatch.setenv("SSL_CERT_VERIFY", "0")
        await fetch(table.variant(ProxyPolicyMode.OFF).http)
        assert transports.created[-1]["verify"] is False

    @pytest.mark.asyncio
    async def test_env_verify_change_is_not_served_from_pool(self, table, transports, monkeypatch):
        """Toggling SSL_CERT_VERIFY mid-client builds a fresh transport."""
        monkeypatch.delenv("SSL_CERT_VERIFY", raising=False)
        monkeypatch.delenv("NODE_TLS_REJECT_UNAUTHORIZED", raising=False)
        async with table.variant(ProxyPolicyMode.OFF).http.create_client() as client:
            await client.get("http://example.com/")
            monkeypatch.setenv("SSL_CERT_VERIFY", "0")
            await client.get("http://example.com/")
        assert len(transports.created) == 2
        assert transports.created[0]["verify"] is not False
        assert transports.created[1]["verify"] is False

    @pytest.mark.asyncio
    async def test_caller_transport_bypasses_proxy_logic(self, table, system_proxy):
        mock = httpx.MockTransport(lambda request: httpx.Response(204))
        async with table.variant(ProxyPolicyMode.OVERRIDE).http.create_client(transport=mock) as client:
            response = await client.get("http://example.com/")
        assert response.status_code == 204
        assert system_proxy.calls == []

    @pytest.mark.asyncio
    async def test_request_helper(self, table):
        response = await table.variant(ProxyPolicyMode.ON).https.request("GET", "https://example.com/x")
        assert response.status_code == 200
        assert response.json()["proxy"] == "https://10.0.0.5:3128"

    def test_create_transport_type(self, table):
        assert isinstance(table.live_selecting.http.create_transport(), ProxyAwareTransport)

    @pytest.mark.asyncio
    async def test_building_twice_does_not_nest(self, resolver, registry, transports, system_proxy):
        state = ProxyConfigState(mode=ProxyPolicyMode.ON)
        build_variants(resolver, state, registry)
        build_variants(resolver, state, registry)
        body = await fetch(registry.primitive(HTTP))
        assert body["proxy"] == "http://10.0.0.5:3128"
        assert len(system_proxy.calls) == 1
        assert len(transports.created) == 1
        assert isinstance(transports.created[0]["proxy"], str)


class FakeContext:
    def __init__(self, cafile):
        self.cafile = cafile
        self.default_certs_loaded = False

    def load_default_certs(self, purpose):
        self.default_certs_loaded = True


class TestTlsPatch:
    def make(self, trust):
        original = CapabilityBundle(
            create_default_context=lambda purpose, cafile=None, capath=None, cadata=None: FakeContext(cafile)
        )
        return create_tls_patch(original, lambda: trust["value"])["create_default_context"]

    def test_bundled_authorities_only(self):
        create = self.make({"value": False})
        context = create()
        assert context.cafile.endswith(".pem")
        assert context.default_certs_loaded is False

    def test_os_authorities_added(self):
        create = self.make({"value": True})
        assert create().default_certs_loaded is True

    def test_explicit_ca_passes_through(self):
        create = self.make({"value": True})
        context = create(cafile="/etc/custom-ca.pem")
        assert context.cafile == "/etc/custom-ca.pem"
        assert context.default_certs_loaded is False
