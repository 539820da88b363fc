"""
Basic usage examples for proxy_transport package.
"""
import asyncio
import logging
from proxy_transport import (
    InMemoryConfigurationProvider,
    ProxyPolicyMode,
    RequestService,
    acquire,
    connect_proxy_resolver,
)

logging.basicConfig(level=logging.DEBUG)


async def resolve_system_proxy(url: str) -> str:
    # A real host would ask its OS/browser session here
    return "DIRECT"


async def main() -> None:
    print("=== proxy_transport Examples ===\n")

    # 1. Wire up once at startup
    settings = InMemoryConfigurationProvider({"http": {"proxySupport": "on", "systemCertificates": True}})
    connection = connect_proxy_resolver(settings, resolve_system_proxy=resolve_system_proxy)
    print(f"Installed: {connection.installed}, mode: {connection.state.mode.value}")

    # 2. Callers acquire capability without knowing about proxies
    https = acquire("https")
    async with https.create_client() as client:
        print(f"Client transport: {type(client._transport).__name__}")

    # 3. Policy changes apply to new connections
    settings.update("http", proxySupport="off")
    print(f"Mode now: {connection.state.mode.value}")

    # 4. Code that must not follow live changes asks for a pinned variant
    pinned = connection.variants.variant(ProxyPolicyMode.ON).https
    print(f"Pinned variant scheme: {pinned.scheme}")

    # 5. Request service on top of the registry
    service = RequestService(connection.resolver)
    print(f"Proxy for example.com: {await service.get_proxy_url('https://example.com')}")
    # context = await service.request(RequestOptions(url="https://example.com"))

    print("\n=== Examples Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
