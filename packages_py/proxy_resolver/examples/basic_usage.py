"""
Basic usage examples for proxy_resolver package.

Resolution tiers: static override -> system proxy -> config/environment fallback.
"""
import asyncio
import os
from proxy_resolver import (
    ProxyResolver,
    EnvironmentProxyFallback,
    NetworkConfig,
    parse_proxy_spec,
)


# =============================================================================
# Example 1: Parse system proxy answers
# =============================================================================
def example1_parse_answers() -> None:
    print("Example 1 - Parse answers:")
    for answer in ("DIRECT", "PROXY 10.0.0.1:8080", "HTTPS secure.proxy.local:443; DIRECT"):
        print(f"  {answer!r} -> {parse_proxy_spec(answer)!r}")


# =============================================================================
# Example 2: System proxy collaborator
# =============================================================================
async def example2_system_proxy() -> None:
    """
    The host answers in PAC form, the scheme follows the target URL.
    """
    async def resolve_system_proxy(url: str) -> str:
        return "PROXY 10.0.0.5:3128"

    resolver = ProxyResolver(resolve_system_proxy=resolve_system_proxy)
    print("\nExample 2 - System proxy:")
    print(f"  http  -> {await resolver.get_proxy_url('http://example.com')}")
    print(f"  https -> {await resolver.get_proxy_url('https://example.com')}")


# =============================================================================
# Example 3: Environment fallback
# =============================================================================
async def example3_env_fallback() -> None:
    os.environ["HTTPS_PROXY"] = "http://corporate-proxy:8080"
    os.environ["NO_PROXY"] = "internal.local"

    resolver = ProxyResolver(fallback=EnvironmentProxyFallback())
    print("\nExample 3 - Environment fallback:")
    print(f"  public   -> {await resolver.get_proxy_url('https://example.com')}")
    print(f"  internal -> {await resolver.get_proxy_url('https://svc.internal.local')}")

    # Cleanup
    del os.environ["HTTPS_PROXY"]
    del os.environ["NO_PROXY"]


# =============================================================================
# Example 4: app.yaml network section as fallback
# =============================================================================
async def example4_network_config() -> None:
    network_config = NetworkConfig(
        default_environment="prod",
        proxy_urls={
            "dev": None,
            "prod": "http://prod-proxy.internal:3128"
        }
    )
    resolver = ProxyResolver(fallback=EnvironmentProxyFallback(network_config=network_config))
    print(f"\nExample 4 - Network config: {await resolver.get_proxy_url('https://example.com')}")


async def main() -> None:
    print("=== proxy_resolver Examples ===\n")

    example1_parse_answers()
    await example2_system_proxy()
    await example3_env_fallback()
    await example4_network_config()

    print("\n=== Examples Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
