"""
Proxy resolution package.
"""
from .types import NetworkConfig, AgentProxyConfig, ProxyEndpoint, Direct, ProxySpec, DIRECT
from .errors import ProxyResolverError, ProxySpecError, ProxyResolutionUnavailable
from .parsing import parse_proxy_spec, build_proxy_url, normalize_proxy_url, target_scheme
from .fallback import should_bypass_proxy, EnvironmentProxyFallback
from .system import SystemProxyLookup
from .resolver import ProxyResolver
from .defaults import get_proxy_url, get_default_resolver, configure_default_resolver

__all__ = [
    "NetworkConfig",
    "AgentProxyConfig",
    "ProxyEndpoint",
    "Direct",
    "ProxySpec",
    "DIRECT",
    "ProxyResolverError",
    "ProxySpecError",
    "ProxyResolutionUnavailable",
    "parse_proxy_spec",
    "build_proxy_url",
    "normalize_proxy_url",
    "target_scheme",
    "should_bypass_proxy",
    "EnvironmentProxyFallback",
    "SystemProxyLookup",
    "ProxyResolver",
    "get_proxy_url",
    "get_default_resolver",
    "configure_default_resolver",
]
