"""
Transparent proxy support for httpx transports.
"""
from .models import (
    ProxyPolicyMode,
    ProxySettings,
    CapabilityBundle,
    TransportVariant,
    VariantTable,
)
from .errors import (
    ProxyTransportError,
    CapabilityNotFoundError,
    InterceptorInstallError,
    ConfigurationLoadError,
)
from .config import is_ssl_verify_disabled_by_env
from .providers import (
    ConfigurationProvider,
    InMemoryConfigurationProvider,
    YamlConfigurationProvider,
)
from .state import ProxyConfigState
from .primitives import HTTP, HTTPS, TLS, default_primitives
from .registry import CapabilityRegistry, default_registry, acquire
from .transport import ProxyAwareTransport
from .factory import TransportVariantFactory, build_variants
from .interceptor import install_interceptor, uninstall_interceptor, is_installed
from .connect import ProxyConnection, connect_proxy_resolver
from .request_service import RequestService, RequestOptions, RequestContext

__all__ = [
    "ProxyPolicyMode",
    "ProxySettings",
    "CapabilityBundle",
    "TransportVariant",
    "VariantTable",
    "ProxyTransportError",
    "CapabilityNotFoundError",
    "InterceptorInstallError",
    "ConfigurationLoadError",
    "is_ssl_verify_disabled_by_env",
    "ConfigurationProvider",
    "InMemoryConfigurationProvider",
    "YamlConfigurationProvider",
    "ProxyConfigState",
    "HTTP",
    "HTTPS",
    "TLS",
    "default_primitives",
    "CapabilityRegistry",
    "default_registry",
    "acquire",
    "ProxyAwareTransport",
    "TransportVariantFactory",
    "build_variants",
    "install_interceptor",
    "uninstall_interceptor",
    "is_installed",
    "ProxyConnection",
    "connect_proxy_resolver",
    "RequestService",
    "RequestOptions",
    "RequestContext",
]
