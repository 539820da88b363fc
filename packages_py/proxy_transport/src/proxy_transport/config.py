"""
Setting keys and environment detection functions.
"""
import os

# Configuration section and keys read from the configuration provider
HTTP_SECTION = "http"
PROXY_SUPPORT_KEY = "proxySupport"
SYSTEM_CERTIFICATES_KEY = "systemCertificates"
PROXY_KEY = "proxy"

_TRUTHY = ("true", "1", "yes", "on")


def is_ssl_verify_disabled_by_env() -> bool:
    """Check if SSL verification is disabled by environment variables."""
    # Node.js compatibility
    if os.getenv("NODE_TLS_REJECT_UNAUTHORIZED") == "0":
        return True

    # Python convention
    if os.getenv("SSL_CERT_VERIFY") == "0":
        return True

    return False


def coerce_bool(value) -> bool:
    """Boolean coercion with string support, None is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, int):
        return bool(value)
    return bool(value)
