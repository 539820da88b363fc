"""
Parsing of system proxy answers.

The system proxy collaborator answers in PAC result form:

    DIRECT
    PROXY 10.0.0.1:8080
    HTTPS secure.proxy.local:443; DIRECT

Only the first entry of a list is used. Fail-over across entries is left
to the underlying transport.
"""
import logging
from typing import Optional
from urllib.parse import urlsplit

from pydantic import ValidationError

from .errors import ProxySpecError
from .types import DIRECT, ProxyEndpoint, ProxyScheme, ProxySpec

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

# PAC entry type -> scheme implied by the type itself (None = infer from target)
_SUPPORTED_TYPES = {
    "PROXY": None,
    "HTTP": "http",
    "HTTPS": "https",
}


def target_scheme(url: str) -> ProxyScheme:
    """Scheme a proxy for ``url`` should be reached with."""
    scheme = url.split(":", 1)[0].lower() if ":" in url else ""
    if scheme in ("https", "wss"):
        return "https"
    return "http"


def _is_port(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _split_host_port(value: str, scheme: Optional[str]) -> ProxyEndpoint:
    if "://" in value:
        try:
            parts = urlsplit(value)
        except ValueError as e:
            raise ProxySpecError(f"Invalid proxy URL '{value}'") from e
        explicit = parts.scheme.lower()
        if explicit not in DEFAULT_PORTS:
            raise ProxySpecError(f"Unsupported proxy scheme '{parts.scheme}' in '{value}'")
        try:
            port = parts.port
        except ValueError as e:
            raise ProxySpecError(f"Invalid proxy port in '{value}'") from e
        host = parts.hostname or ""
        userinfo = parts.netloc.rpartition("@")[0] or None
        return _endpoint(explicit, host, port or DEFAULT_PORTS[explicit], value, userinfo)

    host, port_text = value, ""
    if value.startswith("["):
        end = value.find("]")
        if end == -1:
            raise ProxySpecError(f"Unterminated IPv6 host in '{value}'")
        host = value[1:end]
        rest = value[end + 1:]
        if rest.startswith(":"):
            port_text = rest[1:]
        elif rest:
            raise ProxySpecError(f"Unexpected text after host in '{value}'")
    elif value.count(":") == 1:
        host, port_text = value.split(":", 1)

    if port_text:
        if not _is_port(port_text):
            raise ProxySpecError(f"Invalid proxy port in '{value}'")
        port = int(port_text)
    else:
        port = DEFAULT_PORTS[scheme or "http"]
    return _endpoint(scheme, host, port, value)


def _endpoint(
    scheme: Optional[str],
    host: str,
    port: int,
    raw: str,
    userinfo: Optional[str] = None,
) -> ProxyEndpoint:
    try:
        return ProxyEndpoint(scheme=scheme, host=host, port=port, userinfo=userinfo)
    except ValidationError as e:
        raise ProxySpecError(f"Invalid proxy endpoint '{raw}'") from e


def parse_proxy_spec(value: str) -> ProxySpec:
    """Parse a ``"<TYPE> <host:port>"`` or ``"DIRECT"`` answer.

    The returned endpoint carries a scheme only when the answer states one
    (an explicit ``http://``/``https://`` host, or an ``HTTP``/``HTTPS`` type).
    """
    entry = (value or "").split(";", 1)[0].strip()
    if not entry:
        raise ProxySpecError("Empty proxy answer")

    tokens = entry.split()
    kind = tokens[0].upper()
    if kind == "DIRECT":
        return DIRECT
    if kind not in _SUPPORTED_TYPES:
        raise ProxySpecError(f"Unsupported proxy type '{tokens[0]}'")
    if len(tokens) < 2:
        raise ProxySpecError(f"Proxy answer '{entry}' has no host")
    if len(tokens) > 2:
        logger.debug(f"Ignoring extra proxy entries in '{entry}'")

    return _split_host_port(tokens[1], _SUPPORTED_TYPES[kind])


def build_proxy_url(url: str, spec: ProxySpec) -> Optional[str]:
    """Turn a parsed answer into a proxy URL for the target ``url``."""
    if not isinstance(spec, ProxyEndpoint):
        return None
    if spec.scheme is None:
        spec = spec.with_scheme(target_scheme(url))
    return spec.url


def normalize_proxy_url(value: str, url: str) -> Optional[str]:
    """Complete a configured proxy URL for the target ``url``.

    Adds a missing scheme (inferred from the target) and the default port.
    Credentials are kept, any path is dropped. Returns None, with a warning,
    for values that are not an http(s) proxy.
    """
    value = (value or "").strip()
    if not value:
        return None
    if "://" not in value:
        value = f"{target_scheme(url)}://{value}"
    try:
        endpoint = _split_host_port(value, None)
    except ProxySpecError as e:
        logger.warning(f"Ignoring proxy URL '{value}': {e}")
        return None
    return endpoint.url
