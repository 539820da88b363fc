"""
Proxy URL resolution from app configuration and the process environment.

This is the last tier of ProxyResolver and can be used on its own.
"""
import os
import logging
from typing import Mapping, Optional
from urllib.parse import urlsplit

from .parsing import target_scheme
from .types import NetworkConfig

logger = logging.getLogger(__name__)


def _getenv(env: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def _bypass_entries(value: Optional[str]):
    for entry in (value or "").split(","):
        entry = entry.strip().lower()
        if entry:
            yield entry


def should_bypass_proxy(url: str, no_proxy: Optional[str]) -> bool:
    """Check ``url`` against a NO_PROXY style list.

    Supports ``*``, exact hosts, ``host:port`` and domain suffixes
    (``.example.com`` or ``example.com`` both match ``api.example.com``).
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    if not host:
        return False
    try:
        port = parts.port
    except ValueError:
        port = None

    for entry in _bypass_entries(no_proxy):
        if entry == "*":
            return True
        entry_host, entry_port = entry, ""
        if entry.count(":") == 1:
            entry_host, entry_port = entry.split(":", 1)
        if entry_port and (not entry_port.isdigit() or port is None or int(entry_port) != port):
            continue
        entry_host = entry_host.lstrip(".")
        if host == entry_host or host.endswith("." + entry_host):
            return True
    return False


class EnvironmentProxyFallback:
    """Scheme-aware fallback tier for a target URL.

    NetworkConfig sources win over the environment. The environment is read
    on every call so changes to ``os.environ`` are picked up.
    """

    def __init__(
        self,
        network_config: Optional[NetworkConfig] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.network_config = network_config
        self._env = env

    @property
    def env(self) -> Mapping[str, str]:
        return os.environ if self._env is None else self._env

    def no_proxy(self) -> Optional[str]:
        if self.network_config and self.network_config.no_proxy:
            return self.network_config.no_proxy
        return _getenv(self.env, "NO_PROXY", "no_proxy")

    def __call__(self, url: str) -> Optional[str]:
        if should_bypass_proxy(url, self.no_proxy()):
            logger.debug(f"NO_PROXY matches {url}, connecting direct")
            return None

        secure = target_scheme(url) == "https"
        config = self.network_config
        if config:
            agent = config.agent_proxy
            if agent:
                proxy = (agent.https_proxy or agent.http_proxy) if secure else (agent.http_proxy or agent.https_proxy)
                if proxy:
                    logger.debug("Using agent_proxy from network config")
                    return proxy
            if config.default_environment:
                env_proxy = config.proxy_urls.get(config.default_environment)
                if env_proxy:
                    logger.debug(f"Using proxy URL for environment '{config.default_environment}'")
                    return env_proxy

        if secure:
            names = ("HTTPS_PROXY", "https_proxy", "PROXY_URL", "ALL_PROXY", "all_proxy")
        else:
            names = ("HTTP_PROXY", "http_proxy", "PROXY_URL", "ALL_PROXY", "all_proxy")
        for name in names:
            value = _getenv(self.env, name)
            if value:
                logger.debug(f"Using {name} env var for {url}")
                return value

        return None
