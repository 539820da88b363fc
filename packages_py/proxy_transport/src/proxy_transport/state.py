"""
Process-wide proxy policy state.

One writer (the configuration change listeners registered by ``attach``),
many readers (every connection in flight). Each write swaps in a new frozen
ProxySettings, so readers never see a half-applied update.
"""
import logging
from typing import Any, Callable, List, Optional, Tuple

from .config import HTTP_SECTION, PROXY_SUPPORT_KEY, SYSTEM_CERTIFICATES_KEY, coerce_bool
from .models import LIVE_MODES, ProxyPolicyMode, ProxySettings
from .providers import ConfigurationProvider

logger = logging.getLogger(__name__)


def coerce_mode(value: Any) -> ProxyPolicyMode:
    """Map a configuration value to a live mode, defaulting to OFF."""
    if value is None:
        return ProxyPolicyMode.OFF
    # YAML reads bare on/off as booleans
    if isinstance(value, bool):
        return ProxyPolicyMode.ON if value else ProxyPolicyMode.OFF
    try:
        mode = ProxyPolicyMode(value)
    except ValueError:
        logger.debug(f"Unknown proxy support value {value!r}, using 'off'")
        return ProxyPolicyMode.OFF
    if mode not in LIVE_MODES:
        logger.debug(f"Proxy support value {value!r} cannot be live, using 'off'")
        return ProxyPolicyMode.OFF
    return mode


class ProxyConfigState:
    """Live proxy policy read by the dynamically selected transports."""

    def __init__(
        self,
        mode: ProxyPolicyMode = ProxyPolicyMode.OFF,
        cert_trust: bool = False,
    ):
        self._settings = ProxySettings(mode=coerce_mode(mode), cert_trust=cert_trust)

    def current(self) -> ProxySettings:
        return self._settings

    @property
    def mode(self) -> ProxyPolicyMode:
        return self._settings.mode

    @property
    def cert_trust(self) -> bool:
        return self._settings.cert_trust

    def _read(self, provider: ConfigurationProvider, key: str) -> Tuple[bool, Any]:
        try:
            return True, provider.get_config(HTTP_SECTION, key)
        except Exception as e:
            logger.warning(f"Could not read {HTTP_SECTION}.{key}, keeping the previous value. {e}")
            return False, None

    def refresh_mode(self, provider: ConfigurationProvider) -> None:
        ok, value = self._read(provider, PROXY_SUPPORT_KEY)
        if not ok:
            return
        mode = coerce_mode(value)
        if mode is not self._settings.mode:
            logger.info(f"Proxy support changed to '{mode.value}'")
        self._settings = self._settings.model_copy(update={"mode": mode})

    def refresh_cert_trust(self, provider: ConfigurationProvider) -> None:
        ok, value = self._read(provider, SYSTEM_CERTIFICATES_KEY)
        if not ok:
            return
        cert_trust = coerce_bool(value)
        if cert_trust != self._settings.cert_trust:
            logger.info(f"System certificates {'enabled' if cert_trust else 'disabled'}")
        self._settings = self._settings.model_copy(update={"cert_trust": cert_trust})

    def attach(self, provider: ConfigurationProvider) -> List[Callable[[], None]]:
        """Follow ``provider`` and read the current settings.

        One listener per tracked setting, registered before the first read so
        a store that fails now is still picked up on its next change event.
        Returns the unsubscribe callables.
        """
        unsubscribe = [
            provider.on_configuration_changed(lambda: self.refresh_mode(provider)),
            provider.on_configuration_changed(lambda: self.refresh_cert_trust(provider)),
        ]
        self.refresh_mode(provider)
        self.refresh_cert_trust(provider)
        return unsubscribe


def pinned(mode: ProxyPolicyMode) -> Callable[[], ProxyPolicyMode]:
    """Policy getter that always answers ``mode``."""
    return lambda: mode


def live(state: ProxyConfigState) -> Callable[[], ProxyPolicyMode]:
    """Policy getter that reads ``state`` on every call."""
    return lambda: state.mode


def cert_trust_of(state: Optional[ProxyConfigState]) -> Callable[[], bool]:
    if state is None:
        return lambda: False
    return lambda: state.cert_trust
