"""
Factory for the per-mode transport variants.
"""
import logging
from typing import Any, Callable, Dict, Optional

from proxy_resolver import ProxyResolver

from .models import (
    LIVE_SELECTING_MODES,
    CapabilityBundle,
    ProxyPolicyMode,
    TransportVariant,
    VariantTable,
)
from .primitives import HTTP, HTTPS, TLS, make_request
from .registry import CapabilityRegistry, default_registry
from .state import ProxyConfigState, cert_trust_of, live, pinned
from .tls import create_tls_patch
from .transport import ProxyAwareTransport

logger = logging.getLogger(__name__)


def create_http_patch(
    original: CapabilityBundle,
    resolver: ProxyResolver,
    policy: Callable[[], ProxyPolicyMode],
    cert_trust: Callable[[], bool],
    tls: CapabilityBundle,
) -> Dict[str, Any]:
    """Proxy-aware replacements for an http/https bundle's factories."""
    raw_create_transport = original.create_transport
    raw_create_client = original.create_client

    def create_transport(*, proxy: Any = None, verify: Any = None, **kwargs: Any) -> ProxyAwareTransport:
        return ProxyAwareTransport(
            resolver,
            policy,
            cert_trust,
            tls,
            raw_create_transport,
            proxy=proxy,
            verify=verify,
            **kwargs,
        )

    def create_client(*, proxy: Any = None, verify: Any = None, transport: Any = None, **kwargs: Any):
        if transport is not None:
            # Caller brought its own transport, leave it alone
            if proxy is not None:
                kwargs["proxy"] = proxy
            if verify is not None:
                kwargs["verify"] = verify
            return raw_create_client(transport=transport, **kwargs)
        # Proxy selection is ours, keep httpx from reading the environment
        kwargs.setdefault("trust_env", False)
        return raw_create_client(transport=create_transport(proxy=proxy, verify=verify), **kwargs)

    return {
        "create_transport": create_transport,
        "create_client": create_client,
        "request": make_request(create_client),
    }


class TransportVariantFactory:
    """Build one TransportVariant per policy mode.

    Pinned modes (off/on/override) and follow-request-config are private
    snapshots of the primitives. The system-default variant is bound live onto
    the shared primitives last, so already-held references are covered.
    """

    def __init__(
        self,
        resolver: ProxyResolver,
        config_state: Optional[ProxyConfigState] = None,
        registry: Optional[CapabilityRegistry] = None,
    ):
        self.resolver = resolver
        self.config_state = config_state or ProxyConfigState()
        self.registry = registry if registry is not None else default_registry

    def _policy_for(self, mode: ProxyPolicyMode) -> Callable[[], ProxyPolicyMode]:
        if mode in LIVE_SELECTING_MODES:
            return live(self.config_state)
        return pinned(mode)

    def _patch(self, mode: ProxyPolicyMode, tls: CapabilityBundle):
        policy = self._policy_for(mode)
        cert_trust = cert_trust_of(self.config_state)
        return lambda original: create_http_patch(original, self.resolver, policy, cert_trust, tls)

    def build_tls(self) -> CapabilityBundle:
        cert_trust = cert_trust_of(self.config_state)
        return self.registry.bind_live(TLS, lambda original: create_tls_patch(original, cert_trust))

    def build_variant(self, mode: ProxyPolicyMode, tls: CapabilityBundle) -> TransportVariant:
        mode = ProxyPolicyMode(mode)
        patch = self._patch(mode, tls)
        if mode is ProxyPolicyMode.SYSTEM_DEFAULT:
            http = self.registry.bind_live(HTTP, patch)
            https = self.registry.bind_live(HTTPS, patch)
        else:
            http = self.registry.snapshot(HTTP, patch)
            https = self.registry.snapshot(HTTPS, patch)
        return TransportVariant(mode=mode, http=http, https=https)

    def build(self) -> VariantTable:
        tls = self.build_tls()
        by_mode: Dict[ProxyPolicyMode, TransportVariant] = {}
        for mode in ProxyPolicyMode:
            if mode is not ProxyPolicyMode.SYSTEM_DEFAULT:
                by_mode[mode] = self.build_variant(mode, tls)
        # run last
        by_mode[ProxyPolicyMode.SYSTEM_DEFAULT] = self.build_variant(ProxyPolicyMode.SYSTEM_DEFAULT, tls)
        logger.debug(f"Built transport variants: {[mode.value for mode in by_mode]}")
        return VariantTable(by_mode=by_mode, tls=tls)


def build_variants(
    resolver: ProxyResolver,
    config_state: Optional[ProxyConfigState] = None,
    registry: Optional[CapabilityRegistry] = None,
) -> VariantTable:
    """Build the variant table for ``resolver`` and ``config_state``."""
    return TransportVariantFactory(resolver, config_state, registry).build()
