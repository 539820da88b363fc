"""
Capability interceptor: swaps the registry loader for a policy-aware one.
"""
import logging
from typing import Callable, Optional

from .errors import InterceptorInstallError
from .models import CapabilityBundle, VariantTable
from .primitives import HTTP, HTTPS, TLS

logger = logging.getLogger(__name__)

_MARKER = "__proxy_interceptor__"

Loader = Callable[[str], CapabilityBundle]


def _locate_loader(registry) -> Loader:
    loader = getattr(registry, "loader", None)
    if not callable(loader):
        raise InterceptorInstallError(f"{type(registry).__name__} has no capability loader to intercept")
    return loader


def create_dispatcher(original: Loader, table: VariantTable) -> Loader:
    """Loader answering tls/http/https from ``table`` and the rest from ``original``."""

    def load(name: str) -> CapabilityBundle:
        if name == TLS:
            return table.tls
        if name not in (HTTP, HTTPS):
            return original(name)
        # Fresh copy per request, callers that patch what they receive only hurt themselves
        return table.live_selecting.get(name).copy()

    setattr(load, _MARKER, True)
    load.original = original
    load.table = table
    return load


def is_installed(registry) -> bool:
    return bool(getattr(getattr(registry, "loader", None), _MARKER, False))


def installed_table(registry) -> Optional[VariantTable]:
    if not is_installed(registry):
        return None
    return registry.loader.table


def install_interceptor(registry, table: VariantTable) -> bool:
    """Install the dispatcher on ``registry``; a second call is a no-op.

    Never raises. Returns False when the choke point cannot be patched, in
    which case connections stay direct.
    """
    try:
        original = _locate_loader(registry)
        if getattr(original, _MARKER, False):
            logger.debug("Proxy interceptor already installed")
            return True
        registry.loader = create_dispatcher(original, table)
    except (InterceptorInstallError, AttributeError, TypeError) as e:
        logger.error(f"Could not install proxy interceptor, connections will not be proxied. {e}")
        return False
    logger.info("Proxy interceptor installed")
    return True


def uninstall_interceptor(registry) -> bool:
    """Put the original loader back. Returns False if nothing was installed."""
    if not is_installed(registry):
        return False
    registry.loader = registry.loader.original
    logger.info("Proxy interceptor removed")
    return True
