"""
TLS patch: certificate trust follows the live ``certTrust`` setting.
"""
import logging
import ssl
from typing import Any, Callable, Dict

import certifi

from .models import CapabilityBundle

logger = logging.getLogger(__name__)


def create_tls_patch(original: CapabilityBundle, cert_trust: Callable[[], bool]) -> Dict[str, Any]:
    """Build a ``create_default_context`` honouring OS certificates on demand.

    Without explicit CA arguments the context trusts the bundled certifi set,
    plus the OS default store when ``cert_trust()`` is true. Explicit
    ``cafile``/``capath``/``cadata`` are passed through untouched.
    """
    create_default_context = original.create_default_context

    def patched_create_default_context(
        purpose: ssl.Purpose = ssl.Purpose.SERVER_AUTH,
        *,
        cafile: Any = None,
        capath: Any = None,
        cadata: Any = None,
    ) -> ssl.SSLContext:
        if cafile or capath or cadata:
            return create_default_context(purpose, cafile=cafile, capath=capath, cadata=cadata)

        context = create_default_context(purpose, cafile=certifi.where())
        if cert_trust():
            context.load_default_certs(purpose)
        return context

    return {"create_default_context": patched_create_default_context}
