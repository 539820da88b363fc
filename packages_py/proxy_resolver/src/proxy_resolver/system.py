"""
Adapter around the host's system proxy capability.
"""
import inspect
import logging
from typing import Awaitable, Callable, Optional, Union

from .errors import ProxyResolutionUnavailable

logger = logging.getLogger(__name__)

SystemProxyCallable = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]


class SystemProxyLookup:
    """Ask the host which proxy a URL should use.

    The collaborator may be sync or async and may be absent altogether
    (e.g. no active session yet). Absence and ``None`` answers mean
    "no result"; collaborator failures are raised as
    ProxyResolutionUnavailable.
    """

    def __init__(self, resolve_system_proxy: Optional[SystemProxyCallable] = None):
        self._resolve = resolve_system_proxy

    @property
    def available(self) -> bool:
        return self._resolve is not None

    async def lookup(self, url: str) -> Optional[str]:
        if self._resolve is None:
            return None
        try:
            answer = self._resolve(url)
            if inspect.isawaitable(answer):
                answer = await answer
        except Exception as e:
            raise ProxyResolutionUnavailable(f"System proxy lookup failed for {url}: {e}") from e
        if answer is not None and not isinstance(answer, str):
            raise ProxyResolutionUnavailable(f"System proxy lookup returned {type(answer).__name__}, expected str")
        return answer
