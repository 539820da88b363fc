"""Exceptions raised by proxy resolution."""


class ProxyResolverError(Exception):
    """Base class for proxy resolution errors."""
    pass


class ProxySpecError(ProxyResolverError):
    """Raised when a system proxy answer cannot be parsed."""
    pass


class ProxyResolutionUnavailable(ProxyResolverError):
    """Raised when the system proxy collaborator fails."""
    pass
