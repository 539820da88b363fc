"""Exceptions raised by the transport interception layer."""


class ProxyTransportError(Exception):
    """Base class for transport interception errors."""
    pass


class CapabilityNotFoundError(ProxyTransportError, LookupError):
    """Raised when a capability name has no registered primitive."""
    pass


class InterceptorInstallError(ProxyTransportError):
    """Raised when the capability choke point cannot be patched."""
    pass


class ConfigurationLoadError(ProxyTransportError):
    """Raised when a configuration file cannot be parsed."""
    pass
