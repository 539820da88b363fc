"""
Data models for transport interception.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import SimpleNamespace
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ProxyPolicyMode(str, Enum):
    """How outgoing connections pick a proxy."""
    OFF = "off"
    ON = "on"
    OVERRIDE = "override"
    FOLLOW_REQUEST_CONFIG = "onRequest"
    SYSTEM_DEFAULT = "default"


# Modes a configuration value may select for the live state
LIVE_MODES = (ProxyPolicyMode.OFF, ProxyPolicyMode.ON, ProxyPolicyMode.OVERRIDE)

# Modes whose variant reads the live state instead of a pinned mode
LIVE_SELECTING_MODES = (ProxyPolicyMode.FOLLOW_REQUEST_CONFIG, ProxyPolicyMode.SYSTEM_DEFAULT)


class ProxySettings(BaseModel):
    """Snapshot of the live proxy policy."""
    model_config = ConfigDict(frozen=True)

    mode: ProxyPolicyMode = ProxyPolicyMode.OFF
    cert_trust: bool = False


class CapabilityBundle(SimpleNamespace):
    """Mutable namespace of transport callables.

    Plays the part of an importable module: callers grab attributes off it,
    and anything holding a reference sees in-place patches.
    """

    def copy(self) -> "CapabilityBundle":
        return CapabilityBundle(**vars(self))

    def merged(self, patch: Dict[str, Any]) -> "CapabilityBundle":
        return CapabilityBundle(**{**vars(self), **patch})


PatchBuilder = Callable[[CapabilityBundle], Dict[str, Any]]


@dataclass(frozen=True)
class TransportVariant:
    """Plain and secure HTTP capability for one policy mode."""
    mode: ProxyPolicyMode
    http: CapabilityBundle
    https: CapabilityBundle

    def get(self, name: str) -> CapabilityBundle:
        return getattr(self, name)


@dataclass(frozen=True)
class VariantTable:
    """All variants built at startup plus the patched TLS capability."""
    by_mode: Dict[ProxyPolicyMode, TransportVariant]
    tls: CapabilityBundle
    live_selecting: Optional[TransportVariant] = field(default=None)

    def __post_init__(self) -> None:
        if self.live_selecting is None:
            object.__setattr__(self, "live_selecting", self.by_mode[ProxyPolicyMode.SYSTEM_DEFAULT])

    def variant(self, mode: ProxyPolicyMode) -> TransportVariant:
        return self.by_mode[ProxyPolicyMode(mode)]
