"""
Capability registry: the single place code obtains transport capability.

``acquire(name)`` always goes through ``registry.loader``, which the
interceptor replaces. Primitives can be patched two ways:

- ``bind_live``: patch the shared primitive bundle in place, so references
  handed out earlier see the new behaviour.
- ``snapshot``: patch a private copy, leaving the shared bundle alone.

Both wrap the unpatched originals, so binding again never nests patches.
"""
import logging
from typing import Callable, Dict, Optional

from .errors import CapabilityNotFoundError
from .models import CapabilityBundle, PatchBuilder
from .primitives import default_primitives

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """Named transport capabilities with a replaceable loader."""

    def __init__(self, primitives: Optional[Dict[str, CapabilityBundle]] = None):
        self._primitives: Dict[str, CapabilityBundle] = {}
        self._originals: Dict[str, CapabilityBundle] = {}
        self.loader: Callable[[str], CapabilityBundle] = self._load_primitive
        for name, bundle in (primitives or {}).items():
            self.register(name, bundle)

    @classmethod
    def with_defaults(cls) -> "CapabilityRegistry":
        return cls(default_primitives())

    def register(self, name: str, bundle: CapabilityBundle) -> None:
        self._primitives[name] = bundle
        self._originals[name] = bundle.copy()
        logger.debug(f"Registered capability: {name}")

    def names(self):
        return list(self._primitives)

    def primitive(self, name: str) -> CapabilityBundle:
        """The shared bundle for ``name``, patched or not."""
        if name not in self._primitives:
            raise CapabilityNotFoundError(f"Capability '{name}' not found. Available: {self.names()}")
        return self._primitives[name]

    def original(self, name: str) -> CapabilityBundle:
        """A copy of the bundle as it was registered."""
        if name not in self._originals:
            raise CapabilityNotFoundError(f"Capability '{name}' not found. Available: {self.names()}")
        return self._originals[name].copy()

    def _load_primitive(self, name: str) -> CapabilityBundle:
        return self.primitive(name)

    def acquire(self, name: str) -> CapabilityBundle:
        return self.loader(name)

    def bind_live(self, name: str, build_patch: PatchBuilder) -> CapabilityBundle:
        """Patch the shared bundle in place and return it."""
        original = self.original(name)
        live = self.primitive(name)
        attrs = vars(live)
        attrs.update(vars(original))
        attrs.update(build_patch(original))
        logger.debug(f"Bound live patch onto capability '{name}'")
        return live

    def snapshot(self, name: str, build_patch: PatchBuilder) -> CapabilityBundle:
        """Return a patched private copy, the shared bundle is untouched."""
        original = self.original(name)
        return original.merged(build_patch(original))

    def restore(self, name: str) -> CapabilityBundle:
        """Undo ``bind_live`` on the shared bundle."""
        live = self.primitive(name)
        vars(live).update(vars(self._originals[name]))
        return live


# Process-wide registry
default_registry = CapabilityRegistry.with_defaults()


def acquire(name: str) -> CapabilityBundle:
    """Obtain a transport capability from the default registry."""
    return default_registry.acquire(name)
