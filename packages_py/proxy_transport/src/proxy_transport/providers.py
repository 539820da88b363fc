"""
Configuration providers the proxy layer reads its settings from.
"""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Union, runtime_checkable

import yaml

from .errors import ConfigurationLoadError

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


@runtime_checkable
class ConfigurationProvider(Protocol):
    """What the proxy layer needs from a configuration store."""

    def get_config(self, section: str, key: str, default: Any = None) -> Any: ...

    def on_configuration_changed(self, listener: Listener) -> Callable[[], None]: ...


class BaseConfigurationProvider:
    """Sectioned key/value store with change listeners."""

    def __init__(self, values: Optional[Dict[str, Dict[str, Any]]] = None):
        self._values: Dict[str, Dict[str, Any]] = {}
        self._listeners: List[Listener] = []
        if values:
            self._replace(values)

    def _replace(self, values: Dict[str, Any]) -> None:
        self._values = {
            section: dict(entries) for section, entries in values.items() if isinstance(entries, dict)
        }

    def get_config(self, section: str, key: str, default: Any = None) -> Any:
        return self._values.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        return dict(self._values.get(section, {}))

    def on_configuration_changed(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def _fire(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Configuration change listener {listener!r} failed: {e}")


class InMemoryConfigurationProvider(BaseConfigurationProvider):
    """Provider backed by a dict, mostly for hosts that push settings in."""

    def update(self, section: str, **values: Any) -> None:
        self._values.setdefault(section, {}).update(values)
        logger.debug(f"Configuration section '{section}' updated: {sorted(values)}")
        self._fire()

    def set(self, section: str, key: str, value: Any) -> None:
        self.update(section, **{key: value})

    def clear(self, section: Optional[str] = None) -> None:
        if section is None:
            self._values = {}
        else:
            self._values.pop(section, None)
        self._fire()


class YamlConfigurationProvider(BaseConfigurationProvider):
    """Provider backed by a YAML document of ``{section: {key: value}}``.

    Call ``reload()`` after the file changes to notify listeners.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._replace(self._load())

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.debug(f"Config file {self.path} not found, using empty configuration")
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"YAML parsing error in {self.path}: {e}"
            logger.error(msg)
            raise ConfigurationLoadError(msg) from e
        if not isinstance(data, dict):
            raise ConfigurationLoadError(f"{self.path} must contain a mapping of sections")
        return data

    def reload(self) -> None:
        self._replace(self._load())
        logger.info(f"Reloaded configuration from {self.path}")
        self._fire()
