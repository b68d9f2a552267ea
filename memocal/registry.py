"""
Component registry for memocal.

Grammars, calendar file encoders, calendar sync services and note loaders
register under a name and are built from ``ComponentConfig`` entries.
"""

import logging
from typing import Any, Callable, Dict, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ComponentRegistry:
    """Named factories for one kind of pluggable component."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._factories: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if name in self._factories:
                raise ValueError(f"{self.kind} '{name}' already registered.")
            self._factories[name] = factory
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._factories[name]
        except KeyError as exc:
            known = ", ".join(sorted(self._factories)) or "none"
            raise KeyError(f"Unknown {self.kind} '{name}' (available: {known}).") from exc

    def create(self, name: str, **params: Any) -> Any:
        """Instantiate the component registered as ``name``."""
        component = self.get(name)(**params)
        logger.debug(f"Built {self.kind} '{name}' with params {sorted(params)}")
        return component

    def available(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._factories)


grammars = ComponentRegistry("grammar")
encoders = ComponentRegistry("encoder")
sync_services = ComponentRegistry("sync service")
loaders = ComponentRegistry("loader")
