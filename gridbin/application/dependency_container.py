"""
Dependency Injection Container

Holds the process-wide services built during application start-up so the
API layer resolves them instead of reaching for module globals.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when attempting to resolve an unregistered dependency."""
    pass


class DependencyContainer:
    """
    Type-keyed registry for the services of one application instance.

    Instances are registered directly or built by a factory, either on
    every resolve or once on first use (``cached=True``). Test overrides
    shadow both. ``shutdown()`` closes every owned instance that has a
    ``close`` method, in reverse order of registration.
    """

    def __init__(self):
        self._instances: Dict[Type, Any] = {}
        self._builders: Dict[Type, Callable[[], Any]] = {}
        self._cached_builders: set = set()
        self._overrides: Dict[Type, Any] = {}
        self._owned: List[Any] = []
        self._lock = threading.RLock()

    def register_singleton(self, interface: Type[T], instance: T, owned: bool = False) -> None:
        """
        Make every resolve of interface return instance.

        Args:
            interface: Key, usually an ABC such as IBlobStore
            instance: Shared instance
            owned: Close the instance on shutdown()
        """
        with self._lock:
            self._instances[interface] = instance
            if owned:
                self._owned.append(instance)
        logger.debug(f"{interface.__name__} -> {type(instance).__name__}")

    def register_factory(self, interface: Type[T], factory: Callable[[], T], cached: bool = False) -> None:
        """Build interface with factory, once if cached, else on every resolve."""
        with self._lock:
            self._builders[interface] = factory
            if cached:
                self._cached_builders.add(interface)
            else:
                self._cached_builders.discard(interface)

    def resolve(self, interface: Type[T]) -> T:
        """
        Return the service registered for interface.

        Raises:
            DependencyNotFoundError: If nothing is registered for it
        """
        with self._lock:
            if interface in self._overrides:
                return self._overrides[interface]
            if interface in self._instances:
                return self._instances[interface]
            factory = self._builders.get(interface)
            if factory is None:
                raise DependencyNotFoundError(f"Nothing registered for {interface.__name__}")
            if interface not in self._cached_builders:
                return factory()
            # RLock lets a cached factory resolve its own dependencies
            instance = factory()
            self._instances[interface] = instance
            return instance

    def override(self, interface: Type[T], instance: T) -> None:
        with self._lock:
            self._overrides[interface] = instance

    def clear_overrides(self) -> None:
        with self._lock:
            self._overrides.clear()

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return any(interface in table for table in (self._overrides, self._instances, self._builders))

    def shutdown(self) -> None:
        """Close owned instances, newest first; a failing close is logged."""
        with self._lock:
            owned, self._owned = self._owned[::-1], []
        for instance in owned:
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as e:
                logger.warning(f"Error closing {type(instance).__name__}: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._instances.keys() | self._builders.keys())
