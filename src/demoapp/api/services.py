"""Value service capability and the registry that wires services into the API."""

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ValueService(ABC):
    """Capability that produces the value served by the API."""

    @abstractmethod
    def get_value(self) -> str:
        """Return the value to serve."""
        pass


class Service(ValueService):
    """Production value service."""

    def get_value(self) -> str:
        return "Hello world"


class ServiceLifetime(str, Enum):
    """How long a resolved service instance lives."""

    SINGLETON = "singleton"  # One shared instance per registry
    TRANSIENT = "transient"  # New instance on every resolution


class ServiceRegistryError(Exception):
    """Base error for service registration and resolution failures."""

    pass


class ServiceNotRegisteredError(ServiceRegistryError, KeyError):
    """Raised when resolving a capability that has no binding."""

    def __init__(self, interface: type):
        super().__init__(f"No service registered for '{_name(interface)}'")
        self.interface = interface

    def __str__(self) -> str:
        # KeyError quotes its message otherwise
        return str(self.args[0])


class RegistryFrozenError(ServiceRegistryError):
    """Raised when registering into a registry that has been finalized."""

    pass


def _name(interface: Any) -> str:
    return getattr(interface, "__qualname__", repr(interface))


class _Binding:
    """A single interface-to-implementation binding."""

    def __init__(
        self,
        interface: type,
        lifetime: ServiceLifetime,
        factory: Optional[Callable[[], Any]] = None,
        instance: Any = None,
    ):
        self.interface = interface
        self.lifetime = lifetime
        self.factory = factory
        self.instance = instance
        self._created = factory is None
        self._lock = threading.Lock()

    def get(self) -> Any:
        if self.lifetime == ServiceLifetime.TRANSIENT:
            return self._create()

        if not self._created:
            with self._lock:
                if not self._created:
                    self.instance = self._create()
                    self._created = True
        return self.instance

    def _create(self) -> Any:
        instance = self.factory()
        _check_conforms(self.interface, instance)
        return instance


def _check_conforms(interface: type, instance: Any) -> None:
    if inspect.isclass(interface) and not isinstance(instance, interface):
        raise TypeError(f"{type(instance).__name__} does not implement {_name(interface)}")


class ServiceRegistry:
    """Explicit registry of capability-to-implementation bindings.

    The registry is built once by the composition root, optionally adjusted by
    a caller-supplied callback, and then frozen. Requests only resolve from it.
    When several bindings exist for one capability the most recent one wins.
    """

    def __init__(self):
        self._bindings: Dict[type, List[_Binding]] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    def add_singleton(
        self,
        interface: Type[T],
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
    ) -> "ServiceRegistry":
        """Bind one shared instance of ``interface``.

        Args:
            interface: Capability being provided
            instance: Ready-made instance to share
            factory: Callable creating the instance on first resolution,
                used when no instance is given

        Returns:
            The registry, for chaining

        Raises:
            ValueError: If neither or both of instance and factory are given
            TypeError: If the instance does not implement the capability
            RegistryFrozenError: If the registry has been finalized
        """
        binding = self._make_binding(interface, ServiceLifetime.SINGLETON, instance, factory)
        return self._add(interface, binding)

    def add_transient(self, interface: Type[T], factory: Callable[[], T]) -> "ServiceRegistry":
        """Bind a factory that is called on every resolution of ``interface``."""
        binding = self._make_binding(interface, ServiceLifetime.TRANSIENT, None, factory)
        return self._add(interface, binding)

    def replace(
        self,
        interface: Type[T],
        instance: Optional[T] = None,
        factory: Optional[Callable[[], T]] = None,
        lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
    ) -> "ServiceRegistry":
        """Drop every existing binding for ``interface`` and bind a new one."""
        binding = self._make_binding(interface, ServiceLifetime(lifetime), instance, factory)
        removed = self.remove(interface)
        logger.debug(f"Replacing {removed} binding(s) for {_name(interface)}")
        return self._add(interface, binding)

    def remove(self, interface: type) -> int:
        """Drop every binding for ``interface`` and return how many were dropped."""
        self._check_writable()
        return len(self._bindings.pop(interface, []))

    def is_registered(self, interface: type) -> bool:
        return bool(self._bindings.get(interface))

    def __contains__(self, interface: type) -> bool:
        return self.is_registered(interface)

    def registered(self) -> List[type]:
        """List capabilities that have at least one binding."""
        return [interface for interface, bindings in self._bindings.items() if bindings]

    def resolve(self, interface: Type[T]) -> T:
        """Return an implementation of ``interface`` from its most recent binding.

        Raises:
            ServiceNotRegisteredError: If nothing is bound to ``interface``
        """
        bindings = self._bindings.get(interface)
        if not bindings:
            logger.error(f"Cannot resolve {_name(interface)}: no service registered")
            raise ServiceNotRegisteredError(interface)
        return bindings[-1].get()

    def _add(self, interface: type, binding: _Binding) -> "ServiceRegistry":
        self._check_writable()
        self._bindings.setdefault(interface, []).append(binding)
        logger.debug(f"Registered {binding.lifetime.value} binding for {_name(interface)}")
        return self

    def _check_writable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Service registry is frozen; register services before composition finishes")

    @staticmethod
    def _make_binding(
        interface: type,
        lifetime: ServiceLifetime,
        instance: Any,
        factory: Optional[Callable[[], Any]],
    ) -> _Binding:
        if instance is not None and factory is not None:
            raise ValueError("Provide either an instance or a factory, not both")

        if instance is None:
            if factory is None:
                raise ValueError(f"A non-null instance or a factory is required for {_name(interface)}")
            if not callable(factory):
                raise TypeError(f"Factory for {_name(interface)} must be callable")
            return _Binding(interface, lifetime, factory=factory)

        if lifetime == ServiceLifetime.TRANSIENT:
            raise ValueError("Transient bindings need a factory, not an instance")
        _check_conforms(interface, instance)
        return _Binding(interface, lifetime, instance=instance)
