from __future__ import annotations

import inspect
import weakref
from collections.abc import Callable
from typing import Any, Generic, NamedTuple, TypeVar

from servicewire.exceptions import ServiceWireInvalidRegistrationError

T = TypeVar("T")
C = TypeVar("C", bound=Callable[..., Any])


class ServiceIdentifier(Generic[T]):
    """Name a service capability used as a resolution key.

    Identifiers compare by identity. Obtain them from ``service_identifier`` so
    that each name maps to exactly one token.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ServiceIdentifier({self.name!r})"


class ServiceDependency(NamedTuple):
    """A constructor dependency and the positional index it is injected at."""

    identifier: ServiceIdentifier[Any]
    index: int


class IdentifierRegistry:
    """Allocate identifiers by name and record constructor dependencies.

    Dependency metadata is kept by the registry itself, keyed weakly by the
    constructor, so separate registries never see each other's records. A
    record belongs to the exact constructor it was made for; subclasses do not
    inherit the dependencies of their base class.
    """

    def __init__(self) -> None:
        self._identifiers: dict[str, ServiceIdentifier[Any]] = {}
        self._dependencies: weakref.WeakKeyDictionary[
            Callable[..., Any],
            tuple[ServiceDependency, ...],
        ] = weakref.WeakKeyDictionary()

    def identifier_for(self, name: str) -> ServiceIdentifier[Any]:
        """Return the identifier for ``name``, creating it on first use.

        Args:
            name: Service name.

        """
        identifier = self._identifiers.get(name)
        if identifier is None:
            identifier = ServiceIdentifier(name)
            self._identifiers[name] = identifier
        return identifier

    def record_dependency(
        self,
        ctor: Callable[..., Any],
        identifier: ServiceIdentifier[Any],
        index: int,
    ) -> None:
        """Declare that ``ctor`` receives ``identifier`` at positional ``index``.

        Args:
            ctor: Class or factory callable receiving the dependency.
            identifier: Service identifier to inject.
            index: Zero-based positional parameter index.

        Raises:
            ServiceWireInvalidRegistrationError: ``index`` is negative, or
                ``ctor`` is a bound method or cannot be referenced weakly.

        """
        if index < 0:
            msg = f"Dependency index for '{identifier}' on {_name_of(ctor)} must be >= 0, got {index}."
            raise ServiceWireInvalidRegistrationError(msg)
        if inspect.ismethod(ctor):
            msg = (
                f"Cannot record dependencies on bound method {_name_of(ctor)}; "
                "register the underlying function or class instead."
            )
            raise ServiceWireInvalidRegistrationError(msg)

        current = [dep for dep in self.dependencies_of(ctor) if dep.index != index]
        current.append(ServiceDependency(identifier=identifier, index=index))
        current.sort(key=lambda dep: dep.index)
        try:
            self._dependencies[ctor] = tuple(current)
        except TypeError as error:
            msg = f"Cannot record dependencies on {_name_of(ctor)}: {error}."
            raise ServiceWireInvalidRegistrationError(msg) from error

    def dependencies_of(self, ctor: Callable[..., Any]) -> tuple[ServiceDependency, ...]:
        """Return the dependencies of ``ctor`` ordered by index.

        Constructors that cannot carry records have no dependencies.

        Args:
            ctor: Class or factory callable to inspect.

        """
        try:
            return self._dependencies.get(ctor, ())
        except TypeError:
            return ()


def _name_of(ctor: Callable[..., Any]) -> str:
    return getattr(ctor, "__qualname__", None) or repr(ctor)


default_registry = IdentifierRegistry()


def service_identifier(name: str) -> ServiceIdentifier[Any]:
    """Return the process-wide identifier for ``name``.

    Examples:
        .. code-block:: python

            IDatabase: ServiceIdentifier[Database] = service_identifier("database")

    Args:
        name: Service name.

    """
    return default_registry.identifier_for(name)


def record_dependency(
    ctor: Callable[..., Any],
    identifier: ServiceIdentifier[Any],
    index: int,
) -> None:
    """Record a dependency on the default registry.

    Args:
        ctor: Class or factory callable receiving the dependency.
        identifier: Service identifier to inject.
        index: Zero-based positional parameter index.

    """
    default_registry.record_dependency(ctor, identifier, index)


def dependencies_of(ctor: Callable[..., Any]) -> tuple[ServiceDependency, ...]:
    """Read dependencies from the default registry.

    Args:
        ctor: Class or factory callable to inspect.

    """
    return default_registry.dependencies_of(ctor)


def depends_on(
    *identifiers: ServiceIdentifier[Any],
    first_index: int = 0,
    registry: IdentifierRegistry | None = None,
) -> Callable[[C], C]:
    """Declare constructor service dependencies in parameter order.

    Service parameters follow the static ones, so ``first_index`` is the
    number of static arguments the constructor takes before its services.

    Examples:
        .. code-block:: python

            @depends_on(IDatabase, ILogger, first_index=1)
            class Repository:
                def __init__(self, table: str, database: Database, log: Logger) -> None: ...

    Args:
        *identifiers: Identifiers in constructor parameter order.
        first_index: Positional index of the first service parameter.
        registry: Registry receiving the records. Defaults to the process
            default registry.

    """
    target = registry if registry is not None else default_registry

    def decorator(ctor: C) -> C:
        for offset, identifier in enumerate(identifiers):
            target.record_dependency(ctor, identifier, first_index + offset)
        return ctor

    return decorator


__all__ = [
    "IdentifierRegistry",
    "ServiceDependency",
    "ServiceIdentifier",
    "default_registry",
    "dependencies_of",
    "depends_on",
    "record_dependency",
    "service_identifier",
]
