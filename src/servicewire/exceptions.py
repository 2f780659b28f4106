from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ServiceWireError(Exception):
    """Represent a base class for all servicewire-specific failures.

    Catch this type when you want to handle any servicewire error path without
    matching each concrete exception class individually.
    """


class ServiceWireInvalidRegistrationError(ServiceWireError):
    """Signal invalid descriptor or dependency metadata.

    Raised by ``Descriptor`` when the constructor is not callable and by
    ``record_dependency``/``depends_on`` when a parameter index is negative.
    """


class ServiceWireServiceNotRegisteredError(ServiceWireError):
    """Signal that an identifier has no binding anywhere in the scope chain.

    Raised by ``accessor.get`` inside ``invoke_function``.

    Typical fix is binding the identifier in the service collection of the
    current scope or one of its parents, either to an instance or to a
    ``Descriptor``.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"Service '{self.identifier}' is not registered."


class ServiceWireDependencyNotRegisteredError(ServiceWireServiceNotRegisteredError):
    """Signal that a declared constructor dependency has no binding.

    Raised while the dependency graph of a descriptor is enumerated, before any
    instance is constructed, and by ``create_instance`` when a constructor
    declares an unbound dependency.
    """

    def __init__(self, identifier: Any, dependency: Any) -> None:
        self.dependency = dependency
        super().__init__(identifier)

    def _build_message(self) -> str:
        return f"'{self.identifier}' depends on '{self.dependency}' which is not registered."


class ServiceWireRecursiveInstantiationError(ServiceWireError):
    """Signal that a service is requested while it is being constructed.

    This happens when a constructor (directly, or through an injected
    ``IInstantiationService``) asks its own scope for the identifier that is
    currently under construction.
    """

    def __init__(self, identifier: Any) -> None:
        self.identifier = identifier
        super().__init__(f"Recursively instantiating service '{identifier}'.")


class ServiceWireDependencyGraphError(ServiceWireError):
    """Represent a malformed descriptor dependency graph."""


class ServiceWireCircularDependencyError(ServiceWireDependencyGraphError):
    """Signal a cycle between pending descriptors.

    ``remaining`` lists every identifier that could not be ordered and
    ``cycle`` holds one offending path, first identifier repeated at the end.

    Typical fixes are binding one member of the cycle to an instance, or
    marking it ``supports_delayed_instantiation`` and breaking the cycle in user
    code.
    """

    def __init__(
        self,
        remaining: Sequence[Any],
        cycle: Sequence[Any] | None = None,
        graph: str = "",
    ) -> None:
        self.remaining = tuple(remaining)
        self.cycle = tuple(cycle) if cycle else ()
        if self.cycle:
            path = " -> ".join(str(item) for item in self.cycle)
            msg = f"Cannot resolve cyclic dependency: {path}."
        else:
            msg = f"Cannot resolve cyclic dependency between {graph}."
        super().__init__(msg)


class ServiceWireTraversalLimitError(ServiceWireDependencyGraphError):
    """Signal that dependency enumeration exceeded the configured bound.

    Controlled by ``InstantiationSettings.max_traversal``.
    """

    def __init__(self, identifier: Any, limit: int) -> None:
        self.identifier = identifier
        self.limit = limit
        super().__init__(
            f"Dependency graph of '{identifier}' exceeds {limit} nodes; "
            "the descriptor graph is malformed or cyclic.",
        )


class ServiceWireIllegalStateError(ServiceWireError):
    """Signal an internal invariant violation.

    Raised when a resolved instance has no owning scope to be written back to,
    and when a services accessor is used after ``invoke_function`` returned.
    """
