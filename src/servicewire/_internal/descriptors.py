from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from servicewire.exceptions import ServiceWireInvalidRegistrationError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Descriptor(Generic[T]):
    """Describe how to build a service instance on demand.

    A descriptor bound in a ``ServiceCollection`` is a pending binding: the
    first resolution constructs ``ctor(*static_arguments, *services)`` and
    replaces the descriptor with the instance in the owning scope.
    """

    ctor: Callable[..., T]
    """Class or factory callable producing the instance."""
    static_arguments: tuple[Any, ...] = ()
    """Positional arguments passed before the injected services."""
    supports_delayed_instantiation: bool = False
    """Return a lazy handle that constructs on first attribute access."""

    def __post_init__(self) -> None:
        if not callable(self.ctor):
            msg = f"Descriptor constructor must be callable, got {self.ctor!r}."
            raise ServiceWireInvalidRegistrationError(msg)
        if not isinstance(self.static_arguments, tuple):
            object.__setattr__(self, "static_arguments", tuple(self.static_arguments))
