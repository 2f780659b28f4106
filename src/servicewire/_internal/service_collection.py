from __future__ import annotations

from collections.abc import Iterator
from typing import Any, TypeVar, overload

from servicewire._internal.descriptors import Descriptor
from servicewire._internal.identifiers import ServiceIdentifier

T = TypeVar("T")


class ServiceCollection:
    """Store bindings of one scope indexed by service identifier.

    A binding is either a pending ``Descriptor`` or a resolved instance. Setting
    an identifier that is already bound replaces the previous binding; there is
    no deletion. The collection performs no cycle or type checks.
    """

    def __init__(
        self,
        *entries: tuple[ServiceIdentifier[Any], Any],
    ) -> None:
        self._entries: dict[ServiceIdentifier[Any], Any] = {}
        for identifier, instance_or_descriptor in entries:
            self.set(identifier, instance_or_descriptor)

    @overload
    def set(self, identifier: ServiceIdentifier[T], instance_or_descriptor: Descriptor[T]) -> Any: ...

    @overload
    def set(self, identifier: ServiceIdentifier[T], instance_or_descriptor: T) -> Any: ...

    def set(self, identifier: ServiceIdentifier[Any], instance_or_descriptor: Any) -> Any:
        """Bind ``identifier`` and return the previous binding, if any.

        Args:
            identifier: Service identifier to bind.
            instance_or_descriptor: Resolved instance or pending descriptor.

        """
        previous = self._entries.get(identifier)
        self._entries[identifier] = instance_or_descriptor
        return previous

    def has(self, identifier: ServiceIdentifier[Any]) -> bool:
        return identifier in self._entries

    def get(self, identifier: ServiceIdentifier[T]) -> T | Descriptor[T] | None:
        return self._entries.get(identifier)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[ServiceIdentifier[Any]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
