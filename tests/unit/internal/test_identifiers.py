from __future__ import annotations

import pytest

from servicewire import (
    IdentifierRegistry,
    ServiceDependency,
    ServiceIdentifier,
    dependencies_of,
    depends_on,
    record_dependency,
    service_identifier,
)
from servicewire.exceptions import ServiceWireInvalidRegistrationError


def test_identifier_for_is_idempotent_per_name() -> None:
    registry = IdentifierRegistry()

    first = registry.identifier_for("database")
    second = registry.identifier_for("database")
    other = registry.identifier_for("cache")

    assert first is second
    assert first is not other
    assert isinstance(first, ServiceIdentifier)


def test_identifiers_compare_by_identity() -> None:
    assert ServiceIdentifier("same") != ServiceIdentifier("same")


def test_identifier_display_uses_name() -> None:
    identifier = service_identifier("test_identifiers.display")

    assert str(identifier) == "test_identifiers.display"
    assert repr(identifier) == "ServiceIdentifier('test_identifiers.display')"


def test_record_dependency_orders_by_index() -> None:
    registry = IdentifierRegistry()
    first = registry.identifier_for("first")
    second = registry.identifier_for("second")

    class Consumer:
        pass

    registry.record_dependency(Consumer, second, 2)
    registry.record_dependency(Consumer, first, 1)

    assert registry.dependencies_of(Consumer) == (
        ServiceDependency(identifier=first, index=1),
        ServiceDependency(identifier=second, index=2),
    )


def test_record_dependency_replaces_same_index() -> None:
    registry = IdentifierRegistry()
    first = registry.identifier_for("first")
    second = registry.identifier_for("second")

    class Consumer:
        pass

    registry.record_dependency(Consumer, first, 0)
    registry.record_dependency(Consumer, second, 0)

    assert registry.dependencies_of(Consumer) == (ServiceDependency(second, 0),)


def test_record_dependency_rejects_negative_index() -> None:
    registry = IdentifierRegistry()

    class Consumer:
        pass

    with pytest.raises(ServiceWireInvalidRegistrationError, match=">= 0"):
        registry.record_dependency(Consumer, registry.identifier_for("first"), -1)


def test_dependencies_of_undecorated_ctor_is_empty() -> None:
    class Plain:
        pass

    assert dependencies_of(Plain) == ()
    assert dependencies_of(len) == ()


def test_depends_on_records_consecutive_indexes() -> None:
    ia = service_identifier("test_identifiers.a")
    ib = service_identifier("test_identifiers.b")

    @depends_on(ia, ib, first_index=1)
    class Consumer:
        def __init__(self, name: str, a: object, b: object) -> None:
            self.name = name

    assert dependencies_of(Consumer) == (ServiceDependency(ia, 1), ServiceDependency(ib, 2))


def test_dependencies_are_not_inherited() -> None:
    ia = service_identifier("test_identifiers.inherited")

    @depends_on(ia)
    class Base:
        def __init__(self, a: object) -> None:
            self.a = a

    class Child(Base):
        pass

    assert dependencies_of(Base) == (ServiceDependency(ia, 0),)
    assert dependencies_of(Child) == ()


def test_record_dependency_on_factory_function() -> None:
    ia = service_identifier("test_identifiers.factory")

    def build(a: object) -> object:
        return a

    record_dependency(build, ia, 0)

    assert dependencies_of(build) == (ServiceDependency(ia, 0),)


def test_registries_keep_separate_dependency_records() -> None:
    shared = service_identifier("test_identifiers.shared")
    private = IdentifierRegistry()

    class Consumer:
        pass

    private.record_dependency(Consumer, shared, 0)

    assert private.dependencies_of(Consumer) == (ServiceDependency(shared, 0),)
    assert dependencies_of(Consumer) == ()


def test_depends_on_targets_given_registry() -> None:
    ia = service_identifier("test_identifiers.targeted")
    private = IdentifierRegistry()

    @depends_on(ia, registry=private)
    class Consumer:
        def __init__(self, a: object) -> None:
            self.a = a

    assert private.dependencies_of(Consumer) == (ServiceDependency(ia, 0),)
    assert dependencies_of(Consumer) == ()


def test_builtin_constructors_accept_records() -> None:
    registry = IdentifierRegistry()
    ia = registry.identifier_for("items")

    registry.record_dependency(dict, ia, 0)

    assert registry.dependencies_of(dict) == (ServiceDependency(ia, 0),)
    assert dependencies_of(dict) == ()


def test_record_dependency_rejects_bound_methods() -> None:
    registry = IdentifierRegistry()

    class Factory:
        def build(self, a: object) -> object:
            return a

    with pytest.raises(ServiceWireInvalidRegistrationError, match="bound method"):
        registry.record_dependency(Factory().build, registry.identifier_for("a"), 0)


def test_record_dependency_rejects_unreferenceable_callables() -> None:
    registry = IdentifierRegistry()

    class SlottedCallable:
        __slots__ = ()

        def __call__(self) -> None:
            return None

    ctor = SlottedCallable()

    with pytest.raises(ServiceWireInvalidRegistrationError, match="Cannot record dependencies"):
        registry.record_dependency(ctor, registry.identifier_for("a"), 0)
    assert registry.dependencies_of(ctor) == ()
