"""Errors: every resolution failure derives from ``ServiceWireError``.

Missing bindings and dependency cycles are detected before any service in the
graph is constructed.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    ServiceCollection,
    depends_on,
    service_identifier,
)
from servicewire.exceptions import (
    ServiceWireCircularDependencyError,
    ServiceWireDependencyNotRegisteredError,
    ServiceWireError,
    ServiceWireServiceNotRegisteredError,
)

IMissing = service_identifier("missing")
IMailer = service_identifier("mailer")
IPing = service_identifier("ping")
IPong = service_identifier("pong")


@depends_on(IMissing)
class Mailer:
    def __init__(self, missing: object) -> None:
        self.missing = missing


@depends_on(IPong)
class Ping:
    def __init__(self, pong: object) -> None:
        self.pong = pong


@depends_on(IPing)
class Pong:
    def __init__(self, ping: object) -> None:
        self.ping = ping


def main() -> None:
    services = ServiceCollection(
        (IMailer, Descriptor(Mailer)),
        (IPing, Descriptor(Ping)),
        (IPong, Descriptor(Pong)),
    )
    instantiation = InstantiationService(services)

    try:
        instantiation.invoke_function(lambda accessor: accessor.get(IMissing))
    except ServiceWireServiceNotRegisteredError as error:
        print(error)  # => Service 'missing' is not registered.

    try:
        instantiation.invoke_function(lambda accessor: accessor.get(IMailer))
    except ServiceWireDependencyNotRegisteredError as error:
        print(error)  # => 'mailer' depends on 'missing' which is not registered.

    try:
        instantiation.invoke_function(lambda accessor: accessor.get(IPing))
    except ServiceWireCircularDependencyError as error:
        print(error)  # => Cannot resolve cyclic dependency: ping -> pong -> ping.
        print(f"base={isinstance(error, ServiceWireError)}")  # => base=True

    print(f"pending={isinstance(services.get(IPing), Descriptor)}")  # => pending=True


if __name__ == "__main__":
    main()
