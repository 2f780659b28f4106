"""Scopes: child collections fall back to their parent.

A service is cached in the scope that owns its binding. Siblings share
parent-owned singletons, while each child builds its own child-owned
services.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    ServiceCollection,
    depends_on,
    service_identifier,
)

IConfig = service_identifier("examples.scopes.config")
IRequest = service_identifier("examples.scopes.request")
IHandler = service_identifier("examples.scopes.handler")


class Config:
    def __init__(self) -> None:
        self.greeting = "hello"


@depends_on(IConfig, IRequest)
class Handler:
    def __init__(self, config: Config, request: str) -> None:
        self.message = f"{config.greeting} {request}"


def main() -> None:
    root = InstantiationService(ServiceCollection((IConfig, Descriptor(Config))))

    first = root.create_child(
        ServiceCollection((IRequest, "alice"), (IHandler, Descriptor(Handler))),
    )
    second = root.create_child(
        ServiceCollection((IRequest, "bob"), (IHandler, Descriptor(Handler))),
    )

    first_handler = first.invoke_function(lambda accessor: accessor.get(IHandler))
    second_handler = second.invoke_function(lambda accessor: accessor.get(IHandler))

    print(first_handler.message)  # => hello alice
    print(second_handler.message)  # => hello bob

    first_config = first.invoke_function(lambda accessor: accessor.get(IConfig))
    second_config = second.invoke_function(lambda accessor: accessor.get(IConfig))
    print(f"shared_config={first_config is second_config}")  # => shared_config=True
    print(f"separate_handlers={first_handler is not second_handler}")  # => separate_handlers=True


if __name__ == "__main__":
    main()
