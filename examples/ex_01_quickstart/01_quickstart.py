"""Quickstart: bind descriptors and let the scope build them in order.

Declare constructor dependencies with ``depends_on``, bind every service as a
``Descriptor`` and request only the top-level one. Each service is built once
and cached in the collection.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    ServiceCollection,
    ServicesAccessor,
    depends_on,
    service_identifier,
)

IDatabase = service_identifier("examples.quickstart.database")
IUserRepository = service_identifier("examples.quickstart.userRepository")
IUserService = service_identifier("examples.quickstart.userService")


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


@depends_on(IDatabase)
class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


@depends_on(IUserRepository)
class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    services = ServiceCollection(
        (IDatabase, Descriptor(Database)),
        (IUserRepository, Descriptor(UserRepository)),
        (IUserService, Descriptor(UserService)),
    )
    instantiation = InstantiationService(services)

    def handler(accessor: ServicesAccessor) -> UserService:
        return accessor.get(IUserService)

    service = instantiation.invoke_function(handler)

    print(f"db_host={service.repository.database.host}")  # => db_host=localhost

    chain = (
        f"{type(service).__name__}"
        f">{type(service.repository).__name__}"
        f">{type(service.repository.database).__name__}"
    )
    print(f"chain={chain}")  # => chain=UserService>UserRepository>Database

    again = instantiation.invoke_function(handler)
    print(f"cached={again is service}")  # => cached=True
    print(f"bound={type(services.get(IDatabase)).__name__}")  # => bound=Database


if __name__ == "__main__":
    main()
