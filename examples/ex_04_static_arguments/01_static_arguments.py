"""Static arguments: positional values that precede injected services.

``first_index`` tells ``depends_on`` how many static arguments come first.
Missing static arguments are padded with ``None`` and a warning is logged.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    ServiceCollection,
    depends_on,
    service_identifier,
)

IStorage = service_identifier("examples.static.storage")
IAuditLog = service_identifier("examples.static.auditLog")


class Storage:
    def __init__(self) -> None:
        self.kind = "memory"


@depends_on(IStorage, first_index=1)
class Table:
    def __init__(self, name: str, storage: Storage) -> None:
        self.name = name
        self.storage = storage


def main() -> None:
    services = ServiceCollection(
        (IStorage, Descriptor(Storage)),
        (IAuditLog, Descriptor(Table, ("audit",))),
    )
    instantiation = InstantiationService(services)

    audit = instantiation.invoke_function(lambda accessor: accessor.get(IAuditLog))
    print(f"audit={audit.name}:{audit.storage.kind}")  # => audit=audit:memory

    users = instantiation.create_instance(Table, "users")
    print(f"users={users.name}:{users.storage.kind}")  # => users=users:memory

    print(f"shared_storage={users.storage is audit.storage}")  # => shared_storage=True

    other = instantiation.create_instance(Table, "users")
    print(f"create_instance_cached={other is users}")  # => create_instance_cached=False


if __name__ == "__main__":
    main()
