"""Lazy services: delay construction until first attribute access.

A descriptor with ``supports_delayed_instantiation=True`` resolves to a handle.
The real instance and its dependencies are built on first use.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    ServiceCollection,
    depends_on,
    is_lazy,
    is_lazy_resolved,
    service_identifier,
)

IConnection = service_identifier("examples.lazy.connection")
IReportService = service_identifier("examples.lazy.reportService")

built: list[str] = []


class Connection:
    def __init__(self) -> None:
        built.append("Connection")

    def fetch(self) -> int:
        return 3


@depends_on(IConnection)
class ReportService:
    def __init__(self, connection: Connection) -> None:
        built.append("ReportService")
        self.connection = connection

    def count(self) -> int:
        return self.connection.fetch()


def main() -> None:
    services = ServiceCollection(
        (IConnection, Descriptor(Connection)),
        (IReportService, Descriptor(ReportService, supports_delayed_instantiation=True)),
    )
    instantiation = InstantiationService(services)

    reports = instantiation.invoke_function(lambda accessor: accessor.get(IReportService))

    print(f"lazy={is_lazy(reports)}")  # => lazy=True
    print(f"is_report_service={isinstance(reports, ReportService)}")  # => is_report_service=True
    print(f"built_before={built}")  # => built_before=[]

    print(f"count={reports.count()}")  # => count=3
    print(f"built_after={built}")  # => built_after=['Connection', 'ReportService']
    print(f"resolved={is_lazy_resolved(reports)}")  # => resolved=True


if __name__ == "__main__":
    main()
