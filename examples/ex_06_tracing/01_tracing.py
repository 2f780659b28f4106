"""Tracing: record which services an invocation created or reused.

Enable tracing through ``InstantiationSettings`` (or ``SERVICEWIRE_*``
environment variables) and read the rendered traces from the reporter.
"""

from __future__ import annotations

from servicewire import (
    Descriptor,
    InstantiationService,
    InstantiationSettings,
    ServiceCollection,
    ServicesAccessor,
    depends_on,
    service_identifier,
)

IClock = service_identifier("clock")
IScheduler = service_identifier("scheduler")


class Clock:
    pass


@depends_on(IClock)
class Scheduler:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock


def schedule(accessor: ServicesAccessor) -> Scheduler:
    return accessor.get(IScheduler)


def main() -> None:
    services = ServiceCollection(
        (IClock, Descriptor(Clock)),
        (IScheduler, Descriptor(Scheduler)),
    )
    settings = InstantiationSettings(tracing_enabled=True, trace_threshold_ms=10_000)
    instantiation = InstantiationService(services, settings=settings)

    instantiation.invoke_function(schedule)
    instantiation.invoke_function(schedule)

    reporter = instantiation.trace_reporter
    assert reporter is not None
    print(f"kept_traces={len(reporter)}")  # => kept_traces=1

    lines = reporter.entries[0].splitlines()
    print(lines[0])  # => CALL schedule
    print(lines[1].strip())  # => CREATES -> scheduler
    print(lines[2].strip())  # => CREATES -> clock
    print(lines[-1].split(",")[0])  # => DONE


if __name__ == "__main__":
    main()
