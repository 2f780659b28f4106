from __future__ import annotations

import logging
from typing import Any

import pytest

from servicewire import (
    Descriptor,
    InstantiationService,
    InstantiationSettings,
    ServiceCollection,
    ServicesAccessor,
    TraceReporter,
    depends_on,
    service_identifier,
)
from servicewire._internal.tracing import NONE_TRACE, Trace, TraceType

IClock = service_identifier("test_tracing.clock")
IScheduler = service_identifier("test_tracing.scheduler")


class Clock:
    pass


@depends_on(IClock)
class Scheduler:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock


def resolve_scheduler(accessor: ServicesAccessor) -> Any:
    return accessor.get(IScheduler)


@pytest.fixture()
def bound(services: ServiceCollection) -> ServiceCollection:
    services.set(IClock, Descriptor(Clock))
    services.set(IScheduler, Descriptor(Scheduler))
    return services


def test_invocation_trace_lists_created_services(
    bound: ServiceCollection,
    traced_instantiation: InstantiationService,
) -> None:
    traced_instantiation.invoke_function(resolve_scheduler)

    reporter = traced_instantiation.trace_reporter
    assert reporter is not None
    assert len(reporter) == 1
    lines = reporter.entries[0].splitlines()
    assert lines[0] == "CALL resolve_scheduler"
    assert lines[1] == "\tCREATES -> test_tracing.scheduler"
    assert "\t\tCREATES -> test_tracing.clock" in lines
    assert lines[-1].startswith("DONE, took ")
    assert "grand total" in lines[-1]


def test_second_invocation_only_uses_services(
    bound: ServiceCollection,
    traced_instantiation: InstantiationService,
) -> None:
    traced_instantiation.invoke_function(resolve_scheduler)
    traced_instantiation.invoke_function(resolve_scheduler)

    reporter = traced_instantiation.trace_reporter
    assert reporter is not None
    entry = reporter.entries[-1]
    assert "\tuses -> test_tracing.scheduler" in entry
    assert "CREATES" not in entry


def test_fast_invocations_without_creation_are_dropped(bound: ServiceCollection) -> None:
    settings = InstantiationSettings(tracing_enabled=True, trace_threshold_ms=60_000)
    instantiation = InstantiationService(bound, settings=settings)

    instantiation.invoke_function(resolve_scheduler)
    instantiation.invoke_function(resolve_scheduler)

    reporter = instantiation.trace_reporter
    assert reporter is not None
    assert len(reporter) == 1
    assert reporter.total_ms > 0


def test_create_instance_is_traced_as_creation(
    bound: ServiceCollection,
    traced_instantiation: InstantiationService,
) -> None:
    traced_instantiation.create_instance(Scheduler)

    reporter = traced_instantiation.trace_reporter
    assert reporter is not None
    entry = reporter.entries[-1]
    assert entry.startswith("CREATE Scheduler")
    assert "\tCREATES -> test_tracing.clock" in entry


def test_child_scope_reports_into_shared_reporter(
    bound: ServiceCollection,
    traced_instantiation: InstantiationService,
) -> None:
    child = traced_instantiation.create_child()

    child.invoke_function(resolve_scheduler)

    assert child.trace_reporter is traced_instantiation.trace_reporter
    assert len(child.trace_reporter or ()) == 1


def test_tracing_disabled_has_no_reporter(
    bound: ServiceCollection,
    instantiation: InstantiationService,
) -> None:
    instantiation.invoke_function(resolve_scheduler)

    assert instantiation.trace_reporter is None


def test_explicit_reporter_is_ignored_when_tracing_is_disabled() -> None:
    reporter = TraceReporter()
    instantiation = InstantiationService(
        settings=InstantiationSettings(tracing_enabled=False),
        reporter=reporter,
    )

    assert instantiation.trace_reporter is None


def test_explicit_reporter_collects_traces(bound: ServiceCollection) -> None:
    reporter = TraceReporter(threshold_ms=0)
    instantiation = InstantiationService(
        bound,
        settings=InstantiationSettings(tracing_enabled=True),
        reporter=reporter,
    )

    instantiation.invoke_function(resolve_scheduler)

    assert instantiation.trace_reporter is reporter
    assert reporter.entries[0].startswith("CALL resolve_scheduler")


def test_kept_traces_are_logged_at_debug(
    bound: ServiceCollection,
    traced_instantiation: InstantiationService,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.DEBUG, logger="servicewire"):
        traced_instantiation.invoke_function(resolve_scheduler)

    assert "CALL resolve_scheduler" in caplog.text


def test_reporter_keeps_slow_traces_without_creation() -> None:
    reporter = TraceReporter(threshold_ms=5)

    reporter.report("slow", duration_ms=10, caused_creation=False)
    reporter.report("fast", duration_ms=1, caused_creation=False)
    reporter.report("creating", duration_ms=1, caused_creation=True)

    assert reporter.entries == ("slow", "creating")
    assert reporter.total_ms == 12


def test_none_trace_records_nothing() -> None:
    assert Trace.trace_invocation(None, resolve_scheduler) is NONE_TRACE
    assert NONE_TRACE.branch(IClock, True) is NONE_TRACE
    assert NONE_TRACE.type is TraceType.NONE
    NONE_TRACE.stop()


def test_trace_without_dependencies_renders_heading_and_footer() -> None:
    reporter = TraceReporter(threshold_ms=0)
    trace = Trace.trace_creation(reporter, Clock)

    trace.stop()

    lines = reporter.entries[0].splitlines()
    assert lines[0] == "CREATE Clock"
    assert lines[1].startswith("DONE, took ")
    assert len(lines) == 2
