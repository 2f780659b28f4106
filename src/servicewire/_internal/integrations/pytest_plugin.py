from __future__ import annotations

from collections.abc import Iterator
from typing import Any, cast

import pytest

from servicewire._internal.instantiation import InstantiationService
from servicewire._internal.service_collection import ServiceCollection
from servicewire._internal.settings import InstantiationSettings
from servicewire._internal.tracing import TraceReporter

_SERVICEWIRE_INSTANTIATION_FIXTURE = "servicewire_instantiation"
_TRACES_SECTION = "servicewire traces"


@pytest.fixture()
def servicewire_services() -> ServiceCollection:
    """Fixture hook for the bindings of the plugin-managed root scope.

    Users must override this fixture in their own test suite and return a
    ``ServiceCollection`` with the bindings their tests resolve.

    """
    msg = (
        "The servicewire pytest plugin requires overriding the 'servicewire_services' fixture "
        "in your test suite. Define @pytest.fixture() def servicewire_services() -> "
        "ServiceCollection: ... and return the bindings to test with."
    )
    raise RuntimeError(msg)


@pytest.fixture()
def servicewire_settings() -> InstantiationSettings:
    """Settings of the plugin-managed root scope, with tracing enabled."""
    return InstantiationSettings(tracing_enabled=True)


@pytest.fixture()
def servicewire_instantiation(
    servicewire_services: ServiceCollection,
    servicewire_settings: InstantiationSettings,
) -> InstantiationService:
    """Create a per-test root scope over ``servicewire_services``.

    The fixture is function-scoped, so resolved instances are isolated between
    tests unless users override fixture scope explicitly.

    Args:
        servicewire_services: Bindings owned by the root scope.
        servicewire_settings: Settings of the root scope.

    """
    return InstantiationService(servicewire_services, settings=servicewire_settings)


@pytest.fixture()
def servicewire_trace_reporter(
    servicewire_instantiation: InstantiationService,
) -> TraceReporter | None:
    """Trace sink of the plugin-managed scope, ``None`` when tracing is off.

    Args:
        servicewire_instantiation: Plugin-managed root scope.

    """
    return servicewire_instantiation.trace_reporter


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Iterator[None]:
    """Attach recorded resolution traces to the report of a failed test.

    Only tests that used the ``servicewire_instantiation`` fixture with tracing
    enabled get a ``servicewire traces`` section.

    Args:
        item: Test item being reported.
        call: Phase call information.

    Yields:
        Control back to pytest around report creation.

    """
    outcome = yield
    if call.when != "call" or call.excinfo is None:
        return

    funcargs = cast("dict[str, Any]", getattr(item, "funcargs", {}))
    instantiation = funcargs.get(_SERVICEWIRE_INSTANTIATION_FIXTURE)
    if not isinstance(instantiation, InstantiationService):
        return
    reporter = instantiation.trace_reporter
    if reporter is None or not len(reporter):
        return

    report = outcome.get_result()
    report.sections.append((_TRACES_SECTION, "\n\n".join(reporter.entries)))
