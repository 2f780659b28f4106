"""Shared pytest fixtures for servicewire tests."""

import pytest

from servicewire import InstantiationService, InstantiationSettings, ServiceCollection


@pytest.fixture()
def services() -> ServiceCollection:
    """Empty bindings of the root scope."""
    return ServiceCollection()


@pytest.fixture()
def instantiation(services: ServiceCollection) -> InstantiationService:
    """Root scope over ``services`` with tracing disabled."""
    return InstantiationService(services, settings=InstantiationSettings(tracing_enabled=False))


@pytest.fixture()
def traced_instantiation(services: ServiceCollection) -> InstantiationService:
    """Root scope over ``services`` that records every trace."""
    settings = InstantiationSettings(tracing_enabled=True, trace_threshold_ms=0)
    return InstantiationService(services, settings=settings)
