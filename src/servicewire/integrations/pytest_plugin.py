"""pytest plugin providing per-test servicewire scopes.

Enable it with ``pytest_plugins = ["servicewire.integrations.pytest_plugin"]``
and override the ``servicewire_services`` fixture.
"""

from servicewire._internal.integrations.pytest_plugin import (
    pytest_runtest_makereport,
    servicewire_instantiation,
    servicewire_services,
    servicewire_settings,
    servicewire_trace_reporter,
)

__all__ = [
    "pytest_runtest_makereport",
    "servicewire_instantiation",
    "servicewire_services",
    "servicewire_settings",
    "servicewire_trace_reporter",
]
