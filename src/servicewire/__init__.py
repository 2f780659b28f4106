from servicewire._internal.descriptors import Descriptor
from servicewire._internal.graph import Graph, Node
from servicewire._internal.identifiers import (
    IdentifierRegistry,
    ServiceDependency,
    ServiceIdentifier,
    dependencies_of,
    depends_on,
    record_dependency,
    service_identifier,
)
from servicewire._internal.instantiation import (
    IInstantiationService,
    InstantiationService,
    ServicesAccessor,
)
from servicewire._internal.lazy import LazyService, is_lazy, is_lazy_resolved, unwrap_lazy
from servicewire._internal.service_collection import ServiceCollection
from servicewire._internal.settings import InstantiationSettings
from servicewire._internal.tracing import TraceReporter
from servicewire.exceptions import (
    ServiceWireCircularDependencyError,
    ServiceWireDependencyGraphError,
    ServiceWireDependencyNotRegisteredError,
    ServiceWireError,
    ServiceWireIllegalStateError,
    ServiceWireInvalidRegistrationError,
    ServiceWireRecursiveInstantiationError,
    ServiceWireServiceNotRegisteredError,
    ServiceWireTraversalLimitError,
)

__all__ = [
    "Descriptor",
    "Graph",
    "IInstantiationService",
    "IdentifierRegistry",
    "InstantiationService",
    "InstantiationSettings",
    "LazyService",
    "Node",
    "ServiceCollection",
    "ServiceDependency",
    "ServiceIdentifier",
    "ServiceWireCircularDependencyError",
    "ServiceWireDependencyGraphError",
    "ServiceWireDependencyNotRegisteredError",
    "ServiceWireError",
    "ServiceWireIllegalStateError",
    "ServiceWireInvalidRegistrationError",
    "ServiceWireRecursiveInstantiationError",
    "ServiceWireServiceNotRegisteredError",
    "ServiceWireTraversalLimitError",
    "ServicesAccessor",
    "TraceReporter",
    "dependencies_of",
    "depends_on",
    "is_lazy",
    "is_lazy_resolved",
    "record_dependency",
    "service_identifier",
    "unwrap_lazy",
]
