from __future__ import annotations

import logging
from collections.abc import Callable, Generator, Hashable
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, overload

from servicewire._internal.descriptors import Descriptor
from servicewire._internal.graph import Graph
from servicewire._internal.identifiers import (
    IdentifierRegistry,
    ServiceIdentifier,
    default_registry,
    service_identifier,
)
from servicewire._internal.lazy import LazyService
from servicewire._internal.service_collection import ServiceCollection
from servicewire._internal.settings import InstantiationSettings
from servicewire._internal.tracing import Trace, TraceReporter
from servicewire.exceptions import (
    ServiceWireCircularDependencyError,
    ServiceWireDependencyNotRegisteredError,
    ServiceWireIllegalStateError,
    ServiceWireRecursiveInstantiationError,
    ServiceWireServiceNotRegisteredError,
    ServiceWireTraversalLimitError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


class ServicesAccessor(Protocol):
    """Resolve services for the duration of an ``invoke_function`` call."""

    def get(self, identifier: ServiceIdentifier[T]) -> T:
        """Return the service bound to ``identifier``, creating it if pending.

        Args:
            identifier: Service identifier to resolve.

        """
        ...


IInstantiationService: ServiceIdentifier[InstantiationService] = service_identifier(
    "instantiationService",
)
"""Identifier every ``InstantiationService`` binds itself under in its own scope."""


class _InvocationAccessor:
    __slots__ = ("_done", "_fn_name", "_service", "_trace")

    def __init__(self, service: InstantiationService, trace: Trace, fn_name: str) -> None:
        self._service = service
        self._trace = trace
        self._fn_name = fn_name
        self._done = False

    def get(self, identifier: ServiceIdentifier[T]) -> T:
        if self._done:
            msg = (
                f"Service accessor of '{self._fn_name}' used after invoke_function returned; "
                "it is only valid during the invocation."
            )
            raise ServiceWireIllegalStateError(msg)
        return self._service._get_or_create_service_instance(identifier, self._trace)


@dataclass(slots=True)
class _PendingService:
    """Graph payload: a pending binding together with the scope that owns it."""

    identifier: ServiceIdentifier[Any]
    descriptor: Descriptor[Any]
    owner: InstantiationService
    trace: Trace


def _pending_key(item: _PendingService) -> Hashable:
    return (item.owner, item.identifier)


class InstantiationService:
    """Resolve and construct services of one scope in dependency order.

    A service collection maps identifiers to pending ``Descriptor`` recipes or
    to resolved instances. Requesting a pending service builds a graph of its
    transitive pending dependencies, constructs them leaf-first and caches
    every instance in the scope that owns its binding, so each service is
    built at most once.

    Scopes form a hierarchy through ``create_child``: lookups fall back to the
    parent on a local miss, and an instance is always cached where its
    descriptor was bound. Dependencies of a service are looked up from the
    scope that owns it, so a parent-owned service never captures bindings of
    a child.

    The service binds itself under ``IInstantiationService`` so services can
    depend on the scope that created them.

    Resolution is synchronous and performs no locking. Use one scope from one
    thread at a time.
    """

    def __init__(
        self,
        services: ServiceCollection | None = None,
        *,
        parent: InstantiationService | None = None,
        settings: InstantiationSettings | None = None,
        reporter: TraceReporter | None = None,
        registry: IdentifierRegistry | None = None,
    ) -> None:
        """Create a root scope, or a child scope when ``parent`` is given.

        Args:
            services: Bindings owned by this scope. A new empty collection is
                used when omitted.
            parent: Scope consulted for identifiers missing from ``services``.
            settings: Tracing and graph limits. Defaults to the parent's
                settings, or to ``InstantiationSettings()`` for a root scope.
            reporter: Sink for trace entries. Only used when
                ``settings.tracing_enabled`` is true; a reporter is created
                when tracing is enabled and none is given.
            registry: Source of constructor dependency metadata. Defaults to
                the parent's registry, or to the process default registry.

        """
        self._services = services if services is not None else ServiceCollection()
        self._parent = parent
        if settings is None:
            settings = parent._settings if parent is not None else InstantiationSettings()
        self._settings = settings
        if registry is None:
            registry = parent._registry if parent is not None else default_registry
        self._registry = registry
        if not settings.tracing_enabled:
            reporter = None
        elif reporter is None:
            reporter = (
                parent._reporter
                if parent is not None and parent._reporter is not None
                else TraceReporter(settings.trace_threshold_ms)
            )
        self._reporter = reporter
        self._active_instantiations: set[ServiceIdentifier[Any]] = set()

        self._services.set(IInstantiationService, self)

    @property
    def parent(self) -> InstantiationService | None:
        return self._parent

    @property
    def settings(self) -> InstantiationSettings:
        return self._settings

    @property
    def trace_reporter(self) -> TraceReporter | None:
        """Trace sink shared by this scope tree, or ``None`` when tracing is off."""
        return self._reporter

    def create_child(self, services: ServiceCollection | None = None) -> Self:
        """Create a nested scope that falls back to this one.

        Args:
            services: Bindings owned by the child scope.

        """
        child = type(self)(
            services,
            parent=self,
            settings=self._settings,
            reporter=self._reporter,
            registry=self._registry,
        )
        logger.debug("Created child scope with %d binding(s)", len(child._services) - 1)
        return child

    def invoke_function(
        self,
        fn: Callable[..., R],
        *args: Any,
        **kwargs: Any,
    ) -> R:
        """Call ``fn(accessor, *args, **kwargs)`` and return its result.

        ``accessor.get(identifier)`` returns the bound instance, constructing it
        and its pending dependencies first when needed. The accessor must not
        escape the call.

        Examples:
            .. code-block:: python

                def handle(accessor: ServicesAccessor, user_id: int) -> User:
                    return accessor.get(IUserRepository).load(user_id)

                user = instantiation.invoke_function(handle, 42)

        Args:
            fn: Callable receiving the accessor as its first argument.
            *args: Extra positional arguments forwarded to ``fn``.
            **kwargs: Extra keyword arguments forwarded to ``fn``.

        Raises:
            ServiceWireServiceNotRegisteredError: ``fn`` requested an unbound
                identifier.

        """
        trace = Trace.trace_invocation(self._reporter, fn)
        accessor = _InvocationAccessor(self, trace, getattr(fn, "__qualname__", repr(fn)))
        try:
            return fn(accessor, *args, **kwargs)
        finally:
            accessor._done = True
            trace.stop()

    @overload
    def create_instance(self, ctor_or_descriptor: Descriptor[T], *args: Any) -> T: ...

    @overload
    def create_instance(self, ctor_or_descriptor: Callable[..., T], *args: Any) -> T: ...

    def create_instance(self, ctor_or_descriptor: Any, *args: Any) -> Any:
        """Construct a new instance with its declared services injected.

        The result is not cached. Static ``args`` come first, then the resolved
        services in the order of their recorded parameter indexes. When
        ``ctor_or_descriptor`` is a ``Descriptor`` its static arguments precede
        ``args``.

        Args:
            ctor_or_descriptor: Class, factory, or descriptor to construct.
            *args: Static positional arguments.

        """
        if isinstance(ctor_or_descriptor, Descriptor):
            ctor = ctor_or_descriptor.ctor
            args = (*ctor_or_descriptor.static_arguments, *args)
        else:
            ctor = ctor_or_descriptor
        trace = Trace.trace_creation(self._reporter, ctor)
        try:
            return self._create_instance(ctor, args, trace)
        finally:
            trace.stop()

    def _create_instance(self, ctor: Callable[..., T], args: tuple[Any, ...], trace: Trace) -> T:
        service_dependencies = self._registry.dependencies_of(ctor)
        service_args: list[Any] = []
        for dependency in service_dependencies:
            if self._lookup_binding(dependency.identifier) is None:
                raise ServiceWireDependencyNotRegisteredError(_name_of(ctor), dependency.identifier)
            service_args.append(self._get_or_create_service_instance(dependency.identifier, trace))

        first_service_arg_pos = (
            service_dependencies[0].index if service_dependencies else len(args)
        )
        if len(args) != first_service_arg_pos:
            logger.warning(
                "First service dependency of %s at position %d conflicts with %d static arguments",
                _name_of(ctor),
                first_service_arg_pos + 1,
                len(args),
            )
            delta = first_service_arg_pos - len(args)
            if delta > 0:
                args = (*args, *([None] * delta))
            else:
                args = args[:first_service_arg_pos]

        return ctor(*args, *service_args)

    def _lookup_binding(
        self,
        identifier: ServiceIdentifier[Any],
    ) -> tuple[InstantiationService, Any] | None:
        """Find the nearest scope binding ``identifier`` and its binding."""
        scope: InstantiationService | None = self
        while scope is not None:
            if scope._services.has(identifier):
                return scope, scope._services.get(identifier)
            scope = scope._parent
        return None

    def _get_or_create_service_instance(self, identifier: ServiceIdentifier[T], trace: Trace) -> T:
        binding = self._lookup_binding(identifier)
        if binding is None:
            raise ServiceWireServiceNotRegisteredError(identifier)
        owner, instance_or_descriptor = binding

        if isinstance(instance_or_descriptor, Descriptor):
            return self._safe_create_and_cache_service_instance(
                identifier,
                instance_or_descriptor,
                owner,
                trace.branch(identifier, True),
            )
        trace.branch(identifier, False)
        return instance_or_descriptor

    def _safe_create_and_cache_service_instance(
        self,
        identifier: ServiceIdentifier[T],
        descriptor: Descriptor[T],
        owner: InstantiationService,
        trace: Trace,
    ) -> T:
        if identifier in owner._active_instantiations:
            raise ServiceWireRecursiveInstantiationError(identifier)
        return self._create_and_cache_service_instance(identifier, descriptor, owner, trace)

    def _create_and_cache_service_instance(
        self,
        identifier: ServiceIdentifier[T],
        descriptor: Descriptor[T],
        owner: InstantiationService,
        trace: Trace,
    ) -> T:
        graph: Graph[_PendingService] = Graph(_pending_key)
        requested = _PendingService(identifier, descriptor, owner, trace)
        graph.lookup_or_insert_node(requested)

        pushes = 0
        stack = [requested]
        while stack:
            item = stack.pop()
            if item.descriptor.supports_delayed_instantiation:
                # dependencies of a lazy service are resolved on first access
                continue

            for dependency in self._registry.dependencies_of(item.descriptor.ctor):
                binding = item.owner._lookup_binding(dependency.identifier)
                if binding is None:
                    raise ServiceWireDependencyNotRegisteredError(item.identifier, dependency.identifier)

                dependency_owner, instance_or_descriptor = binding
                if not isinstance(instance_or_descriptor, Descriptor):
                    continue

                dependency_item = _PendingService(
                    dependency.identifier,
                    instance_or_descriptor,
                    dependency_owner,
                    item.trace,
                )
                is_new = graph.lookup(dependency_item) is None
                dependency_item.trace = item.trace.branch(dependency.identifier, is_new)
                graph.insert_edge(item, dependency_item)
                if is_new:
                    pushes += 1
                    if pushes > self._settings.max_traversal:
                        raise ServiceWireTraversalLimitError(identifier, self._settings.max_traversal)
                    stack.append(dependency_item)

        while True:
            roots = graph.roots()

            if not roots:
                if not graph.is_empty():
                    raise self._circular_dependency_error(graph)
                break

            for node in roots:
                pending = node.data
                if isinstance(pending.owner._services.get(pending.identifier), Descriptor):
                    instance = pending.owner._create_service_instance(pending)
                    pending.owner._set_service_instance(pending.identifier, instance)
                graph.remove_node(pending)

        return owner._services.get(identifier)  # type: ignore[return-value]

    def _create_service_instance(self, pending: _PendingService) -> Any:
        descriptor = pending.descriptor
        if not descriptor.supports_delayed_instantiation:
            with self._instantiating(pending.identifier):
                return self._create_instance(descriptor.ctor, descriptor.static_arguments, pending.trace)

        def build() -> Any:
            trace = Trace.trace_creation(self._reporter, descriptor.ctor)
            try:
                with self._instantiating(pending.identifier):
                    return self._create_instance(descriptor.ctor, descriptor.static_arguments, trace)
            finally:
                trace.stop()

        return LazyService(descriptor.ctor, build)

    def _set_service_instance(self, identifier: ServiceIdentifier[Any], instance: Any) -> None:
        if isinstance(self._services.get(identifier), Descriptor):
            self._services.set(identifier, instance)
            return
        msg = f"Setting instance of '{identifier}' in a scope that does not own its pending binding."
        raise ServiceWireIllegalStateError(msg)

    @contextmanager
    def _instantiating(self, identifier: ServiceIdentifier[Any]) -> Generator[None, None, None]:
        if identifier in self._active_instantiations:
            raise ServiceWireRecursiveInstantiationError(identifier)
        self._active_instantiations.add(identifier)
        try:
            yield
        finally:
            self._active_instantiations.discard(identifier)

    @staticmethod
    def _circular_dependency_error(
        graph: Graph[_PendingService],
    ) -> ServiceWireCircularDependencyError:
        remaining = [node.data.identifier for node in graph.nodes()]
        cycle_keys = graph.find_cycle()
        cycle = [key[1] for key in cycle_keys] if cycle_keys else None  # type: ignore[index]
        return ServiceWireCircularDependencyError(remaining, cycle, graph=str(graph))


def _name_of(ctor: Callable[..., Any]) -> str:
    return getattr(ctor, "__qualname__", None) or getattr(ctor, "__name__", None) or repr(ctor)


__all__ = [
    "IInstantiationService",
    "InstantiationService",
    "ServicesAccessor",
]
