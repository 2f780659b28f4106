from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum, auto
from typing import Any

logger = logging.getLogger(__name__)


class TraceType(Enum):
    """Kind of a trace node."""

    NONE = auto()
    CREATION = auto()
    INVOCATION = auto()
    BRANCH = auto()


class TraceReporter:
    """Collect finished trace texts for external logging.

    A trace is kept when it took longer than ``threshold_ms`` or when it caused
    at least one service creation. Entries are append-only and are also logged
    at DEBUG level.
    """

    def __init__(self, threshold_ms: float = 2.0) -> None:
        self.threshold_ms = threshold_ms
        self.total_ms = 0.0
        self._entries: list[str] = []

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def report(self, text: str, *, duration_ms: float, caused_creation: bool) -> None:
        """Account a finished trace and keep its text when it is worth reporting.

        Args:
            text: Rendered trace.
            duration_ms: Elapsed time of the traced call.
            caused_creation: Whether the call created at least one service.

        """
        self.total_ms += duration_ms
        if duration_ms > self.threshold_ms or caused_creation:
            self._entries.append(text)
            logger.debug("%s", text)

    def __len__(self) -> int:
        return len(self._entries)


class Trace:
    """Record which services a call used or created, as a tree of branches."""

    def __init__(
        self,
        trace_type: TraceType,
        name: str | None,
        reporter: TraceReporter | None = None,
    ) -> None:
        self.type = trace_type
        self.name = name
        self._reporter = reporter
        self._start = time.perf_counter()
        self._deps: list[tuple[Any, bool, Trace | None]] = []

    @classmethod
    def trace_invocation(
        cls,
        reporter: TraceReporter | None,
        fn: Callable[..., Any],
    ) -> Trace:
        if reporter is None:
            return NONE_TRACE
        return cls(TraceType.INVOCATION, _name_of(fn), reporter)

    @classmethod
    def trace_creation(
        cls,
        reporter: TraceReporter | None,
        ctor: Callable[..., Any],
    ) -> Trace:
        if reporter is None:
            return NONE_TRACE
        return cls(TraceType.CREATION, _name_of(ctor), reporter)

    def branch(self, identifier: Any, first: bool) -> Trace:
        """Record a dependency edge and return the trace for its own dependencies.

        Args:
            identifier: Dependency identifier.
            first: ``True`` when this edge created the dependency.

        """
        child = Trace(TraceType.BRANCH, str(identifier))
        self._deps.append((identifier, first, child))
        return child

    def stop(self) -> None:
        if self._reporter is None:
            return
        duration_ms = (time.perf_counter() - self._start) * 1000
        caused_creation = False

        def render_children(depth: int, trace: Trace) -> str:
            nonlocal caused_creation
            lines: list[str] = []
            prefix = "\t" * depth
            for identifier, first, child in trace._deps:
                if first and child is not None:
                    caused_creation = True
                    lines.append(f"{prefix}CREATES -> {identifier}")
                    nested = render_children(depth + 1, child)
                    if nested:
                        lines.append(nested)
                else:
                    lines.append(f"{prefix}uses -> {identifier}")
            return "\n".join(lines)

        body = render_children(1, self)
        heading = "CREATE" if self.type is TraceType.CREATION else "CALL"
        footer = (
            f"DONE, took {duration_ms:.2f}ms "
            f"(grand total {self._reporter.total_ms + duration_ms:.2f}ms)"
        )
        text = "\n".join(part for part in (f"{heading} {self.name}", body, footer) if part)
        self._reporter.report(text, duration_ms=duration_ms, caused_creation=caused_creation)


class _NoneTrace(Trace):
    """Trace used when tracing is disabled; records nothing."""

    def __init__(self) -> None:
        super().__init__(TraceType.NONE, None)

    def branch(self, identifier: Any, first: bool) -> Trace:  # noqa: ARG002
        return self

    def stop(self) -> None:
        return None


NONE_TRACE: Trace = _NoneTrace()


def _name_of(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)


__all__ = ["NONE_TRACE", "Trace", "TraceReporter", "TraceType"]
