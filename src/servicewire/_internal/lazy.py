from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar, cast

T = TypeVar("T")

_MISSING: Any = object()


class LazyService(Generic[T]):
    """Stand in for a service whose construction is delayed until first use.

    The first attribute access (or call) builds the real instance through
    ``factory`` exactly once, guarded by a lock against concurrent first use.
    Later accesses are forwarded to the cached instance. ``__class__`` reports
    the target type so ``isinstance`` checks succeed before construction.
    """

    __slots__ = ("_sw_factory", "_sw_instance", "_sw_lock", "_sw_target_type")

    def __init__(self, target_type: Any, factory: Callable[[], T]) -> None:
        object.__setattr__(self, "_sw_target_type", target_type)
        object.__setattr__(self, "_sw_factory", factory)
        object.__setattr__(self, "_sw_instance", _MISSING)
        object.__setattr__(self, "_sw_lock", threading.Lock())

    def _sw_get_class(self) -> type[Any]:
        target_type = object.__getattribute__(self, "_sw_target_type")
        if isinstance(target_type, type):
            return target_type
        return LazyService

    __class__ = property(_sw_get_class)  # type: ignore[assignment]

    def _sw_resolve(self) -> T:
        instance = object.__getattribute__(self, "_sw_instance")
        if instance is not _MISSING:
            return cast("T", instance)
        with object.__getattribute__(self, "_sw_lock"):
            instance = object.__getattribute__(self, "_sw_instance")
            if instance is _MISSING:
                instance = object.__getattribute__(self, "_sw_factory")()
                object.__setattr__(self, "_sw_instance", instance)
                object.__setattr__(self, "_sw_factory", None)
        return cast("T", instance)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._sw_resolve(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._sw_resolve(), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._sw_resolve(), name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._sw_resolve()(*args, **kwargs)  # type: ignore[operator]

    # special methods bypass __getattr__

    def __bool__(self) -> bool:
        return bool(self._sw_resolve())

    def __len__(self) -> int:
        return len(self._sw_resolve())  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._sw_resolve())  # type: ignore[call-overload]

    def __contains__(self, item: object) -> bool:
        return item in self._sw_resolve()  # type: ignore[operator]

    def __getitem__(self, key: Any) -> Any:
        return self._sw_resolve()[key]  # type: ignore[index]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._sw_resolve()[key] = value  # type: ignore[index]

    def __delitem__(self, key: Any) -> None:
        del self._sw_resolve()[key]  # type: ignore[attr-defined]

    def __enter__(self) -> Any:
        return self._sw_resolve().__enter__()  # type: ignore[attr-defined]

    def __exit__(self, *exc_info: Any) -> Any:
        return self._sw_resolve().__exit__(*exc_info)  # type: ignore[attr-defined]

    def __eq__(self, other: object) -> bool:
        return self._sw_resolve() == unwrap_lazy(other)

    def __ne__(self, other: object) -> bool:
        return self._sw_resolve() != unwrap_lazy(other)

    def __hash__(self) -> int:
        return hash(self._sw_resolve())

    def __str__(self) -> str:
        return str(self._sw_resolve())

    def __repr__(self) -> str:
        instance = object.__getattribute__(self, "_sw_instance")
        if instance is _MISSING:
            target_type = object.__getattribute__(self, "_sw_target_type")
            name = getattr(target_type, "__qualname__", repr(target_type))
            return f"<LazyService of {name} (pending)>"
        return repr(instance)


def is_lazy(candidate: object) -> bool:
    """Return whether ``candidate`` is a lazy handle, resolved or not.

    Args:
        candidate: Value to check.

    """
    return type(candidate) is LazyService


def is_lazy_resolved(candidate: LazyService[Any]) -> bool:
    """Return whether the lazy handle already built its instance.

    Args:
        candidate: Lazy handle to inspect.

    """
    return object.__getattribute__(candidate, "_sw_instance") is not _MISSING


def unwrap_lazy(candidate: T | LazyService[T]) -> T:
    """Return the real instance behind a lazy handle, building it if needed.

    Non-lazy values are returned unchanged.

    Args:
        candidate: Lazy handle or plain value.

    """
    if type(candidate) is LazyService:
        return LazyService._sw_resolve(candidate)
    return cast("T", candidate)


__all__ = ["LazyService", "is_lazy", "is_lazy_resolved", "unwrap_lazy"]
