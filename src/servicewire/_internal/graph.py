from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Generic, TypeVar

T = TypeVar("T")


class Node(Generic[T]):
    """A graph vertex with its incoming and outgoing neighbours keyed by node key."""

    __slots__ = ("data", "incoming", "key", "outgoing")

    def __init__(self, key: Hashable, data: T) -> None:
        self.key = key
        self.data = data
        self.incoming: dict[Hashable, Node[T]] = {}
        self.outgoing: dict[Hashable, Node[T]] = {}

    def __repr__(self) -> str:
        return f"Node({self.key!r})"


class Graph(Generic[T]):
    """Directed graph whose nodes are identified by ``key(data)``.

    Edges point from a dependent to its dependency, so a root (a node without
    outgoing edges) has nothing left to wait for.
    """

    def __init__(self, key: Callable[[T], Hashable]) -> None:
        self._key = key
        self._nodes: dict[Hashable, Node[T]] = {}

    def roots(self) -> list[Node[T]]:
        """Return every node with no outgoing edge. Order is unspecified."""
        return [node for node in self._nodes.values() if not node.outgoing]

    def insert_edge(self, from_data: T, to_data: T) -> None:
        from_node = self.lookup_or_insert_node(from_data)
        to_node = self.lookup_or_insert_node(to_data)

        from_node.outgoing[to_node.key] = to_node
        to_node.incoming[from_node.key] = from_node

    def remove_node(self, data: T) -> None:
        key = self._key(data)
        node = self._nodes.get(key)
        if node is None:
            return
        for neighbour in node.incoming.values():
            neighbour.outgoing.pop(key, None)
        for neighbour in node.outgoing.values():
            neighbour.incoming.pop(key, None)
        del self._nodes[key]

    def lookup_or_insert_node(self, data: T) -> Node[T]:
        key = self._key(data)
        node = self._nodes.get(key)
        if node is None:
            node = Node(key, data)
            self._nodes[key] = node
        return node

    def lookup(self, data: T) -> Node[T] | None:
        return self._nodes.get(self._key(data))

    def is_empty(self) -> bool:
        return not self._nodes

    def nodes(self) -> list[Node[T]]:
        return list(self._nodes.values())

    def find_cycle(self) -> list[Hashable] | None:
        """Return one cycle as a key path, first key repeated last, or ``None``."""
        visited: set[Hashable] = set()
        for start in self._nodes.values():
            if start.key in visited:
                continue
            path: list[Hashable] = []
            on_path: set[Hashable] = set()
            stack: list[tuple[Node[T], list[Node[T]]]] = [(start, list(start.outgoing.values()))]
            path.append(start.key)
            on_path.add(start.key)
            visited.add(start.key)
            while stack:
                _node, pending = stack[-1]
                if not pending:
                    stack.pop()
                    on_path.discard(path.pop())
                    continue
                successor = pending.pop()
                if successor.key in on_path:
                    return [*path[path.index(successor.key) :], successor.key]
                if successor.key in visited:
                    continue
                visited.add(successor.key)
                path.append(successor.key)
                on_path.add(successor.key)
                stack.append((successor, list(successor.outgoing.values())))
        return None

    def __len__(self) -> int:
        return len(self._nodes)

    def __str__(self) -> str:
        lines = [
            f"{key!s}\n\t(-> incoming)[{', '.join(str(k) for k in node.incoming)}]"
            f"\n\t(outgoing ->)[{', '.join(str(k) for k in node.outgoing)}]\n"
            for key, node in self._nodes.items()
        ]
        return "\n".join(lines)
