"""
Module: schedule_engines.task_graph
Responsibility:
    In-memory directed graph of one project's tasks and their dependencies:
    predecessor/successor adjacency with lags, in-degrees, Kahn topological
    ordering, reachability search and cycle extraction.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Built by the project
    service from freshly loaded records on every calculation; never cached.

Invariants enforced:
    - Every retained edge connects two nodes of the graph.  Edges whose
      dependent lies outside the node set are ignored; edges whose
      predecessor lies outside it are dropped with a warning.
    - Node iteration order is the order nodes were supplied (the caller's
      sort order), so topological order is deterministic.

Failure modes:
    - None raised here.  ``topological_order`` returns a partial order when
      the graph is cyclic; ``find_cycle`` reports the offending loop.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from enum import Enum

from schedule_kernel.logging_config import get_logger

logger = get_logger("engines.task_graph")

TaskId = Hashable


class DependencyType(str, Enum):
    """Relationship tag on a dependency.  Only finish-to-start is scheduled."""

    FINISH_TO_START = "FS"
    FINISH_TO_FINISH = "FF"
    START_TO_START = "SS"
    START_TO_FINISH = "SF"


@dataclass(frozen=True)
class TaskNode:
    """A schedulable task reduced to what the graph algorithms need."""

    task_id: TaskId
    duration: int = 0
    name: str = ""

    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"Task duration cannot be negative: {self.duration}")


@dataclass(frozen=True)
class DependencyEdge:
    """Directed edge: ``task_id`` cannot start until ``predecessor_id`` finishes (+ lag)."""

    predecessor_id: TaskId
    task_id: TaskId
    lag: int = 0  # negative lag is a lead
    dependency_type: DependencyType = DependencyType.FINISH_TO_START


@dataclass(frozen=True)
class Link:
    """One side of an adjacency entry: the neighbouring task and the edge lag."""

    task_id: TaskId
    lag: int


class TaskGraph:
    """
    Task/dependency graph for a single project.

    Contract:
        Immutable after construction.  All lookups by unknown task id return
        empty results rather than raising.
    """

    def __init__(
        self,
        nodes: Sequence[TaskNode],
        edges: Sequence[DependencyEdge] = (),
    ):
        self._nodes: dict[TaskId, TaskNode] = {n.task_id: n for n in nodes}
        self._predecessors: dict[TaskId, list[Link]] = {tid: [] for tid in self._nodes}
        self._successors: dict[TaskId, list[Link]] = {tid: [] for tid in self._nodes}
        kept: list[DependencyEdge] = []

        for edge in edges:
            if edge.task_id not in self._nodes:
                continue
            if edge.predecessor_id not in self._nodes:
                logger.warning(
                    "dependency_predecessor_outside_graph",
                    extra={
                        "task_id": str(edge.task_id),
                        "predecessor_id": str(edge.predecessor_id),
                    },
                )
                continue
            self._predecessors[edge.task_id].append(Link(edge.predecessor_id, edge.lag))
            self._successors[edge.predecessor_id].append(Link(edge.task_id, edge.lag))
            kept.append(edge)

        self._edges: tuple[DependencyEdge, ...] = tuple(kept)

    @property
    def nodes(self) -> tuple[TaskNode, ...]:
        return tuple(self._nodes.values())

    @property
    def edges(self) -> tuple[DependencyEdge, ...]:
        return self._edges

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._nodes

    def node(self, task_id: TaskId) -> TaskNode:
        return self._nodes[task_id]

    def predecessors_of(self, task_id: TaskId) -> tuple[Link, ...]:
        return tuple(self._predecessors.get(task_id, ()))

    def successors_of(self, task_id: TaskId) -> tuple[Link, ...]:
        return tuple(self._successors.get(task_id, ()))

    def in_degrees(self) -> dict[TaskId, int]:
        """Count of incoming edges per task (every node present, zero included)."""
        return {tid: len(preds) for tid, preds in self._predecessors.items()}

    def topological_order(self) -> list[TaskId]:
        """
        Kahn's algorithm.

        Tasks trapped in a cycle never reach in-degree zero and are absent
        from the result; compare its length with ``len(graph)``.
        """
        in_degree = self.in_degrees()
        queue: deque[TaskId] = deque(tid for tid, deg in in_degree.items() if deg == 0)
        order: list[TaskId] = []

        while queue:
            current = queue.popleft()
            order.append(current)
            for succ in self._successors[current]:
                in_degree[succ.task_id] -= 1
                if in_degree[succ.task_id] == 0:
                    queue.append(succ.task_id)

        return order

    def can_reach(self, start: TaskId, target: TaskId) -> list[TaskId] | None:
        """
        Successor-direction path from ``start`` to ``target``, or None.

        Iterative DFS; the returned path includes both endpoints.
        """
        if start not in self._nodes or target not in self._nodes:
            return None
        if start == target:
            return [start]

        parent: dict[TaskId, TaskId] = {}
        visited = {start}
        stack = [start]
        while stack:
            current = stack.pop()
            for succ in self._successors[current]:
                nxt = succ.task_id
                if nxt in visited:
                    continue
                parent[nxt] = current
                if nxt == target:
                    path = [nxt]
                    while path[-1] != start:
                        path.append(parent[path[-1]])
                    return list(reversed(path))
                visited.add(nxt)
                stack.append(nxt)
        return None

    def cycle_if_added(
        self,
        predecessor_id: TaskId,
        task_id: TaskId,
    ) -> list[TaskId] | None:
        """
        Cycle that a new ``predecessor_id -> task_id`` edge would close.

        The edge closes a loop exactly when ``task_id`` already reaches
        ``predecessor_id``.  The path starts and ends at ``task_id``.
        """
        if predecessor_id == task_id:
            return [task_id, task_id]
        path = self.can_reach(task_id, predecessor_id)
        if path is None:
            return None
        return path + [task_id]

    def find_cycle(self) -> list[TaskId] | None:
        """
        One dependency cycle among the tasks Kahn's algorithm could not order.

        Every unordered task keeps at least one unordered predecessor, so
        walking predecessors inside that set must revisit a task.  The path
        is returned in successor direction, first task repeated at the end.
        """
        ordered = set(self.topological_order())
        remaining = [tid for tid in self._nodes if tid not in ordered]
        if not remaining:
            return None

        remaining_set = set(remaining)
        walk: list[TaskId] = []
        seen: dict[TaskId, int] = {}
        current = remaining[0]
        while current not in seen:
            seen[current] = len(walk)
            walk.append(current)
            current = next(
                link.task_id
                for link in self._predecessors[current]
                if link.task_id in remaining_set
            )

        loop = walk[seen[current]:]
        loop.reverse()
        return loop + [loop[0]]
