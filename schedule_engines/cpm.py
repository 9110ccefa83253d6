"""
Module: schedule_engines.cpm
Responsibility:
    Critical Path Method over a ``TaskGraph``: topological ordering, forward
    pass (earliest start/finish), backward pass (latest start/finish), total
    float, and the zero-float critical set.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Persisting the derived
    critical-path flags is the project service's job.

Invariants enforced:
    - ES(t) = max over predecessors p of EF(p) + lag(p->t), else 0.
    - EF(t) = ES(t) + duration(t).
    - Project duration = max EF, 0 for an empty graph.
    - LF(t) = min over successors s of LS(s) - lag(t->s), else project duration.
    - LS(t) = LF(t) - duration(t); float = LS - ES.
    - Critical iff |float| < tolerance.
    - Every task is scheduled or the calculation fails: no task is ever
      reported with a default float.

Failure modes:
    - ScheduleCycleError when the dependencies contain a cycle.

Usage:
    graph = TaskGraph(nodes, edges)
    result = CriticalPathCalculator().calculate(graph)
    result.project_duration, result.critical_task_ids
"""

from __future__ import annotations

from dataclasses import dataclass, field

from schedule_engines.task_graph import DependencyType, TaskGraph, TaskId
from schedule_engines.tracer import traced_engine
from schedule_kernel.exceptions import ScheduleCycleError
from schedule_kernel.logging_config import get_logger

logger = get_logger("engines.cpm")

DEFAULT_FLOAT_TOLERANCE = 0.001


@dataclass(frozen=True)
class TaskSchedule:
    """Computed CPM dates for one task, in days from project start."""

    task_id: TaskId
    duration: int
    early_start: int
    early_finish: int
    late_start: int
    late_finish: int
    is_critical: bool

    @property
    def total_float(self) -> int:
        return self.late_start - self.early_start


@dataclass(frozen=True)
class CriticalPathResult:
    """
    Outcome of a CPM run.

    Guarantees:
        - ``schedules`` has an entry for every task in the graph.
        - ``critical_task_ids`` follows topological order.
    """

    project_duration: int
    topological_order: tuple[TaskId, ...]
    schedules: dict[TaskId, TaskSchedule] = field(default_factory=dict)

    @property
    def critical_task_ids(self) -> tuple[TaskId, ...]:
        return tuple(tid for tid in self.topological_order if self.schedules[tid].is_critical)

    def schedule_for(self, task_id: TaskId) -> TaskSchedule:
        return self.schedules[task_id]


class CriticalPathCalculator:
    """
    Forward/backward pass scheduler.

    Only finish-to-start semantics are implemented; FF/SS/SF edges are
    scheduled as if they were FS.
    """

    def __init__(self, float_tolerance: float = DEFAULT_FLOAT_TOLERANCE):
        if float_tolerance < 0:
            raise ValueError("float_tolerance cannot be negative")
        self._tolerance = float_tolerance

    @traced_engine("cpm", "1.0")
    def calculate(self, graph: TaskGraph) -> CriticalPathResult:
        """Schedule every task in ``graph``."""
        order = graph.topological_order()
        if len(order) != len(graph):
            path = graph.find_cycle() or []
            raise ScheduleCycleError(
                path=[str(tid) for tid in path],
                unscheduled_count=len(graph) - len(order),
            )

        non_fs = sum(
            1 for e in graph.edges if e.dependency_type != DependencyType.FINISH_TO_START
        )
        if non_fs:
            logger.debug(
                "non_fs_dependencies_scheduled_as_fs",
                extra={"edge_count": non_fs},
            )

        early_start: dict[TaskId, int] = {}
        early_finish: dict[TaskId, int] = {}
        for tid in order:
            es = 0
            for pred in graph.predecessors_of(tid):
                es = max(es, early_finish[pred.task_id] + pred.lag)
            early_start[tid] = es
            early_finish[tid] = es + graph.node(tid).duration

        project_duration = max(early_finish.values(), default=0)

        late_start: dict[TaskId, int] = {}
        late_finish: dict[TaskId, int] = {}
        for tid in reversed(order):
            lf = project_duration
            for succ in graph.successors_of(tid):
                lf = min(lf, late_start[succ.task_id] - succ.lag)
            late_finish[tid] = lf
            late_start[tid] = lf - graph.node(tid).duration

        schedules = {
            tid: TaskSchedule(
                task_id=tid,
                duration=graph.node(tid).duration,
                early_start=early_start[tid],
                early_finish=early_finish[tid],
                late_start=late_start[tid],
                late_finish=late_finish[tid],
                is_critical=abs(late_start[tid] - early_start[tid]) < self._tolerance,
            )
            for tid in order
        }

        return CriticalPathResult(
            project_duration=project_duration,
            topological_order=tuple(order),
            schedules=schedules,
        )
