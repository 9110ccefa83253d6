"""
Typed Exception Hierarchy for the Schedule Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the scheduling engine (the orchestrating service layer, an API,
a batch job) must be able to tell "the project does not exist" apart from
"this dependency would close a loop" without parsing message text.  Every
error therefore has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. Structured DATA attributes (ids, paths, offending values)

    try:
        service.add_dependency(task_id, predecessor_id)
    except DependencyCycleError as e:
        api_response(code=e.code, path=e.path)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ScheduleKernelError (base)
    |
    +-- NotFoundError
    |   +-- ProjectNotFoundError
    |   +-- TaskNotFoundError
    |   +-- MilestoneNotFoundError
    |   +-- DependencyNotFoundError
    |
    +-- InvalidInputError
    |   +-- SelfDependencyError
    |   +-- CrossProjectDependencyError
    |   +-- DuplicateDependencyError
    |   +-- TaskProjectMismatchError
    |   +-- InvalidTaskReferenceError
    |   +-- InvalidPercentCompleteMethodError
    |   +-- InvalidLookAheadWindowError
    |   +-- InvalidDateRangeError
    |   +-- InvalidStatusTransitionError
    |
    +-- DependencyGraphError
        +-- DependencyCycleError
        +-- ScheduleCycleError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                            | When Raised
-----------|---------------------------------|-------------------------------------------
Not found  | PROJECT_NOT_FOUND               | Project id does not resolve
           | TASK_NOT_FOUND                  | Task (or predecessor) id does not resolve
           | MILESTONE_NOT_FOUND             | Milestone id does not resolve
           | DEPENDENCY_NOT_FOUND            | Dependency id does not resolve
-----------|---------------------------------|-------------------------------------------
Input      | SELF_DEPENDENCY                 | Task listed as its own predecessor
           | CROSS_PROJECT_DEPENDENCY        | Predecessor belongs to another project
           | DUPLICATE_DEPENDENCY            | Same predecessor -> task link already stored
           | TASK_PROJECT_MISMATCH           | Referenced task belongs to another project
           | INVALID_TASK_REFERENCE          | Task reference is not a UUID
           | INVALID_PERCENT_COMPLETE_METHOD | Method not one of cost/units/manual
           | INVALID_LOOK_AHEAD_WINDOW       | Negative look-ahead weeks
           | INVALID_DATE_RANGE              | Range start after range end
           | INVALID_STATUS_TRANSITION       | Project lifecycle forbids the move
-----------|---------------------------------|-------------------------------------------
Graph      | DEPENDENCY_CYCLE                | New dependency would close a cycle
           | SCHEDULE_CYCLE                  | Stored dependencies already form a cycle

Not-found and invalid-input errors are raised before any store write.
Store failures (SQLAlchemy errors) are NOT wrapped; they propagate as-is.
===============================================================================
"""


class ScheduleKernelError(Exception):
    """
    Base exception for all schedule kernel errors.

    All subclasses define a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "SCHEDULE_KERNEL_ERROR"


# Not-found errors


class NotFoundError(ScheduleKernelError):
    """Base exception for unresolvable record ids."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(NotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = str(project_id)
        super().__init__(f"Project not found: {project_id}")


class TaskNotFoundError(NotFoundError):
    """Task with given ID was not found."""

    code: str = "TASK_NOT_FOUND"

    def __init__(self, task_id: str, role: str = "task"):
        self.task_id = str(task_id)
        self.role = role
        label = "Predecessor task" if role == "predecessor" else "Task"
        super().__init__(f"{label} not found: {task_id}")


class MilestoneNotFoundError(NotFoundError):
    """Milestone with given ID was not found."""

    code: str = "MILESTONE_NOT_FOUND"

    def __init__(self, milestone_id: str):
        self.milestone_id = str(milestone_id)
        super().__init__(f"Milestone not found: {milestone_id}")


class DependencyNotFoundError(NotFoundError):
    """Task dependency with given ID was not found."""

    code: str = "DEPENDENCY_NOT_FOUND"

    def __init__(self, dependency_id: str):
        self.dependency_id = str(dependency_id)
        super().__init__(f"Dependency not found: {dependency_id}")


# Invalid input errors


class InvalidInputError(ScheduleKernelError):
    """Base exception for rejected caller input."""

    code: str = "INVALID_INPUT"


class SelfDependencyError(InvalidInputError):
    """A task cannot be its own predecessor."""

    code: str = "SELF_DEPENDENCY"

    def __init__(self, task_id: str):
        self.task_id = str(task_id)
        super().__init__(f"A task cannot depend on itself: {task_id}")


class CrossProjectDependencyError(InvalidInputError):
    """Predecessor and dependent task belong to different projects."""

    code: str = "CROSS_PROJECT_DEPENDENCY"

    def __init__(
        self,
        task_id: str,
        predecessor_id: str,
        task_project_id: str,
        predecessor_project_id: str,
    ):
        self.task_id = str(task_id)
        self.predecessor_id = str(predecessor_id)
        self.task_project_id = str(task_project_id)
        self.predecessor_project_id = str(predecessor_project_id)
        super().__init__(
            f"Task {task_id} (project {task_project_id}) cannot depend on "
            f"task {predecessor_id} from project {predecessor_project_id}"
        )


class DuplicateDependencyError(InvalidInputError):
    """The predecessor -> task link already exists."""

    code: str = "DUPLICATE_DEPENDENCY"

    def __init__(self, task_id: str, predecessor_id: str, dependency_id: str):
        self.task_id = str(task_id)
        self.predecessor_id = str(predecessor_id)
        self.dependency_id = str(dependency_id)
        super().__init__(
            f"Task {task_id} already depends on {predecessor_id} "
            f"(dependency {dependency_id})"
        )


class TaskProjectMismatchError(InvalidInputError):
    """A task referenced by a project-level record belongs to another project."""

    code: str = "TASK_PROJECT_MISMATCH"

    def __init__(self, task_id: str, task_project_id: str, project_id: str):
        self.task_id = str(task_id)
        self.task_project_id = str(task_project_id)
        self.project_id = str(project_id)
        super().__init__(
            f"Task {task_id} belongs to project {task_project_id}, not {project_id}"
        )


class InvalidTaskReferenceError(InvalidInputError):
    """A task reference that cannot be read as a UUID."""

    code: str = "INVALID_TASK_REFERENCE"

    def __init__(self, reference: str):
        self.reference = str(reference)
        super().__init__(f"Not a task id: {reference!r}")


class InvalidPercentCompleteMethodError(InvalidInputError):
    """Percent-complete method is not one of cost, units, manual."""

    code: str = "INVALID_PERCENT_COMPLETE_METHOD"

    def __init__(self, method: str):
        self.method = str(method)
        super().__init__(
            f"Unknown percent-complete method: {method!r} "
            f"(expected 'cost', 'units' or 'manual')"
        )


class InvalidLookAheadWindowError(InvalidInputError):
    """Look-ahead window must be zero or more weeks."""

    code: str = "INVALID_LOOK_AHEAD_WINDOW"

    def __init__(self, weeks: int):
        self.weeks = weeks
        super().__init__(f"Look-ahead window cannot be negative: {weeks} weeks")


class InvalidDateRangeError(InvalidInputError):
    """Requested date range starts after it ends."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start: str, end: str):
        self.start = str(start)
        self.end = str(end)
        super().__init__(f"Invalid date range: {start} is after {end}")


class InvalidStatusTransitionError(InvalidInputError):
    """Project lifecycle does not allow the requested status change."""

    code: str = "INVALID_STATUS_TRANSITION"

    def __init__(self, project_id: str, from_status: str, to_status: str):
        self.project_id = str(project_id)
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Project {project_id} cannot move from {from_status} to {to_status}"
        )


# Dependency graph errors


class DependencyGraphError(ScheduleKernelError):
    """Base exception for task dependency graph errors."""

    code: str = "DEPENDENCY_GRAPH_ERROR"


class DependencyCycleError(DependencyGraphError):
    """
    Creating this dependency would introduce a cycle.

    ``path`` lists task ids from the new dependent back round to itself,
    following predecessor -> successor edges.
    """

    code: str = "DEPENDENCY_CYCLE"

    def __init__(self, task_id: str, predecessor_id: str, path: list[str]):
        self.task_id = str(task_id)
        self.predecessor_id = str(predecessor_id)
        self.path = [str(p) for p in path]
        super().__init__(
            f"Dependency {predecessor_id} -> {task_id} would create a cycle: "
            f"{' -> '.join(self.path)}"
        )


class ScheduleCycleError(DependencyGraphError):
    """
    The stored dependency graph of a project contains a cycle.

    Raised by the CPM engine instead of leaving the cyclic tasks out of the
    forward and backward passes.
    """

    code: str = "SCHEDULE_CYCLE"

    def __init__(self, path: list[str], unscheduled_count: int):
        self.path = [str(p) for p in path]
        self.unscheduled_count = unscheduled_count
        super().__init__(
            f"Dependency cycle prevents scheduling {unscheduled_count} task(s): "
            f"{' -> '.join(self.path)}"
        )
