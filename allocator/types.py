"""
Data models for the worker allocator.

This module defines the core data structures used in allocation:
- Tasks waiting for a worker
- Outcomes recording which worker (if any) serves each task
- Request/response envelopes and limits used by the HTTP service
"""

from dataclasses import dataclass, field
from typing import List, Optional


class InvalidInputError(ValueError):
    """Raised when an allocation run is given an invalid input shape."""


@dataclass(frozen=True)
class Task:
    """
    A task to be served by a worker.

    Attributes:
        arrival_time: Time at which the task becomes known
        duration: Time a worker needs to handle the task
    """
    arrival_time: int
    duration: int

    def __post_init__(self):
        """Validate task fields."""
        if self.duration < 0:
            raise InvalidInputError(
                f"Duration cannot be negative, got {self.duration}"
            )


@dataclass(frozen=True)
class AssignmentOutcome:
    """
    Decision taken for a single task.

    Attributes:
        task_index: 1-based position of the task in the caller's input
        worker_id: ID of the worker serving the task, None if unassigned
        release_time: Time at which the worker becomes free again
    """
    task_index: int
    worker_id: Optional[int] = None
    release_time: Optional[int] = None

    @classmethod
    def assigned(cls, task_index: int, worker_id: int,
                 release_time: int) -> 'AssignmentOutcome':
        return cls(task_index, worker_id, release_time)

    @classmethod
    def unassigned(cls, task_index: int) -> 'AssignmentOutcome':
        return cls(task_index)

    @property
    def is_assigned(self) -> bool:
        return self.worker_id is not None


@dataclass
class AllocationRequest:
    """
    Request to allocate tasks across a pool of workers.

    Attributes:
        tasks: Tasks in the caller's order
        worker_count: Number of interchangeable workers (ids 1..worker_count)
    """
    tasks: List[Task]
    worker_count: int


@dataclass
class AllocationResponse:
    """
    Response containing one outcome per requested task.

    Attributes:
        outcomes: Outcomes in the same order as the request's tasks
        metrics: Summary of the run
    """
    outcomes: List[AssignmentOutcome]
    metrics: dict = field(default_factory=dict)


@dataclass
class AllocationLimits:
    """
    Limits applied by the service to incoming requests.

    Attributes:
        max_tasks: Maximum number of tasks per request
        max_workers: Maximum worker count per request
    """
    max_tasks: int = 10000
    max_workers: int = 10000

    def check(self, request: AllocationRequest) -> Optional[str]:
        """
        Return a message describing the first exceeded limit, if any.
        """
        if len(request.tasks) > self.max_tasks:
            return (f"Too many tasks: {len(request.tasks)} "
                    f"(limit {self.max_tasks})")
        if request.worker_count > self.max_workers:
            return (f"Too many workers: {request.worker_count} "
                    f"(limit {self.max_workers})")
        return None
