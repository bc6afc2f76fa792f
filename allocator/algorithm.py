"""
Core allocation algorithm.

This module implements the pure allocation logic that hands tasks, in
arrival order, to the worker that has waited longest in the idle pool.
Busy workers return to the idle pool once their release time is reached.

The algorithm is deterministic: given the same inputs, it will always
produce the same outputs.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .pools import BusySet, IdlePool
from .types import AssignmentOutcome, InvalidInputError, Task


logger = logging.getLogger(__name__)


def allocate(tasks: Sequence[Task], worker_count: int) -> List[AssignmentOutcome]:
    """
    Allocate workers to tasks.

    This is the main allocation function. It implements a greedy,
    earliest-release policy with FIFO ordering among idle workers.

    Algorithm:
    1. Stably sort tasks by arrival time
    2. Before each task, move every worker released by its arrival time
       from the busy set to the back of the idle pool
    3. Give the task to the front of the idle pool, or leave it unassigned

    Args:
        tasks: Tasks in the caller's order
        worker_count: Number of workers, identified as 1..worker_count

    Returns:
        One outcome per task, in the same order as ``tasks``

    Raises:
        InvalidInputError: worker_count or a task duration is negative
    """
    validate_input(tasks, worker_count)

    idle = IdlePool(worker_count)
    busy = BusySet()
    outcomes: List[Optional[AssignmentOutcome]] = [None] * len(tasks)

    for position in sort_tasks(tasks):
        task = tasks[position]
        release_sweep(busy, idle, task.arrival_time)
        outcomes[position] = assign_next(idle, busy, task, position + 1)

    logger.debug(
        "Allocated %d tasks over %d workers",
        sum(1 for o in outcomes if o.is_assigned), worker_count
    )
    return outcomes


def validate_input(tasks: Sequence[Task], worker_count: int) -> None:
    """
    Reject the whole run if any input is out of shape.

    Raises:
        InvalidInputError: worker_count or a task duration is negative
    """
    if worker_count < 0:
        raise InvalidInputError(
            f"Worker count cannot be negative, got {worker_count}"
        )
    for index, task in enumerate(tasks, start=1):
        if task.duration < 0:
            raise InvalidInputError(
                f"Task {index} has negative duration {task.duration}"
            )


def sort_tasks(tasks: Sequence[Task]) -> List[int]:
    """
    Order task positions by arrival time (ascending).

    The sort is stable: tasks sharing an arrival time keep the order in
    which the caller supplied them.

    Args:
        tasks: Tasks to sort

    Returns:
        0-based positions into ``tasks`` in processing order
    """
    return sorted(range(len(tasks)), key=lambda i: tasks[i].arrival_time)


def release_sweep(busy: BusySet, idle: IdlePool, now: int) -> List[int]:
    """
    Move every worker released at or before ``now`` into the idle pool.

    Workers are appended earliest release first, so a worker freed earlier
    is drawn before one freed later.

    Returns:
        Released worker ids in the order they joined the idle pool
    """
    released = []
    for _, worker_id in busy.release_until(now):
        idle.append(worker_id)
        released.append(worker_id)
    return released


def assign_next(
    idle: IdlePool,
    busy: BusySet,
    task: Task,
    task_index: int
) -> AssignmentOutcome:
    """
    Give ``task`` to the front of the idle pool if one is available.

    Args:
        idle: Idle workers
        busy: Busy workers, receives the assigned worker
        task: Task to serve
        task_index: 1-based position of the task in the caller's input

    Returns:
        Assigned outcome with the worker and its release time, or an
        unassigned outcome when every worker is busy
    """
    worker_id = idle.pop_front()
    if worker_id is None:
        return AssignmentOutcome.unassigned(task_index)

    release_time = task.arrival_time + task.duration
    busy.push(worker_id, release_time)
    return AssignmentOutcome.assigned(task_index, worker_id, release_time)


def calculate_allocation_metrics(outcomes: Sequence[AssignmentOutcome]) -> dict:
    """
    Calculate metrics about an allocation run.

    Args:
        outcomes: Outcomes returned by allocate()

    Returns:
        Dictionary containing allocation metrics
    """
    assigned = [o for o in outcomes if o.is_assigned]

    return {
        "tasks_total": len(outcomes),
        "tasks_assigned": len(assigned),
        "tasks_unassigned": len(outcomes) - len(assigned),
        "workers_used": len({o.worker_id for o in assigned}),
        "last_release_time": (
            max(o.release_time for o in assigned) if assigned else None
        )
    }


def worker_timelines(
    tasks: Sequence[Task],
    outcomes: Sequence[AssignmentOutcome]
) -> Dict[int, List[Tuple[int, int, int]]]:
    """
    Group served intervals per worker.

    Args:
        tasks: Tasks passed to allocate()
        outcomes: Outcomes returned by allocate()

    Returns:
        Mapping of worker id to (task_index, start, release) tuples,
        ordered by start time
    """
    timelines: Dict[int, List[Tuple[int, int, int]]] = {}
    for outcome in outcomes:
        if not outcome.is_assigned:
            continue
        start = tasks[outcome.task_index - 1].arrival_time
        timelines.setdefault(outcome.worker_id, []).append(
            (outcome.task_index, start, outcome.release_time)
        )
    for intervals in timelines.values():
        intervals.sort(key=lambda interval: (interval[1], interval[2]))
    return timelines
