"""
Worker Allocator Package

A deterministic allocation engine that hands time-stamped tasks to a
fixed pool of workers, earliest released worker first.
"""

__version__ = '0.1.0'

from .types import (
    Task,
    AssignmentOutcome,
    AllocationRequest,
    AllocationResponse,
    AllocationLimits,
    InvalidInputError
)

from .pools import IdlePool, BusySet

from .algorithm import (
    allocate,
    sort_tasks,
    release_sweep,
    assign_next,
    calculate_allocation_metrics,
    worker_timelines
)

from .server import create_app, run_server

__all__ = [
    'Task',
    'AssignmentOutcome',
    'AllocationRequest',
    'AllocationResponse',
    'AllocationLimits',
    'InvalidInputError',
    'IdlePool',
    'BusySet',
    'allocate',
    'sort_tasks',
    'release_sweep',
    'assign_next',
    'calculate_allocation_metrics',
    'worker_timelines',
    'create_app',
    'run_server',
]
