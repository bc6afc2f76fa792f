"""
Relational store adapter.

Workers and tasks live in two tables. A run loads the free workers and
the pending tasks, allocates them in memory and writes every outcome back.

Schema:
    workers(worker_id, name, status 'free'|'busy', free_time)
    tasks(task_id, arrival_time, duration, worker_id, status
          'pending'|'assigned'|'unassigned')
"""

import logging
import os
from typing import List, Optional, Tuple

from sqlalchemy import ForeignKey, String, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from .algorithm import allocate
from .types import Task

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///allocator.db"

WORKER_FREE = "free"
WORKER_BUSY = "busy"

TASK_PENDING = "pending"
TASK_ASSIGNED = "assigned"
TASK_UNASSIGNED = "unassigned"


class Base(DeclarativeBase):
    pass


class WorkerRow(Base):
    __tablename__ = "workers"

    worker_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(10), default=WORKER_FREE, nullable=False)
    free_time: Mapped[Optional[int]] = mapped_column(nullable=True)

    def __repr__(self):
        return (f"<WorkerRow(worker_id={self.worker_id}, name={self.name!r}, "
                f"status={self.status}, free_time={self.free_time})>")


class TaskRow(Base):
    __tablename__ = "tasks"

    task_id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    arrival_time: Mapped[int] = mapped_column(nullable=False)
    duration: Mapped[int] = mapped_column(nullable=False)
    worker_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("workers.worker_id"), nullable=True)
    status: Mapped[str] = mapped_column(String(12), default=TASK_PENDING, nullable=False)

    def __repr__(self):
        return (f"<TaskRow(task_id={self.task_id}, arrival_time={self.arrival_time}, "
                f"duration={self.duration}, worker_id={self.worker_id}, "
                f"status={self.status})>")


def database_url(url: Optional[str] = None) -> str:
    return url or os.getenv("ALLOCATOR_DATABASE_URL", DEFAULT_DATABASE_URL)


def make_engine(url: Optional[str] = None, create: bool = False) -> Engine:
    """
    Build an engine for ``url`` (or the configured default).

    Args:
        url: SQLAlchemy database URL
        create: Create missing tables
    """
    engine = create_engine(database_url(url))
    if create:
        Base.metadata.create_all(engine)
    return engine


def release_workers(session: Session, now: int) -> List[int]:
    """
    Mark free every busy worker whose free_time is at or before ``now``.

    Busy workers without a free_time are left alone.

    Returns:
        Store ids of the released workers
    """
    busy = session.scalars(
        select(WorkerRow)
        .where(WorkerRow.status == WORKER_BUSY)
        .where(WorkerRow.free_time.is_not(None))
        .where(WorkerRow.free_time <= now)
        .order_by(WorkerRow.worker_id)
    ).all()

    for worker in busy:
        worker.status = WORKER_FREE
        worker.free_time = None
        logger.info(f"Worker {worker.worker_id} released")
    session.flush()
    return [worker.worker_id for worker in busy]


def allocate_pending(session: Session) -> List[Tuple[int, Optional[int]]]:
    """
    Allocate every pending task to the free workers in the store.

    Busy workers whose free_time is at or before the first pending arrival
    are marked free first. Free workers are then numbered 1..M in ascending
    store id order and pending tasks are processed by (arrival_time,
    task_id). After the run a worker stays busy, with its release time,
    only if it is released after the last processed arrival; otherwise it
    is marked free.

    The session is committed on success.

    Returns:
        (task_id, store worker_id or None) per pending task, in
        processing order
    """
    task_rows = session.scalars(
        select(TaskRow)
        .where(TaskRow.status == TASK_PENDING)
        .order_by(TaskRow.arrival_time, TaskRow.task_id)
    ).all()

    if not task_rows:
        logger.info("No pending tasks")
        return []

    release_workers(session, task_rows[0].arrival_time)

    workers = session.scalars(
        select(WorkerRow)
        .where(WorkerRow.status == WORKER_FREE)
        .order_by(WorkerRow.worker_id)
    ).all()

    outcomes = allocate(
        [Task(row.arrival_time, row.duration) for row in task_rows],
        len(workers)
    )

    results = []
    last_release = {}
    for row, outcome in zip(task_rows, outcomes):
        if outcome.is_assigned:
            worker = workers[outcome.worker_id - 1]
            row.worker_id = worker.worker_id
            row.status = TASK_ASSIGNED
            last_release[worker.worker_id] = outcome.release_time
            results.append((row.task_id, worker.worker_id))
            logger.info(f"Task {row.task_id} -> Worker {worker.worker_id}")
        else:
            row.status = TASK_UNASSIGNED
            results.append((row.task_id, None))
            logger.info(f"Task {row.task_id} -> unassigned")

    horizon = task_rows[-1].arrival_time
    for worker in workers:
        release_time = last_release.get(worker.worker_id)
        if release_time is not None and release_time > horizon:
            worker.status = WORKER_BUSY
            worker.free_time = release_time
        else:
            worker.status = WORKER_FREE
            worker.free_time = None

    session.commit()
    return results
