"""
Interactive console front end.

Prompts for the number of tasks, the number of workers and one
(arrival time, duration) pair per task, then prints one line per task.
"""

import logging
import sys
from typing import Iterator, List, TextIO, Tuple

from .algorithm import allocate
from .types import AssignmentOutcome, InvalidInputError, Task

logger = logging.getLogger(__name__)


def _tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def _next_int(tokens: Iterator[str], what: str) -> int:
    try:
        token = next(tokens)
    except StopIteration:
        raise InvalidInputError(f"Unexpected end of input reading {what}")
    try:
        return int(token)
    except ValueError:
        raise InvalidInputError(f"Expected an integer for {what}, got {token!r}")


def read_tasks(input_stream: TextIO,
               output_stream: TextIO) -> Tuple[int, List[Task]]:
    """
    Prompt for and read a worker count and a list of tasks.

    Returns:
        (worker_count, tasks) in the order they were entered

    Raises:
        InvalidInputError: input ended early, was not an integer,
            or a count or duration is negative
    """
    tokens = _tokens(input_stream)

    output_stream.write("Enter number of tasks (N): ")
    output_stream.flush()
    task_count = _next_int(tokens, "number of tasks")
    if task_count < 0:
        raise InvalidInputError(f"Number of tasks cannot be negative, got {task_count}")

    output_stream.write("Enter number of workers (M): ")
    output_stream.flush()
    worker_count = _next_int(tokens, "number of workers")

    tasks = []
    for index in range(1, task_count + 1):
        output_stream.write(
            f"Enter arrival time and duration for task {index}: ")
        output_stream.flush()
        arrival_time = _next_int(tokens, f"arrival time of task {index}")
        duration = _next_int(tokens, f"duration of task {index}")
        tasks.append(Task(arrival_time, duration))

    output_stream.write("\n")
    return worker_count, tasks


def format_outcome(outcome: AssignmentOutcome) -> str:
    if outcome.is_assigned:
        return f"Task {outcome.task_index} -> Worker {outcome.worker_id}"
    return f"Task {outcome.task_index} -> unassigned"


def run_console(input_stream: TextIO = sys.stdin,
                output_stream: TextIO = sys.stdout) -> int:
    """
    Read tasks interactively, allocate them and print the outcomes.

    Returns:
        Process exit code
    """
    try:
        worker_count, tasks = read_tasks(input_stream, output_stream)
        outcomes = allocate(tasks, worker_count)
    except InvalidInputError as e:
        logger.error(f"Invalid input: {e}")
        output_stream.write(f"\nError: {e}\n")
        return 1

    for outcome in outcomes:
        output_stream.write(format_outcome(outcome) + "\n")
    return 0
