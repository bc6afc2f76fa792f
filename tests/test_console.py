"""
Tests for the interactive console front end.
"""

import io

import pytest

from allocator.console import format_outcome, read_tasks, run_console
from allocator.types import AssignmentOutcome, InvalidInputError, Task


class TestReadTasks:

    def test_reads_counts_and_pairs(self):
        out = io.StringIO()

        worker_count, tasks = read_tasks(io.StringIO("3\n2\n0 5\n1 3\n2 2\n"), out)

        assert worker_count == 2
        assert tasks == [Task(0, 5), Task(1, 3), Task(2, 2)]
        assert "Enter number of tasks (N): " in out.getvalue()
        assert "Enter arrival time and duration for task 3: " in out.getvalue()

    def test_tokens_may_share_a_line(self):
        worker_count, tasks = read_tasks(io.StringIO("2 1 0 2 2 3"), io.StringIO())

        assert worker_count == 1
        assert tasks == [Task(0, 2), Task(2, 3)]

    def test_truncated_input(self):
        with pytest.raises(InvalidInputError):
            read_tasks(io.StringIO("2\n1\n0 2\n"), io.StringIO())

    def test_non_integer(self):
        with pytest.raises(InvalidInputError):
            read_tasks(io.StringIO("1\nmany\n"), io.StringIO())


class TestFormatOutcome:

    def test_assigned(self):
        assert format_outcome(AssignmentOutcome.assigned(1, 2, 7)) == "Task 1 -> Worker 2"

    def test_unassigned(self):
        assert format_outcome(AssignmentOutcome.unassigned(3)) == "Task 3 -> unassigned"


class TestRunConsole:

    def test_prints_one_line_per_task(self):
        out = io.StringIO()

        code = run_console(io.StringIO("3\n2\n0 5\n1 3\n2 2\n"), out)

        assert code == 0
        assert out.getvalue().splitlines()[-3:] == [
            "Task 1 -> Worker 1",
            "Task 2 -> Worker 2",
            "Task 3 -> unassigned",
        ]

    def test_invalid_input_exit_code(self):
        out = io.StringIO()

        code = run_console(io.StringIO("1\n-2\n0 1\n"), out)

        assert code == 1
        assert "Error:" in out.getvalue()
