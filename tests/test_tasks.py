"""Tests for task submitters."""

from __future__ import annotations

import threading

from brainclient import InlineTaskSubmitter, TaskSubmitter, ThreadPoolTaskSubmitter


class TestSubmitters:
    """Tests for the bundled TaskSubmitter implementations."""

    def test_protocol(self) -> None:
        assert isinstance(InlineTaskSubmitter(), TaskSubmitter)
        submitter = ThreadPoolTaskSubmitter()
        assert isinstance(submitter, TaskSubmitter)
        submitter.shutdown()

    def test_inline_runs_immediately_and_logs_errors(self, caplog) -> None:
        ran = []
        submitter = InlineTaskSubmitter()
        submitter.submit(lambda: ran.append(1))
        submitter.submit(lambda: 1 / 0)
        assert ran == [1]
        assert "background task failed" in caplog.text

    def test_thread_pool_runs_off_caller_thread(self) -> None:
        done = threading.Event()
        threads = []

        def task() -> None:
            threads.append(threading.current_thread())
            done.set()

        submitter = ThreadPoolTaskSubmitter()
        submitter.submit(task)
        assert done.wait(2)
        submitter.shutdown()
        assert threads[0] is not threading.current_thread()
        assert threads[0].daemon is False

    def test_thread_pool_logs_failures(self, caplog) -> None:
        submitter = ThreadPoolTaskSubmitter()
        submitter.submit(lambda: 1 / 0)
        submitter.shutdown(wait=True)
        assert "division by zero" in caplog.text
