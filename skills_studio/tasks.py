"""
Tasks - how background jobs are run and reported back

A runner executes `fn` somewhere and later calls exactly one of `on_success`
(with the result) or `on_error` (with the exception) on the thread that owns
the session. The Qt runner lives in workers.py.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Job       = Callable[[], Any]
OnSuccess = Callable[[Any], None]
OnError   = Callable[[Exception], None]


class TaskRunner:

    def submit(self, fn: Job, on_success: OnSuccess, on_error: OnError) -> None:
        raise NotImplementedError


class InlineRunner(TaskRunner):
    """Runs each job immediately on the calling thread."""

    def submit(self, fn: Job, on_success: OnSuccess, on_error: OnError) -> None:
        try:
            result = fn()
        except Exception as e:
            logger.debug("Inline job failed: %s", e)
            on_error(e)
            return
        on_success(result)
