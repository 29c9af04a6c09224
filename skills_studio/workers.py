"""
Workers - QThread task runner; results are delivered back on the GUI thread
"""

import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from skills_studio.tasks import Job, OnError, OnSuccess, TaskRunner

logger = logging.getLogger(__name__)


class TaskWorker(QThread):
    finished = pyqtSignal(object)
    error    = pyqtSignal(object)

    def __init__(self, fn: Job, on_success: OnSuccess, on_error: OnError):
        super().__init__()
        self._fn = fn
        self.on_success = on_success
        self.on_error   = on_error

    def run(self):
        try:
            self.finished.emit(self._fn())
        except Exception as e:
            self.error.emit(e)


class QtTaskRunner(QObject, TaskRunner):
    """Runs jobs off the GUI thread. Create it on the GUI thread."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._workers: set[TaskWorker] = set()

    def submit(self, fn: Job, on_success: OnSuccess, on_error: OnError) -> None:
        worker = TaskWorker(fn, on_success, on_error)
        worker.finished.connect(self._on_finished)
        worker.error.connect(self._on_error)
        self._workers.add(worker)
        worker.start()

    @property
    def pending(self) -> int:
        return len(self._workers)

    def _take(self) -> TaskWorker | None:
        worker = self.sender()
        if worker not in self._workers:
            return None
        self._workers.discard(worker)
        worker.wait()
        worker.deleteLater()
        return worker

    def _on_finished(self, result):
        worker = self._take()
        if worker is not None:
            worker.on_success(result)

    def _on_error(self, exc):
        worker = self._take()
        if worker is None:
            return
        logger.debug("Background job failed: %s", exc)
        worker.on_error(exc)
