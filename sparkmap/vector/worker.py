"""
Background projection worker.

A single runner thread executes projection requests and hands each outcome to
a callback. Requests carry a generation number and only the most recent one is
kept while the runner is busy, so a burst of submissions costs at most one
extra projection. Only the response to the latest request is delivered, so a
slow, superseded run can never overwrite a newer layout. Closing the worker
drops any response still in flight. A run that has already started cannot be
interrupted; it finishes and its result is discarded.
"""

import threading
from typing import Callable, Optional, Sequence

from ..core.schema import ProjectionOutcome, ProjectionStatus
from ..util.logging import logger
from .projection import ProjectionEngine


class ProjectionWorker:
    """Runs projections off the caller's thread; the latest request wins."""

    def __init__(self, engine: Optional[ProjectionEngine] = None):
        self.engine = engine or ProjectionEngine()
        self._cond = threading.Condition(threading.RLock())
        self._generation = 0
        self._closed = False
        self._pending = None  # (generation, vectors, callback)
        self._running = False
        self._thread = None

    @property
    def generation(self) -> int:
        with self._cond:
            return self._generation

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def submit(self, vectors: Sequence[Sequence[float]],
               callback: Callable[[int, ProjectionOutcome], None]) -> int:
        """
        Queue a projection of ``vectors``, replacing any request not yet started.

        ``callback(generation, outcome)`` is invoked from the runner thread only
        if no newer request was submitted and the worker is still open.

        Returns:
            The generation number of this request.
        """
        with self._cond:
            if self._closed:
                raise RuntimeError("ProjectionWorker is closed")
            self._generation += 1
            generation = self._generation

            if self._pending is not None:
                logger.log_operation("projection.request", "dropped", {
                    "generation": self._pending[0],
                    "superseded_by": generation
                })
            self._pending = (generation, list(vectors), callback)

            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name="projection-runner", daemon=True)
                self._thread.start()
            self._cond.notify_all()

        return generation

    def _run(self):
        while True:
            with self._cond:
                while self._pending is None and not self._closed:
                    self._cond.wait()
                if self._closed:
                    self._cond.notify_all()
                    return
                generation, vectors, callback = self._pending
                self._pending = None
                self._running = True

            try:
                outcome = self.engine.project(vectors)
            except Exception as e:
                outcome = ProjectionOutcome(status=ProjectionStatus.FAILED, error=str(e))

            # Compare-and-deliver under the lock so close() cannot interleave
            with self._cond:
                try:
                    if self._closed or generation != self._generation:
                        logger.log_operation("projection.response", "stale", {
                            "generation": generation,
                            "latest": self._generation,
                            "closed": self._closed
                        })
                    else:
                        callback(generation, outcome)
                except Exception as e:
                    # The runner outlives a broken callback
                    logger.log_operation("projection.callback", "failed", {
                        "generation": generation,
                        "error": str(e)
                    })
                finally:
                    self._running = False
                    self._cond.notify_all()

    def close(self):
        """Tear down: invalidate in-flight requests and refuse new ones."""
        with self._cond:
            self._closed = True
            self._generation += 1
            self._pending = None
            self._cond.notify_all()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until no request is queued or running. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._pending is None and not self._running, timeout)
