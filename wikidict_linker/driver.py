"""
Run a per-sentence task over a document with bounded parallelism.

Each task runs in two steps: it computes everything it wants to write and
returns a commit callable, and the driver calls that callable only once the
computation has finished within its time budget. A sentence that raises or
runs out of time is reported as failed and none of its writes are applied.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence, TypeVar

from wikidict_linker.types import SentenceResult, SentenceState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SentenceTimeoutError(TimeoutError):
    """A sentence exceeded its processing budget."""


class Deadline:
    """Time budget for one sentence. ``max_time`` of None or <= 0 means no limit."""

    def __init__(self, max_time: Optional[float] = None):
        self.max_time = max_time if max_time and max_time > 0 else None
        self.started = time.monotonic()

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started

    @property
    def expired(self) -> bool:
        return self.max_time is not None and self.elapsed > self.max_time

    def check(self) -> None:
        """Raise SentenceTimeoutError once the budget is spent."""
        if self.expired:
            raise SentenceTimeoutError(
                f"sentence took {self.elapsed:.3f}s, budget is {self.max_time}s"
            )


Commit = Callable[[], None]
SentenceTask = Callable[[T, Deadline], Commit]


class SentenceDriver:
    """
    Applies a task to independent units of work (sentences).

    With ``threads == 1`` units are processed one after another in the
    calling thread. Otherwise a pool of ``threads`` workers picks up one
    sentence at a time; completion order between sentences is not defined,
    but results are always returned in input order.
    """

    def __init__(self, threads: int = 1, max_time: Optional[float] = None):
        if threads < 1:
            raise ValueError(f"threads must be >= 1, got {threads}")
        self.threads = threads
        self.max_time = max_time

    def run(
        self,
        units: Sequence[T],
        task: SentenceTask,
        describe: Callable[[T], str] = str,
    ) -> List[SentenceResult]:
        results = [SentenceResult(index=i) for i in range(len(units))]
        if not units:
            return results

        if self.threads == 1 or len(units) == 1:
            for result, unit in zip(results, units):
                self._run_one(result, unit, task, describe)
            return results

        with ThreadPoolExecutor(max_workers=min(self.threads, len(units))) as executor:
            futures = [
                executor.submit(self._run_one, result, unit, task, describe)
                for result, unit in zip(results, units)
            ]
            for future in as_completed(futures):
                # _run_one never raises; this only surfaces interpreter-level faults
                future.result()
        return results

    def _run_one(
        self,
        result: SentenceResult,
        unit: T,
        task: SentenceTask,
        describe: Callable[[T], str],
    ) -> None:
        result.state = SentenceState.RUNNING
        deadline = Deadline(self.max_time)
        try:
            commit = task(unit, deadline)
            deadline.check()
            commit()
        except Exception as e:
            result.state = SentenceState.FAILED
            result.error = e
            logger.warning(
                f"Sentence {result.index} failed ({type(e).__name__}: {e}): {describe(unit)!r}",
                exc_info=not isinstance(e, SentenceTimeoutError),
            )
        else:
            result.state = SentenceState.COMPLETED
        finally:
            result.elapsed = deadline.elapsed
