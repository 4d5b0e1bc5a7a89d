"""
Progress aggregation.

A user's `progress` is a cache of the sum of their run distances (meters).
It is always recomputed from the run table and replaced, never incremented,
so any later recompute repairs a stale value.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional
import logging
import threading
import weakref

from runclub.core.errors import UserNotFound
from runclub.schemas.user import ProgressRead
from runclub.services.store import RunStore

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    """Either the recomputed progress or the error that prevented write-back."""

    user_id: int
    progress: Optional[float] = None
    error: Optional[UserNotFound] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> float:
        if self.error is not None:
            raise self.error
        return self.progress


class ProgressAggregator:
    """Recomputes progress with at most one writer per user at a time."""

    def __init__(self):
        # A lock lives only while some caller holds it
        self._locks: "weakref.WeakValueDictionary[int, threading.RLock]" = (
            weakref.WeakValueDictionary()
        )
        self._registry_lock = threading.Lock()

    def _lock_for(self, user_id: int) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.RLock()
            return lock

    @contextmanager
    def user_lock(self, user_id: int):
        """Hold the per-user lock, e.g. across a mutation and its commit."""
        lock = self._lock_for(user_id)
        with lock:
            yield

    def recompute(self, store: RunStore, user_id: int) -> AggregationResult:
        with self.user_lock(user_id):
            total = store.sum_distance_by_user(user_id)
            try:
                store.set_user_progress(user_id, total)
            except UserNotFound as e:
                return AggregationResult(user_id=user_id, error=e)
        logger.debug("Progress for user %s recomputed: %.1f m", user_id, total)
        return AggregationResult(user_id=user_id, progress=total)


aggregator = ProgressAggregator()


def recompute_progress(store: RunStore, user_id: int) -> AggregationResult:
    return aggregator.recompute(store, user_id)


def progress_summary(progress: float, goal: float) -> ProgressRead:
    """Progress against goal.

    Example: progress=2500, goal=10000 -> remaining=7500, percentage=25
    """
    progress = float(progress or 0.0)
    goal = float(goal or 0.0)
    if goal > 0:
        percentage = min(100, round(progress / goal * 100))
    else:
        percentage = 0
    return ProgressRead(
        progress=progress,
        goal=goal,
        remaining=max(goal - progress, 0.0),
        percentage=percentage,
    )
