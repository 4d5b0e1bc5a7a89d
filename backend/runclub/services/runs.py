"""
Run lifecycle operations.

Each mutation validates and authorizes first, then performs the store
change and the progress recompute inside one transaction while holding the
owner's aggregation lock.
"""
from contextlib import contextmanager
from typing import Optional, Tuple
import logging

from sqlalchemy.orm import Session

from runclub.core.errors import AuthorizationError, NotFoundError, UserNotFound
from runclub.models.run import Run
from runclub.models.user import User
from runclub.schemas.run import RunSubmission
from runclub.schemas.user import ProgressRead, Role
from runclub.services.gpx import parse_gpx_track
from runclub.services.progress import aggregator, progress_summary, recompute_progress
from runclub.services.run_validator import ValidatedRun, validate_run
from runclub.services.store import RunStore

logger = logging.getLogger(__name__)


@contextmanager
def user_transaction(db: Session, user_id: int):
    """Serialize writes for one user and commit them as a unit."""
    with aggregator.user_lock(user_id):
        try:
            yield RunStore(db)
            db.commit()
        except Exception:
            db.rollback()
            raise


def refresh_progress(store: RunStore, user_id: int) -> Optional[float]:
    # The primary mutation stands even if the owner vanished meanwhile
    result = recompute_progress(store, user_id)
    if not result.ok:
        logger.warning("Progress not updated for user %s: %s", user_id, result.error)
        return None
    return result.progress


def _is_admin(user: User) -> bool:
    return user.role == Role.admin.value


def submit_run(
    db: Session,
    user_id: int,
    submission: RunSubmission,
    source: str = "manual",
) -> Tuple[Run, ValidatedRun]:
    validated = validate_run(user_id, submission)

    with user_transaction(db, user_id) as store:
        if store.get_user(user_id, for_update=True) is None:
            raise UserNotFound(user_id)
        run_id = store.insert_run(validated, source=source)
        refresh_progress(store, user_id)

    logger.info(
        "Run %s created for user %s: %.0f m in %.1f min",
        run_id, user_id, validated.distance, validated.duration,
    )
    return store.get_run(run_id), validated


def import_gpx_run(
    db: Session,
    user_id: int,
    data: bytes,
    location: Optional[str] = None,
) -> Tuple[Run, ValidatedRun]:
    track = parse_gpx_track(data)
    submission = RunSubmission(
        distance=track.distance_m,
        duration=track.duration_min,
        date=track.started_at,
        location=location,
        path=track.points,
    )
    return submit_run(db, user_id, submission, source="gpx")


def delete_run(db: Session, run_id: int, requesting_user: User) -> dict:
    store = RunStore(db)
    run = store.get_run(run_id)
    if run is None:
        raise NotFoundError("Run", run_id)
    if run.user_id != requesting_user.id and not _is_admin(requesting_user):
        raise AuthorizationError("Not allowed to delete another user's run")

    owner_id = run.user_id
    with user_transaction(db, owner_id) as store:
        if not store.delete_run(run_id):
            raise NotFoundError("Run", run_id)
        refresh_progress(store, owner_id)

    logger.info("Run %s deleted by user %s", run_id, requesting_user.id)
    return {"message": "Run removed"}


def delete_user_runs(db: Session, user_id: int, requesting_user: User) -> dict:
    if user_id != requesting_user.id and not _is_admin(requesting_user):
        raise AuthorizationError("Not allowed to delete another user's runs")

    with user_transaction(db, user_id) as store:
        deleted = store.delete_runs_by_user(user_id)
        refresh_progress(store, user_id)

    logger.info("Deleted %d runs for user %s", deleted, user_id)
    return {"message": "All runs deleted for this user", "deleted": deleted}


def reset_runs_and_goal(db: Session, user: User) -> dict:
    with user_transaction(db, user.id) as store:
        store.delete_runs_by_user(user.id)
        refresh_progress(store, user.id)
        user.goal = 0.0

    logger.info("Runs and goal reset for user %s", user.id)
    return {"message": "Runs and goal reset successfully"}


def recalculate_progress(db: Session, user_id: int) -> ProgressRead:
    with user_transaction(db, user_id) as store:
        progress = recompute_progress(store, user_id).unwrap()
        goal = store.get_user(user_id).goal
    return progress_summary(progress, goal)
