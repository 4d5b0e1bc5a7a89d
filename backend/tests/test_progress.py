import gc
import logging
import math
import random
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from runclub.core.constants import EARTH_RADIUS_M
from runclub.core.errors import UserNotFound
from runclub.db import Base
from runclub.models.user import User
from runclub.schemas.run import PathPoint, RunSubmission
from runclub.schemas.user import Role, UserCreate
from runclub.services.progress import (
    AggregationResult,
    ProgressAggregator,
    progress_summary,
    recompute_progress,
)
from runclub.services import runs as run_service
from runclub.services.gpx import GpxTrack
from runclub.services.runs import (
    import_gpx_run,
    delete_run,
    delete_user_runs,
    recalculate_progress,
    reset_runs_and_goal,
    submit_run,
)
from runclub.services.store import RunStore
from runclub.services.users import create_user


def new_user(db, name="runner", role=Role.runner, goal=None) -> User:
    return create_user(db, UserCreate(user_name=name, role=role, goal=goal))


def add_run(db, user_id, distance):
    # 10 km/h keeps any distance inside the plausible speed window
    duration = distance / 1000 / 10 * 60
    run, _ = submit_run(db, user_id, RunSubmission(distance=distance, duration=duration))
    return run


def test_new_user_starts_at_zero(db_session):
    user = new_user(db_session)
    assert user.progress == 0.0
    assert user.goal == 1.0


def test_recompute_sums_runs_and_tracks_deletes(db_session):
    user = new_user(db_session)
    add_run(db_session, user.id, 1000)
    two_k = add_run(db_session, user.id, 2000)
    add_run(db_session, user.id, 1500)

    assert recalculate_progress(db_session, user.id).progress == 4500

    delete_run(db_session, two_k.id, user)
    assert recalculate_progress(db_session, user.id).progress == 2500


def test_run_mutations_refresh_cached_progress(db_session):
    user = new_user(db_session)
    run = add_run(db_session, user.id, 3000)
    db_session.refresh(user)
    assert user.progress == 3000

    delete_run(db_session, run.id, user)
    db_session.refresh(user)
    assert user.progress == 0


def test_recompute_is_idempotent(db_session):
    user = new_user(db_session)
    add_run(db_session, user.id, 1234.5)
    add_run(db_session, user.id, 800)

    first = recalculate_progress(db_session, user.id)
    second = recalculate_progress(db_session, user.id)
    assert first == second
    assert first.progress == pytest.approx(2034.5)


def test_recompute_replaces_stale_value(db_session):
    user = new_user(db_session)
    add_run(db_session, user.id, 1000)
    user.progress = 99999
    db_session.commit()

    assert recalculate_progress(db_session, user.id).progress == 1000


def test_progress_matches_run_history_after_random_mutations(db_session):
    rng = random.Random(42)
    user = new_user(db_session)
    other = new_user(db_session, name="other")
    add_run(db_session, other.id, 7000)

    live = {}
    for _ in range(40):
        if live and rng.random() < 0.35:
            run_id = rng.choice(list(live))
            delete_run(db_session, run_id, user)
            live.pop(run_id)
        else:
            distance = rng.randint(10, 30000)
            live[add_run(db_session, user.id, distance).id] = distance

    assert recalculate_progress(db_session, user.id).progress == sum(live.values())
    assert recalculate_progress(db_session, other.id).progress == 7000


def test_missing_user_is_reported_not_raised(db_session):
    result = recompute_progress(RunStore(db_session), 424242)
    assert not result.ok
    assert isinstance(result.error, UserNotFound)
    with pytest.raises(UserNotFound):
        result.unwrap()


def test_recalculate_for_missing_user_raises(db_session):
    with pytest.raises(UserNotFound):
        recalculate_progress(db_session, 424242)


def test_submit_for_missing_user_raises(db_session):
    with pytest.raises(UserNotFound):
        submit_run(db_session, 424242, RunSubmission(distance=1000, duration=6))
    assert RunStore(db_session).list_runs() == []


def test_bulk_delete_for_vanished_user_is_best_effort(db_session, caplog):
    admin = new_user(db_session, name="admin", role=Role.admin)
    with caplog.at_level(logging.WARNING, logger="runclub.services.runs"):
        result = delete_user_runs(db_session, 424242, admin)
    assert result["deleted"] == 0
    assert any("Progress not updated" in r.getMessage() for r in caplog.records)


def test_reset_clears_runs_progress_and_goal(db_session):
    user = new_user(db_session, goal=50000)
    add_run(db_session, user.id, 5000)

    reset_runs_and_goal(db_session, user)
    db_session.refresh(user)

    assert user.progress == 0
    assert user.goal == 0
    assert RunStore(db_session).list_runs_by_user(user.id) == []


def test_aggregation_result_unwrap():
    assert AggregationResult(user_id=1, progress=10.0).unwrap() == 10.0


def test_lock_registry_is_per_user():
    agg = ProgressAggregator()
    assert agg._lock_for(1) is agg._lock_for(1)
    assert agg._lock_for(1) is not agg._lock_for(2)

    # Re-entrant so a recompute can run inside a held user lock
    with agg.user_lock(1):
        with agg.user_lock(1):
            pass


@pytest.mark.parametrize(
    "progress,goal,remaining,percentage",
    [
        (2500, 10000, 7500, 25),
        (12000, 10000, 0, 100),
        (0, 0, 0, 0),
        (500, 0, 0, 0),
        (1, 3, 2, 33),
    ],
)
def test_progress_summary(progress, goal, remaining, percentage):
    summary = progress_summary(progress, goal)
    assert summary.progress == progress
    assert summary.goal == goal
    assert summary.remaining == remaining
    assert summary.percentage == percentage


def test_idle_user_locks_are_released():
    agg = ProgressAggregator()
    with agg.user_lock(7):
        assert 7 in agg._locks
    gc.collect()
    assert 7 not in agg._locks


def test_concurrent_submissions_keep_progress_exact(tmp_path):
    # Each thread gets its own connection, like concurrent requests would
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'runs.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    try:
        user_id = new_user(setup).id
    finally:
        setup.close()

    distances = [1000 + 25 * i for i in range(12)]
    barrier = threading.Barrier(len(distances))
    errors = []

    def worker(distance):
        db = Session()
        try:
            barrier.wait()
            add_run(db, user_id, distance)
        except Exception as e:  # surfaced by the assertion below
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(d,)) for d in distances]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert errors == []
    check = Session()
    try:
        assert check.get(User, user_id).progress == sum(distances)
        assert len(RunStore(check).list_runs_by_user(user_id)) == len(distances)
    finally:
        check.close()
        engine.dispose()


def test_gpx_import_validates_unrounded_values(db_session, monkeypatch):
    # Rounded to 0.01 min this duration would fall under the 15 km/h bound
    distance = 1001.2
    duration = 4.00496
    step = math.degrees(distance / EARTH_RADIUS_M)
    track = GpxTrack(
        points=[PathPoint(latitude=0.0, longitude=0.0), PathPoint(latitude=0.0, longitude=step)],
        distance_m=distance,
        duration_min=duration,
        started_at=None,
    )
    monkeypatch.setattr(run_service, "parse_gpx_track", lambda data: track)

    user = new_user(db_session)
    run, validated = import_gpx_run(db_session, user.id, b"<gpx/>")

    assert run.source == "gpx"
    assert run.duration == duration
    assert run.distance == distance
    assert validated.path_check.within_tolerance
