from datetime import datetime, timedelta, timezone
import random

from runclub.db import Base, SessionLocal, engine
from runclub.models.user import User
from runclub.schemas.run import RunSubmission
from runclub.schemas.user import Role, UserCreate
from runclub.services.runs import delete_user_runs, recalculate_progress, submit_run
from runclub.services.users import create_user


DEMO_USER = "demo-runner"


def get_or_create_demo_user(db) -> User:
    user = db.query(User).filter(User.user_name == DEMO_USER).first()
    if user is None:
        user = create_user(
            db, UserCreate(user_name=DEMO_USER, role=Role.runner, goal=200_000)
        )
    return user


def seed_demo_runs(db, user: User) -> None:
    """Submit a 12-week block of demo runs (easy, workout, long)."""
    now = datetime.now(timezone.utc)
    start_day = now - timedelta(weeks=11)

    count = 0
    for week in range(12):
        week_start = start_day + timedelta(weeks=week)

        # Tue easy, Thu workout, Sun long run
        for offset, dist_km, speed_kmh, location in [
            (1, random.uniform(5.0, 8.0), 9.5, "Park gate → Park gate"),
            (3, random.uniform(8.0, 12.0), 12.0, "Track → Track"),
            (6, random.uniform(16.0, 26.0), 10.0, "River path → Old bridge"),
        ]:
            day = week_start + timedelta(days=offset)
            if day > now:
                continue

            distance = round(dist_km * 1000)
            duration = round(dist_km / speed_kmh * 60, 1)
            submit_run(
                db,
                user.id,
                RunSubmission(
                    distance=distance,
                    duration=duration,
                    pace=speed_kmh,
                    date=day,
                    location=location,
                ),
            )
            count += 1

    print(f"Seeded {count} demo runs")


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = get_or_create_demo_user(db)
        delete_user_runs(db, user.id, user)
        seed_demo_runs(db, user)
        summary = recalculate_progress(db, user.id)
        print(f"Progress: {summary.progress:.0f} m of {summary.goal:.0f} m ({summary.percentage}%)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
