"""
Persistence for runs and user progress.

Thin wrapper over a SQLAlchemy session. Nothing here commits: callers own
the transaction so a run mutation and the progress write-back land together.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from runclub.core.errors import UserNotFound
from runclub.models.run import Run
from runclub.models.user import User


class RunStore:
    def __init__(self, db: Session):
        self.db = db

    # --------- Runs --------- #

    def insert_run(self, record, source: str = "manual") -> int:
        run = Run(
            user_id=record.user_id,
            distance=record.distance,
            duration=record.duration,
            pace=record.pace,
            date=record.date,
            location=record.location,
            source=source,
        )
        self.db.add(run)
        self.db.flush()  # assigns the id and makes the row visible to sums
        return run.id

    def get_run(self, run_id: int) -> Optional[Run]:
        return self.db.query(Run).filter(Run.id == run_id).first()

    def delete_run(self, run_id: int) -> bool:
        run = self.get_run(run_id)
        if run is None:
            return False
        self.db.delete(run)
        self.db.flush()
        return True

    def delete_runs_by_user(self, user_id: int) -> int:
        return self.db.query(Run).filter(Run.user_id == user_id).delete()

    def list_runs_by_user(self, user_id: int) -> list[Run]:
        return (
            self.db.query(Run)
            .filter(Run.user_id == user_id)
            .order_by(Run.date.desc(), Run.id.desc())
            .all()
        )

    def list_runs(self) -> list[Run]:
        return self.db.query(Run).order_by(Run.date.desc(), Run.id.desc()).all()

    def sum_distance_by_user(self, user_id: int) -> float:
        total = (
            self.db.query(func.sum(Run.distance))
            .filter(Run.user_id == user_id)
            .scalar()
        )
        return float(total or 0.0)

    # --------- Users --------- #

    def get_user(self, user_id: int, for_update: bool = False) -> Optional[User]:
        query = self.db.query(User).filter(User.id == user_id)
        if for_update:
            # Row lock on Postgres; SQLite ignores FOR UPDATE
            query = query.with_for_update()
        return query.first()

    def set_user_progress(self, user_id: int, value: float) -> None:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.progress: value})
        )
        if not updated:
            raise UserNotFound(user_id)
