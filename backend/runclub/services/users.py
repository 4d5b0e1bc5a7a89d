import logging

from sqlalchemy.orm import Session

from runclub.core.constants import DEFAULT_GOAL_M
from runclub.models.user import User
from runclub.schemas.user import ProgressRead, UserCreate
from runclub.services.progress import progress_summary
from runclub.services.runs import refresh_progress, user_transaction

logger = logging.getLogger(__name__)


def create_user(db: Session, payload: UserCreate) -> User:
    user = User(
        user_name=payload.user_name,
        email=payload.email,
        role=payload.role.value,
        goal=payload.goal if payload.goal is not None else DEFAULT_GOAL_M,
        progress=0.0,
    )
    db.add(user)
    db.flush()

    # Start from whatever runs already reference this id (normally none)
    with user_transaction(db, user.id) as store:
        refresh_progress(store, user.id)

    db.refresh(user)
    logger.info("User %s created with role %s", user.id, user.role)
    return user


def set_goal(db: Session, user: User, goal: float) -> ProgressRead:
    user.goal = goal
    db.commit()
    db.refresh(user)
    return progress_summary(user.progress, user.goal)
