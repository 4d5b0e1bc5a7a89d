from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from runclub.api.deps import get_current_user
from runclub.db import get_db
from runclub.models.user import User
from runclub.schemas.user import GoalUpdate, ProgressRead, UserCreate, UserRead
from runclub.services import runs as run_service
from runclub.services import users as user_service
from runclub.services.progress import progress_summary


router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return user_service.create_user(db, payload)


@router.get("/me", response_model=UserRead)
def read_me(user: User = Depends(get_current_user)):
    return user


@router.get("/me/progress", response_model=ProgressRead)
def read_my_progress(user: User = Depends(get_current_user)):
    """Cached progress; use PUT /users/progress to rebuild it from runs."""
    return progress_summary(user.progress, user.goal)


@router.put("/progress", response_model=ProgressRead)
def recalculate_my_progress(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return run_service.recalculate_progress(db, user.id)


@router.put("/goal", response_model=ProgressRead)
def update_my_goal(
    payload: GoalUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.set_goal(db, user, payload.goal)


@router.post("/reset")
def reset_my_runs_and_goal(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return run_service.reset_runs_and_goal(db, user)
