from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from runclub.api.deps import get_current_user, require_staff
from runclub.core.errors import AuthorizationError, InvalidGpx
from runclub.core.time_utils import compute_speed_kmh, minutes_to_hhmmss
from runclub.db import get_db
from runclub.models.run import Run
from runclub.models.user import User
from runclub.schemas.run import RunRead, RunSubmission
from runclub.schemas.user import Role
from runclub.services import runs as run_service
from runclub.services.store import RunStore
import os

router = APIRouter(prefix="/runs", tags=["runs"])


def _to_read(run: Run, path_discrepancy: Optional[float] = None) -> RunRead:
    return RunRead(
        id=run.id,
        user_id=run.user_id,
        distance=run.distance,
        duration=run.duration,
        duration_hhmmss=minutes_to_hhmmss(run.duration),
        pace=run.pace,
        avg_speed_kmh=round(compute_speed_kmh(run.distance, run.duration), 2),
        date=run.date,
        location=run.location,
        source=run.source,
        created_at=run.created_at,
        path_discrepancy=path_discrepancy,
    )


@router.post("/", response_model=RunRead, status_code=201)
def create_run(
    payload: RunSubmission,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    run, validated = run_service.submit_run(db, user.id, payload)
    return _to_read(run, validated.path_discrepancy)


@router.post("/import", response_model=RunRead, status_code=201)
def import_run(
    file: UploadFile = File(...),
    location: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    filename = file.filename or "import.gpx"
    ext = os.path.splitext(filename)[1].lower()
    if ext != ".gpx":
        raise InvalidGpx("Only .gpx files are supported", field="file")

    data = file.file.read()
    run, validated = run_service.import_gpx_run(db, user.id, data, location=location)
    return _to_read(run, validated.path_discrepancy)


@router.get("/mine", response_model=list[RunRead])
def list_my_runs(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Current user's runs, most recent first."""
    return [_to_read(r) for r in RunStore(db).list_runs_by_user(user.id)]


@router.get("/all", response_model=list[RunRead])
def list_all_runs(
    _: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return [_to_read(r) for r in RunStore(db).list_runs()]


@router.get("/user/{user_id}", response_model=list[RunRead])
def list_user_runs(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if user_id != user.id and user.role == Role.runner.value:
        raise AuthorizationError("Not allowed to view another user's runs")
    return [_to_read(r) for r in RunStore(db).list_runs_by_user(user_id)]


@router.delete("/user/{user_id}")
def delete_user_runs(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return run_service.delete_user_runs(db, user_id, user)


@router.delete("/{run_id}")
def delete_run(
    run_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return run_service.delete_run(db, run_id, user)
