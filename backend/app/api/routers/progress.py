import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User, ProgressLog, Appointment
from app.schemas import ProgressLogCreate, ProgressLogResponse, TherapistNotesUpdate
from app.services.auth_service import get_current_user, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


async def check_therapist_client_access(therapist_id: int, client_id: int, db: AsyncSession):
    """A therapist may see a client's logs once they share at least one appointment."""
    q = select(func.count(Appointment.id)).where(
        Appointment.therapist_id == therapist_id,
        Appointment.client_id == client_id,
    )
    if not (await db.execute(q)).scalar():
        raise HTTPException(status_code=403, detail="You have no appointments with this client.")


@router.post("", response_model=ProgressLogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(
    log_in: ProgressLogCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role("client")),
):
    log = ProgressLog(
        client_id=current_user.id,
        date=log_in.date,
        exercise_notes=log_in.exercise_notes.strip(),
        pain_level=log_in.pain_level,
        mood_level=log_in.mood_level,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)
    logger.info("Progress log id=%s created for client id=%s", log.id, current_user.id)
    return log


@router.get("", response_model=List[ProgressLogResponse])
async def list_logs(
    client_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if current_user.role == "therapist":
        if client_id is None:
            raise HTTPException(status_code=400, detail="client_id is required.")
        await check_therapist_client_access(current_user.id, client_id, db)
        owner_id = client_id
    else:
        if client_id is not None and client_id != current_user.id:
            raise HTTPException(status_code=403, detail="Not authorized for this client.")
        owner_id = current_user.id

    q = (
        select(ProgressLog)
        .where(ProgressLog.client_id == owner_id)
        .order_by(desc(ProgressLog.date), desc(ProgressLog.id))
    )
    return (await db.execute(q)).scalars().all()


@router.patch("/{log_id}/therapist-notes", response_model=ProgressLogResponse)
async def add_therapist_notes(
    log_id: int,
    notes_in: TherapistNotesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role("therapist")),
):
    log = await db.get(ProgressLog, log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Progress log not found.")
    await check_therapist_client_access(current_user.id, log.client_id, db)

    log.therapist_notes = notes_in.therapist_notes.strip() or None
    await db.commit()
    await db.refresh(log)
    return log
