import logging
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db import get_db
from app.models import User, Appointment
from app.schemas import AppointmentResponse, AppointmentStatus, AppointmentStatusUpdate
from app.services.auth_service import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

# status -> roles allowed to move a booked appointment there
TRANSITIONS = {
    "cancelled": {"client", "therapist"},
    "completed": {"therapist"},
    "no_show": {"therapist"},
}


def _own_column(user: User):
    return Appointment.therapist_id if user.role == "therapist" else Appointment.client_id


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    when: Literal["upcoming", "past", "all"] = "all",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = (
        select(Appointment)
        .where(_own_column(current_user) == current_user.id)
        .options(selectinload(Appointment.client), selectinload(Appointment.therapist))
        .order_by(Appointment.scheduled_at.asc(), Appointment.id.asc())
    )
    if status_filter is not None:
        q = q.where(Appointment.status == status_filter.value)

    now = datetime.now(timezone.utc)
    if when == "upcoming":
        q = q.where(Appointment.scheduled_at >= now)
    elif when == "past":
        q = q.where(Appointment.scheduled_at < now)

    return (await db.execute(q)).scalars().all()


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    req: AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    appointment = await db.get(Appointment, appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")

    if current_user.id not in (appointment.client_id, appointment.therapist_id):
        raise HTTPException(status_code=403, detail="Not authorized for this appointment")

    new_status = req.status.value
    if appointment.status != "booked" or new_status not in TRANSITIONS:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot change a {appointment.status} appointment to {new_status}",
        )
    acting_role = "therapist" if current_user.id == appointment.therapist_id else "client"
    if acting_role not in TRANSITIONS[new_status]:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Only the therapist can mark an appointment {new_status}",
        )

    appointment.status = new_status
    if req.meeting_link is not None:
        appointment.meeting_link = req.meeting_link
    await db.commit()
    logger.info("Appointment id=%s -> %s by user id=%s", appointment.id, new_status, current_user.id)

    q = (
        select(Appointment)
        .where(Appointment.id == appointment.id)
        .options(selectinload(Appointment.client), selectinload(Appointment.therapist))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalar_one()
