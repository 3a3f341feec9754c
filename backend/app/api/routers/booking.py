import logging
from datetime import date as date_type, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import DURATIONS
from app.db import get_db
from app.models import User, Appointment
from app.schemas import SlotListResponse, BookingRequest, BookingResponse, AppointmentResponse
from app.services.auth_service import get_current_user
from app.services import booking_service
from app.api.routers.therapist import load_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking", tags=["booking"])


async def _booked_starts(db: AsyncSession, therapist_user_id: int, day: date_type):
    first = booking_service.slot_datetime(day, booking_service.TIME_SLOTS[0])
    last = booking_service.slot_datetime(day, booking_service.TIME_SLOTS[-1])
    q = select(Appointment.scheduled_at).where(
        and_(
            Appointment.therapist_id == therapist_user_id,
            Appointment.status == "booked",
            Appointment.scheduled_at >= first,
            Appointment.scheduled_at <= last,
        )
    )
    return (await db.execute(q)).scalars().all()


@router.get("/{profile_id}/slots", response_model=SlotListResponse)
async def list_slots(
    profile_id: int,
    date: date_type = Query(..., description="YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = await load_profile(db, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Therapist not found")

    taken = await _booked_starts(db, profile.user_id, date)
    return SlotListResponse(
        therapist_profile_id=profile.id,
        date=date,
        slots=booking_service.build_slots(date, taken),
        durations=DURATIONS,
        hourly_rate=profile.hourly_rate,
    )


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    req: BookingRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # 1. Form checks
    if not req.time:
        raise HTTPException(status_code=400, detail="Please select a time slot")
    if booking_service.parse_slot(req.time) is None:
        raise HTTPException(status_code=400, detail=f"'{req.time}' is not an available time slot")
    if req.duration not in booking_service.allowed_durations():
        raise HTTPException(status_code=400, detail="Please choose a 30, 60 or 90 minute session")

    profile = await load_profile(db, req.therapist_profile_id)
    if not profile or profile.user is None:
        raise HTTPException(status_code=404, detail="Therapist not found")
    if profile.user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot book an appointment with yourself")

    # 2. Slot must still be open
    scheduled_at = booking_service.slot_datetime(req.date, req.time)
    if scheduled_at <= datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Please choose a time in the future")
    slots = booking_service.build_slots(req.date, await _booked_starts(db, profile.user_id, req.date))
    if not next(s["available"] for s in slots if s["time"] == req.time):
        raise HTTPException(status_code=409, detail="This time slot is no longer available")

    # 3. Single insert
    appointment = Appointment(
        client_id=current_user.id,
        therapist_id=profile.user_id,
        scheduled_at=scheduled_at,
        duration=req.duration,
        status="booked",
        notes=(req.notes or "").strip() or None,
        meeting_link=None,
    )
    db.add(appointment)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.error("Booking insert failed client=%s therapist=%s: %s", current_user.id, profile.user_id, e)
        raise HTTPException(status_code=409, detail="Booking failed. Please try again.")

    q = (
        select(Appointment)
        .where(Appointment.id == appointment.id)
        .options(selectinload(Appointment.client), selectinload(Appointment.therapist))
        .execution_options(populate_existing=True)
    )
    appointment = (await db.execute(q)).scalar_one()
    logger.info(
        "Appointment booked id=%s client=%s therapist=%s at=%s duration=%s",
        appointment.id, current_user.id, profile.user_id, scheduled_at.isoformat(), req.duration,
    )

    return {
        "appointment": AppointmentResponse.model_validate(appointment),
        "therapist_name": profile.user.name,
        "estimated_price": booking_service.estimate_price(profile.hourly_rate, req.duration),
    }
