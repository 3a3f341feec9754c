from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models import User, Appointment, Message, ProgressLog
from app.schemas import DashboardStats
from app.services.auth_service import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardStats)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    is_therapist = current_user.role == "therapist"
    own_column = Appointment.therapist_id if is_therapist else Appointment.client_id

    upcoming = (await db.execute(
        select(func.count(Appointment.id)).where(
            own_column == current_user.id,
            Appointment.status == "booked",
            Appointment.scheduled_at >= datetime.now(timezone.utc),
        )
    )).scalar() or 0

    unread = (await db.execute(
        select(func.count(Message.id)).where(
            Message.receiver_id == current_user.id,
            Message.read.is_(False),
        )
    )).scalar() or 0

    stats = DashboardStats(upcoming_appointments=upcoming, unread_messages=unread)

    if is_therapist:
        stats.total_clients = (await db.execute(
            select(func.count(distinct(Appointment.client_id))).where(Appointment.therapist_id == current_user.id)
        )).scalar() or 0
    else:
        stats.progress_entries = (await db.execute(
            select(func.count(ProgressLog.id)).where(ProgressLog.client_id == current_user.id)
        )).scalar() or 0

    return stats
