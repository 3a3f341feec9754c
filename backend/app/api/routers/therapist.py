from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from typing import List, Optional

from app.config import SPECIALTIES
from app.db import get_db
from app.models import User, TherapistProfile
from app.schemas import TherapistProfileResponse, TherapistProfileUpsert
from app.services.auth_service import get_current_user, require_role
from app.services.therapist_search import filter_therapists

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/therapists", tags=["therapists"])


async def load_profile(db: AsyncSession, profile_id: int) -> Optional[TherapistProfile]:
    q = (
        select(TherapistProfile)
        .where(TherapistProfile.id == profile_id)
        .options(selectinload(TherapistProfile.user))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalar_one_or_none()


@router.get("", response_model=List[TherapistProfileResponse])
async def search_therapists(
    q: Optional[str] = None,
    specialty: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Approved therapists, filtered by name/specialty text and a specialty chip."""
    stmt = (
        select(TherapistProfile)
        .where(TherapistProfile.is_approved.is_(True))
        .options(selectinload(TherapistProfile.user))
        .order_by(TherapistProfile.id)
    )
    profiles = (await db.execute(stmt)).scalars().all()
    return filter_therapists(profiles, q, specialty)


@router.get("/specialties", response_model=List[str])
async def list_specialties():
    return SPECIALTIES


@router.put("/me", response_model=TherapistProfileResponse)
async def upsert_my_profile(
    profile_in: TherapistProfileUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role("therapist")),
):
    """Create or update the caller's practice profile. Approval is not touched."""
    res = await db.execute(select(TherapistProfile).where(TherapistProfile.user_id == current_user.id))
    profile = res.scalar_one_or_none()
    created = profile is None
    if created:
        profile = TherapistProfile(user_id=current_user.id)
        db.add(profile)

    profile.bio = profile_in.bio
    profile.specialties = [s.strip() for s in profile_in.specialties if s.strip()]
    profile.credentials = profile_in.credentials
    profile.experience_years = profile_in.experience_years
    profile.hourly_rate = profile_in.hourly_rate
    profile.availability = profile_in.availability

    await db.commit()
    logger.info("Therapist profile %s for user id=%s", "created" if created else "updated", current_user.id)
    return await load_profile(db, profile.id)


@router.get("/{profile_id}", response_model=TherapistProfileResponse)
async def get_therapist(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    profile = await load_profile(db, profile_id)
    # unapproved profiles stay hidden from everyone but their owner
    if not profile or (not profile.is_approved and profile.user_id != current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Therapist not found")
    return profile
