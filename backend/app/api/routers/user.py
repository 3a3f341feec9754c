import logging

from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from pydantic import ValidationError

from app.db import get_db
from app.models import User, TherapistProfile
from app.services.auth_service import get_current_user
from app.services import profile_setup
from app.services.storage_service import save_avatar
from app.schemas import (
    UserPublic, ProfileUpdate, SetupStatus,
    SetupBasics, SetupContact, SetupCondition, SetupPractice,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])

SETUP_BODIES = {
    "basics": SetupBasics,
    "contact": SetupContact,
    "condition": SetupCondition,
    "practice": SetupPractice,
}


async def _therapist_profile(db: AsyncSession, user_id: int):
    res = await db.execute(select(TherapistProfile).where(TherapistProfile.user_id == user_id))
    return res.scalar_one_or_none()


@router.get("/profile", response_model=UserPublic)
async def get_user_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserPublic)
async def update_user_profile(
    profile_in: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    update_data = profile_in.model_dump(exclude_unset=True)

    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to update."
        )
    if "name" in update_data and update_data["name"] is None:
        raise HTTPException(status_code=400, detail="Name cannot be empty.")

    for field, value in update_data.items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)
    logger.info("Profile updated for user id=%s fields=%s", current_user.id, sorted(update_data))
    return current_user


@router.post("/profile/photo", response_model=UserPublic)
async def upload_profile_photo(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    current_user.photo_url = await save_avatar(current_user.id, file)
    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.get("/setup", response_model=SetupStatus)
async def get_setup_status(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    profile = await _therapist_profile(db, current_user.id) if current_user.role == "therapist" else None
    return profile_setup.setup_status(current_user, profile)


@router.post("/setup/{step}", response_model=SetupStatus)
async def submit_setup_step(
    step: str,
    body: dict,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Save one wizard step. The body shape depends on the step, so it is
    validated against the step's schema here rather than by FastAPI.
    """
    wizard_step = profile_setup.get_step(current_user.role, step)
    if wizard_step is None:
        raise HTTPException(status_code=404, detail=f"Unknown setup step '{step}'.")

    try:
        data = SETUP_BODIES[step].model_validate(body).model_dump()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    if not wizard_step.validate(data):
        raise HTTPException(status_code=422, detail=f"Please complete all fields for '{wizard_step.title}'.")

    profile = None
    if step == "practice":
        profile = await _therapist_profile(db, current_user.id)
        if profile is None:
            profile = TherapistProfile(user_id=current_user.id)
            db.add(profile)
        profile.bio = data["bio"].strip()
        profile.credentials = data["credentials"].strip()
        profile.specialties = [s.strip() for s in data["specialties"] if s and s.strip()]
        profile.experience_years = data["experience_years"]
        profile.hourly_rate = data["hourly_rate"]
    else:
        for field, value in data.items():
            setattr(current_user, field, value.strip() if isinstance(value, str) else value)

    await db.commit()
    await db.refresh(current_user)
    if current_user.role == "therapist" and profile is None:
        profile = await _therapist_profile(db, current_user.id)

    logger.info("Setup step %s saved for user id=%s", step, current_user.id)
    return profile_setup.setup_status(current_user, profile)


@router.delete("/deactivate", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_user_account(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    await db.execute(delete(TherapistProfile).where(TherapistProfile.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("Account deleted id=%s", user_id)
