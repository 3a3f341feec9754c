import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import MIN_PASSWORD_LENGTH
from app.db import get_db
from app.models import User
from app.services.auth_service import (
    create_access_token, verify_password, hash_password, get_current_user,
    create_email_verification_token, verify_email_verification_token,
)
from app.services.email_service import send_verification_email, EmailDeliveryError
from app.services.profile_setup import needs_profile_setup
from app.schemas import SignUpRequest, SignUpResponse, Token, UserPublic, VerifyEmailRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_email_adapter = TypeAdapter(EmailStr)


async def get_user_by_email(db: AsyncSession, email: str):
    q = select(User).where(User.email == email)
    res = await db.execute(q)
    return res.scalar_one_or_none()


async def _send_verification(user: User) -> bool:
    token = create_email_verification_token(user.id, user.email)
    try:
        await send_verification_email(user.email, user.name, token)
    except EmailDeliveryError:
        return False
    return True


@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(req: SignUpRequest, db: AsyncSession = Depends(get_db)):
    # 1. Same checks, same order, same messages as the sign-up form
    if not req.name.strip() or not req.email.strip() or not req.password or not req.role:
        raise HTTPException(status_code=400, detail="Please fill in all required fields")
    if req.password != req.confirm_password:
        raise HTTPException(status_code=400, detail="Passwords do not match")
    if len(req.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if req.role not in ("client", "therapist"):
        raise HTTPException(status_code=400, detail="Role must be 'client' or 'therapist'")

    try:
        email = str(_email_adapter.validate_python(req.email.strip())).lower()
    except ValidationError:
        raise HTTPException(status_code=400, detail="Please enter a valid email address")

    # 2. Duplicate check up front; the unique index still backs it up
    if await get_user_by_email(db, email):
        raise HTTPException(status_code=409, detail="Email already registered.")

    user = User(
        email=email,
        password_hash=hash_password(req.password),
        name=req.name.strip(),
        role=req.role,
        phone=(req.phone or "").strip() or None,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered.")
    await db.refresh(user)
    logger.info("User signed up id=%s role=%s", user.id, user.role)

    # 3. Account exists even if the email provider is down; resend covers it
    if not await _send_verification(user):
        logger.warning("Verification email not delivered for user id=%s", user.id)

    return SignUpResponse(user=UserPublic.model_validate(user), next_step="verify_email")


@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db)
):
    user = await get_user_by_email(db, form_data.username.strip().lower())

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})
    logger.info("User logged in id=%s", user.id)
    return Token(access_token=access_token, needs_profile_setup=needs_profile_setup(user))


@router.post("/verify-email", response_model=UserPublic)
async def verify_email(req: VerifyEmailRequest, db: AsyncSession = Depends(get_db)):
    return await mark_email_verified(db, req.token)


# Target of the link in the verification email
@router.get("/verify-email", response_model=UserPublic)
async def verify_email_link(token: str = Query(...), db: AsyncSession = Depends(get_db)):
    return await mark_email_verified(db, token)


async def mark_email_verified(db: AsyncSession, token: str) -> User:
    claims = verify_email_verification_token(token)
    user = await db.get(User, claims["user_id"])
    # email changed (or account gone) since the link was issued
    if not user or user.email != claims["email"]:
        raise HTTPException(status_code=400, detail="Verification link is invalid or has expired.")

    if not user.email_verified:
        user.email_verified = True
        await db.commit()
        await db.refresh(user)
        logger.info("Email verified for user id=%s", user.id)
    return user


@router.post("/resend-verification")
async def resend_verification(current_user: User = Depends(get_current_user)):
    if current_user.email_verified:
        raise HTTPException(status_code=400, detail="Email is already verified.")
    if not await _send_verification(current_user):
        raise HTTPException(status_code=502, detail="Failed to resend verification email.")
    return {"message": "A new verification email has been sent to your inbox."}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; the client drops its copy
    logger.info("User logged out id=%s", current_user.id)


@router.get("/me", response_model=UserPublic)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user
