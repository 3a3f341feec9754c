from __future__ import annotations
from typing import Any, Optional, List, Literal
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, EmailStr
import datetime as dt
from datetime import datetime
from enum import Enum


# ---- auth ----
class SignUpRequest(BaseModel):
    """
    /auth/signup request body.
    Required-field, confirmation and length checks run in the handler so the
    client gets the same 400 messages the mobile form shows.
    """
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    password: str = ""
    confirm_password: str = ""
    role: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    needs_profile_setup: bool = False


class VerifyEmailRequest(BaseModel):
    token: str


class UserPublic(BaseModel):
    """
    User row without password_hash; also the merged "extended user" the
    mobile auth context keeps in memory.
    """
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr
    name: str
    role: str
    condition: Optional[str] = None
    specialty: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    location: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[datetime] = None


class SignUpResponse(BaseModel):
    user: UserPublic
    next_step: str = "verify_email"


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    condition: Optional[str] = None
    specialty: Optional[str] = None


# ---- profile setup wizard ----
class SetupStepStatus(BaseModel):
    step: str
    title: str
    complete: bool


class SetupStatus(BaseModel):
    steps: List[SetupStepStatus]
    next_step: Optional[str] = None
    is_complete: bool


class SetupBasics(BaseModel):
    name: Optional[str] = None


class SetupContact(BaseModel):
    phone: Optional[str] = None
    location: Optional[str] = None


class SetupCondition(BaseModel):
    condition: Optional[str] = None


class SetupPractice(BaseModel):
    bio: Optional[str] = None
    credentials: Optional[str] = None
    specialties: List[str] = []
    experience_years: Optional[int] = None
    hourly_rate: Optional[float] = None


# ---- therapists ----
class TherapistUserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None


class TherapistProfileUpsert(BaseModel):
    bio: str = ""
    specialties: List[str] = []
    credentials: str = ""
    experience_years: int = Field(0, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    availability: List[Any] = []


class TherapistProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    bio: str
    specialties: List[str]
    credentials: str
    experience_years: int
    availability: List[Any] = []
    hourly_rate: Optional[float] = None
    is_approved: bool
    users: Optional[TherapistUserInfo] = Field(None, validation_alias=AliasChoices("user", "users"))
    created_at: Optional[datetime] = None


# ---- booking ----
class TimeSlot(BaseModel):
    time: str
    available: bool


class DurationOption(BaseModel):
    value: int
    label: str


class SlotListResponse(BaseModel):
    therapist_profile_id: int
    date: dt.date
    slots: List[TimeSlot]
    durations: List[DurationOption]
    hourly_rate: Optional[float] = None


class BookingRequest(BaseModel):
    therapist_profile_id: int
    date: dt.date
    time: str = ""
    duration: int = 60
    notes: Optional[str] = None


# ---- appointments ----
class AppointmentStatus(str, Enum):
    booked = "booked"
    completed = "completed"
    cancelled = "cancelled"
    no_show = "no_show"


class ParticipantInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    therapist_id: int
    scheduled_at: datetime
    duration: int
    status: str
    notes: Optional[str] = None
    meeting_link: Optional[str] = None
    created_at: Optional[datetime] = None
    client: Optional[ParticipantInfo] = None
    therapist: Optional[ParticipantInfo] = None


class BookingResponse(BaseModel):
    appointment: AppointmentResponse
    therapist_name: str
    estimated_price: Optional[float] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    meeting_link: Optional[str] = None


# ---- messenger ----
class MessageCreate(BaseModel):
    receiver_id: int
    message: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sender_id: int
    receiver_id: int
    message: str
    read: bool
    created_at: Optional[datetime] = None


class ConversationUser(BaseModel):
    id: int
    name: str
    role: str


class LastMessage(BaseModel):
    message: str
    created_at: Optional[datetime] = None
    read: bool


class Conversation(BaseModel):
    id: int
    other_user: ConversationUser
    last_message: LastMessage
    unread_count: int = 0


# ---- education ----
class EducationalContentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    type: Literal["article", "video"]
    url: str
    category: str = Field(..., min_length=1)
    condition_tags: List[str] = []


class EducationalContentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    type: str
    url: str
    category: str
    condition_tags: List[str]
    created_by: int
    is_approved: bool
    created_at: Optional[datetime] = None


# ---- progress ----
class ProgressLogCreate(BaseModel):
    date: dt.date
    exercise_notes: str = Field(..., min_length=1)
    pain_level: int = Field(..., ge=0, le=10)
    mood_level: int = Field(..., ge=0, le=10)


class TherapistNotesUpdate(BaseModel):
    therapist_notes: str


class ProgressLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_id: int
    date: dt.date
    exercise_notes: str
    pain_level: int
    mood_level: int
    therapist_notes: Optional[str] = None
    created_at: Optional[datetime] = None


# ---- dashboard ----
class DashboardStats(BaseModel):
    upcoming_appointments: int = 0
    unread_messages: int = 0
    progress_entries: Optional[int] = None
    total_clients: Optional[int] = None
