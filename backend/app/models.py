from __future__ import annotations
from typing import Optional, Literal
from datetime import datetime, date as date_type

from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    BigInteger, String, Text, Integer, Date, DateTime, CheckConstraint,
    ForeignKey, Index, Boolean, JSON, Numeric
)
from sqlalchemy.sql import func
from sqlalchemy.sql.expression import false

from app.db import Base

# BIGINT primary keys only autoincrement as INTEGER on SQLite
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

Role = Literal["client", "therapist"]
AppointmentStatus = Literal["booked", "completed", "cancelled", "no_show"]
ContentType = Literal["article", "video"]


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role in ('client','therapist')", name="ck_users_role"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)

    # Extended profile fields; the setup wizard fills these in
    condition: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    specialty: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    email_verified: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, server_default=false()
    )

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    therapist_profile: Mapped[Optional["TherapistProfile"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class TherapistProfile(Base):
    """
    Practice details for a therapist user (1:1 with users).
    Only profiles with is_approved=True show up in search; approval is
    flipped by staff directly in the database.
    """
    __tablename__ = "therapist_profiles"
    __table_args__ = (
        CheckConstraint("experience_years >= 0", name="ck_therapist_profiles_experience"),
        CheckConstraint("hourly_rate is null or hourly_rate >= 0", name="ck_therapist_profiles_rate"),
        Index("idx_therapist_profiles_approved", "is_approved"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    specialties: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    credentials: Mapped[str] = mapped_column(String, nullable=False, default="")
    experience_years: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    availability: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    hourly_rate: Mapped[Optional[float]] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=True)
    is_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, server_default=false()
    )

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship(back_populates="therapist_profile")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(
            "status in ('booked','completed','cancelled','no_show')",
            name="ck_appointments_status",
        ),
        CheckConstraint("duration > 0", name="ck_appointments_duration"),
        Index("idx_appointments_client", "client_id", "scheduled_at"),
        Index("idx_appointments_therapist", "therapist_id", "scheduled_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    client_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # users.id of the therapist, not therapist_profiles.id
    therapist_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    status: Mapped[str] = mapped_column(String, nullable=False, default="booked")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meeting_link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    client: Mapped["User"] = relationship(foreign_keys=[client_id])
    therapist: Mapped["User"] = relationship(foreign_keys=[therapist_id])


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_sender_receiver", "sender_id", "receiver_id"),
        Index("idx_messages_receiver_read", "receiver_id", "read"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    sender_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, server_default=false())
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    sender: Mapped["User"] = relationship(foreign_keys=[sender_id])
    receiver: Mapped["User"] = relationship(foreign_keys=[receiver_id])


class EducationalContent(Base):
    __tablename__ = "educational_content"
    __table_args__ = (
        CheckConstraint("type in ('article','video')", name="ck_educational_content_type"),
        Index("idx_educational_content_approved", "is_approved", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    condition_tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, server_default=false()
    )

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    author: Mapped["User"] = relationship()


class ProgressLog(Base):
    __tablename__ = "progress_logs"
    __table_args__ = (
        CheckConstraint("pain_level between 0 and 10", name="ck_progress_logs_pain"),
        CheckConstraint("mood_level between 0 and 10", name="ck_progress_logs_mood"),
        Index("idx_progress_logs_client_date", "client_id", "date"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, index=True)
    client_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    exercise_notes: Mapped[str] = mapped_column(Text, nullable=False)
    pain_level: Mapped[int] = mapped_column(Integer, nullable=False)
    mood_level: Mapped[int] = mapped_column(Integer, nullable=False)
    therapist_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
