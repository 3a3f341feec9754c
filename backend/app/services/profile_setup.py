"""
Profile completion wizard.

A fixed, role-dependent list of steps; each step has a validation predicate
over the submitted fields and a completeness predicate over the saved user
(and therapist profile). Steps are saved one at a time, so partially
finished profiles are just users with some steps incomplete.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.models import TherapistProfile, User


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _basics_valid(data: dict) -> bool:
    return _filled(data.get("name"))


def _contact_valid(data: dict) -> bool:
    return _filled(data.get("phone")) and _filled(data.get("location"))


def _condition_valid(data: dict) -> bool:
    return _filled(data.get("condition"))


def _practice_valid(data: dict) -> bool:
    specialties = [s for s in (data.get("specialties") or []) if _filled(s)]
    years = data.get("experience_years")
    rate = data.get("hourly_rate")
    return (
        _filled(data.get("bio"))
        and _filled(data.get("credentials"))
        and len(specialties) > 0
        and isinstance(years, int) and years >= 0
        and (rate is None or rate >= 0)
    )


def _practice_snapshot(user: User, profile: Optional[TherapistProfile]) -> dict:
    if profile is None:
        return {}
    return {
        "bio": profile.bio,
        "credentials": profile.credentials,
        "specialties": profile.specialties,
        "experience_years": profile.experience_years,
        "hourly_rate": profile.hourly_rate,
    }


@dataclass(frozen=True)
class SetupStep:
    key: str
    title: str
    roles: tuple[str, ...]
    validate: Callable[[dict], bool]
    snapshot: Callable[[User, Optional[TherapistProfile]], dict]


STEPS: list[SetupStep] = [
    SetupStep(
        "basics", "Your name", ("client", "therapist"), _basics_valid,
        lambda u, p: {"name": u.name},
    ),
    SetupStep(
        "contact", "Contact & location", ("client", "therapist"), _contact_valid,
        lambda u, p: {"phone": u.phone, "location": u.location},
    ),
    SetupStep(
        "condition", "Your condition", ("client",), _condition_valid,
        lambda u, p: {"condition": u.condition},
    ),
    SetupStep(
        "practice", "Your practice", ("therapist",), _practice_valid,
        _practice_snapshot,
    ),
]


def steps_for_role(role: str) -> list[SetupStep]:
    return [s for s in STEPS if role in s.roles]


def get_step(role: str, key: str) -> Optional[SetupStep]:
    for s in steps_for_role(role):
        if s.key == key:
            return s
    return None


def is_step_complete(step: SetupStep, user: User, profile: Optional[TherapistProfile]) -> bool:
    return step.validate(step.snapshot(user, profile))


def setup_status(user: User, profile: Optional[TherapistProfile]) -> dict:
    steps = []
    next_step = None
    for s in steps_for_role(user.role):
        complete = is_step_complete(s, user, profile)
        steps.append({"step": s.key, "title": s.title, "complete": complete})
        if not complete and next_step is None:
            next_step = s.key
    return {"steps": steps, "next_step": next_step, "is_complete": next_step is None}


def needs_profile_setup(user: User) -> bool:
    """Login-time shortcut: no location yet means send the user to setup."""
    return not _filled(user.location)
