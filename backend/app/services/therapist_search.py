from __future__ import annotations

from typing import Iterable, Optional

from app.models import TherapistProfile


def matches(profile: TherapistProfile, query: Optional[str], specialty: Optional[str]) -> bool:
    """
    Name or specialty substring match (case-insensitive) plus an exact
    specialty filter. Profiles without a named user never match.
    """
    user = profile.user
    if user is None or not user.name:
        return False

    specialties = profile.specialties or []

    if query:
        q = query.strip().lower()
        if q and q not in user.name.lower() and not any(q in s.lower() for s in specialties):
            return False

    if specialty and specialty not in specialties:
        return False

    return True


def filter_therapists(
    profiles: Iterable[TherapistProfile],
    query: Optional[str] = None,
    specialty: Optional[str] = None,
) -> list[TherapistProfile]:
    return [p for p in profiles if matches(p, query, specialty)]
