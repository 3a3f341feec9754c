import logging
from typing import List, Literal, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import EDUCATION_CATEGORIES
from app.db import get_db
from app.models import User, EducationalContent
from app.schemas import EducationalContentCreate, EducationalContentResponse
from app.services.auth_service import get_current_user, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/education", tags=["education"])


@router.get("", response_model=List[EducationalContentResponse])
async def list_content(
    category: Optional[str] = None,
    type: Literal["all", "article", "video"] = "all",
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = (
        select(EducationalContent)
        .where(EducationalContent.is_approved.is_(True))
        .order_by(desc(EducationalContent.created_at), desc(EducationalContent.id))
    )
    if type != "all":
        q = q.where(EducationalContent.type == type)

    items = (await db.execute(q)).scalars().all()
    # condition_tags is a JSON list; filter here so SQLite and Postgres behave the same
    if category:
        items = [c for c in items if category in (c.condition_tags or [])]
    return items


@router.get("/categories", response_model=List[str])
async def list_categories():
    return EDUCATION_CATEGORIES


@router.post("", response_model=EducationalContentResponse, status_code=status.HTTP_201_CREATED)
async def submit_content(
    content_in: EducationalContentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role("therapist")),
):
    """Therapist-submitted content; it stays hidden until approved."""
    parsed = urlparse(content_in.url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise HTTPException(status_code=400, detail="Please enter a valid http(s) link.")

    content = EducationalContent(
        title=content_in.title.strip(),
        description=content_in.description.strip(),
        type=content_in.type,
        url=content_in.url.strip(),
        category=content_in.category.strip(),
        condition_tags=[t.strip() for t in content_in.condition_tags if t.strip()],
        created_by=current_user.id,
        is_approved=False,
    )
    db.add(content)
    await db.commit()
    await db.refresh(content)
    logger.info("Educational content id=%s submitted by user id=%s", content.id, current_user.id)
    return content
