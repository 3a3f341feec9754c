import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update, desc, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db import get_db
from app.models import User, Message
from app.schemas import MessageCreate, MessageResponse, Conversation
from app.services.auth_service import get_current_user
from app.services.conversations import group_conversations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messenger", tags=["messenger"])


# 1. Conversation list, rebuilt from every message involving me
@router.get("/conversations", response_model=List[Conversation])
async def get_conversations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    q = (
        select(Message)
        .where(or_(Message.sender_id == current_user.id, Message.receiver_id == current_user.id))
        .options(selectinload(Message.sender), selectinload(Message.receiver))
        .order_by(desc(Message.created_at), desc(Message.id))
    )
    messages = (await db.execute(q)).scalars().all()
    return group_conversations(messages, current_user.id)


# 2. Send a message
@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    req: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    text = req.message.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Message cannot be empty.")
    if req.receiver_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot message yourself.")

    receiver = await db.get(User, req.receiver_id)
    if not receiver:
        raise HTTPException(status_code=404, detail="Recipient not found.")

    new_msg = Message(sender_id=current_user.id, receiver_id=receiver.id, message=text, read=False)
    db.add(new_msg)
    await db.commit()
    await db.refresh(new_msg)
    logger.info("Message id=%s sent %s -> %s", new_msg.id, current_user.id, receiver.id)
    return new_msg


# 3. Thread with one partner; opening it marks their messages read
@router.get("/{partner_id}", response_model=List[MessageResponse])
async def get_thread(
    partner_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    partner = await db.get(User, partner_id)
    if not partner:
        raise HTTPException(status_code=404, detail="User not found.")

    await db.execute(
        update(Message)
        .where(
            Message.sender_id == partner_id,
            Message.receiver_id == current_user.id,
            Message.read.is_(False),
        )
        .values(read=True)
    )
    await db.commit()

    q = (
        select(Message)
        .where(
            or_(
                and_(Message.sender_id == current_user.id, Message.receiver_id == partner_id),
                and_(Message.sender_id == partner_id, Message.receiver_id == current_user.id),
            )
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalars().all()
