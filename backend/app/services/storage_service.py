import logging
import os
import uuid

from fastapi import HTTPException, UploadFile, status

from app.config import AVATAR_EXTENSIONS, MAX_AVATAR_BYTES, STATIC_DIR

logger = logging.getLogger(__name__)

AVATAR_SUBDIR = "avatars"


def avatar_extension(filename: str | None) -> str:
    ext = (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""
    if ext not in AVATAR_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported image type. Allowed: {', '.join(sorted(AVATAR_EXTENSIONS))}",
        )
    return ext


async def save_avatar(user_id: int, upload: UploadFile) -> str:
    """Write the upload under STATIC_DIR/avatars and return its public path."""
    ext = avatar_extension(upload.filename)
    data = await upload.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file.")
    if len(data) > MAX_AVATAR_BYTES:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="Image is too large.")

    target_dir = os.path.join(STATIC_DIR, AVATAR_SUBDIR)
    os.makedirs(target_dir, exist_ok=True)

    filename = f"{user_id}_{uuid.uuid4().hex}.{ext}"
    with open(os.path.join(target_dir, filename), "wb") as f:
        f.write(data)

    logger.info("Saved avatar for user=%s (%d bytes)", user_id, len(data))
    return f"/static/{AVATAR_SUBDIR}/{filename}"
