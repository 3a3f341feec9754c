"""
Outgoing email.

Sends through a Resend-compatible HTTP API when EMAIL_API_KEY is set;
otherwise the message is only logged so local sign-ups still work.
"""
import logging
from urllib.parse import urlencode

import httpx

from app.config import EMAIL_API_KEY, EMAIL_API_URL, EMAIL_FROM, PUBLIC_BASE_URL

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


def build_verification_link(token: str) -> str:
    return f"{PUBLIC_BASE_URL}/auth/verify-email?{urlencode({'token': token})}"


def verification_email_html(name: str, link: str) -> str:
    return (
        f"<p>Hi {name},</p>"
        "<p>Welcome to Ask Your OT! Please confirm your email address to finish setting up your account.</p>"
        f'<p><a href="{link}">Verify my email</a></p>'
        "<p>If you didn't create an account, you can ignore this email.</p>"
    )


async def send_email(to: str, subject: str, html: str) -> None:
    if not EMAIL_API_KEY:
        logger.info("Email API key not configured; skipping send to=%s subject=%r", to, subject)
        return

    payload = {"from": EMAIL_FROM, "to": [to], "subject": subject, "html": html}
    headers = {"Authorization": f"Bearer {EMAIL_API_KEY}"}
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.post(EMAIL_API_URL, json=payload, headers=headers)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Email send failed to=%s: %s", to, e)
        raise EmailDeliveryError(str(e)) from e

    logger.info("Email sent to=%s subject=%r", to, subject)


async def send_verification_email(to: str, name: str, token: str) -> None:
    link = build_verification_link(token)
    logger.debug("Verification link for %s: %s", to, link)
    await send_email(to, "Verify your Ask Your OT account", verification_email_html(name, link))
