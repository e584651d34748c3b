# slotwise/services/email_notifier.py
from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage

from slotwise.core.config import get_settings
from slotwise.core.timeutils import as_utc, get_zone
from slotwise.core.exceptions import SchedulingValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingEmailContext:
    """
    Everything the booking emails need, detached from ORM objects so the
    message can be built after the session is gone.
    """

    booking_id: int
    event_name: str
    duration_minutes: int
    start_time: datetime
    timezone: str
    attendee_name: str
    attendee_email: str
    host_name: str
    host_email: str
    attendee_notes: str | None = None
    location: str | None = None
    meeting_link: str | None = None


def _format_start(ctx: BookingEmailContext) -> str:
    try:
        local = as_utc(ctx.start_time).astimezone(get_zone(ctx.timezone))
    except SchedulingValidationError:
        local = as_utc(ctx.start_time)
    return local.strftime("%A, %d %B %Y at %H:%M %Z")


def _details_lines(ctx: BookingEmailContext) -> list[str]:
    lines = [
        f"Event:    {ctx.event_name} ({ctx.duration_minutes} minutes)",
        f"When:     {_format_start(ctx)}",
    ]
    if ctx.location:
        lines.append(f"Location: {ctx.location}")
    if ctx.meeting_link:
        lines.append(f"Link:     {ctx.meeting_link}")
    if ctx.attendee_notes:
        lines.append("")
        lines.append(f"Notes: {ctx.attendee_notes}")
    return lines


def build_confirmation_body(ctx: BookingEmailContext) -> str:
    settings = get_settings()
    lines = [f"Hi {ctx.attendee_name},", ""]
    lines.append(f"Your meeting with {ctx.host_name} is confirmed.")
    lines.append("")
    lines.extend(_details_lines(ctx))
    lines.append("")
    lines.append(f"Need to change plans? {settings.APP_URL}/booking/{ctx.booking_id}")
    lines.append("")
    lines.append(settings.APP_NAME)
    return "\n".join(lines)


def build_host_notification_body(ctx: BookingEmailContext) -> str:
    lines = [f"Hi {ctx.host_name},", ""]
    lines.append(f"{ctx.attendee_name} ({ctx.attendee_email}) booked a meeting with you.")
    lines.append("")
    lines.extend(_details_lines(ctx))
    lines.append("")
    lines.append(get_settings().APP_NAME)
    return "\n".join(lines)


def build_cancellation_body(ctx: BookingEmailContext, reason: str | None) -> str:
    lines = [f"Hi {ctx.attendee_name},", ""]
    lines.append(f"Your meeting with {ctx.host_name} has been cancelled.")
    lines.append("")
    lines.extend(_details_lines(ctx))
    if reason:
        lines.append("")
        lines.append(f"Reason: {reason}")
    lines.append("")
    lines.append(get_settings().APP_NAME)
    return "\n".join(lines)


def send_email(to_address: str, subject: str, body: str) -> bool:
    """
    Send a plain-text email via SMTP.

    Returns
    -------
    bool
        True if the message was handed to the SMTP server.
        False if email is not configured or sending failed.
    """
    settings = get_settings()

    if not settings.SMTP_HOST or not settings.SMTP_FROM_ADDRESS:
        logger.debug("SMTP not configured; skipping email to %s", to_address)
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM_ADDRESS
    msg["To"] = to_address
    msg.set_content(body)

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USERNAME and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
        return True
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send email '%s' to %s", subject, to_address)
        return False


def send_booking_confirmation(ctx: BookingEmailContext) -> bool:
    return send_email(
        ctx.attendee_email,
        f"Confirmed: {ctx.event_name} with {ctx.host_name}",
        build_confirmation_body(ctx),
    )


def send_host_notification(ctx: BookingEmailContext) -> bool:
    return send_email(
        ctx.host_email,
        f"New booking: {ctx.event_name} with {ctx.attendee_name}",
        build_host_notification_body(ctx),
    )


def send_cancellation_email(ctx: BookingEmailContext, reason: str | None = None) -> bool:
    return send_email(
        ctx.attendee_email,
        f"Cancelled: {ctx.event_name} with {ctx.host_name}",
        build_cancellation_body(ctx, reason),
    )
