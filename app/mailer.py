# app/mailer.py  # RSVP notification email (SendGrid) and the optional alert webhook.

# =================================================================================
# 📧 RSVP NOTIFICATION MAILER
# ---------------------------------------------------------------------------------
# Sends the couple an HTML summary every time a guest submits an RSVP.
# Best-effort: nothing here may turn a stored submission into a failure.
# - DRY_RUN=1 (default) only logs the message.
# - Missing SENDGRID_API_KEY / EMAIL_FROM / RSVP_NOTIFICATION_EMAIL logs a
#   warning and skips the send.
# =================================================================================

import html
import json
import os
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from loguru import logger
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

from app.crud.rsvp_crud import mask_code


@dataclass
class RSVPNotification:
    guest_names: List[str]
    accepted: bool
    attending_count: int
    total_invited: int
    code: str
    staying_villa: Optional[bool] = None
    dietary_restrictions: Optional[str] = None
    song_request: Optional[str] = None
    travel_plans: Optional[str] = None
    message: Optional[str] = None
    is_amendment: bool = False
    attending_names: List[str] = field(default_factory=list)


# =================================================================================
# 📢 Alert webhook (optional)
# =================================================================================
def send_alert_webhook(title: str, message: str) -> None:
    """Posts an alert to ALERT_WEBHOOK_URL when it is defined; silent otherwise."""
    url = os.getenv("ALERT_WEBHOOK_URL")
    if not url:
        return
    try:
        payload = {"text": f"{title}\n{message}"}  # Slack/Teams compatible.
        headers = {"Content-Type": "application/json"}
        requests.post(url, data=json.dumps(payload), headers=headers, timeout=5)
    except requests.RequestException as e:
        logger.error("Could not deliver alert webhook: {}", e)


# =================================================================================
# 🧾 Message building
# =================================================================================
def build_subject(n: RSVPNotification) -> str:
    primary = n.guest_names[0] if n.guest_names else "Unknown Guest"
    prefix = "RSVP update" if n.is_amendment else "RSVP"
    if n.accepted:
        return f"{prefix}: {primary} is coming! ({n.attending_count}/{n.total_invited} attending)"
    return f"{prefix}: {primary} can't make it"


def build_html(n: RSVPNotification) -> str:
    """HTML body. Every guest-typed value goes through html.escape."""
    status = "Accepted" if n.accepted else "Declined"
    parts = [
        "<h2>RSVP Updated</h2>" if n.is_amendment else "<h2>New RSVP Received</h2>",
        f"<p><strong>Status:</strong> {status}</p>",
        f"<p><strong>Guests:</strong> {html.escape(', '.join(n.guest_names))}</p>",
    ]
    if n.accepted:
        parts.append(f"<p><strong>Attending:</strong> {n.attending_count} of {n.total_invited} invited</p>")
        if n.attending_names:
            parts.append(f"<p><strong>Coming:</strong> {html.escape(', '.join(n.attending_names))}</p>")
        if n.staying_villa is not None:
            parts.append(f"<p><strong>Villa Accommodation:</strong> {'Yes' if n.staying_villa else 'No'}</p>")
    if n.dietary_restrictions:
        parts.append(f"<p><strong>Dietary Restrictions:</strong> {html.escape(n.dietary_restrictions)}</p>")
    if n.song_request:
        parts.append(f"<p><strong>Song Request:</strong> {html.escape(n.song_request)}</p>")
    if n.travel_plans:
        parts.append(f"<p><strong>Travel Plans:</strong> {html.escape(n.travel_plans)}</p>")
    if n.message:
        parts.append(f"<p><strong>Message:</strong></p><blockquote>{html.escape(n.message)}</blockquote>")
    parts.append(f'<hr/><p style="color: #666; font-size: 12px;">RSVP Code: {html.escape(n.code)}</p>')
    return "\n".join(parts)


# =================================================================================
# ✉️ Sending
# =================================================================================
def send_rsvp_notification(n: RSVPNotification) -> bool:
    """Sends the summary to RSVP_NOTIFICATION_EMAIL. Returns True on 2xx or DRY_RUN."""
    dry_run = os.getenv("DRY_RUN", "1") == "1"
    api_key = os.getenv("SENDGRID_API_KEY", "")
    from_email = os.getenv("EMAIL_FROM", "")
    sender_name = os.getenv("EMAIL_SENDER_NAME", "Wedding RSVP")
    to_email = os.getenv("RSVP_NOTIFICATION_EMAIL", "")

    subject = build_subject(n)
    body = build_html(n)

    if dry_run:
        logger.info("[DRY_RUN] RSVP notification | Subject: {}\n{}", subject, body[:300])
        return True
    if not to_email:
        logger.warning("RSVP_NOTIFICATION_EMAIL not configured, skipping RSVP notification")
        return False
    if not api_key or not from_email:
        logger.warning("Mailer config incomplete: EMAIL_FROM or SENDGRID_API_KEY missing, skipping notification")
        send_alert_webhook("🚨 Mailer config (SendGrid)", "EMAIL_FROM or SENDGRID_API_KEY missing.")
        return False

    message = Mail(
        from_email=From(from_email, sender_name),
        to_emails=to_email,
        subject=subject,
        html_content=body,
    )
    try:
        response = SendGridAPIClient(api_key).send(message)
    except Exception as e:  # SendGrid raises python_http_client errors for non-2xx.
        logger.error("SendGrid exception sending RSVP notification for {}: {}", mask_code(n.code), e)
        send_alert_webhook("🚨 Mailer exception (SendGrid)", f"RSVP notification failed. Error: {e}")
        return False

    logger.info("SendGrid response: {} | X-Message-Id: {}",
                response.status_code, response.headers.get("X-Message-Id"))
    if 200 <= response.status_code < 300:
        return True
    logger.error("SendGrid error -> status={} | body={}", response.status_code, getattr(response, "body", None))
    send_alert_webhook("🚨 Mailer error (SendGrid)", f"RSVP notification failed. Status: {response.status_code}.")
    return False


def notify_rsvp_submitted(notification: RSVPNotification) -> None:
    """Fire-and-forget wrapper run as a background task after the response."""
    try:
        sent = send_rsvp_notification(notification)
        if not sent:
            logger.warning("RSVP notification not sent for {}", mask_code(notification.code))
    except Exception:
        logger.exception("Unexpected error while sending RSVP notification")
