"""
PRBuild distribution: journalist list, newsletter sends, email leads and their
weekly teardown, showcase reads.
"""
import logging

from fastapi import HTTPException

from prbuild import mailer
from prbuild import storage

log = logging.getLogger(__name__)

FREQUENCIES = ("immediate", "daily", "weekly")
LEAD_SOURCES = ("quiz", "checklist", "teardown_signup")
NEWSLETTER_RELEASE_LIMIT = 10


# ── Journalists ──────────────────────────────────

def subscribe_journalist(email: str, categories: list[str], name: str = None, outlet: str = None,
                         beat: str = None, frequency: str = None) -> dict:
    email = (email or "").strip()
    if not email:
        raise HTTPException(400, "Email is required")
    if not categories:
        raise HTTPException(400, "At least one category is required")
    frequency = frequency or "weekly"
    if frequency not in FREQUENCIES:
        raise HTTPException(400, f"Frequency must be one of {', '.join(FREQUENCIES)}")

    try:
        sub = storage.create_journalist(email, categories, name=name, outlet=outlet,
                                        beat=beat, frequency=frequency)
    except storage.DuplicateError:
        raise HTTPException(409, "Email already subscribed")

    try:
        mailer.send_journalist_verification(sub["email"], sub["verification_token"])
    except mailer.MailerError as e:
        log.error(f"Failed to send verification email to {sub['email']}: {e}")
    return sub


def verify_journalist(token: str) -> bool:
    if not token:
        return False
    return storage.verify_journalist(token) is not None


def unsubscribe_journalist(token: str) -> bool:
    if not token:
        return False
    return storage.delete_journalist_by_token(token)


def journalist_rows(limit: int = 500) -> list[dict]:
    keep = ("id", "email", "name", "outlet", "beat", "categories", "frequency", "is_verified", "created_at")
    return [{k: j[k] for k in keep} for j in storage.list_journalists(limit=limit)]


# ── Newsletter ───────────────────────────────────

def send_newsletter(subject: str, category: str = None) -> dict:
    """Mail the latest showcase releases to every verified journalist (optionally one category)."""
    subject = (subject or "").strip()
    if not subject:
        raise HTTPException(400, "Subject is required")
    category = category or None

    journalists = storage.list_journalists(verified_only=True, category=category)
    releases = [
        {k: r[k] for k in ("id", "headline", "subhead", "company_name", "summary", "category")}
        for r in storage.list_showcase(category=category, limit=NEWSLETTER_RELEASE_LIMIT)
    ]

    sent, failed = 0, 0
    for j in journalists:
        try:
            mailer.send_newsletter(j["email"], subject, releases, j["unsubscribe_token"])
            sent += 1
        except mailer.MailerError as e:
            log.error(f"Failed to send newsletter to {j['email']}: {e}")
            failed += 1

    newsletter = storage.create_newsletter_send(
        subject, category, [r["id"] for r in releases], len(journalists), sent, failed,
    )
    log.info(f"Newsletter '{subject}' sent to {sent}/{len(journalists)} journalists")
    message = f"Newsletter sent to {sent} recipients"
    if failed:
        message += f" ({failed} failed)"
    return {
        "newsletter": newsletter,
        "recipient_count": len(journalists),
        "sent_count": sent,
        "failed_count": failed,
        "message": message,
    }


# ── Leads ────────────────────────────────────────

def capture_lead(email: str, lead_source: str, **extra) -> dict:
    email = (email or "").strip()
    if not email or "@" not in email:
        raise HTTPException(400, "Valid email is required")
    if lead_source not in LEAD_SOURCES:
        raise HTTPException(400, "Valid lead source is required")

    lead = storage.upsert_lead(email, lead_source, **extra)
    try:
        mailer.send_lead_welcome(lead["email"], lead_source, lead["unsubscribe_token"])
    except mailer.MailerError as e:
        log.error(f"Failed to send lead welcome email to {lead['email']}: {e}")
    return lead


# ── Weekly teardown ──────────────────────────────

def send_teardown(subject: str, pr_company: str, pr_headline: str, teardown_content: str) -> dict:
    """Mail one teardown to every lead still subscribed, then log the send."""
    fields = [(v or "").strip() for v in (subject, pr_company, pr_headline, teardown_content)]
    if not all(fields):
        raise HTTPException(400, "All fields are required")
    subject, pr_company, pr_headline, teardown_content = fields

    leads = storage.list_teardown_leads()
    if not leads:
        raise HTTPException(400, "No subscribed leads to send to")

    sent = 0
    for lead in leads:
        try:
            mailer.send_teardown(lead["email"], subject, pr_company, pr_headline,
                                 teardown_content, lead["unsubscribe_token"])
            sent += 1
        except mailer.MailerError as e:
            log.error(f"Failed to send teardown to {lead['email']}: {e}")

    teardown = storage.create_teardown_send(subject, pr_company, pr_headline, teardown_content, sent)
    log.info(f"Teardown '{subject}' sent to {sent}/{len(leads)} leads")
    return {"success": True, "teardown": teardown, "sent_count": sent, "total_leads": len(leads)}


# ── Showcase ─────────────────────────────────────

def view_showcase(showcase_id: str) -> dict:
    item = storage.get_showcase(showcase_id)
    if not item:
        raise HTTPException(404, "Release not found")
    storage.increment_showcase_counter(showcase_id, "view_count")
    item["view_count"] += 1
    return item


def journalist_click(showcase_id: str) -> str:
    """Count a click from a newsletter link; returns the public page to land on."""
    if not storage.get_showcase(showcase_id):
        raise HTTPException(404, "Release not found")
    storage.increment_showcase_counter(showcase_id, "journalist_clicks")
    return f"/showcase/{showcase_id}"
