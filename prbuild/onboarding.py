"""
PRBuild onboarding: the welcome email after signup, the dashboard banner
dismissal, and the scheduled tips / nudge emails for clients who have not
submitted a release yet.
"""
import logging
import time

from fastapi import HTTPException

from prbuild import mailer
from prbuild import storage

log = logging.getLogger(__name__)

HOUR = 60 * 60
LOOKBACK = 7 * 24 * HOUR

# step -> hours after signup before it goes out
DRIP_STEPS = (("tips", 24), ("nudge", 72))


def _record(profile_id: str, sent_at: dict, step: str) -> dict:
    sent_at = {**sent_at, step: time.time()}
    storage.update_profile(profile_id, onboarding_email_sent_at=sent_at)
    return sent_at


def send_welcome(user: dict) -> dict:
    """Send the welcome email once per account."""
    sent_at = user.get("onboarding_email_sent_at") or {}
    if sent_at.get("welcome"):
        return {"skipped": True, "reason": "already_sent"}
    try:
        mailer.send_onboarding(user["email"], "welcome")
    except mailer.MailerError as e:
        log.error(f"Failed to send welcome email to {user['email']}: {e}")
        raise HTTPException(500, "Failed to send email")
    _record(user["id"], sent_at, "welcome")
    return {"sent": True}


def dismiss(user: dict) -> dict:
    storage.update_profile(user["id"], onboarding_dismissed_at=time.time())
    return {"success": True}


def run_drip(now: float = None) -> dict:
    """
    Walk clients who signed up in the last week and have no releases.
    Each step is sent at most once; a failed send is retried on the next run.
    """
    now = now or time.time()
    profiles = storage.list_clients_since(now - LOOKBACK)
    counts = {step: 0 for step, _ in DRIP_STEPS}

    for profile in profiles:
        if profile["release_count"]:
            continue
        sent_at = profile.get("onboarding_email_sent_at") or {}
        hours = (now - profile["created_at"]) / HOUR
        for step, after_hours in DRIP_STEPS:
            if hours < after_hours or sent_at.get(step):
                continue
            try:
                mailer.send_onboarding(profile["email"], step)
            except mailer.MailerError as e:
                log.error(f"Failed to send {step} email to {profile['id']}: {e}")
                continue
            sent_at = _record(profile["id"], sent_at, step)
            counts[step] += 1

    log.info(f"Onboarding run: {len(profiles)} profiles, {counts['tips']} tips, {counts['nudge']} nudges")
    return {"processed": len(profiles), "tips_sent": counts["tips"], "nudges_sent": counts["nudge"]}
