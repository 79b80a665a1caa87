"""
PRBuild release workflow.

Every operation loads the release, checks who is calling and whether the
status move is allowed, writes the new fields back and records an
activity_log row. Errors surface as HTTPException for the routes to return
unchanged.
"""
import logging
import time
from datetime import datetime, timezone

from fastapi import HTTPException

from prbuild import billing
from prbuild import mailer
from prbuild import statuses
from prbuild import storage
from prbuild.auth import is_admin
from prbuild.drafter import PressReleaseDrafter, DraftingError

log = logging.getLogger(__name__)

drafter = PressReleaseDrafter()

CLIENT_FIELDS = (
    "client_feedback", "client_feedback_at", "client_edited_content",
    "status",
    "admin_refined_content", "pending_rewrite_content",
)
ADMIN_FIELDS = CLIENT_FIELDS + (
    "admin_notes", "admin_reviewed_by", "admin_reviewed_at",
    "ai_selected_headline", "category", "tags", "industry",
    "quality_score", "quality_notes", "quality_reviewed_by", "quality_reviewed_at",
    "final_content", "final_approved_at", "sent_to_client_at",
)

SUMMARY_LENGTH = 200


def _role(user: dict) -> str:
    return "admin" if is_admin(user) else "client"


def _direct_move(release: dict, target: str, user: dict) -> str:
    """Status writes outside /publish; publishing needs the showcase row too."""
    if target == "published":
        raise HTTPException(400, "Use the publish action to publish a release")
    return _move(release, target, user)


def _move(release: dict, target: str, user: dict) -> str:
    try:
        return statuses.transition(release["status"], target, _role(user))
    except statuses.InvalidTransition as e:
        raise HTTPException(400, str(e))


def _notify(send, *args):
    """Client emails are best effort; a failed send never fails the request."""
    try:
        send(*args)
    except mailer.MailerError as e:
        log.warning(f"Notification {send.__name__} failed: {e}")


def _client_email(release: dict):
    client = storage.get_profile(release["client_id"])
    return client["email"] if client else None


def _append_note(existing, line: str) -> str:
    stamp = datetime.now(timezone.utc).isoformat()
    return (existing or "") + f"\n[{stamp}] {line}"


def get_release_for(release_id: str, user: dict) -> dict:
    """Release visible to `user`: admins see all, clients only their own."""
    release = storage.get_release(release_id)
    if not release:
        raise HTTPException(404, "Release not found")
    if not is_admin(user) and release["client_id"] != user["id"]:
        raise HTTPException(403, "Forbidden")
    return release


def current_draft(release: dict):
    return release.get("admin_refined_content") or release.get("ai_draft_content")


# ═══════════════════════════════════════════════════
# CREATE / LIST / PATCH
# ═══════════════════════════════════════════════════

def create_release(user: dict, values: dict) -> dict:
    """New request in `submitted`. Free users with credit pay nothing and spend one credit (-1 = unlimited)."""
    values = dict(values)
    plan = values.get("plan") or "starter"
    remaining = user.get("free_releases_remaining") or 0
    if user.get("is_free_user") and remaining != 0:
        values["amount_paid"] = 0
        if remaining > 0:
            storage.update_profile(user["id"], free_releases_remaining=remaining - 1)
    else:
        values["amount_paid"] = billing.plan_amount(plan)
    values["plan"] = plan

    release = storage.create_release(user["id"], values)
    storage.log_activity(release["id"], user["id"], "release_submitted",
                         {"plan": plan, "free": values["amount_paid"] == 0})
    log.info(f"Release {release['id']} submitted by {user['email']} ({plan})")
    return release


def list_releases(user: dict) -> list[dict]:
    if is_admin(user):
        return statuses.sort_queue(storage.list_releases())
    return storage.list_releases(client_id=user["id"])


def patch_release(release_id: str, user: dict, body: dict) -> dict:
    release = get_release_for(release_id, user)
    admin = is_admin(user)
    allowed = ADMIN_FIELDS if admin else CLIENT_FIELDS

    updates = {}
    for key in allowed:
        if key not in body or body[key] is None:
            continue
        if key == "status":
            if not admin and body[key] not in statuses.CLIENT_TARGETS:
                continue
            updates[key] = _direct_move(release, body[key], user)
            continue
        updates[key] = body[key]

    if not updates:
        raise HTTPException(400, "No valid fields to update")

    updated = storage.update_release(release_id, **updates)
    storage.log_activity(release_id, user["id"], "release_updated", {"fields": sorted(updates)})
    return updated


# ═══════════════════════════════════════════════════
# AI STEPS
# ═══════════════════════════════════════════════════

async def generate_draft(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    new_status = _move(release, "draft_generated", user)
    try:
        raw, parsed = await drafter.generate_draft(release)
    except DraftingError as e:
        log.error(f"Draft generation failed for {release_id}: {e}")
        raise HTTPException(502, "Failed to generate draft")

    updated = storage.update_release(
        release_id,
        ai_draft_raw={"raw": raw, "parsed": parsed.model_dump()},
        ai_headline_options=parsed.headlines,
        ai_subhead=parsed.subhead,
        ai_draft_content=parsed.full_content,
        ai_visuals_suggestions=[v.model_dump() for v in parsed.visuals],
        ai_distribution_checklist=parsed.checklist,
        ai_generated_at=time.time(),
        status=new_status,
    )
    storage.log_activity(release_id, user["id"], "ai_draft_generated", {"model": drafter.model})
    return {"release": updated, "draft": parsed.model_dump(), "raw": raw}


async def run_panel(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    if not current_draft(release):
        raise HTTPException(400, "No draft content to critique")
    new_status = _move(release, "panel_reviewed", user)
    try:
        raw, parsed = await drafter.run_panel_critique(release)
    except DraftingError as e:
        log.error(f"Panel critique failed for {release_id}: {e}")
        raise HTTPException(502, "Failed to generate panel critique")

    updated = storage.update_release(
        release_id,
        panel_critique_raw={"raw": raw, "parsed": parsed.model_dump()},
        panel_individual_feedback=[f.model_dump() for f in parsed.individual_feedback],
        panel_synthesis=parsed.synthesis or "; ".join(parsed.themes),
        panel_contrarian_recommendation=parsed.contrarian.model_dump(),
        panel_reviewed_at=time.time(),
        status=new_status,
    )
    storage.log_activity(release_id, user["id"], "panel_critique_generated", {
        "model": drafter.model,
        "industry": release.get("industry") or "general",
        "feedback_count": len(parsed.individual_feedback),
    })
    return {"release": updated, "critique": parsed.model_dump(), "raw": raw}


async def rewrite_from_panel(release_id: str, user: dict) -> dict:
    """One rewrite per release, held in pending_rewrite_content until accepted or rejected."""
    release = get_release_for(release_id, user)
    if not current_draft(release):
        raise HTTPException(400, "No draft to rewrite")
    if not release.get("panel_individual_feedback"):
        raise HTTPException(400, "No panel feedback available")
    if release.get("rewrite_used"):
        raise HTTPException(400, "Rewrite has already been used for this release")

    try:
        content = await drafter.rewrite_from_panel(release)
    except DraftingError as e:
        log.error(f"Rewrite failed for {release_id}: {e}")
        raise HTTPException(502, "Failed to rewrite draft")

    role = _role(user)
    updated = storage.update_release(
        release_id,
        pending_rewrite_content=content,
        rewrite_used=True,
        admin_notes=_append_note(release.get("admin_notes"),
                                 f"Rewrite based on panel feedback requested by {role}."),
    )
    storage.log_activity(release_id, user["id"], "ai_rewrite_from_panel",
                         {"model": drafter.model, "requested_by": role})
    return {"release": updated, "content": content}


def accept_rewrite(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    if not release.get("pending_rewrite_content"):
        raise HTTPException(400, "No pending rewrite")
    updated = storage.update_release(
        release_id,
        admin_refined_content=release["pending_rewrite_content"],
        pending_rewrite_content=None,
    )
    storage.log_activity(release_id, user["id"], "rewrite_accepted")
    return updated


def reject_rewrite(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    if not release.get("pending_rewrite_content"):
        raise HTTPException(400, "No pending rewrite")
    updated = storage.update_release(release_id, pending_rewrite_content=None)
    storage.log_activity(release_id, user["id"], "rewrite_rejected")
    return updated


# ═══════════════════════════════════════════════════
# REVIEW LOOP
# ═══════════════════════════════════════════════════

def send_to_client(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    new_status = _move(release, "awaiting_client", user)
    now = time.time()
    updated = storage.update_release(
        release_id,
        status=new_status,
        admin_reviewed_by=user["id"],
        admin_reviewed_at=now,
        sent_to_client_at=now,
    )
    storage.log_activity(release_id, user["id"], "sent_to_client")
    email = _client_email(release)
    if email:
        _notify(mailer.notify_draft_ready, email, release_id, release["company_name"])
    return updated


def submit_feedback(release_id: str, user: dict, feedback: str) -> dict:
    if not feedback.strip():
        raise HTTPException(400, "Feedback is required")
    release = get_release_for(release_id, user)
    new_status = _move(release, "client_feedback", user)
    updated = storage.update_release(
        release_id,
        client_feedback=feedback.strip(),
        client_feedback_at=time.time(),
        status=new_status,
    )
    storage.log_activity(release_id, user["id"], "client_feedback")
    email = _client_email(release)
    if email:
        _notify(mailer.notify_feedback_received, email, release_id)
    return updated


def approve(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    updated = storage.update_release(release_id, status=_move(release, "client_approved", user))
    storage.log_activity(release_id, user["id"], "client_approved")
    return updated


def set_status(release_id: str, user: dict, target: str, note: str = None) -> dict:
    """Admin pipeline moves and the needs_revision / rejected quick actions."""
    release = get_release_for(release_id, user)
    fields = {"status": _direct_move(release, target, user)}
    if target == "final_approved":
        fields["final_approved_at"] = time.time()
        fields["final_content"] = release.get("final_content") or publishable_content(release)
    if target == "quality_approved":
        fields["quality_reviewed_by"] = user["id"]
        fields["quality_reviewed_at"] = time.time()
    if note:
        fields["admin_notes"] = _append_note(release.get("admin_notes"), note)
    updated = storage.update_release(release_id, **fields)
    storage.log_activity(release_id, user["id"], "status_changed",
                         {"from": release["status"], "to": target})
    if target == "awaiting_client":
        email = _client_email(release)
        if email:
            _notify(mailer.notify_approval_needed, email, release_id)
    return updated


# ═══════════════════════════════════════════════════
# PUBLISH
# ═══════════════════════════════════════════════════

def publishable_content(release: dict) -> str:
    return (release.get("client_edited_content")
            or release.get("admin_refined_content")
            or release.get("ai_draft_content")
            or "")


def summarize(content: str) -> str:
    summary = content[:SUMMARY_LENGTH].strip()
    return summary + ("..." if len(content) > SUMMARY_LENGTH else "")


def publish(release_id: str, user: dict) -> dict:
    release = get_release_for(release_id, user)
    if storage.get_showcase_for_release(release_id):
        raise HTTPException(409, "Release already published")
    new_status = _move(release, "published", user)

    options = release.get("ai_headline_options") or []
    content = publishable_content(release)
    now = time.time()
    try:
        showcase = storage.create_showcase({
            "release_request_id": release_id,
            "headline": release.get("ai_selected_headline") or (options[0] if options else release["news_hook"]),
            "subhead": release.get("ai_subhead"),
            "company_name": release["company_name"],
            "summary": summarize(content),
            "full_content": content,
            "category": release.get("category") or "Other",
            "industry": release.get("industry"),
            "tags": release.get("tags"),
            "contact_name": release.get("media_contact_name"),
            "contact_email": release.get("media_contact_email"),
            "contact_phone": release.get("media_contact_phone"),
            "published_at": now,
        })
    except storage.DuplicateError:
        raise HTTPException(409, "Release already published")

    storage.update_release(release_id, status=new_status, published_at=now)
    storage.log_activity(release_id, user["id"], "release_published", {"showcase_id": showcase["id"]})
    log.info(f"Release {release_id} published as showcase {showcase['id']}")
    email = _client_email(release)
    if email:
        _notify(mailer.notify_release_published, email, showcase["id"])
    return showcase
