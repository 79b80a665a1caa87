"""
PRBuild: release request lifecycle.

One table drives everything the UI and the API need to know about a status:
admin label and badge color, queue priority, the admin's next action, and
the wording shown to the client. Transitions are checked against ALLOWED
before any status is written.
"""
import logging
from typing import Optional

log = logging.getLogger(__name__)


class InvalidTransition(Exception):
    def __init__(self, current: str, target: str, role: str):
        self.current, self.target, self.role = current, target, role
        super().__init__(f"{role} cannot move a release from {current} to {target}")


STATUSES = {
    "submitted": {
        "label": "Submitted", "color": "bg-blue-100 text-blue-800", "priority": 1,
        "next_action": "Generate Draft",
        "client_label": "Submitted",
        "client_description": "Your request has been received and is being processed.",
        "email_note": "We'll email you when your draft is ready for review.",
    },
    "draft_generated": {
        "label": "Draft Generated", "color": "bg-purple-100 text-purple-800", "priority": 2,
        "next_action": "Run Panel Critique",
        "client_label": "Draft Generated",
        "client_description": "A draft has been generated. Our team is reviewing it.",
        "email_note": "We'll email you when it's ready for your review.",
    },
    "panel_reviewed": {
        "label": "Panel Reviewed", "color": "bg-indigo-100 text-indigo-800", "priority": 3,
        "next_action": "Send to Client",
        "client_label": "Panel Reviewed",
        "client_description": "Our journalist panel has reviewed the draft.",
        "email_note": "We'll email you when it's ready for your review.",
    },
    "admin_approved": {
        "label": "Admin Approved", "color": "bg-cyan-100 text-cyan-800", "priority": 4,
        "next_action": "Send to Client",
        "client_label": "Admin Approved",
        "client_description": "The draft has been approved by our team.",
        "email_note": "We'll email you when it's ready for your review.",
    },
    "awaiting_client": {
        "label": "Awaiting Client", "color": "bg-yellow-100 text-yellow-800", "priority": 5,
        "next_action": None,
        "client_label": "Awaiting Your Review",
        "client_description": "Please review the draft and provide feedback or approve it.",
        "email_note": None,
    },
    "client_feedback": {
        "label": "Client Feedback", "color": "bg-orange-100 text-orange-800", "priority": 6,
        "next_action": "Review Feedback",
        "client_label": "Feedback Received",
        "client_description": "We received your feedback and are making revisions.",
        "email_note": "We'll email you when the revised draft is ready.",
    },
    "client_approved": {
        "label": "Client Approved", "color": "bg-lime-100 text-lime-800", "priority": 7,
        "next_action": "Final Review",
        "client_label": "Approved",
        "client_description": "You have approved the release. Final review in progress.",
        "email_note": "We'll email you when your release is published.",
    },
    "final_pending": {
        "label": "Final Pending", "color": "bg-amber-100 text-amber-800", "priority": 8,
        "next_action": "Approve Final",
        "client_label": "Final Review",
        "client_description": "Final formatting and review in progress.",
        "email_note": "We'll email you when your release is published.",
    },
    "final_approved": {
        "label": "Final Approved", "color": "bg-emerald-100 text-emerald-800", "priority": 9,
        "next_action": "Quality Review",
        "client_label": "Final Approved",
        "client_description": "Final version approved. Preparing for publication.",
        "email_note": "We'll email you when your release is published.",
    },
    "quality_review": {
        "label": "Quality Review", "color": "bg-teal-100 text-teal-800", "priority": 10,
        "next_action": "Publish",
        "client_label": "Quality Review",
        "client_description": "Undergoing final quality review.",
        "email_note": "We'll email you when your release is published.",
    },
    "quality_approved": {
        "label": "Quality Approved", "color": "bg-green-100 text-green-800", "priority": 11,
        "next_action": "Publish",
        "client_label": "Quality Approved",
        "client_description": "Quality review passed. Ready for publication.",
        "email_note": "We'll email you when your release is published.",
    },
    "published": {
        "label": "Published", "color": "bg-green-100 text-green-800", "priority": 12,
        "next_action": None,
        "client_label": "Published",
        "client_description": "Your press release has been published!",
        "email_note": None,
    },
    "needs_revision": {
        "label": "Needs Revision", "color": "bg-red-100 text-red-800", "priority": 0,
        "next_action": "Revise Draft",
        "client_label": "Needs Revision",
        "client_description": "Revisions are being made based on feedback.",
        "email_note": "We'll email you when the revised draft is ready.",
    },
    "rejected": {
        "label": "Rejected", "color": "bg-red-100 text-red-800", "priority": 13,
        "next_action": None,
        "client_label": "Rejected",
        "client_description": "This request was rejected.",
        "email_note": None,
    },
}

DEFAULT_COLOR = "bg-gray-100 text-gray-800"
TERMINAL = {"published", "rejected"}
PUBLISHABLE = {"client_approved", "final_approved", "quality_review", "quality_approved"}
CLIENT_TARGETS = {"client_feedback", "client_approved"}

# Forward moves of the pipeline. needs_revision and rejected are reachable from
# every non-terminal status and are added in can_transition().
ALLOWED = {
    "submitted":        {"draft_generated"},
    "draft_generated":  {"draft_generated", "panel_reviewed"},
    "panel_reviewed":   {"draft_generated", "panel_reviewed", "admin_approved", "awaiting_client"},
    "admin_approved":   {"awaiting_client"},
    "awaiting_client":  {"client_feedback", "client_approved"},
    "client_feedback":  {"client_feedback", "draft_generated", "awaiting_client"},
    "needs_revision":   {"draft_generated", "awaiting_client"},
    "client_approved":  {"final_pending", "published"},
    "final_pending":    {"final_approved"},
    "final_approved":   {"quality_review", "published"},
    "quality_review":   {"quality_approved", "published"},
    "quality_approved": {"published"},
    "published":        set(),
    "rejected":         set(),
}


def status_info(status: str) -> dict:
    """Display entry for a status; unknown values render as submitted."""
    return STATUSES.get(status, STATUSES["submitted"])


def status_label(status: str) -> str:
    entry = STATUSES.get(status)
    return entry["label"] if entry else status


def status_color(status: str) -> str:
    entry = STATUSES.get(status)
    return entry["color"] if entry else DEFAULT_COLOR


def next_action(status: str) -> Optional[str]:
    return status_info(status)["next_action"]


def priority(status: str) -> int:
    return status_info(status)["priority"]


def client_view(status: str) -> dict:
    info = status_info(status)
    return {
        "status": status,
        "label": info["client_label"],
        "description": info["client_description"],
        "email_note": info["email_note"],
    }


def is_publishable(status: str) -> bool:
    return status in PUBLISHABLE


def can_transition(current: str, target: str, role: str = "admin") -> bool:
    if current not in STATUSES or target not in STATUSES:
        return False
    if current in TERMINAL:
        return False
    if role != "admin" and target not in CLIENT_TARGETS:
        return False
    if target in ("needs_revision", "rejected"):
        return role == "admin"
    return target in ALLOWED[current]


def transition(current: str, target: str, role: str = "admin") -> str:
    """Validate a move and return the new status, or raise InvalidTransition."""
    if not can_transition(current, target, role):
        log.info(f"Rejected transition {current} -> {target} ({role})")
        raise InvalidTransition(current, target, role)
    return target


def sort_queue(releases: list[dict]) -> list[dict]:
    """Admin queue order: priority ascending, newest first within a status."""
    by_newest = sorted(releases, key=lambda r: r.get("created_at") or 0, reverse=True)
    return sorted(by_newest, key=lambda r: priority(r.get("status")))
