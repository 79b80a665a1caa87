"""
PRBuild accounts: signup/login, admin user tools, invites, feature requests.
"""
import logging
import secrets
import time

from fastapi import HTTPException

from prbuild import auth
from prbuild import config
from prbuild import storage

log = logging.getLogger(__name__)

FEATURE_STATUSES = ("pending", "under_review", "planned", "in_progress", "completed", "declined")
MIN_PASSWORD_LENGTH = 8


def signup(email: str, password: str, **fields) -> dict:
    email = (email or "").strip().lower()
    if "@" not in email:
        raise HTTPException(400, "Valid email is required")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    try:
        profile = storage.create_profile(email, auth.hash_password(password), **fields)
    except storage.DuplicateError:
        raise HTTPException(409, "An account with this email already exists")
    log.info(f"New account {email}")
    return _session(profile)


def login(email: str, password: str) -> dict:
    profile = auth.authenticate(email or "", password or "")
    if not profile:
        raise HTTPException(401, "Invalid email or password")
    return _session(profile)


def _session(profile: dict) -> dict:
    return {
        "access_token": auth.create_access_token(profile["id"], profile["role"]),
        "token_type": "bearer",
        "user": auth.public_profile(profile),
    }


# ── Free access ──────────────────────────────────

def grant_free(user_id: str, releases: int = 3, unlimited: bool = False) -> dict:
    """Mark a user free. `unlimited` stores -1; otherwise at least one release."""
    user_id = (user_id or "").strip()
    if not user_id:
        raise HTTPException(400, "user_id required")
    if not storage.get_profile(user_id):
        raise HTTPException(404, "User not found")
    credits = -1 if unlimited else (3 if releases is None else max(1, releases))
    profile = storage.update_profile(user_id, is_free_user=True, free_releases_remaining=credits)
    log.info(f"Granted free access to {profile['email']} ({credits})")
    return auth.public_profile(profile)


def update_free(user_id: str, action: str = "update", remaining: int = 0, unlimited: bool = False) -> dict:
    if not storage.get_profile(user_id):
        raise HTTPException(404, "User not found")
    if action == "remove":
        profile = storage.update_profile(user_id, is_free_user=False, free_releases_remaining=0)
    else:
        credits = -1 if unlimited else max(0, remaining or 0)
        profile = storage.update_profile(user_id, free_releases_remaining=credits)
    return auth.public_profile(profile)


# ── Feature requests ─────────────────────────────

def submit_feature(user: dict, title: str, description: str) -> dict:
    if not (title or "").strip():
        raise HTTPException(400, "Title is required")
    feature = storage.create_feature_request(title, description or "", user["id"])
    feature["user_voted"] = True
    return feature


def toggle_vote(feature_id: str, user: dict) -> dict:
    if not storage.get_feature_request(feature_id):
        raise HTTPException(404, "Feature request not found")
    return storage.toggle_feature_vote(feature_id, user["id"])


def update_feature(feature_id: str, status: str = None, admin_response: str = None) -> dict:
    if not storage.get_feature_request(feature_id):
        raise HTTPException(404, "Feature request not found")
    fields = {}
    if status is not None:
        if status not in FEATURE_STATUSES:
            raise HTTPException(400, f"Unknown status {status}")
        fields["status"] = status
    if admin_response is not None:
        fields["admin_response"] = admin_response
    if not fields:
        raise HTTPException(400, "No valid fields to update")
    return storage.update_feature_request(feature_id, **fields)


# ── Invites ──────────────────────────────────────
# A request creates an unapproved invite; an admin approves it (or creates one
# pre-approved) and shares the set-password link. Setting the password creates
# the account with the invite's free credits and marks the invite used.

def _set_password_link(token: str) -> str:
    return f"{config.APP_URL}/set-password?token={token}"


def request_invite(email: str) -> dict:
    email = (email or "").strip().lower()
    if not email:
        raise HTTPException(400, "Email is required")
    if storage.get_open_invite_by_email(email):
        raise HTTPException(400, "A request for this email is already pending or approved.")
    storage.create_invite(email, secrets.token_hex(24))
    log.info(f"Invite requested by {email}")
    return {
        "success": True,
        "message": "Request submitted. You can sign in once an admin approves your request.",
    }


def create_invite(email: str, releases: int = None, unlimited: bool = False) -> dict:
    email = (email or "").strip().lower()
    if not email:
        raise HTTPException(400, "Email is required")
    credits = -1 if unlimited else (3 if releases is None else max(1, releases))
    invite = storage.create_invite(email, secrets.token_hex(24), credits, approved=True)
    return {
        "success": True,
        "message": f"Added {email}. Share the set-password link with them so they can create an account and sign in.",
        "set_password_link": _set_password_link(invite["token"]),
    }


def approve_invite(invite_id: str) -> dict:
    invite = storage.get_invite((invite_id or "").strip())
    if not invite or invite["approved_at"] or invite["used_at"]:
        raise HTTPException(400, "Invite not found or already approved/used")
    storage.update_invite(invite["id"], approved_at=time.time())
    log.info(f"Invite approved for {invite['email']}")
    return {
        "success": True,
        "message": f"Approved. Share this link with {invite['email']} so they can set their password and sign in.",
        "set_password_link": _set_password_link(invite["token"]),
    }


def lookup_invite(token: str) -> dict:
    invite = storage.get_open_invite_by_token(token) if token else None
    if not invite or not invite["approved_at"]:
        raise HTTPException(404, "Invalid, expired, or not yet approved")
    return {"email": invite["email"], "free_releases_remaining": invite["free_releases_remaining"]}


def set_password(token: str, password: str) -> dict:
    token, password = (token or "").strip(), (password or "").strip()
    if not token or not password:
        raise HTTPException(400, "Token and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    invite = storage.get_open_invite_by_token(token)
    if not invite:
        raise HTTPException(400, "Invalid or already used link")
    if not invite["approved_at"]:
        raise HTTPException(400, "Your request is still pending approval. "
                                 "You can set your password once an admin approves it.")
    try:
        profile = storage.create_profile(invite["email"], auth.hash_password(password))
    except storage.DuplicateError:
        raise HTTPException(400, "An account with this email already exists. Sign in instead.")
    storage.update_profile(profile["id"], is_free_user=True,
                           free_releases_remaining=invite["free_releases_remaining"])
    storage.update_invite(invite["id"], used_at=time.time())
    log.info(f"Invite used by {invite['email']}")
    return {"success": True, "message": "Account created. You can sign in now."}


def accept_invite(user: dict, token: str) -> dict:
    """Apply an invite to an account that already exists."""
    token = (token or "").strip()
    if not token:
        raise HTTPException(400, "Token required")
    invite = storage.get_open_invite_by_token(token)
    if not invite or not invite["approved_at"]:
        raise HTTPException(400, "Invalid or already used invite")
    if invite["email"] != user["email"].strip().lower():
        raise HTTPException(400, "Invite email does not match your account")
    storage.update_profile(user["id"], is_free_user=True,
                           free_releases_remaining=invite["free_releases_remaining"])
    storage.update_invite(invite["id"], used_at=time.time())
    return {"success": True}
