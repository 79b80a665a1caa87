"""
Storage helpers: read/write PRBuild rows to SQLite.
Every function opens its own connection; there is no transaction spanning calls.
"""
import logging
import sqlite3
import time
import uuid
from typing import Optional

from prbuild.database import get_conn, encode_value, decode_row

log = logging.getLogger(__name__)


class DuplicateError(Exception):
    """A UNIQUE constraint rejected the insert."""


def _new_id() -> str:
    return str(uuid.uuid4())


def _insert(table: str, values: dict) -> str:
    values = dict(values)
    values.setdefault("id", _new_id())
    cols = list(values)
    params = [encode_value(table, c, values[c]) for c in cols]
    try:
        with get_conn() as conn:
            conn.execute(
                f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({', '.join('?' * len(cols))})",
                params,
            )
    except sqlite3.IntegrityError as e:
        if "UNIQUE" in str(e):
            raise DuplicateError(str(e)) from e
        raise
    return values["id"]


def _update(table: str, row_id: str, fields: dict, touch: bool = True) -> int:
    fields = dict(fields)
    if touch:
        fields["updated_at"] = time.time()
    if not fields:
        return 0
    sets, params = [], []
    for col, val in fields.items():
        sets.append(f"{col} = ?")
        params.append(encode_value(table, col, val))
    params.append(row_id)
    with get_conn() as conn:
        return conn.execute(f"UPDATE {table} SET {', '.join(sets)} WHERE id = ?", params).rowcount


def _fetch_one(table: str, sql: str, params=()) -> Optional[dict]:
    with get_conn() as conn:
        row = conn.execute(sql, params).fetchone()
    return decode_row(table, row) if row else None


def _fetch_all(table: str, sql: str, params=()) -> list[dict]:
    with get_conn() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [decode_row(table, r) for r in rows]


# ══════════════════════════════════════════════════════════════════
# PROFILES
# ══════════════════════════════════════════════════════════════════

PUBLIC_PROFILE_COLUMNS = (
    "id, email, full_name, company_name, company_website, role, is_free_user, "
    "free_releases_remaining, current_plan, subscription_status, created_at"
)


def create_profile(email: str, password_hash: str, full_name: str = None,
                   company_name: str = None, company_website: str = None,
                   role: str = "client") -> dict:
    now = time.time()
    profile_id = _insert("profiles", {
        "email": email.strip().lower(),
        "password_hash": password_hash,
        "full_name": full_name,
        "company_name": company_name,
        "company_website": company_website,
        "role": role,
        "created_at": now,
        "updated_at": now,
    })
    return get_profile(profile_id)


def get_profile(profile_id: str) -> Optional[dict]:
    return _fetch_one("profiles", "SELECT * FROM profiles WHERE id = ?", (profile_id,))


def get_profile_by_email(email: str) -> Optional[dict]:
    return _fetch_one("profiles", "SELECT * FROM profiles WHERE email = ?", (email.strip().lower(),))


def get_profile_by_stripe_customer(customer_id: str) -> Optional[dict]:
    return _fetch_one("profiles", "SELECT * FROM profiles WHERE stripe_customer_id = ?", (customer_id,))


def update_profile(profile_id: str, **fields) -> Optional[dict]:
    _update("profiles", profile_id, fields)
    return get_profile(profile_id)


def search_profiles(query: str, limit: int = 20) -> list[dict]:
    like = f"%{query.strip().lower()}%"
    return _fetch_all(
        "profiles",
        f"""SELECT {PUBLIC_PROFILE_COLUMNS} FROM profiles
            WHERE lower(email) LIKE ? OR lower(coalesce(full_name,'')) LIKE ?
               OR lower(coalesce(company_name,'')) LIKE ?
            ORDER BY created_at DESC LIMIT ?""",
        (like, like, like, limit),
    )


def list_free_users() -> list[dict]:
    return _fetch_all(
        "profiles",
        f"SELECT {PUBLIC_PROFILE_COLUMNS} FROM profiles WHERE is_free_user = 1 ORDER BY created_at DESC",
    )


def list_profiles(limit: int = 200) -> list[dict]:
    return _fetch_all(
        "profiles",
        f"SELECT {PUBLIC_PROFILE_COLUMNS} FROM profiles ORDER BY created_at DESC LIMIT ?",
        (limit,),
    )


def list_clients_since(since: float) -> list[dict]:
    """Client profiles created at or after `since`, with their release counts."""
    return _fetch_all(
        "profiles",
        """SELECT p.id, p.email, p.created_at, p.onboarding_email_sent_at,
                  (SELECT COUNT(*) FROM release_requests r WHERE r.client_id = p.id) AS release_count
           FROM profiles p WHERE p.role = 'client' AND p.created_at >= ?
           ORDER BY p.created_at""",
        (since,),
    )


# ══════════════════════════════════════════════════════════════════
# RELEASE REQUESTS
# ══════════════════════════════════════════════════════════════════

# Columns for list views; skips the large raw LLM payloads
RELEASE_LIST_COLUMNS = (
    "id, client_id, company_name, company_website, announcement_type, news_hook, industry, "
    "plan, amount_paid, status, ai_selected_headline, ai_subhead, created_at, updated_at, "
    "sent_to_client_at, published_at"
)


def create_release(client_id: str, values: dict) -> dict:
    now = time.time()
    row = dict(values)
    row.update({"client_id": client_id, "status": "submitted", "created_at": now, "updated_at": now})
    release_id = _insert("release_requests", row)
    return get_release(release_id)


def get_release(release_id: str) -> Optional[dict]:
    return _fetch_one("release_requests", "SELECT * FROM release_requests WHERE id = ?", (release_id,))


def list_releases(client_id: Optional[str] = None) -> list[dict]:
    if client_id:
        return _fetch_all(
            "release_requests",
            f"SELECT {RELEASE_LIST_COLUMNS} FROM release_requests WHERE client_id = ? ORDER BY created_at DESC",
            (client_id,),
        )
    return _fetch_all(
        "release_requests",
        f"SELECT {RELEASE_LIST_COLUMNS} FROM release_requests ORDER BY created_at DESC",
    )


def update_release(release_id: str, **fields) -> Optional[dict]:
    _update("release_requests", release_id, fields)
    return get_release(release_id)


# ── Activity log ──────────────────────────────────────────────────

def log_activity(release_id: Optional[str], user_id: Optional[str], action: str, details: dict = None):
    """Best-effort audit row; a failure here never breaks the calling workflow."""
    try:
        _insert("activity_log", {
            "release_request_id": release_id,
            "user_id": user_id,
            "action": action,
            "details": details or {},
            "created_at": time.time(),
        })
    except sqlite3.Error as e:
        log.warning(f"Failed to log activity {action} for {release_id}: {e}")


def list_activity(release_id: str) -> list[dict]:
    return _fetch_all(
        "activity_log",
        "SELECT * FROM activity_log WHERE release_request_id = ? ORDER BY created_at ASC",
        (release_id,),
    )


# ══════════════════════════════════════════════════════════════════
# PROMPT CONFIGS
# ══════════════════════════════════════════════════════════════════

def list_prompt_configs(active_only: bool = True) -> list[dict]:
    where = "WHERE is_active = 1" if active_only else ""
    return _fetch_all("prompt_configs", f"SELECT * FROM prompt_configs {where} ORDER BY prompt_key")


def get_prompt_config(prompt_key: str) -> Optional[dict]:
    return _fetch_one(
        "prompt_configs",
        "SELECT * FROM prompt_configs WHERE prompt_key = ? AND is_active = 1",
        (prompt_key,),
    )


def insert_prompt_config(prompt_key: str, prompt_name: str, prompt_description: str,
                         system_prompt: str, user_prompt_template: str) -> dict:
    now = time.time()
    _insert("prompt_configs", {
        "prompt_key": prompt_key,
        "prompt_name": prompt_name,
        "prompt_description": prompt_description,
        "system_prompt": system_prompt,
        "user_prompt_template": user_prompt_template,
        "is_active": True,
        "version": 1,
        "created_at": now,
        "updated_at": now,
    })
    return get_prompt_config(prompt_key)


def update_prompt_config(prompt_key: str, **fields) -> Optional[dict]:
    """Apply edits and bump the version by one."""
    current = get_prompt_config(prompt_key)
    if not current:
        return None
    fields["version"] = current["version"] + 1
    _update("prompt_configs", current["id"], fields)
    return get_prompt_config(prompt_key)


# ══════════════════════════════════════════════════════════════════
# JOURNALIST SUBSCRIBERS
# ══════════════════════════════════════════════════════════════════

def create_journalist(email: str, categories: list[str], name: str = None, outlet: str = None,
                      beat: str = None, frequency: str = "weekly") -> dict:
    sub_id = _insert("journalist_subscribers", {
        "email": email.strip().lower(),
        "name": name,
        "outlet": outlet,
        "beat": beat,
        "categories": categories,
        "frequency": frequency,
        "is_verified": False,
        "verification_token": str(uuid.uuid4()),
        "unsubscribe_token": str(uuid.uuid4()),
        "created_at": time.time(),
    })
    return _fetch_one("journalist_subscribers", "SELECT * FROM journalist_subscribers WHERE id = ?", (sub_id,))


def verify_journalist(token: str) -> Optional[dict]:
    sub = _fetch_one(
        "journalist_subscribers",
        "SELECT * FROM journalist_subscribers WHERE verification_token = ?",
        (token,),
    )
    if not sub:
        return None
    _update("journalist_subscribers", sub["id"], {"is_verified": True, "verification_token": None}, touch=False)
    sub.update(is_verified=True, verification_token=None)
    return sub


def delete_journalist_by_token(unsubscribe_token: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM journalist_subscribers WHERE unsubscribe_token = ?", (unsubscribe_token,))
        return cur.rowcount > 0


def list_journalists(verified_only: bool = False, category: Optional[str] = None, limit: int = 500) -> list[dict]:
    where = "WHERE is_verified = 1" if verified_only else ""
    rows = _fetch_all(
        "journalist_subscribers",
        f"SELECT * FROM journalist_subscribers {where} ORDER BY created_at DESC LIMIT ?",
        (limit,),
    )
    if category:
        rows = [r for r in rows if category in (r.get("categories") or [])]
    return rows


# ══════════════════════════════════════════════════════════════════
# SHOWCASE
# ══════════════════════════════════════════════════════════════════

def get_showcase_for_release(release_id: str) -> Optional[dict]:
    return _fetch_one(
        "showcase_releases",
        "SELECT * FROM showcase_releases WHERE release_request_id = ?",
        (release_id,),
    )


def create_showcase(values: dict) -> dict:
    row = dict(values)
    row.setdefault("created_at", time.time())
    showcase_id = _insert("showcase_releases", row)
    return get_showcase(showcase_id)


def get_showcase(showcase_id: str) -> Optional[dict]:
    return _fetch_one("showcase_releases", "SELECT * FROM showcase_releases WHERE id = ?", (showcase_id,))


def list_showcase(category: Optional[str] = None, limit: int = 50) -> list[dict]:
    if category:
        return _fetch_all(
            "showcase_releases",
            "SELECT * FROM showcase_releases WHERE category = ? ORDER BY published_at DESC LIMIT ?",
            (category, limit),
        )
    return _fetch_all(
        "showcase_releases",
        "SELECT * FROM showcase_releases ORDER BY published_at DESC LIMIT ?",
        (limit,),
    )


def increment_showcase_counter(showcase_id: str, column: str = "view_count"):
    if column not in ("view_count", "share_count", "journalist_clicks"):
        raise ValueError(f"Unknown counter {column}")
    with get_conn() as conn:
        conn.execute(f"UPDATE showcase_releases SET {column} = {column} + 1 WHERE id = ?", (showcase_id,))


# ══════════════════════════════════════════════════════════════════
# NEWSLETTER SENDS
# ══════════════════════════════════════════════════════════════════

def create_newsletter_send(subject: str, category: Optional[str], release_ids: list[str],
                           recipient_count: int, sent_count: int, failed_count: int) -> dict:
    send_id = _insert("newsletter_sends", {
        "subject": subject,
        "category": category,
        "release_ids": release_ids or None,
        "recipient_count": recipient_count,
        "sent_count": sent_count,
        "failed_count": failed_count,
        "sent_at": time.time(),
    })
    return _fetch_one("newsletter_sends", "SELECT * FROM newsletter_sends WHERE id = ?", (send_id,))


def list_newsletter_sends() -> list[dict]:
    return _fetch_all("newsletter_sends", "SELECT * FROM newsletter_sends ORDER BY sent_at DESC")


# ══════════════════════════════════════════════════════════════════
# FEATURE REQUESTS + VOTES
# ══════════════════════════════════════════════════════════════════

def create_feature_request(title: str, description: str, user_id: str) -> dict:
    """Insert a feature request with the submitter's own vote already counted."""
    now = time.time()
    feature_id = _insert("feature_requests", {
        "title": title.strip(),
        "description": description.strip(),
        "submitted_by": user_id,
        "status": "pending",
        "vote_count": 1,
        "created_at": now,
        "updated_at": now,
    })
    _insert("feature_votes", {"feature_request_id": feature_id, "user_id": user_id, "created_at": now})
    return get_feature_request(feature_id)


def get_feature_request(feature_id: str) -> Optional[dict]:
    return _fetch_one("feature_requests", "SELECT * FROM feature_requests WHERE id = ?", (feature_id,))


def list_feature_requests(user_id: Optional[str] = None) -> list[dict]:
    rows = _fetch_all(
        "feature_requests",
        "SELECT * FROM feature_requests ORDER BY vote_count DESC, created_at DESC",
    )
    if user_id:
        with get_conn() as conn:
            voted = {
                r["feature_request_id"]
                for r in conn.execute("SELECT feature_request_id FROM feature_votes WHERE user_id = ?", (user_id,))
            }
        for r in rows:
            r["user_voted"] = r["id"] in voted
    return rows


def toggle_feature_vote(feature_id: str, user_id: str) -> Optional[dict]:
    """Add the user's vote, or remove it if already present. Returns the updated request."""
    with get_conn() as conn:
        existing = conn.execute(
            "SELECT id FROM feature_votes WHERE feature_request_id = ? AND user_id = ?",
            (feature_id, user_id),
        ).fetchone()
        if existing:
            conn.execute("DELETE FROM feature_votes WHERE id = ?", (existing["id"],))
            conn.execute(
                "UPDATE feature_requests SET vote_count = MAX(vote_count - 1, 0), updated_at = ? WHERE id = ?",
                (time.time(), feature_id),
            )
        else:
            conn.execute(
                "INSERT INTO feature_votes (id, feature_request_id, user_id, created_at) VALUES (?,?,?,?)",
                (_new_id(), feature_id, user_id, time.time()),
            )
            conn.execute(
                "UPDATE feature_requests SET vote_count = vote_count + 1, updated_at = ? WHERE id = ?",
                (time.time(), feature_id),
            )
    feature = get_feature_request(feature_id)
    if feature:
        feature["user_voted"] = not existing
    return feature


def list_feature_voters(feature_id: str) -> list[dict]:
    return _fetch_all(
        "profiles",
        """SELECT p.id, p.email, p.full_name FROM feature_votes v
           JOIN profiles p ON p.id = v.user_id WHERE v.feature_request_id = ?""",
        (feature_id,),
    )


def update_feature_request(feature_id: str, **fields) -> Optional[dict]:
    if fields.get("status") == "completed":
        fields["completed_at"] = time.time()
    _update("feature_requests", feature_id, fields)
    return get_feature_request(feature_id)


# ══════════════════════════════════════════════════════════════════
# EMAIL LEADS
# ══════════════════════════════════════════════════════════════════

def upsert_lead(email: str, lead_source: str, name: str = None, company_name: str = None,
                quiz_score: int = None, quiz_answers: dict = None) -> dict:
    email = email.strip().lower()
    now = time.time()
    existing = _fetch_one("email_leads", "SELECT * FROM email_leads WHERE email = ?", (email,))
    fields = {
        "name": name,
        "company_name": company_name,
        "lead_source": lead_source,
        "quiz_score": quiz_score,
        "quiz_answers": quiz_answers,
        "subscribed_teardown": True,
    }
    if existing:
        _update("email_leads", existing["id"], fields)
    else:
        _insert("email_leads", {
            "email": email,
            "unsubscribe_token": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
            **fields,
        })
    return _fetch_one("email_leads", "SELECT * FROM email_leads WHERE email = ?", (email,))


def list_leads(limit: int = 500) -> list[dict]:
    return _fetch_all(
        "email_leads",
        """SELECT id, email, name, company_name, lead_source, quiz_score, subscribed_teardown, created_at
           FROM email_leads ORDER BY created_at DESC LIMIT ?""",
        (limit,),
    )


def unsubscribe_lead(unsubscribe_token: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute(
            "UPDATE email_leads SET subscribed_teardown = 0, updated_at = ? WHERE unsubscribe_token = ?",
            (time.time(), unsubscribe_token),
        )
        return cur.rowcount > 0


def list_teardown_leads() -> list[dict]:
    return _fetch_all(
        "email_leads",
        "SELECT email, unsubscribe_token FROM email_leads WHERE subscribed_teardown = 1 ORDER BY created_at",
    )


# ── Teardown sends ────────────────────────────────────────────────

def create_teardown_send(subject: str, pr_company: str, pr_headline: str,
                         teardown_content: str, recipient_count: int) -> dict:
    send_id = _insert("teardown_sends", {
        "subject": subject,
        "pr_company": pr_company,
        "pr_headline": pr_headline,
        "teardown_content": teardown_content,
        "recipient_count": recipient_count,
        "sent_at": time.time(),
    })
    return _fetch_one("teardown_sends", "SELECT * FROM teardown_sends WHERE id = ?", (send_id,))


def list_teardown_sends(limit: int = 50) -> list[dict]:
    return _fetch_all("teardown_sends", "SELECT * FROM teardown_sends ORDER BY sent_at DESC LIMIT ?", (limit,))


# ══════════════════════════════════════════════════════════════════
# INVITES
# ══════════════════════════════════════════════════════════════════

def create_invite(email: str, token: str, free_releases_remaining: int = 3,
                  approved: bool = False) -> dict:
    now = time.time()
    invite_id = _insert("invites", {
        "email": email.strip().lower(),
        "token": token,
        "free_releases_remaining": free_releases_remaining,
        "approved_at": now if approved else None,
        "created_at": now,
    })
    return get_invite(invite_id)


def get_invite(invite_id: str) -> Optional[dict]:
    return _fetch_one("invites", "SELECT * FROM invites WHERE id = ?", (invite_id,))


def get_open_invite_by_token(token: str) -> Optional[dict]:
    """An invite that has not been used yet, approved or not."""
    return _fetch_one("invites", "SELECT * FROM invites WHERE token = ? AND used_at IS NULL", (token,))


def get_open_invite_by_email(email: str) -> Optional[dict]:
    return _fetch_one(
        "invites",
        "SELECT * FROM invites WHERE email = ? AND used_at IS NULL",
        (email.strip().lower(),),
    )


def list_pending_invites() -> list[dict]:
    return _fetch_all(
        "invites",
        """SELECT id, email, free_releases_remaining, created_at FROM invites
           WHERE approved_at IS NULL AND used_at IS NULL ORDER BY created_at DESC""",
    )


def update_invite(invite_id: str, **fields) -> Optional[dict]:
    _update("invites", invite_id, fields, touch=False)
    return get_invite(invite_id)
