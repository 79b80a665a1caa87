"""
PRBuild: SQLite database setup.
All schema lives here. No ORM, plain sqlite3.
Tables: profiles, release_requests, activity_log, prompt_configs,
        journalist_subscribers, showcase_releases, newsletter_sends,
        feature_requests, feature_votes, email_leads, teardown_sends, invites
"""
import json
import logging
import sqlite3
from contextlib import contextmanager

from prbuild import config

log = logging.getLogger(__name__)

DB_PATH = config.DB_PATH

# Columns stored as JSON text, decoded on read
JSON_COLUMNS = {
    "profiles":               {"onboarding_email_sent_at"},
    "release_requests": {
        "core_facts", "quote_sources", "ai_draft_raw", "ai_headline_options",
        "ai_visuals_suggestions", "ai_distribution_checklist", "panel_critique_raw",
        "panel_individual_feedback", "panel_contrarian_recommendation", "tags",
    },
    "activity_log":           {"details"},
    "journalist_subscribers": {"categories"},
    "showcase_releases":      {"tags"},
    "newsletter_sends":       {"release_ids"},
    "email_leads":            {"quiz_answers"},
}

# Integer flags returned to callers as bools
BOOL_COLUMNS = {
    "profiles":               {"is_free_user"},
    "release_requests":       {"rewrite_used"},
    "prompt_configs":         {"is_active"},
    "journalist_subscribers": {"is_verified"},
    "email_leads":            {"subscribed_teardown"},
}


def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


@contextmanager
def get_conn():
    """Commits on success and always closes the connection."""
    conn = _connect()
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def encode_value(table: str, column: str, value):
    if column in JSON_COLUMNS.get(table, ()) and value is not None:
        return json.dumps(value)
    if isinstance(value, bool):
        return int(value)
    return value


def decode_row(table: str, row) -> dict:
    d = dict(row)
    for col in JSON_COLUMNS.get(table, ()):
        if col in d and d[col] is not None:
            d[col] = json.loads(d[col])
    for col in BOOL_COLUMNS.get(table, ()):
        if col in d and d[col] is not None:
            d[col] = bool(d[col])
    return d


def init_db():
    """Create tables if they don't exist. Called once on app startup."""
    with get_conn() as conn:
        conn.executescript("""
        CREATE TABLE IF NOT EXISTS profiles (
            id                      TEXT PRIMARY KEY,
            email                   TEXT NOT NULL UNIQUE,
            password_hash           TEXT NOT NULL,
            full_name               TEXT,
            company_name            TEXT,
            company_website         TEXT,
            role                    TEXT NOT NULL DEFAULT 'client',
                                    -- client | admin | journalist_reviewer
            stripe_customer_id      TEXT,
            stripe_subscription_id  TEXT,
            subscription_status     TEXT,
            current_plan            TEXT,
            billing_interval        TEXT,
            is_free_user            INTEGER NOT NULL DEFAULT 0,
            free_releases_remaining INTEGER NOT NULL DEFAULT 0,   -- -1 = unlimited
            onboarding_email_sent_at TEXT,                        -- {"welcome": ts, "tips": ts, "nudge": ts}
            onboarding_dismissed_at REAL,
            created_at              REAL NOT NULL,
            updated_at              REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS release_requests (
            id                   TEXT PRIMARY KEY,
            client_id            TEXT NOT NULL REFERENCES profiles(id),

            company_name         TEXT NOT NULL,
            company_website      TEXT NOT NULL DEFAULT '',
            announcement_type    TEXT NOT NULL DEFAULT 'other',
            news_hook            TEXT NOT NULL,
            dateline_city        TEXT NOT NULL DEFAULT '',
            release_date         TEXT,                 -- YYYY-MM-DD
            core_facts           TEXT NOT NULL DEFAULT '[]',
            quote_sources        TEXT,
            boilerplate          TEXT,
            company_facts        TEXT,
            media_contact_name   TEXT NOT NULL DEFAULT '',
            media_contact_title  TEXT,
            media_contact_email  TEXT NOT NULL DEFAULT '',
            media_contact_phone  TEXT,
            visuals_description  TEXT,
            desired_cta          TEXT NOT NULL DEFAULT '',
            supporting_context   TEXT,

            plan                 TEXT NOT NULL DEFAULT 'starter',
            amount_paid          INTEGER NOT NULL DEFAULT 0,   -- cents
            stripe_payment_id    TEXT,

            ai_draft_raw              TEXT,
            ai_headline_options       TEXT,
            ai_selected_headline      TEXT,
            ai_subhead                TEXT,
            ai_draft_content          TEXT,
            ai_visuals_suggestions    TEXT,
            ai_distribution_checklist TEXT,
            ai_generated_at           REAL,

            panel_critique_raw              TEXT,
            panel_individual_feedback       TEXT,
            panel_synthesis                 TEXT,
            panel_contrarian_recommendation TEXT,
            panel_reviewed_at               REAL,

            admin_refined_content   TEXT,
            pending_rewrite_content TEXT,
            rewrite_used            INTEGER NOT NULL DEFAULT 0,
            client_edited_content   TEXT,
            admin_notes             TEXT,
            admin_reviewed_by       TEXT,
            admin_reviewed_at       REAL,

            client_feedback      TEXT,
            client_feedback_at   REAL,

            final_content        TEXT,
            final_approved_at    REAL,

            quality_score        INTEGER,
            quality_notes        TEXT,
            quality_reviewed_by  TEXT,
            quality_reviewed_at  REAL,

            category             TEXT,
            tags                 TEXT,
            industry             TEXT,

            status               TEXT NOT NULL DEFAULT 'submitted',

            created_at           REAL NOT NULL,
            updated_at           REAL NOT NULL,
            sent_to_client_at    REAL,
            published_at         REAL
        );

        CREATE TABLE IF NOT EXISTS activity_log (
            id                  TEXT PRIMARY KEY,
            release_request_id  TEXT REFERENCES release_requests(id) ON DELETE CASCADE,
            user_id             TEXT,
            action              TEXT NOT NULL,
            details             TEXT,
            created_at          REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS prompt_configs (
            id                    TEXT PRIMARY KEY,
            prompt_key            TEXT NOT NULL UNIQUE,
            prompt_name           TEXT NOT NULL DEFAULT '',
            prompt_description    TEXT NOT NULL DEFAULT '',
            system_prompt         TEXT NOT NULL,
            user_prompt_template  TEXT NOT NULL,
            is_active             INTEGER NOT NULL DEFAULT 1,
            version               INTEGER NOT NULL DEFAULT 1,
            created_at            REAL NOT NULL,
            updated_at            REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS journalist_subscribers (
            id                  TEXT PRIMARY KEY,
            email               TEXT NOT NULL UNIQUE,
            name                TEXT,
            outlet              TEXT,
            beat                TEXT,
            categories          TEXT NOT NULL DEFAULT '[]',
            frequency           TEXT NOT NULL DEFAULT 'weekly',  -- immediate | daily | weekly
            is_verified         INTEGER NOT NULL DEFAULT 0,
            verification_token  TEXT,
            unsubscribe_token   TEXT NOT NULL,
            created_at          REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS showcase_releases (
            id                  TEXT PRIMARY KEY,
            release_request_id  TEXT NOT NULL UNIQUE REFERENCES release_requests(id),
            headline            TEXT NOT NULL,
            subhead             TEXT,
            company_name        TEXT NOT NULL,
            summary             TEXT NOT NULL DEFAULT '',
            full_content        TEXT NOT NULL DEFAULT '',
            category            TEXT NOT NULL DEFAULT 'Other',
            industry            TEXT,
            tags                TEXT,
            contact_name        TEXT,
            contact_email       TEXT,
            contact_phone       TEXT,
            view_count          INTEGER NOT NULL DEFAULT 0,
            share_count         INTEGER NOT NULL DEFAULT 0,
            journalist_clicks   INTEGER NOT NULL DEFAULT 0,
            published_at        REAL NOT NULL,
            created_at          REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS newsletter_sends (
            id               TEXT PRIMARY KEY,
            subject          TEXT NOT NULL,
            category         TEXT,
            release_ids      TEXT,
            recipient_count  INTEGER NOT NULL DEFAULT 0,
            sent_count       INTEGER NOT NULL DEFAULT 0,
            failed_count     INTEGER NOT NULL DEFAULT 0,
            sent_at          REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS feature_requests (
            id              TEXT PRIMARY KEY,
            title           TEXT NOT NULL,
            description     TEXT NOT NULL DEFAULT '',
            submitted_by    TEXT REFERENCES profiles(id),
            status          TEXT NOT NULL DEFAULT 'pending',
                            -- pending | under_review | planned | in_progress | completed | declined
            vote_count      INTEGER NOT NULL DEFAULT 0,
            admin_response  TEXT,
            completed_at    REAL,
            created_at      REAL NOT NULL,
            updated_at      REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS feature_votes (
            id                  TEXT PRIMARY KEY,
            feature_request_id  TEXT NOT NULL REFERENCES feature_requests(id) ON DELETE CASCADE,
            user_id             TEXT NOT NULL,
            created_at          REAL NOT NULL,
            UNIQUE(feature_request_id, user_id)
        );

        CREATE TABLE IF NOT EXISTS email_leads (
            id                   TEXT PRIMARY KEY,
            email                TEXT NOT NULL UNIQUE,
            name                 TEXT,
            company_name         TEXT,
            lead_source          TEXT NOT NULL,   -- quiz | checklist | teardown_signup
            quiz_score           INTEGER,
            quiz_answers         TEXT,
            subscribed_teardown  INTEGER NOT NULL DEFAULT 1,
            unsubscribe_token    TEXT NOT NULL,
            created_at           REAL NOT NULL,
            updated_at           REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS teardown_sends (
            id               TEXT PRIMARY KEY,
            subject          TEXT NOT NULL,
            pr_company       TEXT NOT NULL,
            pr_headline      TEXT NOT NULL,
            teardown_content TEXT NOT NULL,
            recipient_count  INTEGER NOT NULL DEFAULT 0,
            sent_at          REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS invites (
            id                      TEXT PRIMARY KEY,
            email                   TEXT NOT NULL,
            token                   TEXT NOT NULL UNIQUE,
            free_releases_remaining INTEGER NOT NULL DEFAULT 3,   -- -1 = unlimited
            approved_at             REAL,                         -- NULL = waiting for an admin
            used_at                 REAL,
            created_at              REAL NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_releases_client  ON release_requests(client_id);
        CREATE INDEX IF NOT EXISTS idx_releases_status  ON release_requests(status);
        CREATE INDEX IF NOT EXISTS idx_activity_release ON activity_log(release_request_id);
        CREATE INDEX IF NOT EXISTS idx_showcase_cat     ON showcase_releases(category);
        CREATE INDEX IF NOT EXISTS idx_invites_email    ON invites(email);
        """)
    log.info("Database initialized at %s", DB_PATH)
