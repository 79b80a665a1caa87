"""
PRBuild: settings read from the environment (.env supported).
"""
import os
import secrets

from dotenv import load_dotenv

load_dotenv()

APP_NAME = "PRBuild"
APP_URL  = os.getenv("APP_URL", "http://localhost:8004").rstrip("/")
PORT     = int(os.getenv("PORT", "8004"))

DB_PATH = os.getenv(
    "PRBUILD_DB_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "prbuild.db"),
)

# ── LLM ───────────────────────────────────────────────────────────
LLM_MODEL        = os.getenv("LLM_MODEL", "gpt-4o")
PROMPT_CACHE_TTL = float(os.getenv("PROMPT_CACHE_TTL", "60"))

# ── Auth ──────────────────────────────────────────────────────────
JWT_SECRET               = os.getenv("PRBUILD_JWT_SECRET") or secrets.token_urlsafe(32)
CRON_SECRET              = os.getenv("CRON_SECRET", "")
JWT_ALGORITHM            = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 480

# ── Email (SMTP) ──────────────────────────────────────────────────
EMAIL_FROM     = os.getenv("EMAIL_FROM", "")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD", "")
SMTP_HOST      = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT      = int(os.getenv("SMTP_PORT", "587"))

# ── Stripe ────────────────────────────────────────────────────────
STRIPE_SECRET_KEY     = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")

# Price ids per plan and interval, e.g. STRIPE_GROWTH_YEARLY
STRIPE_PRICE_IDS = {
    plan: {
        interval: os.getenv(f"STRIPE_{plan.upper()}_{interval.upper()}", "")
        for interval in ("monthly", "yearly")
    }
    for plan in ("starter", "growth", "pro")
}
