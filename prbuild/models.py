"""
PRBuild: Pydantic request models
"""
from pydantic import BaseModel
from typing import Optional, List, Any


# ── Accounts ─────────────────────────────────────────────────────

class SignupRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    company_website: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


# ── Release requests ─────────────────────────────────────────────

class QuoteSource(BaseModel):
    name: str
    title: str = ""
    quote: Optional[str] = None


class ReleaseCreate(BaseModel):
    company_name: str
    company_website: str = ""
    announcement_type: str = "other"     # product_launch | funding | partnership | event | award | hire | milestone | other
    news_hook: str
    dateline_city: str = ""
    release_date: Optional[str] = None   # YYYY-MM-DD
    core_facts: List[str] = []
    quote_sources: List[QuoteSource] = []
    boilerplate: Optional[str] = None
    company_facts: Optional[str] = None
    media_contact_name: str = ""
    media_contact_title: Optional[str] = None
    media_contact_email: str = ""
    media_contact_phone: Optional[str] = None
    visuals_description: Optional[str] = None
    desired_cta: str = ""
    supporting_context: Optional[str] = None
    industry: Optional[str] = None       # healthcare | technology | finance | retail | general
    plan: str = "starter"
    stripe_payment_id: Optional[str] = None


class FeedbackRequest(BaseModel):
    feedback: str


class StatusUpdate(BaseModel):
    status: str
    note: Optional[str] = None


# ── Prompts ──────────────────────────────────────────────────────

class PromptUpdate(BaseModel):
    prompt_name: Optional[str] = None
    prompt_description: Optional[str] = None
    system_prompt: Optional[str] = None
    user_prompt_template: Optional[str] = None


# ── Distribution ─────────────────────────────────────────────────

class JournalistSubscribe(BaseModel):
    email: str = ""
    name: Optional[str] = None
    outlet: Optional[str] = None
    beat: Optional[str] = None
    categories: List[str] = []
    frequency: Optional[str] = None      # immediate | daily | weekly


class NewsletterSend(BaseModel):
    subject: str = ""
    category: Optional[str] = None


class LeadCapture(BaseModel):
    email: str = ""
    lead_source: str = ""                # quiz | checklist | teardown_signup
    name: Optional[str] = None
    company_name: Optional[str] = None
    quiz_score: Optional[int] = None
    quiz_answers: Optional[dict[str, Any]] = None


class TeardownSend(BaseModel):
    subject: str = ""
    pr_company: str = ""
    pr_headline: str = ""
    teardown_content: str = ""


# ── Admin ────────────────────────────────────────────────────────

class GrantFree(BaseModel):
    user_id: str
    releases: Optional[int] = 3
    unlimited: bool = False


class FreeCreditsUpdate(BaseModel):
    user_id: str
    action: str = "update"               # update | remove
    free_releases_remaining: int = 0
    unlimited: bool = False


class InviteRequest(BaseModel):
    email: str = ""


class InviteCreate(BaseModel):
    email: str = ""
    free_releases: Optional[int] = 3
    unlimited: bool = False


class InviteApprove(BaseModel):
    id: str = ""


class SetPassword(BaseModel):
    token: str = ""
    password: str = ""


class InviteAccept(BaseModel):
    token: str = ""


class FeatureRequestCreate(BaseModel):
    title: str
    description: str = ""


class FeatureRequestUpdate(BaseModel):
    status: Optional[str] = None         # pending | under_review | planned | in_progress | completed | declined
    admin_response: Optional[str] = None


# ── Billing ──────────────────────────────────────────────────────

class CheckoutRequest(BaseModel):
    plan: str
    interval: str = "monthly"
