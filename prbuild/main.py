"""
PRBuild: press releases written, panel-reviewed and sent to journalists
FastAPI app on port 8004
"""
import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from prbuild import accounts
from prbuild import billing
from prbuild import config
from prbuild import content
from prbuild import database as db
from prbuild import distribution
from prbuild import onboarding
from prbuild import prompts
from prbuild import rate_limit
from prbuild import statuses
from prbuild import storage
from prbuild import workflow
from prbuild.auth import get_current_user, require_admin, require_cron, public_profile
from prbuild.models import (
    SignupRequest, LoginRequest,
    ReleaseCreate, FeedbackRequest, StatusUpdate,
    PromptUpdate,
    JournalistSubscribe, NewsletterSend, LeadCapture, TeardownSend,
    GrantFree, FreeCreditsUpdate, FeatureRequestCreate, FeatureRequestUpdate,
    InviteRequest, InviteCreate, InviteApprove, SetPassword, InviteAccept,
    CheckoutRequest,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s  %(name)s  %(message)s")
log = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
STATIC_DIR = os.path.join(BASE_DIR, "static")
templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))
templates.env.globals.update(app_name=config.APP_NAME, app_url=config.APP_URL)

app = FastAPI(title="PRBuild: Press Release Service", version="1.0.0")


# ── Startup ───────────────────────────────────────────────────────
@app.on_event("startup")
def startup():
    db.init_db()
    log.info(f"{config.APP_NAME} ready, database at {db.DB_PATH}")


app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


def page(request: Request, template: str, **context):
    return templates.TemplateResponse(request, template, context)


# ══════════════════════════════════════════════════════════════════
# HTML page routes
# ══════════════════════════════════════════════════════════════════

@app.get("/", response_class=HTMLResponse)
def landing(request: Request):
    return page(request, "landing.html", pricing=billing.PRICING, faq=content.FAQ_ITEMS[:3],
                showcase=storage.list_showcase(limit=3))

@app.get("/pricing", response_class=HTMLResponse)
def pricing_page(request: Request):
    return page(request, "pricing.html", pricing=billing.PRICING)

@app.get("/faq", response_class=HTMLResponse)
def faq_page(request: Request):
    return page(request, "faq.html", faq=content.FAQ_ITEMS)

@app.get("/compare", response_class=HTMLResponse)
def compare_index(request: Request):
    return page(request, "compare_index.html", competitors=content.COMPETITORS)

@app.get("/compare/{slug}", response_class=HTMLResponse)
def compare_detail(request: Request, slug: str):
    competitor = content.COMPETITORS.get(slug)
    if not competitor:
        raise HTTPException(404, "Comparison not found")
    return page(request, "compare.html", competitor=competitor)

@app.get("/for/{slug}", response_class=HTMLResponse)
def industry_page(request: Request, slug: str):
    industry = content.INDUSTRY_PAGES.get(slug)
    if not industry:
        raise HTTPException(404, "Page not found")
    return page(request, "industry.html", industry=industry, slug=slug)

@app.get("/resources", response_class=HTMLResponse)
def resources_page(request: Request):
    return page(request, "resources.html", checklist=content.CHECKLIST, industries=content.INDUSTRY_PAGES)

@app.get("/showcase", response_class=HTMLResponse)
def showcase_page(request: Request, category: Optional[str] = None):
    return page(request, "showcase.html", releases=storage.list_showcase(category=category),
                categories=content.CATEGORIES, category=category)

@app.get("/showcase/{showcase_id}", response_class=HTMLResponse)
def showcase_detail_page(request: Request, showcase_id: str):
    return page(request, "showcase_detail.html", release=distribution.view_showcase(showcase_id))

@app.get("/journalist/subscribe", response_class=HTMLResponse)
def journalist_page(request: Request, verified: Optional[str] = None, error: Optional[str] = None):
    return page(request, "journalist_subscribe.html", categories=content.CATEGORIES,
                frequencies=distribution.FREQUENCIES, verified=verified == "true", error=error)

@app.get("/request-access", response_class=HTMLResponse)
def request_access_page(request: Request):
    return page(request, "invite.html", token=None)

@app.get("/set-password", response_class=HTMLResponse)
def set_password_page(request: Request, token: str = ""):
    return page(request, "invite.html", token=token)

@app.get("/dashboard", response_class=HTMLResponse)
@app.get("/dashboard/{rest:path}", response_class=HTMLResponse)
def dashboard_page(request: Request, rest: str = ""):
    return page(request, "dashboard.html", announcement_types=content.ANNOUNCEMENT_TYPES,
                industries=content.INDUSTRIES)

@app.get("/admin", response_class=HTMLResponse)
@app.get("/admin/{rest:path}", response_class=HTMLResponse)
def admin_page(request: Request, rest: str = ""):
    return page(request, "admin.html", statuses=statuses.STATUSES)


# ══════════════════════════════════════════════════════════════════
# API: utility
# ══════════════════════════════════════════════════════════════════

@app.get("/api/health")
def health():
    return {"status": "healthy", "service": "prbuild"}

@app.get("/api/pricing")
def get_pricing():
    return {"plans": billing.PRICING}

@app.get("/api/statuses")
def get_statuses():
    return {"statuses": statuses.STATUSES}


# ══════════════════════════════════════════════════════════════════
# API: Accounts
# ══════════════════════════════════════════════════════════════════

@app.post("/api/signup", status_code=201)
def signup(body: SignupRequest):
    return accounts.signup(body.email, body.password, full_name=body.full_name,
                           company_name=body.company_name, company_website=body.company_website)

@app.post("/api/login")
def login(body: LoginRequest):
    return accounts.login(body.email, body.password)

@app.get("/api/me")
def me(user: dict = Depends(get_current_user)):
    return public_profile(user)

@app.post("/api/onboarding/welcome-email")
def onboarding_welcome(user: dict = Depends(get_current_user)):
    return onboarding.send_welcome(user)

@app.post("/api/onboarding/dismiss")
def onboarding_dismiss(user: dict = Depends(get_current_user)):
    return onboarding.dismiss(user)

@app.get("/api/cron/onboarding-emails", dependencies=[Depends(require_cron)])
def onboarding_emails():
    return onboarding.run_drip()


# ══════════════════════════════════════════════════════════════════
# API: Invites
# ══════════════════════════════════════════════════════════════════

@app.post("/api/invite/request")
def request_invite(body: InviteRequest, request: Request):
    rate_limit.enforce(request, "invite_request")
    return accounts.request_invite(body.email)

@app.get("/api/invite")
def lookup_invite(token: str = ""):
    return accounts.lookup_invite(token)

@app.post("/api/invite/set-password")
def set_password(body: SetPassword, request: Request):
    rate_limit.enforce(request, "set_password", max_requests=10)
    return accounts.set_password(body.token, body.password)

@app.post("/api/invite/accept")
def accept_invite(body: InviteAccept, user: dict = Depends(get_current_user)):
    return accounts.accept_invite(user, body.token)

@app.post("/api/admin/invite")
def create_invite(body: InviteCreate, admin: dict = Depends(require_admin)):
    return accounts.create_invite(body.email, body.free_releases, body.unlimited)

@app.get("/api/admin/pending-invites")
def pending_invites(admin: dict = Depends(require_admin)):
    return storage.list_pending_invites()

@app.post("/api/admin/invite/approve")
def approve_invite(body: InviteApprove, admin: dict = Depends(require_admin)):
    return accounts.approve_invite(body.id)


# ══════════════════════════════════════════════════════════════════
# API: Release requests
# ══════════════════════════════════════════════════════════════════

@app.get("/api/releases")
def list_releases(user: dict = Depends(get_current_user)):
    return workflow.list_releases(user)

@app.post("/api/releases", status_code=201)
def create_release(body: ReleaseCreate, user: dict = Depends(get_current_user)):
    return workflow.create_release(user, body.model_dump())

@app.get("/api/releases/{release_id}")
def get_release(release_id: str, user: dict = Depends(get_current_user)):
    return workflow.get_release_for(release_id, user)

@app.patch("/api/releases/{release_id}")
def patch_release(release_id: str, body: dict, user: dict = Depends(get_current_user)):
    return workflow.patch_release(release_id, user, body)

@app.get("/api/releases/{release_id}/activity")
def release_activity(release_id: str, user: dict = Depends(get_current_user)):
    workflow.get_release_for(release_id, user)
    return storage.list_activity(release_id)

@app.post("/api/releases/{release_id}/generate-draft")
async def generate_draft(release_id: str, admin: dict = Depends(require_admin)):
    return await workflow.generate_draft(release_id, admin)

@app.post("/api/releases/{release_id}/panel")
async def run_panel(release_id: str, admin: dict = Depends(require_admin)):
    return await workflow.run_panel(release_id, admin)

@app.post("/api/releases/{release_id}/rewrite")
async def rewrite(release_id: str, user: dict = Depends(get_current_user)):
    return await workflow.rewrite_from_panel(release_id, user)

@app.post("/api/releases/{release_id}/rewrite/accept")
def accept_rewrite(release_id: str, user: dict = Depends(get_current_user)):
    return workflow.accept_rewrite(release_id, user)

@app.post("/api/releases/{release_id}/rewrite/reject")
def reject_rewrite(release_id: str, user: dict = Depends(get_current_user)):
    return workflow.reject_rewrite(release_id, user)

@app.post("/api/releases/{release_id}/send")
def send_to_client(release_id: str, admin: dict = Depends(require_admin)):
    return workflow.send_to_client(release_id, admin)

@app.post("/api/releases/{release_id}/feedback")
def submit_feedback(release_id: str, body: FeedbackRequest, user: dict = Depends(get_current_user)):
    return workflow.submit_feedback(release_id, user, body.feedback)

@app.post("/api/releases/{release_id}/approve")
def approve(release_id: str, user: dict = Depends(get_current_user)):
    return workflow.approve(release_id, user)

@app.post("/api/releases/{release_id}/status")
def set_status(release_id: str, body: StatusUpdate, admin: dict = Depends(require_admin)):
    return workflow.set_status(release_id, admin, body.status, body.note)

@app.post("/api/releases/{release_id}/publish", status_code=201)
def publish(release_id: str, admin: dict = Depends(require_admin)):
    return workflow.publish(release_id, admin)


# ══════════════════════════════════════════════════════════════════
# API: Prompt editor (admin)
# ══════════════════════════════════════════════════════════════════

@app.get("/api/prompts")
def list_prompts(admin: dict = Depends(require_admin)):
    return prompts.list_prompts()

@app.patch("/api/prompts/{prompt_key}")
def update_prompt(prompt_key: str, body: PromptUpdate, admin: dict = Depends(require_admin)):
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise HTTPException(400, "No valid fields to update")
    prompt = prompts.update_prompt(prompt_key, **fields)
    if not prompt:
        raise HTTPException(404, "Prompt not found")
    return prompt

@app.post("/api/prompts/{prompt_key}/reset")
def reset_prompt(prompt_key: str, admin: dict = Depends(require_admin)):
    prompt = prompts.reset_prompt(prompt_key)
    if not prompt:
        raise HTTPException(404, "Prompt not found")
    return prompt


# ══════════════════════════════════════════════════════════════════
# API: Journalists & newsletter
# ══════════════════════════════════════════════════════════════════

@app.post("/api/journalists/subscribe", status_code=201)
def subscribe_journalist(body: JournalistSubscribe, request: Request):
    rate_limit.enforce(request, "journalist_subscribe")
    sub = distribution.subscribe_journalist(body.email, body.categories, name=body.name,
                                            outlet=body.outlet, beat=body.beat, frequency=body.frequency)
    return {
        "success": True,
        "message": "Please check your email to verify your subscription",
        "subscriber": {"id": sub["id"], "email": sub["email"]},
    }

@app.get("/api/journalists/verify")
def verify_journalist(token: str = ""):
    if not distribution.verify_journalist(token):
        return RedirectResponse("/journalist/subscribe?error=invalid_token", status_code=302)
    return RedirectResponse("/journalist/subscribe?verified=true", status_code=302)

@app.get("/api/journalists/unsubscribe", response_class=HTMLResponse)
def unsubscribe_journalist(request: Request, token: str = ""):
    removed = distribution.unsubscribe_journalist(token)
    return page(request, "unsubscribed.html", success=removed, audience="journalist")

@app.get("/api/journalists")
def list_journalists(admin: dict = Depends(require_admin)):
    return distribution.journalist_rows()

@app.post("/api/newsletter/send")
def send_newsletter(body: NewsletterSend, admin: dict = Depends(require_admin)):
    return distribution.send_newsletter(body.subject, body.category)

@app.get("/api/newsletter")
def list_newsletters(admin: dict = Depends(require_admin)):
    return storage.list_newsletter_sends()


# ══════════════════════════════════════════════════════════════════
# API: Email leads
# ══════════════════════════════════════════════════════════════════

@app.post("/api/leads", status_code=201)
def capture_lead(body: LeadCapture, request: Request):
    rate_limit.enforce(request, "leads")
    lead = distribution.capture_lead(body.email, body.lead_source, name=body.name,
                                     company_name=body.company_name, quiz_score=body.quiz_score,
                                     quiz_answers=body.quiz_answers)
    return {"success": True, "lead_id": lead["id"]}

@app.get("/api/leads")
def list_leads(admin: dict = Depends(require_admin)):
    return storage.list_leads()

@app.get("/api/leads/unsubscribe", response_class=HTMLResponse)
def unsubscribe_lead(request: Request, token: str = ""):
    removed = bool(token) and storage.unsubscribe_lead(token)
    return page(request, "unsubscribed.html", success=removed, audience="lead")

@app.post("/api/admin/teardowns")
def send_teardown(body: TeardownSend, admin: dict = Depends(require_admin)):
    return distribution.send_teardown(body.subject, body.pr_company, body.pr_headline, body.teardown_content)

@app.get("/api/admin/teardowns")
def list_teardowns(admin: dict = Depends(require_admin)):
    return storage.list_teardown_sends()


# ══════════════════════════════════════════════════════════════════
# API: Showcase
# ══════════════════════════════════════════════════════════════════

@app.get("/api/showcase")
def list_showcase(category: Optional[str] = None, limit: int = 50):
    return storage.list_showcase(category=category, limit=limit)

@app.get("/api/showcase/{showcase_id}")
def get_showcase(showcase_id: str):
    return distribution.view_showcase(showcase_id)

@app.post("/api/showcase/{showcase_id}/share")
def share_showcase(showcase_id: str):
    if not storage.get_showcase(showcase_id):
        raise HTTPException(404, "Release not found")
    storage.increment_showcase_counter(showcase_id, "share_count")
    return {"status": "ok"}

@app.get("/api/showcase/{showcase_id}/click")
def journalist_click(showcase_id: str):
    return RedirectResponse(distribution.journalist_click(showcase_id), status_code=302)


# ══════════════════════════════════════════════════════════════════
# API: Admin users
# ══════════════════════════════════════════════════════════════════

@app.get("/api/admin/users")
def search_users(q: str = "", admin: dict = Depends(require_admin)):
    if q.strip():
        return storage.search_profiles(q.strip())
    return storage.list_profiles()

@app.post("/api/admin/grant-free")
def grant_free(body: GrantFree, admin: dict = Depends(require_admin)):
    return accounts.grant_free(body.user_id, body.releases, body.unlimited)

@app.get("/api/admin/free-users")
def free_users(admin: dict = Depends(require_admin)):
    return storage.list_free_users()

@app.patch("/api/admin/free-users")
def update_free_user(body: FreeCreditsUpdate, admin: dict = Depends(require_admin)):
    return accounts.update_free(body.user_id, body.action, body.free_releases_remaining, body.unlimited)


# ══════════════════════════════════════════════════════════════════
# API: Feature requests
# ══════════════════════════════════════════════════════════════════

@app.get("/api/feature-requests")
def list_feature_requests(user: dict = Depends(get_current_user)):
    return storage.list_feature_requests(user["id"])

@app.post("/api/feature-requests", status_code=201)
def submit_feature_request(body: FeatureRequestCreate, user: dict = Depends(get_current_user)):
    return accounts.submit_feature(user, body.title, body.description)

@app.post("/api/feature-requests/{feature_id}/vote")
def vote_feature_request(feature_id: str, user: dict = Depends(get_current_user)):
    return accounts.toggle_vote(feature_id, user)

@app.patch("/api/feature-requests/{feature_id}")
def update_feature_request(feature_id: str, body: FeatureRequestUpdate, admin: dict = Depends(require_admin)):
    return accounts.update_feature(feature_id, body.status, body.admin_response)

@app.get("/api/feature-requests/{feature_id}/voters")
def feature_voters(feature_id: str, admin: dict = Depends(require_admin)):
    return storage.list_feature_voters(feature_id)


# ══════════════════════════════════════════════════════════════════
# API: Stripe
# ══════════════════════════════════════════════════════════════════

@app.post("/api/stripe/checkout")
def checkout(body: CheckoutRequest, user: dict = Depends(get_current_user)):
    try:
        url = billing.create_checkout_session(user, body.plan, body.interval)
    except billing.BillingError as e:
        raise HTTPException(400, str(e))
    return {"url": url}

@app.post("/api/stripe/webhook")
async def stripe_webhook(request: Request):
    payload = await request.body()
    try:
        event = billing.construct_event(payload, request.headers.get("stripe-signature", ""))
    except billing.BillingError as e:
        raise HTTPException(400, str(e))
    billing.handle_event(event)
    return {"received": True}
