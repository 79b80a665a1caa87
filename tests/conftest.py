"""
Shared fixtures: a throwaway sqlite database per test, a TestClient, and
client/admin accounts with bearer tokens. Outgoing email is captured in
`outbox` instead of going through SMTP.
"""
from types import SimpleNamespace

import pytest
import litellm
from fastapi.testclient import TestClient

from prbuild import auth
from prbuild import database
from prbuild import mailer
from prbuild import storage
from prbuild.prompts import prompt_store
from prbuild.rate_limit import limiter


@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_PATH", str(tmp_path / "prbuild_test.db"))
    database.init_db()
    limiter.reset()
    prompt_store.clear()
    yield
    prompt_store.clear()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    sent = []

    def fake_send(to, subject, html):
        sent.append({"to": to, "subject": subject, "html": html})

    monkeypatch.setattr(mailer, "send_email", fake_send)
    return sent


@pytest.fixture
def client():
    from prbuild.main import app
    with TestClient(app) as c:
        yield c


def make_user(email, role="client", password="password123"):
    return storage.create_profile(email, auth.hash_password(password), full_name="Test User",
                                  company_name="Acme", role=role)


def bearer(profile):
    return {"Authorization": f"Bearer {auth.create_access_token(profile['id'], profile['role'])}"}


@pytest.fixture
def user():
    return make_user("client@example.com")


@pytest.fixture
def admin():
    return make_user("admin@example.com", role="admin")


@pytest.fixture
def user_headers(user):
    return bearer(user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def llm(monkeypatch):
    """Queue canned completions; every litellm.acompletion call pops the next one."""
    replies = []
    calls = []

    async def fake_acompletion(**kwargs):
        calls.append(kwargs)
        content = replies.pop(0)
        if isinstance(content, Exception):
            raise content
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

    monkeypatch.setattr(litellm, "acompletion", fake_acompletion)
    return SimpleNamespace(replies=replies, calls=calls)


DRAFT_TEXT = """Headlines:
1. Acme Launches Widget That Halves Warehouse Costs
2. Widget From Acme Cuts Warehouse Spend in Half
3. Acme Unveils Widget for Mid-Size Warehouses

Subhead: The new widget automates pallet tracking for teams of 10 to 200

AUSTIN, TX, March 4, 2025 -- Acme Corp today launched Widget, a pallet tracker.
Early customers cut handling costs by 48 percent.

Visuals suggestions:
- Product photo of the widget on a loading dock
- Founder headshot in the warehouse

Distribution checklist:
- Send to logistics trade reporters
- Post on the company LinkedIn page
"""

PANEL_TEXT = """Step 1: Individual Feedback

Sarah M. - Journalist: The lead is compelling and clear.
What's missing: independent data
Verdict: I would cover it

David K. - PR Writer: The quote is not compelling at all.
Missing: a customer voice
Verdict: Needs work

Step 2: Synthesis
1. Lead with the cost data
2. Replace the executive quote

Step 3: Contrarian Recommendation
* Remove: the second quote
* Sharpen: the headline number
* Risk: sounding like every other launch
* Ignore: the length complaints
"""

RELEASE_BODY = {
    "company_name": "Acme Corp",
    "company_website": "https://acme.example",
    "announcement_type": "product_launch",
    "news_hook": "Acme launches Widget, a pallet tracker for mid-size warehouses",
    "dateline_city": "AUSTIN, TX",
    "release_date": "2025-03-04",
    "core_facts": ["Cuts handling costs by 48 percent", "Available today"],
    "quote_sources": [{"name": "Jane Doe", "title": "CEO", "quote": "Warehouses deserve better tools."}],
    "media_contact_name": "Pat Lee",
    "media_contact_email": "press@acme.example",
    "desired_cta": "Book a demo at acme.example",
    "industry": "technology",
}
