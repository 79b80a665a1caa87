"""
Smoke tests for the server-rendered marketing pages and app shells.
"""
import time

import pytest

from prbuild import content
from prbuild import storage

from conftest import RELEASE_BODY


@pytest.mark.parametrize("path", ["/", "/pricing", "/faq", "/compare", "/resources", "/showcase",
                                  "/journalist/subscribe", "/dashboard", "/dashboard/new-request", "/admin",
                                  "/request-access", "/set-password?token=abc"])
def test_page_renders(client, path):
    res = client.get(path)
    assert res.status_code == 200
    assert "PRBuild" in res.text


def test_every_comparison_page(client):
    for slug, competitor in content.COMPETITORS.items():
        res = client.get(f"/compare/{slug}")
        assert res.status_code == 200
        assert competitor["cta_headline"] in res.text
    assert client.get("/compare/nobody").status_code == 404


def test_every_industry_page(client):
    for slug, industry in content.INDUSTRY_PAGES.items():
        res = client.get(f"/for/{slug}")
        assert res.status_code == 200
        assert industry["examples"][0].replace("&", "&amp;") in res.text
    assert client.get("/for/aerospace").status_code == 404


def test_pricing_shows_all_plans(client):
    text = client.get("/pricing").text
    for plan in ("Starter", "Growth", "Pro"):
        assert plan in text
    assert "$19" in text


def test_faq_lists_every_question(client):
    text = client.get("/faq").text
    assert len([q for q in content.FAQ_ITEMS if q["question"].replace("'", "&#39;") in text]) == len(content.FAQ_ITEMS)


def test_journalist_page_messages(client):
    assert "confirmed" in client.get("/journalist/subscribe?verified=true").text
    assert "invalid" in client.get("/journalist/subscribe?error=invalid_token").text


def test_showcase_detail_page(client, user):
    release = storage.create_release(user["id"], RELEASE_BODY)
    item = storage.create_showcase({
        "release_request_id": release["id"],
        "headline": "Acme launches Widget",
        "company_name": "Acme Corp",
        "full_content": "AUSTIN, TX -- Body text",
        "published_at": time.time(),
    })
    res = client.get(f"/showcase/{item['id']}")
    assert "Acme launches Widget" in res.text
    assert "Body text" in res.text
    assert client.get("/showcase/nope").status_code == 404


def test_health(client):
    assert client.get("/api/health").json()["status"] == "healthy"


def test_statuses_endpoint(client):
    data = client.get("/api/statuses").json()["statuses"]
    assert data["awaiting_client"]["label"] == "Awaiting Client"


def test_invite_pages(client):
    assert "Request free access" in client.get("/request-access").text
    res = client.get("/set-password?token=abc123")
    assert "Set your password" in res.text
    assert '"abc123"' in res.text
