"""
End-to-end tests for the release workflow API: intake, AI steps, the client
review loop and publishing. LLM calls are served from canned text.
"""
from prbuild import storage

from conftest import DRAFT_TEXT, PANEL_TEXT, RELEASE_BODY, make_user, bearer


def submit(client, headers, **overrides):
    res = client.post("/api/releases", json={**RELEASE_BODY, **overrides}, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()


def drafted(client, user_headers, admin_headers, llm):
    release = submit(client, user_headers)
    llm.replies.append(DRAFT_TEXT)
    res = client.post(f"/api/releases/{release['id']}/generate-draft", headers=admin_headers)
    assert res.status_code == 200, res.text
    return res.json()["release"]


def reviewed(client, user_headers, admin_headers, llm):
    release = drafted(client, user_headers, admin_headers, llm)
    llm.replies.append(PANEL_TEXT)
    res = client.post(f"/api/releases/{release['id']}/panel", headers=admin_headers)
    assert res.status_code == 200, res.text
    return res.json()["release"]


class TestIntake:

    def test_requires_auth(self, client):
        assert client.post("/api/releases", json=RELEASE_BODY).status_code == 401
        assert client.get("/api/releases").status_code == 401

    def test_paid_submission(self, client, user, user_headers):
        release = submit(client, user_headers, plan="growth")
        assert release["status"] == "submitted"
        assert release["amount_paid"] == 1900
        assert release["client_id"] == user["id"]
        (entry,) = storage.list_activity(release["id"])
        assert entry["action"] == "release_submitted"

    def test_free_credit_is_spent(self, client, user, user_headers):
        storage.update_profile(user["id"], is_free_user=True, free_releases_remaining=1)
        assert submit(client, user_headers)["amount_paid"] == 0
        assert storage.get_profile(user["id"])["free_releases_remaining"] == 0
        assert submit(client, user_headers)["amount_paid"] == 900

    def test_unlimited_free_user(self, client, user, user_headers):
        storage.update_profile(user["id"], is_free_user=True, free_releases_remaining=-1)
        submit(client, user_headers)
        assert submit(client, user_headers)["amount_paid"] == 0
        assert storage.get_profile(user["id"])["free_releases_remaining"] == -1

    def test_clients_see_only_their_own(self, client, user_headers, admin_headers):
        mine = submit(client, user_headers)
        other = make_user("other@example.com")
        theirs = submit(client, bearer(other))
        ids = [r["id"] for r in client.get("/api/releases", headers=user_headers).json()]
        assert ids == [mine["id"]]
        assert client.get(f"/api/releases/{theirs['id']}", headers=user_headers).status_code == 403
        assert len(client.get("/api/releases", headers=admin_headers).json()) == 2

    def test_missing_release(self, client, admin_headers):
        assert client.get("/api/releases/nope", headers=admin_headers).status_code == 404

    def test_admin_queue_order(self, client, user_headers, admin_headers):
        first = submit(client, user_headers)
        second = submit(client, user_headers)
        client.post(f"/api/releases/{first['id']}/status", json={"status": "needs_revision"},
                    headers=admin_headers)
        ids = [r["id"] for r in client.get("/api/releases", headers=admin_headers).json()]
        assert ids == [first["id"], second["id"]]


class TestAISteps:

    def test_generate_draft(self, client, user_headers, admin_headers, llm):
        release = drafted(client, user_headers, admin_headers, llm)
        assert release["status"] == "draft_generated"
        assert release["ai_headline_options"][0] == "Acme Launches Widget That Halves Warehouse Costs"
        assert release["ai_draft_content"].startswith("AUSTIN, TX")
        assert len(release["ai_visuals_suggestions"]) == 2
        assert release["ai_draft_raw"]["raw"] == DRAFT_TEXT
        assert "AUSTIN, TX, March 4, 2025" in llm.calls[0]["messages"][1]["content"]

    def test_generate_is_admin_only(self, client, user_headers):
        release = submit(client, user_headers)
        res = client.post(f"/api/releases/{release['id']}/generate-draft", headers=user_headers)
        assert res.status_code == 403

    def test_llm_failure_is_502(self, client, user_headers, admin_headers, llm):
        release = submit(client, user_headers)
        llm.replies.append(RuntimeError("upstream down"))
        res = client.post(f"/api/releases/{release['id']}/generate-draft", headers=admin_headers)
        assert res.status_code == 502
        assert storage.get_release(release["id"])["status"] == "submitted"

    def test_panel(self, client, user_headers, admin_headers, llm):
        release = reviewed(client, user_headers, admin_headers, llm)
        assert release["status"] == "panel_reviewed"
        assert [f["persona"] for f in release["panel_individual_feedback"]] == ["Sarah M.", "David K."]
        assert release["panel_contrarian_recommendation"]["remove"] == "the second quote"
        system_prompt = llm.calls[1]["messages"][0]["content"]
        assert "former TechCrunch editor" in system_prompt
        assert "HEADLINE: Acme Launches Widget" in llm.calls[1]["messages"][1]["content"]

    def test_panel_needs_a_draft(self, client, user_headers, admin_headers):
        release = submit(client, user_headers)
        res = client.post(f"/api/releases/{release['id']}/panel", headers=admin_headers)
        assert res.status_code == 400

    def test_rewrite_once(self, client, user_headers, admin_headers, llm):
        release = reviewed(client, user_headers, admin_headers, llm)
        llm.replies.append("<p>Rewritten</p>")
        res = client.post(f"/api/releases/{release['id']}/rewrite", headers=user_headers)
        assert res.status_code == 200, res.text
        body = res.json()["release"]
        assert body["pending_rewrite_content"] == "<p>Rewritten</p>"
        assert body["rewrite_used"] is True
        assert "requested by client" in body["admin_notes"]

        again = client.post(f"/api/releases/{release['id']}/rewrite", headers=admin_headers)
        assert again.status_code == 400

    def test_accept_and_reject_rewrite(self, client, user_headers, admin_headers, llm):
        release = reviewed(client, user_headers, admin_headers, llm)
        rid = release["id"]
        assert client.post(f"/api/releases/{rid}/rewrite/accept", headers=user_headers).status_code == 400

        llm.replies.append("<p>Rewritten</p>")
        client.post(f"/api/releases/{rid}/rewrite", headers=admin_headers)
        accepted = client.post(f"/api/releases/{rid}/rewrite/accept", headers=user_headers).json()
        assert accepted["admin_refined_content"] == "<p>Rewritten</p>"
        assert accepted["pending_rewrite_content"] is None

        storage.update_release(rid, pending_rewrite_content="<p>Another</p>")
        rejected = client.post(f"/api/releases/{rid}/rewrite/reject", headers=user_headers).json()
        assert rejected["pending_rewrite_content"] is None
        assert rejected["admin_refined_content"] == "<p>Rewritten</p>"


class TestReviewLoop:

    def test_send_feedback_approve_publish(self, client, user, user_headers, admin_headers, llm, outbox):
        release = reviewed(client, user_headers, admin_headers, llm)
        rid = release["id"]

        sent = client.post(f"/api/releases/{rid}/send", headers=admin_headers).json()
        assert sent["status"] == "awaiting_client"
        assert sent["sent_to_client_at"] is not None
        assert outbox[-1]["to"] == user["email"]
        assert "Draft is Ready" in outbox[-1]["subject"]

        res = client.post(f"/api/releases/{rid}/feedback", json={"feedback": "Shorter quote please"},
                          headers=user_headers)
        assert res.json()["status"] == "client_feedback"
        assert "Feedback Received" in outbox[-1]["subject"]

        client.post(f"/api/releases/{rid}/send", headers=admin_headers)
        approved = client.post(f"/api/releases/{rid}/approve", headers=user_headers).json()
        assert approved["status"] == "client_approved"

        res = client.post(f"/api/releases/{rid}/publish", headers=admin_headers)
        assert res.status_code == 201, res.text
        showcase = res.json()
        assert showcase["headline"] == "Acme Launches Widget That Halves Warehouse Costs"
        assert showcase["category"] == "Other"
        assert showcase["summary"].startswith("AUSTIN, TX")
        assert storage.get_release(rid)["status"] == "published"
        assert "Press Release is Live" in outbox[-1]["subject"]

        again = client.post(f"/api/releases/{rid}/publish", headers=admin_headers)
        assert again.status_code == 409

        actions = [a["action"] for a in client.get(f"/api/releases/{rid}/activity", headers=user_headers).json()]
        assert actions[0] == "release_submitted"
        assert actions[-1] == "release_published"

    def test_cannot_approve_before_review(self, client, user_headers):
        release = submit(client, user_headers)
        res = client.post(f"/api/releases/{release['id']}/approve", headers=user_headers)
        assert res.status_code == 400

    def test_cannot_publish_unapproved(self, client, user_headers, admin_headers, llm):
        release = drafted(client, user_headers, admin_headers, llm)
        res = client.post(f"/api/releases/{release['id']}/publish", headers=admin_headers)
        assert res.status_code == 400

    def test_email_failure_does_not_fail_request(self, client, user_headers, admin_headers, llm, monkeypatch):
        from prbuild import mailer

        def broken(*args):
            raise mailer.MailerError("smtp down")

        monkeypatch.setattr(mailer, "send_email", broken)
        release = reviewed(client, user_headers, admin_headers, llm)
        res = client.post(f"/api/releases/{release['id']}/send", headers=admin_headers)
        assert res.status_code == 200

    def test_set_status_with_note(self, client, user_headers, admin_headers):
        release = submit(client, user_headers)
        res = client.post(f"/api/releases/{release['id']}/status",
                          json={"status": "rejected", "note": "Not newsworthy"}, headers=admin_headers)
        body = res.json()
        assert body["status"] == "rejected"
        assert "Not newsworthy" in body["admin_notes"]

    def test_set_status_cannot_publish(self, client, user_headers, admin_headers):
        release = submit(client, user_headers)
        res = client.post(f"/api/releases/{release['id']}/status", json={"status": "published"},
                          headers=admin_headers)
        assert res.status_code == 400


class TestPatch:

    def test_client_field_whitelist(self, client, user_headers):
        release = submit(client, user_headers)
        res = client.patch(f"/api/releases/{release['id']}", json={"admin_notes": "sneaky"},
                           headers=user_headers)
        assert res.status_code == 400
        res = client.patch(f"/api/releases/{release['id']}",
                           json={"client_edited_content": "My edit", "admin_notes": "sneaky"},
                           headers=user_headers)
        assert res.status_code == 200
        assert res.json()["client_edited_content"] == "My edit"
        assert res.json()["admin_notes"] is None

    def test_admin_fields(self, client, user_headers, admin_headers):
        release = submit(client, user_headers)
        res = client.patch(f"/api/releases/{release['id']}",
                           json={"category": "Real Estate", "tags": ["launch"], "quality_score": 8},
                           headers=admin_headers)
        body = res.json()
        assert body["category"] == "Real Estate"
        assert body["tags"] == ["launch"]

    def test_patch_status_is_validated(self, client, user_headers, admin_headers):
        release = submit(client, user_headers)
        res = client.patch(f"/api/releases/{release['id']}", json={"status": "published"},
                           headers=admin_headers)
        assert res.status_code == 400

    def test_patch_cannot_publish_approved_release(self, client, user_headers, admin_headers, llm):
        release = reviewed(client, user_headers, admin_headers, llm)
        rid = release["id"]
        client.post(f"/api/releases/{rid}/send", headers=admin_headers)
        client.post(f"/api/releases/{rid}/approve", headers=user_headers)

        res = client.patch(f"/api/releases/{rid}", json={"status": "published"}, headers=admin_headers)
        assert res.status_code == 400
        assert storage.get_release(rid)["status"] == "client_approved"
        assert storage.get_showcase_for_release(rid) is None

        res = client.post(f"/api/releases/{rid}/publish", headers=admin_headers)
        assert res.status_code == 201, res.text
        assert storage.get_showcase_for_release(rid) is not None
