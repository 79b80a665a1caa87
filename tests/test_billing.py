"""
Tests for pricing and Stripe checkout/webhook handling. Stripe itself is
never called; the signature check and the API objects are monkeypatched.
"""
import json
from types import SimpleNamespace

import pytest
import stripe

from prbuild import billing
from prbuild import config
from prbuild import storage


class TestPricing:

    def test_amounts(self):
        assert billing.plan_amount("starter") == 900
        assert billing.plan_amount("growth", "yearly") == 19000
        assert billing.plan_amount("enterprise") == 0

    def test_growth_is_popular(self):
        assert [k for k, p in billing.PRICING.items() if p["popular"]] == ["growth"]

    def test_price_id_validation(self, monkeypatch):
        monkeypatch.setitem(config.STRIPE_PRICE_IDS, "pro", {"monthly": "price_pro_m", "yearly": ""})
        assert billing.price_id("pro", "monthly") == "price_pro_m"
        with pytest.raises(billing.BillingError):
            billing.price_id("pro", "yearly")
        with pytest.raises(billing.BillingError):
            billing.price_id("platinum", "monthly")
        with pytest.raises(billing.BillingError):
            billing.price_id("pro", "weekly")

    def test_pricing_endpoint(self, client):
        assert set(client.get("/api/pricing").json()["plans"]) == {"starter", "growth", "pro"}


class TestCheckout:

    def test_creates_customer_once(self, client, user, user_headers, monkeypatch):
        monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test")
        monkeypatch.setitem(config.STRIPE_PRICE_IDS, "growth", {"monthly": "price_growth_m", "yearly": "x"})
        customers, sessions = [], []
        monkeypatch.setattr(stripe.Customer, "create",
                            lambda **kw: customers.append(kw) or SimpleNamespace(id="cus_123"))
        monkeypatch.setattr(stripe.checkout.Session, "create",
                            lambda **kw: sessions.append(kw) or SimpleNamespace(url="https://checkout.test/s"))

        res = client.post("/api/stripe/checkout", json={"plan": "growth"}, headers=user_headers)
        assert res.status_code == 200, res.text
        assert res.json()["url"] == "https://checkout.test/s"
        assert storage.get_profile(user["id"])["stripe_customer_id"] == "cus_123"
        assert sessions[0]["metadata"] == {"userId": user["id"], "plan": "growth", "interval": "monthly"}
        assert sessions[0]["line_items"] == [{"price": "price_growth_m", "quantity": 1}]

        client.post("/api/stripe/checkout", json={"plan": "growth"}, headers=user_headers)
        assert len(customers) == 1
        assert sessions[1]["customer"] == "cus_123"

    def test_bad_plan(self, client, user_headers, monkeypatch):
        monkeypatch.setattr(config, "STRIPE_SECRET_KEY", "sk_test")
        res = client.post("/api/stripe/checkout", json={"plan": "platinum"}, headers=user_headers)
        assert res.status_code == 400


class TestWebhook:

    def post_event(self, client, monkeypatch, event):
        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", lambda *a, **kw: True)
        return client.post("/api/stripe/webhook", content=json.dumps(event),
                           headers={"stripe-signature": "t=1,v1=abc"})

    def test_missing_signature(self, client):
        assert client.post("/api/stripe/webhook", content=b"{}").status_code == 400

    def test_invalid_signature(self, client, monkeypatch):
        def reject(*args, **kwargs):
            raise stripe.SignatureVerificationError("bad", "t=1,v1=abc")

        monkeypatch.setattr(stripe.WebhookSignature, "verify_header", reject)
        res = client.post("/api/stripe/webhook", content=b"{}", headers={"stripe-signature": "t=1,v1=abc"})
        assert res.status_code == 400

    def test_checkout_completed(self, client, user, monkeypatch):
        event = {"type": "checkout.session.completed", "data": {"object": {
            "customer": "cus_9", "subscription": "sub_9",
            "metadata": {"userId": user["id"], "plan": "pro", "interval": "yearly"},
        }}}
        assert self.post_event(client, monkeypatch, event).json() == {"received": True}
        profile = storage.get_profile(user["id"])
        assert profile["subscription_status"] == "active"
        assert profile["current_plan"] == "pro"
        assert profile["billing_interval"] == "yearly"
        assert profile["stripe_subscription_id"] == "sub_9"

    def test_subscription_lifecycle(self, client, user, monkeypatch):
        storage.update_profile(user["id"], stripe_customer_id="cus_9", current_plan="pro")
        self.post_event(client, monkeypatch, {"type": "invoice.payment_failed",
                                              "data": {"object": {"customer": "cus_9"}}})
        assert storage.get_profile(user["id"])["subscription_status"] == "past_due"

        self.post_event(client, monkeypatch, {"type": "customer.subscription.deleted",
                                              "data": {"object": {"id": "sub_9", "customer": "cus_9"}}})
        profile = storage.get_profile(user["id"])
        assert profile["subscription_status"] == "canceled"
        assert profile["current_plan"] is None

    def test_unhandled_event(self, client, monkeypatch):
        res = self.post_event(client, monkeypatch, {"type": "charge.refunded", "data": {"object": {}}})
        assert res.status_code == 200
