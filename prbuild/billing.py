"""
PRBuild billing: plan table, Stripe checkout sessions and webhook handling.
"""
import json
import logging

import stripe

from prbuild import config
from prbuild import storage

log = logging.getLogger(__name__)

INTERVALS = ("monthly", "yearly")

PRICING = {
    "starter": {
        "name": "Starter",
        "monthly": {"price": 9, "price_in_cents": 900},
        "yearly": {"price": 90, "price_in_cents": 9000, "savings": 18},
        "releases": 1,
        "description": "Best for occasional announcements",
        "popular": False,
        "features": [
            "1 press release",
            "Professional writing",
            "Journalist panel review",
            "Client revision round",
            "Showcase publication",
            "Newsletter distribution",
        ],
    },
    "growth": {
        "name": "Growth",
        "monthly": {"price": 19, "price_in_cents": 1900},
        "yearly": {"price": 190, "price_in_cents": 19000, "savings": 38},
        "releases": 3,
        "description": "Best for growing companies",
        "popular": True,
        "features": [
            "3 press releases",
            "Everything in Starter",
            "Priority turnaround",
            "Detailed analytics",
        ],
    },
    "pro": {
        "name": "Pro",
        "monthly": {"price": 39, "price_in_cents": 3900},
        "yearly": {"price": 390, "price_in_cents": 39000, "savings": 78},
        "releases": 5,
        "description": "Best for regular PR needs",
        "popular": False,
        "features": [
            "5 press releases",
            "Everything in Growth",
            "Rush delivery available",
            "Dedicated account support",
        ],
    },
}


class BillingError(Exception):
    pass


def price_id(plan: str, interval: str) -> str:
    if plan not in PRICING:
        raise BillingError("Invalid plan selected")
    if interval not in INTERVALS:
        raise BillingError("Invalid billing interval")
    pid = config.STRIPE_PRICE_IDS.get(plan, {}).get(interval, "")
    if not pid:
        raise BillingError("Invalid billing interval")
    return pid


def plan_amount(plan: str, interval: str = "monthly") -> int:
    """Price in cents for a plan; 0 for unknown plans."""
    entry = PRICING.get(plan)
    if not entry:
        return 0
    return entry.get(interval, entry["monthly"])["price_in_cents"]


def create_checkout_session(profile: dict, plan: str, interval: str = "monthly") -> str:
    """Create a subscription checkout session and return its URL."""
    pid = price_id(plan, interval)
    if not config.STRIPE_SECRET_KEY:
        raise BillingError("Payment system not configured")
    stripe.api_key = config.STRIPE_SECRET_KEY

    customer_id = profile.get("stripe_customer_id")
    if not customer_id:
        customer = stripe.Customer.create(email=profile["email"], metadata={"userId": profile["id"]})
        customer_id = customer.id
        storage.update_profile(profile["id"], stripe_customer_id=customer_id)

    metadata = {"userId": profile["id"], "plan": plan, "interval": interval}
    session = stripe.checkout.Session.create(
        customer=customer_id,
        mode="subscription",
        payment_method_types=["card"],
        line_items=[{"price": pid, "quantity": 1}],
        success_url=(f"{config.APP_URL}/dashboard/new-request"
                     f"?session_id={{CHECKOUT_SESSION_ID}}&plan={plan}&interval={interval}"),
        cancel_url=f"{config.APP_URL}/pricing",
        metadata=metadata,
        subscription_data={"metadata": metadata},
    )
    return session.url


def construct_event(payload: bytes, signature: str) -> dict:
    """Verify the Stripe-Signature header and return the event as a plain dict. Raises BillingError."""
    if not signature:
        raise BillingError("No signature")
    try:
        stripe.WebhookSignature.verify_header(payload.decode("utf-8"), signature, config.STRIPE_WEBHOOK_SECRET)
        return json.loads(payload)
    except (ValueError, stripe.SignatureVerificationError) as e:
        log.error(f"Webhook signature verification failed: {e}")
        raise BillingError("Invalid signature") from e


def handle_event(event) -> None:
    etype = event["type"]
    obj = event["data"]["object"]

    if etype == "checkout.session.completed":
        metadata = obj.get("metadata") or {}
        user_id = metadata.get("userId")
        if not user_id:
            return
        fields = {"subscription_status": "active"}
        if obj.get("customer"):
            fields["stripe_customer_id"] = obj["customer"]
        if obj.get("subscription"):
            fields["stripe_subscription_id"] = obj["subscription"]
        if metadata.get("plan"):
            fields["current_plan"] = metadata["plan"]
        if metadata.get("interval"):
            fields["billing_interval"] = metadata["interval"]
        storage.update_profile(user_id, **fields)
        log.info(f"Subscription started for user {user_id}, plan: {metadata.get('plan')}")
        return

    if etype == "invoice.paid":
        log.info(f"Invoice paid: {obj.get('id')}, amount: {obj.get('amount_paid')}")
        return

    customer_handlers = {
        "customer.subscription.created": lambda o: {
            "stripe_subscription_id": o.get("id"),
            "subscription_status": o.get("status"),
        },
        "customer.subscription.updated": lambda o: {"subscription_status": o.get("status")},
        "customer.subscription.deleted": lambda o: {
            "subscription_status": "canceled",
            "stripe_subscription_id": None,
            "current_plan": None,
        },
        "invoice.payment_failed": lambda o: {"subscription_status": "past_due"},
    }
    handler = customer_handlers.get(etype)
    if handler is None:
        log.info(f"Unhandled event type: {etype}")
        return

    profile = storage.get_profile_by_stripe_customer(obj.get("customer") or "")
    if profile:
        storage.update_profile(profile["id"], **handler(obj))
    log.info(f"{etype}: {obj.get('id')}")
