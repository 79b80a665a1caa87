"""
PRBuild outbound email: Gmail SMTP with an app password (EMAIL_FROM / EMAIL_PASSWORD).
Bodies are rendered from templates/email/*.html.
"""
import logging
import os
import smtplib
import ssl
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from jinja2 import Environment, FileSystemLoader, select_autoescape

from prbuild import config

log = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates", "email")

env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=select_autoescape(["html"]))


class MailerError(Exception):
    pass


def render(template: str, **context) -> str:
    context.setdefault("app_url", config.APP_URL)
    context.setdefault("year", date.today().year)
    return env.get_template(template).render(**context)


def send_email(to: str, subject: str, html: str):
    if not (config.EMAIL_FROM and config.EMAIL_PASSWORD):
        raise MailerError("Missing EMAIL_FROM / EMAIL_PASSWORD")

    msg = MIMEMultipart("alternative")
    msg["From"] = f"{config.APP_NAME} <{config.EMAIL_FROM}>"
    msg["To"] = to
    msg["Subject"] = subject
    msg.attach(MIMEText(html, "html", "utf-8"))

    ctx = ssl.create_default_context()
    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=60) as server:
            server.ehlo()
            server.starttls(context=ctx)
            server.ehlo()
            server.login(config.EMAIL_FROM, config.EMAIL_PASSWORD)
            server.sendmail(config.EMAIL_FROM, [to], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise MailerError(f"Failed to send '{subject}' to {to}: {e}") from e
    log.info(f"Email sent to {to}: {subject}")


# ── Journalists ──────────────────────────────────

def send_journalist_verification(email: str, verification_token: str):
    verify_url = f"{config.APP_URL}/api/journalists/verify?token={verification_token}"
    send_email(email, f"Verify your {config.APP_NAME} subscription",
               render("verify_journalist.html", verify_url=verify_url))


def send_newsletter(email: str, subject: str, releases: list[dict], unsubscribe_token: str):
    unsubscribe_url = f"{config.APP_URL}/api/journalists/unsubscribe?token={unsubscribe_token}"
    send_email(email, subject, render("newsletter.html", subject=subject, releases=releases,
                                      unsubscribe_url=unsubscribe_url))


# ── Leads ────────────────────────────────────────

LEAD_INTROS = {
    "quiz": "Thanks for taking the PR Score quiz. Your results are saved, and each week we'll send you a teardown of a real press release.",
    "checklist": "Here is your press release checklist. Each week we'll also send you a teardown of a real press release.",
    "teardown_signup": "You're subscribed to the Weekly PR Teardown: one real press release, taken apart every week.",
}


def send_lead_welcome(email: str, lead_source: str, unsubscribe_token: str):
    send_email(email, "Welcome to the Weekly PR Teardown",
               render("lead_welcome.html", intro=LEAD_INTROS.get(lead_source, LEAD_INTROS["teardown_signup"]),
                      unsubscribe_url=f"{config.APP_URL}/api/leads/unsubscribe?token={unsubscribe_token}"))


def send_teardown(email: str, subject: str, pr_company: str, pr_headline: str,
                  teardown_content: str, unsubscribe_token: str):
    send_email(email, subject,
               render("teardown.html", subject=subject, pr_company=pr_company, pr_headline=pr_headline,
                      paragraphs=[p.strip() for p in teardown_content.split("\n\n") if p.strip()],
                      unsubscribe_url=f"{config.APP_URL}/api/leads/unsubscribe?token={unsubscribe_token}"))


# ── Client notifications ─────────────────────────

def send_client_notification(email: str, subject: str, message: str, cta_text: str = None, cta_url: str = None):
    send_email(email, f"{config.APP_NAME}: {subject}",
               render("notification.html", subject=subject, message=message,
                      cta_text=cta_text, cta_url=cta_url))


def _release_url(release_id: str) -> str:
    return f"{config.APP_URL}/dashboard/my-releases/{release_id}"


def notify_draft_ready(email: str, release_id: str, company_name: str):
    send_client_notification(
        email,
        "Your Press Release Draft is Ready",
        f"Great news! The draft for your {company_name} press release is ready for review. "
        "Our team has crafted it based on your input, and it's been through our journalist panel critique.",
        "Review Your Draft",
        _release_url(release_id),
    )


def notify_feedback_received(email: str, release_id: str):
    send_client_notification(
        email,
        "Feedback Received - We're On It",
        "Thanks for your feedback! Our team is reviewing your comments and will update the draft shortly.",
        "View Release",
        _release_url(release_id),
    )


def notify_release_published(email: str, showcase_id: str):
    send_client_notification(
        email,
        "Your Press Release is Live!",
        "Congratulations! Your press release has been published to our showcase "
        "and distributed to journalists in your industry.",
        "View Published Release",
        f"{config.APP_URL}/showcase/{showcase_id}",
    )


def notify_approval_needed(email: str, release_id: str):
    send_client_notification(
        email,
        "Action Required: Please Review Your Draft",
        "Your press release draft is waiting for your approval. "
        "Please review it and let us know if you'd like any changes.",
        "Review Now",
        _release_url(release_id),
    )


# ── Onboarding ───────────────────────────────────

ONBOARDING_EMAILS = {
    "welcome": (
        "Welcome to PRBuild",
        "Here's how it works: 1) Fill out a quick form with your news, 2) AI + journalist panel "
        "crafts your release, 3) Review, revise, publish. Takes about 5 minutes.",
        "Submit Your First Release",
    ),
    "tips": (
        "Quick tips for a great press release",
        "3 tips from journalists who read hundreds of releases: 1) Lead with the news, and put the "
        "most important fact in the first sentence. 2) Include specific numbers: \"$2M raised\" beats "
        "\"significant funding.\" 3) Keep it under 500 words. Journalists skim, so every sentence "
        "needs to earn its place.",
        "Create Your Release",
    ),
    "nudge": (
        "Your free press release is waiting",
        "800+ companies have published with PRBuild, with a 23% journalist pickup rate. Your first "
        "release is free, no credit card required. The whole process takes about 5 minutes.",
        "Get Started Now",
    ),
}


def send_onboarding(email: str, step: str):
    subject, message, cta_text = ONBOARDING_EMAILS[step]
    send_client_notification(email, subject, message, cta_text, f"{config.APP_URL}/dashboard/new-request")
