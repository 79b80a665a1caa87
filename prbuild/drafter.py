"""
PRBuild drafting pipeline
Three LLM steps, each one prompt in and free text out:
  generate_draft      intake form → press release draft (+ headlines, visuals, checklist)
  run_panel_critique  draft → simulated journalist/marketing panel review
  rewrite_from_panel  draft + panel feedback → rewritten HTML draft (once per release)
"""

import logging
from datetime import datetime
from typing import Optional

import litellm

from prbuild import config
from prbuild import prompts
from prbuild.parsers import parse_pr_draft, parse_panel_critique, ParsedDraft, ParsedCritique

log = logging.getLogger(__name__)


class DraftingError(Exception):
    """The LLM call failed or the release is missing what the step needs."""


def format_release_date(value: Optional[str]) -> str:
    """'2025-03-04' → 'March 4, 2025'. Anything unparseable is returned unchanged."""
    if not value:
        return ""
    try:
        d = datetime.strptime(value[:10], "%Y-%m-%d")
    except ValueError:
        return value
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def generation_input(release: dict) -> dict:
    return {
        "company_name": release.get("company_name", ""),
        "company_website": release.get("company_website", ""),
        "announcement_type": release.get("announcement_type", ""),
        "news_hook": release.get("news_hook", ""),
        "dateline": release.get("dateline_city", ""),
        "release_date": format_release_date(release.get("release_date")),
        "core_facts": release.get("core_facts") or [],
        "quote_sources": release.get("quote_sources"),
        "boilerplate": release.get("boilerplate"),
        "company_facts": release.get("company_facts"),
        "media_contact": {
            "name": release.get("media_contact_name", ""),
            "title": release.get("media_contact_title"),
            "phone": release.get("media_contact_phone"),
            "email": release.get("media_contact_email", ""),
            "website": release.get("company_website"),
        },
        "visuals": release.get("visuals_description"),
        "desired_cta": release.get("desired_cta", ""),
        "supporting_context": release.get("supporting_context"),
    }


def critique_text(release: dict) -> str:
    """Headline, optional subhead and the current draft, as the panel sees it."""
    draft = release.get("admin_refined_content") or release.get("ai_draft_content")
    if not draft:
        raise DraftingError("No draft content to critique")
    options = release.get("ai_headline_options") or []
    headline = release.get("ai_selected_headline") or (options[0] if options else "")
    subhead = release.get("ai_subhead") or ""
    parts = [f"HEADLINE: {headline}"]
    if subhead:
        parts.append(f"SUBHEAD: {subhead}")
    return "\n".join(parts) + f"\n\n{draft}"


def feedback_summary(feedback: list[dict]) -> str:
    lines = []
    for f in feedback:
        verdict = "Found compelling" if f.get("compelling") else "Not compelling"
        line = f"- {f.get('persona', '')} ({f.get('role', '')}): {verdict}. {f.get('feedback', '')}"
        if f.get("missing"):
            line += f" Missing: {f['missing']}"
        lines.append(line)
    return "\n".join(lines)


class PressReleaseDrafter:
    """LLM calls for the release pipeline. All methods are async."""

    def __init__(self, model: str = None):
        self.model = model or config.LLM_MODEL

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = await litellm.acompletion(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            log.error(f"LLM call failed ({self.model}): {e}")
            raise DraftingError(f"LLM call failed: {e}") from e
        return response.choices[0].message.content or ""

    # ─────────────────────────────────────────────
    # Draft
    # ─────────────────────────────────────────────

    async def generate_draft(self, release: dict) -> tuple[str, ParsedDraft]:
        system_prompt, user_prompt = prompts.pr_generation_prompts(generation_input(release))
        raw = await self._complete(system_prompt, user_prompt, temperature=0.7, max_tokens=2500)
        parsed = parse_pr_draft(raw)
        log.info(f"Draft for {release.get('id')}: {len(parsed.headlines)} headlines, "
                 f"{len(parsed.full_content)} chars")
        return raw, parsed

    # ─────────────────────────────────────────────
    # Panel
    # ─────────────────────────────────────────────

    async def run_panel_critique(self, release: dict) -> tuple[str, ParsedCritique]:
        text = critique_text(release)
        system_prompt, user_prompt = prompts.panel_critique_prompts(text, release.get("industry") or "general")
        raw = await self._complete(system_prompt, user_prompt, temperature=0.8, max_tokens=4000)
        parsed = parse_panel_critique(raw)
        log.info(f"Panel for {release.get('id')}: {len(parsed.individual_feedback)} personas, "
                 f"{len(parsed.themes)} themes")
        return raw, parsed

    # ─────────────────────────────────────────────
    # Rewrite
    # ─────────────────────────────────────────────

    async def rewrite_from_panel(self, release: dict) -> str:
        draft = release.get("admin_refined_content") or release.get("ai_draft_content")
        feedback = release.get("panel_individual_feedback") or []
        if not draft:
            raise DraftingError("No draft to rewrite")
        if not feedback:
            raise DraftingError("No panel feedback available")
        if release.get("rewrite_used"):
            raise DraftingError("Rewrite has already been used for this release")

        system_prompt, user_prompt = prompts.rewrite_prompts(
            draft, release.get("panel_synthesis") or "", feedback_summary(feedback)
        )
        return await self._complete(system_prompt, user_prompt, temperature=0.7, max_tokens=2500)
