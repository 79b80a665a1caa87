"""
PRBuild: prompt templates.

Each AI step has a default system prompt and a user template with {{variable}}
placeholders. Admins can override both through the prompt_configs table; the
active row wins, and the defaults below are used whenever no row is found.
"""
import logging
import time
from typing import Optional

from prbuild import config
from prbuild import storage

log = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════
# DEFAULT PROMPTS
# ═══════════════════════════════════════════════════

PR_GENERATION_SYSTEM_PROMPT = """You are a professional journalist and press release writer. I will give you the facts of an announcement; your job is to produce a newsworthy press release in a journalistic style using the structure and rules below. Think step by step.

Required output format and content (produce all items listed):
1) Three headline options (concise, attention-grabbing, 8-12 words each).
2) Single-line subhead (optional, one sentence expanding the headline).
3) Dateline: CITY, STATE/COUNTRY, Month Day, Year.
4) Lead paragraph (1 concise paragraph answering who, what, where, when, why, how).
5) Body (2-3 short paragraphs) expanding the "what" and "why," including one or two key statistics or details from the provided facts. Keep sentences short and every sentence meaningful.
6) Quotes: include 1-2 attributed quotes (name, title). Use provided quotes verbatim if given; otherwise create realistic, relevant quotes and mark them as "Suggested quote" if asked to review later.
7) Boilerplate: one paragraph (50-75 words) about the company.
8) Media contact block: name, title, phone, email, website.
9) Call to Action (1 clear, specific next step and link or contact).
10) Visuals suggestions: list up to three suggested multimedia elements (file type, short caption, credit/credit line).
11) Distribution checklist (3-4 bullets) to avoid common distribution mistakes (length, targeting, newsworthiness, contact info).

Style and hard rules:
- Write entirely in third person. Do not use the words you, we, our, us, I outside of quoted text.
- Journalistic tone: objective, clear, concise. No marketing fluff.
- Keep the entire press release between ~300-450 words; hard cap 600 words.
- Use plain English: short paragraphs (1-3 sentences each).
- Use proper dateline format and place it at the start of the lead paragraph.
- Flag any invented or suggested content clearly (e.g., "Suggested quote").
- Deliver press release text only (followed by the visuals list and distribution checklist). Do not include unrelated commentary.

Quality checks before finishing:
- Confirm headline accurately reflects main news hook.
- Ensure the lead answers who/what/when/where/why/how.
- Verify contact info is present and complete.
- Check for and remove any first-person or direct-address language outside quotes.

Output structure:
- Headline options (3)
- Subhead (1)
- Dateline + Lead paragraph
- Body paragraph 1
- Body paragraph 2
- Quote(s)
- Boilerplate
- Media contact
- Call to Action
- Visuals suggestions
- Distribution checklist"""

PR_GENERATION_USER_TEMPLATE = """Please produce a press release based on the following announcement details:

**Company / Organization Name:**
{{companyName}}

**Company Website:**
{{companyWebsite}}

**Announcement Type:**
{{announcementType}}

**Key News Hook (one-sentence summary of why this is newsworthy):**
{{newsHook}}

**Dateline:**
{{dateline}}, {{releaseDate}}

**Core Facts (ranked by importance):**
{{coreFacts}}

**Quote Sources:**
{{quoteSources}}

**Boilerplate Copy / Company Facts:**
{{boilerplate}}

**Media Contact:**
Name: {{mediaContactName}}
{{mediaContactTitle}}
Phone: {{mediaContactPhone}}
Email: {{mediaContactEmail}}
Website: {{mediaContactWebsite}}

**Visuals Available:**
{{visuals}}

**Desired Call to Action:**
{{desiredCTA}}

{{supportingContext}}

Now produce the complete press release and all supporting items as specified in your instructions."""

PANEL_CRITIQUE_USER_TEMPLATE = """Please review and critique the following press release:

---

{{pressRelease}}

---

Provide your complete panel analysis as specified in your instructions."""

REWRITE_SYSTEM_PROMPT = """You are a professional press release editor. Your task is to rewrite the press release based on the panel feedback provided.

Rules:
- Address the specific concerns raised by the panel
- Maintain the core message and facts
- Improve clarity and impact
- Keep the journalistic tone
- Stay within 300-500 words
- Format the output as clean HTML with proper paragraph tags"""

REWRITE_USER_TEMPLATE = """Original Press Release:
{{originalDraft}}

Panel Feedback Summary:
{{panelSynthesis}}

Key Issues to Address:
{{keyIssues}}

Please rewrite the press release addressing the feedback while maintaining the core message. Output as clean HTML."""

# Who sits on the simulated review panel, per industry
PANEL_CONFIGS = {
    "healthcare": {
        "journalists": [
            "health policy journalist", "state government health reporter",
            "rural health correspondent", "investigative health journalist",
            "health innovation writer",
        ],
        "pr_writers": [
            "healthcare PR agency director", "hospital system corporate comms lead",
            "former health trade newsroom editor",
        ],
        "marketing_experts": [
            "B2G healthcare marketing executive", "healthcare growth marketing director",
            "health tech positioning strategist",
        ],
        "target_customers": [
            "Governor office health policy staffer", "State Medicaid director",
            "rural hospital CEO", "public health foundation executive", "health plan executive",
        ],
    },
    "technology": {
        "journalists": [
            "enterprise tech journalist", "startup/VC reporter", "cybersecurity correspondent",
            "AI/ML technology writer", "SaaS industry analyst",
        ],
        "pr_writers": [
            "tech PR agency founder", "Fortune 500 tech corporate comms director",
            "former TechCrunch editor",
        ],
        "marketing_experts": [
            "B2B SaaS marketing executive", "developer marketing director",
            "enterprise positioning strategist",
        ],
        "target_customers": [
            "Fortune 500 CTO", "Series B startup founder", "enterprise IT procurement director",
            "VC partner at top-tier firm", "mid-market CIO",
        ],
    },
    "finance": {
        "journalists": [
            "financial services reporter", "fintech correspondent", "banking industry analyst",
            "investment/markets journalist", "regulatory affairs writer",
        ],
        "pr_writers": [
            "financial PR agency MD", "bank corporate communications SVP",
            "former WSJ financial editor",
        ],
        "marketing_experts": [
            "wealth management marketing director", "fintech growth executive",
            "institutional positioning strategist",
        ],
        "target_customers": [
            "regional bank CEO", "hedge fund COO", "fintech startup founder",
            "pension fund investment director", "financial regulator policy analyst",
        ],
    },
    "retail": {
        "journalists": [
            "retail industry reporter", "consumer trends correspondent", "e-commerce analyst",
            "supply chain journalist", "CPG industry writer",
        ],
        "pr_writers": [
            "consumer PR agency VP", "retail brand corporate comms director",
            "former Retail Week editor",
        ],
        "marketing_experts": [
            "DTC brand marketing executive", "retail growth director",
            "omnichannel positioning strategist",
        ],
        "target_customers": [
            "national retail chain CMO", "DTC brand founder", "department store buyer",
            "e-commerce platform executive", "retail REIT investment manager",
        ],
    },
    "general": {
        "journalists": [
            "business news reporter", "industry trends correspondent",
            "investigative business journalist", "local business editor", "trade publication writer",
        ],
        "pr_writers": [
            "general PR agency director", "corporate communications VP", "former AP business editor",
        ],
        "marketing_experts": [
            "B2B marketing executive", "growth marketing director", "brand positioning strategist",
        ],
        "target_customers": [
            "mid-market company CEO", "private equity operating partner",
            "industry association executive", "chamber of commerce director",
            "business development VP",
        ],
    },
}


def build_panel_system_prompt(industry: Optional[str] = "healthcare") -> str:
    """Panel critique system prompt for an industry; unknown industries get the general panel."""
    panel = PANEL_CONFIGS.get(industry or "general", PANEL_CONFIGS["general"])
    return f"""Act as a structured review panel evaluating the following press release.

Panel composition:
* 5 journalists ({', '.join(panel['journalists'])})
* 3 professional press release writers ({', '.join(panel['pr_writers'])})
* 3 senior marketing experts ({', '.join(panel['marketing_experts'])})
* 5 distinct target customers ({', '.join(panel['target_customers'])})

For each persona:
* Assign a realistic first name and only the first letter of the last name.
* Respond independently in the voice of that role.
* Be critical and specific. No politeness. No hedging.

Step 1: Individual Feedback

Provide concise feedback from each persona answering:
* Would this be compelling to you. Why or why not.
* What is missing that would force action.
* One sentence on how this fails or succeeds for your role.

Step 2: Synthesis

Identify the top 3 recurring themes or conflicts across all responses.
* Call out alignment and disagreement explicitly.
* Avoid generic summaries.

Step 3: Contrarian Recommendation

Provide a recommended action plan that intentionally goes against the current press release consensus, including:
* What to remove.
* What to sharpen.
* What risk to take that the current draft avoids.
* Who this revised release should deliberately ignore.

Rules:
* No marketing buzzwords unless criticizing them.
* Short sentences. Clear thinking.
* Prioritize tension, urgency, and decision making.
* Output only the analysis. No rewriting unless asked."""


PANEL_CRITIQUE_SYSTEM_PROMPT = build_panel_system_prompt("healthcare")

DEFAULT_PROMPTS = {
    "pr_generation": {
        "prompt_name": "Press Release Generation",
        "prompt_description": "System prompt for AI-generated press release drafts",
        "system_prompt": PR_GENERATION_SYSTEM_PROMPT,
        "user_prompt_template": PR_GENERATION_USER_TEMPLATE,
    },
    "panel_critique": {
        "prompt_name": "Panel Critique (Focus Group)",
        "prompt_description": "System prompt for the AI journalist panel review",
        "system_prompt": PANEL_CRITIQUE_SYSTEM_PROMPT,
        "user_prompt_template": PANEL_CRITIQUE_USER_TEMPLATE,
    },
    "rewrite_from_feedback": {
        "prompt_name": "Rewrite from Panel Feedback",
        "prompt_description": "System prompt for rewriting drafts based on panel critique",
        "system_prompt": REWRITE_SYSTEM_PROMPT,
        "user_prompt_template": REWRITE_USER_TEMPLATE,
    },
}

TEMPLATE_VARIABLES = {
    "pr_generation": [
        "companyName", "companyWebsite", "announcementType", "newsHook", "dateline",
        "releaseDate", "coreFacts", "quoteSources", "boilerplate", "mediaContactName",
        "mediaContactTitle", "mediaContactPhone", "mediaContactEmail", "mediaContactWebsite",
        "visuals", "desiredCTA", "supportingContext",
    ],
    "panel_critique": ["pressRelease"],
    "rewrite_from_feedback": ["originalDraft", "panelSynthesis", "keyIssues"],
}


# ═══════════════════════════════════════════════════
# SUBSTITUTION
# ═══════════════════════════════════════════════════

def fill_template(template: str, variables: dict) -> str:
    """Replace every {{name}} with its value. Names not in `variables` stay as-is."""
    out = template
    for name, value in variables.items():
        out = out.replace("{{" + name + "}}", "" if value is None else str(value))
    return out


def format_core_facts(facts: list[str]) -> str:
    return "\n".join(f"{i}. {fact}" for i, fact in enumerate(facts or [], 1))


def format_quote_sources(quotes: Optional[list[dict]]) -> str:
    if not quotes:
        return "No quotes provided - please create 1-2 suggested quotes and label them as such."
    lines = []
    for q in quotes:
        suffix = f': "{q["quote"]}"' if q.get("quote") else " (please create suggested quote)"
        lines.append(f"- {q.get('name', '')}, {q.get('title', '')}{suffix}")
    return "\n".join(lines)


def format_supporting_context(context: Optional[str]) -> str:
    if not context:
        return ""
    return f"""
**Supporting Context / Reference Material:**
The following content provides additional context about this announcement. Use it to inform your writing, extract relevant details, and ensure accuracy:

---
{context}
---"""


def generation_variables(data: dict) -> dict:
    """Map a release intake dict onto the pr_generation template variables."""
    contact = data.get("media_contact") or {}
    return {
        "companyName": data.get("company_name", ""),
        "companyWebsite": data.get("company_website", ""),
        "announcementType": data.get("announcement_type", ""),
        "newsHook": data.get("news_hook", ""),
        "dateline": data.get("dateline", ""),
        "releaseDate": data.get("release_date", ""),
        "coreFacts": format_core_facts(data.get("core_facts")),
        "quoteSources": format_quote_sources(data.get("quote_sources")),
        "boilerplate": (data.get("boilerplate") or data.get("company_facts")
                        or "Please create a 50-75 word boilerplate based on the company information provided."),
        "mediaContactName": contact.get("name", ""),
        "mediaContactTitle": f"Title: {contact['title']}" if contact.get("title") else "",
        "mediaContactPhone": contact.get("phone") or "Not provided",
        "mediaContactEmail": contact.get("email", ""),
        "mediaContactWebsite": contact.get("website") or data.get("company_website", ""),
        "visuals": data.get("visuals") or "None specified - please suggest appropriate visuals.",
        "desiredCTA": data.get("desired_cta", ""),
        "supportingContext": format_supporting_context(data.get("supporting_context")),
    }


# ═══════════════════════════════════════════════════
# PROMPT STORE (prompt_configs + TTL cache)
# ═══════════════════════════════════════════════════

class PromptStore:
    """Active prompt_configs rows, cached per process for `ttl` seconds."""

    def __init__(self, ttl: float = config.PROMPT_CACHE_TTL):
        self.ttl = ttl
        self._cache: dict[str, tuple[dict, float]] = {}

    def get(self, prompt_key: str) -> Optional[dict]:
        now = time.time()
        cached = self._cache.get(prompt_key)
        if cached and now - cached[1] < self.ttl:
            return cached[0]
        try:
            row = storage.get_prompt_config(prompt_key)
        except Exception as e:
            log.error(f"Error fetching prompt config {prompt_key}: {e}")
            return None
        if row:
            self._cache[prompt_key] = (row, now)
        return row

    def clear(self):
        self._cache = {}


prompt_store = PromptStore()


def pr_generation_prompts(data: dict) -> tuple[str, str]:
    variables = generation_variables(data)
    row = prompt_store.get("pr_generation")
    if row:
        return row["system_prompt"], fill_template(row["user_prompt_template"], variables)
    return PR_GENERATION_SYSTEM_PROMPT, fill_template(PR_GENERATION_USER_TEMPLATE, variables)


def panel_critique_prompts(press_release: str, industry: Optional[str] = None) -> tuple[str, str]:
    variables = {"pressRelease": press_release}
    row = prompt_store.get("panel_critique")
    if row:
        return row["system_prompt"], fill_template(row["user_prompt_template"], variables)
    return build_panel_system_prompt(industry or "general"), fill_template(PANEL_CRITIQUE_USER_TEMPLATE, variables)


def rewrite_prompts(original_draft: str, panel_synthesis: str, key_issues: str) -> tuple[str, str]:
    variables = {
        "originalDraft": original_draft,
        "panelSynthesis": panel_synthesis,
        "keyIssues": key_issues,
    }
    row = prompt_store.get("rewrite_from_feedback")
    if row:
        return row["system_prompt"], fill_template(row["user_prompt_template"], variables)
    return REWRITE_SYSTEM_PROMPT, fill_template(REWRITE_USER_TEMPLATE, variables)


# ── Admin editor ──────────────────────────────────

def list_prompts() -> list[dict]:
    """Active configs for the editor. Seeds the defaults the first time the table is empty."""
    rows = storage.list_prompt_configs()
    if not rows:
        for key, default in DEFAULT_PROMPTS.items():
            storage.insert_prompt_config(key, **default)
        log.info(f"Seeded {len(DEFAULT_PROMPTS)} default prompt configs")
        rows = storage.list_prompt_configs()
    for row in rows:
        row["variables"] = TEMPLATE_VARIABLES.get(row["prompt_key"], [])
    return rows


def update_prompt(prompt_key: str, **fields) -> Optional[dict]:
    allowed = {"prompt_name", "prompt_description", "system_prompt", "user_prompt_template"}
    edits = {k: v for k, v in fields.items() if k in allowed and v is not None}
    row = storage.update_prompt_config(prompt_key, **edits)
    prompt_store.clear()
    return row


def reset_prompt(prompt_key: str) -> Optional[dict]:
    default = DEFAULT_PROMPTS.get(prompt_key)
    if not default:
        return None
    row = storage.update_prompt_config(
        prompt_key,
        system_prompt=default["system_prompt"],
        user_prompt_template=default["user_prompt_template"],
    )
    prompt_store.clear()
    return row
