"""
PRBuild: parse free-text LLM output into structured fields.

Best effort only: every extractor falls back to an empty value when the model
strays from the requested layout. Nothing here raises on odd input.
"""
import re

from pydantic import BaseModel, Field


class Visual(BaseModel):
    suggestion: str


class ParsedDraft(BaseModel):
    headlines: list[str] = Field(default_factory=list)
    subhead: str = ""
    full_content: str = ""
    visuals: list[Visual] = Field(default_factory=list)
    checklist: list[str] = Field(default_factory=list)


class PanelFeedback(BaseModel):
    persona: str
    role: str = ""
    feedback: str = ""
    compelling: bool = False
    missing: str = ""
    verdict: str = ""


class ContrarianRecommendation(BaseModel):
    raw: str = ""
    remove: str = ""
    sharpen: str = ""
    risk: str = ""
    ignore: str = ""


class ParsedCritique(BaseModel):
    individual_feedback: list[PanelFeedback] = Field(default_factory=list)
    synthesis: str = ""
    themes: list[str] = Field(default_factory=list)
    contrarian: ContrarianRecommendation = Field(default_factory=ContrarianRecommendation)


# ═══════════════════════════════════════════════════
# PRESS RELEASE DRAFT
# ═══════════════════════════════════════════════════

HEADLINES_RE = re.compile(
    r"(?:Headline[s]?.*?:?\s*)?(?:1[.)\]]\s*)(.+?)(?:\n2[.)\]]\s*)(.+?)(?:\n3[.)\]]\s*)(.+?)(?=\n\n|\nSubhead)",
    re.IGNORECASE | re.DOTALL,
)
SUBHEAD_RE = re.compile(r"Subhead[:\s]*([^\n]+)", re.IGNORECASE)
DATELINE_RE = re.compile(r"[A-Z]{2,}[,\s]+[A-Z]")
VISUALS_START_RE = re.compile(r"Visuals?\s*suggestions?", re.IGNORECASE)
VISUALS_RE = re.compile(r"Visuals?\s*suggestions?:?([\s\S]*?)(?=Distribution|checklist|$)", re.IGNORECASE)
CHECKLIST_RE = re.compile(r"Distribution\s*checklist:?([\s\S]*)", re.IGNORECASE)


def parse_pr_draft(text: str) -> ParsedDraft:
    text = text or ""

    m = HEADLINES_RE.search(text)
    headlines = [g.strip() for g in m.groups()] if m else []

    m = SUBHEAD_RE.search(text)
    subhead = m.group(1).strip() if m else ""

    start = text.find("Dateline")
    if start == -1:
        m = DATELINE_RE.search(text)
        start = m.start() if m else 0
    m = VISUALS_START_RE.search(text)
    end = m.start() if m else -1
    full_content = text[start:end].strip() if end > start else text[start:].strip()

    m = VISUALS_RE.search(text)
    visuals_text = m.group(1) if m else ""
    visuals = [
        Visual(suggestion=part.strip())
        for part in re.split(r"[\n•\-\d+.]", visuals_text)
        if len(part.strip()) > 10
    ]

    m = CHECKLIST_RE.search(text)
    checklist_text = m.group(1) if m else ""
    checklist = [part.strip() for part in re.split(r"[\n•\-✓☐]", checklist_text) if len(part.strip()) > 5]

    return ParsedDraft(
        headlines=headlines,
        subhead=subhead,
        full_content=full_content,
        visuals=visuals,
        checklist=checklist,
    )


# ═══════════════════════════════════════════════════
# PANEL CRITIQUE
# ═══════════════════════════════════════════════════

STEP1_RE = re.compile(r"Step 1[:\s]*Individual Feedback([\s\S]*?)(?=Step 2|$)", re.IGNORECASE)
STEP2_RE = re.compile(r"Step 2[:\s]*Synthesis([\s\S]*?)(?=Step 3|$)", re.IGNORECASE)
STEP3_RE = re.compile(r"Step 3[:\s]*Contrarian Recommendation([\s\S]*)", re.IGNORECASE)

# "Sarah M." style persona names
PERSONA_BLOCK_RE = re.compile(r"([A-Z][a-z]+\s[A-Z]\.)[^A-Z]*([\s\S]*?)(?=[A-Z][a-z]+\s[A-Z]\.|$)")
PERSONA_PREFIX_RE = re.compile(r"^[A-Z][a-z]+\s[A-Z]\.\s*[-–—]?\s*")
ROLE_RE = re.compile(r"^([^:]+):")
THEME_RE = re.compile(r"\d+\.\s*([^\n]+)")

NOT_COMPELLING_RE = re.compile(
    r"\b(?:not|isn't|is not|wasn't|no|lacks?)\b[^.\n]{0,30}\bcompelling\b|\bcompelling\b\W{0,5}\bno\b",
    re.IGNORECASE,
)
COMPELLING_RE = re.compile(r"\bcompelling\b", re.IGNORECASE)
MISSING_RE = re.compile(r"(?:What(?:'s| is) missing|Missing)[^:\n]*:\s*([^\n]+)", re.IGNORECASE)
VERDICT_RE = re.compile(r"(?:Verdict|Bottom line|One sentence)[^:\n]*:\s*([^\n]+)", re.IGNORECASE)


def _extract_role(feedback: str) -> str:
    m = ROLE_RE.match(feedback)
    return m.group(1).strip() if m else ""


def _extract_bullet(text: str, keyword: str) -> str:
    kw = re.escape(keyword)
    patterns = [
        rf"\*?\s*(?:What to )?{kw}[:\s]*([^\n*]+)",
        rf"{kw}[:\s]*([^\n]+)",
    ]
    for pattern in patterns:
        m = re.search(pattern, text, re.IGNORECASE)
        if m:
            return m.group(1).strip()
    return ""


def _persona_feedback(block: str) -> PanelFeedback:
    name = block[: block.find(".") + 1] if PERSONA_PREFIX_RE.match(block) else "Unknown"
    feedback = PERSONA_PREFIX_RE.sub("", block, count=1).strip()

    m = MISSING_RE.search(feedback)
    missing = m.group(1).strip() if m else ""

    m = VERDICT_RE.search(feedback)
    if m:
        verdict = m.group(1).strip()
    else:
        lines = [ln.strip(" *-") for ln in feedback.splitlines() if ln.strip(" *-")]
        verdict = lines[-1] if lines else ""

    compelling = bool(COMPELLING_RE.search(feedback)) and not NOT_COMPELLING_RE.search(feedback)

    return PanelFeedback(
        persona=name,
        role=_extract_role(feedback),
        feedback=feedback,
        compelling=compelling,
        missing=missing,
        verdict=verdict,
    )


def parse_panel_critique(text: str) -> ParsedCritique:
    text = text or ""

    m = STEP1_RE.search(text)
    step1 = m.group(1) if m else ""
    individual = [_persona_feedback(block.group(0)) for block in PERSONA_BLOCK_RE.finditer(step1)]

    m = STEP2_RE.search(text)
    synthesis = m.group(1).strip() if m else ""
    themes = [t.strip() for t in THEME_RE.findall(synthesis)]

    m = STEP3_RE.search(text)
    step3 = m.group(1) if m else ""
    contrarian = ContrarianRecommendation(
        raw=step3.strip(),
        remove=_extract_bullet(step3, "remove"),
        sharpen=_extract_bullet(step3, "sharpen"),
        risk=_extract_bullet(step3, "risk"),
        ignore=_extract_bullet(step3, "ignore"),
    )

    return ParsedCritique(
        individual_feedback=individual,
        synthesis=synthesis,
        themes=themes,
        contrarian=contrarian,
    )
