"""
PRBuild: static copy for the marketing pages (FAQ, competitor comparisons,
industry landing pages, the press release checklist).
"""

CATEGORIES = [
    "Technology & Software",
    "Healthcare & Medical",
    "Finance & Fintech",
    "Retail & Consumer",
    "Manufacturing & Industrial",
    "Real Estate",
    "Nonprofit & Social Impact",
    "Other",
]

ANNOUNCEMENT_TYPES = [
    {"value": "product_launch", "label": "Product Launch"},
    {"value": "funding", "label": "Funding Round"},
    {"value": "partnership", "label": "Partnership"},
    {"value": "hire", "label": "Key Hire"},
    {"value": "award", "label": "Award / Recognition"},
    {"value": "event", "label": "Event"},
    {"value": "milestone", "label": "Company Milestone"},
    {"value": "other", "label": "Other"},
]

INDUSTRIES = [
    {"value": "healthcare", "label": "Healthcare"},
    {"value": "technology", "label": "Technology"},
    {"value": "finance", "label": "Finance"},
    {"value": "retail", "label": "Retail"},
    {"value": "general", "label": "General / Other"},
]

FAQ_ITEMS = [
    {
        "question": "What do I get with my first free release?",
        "answer": "Your first press release includes everything: professional AI-assisted writing, review by our 16-persona journalist panel, unlimited revisions until you're happy, publication to our showcase, and distribution to journalists in your industry. No credit card required.",
    },
    {
        "question": "How is this different from PRWeb or PR Newswire?",
        "answer": "Wire services distribute to syndication networks (mostly junk sites). We focus on quality: every release is critiqued by our journalist panel before you see it, ensuring it's actually newsworthy. Then we distribute to real journalists who've opted in for your category.",
    },
    {
        "question": "What if I'm not happy with my press release?",
        "answer": "We offer unlimited revisions until you're satisfied. Our panel feedback helps you understand exactly what journalists look for, and our team will keep refining until you approve. If you're still not happy, we'll refund your purchase, no questions asked.",
    },
    {
        "question": "How long does it take to get my press release?",
        "answer": "Most releases are ready for your review within 24-48 hours. After you submit your news details, our team writes the draft, runs it through our journalist panel, and sends you everything with actionable feedback. Rush delivery is available on Pro plans.",
    },
    {
        "question": "Who are the 16 journalist personas?",
        "answer": "Our journalist personas are AI models trained on real journalist preferences across different beats: tech, business, lifestyle, local news, trade publications, and more. Each persona evaluates your release from their specific perspective, providing feedback on newsworthiness, clarity, and what would make them actually cover your story.",
    },
    {
        "question": "What does the pickup rate mean?",
        "answer": "Pickup rate measures journalist engagement within 7 days of distribution. This includes opens, clicks, replies, and coverage. The industry average for wire services is around 2%. Our higher rate comes from sending releases only to journalists who specifically requested news in your category.",
    },
]


# ── Competitor comparisons ───────────────────────

_SHARED_ROWS = [
    {"feature": "Writing included", "prbuild": True, "competitor": False, "winner": "prbuild"},
    {"feature": "Journalist feedback", "prbuild": "16 personas review", "competitor": "None", "winner": "prbuild"},
    {"feature": "Quality score", "prbuild": True, "competitor": False, "winner": "prbuild"},
    {"feature": "Unlimited revisions", "prbuild": True, "competitor": False, "winner": "prbuild"},
    {"feature": "Distribution network", "prbuild": "Opt-in journalists", "competitor": "Syndication sites", "winner": "prbuild"},
    {"feature": "Analytics", "prbuild": True, "competitor": True, "winner": "tie"},
    {"feature": "Brand recognition", "prbuild": "Growing", "competitor": "Established", "winner": "competitor"},
]


def _competitor(name, slug, website, subtitle, highlight, price, saving, stats_extra, cta_headline):
    return {
        "name": name,
        "slug": slug,
        "website": website,
        "hero_subtitle": subtitle,
        "hero_highlight": highlight,
        "stats": [
            {"value": saving, "label": f"Lower cost than {name}"},
            {"value": "+Writing", "label": f"Included ({name}: $0)"},
            stats_extra,
        ],
        "comparison_rows": [
            {"feature": "Starting price", "prbuild": "$9/month", "competitor": price, "winner": "prbuild"},
            *_SHARED_ROWS,
        ],
        "choose_prbuild": [
            "Are a startup or small business",
            "Need help writing press releases",
            "Want feedback before sending",
            "Have a limited PR budget",
        ],
        "choose_competitor": [
            "Already have a PR writer",
            "Need an established syndication network",
            "Have an enterprise PR budget",
        ],
        "cta_headline": cta_headline,
        "cta_subtext": "Your first press release is completely free. No credit card required.",
    }


COMPETITORS = {
    "prweb": _competitor(
        "PRWeb", "prweb", "https://www.prweb.com",
        "See how PRBuild compares to PRWeb on price, features, and actual results. "
        "One writes your release for you. The other doesn't.",
        "Which Should You Choose?", "$99/release", "97%",
        {"value": "16", "label": "Journalist reviewers"},
        "Ready to Try a Better Alternative?",
    ),
    "pr-newswire": _competitor(
        "PR Newswire", "pr-newswire", "https://www.prnewswire.com",
        "PR Newswire is the gold standard for enterprise PR. But if you're a startup or SMB, "
        "you might be paying 100x more than you need to.",
        "Save Up to 99% on PR", "$350+/release", "99%",
        {"value": "$1,000+", "label": "Saved per release"},
        "Ready to Save Thousands on PR?",
    ),
    "business-wire": _competitor(
        "Business Wire", "business-wire", "https://www.businesswire.com",
        "Business Wire is built for Fortune 500 compliance. If you're a startup or SMB, "
        "you're paying enterprise prices for features you don't need.",
        "Save Up to 99% on PR", "$400+/release", "98%",
        {"value": "$700+", "label": "Saved per release"},
        "Ready to Save Thousands on PR?",
    ),
    "globenewswire": _competitor(
        "GlobeNewswire", "globenewswire", "https://www.globenewswire.com",
        "GlobeNewswire is great for public companies with IR needs. "
        "For everyone else, there's a much more affordable option.",
        "Save Up to 98% on PR", "$350+/release", "98%",
        {"value": "$500+", "label": "Saved per release"},
        "Ready to Save on PR?",
    ),
    "cision": _competitor(
        "Cision", "cision", "https://www.cision.com",
        "Cision is the enterprise standard for PR teams. But most startups don't need "
        "(or want to pay for) an enterprise solution.",
        "Enterprise PR vs What You Actually Need", "$5,000+/year", "99%",
        {"value": "No", "label": "Annual contract required"},
        "Skip the Enterprise Pricing",
    ),
}


# ── Industry landing pages (/for/<slug>) ─────────

INDUSTRY_PAGES = {
    "healthcare": {
        "title": "Press Release Service for Healthcare Companies",
        "panel": "healthcare",
        "announcements": ["Clinical Trial Results", "FDA Approvals & Clearances", "Product Launches",
                          "Funding & Partnerships", "Research Publications", "Leadership Updates"],
        "examples": [
            "[Company] Receives FDA 510(k) Clearance for AI-Powered Diagnostic Platform",
            "[Company] Announces Positive Phase 2 Results for Novel Cancer Treatment",
            "[Company] Raises $30M Series B to Expand Digital Therapeutics Platform",
        ],
    },
    "saas": {
        "title": "Press Release Service for SaaS Companies",
        "panel": "technology",
        "announcements": ["Product Launches", "Funding Rounds", "Integrations & Partnerships",
                          "Customer Milestones", "Executive Hires"],
        "examples": [
            "[Company] Launches AI Workflow Builder for Mid-Market Finance Teams",
            "[Company] Surpasses 10,000 Customers Two Years After Launch",
        ],
    },
    "startups": {
        "title": "Press Release Service for Startups",
        "panel": "technology",
        "announcements": ["Company Launch", "Seed & Series A Funding", "First Customers", "Accelerator Acceptance"],
        "examples": [
            "[Company] Emerges from Stealth with $4M Seed Round",
            "[Company] Selected for Y Combinator Summer Batch",
        ],
    },
    "finance": {
        "title": "Press Release Service for Finance & Fintech Companies",
        "panel": "finance",
        "announcements": ["Regulatory Approvals", "Funding Rounds", "Product Launches", "Bank Partnerships"],
        "examples": [
            "[Company] Secures State Money Transmitter Licenses in All 50 States",
            "[Company] Partners with Regional Bank to Offer Same-Day Small Business Loans",
        ],
    },
    "ecommerce": {
        "title": "Press Release Service for Ecommerce Brands",
        "panel": "retail",
        "announcements": ["Product Drops", "Retail Partnerships", "Sales Milestones", "Sustainability Initiatives"],
        "examples": [
            "[Company] Expands into 400 Target Stores Nationwide",
            "[Company] Hits $10M in Annual Revenue with Direct-to-Consumer Model",
        ],
    },
    "agencies": {
        "title": "Press Release Service for Marketing & PR Agencies",
        "panel": "general",
        "announcements": ["Client Announcements", "White-Label Releases", "Agency Milestones"],
        "examples": ["[Agency] Wins Regional Creative Agency of the Year"],
    },
    "legal": {
        "title": "Press Release Service for Law Firms",
        "panel": "general",
        "announcements": ["New Partners", "Case Results", "Office Openings", "Awards & Rankings"],
        "examples": ["[Firm] Opens Austin Office and Adds Three Litigation Partners"],
    },
    "nonprofits": {
        "title": "Press Release Service for Nonprofits",
        "panel": "general",
        "announcements": ["Grants & Donations", "Program Launches", "Impact Reports", "Events"],
        "examples": ["[Organization] Receives $2M Grant to Expand Rural Literacy Program"],
    },
    "realestate": {
        "title": "Press Release Service for Real Estate Companies",
        "panel": "general",
        "announcements": ["Development Announcements", "Acquisitions", "Project Completions", "Leadership Hires"],
        "examples": ["[Company] Breaks Ground on 300-Unit Mixed-Use Development Downtown"],
    },
}


# ── Press release checklist ──────────────────────

CHECKLIST = [
    {
        "title": "Before You Write",
        "slug": "before-you-write",
        "items": [
            "Is there an actual news hook?",
            "Is the timing right?",
            "Do you know who you're pitching?",
            "Is the angle specific to one audience?",
            "Do you have supporting data?",
            "Is this actually newsworthy?",
        ],
    },
    {
        "title": "Your Content",
        "slug": "your-content",
        "items": [
            "Does your headline state the news?",
            "Does the lead paragraph answer the 5 Ws?",
            "Is there a human-sounding quote?",
            "Are your claims backed by numbers?",
            "Is it under 500 words?",
            "Does it follow AP style?",
            "Is the boilerplate current?",
            "Is the structure scannable?",
        ],
    },
    {
        "title": "Red Flags That Get You Deleted",
        "slug": "red-flags",
        "items": [
            "Does it sound like it was written by AI?",
            "Is it loaded with buzzwords?",
            'Does it start with "excited to announce"?',
            "Is there no actual news?",
            "Is it a wall of text?",
        ],
    },
    {
        "title": "Distribution & Follow-up",
        "slug": "distribution",
        "items": [
            "Is the subject line specific and short?",
            "Is the outreach personalized?",
            "Are you sending at the right time?",
            "Is your contact info included and accurate?",
        ],
    },
]
