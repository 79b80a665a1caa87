"""
Tests for turning free-text LLM output into structured drafts and panel reviews.
"""
from prbuild.parsers import parse_pr_draft, parse_panel_critique

from conftest import DRAFT_TEXT, PANEL_TEXT


class TestParseDraft:

    def test_headlines(self):
        draft = parse_pr_draft(DRAFT_TEXT)
        assert draft.headlines == [
            "Acme Launches Widget That Halves Warehouse Costs",
            "Widget From Acme Cuts Warehouse Spend in Half",
            "Acme Unveils Widget for Mid-Size Warehouses",
        ]

    def test_subhead(self):
        assert parse_pr_draft(DRAFT_TEXT).subhead == "The new widget automates pallet tracking for teams of 10 to 200"

    def test_body_runs_from_dateline_to_visuals(self):
        body = parse_pr_draft(DRAFT_TEXT).full_content
        assert body.startswith("AUSTIN, TX, March 4, 2025")
        assert body.endswith("48 percent.")
        assert "Visuals" not in body

    def test_visuals_and_checklist(self):
        draft = parse_pr_draft(DRAFT_TEXT)
        assert [v.suggestion for v in draft.visuals] == [
            "Product photo of the widget on a loading dock",
            "Founder headshot in the warehouse",
        ]
        assert draft.checklist == ["Send to logistics trade reporters", "Post on the company LinkedIn page"]

    def test_explicit_dateline_marker(self):
        draft = parse_pr_draft("intro text\nDateline: Boston, today the company said hello.")
        assert draft.full_content.startswith("Dateline: Boston")

    def test_unstructured_text_keeps_everything(self):
        draft = parse_pr_draft("just some lowercase text with no structure")
        assert draft.headlines == []
        assert draft.subhead == ""
        assert draft.full_content == "just some lowercase text with no structure"
        assert draft.visuals == []
        assert draft.checklist == []

    def test_empty(self):
        assert parse_pr_draft("").full_content == ""


class TestParseCritique:

    def test_personas(self):
        critique = parse_panel_critique(PANEL_TEXT)
        assert [f.persona for f in critique.individual_feedback] == ["Sarah M.", "David K."]
        sarah, david = critique.individual_feedback
        assert sarah.role == "Journalist"
        assert david.role == "PR Writer"

    def test_compelling_respects_negation(self):
        sarah, david = parse_panel_critique(PANEL_TEXT).individual_feedback
        assert sarah.compelling is True
        assert david.compelling is False

    def test_missing_and_verdict(self):
        sarah, david = parse_panel_critique(PANEL_TEXT).individual_feedback
        assert sarah.missing == "independent data"
        assert sarah.verdict == "I would cover it"
        assert david.missing == "a customer voice"
        assert david.verdict == "Needs work"

    def test_synthesis_themes(self):
        critique = parse_panel_critique(PANEL_TEXT)
        assert critique.themes == ["Lead with the cost data", "Replace the executive quote"]
        assert critique.synthesis.startswith("1. Lead with the cost data")

    def test_contrarian(self):
        contrarian = parse_panel_critique(PANEL_TEXT).contrarian
        assert contrarian.remove == "the second quote"
        assert contrarian.sharpen == "the headline number"
        assert contrarian.risk == "sounding like every other launch"
        assert contrarian.ignore == "the length complaints"

    def test_verdict_falls_back_to_last_line(self):
        text = "Step 1: Individual Feedback\nMaria L. - Editor: too long\nwould skip it\nStep 2: Synthesis\n"
        (maria,) = parse_panel_critique(text).individual_feedback
        assert maria.verdict == "would skip it"

    def test_no_sections(self):
        critique = parse_panel_critique("The model refused.")
        assert critique.individual_feedback == []
        assert critique.themes == []
        assert critique.contrarian.remove == ""
